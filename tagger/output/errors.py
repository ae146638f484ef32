"""Error presentation utilities.

Centralized release error formatting and exit code mapping.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tagger.core.errors import ErrorCode
from tagger.output.console import Style
from tagger.release.errors import ReleaseError

if TYPE_CHECKING:
    from tagger.output.console import ConsoleProtocol

__all__ = ["print_release_error", "release_error_exit_code"]


def print_release_error(error: ReleaseError, console: ConsoleProtocol) -> None:
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def release_error_exit_code(error: ReleaseError) -> int:
    """Get exit code for a release error."""
    match error.kind:
        case "invalid_input":
            return int(ErrorCode.USER_ERROR)
        case "config_invalid" | "gh_missing":
            return int(ErrorCode.ENV_ERROR)
        case "git_failed":
            return int(ErrorCode.GIT_ERROR)
        case "network" | "api_failed":
            return int(ErrorCode.NETWORK_ERROR)
        case "auth_required" | "permission_denied":
            return int(ErrorCode.AUTH_ERROR)
        case "tag_exists":
            return int(ErrorCode.TAG_EXISTS)
