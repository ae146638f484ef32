"""Error types for the release run."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    "invalid_input",
    "config_invalid",
    "gh_missing",
    "auth_required",
    "permission_denied",
    "tag_exists",
    "network",
    "git_failed",
    "api_failed",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Canonical release error payload.

    `kind` selects the exit code; `hint` carries the tool's own diagnostic
    (git/gh stderr) or a suggested fix.
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None


def config_error(message: str, hint: str | None = None) -> ReleaseError:
    return ReleaseError(kind="config_invalid", message=message, hint=hint)
