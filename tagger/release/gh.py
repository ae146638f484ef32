from __future__ import annotations

import json
import os
import shutil
from collections.abc import Mapping
from pathlib import Path

from tagger.core.result import Err, Ok, Result
from tagger.core.structured import as_str_dict, get_str
from tagger.output.console import ConsoleProtocol, Style
from tagger.platform.process import ProcessError
from tagger.platform.process import run as run_process
from tagger.release.errors import ReleaseError, ReleaseErrorKind
from tagger.release.model import PublishedRelease, ReleaseRequest

GH_TIMEOUT_SECONDS = 60.0

# gh reads either variable; GH_TOKEN wins when both are set.
TOKEN_ENV_VARS = ("GH_TOKEN", "GITHUB_TOKEN")

_TRANSIENT_MARKERS = (
    "timed out",
    "timeout",
    "connection reset",
    "connection refused",
    "temporarily unavailable",
    "service unavailable",
    "bad gateway",
    "gateway timeout",
    "tls handshake timeout",
    "network is unreachable",
    "no such host",
    "http 429",
    "http 500",
    "http 502",
    "http 503",
    "http 504",
)


def classify_gh_error(error: ProcessError) -> ReleaseErrorKind:
    text = error.output.lower()
    if "http 401" in text or "bad credentials" in text or "gh auth login" in text:
        return "auth_required"
    if "http 403" in text or "http 404" in text or "resource not accessible" in text:
        # 404 is what GitHub answers when the token cannot see the repo
        return "permission_denied"
    if "http 422" in text and "already_exists" in text:
        return "tag_exists"
    if error.returncode == -1 and "timed out" in text:
        return "network"
    if any(marker in text for marker in _TRANSIENT_MARKERS):
        return "network"
    return "api_failed"


def ensure_gh_available() -> Result[None, ReleaseError]:
    if shutil.which("gh") is None:
        return Err(
            ReleaseError(
                kind="gh_missing",
                message="gh: missing",
                hint="Install GitHub CLI: https://cli.github.com/",
            )
        )
    return Ok(None)


def ensure_gh_auth(
    *, workspace_root: Path, env: Mapping[str, str]
) -> Result[None, ReleaseError]:
    if any(env.get(name, "").strip() for name in TOKEN_ENV_VARS):
        return Ok(None)

    result = run_process(["gh", "auth", "status"], cwd=workspace_root, timeout=GH_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return Err(
            ReleaseError(
                kind="auth_required",
                message="gh auth required",
                hint="Set GH_TOKEN or GITHUB_TOKEN, or run: gh auth login",
            )
        )
    return Ok(None)


def create_release_cmd(request: ReleaseRequest) -> list[str]:
    # -f sends raw strings; -F sends typed JSON values (true/false)
    return [
        "gh",
        "api",
        "--method",
        "POST",
        f"repos/{request.repo}/releases",
        "-f",
        f"tag_name={request.tag_name}",
        "-f",
        f"name={request.name}",
        "-f",
        f"body={request.body}",
        "-F",
        f"draft={'true' if request.draft else 'false'}",
        "-F",
        f"prerelease={'true' if request.prerelease else 'false'}",
    ]


class GhReleaseHost:
    """ReleaseHost publishing through `gh api`.

    Creating a release is not idempotent, so failures are reported as-is and
    never retried.
    """

    def __init__(
        self,
        *,
        workspace_root: Path,
        console: ConsoleProtocol,
        dry_run: bool = False,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._root = workspace_root
        self._console = console
        self._dry_run = dry_run
        self._env: Mapping[str, str] = os.environ if env is None else env

    def ensure_ready(self) -> Result[None, ReleaseError]:
        if self._dry_run:
            self._console.print("skip gh checks (dry run)", Style.DIM)
            return Ok(None)

        ok = ensure_gh_available()
        if isinstance(ok, Err):
            return ok
        return ensure_gh_auth(workspace_root=self._root, env=self._env)

    def create_release(self, request: ReleaseRequest) -> Result[PublishedRelease, ReleaseError]:
        cmd = create_release_cmd(request)
        self._console.print(" ".join(cmd[:5]) + f" tag_name={request.tag_name}", Style.DIM)
        if self._dry_run:
            return Ok(PublishedRelease(tag_name=request.tag_name))

        result = run_process(cmd, cwd=self._root, timeout=GH_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            e = result.error
            return Err(
                ReleaseError(
                    kind=classify_gh_error(e),
                    message=f"failed to create release {request.tag_name} in {request.repo}",
                    hint=e.stderr.strip() or None,
                )
            )

        return Ok(_parse_release(result.value, fallback_tag=request.tag_name))


def _parse_release(stdout: str, *, fallback_tag: str) -> PublishedRelease:
    # The release exists at this point; a response we cannot read does not undo that.
    try:
        obj: object = json.loads(stdout)
    except json.JSONDecodeError:
        return PublishedRelease(tag_name=fallback_tag)

    data = as_str_dict(obj)
    if data is None:
        return PublishedRelease(tag_name=fallback_tag)

    return PublishedRelease(
        tag_name=get_str(data, "tag_name") or fallback_tag,
        html_url=get_str(data, "html_url"),
    )
