from __future__ import annotations

from tagger.core.result import Err, Ok, Result
from tagger.git.repository import GitError, Repository
from tagger.output.console import ConsoleProtocol, Style
from tagger.release.errors import ReleaseError, ReleaseErrorKind
from tagger.release.model import AnnotatedTag, CommitDiff


_TAG_EXISTS_MARKERS = (
    "already exists",
    "[rejected]",
    "would clobber existing tag",
)

_AUTH_REQUIRED_MARKERS = (
    "authentication failed",
    "could not read username",
    "invalid username or password",
    "the requested url returned error: 401",
)

_PERMISSION_MARKERS = (
    "permission denied",
    "permission to",
    "the requested url returned error: 403",
    "write access to repository not granted",
)

_MISSING_PATH_MARKERS = (
    "does not exist in",
    "exists on disk, but not in",
)

_NETWORK_MARKERS = (
    "could not resolve host",
    "timed out",
    "connection reset",
    "connection refused",
    "network is unreachable",
    "remote end hung up unexpectedly",
    "the requested url returned error: 5",
    "gnutls_handshake",
    "ssl_connect",
)


def classify_git_error(error: GitError) -> ReleaseErrorKind:
    text = error.message.lower()
    if any(marker in text for marker in _TAG_EXISTS_MARKERS):
        return "tag_exists"
    if any(marker in text for marker in _AUTH_REQUIRED_MARKERS):
        return "auth_required"
    if any(marker in text for marker in _PERMISSION_MARKERS):
        return "permission_denied"
    if any(marker in text for marker in _NETWORK_MARKERS):
        return "network"
    return "git_failed"


class GitRemote:
    """VersionControlRemote backed by the local checkout and its remote."""

    def __init__(
        self,
        repo: Repository,
        *,
        remote: str,
        console: ConsoleProtocol,
        dry_run: bool = False,
    ) -> None:
        self._repo = repo
        self._remote = remote
        self._console = console
        self._dry_run = dry_run

    def commit_diff(self, base: str, head: str) -> Result[CommitDiff, ReleaseError]:
        if not self._repo.has_commit(base):
            return Err(
                ReleaseError(
                    kind="git_failed",
                    message=f"base commit not available: {base}",
                    hint="check out with fetch-depth: 2 so the previous commit is present",
                )
            )

        self._console.print(f"git diff --name-only {base} {head}", Style.DIM)
        result = self._repo.changed_files(base, head)
        if isinstance(result, Err):
            return Err(self._release_error(result.error, "failed to list changed files"))
        return Ok(CommitDiff(base=base, head=head, paths=result.value))

    def read_file(self, rev: str, path: str) -> Result[str, ReleaseError]:
        self._console.print(f"git show {rev}:{path}", Style.DIM)
        result = self._repo.show_file(rev, path)
        if isinstance(result, Err):
            e = result.error
            if any(marker in e.message for marker in _MISSING_PATH_MARKERS):
                return Err(
                    ReleaseError(
                        kind="config_invalid",
                        message=f"version file not found at {rev}: {path}",
                        hint=e.message,
                    )
                )
            return Err(self._release_error(e, f"failed to read {path} at {rev}"))
        return Ok(result.value)

    def create_tag(self, tag: AnnotatedTag) -> Result[None, ReleaseError]:
        self._console.print(
            f'git tag -a {tag.name} -m "{tag.message}" {tag.target}', Style.DIM
        )
        if self._dry_run:
            return Ok(None)

        if self._repo.tag_exists(tag.name):
            return Err(
                ReleaseError(
                    kind="tag_exists",
                    message=f"tag already exists: {tag.name}",
                    hint="a release for this version was already created",
                )
            )

        result = self._repo.create_annotated_tag(
            tag.name,
            tag.message,
            author_name=tag.author.name,
            author_email=tag.author.email,
            target=tag.target,
        )
        if isinstance(result, Err):
            return Err(self._release_error(result.error, f"failed to create tag {tag.name}"))
        return Ok(None)

    def push_tag(self, name: str) -> Result[None, ReleaseError]:
        self._console.print(f"git push {self._remote} refs/tags/{name}", Style.DIM)
        if self._dry_run:
            return Ok(None)

        result = self._repo.push_tag(self._remote, name)
        if isinstance(result, Err):
            return Err(self._release_error(result.error, f"failed to push tag {name}"))
        return Ok(None)

    def _release_error(self, error: GitError, message: str) -> ReleaseError:
        kind = classify_git_error(error)
        if kind == "tag_exists":
            message = f"{message}: tag already exists on {self._remote}"
        return ReleaseError(kind=kind, message=message, hint=error.message or None)
