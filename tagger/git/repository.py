"""Git repository abstraction.

This module provides the Repository class for the git operations a release
run needs: listing the files a commit changed, creating an annotated tag and
pushing it. All operations return Result types.

Usage:
    repo = Repository(Path("/path/to/checkout"))

    match repo.changed_files("HEAD~1", "HEAD"):
        case Ok(paths):
            print("lean-toolchain" in paths)
        case Err(e):
            print(f"Error: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from tagger.core.result import Err, Ok, Result
from tagger.platform.process import ProcessError
from tagger.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0

__all__ = [
    "GitError",
    "Repository",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command that failed
        message: Error message (git's stderr when it produced one)
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


class Repository:
    """Git repository abstraction.

    Attributes:
        path: Path to the repository root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def exists(self) -> bool:
        """Check if this is a valid git repository."""
        return (self.path / ".git").exists()

    def has_commit(self, rev: str) -> bool:
        """True if rev resolves to a commit in this checkout."""
        result = self._run(["rev-parse", "--verify", "--quiet", f"{rev}^{{commit}}"])
        return isinstance(result, Ok)

    def changed_files(self, base: str, head: str) -> Result[tuple[str, ...], GitError]:
        """List paths changed between two commits.

        Runs `git diff --name-only -z base head`; NUL separation keeps paths
        with spaces or non-ASCII characters unquoted.
        """
        result = self._run(["diff", "--name-only", "-z", base, head])
        match result:
            case Err(e):
                return Err(self._error(f"diff {base} {head}", e, "git diff failed"))
            case Ok(stdout):
                return Ok(tuple(p for p in stdout.split("\0") if p))

    def show_file(self, rev: str, path: str) -> Result[str, GitError]:
        """Contents of a repository path as committed at rev (`git show rev:path`)."""
        result = self._run(["show", f"{rev}:{path}"])
        match result:
            case Err(e):
                return Err(self._error(f"show {rev}:{path}", e, "git show failed"))
            case Ok(stdout):
                return Ok(stdout)

    def tag_exists(self, name: str) -> bool:
        """True if a local tag with this name exists."""
        result = self._run(["rev-parse", "--verify", "--quiet", f"refs/tags/{name}"])
        return isinstance(result, Ok)

    def create_annotated_tag(
        self,
        name: str,
        message: str,
        *,
        author_name: str,
        author_email: str,
        target: str = "HEAD",
    ) -> Result[None, GitError]:
        """Create an annotated tag on target (a commit-ish, HEAD by default).

        The tagger identity is passed per command, leaving the repository
        config untouched.
        """
        result = self._run(
            ["tag", "-a", name, "-m", message, target],
            config={"user.name": author_name, "user.email": author_email},
        )
        match result:
            case Err(e):
                return Err(self._error(f"tag -a {name}", e, "git tag failed"))
            case Ok(_):
                return Ok(None)

    def push_tag(self, remote: str, name: str) -> Result[None, GitError]:
        """Push a single tag to a remote.

        Uses the full `refs/tags/` ref so a branch with the same name is never
        pushed instead.
        """
        result = self._run(["push", remote, f"refs/tags/{name}"])
        match result:
            case Err(e):
                return Err(self._error(f"push {remote} {name}", e, "git push failed"))
            case Ok(_):
                return Ok(None)

    def _error(self, command: str, e: ProcessError, fallback: str) -> GitError:
        return GitError(
            command=command,
            message=e.stderr.strip() or e.stdout.strip() or fallback,
            returncode=e.returncode,
        )

    def _run(
        self,
        args: list[str],
        *,
        config: dict[str, str] | None = None,
    ) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS
            if command in {"fetch", "pull", "push", "ls-remote"}
            else _GIT_TIMEOUT_SECONDS
        )
        overrides: list[str] = []
        for key, value in (config or {}).items():
            overrides += ["-c", f"{key}={value}"]
        return run_process(
            ["git", "-C", str(self.path), *overrides, *args], cwd=self.path, timeout=timeout
        )
