from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True, slots=True)
class CommitDiff:
    """Paths changed between two commits."""

    base: str
    head: str
    paths: tuple[str, ...]

    def contains(self, path: str) -> bool:
        # exact match only: "lean-toolchain.bak" or "sub/lean-toolchain" do not count
        return path in self.paths


@dataclass(frozen=True, slots=True)
class Identity:
    name: str
    email: str


@dataclass(frozen=True, slots=True)
class AnnotatedTag:
    name: str
    message: str
    author: Identity
    target: str = "HEAD"  # commit the tag points at


@dataclass(frozen=True, slots=True)
class ReleaseRequest:
    """Fields sent to the release host's create-release API."""

    repo: str  # owner/name
    tag_name: str
    name: str
    body: str
    draft: bool = False
    prerelease: bool = False


@dataclass(frozen=True, slots=True)
class PublishedRelease:
    tag_name: str
    # None for dry runs or when the host response carries no URL
    html_url: str | None = None


TaggerStep = Literal["start", "checked", "version_read", "tagged", "released", "skipped"]


@dataclass(frozen=True, slots=True)
class TaggerSession:
    """State threaded through one release run.

    Each step handler returns a new session; nothing is carried in
    environment variables between steps.
    """

    step: TaggerStep
    changed: bool = False
    version: str | None = None
    release: PublishedRelease | None = None
    skip_reason: str | None = None

    @property
    def skipped(self) -> bool:
        return self.step == "skipped"
