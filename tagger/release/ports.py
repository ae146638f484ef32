"""Capabilities the release workflow depends on.

The workflow only talks to these protocols, so its decision logic runs in
tests against in-memory fakes.
"""

from __future__ import annotations

from typing import Protocol

from tagger.core.result import Result
from tagger.release.errors import ReleaseError
from tagger.release.model import AnnotatedTag, CommitDiff, PublishedRelease, ReleaseRequest


class VersionControlRemote(Protocol):
    def commit_diff(self, base: str, head: str) -> Result[CommitDiff, ReleaseError]:
        """Paths changed between base and head."""
        ...

    def read_file(self, rev: str, path: str) -> Result[str, ReleaseError]:
        """Contents of path as committed at rev; `config_invalid` if it is absent."""
        ...

    def create_tag(self, tag: AnnotatedTag) -> Result[None, ReleaseError]:
        """Create the annotated tag on `tag.target`; `tag_exists` if it is already there."""
        ...

    def push_tag(self, name: str) -> Result[None, ReleaseError]:
        """Push the tag; `tag_exists` if the remote already has it."""
        ...


class ReleaseHost(Protocol):
    def ensure_ready(self) -> Result[None, ReleaseError]:
        """Check tooling and credentials before anything is published."""
        ...

    def create_release(self, request: ReleaseRequest) -> Result[PublishedRelease, ReleaseError]:
        ...
