from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest

from tagger.core.result import Err, Ok
from tagger.git.repository import GitError, Repository
from tagger.output.console import MockConsole
from tagger.release.git_remote import GitRemote, classify_git_error
from tagger.release.model import AnnotatedTag, CommitDiff, Identity
from tagger.test._git import commit_file, git, init_checkout, remote_tags, requires_git


def _tag(name: str = "v4.10.0") -> AnnotatedTag:
    return AnnotatedTag(
        name=name,
        message=f"Release {name}",
        author=Identity(
            name="github-actions[bot]",
            email="github-actions[bot]@users.noreply.github.com",
        ),
    )


@pytest.mark.parametrize(
    ("message", "kind"),
    [
        ("fatal: tag 'v4.10.0' already exists", "tag_exists"),
        (" ! [rejected]        v4.10.0 -> v4.10.0 (already exists)", "tag_exists"),
        ("remote: Permission to a/b.git denied to github-actions[bot].", "permission_denied"),
        ("fatal: could not read Username for 'https://github.com'", "auth_required"),
        ("fatal: Authentication failed for 'https://github.com/a/b.git/'", "auth_required"),
        ("error: The requested URL returned error: 401", "auth_required"),
        ("error: The requested URL returned error: 403", "permission_denied"),
        ("fatal: unable to access '...': Could not resolve host: github.com", "network"),
        ("fatal: the remote end hung up unexpectedly", "network"),
        ("error: The requested URL returned error: 503", "network"),
        ("fatal: ambiguous argument 'HEAD~1'", "git_failed"),
    ],
)
def test_classify_git_error(message: str, kind: str) -> None:
    assert classify_git_error(GitError(command="push", message=message)) == kind


@requires_git
class TestGitRemote:
    def test_commit_diff(self, tmp_path: Path) -> None:
        work, _ = init_checkout(tmp_path)
        commit_file(work, "lean-toolchain", "leanprover/lean4:v4.10.0\n", "bump")
        console = MockConsole()

        result = GitRemote(Repository(work), remote="origin", console=console).commit_diff(
            "HEAD~1", "HEAD"
        )

        assert result == Ok(CommitDiff(base="HEAD~1", head="HEAD", paths=("lean-toolchain",)))
        assert console.find("git diff --name-only HEAD~1 HEAD")

    def test_commit_diff_shallow_history(self, tmp_path: Path) -> None:
        work, _ = init_checkout(tmp_path)

        result = GitRemote(Repository(work), remote="origin", console=MockConsole()).commit_diff(
            "HEAD~1", "HEAD"
        )

        assert isinstance(result, Err)
        assert result.error.kind == "git_failed"
        assert result.error.hint is not None and "fetch-depth: 2" in result.error.hint

    def test_create_and_push(self, tmp_path: Path) -> None:
        work, origin = init_checkout(tmp_path)
        remote = GitRemote(Repository(work), remote="origin", console=MockConsole())

        assert remote.create_tag(_tag()) == Ok(None)
        assert remote.push_tag("v4.10.0") == Ok(None)
        assert remote_tags(origin) == ["v4.10.0"]

    def test_create_tag_twice_collides(self, tmp_path: Path) -> None:
        work, _ = init_checkout(tmp_path)
        remote = GitRemote(Repository(work), remote="origin", console=MockConsole())

        first = remote.create_tag(_tag())
        second = remote.create_tag(_tag())

        assert isinstance(first, Ok)
        assert isinstance(second, Err)
        assert second.error.kind == "tag_exists"

    def test_push_collision_is_tag_exists(self, tmp_path: Path) -> None:
        work, origin = init_checkout(tmp_path)
        # Tag already published by an earlier run from another checkout.
        git(origin, "tag", "v4.10.0", "master")

        remote = GitRemote(Repository(work), remote="origin", console=MockConsole())
        commit_file(work, "README.md", "# tutorial v2\n", "docs")
        assert isinstance(remote.create_tag(_tag()), Ok)

        result = remote.push_tag("v4.10.0")

        assert isinstance(result, Err)
        assert result.error.kind == "tag_exists"
        assert "origin" in result.error.message

    def test_dry_run_leaves_repo_untouched(self, tmp_path: Path) -> None:
        work, origin = init_checkout(tmp_path)
        console = MockConsole()
        remote = GitRemote(Repository(work), remote="origin", console=console, dry_run=True)

        assert remote.create_tag(_tag()) == Ok(None)
        assert remote.push_tag("v4.10.0") == Ok(None)

        assert git(work, "tag", "--list") == ""
        assert remote_tags(origin) == []
        assert console.find('git tag -a v4.10.0 -m "Release v4.10.0"')
        assert console.find("git push origin refs/tags/v4.10.0")

    def test_read_file_at_rev(self, tmp_path: Path) -> None:
        work, _ = init_checkout(tmp_path, toolchain="leanprover/lean4:v4.9.0\n")
        commit_file(work, "lean-toolchain", "leanprover/lean4:v4.10.0\n", "bump")
        console = MockConsole()
        remote = GitRemote(Repository(work), remote="origin", console=console)

        assert remote.read_file("HEAD~1", "lean-toolchain") == Ok("leanprover/lean4:v4.9.0\n")
        assert console.find("git show HEAD~1:lean-toolchain")

    def test_read_deleted_file_is_config_error(self, tmp_path: Path) -> None:
        work, _ = init_checkout(tmp_path)
        git(work, "rm", "-q", "lean-toolchain")
        git(work, "commit", "-m", "drop pin")

        result = GitRemote(Repository(work), remote="origin", console=MockConsole()).read_file(
            "HEAD", "lean-toolchain"
        )

        assert isinstance(result, Err)
        assert result.error.kind == "config_invalid"
        assert "lean-toolchain" in result.error.message

    def test_create_tag_on_target(self, tmp_path: Path) -> None:
        work, origin = init_checkout(tmp_path)
        first = git(work, "rev-parse", "HEAD")
        commit_file(work, "README.md", "# tutorial v2\n", "docs")
        remote = GitRemote(Repository(work), remote="origin", console=MockConsole())
        tag = replace(_tag(), target="HEAD~1")

        assert remote.create_tag(tag) == Ok(None)
        assert remote.push_tag(tag.name) == Ok(None)
        assert git(origin, "rev-parse", "v4.10.0^{commit}") == first
