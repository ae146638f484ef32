"""Release runs against real git checkouts (bare origin + clone) and a recording host."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from tagger.core.config import ReleaseConfig, TaggerConfig
from tagger.core.result import Err, Ok, Result
from tagger.git.repository import Repository
from tagger.output.console import MockConsole
from tagger.release.errors import ReleaseError
from tagger.release.git_remote import GitRemote
from tagger.release.model import PublishedRelease, ReleaseRequest, TaggerSession
from tagger.release.workflow import resolve_settings, run_release
from tagger.test._git import commit_file, git, init_checkout, remote_tags, requires_git


class _RecordingHost:
    def __init__(self) -> None:
        self.requests: list[ReleaseRequest] = []

    def ensure_ready(self) -> Result[None, ReleaseError]:
        return Ok(None)

    def create_release(self, request: ReleaseRequest) -> Result[PublishedRelease, ReleaseError]:
        self.requests.append(request)
        return Ok(PublishedRelease(tag_name=request.tag_name))


def _run(
    work: Path,
    host: _RecordingHost,
    console: MockConsole,
    config: TaggerConfig | None = None,
    *,
    base: str | None = None,
    head: str | None = None,
) -> Result[TaggerSession, ReleaseError]:
    settings = resolve_settings(
        config=config or TaggerConfig(),
        env={"GITHUB_REPOSITORY": "leanprover/tutorial", "GITHUB_REF": "refs/heads/master"},
        base=base,
        head=head,
    )
    remote = GitRemote(Repository(work), remote="origin", console=console)
    return run_release(settings=settings, remote=remote, host=host, console=console)


@requires_git
def test_toolchain_bump_tags_and_releases(tmp_path: Path) -> None:
    work, origin = init_checkout(tmp_path, toolchain="leanprover/lean4:v4.9.0\n")
    commit_file(work, "lean-toolchain", "leanprover/lean4:v4.10.0\n", "bump lean")
    host = _RecordingHost()
    console = MockConsole()

    result = _run(work, host, console)

    assert isinstance(result, Ok)
    assert result.value.step == "released"
    assert remote_tags(origin) == ["v4.10.0"]
    assert git(origin, "cat-file", "-t", "v4.10.0") == "tag"
    assert git(origin, "tag", "-l", "--format=%(contents:subject)", "v4.10.0") == (
        "Release v4.10.0"
    )
    # tag points at the bump commit
    assert git(origin, "rev-parse", "v4.10.0^{commit}") == git(work, "rev-parse", "HEAD")

    assert [r.tag_name for r in host.requests] == ["v4.10.0"]
    assert host.requests[0].name == "v4.10.0"
    assert "v4.10.0" in host.requests[0].body


@requires_git
def test_unrelated_change_is_skipped(tmp_path: Path) -> None:
    work, origin = init_checkout(tmp_path)
    commit_file(work, "Tutorial/Divisibility.lean", "-- exercises\n", "add exercises")
    host = _RecordingHost()
    console = MockConsole()

    result = _run(work, host, console)

    assert isinstance(result, Ok)
    assert result.value.step == "skipped"
    assert remote_tags(origin) == []
    assert host.requests == []
    assert console.find("Skipping release")


@requires_git
def test_version_without_colon_fails_before_tagging(tmp_path: Path) -> None:
    work, origin = init_checkout(tmp_path)
    commit_file(work, "lean-toolchain", "v4.10.0\n", "bump lean")
    host = _RecordingHost()

    result = _run(work, host, MockConsole())

    assert isinstance(result, Err)
    assert result.error.kind == "config_invalid"
    assert git(work, "tag", "--list") == ""
    assert remote_tags(origin) == []
    assert host.requests == []


@requires_git
def test_rerun_on_same_commit_fails_on_tag_collision(tmp_path: Path) -> None:
    work, origin = init_checkout(tmp_path)
    commit_file(work, "lean-toolchain", "leanprover/lean4:v4.10.0\n", "bump lean")
    host = _RecordingHost()

    first = _run(work, host, MockConsole())
    second = _run(work, host, MockConsole())

    assert isinstance(first, Ok)
    assert isinstance(second, Err)
    assert second.error.kind == "tag_exists"
    assert remote_tags(origin) == ["v4.10.0"]
    assert len(host.requests) == 1


@requires_git
def test_concurrent_run_from_other_checkout_loses_race(tmp_path: Path) -> None:
    work, origin = init_checkout(tmp_path)
    commit_file(work, "lean-toolchain", "leanprover/lean4:v4.10.0\n", "bump lean")
    git(work, "push", "origin", "master")

    other = tmp_path / "other"
    git(tmp_path, "clone", origin.as_uri(), str(other))
    git(other, "config", "tag.gpgsign", "false")

    host = _RecordingHost()
    assert isinstance(_run(work, host, MockConsole()), Ok)

    # A differing message keeps the two tag objects distinct even within the same second.
    config = TaggerConfig(release=ReleaseConfig(tag_message="Release {version} (other)"))
    result = _run(other, host, MockConsole(), config)

    assert isinstance(result, Err)
    assert result.error.kind == "tag_exists"
    assert len(host.requests) == 1


@requires_git
def test_historical_range_tags_that_commit(tmp_path: Path) -> None:
    work, origin = init_checkout(tmp_path)
    commit_file(work, "lean-toolchain", "leanprover/lean4:v4.10.0\n", "bump to 4.10")
    bump_410 = git(work, "rev-parse", "HEAD")
    commit_file(work, "lean-toolchain", "leanprover/lean4:v4.11.0\n", "bump to 4.11")
    host = _RecordingHost()

    result = _run(work, host, MockConsole(), base="HEAD~2", head="HEAD~1")

    assert isinstance(result, Ok)
    assert result.value.version == "v4.10.0"
    assert remote_tags(origin) == ["v4.10.0"]
    assert git(origin, "rev-parse", "v4.10.0^{commit}") == bump_410
    assert [r.tag_name for r in host.requests] == ["v4.10.0"]


@requires_git
def test_uncommitted_pin_edit_is_ignored(tmp_path: Path) -> None:
    work, origin = init_checkout(tmp_path)
    commit_file(work, "lean-toolchain", "leanprover/lean4:v4.10.0\n", "bump lean")
    (work / "lean-toolchain").write_text("leanprover/lean4:v9.9.9\n", encoding="utf-8")
    host = _RecordingHost()

    result = _run(work, host, MockConsole())

    assert isinstance(result, Ok)
    assert remote_tags(origin) == ["v4.10.0"]


@requires_git
def test_non_utf8_filename_in_unrelated_commit_is_skipped(tmp_path: Path) -> None:
    work, origin = init_checkout(tmp_path)
    try:
        (work / os.fsdecode(b"caf\xe9.lean")).write_bytes(b"-- notes\n")
    except (OSError, UnicodeEncodeError):
        pytest.skip("filesystem rejects non-UTF-8 file names")
    git(work, "add", "-A")
    git(work, "commit", "-m", "add notes")
    host = _RecordingHost()

    result = _run(work, host, MockConsole())

    assert isinstance(result, Ok)
    assert result.value.step == "skipped"
    assert remote_tags(origin) == []
