"""The release run: detect a toolchain bump, tag it, publish a release.

Steps (each arrow is a gate; any error aborts the run, nothing is rolled back):

    start -> checked -> skipped
                     -> version_read -> tagged -> released
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, replace

from tagger.core.config import TaggerConfig
from tagger.core.result import Err, Ok, Result
from tagger.output.console import ConsoleProtocol
from tagger.release.errors import ReleaseError, config_error
from tagger.release.fsm import FINISH, StepHandler, StepOutcome, advance, run_state_machine
from tagger.release.model import (
    AnnotatedTag,
    Identity,
    PublishedRelease,
    ReleaseRequest,
    TaggerSession,
)
from tagger.release.ports import ReleaseHost, VersionControlRemote
from tagger.release.version_file import detect_change, extract_version

_REPO_SLUG_RE = re.compile(r"^[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+$")


@dataclass(frozen=True, slots=True)
class TaggerSettings:
    version_file: str
    repo: str | None  # owner/name; only needed once a release is due
    branch: str
    base: str
    head: str
    ref: str | None  # pushed ref, e.g. refs/heads/master
    identity: Identity
    tag_message: str
    release_body: str


def resolve_settings(
    *,
    config: TaggerConfig,
    env: Mapping[str, str],
    repo: str | None = None,
    ref: str | None = None,
    base: str | None = None,
    head: str | None = None,
    version_file: str | None = None,
) -> TaggerSettings:
    """Merge CLI overrides, config file and CI environment (in that order)."""
    return TaggerSettings(
        version_file=version_file or config.version_file.path,
        repo=repo or config.release.repo or env.get("GITHUB_REPOSITORY") or None,
        branch=config.git.branch,
        base=base or config.git.base,
        head=head or config.git.head,
        ref=ref or env.get("GITHUB_REF") or None,
        identity=Identity(name=config.identity.name, email=config.identity.email),
        tag_message=config.release.tag_message,
        release_body=config.release.body,
    )


def render(template: str, version: str) -> str:
    return template.replace("{version}", version)


def build_tag(version: str, settings: TaggerSettings) -> AnnotatedTag:
    return AnnotatedTag(
        name=version,
        message=render(settings.tag_message, version),
        author=settings.identity,
        target=settings.head,
    )


def build_release_request(version: str, *, repo: str, settings: TaggerSettings) -> ReleaseRequest:
    return ReleaseRequest(
        repo=repo,
        tag_name=version,
        name=version,
        body=render(settings.release_body, version),
        draft=False,
        prerelease=False,
    )


def validate_repo_slug(repo: str | None) -> Result[str, ReleaseError]:
    if repo is None:
        return Err(
            config_error(
                "release repository unknown",
                hint="pass --repo owner/name, set [release].repo, or set GITHUB_REPOSITORY",
            )
        )
    if not _REPO_SLUG_RE.match(repo):
        return Err(config_error(f"invalid repository slug (expected owner/name): {repo}"))
    return Ok(repo)


def create_tag(remote: VersionControlRemote, tag: AnnotatedTag) -> Result[None, ReleaseError]:
    """Create the annotated tag and push it; either failure is fatal."""
    created = remote.create_tag(tag)
    if isinstance(created, Err):
        return created
    return remote.push_tag(tag.name)


def publish_release(
    host: ReleaseHost, request: ReleaseRequest
) -> Result[PublishedRelease, ReleaseError]:
    return host.create_release(request)


def _describe(
    session: TaggerSession, settings: TaggerSettings, *, dry_run: bool
) -> str | None:
    match session.step:
        case "checked":
            state = "changed" if session.changed else "unchanged"
            return f"{settings.version_file}: {state} ({settings.base}..{settings.head})"
        case "version_read":
            return f"version: {session.version}"
        case "tagged":
            if dry_run:
                return f"tag not pushed (dry run): {session.version}"
            return f"tag pushed: {session.version}"
        case _:
            return None


def run_release(
    *,
    settings: TaggerSettings,
    remote: VersionControlRemote,
    host: ReleaseHost,
    console: ConsoleProtocol,
    dry_run: bool = False,
) -> Result[TaggerSession, ReleaseError]:
    """Run one release invocation to completion or to the first error.

    The version is read from the version file as committed at `settings.head`
    and the tag points at that commit; the working tree is never read.
    `dry_run` only changes progress wording, the remote and host do the rest.
    """

    def start(s: TaggerSession) -> Result[StepOutcome[TaggerSession], ReleaseError]:
        expected = f"refs/heads/{settings.branch}"
        if settings.ref is not None and settings.ref != expected:
            console.warning(
                f"releases are only made from {settings.branch}; "
                "set [git].branch in .tagger.toml if your default branch differs"
            )
            return Ok(
                advance(
                    replace(
                        s,
                        step="skipped",
                        skip_reason=f"{settings.ref} is not {expected}. Skipping release.",
                    )
                )
            )

        diff = remote.commit_diff(settings.base, settings.head)
        if isinstance(diff, Err):
            return diff
        changed = detect_change(diff.value, settings.version_file)
        return Ok(advance(replace(s, step="checked", changed=changed)))

    def checked(s: TaggerSession) -> Result[StepOutcome[TaggerSession], ReleaseError]:
        if not s.changed:
            return Ok(
                advance(
                    replace(
                        s,
                        step="skipped",
                        skip_reason=(
                            f"No changes in {settings.version_file}. Skipping release."
                        ),
                    )
                )
            )

        content = remote.read_file(settings.head, settings.version_file)
        if isinstance(content, Err):
            return content
        version = extract_version(content.value)
        if isinstance(version, Err):
            return version
        return Ok(advance(replace(s, step="version_read", version=version.value)))

    def version_read(s: TaggerSession) -> Result[StepOutcome[TaggerSession], ReleaseError]:
        assert s.version is not None
        # Everything that can be checked up front is, before a tag is pushed.
        repo = validate_repo_slug(settings.repo)
        if isinstance(repo, Err):
            return repo
        ready = host.ensure_ready()
        if isinstance(ready, Err):
            return ready

        tagged = create_tag(remote, build_tag(s.version, settings))
        if isinstance(tagged, Err):
            return tagged
        return Ok(advance(replace(s, step="tagged")))

    def tagged(s: TaggerSession) -> Result[StepOutcome[TaggerSession], ReleaseError]:
        assert s.version is not None
        repo = validate_repo_slug(settings.repo)
        if isinstance(repo, Err):
            return repo

        request = build_release_request(s.version, repo=repo.value, settings=settings)
        published = publish_release(host, request)
        if isinstance(published, Err):
            return published
        return Ok(advance(replace(s, step="released", release=published.value)))

    def done(_: TaggerSession) -> Result[StepOutcome[TaggerSession], ReleaseError]:
        return Ok(FINISH)

    def on_transition(_: TaggerSession, after: TaggerSession) -> None:
        line = _describe(after, settings, dry_run=dry_run)
        if line is not None:
            console.info(line)

    handlers: dict[str, StepHandler[TaggerSession]] = {
        "start": start,
        "checked": checked,
        "version_read": version_read,
        "tagged": tagged,
        "released": done,
        "skipped": done,
    }

    result = run_state_machine(
        initial_state=TaggerSession(step="start"),
        get_step=lambda s: s.step,
        handlers=handlers,
        on_transition=on_transition,
    )
    if isinstance(result, Err):
        return result

    final = result.value
    if final.skipped:
        console.info(final.skip_reason or "Skipping release.")
    elif final.release is not None:
        if dry_run:
            console.info(f"dry run: would release {final.release.tag_name}")
        else:
            url = f" ({final.release.html_url})" if final.release.html_url else ""
            console.success(f"released {final.release.tag_name}{url}")
    return Ok(final)
