from __future__ import annotations

from pathlib import Path

import typer

from tagger.cli.commands._helpers import unwrap_or_exit
from tagger.cli.context import build_context
from tagger.git.repository import Repository
from tagger.release.gh import GhReleaseHost
from tagger.release.git_remote import GitRemote
from tagger.release.workflow import resolve_settings, run_release


def run(
    repo_root: Path | None = typer.Option(
        None, "--repo-root", help="Git checkout to release from (default: current directory)"
    ),
    config: Path | None = typer.Option(
        None, "--config", help="Config file (default: <repo-root>/.tagger.toml, optional)"
    ),
    repo: str | None = typer.Option(
        None, "--repo", help="GitHub repository owner/name (default: $GITHUB_REPOSITORY)"
    ),
    ref: str | None = typer.Option(
        None, "--ref", help="Pushed ref; runs for other branches are skipped (default: $GITHUB_REF)"
    ),
    base: str | None = typer.Option(None, "--base", help="Base commit (default: HEAD~1)"),
    head: str | None = typer.Option(None, "--head", help="Head commit (default: HEAD)"),
    version_file: str | None = typer.Option(
        None, "--version-file", help="Repository-relative path of the toolchain pin file"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Print tag and release commands without running them"
    ),
) -> None:
    """Tag and publish a release when the toolchain pin changed in the last commit."""
    ctx = build_context(repo_root=repo_root, config_path=config)

    settings = resolve_settings(
        config=ctx.config,
        env=ctx.env,
        repo=repo,
        ref=ref,
        base=base,
        head=head,
        version_file=version_file,
    )
    remote = GitRemote(
        Repository(ctx.repo_root),
        remote=ctx.config.git.remote,
        console=ctx.console,
        dry_run=dry_run,
    )
    host = GhReleaseHost(
        workspace_root=ctx.repo_root,
        console=ctx.console,
        dry_run=dry_run,
        env=ctx.env,
    )

    if dry_run:
        ctx.console.header("dry run: no tag or release will be created")

    unwrap_or_exit(
        run_release(
            settings=settings,
            remote=remote,
            host=host,
            console=ctx.console,
            dry_run=dry_run,
        ),
        ctx,
    )
