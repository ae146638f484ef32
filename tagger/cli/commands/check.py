from __future__ import annotations

from pathlib import Path

import typer

from tagger.cli.commands._helpers import unwrap_or_exit
from tagger.cli.context import build_context
from tagger.git.repository import Repository
from tagger.release.git_remote import GitRemote
from tagger.release.version_file import detect_change


def check(
    repo_root: Path | None = typer.Option(
        None, "--repo-root", help="Git checkout to inspect (default: current directory)"
    ),
    config: Path | None = typer.Option(
        None, "--config", help="Config file (default: <repo-root>/.tagger.toml, optional)"
    ),
    base: str | None = typer.Option(None, "--base", help="Base commit (default: HEAD~1)"),
    head: str | None = typer.Option(None, "--head", help="Head commit (default: HEAD)"),
    version_file: str | None = typer.Option(
        None, "--version-file", help="Repository-relative path of the toolchain pin file"
    ),
) -> None:
    """Print `true` if the toolchain pin changed between base and head, else `false`."""
    ctx = build_context(repo_root=repo_root, config_path=config, result_on_stdout=True)
    path = version_file or ctx.config.version_file.path

    remote = GitRemote(
        Repository(ctx.repo_root),
        remote=ctx.config.git.remote,
        console=ctx.console,
    )
    diff = unwrap_or_exit(
        remote.commit_diff(base or ctx.config.git.base, head or ctx.config.git.head),
        ctx,
    )

    typer.echo("true" if detect_change(diff, path) else "false")
