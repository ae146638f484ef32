from __future__ import annotations

from pathlib import Path

import typer

from tagger.cli.commands._helpers import unwrap_or_exit
from tagger.cli.context import build_context
from tagger.release.version_file import read_version


def version(
    repo_root: Path | None = typer.Option(
        None, "--repo-root", help="Git checkout to inspect (default: current directory)"
    ),
    config: Path | None = typer.Option(
        None, "--config", help="Config file (default: <repo-root>/.tagger.toml, optional)"
    ),
    version_file: str | None = typer.Option(
        None, "--version-file", help="Repository-relative path of the toolchain pin file"
    ),
) -> None:
    """Print the version (and future tag name) pinned by the toolchain file."""
    ctx = build_context(repo_root=repo_root, config_path=config, result_on_stdout=True)
    path = version_file or ctx.config.version_file.path

    typer.echo(unwrap_or_exit(read_version(ctx.repo_root, path), ctx))
