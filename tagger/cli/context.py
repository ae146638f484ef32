from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import typer

from tagger.core.config import CONFIG_FILE_NAME, TaggerConfig, load_config_or_default
from tagger.core.errors import ErrorCode
from tagger.core.result import Err
from tagger.git.repository import Repository
from tagger.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    repo_root: Path
    config: TaggerConfig
    console: ConsoleProtocol
    env: Mapping[str, str]


def build_context(
    *,
    repo_root: Path | None,
    config_path: Path | None,
    result_on_stdout: bool = False,
) -> CLIContext:
    """Resolve the checkout and config; exit with ENV_ERROR if either is unusable.

    Commands whose stdout is a value for scripts (`check`, `version`) pass
    `result_on_stdout=True` so progress output goes to stderr.
    """
    console = RichConsole(stderr=result_on_stdout)

    try:
        root = (repo_root or Path.cwd()).expanduser().resolve()
    except OSError as e:
        console.error(f"invalid --repo-root: {e}")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    if not Repository(root).exists():
        console.error(f"not a git checkout: {root}")
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    path = config_path if config_path is not None else root / CONFIG_FILE_NAME
    if config_path is not None and not config_path.exists():
        console.error(f"config file not found: {config_path}")
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    config_result = load_config_or_default(path)
    if isinstance(config_result, Err):
        console.error(config_result.error.message)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(
        repo_root=root,
        config=config_result.value,
        console=console,
        env=os.environ,
    )
