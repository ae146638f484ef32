from __future__ import annotations

import typer

from tagger import __version__
from tagger.cli.commands.check import check
from tagger.cli.commands.run_cmd import run
from tagger.cli.commands.version_cmd import version


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(run)
app.command()(check)
app.command()(version)


def _show_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    show_version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_show_version,
        is_eager=True,
    ),
) -> None:
    del show_version


def main() -> None:
    app()
