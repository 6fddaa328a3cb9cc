from __future__ import annotations

import typer

from pkgrestore import __version__
from pkgrestore.cli.commands.detect import detect
from pkgrestore.cli.commands.plan import plan
from pkgrestore.cli.commands.restore import restore


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(detect)
app.command()(plan)
app.command()(restore)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        callback=_print_version,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Restore packages from a backup onto a fresh WSL, macOS or Arch machine."""


def main() -> None:
    app()
