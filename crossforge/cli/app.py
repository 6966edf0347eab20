"""Main Typer applications.

Entry points (configured via pyproject.toml console_scripts):

- ``crossforge``: ``build``, ``targets`` and ``resolve`` subcommands.
- ``release-build``: the pipeline run as a single command.
"""

from __future__ import annotations

import typer

from crossforge.cli.commands.build import build_cmd
from crossforge.cli.commands.inspect import resolve_cmd, targets_cmd

app = typer.Typer(
    name="crossforge",
    help="Crossforge: multi-target native release pipeline.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="build", help="Build, verify and package all selected targets.")(build_cmd)
app.command(name="targets", help="List release targets in build order.")(targets_cmd)
app.command(name="resolve", help="Show the resolved toolchain for one target.")(resolve_cmd)

# Single-command app: ``release-build [OPTIONS]``
release_build_app = typer.Typer(
    name="release-build",
    rich_markup_mode="rich",
    add_completion=False,
)
release_build_app.command(name="release-build")(build_cmd)


def main() -> None:
    """CLI entry point."""
    app()


def release_build() -> None:
    """``release-build`` entry point."""
    release_build_app()


if __name__ == "__main__":
    main()
