"""Crossforge CLI: Typer-based command-line interface.

Provides the ``crossforge`` command with subcommands for running the
release pipeline, listing targets and inspecting resolved toolchains,
plus the standalone ``release-build`` command.

All output uses Rich for formatted terminal display.
"""
