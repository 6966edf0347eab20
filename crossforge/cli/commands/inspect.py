"""``crossforge targets`` and ``crossforge resolve``: look before you build."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from crossforge.config import ReleaseSettings
from crossforge.core.errors import ToolchainNotFound
from crossforge.core.registry import TargetRegistry
from crossforge.core.resolver import ToolchainResolver
from crossforge.monitor.renderer import ReleaseRenderer

console = Console()


def targets_cmd(
    targets: str = typer.Option(
        None,
        "--targets",
        "-t",
        help="Comma-separated filter: OS, arch, triple or triple glob.",
    ),
    show_all: bool = typer.Option(
        False,
        "--all",
        "-a",
        help="Include disabled targets.",
    ),
) -> None:
    """List the release targets in build order."""
    registry = TargetRegistry()
    selected = registry.list_targets(targets, include_disabled=show_all)
    if not selected:
        console.print("[dim]No targets match.[/dim]")
        return
    console.print(ReleaseRenderer(console=console).render_targets(selected))


def resolve_cmd(
    triple: str = typer.Argument(..., help="Target triple to resolve."),
    packages_root: Path = typer.Option(
        None,
        "--packages-root",
        help="Directory holding the cross toolchains.",
    ),
    zigbuild: bool = typer.Option(
        None,
        "--zigbuild/--no-zigbuild",
        help="Resolve Linux targets for cargo-zigbuild.",
    ),
) -> None:
    """Resolve and show the toolchain for one target without building."""
    overrides = {"packages_root": packages_root, "use_zigbuild": zigbuild}
    settings = ReleaseSettings(**{k: v for k, v in overrides.items() if v is not None})

    try:
        target = TargetRegistry().get(triple)
    except KeyError as exc:
        console.print(f"[bold red]{escape(exc.args[0])}[/bold red]")
        raise typer.Exit(code=2)

    try:
        env = ToolchainResolver(settings).resolve(target, settings.packages_root)
    except ToolchainNotFound as exc:
        console.print(f"[bold red]Toolchain not found for {triple}:[/bold red]")
        for path in exc.missing:
            console.print(f"  [red]- {escape(path)}[/red]", soft_wrap=True)
        raise typer.Exit(code=1)

    if not target.enabled:
        console.print(f"[yellow]{triple} is disabled in the registry.[/yellow]")
    console.print(ReleaseRenderer(console=console).render_toolchain(env))
