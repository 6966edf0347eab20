"""``release-build`` / ``crossforge build``: run the release pipeline.

Builds every selected target in registry order, verifies and packages
each artifact, prints the reporting stream and a summary, and exits 0
only if every selected target reached DONE.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import typer
from rich.console import Console

from crossforge.cli.log_setup import configure_logging
from crossforge.config import ReleaseSettings
from crossforge.core.driver import PipelineDriver
from crossforge.core.registry import TargetRegistry
from crossforge.models.config import FailurePolicy
from crossforge.monitor.renderer import ReleaseRenderer

console = Console()


def build_cmd(
    targets: str = typer.Option(
        None,
        "--targets",
        "-t",
        help="Comma-separated filter: OS, arch, triple or triple glob (e.g. 'linux,*-darwin').",
    ),
    version: str = typer.Option(
        None,
        "--version",
        help="Release version stamped into archive names.",
    ),
    packages_root: Path = typer.Option(
        None,
        "--packages-root",
        help="Directory holding the cross toolchains (osxcross, NDK, ...).",
    ),
    output_dir: Path = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="Release directory the archives are written to.",
    ),
    project_dir: Path = typer.Option(
        None,
        "--project-dir",
        help="Cargo workspace to build.",
    ),
    package: str = typer.Option(
        None,
        "--package",
        "-p",
        help="Cargo package to build.",
    ),
    base_name: str = typer.Option(
        None,
        "--base-name",
        help="Archive base name (defaults to the package name).",
    ),
    continue_on_failure: bool = typer.Option(
        None,
        "--continue-on-failure/--halt-on-failure",
        help="Keep building remaining targets after a failure.",
    ),
    zigbuild: bool = typer.Option(
        None,
        "--zigbuild/--no-zigbuild",
        help="Build Linux targets with cargo-zigbuild.",
    ),
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ...).",
    ),
) -> None:
    """Build, verify and package the release for every selected target.

    Defaults come from CROSSFORGE_* environment variables or a .env file.
    """
    overrides: dict[str, Any] = {
        "version": version,
        "packages_root": packages_root,
        "release_dir": output_dir,
        "project_dir": project_dir,
        "package": package,
        "base_name": base_name,
        "use_zigbuild": zigbuild,
        "log_level": log_level,
    }
    if continue_on_failure is not None:
        overrides["failure_policy"] = (
            FailurePolicy.CONTINUE if continue_on_failure else FailurePolicy.HALT
        )
    settings = ReleaseSettings(**{k: v for k, v in overrides.items() if v is not None})
    configure_logging(settings.log_level)

    registry = TargetRegistry()
    selected = registry.list_targets(targets)
    if not selected:
        console.print(f"[bold red]No enabled targets match filter:[/bold red] {targets}")
        raise typer.Exit(code=2)

    config = settings.pipeline_config()
    renderer = ReleaseRenderer(console=console)
    driver = PipelineDriver(
        config,
        settings=settings,
        registry=registry,
        listeners=[renderer.on_transition],
    )

    console.print(
        f"[bold cyan]Releasing {config.base_name} {config.version}[/bold cyan] "
        f"for {len(selected)} target(s) -> {config.release_dir}"
    )
    summary = driver.run(selected)

    console.print()
    renderer.print_summary(summary)
    raise typer.Exit(code=summary.exit_code)
