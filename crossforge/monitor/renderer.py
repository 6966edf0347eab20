"""Rich terminal renderer for release runs.

Prints every phase transition as it happens, the full diagnostics of
each failure, and a summary table once the run is over.

Color scheme
------------
- green     : DONE
- bold red  : FAILED
- yellow    : RESOLVING / BUILDING / VERIFYING / PACKAGING
- dim       : PENDING
"""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from crossforge.models.pipeline import RunSummary, TargetState, TransitionRecord
from crossforge.models.targets import TargetDescriptor
from crossforge.models.toolchain import ToolchainEnv

# ---------------------------------------------------------------------------
# State -> Rich markup
# ---------------------------------------------------------------------------

_STATE_ICONS: dict[TargetState, str] = {
    TargetState.PENDING: "[dim]PENDING[/dim]",
    TargetState.RESOLVING: "[yellow]RESOLVING[/yellow]",
    TargetState.BUILDING: "[yellow]BUILDING[/yellow]",
    TargetState.VERIFYING: "[yellow]VERIFYING[/yellow]",
    TargetState.PACKAGING: "[yellow]PACKAGING[/yellow]",
    TargetState.DONE: "[green]DONE[/green]",
    TargetState.FAILED: "[bold red]FAILED[/bold red]",
}

# Keep the tail of long compiler output; the head is rarely the error.
_DIAGNOSTIC_TAIL_LINES = 200


class ReleaseRenderer:
    """Renders release progress and results with Rich.

    Parameters
    ----------
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    # ------------------------------------------------------------------
    # Live reporting stream
    # ------------------------------------------------------------------

    def on_transition(self, record: TransitionRecord) -> None:
        """Transition listener: print one line per phase change."""
        stamp = record.timestamp_utc.strftime("%H:%M:%S")
        state = _STATE_ICONS.get(record.to_state, record.to_state.value)
        line = f"[dim]{stamp}[/dim] [bold]{record.triple}[/bold] {state}"
        if record.reason:
            line += f" [red]{escape(record.reason)}[/red]"
        self.console.print(line)

        if record.to_state == TargetState.FAILED and record.diagnostics:
            self.print_diagnostics(record.triple, record.diagnostics)

    def print_diagnostics(self, triple: str, diagnostics: str) -> None:
        lines = diagnostics.rstrip().splitlines()
        if len(lines) > _DIAGNOSTIC_TAIL_LINES:
            skipped = len(lines) - _DIAGNOSTIC_TAIL_LINES
            lines = [f"... ({skipped} earlier lines omitted)"] + lines[-_DIAGNOSTIC_TAIL_LINES:]
        self.console.print(
            Panel(
                Text("\n".join(lines)),
                title=f"[bold red]Diagnostics: {triple}[/bold red]",
                border_style="red",
            )
        )

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------

    def render_summary(self, summary: RunSummary) -> Panel:
        """Render a RunSummary as a Rich Panel containing a Table."""
        table = Table(show_header=True, header_style="bold cyan", expand=True)
        table.add_column("#", style="dim", width=3, justify="right")
        table.add_column("Target", min_width=26, no_wrap=True)
        table.add_column("State", justify="center", min_width=10)
        table.add_column("Needed libraries")
        table.add_column("Archive / reason")

        for i, outcome in enumerate(summary.outcomes):
            deps = "[dim]-[/dim]"
            if outcome.verification is not None:
                deps = escape(", ".join(outcome.verification.declared_dependencies)) or "[dim](none)[/dim]"
                if outcome.verification.warnings:
                    deps += " [yellow](incomplete)[/yellow]"

            if outcome.package is not None:
                detail = escape(outcome.package.output_archive.name)
            elif outcome.failure_reason:
                detail = f"[red]{escape(outcome.failure_reason)}[/red]"
            else:
                detail = "[dim]-[/dim]"

            table.add_row(
                str(i + 1),
                outcome.target.triple,
                _STATE_ICONS.get(outcome.state, outcome.state.value),
                deps,
                detail,
            )

        parts = [
            f"[bold]Version:[/bold] {escape(summary.version)}",
            f"[green][bold]Done:[/bold] {len(summary.done)}[/green]",
            f"[red][bold]Failed:[/bold] {len(summary.failed)}[/red]",
            f"[bold]Pending:[/bold] {len(summary.pending)}",
        ]
        if summary.interrupted:
            parts.append("[bold red]INTERRUPTED[/bold red]")

        border = "green" if summary.succeeded else "red"
        return Panel(
            Group(table, Text(""), Text.from_markup("  |  ".join(parts))),
            title="[bold]Release Summary[/bold]",
            border_style=border,
            padding=(1, 2),
        )

    def print_summary(self, summary: RunSummary) -> None:
        self.console.print(self.render_summary(summary))

    # ------------------------------------------------------------------
    # Registry and toolchain views
    # ------------------------------------------------------------------

    def render_targets(self, targets: Sequence[TargetDescriptor]) -> Table:
        table = Table(title="Release Targets", header_style="bold cyan")
        table.add_column("#", style="dim", justify="right")
        table.add_column("Triple", style="cyan", no_wrap=True)
        table.add_column("OS")
        table.add_column("Arch")
        table.add_column("ABI")
        table.add_column("Archive")
        table.add_column("Enabled", justify="center")

        for i, t in enumerate(targets):
            enabled = "[green]Yes[/green]" if t.enabled else "[red]No[/red]"
            table.add_row(
                str(i + 1),
                t.triple,
                t.os.value,
                t.arch.value,
                t.abi or "-",
                t.archive_format.extension,
                enabled,
            )
        return table

    def render_toolchain(self, env: ToolchainEnv) -> Panel:
        def shown(value: object, placeholder: str) -> str:
            return escape(str(value)) if value else f"[dim]{placeholder}[/dim]"

        lines = [
            f"[bold]Command:[/bold]  {escape(' '.join(env.build_command))}",
            f"[bold]AR:[/bold]       {shown(env.archiver, 'host default')}",
            f"[bold]CC:[/bold]       {shown(env.c_compiler, 'host default')}",
            f"[bold]CXX:[/bold]      {shown(env.cxx_compiler, 'host default')}",
            f"[bold]RUSTFLAGS:[/bold] {shown(env.rustflags, '-')}",
        ]
        for key, value in sorted(env.extra_vars.items()):
            lines.append(f"[bold]{escape(key)}:[/bold] {escape(value)}")
        if env.path_prepend:
            lines.append("[bold]PATH prepend:[/bold]")
            lines.extend(f"  {escape(str(p))}" for p in env.path_prepend)
        lines.append(f"[dim]fingerprint {env.fingerprint[:16]}[/dim]")
        return Panel(
            "\n".join(lines),
            title=f"[bold]Toolchain: {env.target_triple}[/bold]",
            border_style="blue",
            padding=(1, 2),
        )
