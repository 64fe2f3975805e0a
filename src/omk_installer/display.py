"""Display logic for reconciliation and apply results."""

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .core import Action, ApplyResult, Manifest, ReconcileResult, SourceSnapshot
from .utils import format_iso_date, pluralize

ACTION_STYLE = {
    Action.INSTALL: "[green]+ install[/green]",
    Action.REPLACE: "[blue]~ update[/blue]",
    Action.CURRENT: "[dim]= current[/dim]",
    Action.SKIP: "[yellow]! skip[/yellow]",
    Action.REMOVE: "[red]- remove[/red]",
}


def display_manifest_header(manifest: Optional[Manifest], console: Console) -> None:
    """Show what is currently installed."""
    if manifest is None:
        console.print("[dim]Installed: nothing recorded (fresh install)[/dim]")
        return
    console.print(
        f"[bold]Installed:[/bold] v{manifest.version} ({manifest.install_mode.value}), "
        f"{pluralize(len(manifest.files), 'file')}, "
        f"updated {format_iso_date(manifest.updated_at)}"
    )


def display_plan(result: ReconcileResult, console: Console, show_current: bool = False) -> None:
    """Show the per-file classification as a table.

    Args:
        result: Reconciliation result
        console: Rich console for output
        show_current: Include files that need no change
    """
    rows = [a for a in result.actions if show_current or a.action != Action.CURRENT]
    if rows:
        table = Table(title=f"\nPlanned changes ({len(rows)})")
        table.add_column("File", style="cyan")
        table.add_column("Action")
        table.add_column("Note", style="dim")

        for item in rows:
            note = ""
            if item.error is not None:
                note = f"cannot inspect: {escape(item.error)}"
            elif item.action == Action.SKIP:
                note = "modified locally" if item.shipped else "modified locally, no longer shipped"
            elif item.destructive:
                note = "backup to .bak"
            table.add_row(item.path, ACTION_STYLE[item.action], note)

        console.print(table)

    counts = result.summary
    parts = [
        f"{counts[Action.INSTALL]} to install",
        f"{counts[Action.REPLACE]} to update",
        f"{counts[Action.REMOVE]} to remove",
        f"{counts[Action.CURRENT]} current",
    ]
    if counts[Action.SKIP]:
        parts.append(f"⚠ {counts[Action.SKIP]} skipped")
    console.print(", ".join(parts))


def display_skipped(result: ReconcileResult, console: Console) -> None:
    """List every protectively skipped path so the user can resolve it."""
    skipped = result.skipped
    if not skipped:
        return
    console.print("\n[yellow]Modified locally or unreadable, left untouched:[/yellow]")
    for item in skipped:
        if item.error is not None:
            suffix = f" [dim](cannot inspect: {escape(item.error)})[/dim]"
        elif item.shipped:
            suffix = ""
        else:
            suffix = " [dim](no longer shipped)[/dim]"
        console.print(f"  [yellow]![/yellow] {item.path}{suffix}")
    console.print("[dim]Compare with the package copy and merge by hand if needed.[/dim]")


def display_missing_sources(snapshot: SourceSnapshot, console: Console) -> None:
    if not snapshot.missing:
        return
    console.print("\n[yellow]Source files missing, skipped:[/yellow]")
    for path in snapshot.missing:
        console.print(f"  [yellow]•[/yellow] {path}")


def display_apply_result(applied: ApplyResult, console: Console) -> None:
    """Show failures and the overall apply summary."""
    if applied.failures:
        console.print("\n[red]Failed:[/red]")
        for outcome in applied.failures:
            console.print(f"  [red]✗[/red] {outcome.path} ({outcome.action.value}): {escape(outcome.error or '')}")
    if applied.backups:
        console.print(f"[dim]{pluralize(len(applied.backups), 'backup')} written (*.bak)[/dim]")
    console.print(applied.summary_text())
