"""CLI for omk-installer."""

from pathlib import Path
from typing import Optional
import logging
import os
import shutil

import typer
from rich.console import Console
from rich.logging import RichHandler

from .config import InstallerConfig, resolve_config
from .display import (
    display_apply_result,
    display_manifest_header,
    display_missing_sources,
    display_plan,
    display_skipped,
)
from .errors import InstallerError, ManifestError
from .manifest import read_manifest
from .ops import install as ops_install
from .ops import plan as ops_plan
from .ops import uninstall as ops_uninstall
from .ops import uninstall_plan, verify_installation
from .snapshot import build_snapshot, verify_source_root


app = typer.Typer(help="""\
Install and update Oh-My-Kiro agents, prompts, steering docs, hooks and
skills into .kiro/. Files you edited locally are never overwritten or
deleted; replaced and removed files are backed up to *.bak.""")

console = Console()
err_console = Console(stderr=True)


GlobalOption = typer.Option(None, "--global/--local", help="Target ~/.kiro instead of ./.kiro")
SourceOption = typer.Option(None, "--source", help="Package .kiro directory to install from")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Show debug logging")


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose or os.environ.get("DEBUG") else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_time=False, show_path=False)],
        force=True,
    )


def _fail(message: str) -> None:
    err_console.print(f"[red]✗[/red] {message}")
    raise typer.Exit(1)


def _check_kiro_cli() -> None:
    """kiro-cli missing is a warning only; it may be installed later."""
    kiro_bin = shutil.which("kiro-cli")
    if kiro_bin:
        console.print(f"[green]✓[/green] kiro-cli found: {kiro_bin}")
    else:
        console.print("[yellow]⚠[/yellow] kiro-cli not found in PATH - Oh-My-Kiro requires Kiro to work.")
        console.print("[dim]Install Kiro first: https://kiro.dev[/dim]")


def _banner(title: str, config: InstallerConfig) -> None:
    console.print(f"\n[bold]  {title}[/bold]")
    console.print(f"  Target: [bold]{config.target_root}[/bold]\n")


@app.command()
def install(
    global_install: Optional[bool] = GlobalOption,
    force: bool = typer.Option(False, "--force", "-f", help="Don't ask before replacing or removing files"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would change"),
    source: Optional[Path] = SourceOption,
    verbose: bool = VerboseOption,
):
    """Install or update Oh-My-Kiro.

    With no manifest in the target this is a fresh install; otherwise files
    are reconciled against what was installed last time.

    Examples:
        omk install                  # Install into ./.kiro
        omk install --global         # Install into ~/.kiro
        omk install --dry-run        # Preview
    """
    _configure_logging(verbose)
    config = resolve_config(global_install=global_install, force=force, dry_run=dry_run, source=source)
    _banner("Oh-My-Kiro Installer", config)
    _check_kiro_cli()

    try:
        install_plan = ops_plan(config)
    except InstallerError as e:
        _fail(str(e))

    console.print(f"[green]✓[/green] Source directory verified: {config.source_root}")
    display_manifest_header(install_plan.old_manifest, console)
    display_plan(install_plan.result, console)
    display_missing_sources(install_plan.snapshot, console)
    display_skipped(install_plan.result, console)

    if dry_run:
        console.print("\n[dim]Dry run - no changes made[/dim]")
        return

    if install_plan.result.has_destructive_changes() and not force:
        console.print("\n  Existing files will be backed up to *.bak before overwriting or removal.")
        console.print("  Use --force to skip this prompt.\n")
        if not typer.confirm("  Continue?", default=False):
            console.print("Installation cancelled.")
            raise typer.Exit(0)

    try:
        report = ops_install(config, install_plan)
    except InstallerError as e:
        _fail(str(e))

    console.print()
    display_apply_result(report.applied, console)

    if report.problems:
        err_console.print("\n[red]Validation failed:[/red]")
        for problem in report.problems:
            err_console.print(f"  [red]✗[/red] {problem}")

    if not report.ok:
        _fail("Installation completed with errors.")

    console.print("\n[green]✓[/green] [bold]Installation complete![/bold]")
    console.print("\n[bold]  Next steps:[/bold]")
    if config.is_global:
        console.print("  1. Open any project in Kiro - Oh-My-Kiro agents are available globally.")
    else:
        console.print("  1. Open this project in Kiro - Oh-My-Kiro agents are ready to use.")
    console.print("  2. Start a conversation with the [bold]Prometheus[/bold] agent for planning.")
    console.print("  3. Use [bold]Sisyphus[/bold] for execution or [bold]Atlas[/bold] for exploration.\n")


@app.command()
def status(
    global_install: Optional[bool] = GlobalOption,
    source: Optional[Path] = SourceOption,
    verbose: bool = VerboseOption,
):
    """Show what an install would change, without changing anything."""
    _configure_logging(verbose)
    config = resolve_config(global_install=global_install, dry_run=True, source=source)

    try:
        install_plan = ops_plan(config)
    except InstallerError as e:
        _fail(str(e))

    console.print(f"[bold]Target:[/bold] {config.target_root}")
    display_manifest_header(install_plan.old_manifest, console)
    display_plan(install_plan.result, console, show_current=True)
    display_missing_sources(install_plan.snapshot, console)
    display_skipped(install_plan.result, console)

    if install_plan.result.is_up_to_date():
        console.print("\n[green]✓[/green] Everything up to date")


@app.command()
def uninstall(
    global_install: Optional[bool] = GlobalOption,
    force: bool = typer.Option(False, "--force", "-f", help="Don't ask for confirmation"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be removed"),
    verbose: bool = VerboseOption,
):
    """Remove installed files that were not modified locally.

    Modified files, *.bak backups, plans/ and notepads/ are kept.
    """
    _configure_logging(verbose)
    config = resolve_config(global_install=global_install, force=force, dry_run=dry_run)
    _banner("Oh-My-Kiro Uninstaller", config)

    try:
        report = uninstall_plan(config)
    except ManifestError as e:
        err_console.print(f"[red]✗[/red] {e}")
        err_console.print("[dim]Uninstall only removes files recorded in the manifest. "
                          "Run 'omk install' once to recreate it.[/dim]")
        raise typer.Exit(1)

    display_plan(report.result, console)
    display_skipped(report.result, console)

    if dry_run:
        console.print("\n[dim]Dry run - no changes made[/dim]")
        return

    if report.result.pending and not force:
        if not typer.confirm("\n  Remove these files?", default=False):
            console.print("Uninstall cancelled.")
            raise typer.Exit(0)

    report = ops_uninstall(config, report)
    console.print()
    display_apply_result(report.applied, console)

    if not report.ok:
        _fail("Uninstall completed with errors.")
    console.print("[green]✓[/green] Uninstall complete")


@app.command()
def verify(
    global_install: Optional[bool] = GlobalOption,
    source: Optional[Path] = SourceOption,
    verbose: bool = VerboseOption,
):
    """Check that every shipped file is installed and hooks are executable."""
    _configure_logging(verbose)
    config = resolve_config(global_install=global_install, source=source)

    try:
        verify_source_root(config.source_root)
    except InstallerError as e:
        _fail(str(e))

    snapshot = build_snapshot(config.source_root, config.version)
    display_manifest_header(read_manifest(config.target_root), console)
    problems = verify_installation(config.target_root, snapshot)

    if problems:
        for problem in problems:
            err_console.print(f"  [red]✗[/red] {problem}")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] {len(snapshot.files)} managed files present")


def main():
    """Entry point for CLI."""
    app()


if __name__ == "__main__":
    main()
