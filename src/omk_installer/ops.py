"""Core operations for omk-installer.

Two-phase plan/apply, like every install run:

1. Plan: read the old manifest, snapshot the package, reconcile against the
   live target. Nothing on disk changes.
2. Apply: execute the plan, then write a manifest describing the state the
   target actually reached.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional
import logging
import os

from .apply import apply_actions
from .catalog import is_executable
from .config import InstallerConfig
from .constants import GITKEEP, RUNTIME_DIRS
from .core import (
    Action,
    ApplyResult,
    FileRecord,
    Manifest,
    ReconcileResult,
    SourceSnapshot,
)
from .errors import TargetRootError
from .manifest import (
    delete_manifest,
    load_manifest,
    new_manifest,
    read_manifest,
    save_manifest,
)
from .reconcile import reconcile
from .snapshot import build_snapshot, empty_snapshot, verify_source_root
from .storage import LocalTargetFS, TargetFS

logger = logging.getLogger(__name__)


# ============= Plans and Reports =============

@dataclass
class InstallPlan:
    """Everything needed to apply an install or update."""

    config: InstallerConfig
    old_manifest: Optional[Manifest]
    snapshot: SourceSnapshot
    result: ReconcileResult

    @property
    def is_fresh_install(self) -> bool:
        return self.old_manifest is None


@dataclass
class InstallReport:
    """Outcome of an install or update run."""

    plan: InstallPlan
    applied: Optional[ApplyResult] = None  # None on dry run
    manifest: Optional[Manifest] = None
    problems: List[str] = field(default_factory=list)  # Post-install validation

    @property
    def ok(self) -> bool:
        if self.applied is not None and not self.applied.ok:
            return False
        return not self.problems


@dataclass
class UninstallReport:
    """Outcome of an uninstall run."""

    manifest: Manifest
    result: ReconcileResult
    applied: Optional[ApplyResult] = None  # None on dry run
    manifest_removed: bool = False

    @property
    def ok(self) -> bool:
        return self.applied is None or self.applied.ok


# ============= Plan =============

def plan(config: InstallerConfig, fs: Optional[TargetFS] = None) -> InstallPlan:
    """Phase 1: classify every managed file without touching the target.

    A missing or corrupt manifest means a fresh install.

    Raises:
        SourceRootError: If the package tree is unusable
    """
    verify_source_root(config.source_root)

    old_manifest = read_manifest(config.target_root)
    snapshot = build_snapshot(config.source_root, config.version)
    result = reconcile(old_manifest, snapshot, fs or LocalTargetFS(config.target_root))

    return InstallPlan(
        config=config,
        old_manifest=old_manifest,
        snapshot=snapshot,
        result=result,
    )


# ============= Post-apply Manifest =============

def next_manifest_files(
    result: ReconcileResult,
    applied: ApplyResult,
    fs: TargetFS,
) -> Dict[str, FileRecord]:
    """Compute manifest entries describing the state the target reached.

    Successful install/replace and current files record the new baseline.
    Failed replace/remove and user-modified shipped files keep the old one.
    Removed files and modified files that are no longer shipped are dropped;
    the user owns those now. Anything absent from disk is pruned. Files that
    could not be inspected keep whatever record they had.
    """
    files: Dict[str, FileRecord] = {}

    for item in result.actions:
        if item.error is not None:
            if item.old is not None:
                files[item.path] = item.old
            continue

        outcome = applied.get(item.path)
        succeeded = outcome is not None and outcome.ok

        if item.action == Action.CURRENT:
            record = item.new
        elif item.action in (Action.INSTALL, Action.REPLACE):
            record = item.new if succeeded else item.old
        elif item.action == Action.REMOVE:
            record = None if succeeded else item.old
        elif item.shipped:
            record = item.old
        else:
            record = None

        if record is None:
            continue
        try:
            present = fs.exists(item.path)
        except (OSError, ValueError) as e:
            logger.warning("Cannot check %s: %s", item.path, e)
            present = True
        if present:
            files[item.path] = record

    return files


# ============= Runtime Directories =============

def ensure_runtime_dirs(target_root: Path) -> List[Path]:
    """Create plans/ and notepads/ with .gitkeep files.

    Returns:
        Paths of .gitkeep files that were created
    """
    created = []
    for name in RUNTIME_DIRS:
        directory = target_root / name
        directory.mkdir(parents=True, exist_ok=True)
        keep = directory / GITKEEP
        if not keep.exists():
            keep.write_text("")
            created.append(keep)
    return created


def _ensure_target_root(target_root: Path) -> None:
    try:
        target_root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise TargetRootError(target_root, str(e)) from e
    if not target_root.is_dir():
        raise TargetRootError(target_root, "not a directory")


# ============= Validation =============

def verify_installation(target_root: Path, snapshot: SourceSnapshot) -> List[str]:
    """Check post-install conditions.

    Every file the package ships must be present, hooks must be executable,
    and the runtime directories must exist.

    Returns:
        Human-readable problems (empty when the install is sound)
    """
    problems = []
    fs = LocalTargetFS(target_root)

    for path in sorted(snapshot.files):
        try:
            present = fs.exists(path)
            executable = present and os.access(fs.path(path), os.X_OK)
        except (OSError, ValueError) as e:
            problems.append(f"Cannot check {path}: {e}")
            continue
        if not present:
            problems.append(f"Missing: {path}")
        elif is_executable(path) and not executable:
            problems.append(f"Hook not executable: {path}")

    for name in RUNTIME_DIRS:
        keep = target_root / name / GITKEEP
        if not keep.exists():
            problems.append(f"Missing: {name}/{GITKEEP}")

    return problems


# ============= Install / Update =============

def install(config: InstallerConfig, install_plan: Optional[InstallPlan] = None) -> InstallReport:
    """Phase 2: apply a plan and record the resulting state.

    Args:
        config: Installer configuration
        install_plan: Plan from plan(); computed here when omitted

    Returns:
        InstallReport; on dry run only the plan is filled in

    Raises:
        SourceRootError: If the package tree is unusable
        TargetRootError: If the target root cannot be created
    """
    install_plan = install_plan or plan(config)
    report = InstallReport(plan=install_plan)

    if config.dry_run:
        return report

    _ensure_target_root(config.target_root)

    applied = apply_actions(install_plan.result, config.source_root, config.target_root)
    report.applied = applied

    created = ensure_runtime_dirs(config.target_root)
    for keep in created:
        logger.debug("Created %s", keep)

    fs = LocalTargetFS(config.target_root)
    files = next_manifest_files(install_plan.result, applied, fs)
    manifest = new_manifest(
        version=config.version,
        install_mode=config.install_mode,
        files=files,
        previous=install_plan.old_manifest,
    )
    report.manifest = save_manifest(config.target_root, manifest)

    report.problems = verify_installation(config.target_root, install_plan.snapshot)
    for problem in report.problems:
        logger.error(problem)

    return report


# ============= Uninstall =============

def _prune_empty_dirs(target_root: Path, paths: List[str]) -> None:
    """Remove directories left empty by removed files, deepest first."""
    candidates = set()
    for rel in paths:
        parent = Path(rel).parent
        while parent != Path("."):
            candidates.add(parent)
            parent = parent.parent

    for rel_dir in sorted(candidates, key=lambda p: len(p.parts), reverse=True):
        directory = target_root / rel_dir
        try:
            if directory.is_dir() and not any(directory.iterdir()):
                directory.rmdir()
                logger.debug("Removed empty directory %s", rel_dir)
        except OSError as e:
            logger.debug("Could not remove %s: %s", directory, e)


def uninstall_plan(config: InstallerConfig) -> UninstallReport:
    """Classify installed files against a package that ships nothing.

    Raises:
        ManifestError: If there is no readable manifest to uninstall from
    """
    manifest = load_manifest(config.target_root)
    result = reconcile(manifest, empty_snapshot(config.version), config.target_root)
    return UninstallReport(manifest=manifest, result=result)


def uninstall(config: InstallerConfig, report: Optional[UninstallReport] = None) -> UninstallReport:
    """Remove every installed file the user has not modified.

    Modified files are kept and reported as skipped. Backups, runtime
    directories and any non-managed content are left in place.

    Raises:
        ManifestError: If there is no readable manifest to uninstall from
    """
    report = report or uninstall_plan(config)
    if config.dry_run:
        return report

    report.applied = apply_actions(report.result, config.source_root, config.target_root)

    # Keep the manifest when something failed so the next run can retry
    if report.applied.ok:
        report.manifest_removed = delete_manifest(config.target_root)
    else:
        fs = LocalTargetFS(config.target_root)
        files = next_manifest_files(report.result, report.applied, fs)
        save_manifest(
            config.target_root,
            report.manifest.model_copy(update={"files": files}),
        )

    removed = [o.path for o in report.applied.outcomes if o.ok and o.action == Action.REMOVE]
    _prune_empty_dirs(config.target_root, removed)
    return report
