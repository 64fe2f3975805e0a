"""Apply reconciled actions to the target directory.

Every mutation of existing content is preceded by a sibling backup at
<path>.bak. Files are applied independently: an OSError on one file is
recorded on its outcome and the remaining files are still processed.
"""

from pathlib import Path
from typing import Optional
import logging
import shutil

from .catalog import is_executable
from .constants import BACKUP_SUFFIX, HOOK_MODE
from .core import Action, ApplyResult, FileAction, FileOutcome, ReconcileResult
from .storage import safe_target

logger = logging.getLogger(__name__)


def backup_path(path: Path) -> Path:
    """Get the backup location for a target file."""
    return path.with_name(path.name + BACKUP_SUFFIX)


def _backup(path: Path) -> Optional[Path]:
    """Copy path to path.bak if it has content on disk, overwriting any prior backup."""
    if not path.is_file():
        return None
    bak = backup_path(path)
    shutil.copy2(path, bak)
    logger.debug("Backed up %s -> %s", path, bak.name)
    return bak


def _copy_in(src: Path, dst: Path, executable: bool) -> None:
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copyfile(src, dst)
    if executable:
        dst.chmod(HOOK_MODE)


def apply_action(item: FileAction, source_root: Path, target_root: Path) -> FileOutcome:
    """Apply one classified file.

    A SKIP whose target could not be inspected is returned as a failed
    outcome; the file itself is left alone.

    Raises:
        OSError: On any filesystem failure (caught by apply_actions)
        ValueError: If the path is unsafe (caught by apply_actions)
    """
    outcome = FileOutcome(path=item.path, action=item.action)

    if item.action == Action.SKIP:
        if item.error is not None:
            outcome.ok = False
            outcome.error = item.error
        elif item.shipped:
            logger.warning("Skipping %s: modified locally, not overwritten", item.path)
        else:
            logger.warning("Keeping %s: no longer shipped but modified locally", item.path)
        return outcome

    if item.action == Action.CURRENT:
        return outcome

    dst = safe_target(target_root, item.path)

    if item.action in (Action.INSTALL, Action.REPLACE):
        src = safe_target(source_root, item.path)
        # Install over pre-existing content (no manifest yet) also gets a backup
        outcome.backup = _backup(dst)
        _copy_in(src, dst, is_executable(item.path))
        logger.debug("%s %s", "Installed" if item.action == Action.INSTALL else "Replaced", item.path)

    elif item.action == Action.REMOVE:
        outcome.backup = _backup(dst)
        dst.unlink()
        logger.debug("Removed %s", item.path)

    return outcome


def apply_actions(result: ReconcileResult, source_root: Path, target_root: Path) -> ApplyResult:
    """Execute all classified actions against the filesystem.

    Args:
        result: Reconciliation result to apply
        source_root: Package tree providing new content
        target_root: Installed tree to mutate

    Returns:
        ApplyResult with one outcome per classified file
    """
    outcomes = []
    for item in result.actions:
        try:
            outcomes.append(apply_action(item, source_root, target_root))
        except (OSError, ValueError) as e:
            logger.error("Failed to %s %s: %s", item.action.value, item.path, e)
            outcomes.append(FileOutcome(
                path=item.path,
                action=item.action,
                ok=False,
                error=str(e),
            ))
    return ApplyResult(outcomes=outcomes)
