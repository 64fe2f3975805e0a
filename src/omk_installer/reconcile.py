"""Reconciliation logic - three-way classification of managed files."""

from pathlib import Path
from typing import Optional, Tuple, Union
import logging

from .core import (
    Action,
    FileAction,
    Manifest,
    ReconcileResult,
    SourceSnapshot,
)
from .storage import TargetFS, as_target_fs

logger = logging.getLogger(__name__)


def _inspect(fs: TargetFS, path: str) -> Tuple[Optional[str], Optional[str]]:
    """Get (digest, error) for a target path.

    A path that escapes the root or cannot be read is reported, not raised,
    so one bad file never stops the rest from being classified.
    """
    try:
        return fs.digest_of(path), None
    except (OSError, ValueError) as e:
        logger.warning("Cannot inspect %s: %s", path, e)
        return None, str(e)


def reconcile(
    old_manifest: Optional[Manifest],
    snapshot: SourceSnapshot,
    target: Union[Path, TargetFS],
) -> ReconcileResult:
    """
    Classify every managed file against the old and new baselines.

    Args:
        old_manifest: Manifest from the previous install, or None for a fresh install.
        snapshot: What the incoming package would install.
        target: Target root, or a TargetFS over it.

    Returns:
        ReconcileResult with one FileAction per classified path. Paths that
        are no longer shipped and already absent from disk get no entry.
        Paths that could not be inspected are SKIP with ``error`` set.

    Note:
        For shipped files the live digest is compared to the new baseline
        before the old one, so content that already matches the incoming
        version is CURRENT even if it also differs from the old baseline.
    """
    fs = as_target_fs(target)
    old_files = old_manifest.files if old_manifest else {}
    actions = []

    # Files the incoming package ships
    for path in sorted(snapshot.files):
        new = snapshot.files[path]
        old = old_files.get(path)
        disk_digest, error = _inspect(fs, path)

        if error is not None:
            # Unknown content is never overwritten
            action = Action.SKIP
        elif old is None:
            # Never installed, or manifest predates this file
            action = Action.INSTALL
        elif disk_digest is None:
            # Tracked but missing - treat as new
            action = Action.INSTALL
        elif disk_digest == new.digest:
            action = Action.CURRENT
        elif disk_digest == old.digest:
            action = Action.REPLACE
        else:
            # Matches neither baseline: user edited
            action = Action.SKIP

        logger.debug("%s: %s", path, action.value)
        actions.append(FileAction(
            path=path,
            action=action,
            old=old,
            new=new,
            disk_digest=disk_digest,
            error=error,
        ))

    # Files the package no longer ships
    for path in sorted(set(old_files) - set(snapshot.files)):
        old = old_files[path]
        disk_digest, error = _inspect(fs, path)

        if error is None and disk_digest is None:
            # Already gone
            logger.debug("%s: retired and absent", path)
            continue

        if error is None and disk_digest == old.digest:
            action = Action.REMOVE
        else:
            action = Action.SKIP

        logger.debug("%s: %s (retired)", path, action.value)
        actions.append(FileAction(
            path=path,
            action=action,
            old=old,
            new=None,
            disk_digest=disk_digest,
            error=error,
        ))

    return ReconcileResult(actions=actions)
