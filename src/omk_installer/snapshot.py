"""Incoming package snapshot with digest computation."""

from pathlib import Path
from typing import Dict, Iterable, List
import logging

from .catalog import CATALOG, ManagedFile
from .constants import REQUIRED_SOURCE_DIRS
from .core import FileRecord, SourceSnapshot
from .errors import SourceRootError
from .hashing import compute_file_digest

logger = logging.getLogger(__name__)


def verify_source_root(source_root: Path) -> None:
    """Check that the source package root exists with the expected layout.

    Raises:
        SourceRootError: If the root or a required subdirectory is missing
    """
    if not source_root.is_dir():
        raise SourceRootError(source_root, "directory not found")

    missing = [d for d in REQUIRED_SOURCE_DIRS if not (source_root / d).is_dir()]
    if missing:
        dirs = ", ".join(f"{d}/" for d in missing)
        raise SourceRootError(source_root, f"missing expected subdirectories ({dirs})")


def build_snapshot(
    source_root: Path,
    version: str,
    catalog: Iterable[ManagedFile] = CATALOG,
) -> SourceSnapshot:
    """Compute what the package at source_root would install.

    Only the catalog is consulted; the target directory and any prior
    manifest play no part. Catalog paths absent from the source are left
    out of ``files`` and reported in ``missing``.

    Args:
        source_root: Package tree (the directory holding agents/, prompts/, ...)
        version: Package version recorded on every file
        catalog: Managed files to consider

    Returns:
        SourceSnapshot keyed by root-relative POSIX path
    """
    files: Dict[str, FileRecord] = {}
    missing: List[str] = []

    for entry in catalog:
        path = source_root / entry.path
        if not path.is_file():
            logger.warning("Source file missing, skipping: %s", path)
            missing.append(entry.path)
            continue
        try:
            digest = compute_file_digest(path)
        except OSError as e:
            logger.warning("Source file unreadable, skipping: %s (%s)", path, e)
            missing.append(entry.path)
            continue
        files[entry.path] = FileRecord(digest=digest, version=version)

    return SourceSnapshot(version=version, files=files, missing=missing)


def empty_snapshot(version: str) -> SourceSnapshot:
    """Snapshot of a package that ships nothing (used for uninstall)."""
    return SourceSnapshot(version=version)
