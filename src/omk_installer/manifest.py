"""Manifest store for installed files.

The manifest records, per managed file, the digest and package version that
was last installed. It lives at <target>/.omk-manifest.json and is the "old"
baseline for the next reconciliation.
"""

from datetime import datetime
from pathlib import Path
from typing import Dict, Optional
import json
import logging
import os
import tempfile

from pydantic import ValidationError

from .constants import MANIFEST_FILE
from .core import FileRecord, InstallMode, Manifest
from .errors import CorruptManifestError, ManifestError, ManifestNotFoundError
from .hashing import is_valid_digest
from .storage import safe_target
from .utils import get_iso_timestamp

logger = logging.getLogger(__name__)


def manifest_path(target_root: Path) -> Path:
    """Get path to the manifest file for a target root."""
    return Path(target_root) / MANIFEST_FILE


# ============= Atomic Write Helpers =============

def _atomic_write_text(path: Path, text: str) -> None:
    """Atomically write text to file with crash safety.

    1. Writes to temp file with fsync to ensure content is on disk
    2. Atomic rename to target path (appears all-at-once)
    3. Fsync parent directory to ensure rename is durable

    Directory fsync is best-effort; it is not supported on Windows.

    Args:
        path: Target file path
        text: Text content to write
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    # Create temp file in same directory
    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        delete=False,
        dir=path.parent,
        prefix=f".{path.name}.tmp-",
        suffix=""
    ) as f:
        f.write(text)
        f.flush()
        os.fsync(f.fileno())
        tmp = Path(f.name)

    try:
        os.replace(tmp, path)

        try:
            flags = os.O_RDONLY
            if hasattr(os, "O_DIRECTORY"):
                flags |= os.O_DIRECTORY

            dirfd = os.open(str(path.parent), flags)
            try:
                os.fsync(dirfd)
            finally:
                os.close(dirfd)
        except OSError:
            logger.debug("Directory fsync not supported for %s", path.parent)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


# ============= Load / Save =============

def _validate_entries(path: Path, manifest: Manifest) -> None:
    """Reject manifests whose file keys or digests could not have been written by us."""
    root = path.parent
    for rel_path, record in manifest.files.items():
        try:
            safe_target(root, rel_path)
        except ValueError as e:
            raise CorruptManifestError(path, str(e))
        if not is_valid_digest(record.digest):
            raise CorruptManifestError(path, f"invalid digest for {rel_path}: {record.digest!r}")


def load_manifest(target_root: Path) -> Manifest:
    """Load the manifest for a target root.

    Args:
        target_root: Installed tree root (e.g. ./.kiro)

    Returns:
        Parsed Manifest

    Raises:
        ManifestNotFoundError: If no manifest file exists
        CorruptManifestError: If the file exists but is not a well-formed manifest
    """
    path = manifest_path(target_root)
    if not path.is_file():
        raise ManifestNotFoundError(path)

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CorruptManifestError(path, str(e)) from e

    if not isinstance(data, dict):
        raise CorruptManifestError(path, "top-level value is not an object")

    try:
        manifest = Manifest.model_validate(data)
    except ValidationError as e:
        raise CorruptManifestError(path, f"{e.error_count()} schema error(s)") from e

    _validate_entries(path, manifest)
    return manifest


def read_manifest(target_root: Path) -> Optional[Manifest]:
    """Load the manifest, treating missing and corrupt files as absent.

    Used by install/update, where either case falls back to a fresh install.
    """
    try:
        return load_manifest(target_root)
    except ManifestNotFoundError:
        logger.debug("No manifest at %s; treating as fresh install", target_root)
        return None
    except CorruptManifestError as e:
        logger.warning("%s; treating as fresh install", e)
        return None


def new_manifest(
    version: str,
    install_mode: InstallMode,
    files: Dict[str, FileRecord],
    previous: Optional[Manifest] = None,
    now: Optional[datetime] = None,
) -> Manifest:
    """Build the manifest describing a completed install or update.

    installedAt is carried forward from the previous manifest; a fresh
    install stamps it with the current time.
    """
    timestamp = get_iso_timestamp(now)
    return Manifest(
        version=version,
        installed_at=previous.installed_at if previous else timestamp,
        updated_at=timestamp,
        install_mode=install_mode,
        files=dict(sorted(files.items())),
    )


def save_manifest(target_root: Path, manifest: Manifest, now: Optional[datetime] = None) -> Manifest:
    """Save manifest atomically, stamping updatedAt.

    Returns:
        The manifest as written
    """
    written = manifest.model_copy(update={"updated_at": get_iso_timestamp(now)})
    text = json.dumps(written.to_json_dict(), indent=2) + "\n"
    _atomic_write_text(manifest_path(target_root), text)
    logger.debug("Wrote manifest with %d file(s) to %s", len(written.files), target_root)
    return written


def delete_manifest(target_root: Path) -> bool:
    """Delete the manifest file.

    Returns:
        True if a manifest was removed
    """
    path = manifest_path(target_root)
    if not path.exists():
        return False
    path.unlink()
    return True


__all__ = [
    "ManifestError",
    "delete_manifest",
    "load_manifest",
    "manifest_path",
    "new_manifest",
    "read_manifest",
    "save_manifest",
]
