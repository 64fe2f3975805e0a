"""Local disk implementation of the target filesystem capability."""

from pathlib import Path
from typing import Optional

from ..hashing import compute_file_digest


def safe_target(root: Path, rel_path: str) -> Path:
    """Validate path is safe and within the target root.

    Args:
        root: Target root directory
        rel_path: Root-relative path (from the catalog or a manifest)

    Returns:
        Absolute path under root

    Raises:
        ValueError: If path is unsafe or escapes root
    """
    if not rel_path or not rel_path.strip():
        raise ValueError("Unsafe path: empty path")

    # Check both forward and backslash for cross-platform safety
    if (rel_path.startswith(("/", "\\")) or
        ".." in Path(rel_path).parts or
        ".." in rel_path.split("\\") or
        ".." in rel_path.split("/")):
        raise ValueError(f"Unsafe path: {rel_path}")

    target = (root / rel_path).resolve()
    try:
        target.relative_to(root.resolve())
    except ValueError:
        raise ValueError(f"Path escapes target root: {rel_path}")

    return root / rel_path


class LocalTargetFS:
    """
    Target root on the local filesystem.

    The root does not need to exist; every path under a missing root is
    reported as absent.
    """

    def __init__(self, root: Path):
        self.root = Path(root)

    def path(self, rel_path: str) -> Path:
        """Get absolute path for a root-relative path."""
        return safe_target(self.root, rel_path)

    def exists(self, path: str) -> bool:
        return self.path(path).is_file()

    def read_bytes(self, path: str) -> bytes:
        return self.path(path).read_bytes()

    def digest_of(self, path: str) -> Optional[str]:
        target = self.path(path)
        if not target.is_file():
            return None
        return compute_file_digest(target)

    def __repr__(self) -> str:
        return f"LocalTargetFS({str(self.root)!r})"
