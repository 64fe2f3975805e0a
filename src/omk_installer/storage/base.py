"""Base protocol for read access to a target directory."""

from typing import Optional, Protocol


class TargetFS(Protocol):
    """
    Read-only view of a target root used during reconciliation.

    Paths are POSIX strings relative to the root. Implementations must not
    cache digests; every call reflects the current content.
    """

    def exists(self, path: str) -> bool:
        """
        Check if a regular file exists at the path.

        Args:
            path: Root-relative path

        Returns:
            True if a file is present
        """
        ...

    def read_bytes(self, path: str) -> bytes:
        """
        Read full file content.

        Args:
            path: Root-relative path

        Returns:
            File bytes
        """
        ...

    def digest_of(self, path: str) -> Optional[str]:
        """
        Compute the content digest of a file.

        Args:
            path: Root-relative path

        Returns:
            "sha256:..." digest, or None if the file is absent
        """
        ...
