"""Hashing utilities for content digests.

Digests are the only equality test the installer uses to decide whether a
managed file changed. They are algorithm-prefixed so the manifest stays
self-describing.
"""

from pathlib import Path
import hashlib

DIGEST_ALGORITHM = "sha256"


def compute_digest(data: bytes) -> str:
    """Compute SHA256 digest of in-memory content.

    Args:
        data: Raw file bytes

    Returns:
        SHA256 digest in format "sha256:xxxx"
    """
    return f"{DIGEST_ALGORITHM}:{hashlib.sha256(data).hexdigest()}"


def compute_file_digest(path: Path) -> str:
    """Compute SHA256 hash of file contents.

    Simple byte-for-byte hashing - any change invalidates the digest.

    Args:
        path: Path to file to hash

    Returns:
        SHA256 digest in format "sha256:xxxx"
    """
    sha256 = hashlib.sha256()
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(8192), b""):
            sha256.update(chunk)
    return f"{DIGEST_ALGORITHM}:{sha256.hexdigest()}"


def is_valid_digest(value: str) -> bool:
    """Check that a digest string is a well-formed sha256 digest."""
    prefix = f"{DIGEST_ALGORITHM}:"
    if not value.startswith(prefix):
        return False
    hexpart = value[len(prefix):]
    return len(hexpart) == 64 and all(c in "0123456789abcdef" for c in hexpart)


__all__ = [
    "compute_digest",
    "compute_file_digest",
    "is_valid_digest",
]
