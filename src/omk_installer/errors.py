"""Custom exceptions for omk-installer.

Directory-scoped failures are raised and abort the run. File-scoped failures
during apply are not raised; they are recorded on the per-file outcome.
"""

from pathlib import Path


class InstallerError(RuntimeError):
    """Base class for all installer errors."""
    pass


# Source Errors
class SourceError(InstallerError):
    """Base class for source package errors."""
    pass


class SourceRootError(SourceError):
    """Source package root is missing or lacks the expected layout."""

    def __init__(self, source_root: Path, reason: str):
        self.source_root = source_root
        self.reason = reason
        super().__init__(
            f"Invalid source package at {source_root}: {reason}. "
            f"Are you running the installer from a valid Oh-My-Kiro package?"
        )


# Manifest Errors
class ManifestError(InstallerError):
    """Base class for manifest errors.

    Callers that install or update treat any ManifestError as a fresh install.
    """
    pass


class ManifestNotFoundError(ManifestError):
    """No manifest exists at the target root."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"Manifest not found at {path}")


class CorruptManifestError(ManifestError):
    """Manifest exists but is not a well-formed manifest document."""

    def __init__(self, path: Path, detail: str):
        self.path = path
        self.detail = detail
        super().__init__(f"Manifest at {path} is corrupt: {detail}")


# Target Errors
class TargetRootError(InstallerError):
    """Target root directory cannot be created or used."""

    def __init__(self, target_root: Path, detail: str):
        self.target_root = target_root
        super().__init__(f"Cannot use target directory {target_root}: {detail}")
