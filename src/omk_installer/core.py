"""Core data models for omk-installer.

Three-Way Reconciliation:
-------------------------
Each managed file has up to three states:

1. Old baseline: what the manifest says was installed last time
2. New baseline: what the incoming package would install
3. Live content: what is on disk right now

A file whose live content matches neither baseline was edited by the user and
is never overwritten or deleted. Everything else can be brought to the new
baseline safely, with a .bak written before any destructive change.
"""

from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ============= Records =============

class FileRecord(BaseModel):
    """Known state of one managed file: its digest and the package version."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    digest: str = Field(alias="hash")  # sha256:...
    version: str


class InstallMode(str, Enum):
    """Whether the target root is project-local or user-global."""

    LOCAL = "local"
    GLOBAL = "global"


class Manifest(BaseModel):
    """Installed-state record (stored in <target>/.omk-manifest.json)."""

    model_config = ConfigDict(populate_by_name=True)

    version: str
    installed_at: str = Field(alias="installedAt")
    updated_at: str = Field(alias="updatedAt")
    install_mode: InstallMode = Field(alias="installMode")
    files: Dict[str, FileRecord] = Field(default_factory=dict)

    def to_json_dict(self) -> dict:
        """Dump with on-disk key names."""
        return self.model_dump(mode="json", by_alias=True)


class SourceSnapshot(BaseModel):
    """What the incoming package version would place on disk."""

    version: str
    files: Dict[str, FileRecord] = Field(default_factory=dict)
    missing: List[str] = Field(default_factory=list)  # catalog paths absent from source


# ============= Reconciliation =============

class Action(str, Enum):
    """Reconciliation outcome for one managed file."""

    INSTALL = "install"
    REPLACE = "replace"
    CURRENT = "current"
    SKIP = "skip"
    REMOVE = "remove"


class FileAction(BaseModel):
    """Single classified file."""

    path: str
    action: Action
    old: Optional[FileRecord] = None  # From the previous manifest
    new: Optional[FileRecord] = None  # From the incoming snapshot
    disk_digest: Optional[str] = None  # None when absent on disk
    error: Optional[str] = None  # Set when the target file could not be inspected

    @property
    def shipped(self) -> bool:
        """Whether the incoming package still ships this file."""
        return self.new is not None

    @property
    def destructive(self) -> bool:
        """Whether applying this action overwrites or deletes existing content."""
        if self.action in (Action.REPLACE, Action.REMOVE):
            return True
        return self.action == Action.INSTALL and self.disk_digest is not None


class ReconcileResult(BaseModel):
    """Result of comparing old manifest, incoming snapshot and live target."""

    actions: List[FileAction] = Field(default_factory=list)

    def by_action(self, action: Action) -> List[FileAction]:
        """Get classified files with a given action, in classification order."""
        return [a for a in self.actions if a.action == action]

    def as_mapping(self) -> Dict[str, Action]:
        """Get the plain path -> action mapping."""
        return {a.path: a.action for a in self.actions}

    def get(self, path: str) -> Optional[FileAction]:
        for a in self.actions:
            if a.path == path:
                return a
        return None

    @property
    def summary(self) -> Dict[Action, int]:
        """Get summary counts by action."""
        counts = {action: 0 for action in Action}
        for a in self.actions:
            counts[a.action] += 1
        return counts

    @property
    def pending(self) -> List[FileAction]:
        """Files that the applier would mutate."""
        return [a for a in self.actions if a.action in (Action.INSTALL, Action.REPLACE, Action.REMOVE)]

    @property
    def skipped(self) -> List[FileAction]:
        return self.by_action(Action.SKIP)

    def has_destructive_changes(self) -> bool:
        """Check if applying would overwrite or delete existing content."""
        return any(a.destructive for a in self.actions)

    def is_up_to_date(self) -> bool:
        """Check if nothing needs to be applied."""
        return not self.pending


# ============= Apply =============

class FileOutcome(BaseModel):
    """Result of applying one FileAction."""

    path: str
    action: Action
    ok: bool = True
    error: Optional[str] = None
    backup: Optional[Path] = None  # .bak written before the change


class ApplyResult(BaseModel):
    """Per-file outcomes of one apply run."""

    outcomes: List[FileOutcome] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True when every file applied without error."""
        return all(o.ok for o in self.outcomes)

    @property
    def failures(self) -> List[FileOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def backups(self) -> List[Path]:
        return [o.backup for o in self.outcomes if o.backup is not None]

    def get(self, path: str) -> Optional[FileOutcome]:
        for o in self.outcomes:
            if o.path == path:
                return o
        return None

    def count(self, action: Action) -> int:
        """Count successful outcomes of a given action."""
        return sum(1 for o in self.outcomes if o.ok and o.action == action)

    def summary_text(self) -> str:
        """Get human-readable summary."""
        parts = [
            f"{self.count(Action.INSTALL)} installed",
            f"{self.count(Action.REPLACE)} updated",
            f"{self.count(Action.REMOVE)} removed",
        ]
        skipped = self.count(Action.SKIP)
        if skipped:
            parts.append(f"{skipped} skipped")
        if self.failures:
            parts.append(f"{len(self.failures)} failed")
        return ", ".join(parts)
