"""Registry of managed files.

This is the single list consumed by snapshot building, reconciliation,
validation and uninstall. Paths are POSIX strings relative to both the source
package root and the target root.
"""

from enum import Enum
from typing import Dict, Iterable, List, Tuple

from pydantic import BaseModel


class Category(str, Enum):
    """Kind of managed file."""

    AGENT = "agent"
    PROMPT = "prompt"
    STEERING = "steering"
    HOOK = "hook"
    SKILL = "skill"


class ManagedFile(BaseModel, frozen=True):
    """One path the installer may install, update or remove."""

    category: Category
    path: str

    @property
    def executable(self) -> bool:
        """Hooks are installed with the executable bit set."""
        return self.category == Category.HOOK


AGENT_NAMES = (
    "prometheus",
    "atlas",
    "sisyphus",
    "omk-explorer",
    "omk-metis",
    "omk-researcher",
    "omk-reviewer",
    "omk-sisyphus-jr",
)

STEERING_NAMES = ("product", "conventions", "plan-format", "architecture")

HOOK_NAMES = (
    "agent-spawn",
    "pre-tool-use",
    "prometheus-read-guard",
    "prometheus-write-guard",
)

SKILL_NAMES = ("git-operations", "code-review", "frontend-ux")


def _build_catalog() -> Tuple[ManagedFile, ...]:
    entries: List[ManagedFile] = []
    entries += [ManagedFile(category=Category.AGENT, path=f"agents/{n}.json") for n in AGENT_NAMES]
    entries += [ManagedFile(category=Category.PROMPT, path=f"prompts/{n}.md") for n in AGENT_NAMES]
    entries += [
        ManagedFile(category=Category.STEERING, path=f"steering/omk/{n}.md") for n in STEERING_NAMES
    ]
    entries += [ManagedFile(category=Category.HOOK, path=f"hooks/{n}.sh") for n in HOOK_NAMES]
    entries += [ManagedFile(category=Category.SKILL, path=f"skills/{n}/SKILL.md") for n in SKILL_NAMES]
    return tuple(entries)


CATALOG: Tuple[ManagedFile, ...] = _build_catalog()

_BY_PATH: Dict[str, ManagedFile] = {entry.path: entry for entry in CATALOG}


def lookup(path: str) -> ManagedFile:
    """Get the catalog entry for a path.

    Paths recorded by an older manifest may no longer be in the catalog; they
    are categorized by their top-level directory.

    Raises:
        KeyError: If the path does not belong to any known category
    """
    entry = _BY_PATH.get(path)
    if entry is not None:
        return entry

    top = path.split("/", 1)[0]
    by_dir = {
        "agents": Category.AGENT,
        "prompts": Category.PROMPT,
        "steering": Category.STEERING,
        "hooks": Category.HOOK,
        "skills": Category.SKILL,
    }
    if top not in by_dir:
        raise KeyError(path)
    return ManagedFile(category=by_dir[top], path=path)


def is_executable(path: str) -> bool:
    """Check whether a managed path must carry the executable bit."""
    try:
        return lookup(path).executable
    except KeyError:
        return False


def paths(entries: Iterable[ManagedFile] = CATALOG) -> List[str]:
    """Get the relative paths of catalog entries, in catalog order."""
    return [entry.path for entry in entries]


def by_category(category: Category, entries: Iterable[ManagedFile] = CATALOG) -> List[ManagedFile]:
    """Get catalog entries of a single category."""
    return [entry for entry in entries if entry.category == category]
