"""Target filesystem access used by reconciliation and apply."""

from pathlib import Path
from typing import Union

from .base import TargetFS
from .local import LocalTargetFS, safe_target


def as_target_fs(target: Union[Path, str, TargetFS]) -> TargetFS:
    """Wrap a plain path in LocalTargetFS; pass capabilities through."""
    if isinstance(target, (str, Path)):
        return LocalTargetFS(Path(target))
    return target


__all__ = ["TargetFS", "LocalTargetFS", "as_target_fs", "safe_target"]
