"""Oh-My-Kiro installer: manifest-tracked sync of agent files into .kiro/."""

from .constants import OMK_VERSION

__version__ = OMK_VERSION
