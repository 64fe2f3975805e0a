"""Installer configuration helpers."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional
import logging
import os

import yaml

from .constants import (
    CONFIG_ENV,
    KIRO_DIR,
    OMK_VERSION,
    SOURCE_DIR_ENV,
    USER_CONFIG_PATH,
)
from .core import InstallMode

logger = logging.getLogger(__name__)


@dataclass
class UserDefaults:
    """Defaults read from ~/.omk/config.yaml."""

    source_root: Optional[Path] = None
    install_mode: InstallMode = InstallMode.LOCAL


@dataclass
class InstallerConfig:
    """Everything an install, update or uninstall run needs."""

    source_root: Path
    target_root: Path
    install_mode: InstallMode = InstallMode.LOCAL
    force: bool = False  # skip confirmation prompts
    dry_run: bool = False
    version: str = field(default=OMK_VERSION)

    @property
    def is_global(self) -> bool:
        return self.install_mode == InstallMode.GLOBAL


def default_source_root() -> Path:
    """Package payload shipped alongside the installer."""
    return Path(__file__).resolve().parent / "payload" / KIRO_DIR


def user_config_path(env: Mapping[str, str], home: Path) -> Path:
    """Get the user defaults file location (OMK_CONFIG overrides)."""
    override = env.get(CONFIG_ENV)
    if override:
        return Path(override).expanduser()
    return home / USER_CONFIG_PATH


def load_user_defaults(path: Path) -> UserDefaults:
    """Load user defaults from YAML if present.

    Unreadable or malformed files fall back to built-in defaults.
    """
    if not path.exists():
        return UserDefaults()

    try:
        data = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        return UserDefaults()

    if not isinstance(data, dict):
        logger.warning("Ignoring config %s: expected a mapping", path)
        return UserDefaults()

    source = data.get("source_root")
    mode = data.get("install_mode", InstallMode.LOCAL.value)
    try:
        install_mode = InstallMode(mode)
    except ValueError:
        logger.warning("Ignoring invalid install_mode %r in %s", mode, path)
        install_mode = InstallMode.LOCAL

    return UserDefaults(
        source_root=Path(source).expanduser() if source else None,
        install_mode=install_mode,
    )


def target_root_for(install_mode: InstallMode, cwd: Path, home: Path) -> Path:
    """Global installs go to ~/.kiro, local installs to ./.kiro."""
    if install_mode == InstallMode.GLOBAL:
        return home / KIRO_DIR
    return cwd / KIRO_DIR


def resolve_config(
    global_install: Optional[bool] = None,
    force: bool = False,
    dry_run: bool = False,
    source: Optional[Path] = None,
    target: Optional[Path] = None,
    cwd: Optional[Path] = None,
    home: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
) -> InstallerConfig:
    """Build an InstallerConfig from explicit values, environment and user defaults.

    Precedence for the source root: explicit value, OMK_SOURCE_DIR, config
    file, bundled payload. Install mode: explicit flag, then config file.
    """
    env = os.environ if env is None else env
    cwd = cwd or Path.cwd()
    home = home or Path.home()

    defaults = load_user_defaults(user_config_path(env, home))

    if source is not None:
        source_root = Path(source)
    elif env.get(SOURCE_DIR_ENV):
        source_root = Path(env[SOURCE_DIR_ENV]).expanduser()
    elif defaults.source_root is not None:
        source_root = defaults.source_root
    else:
        source_root = default_source_root()

    if global_install is None:
        install_mode = defaults.install_mode
    else:
        install_mode = InstallMode.GLOBAL if global_install else InstallMode.LOCAL

    target_root = Path(target) if target is not None else target_root_for(install_mode, cwd, home)

    return InstallerConfig(
        source_root=source_root,
        target_root=target_root,
        install_mode=install_mode,
        force=force,
        dry_run=dry_run,
    )
