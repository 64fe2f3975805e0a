"""Shared test fixtures and utilities."""

from pathlib import Path
import pytest

from omk_installer.config import InstallerConfig
from omk_installer.constants import CONFIG_ENV, SOURCE_DIR_ENV
from omk_installer.core import InstallMode

from tests.fixtures.sample_package import make_package


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of config resolution."""
    monkeypatch.delenv(SOURCE_DIR_ENV, raising=False)
    monkeypatch.delenv(CONFIG_ENV, raising=False)
    monkeypatch.delenv("DEBUG", raising=False)


@pytest.fixture
def source_root(tmp_path):
    """A complete v1.0.0 package tree."""
    return make_package(tmp_path / "package" / ".kiro")


@pytest.fixture
def target_root(tmp_path):
    """Target .kiro directory inside a project (not created yet)."""
    return tmp_path / "project" / ".kiro"


@pytest.fixture
def config(source_root, target_root):
    """Installer config wired to the sample package and target."""
    return InstallerConfig(
        source_root=source_root,
        target_root=target_root,
        install_mode=InstallMode.LOCAL,
        force=True,
        version="1.0.0",
    )


@pytest.fixture
def write_file():
    """Factory fixture to write files under a root."""
    def _write(root: Path, path: str, content: str = "test content") -> Path:
        file_path = root / path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content)
        return file_path
    return _write
