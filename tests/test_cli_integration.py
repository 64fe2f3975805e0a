"""Integration tests for CLI commands that verify real workflows."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from omk_installer.apply import backup_path
from omk_installer.catalog import CATALOG
from omk_installer.cli import app
from omk_installer.constants import OMK_VERSION
from omk_installer.manifest import load_manifest, manifest_path

from tests.fixtures.sample_package import make_package


# ========== Fixtures ==========

@pytest.fixture
def isolated_home(tmp_path, monkeypatch):
    """Isolate HOME so global installs and user config stay in tmp."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))  # Windows
    monkeypatch.setattr(Path, "home", lambda: home)
    return home


@pytest.fixture
def project(tmp_path, monkeypatch, isolated_home, source_root):
    """Work inside an empty project with OMK_SOURCE_DIR set."""
    project_dir = tmp_path / "project"
    project_dir.mkdir(exist_ok=True)
    monkeypatch.chdir(project_dir)
    monkeypatch.setenv("OMK_SOURCE_DIR", str(source_root))
    return project_dir


@pytest.fixture
def runner():
    """Create a CliRunner for in-process testing."""
    return CliRunner()


@pytest.fixture
def upgrade(tmp_path, monkeypatch):
    """Point OMK_SOURCE_DIR at a v2 package."""
    def _upgrade(**kwargs):
        source = make_package(tmp_path / "package-v2" / ".kiro", version="2.0.0", **kwargs)
        monkeypatch.setenv("OMK_SOURCE_DIR", str(source))
        return source
    return _upgrade


# ========== Install ==========

class TestInstallCommand:

    def test_fresh_install(self, runner, project):
        result = runner.invoke(app, ["install", "--force"])

        assert result.exit_code == 0, result.output
        assert "Installation complete" in result.output
        target = project / ".kiro"
        for entry in CATALOG:
            assert (target / entry.path).exists()
        assert manifest_path(target).exists()

    def test_global_install(self, runner, project, isolated_home):
        result = runner.invoke(app, ["install", "--global", "--force"])

        assert result.exit_code == 0, result.output
        assert load_manifest(isolated_home / ".kiro").install_mode.value == "global"
        assert not (project / ".kiro").exists()

    def test_dry_run(self, runner, project):
        result = runner.invoke(app, ["install", "--dry-run"])

        assert result.exit_code == 0, result.output
        assert "Dry run" in result.output
        assert not (project / ".kiro").exists()

    def test_fresh_install_needs_no_confirmation(self, runner, project):
        """Nothing exists to overwrite, so no prompt."""
        result = runner.invoke(app, ["install"])

        assert result.exit_code == 0, result.output
        assert "Continue?" not in result.output

    def test_upgrade_prompt_declined(self, runner, project, upgrade):
        runner.invoke(app, ["install", "--force"])
        before = load_manifest(project / ".kiro")
        upgrade()

        result = runner.invoke(app, ["install"], input="n\n")

        assert result.exit_code == 0
        assert "cancelled" in result.output
        assert load_manifest(project / ".kiro") == before

    def test_upgrade_prompt_accepted(self, runner, project, upgrade):
        runner.invoke(app, ["install", "--force"])
        upgrade()

        result = runner.invoke(app, ["install"], input="y\n")

        assert result.exit_code == 0, result.output
        atlas = project / ".kiro" / "agents" / "atlas.json"
        assert "2.0.0" in atlas.read_text()
        assert backup_path(atlas).exists()

    def test_user_edit_is_reported_not_failed(self, runner, project, upgrade):
        runner.invoke(app, ["install", "--force"])
        edited = project / ".kiro" / "hooks" / "pre-tool-use.sh"
        edited.write_text("#!/bin/sh\n# mine\n")
        upgrade()

        result = runner.invoke(app, ["install", "--force"])

        assert result.exit_code == 0, result.output
        assert "hooks/pre-tool-use.sh" in result.output
        assert "Modified locally" in result.output
        assert edited.read_text() == "#!/bin/sh\n# mine\n"

    def test_missing_source_files_are_warned(self, runner, project, upgrade):
        upgrade(omit=["skills/code-review/SKILL.md"])

        result = runner.invoke(app, ["install", "--force"])

        assert result.exit_code == 0, result.output
        assert "Source files missing" in result.output
        assert "skills/code-review/SKILL.md" in result.output

    def test_symlinked_agents_dir_is_reported(self, runner, project, tmp_path):
        outside = tmp_path / "dotfiles" / "agents"
        outside.mkdir(parents=True)
        (outside / "atlas.json").write_text("mine")
        (project / ".kiro").mkdir()
        (project / ".kiro" / "agents").symlink_to(outside)

        result = runner.invoke(app, ["install", "--force"])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "agents/atlas.json" in result.output
        assert "completed with errors" in result.output
        assert (outside / "atlas.json").read_text() == "mine"
        assert (project / ".kiro" / "prompts" / "atlas.md").exists()

    def test_invalid_source_exits_nonzero(self, runner, project, tmp_path):
        result = runner.invoke(app, ["install", "--force", "--source", str(tmp_path / "nowhere")])

        assert result.exit_code == 1
        assert "Invalid source package" in result.output
        assert not (project / ".kiro").exists()


# ========== Status / Verify ==========

class TestStatusCommand:

    def test_status_after_install(self, runner, project):
        runner.invoke(app, ["install", "--force"])

        result = runner.invoke(app, ["status"])

        assert result.exit_code == 0, result.output
        assert "Everything up to date" in result.output
        assert f"v{OMK_VERSION}" in result.output

    def test_status_before_install(self, runner, project):
        result = runner.invoke(app, ["status"])

        assert result.exit_code == 0, result.output
        assert "fresh install" in result.output
        assert f"{len(CATALOG)} to install" in result.output

    def test_status_with_unreadable_target(self, runner, project, tmp_path):
        outside = tmp_path / "dotfiles" / "agents"
        outside.mkdir(parents=True)
        (project / ".kiro").mkdir()
        (project / ".kiro" / "agents").symlink_to(outside)

        result = runner.invoke(app, ["status"])

        assert result.exit_code == 0, result.output
        assert "left untouched" in result.output
        assert "agents/prometheus.json" in result.output


class TestVerifyCommand:

    def test_verify_clean(self, runner, project):
        runner.invoke(app, ["install", "--force"])

        result = runner.invoke(app, ["verify"])

        assert result.exit_code == 0, result.output
        assert f"{len(CATALOG)} managed files present" in result.output

    def test_verify_missing_file(self, runner, project):
        runner.invoke(app, ["install", "--force"])
        (project / ".kiro" / "agents" / "prometheus.json").unlink()

        result = runner.invoke(app, ["verify"])

        assert result.exit_code == 1
        assert "agents/prometheus.json" in result.output


# ========== Uninstall ==========

class TestUninstallCommand:

    def test_uninstall_without_manifest(self, runner, project):
        result = runner.invoke(app, ["uninstall", "--force"])

        assert result.exit_code == 1
        assert "Manifest not found" in result.output

    def test_uninstall(self, runner, project):
        runner.invoke(app, ["install", "--force"])
        kept = project / ".kiro" / "prompts" / "atlas.md"
        kept.write_text("mine")

        result = runner.invoke(app, ["uninstall", "--force"])

        assert result.exit_code == 0, result.output
        assert "Uninstall complete" in result.output
        assert kept.read_text() == "mine"
        assert not (project / ".kiro" / "agents" / "atlas.json").exists()
        assert not manifest_path(project / ".kiro").exists()

    def test_uninstall_prompt_declined(self, runner, project):
        runner.invoke(app, ["install", "--force"])

        result = runner.invoke(app, ["uninstall"], input="n\n")

        assert result.exit_code == 0
        assert (project / ".kiro" / "agents" / "atlas.json").exists()

    def test_uninstall_dry_run(self, runner, project):
        runner.invoke(app, ["install", "--force"])

        result = runner.invoke(app, ["uninstall", "--dry-run"])

        assert result.exit_code == 0, result.output
        assert f"{len(CATALOG)} to remove" in result.output
        assert manifest_path(project / ".kiro").exists()
