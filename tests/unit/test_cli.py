"""Tests for the autoschema command line."""

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog
from typer.testing import CliRunner

from autoschema import __version__
from autoschema.cli import GITIGNORE_CONTENT, app, configure_logging
from autoschema.config import DEFAULT_CONFIG_TEMPLATE

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"
SAMPLE_APP_DIR = FIXTURES_DIR / "sample_app"

runner = CliRunner()


@pytest.fixture(autouse=True)
def uncached_loggers() -> Iterator[None]:
    # Each invocation swaps stderr, so loggers must not hold on to the first one.
    structlog.configure(cache_logger_on_first_use=False)
    yield
    configure_logging(logging.INFO)


def _write_config(tmp_path: Path, models_dir: Path = SAMPLE_APP_DIR / "models") -> Path:
    config = tmp_path / "autoschema.toml"
    config.write_text(
        f"""\
[output]
path = "types"

[models]
directories = ["{models_dir.as_posix()}"]
package_root = "{FIXTURES_DIR.as_posix()}"
namespaces = ["sample_app.models"]

[requests]
directories = ["{(SAMPLE_APP_DIR / "requests").as_posix()}"]

[watch]
extra_directories = []
"""
    )
    return config


class TestVersion:
    def test_prints_version(self) -> None:
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert f"autoschema {__version__}" in result.output


class TestInit:
    """Tests for the init command."""

    def test_writes_config_and_output_directory(self, tmp_path: Path) -> None:
        config = tmp_path / "autoschema.toml"

        result = runner.invoke(app, ["init", "--config", str(config)])

        assert result.exit_code == 0
        assert config.read_text() == DEFAULT_CONFIG_TEMPLATE
        output_dir = tmp_path / "frontend" / "src" / "types"
        assert output_dir.is_dir()
        assert (output_dir / ".gitignore").read_text() == GITIGNORE_CONTENT
        assert f"Wrote {config}" in result.output

    def test_refuses_to_overwrite(self, tmp_path: Path) -> None:
        config = tmp_path / "autoschema.toml"
        config.write_text("# mine\n")

        result = runner.invoke(app, ["init", "--config", str(config)])

        assert result.exit_code == 1
        assert config.read_text() == "# mine\n"
        assert "--force" in result.output

    def test_force_overwrites(self, tmp_path: Path) -> None:
        config = tmp_path / "autoschema.toml"
        config.write_text("# mine\n")

        result = runner.invoke(app, ["init", "--force", "--config", str(config)])

        assert result.exit_code == 0
        assert config.read_text() == DEFAULT_CONFIG_TEMPLATE

    def test_keeps_existing_gitignore(self, tmp_path: Path) -> None:
        output_dir = tmp_path / "frontend" / "src" / "types"
        output_dir.mkdir(parents=True)
        (output_dir / ".gitignore").write_text("custom\n")

        result = runner.invoke(app, ["init", "--config", str(tmp_path / "autoschema.toml")])

        assert result.exit_code == 0
        assert (output_dir / ".gitignore").read_text() == "custom\n"


class TestGenerate:
    """Tests for the generate command."""

    def test_generates_artifacts(self, tmp_path: Path) -> None:
        config = _write_config(tmp_path)

        result = runner.invoke(app, ["generate", "--config", str(config)])

        assert result.exit_code == 0
        for name in ["User.ts", "Post.ts", "index.ts", "api-client.ts", "validation-schemas.ts"]:
            assert (tmp_path / "types" / name).is_file()
        assert "Generated 7 artifacts for 4 of 4 entities" in result.output

    def test_dry_run_writes_nothing(self, tmp_path: Path) -> None:
        config = _write_config(tmp_path)

        result = runner.invoke(app, ["generate", "--dry-run", "--config", str(config)])

        assert result.exit_code == 0
        assert not (tmp_path / "types").exists()
        assert "planned" in result.output
        assert "Planned 7 artifacts" in result.output

    def test_selected_models(self, tmp_path: Path) -> None:
        config = _write_config(tmp_path)

        result = runner.invoke(app, ["generate", "-m", "User", "-m", "Post", "--config", str(config)])

        assert result.exit_code == 0
        assert (tmp_path / "types" / "User.ts").is_file()
        assert not (tmp_path / "types" / "Tag.ts").exists()

    def test_missing_config_exits(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["generate", "--config", str(tmp_path / "missing.toml")])

        assert result.exit_code == 1

    def test_nothing_discovered_exits(self, tmp_path: Path) -> None:
        empty = tmp_path / "empty_models"
        empty.mkdir()
        config = _write_config(tmp_path, models_dir=empty)

        result = runner.invoke(app, ["generate", "--config", str(config)])

        assert result.exit_code == 1
        assert not (tmp_path / "types").exists()

    def test_quiet_suppresses_progress_output(self, tmp_path: Path) -> None:
        config = _write_config(tmp_path)

        result = runner.invoke(app, ["generate", "--quiet", "--config", str(config)])

        assert result.exit_code == 0
        assert (tmp_path / "types" / "User.ts").is_file()
        assert "Generated" not in result.output
        assert "written" not in result.output


class TestConfigureLogging:
    def test_warning_level_drops_info_events(self) -> None:
        configure_logging(logging.WARNING)
        log = structlog.get_logger("autoschema.test")

        with structlog.testing.capture_logs() as logs:
            log.info("watch_idle")
            log.warning("generation_error")

        assert [entry["event"] for entry in logs] == ["generation_error"]


class TestWatch:
    def test_requires_an_existing_directory(self, tmp_path: Path) -> None:
        config = _write_config(tmp_path, models_dir=tmp_path / "not_there")

        result = runner.invoke(app, ["watch", "--config", str(config)])

        assert result.exit_code == 1
