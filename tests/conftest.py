"""Shared fixtures for tests that run against the sample SQLModel application."""

from collections.abc import Callable
from pathlib import Path

import pytest

from autoschema.config import AutoSchemaSettings

FIXTURES_DIR = Path(__file__).parent / "fixtures"
SAMPLE_APP_DIR = FIXTURES_DIR / "sample_app"

SettingsFactory = Callable[..., AutoSchemaSettings]


def _make_settings(output_dir: Path, **sections: dict) -> AutoSchemaSettings:
    overrides: dict[str, dict] = {
        "output": {"path": str(output_dir)},
        "models": {
            "directories": [str(SAMPLE_APP_DIR / "models")],
            "package_root": str(FIXTURES_DIR),
            "namespaces": ["sample_app.models"],
        },
        "requests": {"directories": [str(SAMPLE_APP_DIR / "requests")]},
        "watch": {"extra_directories": []},
    }
    for section, values in sections.items():
        overrides[section] = {**overrides.get(section, {}), **values}
    return AutoSchemaSettings(root=FIXTURES_DIR, **overrides)


@pytest.fixture
def settings_factory(tmp_path: Path) -> SettingsFactory:
    """Build sample-app settings writing to a temp dir, with per-section overrides."""

    def factory(**sections: dict) -> AutoSchemaSettings:
        return _make_settings(tmp_path / "types", **sections)

    return factory


@pytest.fixture
def sample_settings(settings_factory: SettingsFactory) -> AutoSchemaSettings:
    return settings_factory()


@pytest.fixture
def sample_app_dir() -> Path:
    return SAMPLE_APP_DIR


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR
