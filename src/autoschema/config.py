"""Configuration for generation runs.

Settings are read from ``autoschema.toml`` and ``AUTOSCHEMA_*`` environment
variables (nested sections use ``__``, e.g. ``AUTOSCHEMA_OUTPUT__PATH``). One
``AutoSchemaSettings`` value is built per process and handed to every service.
Relative paths resolve against ``root``, the directory holding the config file.
"""

from contextvars import ContextVar
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from autoschema.models.enums import AuthStyle, FilenameCase, ValidationDialect

DEFAULT_CONFIG_FILENAME = "autoschema.toml"

# Config file read by the settings currently being built.
_config_file: ContextVar[Path | None] = ContextVar("autoschema_config_file", default=None)


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid")


class OutputSettings(_Section):
    path: Path = Path("frontend/src/types")
    filename_case: FilenameCase = FilenameCase.PASCAL
    extension: str = "ts"

    @field_validator("extension")
    @classmethod
    def _strip_dot(cls, value: str) -> str:
        return value.lstrip(".") or "ts"


class ModelSettings(_Section):
    directories: list[Path] = Field(default_factory=lambda: [Path("app/models")])
    package_root: Path = Path(".")
    base_model: str = "sqlmodel.SQLModel"
    namespaces: list[str] = Field(default_factory=lambda: ["app.models", "app"])
    exclude: list[str] = Field(default_factory=list)
    include_relationships: bool = True
    include_accessors: bool = True
    include_mutators: bool = False


class RequestSettings(_Section):
    directories: list[Path] = Field(default_factory=lambda: [Path("app/requests"), Path("app/http/requests")])
    base_class: str = "autoschema.form_request.FormRequest"


class TypeSettings(_Section):
    generate_interfaces: bool = True
    generate_types: bool = True
    generate_enums: bool = True
    nullable_union: bool = True
    readonly_properties: bool = False


class ValidationSettings(_Section):
    enabled: bool = True
    schema_format: ValidationDialect = ValidationDialect.ZOD
    include_form_requests: bool = True
    include_model_rules: bool = True


class ApiSettings(_Section):
    generate_client: bool = True
    base_url: str = "http://localhost:8000/api"
    authentication: AuthStyle = AuthStyle.SESSION


class AdvancedSettings(_Section):
    backup_existing: bool = False
    add_timestamps: bool = False
    include_database_comments: bool = True


class WatchSettings(_Section):
    interval: int = Field(default=2, ge=1)
    heartbeat_seconds: int = Field(default=30, ge=1)
    extra_directories: list[Path] = Field(default_factory=lambda: [Path("migrations"), Path("alembic/versions")])
    patterns: list[str] = Field(default_factory=lambda: ["*.py"])


class AutoSchemaSettings(BaseSettings):
    """All generation settings, grouped by concern."""

    model_config = SettingsConfigDict(
        env_prefix="AUTOSCHEMA_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    root: Path = Field(default_factory=Path.cwd)
    output: OutputSettings = Field(default_factory=OutputSettings)
    models: ModelSettings = Field(default_factory=ModelSettings)
    requests: RequestSettings = Field(default_factory=RequestSettings)
    types: TypeSettings = Field(default_factory=TypeSettings)
    validation: ValidationSettings = Field(default_factory=ValidationSettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    advanced: AdvancedSettings = Field(default_factory=AdvancedSettings)
    watch: WatchSettings = Field(default_factory=WatchSettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Explicit arguments win over the environment, which wins over the config file."""
        config_file = _config_file.get()
        if config_file is None:
            return init_settings, env_settings
        return init_settings, env_settings, TomlConfigSettingsSource(settings_cls, toml_file=config_file)

    def resolve(self, path: Path) -> Path:
        return path if path.is_absolute() else (self.root / path).resolve()

    @property
    def output_dir(self) -> Path:
        return self.resolve(self.output.path)

    @property
    def package_root(self) -> Path:
        return self.resolve(self.models.package_root)

    @property
    def model_directories(self) -> list[Path]:
        return [self.resolve(d) for d in self.models.directories]

    @property
    def request_directories(self) -> list[Path]:
        return [self.resolve(d) for d in self.requests.directories]

    @property
    def watch_directories(self) -> list[Path]:
        extra = [self.resolve(d) for d in self.watch.extra_directories]
        return self.model_directories + [d for d in extra if d.is_dir()]


def load_settings(config_path: Path | None = None, **overrides: Any) -> AutoSchemaSettings:
    """Build settings from a TOML file (if present), the environment and overrides.

    Sections merge key by key. Overrides win over ``AUTOSCHEMA_*`` variables,
    which win over the file.

    Args:
        config_path: Explicit config file. Defaults to ``autoschema.toml`` in the
            current directory; a missing default file is not an error.
        **overrides: Top-level sections to override, e.g. ``output={"path": ...}``.

    Returns:
        Settings with ``root`` set to the config file's directory.

    Raises:
        FileNotFoundError: If an explicit ``config_path`` does not exist.
    """
    path = config_path or Path.cwd() / DEFAULT_CONFIG_FILENAME
    if config_path is not None and not path.is_file():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    token = _config_file.set(path if path.is_file() else None)
    try:
        return AutoSchemaSettings(root=path.parent.resolve(), **overrides)
    finally:
        _config_file.reset(token)


DEFAULT_CONFIG_TEMPLATE = """\
# autoschema configuration
# Paths are relative to this file.

[output]
path = "frontend/src/types"
filename_case = "pascal"  # pascal, camel, snake, kebab
extension = "ts"

[models]
directories = ["app/models"]
package_root = "."
base_model = "sqlmodel.SQLModel"
namespaces = ["app.models", "app"]
exclude = []
include_relationships = true
include_accessors = true
include_mutators = false

[requests]
directories = ["app/requests", "app/http/requests"]
base_class = "autoschema.form_request.FormRequest"

[types]
generate_interfaces = true
generate_types = true
generate_enums = true
nullable_union = true  # `string | null` instead of `name?: string`
readonly_properties = false

[validation]
enabled = true
schema_format = "zod"  # zod, yup, joi
include_form_requests = true
include_model_rules = true

[api]
generate_client = true
base_url = "http://localhost:8000/api"
authentication = "session"  # none, session, token

[advanced]
backup_existing = false
add_timestamps = false
include_database_comments = true

[watch]
interval = 2
heartbeat_seconds = 30
extra_directories = ["migrations", "alembic/versions"]
patterns = ["*.py"]
"""
