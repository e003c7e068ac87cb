"""Factory functions for creating and wiring generation services.

Every service receives the one settings value and a shared logger; nothing
reads configuration on its own.
"""

import structlog

from autoschema.config import AutoSchemaSettings
from autoschema.services.api_client_renderer import ApiClientRenderer
from autoschema.services.artifact_writer import ArtifactWriter
from autoschema.services.class_loader import ClassLoader
from autoschema.services.discovery import Discovery
from autoschema.services.entity_extractor import EntityExtractor
from autoschema.services.file_walker import FileWalker
from autoschema.services.generation import GenerationService
from autoschema.services.interface_renderer import Clock, InterfaceRenderer, utc_now
from autoschema.services.request_extractor import RequestExtractor
from autoschema.services.schema_renderer import SchemaRenderer
from autoschema.services.watcher import ChangeCallback, Watcher


def create_generation_service(settings: AutoSchemaSettings, clock: Clock = utc_now) -> GenerationService:
    """Create a GenerationService for the application described by ``settings``.

    Args:
        settings: Loaded settings.
        clock: Source of the optional timestamp banner.

    Returns:
        Configured GenerationService ready for use.

    Raises:
        ConfigurationError: If the entity or request base class cannot be loaded.
    """
    logger = structlog.get_logger(__name__)

    loader = ClassLoader(package_root=settings.package_root, logger=logger)
    loader.ensure_importable()
    entity_base = loader.load_base(settings.models.base_model)
    request_base = loader.load_base(settings.requests.base_class)

    file_walker = FileWalker(include_patterns=["*.py"], logger=logger)

    discovery = Discovery(
        loader=loader,
        file_walker=file_walker,
        base_class=entity_base,
        directories=settings.model_directories,
        namespaces=settings.models.namespaces,
        exclude=settings.models.exclude,
        logger=logger,
    )

    entity_extractor = EntityExtractor(
        loader=loader,
        base_class=entity_base,
        settings=settings.models,
        logger=logger,
    )

    request_extractor = RequestExtractor(
        loader=loader,
        file_walker=file_walker,
        directories=settings.request_directories,
        base_class=request_base,
        model_namespaces=settings.models.namespaces,
        logger=logger,
    )

    writer = ArtifactWriter(
        output_dir=settings.output_dir,
        extension=settings.output.extension,
        backup_existing=settings.advanced.backup_existing,
        logger=logger,
    )

    return GenerationService(
        settings=settings,
        discovery=discovery,
        entity_extractor=entity_extractor,
        request_extractor=request_extractor,
        interface_renderer=InterfaceRenderer(settings.types, settings.output, settings.advanced, clock=clock),
        api_client_renderer=ApiClientRenderer(settings.api, settings.advanced, clock=clock),
        schema_renderer=SchemaRenderer(settings.validation, settings.advanced, clock=clock),
        writer=writer,
        logger=logger,
    )


def create_watcher(
    settings: AutoSchemaSettings,
    on_change: ChangeCallback,
    interval: int | None = None,
    heartbeat: bool = True,
) -> Watcher:
    """Create a Watcher over the model directories and any extra watch directories.

    Args:
        settings: Loaded settings.
        on_change: Awaited with the ChangeSet whenever files change.
        interval: Poll interval in seconds, overriding ``watch.interval``.
        heartbeat: Log an idle heartbeat every ``watch.heartbeat_seconds``.

    Returns:
        Configured Watcher; call ``run`` with a stop event.
    """
    logger = structlog.get_logger(__name__)

    patterns = [expanded for pattern in settings.watch.patterns for expanded in parse_file_pattern(pattern)]
    file_walker = FileWalker(include_patterns=patterns, logger=logger)

    return Watcher(
        file_walker=file_walker,
        directories=settings.watch_directories,
        on_change=on_change,
        interval=float(interval if interval is not None else settings.watch.interval),
        heartbeat_seconds=float(settings.watch.heartbeat_seconds) if heartbeat else None,
        logger=logger,
    )


def parse_file_pattern(pattern: str) -> list[str]:
    """Parse brace-expansion patterns into individual glob patterns.

    Expands patterns like "*.{py,sql}" into ["*.py", "*.sql"].
    Patterns without braces are returned as single-element lists.

    Args:
        pattern: Glob pattern, possibly with brace expansion.

    Returns:
        List of individual glob patterns.
    """
    if "{" not in pattern or "}" not in pattern:
        return [pattern]

    brace_start = pattern.index("{")
    brace_end = pattern.index("}")

    prefix = pattern[:brace_start]
    suffix = pattern[brace_end + 1 :]
    alternatives = pattern[brace_start + 1 : brace_end].split(",")

    return [f"{prefix}{alt.strip()}{suffix}" for alt in alternatives]


__all__ = ["create_generation_service", "create_watcher", "parse_file_pattern"]
