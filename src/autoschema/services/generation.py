"""Generation service orchestrating discovery, extraction, rendering and writing."""

from collections.abc import Callable

import structlog

from autoschema.config import AutoSchemaSettings
from autoschema.errors import AnalysisError, RenderError
from autoschema.models.entity import EntityDescriptor
from autoschema.models.enums import ArtifactStatus, ErrorKind
from autoschema.models.result import ArtifactReport, GenerationResult, ItemError
from autoschema.models.rule import RequestDescriptor
from autoschema.services.api_client_renderer import ApiClientRenderer
from autoschema.services.artifact_writer import ArtifactWriter
from autoschema.services.discovery import Discovery
from autoschema.services.entity_extractor import EntityExtractor
from autoschema.services.interface_renderer import InterfaceRenderer
from autoschema.services.request_extractor import RequestExtractor
from autoschema.services.schema_renderer import SchemaRenderer

INDEX_STEM = "index"
API_CLIENT_STEM = "api-client"
VALIDATION_STEM = "validation-schemas"


class GenerationService:
    """Runs one full generation pass.

    Each entity is analyzed in isolation: a failure is recorded on the result
    and the remaining entities are still rendered. Every artifact is rewritten
    in full on every run.
    """

    def __init__(
        self,
        settings: AutoSchemaSettings,
        discovery: Discovery,
        entity_extractor: EntityExtractor,
        request_extractor: RequestExtractor,
        interface_renderer: InterfaceRenderer,
        api_client_renderer: ApiClientRenderer,
        schema_renderer: SchemaRenderer,
        writer: ArtifactWriter,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._settings = settings
        self._discovery = discovery
        self._entity_extractor = entity_extractor
        self._request_extractor = request_extractor
        self._interface_renderer = interface_renderer
        self._api_client_renderer = api_client_renderer
        self._schema_renderer = schema_renderer
        self._writer = writer
        self._logger = logger or structlog.get_logger(__name__)

    async def generate(
        self,
        explicit_names: list[str] | None = None,
        dry_run: bool = False,
        force: bool = False,
    ) -> GenerationResult:
        """Generate every artifact.

        Args:
            explicit_names: Restrict the run to these entities.
            dry_run: Report planned artifacts without writing anything.
            force: Overwrite existing artifacts without taking backups.

        Returns:
            GenerationResult with per-item errors and artifact reports.
        """
        self._logger.info("generation_started", dry_run=dry_run, force=force, explicit=explicit_names or [])

        discovered = await self._discovery.discover(explicit_names)
        errors: list[ItemError] = list(self._discovery.errors)

        entities: list[EntityDescriptor] = []
        for identifier in discovered:
            try:
                entities.append(self._entity_extractor.analyze(identifier))
            except AnalysisError as e:
                self._logger.warning("entity_analysis_failed", entity=identifier, error=str(e))
                errors.append(ItemError(kind=ErrorKind.ANALYSIS, item=identifier, message=str(e)))

        if dry_run:
            for entity in entities:
                self._logger.info(
                    "entity_planned",
                    entity=entity.name,
                    table=entity.table,
                    field_count=len(entity.fields),
                    relation_count=len(entity.relations),
                    computed_count=len(entity.computed),
                )

        requests = await self._collect_requests()

        artifacts: list[ArtifactReport] = []
        if entities:
            for stem, render in self._plan(entities, requests):
                report = await self._emit(stem, render, dry_run, force, errors)
                artifacts.append(report)
        else:
            self._logger.warning("no_entities_to_render", discovered=len(discovered))

        result = GenerationResult(
            discovered=discovered,
            analyzed=[entity.name for entity in entities],
            request_count=len(requests),
            artifacts=artifacts,
            errors=errors,
            dry_run=dry_run,
        )
        self._logger.info(
            "generation_completed",
            success=result.success,
            entity_count=len(entities),
            artifact_count=len(artifacts),
            error_count=len(errors),
        )
        return result

    async def _collect_requests(self) -> list[RequestDescriptor]:
        validation = self._settings.validation
        if not (validation.enabled and validation.include_form_requests):
            return []
        return await self._request_extractor.analyze_all()

    def _plan(
        self,
        entities: list[EntityDescriptor],
        requests: list[RequestDescriptor],
    ) -> list[tuple[str, Callable[[], str]]]:
        """Artifact stems paired with their renderers, in write order."""
        renderer = self._interface_renderer
        plan: list[tuple[str, Callable[[], str]]] = [
            (renderer.module_stem(entity.name), lambda entity=entity: renderer.render_entity(entity))
            for entity in entities
        ]
        plan.append((INDEX_STEM, lambda: renderer.render_index(entities)))

        if self._settings.api.generate_client:
            plan.append((API_CLIENT_STEM, lambda: self._api_client_renderer.render(entities)))
        if self._settings.validation.enabled:
            plan.append((VALIDATION_STEM, lambda: self._schema_renderer.render(entities, requests)))
        return plan

    async def _emit(
        self,
        stem: str,
        render: Callable[[], str],
        dry_run: bool,
        force: bool,
        errors: list[ItemError],
    ) -> ArtifactReport:
        try:
            return await self._writer.write(stem, render(), dry_run=dry_run, force=force)
        except RenderError as e:
            path = str(self._writer.path_for(stem))
            self._logger.error("artifact_failed", path=path, error=str(e))
            errors.append(ItemError(kind=ErrorKind.RENDER, item=path, message=str(e)))
            return ArtifactReport(path=path, status=ArtifactStatus.FAILED)


__all__ = ["GenerationService", "INDEX_STEM", "API_CLIENT_STEM", "VALIDATION_STEM"]
