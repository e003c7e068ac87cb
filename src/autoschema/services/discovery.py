"""Entity discovery over the configured model directories."""

from pathlib import Path

import structlog

from autoschema.errors import ResolutionError
from autoschema.models.enums import ErrorKind
from autoschema.models.result import ItemError
from autoschema.services.class_loader import ClassLoader, identifier_for
from autoschema.services.entity_extractor import is_entity_class
from autoschema.services.file_walker import FileWalker


class Discovery:
    """Finds the entity identifiers a generation run should process.

    Problems are recorded on ``errors`` instead of aborting the run; the list
    is reset at the start of each ``discover`` call.
    """

    def __init__(
        self,
        loader: ClassLoader,
        file_walker: FileWalker,
        base_class: type,
        directories: list[Path],
        namespaces: list[str],
        exclude: list[str] | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._loader = loader
        self._file_walker = file_walker
        self._base_class = base_class
        self._directories = directories
        self._namespaces = namespaces
        self._exclude = set(exclude or [])
        self._logger = logger or structlog.get_logger(__name__)
        self.errors: list[ItemError] = []

    async def discover(self, explicit_names: list[str] | None = None) -> list[str]:
        """Return entity identifiers, deduplicated, in discovery order.

        Args:
            explicit_names: Short or dotted names to resolve instead of scanning
                the model directories.
        """
        self.errors = []
        if explicit_names:
            identifiers = self._resolve_explicit(explicit_names)
        else:
            identifiers = await self._scan_directories()

        self._logger.info("entities_discovered", entity_count=len(identifiers))
        return identifiers

    def _resolve_explicit(self, names: list[str]) -> list[str]:
        identifiers: list[str] = []
        for name in names:
            identifier = self._loader.resolve_name(name, self._namespaces)
            if identifier is None:
                self._record(ErrorKind.RESOLUTION, name, ResolutionError(f"no class named {name} in {self._namespaces}"))
                continue
            if identifier not in identifiers:
                identifiers.append(identifier)
        return identifiers

    async def _scan_directories(self) -> list[str]:
        identifiers: list[str] = []
        for directory in self._directories:
            if not directory.is_dir():
                self._record(ErrorKind.CONFIGURATION, str(directory), "model directory does not exist")
                continue

            async for file_path in self._file_walker.walk(directory):
                for identifier in self._loader.scan_file(file_path):
                    if self._is_excluded(identifier):
                        continue
                    cls = self._loader.try_load(identifier)
                    if not is_entity_class(cls, self._base_class):
                        continue
                    canonical = identifier_for(cls)
                    if canonical not in identifiers:
                        identifiers.append(canonical)
        return identifiers

    def _is_excluded(self, identifier: str) -> bool:
        short_name = identifier.rpartition(".")[2]
        return identifier in self._exclude or short_name in self._exclude

    def _record(self, kind: ErrorKind, item: str, error: Exception | str) -> None:
        self._logger.warning("discovery_problem", kind=kind.value, item=item, error=str(error))
        self.errors.append(ItemError(kind=kind, item=item, message=str(error)))


__all__ = ["Discovery"]
