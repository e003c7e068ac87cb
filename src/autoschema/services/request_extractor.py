"""Request schema extractor.

Finds FormRequest subclasses in the configured request directories and turns
their rules into RequestDescriptors. Extraction is best-effort: a ``rules()``,
``messages()`` or ``attributes()`` call that raises yields an empty mapping for
that part instead of dropping the request.
"""

from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import structlog

from autoschema.models.enums import RequestIntent
from autoschema.models.rule import RequestDescriptor, RuleDescriptor
from autoschema.services.class_loader import ClassLoader, identifier_for
from autoschema.services.file_walker import FileWalker
from autoschema.services.rule_parser import parse_rules

NAME_SUFFIXES = ("FormRequest", "Validation", "Request")
NAME_PREFIXES = ("Create", "Update", "Store", "Edit", "Delete")

_INTENT_MARKERS: list[tuple[tuple[str, ...], RequestIntent]] = [
    (("Create", "Store"), RequestIntent.CREATE),
    (("Update", "Edit"), RequestIntent.UPDATE),
    (("Delete",), RequestIntent.DELETE),
]


def infer_entity_name(request_name: str) -> str:
    """Strip one known suffix, then one known prefix (``StoreUserRequest`` -> ``User``)."""
    name = request_name
    for suffix in NAME_SUFFIXES:
        if name.endswith(suffix) and len(name) > len(suffix):
            name = name[: -len(suffix)]
            break
    for prefix in NAME_PREFIXES:
        if name.startswith(prefix) and len(name) > len(prefix):
            name = name[len(prefix) :]
            break
    return name


def infer_intent(request_name: str) -> RequestIntent:
    for markers, intent in _INTENT_MARKERS:
        if any(marker in request_name for marker in markers):
            return intent
    return RequestIntent.GENERAL


class RequestExtractor:
    """Discovers and analyzes validation-request classes."""

    def __init__(
        self,
        loader: ClassLoader,
        file_walker: FileWalker,
        directories: list[Path],
        base_class: type,
        model_namespaces: list[str],
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._loader = loader
        self._file_walker = file_walker
        self._directories = directories
        self._base_class = base_class
        self._model_namespaces = model_namespaces
        self._logger = logger or structlog.get_logger(__name__)

    async def analyze_all(self) -> list[RequestDescriptor]:
        """Discover and analyze every request class under the request directories."""
        descriptors: list[RequestDescriptor] = []
        for request_cls in await self.discover():
            descriptor = self.analyze(request_cls)
            if descriptor is not None:
                descriptors.append(descriptor)

        self._logger.info("requests_analyzed", request_count=len(descriptors))
        return descriptors

    async def discover(self) -> list[type]:
        found: list[type] = []
        for directory in self._directories:
            if not directory.is_dir():
                self._logger.debug("request_directory_missing", directory=str(directory))
                continue
            async for file_path in self._file_walker.walk(directory):
                for identifier in self._loader.scan_file(file_path):
                    cls = self._loader.try_load(identifier)
                    if self._is_request_class(cls) and cls not in found:
                        found.append(cls)
        return found

    def analyze(self, request_cls: type) -> RequestDescriptor | None:
        """Analyze one request class; None when it cannot be instantiated."""
        identifier = identifier_for(request_cls)
        try:
            instance = request_cls()
        except Exception as e:
            self._logger.warning("request_instantiation_failed", request=identifier, error=str(e))
            return None

        name = request_cls.__name__
        return RequestDescriptor(
            identifier=identifier,
            name=name,
            rules=self._parse_rules(self._call_mapping(instance.rules, identifier, "rules"), identifier),
            messages=_stringify(self._call_mapping(instance.messages, identifier, "messages")),
            attributes=_stringify(self._call_mapping(instance.attributes, identifier, "attributes")),
            entity=self.infer_entity(name),
            intent=infer_intent(name),
        )

    def infer_entity(self, request_name: str) -> str | None:
        """Identifier of the entity a request most likely targets, if one exists."""
        return self._loader.resolve_name(infer_entity_name(request_name), self._model_namespaces)

    def _is_request_class(self, cls: type | None) -> bool:
        return (
            cls is not None
            and cls is not self._base_class
            and issubclass(cls, self._base_class)
        )

    def _parse_rules(self, rules: Mapping[str, Any], identifier: str) -> dict[str, RuleDescriptor]:
        try:
            return parse_rules(rules)
        except Exception as e:
            self._logger.warning("request_extraction_failed", request=identifier, part="rules", error=str(e))
            return {}

    def _call_mapping(self, method: Callable[[], Any], identifier: str, part: str) -> Mapping[str, Any]:
        try:
            value = method()
        except Exception as e:
            self._logger.warning("request_extraction_failed", request=identifier, part=part, error=str(e))
            return {}
        if not isinstance(value, Mapping):
            self._logger.warning("request_extraction_failed", request=identifier, part=part, error="not a mapping")
            return {}
        return value


def _stringify(values: Mapping[str, Any]) -> dict[str, str]:
    return {str(key): str(value) for key, value in values.items()}


__all__ = ["RequestExtractor", "infer_entity_name", "infer_intent"]
