"""Entity model extractor.

Builds an EntityDescriptor from a mapped SQLAlchemy/SQLModel class. Columns and
relationships come from the mapper's declared metadata; nothing on the entity is
invoked to find out what it is. Conventions read from the class body:

- ``__fillable__``, ``__guarded__``, ``__hidden__``, ``__appends__``: field names
- ``__casts__``: field name to cast text (``"datetime"``, ``"enum:a,b"``) or CastKind
- ``__rules__``: field name to validation rule set
- ``get_<field>_attribute`` / ``set_<field>_attribute``: accessors and mutators
"""

import re
import typing
from collections.abc import Callable, Mapping
from typing import Any

import structlog
from sqlalchemy import Enum as SAEnum
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Mapper, RelationshipProperty
from sqlalchemy.types import TypeDecorator, TypeEngine

from autoschema.config import ModelSettings
from autoschema.errors import AnalysisError, InvalidEntityError, ResolutionError
from autoschema.models.base import ensure_name_list
from autoschema.models.cast import Cast
from autoschema.models.entity import EntityDescriptor, FieldDescriptor, RelationDescriptor
from autoschema.models.enums import Cardinality
from autoschema.models.rule import RuleDescriptor
from autoschema.services.class_loader import ClassLoader, identifier_for
from autoschema.services.naming import to_snake_case
from autoschema.services.rule_parser import parse_rules
from autoschema.services.type_mapper import TS_ANY, map_python_type, map_type

_ACCESSOR_PATTERN = re.compile(r"^get_(?P<field>\w+?)_attribute$")
_MUTATOR_PATTERN = re.compile(r"^set_(?P<field>\w+?)_attribute$")

_RELATION_KINDS: dict[tuple[str, bool], str] = {
    ("MANYTOONE", False): "many_to_one",
    ("MANYTOONE", True): "many_to_one",
    ("ONETOMANY", True): "one_to_many",
    ("ONETOMANY", False): "one_to_one",
    ("MANYTOMANY", True): "many_to_many",
    ("MANYTOMANY", False): "many_to_many",
}


def mapper_for(cls: Any) -> Mapper | None:
    """Return the SQLAlchemy mapper of a mapped class, None for anything else."""
    if not isinstance(cls, type):
        return None
    mapper = sa_inspect(cls, raiseerr=False)
    return mapper if isinstance(mapper, Mapper) else None


def is_entity_class(cls: Any, base_class: type) -> bool:
    """True for mapped subclasses of ``base_class`` (the base itself excluded)."""
    return (
        isinstance(cls, type)
        and cls is not base_class
        and issubclass(cls, base_class)
        and mapper_for(cls) is not None
    )


def storage_type_tag(sa_type: TypeEngine) -> str:
    """Lower-cased visit name of a column type, looking through TypeDecorators."""
    if isinstance(sa_type, TypeDecorator):
        sa_type = sa_type.impl
    return str(getattr(sa_type, "__visit_name__", type(sa_type).__name__)).lower()


class EntityExtractor:
    """Analyzes entity classes into EntityDescriptors."""

    def __init__(
        self,
        loader: ClassLoader,
        base_class: type,
        settings: ModelSettings,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._loader = loader
        self._base_class = base_class
        self._settings = settings
        self._logger = logger or structlog.get_logger(__name__)

    def analyze(self, entity_id: str) -> EntityDescriptor:
        """Extract the structure of one entity.

        Args:
            entity_id: Fully qualified class identifier.

        Returns:
            EntityDescriptor for the entity.

        Raises:
            InvalidEntityError: If the identifier does not load or is not a mapped
                subclass of the configured base class.
            AnalysisError: If the entity's declarations are malformed or its
                mapper cannot be configured.
        """
        try:
            entity_cls = self._loader.load(entity_id)
        except ResolutionError as e:
            raise InvalidEntityError(f"{entity_id}: {e}") from e

        mapper = mapper_for(entity_cls)
        if mapper is None or not is_entity_class(entity_cls, self._base_class):
            raise InvalidEntityError(
                f"{entity_id} is not a mapped subclass of {identifier_for(self._base_class)}"
            )

        self._logger.debug("entity_analysis_started", entity=entity_id)

        try:
            descriptor = self._build_descriptor(entity_cls, mapper)
        except SQLAlchemyError as e:
            raise AnalysisError(f"{entity_id}: mapper configuration failed: {e}") from e
        except Exception as e:
            raise AnalysisError(f"{entity_id}: {e}") from e

        self._logger.debug(
            "entity_analysis_completed",
            entity=entity_id,
            field_count=len(descriptor.fields),
            relation_count=len(descriptor.relations),
            computed_count=len(descriptor.computed),
        )
        return descriptor

    def _build_descriptor(self, entity_cls: type, mapper: Mapper) -> EntityDescriptor:
        casts = self._read_casts(entity_cls)
        fields = self._extract_fields(mapper, casts)
        relations = self._extract_relations(mapper) if self._settings.include_relationships else []

        appends = ensure_name_list(getattr(entity_cls, "__appends__", None), "__appends__")
        accessors: dict[str, str] = {}
        computed: list[FieldDescriptor] = []
        if self._settings.include_accessors:
            accessors = self._extract_accessors(entity_cls, appends)
            computed = self._computed_fields(entity_cls, appends, accessors)

        mutators = self._extract_mutators(entity_cls) if self._settings.include_mutators else []

        return EntityDescriptor(
            identifier=identifier_for(entity_cls),
            name=entity_cls.__name__,
            table=self._table_name(entity_cls, mapper),
            fields=fields,
            relations=relations,
            computed=computed,
            fillable=ensure_name_list(getattr(entity_cls, "__fillable__", None), "__fillable__"),
            guarded=ensure_name_list(getattr(entity_cls, "__guarded__", None), "__guarded__"),
            hidden=ensure_name_list(getattr(entity_cls, "__hidden__", None), "__hidden__"),
            appends=appends,
            casts=casts,
            accessors=accessors,
            mutators=mutators,
            rules=self._read_rules(entity_cls),
        )

    def _table_name(self, entity_cls: type, mapper: Mapper) -> str:
        table = getattr(mapper, "local_table", None)
        return getattr(table, "name", None) or to_snake_case(entity_cls.__name__)

    def _read_casts(self, entity_cls: type) -> dict[str, Cast]:
        declared = getattr(entity_cls, "__casts__", None) or {}
        if not isinstance(declared, Mapping):
            raise TypeError("__casts__ must map field names to casts")
        return {str(name): Cast.parse(value) for name, value in declared.items()}

    def _read_rules(self, entity_cls: type) -> dict[str, RuleDescriptor]:
        declared = getattr(entity_cls, "__rules__", None) or {}
        if not isinstance(declared, Mapping):
            raise TypeError("__rules__ must map field names to rule sets")
        return parse_rules(declared)

    def _extract_fields(self, mapper: Mapper, casts: dict[str, Cast]) -> list[FieldDescriptor]:
        fields: list[FieldDescriptor] = []
        for prop in mapper.column_attrs:
            column = prop.columns[0]
            column_type = getattr(column, "type", None)
            source_type = storage_type_tag(column_type) if column_type is not None else "unknown"

            # Enum columns get an implicit enum cast so their members are emitted.
            if prop.key not in casts and isinstance(column_type, SAEnum) and column_type.enums:
                casts[prop.key] = Cast.from_members(list(column_type.enums))

            cast = casts.get(prop.key)
            fields.append(
                FieldDescriptor(
                    name=prop.key,
                    source_type=source_type,
                    target_type=map_type(source_type, cast),
                    nullable=_column_nullable(column),
                    default=_column_default(column),
                    comment=getattr(column, "comment", None),
                    cast=cast,
                )
            )
        return fields

    def _extract_relations(self, mapper: Mapper) -> list[RelationDescriptor]:
        relations: list[RelationDescriptor] = []
        for prop in mapper.relationships:
            if not isinstance(prop, RelationshipProperty):
                continue
            related_cls = prop.mapper.class_
            foreign_key, local_key = _relation_keys(prop)
            relations.append(
                RelationDescriptor(
                    name=prop.key,
                    kind=_RELATION_KINDS.get((prop.direction.name, bool(prop.uselist)), prop.direction.name.lower()),
                    cardinality=Cardinality.TO_MANY if prop.uselist else Cardinality.TO_ONE,
                    related=identifier_for(related_cls),
                    related_name=related_cls.__name__,
                    foreign_key=foreign_key,
                    local_key=local_key,
                )
            )
        return relations

    def _extract_accessors(self, entity_cls: type, appends: list[str]) -> dict[str, str]:
        accessors: dict[str, str] = {}
        for attr_name, member in vars(entity_cls).items():
            match = _ACCESSOR_PATTERN.match(attr_name)
            if match and callable(member):
                accessors[match.group("field")] = _return_type(member)

        for name in appends:
            if name in accessors:
                continue
            getter = getattr(vars(entity_cls).get(name), "fget", None)
            if callable(getter):
                accessors[name] = _return_type(getter)
        return accessors

    def _computed_fields(
        self,
        entity_cls: type,
        appends: list[str],
        accessors: dict[str, str],
    ) -> list[FieldDescriptor]:
        computed: list[FieldDescriptor] = []
        for name in appends:
            if name not in accessors:
                self._logger.warning("append_without_accessor", entity=entity_cls.__name__, field=name)
                continue
            computed.append(
                FieldDescriptor(
                    name=name,
                    source_type="accessor",
                    target_type=accessors[name],
                    nullable=False,
                    is_computed=True,
                )
            )
        return computed

    def _extract_mutators(self, entity_cls: type) -> list[str]:
        return [
            match.group("field")
            for attr_name, member in vars(entity_cls).items()
            if (match := _MUTATOR_PATTERN.match(attr_name)) and callable(member)
        ]


def _column_nullable(column: Any) -> bool:
    nullable = getattr(column, "nullable", None)
    return True if nullable is None else bool(nullable)


def _column_default(column: Any) -> Any:
    default = getattr(column, "default", None)
    if default is not None and getattr(default, "is_scalar", False):
        return default.arg

    server_default = getattr(column, "server_default", None)
    arg = getattr(server_default, "arg", None)
    if arg is None:
        return None
    return arg if isinstance(arg, str) else getattr(arg, "text", None)


def _relation_keys(prop: RelationshipProperty) -> tuple[str | None, str | None]:
    """Foreign key and the key it points at, from the first local/remote column pair."""
    pairs = list(getattr(prop, "local_remote_pairs", None) or [])
    if not pairs:
        return None, None
    local, remote = pairs[0]
    if getattr(local, "foreign_keys", None):
        return local.name, remote.name
    return remote.name, local.name


def _return_type(func: Callable[..., Any]) -> str:
    try:
        hints = typing.get_type_hints(func)
    except Exception:
        hints = getattr(func, "__annotations__", {}) or {}
    if "return" not in hints:
        return TS_ANY
    return map_python_type(hints["return"])


__all__ = ["EntityExtractor", "is_entity_class", "mapper_for", "storage_type_tag"]
