from autoschema.models.cast import Cast
from autoschema.models.entity import EntityDescriptor, FieldDescriptor, RelationDescriptor
from autoschema.models.enums import (
    ArtifactStatus,
    AuthStyle,
    Cardinality,
    CastKind,
    ErrorKind,
    FilenameCase,
    RequestIntent,
    SemanticType,
    ValidationDialect,
)
from autoschema.models.result import ArtifactReport, GenerationResult, ItemError
from autoschema.models.rule import RequestDescriptor, RuleDescriptor
from autoschema.models.snapshot import ChangeSet, WatchSnapshot

__all__ = [
    "ArtifactReport",
    "ArtifactStatus",
    "AuthStyle",
    "Cardinality",
    "Cast",
    "CastKind",
    "ChangeSet",
    "EntityDescriptor",
    "ErrorKind",
    "FieldDescriptor",
    "FilenameCase",
    "GenerationResult",
    "ItemError",
    "RelationDescriptor",
    "RequestDescriptor",
    "RequestIntent",
    "RuleDescriptor",
    "SemanticType",
    "ValidationDialect",
    "WatchSnapshot",
]
