from typing import Any

from pydantic import Field, field_validator, model_validator

from autoschema.models.base import DescriptorModel, ensure_non_empty_text, ensure_scalar
from autoschema.models.cast import Cast
from autoschema.models.enums import Cardinality
from autoschema.models.rule import RuleDescriptor


class FieldDescriptor(DescriptorModel):
    name: str
    source_type: str
    target_type: str
    nullable: bool = True
    default: str | int | float | bool | None = None
    comment: str | None = None
    is_computed: bool = False
    cast: Cast | None = None

    @field_validator("name", "target_type")
    @classmethod
    def _ensure_non_empty(cls, value: str) -> str:
        return ensure_non_empty_text(value, "value")

    @field_validator("default", mode="before")
    @classmethod
    def _coerce_default(cls, value: Any) -> str | int | float | bool | None:
        return ensure_scalar(value)


class RelationDescriptor(DescriptorModel):
    name: str
    kind: str
    cardinality: Cardinality
    related: str
    related_name: str
    foreign_key: str | None = None
    local_key: str | None = None

    @field_validator("name", "related", "related_name")
    @classmethod
    def _ensure_non_empty(cls, value: str) -> str:
        return ensure_non_empty_text(value, "value")

    @property
    def is_collection(self) -> bool:
        return self.cardinality is Cardinality.TO_MANY


class EntityDescriptor(DescriptorModel):
    """Structural description of one mapped entity class."""

    identifier: str
    name: str
    table: str
    fields: list[FieldDescriptor] = Field(default_factory=list)
    relations: list[RelationDescriptor] = Field(default_factory=list)
    computed: list[FieldDescriptor] = Field(default_factory=list)
    fillable: list[str] = Field(default_factory=list)
    guarded: list[str] = Field(default_factory=list)
    hidden: list[str] = Field(default_factory=list)
    appends: list[str] = Field(default_factory=list)
    casts: dict[str, Cast] = Field(default_factory=dict)
    accessors: dict[str, str] = Field(default_factory=dict)
    mutators: list[str] = Field(default_factory=list)
    rules: dict[str, RuleDescriptor] = Field(default_factory=dict)

    @field_validator("identifier", "name", "table")
    @classmethod
    def _ensure_non_empty(cls, value: str) -> str:
        return ensure_non_empty_text(value, "value")

    @model_validator(mode="after")
    def _validate_unique_names(self) -> "EntityDescriptor":
        field_names = [f.name for f in self.fields]
        if len(field_names) != len(set(field_names)):
            raise ValueError(f"duplicate field names on entity {self.name}")
        relation_names = [r.name for r in self.relations]
        if len(relation_names) != len(set(relation_names)):
            raise ValueError(f"duplicate relation names on entity {self.name}")
        return self

    def is_fillable(self, field_name: str) -> bool:
        return field_name in self.fillable

    def is_hidden(self, field_name: str) -> bool:
        return field_name in self.hidden

    def enum_casts(self) -> list[tuple[str, Cast]]:
        """Enum casts in field order, then any cast-only names in declaration order."""
        ordered = [f.name for f in self.fields if f.name in self.casts]
        ordered += [name for name in self.casts if name not in ordered]
        return [(name, self.casts[name]) for name in ordered if self.casts[name].is_enum]


__all__ = ["FieldDescriptor", "RelationDescriptor", "EntityDescriptor"]
