from pydantic import Field, field_validator

from autoschema.models.base import DescriptorModel, ensure_non_empty_text
from autoschema.models.enums import RequestIntent, SemanticType


class RuleDescriptor(DescriptorModel):
    field: str
    type: SemanticType = SemanticType.STRING
    required: bool = False
    nullable: bool = False
    rules: list[str] = Field(default_factory=list)

    @field_validator("field")
    @classmethod
    def _ensure_field(cls, value: str) -> str:
        return ensure_non_empty_text(value, "field")

    def constraint(self, name: str) -> str | None:
        """Return the parameter of the first auxiliary token called ``name``."""
        prefix = f"{name}:"
        for token in self.rules:
            if token.startswith(prefix):
                return token[len(prefix) :]
        return None


class RequestDescriptor(DescriptorModel):
    identifier: str
    name: str
    rules: dict[str, RuleDescriptor] = Field(default_factory=dict)
    messages: dict[str, str] = Field(default_factory=dict)
    attributes: dict[str, str] = Field(default_factory=dict)
    entity: str | None = None
    intent: RequestIntent = RequestIntent.GENERAL

    @field_validator("identifier", "name")
    @classmethod
    def _ensure_non_empty(cls, value: str) -> str:
        return ensure_non_empty_text(value, "name")


__all__ = ["RuleDescriptor", "RequestDescriptor"]
