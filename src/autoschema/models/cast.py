from typing import Any

from pydantic import Field, field_validator

from autoschema.models.base import DescriptorModel, ensure_non_empty_text
from autoschema.models.enums import CastKind

ENUM_MARKER = "enum:"

_CAST_KEYWORDS: dict[str, CastKind] = {
    "int": CastKind.INTEGER,
    "integer": CastKind.INTEGER,
    "float": CastKind.FLOAT,
    "double": CastKind.FLOAT,
    "real": CastKind.FLOAT,
    "decimal": CastKind.FLOAT,
    "bool": CastKind.BOOLEAN,
    "boolean": CastKind.BOOLEAN,
    "str": CastKind.STRING,
    "string": CastKind.STRING,
    "array": CastKind.ARRAY,
    "object": CastKind.JSON,
    "json": CastKind.JSON,
    "collection": CastKind.COLLECTION,
    "date": CastKind.DATE,
    "datetime": CastKind.DATE,
    "timestamp": CastKind.DATE,
    "immutable_date": CastKind.DATE,
    "immutable_datetime": CastKind.DATE,
}


class Cast(DescriptorModel):
    """A declared coercion from storage representation to a richer type."""

    kind: CastKind
    raw: str
    values: tuple[str, ...] = Field(default_factory=tuple)

    @field_validator("raw")
    @classmethod
    def _ensure_raw(cls, value: str) -> str:
        return ensure_non_empty_text(value, "raw")

    @property
    def is_enum(self) -> bool:
        return self.kind is CastKind.ENUM

    @classmethod
    def parse(cls, value: Any) -> "Cast":
        """Parse a declared cast (``"datetime"``, ``"decimal:2"``, ``"enum:a,b"`` or a CastKind)."""
        if isinstance(value, CastKind):
            return cls(kind=value, raw=value.value)
        if not isinstance(value, str):
            raise TypeError(f"cast must be a string or CastKind, got {type(value).__name__}")

        raw = value.strip()
        if ENUM_MARKER in raw:
            members = raw.split(ENUM_MARKER, 1)[1]
            values = tuple(member.strip() for member in members.split(",") if member.strip())
            return cls(kind=CastKind.ENUM, raw=raw, values=values)

        keyword = raw.split(":", 1)[0].strip().lower()
        return cls(kind=_CAST_KEYWORDS.get(keyword, CastKind.UNKNOWN), raw=raw)

    @classmethod
    def from_members(cls, members: list[str]) -> "Cast":
        return cls.parse(ENUM_MARKER + ",".join(members))


__all__ = ["Cast", "ENUM_MARKER"]
