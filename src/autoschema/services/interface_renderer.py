"""TypeScript declaration rendering for entities and the index module."""

from collections.abc import Callable
from datetime import UTC, datetime

from autoschema.config import AdvancedSettings, OutputSettings, TypeSettings
from autoschema.models.cast import Cast
from autoschema.models.entity import EntityDescriptor, FieldDescriptor
from autoschema.services.naming import apply_case, property_key, to_pascal_case, ts_string

GENERATED_NOTICE = "// This file is generated by autoschema. Do not edit it by hand."

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


def banner(add_timestamps: bool, clock: Clock = utc_now) -> list[str]:
    """Header comment lines shared by every artifact."""
    lines = [GENERATED_NOTICE]
    if add_timestamps:
        lines.append(f"// Generated at {clock().isoformat(timespec='seconds')}")
    return lines


def enum_name(entity_name: str, field_name: str) -> str:
    """Name of the enum emitted for an enum cast (``User`` + ``status`` -> ``UserStatus``)."""
    return to_pascal_case(f"{entity_name}_{field_name}")


def alias_name(entity_name: str) -> str:
    return f"{entity_name}Type"


class InterfaceRenderer:
    """Renders one declaration module per entity plus the aggregating index."""

    def __init__(
        self,
        types: TypeSettings,
        output: OutputSettings,
        advanced: AdvancedSettings,
        clock: Clock = utc_now,
    ) -> None:
        self._types = types
        self._output = output
        self._advanced = advanced
        self._clock = clock

    def module_stem(self, entity_name: str) -> str:
        """File stem of an entity's module, also used in relative imports."""
        return apply_case(entity_name, self._output.filename_case)

    def render_entity(self, entity: EntityDescriptor) -> str:
        """Render the declaration module of a single entity."""
        lines: list[str] = []

        imports = self._import_lines(entity)
        if imports:
            lines.extend(imports)
            lines.append("")

        lines.extend(banner(self._advanced.add_timestamps, self._clock))
        lines.append("")
        lines.extend(["/**", f" * {entity.identifier}", f" * Table: {entity.table}", " */"])

        if self._types.generate_interfaces:
            lines.append(f"export interface {entity.name} {{")
        else:
            lines.append(f"export type {entity.name} = {{")

        enum_types = self._enum_types(entity)
        for field in entity.fields:
            lines.extend(self._field_lines(entity, field, enum_types.get(field.name)))

        for relation in entity.relations:
            related = f"{relation.related_name}[]" if relation.is_collection else relation.related_name
            lines.append(f"  // Relationship: {relation.kind}")
            lines.append(f"  {self._prefix()}{property_key(relation.name)}?: {related};")

        for field in entity.computed:
            lines.extend(self._field_lines(entity, field, enum_types.get(field.name)))

        lines.append("}" if self._types.generate_interfaces else "};")

        if self._types.generate_types:
            lines.append("")
            lines.append(f"export type {alias_name(entity.name)} = {entity.name};")

        if self._types.generate_enums:
            for field_name, cast in entity.enum_casts():
                lines.append("")
                lines.extend(self._enum_lines(enum_name(entity.name, field_name), cast))

        return "\n".join(lines) + "\n"

    def render_index(self, entities: list[EntityDescriptor]) -> str:
        """Render ``index`` re-exporting every entity in processing order."""
        lines = banner(self._advanced.add_timestamps, self._clock)
        lines.append("")
        for entity in entities:
            type_names = [entity.name]
            if self._types.generate_types:
                type_names.append(alias_name(entity.name))
            value_names = list(self._enum_types(entity).values()) if self._types.generate_enums else []
            module = f"./{self.module_stem(entity.name)}"

            if value_names:
                names = [f"type {name}" for name in type_names] + value_names
                lines.append(f"export {{ {', '.join(names)} }} from '{module}';")
            else:
                lines.append(f"export type {{ {', '.join(type_names)} }} from '{module}';")
        return "\n".join(lines) + "\n"

    def _import_lines(self, entity: EntityDescriptor) -> list[str]:
        related = sorted({r.related_name for r in entity.relations if r.related_name != entity.name})
        return [f"import type {{ {name} }} from './{self.module_stem(name)}';" for name in related]

    def _enum_types(self, entity: EntityDescriptor) -> dict[str, str]:
        if not self._types.generate_enums:
            return {}
        return {field_name: enum_name(entity.name, field_name) for field_name, _ in entity.enum_casts()}

    def _prefix(self) -> str:
        return "readonly " if self._types.readonly_properties else ""

    def _field_lines(self, entity: EntityDescriptor, field: FieldDescriptor, enum_type: str | None) -> list[str]:
        lines: list[str] = []
        if field.comment and self._advanced.include_database_comments:
            lines.append(f"  /** {field.comment.replace('*/', '* /')} */")

        ts_type = enum_type or field.target_type
        optional = entity.is_hidden(field.name)
        if field.nullable:
            if self._types.nullable_union:
                ts_type = f"{ts_type} | null"
            else:
                optional = True

        marker = "?" if optional else ""
        lines.append(f"  {self._prefix()}{property_key(field.name)}{marker}: {ts_type};")
        return lines

    def _enum_lines(self, name: str, cast: Cast) -> list[str]:
        lines = [f"export enum {name} {{"]
        for value in cast.values:
            lines.append(f"  {property_key(value)} = {ts_string(value)},")
        lines.append("}")
        return lines


__all__ = ["InterfaceRenderer", "alias_name", "banner", "enum_name", "utc_now"]
