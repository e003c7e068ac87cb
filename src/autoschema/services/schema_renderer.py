"""Runtime validation schema rendering in the zod, yup or joi dialect.

Entity schemas come from the entity's columns with its own ``__rules__`` laid
over them. Request schemas come from the request's rules alone.
"""

import math
from dataclasses import dataclass

from autoschema.config import AdvancedSettings, ValidationSettings
from autoschema.errors import RenderError
from autoschema.models.entity import EntityDescriptor, FieldDescriptor
from autoschema.models.enums import SemanticType, ValidationDialect
from autoschema.models.rule import RequestDescriptor, RuleDescriptor
from autoschema.services.interface_renderer import Clock, banner, utc_now
from autoschema.services.naming import property_key, to_camel_case, ts_string
from autoschema.services.type_mapper import TS_ARRAY, TS_BOOLEAN, TS_DATE, TS_NUMBER, TS_OBJECT, TS_STRING

EXCLUDED_FIELDS = frozenset({"id", "created_at", "updated_at"})

_TARGET_SEMANTICS: dict[str, SemanticType] = {
    TS_STRING: SemanticType.STRING,
    TS_NUMBER: SemanticType.NUMBER,
    TS_BOOLEAN: SemanticType.BOOLEAN,
    TS_DATE: SemanticType.DATE,
    TS_OBJECT: SemanticType.OBJECT,
    TS_ARRAY: SemanticType.ARRAY,
}

# Rule types that refine a column's string type rather than replace it.
_STRING_REFINEMENTS = frozenset({SemanticType.EMAIL, SemanticType.URL})

_SIZED_TYPES = frozenset(
    {SemanticType.STRING, SemanticType.NUMBER, SemanticType.ARRAY, SemanticType.EMAIL, SemanticType.URL}
)


@dataclass(frozen=True)
class Dialect:
    """Expression vocabulary of one validation library."""

    name: ValidationDialect
    import_line: str
    object_call: str
    bases: dict[SemanticType, str]
    nullable: str
    optional: str
    required: str | None
    enum_template: str
    infer_template: str | None = None


ZOD = Dialect(
    name=ValidationDialect.ZOD,
    import_line="import { z } from 'zod';",
    object_call="z.object",
    bases={
        SemanticType.STRING: "z.string()",
        SemanticType.NUMBER: "z.number()",
        SemanticType.BOOLEAN: "z.boolean()",
        SemanticType.ARRAY: "z.array(z.any())",
        SemanticType.OBJECT: "z.record(z.any())",
        SemanticType.DATE: "z.coerce.date()",
        SemanticType.EMAIL: "z.string().email()",
        SemanticType.URL: "z.string().url()",
        SemanticType.FILE: "z.any()",
        SemanticType.REFERENCE: "z.number()",
        SemanticType.MIXED: "z.any()",
    },
    nullable=".nullable()",
    optional=".optional()",
    required=None,
    enum_template="z.enum([__VALUES__])",
    infer_template="export type __TYPE__ = z.infer<typeof __SCHEMA__>;",
)

YUP = Dialect(
    name=ValidationDialect.YUP,
    import_line="import * as yup from 'yup';",
    object_call="yup.object",
    bases={
        SemanticType.STRING: "yup.string()",
        SemanticType.NUMBER: "yup.number()",
        SemanticType.BOOLEAN: "yup.boolean()",
        SemanticType.ARRAY: "yup.array()",
        SemanticType.OBJECT: "yup.object()",
        SemanticType.DATE: "yup.date()",
        SemanticType.EMAIL: "yup.string().email()",
        SemanticType.URL: "yup.string().url()",
        SemanticType.FILE: "yup.mixed()",
        SemanticType.REFERENCE: "yup.number()",
        SemanticType.MIXED: "yup.mixed()",
    },
    nullable=".nullable()",
    optional=".optional()",
    required=".required()",
    enum_template="yup.string().oneOf([__VALUES__])",
    infer_template="export type __TYPE__ = yup.InferType<typeof __SCHEMA__>;",
)

JOI = Dialect(
    name=ValidationDialect.JOI,
    import_line="import Joi from 'joi';",
    object_call="Joi.object",
    bases={
        SemanticType.STRING: "Joi.string()",
        SemanticType.NUMBER: "Joi.number()",
        SemanticType.BOOLEAN: "Joi.boolean()",
        SemanticType.ARRAY: "Joi.array()",
        SemanticType.OBJECT: "Joi.object()",
        SemanticType.DATE: "Joi.date()",
        SemanticType.EMAIL: "Joi.string().email()",
        SemanticType.URL: "Joi.string().uri()",
        SemanticType.FILE: "Joi.any()",
        SemanticType.REFERENCE: "Joi.number()",
        SemanticType.MIXED: "Joi.any()",
    },
    nullable=".allow(null)",
    optional=".optional()",
    required=".required()",
    enum_template="Joi.string().valid(__VALUES__)",
)

DIALECTS: dict[ValidationDialect, Dialect] = {d.name: d for d in (ZOD, YUP, JOI)}


def get_dialect(name: ValidationDialect | str) -> Dialect:
    """Look up a dialect by name.

    Raises:
        RenderError: If ``name`` is not a supported dialect.
    """
    try:
        return DIALECTS[ValidationDialect(name)]
    except ValueError as e:
        raise RenderError(f"unsupported validation dialect: {name}") from e


def schema_name(name: str) -> str:
    return f"{to_camel_case(name)}Schema"


class SchemaRenderer:
    """Renders the ``validation-schemas`` module."""

    def __init__(
        self,
        validation: ValidationSettings,
        advanced: AdvancedSettings,
        dialect: ValidationDialect | str | None = None,
        clock: Clock = utc_now,
    ) -> None:
        self._validation = validation
        self._advanced = advanced
        self._dialect_name = dialect if dialect is not None else validation.schema_format
        self._clock = clock

    def render(self, entities: list[EntityDescriptor], requests: list[RequestDescriptor] | None = None) -> str:
        """Render one schema per entity, then one per request when request schemas are enabled.

        Raises:
            RenderError: If the configured dialect is not supported.
        """
        dialect = get_dialect(self._dialect_name)

        lines = banner(self._advanced.add_timestamps, self._clock)
        lines.extend(["", dialect.import_line])

        for entity in entities:
            lines.append("")
            lines.extend(self.render_entity(entity, dialect))

        if self._validation.include_form_requests:
            for request in requests or []:
                lines.append("")
                lines.extend(self.render_request(request, dialect))

        return "\n".join(lines) + "\n"

    def render_entity(self, entity: EntityDescriptor, dialect: Dialect) -> list[str]:
        properties: list[tuple[str, str]] = []
        for item in entity.fields:
            if item.name in EXCLUDED_FIELDS:
                continue
            rule = entity.rules.get(item.name) if self._validation.include_model_rules else None
            properties.append((item.name, self._field_expression(entity, item, rule, dialect)))

        return self._object_lines(schema_name(entity.name), f"{entity.name}Input", properties, dialect)

    def render_request(self, request: RequestDescriptor, dialect: Dialect) -> list[str]:
        properties = [
            (name, self._rule_expression(rule, dialect))
            for name, rule in request.rules.items()
            if name not in EXCLUDED_FIELDS
        ]
        return self._object_lines(schema_name(request.name), f"{request.name}Input", properties, dialect)

    def _object_lines(
        self,
        variable: str,
        type_name: str,
        properties: list[tuple[str, str]],
        dialect: Dialect,
    ) -> list[str]:
        lines = [f"export const {variable} = {dialect.object_call}({{"]
        lines.extend(f"  {property_key(name)}: {expression}," for name, expression in properties)
        lines.append("});")
        if dialect.infer_template:
            lines.append("")
            lines.append(dialect.infer_template.replace("__TYPE__", type_name).replace("__SCHEMA__", variable))
        return lines

    def _field_expression(
        self,
        entity: EntityDescriptor,
        item: FieldDescriptor,
        rule: RuleDescriptor | None,
        dialect: Dialect,
    ) -> str:
        semantic = _TARGET_SEMANTICS.get(item.target_type, SemanticType.MIXED)
        if rule is not None and rule.type in _STRING_REFINEMENTS and semantic is SemanticType.STRING:
            semantic = rule.type

        if item.cast is not None and item.cast.is_enum and item.cast.values:
            expression = _enum_expression(item.cast.values, dialect)
        else:
            expression = dialect.bases[semantic]
            if rule is not None:
                expression += _constraints(rule, semantic)

        if item.nullable:
            expression += dialect.nullable
        elif not entity.is_fillable(item.name):
            expression += dialect.optional
        elif dialect.required:
            expression += dialect.required
        return expression

    def _rule_expression(self, rule: RuleDescriptor, dialect: Dialect) -> str:
        enum_values = _in_values(rule)
        if enum_values:
            expression = _enum_expression(enum_values, dialect)
        else:
            expression = dialect.bases[rule.type] + _constraints(rule, rule.type)

        if rule.nullable:
            expression += dialect.nullable
        if rule.required:
            if dialect.required:
                expression += dialect.required
        else:
            expression += dialect.optional
        return expression


def _enum_expression(values: tuple[str, ...] | list[str], dialect: Dialect) -> str:
    return dialect.enum_template.replace("__VALUES__", ", ".join(ts_string(v) for v in values))


def _in_values(rule: RuleDescriptor) -> list[str]:
    members = rule.constraint("in")
    if not members:
        return []
    return [member.strip() for member in members.split(",") if member.strip()]


def _constraints(rule: RuleDescriptor, semantic: SemanticType) -> str:
    """``.min()``/``.max()`` calls for the numeric bounds a rule declares."""
    if semantic not in _SIZED_TYPES:
        return ""

    minimum = _number(rule.constraint("min"))
    maximum = _number(rule.constraint("max"))
    between = rule.constraint("between")
    if between and "," in between:
        low, high = between.split(",", 1)
        minimum = minimum if minimum is not None else _number(low)
        maximum = maximum if maximum is not None else _number(high)
    size = _number(rule.constraint("size"))
    if size is not None and semantic is SemanticType.STRING:
        minimum = maximum = size

    chain = ""
    if minimum is not None:
        chain += f".min({minimum})"
    if maximum is not None:
        chain += f".max({maximum})"
    return chain


def _number(value: str | None) -> str | None:
    if value is None:
        return None
    text = value.strip()
    try:
        number = float(text)
    except ValueError:
        return None
    # nan, inf and overflowing literals have no TypeScript spelling.
    if not math.isfinite(number):
        return None
    return text


__all__ = ["DIALECTS", "Dialect", "EXCLUDED_FIELDS", "SchemaRenderer", "get_dialect", "schema_name"]
