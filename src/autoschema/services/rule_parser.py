"""Parsing of validation rule sets into RuleDescriptors.

Rule sets are either pipe-delimited strings (``"required|string|max:255"``) or
lists mixing string tokens and rule objects. Shared by the entity and request
extractors.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from autoschema.models.enums import SemanticType
from autoschema.models.rule import RuleDescriptor

_TYPE_KEYWORDS: dict[str, SemanticType] = {
    "string": SemanticType.STRING,
    "integer": SemanticType.NUMBER,
    "numeric": SemanticType.NUMBER,
    "boolean": SemanticType.BOOLEAN,
    "array": SemanticType.ARRAY,
    "json": SemanticType.OBJECT,
    "date": SemanticType.DATE,
    "date_format": SemanticType.DATE,
    "email": SemanticType.EMAIL,
    "url": SemanticType.URL,
    "file": SemanticType.FILE,
    "image": SemanticType.FILE,
    "exists": SemanticType.REFERENCE,
}


def split_rule(token: str) -> tuple[str, str | None]:
    """Split ``"max:255"`` into ``("max", "255")``; bare names get ``None``."""
    name, sep, parameters = token.partition(":")
    return name.strip(), (parameters if sep else None)


def parse_rule(field: str, rule: Any) -> RuleDescriptor:
    """Parse one field's rule set.

    Args:
        field: Field the rules apply to.
        rule: Pipe-delimited string or a sequence of tokens and rule objects.

    Returns:
        RuleDescriptor. ``required`` and ``nullable`` set the flags, type keywords
        set the semantic type (last one wins), anything else is kept verbatim in
        order. Unsupported shapes yield ``mixed`` with no constraints.
    """
    if isinstance(rule, str):
        tokens: Sequence[Any] = rule.split("|")
    elif isinstance(rule, Sequence):
        tokens = rule
    else:
        return RuleDescriptor(field=field, type=SemanticType.MIXED)

    semantic_type = SemanticType.STRING
    required = False
    nullable = False
    constraints: list[str] = []

    for token in tokens:
        if not isinstance(token, str):
            constraints.append(type(token).__name__)
            continue

        token = token.strip()
        if not token:
            continue

        name, _ = split_rule(token)
        if name == "required":
            required = True
        elif name == "nullable":
            nullable = True
        elif name in _TYPE_KEYWORDS:
            semantic_type = _TYPE_KEYWORDS[name]
        else:
            constraints.append(token)

    return RuleDescriptor(
        field=field,
        type=semantic_type,
        required=required,
        nullable=nullable,
        rules=constraints,
    )


def parse_rules(rules: Mapping[str, Any]) -> dict[str, RuleDescriptor]:
    """Parse a field to rule-set mapping, preserving field order."""
    return {field: parse_rule(field, rule) for field, rule in rules.items()}


__all__ = ["parse_rule", "parse_rules", "split_rule"]
