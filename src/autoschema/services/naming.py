"""Identifier casing and pluralization helpers for generated artifacts."""

import re

from autoschema.models.enums import FilenameCase

_IRREGULAR_PLURALS = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "mouse": "mice",
    "goose": "geese",
    "tooth": "teeth",
    "foot": "feet",
}
_UNCOUNTABLE = {"equipment", "information", "rice", "money", "species", "series", "fish", "sheep", "data", "metadata"}
_TS_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")


def to_snake_case(name: str) -> str:
    """Convert PascalCase or camelCase to snake_case."""
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    s2 = re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1)
    return s2.replace("-", "_").lower()


def to_kebab_case(name: str) -> str:
    """Convert PascalCase or camelCase to kebab-case."""
    return to_snake_case(name).replace("_", "-")


def to_pascal_case(name: str) -> str:
    """Convert snake_case, kebab-case or camelCase to PascalCase."""
    words = re.split(r"[_\-\s]+", name)
    return "".join(word[:1].upper() + word[1:] for word in words if word)


def to_camel_case(name: str) -> str:
    pascal = to_pascal_case(name)
    return pascal[:1].lower() + pascal[1:]


def pluralize(word: str) -> str:
    """Pluralize the last word of a snake_case or kebab-case name."""
    head, sep, last = word.rpartition("-") if "-" in word else word.rpartition("_")
    lower = last.lower()

    if lower in _UNCOUNTABLE:
        plural = last
    elif lower in _IRREGULAR_PLURALS:
        plural = _IRREGULAR_PLURALS[lower]
    elif lower.endswith(("s", "x", "z", "ch", "sh")):
        plural = last + "es"
    elif lower.endswith("y") and len(lower) > 1 and lower[-2] not in "aeiou":
        plural = last[:-1] + "ies"
    else:
        plural = last + "s"
    return f"{head}{sep}{plural}"


def resource_path(entity_name: str) -> str:
    """Dash-cased plural REST resource for an entity (``BlogPost`` -> ``blog-posts``)."""
    return pluralize(to_kebab_case(entity_name))


def apply_case(name: str, case: FilenameCase) -> str:
    match case:
        case FilenameCase.PASCAL:
            return to_pascal_case(name)
        case FilenameCase.CAMEL:
            return to_camel_case(name)
        case FilenameCase.SNAKE:
            return to_snake_case(name)
        case FilenameCase.KEBAB:
            return to_kebab_case(name)
    return name


def ts_string(value: str) -> str:
    """Single-quoted TypeScript string literal."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\n")
    return f"'{escaped}'"


def property_key(name: str) -> str:
    """Object/interface key, quoted when it is not a plain identifier."""
    return name if _TS_IDENTIFIER.match(name) else ts_string(name)


__all__ = [
    "apply_case",
    "pluralize",
    "property_key",
    "resource_path",
    "to_camel_case",
    "to_kebab_case",
    "to_pascal_case",
    "to_snake_case",
    "ts_string",
]
