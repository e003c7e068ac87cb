"""Mapping from storage types, casts and Python annotations to TypeScript types.

Every function here is total: unknown input falls back to ``any`` and nothing
raises.
"""

import datetime
import decimal
import types
import typing
import uuid
from typing import Any

from autoschema.models.cast import Cast
from autoschema.models.enums import CastKind

TS_NUMBER = "number"
TS_BOOLEAN = "boolean"
TS_STRING = "string"
TS_DATE = "Date"
TS_OBJECT = "Record<string, any>"
TS_ARRAY = "Array<any>"
TS_ANY = "any"

_CAST_TYPES: dict[CastKind, str] = {
    CastKind.INTEGER: TS_NUMBER,
    CastKind.FLOAT: TS_NUMBER,
    CastKind.BOOLEAN: TS_BOOLEAN,
    CastKind.STRING: TS_STRING,
    CastKind.ARRAY: TS_ARRAY,
    CastKind.JSON: TS_OBJECT,
    CastKind.COLLECTION: TS_ARRAY,
    CastKind.DATE: TS_DATE,
    CastKind.ENUM: TS_STRING,
}

# Keys are lower-cased SQLAlchemy visit names plus common dialect spellings.
_STORAGE_TYPES: dict[str, str] = {
    "integer": TS_NUMBER,
    "int": TS_NUMBER,
    "big_integer": TS_NUMBER,
    "bigint": TS_NUMBER,
    "small_integer": TS_NUMBER,
    "smallint": TS_NUMBER,
    "tinyint": TS_NUMBER,
    "mediumint": TS_NUMBER,
    "numeric": TS_NUMBER,
    "decimal": TS_NUMBER,
    "float": TS_NUMBER,
    "double": TS_NUMBER,
    "double_precision": TS_NUMBER,
    "real": TS_NUMBER,
    "boolean": TS_BOOLEAN,
    "bool": TS_BOOLEAN,
    "string": TS_STRING,
    "unicode": TS_STRING,
    "text": TS_STRING,
    "unicode_text": TS_STRING,
    "char": TS_STRING,
    "nchar": TS_STRING,
    "varchar": TS_STRING,
    "nvarchar": TS_STRING,
    "clob": TS_STRING,
    "longtext": TS_STRING,
    "mediumtext": TS_STRING,
    "tinytext": TS_STRING,
    "uuid": TS_STRING,
    "enum": TS_STRING,
    "date": TS_DATE,
    "datetime": TS_DATE,
    "timestamp": TS_DATE,
    "time": TS_DATE,
    "json": TS_OBJECT,
    "jsonb": TS_OBJECT,
    "array": TS_ARRAY,
}

_PYTHON_TYPES: dict[Any, str] = {
    int: TS_NUMBER,
    float: TS_NUMBER,
    decimal.Decimal: TS_NUMBER,
    bool: TS_BOOLEAN,
    str: TS_STRING,
    uuid.UUID: TS_STRING,
    list: TS_ARRAY,
    tuple: TS_ARRAY,
    set: TS_ARRAY,
    frozenset: TS_ARRAY,
    dict: TS_OBJECT,
    datetime.date: TS_DATE,
    datetime.datetime: TS_DATE,
    datetime.time: TS_DATE,
}

_PYTHON_NAMES: dict[str, str] = {
    python_type.__name__: ts_type
    for python_type, ts_type in _PYTHON_TYPES.items()
    if getattr(python_type, "__module__", None) == "builtins"
}


def map_type(source_type: str, cast: Cast | None = None) -> str:
    """Map a storage type tag, optionally overridden by a cast, to a TypeScript type.

    Args:
        source_type: Storage type tag such as ``"integer"`` or ``"varchar"``.
        cast: Declared cast for the field. Known cast kinds win over the
            storage type; unknown casts fall through to it.

    Returns:
        TypeScript type name, ``"any"`` when nothing matches.
    """
    if cast is not None and cast.kind in _CAST_TYPES:
        return _CAST_TYPES[cast.kind]
    tag = str(source_type or "").strip().lower()
    return _STORAGE_TYPES.get(tag, TS_ANY)


def map_python_type(annotation: Any) -> str:
    """Map a Python return annotation (e.g. from an accessor) to a TypeScript type."""
    if annotation is None or annotation is type(None):
        return TS_ANY
    if isinstance(annotation, str):
        # Unresolved forward reference; only bare builtin names are recognised.
        return _PYTHON_NAMES.get(annotation.strip(), TS_ANY)
    direct = _lookup_python_type(annotation)
    if direct is not None:
        return direct

    origin = typing.get_origin(annotation)
    if origin in (typing.Union, types.UnionType):
        members = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return map_python_type(members[0])
        return TS_ANY
    if origin is not None:
        return _lookup_python_type(origin) or TS_ANY
    return TS_ANY


def _lookup_python_type(annotation: Any) -> str | None:
    try:
        return _PYTHON_TYPES.get(annotation)
    except TypeError:
        return None


__all__ = ["map_type", "map_python_type", "TS_ANY"]
