from enum import StrEnum


class CastKind(StrEnum):
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    STRING = "string"
    ARRAY = "array"
    JSON = "json"
    COLLECTION = "collection"
    DATE = "date"
    ENUM = "enum"
    UNKNOWN = "unknown"


class Cardinality(StrEnum):
    TO_ONE = "to_one"
    TO_MANY = "to_many"


class SemanticType(StrEnum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    DATE = "date"
    EMAIL = "email"
    URL = "url"
    FILE = "file"
    REFERENCE = "reference"
    MIXED = "mixed"


class RequestIntent(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    GENERAL = "general"


class FilenameCase(StrEnum):
    PASCAL = "pascal"
    CAMEL = "camel"
    SNAKE = "snake"
    KEBAB = "kebab"


class ValidationDialect(StrEnum):
    ZOD = "zod"
    YUP = "yup"
    JOI = "joi"


class AuthStyle(StrEnum):
    NONE = "none"
    SESSION = "session"
    TOKEN = "token"


class ErrorKind(StrEnum):
    RESOLUTION = "resolution"
    ANALYSIS = "analysis"
    RENDER = "render"
    CONFIGURATION = "configuration"


class ArtifactStatus(StrEnum):
    WRITTEN = "written"
    UNCHANGED = "unchanged"
    PLANNED = "planned"
    FAILED = "failed"
