"""Exception hierarchy for generation runs.

Every per-item failure maps to one of these types. The generation service turns
them into ``ItemError`` records so a single bad entity or artifact never aborts
its siblings.
"""


class AutoSchemaError(Exception):
    """Base class for all autoschema errors."""


class ResolutionError(AutoSchemaError):
    """An explicitly named entity or request could not be located."""


class AnalysisError(AutoSchemaError):
    """Extraction of a single entity or request failed."""


class InvalidEntityError(AnalysisError):
    """The identifier does not resolve to a mapped entity of the configured base kind."""


class RenderError(AutoSchemaError):
    """An artifact could not be rendered or written."""


class ConfigurationError(AutoSchemaError):
    """A configured source directory is missing or unusable."""
