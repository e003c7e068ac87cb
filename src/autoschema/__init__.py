"""autoschema - Generate TypeScript types, validation schemas and an API client from ORM models."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("autoschema")
except PackageNotFoundError:
    __version__ = "unknown"

__all__ = ["__version__"]
