"""Light source scanning and class loading.

Discovery never imports a file just to find out what it declares: the token
stream is scanned for top-level ``class`` statements and the module name is
derived from the file's location under the package root. Only candidates are
imported.
"""

import importlib
import io
import sys
import tokenize
from pathlib import Path

import structlog

from autoschema.errors import ConfigurationError, ResolutionError
from autoschema.services.naming import to_snake_case


def identifier_for(cls: type) -> str:
    """Fully qualified identifier (``package.module.Class``) of a class."""
    return f"{cls.__module__}.{cls.__qualname__}"


def scan_class_names(source: str) -> list[str]:
    """Return top-level class names declared in ``source``, in source order."""
    names: list[str] = []
    expect_name = False
    for token in tokenize.generate_tokens(io.StringIO(source).readline):
        if expect_name:
            if token.type == tokenize.NAME:
                names.append(token.string)
            expect_name = False
        elif token.type == tokenize.NAME and token.string == "class" and token.start[1] == 0:
            expect_name = True
    return names


def module_name_for(path: Path, package_root: Path) -> str | None:
    """Dotted module name of ``path`` relative to ``package_root``, or None."""
    try:
        relative = path.resolve().relative_to(package_root.resolve())
    except ValueError:
        return None

    parts = list(relative.with_suffix("").parts)
    if parts and parts[-1] == "__init__":
        parts.pop()
    if not parts or not all(part.isidentifier() for part in parts):
        return None
    return ".".join(parts)


class ClassLoader:
    """Imports classes by identifier from the application's package root."""

    def __init__(
        self,
        package_root: Path,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._package_root = package_root
        self._logger = logger or structlog.get_logger(__name__)

    def ensure_importable(self) -> None:
        """Put the application's package root on the import path."""
        root = str(self._package_root.resolve())
        if root not in sys.path:
            sys.path.insert(0, root)
            self._logger.debug("package_root_added", package_root=root)

    def load(self, identifier: str) -> type:
        """Import and return the class named by ``identifier``.

        Raises:
            ResolutionError: If the module cannot be imported or does not define
                a class with that name.
        """
        module_name, _, class_name = identifier.rpartition(".")
        if not module_name or not class_name:
            raise ResolutionError(f"{identifier} is not a fully qualified class name")

        self.ensure_importable()
        try:
            module = importlib.import_module(module_name)
        except ModuleNotFoundError as e:
            raise ResolutionError(f"module {module_name} not found") from e
        except Exception as e:
            raise ResolutionError(f"importing {module_name} failed: {e}") from e

        obj = getattr(module, class_name, None)
        if not isinstance(obj, type):
            raise ResolutionError(f"{identifier} is not a class")
        return obj

    def try_load(self, identifier: str) -> type | None:
        try:
            return self.load(identifier)
        except ResolutionError as e:
            self._logger.debug("class_load_failed", identifier=identifier, error=str(e))
            return None

    def load_base(self, identifier: str) -> type:
        """Load a configured base class; a missing base is a configuration problem."""
        try:
            return self.load(identifier)
        except ResolutionError as e:
            raise ConfigurationError(f"base class {identifier} cannot be loaded: {e}") from e

    def resolve_name(self, name: str, namespaces: list[str]) -> str | None:
        """Resolve a short or dotted name against conventional namespaces.

        For each namespace ``ns`` both ``ns.Name`` and ``ns.<snake_name>.Name`` are
        tried, then ``name`` itself. The first class found wins.

        Returns:
            Canonical identifier of the class, or None when nothing matches.
        """
        candidates: list[str] = []
        for namespace in namespaces:
            candidates.append(f"{namespace}.{name}")
            candidates.append(f"{namespace}.{to_snake_case(name)}.{name}")
        candidates.append(name)

        for candidate in candidates:
            cls = self.try_load(candidate)
            if cls is not None:
                return identifier_for(cls)
        return None

    def scan_file(self, path: Path) -> list[str]:
        """Candidate class identifiers declared at the top level of a source file."""
        module_name = module_name_for(path, self._package_root)
        if module_name is None:
            self._logger.debug("file_outside_package_root", file_path=str(path))
            return []

        try:
            source = path.read_text(encoding="utf-8")
            class_names = scan_class_names(source)
        except (OSError, UnicodeDecodeError, SyntaxError, tokenize.TokenError) as e:
            self._logger.warning("file_scan_failed", file_path=str(path), error=str(e))
            return []

        return [f"{module_name}.{class_name}" for class_name in class_names]


__all__ = ["ClassLoader", "identifier_for", "module_name_for", "scan_class_names"]
