"""File walker service for discovering source files in directories."""

import asyncio
from collections.abc import AsyncIterator
from pathlib import Path

import structlog


class FileWalker:
    """Walks directories to discover files matching specified patterns.

    Supports include and exclude patterns using glob syntax. Results are yielded
    in sorted order per pattern so discovery and snapshots are reproducible.
    Uses asyncio.to_thread to avoid blocking the event loop during I/O.
    """

    def __init__(
        self,
        include_patterns: list[str] | None = None,
        exclude_patterns: list[str] | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._include_patterns = include_patterns or ["*.py"]
        self._exclude_patterns = exclude_patterns or []
        self._logger = logger or structlog.get_logger(__name__)

    async def walk(self, directory: Path) -> AsyncIterator[Path]:
        """Walk directory and yield files matching include patterns.

        Args:
            directory: Root directory to walk.

        Yields:
            Absolute paths of matching files, each at most once.

        Raises:
            FileNotFoundError: If directory does not exist.
            NotADirectoryError: If path is not a directory.
        """
        if not directory.exists():
            raise FileNotFoundError(f"Directory not found: {directory}")
        if not directory.is_dir():
            raise NotADirectoryError(f"Path is not a directory: {directory}")

        self._logger.debug(
            "directory_walk_started",
            directory=str(directory),
            include_patterns=self._include_patterns,
            exclude_patterns=self._exclude_patterns,
        )

        seen: set[Path] = set()
        for pattern in self._include_patterns:
            files = await asyncio.to_thread(self._glob_pattern, directory.resolve(), pattern)
            for file_path in files:
                if file_path in seen:
                    continue
                seen.add(file_path)
                yield file_path

        self._logger.debug(
            "directory_walk_completed",
            directory=str(directory),
            file_count=len(seen),
        )

    async def collect(self, directories: list[Path]) -> list[Path]:
        """Collect matching files from every existing directory, in directory order.

        Missing directories are skipped; callers that must report them check
        before calling.
        """
        files: list[Path] = []
        for directory in directories:
            if not directory.is_dir():
                continue
            files.extend([path async for path in self.walk(directory) if path not in files])
        return files

    def _glob_pattern(self, directory: Path, pattern: str) -> list[Path]:
        """Synchronously glob a pattern and filter results."""
        return sorted(
            file_path
            for file_path in directory.rglob(pattern)
            if file_path.is_file() and not self._is_excluded(file_path, directory)
        )

    def _is_excluded(self, file_path: Path, root: Path) -> bool:
        """Check if file matches any exclude pattern."""
        if not self._exclude_patterns:
            return False

        relative_path = file_path.relative_to(root)
        for pattern in self._exclude_patterns:
            if relative_path.match(pattern):
                return True
        return False
