"""Artifact writer: full-overwrite output of rendered modules."""

import asyncio
import shutil
from pathlib import Path

import structlog

from autoschema.errors import RenderError
from autoschema.models.enums import ArtifactStatus
from autoschema.models.result import ArtifactReport


class ArtifactWriter:
    """Writes rendered artifacts into the output directory.

    Identical content is left untouched. Without ``force`` and with
    ``backup_existing`` set, a differing file is copied to ``<name>.bak`` first.
    """

    def __init__(
        self,
        output_dir: Path,
        extension: str = "ts",
        backup_existing: bool = False,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._output_dir = output_dir
        self._extension = extension
        self._backup_existing = backup_existing
        self._logger = logger or structlog.get_logger(__name__)

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def path_for(self, stem: str) -> Path:
        return self._output_dir / f"{stem}.{self._extension}"

    async def write(self, stem: str, content: str, dry_run: bool = False, force: bool = False) -> ArtifactReport:
        """Write one artifact.

        Args:
            stem: File name without extension.
            content: Full module text.
            dry_run: Report the planned write without touching the filesystem.
            force: Overwrite without taking a backup.

        Returns:
            ArtifactReport describing what happened.

        Raises:
            RenderError: If the file cannot be written.
        """
        path = self.path_for(stem)
        size = len(content.encode("utf-8"))

        if dry_run:
            self._logger.info("artifact_planned", path=str(path), size_bytes=size)
            return ArtifactReport(path=str(path), status=ArtifactStatus.PLANNED, size_bytes=size)

        try:
            status = await asyncio.to_thread(self._write_sync, path, content, force)
        except OSError as e:
            raise RenderError(f"writing {path} failed: {e}") from e

        self._logger.info("artifact_" + status.value, path=str(path), size_bytes=size)
        return ArtifactReport(path=str(path), status=status, size_bytes=size)

    def _write_sync(self, path: Path, content: str, force: bool) -> ArtifactStatus:
        encoded = content.encode("utf-8")
        if path.is_file():
            # Existing files may not be valid UTF-8.
            if path.read_bytes() == encoded:
                return ArtifactStatus.UNCHANGED
            if self._backup_existing and not force:
                backup = path.with_name(path.name + ".bak")
                shutil.copy2(path, backup)
                self._logger.debug("artifact_backed_up", path=str(path), backup=str(backup))

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(encoded)
        return ArtifactStatus.WRITTEN


__all__ = ["ArtifactWriter"]
