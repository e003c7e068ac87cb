"""Polling change watcher over the model (and migration) directories."""

import asyncio
import hashlib
import time
from collections.abc import Awaitable, Callable
from pathlib import Path

import structlog

from autoschema.models.snapshot import ChangeSet, WatchSnapshot
from autoschema.services.file_walker import FileWalker

ChangeCallback = Callable[[ChangeSet], Awaitable[None]]


def hash_file(path: Path) -> str:
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for block in iter(lambda: handle.read(65536), b""):
            digest.update(block)
    return digest.hexdigest()


class Watcher:
    """Polls directories for content changes and triggers a callback.

    Each cycle rehashes every watched file, classifies the differences against
    the previous snapshot and replaces the snapshot wholesale. The callback is
    awaited only when something changed; its failures are logged and the loop
    keeps going. An idle heartbeat is logged every ``heartbeat_seconds``
    without changes; ``None`` turns it off.
    """

    def __init__(
        self,
        file_walker: FileWalker,
        directories: list[Path],
        on_change: ChangeCallback,
        interval: float = 2.0,
        heartbeat_seconds: float | None = 30.0,
        clock: Callable[[], float] = time.monotonic,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._file_walker = file_walker
        self._directories = directories
        self._on_change = on_change
        self._interval = max(1.0, interval)
        self._heartbeat_seconds = heartbeat_seconds
        self._clock = clock
        self._logger = logger or structlog.get_logger(__name__)
        self._snapshot = WatchSnapshot()
        self._last_activity = clock()

    @property
    def snapshot(self) -> WatchSnapshot:
        return self._snapshot

    @property
    def interval(self) -> float:
        return self._interval

    async def take_snapshot(self) -> WatchSnapshot:
        """Hash every watched file that currently exists.

        Files that vanish or cannot be read between listing and hashing are
        left out of the snapshot.
        """
        hashes: dict[str, str] = {}
        for file_path in await self._file_walker.collect(self._directories):
            try:
                hashes[str(file_path)] = await asyncio.to_thread(hash_file, file_path)
            except OSError as e:
                self._logger.debug("file_hash_failed", file_path=str(file_path), error=str(e))
        return WatchSnapshot(hashes=hashes)

    @staticmethod
    def diff(previous: WatchSnapshot, current: WatchSnapshot) -> ChangeSet:
        """Classify paths as added, modified or deleted between two snapshots."""
        added = sorted(path for path in current.hashes if path not in previous)
        deleted = sorted(path for path in previous.hashes if path not in current)
        modified = sorted(
            path
            for path, digest in current.hashes.items()
            if path in previous and previous.hashes[path] != digest
        )
        return ChangeSet(added=added, modified=modified, deleted=deleted)

    async def prime(self) -> None:
        """Take the initial snapshot."""
        self._snapshot = await self.take_snapshot()
        self._last_activity = self._clock()
        self._logger.info(
            "watch_started",
            directories=[str(d) for d in self._directories],
            file_count=len(self._snapshot),
            interval=self._interval,
        )

    async def poll_once(self) -> ChangeSet:
        """Run one watch cycle and return what changed."""
        current = await self.take_snapshot()
        changes = self.diff(self._snapshot, current)
        self._snapshot = current

        if changes.has_changes:
            self._last_activity = self._clock()
            for kind, paths in changes.items():
                self._logger.info("files_changed", kind=kind, count=len(paths), paths=paths)
            try:
                await self._on_change(changes)
            except Exception as e:
                self._logger.error("regeneration_failed", error=str(e))
        elif self._heartbeat_due():
            self._last_activity = self._clock()
            self._logger.info("watch_idle", file_count=len(self._snapshot))
        return changes

    def _heartbeat_due(self) -> bool:
        if self._heartbeat_seconds is None:
            return False
        return self._clock() - self._last_activity >= self._heartbeat_seconds

    async def run(self, stop_event: asyncio.Event) -> None:
        """Poll until ``stop_event`` is set."""
        await self.prime()
        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self._interval)
                break
            except TimeoutError:
                pass
            await self.poll_once()
        self._logger.info("watch_stopped")


__all__ = ["ChangeCallback", "Watcher", "hash_file"]
