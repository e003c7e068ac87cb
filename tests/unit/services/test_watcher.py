"""Unit tests for the polling Watcher."""

import asyncio
import hashlib
from pathlib import Path
from typing import Any

import pytest

from autoschema.models.snapshot import ChangeSet, WatchSnapshot
from autoschema.services.file_walker import FileWalker
from autoschema.services.watcher import Watcher, hash_file


class FakeLogger:
    """Records structlog-style calls as (level, event, kwargs)."""

    def __init__(self) -> None:
        self.records: list[tuple[str, str, dict[str, Any]]] = []

    def _record(self, level: str, event: str, **kwargs: Any) -> None:
        self.records.append((level, event, kwargs))

    def debug(self, event: str, **kwargs: Any) -> None:
        self._record("debug", event, **kwargs)

    def info(self, event: str, **kwargs: Any) -> None:
        self._record("info", event, **kwargs)

    def warning(self, event: str, **kwargs: Any) -> None:
        self._record("warning", event, **kwargs)

    def error(self, event: str, **kwargs: Any) -> None:
        self._record("error", event, **kwargs)

    def events(self) -> list[str]:
        return [event for _, event, _ in self.records]


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class RecordingCallback:
    def __init__(self, error: Exception | None = None) -> None:
        self.calls: list[ChangeSet] = []
        self._error = error

    async def __call__(self, changes: ChangeSet) -> None:
        self.calls.append(changes)
        if self._error is not None:
            raise self._error


@pytest.fixture
def watched_dir(tmp_path: Path) -> Path:
    models = tmp_path / "models"
    models.mkdir()
    (models / "a.py").write_text("class A: pass\n")
    (models / "b.py").write_text("class B: pass\n")
    return models


def _watcher(
    directory: Path,
    callback: RecordingCallback,
    logger: FakeLogger | None = None,
    clock: FakeClock | None = None,
) -> Watcher:
    return Watcher(
        file_walker=FileWalker(include_patterns=["*.py"]),
        directories=[directory],
        on_change=callback,
        interval=1,
        heartbeat_seconds=30,
        clock=clock or FakeClock(),
        logger=logger or FakeLogger(),  # type: ignore[arg-type]
    )


class TestDiff:
    """Tests for snapshot classification."""

    def test_classifies_added_modified_and_deleted(self) -> None:
        previous = WatchSnapshot(hashes={"/m/a.py": "h1", "/m/b.py": "h2"})
        current = WatchSnapshot(hashes={"/m/a.py": "h1x", "/m/c.py": "h3"})

        changes = Watcher.diff(previous, current)

        assert changes.added == ["/m/c.py"]
        assert changes.modified == ["/m/a.py"]
        assert changes.deleted == ["/m/b.py"]

    def test_identical_snapshots_have_no_changes(self) -> None:
        snapshot = WatchSnapshot(hashes={"/m/a.py": "h1"})

        assert not Watcher.diff(snapshot, snapshot).has_changes


class TestPolling:
    """Tests for watch cycles against a real directory."""

    async def test_snapshot_hashes_contents(self, watched_dir: Path) -> None:
        watcher = _watcher(watched_dir, RecordingCallback())

        snapshot = await watcher.take_snapshot()

        path = str((watched_dir / "a.py").resolve())
        assert snapshot.hashes[path] == hashlib.sha256(b"class A: pass\n").hexdigest()
        assert len(snapshot) == 2

    async def test_detects_changes_and_invokes_callback(self, watched_dir: Path) -> None:
        callback = RecordingCallback()
        watcher = _watcher(watched_dir, callback)
        await watcher.prime()

        (watched_dir / "a.py").write_text("class A:\n    x = 1\n")
        (watched_dir / "b.py").unlink()
        (watched_dir / "c.py").write_text("class C: pass\n")
        changes = await watcher.poll_once()

        assert [Path(p).name for p in changes.added] == ["c.py"]
        assert [Path(p).name for p in changes.modified] == ["a.py"]
        assert [Path(p).name for p in changes.deleted] == ["b.py"]
        assert callback.calls == [changes]
        assert len(watcher.snapshot) == 2

    async def test_no_changes_skips_callback(self, watched_dir: Path) -> None:
        callback = RecordingCallback()
        watcher = _watcher(watched_dir, callback)
        await watcher.prime()

        changes = await watcher.poll_once()

        assert not changes.has_changes
        assert callback.calls == []

    async def test_callback_errors_are_logged_and_swallowed(self, watched_dir: Path) -> None:
        logger = FakeLogger()
        watcher = _watcher(watched_dir, RecordingCallback(RuntimeError("generate failed")), logger=logger)
        await watcher.prime()
        (watched_dir / "a.py").write_text("changed")

        await watcher.poll_once()
        (watched_dir / "b.py").write_text("changed too")
        changes = await watcher.poll_once()

        assert changes.modified
        assert logger.events().count("regeneration_failed") == 2

    async def test_heartbeat_after_idle_period(self, watched_dir: Path) -> None:
        logger = FakeLogger()
        clock = FakeClock()
        watcher = _watcher(watched_dir, RecordingCallback(), logger=logger, clock=clock)
        await watcher.prime()

        clock.now = 10.0
        await watcher.poll_once()
        assert "watch_idle" not in logger.events()

        clock.now = 31.0
        await watcher.poll_once()
        assert logger.events().count("watch_idle") == 1

        clock.now = 40.0
        await watcher.poll_once()
        assert logger.events().count("watch_idle") == 1

    async def test_no_heartbeat_when_disabled(self, watched_dir: Path) -> None:
        logger = FakeLogger()
        clock = FakeClock()
        watcher = Watcher(
            file_walker=FileWalker(include_patterns=["*.py"]),
            directories=[watched_dir],
            on_change=RecordingCallback(),
            heartbeat_seconds=None,
            clock=clock,
            logger=logger,  # type: ignore[arg-type]
        )
        await watcher.prime()

        clock.now = 3600.0
        await watcher.poll_once()

        assert "watch_idle" not in logger.events()


class TestRun:
    async def test_stops_when_event_is_set(self, watched_dir: Path) -> None:
        logger = FakeLogger()
        watcher = _watcher(watched_dir, RecordingCallback(), logger=logger)
        stop_event = asyncio.Event()
        stop_event.set()

        await asyncio.wait_for(watcher.run(stop_event), timeout=5)

        assert len(watcher.snapshot) == 2
        assert logger.events()[0] == "watch_started"
        assert logger.events()[-1] == "watch_stopped"

    async def test_stops_while_waiting(self, watched_dir: Path) -> None:
        watcher = _watcher(watched_dir, RecordingCallback())
        stop_event = asyncio.Event()

        task = asyncio.create_task(watcher.run(stop_event))
        await asyncio.sleep(0.05)
        stop_event.set()

        await asyncio.wait_for(task, timeout=5)
        assert task.done()


def test_interval_has_a_floor(watched_dir: Path) -> None:
    watcher = Watcher(
        file_walker=FileWalker(),
        directories=[watched_dir],
        on_change=RecordingCallback(),
        interval=0.1,
    )

    assert watcher.interval == 1.0


def test_hash_file(tmp_path: Path) -> None:
    path = tmp_path / "x.py"
    path.write_bytes(b"abc")

    assert hash_file(path) == hashlib.sha256(b"abc").hexdigest()
