"""File watching for continuous background re-indexing.

- Watch the workspace root with watchfiles (native notify backend)
- Keep only paths selected by the workspace PathFilter
- Debounce bursts (editors often save in several writes)
- Hand batches to a bounded queue; a single consumer applies them
- Never let a failed batch stop the consumer
"""

from __future__ import annotations

import asyncio
import contextlib
import time
from collections.abc import AsyncIterator, Awaitable, Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol

import structlog
from watchfiles import Change, awatch

from tagnav.index._internal.ignore import PathFilter

logger = structlog.get_logger()


class FileChangeKind(Enum):
    """Kind of file change detected."""

    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"


@dataclass(frozen=True, slots=True)
class FileChangeEvent:
    """A file change event. ``path`` is absolute."""

    path: Path
    kind: FileChangeKind
    timestamp: float


_CHANGE_KINDS: dict[Change, FileChangeKind] = {
    Change.added: FileChangeKind.CREATED,
    Change.modified: FileChangeKind.MODIFIED,
    Change.deleted: FileChangeKind.DELETED,
}


def coalesce(events: Iterable[FileChangeEvent]) -> list[FileChangeEvent]:
    """Keep the latest event per path, in order of each path's first event."""
    latest: dict[Path, FileChangeEvent] = {}
    for event in events:
        latest[event.path] = event
    return list(latest.values())


class ChangeSource(Protocol):
    """Anything that yields batches of change events until stopped."""

    def watch(self) -> AsyncIterator[list[FileChangeEvent]]: ...

    def stop(self) -> None: ...


class FileWatcher:
    """Watches a workspace root and yields debounced batches of events.

    Usage::

        watcher = FileWatcher(PathFilter(root, include="src/**/*.ts"))

        async for events in watcher.watch():
            for event in events:
                print(f"{event.kind}: {event.path}")
    """

    def __init__(
        self,
        path_filter: PathFilter,
        *,
        debounce_ms: int = 300,
        step_ms: int = 50,
    ) -> None:
        self._filter = path_filter
        self._debounce_ms = debounce_ms
        self._step_ms = step_ms
        self._stop_event: asyncio.Event | None = None
        self._running = False

    @property
    def root(self) -> Path:
        return self._filter.root

    @property
    def is_running(self) -> bool:
        return self._running

    async def watch(self) -> AsyncIterator[list[FileChangeEvent]]:
        """Watch for file changes and yield batches.

        Yields:
            Non-empty batches of FileChangeEvent objects
        """
        self._running = True
        self._stop_event = asyncio.Event()
        logger.info("file_watcher_started", root=str(self.root), debounce_ms=self._debounce_ms)
        try:
            async for changes in awatch(
                self.root,
                watch_filter=self._accept,
                debounce=self._debounce_ms,
                step=self._step_ms,
                stop_event=self._stop_event,
                ignore_permission_denied=True,
            ):
                events = self.to_events(changes)
                if events:
                    logger.debug("changes_detected", count=len(events))
                    yield events
        finally:
            self._running = False
            self._stop_event = None
            logger.info("file_watcher_stopped", root=str(self.root))

    def stop(self) -> None:
        """Signal the watcher to stop."""
        if self._stop_event:
            self._stop_event.set()

    def _accept(self, change: Change, path: str) -> bool:
        return self._filter.matches(Path(path))

    def to_events(self, changes: Iterable[tuple[Change, str]]) -> list[FileChangeEvent]:
        """Convert raw watchfiles changes into coalesced events."""
        now = time.time()
        return coalesce(
            FileChangeEvent(path=Path(raw), kind=_CHANGE_KINDS[change], timestamp=now)
            for change, raw in changes
            if self._filter.matches(Path(raw))
        )


class WatcherQueue:
    """Async queue for file change batches with backpressure.

    When full, new batches are dropped and counted rather than blocking the
    watcher.
    """

    def __init__(self, max_size: int = 1000) -> None:
        self._queue: asyncio.Queue[list[FileChangeEvent]] = asyncio.Queue(maxsize=max_size)
        self._dropped = 0

    @property
    def dropped_count(self) -> int:
        """Number of events dropped due to queue full."""
        return self._dropped

    def put(self, events: list[FileChangeEvent]) -> bool:
        """Add a batch to the queue. Returns False if it was dropped."""
        try:
            self._queue.put_nowait(events)
            return True
        except asyncio.QueueFull:
            self._dropped += len(events)
            logger.warning("watcher_queue_full", dropped=len(events), total_dropped=self._dropped)
            return False

    async def get(self) -> list[FileChangeEvent]:
        return await self._queue.get()

    def task_done(self) -> None:
        self._queue.task_done()

    async def join(self) -> None:
        """Wait until every queued batch has been processed."""
        await self._queue.join()

    def empty(self) -> bool:
        return self._queue.empty()


class BackgroundIndexer:
    """Ties a change source to an index callback through a WatcherQueue.

    Usage::

        indexer = BackgroundIndexer(watcher, scanner.apply_events)
        await indexer.start()
        # ... later ...
        await indexer.stop()
    """

    def __init__(
        self,
        watcher: ChangeSource,
        index_callback: Callable[[list[FileChangeEvent]], Awaitable[object]],
        *,
        queue_max_size: int = 1000,
    ) -> None:
        self._watcher = watcher
        self._index_callback = index_callback
        self._queue = WatcherQueue(max_size=queue_max_size)
        self._watch_task: asyncio.Task[None] | None = None
        self._process_task: asyncio.Task[None] | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def queue_dropped(self) -> int:
        """Number of events dropped due to queue overflow."""
        return self._queue.dropped_count

    async def start(self) -> None:
        """Start background watching and indexing."""
        if self._running:
            return
        self._running = True
        self._watch_task = asyncio.create_task(self._watch_loop())
        self._process_task = asyncio.create_task(self._process_loop())

    async def wait_idle(self) -> None:
        """Wait until all batches received so far have been applied."""
        await self._queue.join()

    async def stop(self) -> None:
        """Stop background watching and indexing."""
        if not self._running:
            return
        self._running = False
        self._watcher.stop()

        for task in (self._watch_task, self._process_task):
            if task is not None:
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
        self._watch_task = None
        self._process_task = None

    async def _watch_loop(self) -> None:
        try:
            async for events in self._watcher.watch():
                self._queue.put(events)
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error("watcher_error", error=str(e), error_type=type(e).__name__)

    async def _process_loop(self) -> None:
        try:
            while self._running:
                events = await self._queue.get()
                try:
                    await self._index_callback(coalesce(events))
                except OSError as e:
                    # Filesystem errors (permission denied, disk full, etc.)
                    logger.warning("indexing_callback_os_error", error=str(e), count=len(events))
                except ValueError as e:
                    logger.warning("indexing_callback_value_error", error=str(e), count=len(events))
                except Exception as e:
                    logger.error(
                        "indexing_callback_unexpected_error",
                        error=str(e),
                        error_type=type(e).__name__,
                        count=len(events),
                        exc_info=True,
                    )
                finally:
                    self._queue.task_done()
        except asyncio.CancelledError:
            pass
