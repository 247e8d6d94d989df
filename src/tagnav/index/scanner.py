"""Workspace enumeration and incremental rescans.

The scanner is the write path into the TagIndex: it reads files (off the
event loop), runs the extractor and swaps the file's records in the index.
Rescans of one file are serialized by a per-path asyncio.Lock; different
files proceed concurrently.
"""

from __future__ import annotations

import asyncio
import os
import time
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path

import structlog

from tagnav.index._internal.extraction import ComponentExtractor
from tagnav.index._internal.ignore import PathFilter
from tagnav.index._internal.watcher import FileChangeEvent, FileChangeKind, coalesce
from tagnav.index.tag_index import IndexDelta, TagIndex

logger = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class ScanStats:
    """Result of a full workspace scan."""

    files_scanned: int = 0
    files_skipped: int = 0
    components_indexed: int = 0
    duration_ms: int = 0


class WorkspaceScanner:
    """Feeds the extractor from the filesystem and updates the index.

    Usage::

        scanner = WorkspaceScanner(extractor, index)
        stats = await scanner.scan_workspace(root)
        await scanner.apply_event(event)
    """

    def __init__(
        self,
        extractor: ComponentExtractor,
        index: TagIndex,
        *,
        include: str = "src/**/*.ts",
        exclude: str | None = "**/node_modules/**",
    ) -> None:
        self._extractor = extractor
        self._index = index
        self._include = include
        self._exclude = exclude
        self._locks: dict[Path, asyncio.Lock] = {}

    @property
    def index(self) -> TagIndex:
        return self._index

    def path_filter(self, root: Path) -> PathFilter:
        return PathFilter(root, include=self._include, exclude=self._exclude)

    def iter_source_files(self, root: Path) -> Iterator[Path]:
        """Yield files under ``root`` selected by the include/exclude globs."""
        path_filter = self.path_filter(root)
        for dirpath, dirnames, filenames in os.walk(root):
            # Prune in place so os.walk never descends
            dirnames[:] = sorted(d for d in dirnames if not path_filter.should_prune_dir(d))
            for filename in sorted(filenames):
                file_path = Path(dirpath) / filename
                if path_filter.matches(file_path):
                    yield file_path

    async def scan_workspace(self, root: Path) -> ScanStats:
        """Index every matching file under ``root``."""
        start = time.monotonic()
        paths = await asyncio.to_thread(lambda: list(self.iter_source_files(root)))
        results = await asyncio.gather(*(self.rescan_file(p) for p in paths))

        skipped = sum(1 for r in results if r is None)
        stats = ScanStats(
            files_scanned=len(paths) - skipped,
            files_skipped=skipped,
            components_indexed=len(self._index),
            duration_ms=int((time.monotonic() - start) * 1000),
        )
        logger.info(
            "workspace_scanned",
            root=str(root),
            files=stats.files_scanned,
            skipped=stats.files_skipped,
            components=stats.components_indexed,
            duration_ms=stats.duration_ms,
        )
        return stats

    def _lock_for(self, path: Path) -> asyncio.Lock:
        lock = self._locks.get(path)
        if lock is None:
            lock = self._locks[path] = asyncio.Lock()
        return lock

    async def rescan_file(self, path: Path) -> IndexDelta | None:
        """Re-extract one file and replace its index entries.

        A file that no longer exists is treated as deleted. Returns None if
        the file could not be read, decoded or extracted (logged, index
        untouched).
        """
        async with self._lock_for(path):
            try:
                text = await asyncio.to_thread(path.read_text, encoding="utf-8")
            except FileNotFoundError:
                return self._remove(path)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("file_read_failed", path=str(path), error=str(e))
                return None

            try:
                records = self._extractor.extract(path, text)
            except Exception as e:
                logger.error(
                    "file_extract_failed",
                    path=str(path),
                    error=str(e),
                    error_type=type(e).__name__,
                    exc_info=True,
                )
                return None
            delta = self._index.replace_for_file(path, records)
            if delta.changed:
                logger.debug(
                    "file_rescanned",
                    path=str(path),
                    added=sorted(delta.added),
                    removed=sorted(delta.removed),
                    updated=sorted(delta.updated),
                )
            return delta

    async def remove_file(self, path: Path) -> IndexDelta:
        async with self._lock_for(path):
            return self._remove(path)

    def _remove(self, path: Path) -> IndexDelta:
        delta = self._index.remove_file(path)
        if delta.removed:
            logger.debug("file_removed", path=str(path), removed=sorted(delta.removed))
        return delta

    async def apply_event(self, event: FileChangeEvent) -> IndexDelta | None:
        """Apply one watcher event to the index."""
        if event.kind is FileChangeKind.DELETED:
            return await self.remove_file(event.path)
        return await self.rescan_file(event.path)

    async def apply_events(self, events: Iterable[FileChangeEvent]) -> None:
        """Apply a batch of events; different paths run concurrently."""
        await asyncio.gather(*(self.apply_event(e) for e in coalesce(events)))
