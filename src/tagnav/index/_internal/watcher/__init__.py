"""File watching for background re-indexing."""

from tagnav.index._internal.watcher.watcher import (
    BackgroundIndexer,
    ChangeSource,
    FileChangeEvent,
    FileChangeKind,
    FileWatcher,
    WatcherQueue,
    coalesce,
)

__all__ = [
    "BackgroundIndexer",
    "ChangeSource",
    "FileChangeEvent",
    "FileChangeKind",
    "FileWatcher",
    "WatcherQueue",
    "coalesce",
]
