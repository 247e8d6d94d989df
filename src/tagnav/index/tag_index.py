"""Selector -> ComponentRecord mapping with per-file provenance.

The index is the only shared mutable state of the system. Every write goes
through ``replace_for_file``, which swaps a file's whole contribution under
one lock, so readers see either the old or the new set of records for a
file, never a mix.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from tagnav.index.models import ComponentRecord

logger = structlog.get_logger()


@dataclass(frozen=True, slots=True)
class IndexDelta:
    """Selectors touched by one ``replace_for_file`` call."""

    added: frozenset[str] = field(default_factory=frozenset)
    removed: frozenset[str] = field(default_factory=frozenset)
    updated: frozenset[str] = field(default_factory=frozenset)
    shadowed: frozenset[str] = field(default_factory=frozenset)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed or self.updated)


class TagIndex:
    """Thread-safe tag index.

    Usage::

        index = TagIndex()
        index.replace_for_file(path, extractor.extract(path, text))
        record = index.lookup("app-foo")
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_selector: dict[str, ComponentRecord] = {}
        self._by_file: dict[Path, set[str]] = {}

    def replace_for_file(self, path: Path, records: Iterable[ComponentRecord]) -> IndexDelta:
        """Atomically replace every entry whose provenance is ``path``.

        When another file already owns a selector in ``records``, the new
        record wins and the overwrite is logged as ``selector_shadowed``.

        Raises:
            ValueError: A record's path differs from ``path``.
        """
        new_records = list(records)
        for record in new_records:
            if record.path != path:
                raise ValueError(
                    f"Record for {record.selector!r} belongs to {record.path}, not {path}"
                )

        with self._lock:
            old_selectors = self._by_file.pop(path, set())
            previous = {s: self._by_selector.pop(s) for s in old_selectors}

            shadowed: set[str] = set()
            new_selectors: set[str] = set()
            for record in new_records:
                owner = self._by_selector.get(record.selector)
                if owner is not None and owner.path != path:
                    self._by_file[owner.path].discard(record.selector)
                    if not self._by_file[owner.path]:
                        del self._by_file[owner.path]
                    shadowed.add(record.selector)
                    logger.warning(
                        "selector_shadowed",
                        selector=record.selector,
                        winner=str(path),
                        shadowed=str(owner.path),
                    )
                self._by_selector[record.selector] = record
                new_selectors.add(record.selector)

            if new_selectors:
                self._by_file[path] = new_selectors

        updated = {
            s
            for s in new_selectors & old_selectors
            if previous[s] != self._record_or_none(s, new_records)
        }
        return IndexDelta(
            added=frozenset(new_selectors - old_selectors),
            removed=frozenset(old_selectors - new_selectors),
            updated=frozenset(updated),
            shadowed=frozenset(shadowed),
        )

    @staticmethod
    def _record_or_none(selector: str, records: list[ComponentRecord]) -> ComponentRecord | None:
        # Last record for a selector is the one that was stored
        for record in reversed(records):
            if record.selector == selector:
                return record
        return None

    def remove_file(self, path: Path) -> IndexDelta:
        """Drop every entry originating from ``path``."""
        return self.replace_for_file(path, [])

    def lookup(self, selector: str) -> ComponentRecord | None:
        with self._lock:
            return self._by_selector.get(selector)

    def selectors(self) -> list[str]:
        """Snapshot of all indexed selectors, sorted."""
        with self._lock:
            return sorted(self._by_selector)

    def records(self) -> list[ComponentRecord]:
        """Snapshot of all records, sorted by selector."""
        with self._lock:
            return [self._by_selector[s] for s in sorted(self._by_selector)]

    def records_for_file(self, path: Path) -> list[ComponentRecord]:
        with self._lock:
            return [self._by_selector[s] for s in sorted(self._by_file.get(path, ()))]

    def files(self) -> list[Path]:
        with self._lock:
            return sorted(self._by_file)

    def clear(self) -> None:
        with self._lock:
            self._by_selector.clear()
            self._by_file.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_selector)

    def __contains__(self, selector: object) -> bool:
        with self._lock:
            return selector in self._by_selector
