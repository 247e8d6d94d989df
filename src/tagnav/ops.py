"""High-level orchestration of tag navigation.

This module implements the TagNavigator - the entry point for all
operations. It owns component lifecycles:

    Scanner/Watcher -> Extractor -> TagIndex      (write path)
    ContextAnalyzer -> Resolver <- TagIndex       (read path)

Grammar loading happens at construction and is the only fatal step.
"""

from __future__ import annotations

from pathlib import Path

import structlog

from tagnav.analysis import (
    Cancellable,
    CompletionItem,
    ContextAnalyzer,
    DefinitionTarget,
    Resolver,
)
from tagnav.config import TagNavConfig, load_config
from tagnav.core.logging import clear_request_id, set_request_id
from tagnav.index import ScanStats, TagIndex, WorkspaceScanner
from tagnav.index._internal.extraction import ComponentExtractor
from tagnav.index._internal.parsing import load_grammar
from tagnav.index._internal.watcher import BackgroundIndexer, ChangeSource, FileWatcher

logger = structlog.get_logger()


class TagNavigator:
    """Coordinates indexing and the completion/definition entry points.

    Usage::

        nav = TagNavigator(Path("/repo"))
        await nav.scan_workspace()
        nav.definition("app-foo")
        nav.completion('<app-foo ', 9)

    Raises:
        GrammarLoadError: A configured grammar could not be loaded.
    """

    def __init__(
        self,
        root: Path,
        config: TagNavConfig | None = None,
        *,
        watcher: ChangeSource | None = None,
    ) -> None:
        self.root = root.resolve()
        self.config = config or TagNavConfig()

        grammars = self.config.grammars
        ts_parser = load_grammar("typescript", grammars.typescript)
        html_parser = load_grammar("html", grammars.html)

        self.index = TagIndex()
        self.scanner = WorkspaceScanner(
            ComponentExtractor(ts_parser),
            self.index,
            include=self.config.workspace.include,
            exclude=self.config.workspace.exclude,
        )
        self.analyzer = ContextAnalyzer(html_parser)
        self.resolver = Resolver(self.index, self.analyzer)

        self._watcher = watcher
        self._background: BackgroundIndexer | None = None

    @classmethod
    def from_root(cls, root: Path, **overrides: object) -> TagNavigator:
        """Build a navigator with configuration loaded for ``root``."""
        return cls(root, load_config(root, **overrides))

    # -- write path ------------------------------------------------------------

    async def scan_workspace(self, root: Path | None = None) -> ScanStats:
        """Populate the index from every matching file under the root."""
        return await self.scanner.scan_workspace(root.resolve() if root else self.root)

    @property
    def is_watching(self) -> bool:
        return self._background is not None and self._background.is_running

    async def start_watching(self) -> None:
        """Start applying file changes to the index in the background."""
        if self.is_watching:
            return
        watch = self.config.watch
        watcher = self._watcher or FileWatcher(
            self.scanner.path_filter(self.root),
            debounce_ms=watch.debounce_ms,
            step_ms=watch.step_ms,
        )
        self._background = BackgroundIndexer(
            watcher, self.scanner.apply_events, queue_max_size=watch.queue_max_size
        )
        await self._background.start()
        logger.info("watching_started", root=str(self.root))

    async def wait_idle(self) -> None:
        """Wait until queued file changes have been applied."""
        if self._background is not None:
            await self._background.wait_idle()

    async def stop_watching(self) -> None:
        if self._background is None:
            return
        dropped = self._background.queue_dropped
        await self._background.stop()
        self._background = None
        logger.info("watching_stopped", root=str(self.root), dropped_events=dropped)

    # -- read path -------------------------------------------------------------

    def definition(
        self, selector: str, cancel: Cancellable | None = None
    ) -> DefinitionTarget | None:
        """Declaration of the component with exactly this selector."""
        set_request_id()
        try:
            target = self.resolver.definition(selector, cancel)
            logger.debug("definition_resolved", selector=selector, found=target is not None)
            return target
        finally:
            clear_request_id()

    def definition_at(
        self, text: str | bytes, offset: int, cancel: Cancellable | None = None
    ) -> DefinitionTarget | None:
        """Declaration of the component whose tag name is under the cursor."""
        if cancel is not None and cancel.is_cancelled:
            return None
        hit = self.analyzer.tag_name_at(text, offset)
        if hit is None:
            return None
        return self.definition(hit[0], cancel)

    def completion(
        self, text: str | bytes, offset: int, cancel: Cancellable | None = None
    ) -> list[CompletionItem]:
        """Completion items for a cursor at byte ``offset`` in markup text."""
        set_request_id()
        try:
            items = self.resolver.completion(text, offset, cancel)
            logger.debug("completion_resolved", offset=offset, items=len(items))
            return items
        finally:
            clear_request_id()
