"""Tests for TagNavigator orchestration."""

import asyncio
import time
from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio

from tagnav.analysis import CancellationToken, CompletionKind
from tagnav.config import TagNavConfig
from tagnav.config.models import GrammarConfig
from tagnav.core.errors import GrammarLoadError
from tagnav.index._internal.watcher import FileChangeEvent, FileChangeKind
from tagnav.ops import TagNavigator


class FakeWatcher:
    """Change source the test pushes batches into."""

    def __init__(self) -> None:
        self.batches: asyncio.Queue[list[FileChangeEvent] | None] = asyncio.Queue()

    async def watch(self) -> AsyncIterator[list[FileChangeEvent]]:
        while (batch := await self.batches.get()) is not None:
            yield batch

    def stop(self) -> None:
        self.batches.put_nowait(None)


async def _drain(watcher: FakeWatcher, nav: TagNavigator) -> None:
    for _ in range(200):
        if watcher.batches.empty():
            break
        await asyncio.sleep(0.01)
    await nav.wait_idle()


class TestConstruction:
    """Tests for navigator construction."""

    def test_bad_grammar_is_fatal(self, tmp_path: Path) -> None:
        config = TagNavConfig(grammars=GrammarConfig(html="no_such_grammar_module:language"))
        with pytest.raises(GrammarLoadError):
            TagNavigator(tmp_path, config)

    def test_from_root_reads_repo_config(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr("tagnav.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "none.yaml")
        (tmp_path / ".tagnav").mkdir()
        (tmp_path / ".tagnav" / "config.yaml").write_text("workspace:\n  include: 'lib/**/*.ts'\n")

        nav = TagNavigator.from_root(tmp_path)

        assert nav.config.workspace.include == "lib/**/*.ts"
        assert nav.root == tmp_path.resolve()


class TestRequests:
    """Tests for the read path after a scan."""

    @pytest_asyncio.fixture
    async def nav(self, workspace: Path) -> TagNavigator:
        nav = TagNavigator(workspace)
        await nav.scan_workspace()
        return nav

    @pytest.mark.asyncio
    async def test_definition(self, nav: TagNavigator, workspace: Path) -> None:
        target = nav.definition("app-foo")

        assert target is not None
        assert target.path == workspace.resolve() / "src" / "app" / "foo.component.ts"
        assert target.start_line == 6

    @pytest.mark.asyncio
    async def test_definition_at_cursor(self, nav: TagNavigator) -> None:
        target = nav.definition_at("<div><app-bar></app-bar></div>", 8)

        assert target is not None
        assert target.path.name == "bar.component.ts"

    @pytest.mark.asyncio
    async def test_definition_at_unknown_tag(self, nav: TagNavigator) -> None:
        assert nav.definition_at("<div></div>", 2) is None

    @pytest.mark.asyncio
    async def test_completion(self, nav: TagNavigator) -> None:
        items = nav.completion("<app-foo ></app-foo>", 9)

        assert [(i.label, i.kind) for i in items] == [
            ("value", CompletionKind.FIELD),
            ("changed", CompletionKind.EVENT),
        ]

    @pytest.mark.asyncio
    async def test_cancelled_requests(self, nav: TagNavigator) -> None:
        token = CancellationToken()
        token.cancel()

        assert nav.completion("<app-foo ></app-foo>", 9, token) == []
        assert nav.definition("app-foo", token) is None
        assert nav.definition_at("<app-foo></app-foo>", 3, token) is None


class TestWatching:
    """Tests for background re-indexing."""

    @pytest.mark.asyncio
    async def test_start_stop(self, workspace: Path) -> None:
        nav = TagNavigator(workspace, watcher=FakeWatcher())

        await nav.start_watching()
        await nav.start_watching()
        assert nav.is_watching

        await nav.stop_watching()
        assert not nav.is_watching
        await nav.stop_watching()

    @pytest.mark.asyncio
    async def test_changes_reach_index(
        self, workspace: Path, sample_sources: dict[str, str]
    ) -> None:
        # Given a scanned workspace being watched
        watcher = FakeWatcher()
        nav = TagNavigator(workspace, watcher=watcher)
        await nav.scan_workspace()
        await nav.start_watching()
        try:
            # When one file is created and another deleted
            app = nav.root / "src" / "app"
            (app / "baz.component.ts").write_text(
                sample_sources["bar"].replace("app-bar", "app-baz")
            )
            (app / "bar.component.ts").unlink()
            now = time.time()
            await watcher.batches.put(
                [
                    FileChangeEvent(app / "baz.component.ts", FileChangeKind.CREATED, now),
                    FileChangeEvent(app / "bar.component.ts", FileChangeKind.DELETED, now),
                ]
            )
            await _drain(watcher, nav)
        finally:
            await nav.stop_watching()

        # Then the index reflects both
        assert nav.index.selectors() == ["app-baz", "app-foo"]
        assert nav.definition("app-bar") is None
