"""Tests for app.py - the Textual host."""

import pytest
from textual import events

from lazycloud.app import LazyCloudApp, to_key_event
from lazycloud.config import LazyCloudConfig
from lazycloud.core.controller import ActiveService, SelectingContext, SelectingService
from lazycloud.events import KeyEvent


class TestToKeyEvent:
    """Tests for translating Textual keys."""

    @pytest.mark.parametrize(
        ("key", "character", "expected"),
        [
            ("j", "j", KeyEvent("j")),
            ("G", "G", KeyEvent("G")),
            ("shift+g", "G", KeyEvent("G")),
            ("question_mark", "?", KeyEvent("?")),
            ("space", " ", KeyEvent("space")),
            ("enter", "\r", KeyEvent("enter")),
            ("escape", "\x1b", KeyEvent("escape")),
            ("tab", "\t", KeyEvent("tab")),
            ("ctrl+u", "\x15", KeyEvent("u", frozenset({"ctrl"}))),
            ("pagedown", None, KeyEvent("pagedown")),
        ],
    )
    def test_translation(self, key: str, character, expected: KeyEvent) -> None:
        assert to_key_event(events.Key(key, character)) == expected

    def test_unmappable(self) -> None:
        assert to_key_event(events.Key("super+x", None)) is None


class TestLazyCloudApp:
    """Drive the app headless with Textual's pilot."""

    @pytest.fixture
    def app(self, registry, context) -> LazyCloudApp:
        return LazyCloudApp(LazyCloudConfig(), registry, [context], persist=False)

    def test_services_get_app_clipboard(self, app: LazyCloudApp) -> None:
        assert app.controller.env.clipboard == app.copy_to_clipboard

    @pytest.mark.asyncio
    async def test_select_and_quit(self, app: LazyCloudApp) -> None:
        async with app.run_test() as pilot:
            assert app.controller.phase == SelectingContext()

            await pilot.press("enter")
            assert isinstance(app.controller.phase, SelectingService)

            await pilot.press("enter")
            assert isinstance(app.controller.phase, ActiveService)

            await pilot.press("t")
            assert app.ui_theme.name == "macchiato"
            assert app.config.theme.name == "macchiato"
            assert app.config.last_context == "proj-a"

            await pilot.press("q")
        assert not app.controller.instance.alive

    @pytest.mark.asyncio
    async def test_preselect(self, registry, context) -> None:
        app = LazyCloudApp(
            LazyCloudConfig(),
            registry,
            [context],
            context_name="proj-a",
            service="secret-manager",
            persist=False,
        )
        async with app.run_test() as pilot:
            await pilot.pause()
            assert isinstance(app.controller.phase, ActiveService)
            await pilot.press("q")
