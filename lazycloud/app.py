"""
lazycloud TUI Application.

Textual owns the terminal: it decodes keys, fires the tick timer and
paints.  Everything else happens in the ``AppController``, which gets
toolkit-independent events and answers with Rich renderables.
"""

from __future__ import annotations

import logging

from textual import events
from textual.app import App, ComposeResult
from textual.screen import ModalScreen, Screen
from textual.widgets import Static

from lazycloud.config import LazyCloudConfig, save_config
from lazycloud.core.controller import AppController, ControllerEffect
from lazycloud.core.registry import Context, ServiceEnv, ServiceRegistry
from lazycloud.core.roles import Area, Frame
from lazycloud.events import Event, KeyEvent, Resize, TICK
from lazycloud.exceptions import ConfigError
from lazycloud.keymap import KeyResolver
from lazycloud.theme import Theme, get_theme, next_theme

logger = logging.getLogger(__name__)


def to_key_event(event: events.Key) -> KeyEvent | None:
    """Translate a Textual key event; None for keys we cannot represent."""
    if event.key == "space":
        return KeyEvent("space")
    char = event.character
    modifiers = set(event.key.split("+")[:-1])
    if char is not None and len(char) == 1 and char.isprintable() and not modifiers & {"ctrl", "alt"}:
        return KeyEvent(char)
    try:
        return KeyEvent.parse(event.key)
    except ValueError:
        logger.debug("Unmapped key %r", event.key)
        return None


class MainScreen(Screen):
    """Header, body and footer; the controller decides what goes in them."""

    DEFAULT_CSS = """
    MainScreen {
        layout: vertical;
    }

    MainScreen #header {
        height: 1;
        dock: top;
    }

    MainScreen #body {
        height: 1fr;
        padding: 0 1;
    }

    MainScreen #footer {
        height: 1;
        dock: bottom;
    }
    """

    def compose(self) -> ComposeResult:
        yield Static(id="header")
        yield Static(id="body")
        yield Static(id="footer")

    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        self.app.forward_key(event)

    def on_resize(self, event: events.Resize) -> None:
        self.app.feed(Resize(event.size.width, event.size.height))

    def paint(self, frame: Frame, ui_theme: Theme) -> None:
        self.styles.background = ui_theme.base
        self.styles.color = ui_theme.text
        self.query_one("#header", Static).update(frame.header)
        self.query_one("#body", Static).update(frame.body)
        self.query_one("#footer", Static).update(frame.footer)


class OverlayScreen(ModalScreen):
    """Modal layer over the main screen while an overlay is shown."""

    DEFAULT_CSS = """
    OverlayScreen {
        align: center middle;
        background: $background 60%;
    }

    OverlayScreen #overlay {
        width: auto;
        height: auto;
        max-width: 90%;
    }
    """

    def compose(self) -> ComposeResult:
        yield Static(id="overlay")

    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        self.app.forward_key(event)

    def paint(self, frame: Frame) -> None:
        if frame.overlay is not None:
            self.query_one("#overlay", Static).update(frame.overlay)


class LazyCloudApp(App):
    """Main lazycloud TUI application."""

    TITLE = "lazycloud"
    SUB_TITLE = "Cloud control plane"

    CSS = """
    Screen {
        background: $surface;
    }
    """

    def __init__(
        self,
        config: LazyCloudConfig,
        registry: ServiceRegistry,
        contexts: list[Context],
        *,
        context_name: str | None = None,
        service: str | None = None,
        persist: bool = True,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.config = config
        self.ui_theme = get_theme(config.theme.name)
        self._persist = persist
        env = ServiceEnv(keys=KeyResolver(config.keys), clipboard=self.copy_to_clipboard)
        self.controller = AppController(registry, contexts, env)
        self._preselect = (context_name, service)
        self._main_screen: MainScreen | None = None
        self._overlay_screen: OverlayScreen | None = None

    def on_mount(self) -> None:
        """Called when app is mounted."""
        self._main_screen = MainScreen()
        self.push_screen(self._main_screen)

        context_name, service = self._preselect
        if context_name:
            self.controller.preselect(context_name, service)
        elif self.config.last_context:
            for context in self.controller.context_selector.contexts:
                if context.name == self.config.last_context:
                    self.controller.context_selector.focus(context)

        interval = self.config.ui.tick_interval_ms / 1000
        self.set_interval(interval, self._on_tick)
        self.call_after_refresh(self.redraw)

    def on_unmount(self) -> None:
        self.controller.shutdown()

    def _on_tick(self) -> None:
        self.feed(TICK)

    def forward_key(self, event: events.Key) -> None:
        key = to_key_event(event)
        if key is not None:
            self.feed(key)

    def feed(self, event: Event) -> None:
        """Feed one event to the controller and apply what it asks for."""
        effect = self.controller.handle(event)
        if effect is ControllerEffect.QUIT:
            logger.info("Quit requested")
            self.controller.shutdown()
            self.exit()
            return
        if effect is ControllerEffect.NEXT_THEME:
            self.ui_theme = next_theme(self.ui_theme.name)
            self.config.theme.name = self.ui_theme.name
            self._save_config()
        self._remember_context()
        if effect is not ControllerEffect.NONE:
            self.redraw()

    def redraw(self) -> None:
        if self._main_screen is None:
            return
        area = Area(self.size.width, self.size.height)
        frame = self.controller.render(area, self.ui_theme)
        self._main_screen.paint(frame, self.ui_theme)

        if frame.overlay is not None:
            if self._overlay_screen is None:
                self._overlay_screen = OverlayScreen()
                self.push_screen(self._overlay_screen)
                self.call_after_refresh(self._overlay_screen.paint, frame)
            else:
                self._overlay_screen.paint(frame)
        elif self._overlay_screen is not None:
            self._overlay_screen = None
            self.pop_screen()

    def _remember_context(self) -> None:
        context = self.controller.context
        if context is None or context.name == self.config.last_context:
            return
        self.config.last_context = context.name
        self._save_config()

    def _save_config(self) -> None:
        if not self._persist:
            return
        try:
            save_config(self.config)
        except ConfigError as exc:
            logger.warning("Could not save config: %s", exc)
            self.notify(str(exc), severity="warning")


def run(
    config: LazyCloudConfig,
    registry: ServiceRegistry,
    contexts: list[Context],
    context_name: str | None = None,
    service: str | None = None,
) -> None:
    """Run the TUI application."""
    app = LazyCloudApp(config, registry, contexts, context_name=context_name, service=service)
    app.run()
