"""App-level overlays: the error dialog and the help screen."""

from __future__ import annotations

from collections.abc import Sequence

from rich import box
from rich.align import Align
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table as RichTable
from rich.text import Text

from lazycloud.core.handled import CONSUMED, Handled
from lazycloud.core.roles import Area, Binding
from lazycloud.events import KeyEvent
from lazycloud.keymap import (
    DialogAction,
    GlobalAction,
    KeyResolver,
    NavAction,
    SearchAction,
)
from lazycloud.theme import Theme


class ErrorDialog:
    """Modal error message; any dismiss key closes it."""

    def __init__(self, message: str, title: str = "Error", keys: KeyResolver | None = None) -> None:
        self.title = title
        self.message = message
        self.closed = False
        self._keys = keys or KeyResolver()

    def handle_key(self, key: KeyEvent) -> Handled[None]:
        if self._keys.matches(key, DialogAction.DISMISS):
            self.closed = True
        return CONSUMED

    def render(self, area: Area, theme: Theme) -> RenderableType:
        body = Group(
            Text(self.message, style=theme.style(theme.text)),
            Text(""),
            Text(
                f"[{self._keys.describe(DialogAction.DISMISS)}] dismiss",
                style=theme.style(theme.overlay1),
            ),
        )
        panel = Panel(
            body,
            title=Text(f" {self.title} ", style=theme.style(theme.error, bold=True)),
            border_style=theme.error,
            box=box.HEAVY,
            width=min(area.width, 70),
        )
        return Align.center(panel, vertical="middle")


class HelpOverlay:
    """Key reference for the current screen plus the global keys."""

    title = "Help"

    def __init__(
        self,
        page_bindings: Sequence[Binding] = (),
        keys: KeyResolver | None = None,
    ) -> None:
        self.closed = False
        self._keys = keys or KeyResolver()
        self.page_bindings = list(page_bindings)

    def handle_key(self, key: KeyEvent) -> Handled[None]:
        if self._keys.matches(key, DialogAction.DISMISS) or self._keys.matches(key, GlobalAction.HELP):
            self.closed = True
        return CONSUMED

    def sections(self) -> list[tuple[str, list[tuple[str, str]]]]:
        k = self._keys
        sections = [
            (
                "Global",
                [
                    (k.describe(GlobalAction.QUIT), "Quit"),
                    (k.describe(GlobalAction.HELP), "Toggle help"),
                    (k.describe(GlobalAction.THEME), "Next theme"),
                    (k.describe(GlobalAction.BACK), "Back"),
                ],
            ),
            (
                "Navigation",
                [
                    (f"{k.describe(NavAction.UP)} {k.describe(NavAction.DOWN)}", "Move"),
                    (f"{k.describe(NavAction.PAGE_UP)} {k.describe(NavAction.PAGE_DOWN)}", "Page"),
                    (f"{k.describe(NavAction.HOME)} {k.describe(NavAction.END)}", "First / last"),
                    (k.describe(NavAction.SELECT), "Select"),
                    (k.describe(SearchAction.TOGGLE), "Filter"),
                ],
            ),
        ]
        if self.page_bindings:
            sections.append(
                ("This screen", [(b.key.replace(",", "/"), b.description) for b in self.page_bindings])
            )
        return sections

    def render(self, area: Area, theme: Theme) -> RenderableType:
        grid = RichTable.grid(padding=(0, 2))
        grid.add_column(style=theme.style(theme.accent, bold=True), no_wrap=True)
        grid.add_column(style=theme.style(theme.text))
        for index, (heading, rows) in enumerate(self.sections()):
            if index:
                grid.add_row("", "")
            grid.add_row(Text(heading, style=theme.style(theme.primary, bold=True)), "")
            for keys, description in rows:
                grid.add_row(keys, description)
        panel = Panel(
            grid,
            title=Text(" Help ", style=theme.style(theme.primary, bold=True)),
            border_style=theme.primary,
            box=box.ROUNDED,
            width=min(area.width, 64),
        )
        return Align.center(panel, vertical="middle")
