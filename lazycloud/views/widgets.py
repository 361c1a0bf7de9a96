"""Reusable elements: tables, lists, text input, prompts and the spinner."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table as RichTable
from rich.text import Text

from lazycloud import search
from lazycloud.constants import PAGE_STEP
from lazycloud.core.handled import CONSUMED, IGNORED, Handled, produced
from lazycloud.core.roles import Area
from lazycloud.events import KeyEvent
from lazycloud.keymap import DialogAction, KeyResolver, NavAction, SearchAction
from lazycloud.theme import Theme

T = TypeVar("T")


class Row(Protocol):
    """Anything a table can show: one string per column."""

    def cells(self) -> Sequence[str]:
        ...


@dataclass(frozen=True)
class Column:
    title: str
    width: int | None = None
    ratio: int | None = None
    justify: str = "left"


@dataclass(frozen=True)
class Highlighted(Generic[T]):
    """The selection moved to ``item``."""

    index: int
    item: T


@dataclass(frozen=True)
class Activated(Generic[T]):
    """The user chose ``item`` (enter)."""

    index: int
    item: T


# =============================================================================
# Table
# =============================================================================


class Table(Generic[T]):
    """Selectable, filterable table of rows.

    ``/`` starts a filter; typed characters narrow the visible rows with a
    fuzzy match over every cell.  Enter keeps the filter, escape clears it.
    The selection is an index into the visible rows and is clamped whenever
    the rows change.
    """

    def __init__(
        self,
        columns: Sequence[Column],
        items: Sequence[T] = (),
        *,
        keys: KeyResolver | None = None,
        title: str = "",
        empty_text: str = "Nothing to show",
        cells: Callable[[T], Sequence[str]] | None = None,
    ) -> None:
        self.columns = tuple(columns)
        self._cells = cells or _cells
        self.title = title
        self.empty_text = empty_text
        self._keys = keys or KeyResolver()
        self._items: list[T] = list(items)
        self._visible: list[T] = list(self._items)
        self.selected = 0
        self.query = ""
        self.filtering = False

    # -- state -------------------------------------------------------------

    @property
    def items(self) -> list[T]:
        return list(self._items)

    @property
    def visible(self) -> list[T]:
        return list(self._visible)

    @property
    def selected_item(self) -> T | None:
        if not self._visible:
            return None
        return self._visible[self.selected]

    def set_items(self, items: Sequence[T]) -> None:
        """Replace the rows, keeping the filter and clamping the selection."""
        self._items = list(items)
        self._refilter()

    def select(self, index: int) -> None:
        self.selected = max(0, min(index, len(self._visible) - 1))

    def _refilter(self) -> None:
        if self.query:
            self._visible = [
                item for item in self._items if search.matches_any(self._cells(item), self.query)
            ]
        else:
            self._visible = list(self._items)
        self.select(self.selected)

    # -- input -------------------------------------------------------------

    def handle_key(self, key: KeyEvent) -> Handled[Highlighted[T] | Activated[T]]:
        if self.filtering:
            return self._handle_filter_key(key)

        keys = self._keys
        if keys.matches(key, SearchAction.TOGGLE):
            self.filtering = True
            return CONSUMED
        if keys.matches(key, SearchAction.EXIT) and self.query:
            self.query = ""
            self._refilter()
            return CONSUMED
        if keys.matches(key, NavAction.SELECT):
            item = self.selected_item
            if item is None:
                return CONSUMED
            return produced(Activated(self.selected, item))

        moves = {
            NavAction.UP: lambda: self.selected - 1,
            NavAction.DOWN: lambda: self.selected + 1,
            NavAction.PAGE_UP: lambda: self.selected - PAGE_STEP,
            NavAction.PAGE_DOWN: lambda: self.selected + PAGE_STEP,
            NavAction.HOME: lambda: 0,
            NavAction.END: lambda: len(self._visible) - 1,
        }
        for action, target in moves.items():
            if keys.matches(key, action):
                return self._move_to(target())
        return IGNORED

    def _move_to(self, index: int) -> Handled[Highlighted[T]]:
        before = self.selected
        self.select(index)
        item = self.selected_item
        if item is None or self.selected == before:
            return CONSUMED
        return produced(Highlighted(self.selected, item))

    def _handle_filter_key(self, key: KeyEvent) -> Handled[Highlighted[T]]:
        if self._keys.matches(key, SearchAction.EXIT):
            self.filtering = False
            self.query = ""
            self._refilter()
            return CONSUMED
        if key.matches("enter"):
            self.filtering = False
            return CONSUMED
        if key.matches("backspace"):
            self.query = self.query[:-1]
            self._refilter()
            return CONSUMED
        if key.code in ("up", "down"):
            return self._move_to(self.selected + (1 if key.code == "down" else -1))
        char = key.char
        if char is not None:
            self.query += char
            self._refilter()
            return CONSUMED
        return CONSUMED

    # -- rendering ---------------------------------------------------------

    def window(self, rows: int) -> tuple[int, int]:
        """Start and end of the visible slice that keeps the selection on screen."""
        rows = max(1, rows)
        start = max(0, self.selected - rows + 1)
        return start, min(len(self._visible), start + rows)

    def render(self, area: Area, theme: Theme) -> RenderableType:
        table = RichTable(
            box=box.SIMPLE_HEAD,
            expand=True,
            header_style=theme.style(theme.header, bold=True),
            border_style=theme.border,
            show_edge=False,
            pad_edge=False,
        )
        for column in self.columns:
            table.add_column(
                column.title,
                width=column.width,
                ratio=column.ratio,
                justify=column.justify,
                no_wrap=True,
                overflow="ellipsis",
            )

        # Title, header rule and filter line
        start, end = self.window(area.height - 5)
        for index in range(start, end):
            cells = list(self._cells(self._visible[index]))
            style = theme.highlight if index == self.selected else None
            table.add_row(*cells, style=style)

        parts: list[RenderableType] = []
        if self.title:
            count = f"{len(self._visible)}/{len(self._items)}" if self.query else str(len(self._items))
            parts.append(
                Text.assemble(
                    (self.title, theme.style(theme.primary, bold=True)),
                    (f" ({count})", theme.style(theme.subtext0)),
                )
            )
        parts.append(table)
        if not self._visible:
            parts.append(Text(self.empty_text, style=theme.style(theme.overlay1, dim=True)))
        if self.filtering or self.query:
            cursor = "█" if self.filtering else ""
            parts.append(
                Text.assemble(
                    ("/", theme.style(theme.accent, bold=True)),
                    (self.query + cursor, theme.style(theme.text)),
                )
            )
        return Group(*parts)


def _cells(item: object) -> Sequence[str]:
    cells = getattr(item, "cells", None)
    if cells is not None:
        return cells()
    return (str(item),)


# =============================================================================
# SelectList
# =============================================================================


class SelectList(Generic[T]):
    """Single-column list with the same navigation and outputs as ``Table``."""

    def __init__(
        self,
        items: Sequence[T] = (),
        *,
        label: Callable[[T], str] = str,
        keys: KeyResolver | None = None,
        title: str = "",
    ) -> None:
        self._label = label
        self._table: Table[T] = Table(
            [Column(title or "Name")],
            items,
            keys=keys,
            title=title,
            cells=lambda item: (label(item),),
        )

    @property
    def selected(self) -> int:
        return self._table.selected

    @property
    def selected_item(self) -> T | None:
        return self._table.selected_item

    @property
    def visible(self) -> list[T]:
        return self._table.visible

    def set_items(self, items: Sequence[T]) -> None:
        self._table.set_items(items)

    def handle_key(self, key: KeyEvent) -> Handled[Highlighted[T] | Activated[T]]:
        return self._table.handle_key(key)

    def render(self, area: Area, theme: Theme) -> RenderableType:
        table = self._table
        lines: list[RenderableType] = []
        if table.title:
            lines.append(Text(table.title, style=theme.style(theme.primary, bold=True)))
        visible = table.visible
        start, end = table.window(area.height - 3)
        for index in range(start, end):
            label = self._label(visible[index])
            if index == table.selected:
                lines.append(Text(f"▸ {label}", style=theme.highlight))
            else:
                lines.append(Text(f"  {label}", style=theme.style(theme.text)))
        if not visible:
            lines.append(Text(table.empty_text, style=theme.style(theme.overlay1, dim=True)))
        if table.filtering or table.query:
            lines.append(Text(f"/{table.query}", style=theme.style(theme.accent)))
        return Group(*lines)


# =============================================================================
# TextInput
# =============================================================================


@dataclass(frozen=True)
class Submitted:
    value: str


@dataclass(frozen=True)
class Cancelled:
    pass


class TextInput:
    """Single-line editor with a cursor and readline-style shortcuts."""

    def __init__(
        self,
        label: str = "",
        value: str = "",
        *,
        placeholder: str = "",
        masked: bool = False,
        keys: KeyResolver | None = None,
    ) -> None:
        self.label = label
        self.value = value
        self.cursor = len(value)
        self.placeholder = placeholder
        self.masked = masked
        self._keys = keys or KeyResolver()

    def set_value(self, value: str) -> None:
        self.value = value
        self.cursor = len(value)

    def handle_key(self, key: KeyEvent) -> Handled[Submitted | Cancelled]:
        if key.matches("enter"):
            return produced(Submitted(self.value))
        if key.matches("escape"):
            return produced(Cancelled())

        before, after = self.value[: self.cursor], self.value[self.cursor :]
        if key.matches_any("backspace,ctrl+h"):
            if before:
                self.value = before[:-1] + after
                self.cursor -= 1
        elif key.matches_any("alt+backspace,ctrl+w"):
            trimmed = before.rstrip()
            cut = trimmed.rfind(" ") + 1
            self.value = before[:cut] + after
            self.cursor = cut
        elif key.matches("delete"):
            self.value = before + after[1:]
        elif key.matches("left"):
            self.cursor = max(0, self.cursor - 1)
        elif key.matches("right"):
            self.cursor = min(len(self.value), self.cursor + 1)
        elif key.matches_any("home,ctrl+a"):
            self.cursor = 0
        elif key.matches_any("end,ctrl+e"):
            self.cursor = len(self.value)
        elif key.matches("ctrl+u"):
            self.value = after
            self.cursor = 0
        elif key.char is not None:
            self.value = before + key.char + after
            self.cursor += 1
        else:
            return IGNORED
        return CONSUMED

    def render(self, area: Area, theme: Theme) -> RenderableType:
        shown = "•" * len(self.value) if self.masked else self.value
        text = Text()
        if self.label:
            text.append(f"{self.label}: ", style=theme.style(theme.subtext1, bold=True))
        if not shown and self.placeholder:
            text.append("█", style=theme.style(theme.text))
            text.append(self.placeholder, style=theme.style(theme.overlay0, dim=True))
            return text
        text.append(shown[: self.cursor], style=theme.style(theme.text))
        under = shown[self.cursor : self.cursor + 1] or " "
        text.append(under, style=f"reverse {theme.text}")
        text.append(shown[self.cursor + 1 :], style=theme.style(theme.text))
        return text


# =============================================================================
# ConfirmPrompt
# =============================================================================


@dataclass(frozen=True)
class Confirmed:
    pass


class ConfirmPrompt:
    """Yes/no question.  ``danger`` renders it in the error colour."""

    def __init__(
        self,
        message: str,
        *,
        title: str = "",
        danger: bool = False,
        confirm_label: str = "Yes",
        cancel_label: str = "No",
        keys: KeyResolver | None = None,
    ) -> None:
        self.message = message
        self.title = title
        self.danger = danger
        self.confirm_label = confirm_label
        self.cancel_label = cancel_label
        self._keys = keys or KeyResolver()

    def handle_key(self, key: KeyEvent) -> Handled[Confirmed | Cancelled]:
        if self._keys.matches(key, DialogAction.CONFIRM):
            return produced(Confirmed())
        if self._keys.matches(key, DialogAction.CANCEL):
            return produced(Cancelled())
        return IGNORED

    def render(self, area: Area, theme: Theme) -> RenderableType:
        color = theme.error if self.danger else theme.primary
        confirm = self._keys.describe(DialogAction.CONFIRM)
        cancel = self._keys.describe(DialogAction.CANCEL)
        body = Group(
            Text(self.message, style=theme.style(theme.text)),
            Text(""),
            Text.assemble(
                (f"[{confirm}] {self.confirm_label}", theme.style(color, bold=True)),
                "   ",
                (f"[{cancel}] {self.cancel_label}", theme.style(theme.subtext0)),
            ),
        )
        title = Text(f" {self.title} ", style=theme.style(color, bold=True)) if self.title else None
        return Panel(body, title=title, border_style=color, box=box.ROUNDED, width=min(area.width, 60))


# =============================================================================
# Spinner
# =============================================================================


class Spinner:
    """Braille spinner advanced once per tick."""

    FRAMES = "⠋⠙⠹⠸⠼⠴⠦⠧⠇⠏"

    def __init__(self, label: str = "Loading") -> None:
        self.label = label
        self.frame = 0

    def on_tick(self) -> None:
        self.frame = (self.frame + 1) % len(self.FRAMES)

    def reset(self) -> None:
        self.frame = 0

    def handle_key(self, key: KeyEvent) -> Handled[None]:
        return IGNORED

    def render(self, area: Area, theme: Theme) -> RenderableType:
        return Text.assemble(
            (self.FRAMES[self.frame], theme.style(theme.accent, bold=True)),
            (f" {self.label}…", theme.style(theme.subtext0)),
        )
