"""Context and service selection screens."""

from __future__ import annotations

from collections.abc import Sequence

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.text import Text

from lazycloud.core.handled import CONSUMED, Handled, map_output, produced
from lazycloud.core.registry import Context, ServiceId, ServiceProvider
from lazycloud.core.roles import Area
from lazycloud.events import KeyEvent
from lazycloud.keymap import KeyResolver
from lazycloud.theme import Theme
from lazycloud.views.widgets import Activated, Column, SelectList, Table


class ContextSelector:
    """Table of known contexts; enter picks one."""

    COLUMNS = (
        Column("Name", ratio=2),
        Column("Provider", width=10),
        Column("Project", ratio=2),
        Column("Account", ratio=3),
        Column("Region", width=16),
    )

    def __init__(self, contexts: Sequence[Context], keys: KeyResolver | None = None) -> None:
        self.table: Table[Context] = Table(
            self.COLUMNS,
            contexts,
            keys=keys,
            title="Contexts",
            empty_text="No contexts found. Add [[contexts]] to config.toml or run `gcloud init`.",
        )

    @property
    def contexts(self) -> list[Context]:
        return self.table.items

    def focus(self, context: Context) -> None:
        """Move the selection onto ``context`` if it is visible."""
        visible = self.table.visible
        if context in visible:
            self.table.select(visible.index(context))

    def handle_key(self, key: KeyEvent) -> Handled[Context]:
        return map_output(self.table.handle_key(key), _chosen)

    def render(self, area: Area, theme: Theme) -> RenderableType:
        return Panel(
            self.table.render(area.shrink(rows=2, cols=4), theme),
            title=Text(" Select a context ", style=theme.style(theme.primary, bold=True)),
            border_style=theme.border,
            box=box.ROUNDED,
        )


class ServiceSelector:
    """List of services available in one context."""

    def __init__(
        self,
        context: Context,
        providers: Sequence[ServiceProvider],
        keys: KeyResolver | None = None,
    ) -> None:
        self.context = context
        self.providers = list(providers)
        self.list: SelectList[ServiceProvider] = SelectList(
            self.providers,
            label=lambda p: f"{p.display_name}  ({p.service_id})",
            keys=keys,
            title="Services",
        )

    def handle_key(self, key: KeyEvent) -> Handled[ServiceId]:
        return map_output(self.list.handle_key(key), _service_chosen)

    def render(self, area: Area, theme: Theme) -> RenderableType:
        selected = self.list.selected_item
        description = Text(
            selected.description if selected is not None else "",
            style=theme.style(theme.subtext0, dim=True),
        )
        body = Group(self.list.render(area.shrink(rows=4, cols=4), theme), Text(""), description)
        return Panel(
            body,
            title=Text(f" {self.context.label} ", style=theme.style(theme.primary, bold=True)),
            subtitle=Text(" esc: back to contexts ", style=theme.style(theme.overlay1)),
            border_style=theme.border,
            box=box.ROUNDED,
        )


def _chosen(output: object) -> Handled[Context]:
    if isinstance(output, Activated):
        return produced(output.item)
    return CONSUMED


def _service_chosen(output: object) -> Handled[ServiceId]:
    if isinstance(output, Activated):
        return produced(output.item.service_id)
    return CONSUMED
