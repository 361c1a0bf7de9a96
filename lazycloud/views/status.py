"""Header and status line."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import RenderableType
from rich.table import Table as RichTable
from rich.text import Text

from lazycloud.core.commands import CommandTracker
from lazycloud.core.registry import Context
from lazycloud.core.roles import Binding
from lazycloud.theme import Theme
from lazycloud.views.widgets import Spinner

STATUS_ICONS = {
    "ok": "✓",
    "failed": "✗",
}


def command_status(tracker: CommandTracker, spinner: Spinner, theme: Theme) -> Text:
    """One-line summary of running or last finished command."""
    running = tracker.running
    if running:
        names = ", ".join(r.name for r in running[:2])
        more = f" +{len(running) - 2}" if len(running) > 2 else ""
        return Text.assemble(
            (Spinner.FRAMES[spinner.frame], theme.style(theme.accent, bold=True)),
            (f" {names}{more}", theme.style(theme.subtext1)),
        )
    last = tracker.last
    if last is None:
        return Text("")
    if last.ok:
        return Text(f"{STATUS_ICONS['ok']} {last.name} ({last.duration:.1f}s)", style=theme.style(theme.success))
    return Text(f"{STATUS_ICONS['failed']} {last.name}: {last.error}", style=theme.style(theme.error))


def render_header(
    context: Context | None,
    breadcrumbs: Sequence[str],
    status: Text,
    theme: Theme,
) -> RenderableType:
    left = Text()
    left.append(" lazycloud ", style=f"bold {theme.base} on {theme.primary}")
    if context is not None:
        left.append(f" {context.label}", style=theme.style(theme.accent, bold=True))
        if context.project:
            left.append(f" [{context.project}]", style=theme.style(theme.subtext0))
    for crumb in breadcrumbs:
        left.append(" › ", style=theme.style(theme.overlay0))
        left.append(crumb, style=theme.style(theme.text))

    grid = RichTable.grid(expand=True)
    grid.add_column(ratio=1, no_wrap=True, overflow="ellipsis")
    grid.add_column(justify="right", no_wrap=True)
    grid.add_row(left, status)
    return grid


def render_footer(
    notice: RenderableType | None,
    bindings: Sequence[Binding],
    theme: Theme,
    indicator: RenderableType | None = None,
) -> RenderableType:
    """Notice when there is one, key hints otherwise; loading indicator on the right."""
    left = notice if notice is not None else _hints(bindings, theme)
    if indicator is None:
        return left
    grid = RichTable.grid(expand=True)
    grid.add_column(ratio=1, no_wrap=True, overflow="ellipsis")
    grid.add_column(justify="right", no_wrap=True)
    grid.add_row(left, indicator)
    return grid


def _hints(bindings: Sequence[Binding], theme: Theme) -> Text:
    hints = Text()
    for binding in bindings:
        if hints:
            hints.append("  ")
        hints.append(binding.key.split(",")[0], style=theme.style(theme.accent, bold=True))
        hints.append(f" {binding.description}", style=theme.style(theme.subtext0))
    if hints:
        hints.append("  ")
    hints.append("?", style=theme.style(theme.accent, bold=True))
    hints.append(" help", style=theme.style(theme.subtext0))
    return hints
