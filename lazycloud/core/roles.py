"""
Capability roles and render containers.

Three roles govern how input and rendering compose inside a service:

- Element: business-agnostic building block (table, text input, prompt).
  Emits typed outputs, never business messages.
- Page: a full-screen view.  Composes elements, turns their outputs into
  the service's messages, and declares its own ``BINDINGS``.
- Overlay: a modal layer on top of the page.  Same input contract as a
  page; while present it receives every key.

Render calls are pure: they return Rich renderables and never mutate the
element they are called on.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Any, ClassVar, NamedTuple, Protocol, runtime_checkable

from rich.console import Console, Group, RenderableType

from lazycloud.core.handled import IGNORED, Handled, from_optional
from lazycloud.events import KeyEvent
from lazycloud.theme import Theme

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Area:
    """The cells available to a render call."""

    width: int
    height: int

    def shrink(self, rows: int = 0, cols: int = 0) -> Area:
        return Area(max(0, self.width - cols), max(0, self.height - rows))


class Binding(NamedTuple):
    """A page-level key binding: ``key`` may list several specs, comma separated."""

    key: str
    action: str
    description: str
    show: bool = True


@runtime_checkable
class Element(Protocol):
    """Reusable widget: handles keys, renders itself."""

    def handle_key(self, key: KeyEvent) -> Handled[Any]:
        ...

    def render(self, area: Area, theme: Theme) -> RenderableType:
        ...


@runtime_checkable
class Page(Protocol):
    """One full-screen view on a service's page stack."""

    BINDINGS: ClassVar[tuple[Binding, ...]]

    def handle_key(self, key: KeyEvent) -> Handled[Any]:
        ...

    def render(self, area: Area, theme: Theme) -> RenderableType:
        ...

    def breadcrumbs(self) -> list[str]:
        ...


@runtime_checkable
class Overlay(Protocol):
    """A modal layer above the top page."""

    title: str | None
    closed: bool

    def handle_key(self, key: KeyEvent) -> Handled[Any]:
        ...

    def render(self, area: Area, theme: Theme) -> RenderableType:
        ...


def dispatch_binding(target: Any, key: KeyEvent) -> Handled[Any]:
    """Run the ``action_<name>`` method of the first binding ``key`` triggers.

    The action's return value becomes the output: ``None`` means the key was
    consumed without a message.
    """
    for binding in getattr(target, "BINDINGS", ()):
        if key.matches_any(binding.key):
            action = getattr(target, f"action_{binding.action}", None)
            if action is None:
                logger.warning(
                    "%s binds %r to missing action %r",
                    type(target).__name__,
                    binding.key,
                    binding.action,
                )
                return IGNORED
            return from_optional(action())
    return IGNORED


def visible_bindings(target: Any) -> list[Binding]:
    return [b for b in getattr(target, "BINDINGS", ()) if b.show]


def tick(target: Any) -> None:
    """Forward a tick to ``target`` if it animates."""
    on_tick = getattr(target, "on_tick", None)
    if on_tick is not None:
        on_tick()


@dataclass(frozen=True)
class Layers:
    """What a service instance draws: body plus optional stacked layers."""

    body: RenderableType
    overlay: RenderableType | None = None
    indicator: RenderableType | None = None
    notice: RenderableType | None = None


@dataclass(frozen=True)
class Frame:
    """A complete screen from the controller, split into host regions."""

    header: RenderableType
    body: RenderableType
    footer: RenderableType
    overlay: RenderableType | None = None

    def plain(self, width: int = 80) -> str:
        parts = [self.header, self.body, self.footer]
        if self.overlay is not None:
            parts.append(self.overlay)
        return render_plain(Group(*parts), width)


def render_plain(renderable: RenderableType, width: int = 80) -> str:
    """Render to uncoloured text; equal states produce equal strings."""
    console = Console(
        file=io.StringIO(),
        width=width,
        record=True,
        color_system=None,
        force_terminal=False,
        legacy_windows=False,
    )
    console.print(renderable)
    return console.export_text()
