"""Secret Manager dialogs."""

from __future__ import annotations

import re
from typing import Any

from rich import box
from rich.align import Align
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.text import Text

from lazycloud.core.handled import CONSUMED, Handled, Produced, is_consumed, produced
from lazycloud.core.roles import Area
from lazycloud.events import KeyEvent
from lazycloud.keymap import KeyResolver
from lazycloud.providers.gcp.secret_manager.messages import AddVersion, CreateSecret
from lazycloud.providers.gcp.secret_manager.model import Secret
from lazycloud.theme import Theme
from lazycloud.views.widgets import Cancelled, ConfirmPrompt, Confirmed, Submitted, TextInput

SECRET_NAME_RE = re.compile(r"^[A-Za-z0-9_-]{1,255}$")


def _boxed(title: str, body: RenderableType, area: Area, theme: Theme) -> RenderableType:
    panel = Panel(
        body,
        title=Text(f" {title} ", style=theme.style(theme.primary, bold=True)),
        border_style=theme.primary,
        box=box.ROUNDED,
        width=min(area.width, 70),
    )
    return Align.center(panel, vertical="middle")


class ConfirmDialog:
    """Yes/no overlay that emits ``on_confirm`` when confirmed."""

    def __init__(
        self,
        title: str,
        message: str,
        on_confirm: Any,
        *,
        danger: bool = False,
        keys: KeyResolver | None = None,
    ) -> None:
        self.title = title
        self.closed = False
        self.on_confirm = on_confirm
        self.prompt = ConfirmPrompt(message, title=title, danger=danger, keys=keys)

    def handle_key(self, key: KeyEvent) -> Handled[Any]:
        result = self.prompt.handle_key(key)
        if not isinstance(result, Produced):
            return CONSUMED
        self.closed = True
        if isinstance(result.value, Confirmed):
            return produced(self.on_confirm)
        return CONSUMED

    def render(self, area: Area, theme: Theme) -> RenderableType:
        return Align.center(self.prompt.render(area, theme), vertical="middle")


class CreateSecretWizard:
    """Two steps: the secret name, then an optional first payload."""

    title = "New secret"

    def __init__(self, keys: KeyResolver | None = None) -> None:
        self.closed = False
        self.step = 1
        self.name = ""
        self.error: str | None = None
        self.input = TextInput("Name", placeholder="my-secret", keys=keys)
        self._keys = keys

    def handle_key(self, key: KeyEvent) -> Handled[Any]:
        result = self.input.handle_key(key)
        if not isinstance(result, Produced):
            if is_consumed(result):
                self.error = None
            return CONSUMED
        output = result.value
        if isinstance(output, Cancelled):
            self.closed = True
            return CONSUMED

        value = output.value.strip()
        if self.step == 1:
            if not SECRET_NAME_RE.match(value):
                self.error = "Names use letters, digits, - and _ (max 255)"
                return CONSUMED
            self.name = value
            self.step = 2
            self.error = None
            self.input = TextInput(
                "Payload",
                placeholder="leave empty to create without a version",
                keys=self._keys,
            )
            return CONSUMED

        self.closed = True
        return produced(CreateSecret(self.name, output.value or None))

    def render(self, area: Area, theme: Theme) -> RenderableType:
        lines: list[RenderableType] = [
            Text(f"Step {self.step} of 2", style=theme.style(theme.subtext0)),
        ]
        if self.step == 2:
            lines.append(Text(f"Name: {self.name}", style=theme.style(theme.accent)))
        lines.append(self.input.render(area, theme))
        if self.error:
            lines.append(Text(self.error, style=theme.style(theme.error)))
        lines.append(Text("enter: next  esc: cancel", style=theme.style(theme.overlay1)))
        return _boxed(self.title, Group(*lines), area, theme)


class AddVersionDialog:
    """Payload input for a new version of ``secret``."""

    def __init__(self, secret: Secret, keys: KeyResolver | None = None) -> None:
        self.secret = secret
        self.title = f"New version of {secret.name}"
        self.closed = False
        self.error: str | None = None
        self.input = TextInput("Payload", keys=keys)

    def handle_key(self, key: KeyEvent) -> Handled[Any]:
        result = self.input.handle_key(key)
        output = result.value if isinstance(result, Produced) else None
        if isinstance(output, Cancelled):
            self.closed = True
        elif isinstance(output, Submitted):
            if not output.value:
                self.error = "Payload cannot be empty"
                return CONSUMED
            self.closed = True
            return produced(AddVersion(self.secret, output.value))
        return CONSUMED

    def render(self, area: Area, theme: Theme) -> RenderableType:
        lines: list[RenderableType] = [self.input.render(area, theme)]
        if self.error:
            lines.append(Text(self.error, style=theme.style(theme.error)))
        lines.append(Text("enter: add  esc: cancel", style=theme.style(theme.overlay1)))
        return _boxed(self.title, Group(*lines), area, theme)
