"""Secret Manager pages: secret list, version list, payload view and the read-only detail pages."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from rich import box
from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.text import Text

from lazycloud.core.handled import CONSUMED, Handled, Ignored, absorb, map_output, produced
from lazycloud.core.roles import Area, Binding, dispatch_binding
from lazycloud.events import KeyEvent
from lazycloud.keymap import KeyResolver, NavAction
from lazycloud.providers.gcp.secret_manager.messages import (
    ConfirmDeleteSecret,
    ConfirmDestroyVersion,
    CopyPayload,
    DisableVersion,
    EnableVersion,
    LoadSecrets,
    ShowAddVersion,
    ShowCreateSecret,
    ViewIamPolicy,
    ViewLabels,
    ViewPayload,
    ViewReplication,
    ViewVersions,
)
from lazycloud.providers.gcp.secret_manager.model import (
    IamBinding,
    IamPolicy,
    Label,
    Secret,
    SecretPayload,
    SecretVersion,
)
from lazycloud.theme import Theme
from lazycloud.views.widgets import Activated, Column, Table


def _activated(to_message: Callable[[Any], Any]) -> Callable[[Any], Handled[Any]]:
    """Map a table's ``Activated`` output through ``to_message``; swallow the rest."""

    def mapping(output: Any) -> Handled[Any]:
        if isinstance(output, Activated):
            return produced(to_message(output.item))
        return CONSUMED

    return mapping


class SecretListPage:
    """All secrets of the project."""

    BINDINGS = (
        Binding("enter", "payload", "Payload"),
        Binding("v", "versions", "Versions"),
        Binding("n", "create", "New"),
        Binding("d,delete", "delete", "Delete"),
        Binding("l", "labels", "Labels"),
        Binding("i", "iam_policy", "IAM"),
        Binding("R", "replication", "Replication"),
        Binding("r", "reload", "Reload"),
    )

    def __init__(self, keys: KeyResolver | None = None) -> None:
        self.loaded = False
        self.table: Table[Secret] = Table(
            (Column("Name", ratio=3), Column("Created", width=17), Column("Labels", ratio=2)),
            keys=keys,
            title="Secrets",
            empty_text="Loading…",
        )

    def set_secrets(self, secrets: Sequence[Secret]) -> None:
        self.loaded = True
        self.table.empty_text = "No secrets in this project. Press n to create one."
        self.table.set_items(secrets)

    @property
    def selected(self) -> Secret | None:
        return self.table.selected_item

    def handle_key(self, key: KeyEvent) -> Handled[Any]:
        result = map_output(
            self.table.handle_key(key),
            _activated(lambda secret: ViewPayload(secret, origin=self)),
        )
        if isinstance(result, Ignored):
            return dispatch_binding(self, key)
        return result

    def action_payload(self) -> ViewPayload | None:
        return ViewPayload(self.selected, origin=self) if self.selected else None

    def action_versions(self) -> ViewVersions | None:
        return ViewVersions(self.selected, origin=self) if self.selected else None

    def action_labels(self) -> ViewLabels | None:
        return ViewLabels(self.selected, origin=self) if self.selected else None

    def action_iam_policy(self) -> ViewIamPolicy | None:
        return ViewIamPolicy(self.selected, origin=self) if self.selected else None

    def action_replication(self) -> ViewReplication | None:
        return ViewReplication(self.selected, origin=self) if self.selected else None

    def action_create(self) -> ShowCreateSecret:
        return ShowCreateSecret()

    def action_delete(self) -> ConfirmDeleteSecret | None:
        return ConfirmDeleteSecret(self.selected) if self.selected else None

    def action_reload(self) -> LoadSecrets:
        return LoadSecrets(force=True)

    def breadcrumbs(self) -> list[str]:
        return ["Secrets"]

    def render(self, area: Area, theme: Theme) -> RenderableType:
        return self.table.render(area, theme)


class VersionListPage:
    """Versions of one secret, newest first."""

    BINDINGS = (
        Binding("enter", "payload", "Payload"),
        Binding("a", "add", "Add version"),
        Binding("d", "disable", "Disable"),
        Binding("e", "enable", "Enable"),
        Binding("D", "destroy", "Destroy"),
        Binding("r", "reload", "Reload"),
    )

    def __init__(
        self,
        secret: Secret,
        versions: Sequence[SecretVersion] = (),
        keys: KeyResolver | None = None,
    ) -> None:
        self.secret = secret
        self.table: Table[SecretVersion] = Table(
            (Column("Version", width=9), Column("State", width=12), Column("Created", ratio=1)),
            versions,
            keys=keys,
            title=f"Versions of {secret.name}",
            empty_text="This secret has no versions. Press a to add one.",
        )

    def set_versions(self, versions: Sequence[SecretVersion]) -> None:
        self.table.set_items(versions)

    @property
    def selected(self) -> SecretVersion | None:
        return self.table.selected_item

    def handle_key(self, key: KeyEvent) -> Handled[Any]:
        result = map_output(
            self.table.handle_key(key),
            _activated(lambda version: ViewPayload(self.secret, version, origin=self)),
        )
        if isinstance(result, Ignored):
            return dispatch_binding(self, key)
        return result

    def action_payload(self) -> ViewPayload | None:
        version = self.selected
        if version is None:
            return None
        return ViewPayload(self.secret, version, origin=self)

    def action_add(self) -> ShowAddVersion:
        return ShowAddVersion(self.secret)

    def action_disable(self) -> DisableVersion | None:
        version = self.selected
        if version is None or not version.enabled:
            return None
        return DisableVersion(self.secret, version)

    def action_enable(self) -> EnableVersion | None:
        version = self.selected
        if version is None or version.enabled or version.destroyed:
            return None
        return EnableVersion(self.secret, version)

    def action_destroy(self) -> ConfirmDestroyVersion | None:
        version = self.selected
        if version is None or version.destroyed:
            return None
        return ConfirmDestroyVersion(self.secret, version)

    def action_reload(self) -> ViewVersions:
        return ViewVersions(self.secret, force=True, navigate=False, origin=self)

    def breadcrumbs(self) -> list[str]:
        return [self.secret.name, "Versions"]

    def render(self, area: Area, theme: Theme) -> RenderableType:
        return self.table.render(area, theme)


class PayloadPage:
    """Scrollable payload of one version; hidden until revealed with ``s``."""

    BINDINGS = (
        Binding("s", "toggle_reveal", "Show/hide"),
        Binding("y", "copy", "Copy"),
        Binding("r", "reload", "Reload"),
    )

    def __init__(
        self,
        secret: Secret,
        version: SecretVersion | None,
        payload: SecretPayload,
        keys: KeyResolver | None = None,
    ) -> None:
        self.secret = secret
        self.version = version
        self.payload = payload
        self.revealed = False
        self.scroll = 0
        self._keys = keys or KeyResolver()

    @property
    def version_label(self) -> str:
        return f"v{self.version.version_id}" if self.version is not None else "latest"

    def set_payload(self, payload: SecretPayload) -> None:
        self.payload = payload
        self.scroll = min(self.scroll, len(payload.lines) - 1)

    def handle_key(self, key: KeyEvent) -> Handled[Any]:
        last = len(self.payload.lines) - 1
        keys = self._keys
        if keys.matches(key, NavAction.UP):
            self.scroll = max(0, self.scroll - 1)
        elif keys.matches(key, NavAction.DOWN):
            self.scroll = min(last, self.scroll + 1)
        elif keys.matches(key, NavAction.HOME):
            self.scroll = 0
        elif keys.matches(key, NavAction.END):
            self.scroll = last
        else:
            return dispatch_binding(self, key)
        return CONSUMED

    def action_toggle_reveal(self) -> None:
        self.revealed = not self.revealed

    def action_copy(self) -> CopyPayload:
        return CopyPayload(self.secret, self.version, self.payload)

    def action_reload(self) -> ViewPayload:
        return ViewPayload(self.secret, self.version, force=True, navigate=False, origin=self)

    def breadcrumbs(self) -> list[str]:
        if self.version is None:
            return [self.secret.name, "Payload"]
        return [f"{self.version_label} payload"]

    def render(self, area: Area, theme: Theme) -> RenderableType:
        lines = self.payload.lines
        height = max(1, area.height - 4)
        if self.revealed:
            shown = lines[self.scroll : self.scroll + height]
            body: RenderableType = Text("\n".join(shown), style=theme.style(theme.text))
        else:
            body = Text("•" * min(len(self.payload.data), 32) or "(empty)", style=theme.style(theme.overlay1))

        notes = []
        if self.payload.is_binary:
            notes.append("binary, shown as base64")
        if self.revealed and len(lines) > height:
            notes.append(f"lines {self.scroll + 1}-{min(len(lines), self.scroll + height)} of {len(lines)}")
        if not self.revealed:
            notes.append("press s to reveal")
        footer = Text(" · ".join(notes), style=theme.style(theme.subtext0, dim=True))

        return Panel(
            Group(body, Text(""), footer),
            title=Text(f" {self.secret.name} ({self.version_label}) ", style=theme.style(theme.primary, bold=True)),
            border_style=theme.border,
            box=box.ROUNDED,
        )



class LabelsPage:
    """Labels of one secret."""

    BINDINGS = (Binding("r", "reload", "Reload"),)

    def __init__(self, secret: Secret, keys: KeyResolver | None = None) -> None:
        self.secret = secret
        self.table: Table[Label] = Table(
            (Column("Key", ratio=1), Column("Value", ratio=2)),
            secret.label_entries(),
            keys=keys,
            title=f"Labels of {secret.name}",
            empty_text="This secret has no labels.",
        )

    def set_secret(self, secret: Secret) -> None:
        self.secret = secret
        self.table.set_items(secret.label_entries())

    def handle_key(self, key: KeyEvent) -> Handled[Any]:
        result = absorb(self.table.handle_key(key))
        if isinstance(result, Ignored):
            return dispatch_binding(self, key)
        return result

    def action_reload(self) -> ViewLabels:
        return ViewLabels(self.secret, force=True, navigate=False, origin=self)

    def breadcrumbs(self) -> list[str]:
        return [self.secret.name, "Labels"]

    def render(self, area: Area, theme: Theme) -> RenderableType:
        return self.table.render(area, theme)


class IamPolicyPage:
    """Role bindings of one secret's IAM policy."""

    BINDINGS = (Binding("r", "reload", "Reload"),)

    def __init__(self, secret: Secret, policy: IamPolicy, keys: KeyResolver | None = None) -> None:
        self.secret = secret
        self.table: Table[IamBinding] = Table(
            (Column("Role", ratio=1), Column("Members", ratio=2)),
            policy.bindings,
            keys=keys,
            title=f"IAM policy of {secret.name}",
            empty_text="No IAM bindings on this secret.",
        )

    def set_policy(self, policy: IamPolicy) -> None:
        self.table.set_items(policy.bindings)

    def handle_key(self, key: KeyEvent) -> Handled[Any]:
        result = absorb(self.table.handle_key(key))
        if isinstance(result, Ignored):
            return dispatch_binding(self, key)
        return result

    def action_reload(self) -> ViewIamPolicy:
        return ViewIamPolicy(self.secret, force=True, navigate=False, origin=self)

    def breadcrumbs(self) -> list[str]:
        return [self.secret.name, "IAM Policy"]

    def render(self, area: Area, theme: Theme) -> RenderableType:
        return self.table.render(area, theme)


class ReplicationPage:
    """Replication policy of one secret."""

    BINDINGS = (Binding("r", "reload", "Reload"),)

    def __init__(self, secret: Secret) -> None:
        self.secret = secret

    def set_secret(self, secret: Secret) -> None:
        self.secret = secret

    def handle_key(self, key: KeyEvent) -> Handled[Any]:
        return dispatch_binding(self, key)

    def action_reload(self) -> ViewReplication:
        return ViewReplication(self.secret, force=True, navigate=False, origin=self)

    def breadcrumbs(self) -> list[str]:
        return [self.secret.name, "Replication"]

    def render(self, area: Area, theme: Theme) -> RenderableType:
        label = theme.style(theme.subtext0, bold=True)
        muted = theme.style(theme.overlay1)
        replication = self.secret.replication
        lines: list[RenderableType] = []
        if replication is None:
            lines.append(Text("Replication policy unknown.", style=muted))
        else:
            lines.append(Text.assemble(("Type: ", label), (replication.kind, theme.style(theme.text))))
            lines.append(Text(""))
            if replication.automatic:
                lines.append(Text("Secret is automatically replicated across all GCP regions.", style=muted))
            else:
                lines.append(Text("Locations:", style=label))
                for location in replication.locations:
                    lines.append(Text.assemble("  - ", (location, theme.style(theme.success))))
                if not replication.locations:
                    lines.append(Text("  (no locations configured)", style=muted))

        return Panel(
            Group(*lines),
            title=Text(f" Replication of {self.secret.name} ", style=theme.style(theme.primary, bold=True)),
            border_style=theme.border,
            box=box.ROUNDED,
        )
