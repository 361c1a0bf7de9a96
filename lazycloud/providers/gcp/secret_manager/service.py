"""
Secret Manager service logic.

Owns the per-instance caches and the pages it has opened, and answers every
message with effects.  Pages are updated in place on reload; navigation
pushes new pages, but only while the page that asked is still on top.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from lazycloud.core.registry import Clipboard, Context, ServiceEnv, ServiceId
from lazycloud.core.roles import Page
from lazycloud.core.service import (
    Handler,
    NoticeLevel,
    Notify,
    PageStackView,
    PushPage,
    ShowOverlay,
    Spawn,
    UpdateResult,
)
from lazycloud.exceptions import ProviderError
from lazycloud.keymap import KeyResolver
from lazycloud.providers.gcp.secret_manager.client import (
    GcloudSecretManagerClient,
    SecretManagerClient,
)
from lazycloud.providers.gcp.secret_manager.commands import (
    AccessPayloadCmd,
    AddVersionCmd,
    ChangeVersionStateCmd,
    CreateSecretCmd,
    DeleteSecretCmd,
    DescribeSecretCmd,
    GetIamPolicyCmd,
    ListSecretsCmd,
    ListVersionsCmd,
    SecretManagerCommand,
)
from lazycloud.providers.gcp.secret_manager.messages import (
    AddVersion,
    ConfirmDeleteSecret,
    ConfirmDestroyVersion,
    CopyPayload,
    CreateSecret,
    DeleteSecret,
    DestroyVersion,
    DisableVersion,
    EnableVersion,
    IamPolicyLoaded,
    LoadSecrets,
    OperationFailed,
    PayloadLoaded,
    SecretCreated,
    SecretDeleted,
    SecretDescribed,
    SecretsLoaded,
    ShowAddVersion,
    ShowCreateSecret,
    VersionAdded,
    VersionsLoaded,
    VersionStateChanged,
    ViewIamPolicy,
    ViewLabels,
    ViewPayload,
    ViewReplication,
    ViewVersions,
)
from lazycloud.providers.gcp.secret_manager.model import IamPolicy, Secret, SecretPayload, SecretVersion
from lazycloud.providers.gcp.secret_manager.overlays import (
    AddVersionDialog,
    ConfirmDialog,
    CreateSecretWizard,
)
from lazycloud.providers.gcp.secret_manager.pages import (
    IamPolicyPage,
    LabelsPage,
    PayloadPage,
    ReplicationPage,
    SecretListPage,
    VersionListPage,
)

logger = logging.getLogger(__name__)

SERVICE_ID = ServiceId("gcp", "secret-manager")


class SecretManagerLogic:
    """Business half of the Secret Manager service."""

    title = "Secret Manager"

    def __init__(
        self,
        client: SecretManagerClient,
        keys: KeyResolver | None = None,
        clipboard: Clipboard | None = None,
    ) -> None:
        self.client = client
        self.keys = keys or KeyResolver()
        self.clipboard = clipboard
        self.stack: PageStackView | None = None
        self.secret_list = SecretListPage(self.keys)
        self.versions_page: VersionListPage | None = None
        self.payload_page: PayloadPage | None = None
        # Caches, keyed by secret name / (secret name, version id)
        self.secrets: tuple[Secret, ...] | None = None
        self.versions: dict[str, tuple[SecretVersion, ...]] = {}
        self.payloads: dict[tuple[str, str], SecretPayload] = {}
        self.details: dict[str, Secret] = {}
        self.policies: dict[str, IamPolicy] = {}
        # Navigations waiting for a command, keyed like ``SecretManagerCommand.request``
        self.pending: set[tuple[str, ...]] = set()

    # -- ServiceLogic ------------------------------------------------------

    def root_page(self) -> SecretListPage:
        return self.secret_list

    def initial_messages(self) -> Iterable[Any]:
        return [LoadSecrets()]

    def handlers(self) -> Mapping[type, Handler]:
        return {
            LoadSecrets: self.on_load_secrets,
            SecretsLoaded: self.on_secrets_loaded,
            ShowCreateSecret: self.on_show_create_secret,
            CreateSecret: self.on_create_secret,
            SecretCreated: self.on_secret_created,
            ConfirmDeleteSecret: self.on_confirm_delete_secret,
            DeleteSecret: self.on_delete_secret,
            SecretDeleted: self.on_secret_deleted,
            ViewVersions: self.on_view_versions,
            VersionsLoaded: self.on_versions_loaded,
            ShowAddVersion: self.on_show_add_version,
            AddVersion: self.on_add_version,
            VersionAdded: self.on_version_added,
            DisableVersion: self.on_disable_version,
            EnableVersion: self.on_enable_version,
            ConfirmDestroyVersion: self.on_confirm_destroy_version,
            DestroyVersion: self.on_destroy_version,
            VersionStateChanged: self.on_version_state_changed,
            ViewPayload: self.on_view_payload,
            PayloadLoaded: self.on_payload_loaded,
            CopyPayload: self.on_copy_payload,
            ViewLabels: self.on_view_labels,
            ViewReplication: self.on_view_replication,
            SecretDescribed: self.on_secret_described,
            ViewIamPolicy: self.on_view_iam_policy,
            IamPolicyLoaded: self.on_iam_policy_loaded,
            OperationFailed: self.on_operation_failed,
        }

    def bind(self, stack: PageStackView) -> None:
        self.stack = stack

    def on_unmount(self) -> None:
        self.secrets = None
        self.versions.clear()
        self.payloads.clear()
        self.details.clear()
        self.policies.clear()
        self.pending.clear()

    # -- navigation helpers ------------------------------------------------

    def _on_top(self, origin: Any) -> bool:
        """True if ``origin`` (the page that asked) is still the top page."""
        if origin is None or self.stack is None:
            return True
        return self.stack.top is origin

    def _open(self, origin: Any, page: Page) -> UpdateResult:
        if not self._on_top(origin):
            logger.debug("Dropped navigation to %s: requesting page is no longer on top", type(page).__name__)
            return None
        return PushPage(page)

    def _fetch(self, command: SecretManagerCommand, navigate: bool) -> UpdateResult:
        """Spawn a load; a navigation already in flight for the same target is not repeated."""
        if navigate:
            if command.request in self.pending:
                return None
            self.pending.add(command.request)
        return Spawn(command)

    def _settle(self, request: tuple[str, ...], navigate: bool) -> None:
        if navigate:
            self.pending.discard(request)

    # -- secrets -----------------------------------------------------------

    def on_load_secrets(self, msg: LoadSecrets) -> UpdateResult:
        if self.secrets is not None and not msg.force:
            self.secret_list.set_secrets(self.secrets)
            return None
        return Spawn(ListSecretsCmd(self.client))

    def on_secrets_loaded(self, msg: SecretsLoaded) -> UpdateResult:
        self.secrets = msg.secrets
        self.secret_list.set_secrets(msg.secrets)
        logger.debug("Loaded %d secrets", len(msg.secrets))
        return None

    def on_show_create_secret(self, msg: ShowCreateSecret) -> UpdateResult:
        return ShowOverlay(CreateSecretWizard(self.keys))

    def on_create_secret(self, msg: CreateSecret) -> UpdateResult:
        return [
            Spawn(CreateSecretCmd(self.client, msg.name, msg.payload)),
            Notify(f"Creating {msg.name}…"),
        ]

    def on_secret_created(self, msg: SecretCreated) -> UpdateResult:
        self.secrets = None
        return [
            Notify(f"Created secret {msg.secret.name}", NoticeLevel.SUCCESS),
            Spawn(ListSecretsCmd(self.client)),
        ]

    def on_confirm_delete_secret(self, msg: ConfirmDeleteSecret) -> UpdateResult:
        return ShowOverlay(
            ConfirmDialog(
                "Delete secret",
                f"Delete secret '{msg.secret.name}' and all of its versions? This cannot be undone.",
                DeleteSecret(msg.secret),
                danger=True,
                keys=self.keys,
            )
        )

    def on_delete_secret(self, msg: DeleteSecret) -> UpdateResult:
        return Spawn(DeleteSecretCmd(self.client, msg.secret))

    def on_secret_deleted(self, msg: SecretDeleted) -> UpdateResult:
        self.secrets = None
        self.versions.pop(msg.name, None)
        self.details.pop(msg.name, None)
        self.policies.pop(msg.name, None)
        self._drop_payloads(msg.name)
        return [
            Notify(f"Deleted secret {msg.name}", NoticeLevel.SUCCESS),
            Spawn(ListSecretsCmd(self.client)),
        ]

    # -- versions ----------------------------------------------------------

    def on_view_versions(self, msg: ViewVersions) -> UpdateResult:
        cached = self.versions.get(msg.secret.name)
        if cached is not None and not msg.force:
            return self.on_versions_loaded(VersionsLoaded(msg.secret, cached, msg.navigate, msg.origin))
        return self._fetch(ListVersionsCmd(self.client, msg.secret, msg.navigate, msg.origin), msg.navigate)

    def on_versions_loaded(self, msg: VersionsLoaded) -> UpdateResult:
        self.versions[msg.secret.name] = msg.versions
        self._settle(("versions", msg.secret.name), msg.navigate)
        page = self.versions_page
        if not msg.navigate:
            if page is not None and page.secret == msg.secret:
                page.set_versions(msg.versions)
            return None
        if not self._on_top(msg.origin):
            return None
        self.versions_page = VersionListPage(msg.secret, msg.versions, self.keys)
        return PushPage(self.versions_page)

    def on_show_add_version(self, msg: ShowAddVersion) -> UpdateResult:
        return ShowOverlay(AddVersionDialog(msg.secret, self.keys))

    def on_add_version(self, msg: AddVersion) -> UpdateResult:
        return Spawn(AddVersionCmd(self.client, msg.secret, msg.payload))

    def on_version_added(self, msg: VersionAdded) -> UpdateResult:
        self._invalidate_versions(msg.secret)
        return [
            Notify(f"Added version {msg.version.version_id} to {msg.secret.name}", NoticeLevel.SUCCESS),
            Spawn(ListVersionsCmd(self.client, msg.secret, navigate=False)),
        ]

    def on_disable_version(self, msg: DisableVersion) -> UpdateResult:
        return Spawn(ChangeVersionStateCmd(self.client, msg.secret, msg.version, "disable"))

    def on_enable_version(self, msg: EnableVersion) -> UpdateResult:
        return Spawn(ChangeVersionStateCmd(self.client, msg.secret, msg.version, "enable"))

    def on_confirm_destroy_version(self, msg: ConfirmDestroyVersion) -> UpdateResult:
        return ShowOverlay(
            ConfirmDialog(
                "Destroy version",
                f"Destroy version {msg.version.version_id} of '{msg.secret.name}'? "
                "Its payload is lost permanently.",
                DestroyVersion(msg.secret, msg.version),
                danger=True,
                keys=self.keys,
            )
        )

    def on_destroy_version(self, msg: DestroyVersion) -> UpdateResult:
        return Spawn(ChangeVersionStateCmd(self.client, msg.secret, msg.version, "destroy"))

    def on_version_state_changed(self, msg: VersionStateChanged) -> UpdateResult:
        self._invalidate_versions(msg.secret)
        past = {"disable": "Disabled", "enable": "Enabled", "destroy": "Destroyed"}[msg.action]
        return [
            Notify(f"{past} version {msg.version.version_id}", NoticeLevel.SUCCESS),
            Spawn(ListVersionsCmd(self.client, msg.secret, navigate=False)),
        ]

    # -- payload -----------------------------------------------------------

    def on_view_payload(self, msg: ViewPayload) -> UpdateResult:
        key = (msg.secret.name, msg.version.version_id if msg.version else "latest")
        cached = self.payloads.get(key)
        if cached is not None and not msg.force:
            return self.on_payload_loaded(PayloadLoaded(msg.secret, msg.version, cached, msg.navigate, msg.origin))
        command = AccessPayloadCmd(self.client, msg.secret, msg.version, msg.navigate, msg.origin)
        return self._fetch(command, msg.navigate)

    def on_payload_loaded(self, msg: PayloadLoaded) -> UpdateResult:
        key = (msg.secret.name, msg.version.version_id if msg.version else "latest")
        self.payloads[key] = msg.payload
        self._settle(("payload", *key), msg.navigate)
        page = self.payload_page
        if not msg.navigate:
            if page is not None and page.secret == msg.secret and page.version == msg.version:
                page.set_payload(msg.payload)
            return None
        if not self._on_top(msg.origin):
            return None
        self.payload_page = PayloadPage(msg.secret, msg.version, msg.payload, self.keys)
        return PushPage(self.payload_page)

    def on_copy_payload(self, msg: CopyPayload) -> UpdateResult:
        label = f"v{msg.version.version_id}" if msg.version is not None else "latest"
        if self.clipboard is None:
            return Notify("Clipboard is not available", NoticeLevel.WARNING)
        self.clipboard(msg.payload.data)
        return Notify(f"Copied payload of {msg.secret.name} ({label})", NoticeLevel.SUCCESS)

    # -- details -----------------------------------------------------------

    def on_view_labels(self, msg: ViewLabels) -> UpdateResult:
        return self._describe(msg.secret, "labels", msg.force, msg.navigate, msg.origin)

    def on_view_replication(self, msg: ViewReplication) -> UpdateResult:
        return self._describe(msg.secret, "replication", msg.force, msg.navigate, msg.origin)

    def _describe(self, secret: Secret, view: str, force: bool, navigate: bool, origin: Any) -> UpdateResult:
        cached = self.details.get(secret.name)
        if cached is not None and not force:
            return self.on_secret_described(SecretDescribed(cached, view, navigate, origin))
        return self._fetch(DescribeSecretCmd(self.client, secret, view, navigate, origin), navigate)

    def on_secret_described(self, msg: SecretDescribed) -> UpdateResult:
        self.details[msg.secret.name] = msg.secret
        self._settle((msg.view, msg.secret.name), msg.navigate)
        if not msg.navigate:
            if isinstance(msg.origin, (LabelsPage, ReplicationPage)):
                msg.origin.set_secret(msg.secret)
            return None
        if msg.view == "labels":
            return self._open(msg.origin, LabelsPage(msg.secret, self.keys))
        return self._open(msg.origin, ReplicationPage(msg.secret))

    def on_view_iam_policy(self, msg: ViewIamPolicy) -> UpdateResult:
        cached = self.policies.get(msg.secret.name)
        if cached is not None and not msg.force:
            return self.on_iam_policy_loaded(IamPolicyLoaded(msg.secret, cached, msg.navigate, msg.origin))
        return self._fetch(GetIamPolicyCmd(self.client, msg.secret, msg.navigate, msg.origin), msg.navigate)

    def on_iam_policy_loaded(self, msg: IamPolicyLoaded) -> UpdateResult:
        self.policies[msg.secret.name] = msg.policy
        self._settle(("iam", msg.secret.name), msg.navigate)
        if not msg.navigate:
            if isinstance(msg.origin, IamPolicyPage):
                msg.origin.set_policy(msg.policy)
            return None
        return self._open(msg.origin, IamPolicyPage(msg.secret, msg.policy, self.keys))

    # -- failures ----------------------------------------------------------

    def on_operation_failed(self, msg: OperationFailed) -> UpdateResult:
        logger.warning("%s failed: %s", msg.operation, msg.error)
        if msg.request is not None:
            self.pending.discard(msg.request)
        if not self.secret_list.loaded and self.secrets is None:
            self.secret_list.table.empty_text = "Could not load secrets. Press r to retry."
        return Notify(f"{msg.operation} failed: {msg.error}", NoticeLevel.ERROR)

    # -- cache helpers -----------------------------------------------------

    def _invalidate_versions(self, secret: Secret) -> None:
        self.versions.pop(secret.name, None)
        self._drop_payloads(secret.name)

    def _drop_payloads(self, secret_name: str) -> None:
        for key in [k for k in self.payloads if k[0] == secret_name]:
            del self.payloads[key]


class SecretManagerProvider:
    """Registers ``gcp:secret-manager`` for GCP contexts with a project."""

    service_id = SERVICE_ID
    display_name = "Secret Manager"
    description = "Browse secrets, manage versions and view payloads"

    def __init__(
        self,
        client_factory: Callable[[Context], SecretManagerClient] | None = None,
    ) -> None:
        self._client_factory = client_factory or _gcloud_client

    def available(self, context: Context) -> bool:
        return context.provider == "gcp"

    def create(self, context: Context, env: ServiceEnv) -> SecretManagerLogic:
        return SecretManagerLogic(self._client_factory(context), env.keys, env.clipboard)


def _gcloud_client(context: Context) -> SecretManagerClient:
    if not context.project:
        raise ProviderError(f"Context {context.name} has no project set")
    return GcloudSecretManagerClient(context.project, context.account)
