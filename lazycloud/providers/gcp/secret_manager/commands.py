"""Commands that call the Secret Manager client."""

from __future__ import annotations

from typing import Any

from lazycloud.core.commands import Command
from lazycloud.providers.gcp.secret_manager.client import SecretManagerClient
from lazycloud.providers.gcp.secret_manager.messages import (
    IamPolicyLoaded,
    OperationFailed,
    PayloadLoaded,
    SecretCreated,
    SecretDeleted,
    SecretDescribed,
    SecretsLoaded,
    VersionAdded,
    VersionsLoaded,
    VersionStateChanged,
)
from lazycloud.providers.gcp.secret_manager.model import Secret, SecretVersion


class SecretManagerCommand(Command):
    """Base for client calls; failures become ``OperationFailed``."""

    operation = "Secret Manager call"
    request: tuple[str, ...] | None = None

    def __init__(self, client: SecretManagerClient) -> None:
        self.client = client

    def on_error(self, exc: Exception) -> Any:
        return OperationFailed(self.operation, str(exc) or type(exc).__name__, self.request)


class ListSecretsCmd(SecretManagerCommand):
    name = "list secrets"
    operation = "Loading secrets"

    async def execute(self) -> SecretsLoaded:
        return SecretsLoaded(tuple(await self.client.list_secrets()))


class CreateSecretCmd(SecretManagerCommand):
    name = "create secret"
    operation = "Creating secret"

    def __init__(self, client: SecretManagerClient, secret_name: str, payload: str | None) -> None:
        super().__init__(client)
        self.secret_name = secret_name
        self.payload = payload

    async def execute(self) -> SecretCreated:
        return SecretCreated(await self.client.create_secret(self.secret_name, self.payload))


class DeleteSecretCmd(SecretManagerCommand):
    name = "delete secret"
    operation = "Deleting secret"

    def __init__(self, client: SecretManagerClient, secret: Secret) -> None:
        super().__init__(client)
        self.secret = secret

    async def execute(self) -> SecretDeleted:
        await self.client.delete_secret(self.secret.name)
        return SecretDeleted(self.secret.name)


class ListVersionsCmd(SecretManagerCommand):
    name = "list versions"
    operation = "Loading versions"

    def __init__(
        self,
        client: SecretManagerClient,
        secret: Secret,
        navigate: bool = True,
        origin: Any = None,
    ) -> None:
        super().__init__(client)
        self.secret = secret
        self.navigate = navigate
        self.origin = origin
        self.request = ("versions", secret.name)

    async def execute(self) -> VersionsLoaded:
        versions = await self.client.list_versions(self.secret.name)
        return VersionsLoaded(self.secret, tuple(versions), self.navigate, self.origin)


class AddVersionCmd(SecretManagerCommand):
    name = "add version"
    operation = "Adding version"

    def __init__(self, client: SecretManagerClient, secret: Secret, payload: str) -> None:
        super().__init__(client)
        self.secret = secret
        self.payload = payload

    async def execute(self) -> VersionAdded:
        version = await self.client.add_version(self.secret.name, self.payload)
        return VersionAdded(self.secret, version)


class ChangeVersionStateCmd(SecretManagerCommand):
    """Disable, enable or destroy one version."""

    def __init__(
        self,
        client: SecretManagerClient,
        secret: Secret,
        version: SecretVersion,
        action: str,
    ) -> None:
        super().__init__(client)
        if action not in ("disable", "enable", "destroy"):
            raise ValueError(f"Unknown version action: {action}")
        self.secret = secret
        self.version = version
        self.action = action
        self.name = f"{action} version"
        self.operation = f"{action.capitalize()} version {version.version_id}"

    async def execute(self) -> VersionStateChanged:
        method = getattr(self.client, f"{self.action}_version")
        updated = await method(self.secret.name, self.version.version_id)
        return VersionStateChanged(self.secret, updated, self.action)


class AccessPayloadCmd(SecretManagerCommand):
    name = "access payload"
    operation = "Loading payload"

    def __init__(
        self,
        client: SecretManagerClient,
        secret: Secret,
        version: SecretVersion | None,
        navigate: bool = True,
        origin: Any = None,
    ) -> None:
        super().__init__(client)
        self.secret = secret
        self.version = version
        self.navigate = navigate
        self.origin = origin
        self.version_id = version.version_id if version is not None else "latest"
        self.request = ("payload", secret.name, self.version_id)

    async def execute(self) -> PayloadLoaded:
        payload = await self.client.access_version(self.secret.name, self.version_id)
        return PayloadLoaded(self.secret, self.version, payload, self.navigate, self.origin)


class DescribeSecretCmd(SecretManagerCommand):
    """Fetch labels and replication of one secret for the ``view`` page."""

    name = "describe secret"
    operation = "Loading secret details"

    def __init__(
        self,
        client: SecretManagerClient,
        secret: Secret,
        view: str,
        navigate: bool = True,
        origin: Any = None,
    ) -> None:
        super().__init__(client)
        self.secret = secret
        self.view = view
        self.navigate = navigate
        self.origin = origin
        self.request = (view, secret.name)

    async def execute(self) -> SecretDescribed:
        described = await self.client.describe_secret(self.secret.name)
        return SecretDescribed(described, self.view, self.navigate, self.origin)


class GetIamPolicyCmd(SecretManagerCommand):
    name = "get IAM policy"
    operation = "Loading IAM policy"

    def __init__(
        self,
        client: SecretManagerClient,
        secret: Secret,
        navigate: bool = True,
        origin: Any = None,
    ) -> None:
        super().__init__(client)
        self.secret = secret
        self.navigate = navigate
        self.origin = origin
        self.request = ("iam", secret.name)

    async def execute(self) -> IamPolicyLoaded:
        policy = await self.client.get_iam_policy(self.secret.name)
        return IamPolicyLoaded(self.secret, policy, self.navigate, self.origin)
