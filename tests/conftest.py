"""Shared fixtures: key resolver, dispatcher, contexts and a fake Secret Manager."""

from __future__ import annotations

import pytest

from lazycloud.core.commands import CommandDispatcher
from lazycloud.core.registry import Context, ServiceEnv, ServiceRegistry
from lazycloud.exceptions import ProviderError
from lazycloud.keymap import KeyResolver
from lazycloud.providers.gcp.secret_manager import SecretManagerProvider
from lazycloud.providers.gcp.secret_manager.model import (
    IamBinding,
    IamPolicy,
    Replication,
    Secret,
    SecretPayload,
    SecretVersion,
)


class FakeSecretManagerClient:
    """In-memory Secret Manager that records every call."""

    def __init__(self, secrets: dict[str, dict[str, str]] | None = None) -> None:
        # secret name -> version id -> payload
        self.data: dict[str, dict[str, str]] = {name: dict(v) for name, v in (secrets or {}).items()}
        self.states: dict[tuple[str, str], str] = {}
        self.labels: dict[str, dict[str, str]] = {}
        self.replication: dict[str, Replication] = {}
        self.policies: dict[str, IamPolicy] = {}
        self.calls: list[tuple] = []
        self.fail_with: Exception | None = None

    def _check(self, *call) -> None:
        self.calls.append(call)
        if self.fail_with is not None:
            raise self.fail_with

    def _version(self, secret: str, version_id: str) -> SecretVersion:
        return SecretVersion(version_id, self.states.get((secret, version_id), "ENABLED"), "2024-01-01 00:00")

    async def list_secrets(self) -> list[Secret]:
        self._check("list_secrets")
        return [Secret(name, "2024-01-01 00:00") for name in sorted(self.data)]

    async def create_secret(self, name: str, payload: str | None = None) -> Secret:
        self._check("create_secret", name, payload)
        self.data[name] = {"1": payload} if payload is not None else {}
        return Secret(name)

    async def describe_secret(self, name: str) -> Secret:
        self._check("describe_secret", name)
        if name not in self.data:
            raise ProviderError(f"Secret {name} not found")
        return Secret(
            name,
            "2024-01-01 00:00",
            labels=dict(self.labels.get(name, {})),
            replication=self.replication.get(name, Replication()),
        )

    async def get_iam_policy(self, name: str) -> IamPolicy:
        self._check("get_iam_policy", name)
        return self.policies.get(name, IamPolicy())

    async def delete_secret(self, name: str) -> None:
        self._check("delete_secret", name)
        self.data.pop(name, None)

    async def list_versions(self, secret: str) -> list[SecretVersion]:
        self._check("list_versions", secret)
        ids = sorted(self.data.get(secret, {}), key=int, reverse=True)
        return [self._version(secret, vid) for vid in ids]

    async def add_version(self, secret: str, payload: str) -> SecretVersion:
        self._check("add_version", secret, payload)
        versions = self.data.setdefault(secret, {})
        version_id = str(len(versions) + 1)
        versions[version_id] = payload
        return self._version(secret, version_id)

    async def _set_state(self, verb: str, state: str, secret: str, version_id: str) -> SecretVersion:
        self._check(f"{verb}_version", secret, version_id)
        self.states[(secret, version_id)] = state
        return self._version(secret, version_id)

    async def disable_version(self, secret: str, version_id: str) -> SecretVersion:
        return await self._set_state("disable", "DISABLED", secret, version_id)

    async def enable_version(self, secret: str, version_id: str) -> SecretVersion:
        return await self._set_state("enable", "ENABLED", secret, version_id)

    async def destroy_version(self, secret: str, version_id: str) -> SecretVersion:
        return await self._set_state("destroy", "DESTROYED", secret, version_id)

    async def access_version(self, secret: str, version_id: str = "latest") -> SecretPayload:
        self._check("access_version", secret, version_id)
        versions = self.data.get(secret) or {}
        if version_id == "latest":
            if not versions:
                raise ProviderError(f"Secret {secret} has no versions")
            version_id = max(versions, key=int)
        return SecretPayload(versions[version_id])


@pytest.fixture
def keys() -> KeyResolver:
    return KeyResolver()


@pytest.fixture
def dispatcher() -> CommandDispatcher:
    return CommandDispatcher()


@pytest.fixture
def env(dispatcher: CommandDispatcher, keys: KeyResolver) -> ServiceEnv:
    return ServiceEnv(dispatcher=dispatcher, keys=keys)


@pytest.fixture
def context() -> Context:
    return Context(provider="gcp", name="proj-a", project="proj-a", account="dev@example.com")


@pytest.fixture
def fake_client() -> FakeSecretManagerClient:
    client = FakeSecretManagerClient(
        {
            "api-key": {"1": "abc"},
            "db-password": {"1": "hunter2", "2": "correct horse"},
            "tls-cert": {"1": "-----BEGIN CERTIFICATE-----\nMIIB\n-----END CERTIFICATE-----"},
        }
    )
    client.labels["db-password"] = {"team": "core", "env": "prod"}
    client.replication["tls-cert"] = Replication(automatic=False, locations=("us-east1", "europe-west1"))
    client.policies["db-password"] = IamPolicy(
        (IamBinding("roles/secretmanager.secretAccessor", ("serviceAccount:app@proj-a.iam.gserviceaccount.com",)),)
    )
    return client


@pytest.fixture
def registry(fake_client: FakeSecretManagerClient) -> ServiceRegistry:
    registry = ServiceRegistry()
    registry.register(SecretManagerProvider(lambda ctx: fake_client))
    return registry.freeze()
