"""
Messages for the Secret Manager service.

Everything the service reacts to flows through these: user intents
translated by pages and overlays, and results delivered by commands.

Navigation requests carry the page that made them as ``origin``; the
result only opens a new page if that page is still on top.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from lazycloud.providers.gcp.secret_manager.model import IamPolicy, Secret, SecretPayload, SecretVersion

# === Secrets ===


@dataclass(frozen=True)
class LoadSecrets:
    """Show the secret list; ``force`` bypasses the cache."""

    force: bool = False


@dataclass(frozen=True)
class SecretsLoaded:
    secrets: tuple[Secret, ...]


@dataclass(frozen=True)
class ShowCreateSecret:
    pass


@dataclass(frozen=True)
class CreateSecret:
    name: str
    payload: str | None = None


@dataclass(frozen=True)
class SecretCreated:
    secret: Secret


@dataclass(frozen=True)
class ConfirmDeleteSecret:
    secret: Secret


@dataclass(frozen=True)
class DeleteSecret:
    secret: Secret


@dataclass(frozen=True)
class SecretDeleted:
    name: str


# === Versions ===


@dataclass(frozen=True)
class ViewVersions:
    """Open (``navigate``) or refresh the version list of ``secret``."""

    secret: Secret
    force: bool = False
    navigate: bool = True
    origin: Any = field(default=None, compare=False)


@dataclass(frozen=True)
class VersionsLoaded:
    secret: Secret
    versions: tuple[SecretVersion, ...]
    navigate: bool = True
    origin: Any = field(default=None, compare=False)


@dataclass(frozen=True)
class ShowAddVersion:
    secret: Secret


@dataclass(frozen=True)
class AddVersion:
    secret: Secret
    payload: str


@dataclass(frozen=True)
class VersionAdded:
    secret: Secret
    version: SecretVersion


@dataclass(frozen=True)
class DisableVersion:
    secret: Secret
    version: SecretVersion


@dataclass(frozen=True)
class EnableVersion:
    secret: Secret
    version: SecretVersion


@dataclass(frozen=True)
class ConfirmDestroyVersion:
    secret: Secret
    version: SecretVersion


@dataclass(frozen=True)
class DestroyVersion:
    secret: Secret
    version: SecretVersion


@dataclass(frozen=True)
class VersionStateChanged:
    """A version was disabled, enabled or destroyed."""

    secret: Secret
    version: SecretVersion
    action: str


# === Payload ===


@dataclass(frozen=True)
class ViewPayload:
    """Open or refresh a payload; ``version`` None means latest."""

    secret: Secret
    version: SecretVersion | None = None
    force: bool = False
    navigate: bool = True
    origin: Any = field(default=None, compare=False)


@dataclass(frozen=True)
class PayloadLoaded:
    secret: Secret
    version: SecretVersion | None
    payload: SecretPayload
    navigate: bool = True
    origin: Any = field(default=None, compare=False)


@dataclass(frozen=True)
class CopyPayload:
    secret: Secret
    version: SecretVersion | None
    payload: SecretPayload


# === Details ===


@dataclass(frozen=True)
class ViewLabels:
    secret: Secret
    force: bool = False
    navigate: bool = True
    origin: Any = field(default=None, compare=False)


@dataclass(frozen=True)
class ViewReplication:
    secret: Secret
    force: bool = False
    navigate: bool = True
    origin: Any = field(default=None, compare=False)


@dataclass(frozen=True)
class SecretDescribed:
    """Full metadata of ``secret``, fetched for the ``view`` page (labels or replication)."""

    secret: Secret
    view: str
    navigate: bool = True
    origin: Any = field(default=None, compare=False)


@dataclass(frozen=True)
class ViewIamPolicy:
    secret: Secret
    force: bool = False
    navigate: bool = True
    origin: Any = field(default=None, compare=False)


@dataclass(frozen=True)
class IamPolicyLoaded:
    secret: Secret
    policy: IamPolicy
    navigate: bool = True
    origin: Any = field(default=None, compare=False)


# === Failures ===


@dataclass(frozen=True)
class OperationFailed:
    """A client call failed; ``request`` is the navigation it belonged to, if any."""

    operation: str
    error: str
    request: tuple[str, ...] | None = None
