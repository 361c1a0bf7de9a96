"""Secret Manager resources as immutable snapshots."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


def _short_name(resource: str) -> str:
    """``projects/p/secrets/db-password`` -> ``db-password``."""
    return resource.rstrip("/").rsplit("/", 1)[-1]


def format_timestamp(value: str | None) -> str:
    """RFC 3339 timestamp as ``YYYY-MM-DD HH:MM`` (UTC); unparseable values pass through."""
    if not value:
        return "Unknown"
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return parsed.strftime("%Y-%m-%d %H:%M")


@dataclass(frozen=True)
class Label:
    key: str
    value: str

    def cells(self) -> tuple[str, ...]:
        return (self.key, self.value)


@dataclass(frozen=True)
class Replication:
    """Automatic replication, or user-managed replicas in ``locations``."""

    automatic: bool = True
    locations: tuple[str, ...] = ()

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Replication:
        if "userManaged" not in data:
            return cls(automatic=True)
        replicas = (data.get("userManaged") or {}).get("replicas") or []
        return cls(
            automatic=False,
            locations=tuple(r["location"] for r in replicas if r.get("location")),
        )

    @property
    def kind(self) -> str:
        return "Automatic" if self.automatic else "User-managed"


@dataclass(frozen=True)
class Secret:
    name: str
    created_at: str = "Unknown"
    labels: dict[str, str] = field(default_factory=dict, compare=False, hash=False)
    replication: Replication | None = field(default=None, compare=False, hash=False)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> Secret:
        return cls(
            name=_short_name(data["name"]),
            created_at=format_timestamp(data.get("createTime")),
            labels=dict(data.get("labels") or {}),
            replication=Replication.from_json(data["replication"]) if data.get("replication") else None,
        )

    def cells(self) -> tuple[str, ...]:
        labels = ", ".join(f"{k}={v}" for k, v in sorted(self.labels.items()))
        return (self.name, self.created_at, labels)

    def label_entries(self) -> tuple[Label, ...]:
        return tuple(Label(k, v) for k, v in sorted(self.labels.items()))

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class SecretVersion:
    version_id: str
    state: str = "ENABLED"
    created_at: str = "Unknown"

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> SecretVersion:
        return cls(
            version_id=_short_name(data["name"]),
            state=str(data.get("state", "STATE_UNSPECIFIED")).upper(),
            created_at=format_timestamp(data.get("createTime")),
        )

    @property
    def enabled(self) -> bool:
        return self.state == "ENABLED"

    @property
    def destroyed(self) -> bool:
        return self.state == "DESTROYED"

    def cells(self) -> tuple[str, ...]:
        return (self.version_id, self.state, self.created_at)

    def __str__(self) -> str:
        return self.version_id


@dataclass(frozen=True)
class SecretPayload:
    data: str
    is_binary: bool = False

    @classmethod
    def from_bytes(cls, raw: bytes) -> SecretPayload:
        """Text payloads decode as UTF-8; anything else is shown as base64."""
        try:
            return cls(raw.decode("utf-8"), is_binary=False)
        except UnicodeDecodeError:
            return cls(base64.b64encode(raw).decode("ascii"), is_binary=True)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> SecretPayload:
        encoded = (data.get("payload") or {}).get("data")
        if encoded is None:
            raise ValueError("No payload found for the secret version")
        try:
            raw = base64.b64decode(encoded, altchars=b"-_", validate=False)
        except binascii.Error as exc:
            raise ValueError(f"Malformed payload: {exc}") from exc
        return cls.from_bytes(raw)

    @property
    def lines(self) -> list[str]:
        return self.data.splitlines() or [""]


@dataclass(frozen=True)
class IamBinding:
    role: str
    members: tuple[str, ...] = ()

    def cells(self) -> tuple[str, ...]:
        if not self.members:
            members = "(none)"
        elif len(self.members) <= 3:
            members = ", ".join(self.members)
        else:
            members = f"{', '.join(self.members[:2])}, ... (+{len(self.members) - 2} more)"
        return (self.role, members)


@dataclass(frozen=True)
class IamPolicy:
    bindings: tuple[IamBinding, ...] = ()
    etag: str | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> IamPolicy:
        bindings = (
            IamBinding(item["role"], tuple(item.get("members") or ()))
            for item in data.get("bindings") or []
        )
        return cls(tuple(sorted(bindings, key=lambda b: b.role)), data.get("etag"))
