"""Google Cloud services."""

from __future__ import annotations

from lazycloud.core.registry import ServiceRegistry
from lazycloud.providers.gcp.secret_manager import SecretManagerProvider


def register(registry: ServiceRegistry) -> None:
    registry.register(SecretManagerProvider())
