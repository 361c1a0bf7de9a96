"""
Concrete services.

Each provider module exposes ``register(registry)``; ``build_registry``
calls them once at startup and freezes the result.
"""

from __future__ import annotations

from lazycloud.core.registry import ServiceRegistry
from lazycloud.providers import gcp


def build_registry() -> ServiceRegistry:
    registry = ServiceRegistry()
    gcp.register(registry)
    return registry.freeze()
