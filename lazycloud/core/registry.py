"""
Service registry.

Providers register their services once at startup; the registry is then
frozen and handed to the controller by reference.  Protocols define the
provider interface so implementations can be swapped for testing.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

from lazycloud.core.commands import CommandDispatcher
from lazycloud.core.service import ServiceInstance, ServiceLogic
from lazycloud.exceptions import RegistryError, RegistryFrozenError, UnknownServiceError
from lazycloud.keymap import KeyResolver

logger = logging.getLogger(__name__)

# Copies text to the system clipboard; supplied by the host.
Clipboard = Callable[[str], None]


@dataclass(frozen=True)
class Context:
    """Immutable description of where a service operates."""

    provider: str
    name: str
    project: str | None = None
    account: str | None = None
    region: str | None = None

    @property
    def label(self) -> str:
        return f"{self.provider}:{self.name}"

    def cells(self) -> tuple[str, ...]:
        return (
            self.name,
            self.provider,
            self.project or "-",
            self.account or "-",
            self.region or "-",
        )


@dataclass(frozen=True, order=True)
class ServiceId:
    """A provider-qualified service name, written ``provider:service``."""

    provider: str
    service: str

    @classmethod
    def parse(cls, text: str) -> ServiceId:
        provider, sep, service = text.strip().partition(":")
        if not sep or not provider or not service:
            raise ValueError(f"Invalid service id {text!r}, expected 'provider:service'")
        return cls(provider, service)

    def __str__(self) -> str:
        return f"{self.provider}:{self.service}"


@dataclass
class ServiceEnv:
    """Shared collaborators passed to every service factory."""

    dispatcher: CommandDispatcher = field(default_factory=CommandDispatcher)
    keys: KeyResolver = field(default_factory=KeyResolver)
    clipboard: Clipboard | None = None


class ServiceProvider(Protocol):
    """Protocol for one registrable service."""

    service_id: ServiceId
    display_name: str
    description: str

    def available(self, context: Context) -> bool:
        """Whether the service can run in ``context``."""
        ...

    def create(self, context: Context, env: ServiceEnv) -> ServiceLogic:
        """Build the service logic for ``context``."""
        ...


class ServiceRegistry:
    """Startup-populated map of service ids to providers."""

    def __init__(self) -> None:
        self._providers: dict[ServiceId, ServiceProvider] = {}
        self._frozen = False

    def register(self, provider: ServiceProvider) -> None:
        if self._frozen:
            raise RegistryFrozenError(f"Cannot register {provider.service_id}: registry is frozen")
        if provider.service_id in self._providers:
            raise RegistryError(f"Service {provider.service_id} is already registered")
        self._providers[provider.service_id] = provider
        logger.debug("Registered service %s", provider.service_id)

    def freeze(self) -> ServiceRegistry:
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, service_id: ServiceId) -> ServiceProvider:
        try:
            return self._providers[service_id]
        except KeyError:
            raise UnknownServiceError(f"Unknown service: {service_id}") from None

    def providers(self) -> list[ServiceProvider]:
        return [self._providers[sid] for sid in sorted(self._providers)]

    def available_services(self, context: Context) -> list[ServiceProvider]:
        return [p for p in self.providers() if p.available(context)]

    def find(self, text: str, context: Context) -> ServiceProvider:
        """Resolve ``provider:service`` or a bare service name for ``context``."""
        if ":" in text:
            return self.get(ServiceId.parse(text))
        for provider in self.available_services(context):
            if provider.service_id.service == text:
                return provider
        raise UnknownServiceError(f"No service {text!r} for context {context.name}")

    def instantiate(self, service_id: ServiceId, context: Context, env: ServiceEnv) -> ServiceInstance:
        """Create (but do not mount) an instance of ``service_id``."""
        provider = self.get(service_id)
        logic = provider.create(context, env)
        return ServiceInstance(service_id, context, logic, dispatcher=env.dispatcher, keys=env.keys)

    def __len__(self) -> int:
        return len(self._providers)

    def __contains__(self, service_id: object) -> bool:
        return service_id in self._providers
