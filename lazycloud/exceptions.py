"""lazycloud exception hierarchy."""

from __future__ import annotations


class LazyCloudError(Exception):
    """Base exception for all lazycloud errors."""


class ConfigError(LazyCloudError):
    """Raised when the configuration is invalid or cannot be read."""


class ConfigNotFoundError(ConfigError):
    """Raised when an explicitly requested configuration file does not exist."""


class RegistryError(LazyCloudError):
    """Raised when the provider registry is misused."""


class RegistryFrozenError(RegistryError):
    """Raised when registering a provider after startup initialization."""


class UnknownServiceError(RegistryError):
    """Raised when a service id has no registered provider."""


class ProviderError(LazyCloudError):
    """Raised when a provider client call fails."""


class ServiceError(LazyCloudError):
    """Raised when a service instance violates the framework contract."""
