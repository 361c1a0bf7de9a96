"""Tests for core/registry.py - service ids, contexts and the registry."""

import pytest

from lazycloud.core.registry import Context, ServiceEnv, ServiceId, ServiceRegistry
from lazycloud.exceptions import RegistryError, RegistryFrozenError, UnknownServiceError
from lazycloud.providers import build_registry
from lazycloud.providers.gcp.secret_manager import SERVICE_ID, SecretManagerLogic, SecretManagerProvider


class TestServiceId:
    """Tests for ServiceId parsing."""

    def test_parse(self) -> None:
        assert ServiceId.parse("gcp:secret-manager") == ServiceId("gcp", "secret-manager")

    def test_str_round_trip(self) -> None:
        assert str(ServiceId.parse(" gcp:secret-manager ")) == "gcp:secret-manager"

    @pytest.mark.parametrize("text", ["secret-manager", "gcp:", ":x", ""])
    def test_invalid(self, text: str) -> None:
        with pytest.raises(ValueError):
            ServiceId.parse(text)


class TestContext:
    """Tests for Context."""

    def test_label_and_cells(self) -> None:
        ctx = Context("gcp", "dev", project="dev-123")
        assert ctx.label == "gcp:dev"
        assert ctx.cells() == ("dev", "gcp", "dev-123", "-", "-")

    def test_hashable(self) -> None:
        assert len({Context("gcp", "a"), Context("gcp", "a")}) == 1


class TestServiceRegistry:
    """Tests for ServiceRegistry."""

    def test_register_and_get(self) -> None:
        registry = ServiceRegistry()
        provider = SecretManagerProvider()
        registry.register(provider)

        assert registry.get(SERVICE_ID) is provider
        assert SERVICE_ID in registry
        assert len(registry) == 1

    def test_duplicate_rejected(self) -> None:
        registry = ServiceRegistry()
        registry.register(SecretManagerProvider())
        with pytest.raises(RegistryError):
            registry.register(SecretManagerProvider())

    def test_frozen_rejects_registration(self) -> None:
        registry = ServiceRegistry().freeze()
        assert registry.frozen
        with pytest.raises(RegistryFrozenError):
            registry.register(SecretManagerProvider())

    def test_unknown_service(self) -> None:
        with pytest.raises(UnknownServiceError):
            ServiceRegistry().get(ServiceId("gcp", "nope"))

    def test_available_filters_by_context(self) -> None:
        registry = build_registry()
        assert [p.service_id for p in registry.available_services(Context("gcp", "a"))] == [SERVICE_ID]
        assert registry.available_services(Context("aws", "b")) == []

    def test_find_by_bare_name(self) -> None:
        registry = build_registry()
        assert registry.find("secret-manager", Context("gcp", "a")).service_id == SERVICE_ID
        with pytest.raises(UnknownServiceError):
            registry.find("secret-manager", Context("aws", "b"))

    def test_instantiate_does_not_mount(self, registry: ServiceRegistry, context: Context) -> None:
        instance = registry.instantiate(SERVICE_ID, context, ServiceEnv())

        assert isinstance(instance.logic, SecretManagerLogic)
        assert not instance.alive
        assert instance.context == context

    def test_build_registry_is_frozen(self) -> None:
        registry = build_registry()
        assert registry.frozen
        assert SERVICE_ID in registry
