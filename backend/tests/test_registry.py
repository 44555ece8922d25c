"""Tests for the custom and async validator registries."""

import logging
import threading

import pytest

from dynaforms.validation.registry import AsyncValidatorRegistry, ValidatorRegistry, validator
from dynaforms.validation.types import AsyncValidationResult


def always_valid(value, params, field_config, form_data):
    return True


def always_invalid(value, params, field_config, form_data):
    return False


@pytest.fixture
def registry():
    return ValidatorRegistry()


@pytest.fixture
def async_registry():
    return AsyncValidatorRegistry()


# =============================================================================
# ValidatorRegistry
# =============================================================================


class TestValidatorRegistry:
    def test_register_and_get(self, registry):
        registry.register("ok", always_valid)
        assert registry.get("ok") is always_valid
        assert registry.has("ok")
        assert "ok" in registry

    def test_get_unknown_returns_none(self, registry):
        assert registry.get("missing") is None
        assert not registry.has("missing")
        assert "missing" not in registry

    def test_overwrite_warns_and_replaces(self, registry, caplog):
        registry.register("check", always_valid)
        with caplog.at_level(logging.WARNING):
            registry.register("check", always_invalid)
        assert registry.get("check") is always_invalid
        assert 'ValidatorRegistry: Validator "check" is being overwritten' in caplog.text

    def test_first_registration_does_not_warn(self, registry, caplog):
        with caplog.at_level(logging.WARNING):
            registry.register("check", always_valid)
        assert "overwritten" not in caplog.text

    def test_register_all(self, registry):
        registry.register_all({"a": always_valid, "b": always_invalid})
        assert sorted(registry.list()) == ["a", "b"]
        assert len(registry) == 2

    def test_unregister(self, registry):
        registry.register("a", always_valid)
        assert registry.unregister("a") is True
        assert registry.unregister("a") is False
        assert registry.get("a") is None

    def test_clear(self, registry):
        registry.register_all({"a": always_valid, "b": always_invalid})
        registry.clear()
        assert registry.list() == []
        assert len(registry) == 0

    def test_registries_are_isolated(self):
        first, second = ValidatorRegistry(), ValidatorRegistry()
        first.register("a", always_valid)
        assert not second.has("a")

    def test_non_string_membership(self, registry):
        assert 1 not in registry


class TestAsyncValidatorRegistry:
    def test_register_and_get(self, async_registry):
        async def check(value, params, field_config, form_data):
            return AsyncValidationResult(valid=True)

        async_registry.register("check", check)
        assert async_registry.get("check") is check

    def test_separate_from_sync_registry(self, registry, async_registry):
        registry.register("shared", always_valid)
        assert not async_registry.has("shared")

    def test_overwrite_label(self, async_registry, caplog):
        async def check(*_):
            return AsyncValidationResult(valid=True)

        async_registry.register("check", check)
        with caplog.at_level(logging.WARNING):
            async_registry.register("check", check)
        assert 'AsyncValidatorRegistry: Validator "check" is being overwritten' in caplog.text


# =============================================================================
# Decorator
# =============================================================================


class TestValidatorDecorator:
    def test_registers_and_returns_function(self, registry):
        @validator("postcode", registry)
        def postcode(value, params, field_config, form_data):
            return str(value).isdigit()

        assert registry.get("postcode") is postcode
        assert postcode("3000", None, None, None)


# =============================================================================
# Concurrency
# =============================================================================


class TestConcurrentAccess:
    def test_parallel_registration(self, registry):
        def register_batch(thread_id: int):
            for i in range(100):
                registry.register(f"v{thread_id}_{i}", always_valid)
                assert registry.get(f"v{thread_id}_{i}") is always_valid

        threads = [threading.Thread(target=register_batch, args=(t,)) for t in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(registry) == 800

    def test_lookup_during_unregister_sees_either_state(self, registry):
        registry.register("flip", always_valid)
        seen = []

        def read():
            for _ in range(500):
                seen.append(registry.get("flip"))

        def flip():
            for _ in range(250):
                registry.unregister("flip")
                registry.register("flip", always_valid)

        reader = threading.Thread(target=read)
        writer = threading.Thread(target=flip)
        reader.start()
        writer.start()
        reader.join()
        writer.join()

        assert set(seen) <= {None, always_valid}
