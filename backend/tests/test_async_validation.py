"""Tests for the async validation orchestrator."""

import asyncio
import logging

import pytest

from dynaforms.config import EngineSettings
from dynaforms.forms import parse_form_config
from dynaforms.validation import (
    AsyncFormValidator,
    AsyncValidationResult,
    AsyncValidatorError,
    AsyncValidatorRegistry,
    FieldValidationError,
)


def bound_field(name: str, validator_name: str, **extra) -> dict:
    return {
        "name": name,
        "label": name.title(),
        "type": "text",
        "asyncValidation": {"validatorName": validator_name, "trigger": "blur", "debounceMs": 300},
        **extra,
    }


def make_form(*fields: dict):
    return parse_form_config({"id": "async-form", "fields": list(fields)})


@pytest.fixture
def async_registry():
    return AsyncValidatorRegistry()


@pytest.fixture
def async_validator(async_registry):
    return AsyncFormValidator(async_registry)


# =============================================================================
# Single field
# =============================================================================


class TestValidateField:
    @pytest.mark.asyncio
    async def test_unbound_field_is_valid(self, async_validator):
        form = make_form({"name": "plain", "label": "Plain", "type": "text"})
        result = await async_validator.validate_field(form.get_field("plain"), "x")
        assert result == AsyncValidationResult(valid=True)

    @pytest.mark.asyncio
    async def test_unregistered_validator_passes_and_warns(self, async_validator, caplog):
        form = make_form(bound_field("email", "checkEmailExists"))
        with caplog.at_level(logging.WARNING):
            result = await async_validator.validate_field(form.get_field("email"), "a@b.co")
        assert result.valid
        assert 'Async validator "checkEmailExists" not registered' in caplog.text

    @pytest.mark.asyncio
    async def test_unregistered_validator_fails_when_fail_closed(self, async_registry):
        async_validator = AsyncFormValidator(async_registry, EngineSettings(fail_open=False))
        form = make_form(bound_field("email", "checkEmailExists"))
        result = await async_validator.validate_field(form.get_field("email"), "a@b.co")
        assert not result.valid
        assert "checkEmailExists" in result.message

    @pytest.mark.asyncio
    async def test_result_returned_unmodified(self, async_registry, async_validator):
        expected = AsyncValidationResult(valid=False, message="Email already exists")

        async def check(value, params, field_config, form_data):
            return expected

        async_registry.register("checkEmailExists", check)
        form = make_form(bound_field("email", "checkEmailExists"))

        result = await async_validator.validate_field(form.get_field("email"), "taken@example.com")

        assert result is expected

    @pytest.mark.asyncio
    async def test_validator_receives_arguments(self, async_registry, async_validator):
        seen = []

        async def check(value, params, field_config, form_data):
            seen.append((value, params, field_config.name, form_data))
            return AsyncValidationResult(valid=True)

        async_registry.register("check", check)
        field = make_form({
            "name": "username",
            "label": "Username",
            "type": "text",
            "asyncValidation": {"validatorName": "check", "params": {"tenant": "acme"}},
        }).get_field("username")

        await async_validator.validate_field(field, "sam", {"username": "sam"})

        assert seen == [("sam", {"tenant": "acme"}, "username", {"username": "sam"})]

    @pytest.mark.asyncio
    async def test_exception_wrapped(self, async_registry, async_validator):
        async def broken(*_):
            raise ConnectionError("lookup service unavailable")

        async_registry.register("broken", broken)
        form = make_form(bound_field("email", "broken"))

        with pytest.raises(AsyncValidatorError) as exc_info:
            await async_validator.validate_field(form.get_field("email"), "x")

        assert exc_info.value.field == "email"
        assert exc_info.value.validator_name == "broken"
        assert isinstance(exc_info.value.__cause__, ConnectionError)

    @pytest.mark.asyncio
    async def test_cancellation_not_wrapped(self, async_registry, async_validator):
        async def cancelled(*_):
            raise asyncio.CancelledError()

        async_registry.register("cancelled", cancelled)
        form = make_form(bound_field("email", "cancelled"))

        with pytest.raises(asyncio.CancelledError):
            await async_validator.validate_field(form.get_field("email"), "x")


# =============================================================================
# Whole form
# =============================================================================


class TestValidateForm:
    @pytest.mark.asyncio
    async def test_no_bound_fields(self, async_validator):
        form = make_form({"name": "plain", "label": "Plain", "type": "text"})
        result = await async_validator.validate(form, {"plain": "x"})
        assert result.valid
        assert result.errors == []

    @pytest.mark.asyncio
    async def test_results_in_declaration_order(self, async_registry, async_validator):
        async def slow(value, *_):
            await asyncio.sleep(0.05)
            return AsyncValidationResult(valid=False, message="Slow says no")

        async def fast(value, *_):
            return AsyncValidationResult(valid=False, message="Fast says no")

        async_registry.register("slow", slow)
        async_registry.register("fast", fast)
        form = make_form(bound_field("first", "slow"), bound_field("second", "fast"))

        result = await async_validator.validate(form, {"first": "a", "second": "b"})

        assert result.errors == [
            FieldValidationError(field="first", message="Slow says no", rule="async"),
            FieldValidationError(field="second", message="Fast says no", rule="async"),
        ]

    @pytest.mark.asyncio
    async def test_validators_run_concurrently(self, async_registry, async_validator):
        started = asyncio.Event()

        async def waiter(*_):
            await started.wait()
            return AsyncValidationResult(valid=True)

        async def signaller(*_):
            started.set()
            return AsyncValidationResult(valid=True)

        async_registry.register("waiter", waiter)
        async_registry.register("signaller", signaller)
        form = make_form(bound_field("a", "waiter"), bound_field("b", "signaller"))

        result = await asyncio.wait_for(async_validator.validate(form, {}), timeout=2)

        assert result.valid

    @pytest.mark.asyncio
    async def test_fallback_message(self, async_registry, async_validator):
        async def silent(*_):
            return AsyncValidationResult(valid=False)

        async_registry.register("silent", silent)
        form = make_form(bound_field("code", "silent"))

        result = await async_validator.validate(form, {"code": "x"})

        assert result.to_dict() == {
            "valid": False,
            "errors": [{"field": "code", "message": "Validation failed", "rule": "async"}],
        }

    @pytest.mark.asyncio
    async def test_archived_and_non_input_fields_skipped(self, async_registry, async_validator):
        calls = []

        async def record(value, params, field_config, form_data):
            calls.append(field_config.name)
            return AsyncValidationResult(valid=False)

        async_registry.register("record", record)
        form = make_form(
            bound_field("live", "record"),
            bound_field("old", "record", archived=True),
            {**bound_field("note", "record"), "type": "info"},
        )

        result = await async_validator.validate(form, {})

        assert calls == ["live"]
        assert [e.field for e in result.errors] == ["live"]

    @pytest.mark.asyncio
    async def test_exception_propagates_from_sweep(self, async_registry, async_validator):
        async def broken(*_):
            raise ValueError("bad")

        async_registry.register("broken", broken)
        form = make_form(bound_field("email", "broken"))

        with pytest.raises(AsyncValidatorError):
            await async_validator.validate(form, {"email": "x"})

    @pytest.mark.asyncio
    async def test_siblings_finish_before_failure_propagates(self, async_registry, async_validator):
        finished = []

        async def broken(*_):
            raise ConnectionError("lookup service unavailable")

        async def slow(*_):
            await asyncio.sleep(0.05)
            finished.append("slow")
            return AsyncValidationResult(valid=True)

        async_registry.register("broken", broken)
        async_registry.register("slow", slow)
        form = make_form(bound_field("a", "broken"), bound_field("b", "slow"))

        with pytest.raises(AsyncValidatorError) as exc_info:
            await async_validator.validate(form, {})

        assert exc_info.value.field == "a"
        assert finished == ["slow"]

    @pytest.mark.asyncio
    async def test_first_failure_in_declaration_order(self, async_registry, async_validator):
        async def slow_failure(*_):
            await asyncio.sleep(0.05)
            raise ValueError("slow")

        async def fast_failure(*_):
            raise ValueError("fast")

        async_registry.register("slowFailure", slow_failure)
        async_registry.register("fastFailure", fast_failure)
        form = make_form(bound_field("first", "slowFailure"), bound_field("second", "fastFailure"))

        with pytest.raises(AsyncValidatorError) as exc_info:
            await async_validator.validate(form, {})

        assert exc_info.value.field == "first"
        assert exc_info.value.validator_name == "slowFailure"
