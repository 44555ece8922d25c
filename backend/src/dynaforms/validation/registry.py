"""Validator registries for dynaforms.

Provides name-keyed lookup for:
- Custom validators (synchronous predicates referenced by ``custom`` rules)
- Async validators (referenced by a field's ``asyncValidation`` binding)

Registries are plain instances owned by the application's composition root
and passed to :class:`~dynaforms.validation.engine.FormValidator` and
:class:`~dynaforms.validation.async_validation.AsyncFormValidator`. Tests
build their own isolated registries.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from typing import Generic, TypeVar

from dynaforms.validation.types import AsyncValidatorFn, CustomValidatorFn

logger = logging.getLogger(__name__)

FnT = TypeVar("FnT")


class _NamedRegistry(Generic[FnT]):
    """Lock-protected name -> function table.

    Mutations and lookups take the same lock, so a lookup never sees a
    half-applied change. A lookup racing an ``unregister`` may see either
    state.
    """

    _label = "Registry"

    def __init__(self) -> None:
        self._validators: dict[str, FnT] = {}
        self._lock = threading.Lock()

    def register(self, name: str, validator: FnT) -> None:
        """Register a validator by name.

        Re-registering an existing name overwrites it and logs a warning.

        Args:
            name: Opaque name shared by client and server configs
            validator: The validator function
        """
        with self._lock:
            if name in self._validators:
                logger.warning('%s: Validator "%s" is being overwritten', self._label, name)
            self._validators[name] = validator

    def register_all(self, validators: Mapping[str, FnT]) -> None:
        """Register multiple validators at once."""
        for name, validator in validators.items():
            self.register(name, validator)

    def get(self, name: str) -> FnT | None:
        """Get a validator by name, or None if it is not registered."""
        with self._lock:
            return self._validators.get(name)

    def has(self, name: str) -> bool:
        """Check if a validator is registered."""
        with self._lock:
            return name in self._validators

    def list(self) -> list[str]:
        """List all registered validator names (unordered)."""
        with self._lock:
            return list(self._validators)

    def unregister(self, name: str) -> bool:
        """Remove a validator. Returns True if it was registered."""
        with self._lock:
            if name not in self._validators:
                return False
            del self._validators[name]
            return True

    def clear(self) -> None:
        """Remove all validators."""
        with self._lock:
            self._validators.clear()

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def __len__(self) -> int:
        with self._lock:
            return len(self._validators)


class ValidatorRegistry(_NamedRegistry[CustomValidatorFn]):
    """Registry for custom validators referenced by ``customValidatorName``.

    Example:
        registry = ValidatorRegistry()

        @validator("australianPhoneNumber", registry)
        def australian_phone(value, params, field_config, form_data):
            if not value:
                return True
            return AU_PHONE.match(str(value).replace(" ", "")) is not None
    """

    _label = "ValidatorRegistry"


class AsyncValidatorRegistry(_NamedRegistry[AsyncValidatorFn]):
    """Registry for async validators referenced by ``asyncValidation.validatorName``.

    Example:
        @validator("checkEmailExists", async_registry)
        async def check_email(value, params, field_config, form_data):
            exists = await users.email_exists(value)
            return AsyncValidationResult(valid=not exists, message="Email already exists" if exists else None)
    """

    _label = "AsyncValidatorRegistry"


def validator(name: str, registry: _NamedRegistry[FnT]) -> Callable[[FnT], FnT]:
    """Decorator to register a validator function into ``registry``.

    Usage:
        @validator("postcode", registry)
        def postcode(value, params, field_config, form_data):
            ...
    """

    def decorator(fn: FnT) -> FnT:
        registry.register(name, fn)
        return fn

    return decorator
