"""Async validation orchestrator.

Runs the validators bound through a field's ``asyncValidation`` config,
typically checks that need I/O such as "is this email already registered".

Async validation is separate from the synchronous pass; callers compose
them:

    sync_result = form_validator.validate(config, data)
    async_result = await async_validator.validate(config, data)

No timeout is applied here. Wrap calls with ``asyncio.timeout`` when a
validator may hang.
"""

import asyncio
import logging
from typing import Any

from dynaforms.config import EngineSettings
from dynaforms.forms.types import FieldConfig, FormConfig
from dynaforms.validation.coercion import as_mapping
from dynaforms.validation.dispatch import participates
from dynaforms.validation.registry import AsyncValidatorRegistry
from dynaforms.validation.types import (
    AsyncValidationResult,
    AsyncValidatorError,
    FieldValidationError,
    ValidationResult,
)

logger = logging.getLogger(__name__)

ASYNC_RULE = "async"
DEFAULT_ASYNC_MESSAGE = "Validation failed"


class AsyncFormValidator:
    """Invokes async validators for single fields or a whole form."""

    def __init__(
        self,
        registry: AsyncValidatorRegistry | None = None,
        settings: EngineSettings | None = None,
    ):
        self.registry = registry if registry is not None else AsyncValidatorRegistry()
        self.settings = settings or EngineSettings()

    async def validate_field(
        self,
        field: FieldConfig,
        value: Any,
        form_data: dict[str, Any] | None = None,
    ) -> AsyncValidationResult:
        """Run the field's async validator.

        Args:
            field: Field config, possibly carrying an ``async_validation`` binding
            value: The field's current value
            form_data: Full form data passed through to the validator

        Returns:
            The validator's result unmodified, or a valid result when the
            field has no binding

        Raises:
            AsyncValidatorError: If the validator raised
        """
        binding = field.async_validation
        if binding is None:
            return AsyncValidationResult(valid=True)

        name = binding.validator_name
        validator = self.registry.get(name)
        if validator is None:
            logger.warning('Async validator "%s" not registered', name)
            if self.settings.fail_open:
                return AsyncValidationResult(valid=True)
            return AsyncValidationResult(valid=False, message=f'Async validator "{name}" not registered')

        try:
            return await validator(value, binding.params, field, form_data)
        except Exception as exc:
            raise AsyncValidatorError(field.name, name, exc) from exc

    async def validate(self, config: FormConfig, data: dict[str, Any] | None) -> ValidationResult:
        """Run every bound field's async validator concurrently.

        Results are reported in field declaration order regardless of which
        validator finishes first. Every validator runs to completion; if any
        raised, the first failure in declaration order propagates as
        :class:`AsyncValidatorError`.
        """
        form_data = as_mapping(data) or {}
        fields = [f for f in config.fields if f.async_validation is not None and participates(f)]
        if not fields:
            return ValidationResult(valid=True)

        results = await asyncio.gather(
            *(self.validate_field(f, form_data.get(f.name), form_data) for f in fields),
            return_exceptions=True,
        )

        errors: list[FieldValidationError] = []
        for f, result in zip(fields, results):
            if isinstance(result, BaseException):
                raise result
            if not result.valid:
                errors.append(
                    FieldValidationError(
                        field=f.name,
                        message=result.message or DEFAULT_ASYNC_MESSAGE,
                        rule=ASYNC_RULE,
                    )
                )
        return ValidationResult.from_errors(errors)
