"""dynaforms validation engine.

Validates submitted form data against a form configuration:
- Built-in rules (required, email, minLength, maxLength, min, max, pattern)
- Custom rules resolved by name from a ValidatorRegistry
- Conditional rules gated on sibling or form-level values
- Composite fields (table, datagrid, phone, daterange)
- Async validators bound per field, run by AsyncFormValidator

Usage:
    from dynaforms.validation import FormValidator, ValidatorRegistry

    registry = ValidatorRegistry()
    load_validator_modules(["myapp.validators"], registry, async_registry)

    result = FormValidator(registry).validate(config, data)
"""

from dynaforms.validation.async_validation import AsyncFormValidator
from dynaforms.validation.engine import FormValidator
from dynaforms.validation.plugins import PluginError, load_validator_modules
from dynaforms.validation.registry import (
    AsyncValidatorRegistry,
    ValidatorRegistry,
    validator,
)
from dynaforms.validation.types import (
    AsyncValidationResult,
    AsyncValidatorError,
    AsyncValidatorFn,
    CustomValidatorFn,
    FieldValidationError,
    ValidationResult,
)

__all__ = [
    # Orchestrators
    "AsyncFormValidator",
    "FormValidator",
    # Registries
    "AsyncValidatorRegistry",
    "ValidatorRegistry",
    "validator",
    # Plug-ins
    "PluginError",
    "load_validator_modules",
    # Types
    "AsyncValidationResult",
    "AsyncValidatorError",
    "AsyncValidatorFn",
    "CustomValidatorFn",
    "FieldValidationError",
    "ValidationResult",
]
