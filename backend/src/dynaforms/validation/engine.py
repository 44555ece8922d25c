"""Form validator.

Validates a submitted form against its configuration. This is the
authoritative server-side pass: the same rules run in the browser for
immediate feedback, but only this result decides whether a submission is
accepted.

Usage:
    registry = ValidatorRegistry()
    validator = FormValidator(registry)

    result = validator.validate(config, {"email": "a@b.co"})
    if not result.valid:
        return {"errors": [e.to_dict() for e in result.errors]}
"""

from typing import Any

from dynaforms.config import EngineSettings
from dynaforms.forms.types import FieldConfig, FormConfig
from dynaforms.validation.coercion import as_mapping
from dynaforms.validation.dispatch import FieldDispatcher
from dynaforms.validation.registry import ValidatorRegistry
from dynaforms.validation.rules import RuleEvaluator
from dynaforms.validation.types import FieldValidationError, ValidationResult


class FormValidator:
    """Runs every field's rules and collects all errors.

    Stateless apart from its registry and settings; one instance can serve
    concurrent requests.
    """

    def __init__(
        self,
        registry: ValidatorRegistry | None = None,
        settings: EngineSettings | None = None,
    ):
        self.registry = registry if registry is not None else ValidatorRegistry()
        self.settings = settings or EngineSettings()
        self.dispatcher = FieldDispatcher(RuleEvaluator(self.registry, self.settings))

    def validate(self, config: FormConfig, data: dict[str, Any] | None) -> ValidationResult:
        """Validate a full submission.

        Args:
            config: The form configuration
            data: Submitted values keyed by field name

        Returns:
            ValidationResult with errors in field declaration order
        """
        form_data = as_mapping(data) or {}

        errors: list[FieldValidationError] = []
        for field in config.fields:
            errors.extend(self.dispatcher.dispatch(field, form_data.get(field.name), form_data))

        return ValidationResult.from_errors(errors)

    def validate_field_value(
        self,
        field: FieldConfig,
        value: Any,
        form_data: dict[str, Any] | None = None,
    ) -> ValidationResult:
        """Validate a single field's value, e.g. on blur.

        Conditions that reference other fields read from ``form_data``.
        """
        scope = as_mapping(form_data) or {}
        return ValidationResult.from_errors(self.dispatcher.dispatch(field, value, scope))
