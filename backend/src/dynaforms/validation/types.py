"""Core types for the dynaforms validation engine.

Results are serialized with stable JSON field names so a client-side
evaluator and this engine can be compared byte for byte:

    {"valid": false, "errors": [{"field": "...", "message": "...", "rule": "..."}]}
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, Union

from dynaforms.forms.types import ColumnConfig, FieldConfig

# Config object handed to custom validators: the field, or the column for
# table/datagrid cells
RuleOwner = Union[FieldConfig, ColumnConfig]

# Custom validator signature: (value, params, field_config, form_data) -> valid
CustomValidatorFn = Callable[
    [Any, dict[str, Any] | None, RuleOwner | None, dict[str, Any] | None],
    bool,
]


@dataclass(frozen=True)
class FieldValidationError:
    """A single failed rule.

    Attributes:
        field: Path of the failing value ("email", "contacts[0].phone",
            "enrolments.year1.students")
        message: The rule's configured message, verbatim
        rule: Lowercase rule kind ("required", "minlength", "custom", ...)
    """

    field: str
    message: str
    rule: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "field": self.field,
            "message": self.message,
            "rule": self.rule,
        }


@dataclass
class ValidationResult:
    """Result of validating a form or a single field.

    Attributes:
        valid: True iff ``errors`` is empty
        errors: Errors in field declaration order, then row/column order
    """

    valid: bool
    errors: list[FieldValidationError] = field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: list[FieldValidationError]) -> "ValidationResult":
        return cls(valid=len(errors) == 0, errors=list(errors))

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": [e.to_dict() for e in self.errors],
        }


@dataclass(frozen=True)
class AsyncValidationResult:
    """Outcome of one async validator invocation."""

    valid: bool
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"valid": self.valid}
        if self.message is not None:
            result["message"] = self.message
        return result


# Async validator signature: async (value, params, field_config, form_data) -> result
AsyncValidatorFn = Callable[
    [Any, dict[str, Any] | None, FieldConfig | None, dict[str, Any] | None],
    Awaitable[AsyncValidationResult],
]


class AsyncValidatorError(Exception):
    """An async validator raised instead of returning a result.

    The original exception is chained as ``__cause__``. Callers decide whether
    an unreachable validator blocks submission.
    """

    def __init__(self, field: str, validator_name: str, cause: BaseException):
        super().__init__(f"Async validator '{validator_name}' failed for field '{field}': {cause}")
        self.field = field
        self.validator_name = validator_name
