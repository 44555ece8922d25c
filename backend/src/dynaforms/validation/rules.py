"""Built-in rule predicates.

Each predicate takes a submitted value and the rule's configured ``value``
and returns True when the value is valid:

- required: value must be non-empty
- email: address format
- minLength/maxLength: string length bounds
- min/max: numeric bounds
- pattern: regex search
- custom: named validator from the registry

Every rule except ``required`` and ``custom`` passes on an empty value; pair
it with ``required`` to demand a value. A value or bound that cannot be
coerced makes the rule pass.
"""

import logging
import re
from typing import Any, assert_never

from dynaforms.config import EngineSettings
from dynaforms.forms.types import RuleConfig, RuleType
from dynaforms.validation.coercion import as_int, as_number, as_string, is_empty, text_length
from dynaforms.validation.registry import ValidatorRegistry
from dynaforms.validation.types import RuleOwner

logger = logging.getLogger(__name__)


# =============================================================================
# Format Patterns
# =============================================================================

# Same pattern as the browser evaluator; keep in sync
EMAIL_PATTERN = re.compile(
    r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"
)


# =============================================================================
# Predicates
# =============================================================================


def is_present(value: Any) -> bool:
    """required"""
    return not is_empty(value)


def is_valid_email(value: Any) -> bool:
    text = as_string(value)
    return text is not None and EMAIL_PATTERN.fullmatch(text) is not None


def has_min_length(value: Any, bound: Any) -> bool:
    text = as_string(value)
    minimum = as_int(bound)
    if text is None or minimum is None:
        return True
    return text_length(text) >= minimum


def has_max_length(value: Any, bound: Any) -> bool:
    text = as_string(value)
    maximum = as_int(bound)
    if text is None or maximum is None:
        return True
    return text_length(text) <= maximum


def is_at_least(value: Any, bound: Any) -> bool:
    number = as_number(value)
    minimum = as_number(bound)
    if number is None or minimum is None:
        return True
    return number >= minimum


def is_at_most(value: Any, bound: Any) -> bool:
    number = as_number(value)
    maximum = as_number(bound)
    if number is None or maximum is None:
        return True
    return number <= maximum


def matches_pattern(value: Any, pattern: Any, *, fail_open: bool = True) -> bool:
    """Search ``value`` for ``pattern``.

    An uncompilable pattern is a configuration gap, not a user error: it is
    logged and the rule passes (or fails when ``fail_open`` is off).
    """
    text = as_string(value)
    source = as_string(pattern)
    if text is None or source is None:
        return True

    try:
        compiled = re.compile(source)
    except re.error as exc:
        logger.warning("Invalid regex pattern %r: %s", source, exc)
        return fail_open

    return compiled.search(text) is not None


# =============================================================================
# Rule Evaluator
# =============================================================================


class RuleEvaluator:
    """Evaluates one configured rule against one value.

    Holds the custom validator registry and the failure policy; has no
    per-call state and is safe to share across threads.
    """

    def __init__(self, registry: ValidatorRegistry, settings: EngineSettings | None = None):
        self.registry = registry
        self.settings = settings or EngineSettings()

    def is_valid(
        self,
        rule: RuleConfig,
        value: Any,
        owner: RuleOwner | None,
        form_data: dict[str, Any],
    ) -> bool:
        """Return True if ``value`` satisfies ``rule``.

        Args:
            rule: The rule to check (conditions are the caller's concern)
            value: Raw submitted value
            owner: Field or column config the rule belongs to
            form_data: Full form data, passed through to custom validators
        """
        rule_type = rule.type

        if rule_type is RuleType.REQUIRED:
            return is_present(value)
        if rule_type is RuleType.CUSTOM:
            return self._run_custom(rule, value, owner, form_data)

        # Remaining built-ins skip empty values
        if is_empty(value):
            return True

        if rule_type is RuleType.EMAIL:
            return is_valid_email(value)
        elif rule_type is RuleType.MIN_LENGTH:
            return has_min_length(value, rule.value)
        elif rule_type is RuleType.MAX_LENGTH:
            return has_max_length(value, rule.value)
        elif rule_type is RuleType.MIN:
            return is_at_least(value, rule.value)
        elif rule_type is RuleType.MAX:
            return is_at_most(value, rule.value)
        elif rule_type is RuleType.PATTERN:
            return matches_pattern(value, rule.value, fail_open=self.settings.fail_open)
        else:
            assert_never(rule_type)

    def _run_custom(
        self,
        rule: RuleConfig,
        value: Any,
        owner: RuleOwner | None,
        form_data: dict[str, Any],
    ) -> bool:
        name = rule.custom_validator_name
        if not name:
            return True

        validator = self.registry.get(name)
        if validator is None:
            logger.warning('Custom validator "%s" not registered', name)
            return self.settings.fail_open

        return bool(validator(value, rule.custom_validator_params, owner, form_data))
