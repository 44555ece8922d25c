"""Rule applicability conditions.

A rule with a ``condition`` only runs when the condition holds. The condition
names a target value:

- ``"employmentType"``: a sibling in the current scope (the form data for
  top-level fields, the row for table and datagrid cells)
- ``"$form.employmentType"``: always the top-level form data

A target that cannot be resolved reads as absent.
"""

from typing import Any, assert_never

from dynaforms.forms.types import ConditionOperator, RuleCondition, RuleConfig
from dynaforms.validation.coercion import is_empty, lookup, loose_equals

FORM_SCOPE_PREFIX = "$form."


def resolve_target(reference: str, scope: Any, form_data: Any) -> Any:
    """Resolve a condition's field reference to its current value."""
    if reference.startswith(FORM_SCOPE_PREFIX):
        return lookup(form_data, reference[len(FORM_SCOPE_PREFIX):])
    return lookup(scope, reference)


def condition_met(condition: RuleCondition, scope: Any, form_data: Any) -> bool:
    """Evaluate a condition against the current scope and form data."""
    target = resolve_target(condition.field, scope, form_data)
    operator = condition.operator

    if operator is ConditionOperator.EQUALS:
        return loose_equals(target, condition.value)
    elif operator is ConditionOperator.NOT_EQUALS:
        return not loose_equals(target, condition.value)
    elif operator is ConditionOperator.IS_EMPTY:
        return is_empty(target)
    elif operator is ConditionOperator.IS_NOT_EMPTY:
        return not is_empty(target)
    else:
        assert_never(operator)


def rule_applies(rule: RuleConfig, scope: Any, form_data: Any) -> bool:
    """True if the rule has no condition or its condition holds."""
    if rule.condition is None:
        return True
    return condition_met(rule.condition, scope, form_data)
