"""Per-field validation dispatch.

Routes a field to the strategy for its kind and produces path-qualified
errors:

| Kind                  | Strategy                                             | Error path          |
|-----------------------|------------------------------------------------------|---------------------|
| info, formref         | never validated                                      |                     |
| archived (any kind)   | never validated                                      |                     |
| table                 | rules per column per non-empty row                   | ``field[row].col``  |
| datagrid              | rules per declared row label x non-computed column   | ``field.rowId.col`` |
| phone                 | ``required`` on ``number``; other rules on ``number`` | ``field``          |
| daterange             | ``required`` on ``fromDate`` / ``toDate``            | ``field``           |
| everything else       | rules against the submitted value                    | ``field``           |
"""

from typing import Any, assert_never

from dynaforms.forms.types import (
    NON_INPUT_FIELD_TYPES,
    ColumnConfig,
    FieldConfig,
    FieldType,
    RuleConfig,
    RuleType,
)
from dynaforms.validation.coercion import as_list, as_mapping, is_empty
from dynaforms.validation.conditions import rule_applies
from dynaforms.validation.rules import RuleEvaluator
from dynaforms.validation.types import FieldValidationError, RuleOwner


def participates(field: FieldConfig) -> bool:
    """True if the field takes part in validation at all."""
    return not field.archived and field.type not in NON_INPUT_FIELD_TYPES


def _error(path: str, rule: RuleConfig) -> FieldValidationError:
    return FieldValidationError(field=path, message=rule.message, rule=rule.type.rule_name)


class FieldDispatcher:
    """Validates one field's submitted value according to its kind."""

    def __init__(self, evaluator: RuleEvaluator):
        self.evaluator = evaluator

    def dispatch(
        self,
        field: FieldConfig,
        value: Any,
        form_data: dict[str, Any],
    ) -> list[FieldValidationError]:
        """Validate ``value`` for ``field``.

        Args:
            field: The field configuration
            value: The field's submitted value (None when absent)
            form_data: Full form data, for conditions and custom validators

        Returns:
            Errors in rule order, then row/column order for composites
        """
        if field.archived:
            return []

        match field.type:
            case FieldType.INFO | FieldType.FORM_REF:
                return []
            case FieldType.TABLE:
                return self._validate_table(field, value, form_data)
            case FieldType.DATAGRID:
                return self._validate_datagrid(field, value, form_data)
            case FieldType.PHONE:
                return self._validate_phone(field, value, form_data)
            case FieldType.DATE_RANGE:
                return self._validate_date_range(field, value, form_data)
            case (
                FieldType.TEXT
                | FieldType.EMAIL
                | FieldType.NUMBER
                | FieldType.TEXTAREA
                | FieldType.SELECT
                | FieldType.CHECKBOX
                | FieldType.RADIO
                | FieldType.DATE
            ):
                return self._validate_rules(field.validations, value, field.name, field, form_data, form_data)
            case _:
                assert_never(field.type)

    def _validate_rules(
        self,
        rules: list[RuleConfig],
        value: Any,
        path: str,
        owner: RuleOwner,
        scope: Any,
        form_data: dict[str, Any],
    ) -> list[FieldValidationError]:
        errors: list[FieldValidationError] = []
        for rule in rules:
            if not rule_applies(rule, scope, form_data):
                continue
            if not self.evaluator.is_valid(rule, value, owner, form_data):
                errors.append(_error(path, rule))
        return errors

    def _validate_table(
        self,
        field: FieldConfig,
        value: Any,
        form_data: dict[str, Any],
    ) -> list[FieldValidationError]:
        config = field.table_config
        rows = as_list(value)
        if config is None or rows is None:
            return []

        errors: list[FieldValidationError] = []
        for row_index, raw_row in enumerate(rows):
            row = as_mapping(raw_row)
            if row is None:
                continue

            # An all-empty row is a blank line, not an incomplete entry
            if all(is_empty(row.get(column.name)) for column in config.columns):
                continue

            for column in config.columns:
                errors.extend(self._validate_cell(
                    column,
                    row,
                    f"{field.name}[{row_index}].{column.name}",
                    form_data,
                ))
        return errors

    def _validate_datagrid(
        self,
        field: FieldConfig,
        value: Any,
        form_data: dict[str, Any],
    ) -> list[FieldValidationError]:
        config = field.datagrid_config
        grid = as_mapping(value)
        if config is None or grid is None:
            return []

        errors: list[FieldValidationError] = []
        for row_label in config.row_labels:
            row = as_mapping(grid.get(row_label.id))
            if row is None:
                continue

            for column in config.columns:
                if column.computed:
                    continue
                errors.extend(self._validate_cell(
                    column,
                    row,
                    f"{field.name}.{row_label.id}.{column.name}",
                    form_data,
                ))
        return errors

    def _validate_cell(
        self,
        column: ColumnConfig,
        row: dict[str, Any],
        path: str,
        form_data: dict[str, Any],
    ) -> list[FieldValidationError]:
        if not column.validations:
            return []
        return self._validate_rules(column.validations, row.get(column.name), path, column, row, form_data)

    def _validate_phone(
        self,
        field: FieldConfig,
        value: Any,
        form_data: dict[str, Any],
    ) -> list[FieldValidationError]:
        applicable = [r for r in field.validations if rule_applies(r, form_data, form_data)]
        if not applicable:
            return []

        phone = as_mapping(value)
        number = phone.get("number") if phone is not None else None

        errors: list[FieldValidationError] = []

        # One required error at most, reported on the field itself
        required = next((r for r in applicable if r.type is RuleType.REQUIRED), None)
        if required is not None and is_empty(number):
            errors.append(_error(field.name, required))

        if not is_empty(number):
            for rule in applicable:
                if rule.type is RuleType.REQUIRED:
                    continue
                if not self.evaluator.is_valid(rule, number, field, form_data):
                    errors.append(_error(field.name, rule))

        return errors

    def _validate_date_range(
        self,
        field: FieldConfig,
        value: Any,
        form_data: dict[str, Any],
    ) -> list[FieldValidationError]:
        required = next(
            (
                r for r in field.validations
                if r.type is RuleType.REQUIRED and rule_applies(r, form_data, form_data)
            ),
            None,
        )
        if required is None:
            return []

        date_range = as_mapping(value) or {}
        to_date_optional = field.daterange_config.to_date_optional if field.daterange_config else False

        from_missing = is_empty(date_range.get("fromDate"))
        to_missing = is_empty(date_range.get("toDate"))

        if from_missing or (to_missing and not to_date_optional):
            return [_error(field.name, required)]
        return []
