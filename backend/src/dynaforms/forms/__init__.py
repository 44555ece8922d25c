"""Form configuration model, loading and structural linting."""

from dynaforms.forms.linter import (
    ConfigCheckResult,
    ConfigIssue,
    check_form_config,
    check_form_config_file,
    lint_form_config,
)
from dynaforms.forms.loader import load_form_config, parse_form_config
from dynaforms.forms.types import (
    AsyncTrigger,
    AsyncValidationConfig,
    ColumnConfig,
    ConditionOperator,
    ConfigError,
    DataGridConfig,
    DateRangeConfig,
    FieldConfig,
    FieldType,
    FormConfig,
    FormRefConfig,
    PhoneConfig,
    RowLabel,
    RuleCondition,
    RuleConfig,
    RuleType,
    SectionConfig,
    TableConfig,
    TableRowMode,
)

__all__ = [
    # Types
    "AsyncTrigger",
    "AsyncValidationConfig",
    "ColumnConfig",
    "ConditionOperator",
    "ConfigError",
    "DataGridConfig",
    "DateRangeConfig",
    "FieldConfig",
    "FieldType",
    "FormConfig",
    "FormRefConfig",
    "PhoneConfig",
    "RowLabel",
    "RuleCondition",
    "RuleConfig",
    "RuleType",
    "SectionConfig",
    "TableConfig",
    "TableRowMode",
    # Loading
    "load_form_config",
    "parse_form_config",
    # Linting
    "ConfigCheckResult",
    "ConfigIssue",
    "check_form_config",
    "check_form_config_file",
    "lint_form_config",
]
