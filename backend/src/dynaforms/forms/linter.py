"""
forms/linter.py: structural validation of form configuration documents.

Checks a raw (decoded, not yet parsed) FormConfig document in two passes:

1. JSON Schema (``schemas/form-config.schema.json``): shapes, required keys,
   enums, non-empty arrays.
2. Semantic checks the schema cannot express: duplicate field names and
   section ids, unresolved ``sectionId`` references, unknown field/rule kinds,
   composite fields missing their sub-configuration, rule kinds that need a
   ``value`` or a ``customValidatorName``.

The validation engine never runs these checks; it assumes it is handed a
config that passed them.

Usage:
    from dynaforms.forms.linter import check_form_config

    result = check_form_config(raw)
    if not result.valid:
        for issue in result.issues:
            print(issue)
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

from dynaforms.forms.loader import canonicalize_keys, parse_form_config, read_config_document
from dynaforms.forms.types import ConfigError, FieldType, FormConfig, RuleType

# ---------------------------------------------------------------------------
# Public data types
# ---------------------------------------------------------------------------

_SCHEMA_PATH = Path(__file__).parent / "schemas" / "form-config.schema.json"

_RULE_TYPES_REQUIRING_VALUE = ("minLength", "maxLength", "min", "max")


@dataclass
class ConfigIssue:
    """A single structural finding in a form configuration."""

    path: str       # e.g. "fields[0].validations[1].value"; "" for the document itself
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "message": self.message}


@dataclass
class ConfigCheckResult:
    """Outcome of linting (and, when clean, parsing) a config document."""

    valid: bool
    issues: list[ConfigIssue] = field(default_factory=list)
    config: FormConfig | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "issues": [i.to_dict() for i in self.issues]}


# ---------------------------------------------------------------------------
# Schema pass
# ---------------------------------------------------------------------------

_validator: Draft202012Validator | None = None


def _schema_validator() -> Draft202012Validator:
    global _validator
    if _validator is None:
        with _SCHEMA_PATH.open(encoding="utf-8") as fh:
            schema = json.load(fh)
        Draft202012Validator.check_schema(schema)
        _validator = Draft202012Validator(schema)
    return _validator


def _format_path(parts: Any) -> str:
    """Render a jsonschema path deque as ``fields[0].tableConfig.columns``."""
    out = ""
    for p in parts:
        if isinstance(p, int):
            out += f"[{p}]"
        else:
            out += f".{p}" if out else str(p)
    return out


def _join(path: str, key: str) -> str:
    return f"{path}.{key}" if path else key


def _schema_issues(doc: dict[str, Any]) -> list[ConfigIssue]:
    issues: list[ConfigIssue] = []
    errors = sorted(_schema_validator().iter_errors(doc), key=lambda e: list(map(str, e.absolute_path)))
    for error in errors:
        path = _format_path(error.absolute_path)
        if error.validator == "required" and isinstance(error.instance, dict):
            missing = [
                p for p in error.validator_value
                if p not in error.instance and repr(p) in error.message
            ]
            if missing:
                issues.append(ConfigIssue(path=_join(path, missing[0]), message=f"'{missing[0]}' is required"))
                continue
        issues.append(ConfigIssue(path=path, message=_schema_message(error)))
    return issues


def _schema_message(error: ValidationError) -> str:
    if error.validator == "minLength" and error.validator_value == 1:
        return "must not be empty"
    if error.validator == "minItems" and error.validator_value == 1:
        return "must contain at least one item"
    return error.message


# ---------------------------------------------------------------------------
# Semantic pass
# ---------------------------------------------------------------------------


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def _rule_issues(rule: Any, path: str) -> list[ConfigIssue]:
    if not isinstance(rule, dict):
        return []
    issues: list[ConfigIssue] = []
    rule_type = rule.get("type")

    if isinstance(rule_type, str) and rule_type not in {t.value for t in RuleType}:
        valid = ", ".join(t.value for t in RuleType)
        issues.append(ConfigIssue(
            path=f"{path}.type",
            message=f'Invalid validation type "{rule_type}". Valid types: {valid}',
        ))

    if rule_type in _RULE_TYPES_REQUIRING_VALUE and rule.get("value") is None:
        issues.append(ConfigIssue(
            path=f"{path}.value",
            message=f'Validation type "{rule_type}" requires a value',
        ))

    if rule_type == "pattern" and not isinstance(rule.get("value"), str):
        issues.append(ConfigIssue(path=f"{path}.value", message="Pattern validation requires a regex value"))

    if rule_type == "custom" and not _non_empty_str(rule.get("customValidatorName")):
        issues.append(ConfigIssue(
            path=f"{path}.customValidatorName",
            message="Custom validation requires customValidatorName",
        ))

    return issues


def _rules_issues(owner: dict[str, Any], path: str) -> list[ConfigIssue]:
    rules = owner.get("validations")
    if not isinstance(rules, list):
        return []
    issues: list[ConfigIssue] = []
    for i, rule in enumerate(rules):
        issues.extend(_rule_issues(rule, f"{path}.validations[{i}]"))
    return issues


def _columns_issues(sub_config: dict[str, Any], path: str) -> list[ConfigIssue]:
    columns = sub_config.get("columns")
    if not isinstance(columns, list):
        return []
    issues: list[ConfigIssue] = []
    seen: set[str] = set()
    for i, column in enumerate(columns):
        if not isinstance(column, dict):
            continue
        name = column.get("name")
        if _non_empty_str(name):
            if name in seen:
                issues.append(ConfigIssue(
                    path=f"{path}.columns[{i}].name",
                    message=f'Duplicate column name "{name}"',
                ))
            seen.add(name)
        issues.extend(_rules_issues(column, f"{path}.columns[{i}]"))
    return issues


def _field_issues(field_data: Any, path: str) -> list[ConfigIssue]:
    if not isinstance(field_data, dict):
        return []
    issues: list[ConfigIssue] = []

    raw_type = field_data.get("type")
    field_type: FieldType | None = None
    if isinstance(raw_type, str):
        try:
            field_type = FieldType(raw_type)
        except ValueError:
            valid = ", ".join(t.value for t in FieldType)
            issues.append(ConfigIssue(
                path=f"{path}.type",
                message=f'Invalid field type "{raw_type}". Valid types: {valid}',
            ))

    if field_type is FieldType.TABLE:
        table = field_data.get("tableConfig")
        if table is None:
            issues.append(ConfigIssue(path=f"{path}.tableConfig", message="Table field requires tableConfig"))
        elif isinstance(table, dict):
            issues.extend(_columns_issues(table, f"{path}.tableConfig"))

    if field_type is FieldType.DATAGRID:
        grid = field_data.get("datagridConfig")
        if grid is None:
            issues.append(ConfigIssue(
                path=f"{path}.datagridConfig",
                message="DataGrid field requires datagridConfig",
            ))
        elif isinstance(grid, dict):
            issues.extend(_columns_issues(grid, f"{path}.datagridConfig"))
            row_ids: set[str] = set()
            for i, row in enumerate(grid.get("rowLabels") or []):
                row_id = row.get("id") if isinstance(row, dict) else None
                if _non_empty_str(row_id):
                    if row_id in row_ids:
                        issues.append(ConfigIssue(
                            path=f"{path}.datagridConfig.rowLabels[{i}].id",
                            message=f'Duplicate row label id "{row_id}"',
                        ))
                    row_ids.add(row_id)

    if field_type is FieldType.FORM_REF and field_data.get("formrefConfig") is None:
        issues.append(ConfigIssue(path=f"{path}.formrefConfig", message="Form reference field requires formrefConfig"))

    issues.extend(_rules_issues(field_data, path))
    return issues


def _semantic_issues(doc: dict[str, Any]) -> list[ConfigIssue]:
    issues: list[ConfigIssue] = []
    fields = doc.get("fields")
    fields = fields if isinstance(fields, list) else []

    seen_names: set[str] = set()
    for i, field_data in enumerate(fields):
        issues.extend(_field_issues(field_data, f"fields[{i}]"))
        name = field_data.get("name") if isinstance(field_data, dict) else None
        if _non_empty_str(name):
            if name in seen_names:
                issues.append(ConfigIssue(path=f"fields[{i}].name", message=f'Duplicate field name "{name}"'))
            seen_names.add(name)

    sections = doc.get("sections")
    section_ids: set[str] = set()
    if isinstance(sections, list):
        for i, section in enumerate(sections):
            section_id = section.get("id") if isinstance(section, dict) else None
            if _non_empty_str(section_id):
                if section_id in section_ids:
                    issues.append(ConfigIssue(
                        path=f"sections[{i}].id",
                        message=f'Duplicate section id "{section_id}"',
                    ))
                section_ids.add(section_id)

    for i, field_data in enumerate(fields):
        if not isinstance(field_data, dict):
            continue
        section_id = field_data.get("sectionId")
        if _non_empty_str(section_id) and section_id not in section_ids:
            issues.append(ConfigIssue(
                path=f"fields[{i}].sectionId",
                message=f'Field references non-existent section "{section_id}"',
            ))

    return issues


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def lint_form_config(raw: Any) -> list[ConfigIssue]:
    """
    Structurally validate a decoded FormConfig document.

    Args:
        raw: The document as decoded from JSON/YAML. Keys are matched
             case-insensitively, as the loader does.

    Returns:
        A list of :class:`ConfigIssue` objects (empty on success).
    """
    if not isinstance(raw, dict):
        return [ConfigIssue(path="", message="Config must be an object")]

    doc = canonicalize_keys(raw)
    return _schema_issues(doc) + _semantic_issues(doc)


def check_form_config(raw: Any) -> ConfigCheckResult:
    """Lint a document and, if it is clean, decode it into a FormConfig."""
    issues = lint_form_config(raw)
    if issues:
        return ConfigCheckResult(valid=False, issues=issues)

    try:
        config = parse_form_config(raw)
    except ConfigError as exc:
        return ConfigCheckResult(valid=False, issues=[ConfigIssue(path="", message=str(exc))])

    return ConfigCheckResult(valid=True, config=config)


def check_form_config_file(path: Path) -> ConfigCheckResult:
    """Read, lint and decode a config file (``.json``, ``.yaml``, ``.yml``)."""
    try:
        raw = read_config_document(path)
    except ConfigError as exc:
        return ConfigCheckResult(valid=False, issues=[ConfigIssue(path="", message=str(exc))])
    return check_form_config(raw)
