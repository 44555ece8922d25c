"""Load form configurations from JSON or YAML files."""

import json
from pathlib import Path
from typing import Any

import yaml

from dynaforms.forms.types import ConfigError, FormConfig

# Canonical camelCase keys of the FormConfig document. Incoming keys are
# matched against these case-insensitively ("FIELDS", "TableConfig", ...).
_CANONICAL_KEYS = [
    "id", "fields", "sections", "submitLabel", "saveLabel", "autoSave", "autoSaveInterval",
    "name", "label", "type", "placeholder", "description", "value", "validations", "options",
    "disabled", "archived", "cssClass", "order", "inlineGroup", "width", "sectionId",
    "tableConfig", "datagridConfig", "content", "phoneConfig", "daterangeConfig",
    "formrefConfig", "asyncValidation",
    "message", "customValidatorName", "customValidatorParams", "condition", "field", "operator",
    "columns", "rowMode", "fixedRowCount", "minRows", "maxRows", "addRowLabel", "removeRowLabel",
    "rowLabels", "columnGroups", "rowLabelHeader", "totals", "computed", "formula",
    "showInColumnTotal", "showInRowTotal",
    "countryCodes", "defaultCountryCode", "fromLabel", "toLabel", "separatorText",
    "toDateOptional", "formId", "showSections", "fieldPrefix",
    "validatorName", "trigger", "debounceMs", "params",
    "title", "anchorId",
]
_KEY_LOOKUP = {k.lower(): k for k in _CANONICAL_KEYS}

# Values under these keys are user data, not config structure
_OPAQUE_KEYS = frozenset({"value", "options", "customValidatorParams", "params", "formula"})

_YAML_SUFFIXES = (".yaml", ".yml")


def canonicalize_keys(obj: Any) -> Any:
    """Recursively rewrite known config keys to their canonical casing.

    Unknown keys are left as they are. Opaque payloads (rule values,
    validator params, options) are never rewritten.
    """
    if isinstance(obj, dict):
        result: dict[Any, Any] = {}
        for k, v in obj.items():
            key = _KEY_LOOKUP.get(k.lower(), k) if isinstance(k, str) else k
            result[key] = v if key in _OPAQUE_KEYS else canonicalize_keys(v)
        return result
    if isinstance(obj, list):
        return [canonicalize_keys(item) for item in obj]
    return obj


def parse_form_config(raw: dict[str, Any]) -> FormConfig:
    """Decode a FormConfig from an already-parsed JSON/YAML document.

    Raises:
        ConfigError: If the document cannot be represented as a FormConfig
    """
    if not isinstance(raw, dict):
        raise ConfigError(f"Form config must be an object, got {type(raw).__name__}")
    return FormConfig.from_dict(canonicalize_keys(raw))


def read_config_document(path: Path) -> dict[str, Any]:
    """Read a raw config document from a ``.json``, ``.yaml`` or ``.yml`` file."""
    try:
        with path.open(encoding="utf-8") as fh:
            if path.suffix.lower() in _YAML_SUFFIXES:
                raw = yaml.safe_load(fh)
            else:
                raw = json.load(fh)
    except OSError as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(f"Invalid config document {path}: {exc}") from exc

    if raw is None:
        raise ConfigError(f"{path} is empty")
    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: top-level value must be an object")
    return canonicalize_keys(raw)


def load_form_config(path: Path) -> FormConfig:
    """Load and decode a FormConfig from a file."""
    return parse_form_config(read_config_document(path))
