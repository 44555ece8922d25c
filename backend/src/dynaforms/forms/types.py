"""Form configuration types.

These dataclasses are the decoded, native representation of a form
configuration JSON document. They are immutable inputs to the validation
engine and are built from already-decoded dicts via ``from_dict``.

The structural invariants (unique field names, resolvable section ids,
presence of composite sub-configuration) are checked by
:mod:`dynaforms.forms.linter`, not here. ``from_dict`` only rejects input it
cannot represent at all.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ConfigError(ValueError):
    """Raised when a configuration document cannot be decoded."""


class FieldType(Enum):
    """Supported form field kinds."""

    TEXT = "text"
    EMAIL = "email"
    NUMBER = "number"
    TEXTAREA = "textarea"
    SELECT = "select"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    DATE = "date"
    DATE_RANGE = "daterange"
    TABLE = "table"
    INFO = "info"
    DATAGRID = "datagrid"
    PHONE = "phone"
    FORM_REF = "formref"

    @classmethod
    def _missing_(cls, value: object) -> "FieldType | None":
        # Case-insensitive, plus spelled-out aliases ("date-range", "form-reference")
        if not isinstance(value, str):
            return None
        lowered = value.lower()
        for member in cls:
            if member.value == lowered:
                return member
        return _FIELD_TYPE_ALIASES.get(lowered)


_FIELD_TYPE_ALIASES: dict[str, FieldType] = {
    "date-range": FieldType.DATE_RANGE,
    "date_range": FieldType.DATE_RANGE,
    "form-reference": FieldType.FORM_REF,
    "form-ref": FieldType.FORM_REF,
    "form_reference": FieldType.FORM_REF,
    "formreference": FieldType.FORM_REF,
}


# Field kinds that never take part in value validation
NON_INPUT_FIELD_TYPES = frozenset({FieldType.INFO, FieldType.FORM_REF})


class RuleType(Enum):
    """Validation rule kinds."""

    REQUIRED = "required"
    EMAIL = "email"
    MIN_LENGTH = "minLength"
    MAX_LENGTH = "maxLength"
    MIN = "min"
    MAX = "max"
    PATTERN = "pattern"
    CUSTOM = "custom"

    @property
    def rule_name(self) -> str:
        """Normalized lowercase identifier reported on errors."""
        return self.value.lower()


class ConditionOperator(Enum):
    """Comparison operators for rule conditions."""

    EQUALS = "equals"
    NOT_EQUALS = "notEquals"
    IS_EMPTY = "isEmpty"
    IS_NOT_EMPTY = "isNotEmpty"


class TableRowMode(Enum):
    FIXED = "fixed"
    DYNAMIC = "dynamic"


class AsyncTrigger(Enum):
    """When the client fires an async validator."""

    CHANGE = "change"
    BLUR = "blur"
    SUBMIT = "submit"


def _enum(enum_cls: type[Enum], raw: Any, where: str) -> Any:
    try:
        return enum_cls(raw)
    except ValueError:
        allowed = ", ".join(str(m.value) for m in enum_cls)
        raise ConfigError(f"{where}: invalid value {raw!r} (expected one of: {allowed})") from None


def _object(data: Any, where: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ConfigError(f"{where}: expected an object, got {type(data).__name__}")
    return data


def _require(data: dict[str, Any], key: str, where: str) -> Any:
    _object(data, where)
    if key not in data or data[key] is None:
        raise ConfigError(f"{where}: '{key}' is required")
    return data[key]


@dataclass(frozen=True)
class RuleCondition:
    """Gate that decides whether a rule applies.

    Attributes:
        field: Name of the sibling field/column, or ``$form.<name>`` to read
            from the top-level form data regardless of scope
        operator: Comparison operator
        value: Comparison value for equals/notEquals
    """

    field: str
    operator: ConditionOperator = ConditionOperator.EQUALS
    value: Any = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], where: str = "condition") -> "RuleCondition":
        return cls(
            field=_require(data, "field", where),
            operator=_enum(ConditionOperator, data.get("operator", "equals"), f"{where}.operator"),
            value=data.get("value"),
        )


@dataclass(frozen=True)
class RuleConfig:
    """A single configured check attached to a field or column.

    Attributes:
        type: Rule kind
        message: User-facing message reported verbatim on failure
        value: Length/number bound or regex source, depending on ``type``
        custom_validator_name: Registry key for ``custom`` rules
        custom_validator_params: Opaque params passed to the custom validator
        condition: Optional applicability condition
    """

    type: RuleType
    message: str = ""
    value: Any = None
    custom_validator_name: str | None = None
    custom_validator_params: dict[str, Any] | None = None
    condition: RuleCondition | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], where: str = "rule") -> "RuleConfig":
        rule_type = _enum(RuleType, _require(data, "type", where), f"{where}.type")
        condition_data = data.get("condition")
        return cls(
            type=rule_type,
            message=data.get("message") or "",
            value=data.get("value"),
            custom_validator_name=data.get("customValidatorName"),
            custom_validator_params=data.get("customValidatorParams"),
            condition=(
                RuleCondition.from_dict(condition_data, f"{where}.condition")
                if condition_data
                else None
            ),
        )


def _rules(data: dict[str, Any], where: str) -> list[RuleConfig]:
    return [
        RuleConfig.from_dict(r, f"{where}.validations[{i}]")
        for i, r in enumerate(data.get("validations") or [])
    ]


@dataclass(frozen=True)
class ColumnConfig:
    """Column of a table or datagrid field."""

    name: str
    label: str = ""
    type: str = "text"
    validations: list[RuleConfig] = field(default_factory=list)
    computed: bool = False
    options: list[dict[str, Any]] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], where: str = "column") -> "ColumnConfig":
        return cls(
            name=_require(data, "name", where),
            label=data.get("label", ""),
            type=data.get("type", "text"),
            validations=_rules(data, where),
            computed=bool(data.get("computed", False)),
            options=data.get("options"),
        )


@dataclass(frozen=True)
class TableConfig:
    columns: list[ColumnConfig]
    row_mode: TableRowMode = TableRowMode.DYNAMIC
    fixed_row_count: int | None = None
    min_rows: int | None = None
    max_rows: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], where: str = "tableConfig") -> "TableConfig":
        columns = _require(data, "columns", where)
        return cls(
            columns=[
                ColumnConfig.from_dict(c, f"{where}.columns[{i}]") for i, c in enumerate(columns)
            ],
            row_mode=_enum(TableRowMode, data.get("rowMode", "dynamic"), f"{where}.rowMode"),
            fixed_row_count=data.get("fixedRowCount"),
            min_rows=data.get("minRows"),
            max_rows=data.get("maxRows"),
        )


@dataclass(frozen=True)
class RowLabel:
    id: str
    label: str = ""


@dataclass(frozen=True)
class DataGridConfig:
    columns: list[ColumnConfig]
    row_labels: list[RowLabel]

    @classmethod
    def from_dict(cls, data: dict[str, Any], where: str = "datagridConfig") -> "DataGridConfig":
        columns = _require(data, "columns", where)
        row_labels = _require(data, "rowLabels", where)
        return cls(
            columns=[
                ColumnConfig.from_dict(c, f"{where}.columns[{i}]") for i, c in enumerate(columns)
            ],
            row_labels=[
                RowLabel(
                    id=_require(r, "id", f"{where}.rowLabels[{i}]"),
                    label=r.get("label", ""),
                )
                for i, r in enumerate(row_labels)
            ],
        )


@dataclass(frozen=True)
class PhoneConfig:
    country_codes: list[dict[str, Any]] = field(default_factory=list)
    default_country_code: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], where: str = "phoneConfig") -> "PhoneConfig":
        _object(data, where)
        return cls(
            country_codes=data.get("countryCodes") or [],
            default_country_code=data.get("defaultCountryCode"),
        )


@dataclass(frozen=True)
class DateRangeConfig:
    from_label: str | None = None
    to_label: str | None = None
    to_date_optional: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any], where: str = "daterangeConfig") -> "DateRangeConfig":
        _object(data, where)
        return cls(
            from_label=data.get("fromLabel"),
            to_label=data.get("toLabel"),
            to_date_optional=bool(data.get("toDateOptional", False)),
        )


@dataclass(frozen=True)
class FormRefConfig:
    form_id: str
    field_prefix: str | None = None


@dataclass(frozen=True)
class AsyncValidationConfig:
    """Binding of a field to a named async validator.

    ``trigger`` and ``debounce_ms`` only matter to an interactive client; the
    server runs every binding on a sweep.
    """

    validator_name: str
    trigger: AsyncTrigger = AsyncTrigger.BLUR
    debounce_ms: int | None = None
    params: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any], where: str = "asyncValidation") -> "AsyncValidationConfig":
        return cls(
            validator_name=_require(data, "validatorName", where),
            trigger=_enum(AsyncTrigger, data.get("trigger", "blur"), f"{where}.trigger"),
            debounce_ms=data.get("debounceMs"),
            params=data.get("params") or {},
        )


@dataclass(frozen=True)
class FieldConfig:
    """One named, typed entry of a form configuration."""

    name: str
    type: FieldType
    label: str = ""
    validations: list[RuleConfig] = field(default_factory=list)
    archived: bool = False
    section_id: str | None = None
    table_config: TableConfig | None = None
    datagrid_config: DataGridConfig | None = None
    phone_config: PhoneConfig | None = None
    daterange_config: DateRangeConfig | None = None
    formref_config: FormRefConfig | None = None
    async_validation: AsyncValidationConfig | None = None
    placeholder: str | None = None
    description: str | None = None
    options: list[dict[str, Any]] | None = None
    disabled: bool = False
    value: Any = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], where: str = "field") -> "FieldConfig":
        """Create FieldConfig from a decoded JSON/YAML dict."""
        name = _require(data, "name", where)
        field_type = _enum(FieldType, _require(data, "type", where), f"{where}.type")

        table = data.get("tableConfig")
        grid = data.get("datagridConfig")
        phone = data.get("phoneConfig")
        date_range = data.get("daterangeConfig")
        formref = data.get("formrefConfig")
        async_binding = data.get("asyncValidation")

        return cls(
            name=name,
            type=field_type,
            label=data.get("label", ""),
            validations=_rules(data, where),
            archived=bool(data.get("archived", False)),
            section_id=data.get("sectionId"),
            table_config=TableConfig.from_dict(table, f"{where}.tableConfig") if table else None,
            datagrid_config=(
                DataGridConfig.from_dict(grid, f"{where}.datagridConfig") if grid else None
            ),
            phone_config=PhoneConfig.from_dict(phone, f"{where}.phoneConfig") if phone else None,
            daterange_config=(
                DateRangeConfig.from_dict(date_range, f"{where}.daterangeConfig") if date_range else None
            ),
            formref_config=(
                FormRefConfig(
                    form_id=_require(formref, "formId", f"{where}.formrefConfig"),
                    field_prefix=formref.get("fieldPrefix"),
                )
                if formref
                else None
            ),
            async_validation=(
                AsyncValidationConfig.from_dict(async_binding, f"{where}.asyncValidation")
                if async_binding
                else None
            ),
            placeholder=data.get("placeholder"),
            description=data.get("description"),
            options=data.get("options"),
            disabled=bool(data.get("disabled", False)),
            value=data.get("value"),
        )


@dataclass(frozen=True)
class SectionConfig:
    id: str
    title: str = ""
    description: str | None = None
    anchor_id: str | None = None
    order: int | None = None


@dataclass(frozen=True)
class FormConfig:
    """Complete form configuration.

    Attributes:
        id: Form identity
        fields: Fields in declaration order (also the error order)
        sections: Optional section declarations
    """

    id: str
    fields: list[FieldConfig]
    sections: list[SectionConfig] = field(default_factory=list)
    submit_label: str | None = None
    save_label: str | None = None
    auto_save: bool = False
    auto_save_interval: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FormConfig":
        """Create FormConfig from a decoded JSON/YAML dict."""
        form_id = _require(data, "id", "form")
        fields = data.get("fields") or []
        if not isinstance(fields, list):
            raise ConfigError("fields: expected an array")

        return cls(
            id=form_id,
            fields=[FieldConfig.from_dict(f, f"fields[{i}]") for i, f in enumerate(fields)],
            sections=[
                SectionConfig(
                    id=_require(s, "id", f"sections[{i}]"),
                    title=s.get("title", ""),
                    description=s.get("description"),
                    anchor_id=s.get("anchorId"),
                    order=s.get("order"),
                )
                for i, s in enumerate(data.get("sections") or [])
            ],
            submit_label=data.get("submitLabel"),
            save_label=data.get("saveLabel"),
            auto_save=bool(data.get("autoSave", False)),
            auto_save_interval=data.get("autoSaveInterval"),
        )

    def get_field(self, name: str) -> FieldConfig | None:
        """Get a field by name."""
        for f in self.fields:
            if f.name == name:
                return f
        return None
