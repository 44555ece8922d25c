"""Tests for structural form config linting."""

import json

import pytest

from dynaforms.forms import check_form_config, check_form_config_file, lint_form_config


def make_doc(*fields: dict, **extra) -> dict:
    return {"id": "lint-form", "fields": list(fields), **extra}


def text_field(name: str = "name", **extra) -> dict:
    return {"name": name, "label": name.title(), "type": "text", **extra}


def paths(issues) -> list[str]:
    return [i.path for i in issues]


class TestLintValidConfigs:
    def test_minimal_config_is_clean(self):
        assert lint_form_config(make_doc(text_field())) == []

    def test_full_config_is_clean(self):
        doc = make_doc(
            text_field("email", sectionId="main", validations=[
                {"type": "required", "message": "Required"},
                {"type": "maxLength", "message": "Too long", "value": 100},
                {"type": "pattern", "message": "Bad", "value": "^[a-z@.]+$"},
            ]),
            {
                "name": "grid",
                "label": "Grid",
                "type": "datagrid",
                "datagridConfig": {
                    "columns": [{"name": "count", "label": "Count"}],
                    "rowLabels": [{"id": "r1", "label": "Row 1"}],
                },
            },
            {"name": "ref", "label": "Address", "type": "formref", "formrefConfig": {"formId": "address"}},
            sections=[{"id": "main", "title": "Main"}],
        )
        assert lint_form_config(doc) == []

    def test_keys_case_insensitive(self):
        assert lint_form_config({"ID": "f", "FIELDS": [{"Name": "a", "LABEL": "A", "Type": "text"}]}) == []


class TestSchemaIssues:
    def test_not_an_object(self):
        issues = lint_form_config(["nope"])
        assert len(issues) == 1
        assert issues[0].message == "Config must be an object"

    def test_missing_required_keys(self):
        issues = lint_form_config({"fields": [{"name": "a", "type": "text"}]})
        assert "id" in paths(issues)
        assert "fields[0].label" in paths(issues)

    def test_empty_fields(self):
        issues = lint_form_config(make_doc())
        assert [(i.path, i.message) for i in issues] == [("fields", "must contain at least one item")]

    def test_rule_requires_message(self):
        issues = lint_form_config(make_doc(text_field(validations=[{"type": "required"}])))
        assert "fields[0].validations[0].message" in paths(issues)

    def test_bad_condition_operator(self):
        doc = make_doc(text_field(validations=[
            {"type": "required", "message": "x", "condition": {"field": "a", "operator": "greaterThan"}},
        ]))
        assert "fields[0].validations[0].condition.operator" in paths(lint_form_config(doc))

    def test_section_requires_title(self):
        issues = lint_form_config(make_doc(text_field(), sections=[{"id": "s1"}]))
        assert "sections[0].title" in paths(issues)


class TestSemanticIssues:
    def test_invalid_field_type(self):
        issues = lint_form_config(make_doc({"name": "a", "label": "A", "type": "slider"}))
        assert paths(issues) == ["fields[0].type"]
        assert 'Invalid field type "slider"' in issues[0].message

    def test_invalid_rule_type(self):
        issues = lint_form_config(make_doc(text_field(validations=[{"type": "between", "message": "x"}])))
        assert paths(issues) == ["fields[0].validations[0].type"]

    @pytest.mark.parametrize("rule_type", ["minLength", "maxLength", "min", "max"])
    def test_bound_rules_need_value(self, rule_type):
        issues = lint_form_config(make_doc(text_field(validations=[{"type": rule_type, "message": "x"}])))
        assert paths(issues) == ["fields[0].validations[0].value"]

    def test_pattern_needs_regex_value(self):
        issues = lint_form_config(make_doc(text_field(validations=[{"type": "pattern", "message": "x", "value": 5}])))
        assert issues[0].message == "Pattern validation requires a regex value"

    def test_custom_needs_name(self):
        issues = lint_form_config(make_doc(text_field(validations=[{"type": "custom", "message": "x"}])))
        assert paths(issues) == ["fields[0].validations[0].customValidatorName"]

    def test_table_needs_config(self):
        issues = lint_form_config(make_doc({"name": "t", "label": "T", "type": "table"}))
        assert [(i.path, i.message) for i in issues] == [("fields[0].tableConfig", "Table field requires tableConfig")]

    def test_table_needs_columns_and_row_mode(self):
        issues = lint_form_config(make_doc({"name": "t", "label": "T", "type": "table", "tableConfig": {"columns": []}}))
        assert "fields[0].tableConfig.columns" in paths(issues)
        assert "fields[0].tableConfig.rowMode" in paths(issues)

    def test_duplicate_column_names(self):
        doc = make_doc({
            "name": "t",
            "label": "T",
            "type": "table",
            "tableConfig": {"rowMode": "dynamic", "columns": [{"name": "a", "label": "A"}, {"name": "a", "label": "A2"}]},
        })
        assert paths(lint_form_config(doc)) == ["fields[0].tableConfig.columns[1].name"]

    def test_datagrid_needs_row_labels(self):
        doc = make_doc({
            "name": "g",
            "label": "G",
            "type": "datagrid",
            "datagridConfig": {"columns": [{"name": "a", "label": "A"}], "rowLabels": []},
        })
        assert "fields[0].datagridConfig.rowLabels" in paths(lint_form_config(doc))

    def test_duplicate_row_label_ids(self):
        doc = make_doc({
            "name": "g",
            "label": "G",
            "type": "datagrid",
            "datagridConfig": {
                "columns": [{"name": "a", "label": "A"}],
                "rowLabels": [{"id": "r", "label": "R"}, {"id": "r", "label": "R again"}],
            },
        })
        assert paths(lint_form_config(doc)) == ["fields[0].datagridConfig.rowLabels[1].id"]

    def test_formref_needs_config(self):
        issues = lint_form_config(make_doc({"name": "r", "label": "R", "type": "formref"}))
        assert paths(issues) == ["fields[0].formrefConfig"]

    def test_duplicate_field_names(self):
        issues = lint_form_config(make_doc(text_field("a"), text_field("a")))
        assert [(i.path, i.message) for i in issues] == [("fields[1].name", 'Duplicate field name "a"')]

    def test_duplicate_section_ids(self):
        doc = make_doc(text_field(), sections=[{"id": "s", "title": "S"}, {"id": "s", "title": "S2"}])
        assert paths(lint_form_config(doc)) == ["sections[1].id"]

    def test_unresolved_section_id(self):
        issues = lint_form_config(make_doc(text_field(sectionId="missing")))
        assert [(i.path, i.message) for i in issues] == [
            ("fields[0].sectionId", 'Field references non-existent section "missing"')
        ]

    def test_issue_str(self):
        issue = lint_form_config(make_doc(text_field("a"), text_field("a")))[0]
        assert str(issue) == 'fields[1].name: Duplicate field name "a"'


class TestCheckFormConfig:
    def test_clean_config_is_parsed(self):
        result = check_form_config(make_doc(text_field()))
        assert result.valid
        assert result.config is not None
        assert result.config.fields[0].name == "name"
        assert result.to_dict() == {"valid": True, "issues": []}

    def test_invalid_config_not_parsed(self):
        result = check_form_config(make_doc(text_field("a"), text_field("a")))
        assert not result.valid
        assert result.config is None
        assert result.to_dict()["issues"] == [{"path": "fields[1].name", "message": 'Duplicate field name "a"'}]

    def test_check_file(self, tmp_path):
        path = tmp_path / "form.json"
        path.write_text(json.dumps(make_doc(text_field())))
        assert check_form_config_file(path).valid

    def test_check_unreadable_file(self, tmp_path):
        result = check_form_config_file(tmp_path / "missing.yaml")
        assert not result.valid
        assert result.issues[0].path == ""
