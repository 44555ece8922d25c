"""Validate CLI command: run a submission through the engine."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

import click
import yaml

from dynaforms.config import EngineSettings
from dynaforms.forms import check_form_config_file
from dynaforms.validation import (
    AsyncFormValidator,
    AsyncValidatorError,
    AsyncValidatorRegistry,
    FormValidator,
    PluginError,
    ValidationResult,
    ValidatorRegistry,
    load_validator_modules,
)

_YAML_SUFFIXES = (".yaml", ".yml")


def _read_data(path: Path) -> dict[str, Any]:
    """Read submitted form data from a JSON or YAML file."""
    try:
        with path.open(encoding="utf-8") as fh:
            if path.suffix.lower() in _YAML_SUFFIXES:
                data = yaml.safe_load(fh)
            else:
                data = json.load(fh)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise click.ClickException(f"Cannot read form data {path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise click.ClickException(f"Form data {path} must be an object")
    return data


@click.command()
@click.argument("config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("data_path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--validators",
    "validator_modules",
    multiple=True,
    help="Dotted module exposing register_validators(); repeatable.",
)
@click.option(
    "--async",
    "run_async",
    is_flag=True,
    default=False,
    help="Also run the fields' async validators.",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    default=False,
    help="Print the result as JSON.",
)
def validate(
    config_path: Path,
    data_path: Path,
    validator_modules: tuple[str, ...],
    run_async: bool,
    as_json: bool,
):
    """Validate form data in DATA_PATH against the form config in CONFIG_PATH."""
    settings = EngineSettings.from_env()
    logging.basicConfig(level=settings.log_level)

    check = check_form_config_file(config_path)
    if not check.valid or check.config is None:
        for issue in check.issues:
            click.echo(click.style(str(issue), fg="red"), err=True)
        click.echo(click.style("Form config is invalid; run 'dynaforms config lint' for details.", fg="red"), err=True)
        raise SystemExit(1)
    form = check.config

    data = _read_data(data_path)

    registry = ValidatorRegistry()
    async_registry = AsyncValidatorRegistry()
    try:
        load_validator_modules(settings.validator_modules + validator_modules, registry, async_registry)
    except PluginError as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(1)

    errors = list(FormValidator(registry, settings).validate(form, data).errors)

    if run_async:
        async_validator = AsyncFormValidator(async_registry, settings)
        try:
            async_result = asyncio.run(async_validator.validate(form, data))
        except AsyncValidatorError as e:
            click.echo(click.style(f"Error: {e}", fg="red"), err=True)
            raise SystemExit(1)
        errors.extend(async_result.errors)

    result = ValidationResult.from_errors(errors)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        for error in result.errors:
            click.echo(click.style(f"{error.field}: {error.message} ({error.rule})", fg="red"))
        if result.valid:
            click.echo(click.style("Submission is valid.", fg="green", bold=True))
        else:
            click.echo(click.style(f"\n{len(result.errors)} error(s) found", fg="red", bold=True))

    if not result.valid:
        raise SystemExit(1)
