"""Config CLI commands: lint."""

from pathlib import Path

import click

from dynaforms.forms import check_form_config_file


@click.group()
def config():
    """Form config commands."""
    pass


@config.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def lint(path: Path):
    """Check a form config file (.json, .yaml, .yml) for structural problems."""
    result = check_form_config_file(path)

    for issue in result.issues:
        click.echo(click.style(str(issue), fg="red"))

    if not result.valid:
        click.echo(click.style(f"\n{len(result.issues)} issue(s) found", fg="red", bold=True))
        raise SystemExit(1)

    form = result.config
    field_count = len(form.fields) if form else 0
    click.echo(f"Form '{form.id if form else path.stem}': {field_count} field(s)")
    click.echo(click.style("Config is valid.", fg="green", bold=True))
