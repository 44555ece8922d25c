"""dynaforms CLI entry point."""

import click


@click.group()
def cli():
    """dynaforms: form config linting and validation CLI."""
    pass


# Register subcommands
from dynaforms.cli.config_cmd import config  # noqa: E402
from dynaforms.cli.validate_cmd import validate  # noqa: E402

cli.add_command(config)
cli.add_command(validate)
