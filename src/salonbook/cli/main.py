"""SalonBook CLI entry point."""

import click

from salonbook.config import FormsConfig


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """SalonBook — form definition and validation CLI."""
    config = FormsConfig.from_env()
    config.configure_logging(verbose=verbose)
    ctx.obj = config


# Register subcommand groups
from salonbook.cli.forms_cmd import forms  # noqa: E402

cli.add_command(forms)
