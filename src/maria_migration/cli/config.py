"""Configuration commands."""

import click
from sqlalchemy.engine import make_url

from ..config.loader import ENV_PREFIX, SEARCH_LOCATIONS, MigratorConfig
from .utils import error_handler, format_output, get_config


@click.group()
def config() -> None:
    """Inspect configuration settings."""
    pass


@config.command()
@click.pass_context
@error_handler
def show(ctx: click.Context) -> None:
    """Show current configuration."""
    config_dict = get_config(ctx).model_dump()
    if config_dict["database_url"]:
        config_dict["database_url"] = make_url(
            config_dict["database_url"]
        ).render_as_string(hide_password=True)

    format_output(ctx, {"configuration": config_dict})


@config.command()
@click.pass_context
@error_handler
def validate(ctx: click.Context) -> None:
    """Validate current configuration."""
    get_config(ctx)  # raises if invalid
    if not (ctx.obj and ctx.obj.get("quiet")):
        click.echo("Configuration is valid")


@config.command()
def locations() -> None:
    """Show configuration file search locations."""
    click.echo("Configuration file search locations (in order):")
    for i, location in enumerate(SEARCH_LOCATIONS, 1):
        click.echo(f"  {i}. {location}")

    click.echo(f"\nEnvironment variables ({ENV_PREFIX}*):")
    for key in MigratorConfig.model_fields:
        click.echo(f"  {ENV_PREFIX}{key.upper()}")
