"""Schema version commands."""

import click

from .utils import error_handler, format_output, get_migrator, success_message


@click.group()
def version() -> None:
    """Inspect and change the stored schema version."""
    pass


@version.command()
@click.pass_context
@error_handler
def show(ctx: click.Context) -> None:
    """Show the current schema version."""
    migrator = get_migrator(ctx)
    format_output(ctx, {"version": migrator.get_version()})


@version.command(name="set")
@click.argument("value", type=click.IntRange(min=0))
@click.pass_context
@error_handler
def set_version(ctx: click.Context, value: int) -> None:
    """Set the schema version to VALUE."""
    migrator = get_migrator(ctx)
    migrator.set_version(value)
    success_message(ctx, f"Schema version set to {value}")


@version.command()
@click.pass_context
@error_handler
def bump(ctx: click.Context) -> None:
    """Increase the schema version by one."""
    migrator = get_migrator(ctx)
    new_version = migrator.increase_version()
    success_message(ctx, f"Schema version increased to {new_version}")
