"""Schema inspection and clearing commands."""

import click

from .utils import error_handler, format_output, get_migrator, success_message


@click.group()
def schema() -> None:
    """Inspect or clear the database schema."""
    pass


def _print_names(names: list[str]) -> None:
    if not names:
        click.echo("No data to display")
    for name in names:
        click.echo(name)


@schema.command()
@click.pass_context
@error_handler
def tables(ctx: click.Context) -> None:
    """List tables in the database."""
    migrator = get_migrator(ctx)
    format_output(
        ctx,
        {"tables": migrator.get_tables()},
        lambda data: _print_names(data["tables"]),
    )


@schema.command()
@click.argument("table")
@click.pass_context
@error_handler
def columns(ctx: click.Context, table: str) -> None:
    """List the columns of TABLE."""
    migrator = get_migrator(ctx)
    format_output(
        ctx,
        {"table": table, "columns": migrator.get_columns(table)},
        lambda data: _print_names(data["columns"]),
    )


@schema.command()
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
@error_handler
def clear(ctx: click.Context, yes: bool) -> None:
    """Drop every table in the database."""
    migrator = get_migrator(ctx)
    if not yes:
        click.confirm(
            f"Drop all tables in database '{migrator.database}'?", abort=True
        )

    dropped = migrator.clear_database()
    if ctx.obj and ctx.obj.get("json"):
        format_output(ctx, {"dropped_tables": dropped})
    else:
        success_message(ctx, f"Dropped {len(dropped)} table(s)")
