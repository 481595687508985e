"""Commands that run the configured migrator."""

import click

from ..database.migrations import VersionedMigrator
from ..utils.logging import ConfigurationError
from .utils import (
    error_handler,
    format_output,
    get_migrator,
    success_message,
    verbose_echo,
)


@click.command()
@click.pass_context
@error_handler
def migrate(ctx: click.Context) -> None:
    """Bring the schema to the latest version."""
    migrator = get_migrator(ctx, required=True)
    verbose_echo(ctx, f"Starting at version {migrator.get_version()}")

    migrator.migrate()
    success_message(ctx, f"Schema is at version {migrator.get_version()}")


@click.command()
@click.pass_context
@error_handler
def status(ctx: click.Context) -> None:
    """Show current version and pending migrations."""
    migrator = get_migrator(ctx)
    if not isinstance(migrator, VersionedMigrator):
        raise ConfigurationError(
            "status needs a VersionedMigrator; "
            f"{type(migrator).__name__} does not list its steps"
        )

    def human_format(data: dict) -> None:
        click.echo(f"Current version: {data['current_version']}")
        click.echo(f"Latest version: {data['latest_version']}")
        click.echo(f"Pending migrations: {data['pending_count']}")
        for pending in data["pending_migrations"]:
            click.echo(f"  - {pending['version']}: {pending['description']}")

    format_output(ctx, migrator.get_migration_status(), human_format)


@click.command()
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
@error_handler
def reset(ctx: click.Context, yes: bool) -> None:
    """Drop every table and rebuild the schema from scratch."""
    migrator = get_migrator(ctx, required=True)
    if not yes:
        click.confirm(
            f"Drop all tables in database '{migrator.database}' and migrate again?",
            abort=True,
        )

    migrator.reset_database()
    success_message(ctx, f"Database reset to version {migrator.get_version()}")
