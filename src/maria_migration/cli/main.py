"""Main CLI entry point for maria-migration."""

import click

from .. import __version__
from .config import config
from .migrate import migrate, reset, status
from .schema import schema
from .version import version


@click.group()
@click.version_option(version=__version__, prog_name="maria-migration")
@click.option("--config", "-c", help="Configuration file path")
@click.option("--profile", "-p", help="Configuration profile to use")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output in JSON format")
# Configuration override flags
@click.option("--database-url", help="Override database_url setting")
@click.option("--database", help="Override database setting")
@click.option("--version-table", help="Override version_table setting")
@click.option("--migrator", help="Override migrator setting (module:Class or file)")
@click.option("--log-level", help="Override log_level setting")
@click.pass_context
def main(
    ctx: click.Context,
    config: str | None,
    profile: str | None,
    verbose: bool,
    quiet: bool,
    json: bool,
    database_url: str | None,
    database: str | None,
    version_table: str | None,
    migrator: str | None,
    log_level: str | None,
) -> None:
    """maria-migration - Track schema versions and run migrations.

    Use command groups to organize functionality:
    - version: Show or change the stored schema version
    - schema: List tables and columns, or clear the database
    - migrate / status / reset: Run the configured migrator
    - config: Inspect configuration settings
    """
    if verbose and quiet:
        raise click.UsageError("Cannot use both --verbose and --quiet options")

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["profile"] = profile
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["json"] = json

    cli_overrides = {
        "database_url": database_url,
        "database": database,
        "version_table": version_table,
        "migrator": migrator,
        "log_level": log_level,
    }
    ctx.obj["cli_overrides"] = {k: v for k, v in cli_overrides.items() if v is not None}


main.add_command(version)
main.add_command(schema)
main.add_command(migrate)
main.add_command(status)
main.add_command(reset)
main.add_command(config)


if __name__ == "__main__":
    main()
