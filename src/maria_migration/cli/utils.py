"""CLI utilities for output formatting and migrator construction."""

import json
import sys
from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import Any

import click

from ..config.loader import MigratorConfig, load_config
from ..database.connection import DatabaseManager
from ..database.migrations import Migrator, load_migrator_class
from ..utils.logging import (
    ConfigurationError,
    LogContext,
    MariaMigrationException,
    get_logger,
    setup_logging,
)

logger = get_logger(__name__, LogContext.CLI)


NO_MIGRATOR_MESSAGE = (
    "No migrator configured. Pass --migrator or set 'migrator' in the config file."
)


class SchemaOnlyMigrator(Migrator):
    """Stand-in used when no migrator is configured."""

    def migrate(self) -> None:
        raise ConfigurationError(NO_MIGRATOR_MESSAGE)


def error_handler(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator for handling CLI errors."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (click.ClickException, click.exceptions.Exit, click.Abort):
            raise
        except MariaMigrationException as e:
            logger.error(f"Command failed: {e.message}", error_context=e.context)
            handle_error(e.message)
        except Exception as e:
            logger.error(f"Unexpected error: {e}", exception=e)
            handle_error(f"Unexpected error: {e}")

    return wrapper


def handle_error(message: str, exit_code: int = 1) -> None:
    """Handle errors with consistent formatting."""
    click.echo(click.style(f"Error: {message}", fg="red"), err=True)
    sys.exit(exit_code)


def success_message(ctx: click.Context, message: str) -> None:
    """Display a success message unless in quiet mode."""
    if not (ctx.obj and ctx.obj.get("quiet")):
        click.echo(click.style(f"✓ {message}", fg="green"))


def verbose_echo(ctx: click.Context, message: str) -> None:
    """Echo message only if verbose mode is enabled."""
    if ctx.obj and ctx.obj.get("verbose"):
        click.echo(click.style(f"[VERBOSE] {message}", fg="blue"), err=True)


def output_json(data: dict[str, Any]) -> None:
    """Output data as JSON."""
    click.echo(json.dumps(data, indent=2, default=str))


def format_output(
    ctx: click.Context, data: dict[str, Any], human_format_func: Any = None
) -> None:
    """Format output based on context (JSON or human-readable)."""
    if ctx.obj and ctx.obj.get("json"):
        output_json(data)
    elif human_format_func:
        human_format_func(data)
    else:
        for key, value in data.items():
            click.echo(f"{key}: {value}")


def get_config(ctx: click.Context) -> MigratorConfig:
    """Load configuration once per invocation and set up logging."""
    obj = ctx.ensure_object(dict)
    if obj.get("loaded_config") is None:
        config = load_config(
            obj.get("config"), obj.get("profile"), obj.get("cli_overrides")
        )
        log_level = "DEBUG" if obj.get("verbose") else config.log_level
        setup_logging(
            log_level,
            Path(config.log_file).expanduser() if config.log_file else None,
            enable_structured=config.structured_logging,
        )
        obj["loaded_config"] = config
    return obj["loaded_config"]


def get_migrator(ctx: click.Context, required: bool = False) -> Migrator:
    """Build the configured migrator over a fresh engine.

    The engine is disposed when the command finishes.

    Args:
        ctx: Click context.
        required: Fail before touching the database when no migrator is
            configured, instead of falling back to SchemaOnlyMigrator.
    """
    config = get_config(ctx)
    if required and not config.migrator:
        raise ConfigurationError(NO_MIGRATOR_MESSAGE)

    migrator_cls: type[Migrator] = SchemaOnlyMigrator
    if config.migrator:
        migrator_cls = load_migrator_class(config.migrator)

    db_manager = DatabaseManager.from_config(config)
    ctx.call_on_close(db_manager.close)
    verbose_echo(ctx, f"Using {migrator_cls.__name__} on {db_manager.database_name}")

    return migrator_cls(
        db_manager.engine,
        db_manager.database_name,
        version_table=config.version_table,
        max_clear_passes=config.max_clear_passes,
    )
