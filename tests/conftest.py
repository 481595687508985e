"""
Pytest configuration and shared fixtures for maria-migration tests.
"""

import logging
import os
import sys
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from maria_migration.database.connection import DatabaseManager
from maria_migration.database.migrations import (
    MigrationStep,
    Migrator,
    VersionedMigrator,
)


def create_a(migrator: Migrator) -> None:
    migrator.execute("CREATE TABLE a ( id INTEGER PRIMARY KEY, name VARCHAR(20) )")


def create_b(migrator: Migrator) -> None:
    migrator.execute(
        "CREATE TABLE b ( id INTEGER PRIMARY KEY, a_id INTEGER, "
        "CONSTRAINT fk_b FOREIGN KEY (a_id) REFERENCES a (id) )"
    )


class ExampleMigrator(VersionedMigrator):
    """Two-step migrator building tables a and b."""

    def steps(self) -> list[MigrationStep]:
        return [
            MigrationStep(2, "Create table b", create_b),
            MigrationStep(1, "Create table a", create_a),
        ]


@pytest.fixture
def temp_db_path() -> Generator[Path, None, None]:
    """Create a temporary database file."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir) / "migration_test.db"


@pytest.fixture
def db_manager(temp_db_path) -> Generator[DatabaseManager, None, None]:
    """Database manager over a temporary SQLite file."""
    manager = DatabaseManager(database_url=f"sqlite:///{temp_db_path}")

    yield manager

    manager.close()


@pytest.fixture
def example_migrator_cls() -> type[ExampleMigrator]:
    return ExampleMigrator


@pytest.fixture
def sqlite_migrator(db_manager) -> ExampleMigrator:
    """Example migrator over the temporary SQLite database."""
    return ExampleMigrator(db_manager.engine, db_manager.database_name)


@pytest.fixture
def temp_log_file() -> Generator[Path, None, None]:
    """Provide a temporary log file for testing."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir) / "logs" / "test.log"


@pytest.fixture(autouse=True)
def reset_logging():
    """Restore the root logger after each test; the CLI reconfigures it."""
    root_logger = logging.getLogger()
    original_handlers = root_logger.handlers[:]
    original_level = root_logger.level

    yield

    for handler in root_logger.handlers[:]:
        if handler not in original_handlers:
            handler.close()
            root_logger.removeHandler(handler)

    root_logger.setLevel(original_level)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove MARIA_MIGRATION_* variables so tests see only what they set."""
    for key in list(os.environ):
        if key.startswith("MARIA_MIGRATION_"):
            monkeypatch.delenv(key)
    return monkeypatch
