"""maria-migration: schema version tracking and DDL helpers for MariaDB."""

__version__ = "0.1.0"

from .database import DatabaseManager, MigrationStep, Migrator, VersionedMigrator
from .utils.logging import (
    ClearDatabaseError,
    InvalidVersionStateError,
    MigrationError,
    StatementError,
)

__all__ = [
    "Migrator",
    "VersionedMigrator",
    "MigrationStep",
    "DatabaseManager",
    "MigrationError",
    "StatementError",
    "InvalidVersionStateError",
    "ClearDatabaseError",
    "__version__",
]
