"""Database connections, dialects and migrators."""

from .connection import DatabaseManager
from .dialects import SchemaDialect, dialect_for, validate_identifier
from .migrations import (
    MigrationStep,
    Migrator,
    StatementResult,
    VersionedMigrator,
    load_migrator_class,
)

__all__ = [
    # Connection management
    "DatabaseManager",
    # Dialects
    "SchemaDialect",
    "dialect_for",
    "validate_identifier",
    # Migrators
    "Migrator",
    "VersionedMigrator",
    "MigrationStep",
    "StatementResult",
    "load_migrator_class",
]
