"""Schema migrators."""

from .loader import load_migrator_class
from .migrator import Migrator, StatementResult
from .versioned import MigrationStep, VersionedMigrator

__all__ = [
    "Migrator",
    "StatementResult",
    "VersionedMigrator",
    "MigrationStep",
    "load_migrator_class",
]
