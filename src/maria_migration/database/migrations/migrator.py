"""Base migrator: version bookkeeping and DDL helpers."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from ...utils.logging import (
    ClearDatabaseError,
    InvalidVersionError,
    InvalidVersionStateError,
    LogContext,
    StatementError,
    audit_log,
    get_logger,
)
from ..dialects import SchemaDialect, dialect_for, escape_fragment, validate_identifier

logger = get_logger(__name__, LogContext.MIGRATOR)


@dataclass
class StatementResult:
    """Outcome of one executed statement."""

    statement: str
    rows: list[dict[str, Any]] = field(default_factory=list)
    rowcount: int = -1


class Migrator(ABC):
    """Base class for schema migrators.

    Subclasses implement :meth:`migrate` using the helpers below. The engine
    is shared: the migrator never disposes it.
    """

    def __init__(
        self,
        engine: Engine,
        database: str,
        version_table: str = "version",
        max_clear_passes: int = 10,
    ) -> None:
        """Initialize migrator.

        Args:
            engine: Database engine (connection pool).
            database: Name of the schema to operate on.
            version_table: Table holding the single version row.
            max_clear_passes: Passes clear_database makes before giving up.
        """
        self.engine = engine
        self.database = database
        self.version_table = validate_identifier(version_table)
        self.max_clear_passes = max_clear_passes
        self.dialect: SchemaDialect = dialect_for(engine)

    @abstractmethod
    def migrate(self) -> None:
        """Bring the schema to the latest version."""
        pass

    def execute(
        self, statement: str, params: dict[str, Any] | None = None
    ) -> StatementResult:
        """Run one statement in its own transaction."""
        logger.debug("Executing statement", statement=statement)
        try:
            with self.engine.begin() as conn:
                result = conn.execute(text(statement), params or {})
                rows = (
                    [dict(row) for row in result.mappings()]
                    if result.returns_rows
                    else []
                )
                return StatementResult(statement, rows, result.rowcount)
        except SQLAlchemyError as e:
            raise StatementError(statement, e) from e

    @property
    def _quoted_version_table(self) -> str:
        return self.dialect.quote(self.version_table)

    def version_table_exists(self) -> bool:
        """Check whether the version table is present."""
        return self.version_table in self.get_tables()

    def create_version_table(self) -> None:
        """Create the version table holding version 0, or repair an empty one."""
        table = self._quoted_version_table

        if not self.version_table_exists():
            self.execute(f"CREATE TABLE IF NOT EXISTS {table} ( version INTEGER )")
            self.execute(f"INSERT INTO {table} (version) VALUES (0)")
            logger.info("Created version table", table=self.version_table)
            return

        rows = self.execute(f"SELECT * FROM {table}").rows
        if not rows:
            logger.warning(
                "Version table was empty, resetting version to 0",
                table=self.version_table,
            )
            self.execute(f"INSERT INTO {table} (version) VALUES (0)")

    def get_version(self) -> int:
        """Get the current schema version.

        Raises:
            InvalidVersionStateError: If the table does not hold exactly one row.
        """
        self.create_version_table()

        rows = self.execute(f"SELECT * FROM {self._quoted_version_table}").rows
        if len(rows) != 1:
            raise InvalidVersionStateError(self.version_table, len(rows))
        return rows[0]["version"]

    def set_version(self, version: int) -> None:
        """Store ``version`` as the current schema version."""
        if isinstance(version, bool) or not isinstance(version, int) or version < 0:
            raise InvalidVersionError(
                f"Version must be a non-negative integer, got {version!r}",
                context={"version": repr(version)},
            )

        self.create_version_table()
        self.execute(
            f"UPDATE {self._quoted_version_table} SET version = :version",
            {"version": version},
        )
        logger.info("Set schema version", version=version)

    def increase_version(self) -> int:
        """Increment the schema version and return the new value."""
        self.create_version_table()

        table = self._quoted_version_table
        self.execute(f"UPDATE {table} SET version = version + 1")
        version = self.execute(f"SELECT * FROM {table}").rows[0]["version"]
        logger.info("Increased schema version", version=version)
        return version

    def get_tables(self) -> list[str]:
        """List the tables of the database in catalog order."""
        rows = self.execute(self.dialect.list_tables()).rows
        return [next(iter(row.values())) for row in rows]

    def get_columns(self, table: str) -> list[str]:
        """List the column names of ``table`` in catalog order."""
        statement, params = self.dialect.list_columns(table)
        rows = self.execute(statement, params).rows
        return [row[self.dialect.column_name_key] for row in rows]

    def _drop_foreign_keys(self) -> None:
        statement = self.dialect.list_foreign_keys()
        if statement is None:
            return

        rows = self.execute(statement, {"schema": self.database}).rows
        for row in rows:
            self.execute(
                self.dialect.drop_foreign_key(row["TABLE_NAME"], row["CONSTRAINT_NAME"])
            )

    def _set_foreign_key_checks(self, enabled: bool) -> None:
        statement = self.dialect.foreign_key_checks(enabled)
        if statement is None:
            return

        # PRAGMA foreign_keys is ignored inside a transaction
        try:
            with self.engine.connect().execution_options(
                isolation_level="AUTOCOMMIT"
            ) as conn:
                conn.execute(text(statement))
        except SQLAlchemyError as e:
            raise StatementError(statement, e) from e

    @audit_log("clear database")
    def clear_database(self) -> list[str]:
        """Drop every table in the database.

        Foreign keys are stripped first (or their enforcement switched off
        where they cannot be dropped) so drop order does not matter. Passes
        repeat until no tables remain.

        Returns:
            The tables present before the clear.

        Raises:
            ClearDatabaseError: If tables remain after ``max_clear_passes``.
        """
        tables = self.get_tables()
        remaining = tables

        self._set_foreign_key_checks(False)
        try:
            for clear_pass in range(1, self.max_clear_passes + 1):
                self._drop_foreign_keys()
                for table in remaining:
                    self.execute(self.dialect.drop_table_if_exists(table))

                remaining = self.get_tables()
                if not remaining:
                    logger.info(
                        "Cleared database",
                        database=self.database,
                        tables=len(tables),
                        passes=clear_pass,
                    )
                    return tables

                logger.warning(
                    "Tables remain after clear pass",
                    clear_pass=clear_pass,
                    remaining=remaining,
                )
        finally:
            self._set_foreign_key_checks(True)

        raise ClearDatabaseError(remaining, self.max_clear_passes)

    @audit_log("reset database")
    def reset_database(self) -> None:
        """Drop everything and rebuild the schema with :meth:`migrate`."""
        self.clear_database()
        self.migrate()

    def add_column(self, table: str, column_definition: str) -> StatementResult:
        """Add a column, e.g. ``add_column("users", "email VARCHAR(255)")``."""
        parts = column_definition.split(None, 1)
        definition = self.dialect.quote(parts[0] if parts else "")
        if len(parts) > 1:
            definition = f"{definition} {escape_fragment(parts[1])}"

        return self.execute(
            f"ALTER TABLE {self.dialect.quote(table)} ADD COLUMN {definition}"
        )

    def drop_table(self, table: str) -> None:
        self.execute(self.dialect.drop_table(table))

    def rename_table(self, old_table_name: str, new_table_name: str) -> None:
        self.execute(
            f"ALTER TABLE {self.dialect.quote(old_table_name)} "
            f"RENAME TO {self.dialect.quote(new_table_name)}"
        )

    def drop_column(self, table: str, column: str) -> None:
        self.execute(
            f"ALTER TABLE {self.dialect.quote(table)} "
            f"DROP COLUMN {self.dialect.quote(column)}"
        )

    def rename_column(
        self, table: str, old_column_name: str, new_column_name: str
    ) -> None:
        self.execute(
            f"ALTER TABLE {self.dialect.quote(table)} "
            f"RENAME COLUMN {self.dialect.quote(old_column_name)} "
            f"TO {self.dialect.quote(new_column_name)}"
        )

    def change_column_type(self, table: str, column: str, column_type: str) -> None:
        self.execute(self.dialect.modify_column(table, column, column_type))

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__}(database='{self.database}', "
            f"version_table='{self.version_table}')>"
        )
