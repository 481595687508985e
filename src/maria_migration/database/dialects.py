"""Statement shapes for the database dialects a migrator can drive.

MariaDB/MySQL is the production target. SQLite is supported for local
development and tests; it has no ``MODIFY COLUMN`` and no droppable
foreign keys, so clearing turns enforcement off instead.
"""

import re

from sqlalchemy.engine import Dialect, Engine

from ..utils.logging import (
    ConfigurationError,
    InvalidIdentifierError,
    UnsupportedOperationError,
)

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_$]{0,63}$")


def validate_identifier(name: str) -> str:
    """Return ``name`` if it is an acceptable table or column name."""
    if not isinstance(name, str) or not IDENTIFIER_PATTERN.match(name):
        raise InvalidIdentifierError(
            f"Invalid identifier: {name!r}", context={"identifier": repr(name)}
        )
    return name


def escape_fragment(fragment: str) -> str:
    """Prepare a free-form SQL fragment (type, column definition) for text()."""
    fragment = fragment.strip()
    if not fragment or ";" in fragment:
        raise InvalidIdentifierError(
            f"Invalid SQL fragment: {fragment!r}", context={"fragment": fragment}
        )
    # A bare colon would be parsed as a bind parameter
    return fragment.replace(":", r"\:")


class SchemaDialect:
    """Builds introspection and DDL statements for one database dialect."""

    name = "generic"
    column_name_key = "Field"

    def __init__(self, dialect: Dialect) -> None:
        self.preparer = dialect.identifier_preparer

    def quote(self, name: str) -> str:
        """Allow-list and quote a caller-supplied identifier."""
        return self.preparer.quote_identifier(validate_identifier(name))

    def quote_catalog(self, name: str) -> str:
        """Quote an identifier read back from the catalog."""
        return self.preparer.quote_identifier(name)

    def list_tables(self) -> str:
        return "SHOW TABLES"

    def list_columns(self, table: str) -> tuple[str, dict]:
        return f"SHOW COLUMNS FROM {self.quote(table)}", {}

    def list_foreign_keys(self) -> str | None:
        """Query yielding (TABLE_NAME, CONSTRAINT_NAME) rows, None if unsupported."""
        return (
            "SELECT DISTINCT TABLE_NAME, CONSTRAINT_NAME "
            "FROM information_schema.key_column_usage "
            "WHERE CONSTRAINT_SCHEMA = :schema AND REFERENCED_TABLE_NAME IS NOT NULL"
        )

    def foreign_key_checks(self, enabled: bool) -> str | None:
        """Statement toggling foreign-key enforcement, None if unsupported."""
        return None

    def drop_foreign_key(self, table: str, constraint: str) -> str:
        return (
            f"ALTER TABLE {self.quote_catalog(table)} "
            f"DROP FOREIGN KEY {self.quote_catalog(constraint)}"
        )

    def drop_table_if_exists(self, table: str) -> str:
        return f"DROP TABLE IF EXISTS {self.quote_catalog(table)}"

    def drop_table(self, table: str) -> str:
        return f"DROP TABLE {self.quote(table)} CASCADE"

    def modify_column(self, table: str, column: str, column_type: str) -> str:
        return (
            f"ALTER TABLE {self.quote(table)} "
            f"MODIFY COLUMN {self.quote(column)} {escape_fragment(column_type)}"
        )


class MariaDBDialect(SchemaDialect):
    """MariaDB and MySQL."""

    name = "mariadb"


class SQLiteDialect(SchemaDialect):
    """SQLite, used for development databases and tests."""

    name = "sqlite"
    column_name_key = "name"

    def list_tables(self) -> str:
        return (
            "SELECT name FROM sqlite_master "
            "WHERE type = 'table' AND name NOT LIKE 'sqlite_%'"
        )

    def list_columns(self, table: str) -> tuple[str, dict]:
        return "SELECT name FROM pragma_table_info(:table) ORDER BY cid", {
            "table": validate_identifier(table)
        }

    def list_foreign_keys(self) -> str | None:
        return None

    def foreign_key_checks(self, enabled: bool) -> str | None:
        return f"PRAGMA foreign_keys={'ON' if enabled else 'OFF'}"

    def drop_foreign_key(self, table: str, constraint: str) -> str:
        raise UnsupportedOperationError("SQLite cannot drop foreign keys")

    def drop_table(self, table: str) -> str:
        return f"DROP TABLE {self.quote(table)}"

    def modify_column(self, table: str, column: str, column_type: str) -> str:
        raise UnsupportedOperationError(
            "SQLite cannot change a column type in place",
            context={"table": table, "column": column, "type": column_type},
        )


DIALECTS: dict[str, type[SchemaDialect]] = {
    "mysql": MariaDBDialect,
    "mariadb": MariaDBDialect,
    "sqlite": SQLiteDialect,
}


def dialect_for(engine: Engine) -> SchemaDialect:
    """Pick the statement builder matching ``engine``'s dialect."""
    dialect_cls = DIALECTS.get(engine.dialect.name)
    if dialect_cls is None:
        raise ConfigurationError(
            f"Unsupported database dialect: {engine.dialect.name}",
            context={"dialect": engine.dialect.name},
        )
    return dialect_cls(engine.dialect)
