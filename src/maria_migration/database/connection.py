"""Database engine construction and lifetime."""

import os
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.pool import StaticPool

from ..config.loader import MigratorConfig
from ..utils.logging import ConfigurationError, LogContext, get_logger

logger = get_logger(__name__, LogContext.DATABASE)


class DatabaseManager:
    """Owns the SQLAlchemy engine (the connection pool) a migrator works on."""

    def __init__(
        self,
        database_url: str | None = None,
        database: str | None = None,
        echo: bool = False,
        pool_pre_ping: bool = True,
        pool_size: int = 5,
        max_overflow: int = 10,
        pool_timeout: int = 30,
        pool_recycle: int = 3600,
    ) -> None:
        """Initialize database manager.

        Args:
            database_url: Database connection URL. If None, uses default SQLite.
            database: Schema name. If None, taken from the URL.
            echo: Whether to echo SQL statements.
            pool_pre_ping: Whether to validate connections on checkout.
            pool_size: Number of connections to maintain in the pool.
            max_overflow: Maximum number of overflow connections.
            pool_timeout: Timeout for getting connection from pool.
            pool_recycle: Time in seconds to recycle connections.
        """
        self.database_url = database_url or self._get_default_database_url()
        self._database = database
        self.echo = echo
        self.pool_pre_ping = pool_pre_ping
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.pool_timeout = pool_timeout
        self.pool_recycle = pool_recycle

        self._engine: Engine | None = None

    @classmethod
    def from_config(cls, config: MigratorConfig) -> "DatabaseManager":
        """Build a manager from loaded configuration."""
        return cls(
            database_url=config.database_url,
            database=config.database,
            echo=config.echo,
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
            pool_timeout=config.pool_timeout,
            pool_recycle=config.pool_recycle,
        )

    def _get_default_database_url(self) -> str:
        """Get default SQLite database URL."""
        if db_url := os.getenv("MARIA_MIGRATION_DATABASE_URL"):
            return db_url

        db_path = Path.home() / ".maria-migration" / "database.db"
        db_path.parent.mkdir(parents=True, exist_ok=True)

        return f"sqlite:///{db_path}"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def database_name(self) -> str:
        """Schema the migrator operates on."""
        if self._database:
            return self._database
        if self.is_sqlite:
            return "main"
        url = make_url(self.database_url)
        if not url.database:
            raise ConfigurationError(
                "Database URL names no database; set 'database' or add it to the URL",
                context={"url": url.render_as_string(hide_password=True)},
            )
        return url.database

    @property
    def engine(self) -> Engine:
        """Get the database engine, creating it if necessary."""
        if self._engine is None:
            self._engine = self._create_engine()
        return self._engine

    def _create_engine(self) -> Engine:
        """Create the database engine with appropriate configuration."""
        engine_kwargs: dict[str, Any] = {
            "echo": self.echo,
            "pool_pre_ping": self.pool_pre_ping,
        }

        if self.is_sqlite:
            engine_kwargs.update(
                {
                    "poolclass": StaticPool,
                    "connect_args": {
                        "check_same_thread": False,
                        "timeout": self.pool_timeout,
                    },
                }
            )
        else:
            engine_kwargs.update(
                {
                    "pool_size": self.pool_size,
                    "max_overflow": self.max_overflow,
                    "pool_timeout": self.pool_timeout,
                    "pool_recycle": self.pool_recycle,
                }
            )

        engine = create_engine(self.database_url, **engine_kwargs)
        logger.debug(
            "Created database engine",
            url=make_url(self.database_url).render_as_string(hide_password=True),
            dialect=engine.dialect.name,
        )

        if self.is_sqlite:

            @event.listens_for(engine, "connect")
            def set_sqlite_pragma(
                dbapi_connection: Any, connection_record: Any
            ) -> None:
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

        return engine

    def close(self) -> None:
        """Close database connections."""
        if self._engine:
            self._engine.dispose()
            self._engine = None

    def __enter__(self) -> "DatabaseManager":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
