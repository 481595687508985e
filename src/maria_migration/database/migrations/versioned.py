"""Migrator driven by an ordered list of numbered steps."""

from abc import abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ...utils.logging import LogContext, MigrationError, get_logger, log_performance
from .migrator import Migrator

logger = get_logger(__name__, LogContext.MIGRATOR)


@dataclass(frozen=True)
class MigrationStep:
    """One schema change, reaching ``version`` once applied."""

    version: int
    description: str
    apply: Callable[[Migrator], None]

    def __str__(self) -> str:
        return f"Migration {self.version}: {self.description}"


class VersionedMigrator(Migrator):
    """Applies every step newer than the stored version, in order.

    Example::

        class AppMigrator(VersionedMigrator):
            def steps(self):
                return [
                    MigrationStep(1, "Create users", create_users),
                    MigrationStep(2, "Add email", lambda m: m.add_column(
                        "users", "email VARCHAR(255)")),
                ]
    """

    @abstractmethod
    def steps(self) -> list[MigrationStep]:
        """All known migration steps."""
        pass

    def _sorted_steps(self) -> list[MigrationStep]:
        steps = sorted(self.steps(), key=lambda s: s.version)

        seen: set[int] = set()
        for step in steps:
            if step.version < 1:
                raise MigrationError(
                    f"Migration versions start at 1, got {step.version}",
                    context={"description": step.description},
                )
            if step.version in seen:
                raise MigrationError(
                    f"Duplicate migration version {step.version}",
                    context={"version": step.version},
                )
            seen.add(step.version)

        return steps

    def latest_version(self) -> int:
        steps = self._sorted_steps()
        return steps[-1].version if steps else 0

    def pending_steps(self) -> list[MigrationStep]:
        """Steps newer than the stored version."""
        current = self.get_version()
        return [step for step in self._sorted_steps() if step.version > current]

    @log_performance(LogContext.MIGRATOR)
    def migrate(self) -> None:
        """Apply pending steps, recording the version after each one."""
        pending = self.pending_steps()
        if not pending:
            logger.info("No pending migrations to apply")
            return

        for step in pending:
            logger.info(
                "Applying migration",
                version=step.version,
                description=step.description,
            )
            step.apply(self)
            self.set_version(step.version)

    def get_migration_status(self) -> dict[str, Any]:
        """Get migration status information.

        Returns:
            Dictionary with current/latest version and pending steps.
        """
        current = self.get_version()
        pending = [step for step in self._sorted_steps() if step.version > current]

        return {
            "current_version": current,
            "latest_version": self.latest_version(),
            "pending_count": len(pending),
            "pending_migrations": [
                {"version": step.version, "description": step.description}
                for step in pending
            ],
        }
