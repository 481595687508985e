"""Integration tests for CLI workflows against a SQLite database."""

import json
import textwrap

import pytest
import yaml
from click.testing import CliRunner

from maria_migration.cli.main import main

APP_MIGRATIONS = textwrap.dedent(
    """
    from maria_migration.database.migrations import MigrationStep, VersionedMigrator


    def create_users(migrator):
        migrator.execute("CREATE TABLE users ( id INTEGER PRIMARY KEY )")


    def add_email(migrator):
        migrator.add_column("users", "email VARCHAR(255)")


    class AppMigrator(VersionedMigrator):
        def steps(self):
            return [
                MigrationStep(1, "Create users", create_users),
                MigrationStep(2, "Add email", add_email),
            ]
    """
)


@pytest.fixture
def workspace(tmp_path, clean_env):
    """Empty working directory with no config files or environment overrides."""
    clean_env.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def migrations_file(workspace):
    path = workspace / "app_migrations.py"
    path.write_text(APP_MIGRATIONS)
    return path


class CliTestBase:
    def setup_method(self):
        """Set up test fixtures."""
        self.runner = CliRunner()

    @pytest.fixture(autouse=True)
    def database_args(self, workspace):
        self.base_args = [
            "--database-url",
            f"sqlite:///{workspace / 'app.db'}",
            "--log-level",
            "ERROR",
        ]

    def invoke(self, *args, migrator=None):
        base = list(self.base_args)
        if migrator is not None:
            base += ["--migrator", str(migrator)]
        return self.runner.invoke(main, base + list(args))


class TestVersionWorkflows(CliTestBase):
    """Test reading and changing the stored version."""

    def test_show_on_fresh_database(self):
        result = self.invoke("version", "show")

        assert result.exit_code == 0
        assert "version: 0" in result.output

    def test_set_then_show(self):
        result = self.invoke("version", "set", "7")
        assert result.exit_code == 0
        assert "Schema version set to 7" in result.output

        result = self.invoke("--json", "version", "show")
        assert result.exit_code == 0
        assert json.loads(result.output) == {"version": 7}

    def test_bump(self):
        self.invoke("version", "set", "2")

        result = self.invoke("version", "bump")

        assert result.exit_code == 0
        assert "Schema version increased to 3" in result.output

    def test_quiet_suppresses_success(self):
        result = self.invoke("--quiet", "version", "set", "1")

        assert result.exit_code == 0
        assert result.output == ""


class TestSchemaWorkflows(CliTestBase):
    """Test schema inspection and clearing."""

    def test_tables_on_empty_database(self):
        result = self.invoke("schema", "tables")

        assert result.exit_code == 0
        assert "No data to display" in result.output

    def test_tables_and_columns(self, migrations_file):
        assert self.invoke("migrate", migrator=migrations_file).exit_code == 0

        result = self.invoke("--json", "schema", "tables")
        assert sorted(json.loads(result.output)["tables"]) == ["users", "version"]

        result = self.invoke("schema", "columns", "users")
        assert result.exit_code == 0
        assert result.output.split() == ["id", "email"]

    def test_columns_rejects_unsafe_name(self):
        result = self.invoke("schema", "columns", "users; DROP TABLE x")

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_clear_with_yes(self, migrations_file):
        self.invoke("migrate", migrator=migrations_file)

        result = self.invoke("schema", "clear", "--yes")

        assert result.exit_code == 0
        assert "Dropped 2 table(s)" in result.output
        assert "No data to display" in self.invoke("schema", "tables").output

    def test_clear_declined(self, migrations_file):
        self.invoke("migrate", migrator=migrations_file)

        result = self.runner.invoke(
            main, self.base_args + ["schema", "clear"], input="n\n"
        )

        assert result.exit_code == 1
        assert "Aborted" in result.output
        assert "users" in self.invoke("schema", "tables").output


class TestMigrateWorkflows(CliTestBase):
    """Test running a user migrator."""

    def test_migrate(self, migrations_file):
        result = self.invoke("migrate", migrator=migrations_file)

        assert result.exit_code == 0
        assert "Schema is at version 2" in result.output

    def test_migrate_twice(self, migrations_file):
        self.invoke("migrate", migrator=migrations_file)

        result = self.invoke("migrate", migrator=migrations_file)

        assert result.exit_code == 0
        assert "Schema is at version 2" in result.output

    def test_migrate_without_migrator(self):
        result = self.invoke("migrate")

        assert result.exit_code == 1
        assert "Error: No migrator configured" in result.output
        assert "No data to display" in self.invoke("schema", "tables").output

    def test_migrate_with_missing_file(self, workspace):
        result = self.invoke("migrate", migrator=workspace / "missing.py")

        assert result.exit_code == 1
        assert "Migrator file not found" in result.output

    def test_status(self, migrations_file):
        self.invoke("version", "set", "1", migrator=migrations_file)

        result = self.invoke("status", migrator=migrations_file)

        assert result.exit_code == 0
        assert "Current version: 1" in result.output
        assert "Latest version: 2" in result.output
        assert "2: Add email" in result.output

    def test_status_json(self, migrations_file):
        self.invoke("migrate", migrator=migrations_file)

        result = self.invoke("--json", "status", migrator=migrations_file)

        assert json.loads(result.output) == {
            "current_version": 2,
            "latest_version": 2,
            "pending_count": 0,
            "pending_migrations": [],
        }

    def test_status_needs_versioned_migrator(self):
        result = self.invoke("status")

        assert result.exit_code == 1
        assert "status needs a VersionedMigrator" in result.output

    def test_reset_without_migrator_keeps_tables(self, migrations_file):
        """Test that reset refuses to clear when nothing can rebuild the schema."""
        self.invoke("migrate", migrator=migrations_file)

        result = self.invoke("reset", "--yes")

        assert result.exit_code == 1
        assert "Error: No migrator configured" in result.output
        tables = json.loads(self.invoke("--json", "schema", "tables").output)
        assert sorted(tables["tables"]) == ["users", "version"]

    def test_reset(self, migrations_file):
        self.invoke("migrate", migrator=migrations_file)
        self.invoke("version", "set", "9")

        result = self.invoke("reset", "--yes", migrator=migrations_file)

        assert result.exit_code == 0
        assert "Database reset to version 2" in result.output


class TestConfigWorkflows(CliTestBase):
    """Test configuration inspection."""

    def test_config_file_and_profile(self, workspace, migrations_file):
        config_path = workspace / "maria-migration.yaml"
        config_path.write_text(
            yaml.dump(
                {
                    "database_url": f"sqlite:///{workspace / 'app.db'}",
                    "migrator": str(migrations_file),
                    "log_level": "ERROR",
                    "profiles": {
                        "other": {"version_table": "schema_version"},
                    },
                }
            )
        )

        result = self.runner.invoke(main, ["-p", "other", "migrate"])
        assert result.exit_code == 0

        result = self.runner.invoke(main, ["--json", "schema", "tables"])
        assert "schema_version" in json.loads(result.output)["tables"]

    def test_show_hides_password(self):
        result = self.runner.invoke(
            main,
            [
                "--json",
                "--database-url",
                "mysql+pymysql://app:secret@db/app",
                "--log-level",
                "ERROR",
                "config",
                "show",
            ],
        )

        assert result.exit_code == 0
        config = json.loads(result.output)["configuration"]
        assert "secret" not in config["database_url"]
        assert config["version_table"] == "version"

    def test_validate(self):
        result = self.invoke("config", "validate")

        assert result.exit_code == 0
        assert "Configuration is valid" in result.output

    def test_missing_config_file(self, workspace):
        result = self.runner.invoke(
            main, ["--config", str(workspace / "missing.yaml"), "config", "validate"]
        )

        assert result.exit_code == 1
        assert "Error: Config file not found" in result.output
        assert "Unexpected error" not in result.output

    def test_url_without_database(self):
        result = self.runner.invoke(
            main,
            [
                "--database-url",
                "mysql+pymysql://app:secret@db:3306",
                "--log-level",
                "ERROR",
                "version",
                "show",
            ],
        )

        assert result.exit_code == 1
        assert "names no database" in result.output
        assert "Unexpected error" not in result.output

    def test_validate_unknown_profile(self, workspace):
        (workspace / "maria-migration.yaml").write_text("log_level: ERROR\n")

        result = self.runner.invoke(main, ["-p", "prod", "config", "validate"])

        assert result.exit_code == 1
        assert "Profile 'prod' not found" in result.output

    def test_locations(self):
        result = self.runner.invoke(main, ["config", "locations"])

        assert result.exit_code == 0
        assert "maria-migration.yaml" in result.output
        assert "MARIA_MIGRATION_DATABASE_URL" in result.output
