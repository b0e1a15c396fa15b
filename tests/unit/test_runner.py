"""Tests for SyncRunner."""

import pytest

from litesync.config import Config
from litesync.exceptions import ConfigError, SchemaApplyError
from litesync.runner import SyncRunner
from litesync.schema.diff import SchemaChange
from litesync.types import ChangeType
from tests.helpers import (
    POSTS_SQL,
    USERS_SQL,
    column_names,
    fetch_rows,
    insert_rows,
    make_client,
    posts_rows,
)


class TestKeyColumn:
    def test_default_id(self):
        source = make_client(USERS_SQL)
        runner = SyncRunner(source, make_client())

        assert runner.key_column("users") == "id"

    def test_configured_override(self):
        source = make_client("CREATE TABLE tags (id INTEGER, slug TEXT)")
        config = Config(key_columns={"tags": "slug"})

        assert SyncRunner(source, make_client(), config).key_column("tags") == "slug"

    def test_falls_back_to_single_column_primary_key(self):
        source = make_client("CREATE TABLE tags (slug TEXT PRIMARY KEY, label TEXT)")

        assert SyncRunner(source, make_client()).key_column("tags") == "slug"

    def test_composite_key_without_id_is_config_error(self):
        source = make_client(
            "CREATE TABLE pairs (a INTEGER, b INTEGER, PRIMARY KEY (a, b))"
        )

        with pytest.raises(ConfigError, match="pairs"):
            SyncRunner(source, make_client()).key_column("pairs")

    def test_missing_configured_column_does_not_fall_back(self):
        source = make_client("CREATE TABLE tags (slug TEXT PRIMARY KEY)")
        config = Config(key_columns={"tags": "uuid"})

        with pytest.raises(ConfigError, match="uuid"):
            SyncRunner(source, make_client(), config).key_column("tags")

    def test_sequence_table_uses_name(self):
        source = make_client("CREATE TABLE t (id INTEGER PRIMARY KEY AUTOINCREMENT)")

        assert SyncRunner(source, make_client()).key_column("sqlite_sequence") == "name"


class TestPlanSchema:
    def test_users_scenario(self):
        """Source gains an email column: one ALTER_TABLE with one ADD_COLUMN."""
        source = make_client("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT, email TEXT)")
        dest = make_client(USERS_SQL)

        changes = SyncRunner(source, dest).plan_schema()

        assert len(changes) == 1
        assert changes[0].change_type is ChangeType.ALTER_TABLE
        assert [c.column_name for c in changes[0].column_changes] == ["email"]

    def test_plan_does_not_touch_destination(self):
        source = make_client(USERS_SQL)
        dest = make_client()

        SyncRunner(source, dest).plan_schema()

        assert dest.fetchall("SELECT name FROM sqlite_master") == []


class TestRun:
    def test_full_sync(self):
        source = make_client(
            "CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT, email TEXT)", POSTS_SQL
        )
        insert_rows(source.connection, "users", [(1, "ann", "ann@example.com")])
        insert_rows(source.connection, "posts", posts_rows([1, 2, 3]))
        dest = make_client(USERS_SQL, POSTS_SQL)
        insert_rows(dest.connection, "users", [(1, "ann")])
        insert_rows(dest.connection, "posts", posts_rows([2, 3, 4]))

        report = SyncRunner(source, dest).run()

        assert [c.change_type for c in report.schema_changes] == [ChangeType.ALTER_TABLE]
        assert column_names(dest.connection, "users") == ["id", "name", "email"]
        assert fetch_rows(dest.connection, "users") == [(1, "ann", "ann@example.com")]
        assert fetch_rows(dest.connection, "posts") == posts_rows([1, 2, 3])
        assert report.rows_changed == 3

    def test_second_run_is_noop(self):
        source = make_client(USERS_SQL, POSTS_SQL)
        insert_rows(source.connection, "posts", posts_rows([1, 2]))
        dest = make_client()
        runner = SyncRunner(source, dest)

        runner.run()
        report = runner.run()

        assert report.schema_changes == []
        assert report.rows_changed == 0

    def test_schema_only(self):
        source = make_client(POSTS_SQL)
        insert_rows(source.connection, "posts", posts_rows([1]))
        dest = make_client()

        report = SyncRunner(source, dest).run(schema_only=True)

        assert len(report.schema_changes) == 1
        assert report.tables == []
        assert fetch_rows(dest.connection, "posts") == []

    def test_tables_filter(self):
        source = make_client(USERS_SQL, POSTS_SQL)
        insert_rows(source.connection, "users", [(1, "ann")])
        insert_rows(source.connection, "posts", posts_rows([1]))
        dest = make_client()
        config = Config(tables=["posts"])

        report = SyncRunner(source, dest, config).run()

        assert [t.table for t in report.tables] == ["posts"]
        assert fetch_rows(dest.connection, "users") == []
        assert fetch_rows(dest.connection, "posts") == posts_rows([1])

    def test_updated_at_refreshes_shared_rows(self):
        ddl = "CREATE TABLE notes (id INTEGER PRIMARY KEY, body TEXT, updated_at TEXT)"
        source = make_client(ddl)
        dest = make_client(ddl)
        insert_rows(source.connection, "notes", [(1, "new", "2024-02-01"), (2, "same", "2024-01-01")])
        insert_rows(dest.connection, "notes", [(1, "old", "2024-01-01"), (2, "same", "2024-01-01")])
        config = Config(updated_at_column="updated_at")

        report = SyncRunner(source, dest, config).run()

        assert report.tables[0].updated == 1
        assert fetch_rows(dest.connection, "notes") == [
            (1, "new", "2024-02-01"),
            (2, "same", "2024-01-01"),
        ]

    def test_shared_rows_left_alone_without_stamp_column(self):
        ddl = "CREATE TABLE notes (id INTEGER PRIMARY KEY, body TEXT)"
        source = make_client(ddl)
        dest = make_client(ddl)
        insert_rows(source.connection, "notes", [(1, "new")])
        insert_rows(dest.connection, "notes", [(1, "old")])
        config = Config(updated_at_column="updated_at")

        report = SyncRunner(source, dest, config).run()

        assert report.rows_changed == 0
        assert fetch_rows(dest.connection, "notes") == [(1, "old")]

    def test_schema_failure_stops_before_rows(self):
        source = make_client(USERS_SQL)
        insert_rows(source.connection, "users", [(1, "ann")])
        dest = make_client()

        class BrokenDiffer:
            def diff(self, source_schema, dest_schema):
                return [SchemaChange(change_type=ChangeType.CREATE_TABLE, name="users")]

        with pytest.raises(SchemaApplyError):
            SyncRunner(source, dest, differ=BrokenDiffer()).run()

        assert dest.fetchall("SELECT name FROM sqlite_master") == []


class TestConvergence:
    def test_leftover_sequence_table_is_skipped(self):
        """A dropped AUTOINCREMENT table leaves sqlite_sequence behind in the source."""
        source = make_client(
            "CREATE TABLE logs (id INTEGER PRIMARY KEY AUTOINCREMENT, msg TEXT)",
            "INSERT INTO logs (msg) VALUES ('x')",
            "DROP TABLE logs",
            USERS_SQL,
        )
        insert_rows(source.connection, "users", [(1, "ann")])
        dest = make_client()
        runner = SyncRunner(source, dest)

        report = runner.run()

        assert [t.table for t in report.tables] == ["users"]
        assert fetch_rows(dest.connection, "users") == [(1, "ann")]
        assert runner.run().rows_changed == 0

    def test_sequence_table_synced_when_both_sides_have_it(self):
        ddl = "CREATE TABLE logs (id INTEGER PRIMARY KEY AUTOINCREMENT, msg TEXT)"
        source = make_client(ddl, "INSERT INTO logs (msg) VALUES ('x')")
        dest = make_client()

        assert SyncRunner(source, dest).run().tables[-1].table == "sqlite_sequence"

    def test_null_identity_rows_converge(self):
        ddl = "CREATE TABLE items (id INTEGER, name TEXT)"
        source = make_client(ddl)
        dest = make_client(ddl, "INSERT INTO items VALUES (NULL, 'stale')")
        runner = SyncRunner(source, dest)

        runner.run()

        assert dest.fetch_value("SELECT COUNT(*) FROM items") == 0
        assert runner.diff_rows("items")[1].is_empty

    def test_index_replacing_table_of_same_name(self):
        source = make_client(
            "CREATE TABLE t (a INTEGER)", "CREATE INDEX x ON t (a)"
        )
        dest = make_client("CREATE TABLE t (a INTEGER)", "CREATE TABLE x (id INTEGER)")
        runner = SyncRunner(source, dest)

        runner.run()

        kinds = dest.fetchall("SELECT type, name FROM sqlite_master WHERE name = 'x'")
        assert kinds == [{"type": "index", "name": "x"}]
        assert runner.plan_schema() == []

    def test_table_replacing_index_of_same_name(self):
        source = make_client("CREATE TABLE t (a INTEGER)", "CREATE TABLE x (id INTEGER)")
        dest = make_client("CREATE TABLE t (a INTEGER)", "CREATE INDEX x ON t (a)")
        runner = SyncRunner(source, dest)

        runner.run()

        assert runner.plan_schema() == []
