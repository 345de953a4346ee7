"""Tests for the migration runner helpers."""

import pytest

import run_migrations
from run_migrations import discover_migrations, file_checksum, find_migration, pending_migrations


@pytest.fixture
def migrations_dir(tmp_path):
    (tmp_path / "002_functions.sql").write_text("select 2;")
    (tmp_path / "001_schema.sql").write_text("select 1;")
    (tmp_path / "notes.txt").write_text("ignored")
    return tmp_path


def test_discover_in_name_order(migrations_dir):
    migrations = discover_migrations(migrations_dir)

    assert [name for name, _, _ in migrations] == ["001_schema.sql", "002_functions.sql"]
    assert migrations[0][2] == file_checksum(migrations_dir / "001_schema.sql")


def test_discover_missing_dir(tmp_path):
    assert discover_migrations(tmp_path / "missing") == []


def test_pending_skips_applied(migrations_dir):
    available = discover_migrations(migrations_dir)
    applied = {"001_schema.sql": {"checksum": available[0][2], "applied_at": None}}

    assert [m[0] for m in pending_migrations(applied, available)] == ["002_functions.sql"]


def test_changed_applied_migration_is_not_rerun(migrations_dir):
    available = discover_migrations(migrations_dir)
    applied = {"001_schema.sql": {"checksum": "stale", "applied_at": None}}

    assert [m[0] for m in pending_migrations(applied, available)] == ["002_functions.sql"]


def test_find_migration_by_prefix(migrations_dir):
    available = discover_migrations(migrations_dir)

    assert find_migration("002", available)[0] == "002_functions.sql"
    assert find_migration("0", available) is None
    assert find_migration("999", available) is None


def test_shipped_migrations_exist():
    names = [name for name, _, _ in discover_migrations(run_migrations.MIGRATIONS_DIR)]

    assert names == ["001_initial_schema.sql", "002_rfd_functions.sql"]
