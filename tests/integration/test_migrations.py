"""
Migration and schema-level invariant tests.
"""

import sqlite3
from uuid import uuid4

import pytest

from cms_versioning.adapters.sqlite.migrator import SQLiteMigrator


def _insert_version(conn: sqlite3.Connection, status: str) -> None:
    conn.execute(
        "INSERT INTO cms_versions (id, status, created_by, created_at) VALUES (?, ?, ?, ?)",
        (str(uuid4()), status, "editor", "2024-06-15T12:00:00.000000+00:00"),
    )


@pytest.fixture
def fresh_db(tmp_path) -> str:
    return str(tmp_path / "nested" / "cms.db")


def test_run_migrations_creates_parent_dir_and_applies_all(fresh_db: str) -> None:
    migrator = SQLiteMigrator(fresh_db)

    assert migrator.pending_migrations() == [
        "001_cms_versions.sql",
        "002_cms_version_history.sql",
    ]
    applied = migrator.run_migrations()

    assert applied == ["001_cms_versions.sql", "002_cms_version_history.sql"]
    assert migrator.pending_migrations() == []


def test_run_migrations_is_idempotent(fresh_db: str) -> None:
    migrator = SQLiteMigrator(fresh_db)
    migrator.run_migrations()

    assert migrator.run_migrations() == []


def test_single_draft_enforced_by_index(db_path: str) -> None:
    conn = sqlite3.connect(db_path)
    try:
        _insert_version(conn, "Draft")
        with pytest.raises(sqlite3.IntegrityError):
            _insert_version(conn, "Draft")
    finally:
        conn.close()


def test_single_published_enforced_by_index(db_path: str) -> None:
    conn = sqlite3.connect(db_path)
    try:
        _insert_version(conn, "Published")
        with pytest.raises(sqlite3.IntegrityError):
            _insert_version(conn, "Published")
        # Any number of archived versions
        _insert_version(conn, "Archived")
        _insert_version(conn, "Archived")
    finally:
        conn.close()


def test_unknown_status_rejected(db_path: str) -> None:
    conn = sqlite3.connect(db_path)
    try:
        with pytest.raises(sqlite3.IntegrityError):
            _insert_version(conn, "Scheduled")
    finally:
        conn.close()
