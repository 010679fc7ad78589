"""
SQLite repositories for versions, blocks and version history.

Every write runs inside a BEGIN IMMEDIATE transaction so that status checks
and the mutation they guard see the same database state. The single
Draft / single Published invariants are backed by partial unique indexes
(see migrations/001_cms_versions.sql); the checks here only turn index
violations into typed errors earlier.
"""

import logging
import sqlite3
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from cms_versioning.components.blocks.models import BulkUpdateItem, ReorderItem
from cms_versioning.domain.entities import (
    CmsVersion,
    ContentBlock,
    VersionDetail,
    VersionHistoryEntry,
    VersionStatus,
)
from cms_versioning.domain.errors import (
    BulkItemFailure,
    BulkUpdateError,
    DraftAlreadyExistsError,
    DuplicateKeyError,
    InvalidScheduleError,
    InvalidStateError,
    NotFoundError,
    TransientStoreError,
)
from cms_versioning.domain.state import can_edit_notes, is_mutable, transition

logger = logging.getLogger(__name__)

_TRANSIENT_MARKERS = ("locked", "busy")

_VERSION_SELECT = """
    SELECT v.*,
        (SELECT COUNT(*) FROM cms_content_blocks b WHERE b.version_id = v.id)
            AS content_block_count
    FROM cms_versions v
"""


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def _as_utc(dt: datetime) -> datetime:
    # Naive timestamps are taken to be UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def _dt_to_db(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    # Fixed width keeps lexicographic order equal to time order
    return _as_utc(dt).isoformat(timespec="microseconds")


def _dt_from_db(s: str | None) -> datetime | None:
    return datetime.fromisoformat(s) if s else None


def _row_to_version(row: dict[str, Any]) -> CmsVersion:
    return CmsVersion(
        id=UUID(row["id"]),
        sequence_number=row["sequence_number"],
        status=row["status"],
        notes=row["notes"],
        created_by=row["created_by"],
        created_at=_dt_from_db(row["created_at"]) or datetime.min,
        updated_at=_dt_from_db(row["updated_at"]),
        published_by=row["published_by"],
        published_at=_dt_from_db(row["published_at"]),
        scheduled_publish_at=_dt_from_db(row["scheduled_publish_at"]),
        content_block_count=row.get("content_block_count") or 0,
    )


def _row_to_block(row: dict[str, Any]) -> ContentBlock:
    return ContentBlock(
        id=UUID(row["id"]),
        version_id=UUID(row["version_id"]),
        block_key=row["block_key"],
        section_key=row["section_key"],
        block_type=row["block_type"],
        content=row["content"],
        language=row["language"],
        sort_order=row["sort_order"],
        metadata=row["metadata"],
        created_at=_dt_from_db(row["created_at"]) or datetime.min,
        updated_at=_dt_from_db(row["updated_at"]),
    )


def _row_to_history(row: dict[str, Any]) -> VersionHistoryEntry:
    return VersionHistoryEntry(
        id=UUID(row["id"]),
        version_id=UUID(row["version_id"]),
        action=row["action"],
        performed_by=row["performed_by"],
        performed_at=_dt_from_db(row["performed_at"]) or datetime.min,
        notes=row["notes"],
        old_status=row["old_status"],
        new_status=row["new_status"],
        change_summary=row["change_summary"],
        scheduled_publish_at=_dt_from_db(row["scheduled_publish_at"]),
    )


class _SQLiteRepo:
    def __init__(self, db_path: str, timeout: float = 5.0):
        self.db_path = db_path
        self.timeout = timeout

    def _get_conn(self) -> sqlite3.Connection:
        # Autocommit mode; transactions are opened explicitly
        conn = sqlite3.connect(self.db_path, timeout=self.timeout, isolation_level=None)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    @contextmanager
    def _transaction(self, immediate: bool = True) -> Iterator[sqlite3.Connection]:
        conn = self._get_conn()
        try:
            conn.execute("BEGIN IMMEDIATE" if immediate else "BEGIN")
            yield conn
            conn.execute("COMMIT")
        except sqlite3.OperationalError as e:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            if any(marker in str(e).lower() for marker in _TRANSIENT_MARKERS):
                raise TransientStoreError(str(e)) from e
            raise
        except Exception:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
        finally:
            conn.close()

    # --- Shared lookups (run on an open connection) ---

    def _fetch_version(self, conn: sqlite3.Connection, version_id: UUID) -> CmsVersion | None:
        row = conn.execute(_VERSION_SELECT + " WHERE v.id = ?", (str(version_id),)).fetchone()
        return _row_to_version(row) if row else None

    def _fetch_by_status(
        self, conn: sqlite3.Connection, status: VersionStatus
    ) -> CmsVersion | None:
        row = conn.execute(_VERSION_SELECT + " WHERE v.status = ?", (status,)).fetchone()
        return _row_to_version(row) if row else None

    def _require_version(self, conn: sqlite3.Connection, version_id: UUID) -> CmsVersion:
        version = self._fetch_version(conn, version_id)
        if version is None:
            raise NotFoundError("Version", version_id)
        return version

    def _require_draft(
        self, conn: sqlite3.Connection, version_id: UUID, operation: str
    ) -> CmsVersion:
        version = self._require_version(conn, version_id)
        if not is_mutable(version.status):
            raise InvalidStateError(version_id, version.status, operation)
        return version

    def _fetch_blocks(self, conn: sqlite3.Connection, version_id: UUID) -> list[ContentBlock]:
        rows = conn.execute(
            "SELECT * FROM cms_content_blocks WHERE version_id = ? "
            "ORDER BY section_key ASC, sort_order ASC, block_key ASC",
            (str(version_id),),
        ).fetchall()
        return [_row_to_block(r) for r in rows]

    def _insert_block(self, conn: sqlite3.Connection, block: ContentBlock) -> None:
        conn.execute(
            """
            INSERT INTO cms_content_blocks (
                id, version_id, block_key, section_key, block_type,
                content, language, sort_order, metadata, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(block.id),
                str(block.version_id),
                block.block_key,
                block.section_key,
                block.block_type,
                block.content,
                block.language,
                block.sort_order,
                block.metadata,
                _dt_to_db(block.created_at),
                _dt_to_db(block.updated_at),
            ),
        )

    def _copy_published_blocks(
        self, conn: sqlite3.Connection, target_id: UUID, now: datetime
    ) -> list[ContentBlock]:
        published = self._fetch_by_status(conn, "Published")
        if published is None:
            return []
        copies = [
            block.model_copy(
                update={
                    "id": uuid4(),
                    "version_id": target_id,
                    "created_at": now,
                    "updated_at": None,
                }
            )
            for block in self._fetch_blocks(conn, published.id)
        ]
        for block in copies:
            self._insert_block(conn, block)
        return copies

    def _insert_history(self, conn: sqlite3.Connection, entry: VersionHistoryEntry) -> None:
        conn.execute(
            """
            INSERT INTO cms_version_history (
                id, version_id, action, performed_by, performed_at, notes,
                old_status, new_status, change_summary, scheduled_publish_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(entry.id),
                str(entry.version_id),
                entry.action,
                entry.performed_by,
                _dt_to_db(entry.performed_at),
                entry.notes,
                entry.old_status,
                entry.new_status,
                entry.change_summary,
                _dt_to_db(entry.scheduled_publish_at),
            ),
        )


class SQLiteVersionRepo(_SQLiteRepo):
    """Version registry persistence. Sole writer of version status."""

    def get_by_id(self, version_id: UUID) -> CmsVersion | None:
        with self._transaction(immediate=False) as conn:
            return self._fetch_version(conn, version_id)

    def get_detail(self, version_id: UUID) -> VersionDetail | None:
        with self._transaction(immediate=False) as conn:
            version = self._fetch_version(conn, version_id)
            if version is None:
                return None
            blocks = self._fetch_blocks(conn, version_id)
        return VersionDetail(**version.model_dump(), content_blocks=blocks)

    def get_by_status(self, status: VersionStatus) -> CmsVersion | None:
        with self._transaction(immediate=False) as conn:
            return self._fetch_by_status(conn, status)

    def list_versions(self) -> list[CmsVersion]:
        with self._transaction(immediate=False) as conn:
            rows = conn.execute(_VERSION_SELECT + " ORDER BY v.sequence_number DESC").fetchall()
        return [_row_to_version(r) for r in rows]

    def list_due(self, now: datetime, limit: int = 10) -> list[CmsVersion]:
        """Drafts whose scheduled time has elapsed, earliest first."""
        with self._transaction(immediate=False) as conn:
            rows = conn.execute(
                _VERSION_SELECT
                + " WHERE v.status = 'Draft' AND v.scheduled_publish_at IS NOT NULL"
                " AND v.scheduled_publish_at <= ?"
                " ORDER BY v.scheduled_publish_at ASC LIMIT ?",
                (_dt_to_db(now), limit),
            ).fetchall()
        return [_row_to_version(r) for r in rows]

    def create_draft(self, version: CmsVersion) -> VersionDetail:
        """Insert a new draft and clone the published block set into it."""
        try:
            with self._transaction() as conn:
                existing = self._fetch_by_status(conn, "Draft")
                if existing is not None:
                    raise DraftAlreadyExistsError(existing.id)

                conn.execute(
                    """
                    INSERT INTO cms_versions (
                        id, status, notes, created_by, created_at, updated_at
                    ) VALUES (?, 'Draft', ?, ?, ?, ?)
                    """,
                    (
                        str(version.id),
                        version.notes,
                        version.created_by,
                        _dt_to_db(version.created_at),
                        _dt_to_db(version.created_at),
                    ),
                )
                blocks = self._copy_published_blocks(conn, version.id, version.created_at)
                self._insert_history(
                    conn,
                    VersionHistoryEntry(
                        version_id=version.id,
                        action="Created",
                        performed_by=version.created_by,
                        performed_at=version.created_at,
                        notes=version.notes,
                        new_status="Draft",
                        change_summary=f"Cloned {len(blocks)} published block(s)",
                    ),
                )
                created = self._require_version(conn, version.id)
        except sqlite3.IntegrityError as e:
            # Lost a race against a concurrent create on the partial unique index
            raise DraftAlreadyExistsError() from e

        logger.info(
            "Created draft version %s (#%d) with %d block(s)",
            created.id,
            created.sequence_number,
            len(blocks),
        )
        return VersionDetail(**created.model_dump(), content_blocks=blocks)

    def update_notes(
        self, version_id: UUID, notes: str | None, actor: str, now: datetime
    ) -> CmsVersion:
        with self._transaction() as conn:
            version = self._require_version(conn, version_id)
            if not can_edit_notes(version.status):
                raise InvalidStateError(version_id, version.status, "update notes of")
            conn.execute(
                "UPDATE cms_versions SET notes = ?, updated_at = ? WHERE id = ?",
                (notes, _dt_to_db(now), str(version_id)),
            )
            self._insert_history(
                conn,
                VersionHistoryEntry(
                    version_id=version_id,
                    action="Modified",
                    performed_by=actor,
                    performed_at=now,
                    notes=notes,
                    change_summary="Notes updated",
                ),
            )
            return self._require_version(conn, version_id)

    def delete_draft(self, version_id: UUID) -> None:
        with self._transaction() as conn:
            self._require_draft(conn, version_id, "delete")
            vid = str(version_id)
            conn.execute("DELETE FROM cms_content_blocks WHERE version_id = ?", (vid,))
            conn.execute("DELETE FROM cms_version_history WHERE version_id = ?", (vid,))
            conn.execute("DELETE FROM cms_versions WHERE id = ?", (vid,))
        logger.info("Discarded draft version %s", version_id)

    def set_schedule(
        self, version_id: UUID, publish_at: datetime, actor: str, now: datetime
    ) -> CmsVersion:
        with self._transaction() as conn:
            self._require_draft(conn, version_id, "schedule")
            if _as_utc(publish_at) <= _as_utc(now):
                raise InvalidScheduleError(
                    f"publish_at {publish_at.isoformat()} is not in the future"
                )
            conn.execute(
                "UPDATE cms_versions SET scheduled_publish_at = ?, updated_at = ? WHERE id = ?",
                (_dt_to_db(publish_at), _dt_to_db(now), str(version_id)),
            )
            self._insert_history(
                conn,
                VersionHistoryEntry(
                    version_id=version_id,
                    action="Scheduled",
                    performed_by=actor,
                    performed_at=now,
                    scheduled_publish_at=publish_at,
                ),
            )
            updated = self._require_version(conn, version_id)
        logger.info("Scheduled version %s for %s", version_id, publish_at.isoformat())
        return updated

    def clear_schedule(self, version_id: UUID, actor: str, now: datetime) -> CmsVersion:
        with self._transaction() as conn:
            version = self._require_draft(conn, version_id, "cancel the schedule of")
            conn.execute(
                "UPDATE cms_versions SET scheduled_publish_at = NULL, updated_at = ? "
                "WHERE id = ?",
                (_dt_to_db(now), str(version_id)),
            )
            self._insert_history(
                conn,
                VersionHistoryEntry(
                    version_id=version_id,
                    action="ScheduleCancelled",
                    performed_by=actor,
                    performed_at=now,
                    scheduled_publish_at=version.scheduled_publish_at,
                ),
            )
            return self._require_version(conn, version_id)

    def publish(self, version_id: UUID, actor: str, now: datetime) -> CmsVersion:
        """
        Archive the current published version and publish `version_id`.

        Both status changes commit together. The target update is a
        compare-and-swap on status = 'Draft', so a version can never be
        published twice even by overlapping callers.
        """
        with self._transaction() as conn:
            target = self._require_version(conn, version_id)
            try:
                published = transition(target, "Published", now, actor)
            except ValueError as e:
                raise InvalidStateError(version_id, target.status, "publish") from e

            previous = self._fetch_by_status(conn, "Published")
            if previous is not None:
                archived = transition(previous, "Archived", now)
                conn.execute(
                    "UPDATE cms_versions SET status = 'Archived' "
                    "WHERE id = ? AND status = 'Published'",
                    (str(previous.id),),
                )
                self._insert_history(
                    conn,
                    VersionHistoryEntry(
                        version_id=previous.id,
                        action="Archived",
                        performed_by=actor,
                        performed_at=now,
                        old_status=previous.status,
                        new_status=archived.status,
                        change_summary=f"Superseded by version #{target.sequence_number}",
                    ),
                )

            cursor = conn.execute(
                """
                UPDATE cms_versions
                SET status = 'Published', published_at = ?, published_by = ?,
                    scheduled_publish_at = NULL, updated_at = ?
                WHERE id = ? AND status = 'Draft'
                """,
                (
                    _dt_to_db(published.published_at),
                    published.published_by,
                    _dt_to_db(now),
                    str(version_id),
                ),
            )
            if cursor.rowcount != 1:
                raise InvalidStateError(version_id, target.status, "publish")

            self._insert_history(
                conn,
                VersionHistoryEntry(
                    version_id=version_id,
                    action="Published",
                    performed_by=actor,
                    performed_at=now,
                    old_status=target.status,
                    new_status="Published",
                    scheduled_publish_at=target.scheduled_publish_at,
                ),
            )
            result = self._require_version(conn, version_id)

        logger.info(
            "Published version %s (#%d)%s",
            result.id,
            result.sequence_number,
            f", archived {previous.id}" if previous else "",
        )
        return result

    def get_history(self, version_id: UUID) -> list[VersionHistoryEntry]:
        with self._transaction(immediate=False) as conn:
            self._require_version(conn, version_id)
            rows = conn.execute(
                "SELECT * FROM cms_version_history WHERE version_id = ? "
                "ORDER BY performed_at ASC, rowid ASC",
                (str(version_id),),
            ).fetchall()
        return [_row_to_history(r) for r in rows]


class SQLiteBlockRepo(_SQLiteRepo):
    """Content block persistence. Rejects writes to non-draft versions."""

    def list_blocks(
        self,
        version_id: UUID,
        section_key: str | None = None,
        language: str | None = None,
    ) -> list[ContentBlock]:
        query = "SELECT * FROM cms_content_blocks WHERE version_id = ?"
        params: list[Any] = [str(version_id)]
        if section_key:
            query += " AND section_key = ?"
            params.append(section_key)
        if language:
            query += " AND language = ?"
            params.append(language)
        query += " ORDER BY sort_order ASC, block_key ASC"

        with self._transaction(immediate=False) as conn:
            self._require_version(conn, version_id)
            rows = conn.execute(query, params).fetchall()
        return [_row_to_block(r) for r in rows]

    def list_published(
        self,
        section_key: str | None = None,
        language: str | None = None,
        section_prefix: str | None = None,
        block_key: str | None = None,
    ) -> list[ContentBlock]:
        """Blocks of whichever version is Published, resolved in one statement."""
        query = (
            "SELECT b.* FROM cms_content_blocks b "
            "JOIN cms_versions v ON v.id = b.version_id "
            "WHERE v.status = 'Published'"
        )
        params: list[Any] = []
        if section_key:
            query += " AND b.section_key = ?"
            params.append(section_key)
        if section_prefix:
            query += " AND (b.section_key = ? OR substr(b.section_key, 1, ?) = ?)"
            params.extend([section_prefix, len(section_prefix) + 1, section_prefix + "."])
        if block_key:
            query += " AND b.block_key = ?"
            params.append(block_key)
        if language:
            query += " AND b.language = ?"
            params.append(language)
        query += " ORDER BY b.section_key ASC, b.sort_order ASC, b.block_key ASC"

        with self._transaction(immediate=False) as conn:
            rows = conn.execute(query, params).fetchall()
        return [_row_to_block(r) for r in rows]

    def get_block(self, version_id: UUID, block_id: UUID) -> ContentBlock | None:
        with self._transaction(immediate=False) as conn:
            row = conn.execute(
                "SELECT * FROM cms_content_blocks WHERE id = ? AND version_id = ?",
                (str(block_id), str(version_id)),
            ).fetchone()
        return _row_to_block(row) if row else None

    def create_block(self, block: ContentBlock) -> ContentBlock:
        try:
            with self._transaction() as conn:
                self._require_draft(conn, block.version_id, "add blocks to")
                self._insert_block(conn, block)
        except sqlite3.IntegrityError as e:
            raise DuplicateKeyError(block.version_id, block.block_key, block.language) from e
        return block

    def update_block(
        self,
        version_id: UUID,
        block_id: UUID,
        content: str,
        now: datetime,
        sort_order: int | None = None,
        metadata: str | None = None,
    ) -> ContentBlock:
        with self._transaction() as conn:
            self._require_draft(conn, version_id, "edit blocks of")
            self._apply_update(conn, version_id, block_id, content, now, sort_order, metadata)
            row = conn.execute(
                "SELECT * FROM cms_content_blocks WHERE id = ?", (str(block_id),)
            ).fetchone()
        return _row_to_block(row)

    def bulk_update(
        self, version_id: UUID, items: Sequence[BulkUpdateItem], now: datetime
    ) -> list[ContentBlock]:
        """Apply every item or none of them."""
        with self._transaction() as conn:
            self._require_draft(conn, version_id, "edit blocks of")
            failures = self._missing_blocks(conn, version_id, [i.id for i in items])
            if failures:
                raise BulkUpdateError(failures)

            for item in items:
                self._apply_update(
                    conn, version_id, item.id, item.content, now, item.sort_order, item.metadata
                )
            ids = [str(i.id) for i in items]
            rows = conn.execute(
                f"SELECT * FROM cms_content_blocks WHERE id IN ({','.join('?' * len(ids))})",
                ids,
            ).fetchall() if ids else []

        by_id = {r["id"]: _row_to_block(r) for r in rows}
        return [by_id[str(i.id)] for i in items]

    def reorder(self, version_id: UUID, items: Sequence[ReorderItem], now: datetime) -> None:
        with self._transaction() as conn:
            self._require_draft(conn, version_id, "reorder blocks of")
            failures = self._missing_blocks(conn, version_id, [i.block_id for i in items])
            if failures:
                raise BulkUpdateError(failures)
            conn.executemany(
                "UPDATE cms_content_blocks SET sort_order = ?, updated_at = ? "
                "WHERE id = ? AND version_id = ?",
                [
                    (i.new_sort_order, _dt_to_db(now), str(i.block_id), str(version_id))
                    for i in items
                ],
            )

    def delete_block(self, version_id: UUID, block_id: UUID) -> None:
        with self._transaction() as conn:
            self._require_draft(conn, version_id, "delete blocks of")
            cursor = conn.execute(
                "DELETE FROM cms_content_blocks WHERE id = ? AND version_id = ?",
                (str(block_id), str(version_id)),
            )
            if cursor.rowcount == 0:
                raise NotFoundError("Block", block_id)

    def clone_published(self, target_version_id: UUID, now: datetime) -> list[ContentBlock]:
        """Replace the draft's blocks with a fresh copy of the live block set."""
        with self._transaction() as conn:
            self._require_draft(conn, target_version_id, "clone published content into")
            conn.execute(
                "DELETE FROM cms_content_blocks WHERE version_id = ?", (str(target_version_id),)
            )
            blocks = self._copy_published_blocks(conn, target_version_id, now)
        logger.info("Reset draft %s to %d published block(s)", target_version_id, len(blocks))
        return blocks

    # --- Internals ---

    def _missing_blocks(
        self, conn: sqlite3.Connection, version_id: UUID, block_ids: Sequence[UUID]
    ) -> list[BulkItemFailure]:
        rows = conn.execute(
            "SELECT id FROM cms_content_blocks WHERE version_id = ?", (str(version_id),)
        ).fetchall()
        known = {r["id"] for r in rows}
        return [
            BulkItemFailure(block_id=bid, reason=f"Block {bid} not found in version {version_id}")
            for bid in block_ids
            if str(bid) not in known
        ]

    def _apply_update(
        self,
        conn: sqlite3.Connection,
        version_id: UUID,
        block_id: UUID,
        content: str,
        now: datetime,
        sort_order: int | None,
        metadata: str | None,
    ) -> None:
        sets = ["content = ?", "updated_at = ?"]
        params: list[Any] = [content, _dt_to_db(now)]
        if sort_order is not None:
            sets.append("sort_order = ?")
            params.append(sort_order)
        if metadata is not None:
            sets.append("metadata = ?")
            params.append(metadata)
        params.extend([str(block_id), str(version_id)])

        cursor = conn.execute(
            f"UPDATE cms_content_blocks SET {', '.join(sets)} WHERE id = ? AND version_id = ?",
            params,
        )
        if cursor.rowcount == 0:
            raise NotFoundError("Block", block_id)
