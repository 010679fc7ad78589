from datetime import UTC, datetime, timedelta
from uuid import UUID

import pytest

from cms_versioning.adapters.sqlite.migrator import SQLiteMigrator
from cms_versioning.adapters.sqlite.repos import SQLiteBlockRepo, SQLiteVersionRepo
from cms_versioning.components.blocks import CreateBlockInput, run_create
from cms_versioning.components.publish import PublishVersionInput, run_publish
from cms_versioning.components.versions import CreateDraftInput, run_create_draft

EDITOR = "editor@example.com"


class FixedClock:
    """Deterministic TimePort; advance() moves time forward."""

    def __init__(self, now: datetime | None = None) -> None:
        self._now = now or datetime(2024, 6, 15, 12, 0, 0, tzinfo=UTC)

    def now_utc(self) -> datetime:
        return self._now

    def advance(self, **kwargs: float) -> datetime:
        self._now = self._now + timedelta(**kwargs)
        return self._now


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def db_path(tmp_path) -> str:
    path = str(tmp_path / "cms.db")
    SQLiteMigrator(path).run_migrations()
    return path


@pytest.fixture
def version_repo(db_path: str) -> SQLiteVersionRepo:
    return SQLiteVersionRepo(db_path)


@pytest.fixture
def block_repo(db_path: str) -> SQLiteBlockRepo:
    return SQLiteBlockRepo(db_path)


@pytest.fixture
def publish_blocks(version_repo, block_repo, clock):
    """
    Factory: create a draft holding the given {block_key: content} pairs
    (section taken from the key prefix) and publish it. Returns the version id.
    """

    def _publish(contents: dict[str, str], language: str = "en") -> UUID:
        draft = run_create_draft(CreateDraftInput(actor=EDITOR), repo=version_repo, time=clock)
        assert draft.success, draft.errors
        assert draft.version is not None
        version_id = draft.version.id

        existing = {b.block_key: b for b in draft.version.content_blocks}
        for key, content in contents.items():
            if key in existing:
                block_repo.update_block(version_id, existing[key].id, content, clock.now_utc())
                continue
            created = run_create(
                CreateBlockInput(
                    version_id=version_id,
                    block_key=key,
                    block_type="Text",
                    content=content,
                    section_key=key.rsplit(".", 1)[0] if "." in key else key,
                    language=language,
                ),
                repo=block_repo,
                time=clock,
            )
            assert created.success, created.errors

        published = run_publish(
            PublishVersionInput(version_id=version_id, actor=EDITOR),
            repo=version_repo,
            time=clock,
        )
        assert published.success, published.errors
        clock.advance(minutes=1)
        return version_id

    return _publish
