"""Integration tests for the CMS admin and public content routes."""

import sqlite3
from datetime import timedelta
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from cms_versioning.adapters.sqlite.repos import SQLiteBlockRepo
from cms_versioning.api.deps import Settings, get_block_repo, get_clock, get_rules, get_settings
from cms_versioning.api.main import app
from cms_versioning.rules.loader import load_rules

ADMIN = "/api/v1/admin/cms"
CONTENT = "/api/v1/content"
HEADERS = {"X-Actor-Id": "editor@example.com"}


@pytest.fixture
def client(db_path, clock):
    def _settings():
        s = Settings()
        s.db_path = db_path
        return s

    rules = load_rules()
    app.dependency_overrides[get_settings] = _settings
    app.dependency_overrides[get_rules] = lambda: rules
    app.dependency_overrides[get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()


def _new_draft(client) -> dict:
    resp = client.post(f"{ADMIN}/versions", headers=HEADERS)
    assert resp.status_code == 201
    return resp.json()


def _add_block(client, version_id: str, key: str, content: str, **extra) -> dict:
    body = {
        "blockKey": key,
        "sectionKey": key.rsplit(".", 1)[0],
        "blockType": "Text",
        "content": content,
        **extra,
    }
    resp = client.post(f"{ADMIN}/versions/{version_id}/blocks", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()


def _publish(client, version_id: str):
    return client.post(f"{ADMIN}/versions/{version_id}/publish", headers=HEADERS)


class TestHealth:
    def test_health(self, client) -> None:
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"


class TestVersionRoutes:
    def test_create_draft_uses_camel_case(self, client) -> None:
        resp = client.post(f"{ADMIN}/versions", json={"notes": "spring copy"}, headers=HEADERS)

        assert resp.status_code == 201
        data = resp.json()
        assert data["status"] == "Draft"
        assert data["sequenceNumber"] == 1
        assert data["createdBy"] == "editor@example.com"
        assert data["notes"] == "spring copy"
        assert data["contentBlocks"] == []

    def test_anonymous_actor(self, client) -> None:
        resp = client.post(f"{ADMIN}/versions")
        assert resp.json()["createdBy"] == "anonymous"

    def test_second_draft_conflicts(self, client) -> None:
        _new_draft(client)

        resp = client.post(f"{ADMIN}/versions", headers=HEADERS)

        assert resp.status_code == 409
        assert resp.json()["detail"]["code"] == "draft_already_exists"

    def test_active_draft(self, client) -> None:
        assert client.get(f"{ADMIN}/versions/active").status_code == 204

        draft = _new_draft(client)
        resp = client.get(f"{ADMIN}/versions/active")

        assert resp.status_code == 200
        assert resp.json()["id"] == draft["id"]

    def test_get_unknown_version(self, client) -> None:
        resp = client.get(f"{ADMIN}/versions/{uuid4()}")

        assert resp.status_code == 404
        assert resp.json()["detail"]["code"] == "not_found"

    def test_update_notes_and_list(self, client) -> None:
        draft = _new_draft(client)

        resp = client.put(f"{ADMIN}/versions/{draft['id']}", json={"notes": "v2"})
        listed = client.get(f"{ADMIN}/versions").json()

        assert resp.status_code == 200
        assert resp.json()["notes"] == "v2"
        assert [v["notes"] for v in listed] == ["v2"]

    def test_delete_draft(self, client) -> None:
        draft = _new_draft(client)

        resp = client.delete(f"{ADMIN}/versions/{draft['id']}")

        assert resp.status_code == 204
        assert client.get(f"{ADMIN}/versions/{draft['id']}").status_code == 404

    def test_publish_and_archive(self, client, clock) -> None:
        first = _new_draft(client)
        _add_block(client, first["id"], "hero.title", "Old")
        assert _publish(client, first["id"]).status_code == 200
        clock.advance(minutes=1)

        second = _new_draft(client)
        assert second["contentBlockCount"] == 1
        resp = _publish(client, second["id"])

        assert resp.status_code == 200
        assert resp.json()["status"] == "Published"
        assert resp.json()["publishedBy"] == "editor@example.com"
        old = client.get(f"{ADMIN}/versions/{first['id']}").json()
        assert old["status"] == "Archived"

    def test_publish_twice_conflicts(self, client) -> None:
        draft = _new_draft(client)
        _publish(client, draft["id"])

        resp = _publish(client, draft["id"])

        assert resp.status_code == 409
        assert resp.json()["detail"]["code"] == "invalid_state"

    def test_schedule_and_cancel(self, client, clock) -> None:
        draft = _new_draft(client)
        when = (clock.now_utc() + timedelta(hours=2)).isoformat()

        resp = client.post(
            f"{ADMIN}/versions/{draft['id']}/schedule", json={"publishAt": when}, headers=HEADERS
        )
        assert resp.status_code == 204
        detail = client.get(f"{ADMIN}/versions/{draft['id']}").json()
        assert detail["scheduledPublishAt"] is not None

        resp = client.delete(f"{ADMIN}/versions/{draft['id']}/schedule", headers=HEADERS)
        assert resp.status_code == 200
        assert resp.json()["scheduledPublishAt"] is None

        history = client.get(f"{ADMIN}/versions/{draft['id']}/history").json()
        assert [e["action"] for e in history][-2:] == ["Scheduled", "ScheduleCancelled"]

    def test_schedule_in_past_rejected(self, client, clock) -> None:
        draft = _new_draft(client)
        when = (clock.now_utc() - timedelta(minutes=1)).isoformat()

        resp = client.post(
            f"{ADMIN}/versions/{draft['id']}/schedule", json={"publishAt": when}
        )

        assert resp.status_code == 422
        assert resp.json()["detail"]["code"] == "invalid_schedule"

    def test_diff_against_published(self, client, clock) -> None:
        first = _new_draft(client)
        _add_block(client, first["id"], "hero.title", "Old")
        _add_block(client, first["id"], "hero.subtitle", "Gone")
        _publish(client, first["id"])
        clock.advance(minutes=1)

        draft = _new_draft(client)
        blocks = {b["blockKey"]: b for b in draft["contentBlocks"]}
        client.put(
            f"{ADMIN}/versions/{draft['id']}/blocks/{blocks['hero.title']['id']}",
            json={"content": "New"},
        )
        client.delete(f"{ADMIN}/versions/{draft['id']}/blocks/{blocks['hero.subtitle']['id']}")
        _add_block(client, draft["id"], "hero.cta", "Buy")

        resp = client.get(f"{ADMIN}/versions/{draft['id']}/diff")

        assert resp.status_code == 200
        data = resp.json()
        assert data["hasChanges"] is True
        assert data["baseVersionId"] == first["id"]
        assert data["language"] == "en"
        assert (data["totalAdded"], data["totalRemoved"], data["totalModified"]) == (1, 1, 1)
        statuses = {b["blockKey"]: b["status"] for b in data["sections"][0]["blocks"]}
        assert statuses == {
            "hero.cta": "added",
            "hero.subtitle": "removed",
            "hero.title": "modified",
        }


class TestBlockRoutes:
    def test_create_list_get(self, client) -> None:
        draft = _new_draft(client)
        created = _add_block(client, draft["id"], "hero.title", "Hello", sortOrder=3)

        assert created["language"] == "en"
        assert created["sortOrder"] == 3
        listed = client.get(f"{ADMIN}/versions/{draft['id']}/blocks?sectionKey=hero").json()
        assert [b["id"] for b in listed] == [created["id"]]
        fetched = client.get(f"{ADMIN}/versions/{draft['id']}/blocks/{created['id']}")
        assert fetched.json()["content"] == "Hello"

    def test_duplicate_key(self, client) -> None:
        draft = _new_draft(client)
        _add_block(client, draft["id"], "hero.title", "Hello")

        resp = client.post(
            f"{ADMIN}/versions/{draft['id']}/blocks",
            json={
                "blockKey": "hero.title",
                "sectionKey": "hero",
                "blockType": "Text",
                "content": "Again",
            },
        )

        assert resp.status_code == 409
        assert resp.json()["detail"]["code"] == "duplicate_key"

    def test_unsupported_language(self, client) -> None:
        draft = _new_draft(client)

        resp = client.post(
            f"{ADMIN}/versions/{draft['id']}/blocks",
            json={
                "blockKey": "hero.title",
                "sectionKey": "hero",
                "blockType": "Text",
                "content": "Hallo",
                "language": "xx",
            },
        )

        assert resp.status_code == 422
        assert resp.json()["detail"]["field"] == "language"

    def test_bulk_update_all_or_nothing(self, client) -> None:
        draft = _new_draft(client)
        a = _add_block(client, draft["id"], "hero.a", "a1")
        bad = str(uuid4())

        resp = client.put(
            f"{ADMIN}/versions/{draft['id']}/blocks/bulk",
            json={"items": [{"id": a["id"], "content": "a2"}, {"id": bad, "content": "x"}]},
        )

        assert resp.status_code == 422
        detail = resp.json()["detail"]
        assert detail["code"] == "bulk_update_failure"
        assert [f["blockId"] for f in detail["failures"]] == [bad]
        unchanged = client.get(f"{ADMIN}/versions/{draft['id']}/blocks/{a['id']}").json()
        assert unchanged["content"] == "a1"

    def test_bulk_update(self, client) -> None:
        draft = _new_draft(client)
        a = _add_block(client, draft["id"], "hero.a", "a1")
        b = _add_block(client, draft["id"], "hero.b", "b1")

        resp = client.put(
            f"{ADMIN}/versions/{draft['id']}/blocks/bulk",
            json={
                "items": [
                    {"id": a["id"], "content": "a2"},
                    {"id": b["id"], "content": "b2", "sortOrder": 4},
                ]
            },
        )

        assert resp.status_code == 200
        assert [(x["content"], x["sortOrder"]) for x in resp.json()] == [("a2", 0), ("b2", 4)]

    def test_empty_bulk_rejected(self, client) -> None:
        draft = _new_draft(client)
        resp = client.put(f"{ADMIN}/versions/{draft['id']}/blocks/bulk", json={"items": []})
        assert resp.status_code == 422

    def test_reorder(self, client) -> None:
        draft = _new_draft(client)
        a = _add_block(client, draft["id"], "hero.a", "a")
        b = _add_block(client, draft["id"], "hero.b", "b", sortOrder=1)

        resp = client.put(
            f"{ADMIN}/versions/{draft['id']}/blocks/reorder",
            json={
                "items": [
                    {"blockId": a["id"], "newSortOrder": 2},
                    {"blockId": b["id"], "newSortOrder": 0},
                ]
            },
        )

        assert resp.status_code == 204
        listed = client.get(f"{ADMIN}/versions/{draft['id']}/blocks").json()
        assert [x["blockKey"] for x in listed] == ["hero.b", "hero.a"]

    def test_writes_to_published_rejected(self, client) -> None:
        draft = _new_draft(client)
        block = _add_block(client, draft["id"], "hero.title", "Live")
        _publish(client, draft["id"])

        resp = client.put(
            f"{ADMIN}/versions/{draft['id']}/blocks/{block['id']}", json={"content": "x"}
        )

        assert resp.status_code == 409
        assert resp.json()["detail"]["code"] == "invalid_state"

    def test_clone_published(self, client, clock) -> None:
        first = _new_draft(client)
        _add_block(client, first["id"], "hero.title", "Live")
        _publish(client, first["id"])
        clock.advance(minutes=1)
        draft = _new_draft(client)
        _add_block(client, draft["id"], "hero.extra", "scratch")

        resp = client.post(f"{ADMIN}/versions/{draft['id']}/blocks/clone-published")

        assert resp.status_code == 200
        assert [b["blockKey"] for b in resp.json()] == ["hero.title"]

    def test_delete_unknown_block(self, client) -> None:
        draft = _new_draft(client)
        resp = client.delete(f"{ADMIN}/versions/{draft['id']}/blocks/{uuid4()}")
        assert resp.status_code == 404


class TestPublicContentRoutes:
    def test_empty_before_first_publish(self, client) -> None:
        draft = _new_draft(client)
        _add_block(client, draft["id"], "hero.title", "Secret")

        resp = client.get(CONTENT)

        assert resp.status_code == 200
        assert resp.json() == {"versionId": None, "sections": {}}

    def test_published_content(self, client) -> None:
        draft = _new_draft(client)
        _add_block(client, draft["id"], "landing.title", "Home")
        _add_block(client, draft["id"], "landing.hero.headline", "Hi")
        _add_block(client, draft["id"], "pricing.title", "Plans")
        _publish(client, draft["id"])

        everything = client.get(CONTENT).json()
        page = client.get(f"{CONTENT}/pages/landing").json()
        block = client.get(f"{CONTENT}/pricing.title")

        assert everything["versionId"] == draft["id"]
        assert sorted(everything["sections"]) == ["landing", "landing.hero", "pricing"]
        assert sorted(page["sections"]) == ["landing", "landing.hero"]
        assert block.status_code == 200
        assert block.json()["content"] == "Plans"

    def test_section_filter(self, client) -> None:
        draft = _new_draft(client)
        _add_block(client, draft["id"], "hero.title", "Hi")
        _add_block(client, draft["id"], "footer.note", "(c)")
        _publish(client, draft["id"])

        resp = client.get(f"{CONTENT}?sectionKey=footer")

        assert list(resp.json()["sections"]) == ["footer"]

    def test_missing_block(self, client) -> None:
        resp = client.get(f"{CONTENT}/nope.nothing")

        assert resp.status_code == 404
        assert resp.json()["detail"]["code"] == "not_found"

    def test_locked_database_is_retryable(self, client, db_path) -> None:
        app.dependency_overrides[get_block_repo] = lambda: SQLiteBlockRepo(db_path, timeout=0.1)
        lock = sqlite3.connect(db_path, isolation_level=None)
        lock.execute("BEGIN EXCLUSIVE")
        try:
            resp = client.get(CONTENT)
        finally:
            lock.execute("ROLLBACK")
            lock.close()

        assert resp.status_code == 503
        assert resp.json()["detail"]["code"] == "transient"
