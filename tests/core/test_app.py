# -*- coding: utf-8 -*-
import logging

import pytest
from sqlalchemy.exc import OperationalError, SQLAlchemyError

from app import create_app
from extensions.store import EntityStore, get_store
from repositories.bug_repository import BugRepository
from repositories.history_repository import HistoryRepository


class TestErrorShape:
    """所有错误统一为 {"error": msg}"""

    def test_unknown_route(self, client):
        resp = client.get("/api/does-not-exist")
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Not found"}

    def test_method_not_allowed(self, client):
        resp = client.delete("/api/statistics")
        assert resp.status_code == 405
        assert resp.get_json() == {"error": "Method not allowed"}

    def test_request_too_large(self, client, app, make_bug):
        bug_id = make_bug()
        app.config["MAX_CONTENT_LENGTH"] = 16
        resp = client.post(f"/api/bugs/{bug_id}/attachments", data={"notes": "x" * 64},
                           content_type="multipart/form-data")
        assert resp.status_code == 413
        assert resp.get_json() == {"error": "File too large"}

    def test_storage_failure_surfaces_store_message(self, client, store, monkeypatch):
        def boom():
            raise OperationalError("INSERT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(store, "commit", boom)
        resp = client.post("/api/modules", json={"name": "Broken"})
        assert resp.status_code == 500
        assert resp.get_json() == {"error": "disk I/O error"}

    def test_read_failure_surfaces_store_message(self, client, monkeypatch):
        def broken(self, args):
            raise OperationalError("SELECT", {}, Exception("no such table: bugs"))

        monkeypatch.setattr(BugRepository, "list", broken)
        resp = client.get("/api/bugs")
        assert resp.status_code == 500
        assert resp.get_json() == {"error": "no such table: bugs"}

    def test_request_id_echoed(self, client):
        resp = client.get("/health", headers={"X-Request-ID": "req-123"})
        assert resp.headers["X-Request-ID"] == "req-123"


class TestHistoryIsBestEffort:
    """历史写失败不影响主操作，只记日志"""

    def test_update_succeeds_when_history_fails(self, client, make_bug, monkeypatch, caplog):
        bug_id = make_bug()

        def fail(self, entity):
            raise SQLAlchemyError("history table locked")

        monkeypatch.setattr(HistoryRepository, "add", fail)
        with caplog.at_level(logging.ERROR, logger="services.history_service"):
            resp = client.put(f"/api/bugs/{bug_id}", json={"title": "Renamed"})

        assert resp.status_code == 200
        assert client.get(f"/api/bugs/{bug_id}").get_json()["title"] == "Renamed"
        assert any("Failed to record bug history" in r.getMessage() for r in caplog.records)
        monkeypatch.undo()
        assert [h["action"] for h in client.get(f"/api/bugs/{bug_id}/history").get_json()] == ["Created"]


class TestStore:
    """EntityStore 生命周期"""

    def test_registered_and_healthy(self, app, store):
        assert isinstance(store, EntityStore)
        assert get_store() is store
        assert store.ping() is True
        assert store.uploads_available() is True
        assert store.upload_dir.endswith("uploads")

    def test_transaction_rolls_back(self, store):
        from models.module import Module

        with pytest.raises(RuntimeError):
            with store.transaction() as session:
                session.add(Module(module_id="MOD_TX", name="Tx"))
                session.flush()
                raise RuntimeError("abort")
        assert store.session.get(Module, 1) is None

    def test_falls_back_when_preferred_dir_unusable(self, tmp_path):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("file in the way")
        app = create_app("testing", overrides={
            "UPLOAD_PREFERRED_DIR": str(blocker),
            "ATTACHMENT_STORAGE_DIR": str(tmp_path / "fallback"),
        })
        store = app.extensions["entity_store"]
        assert store.upload_dir == str(tmp_path / "fallback")
        store.close()
        store.close()

    def test_get_store_requires_init(self):
        from flask import Flask

        with Flask("bare").app_context():
            with pytest.raises(RuntimeError):
                get_store()


def test_health(client):
    body = client.get("/health").get_json()
    assert body["status"] == "ok"
    assert body["database"] == "connected"
    assert body["uploads"] == "available"
    assert body["environment"] == "testing"
    assert body["timestamp"]


def test_seed_is_idempotent(seeded, client):
    from services.seed_service import SeedService

    SeedService(seeded).seed_defaults()
    assert len(client.get("/api/modules").get_json()) == 7
    assert len(client.get("/api/versions").get_json()) == 3
    assert client.get("/api/versions/current").get_json()["version_id"] == "VER_1_2_0"
