import pytest

from app import create_app
from extensions.database import db
from services.seed_service import SeedService


@pytest.fixture
def app(tmp_path):
    """每个用例一个全新的应用 + 内存数据库 + 临时上传目录"""
    app = create_app("testing", overrides={
        "UPLOAD_PREFERRED_DIR": str(tmp_path / "uploads"),
        "ATTACHMENT_STORAGE_DIR": str(tmp_path / "fallback"),
        "LOG_DIR": str(tmp_path / "logs"),
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return app.extensions["entity_store"]


@pytest.fixture
def seeded(store):
    """写入默认用户 / 模块 / 版本"""
    SeedService(store).seed_defaults()
    return store


@pytest.fixture
def make_bug(client):
    def _make(**fields):
        payload = {"title": "Login button unresponsive", "reporter_name": "Alice", "reporter_id": "user-1"}
        payload.update(fields)
        resp = client.post("/api/bugs", json=payload)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["bug_id"]

    return _make


@pytest.fixture
def make_feature(client):
    def _make(**fields):
        payload = {
            "title": "Bulk export",
            "module_id": "MOD_INV",
            "target_version": "VER_1_2_0",
            "creator_name": "Alice",
        }
        payload.update(fields)
        resp = client.post("/api/features", json=payload)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["feature_id"]

    return _make


@pytest.fixture
def make_session(client):
    def _make(**fields):
        payload = {"tester_name": "Alice", "tester_email": "alice@example.com"}
        payload.update(fields)
        resp = client.post("/api/sessions", json=payload)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["session_id"]

    return _make
