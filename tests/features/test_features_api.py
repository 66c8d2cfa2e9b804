# -*- coding: utf-8 -*-
import pytest


def _history(client, feature_id, action=None):
    rows = client.get(f"/api/features/{feature_id}/history").get_json()
    return [h for h in rows if action is None or h["action"] == action]


class TestCreateFeature:
    """创建功能规划"""

    def test_create(self, client, make_feature):
        feature_id = make_feature(acceptance_criteria=["exports CSV"], progress_percentage="40")
        assert feature_id.startswith("FEAT-")

        feature = client.get(f"/api/features/{feature_id}").get_json()
        assert feature["status"] == "Planned"
        assert feature["progress_percentage"] == 40
        assert feature["acceptance_criteria"] == ["exports CSV"]
        assert feature["linked_tests"] == []
        assert feature["breaking_changes"] is False
        assert [h["action"] for h in _history(client, feature_id)] == ["Created"]

    def test_missing_fields_listed(self, client):
        resp = client.post("/api/features", json={"title": "Only title"})
        assert resp.status_code == 400
        assert resp.get_json()["fields"] == ["module_id", "target_version", "creator_name"]

    @pytest.mark.parametrize("progress", [-1, 101, "lots"])
    def test_progress_bounds(self, client, make_feature, progress):
        resp = client.post("/api/features", json={
            "title": "x", "module_id": "MOD_INV", "target_version": "VER_1_2_0",
            "creator_name": "Alice", "progress_percentage": progress,
        })
        assert resp.status_code == 400


class TestUpdateFeature:
    """部分更新"""

    def test_field_level_history(self, client, make_feature):
        feature_id = make_feature()
        resp = client.put(f"/api/features/{feature_id}", json={
            "title": "Bulk export v2",
            "priority": "P1",
            "progress_percentage": 50,
            "module_id": "MOD_INV",  # 未变化
            "creator_name": "Mallory",  # 不可变
        })
        assert resp.status_code == 200
        assert sorted(resp.get_json()["changed_fields"]) == ["priority", "progress_percentage", "title"]

        rows = _history(client, feature_id, "Updated")
        assert len(rows) == 3
        assert {h["changed_by_name"] for h in rows} == {"Unknown"}
        progress = next(h for h in rows if h["field_name"] == "progress_percentage")
        assert (progress["old_value"], progress["new_value"]) == ("0", "50")

        feature = client.get(f"/api/features/{feature_id}").get_json()
        assert feature["creator_name"] == "Alice"

    def test_update_rejects_bad_progress(self, client, make_feature):
        resp = client.put(f"/api/features/{make_feature()}", json={"progress_percentage": 150})
        assert resp.status_code == 400

    def test_change_status(self, client, make_feature):
        feature_id = make_feature()
        resp = client.put(f"/api/features/{feature_id}/status", json={"status": "Completed", "changed_by_name": "PM"})
        assert resp.status_code == 200
        rows = _history(client, feature_id, "Status Changed")
        assert [(h["old_value"], h["new_value"], h["changed_by_name"]) for h in rows] == [("Planned", "Completed", "PM")]

    def test_change_status_invalid(self, client, make_feature):
        assert client.put(f"/api/features/{make_feature()}/status", json={"status": "Shipped"}).status_code == 400


class TestDeleteFeature:
    def test_cancel(self, client, make_feature):
        feature_id = make_feature()
        resp = client.delete(f"/api/features/{feature_id}")
        assert resp.get_json()["message"] == "Feature cancelled successfully"

        feature = client.get(f"/api/features/{feature_id}").get_json()
        assert feature["is_deleted"] is True
        assert feature["status"] == "Cancelled"

        # 默认列表隐藏已删除，show_deleted=all 可见
        assert feature_id not in [f["feature_id"] for f in client.get("/api/features").get_json()]
        assert feature_id in [f["feature_id"] for f in client.get("/api/features?show_deleted=all").get_json()]
        assert len(_history(client, feature_id, "Deleted")) == 1


class TestFeatureListing:
    def test_filters(self, client, make_feature):
        a = make_feature(priority="P1", owner_id="user-1", feature_type="New Feature")
        b = make_feature(priority="P2", target_version="VER_1_1_0")
        c = make_feature(priority="P3", module_id="MOD_FIN")

        def ids(query):
            return [f["feature_id"] for f in client.get(f"/api/features?{query}").get_json()]

        assert ids("owner_id=user-1") == [a]
        assert ids("target_version=VER_1_1_0") == [b]
        assert ids("feature_type=New%20Feature") == [a]
        assert set(ids("")) == {a, b, c}

        by_version = [f["feature_id"] for f in client.get("/api/features/by-version/VER_1_2_0").get_json()]
        assert by_version == [a, c]
        by_module = [f["feature_id"] for f in client.get("/api/features/by-module/MOD_INV").get_json()]
        assert by_module == [a, b]


class TestFeatureTests:
    """关联测试用例"""

    def test_link_unlink(self, client, make_feature):
        client.post("/api/custom-tests", json={"test_id": "TEST-9", "title": "Export", "module": "Inventory"})
        feature_id = make_feature()

        first = client.post(f"/api/features/{feature_id}/link-test", json={"test_id": "TEST-9"})
        assert first.get_json()["message"] == "Test linked to feature"
        again = client.post(f"/api/features/{feature_id}/link-test", json={"test_id": "TEST-9"})
        assert again.status_code == 200
        assert again.get_json()["message"] == "Test already linked"
        assert len(_history(client, feature_id, "Test Linked")) == 1

        assert [t["test_id"] for t in client.get(f"/api/features/{feature_id}/linked-tests").get_json()] == ["TEST-9"]
        assert [f["feature_id"] for f in client.get("/api/tests/TEST-9/linked-features").get_json()] == [feature_id]

        resp = client.delete(f"/api/features/{feature_id}/unlink-test/TEST-9")
        assert resp.get_json()["message"] == "Test unlinked from feature"
        assert client.get(f"/api/features/{feature_id}").get_json()["linked_tests"] == []
        assert len(_history(client, feature_id, "Test Unlinked")) == 1

    def test_link_requires_test_id(self, client, make_feature):
        assert client.post(f"/api/features/{make_feature()}/link-test", json={}).status_code == 400


class TestDependencies:
    def test_add_list_remove(self, client, make_feature):
        a = make_feature(title="A")
        b = make_feature(title="B")
        resp = client.post(f"/api/features/{a}/dependencies", json={"depends_on_feature_id": b, "is_critical": "true"})
        assert resp.status_code == 201
        dependency_id = resp.get_json()["dependency_id"]

        deps = client.get(f"/api/features/{b}/dependencies").get_json()
        assert [(d["feature_id"], d["depends_on_feature_id"], d["dependency_type"], d["is_critical"]) for d in deps] == [
            (a, b, "blocks", True),
        ]

        assert client.delete(f"/api/features/{a}/dependencies/{dependency_id}").status_code == 200
        assert client.get(f"/api/features/{a}/dependencies").get_json() == []
        assert client.delete(f"/api/features/{a}/dependencies/{dependency_id}").status_code == 404

    def test_self_and_missing_targets(self, client, make_feature):
        a = make_feature()
        assert client.post(f"/api/features/{a}/dependencies", json={"depends_on_feature_id": a}).status_code == 400
        assert client.post(f"/api/features/{a}/dependencies", json={"depends_on_feature_id": "FEAT-x"}).status_code == 404
        assert client.post(f"/api/features/{a}/dependencies", json={}).status_code == 400


class TestFeatureComments:
    def test_author_required(self, client, make_feature):
        feature_id = make_feature()
        resp = client.post(f"/api/features/{feature_id}/comments", json={"comment_text": "LGTM"})
        assert resp.status_code == 400
        assert resp.get_json()["fields"] == ["author_name"]

        ok = client.post(f"/api/features/{feature_id}/comments", json={"comment_text": "LGTM", "author_name": "Ann"})
        assert ok.status_code == 201
        assert len(client.get(f"/api/features/{feature_id}/comments").get_json()) == 1


def test_feature_stats_exclude_deleted(client, make_feature):
    make_feature(priority="P1")
    make_feature(priority="P2", status="In Development")
    gone = make_feature(priority="P1")
    client.delete(f"/api/features/{gone}")

    stats = client.get("/api/features/stats").get_json()
    assert stats["total_features"] == 2
    assert stats["planned"] == 1
    assert stats["in_development"] == 1
    assert stats["p1_features"] == 1
    assert stats["by_status"] == {"Planned": 1, "In Development": 1}
