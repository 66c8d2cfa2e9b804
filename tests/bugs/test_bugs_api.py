# -*- coding: utf-8 -*-
import pytest


def _history(client, bug_id):
    resp = client.get(f"/api/bugs/{bug_id}/history")
    assert resp.status_code == 200
    return resp.get_json()


class TestCreateBug:
    """创建缺陷"""

    def test_create_defaults_and_history(self, client, make_bug):
        bug_id = make_bug()
        assert bug_id.startswith("BUG-")

        bug = client.get(f"/api/bugs/{bug_id}").get_json()
        assert bug["status"] == "New"
        assert bug["priority"] == "P3"
        assert bug["severity"] == "Minor"
        assert bug["is_deleted"] is False
        # JSON 列永远解码成容器
        assert bug["linked_tests"] == []
        assert bug["tags"] == []
        assert bug["environment"] == {}

        history = _history(client, bug_id)
        assert [(h["action"], h["changed_by_name"]) for h in history] == [("Created", "Alice")]

    def test_create_requires_title(self, client):
        resp = client.post("/api/bugs", json={"description": "no title"})
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Missing required fields: title", "fields": ["title"]}

    @pytest.mark.parametrize("field, value", [("priority", "P9"), ("severity", "Huge"), ("status", "Done")])
    def test_create_rejects_unknown_enum(self, client, field, value):
        assert client.post("/api/bugs", json={"title": "x", field: value}).status_code == 400

    def test_json_fields_round_trip(self, client, make_bug):
        bug_id = make_bug(steps_to_reproduce=["open", "click"], environment={"os": "linux"}, tags=["ui"])
        bug = client.get(f"/api/bugs/{bug_id}").get_json()
        assert bug["steps_to_reproduce"] == ["open", "click"]
        assert bug["environment"] == {"os": "linux"}

    def test_get_unknown(self, client):
        resp = client.get("/api/bugs/BUG-missing")
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "Bug not found"}


class TestUpdateBug:
    """部分更新与变更历史"""

    def test_one_history_row_per_changed_field(self, client, make_bug):
        bug_id = make_bug(priority="P3", severity="Minor")
        resp = client.put(f"/api/bugs/{bug_id}", json={
            "title": "Login button unresponsive",  # 未变化
            "priority": "P1",
            "severity": "Critical",
            "tags": ["login"],
            "bug_id": "BUG-hijack",
            "changed_by_id": "user-2",
            "changed_by_name": "Bob",
        })
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["changes"] == 1
        assert sorted(body["changed_fields"]) == ["priority", "severity", "tags"]

        updated = [h for h in _history(client, bug_id) if h["action"] == "Updated"]
        assert sorted((h["field_name"], h["old_value"], h["new_value"]) for h in updated) == [
            ("priority", "P3", "P1"),
            ("severity", "Minor", "Critical"),
            ("tags", "[]", '["login"]'),
        ]
        assert {h["changed_by_name"] for h in updated} == {"Bob"}
        assert client.get(f"/api/bugs/{bug_id}").status_code == 200

    def test_empty_update(self, client, make_bug):
        bug_id = make_bug()
        resp = client.put(f"/api/bugs/{bug_id}", json={"bug_id": "x", "created_at": "2020-01-01"})
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "No fields to update"}

    def test_update_unknown(self, client):
        assert client.put("/api/bugs/BUG-nope", json={"title": "x"}).status_code == 404

    @pytest.mark.parametrize("status, resolution", [("Fixed", "Fixed"), ("Rejected", "Won't Fix")])
    def test_status_via_put_sets_resolution(self, client, make_bug, status, resolution):
        bug_id = make_bug()
        assert client.put(f"/api/bugs/{bug_id}", json={"status": status}).status_code == 200

        bug = client.get(f"/api/bugs/{bug_id}").get_json()
        assert bug["status"] == status
        assert bug["resolution"] == resolution
        assert bug["resolved_at"] is not None

        status_rows = [h for h in _history(client, bug_id) if h["field_name"] == "status"]
        assert [(h["old_value"], h["new_value"]) for h in status_rows] == [("New", status)]

    def test_status_via_put_keeps_supplied_resolution(self, client, make_bug):
        bug_id = make_bug()
        client.put(f"/api/bugs/{bug_id}", json={"status": "Fixed", "resolution": "Duplicate"})
        bug = client.get(f"/api/bugs/{bug_id}").get_json()
        assert bug["resolution"] == "Duplicate"
        assert bug["resolved_at"] is not None

    def test_verified_via_put_sets_timestamp(self, client, make_bug):
        bug_id = make_bug()
        client.put(f"/api/bugs/{bug_id}", json={"status": "Verified"})
        bug = client.get(f"/api/bugs/{bug_id}").get_json()
        assert bug["verified_at"] is not None
        assert bug["resolved_at"] is None


class TestBugStatus:
    """状态流转：任意状态可达，每次恰好一条历史"""

    def test_fixed_sets_resolution(self, client, make_bug):
        bug_id = make_bug()
        resp = client.post(f"/api/bugs/{bug_id}/status", json={"status": "Fixed", "changed_by_name": "Dev"})
        assert resp.status_code == 200

        bug = client.get(f"/api/bugs/{bug_id}").get_json()
        assert bug["status"] == "Fixed"
        assert bug["resolution"] == "Fixed"
        assert bug["resolved_at"] is not None

        rows = [h for h in _history(client, bug_id) if h["action"] == "Status Changed"]
        assert len(rows) == 1
        assert (rows[0]["field_name"], rows[0]["old_value"], rows[0]["new_value"]) == ("status", "New", "Fixed")

    def test_same_status_still_recorded(self, client, make_bug):
        bug_id = make_bug()
        client.post(f"/api/bugs/{bug_id}/status", json={"status": "New"})
        rows = [h for h in _history(client, bug_id) if h["action"] == "Status Changed"]
        assert len(rows) == 1

    def test_verified_sets_timestamp(self, client, make_bug):
        bug_id = make_bug()
        client.post(f"/api/bugs/{bug_id}/status", json={"status": "Verified"})
        assert client.get(f"/api/bugs/{bug_id}").get_json()["verified_at"] is not None

    def test_status_required(self, client, make_bug):
        resp = client.post(f"/api/bugs/{make_bug()}/status", json={})
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Status is required"}


class TestDeleteBug:
    """软删除"""

    def test_soft_delete(self, client, make_bug):
        bug_id = make_bug()
        resp = client.delete(f"/api/bugs/{bug_id}")
        assert resp.status_code == 200

        bug = client.get(f"/api/bugs/{bug_id}").get_json()
        assert bug["is_deleted"] is True
        assert bug["status"] == "Rejected"
        assert bug["resolution"] == "Won't Fix"

        deleted = [h for h in _history(client, bug_id) if h["action"] == "Deleted"]
        assert deleted[0]["changed_by_name"] == "System"

    def test_listing_visibility(self, client, make_bug):
        live = make_bug(title="live")
        gone = make_bug(title="gone")
        client.delete(f"/api/bugs/{gone}")

        def ids(query=""):
            return {b["bug_id"] for b in client.get(f"/api/bugs{query}").get_json()}

        assert ids() == {live, gone}
        assert ids("?show_deleted=false") == {live}
        assert ids("?show_deleted=true") == {gone}


class TestListBugs:
    """过滤列表"""

    def test_filters_and_search(self, client, make_bug):
        a = make_bug(title="Checkout crash", priority="P1", module_id="MOD_SAL")
        b = make_bug(title="Typo in footer", priority="P4", module_id="MOD_SAL", description="checkout page")
        make_bug(title="Slow report", priority="P1", module_id="MOD_FIN")

        def ids(query):
            return {row["bug_id"] for row in client.get(f"/api/bugs?{query}").get_json()}

        assert ids("priority=P1&module_id=MOD_SAL") == {a}
        assert ids("search=CHECKOUT") == {a, b}
        assert ids("priority=all&module_id=MOD_SAL") == {a, b}

    def test_show_rejected(self, client, make_bug):
        open_bug = make_bug()
        rejected = make_bug()
        client.post(f"/api/bugs/{rejected}/status", json={"status": "Rejected"})

        hidden = {row["bug_id"] for row in client.get("/api/bugs?show_rejected=false").get_json()}
        assert hidden == {open_bug}
        only = {row["bug_id"] for row in client.get("/api/bugs?show_rejected=true").get_json()}
        assert only == {rejected}

    def test_pagination(self, client, make_bug):
        for i in range(5):
            make_bug(title=f"bug {i}")
        assert len(client.get("/api/bugs?limit=2").get_json()) == 2
        assert len(client.get("/api/bugs?limit=2&offset=4").get_json()) == 1
        assert client.get("/api/bugs?limit=abc").status_code == 400


class TestBugLinks:
    """关联用例 / 生成回归用例"""

    def test_link_test(self, client, make_bug):
        client.post("/api/custom-tests", json={"test_id": "TEST-1", "title": "Login", "module": "Sales & CRM"})
        bug_id = make_bug()
        assert client.post(f"/api/bugs/{bug_id}/link-test", json={"test_id": "TEST-1"}).status_code == 200

        dup = client.post(f"/api/bugs/{bug_id}/link-test", json={"test_id": "TEST-1"})
        assert dup.status_code == 400
        assert dup.get_json() == {"error": "Test already linked to this bug"}

        assert [t["test_id"] for t in client.get(f"/api/bugs/{bug_id}/tests").get_json()] == ["TEST-1"]
        assert [b["bug_id"] for b in client.get("/api/bugs/by-test/TEST-1").get_json()] == [bug_id]
        linked = [h for h in _history(client, bug_id) if h["action"] == "Test Linked"]
        assert len(linked) == 1

    def test_create_regression_test(self, client, make_bug):
        bug_id = make_bug(priority="P1", steps_to_reproduce=["open page"], category="Checkout")
        resp = client.post(f"/api/bugs/{bug_id}/create-test", json={"created_by": "QA"})
        assert resp.status_code == 201
        test_id = resp.get_json()["test_id"]

        test = client.get(f"/api/custom-tests/{test_id}").get_json()
        assert test["priority"] == "High"
        assert test["category"] == "Regression"
        assert test["module"] == "Checkout"
        assert test["steps"][1] == "open page"
        assert f"bug-{bug_id}" in test["tags"]
        assert client.get(f"/api/bugs/{bug_id}").get_json()["linked_tests"] == [test_id]


class TestBugComments:
    def test_add_and_list(self, client, make_bug):
        bug_id = make_bug()
        resp = client.post(f"/api/bugs/{bug_id}/comments", json={"comment_text": "Repro on staging", "author_name": "Eve"})
        assert resp.status_code == 201
        comments = client.get(f"/api/bugs/{bug_id}/comments").get_json()
        assert [c["comment_text"] for c in comments] == ["Repro on staging"]

    def test_comment_text_required(self, client, make_bug):
        resp = client.post(f"/api/bugs/{make_bug()}/comments", json={"author_name": "Eve"})
        assert resp.status_code == 400

    def test_comment_on_unknown_bug(self, client):
        assert client.post("/api/bugs/BUG-x/comments", json={"comment_text": "hi"}).status_code == 404


def test_bug_stats(client, make_bug):
    make_bug(priority="P1", severity="Critical")
    second = make_bug(priority="P2", severity="Major")
    make_bug(priority="P1", severity="Minor", module_id="MOD_FIN")
    client.post(f"/api/bugs/{second}/status", json={"status": "In Progress"})

    stats = client.get("/api/bugs/stats").get_json()
    assert stats["total_bugs"] == 3
    assert stats["new_bugs"] == 2
    assert stats["in_progress"] == 1
    assert stats["p1_bugs"] == 2
    assert stats["critical_bugs"] == 1
    assert stats["by_severity"] == {"Critical": 1, "Major": 1, "Minor": 1}

    scoped = client.get("/api/bugs/stats?module_id=MOD_FIN").get_json()
    assert scoped["total_bugs"] == 1
