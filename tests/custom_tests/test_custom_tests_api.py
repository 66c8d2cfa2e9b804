# -*- coding: utf-8 -*-


def _create(client, **fields):
    payload = {"title": "Create invoice", "module": "Finance & Accounting"}
    payload.update(fields)
    return client.post("/api/custom-tests", json=payload)


class TestCustomTests:
    """自定义用例 CRUD"""

    def test_create_defaults(self, client):
        resp = _create(client, steps=["open", "save"])
        assert resp.status_code == 201
        test_id = resp.get_json()["test_id"]
        assert test_id.startswith("TEST-")

        test = client.get(f"/api/custom-tests/{test_id}").get_json()
        assert test["category"] == "Custom"
        assert test["priority"] == "Medium"
        assert test["steps"] == ["open", "save"]
        assert test["prerequisites"] == []
        assert test["test_data"] == {}
        assert test["is_active"] is True

    def test_create_validation(self, client):
        resp = client.post("/api/custom-tests", json={"title": "No module"})
        assert resp.status_code == 400
        assert resp.get_json()["fields"] == ["module"]
        assert _create(client, priority="Urgent").status_code == 400

    def test_duplicate_id(self, client):
        assert _create(client, test_id="TEST-dup").status_code == 201
        resp = _create(client, test_id="TEST-dup")
        assert resp.status_code == 409

    def test_update(self, client):
        test_id = _create(client).get_json()["test_id"]
        resp = client.put(f"/api/custom-tests/{test_id}", json={"priority": "High", "tags": ["smoke"]})
        assert resp.status_code == 200
        test = client.get(f"/api/custom-tests/{test_id}").get_json()
        assert test["priority"] == "High"
        assert test["tags"] == ["smoke"]
        assert client.put("/api/custom-tests/TEST-none", json={"title": "x"}).status_code == 404

    def test_soft_delete_hides_from_list(self, client):
        keep = _create(client, title="Keep").get_json()["test_id"]
        drop = _create(client, title="Drop").get_json()["test_id"]
        assert client.delete(f"/api/custom-tests/{drop}").status_code == 200

        listed = [t["test_id"] for t in client.get("/api/custom-tests").get_json()]
        assert listed == [keep]
        assert client.get(f"/api/custom-tests/{drop}").get_json()["is_active"] is False

    def test_list_filters(self, client):
        a = _create(client, title="Invoice totals", category="Smoke", priority="High").get_json()["test_id"]
        b = _create(client, title="Stock count", module="Inventory Management").get_json()["test_id"]

        def ids(query):
            return [t["test_id"] for t in client.get(f"/api/custom-tests?{query}").get_json()]

        assert ids("module=Inventory%20Management") == [b]
        assert ids("category=Smoke") == [a]
        assert ids("priority=High") == [a]
        assert ids("search=stock") == [b]


class TestSync:
    """批量 upsert"""

    def test_sync_inserts_and_updates(self, client):
        _create(client, test_id="T-1", title="Old title")
        resp = client.post("/api/tests/sync", json={"tests": [
            {"test_id": "T-1", "title": "New title", "module": "Sales & CRM", "steps": ["a"]},
            {"test_id": "T-2", "title": "Fresh", "module": "Sales & CRM"},
        ]})
        assert resp.status_code == 200
        assert resp.get_json() == {"success": True, "processed": 2}

        assert client.get("/api/custom-tests/T-1").get_json()["title"] == "New title"
        fresh = client.get("/api/custom-tests/T-2").get_json()
        assert fresh["category"] == "General"
        assert fresh["created_by"] == "System"

    def test_sync_reports_bad_items(self, client):
        resp = client.post("/api/custom-tests/sync", json={"tests": [
            {"test_id": "T-3", "title": "Good", "module": "Sales & CRM"},
            {"test_id": "T-4", "module": "Sales & CRM"},
        ]})
        body = resp.get_json()
        assert body["processed"] == 1
        assert [e["test_id"] for e in body["errors"]] == ["T-4"]
        assert client.get("/api/custom-tests/T-3").status_code == 200

    def test_sync_requires_array(self, client):
        resp = client.post("/api/tests/sync", json={"tests": {"test_id": "x"}})
        assert resp.status_code == 400
        assert resp.get_json() == {"error": "Tests must be an array"}
