# -*- coding: utf-8 -*-
from models.version import Version


def _current_ids():
    return [v.version_id for v in Version.query.filter_by(is_current=True).all()]


class TestVersions:
    """版本管理：至多一个当前版本"""

    def test_list_sorted_by_number_desc(self, client, seeded):
        versions = client.get("/api/versions").get_json()
        assert [v["version_id"] for v in versions] == ["VER_1_2_0", "VER_1_1_0", "VER_1_0_0"]
        assert versions[0]["features"] == ["Budget planning", "Enhanced security", "Mobile responsive"]
        assert versions[0]["known_issues"] == []

    def test_filters(self, client, seeded):
        archived = client.get("/api/versions?status=archived").get_json()
        assert [v["version_id"] for v in archived] == ["VER_1_0_0"]
        current = client.get("/api/versions?is_current=true").get_json()
        assert [v["version_id"] for v in current] == ["VER_1_2_0"]

    def test_current(self, client, seeded):
        assert client.get("/api/versions/current").get_json()["version_id"] == "VER_1_2_0"

    def test_no_current_version(self, client):
        resp = client.get("/api/versions/current")
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "No current version set"}

    def test_create_derives_id_and_takes_current(self, client, seeded):
        resp = client.post("/api/versions", json={
            "version_number": "2.0.0", "version_name": "Major", "is_current": True, "features": ["New UI"],
        })
        assert resp.status_code == 201
        assert resp.get_json()["version_id"] == "VER_2_0_0"
        assert _current_ids() == ["VER_2_0_0"]

    def test_create_duplicate(self, client, seeded):
        resp = client.post("/api/versions", json={"version_number": "1.2.0", "version_name": "Again"})
        assert resp.status_code == 409

    def test_create_requires_fields(self, client):
        resp = client.post("/api/versions", json={"version_name": "Nameless"})
        assert resp.status_code == 400
        assert resp.get_json()["fields"] == ["version_number"]

    def test_update_is_current_clears_others(self, client, seeded):
        resp = client.put("/api/versions/VER_1_1_0", json={"is_current": True, "known_issues": ["slow"]})
        assert resp.status_code == 200
        assert _current_ids() == ["VER_1_1_0"]
        assert client.get("/api/versions/VER_1_1_0").get_json()["known_issues"] == ["slow"]

    def test_set_current(self, client, seeded):
        assert client.put("/api/versions/VER_1_0_0/set-current").status_code == 200
        assert _current_ids() == ["VER_1_0_0"]

    def test_delete_current_refused(self, client, seeded):
        resp = client.delete("/api/versions/VER_1_2_0")
        assert resp.status_code == 409

    def test_delete_unused_version_is_hard(self, client, seeded):
        resp = client.delete("/api/versions/VER_1_0_0")
        assert resp.get_json()["message"] == "Version deleted successfully"
        assert client.get("/api/versions/VER_1_0_0").status_code == 404

    def test_delete_version_with_sessions_is_archived(self, client, seeded, make_session):
        make_session(version_id="VER_1_1_0")
        resp = client.delete("/api/versions/VER_1_1_0")
        assert resp.get_json()["message"] == "Version archived successfully"
        assert client.get("/api/versions/VER_1_1_0").get_json()["status"] == "archived"


def test_version_statistics(client, seeded, make_session):
    old = make_session(version_id="VER_1_1_0")
    client.post(f"/api/sessions/{old}/results", json={
        "test_case_id": "TC-1", "test_case_title": "Login", "module_name": "Sales & CRM", "status": "Fail",
    })
    new = make_session(version_id="VER_1_2_0")
    for status, test_case_id in (("PASS", "TC-1"), (" pass", "TC-2"), ("failed", "TC-3")):
        client.post(f"/api/sessions/{new}/results", json={
            "test_case_id": test_case_id, "test_case_title": test_case_id,
            "module_name": "Sales & CRM", "status": status,
        })

    stats = client.get("/api/versions/VER_1_2_0/statistics").get_json()
    assert stats["totalSessions"] == 1
    assert stats["totalTests"] == 3
    by_status = {row["status"]: row["count"] for row in stats["testsByStatus"]}
    assert by_status == {"Pass": 2, "Fail": 1}
    assert stats["moduleStats"] == [{"module_name": "Sales & CRM", "total_tests": 3, "passed": 2, "failed": 1}]
    assert [row["test_case_id"] for row in stats["knownIssues"]] == ["TC-3"]
    assert [row["test_case_id"] for row in stats["bugFixes"]] == ["TC-1"]
    assert client.get("/api/versions/VER_NOPE/statistics").status_code == 404
