# -*- coding: utf-8 -*-
import pytest


def _create(client, **fields):
    payload = {"email": "bob@example.com", "password": "secret99", "name": "Bob"}
    payload.update(fields)
    return client.post("/api/users", json=payload)


class TestCreateUser:
    """创建用户"""

    def test_create_success(self, client):
        resp = _create(client, role="admin")
        assert resp.status_code == 201
        user_id = resp.get_json()["id"]

        user = client.get(f"/api/users/{user_id}").get_json()
        assert user["email"] == "bob@example.com"
        assert user["role"] == "admin"
        assert user["is_active"] is True
        assert "password_hash" not in user

    def test_missing_fields_listed(self, client):
        resp = client.post("/api/users", json={"email": "x@example.com"})
        assert resp.status_code == 400
        body = resp.get_json()
        assert body["fields"] == ["password", "name"]
        assert "password" in body["error"]

    def test_duplicate_email_conflict(self, client):
        assert _create(client).status_code == 201
        resp = _create(client, email="BOB@example.com")
        assert resp.status_code == 409
        assert resp.get_json() == {"error": "Email already exists"}

    @pytest.mark.parametrize(
        "fields",
        [
            {"email": "not-an-email"},
            {"password": "123"},
            {"role": "superuser"},
        ],
    )
    def test_invalid_payload(self, client, fields):
        assert _create(client, **fields).status_code == 400


class TestUpdateUser:
    """更新 / 改密 / 停用"""

    def test_update_name_and_email(self, client):
        user_id = _create(client).get_json()["id"]
        resp = client.put(f"/api/users/{user_id}", json={"name": "Robert", "email": "Robert@Example.com"})
        assert resp.status_code == 200
        user = client.get(f"/api/users/{user_id}").get_json()
        assert user["name"] == "Robert"
        assert user["email"] == "robert@example.com"

    def test_update_ignores_password_hash(self, client):
        user_id = _create(client).get_json()["id"]
        resp = client.put(f"/api/users/{user_id}", json={"password_hash": "plain"})
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "No fields to update"

    def test_update_email_taken(self, client):
        _create(client, email="taken@example.com")
        user_id = _create(client).get_json()["id"]
        resp = client.put(f"/api/users/{user_id}", json={"email": "taken@example.com"})
        assert resp.status_code == 409

    def test_update_unknown_user(self, client):
        resp = client.put("/api/users/user-missing", json={"name": "x"})
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "User not found"}

    def test_change_password(self, client):
        user_id = _create(client).get_json()["id"]
        bad = client.put(f"/api/users/{user_id}/password", json={"oldPassword": "wrong", "newPassword": "fresh123"})
        assert bad.status_code == 401

        ok = client.put(f"/api/users/{user_id}/password", json={"oldPassword": "secret99", "newPassword": "fresh123"})
        assert ok.status_code == 200
        login = client.post("/api/auth/login", json={"email": "bob@example.com", "password": "fresh123"})
        assert login.status_code == 200

    def test_last_admin_is_protected(self, client, seeded):
        resp = client.delete("/api/users/user-admin-001")
        assert resp.status_code == 409
        assert resp.get_json() == {"error": "Cannot remove the last admin user"}

        resp = client.put("/api/users/user-admin-001", json={"role": "tester"})
        assert resp.status_code == 409

    def test_admin_can_be_removed_when_another_exists(self, client, seeded):
        _create(client, role="admin")
        assert client.delete("/api/users/user-admin-001").status_code == 200


def test_list_users_filters(client, seeded):
    _create(client)
    all_users = client.get("/api/users").get_json()
    assert len(all_users) == 3
    assert all("password_hash" not in u for u in all_users)

    admins = client.get("/api/users?role=admin").get_json()
    assert [u["user_id"] for u in admins] == ["user-admin-001"]

    client.delete("/api/users/user-tester-001")
    active = client.get("/api/users?is_active=true").get_json()
    assert "user-tester-001" not in [u["user_id"] for u in active]
