# -*- coding: utf-8 -*-
from models.user import User


class TestLogin:
    """登录 / 注册 / 登出"""

    def test_login_with_seeded_admin(self, client, seeded, app):
        resp = client.post("/api/auth/login", json={
            "email": app.config["ADMIN_INIT_EMAIL"].upper(),
            "password": app.config["ADMIN_INIT_PASSWORD"],
        })
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["success"] is True
        assert body["user"]["role"] == "admin"
        assert "password_hash" not in body["user"]
        assert User.query.filter_by(user_id="user-admin-001").first().last_login is not None

    def test_login_wrong_password(self, client, seeded, app):
        resp = client.post("/api/auth/login", json={
            "email": app.config["ADMIN_INIT_EMAIL"],
            "password": "nope-nope",
        })
        assert resp.status_code == 401
        assert resp.get_json() == {"error": "Invalid email or password"}

    def test_login_requires_both_fields(self, client):
        resp = client.post("/api/auth/login", json={"email": "a@b.io"})
        assert resp.status_code == 400
        assert "error" in resp.get_json()

    def test_seeded_passwords_are_hashed(self, seeded, app):
        admin = User.query.filter_by(user_id="user-admin-001").first()
        assert admin.password_hash != app.config["ADMIN_INIT_PASSWORD"]

    def test_register_then_login(self, client):
        resp = client.post("/api/auth/register", json={
            "email": "New.Tester@Example.com", "password": "secret99", "name": "New Tester",
        })
        assert resp.status_code == 201
        user = resp.get_json()["user"]
        assert user["email"] == "new.tester@example.com"
        assert user["role"] == "tester"

        resp = client.post("/api/auth/login", json={"email": "new.tester@example.com", "password": "secret99"})
        assert resp.status_code == 200

    def test_deactivated_user_cannot_login(self, client):
        client.post("/api/auth/register", json={"email": "gone@example.com", "password": "secret99", "name": "Gone"})
        user_id = User.query.filter_by(email="gone@example.com").first().user_id
        assert client.delete(f"/api/users/{user_id}").status_code == 200

        resp = client.post("/api/auth/login", json={"email": "gone@example.com", "password": "secret99"})
        assert resp.status_code == 401

    def test_logout(self, client):
        resp = client.post("/api/auth/logout")
        assert resp.status_code == 200
        assert resp.get_json()["success"] is True
