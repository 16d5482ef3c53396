"""
Authentication tests.

Verifies:
- Login issues a token; a second login kills the first token
- Disabled accounts cannot log in and get no session
- Logout is idempotent; missing header is 401
- Employee selection is restricted to the account's active employees
"""

from flouz.services import account_service, seed_service
from flouz.storage import get_storage

from conftest import PASSWORD, auth_headers, get_auth_token


class TestLogin:

    def test_login_returns_token_and_account(self, client, owner):
        resp = client.post("/api/auth/login", json={"email": "owner@shop.test", "password": PASSWORD})
        assert resp.status_code == 200
        body = resp.json
        assert body["token"]
        assert body["account"]["email"] == "owner@shop.test"
        assert body["account"]["telegram_configured"] is True
        assert "telegram_bot_token" not in body["account"]
        assert "token_hash" not in body["session"]

    def test_email_is_case_insensitive(self, client, owner):
        resp = client.post("/api/auth/login", json={"email": "  OWNER@Shop.Test ", "password": PASSWORD})
        assert resp.status_code == 200

    def test_wrong_password(self, client, owner):
        resp = client.post("/api/auth/login", json={"email": "owner@shop.test", "password": "Nope123!x"})
        assert resp.status_code == 401
        assert resp.json["code"] == "InvalidCredentials"

    def test_unknown_email(self, client, owner):
        resp = client.post("/api/auth/login", json={"email": "ghost@shop.test", "password": PASSWORD})
        assert resp.status_code == 401
        assert resp.json["code"] == "InvalidCredentials"

    def test_missing_fields(self, client):
        resp = client.post("/api/auth/login", json={"email": "owner@shop.test"})
        assert resp.status_code == 400

    def test_second_login_invalidates_first_token(self, client, owner):
        first = get_auth_token(client, "owner@shop.test", PASSWORD)
        second = get_auth_token(client, "owner@shop.test", PASSWORD)
        assert first != second

        assert client.get("/api/auth/me", headers=auth_headers(first)).status_code == 401
        assert client.get("/api/auth/me", headers=auth_headers(second)).status_code == 200

    def test_disabled_account_cannot_login(self, app, client, owner):
        account, _ = owner
        account_service.toggle_account(account.id)

        resp = client.post("/api/auth/login", json={"email": "owner@shop.test", "password": PASSWORD})
        assert resp.status_code == 401
        assert resp.json["code"] == "AccountDisabled"

        storage = get_storage()
        assert storage.delete_sessions_for_account(account.id) == 0

    def test_deactivation_kills_live_session(self, client, owner, owner_headers):
        account, _ = owner
        account_service.toggle_account(account.id)
        assert client.get("/api/auth/me", headers=owner_headers).status_code == 401


class TestRegisterAndDemo:

    def test_register_creates_account_and_session(self, client):
        resp = client.post("/api/auth/register", json={"email": "New@Shop.test", "password": "Secret123!"})
        assert resp.status_code == 201
        assert resp.json["account"]["email"] == "new@shop.test"
        assert resp.json["account"]["is_master"] is False

        me = client.get("/api/auth/me", headers=auth_headers(resp.json["token"]))
        assert me.status_code == 200

    def test_register_rejects_weak_password(self, client):
        resp = client.post("/api/auth/register", json={"email": "weak@shop.test", "password": "short"})
        assert resp.status_code == 400
        assert resp.json["code"] == "PasswordValidationError"

    def test_register_rejects_duplicate_email(self, client, owner):
        resp = client.post("/api/auth/register", json={"email": "owner@shop.test", "password": "Secret123!"})
        assert resp.status_code == 400
        assert resp.json["code"] == "ConflictError"

    def test_register_rejects_bad_email(self, client):
        resp = client.post("/api/auth/register", json={"email": "not-an-email", "password": "Secret123!"})
        assert resp.status_code == 400

    def test_demo_login_requires_seed(self, client):
        assert client.post("/api/auth/demo").status_code == 503

    def test_demo_login_after_bootstrap(self, app, client):
        seed_service.bootstrap()
        resp = client.post("/api/auth/demo")
        assert resp.status_code == 200
        assert resp.json["account"]["is_demo"] is True

        me = client.get("/api/auth/me", headers=auth_headers(resp.json["token"]))
        assert [e["first_name"] for e in me.json["employees"]] == ["Demo"]


class TestLogout:

    def test_logout_without_header(self, client):
        assert client.post("/api/auth/logout").status_code == 401

    def test_logout_is_idempotent(self, client, owner_headers):
        assert client.post("/api/auth/logout", headers=owner_headers).status_code == 200
        assert client.post("/api/auth/logout", headers=owner_headers).status_code == 200
        assert client.get("/api/auth/me", headers=owner_headers).status_code == 401

    def test_unknown_token_logout_is_ok(self, client):
        resp = client.post("/api/auth/logout", headers=auth_headers("not-a-real-token"))
        assert resp.status_code == 200


class TestSelectEmployee:

    def test_select_employee(self, client, owner, owner_headers):
        _, employee = owner
        resp = client.post("/api/auth/select-employee", json={"employee_id": employee.id}, headers=owner_headers)
        assert resp.status_code == 200
        assert resp.json["selected_employee"]["id"] == employee.id

        me = client.get("/api/auth/me", headers=owner_headers).json
        assert me["selected_employee_id"] == employee.id
        assert me["selected_employee"]["first_name"] == "Alice"

    def test_cannot_select_other_accounts_employee(self, client, owner_headers):
        other = account_service.create_account(email="other@shop.test", password=PASSWORD)
        stranger = account_service.create_employee(account_id=other.id, first_name="Bob", last_name="Durand")

        resp = client.post("/api/auth/select-employee", json={"employee_id": stranger.id}, headers=owner_headers)
        assert resp.status_code == 400
        assert resp.json["code"] == "InvalidSelection"

    def test_cannot_select_inactive_employee(self, client, owner, owner_headers):
        account, _ = owner
        idle = account_service.create_employee(
            account_id=account.id, first_name="Idle", last_name="Worker", is_active=False
        )
        resp = client.post("/api/auth/select-employee", json={"employee_id": idle.id}, headers=owner_headers)
        assert resp.status_code == 400

    def test_employee_id_required(self, client, owner_headers):
        resp = client.post("/api/auth/select-employee", json={}, headers=owner_headers)
        assert resp.status_code == 400

    def test_me_requires_token(self, client):
        resp = client.get("/api/auth/me")
        assert resp.status_code == 401
        assert resp.json["code"] == "Unauthenticated"
