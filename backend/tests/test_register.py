"""
Register closure and daily summary tests.

The Telegram dispatch is monkeypatched; the session must only be deleted
once the report was delivered.
"""

import pytest

from flouz.errors import NotificationDispatchError
from flouz.services import account_service, telegram_service


@pytest.fixture
def sent(monkeypatch):
    """Capture outbound Telegram messages instead of sending them."""
    messages = []

    def fake_send(chat_id, bot_token, text, *, client=None):
        messages.append({"chat_id": chat_id, "bot_token": bot_token, "text": text})

    monkeypatch.setattr(telegram_service, "send_message", fake_send)
    return messages


@pytest.fixture
def failing_dispatch(monkeypatch):
    def fake_send(chat_id, bot_token, text, *, client=None):
        raise NotificationDispatchError("Could not reach the Telegram API")

    monkeypatch.setattr(telegram_service, "send_message", fake_send)


def _sell(client, headers, product_id, quantity, payment_method):
    resp = client.post(
        "/api/checkout",
        json={"items": [{"product_id": product_id, "quantity": quantity}], "payment_method": payment_method},
        headers=headers,
    )
    assert resp.status_code == 201
    return resp.json


class TestDailySummary:

    def test_empty_day(self, client, cashier_headers):
        resp = client.get("/api/reports/daily-summary", headers=cashier_headers)
        assert resp.status_code == 200
        assert resp.json["total_revenue"] == "0.00"
        assert resp.json["total_transactions"] == 0
        assert resp.json["average_ticket"] == "0.00"

    def test_totals_per_method(self, client, cashier_headers, cola):
        _sell(client, cashier_headers, cola.id, 1, "cash")
        _sell(client, cashier_headers, cola.id, 2, "card")

        summary = client.get("/api/reports/daily-summary", headers=cashier_headers).json
        assert summary["total_revenue"] == "7.50"
        assert summary["cash_revenue"] == "2.50"
        assert summary["card_revenue"] == "5.00"
        assert summary["check_revenue"] == "0.00"
        assert summary["total_transactions"] == 2
        assert summary["average_ticket"] == "3.75"

    def test_requires_selected_employee(self, client, owner_headers):
        resp = client.get("/api/reports/daily-summary", headers=owner_headers)
        assert resp.status_code == 400
        assert resp.json["code"] == "NoEmployeeSelected"


class TestCloseRegister:

    def test_success_sends_report_and_ends_session(self, client, cashier_headers, cola, sent):
        _sell(client, cashier_headers, cola.id, 3, "cash")

        resp = client.post("/api/close-register", headers=cashier_headers)
        assert resp.status_code == 200
        assert resp.json["summary"]["total_revenue"] == "7.50"

        assert len(sent) == 1
        assert sent[0]["chat_id"] == "12345"
        assert sent[0]["bot_token"] == "bot-token"
        assert "Alice Martin" in sent[0]["text"]
        assert "7.50" in sent[0]["text"]

        assert client.get("/api/auth/me", headers=cashier_headers).status_code == 401

    def test_missing_channel_keeps_session(self, client, owner, cashier_headers, sent):
        account, _ = owner
        account_service.update_account(account.id, {"telegram_bot_token": None})

        resp = client.post("/api/close-register", headers=cashier_headers)
        assert resp.status_code == 400
        assert resp.json["code"] == "NotificationConfigMissing"
        assert sent == []

        assert client.get("/api/auth/me", headers=cashier_headers).status_code == 200

    def test_dispatch_failure_keeps_session(self, client, cashier_headers, failing_dispatch):
        resp = client.post("/api/close-register", headers=cashier_headers)
        assert resp.status_code == 500
        assert resp.json["code"] == "NotificationDispatchError"

        assert client.get("/api/auth/me", headers=cashier_headers).status_code == 200

    def test_requires_selected_employee(self, client, owner_headers, sent):
        resp = client.post("/api/close-register", headers=owner_headers)
        assert resp.status_code == 400
        assert resp.json["code"] == "NoEmployeeSelected"
        assert sent == []
