"""
Telegram client tests, with httpx.MockTransport standing in for the Bot API.
"""

import json

import httpx
import pytest

from flouz.errors import NotificationDispatchError
from flouz.services import telegram_service


def _client(handler) -> httpx.Client:
    return httpx.Client(transport=httpx.MockTransport(handler))


def test_posts_html_message(app):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"ok": True, "result": {"message_id": 1}})

    with _client(handler) as client:
        telegram_service.send_message("12345", "bot-token", "<b>hello</b>", client=client)

    assert seen["url"] == "https://telegram.test/botbot-token/sendMessage"
    assert seen["body"] == {"chat_id": "12345", "text": "<b>hello</b>", "parse_mode": "HTML"}


def test_rejected_message(app):
    def handler(request):
        return httpx.Response(400, json={"ok": False, "description": "Bad Request: chat not found"})

    with _client(handler) as client:
        with pytest.raises(NotificationDispatchError) as excinfo:
            telegram_service.send_message("12345", "bot-token", "hi", client=client)

    assert excinfo.value.details["provider_status"] == 400
    assert "chat not found" in excinfo.value.details["provider_error"]
    assert "bot-token" not in excinfo.value.message


def test_ok_false_with_200(app):
    def handler(request):
        return httpx.Response(200, json={"ok": False, "description": "Forbidden"})

    with _client(handler) as client:
        with pytest.raises(NotificationDispatchError):
            telegram_service.send_message("12345", "bot-token", "hi", client=client)


def test_transport_error(app):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with _client(handler) as client:
        with pytest.raises(NotificationDispatchError) as excinfo:
            telegram_service.send_message("12345", "bot-token", "hi", client=client)

    assert excinfo.value.status_code == 500


@pytest.mark.parametrize("reply", [["ok"], "ok", 42])
def test_non_object_reply(app, reply):
    def handler(request):
        return httpx.Response(200, json=reply)

    with _client(handler) as client:
        with pytest.raises(NotificationDispatchError) as excinfo:
            telegram_service.send_message("12345", "bot-token", "hi", client=client)

    assert excinfo.value.details["provider_error"] == "HTTP 200"
