# Overview: Outbound Telegram Bot API client used for close-register reports.

from __future__ import annotations

import httpx
from flask import current_app

from ..errors import NotificationDispatchError


def _api_url(bot_token: str) -> str:
    base = current_app.config.get("TELEGRAM_API_BASE", "https://api.telegram.org").rstrip("/")
    return f"{base}/bot{bot_token}/sendMessage"


def send_message(chat_id: str, bot_token: str, text: str, *, client: httpx.Client | None = None) -> None:
    """
    POST an HTML message to a Telegram chat.

    Raises NotificationDispatchError on transport errors, non-2xx responses
    and Telegram's own {"ok": false} replies. The bot token is never put in
    the error message since it is a credential.
    """
    payload = {"chat_id": chat_id, "text": text, "parse_mode": "HTML"}
    timeout = current_app.config.get("NOTIFICATION_TIMEOUT_SECONDS", 10)

    try:
        if client is not None:
            response = client.post(_api_url(bot_token), json=payload, timeout=timeout)
        else:
            with httpx.Client(timeout=timeout) as owned:
                response = owned.post(_api_url(bot_token), json=payload)
    except httpx.HTTPError as exc:
        current_app.logger.warning("Telegram dispatch failed: %s", type(exc).__name__)
        raise NotificationDispatchError("Could not reach the Telegram API") from exc

    try:
        body = response.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    if response.is_error or not body.get("ok", False):
        description = body.get("description") or f"HTTP {response.status_code}"
        current_app.logger.warning("Telegram API rejected message: %s", description)
        raise NotificationDispatchError(
            "Telegram API rejected the message",
            details={"provider_status": response.status_code, "provider_error": description},
        )
