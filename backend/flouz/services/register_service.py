"""
Register Service - end-of-shift closure

WHY: The Telegram report is the audit trail of a closure. The register only
counts as closed (session deleted, operator logged out) once the report has
been delivered; if delivery fails the session stays open so the employee can
retry or keep selling.
"""

from __future__ import annotations

from flask import current_app

from ..errors import NoEmployeeSelected, NotificationConfigMissing
from . import reporting_service, session_service, telegram_service
from .reporting_service import DailySummary
from .session_service import SessionContext


def close_register(context: SessionContext) -> DailySummary:
    """
    Send the selected employee's daily summary and end the session.

    Raises NoEmployeeSelected, NotificationConfigMissing (nothing sent,
    session kept) or NotificationDispatchError (session kept).
    """
    if context.employee is None:
        raise NoEmployeeSelected()

    account = context.account
    if not account.has_notification_channel:
        raise NotificationConfigMissing()

    summary = reporting_service.daily_summary(context.employee.id)
    message = reporting_service.format_daily_summary_message(summary, context.employee)

    telegram_service.send_message(account.telegram_chat_id, account.telegram_bot_token, message)

    session_service.end_session(context.session)
    current_app.logger.info(
        "Register closed for account %s by employee %s (%d transaction(s))",
        account.id,
        context.employee.id,
        summary.transaction_count,
    )
    return summary
