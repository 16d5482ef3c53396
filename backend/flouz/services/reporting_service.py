# Overview: Service-layer operations for reporting; daily summaries and master analytics.

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from html import escape

from flask import current_app

from ..money import average_cents, format_cents
from ..storage import get_storage
from ..storage.records import PAYMENT_METHODS, Employee
from ..time_utils import local_date, local_day_bounds, to_local, to_utc_z, utcnow

ANALYTICS_DAYS = 7
RECENT_ACCOUNTS = 5


@dataclass
class DailySummary:
    day: date
    total_cents: int = 0
    transaction_count: int = 0
    by_method_cents: dict[str, int] = field(default_factory=lambda: {m: 0 for m in PAYMENT_METHODS})

    @property
    def average_ticket_cents(self) -> int:
        return average_cents(self.total_cents, self.transaction_count)

    def to_dict(self) -> dict:
        return {
            "date": self.day.isoformat(),
            "total_revenue": format_cents(self.total_cents),
            "cash_revenue": format_cents(self.by_method_cents["cash"]),
            "card_revenue": format_cents(self.by_method_cents["card"]),
            "check_revenue": format_cents(self.by_method_cents["check"]),
            "total_transactions": self.transaction_count,
            "average_ticket": format_cents(self.average_ticket_cents),
        }


def daily_summary(employee_id: int, now: datetime | None = None) -> DailySummary:
    """Revenue of one employee for the current local calendar day."""
    now = now or utcnow()
    start, end = local_day_bounds(now)
    transactions = get_storage().list_transactions(employee_id=employee_id, since=start, until=end)

    summary = DailySummary(day=local_date(now))
    for transaction in transactions:
        summary.total_cents += transaction.total_cents
        summary.transaction_count += 1
        if transaction.payment_method in summary.by_method_cents:
            summary.by_method_cents[transaction.payment_method] += transaction.total_cents
    return summary


def format_daily_summary_message(summary: DailySummary, employee: Employee) -> str:
    """Telegram HTML body for a register closure."""
    currency = current_app.config.get("CURRENCY_SYMBOL", "€")

    def money(cents: int) -> str:
        return f"{format_cents(cents)} {currency}"

    lines = [
        "<b>FLOUZ - Register closure</b>",
        "",
        f"<b>Employee:</b> {escape(employee.full_name)}",
        f"<b>Date:</b> {summary.day.strftime('%d/%m/%Y')}",
        "",
        "<b>DAILY REVENUE</b>",
        f"- <b>Total:</b> {money(summary.total_cents)}",
        f"- <b>Cash:</b> {money(summary.by_method_cents['cash'])}",
        f"- <b>Card:</b> {money(summary.by_method_cents['card'])}",
        f"- <b>Check:</b> {money(summary.by_method_cents['check'])}",
        "",
        "<b>STATISTICS</b>",
        f"- <b>Transactions:</b> {summary.transaction_count}",
        f"- <b>Average ticket:</b> {money(summary.average_ticket_cents)}",
        "",
        "---",
        "<i>Report generated automatically by FLOUZ</i>",
    ]
    return "\n".join(lines)


def master_analytics(now: datetime | None = None) -> dict:
    """
    Cross-tenant dashboard numbers.

    transactions_by_day covers the last ANALYTICS_DAYS local days, oldest
    first, with zero rows for days without sales.
    """
    storage = get_storage()
    now = now or utcnow()

    accounts = storage.list_accounts()
    transactions = storage.list_transactions()

    today = local_date(now)
    days = [today - timedelta(days=offset) for offset in range(ANALYTICS_DAYS - 1, -1, -1)]
    per_day = {d: {"count": 0, "revenue_cents": 0} for d in days}
    for transaction in transactions:
        bucket = per_day.get(local_date(transaction.created_at))
        if bucket is not None:
            bucket["count"] += 1
            bucket["revenue_cents"] += transaction.total_cents

    recent = sorted(accounts, key=lambda a: (a.created_at, a.id), reverse=True)[:RECENT_ACCOUNTS]

    return {
        "summary": {
            "total_accounts": len(accounts),
            "active_accounts": sum(1 for a in accounts if a.is_active),
            "total_employees": len(storage.list_employees()),
            "total_transactions": len(transactions),
            "total_revenue": format_cents(sum(t.total_cents for t in transactions)),
            "total_products": len(storage.list_products()),
            "total_categories": len(storage.list_categories()),
        },
        "transactions_by_day": [
            {
                "date": d.isoformat(),
                "count": per_day[d]["count"],
                "revenue": format_cents(per_day[d]["revenue_cents"]),
            }
            for d in days
        ],
        "recent_accounts": [a.to_dict() for a in recent],
        "generated_at": to_utc_z(now),
        "timezone": str(to_local(now).tzinfo),
    }
