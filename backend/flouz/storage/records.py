# Overview: Plain records returned by every storage backend.

"""
Storage records.

Both backends (memory and database) hand out these dataclasses rather than
live ORM rows, so callers cannot mutate state behind the store's back and the
same contract tests run against either backend.

Money fields are integer cents; `to_dict()` renders them as "12.34" strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from ..money import format_cents
from ..time_utils import to_utc_z

PAYMENT_METHODS = ("cash", "card", "check")


@dataclass
class Account:
    id: int
    email: str
    password_hash: str
    is_demo: bool = False
    is_master: bool = False
    is_active: bool = True
    telegram_chat_id: str | None = None
    telegram_bot_token: str | None = None
    created_at: datetime | None = None

    @property
    def has_notification_channel(self) -> bool:
        return bool(self.telegram_chat_id) and bool(self.telegram_bot_token)

    def to_dict(self, include_secrets: bool = False) -> dict:
        data = {
            "id": self.id,
            "email": self.email,
            "is_demo": self.is_demo,
            "is_master": self.is_master,
            "is_active": self.is_active,
            "telegram_chat_id": self.telegram_chat_id,
            "telegram_configured": self.has_notification_channel,
            "created_at": to_utc_z(self.created_at),
        }
        if include_secrets:
            data["telegram_bot_token"] = self.telegram_bot_token
        return data


@dataclass
class Employee:
    id: int
    account_id: int
    first_name: str
    last_name: str
    is_active: bool = True
    created_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "account_id": self.account_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }


@dataclass
class Session:
    id: int
    account_id: int
    token_hash: str
    expires_at: datetime
    selected_employee_id: int | None = None
    created_at: datetime | None = None

    def to_dict(self) -> dict:
        # token_hash never leaves the server
        return {
            "id": self.id,
            "account_id": self.account_id,
            "selected_employee_id": self.selected_employee_id,
            "expires_at": to_utc_z(self.expires_at),
            "created_at": to_utc_z(self.created_at),
        }


@dataclass
class Category:
    id: int
    name: str
    color: str = "#2F80ED"
    created_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "created_at": to_utc_z(self.created_at),
        }


@dataclass
class Product:
    id: int
    name: str
    price_cents: int
    category_id: int | None = None
    barcode: str | None = None
    image: str | None = None
    stock: int | None = None
    is_active: bool = True
    created_at: datetime | None = None

    @property
    def tracks_stock(self) -> bool:
        return self.stock is not None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": format_cents(self.price_cents),
            "category_id": self.category_id,
            "barcode": self.barcode,
            "image": self.image,
            "stock": self.stock,
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }


@dataclass
class Transaction:
    id: int
    account_id: int
    employee_id: int
    total_cents: int
    payment_method: str
    created_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "account_id": self.account_id,
            "employee_id": self.employee_id,
            "total": format_cents(self.total_cents),
            "payment_method": self.payment_method,
            "created_at": to_utc_z(self.created_at),
        }


@dataclass
class TransactionItem:
    id: int
    transaction_id: int
    product_id: int
    quantity: int
    unit_price_cents: int
    total_price_cents: int

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "transaction_id": self.transaction_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "unit_price": format_cents(self.unit_price_cents),
            "total_price": format_cents(self.total_price_cents),
        }


@dataclass(frozen=True)
class SaleLine:
    """A validated cart line, priced and ready to be recorded."""
    product_id: int
    quantity: int
    unit_price_cents: int
    total_price_cents: int


@dataclass
class RecordedSale:
    transaction: Transaction
    items: list[TransactionItem] = field(default_factory=list)
