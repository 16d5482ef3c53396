# Overview: Storage contract shared by the memory and database backends.

"""
Storage contract.

Rules every backend follows:
- create_* assigns a monotonically increasing integer id and created_at.
- get_* / lookups return None or an empty list for "no match", never raise.
- update_* merges the given fields and returns None for an unknown id.
- delete_* returns False when the record is missing or deletion is refused
  (master accounts, accounts owning employees, employees referenced by
  transactions, categories referenced by products).
- record_sale writes a transaction, its items and the stock decrements as
  one unit; if any decrement fails nothing is written.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from .records import (
    Account,
    Category,
    Employee,
    Product,
    RecordedSale,
    SaleLine,
    Session,
    Transaction,
    TransactionItem,
)

ACCOUNT_FIELDS = {
    "email", "password_hash", "is_demo", "is_master", "is_active",
    "telegram_chat_id", "telegram_bot_token",
}
EMPLOYEE_FIELDS = {"account_id", "first_name", "last_name", "is_active"}
SESSION_FIELDS = {"account_id", "selected_employee_id", "token_hash", "expires_at"}
CATEGORY_FIELDS = {"name", "color"}
PRODUCT_FIELDS = {"name", "price_cents", "category_id", "barcode", "image", "stock", "is_active"}


def clean_patch(patch: dict, allowed: set[str]) -> dict:
    """Drop keys a caller may not write (id, created_at, unknown names)."""
    return {k: v for k, v in patch.items() if k in allowed}


class Storage(ABC):
    name = "abstract"

    # Accounts

    @abstractmethod
    def create_account(self, fields: dict) -> Account: ...

    @abstractmethod
    def get_account(self, account_id: int) -> Account | None: ...

    @abstractmethod
    def get_account_by_email(self, email: str) -> Account | None: ...

    @abstractmethod
    def list_accounts(self) -> list[Account]: ...

    @abstractmethod
    def update_account(self, account_id: int, patch: dict) -> Account | None: ...

    @abstractmethod
    def delete_account(self, account_id: int) -> bool: ...

    # Employees

    @abstractmethod
    def create_employee(self, fields: dict) -> Employee: ...

    @abstractmethod
    def get_employee(self, employee_id: int) -> Employee | None: ...

    @abstractmethod
    def list_employees(self, account_id: int | None = None) -> list[Employee]: ...

    @abstractmethod
    def update_employee(self, employee_id: int, patch: dict) -> Employee | None: ...

    @abstractmethod
    def delete_employee(self, employee_id: int) -> bool: ...

    # Sessions

    @abstractmethod
    def create_session(self, fields: dict) -> Session: ...

    @abstractmethod
    def get_session_by_token(self, token_hash: str) -> Session | None: ...

    @abstractmethod
    def update_session(self, session_id: int, patch: dict) -> Session | None: ...

    @abstractmethod
    def delete_session(self, session_id: int) -> bool: ...

    @abstractmethod
    def delete_sessions_for_account(self, account_id: int) -> int: ...

    @abstractmethod
    def delete_expired_sessions(self, now: datetime) -> int: ...

    # Categories

    @abstractmethod
    def create_category(self, fields: dict) -> Category: ...

    @abstractmethod
    def get_category(self, category_id: int) -> Category | None: ...

    @abstractmethod
    def list_categories(self) -> list[Category]: ...

    @abstractmethod
    def update_category(self, category_id: int, patch: dict) -> Category | None: ...

    @abstractmethod
    def delete_category(self, category_id: int) -> bool: ...

    # Products

    @abstractmethod
    def create_product(self, fields: dict) -> Product: ...

    @abstractmethod
    def get_product(self, product_id: int) -> Product | None: ...

    @abstractmethod
    def get_product_by_barcode(self, barcode: str) -> Product | None: ...

    @abstractmethod
    def list_products(self, category_id: int | None = None, active_only: bool = False) -> list[Product]: ...

    @abstractmethod
    def update_product(self, product_id: int, patch: dict) -> Product | None: ...

    @abstractmethod
    def delete_product(self, product_id: int) -> bool: ...

    @abstractmethod
    def decrement_stock(self, product_id: int, quantity: int) -> bool:
        """Lower tracked stock by quantity only if enough remains; untracked stock always succeeds."""

    # Transactions

    @abstractmethod
    def record_sale(
        self,
        *,
        account_id: int,
        employee_id: int,
        payment_method: str,
        total_cents: int,
        lines: list[SaleLine],
    ) -> RecordedSale: ...

    @abstractmethod
    def get_transaction(self, transaction_id: int) -> Transaction | None: ...

    @abstractmethod
    def list_transactions(
        self,
        *,
        account_id: int | None = None,
        employee_id: int | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[Transaction]:
        """Newest first. `since` is inclusive, `until` exclusive."""

    @abstractmethod
    def list_transaction_items(self, transaction_id: int) -> list[TransactionItem]: ...

    # Lifecycle

    def reset(self) -> None:
        """Drop everything (tests and `flask system reset-db`)."""
        raise NotImplementedError
