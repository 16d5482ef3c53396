# Overview: Process-local storage backend (dict per entity, incrementing ids).

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime
from itertools import count

from ..errors import ConflictError, InsufficientStock, ProductUnavailable
from ..time_utils import utcnow
from .base import (
    ACCOUNT_FIELDS,
    CATEGORY_FIELDS,
    EMPLOYEE_FIELDS,
    PRODUCT_FIELDS,
    SESSION_FIELDS,
    Storage,
    clean_patch,
)
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


class MemoryStorage(Storage):
    """
    In-memory store.

    A single re-entrant lock serializes every operation, which is what makes
    decrement_stock a real compare-and-decrement and record_sale all-or-nothing
    when several request threads share the instance. Records are copied on the
    way in and out so callers never hold a reference to stored state.
    """
    name = "memory"

    def __init__(self):
        self._lock = threading.RLock()
        self.reset()

    def reset(self) -> None:
        with self._lock:
            self._accounts: dict[int, Account] = {}
            self._employees: dict[int, Employee] = {}
            self._sessions: dict[int, Session] = {}
            self._categories: dict[int, Category] = {}
            self._products: dict[int, Product] = {}
            self._transactions: dict[int, Transaction] = {}
            self._items: dict[int, TransactionItem] = {}
            self._ids = {
                "account": count(1),
                "employee": count(1),
                "session": count(1),
                "category": count(1),
                "product": count(1),
                "transaction": count(1),
                "item": count(1),
            }

    def _next_id(self, kind: str) -> int:
        return next(self._ids[kind])

    @staticmethod
    def _merge(table: dict, key: int, patch: dict, allowed: set[str]):
        current = table.get(key)
        if current is None:
            return None
        updated = replace(current, **clean_patch(patch, allowed))
        table[key] = updated
        return replace(updated)

    # Accounts

    def create_account(self, fields: dict) -> Account:
        with self._lock:
            data = clean_patch(fields, ACCOUNT_FIELDS)
            if self._find_account_by_email(data.get("email")):
                raise ConflictError("Email already in use")
            account = Account(id=self._next_id("account"), created_at=utcnow(), **data)
            self._accounts[account.id] = account
            return replace(account)

    def _find_account_by_email(self, email: str | None) -> Account | None:
        if email is None:
            return None
        for account in self._accounts.values():
            if account.email == email:
                return account
        return None

    def get_account(self, account_id: int) -> Account | None:
        with self._lock:
            account = self._accounts.get(account_id)
            return replace(account) if account else None

    def get_account_by_email(self, email: str) -> Account | None:
        with self._lock:
            account = self._find_account_by_email(email)
            return replace(account) if account else None

    def list_accounts(self) -> list[Account]:
        with self._lock:
            return [replace(a) for a in sorted(self._accounts.values(), key=lambda a: a.id)]

    def update_account(self, account_id: int, patch: dict) -> Account | None:
        with self._lock:
            email = patch.get("email")
            if email is not None:
                other = self._find_account_by_email(email)
                if other and other.id != account_id:
                    raise ConflictError("Email already in use")
            return self._merge(self._accounts, account_id, patch, ACCOUNT_FIELDS)

    def delete_account(self, account_id: int) -> bool:
        with self._lock:
            account = self._accounts.get(account_id)
            if account is None or account.is_master:
                return False
            if any(e.account_id == account_id for e in self._employees.values()):
                return False
            self._delete_sessions_where(lambda s: s.account_id == account_id)
            del self._accounts[account_id]
            return True

    # Employees

    def create_employee(self, fields: dict) -> Employee:
        with self._lock:
            data = clean_patch(fields, EMPLOYEE_FIELDS)
            employee = Employee(id=self._next_id("employee"), created_at=utcnow(), **data)
            self._employees[employee.id] = employee
            return replace(employee)

    def get_employee(self, employee_id: int) -> Employee | None:
        with self._lock:
            employee = self._employees.get(employee_id)
            return replace(employee) if employee else None

    def list_employees(self, account_id: int | None = None) -> list[Employee]:
        with self._lock:
            rows = sorted(self._employees.values(), key=lambda e: e.id)
            if account_id is not None:
                rows = [e for e in rows if e.account_id == account_id]
            return [replace(e) for e in rows]

    def update_employee(self, employee_id: int, patch: dict) -> Employee | None:
        with self._lock:
            return self._merge(self._employees, employee_id, patch, EMPLOYEE_FIELDS)

    def delete_employee(self, employee_id: int) -> bool:
        with self._lock:
            if employee_id not in self._employees:
                return False
            if any(t.employee_id == employee_id for t in self._transactions.values()):
                return False
            for session_id, session in list(self._sessions.items()):
                if session.selected_employee_id == employee_id:
                    self._sessions[session_id] = replace(session, selected_employee_id=None)
            del self._employees[employee_id]
            return True

    # Sessions

    def create_session(self, fields: dict) -> Session:
        with self._lock:
            data = clean_patch(fields, SESSION_FIELDS)
            session = Session(id=self._next_id("session"), created_at=utcnow(), **data)
            self._sessions[session.id] = session
            return replace(session)

    def get_session_by_token(self, token_hash: str) -> Session | None:
        with self._lock:
            for session in self._sessions.values():
                if session.token_hash == token_hash:
                    return replace(session)
            return None

    def update_session(self, session_id: int, patch: dict) -> Session | None:
        with self._lock:
            return self._merge(self._sessions, session_id, patch, SESSION_FIELDS)

    def delete_session(self, session_id: int) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def _delete_sessions_where(self, predicate) -> int:
        doomed = [sid for sid, s in self._sessions.items() if predicate(s)]
        for sid in doomed:
            del self._sessions[sid]
        return len(doomed)

    def delete_sessions_for_account(self, account_id: int) -> int:
        with self._lock:
            return self._delete_sessions_where(lambda s: s.account_id == account_id)

    def delete_expired_sessions(self, now: datetime) -> int:
        with self._lock:
            return self._delete_sessions_where(lambda s: s.expires_at <= now)

    # Categories

    def create_category(self, fields: dict) -> Category:
        with self._lock:
            data = clean_patch(fields, CATEGORY_FIELDS)
            category = Category(id=self._next_id("category"), created_at=utcnow(), **data)
            self._categories[category.id] = category
            return replace(category)

    def get_category(self, category_id: int) -> Category | None:
        with self._lock:
            category = self._categories.get(category_id)
            return replace(category) if category else None

    def list_categories(self) -> list[Category]:
        with self._lock:
            return [replace(c) for c in sorted(self._categories.values(), key=lambda c: c.id)]

    def update_category(self, category_id: int, patch: dict) -> Category | None:
        with self._lock:
            return self._merge(self._categories, category_id, patch, CATEGORY_FIELDS)

    def delete_category(self, category_id: int) -> bool:
        with self._lock:
            if category_id not in self._categories:
                return False
            if any(p.category_id == category_id for p in self._products.values()):
                return False
            del self._categories[category_id]
            return True

    # Products

    def create_product(self, fields: dict) -> Product:
        with self._lock:
            data = clean_patch(fields, PRODUCT_FIELDS)
            product = Product(id=self._next_id("product"), created_at=utcnow(), **data)
            self._products[product.id] = product
            return replace(product)

    def get_product(self, product_id: int) -> Product | None:
        with self._lock:
            product = self._products.get(product_id)
            return replace(product) if product else None

    def get_product_by_barcode(self, barcode: str) -> Product | None:
        with self._lock:
            for product in sorted(self._products.values(), key=lambda p: p.id):
                if product.barcode == barcode:
                    return replace(product)
            return None

    def list_products(self, category_id: int | None = None, active_only: bool = False) -> list[Product]:
        with self._lock:
            rows = sorted(self._products.values(), key=lambda p: (p.name, p.id))
            if category_id is not None:
                rows = [p for p in rows if p.category_id == category_id]
            if active_only:
                rows = [p for p in rows if p.is_active]
            return [replace(p) for p in rows]

    def update_product(self, product_id: int, patch: dict) -> Product | None:
        with self._lock:
            return self._merge(self._products, product_id, patch, PRODUCT_FIELDS)

    def delete_product(self, product_id: int) -> bool:
        with self._lock:
            return self._products.pop(product_id, None) is not None

    def decrement_stock(self, product_id: int, quantity: int) -> bool:
        with self._lock:
            product = self._products.get(product_id)
            if product is None:
                return False
            if product.stock is None:
                return True
            if product.stock < quantity:
                return False
            self._products[product_id] = replace(product, stock=product.stock - quantity)
            return True

    # Transactions

    def record_sale(
        self,
        *,
        account_id: int,
        employee_id: int,
        payment_method: str,
        total_cents: int,
        lines: list[SaleLine],
    ) -> RecordedSale:
        with self._lock:
            # Check every decrement up front so a failure leaves nothing behind
            needed: dict[int, int] = {}
            for line in lines:
                needed[line.product_id] = needed.get(line.product_id, 0) + line.quantity
            for product_id, qty in needed.items():
                product = self._products.get(product_id)
                if product is None:
                    raise ProductUnavailable(
                        f"Product {product_id} no longer exists",
                        details={"product_id": product_id},
                    )
                if product.stock is not None and product.stock < qty:
                    raise InsufficientStock(
                        f"Insufficient stock for {product.name}",
                        details={"product_id": product_id, "requested_quantity": qty, "stock": product.stock},
                    )

            for product_id, qty in needed.items():
                self.decrement_stock(product_id, qty)

            transaction = Transaction(
                id=self._next_id("transaction"),
                account_id=account_id,
                employee_id=employee_id,
                total_cents=total_cents,
                payment_method=payment_method,
                created_at=utcnow(),
            )
            self._transactions[transaction.id] = transaction

            items = []
            for line in lines:
                item = TransactionItem(
                    id=self._next_id("item"),
                    transaction_id=transaction.id,
                    product_id=line.product_id,
                    quantity=line.quantity,
                    unit_price_cents=line.unit_price_cents,
                    total_price_cents=line.total_price_cents,
                )
                self._items[item.id] = item
                items.append(replace(item))

            return RecordedSale(transaction=replace(transaction), items=items)

    def get_transaction(self, transaction_id: int) -> Transaction | None:
        with self._lock:
            transaction = self._transactions.get(transaction_id)
            return replace(transaction) if transaction else None

    def list_transactions(
        self,
        *,
        account_id: int | None = None,
        employee_id: int | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[Transaction]:
        with self._lock:
            rows = list(self._transactions.values())
            if account_id is not None:
                rows = [t for t in rows if t.account_id == account_id]
            if employee_id is not None:
                rows = [t for t in rows if t.employee_id == employee_id]
            if since is not None:
                rows = [t for t in rows if t.created_at >= since]
            if until is not None:
                rows = [t for t in rows if t.created_at < until]
            rows.sort(key=lambda t: (t.created_at, t.id), reverse=True)
            return [replace(t) for t in rows]

    def list_transaction_items(self, transaction_id: int) -> list[TransactionItem]:
        with self._lock:
            rows = [i for i in self._items.values() if i.transaction_id == transaction_id]
            rows.sort(key=lambda i: i.id)
            return [replace(i) for i in rows]
