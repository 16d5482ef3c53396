# Overview: Relational storage backend on Flask-SQLAlchemy models.

from __future__ import annotations

from datetime import datetime

from sqlalchemy.exc import IntegrityError

from ..errors import ConflictError, InsufficientStock, ProductUnavailable
from ..extensions import db
from ..models import Account, Category, Employee, Product, SessionToken, Transaction, TransactionItem
from ..services.concurrency import lock_for_update, run_with_retry
from ..time_utils import utcnow
from . import records
from .base import (
    ACCOUNT_FIELDS,
    CATEGORY_FIELDS,
    EMPLOYEE_FIELDS,
    PRODUCT_FIELDS,
    SESSION_FIELDS,
    Storage,
    clean_patch,
)


def _record(row):
    return row.to_record() if row is not None else None


class DatabaseStorage(Storage):
    """
    Storage on the application's SQLAlchemy session.

    Every public method commits (or rolls back) before returning, so a call
    is one database transaction. Must be used inside an app context.
    """
    name = "database"

    def reset(self) -> None:
        db.session.remove()
        db.drop_all()
        db.create_all()

    def _create(self, model, fields: dict, allowed: set[str]):
        row = model(created_at=utcnow(), **clean_patch(fields, allowed))
        db.session.add(row)
        db.session.commit()
        return row.to_record()

    def _update(self, model, key: int, patch: dict, allowed: set[str]):
        row = db.session.get(model, key)
        if row is None:
            return None
        for k, v in clean_patch(patch, allowed).items():
            setattr(row, k, v)
        db.session.commit()
        return row.to_record()

    # Accounts

    def create_account(self, fields: dict) -> records.Account:
        if self.get_account_by_email(fields.get("email")):
            raise ConflictError("Email already in use")
        try:
            return self._create(Account, fields, ACCOUNT_FIELDS)
        except IntegrityError:
            db.session.rollback()
            raise ConflictError("Email already in use")

    def get_account(self, account_id: int) -> records.Account | None:
        return _record(db.session.get(Account, account_id))

    def get_account_by_email(self, email: str) -> records.Account | None:
        return _record(db.session.query(Account).filter_by(email=email).first())

    def list_accounts(self) -> list[records.Account]:
        return [a.to_record() for a in db.session.query(Account).order_by(Account.id.asc()).all()]

    def update_account(self, account_id: int, patch: dict) -> records.Account | None:
        email = patch.get("email")
        if email is not None:
            other = db.session.query(Account).filter(Account.email == email, Account.id != account_id).first()
            if other:
                raise ConflictError("Email already in use")
        try:
            return self._update(Account, account_id, patch, ACCOUNT_FIELDS)
        except IntegrityError:
            db.session.rollback()
            raise ConflictError("Email already in use")

    def delete_account(self, account_id: int) -> bool:
        account = db.session.get(Account, account_id)
        if account is None or account.is_master:
            return False
        if db.session.query(Employee).filter_by(account_id=account_id).count():
            return False
        db.session.query(SessionToken).filter_by(account_id=account_id).delete()
        db.session.delete(account)
        db.session.commit()
        return True

    # Employees

    def create_employee(self, fields: dict) -> records.Employee:
        return self._create(Employee, fields, EMPLOYEE_FIELDS)

    def get_employee(self, employee_id: int) -> records.Employee | None:
        return _record(db.session.get(Employee, employee_id))

    def list_employees(self, account_id: int | None = None) -> list[records.Employee]:
        query = db.session.query(Employee)
        if account_id is not None:
            query = query.filter(Employee.account_id == account_id)
        return [e.to_record() for e in query.order_by(Employee.id.asc()).all()]

    def update_employee(self, employee_id: int, patch: dict) -> records.Employee | None:
        return self._update(Employee, employee_id, patch, EMPLOYEE_FIELDS)

    def delete_employee(self, employee_id: int) -> bool:
        employee = db.session.get(Employee, employee_id)
        if employee is None:
            return False
        if db.session.query(Transaction).filter_by(employee_id=employee_id).count():
            return False
        db.session.query(SessionToken).filter_by(selected_employee_id=employee_id).update(
            {SessionToken.selected_employee_id: None}, synchronize_session=False
        )
        db.session.delete(employee)
        db.session.commit()
        return True

    # Sessions

    def create_session(self, fields: dict) -> records.Session:
        return self._create(SessionToken, fields, SESSION_FIELDS)

    def get_session_by_token(self, token_hash: str) -> records.Session | None:
        return _record(db.session.query(SessionToken).filter_by(token_hash=token_hash).first())

    def update_session(self, session_id: int, patch: dict) -> records.Session | None:
        return self._update(SessionToken, session_id, patch, SESSION_FIELDS)

    def delete_session(self, session_id: int) -> bool:
        deleted = db.session.query(SessionToken).filter_by(id=session_id).delete()
        db.session.commit()
        return deleted > 0

    def delete_sessions_for_account(self, account_id: int) -> int:
        deleted = db.session.query(SessionToken).filter_by(account_id=account_id).delete()
        db.session.commit()
        return deleted

    def delete_expired_sessions(self, now: datetime) -> int:
        deleted = db.session.query(SessionToken).filter(SessionToken.expires_at <= now).delete()
        db.session.commit()
        return deleted

    # Categories

    def create_category(self, fields: dict) -> records.Category:
        return self._create(Category, fields, CATEGORY_FIELDS)

    def get_category(self, category_id: int) -> records.Category | None:
        return _record(db.session.get(Category, category_id))

    def list_categories(self) -> list[records.Category]:
        return [c.to_record() for c in db.session.query(Category).order_by(Category.id.asc()).all()]

    def update_category(self, category_id: int, patch: dict) -> records.Category | None:
        return self._update(Category, category_id, patch, CATEGORY_FIELDS)

    def delete_category(self, category_id: int) -> bool:
        category = db.session.get(Category, category_id)
        if category is None:
            return False
        if db.session.query(Product).filter_by(category_id=category_id).count():
            return False
        db.session.delete(category)
        db.session.commit()
        return True

    # Products

    def create_product(self, fields: dict) -> records.Product:
        return self._create(Product, fields, PRODUCT_FIELDS)

    def get_product(self, product_id: int) -> records.Product | None:
        return _record(db.session.get(Product, product_id))

    def get_product_by_barcode(self, barcode: str) -> records.Product | None:
        row = db.session.query(Product).filter_by(barcode=barcode).order_by(Product.id.asc()).first()
        return _record(row)

    def list_products(self, category_id: int | None = None, active_only: bool = False) -> list[records.Product]:
        query = db.session.query(Product)
        if category_id is not None:
            query = query.filter(Product.category_id == category_id)
        if active_only:
            query = query.filter(Product.is_active.is_(True))
        return [p.to_record() for p in query.order_by(Product.name.asc(), Product.id.asc()).all()]

    def update_product(self, product_id: int, patch: dict) -> records.Product | None:
        return self._update(Product, product_id, patch, PRODUCT_FIELDS)

    def delete_product(self, product_id: int) -> bool:
        deleted = db.session.query(Product).filter_by(id=product_id).delete()
        db.session.commit()
        return deleted > 0

    def _conditional_decrement(self, product_id: int, quantity: int) -> int:
        """UPDATE ... SET stock = stock - :qty WHERE id = :id AND stock >= :qty; returns rowcount."""
        return db.session.query(Product).filter(
            Product.id == product_id,
            Product.stock.isnot(None),
            Product.stock >= quantity,
        ).update({Product.stock: Product.stock - quantity}, synchronize_session=False)

    def decrement_stock(self, product_id: int, quantity: int) -> bool:
        def _op():
            product = lock_for_update(db.session.query(Product).filter_by(id=product_id)).first()
            if product is None:
                db.session.rollback()
                return False
            if product.stock is None:
                db.session.rollback()
                return True
            updated = self._conditional_decrement(product_id, quantity)
            db.session.commit()
            return updated == 1

        return run_with_retry(_op)

    # Transactions

    def record_sale(
        self,
        *,
        account_id: int,
        employee_id: int,
        payment_method: str,
        total_cents: int,
        lines: list[records.SaleLine],
    ) -> records.RecordedSale:
        needed: dict[int, int] = {}
        for line in lines:
            needed[line.product_id] = needed.get(line.product_id, 0) + line.quantity

        def _op():
            try:
                for product_id, qty in needed.items():
                    product = lock_for_update(db.session.query(Product).filter_by(id=product_id)).first()
                    if product is None:
                        raise ProductUnavailable(
                            f"Product {product_id} no longer exists",
                            details={"product_id": product_id},
                        )
                    if product.stock is None:
                        continue
                    if self._conditional_decrement(product_id, qty) != 1:
                        raise InsufficientStock(
                            f"Insufficient stock for {product.name}",
                            details={"product_id": product_id, "requested_quantity": qty, "stock": product.stock},
                        )

                transaction = Transaction(
                    account_id=account_id,
                    employee_id=employee_id,
                    total_cents=total_cents,
                    payment_method=payment_method,
                    created_at=utcnow(),
                )
                db.session.add(transaction)
                db.session.flush()  # ensure transaction.id exists before adding lines

                items = []
                for line in lines:
                    item = TransactionItem(
                        transaction_id=transaction.id,
                        product_id=line.product_id,
                        quantity=line.quantity,
                        unit_price_cents=line.unit_price_cents,
                        total_price_cents=line.total_price_cents,
                    )
                    db.session.add(item)
                    items.append(item)

                db.session.commit()
            except Exception:
                db.session.rollback()
                raise

            return records.RecordedSale(
                transaction=transaction.to_record(),
                items=[item.to_record() for item in items],
            )

        return run_with_retry(_op)

    def get_transaction(self, transaction_id: int) -> records.Transaction | None:
        return _record(db.session.get(Transaction, transaction_id))

    def list_transactions(
        self,
        *,
        account_id: int | None = None,
        employee_id: int | None = None,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[records.Transaction]:
        query = db.session.query(Transaction)
        if account_id is not None:
            query = query.filter(Transaction.account_id == account_id)
        if employee_id is not None:
            query = query.filter(Transaction.employee_id == employee_id)
        if since is not None:
            query = query.filter(Transaction.created_at >= since)
        if until is not None:
            query = query.filter(Transaction.created_at < until)
        rows = query.order_by(Transaction.created_at.desc(), Transaction.id.desc()).all()
        return [t.to_record() for t in rows]

    def list_transaction_items(self, transaction_id: int) -> list[records.TransactionItem]:
        rows = (
            db.session.query(TransactionItem)
            .filter_by(transaction_id=transaction_id)
            .order_by(TransactionItem.id.asc())
            .all()
        )
        return [i.to_record() for i in rows]
