from __future__ import annotations

from ..extensions import db
from ..storage import records


class Transaction(db.Model):
    """A completed sale. Immutable once written."""
    __tablename__ = "transactions"
    __table_args__ = (
        db.Index("ix_transactions_account_id", "account_id"),
        db.Index("ix_transactions_employee_created", "employee_id", "created_at"),
        db.CheckConstraint(
            "payment_method IN ('cash', 'card', 'check')",
            name="ck_transactions_payment_method",
        ),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    account_id = db.Column(db.Integer, db.ForeignKey("accounts.id"), nullable=False)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=False)

    # Sum of the line totals, computed once at checkout
    total_cents = db.Column(db.Integer, nullable=False)
    payment_method = db.Column(db.String(16), nullable=False)

    created_at = db.Column(db.DateTime, nullable=False, index=True)

    items = db.relationship("TransactionItem", backref="transaction", lazy=True, order_by="TransactionItem.id")

    def to_record(self) -> records.Transaction:
        return records.Transaction(
            id=self.id,
            account_id=self.account_id,
            employee_id=self.employee_id,
            total_cents=self.total_cents,
            payment_method=self.payment_method,
            created_at=self.created_at,
        )


class TransactionItem(db.Model):
    """
    Sale line with price snapshots.

    product_id is not a foreign key: products may be deleted later and the
    line keeps its unit/total price.
    """
    __tablename__ = "transaction_items"
    __table_args__ = (
        db.CheckConstraint("quantity >= 1", name="ck_transaction_items_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    transaction_id = db.Column(db.Integer, db.ForeignKey("transactions.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    unit_price_cents = db.Column(db.Integer, nullable=False)
    total_price_cents = db.Column(db.Integer, nullable=False)

    def to_record(self) -> records.TransactionItem:
        return records.TransactionItem(
            id=self.id,
            transaction_id=self.transaction_id,
            product_id=self.product_id,
            quantity=self.quantity,
            unit_price_cents=self.unit_price_cents,
            total_price_cents=self.total_price_cents,
        )
