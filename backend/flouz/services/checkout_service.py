"""
Checkout Service - cart to Transaction

WHY: A sale is validated completely against live product state before any
write, then recorded in one atomic storage call (transaction, line items and
stock decrements together). Prices are snapshotted on the lines so later
product edits or deletions never change historical totals.

Money is integer cents end to end; totals are exact sums, no float drift.
"""

from __future__ import annotations

from flask import current_app

from ..errors import InsufficientStock, NoEmployeeSelected, NotFound, ProductUnavailable
from ..storage import get_storage
from ..storage.records import Product, RecordedSale, SaleLine, Transaction, TransactionItem
from .session_service import SessionContext


def _load_products(lines: list[tuple[int, int]]) -> dict[int, Product]:
    storage = get_storage()
    products: dict[int, Product] = {}
    for product_id, _quantity in lines:
        if product_id in products:
            continue
        product = storage.get_product(product_id)
        if product is None or not product.is_active:
            raise ProductUnavailable(
                f"Product {product_id} is not available",
                details={"product_id": product_id},
            )
        products[product_id] = product
    return products


def _validate_stock(lines: list[tuple[int, int]], products: dict[int, Product]) -> None:
    # The same product may appear on several lines; check the combined quantity
    requested: dict[int, int] = {}
    for product_id, quantity in lines:
        requested[product_id] = requested.get(product_id, 0) + quantity

    for product_id, quantity in requested.items():
        product = products[product_id]
        if product.tracks_stock and product.stock < quantity:
            raise InsufficientStock(
                f"Insufficient stock for {product.name}",
                details={
                    "product_id": product_id,
                    "requested_quantity": quantity,
                    "stock": product.stock,
                },
            )


def price_lines(lines: list[tuple[int, int]], products: dict[int, Product]) -> tuple[list[SaleLine], int]:
    """Snapshot unit prices and compute line totals and the sale total, in cents."""
    priced = []
    total_cents = 0
    for product_id, quantity in lines:
        unit_price_cents = products[product_id].price_cents
        line_total_cents = unit_price_cents * quantity
        priced.append(SaleLine(
            product_id=product_id,
            quantity=quantity,
            unit_price_cents=unit_price_cents,
            total_price_cents=line_total_cents,
        ))
        total_cents += line_total_cents
    return priced, total_cents


def checkout(context: SessionContext, lines: list[tuple[int, int]], payment_method: str) -> RecordedSale:
    """
    Record a sale for the session's selected employee.

    Raises NoEmployeeSelected, ProductUnavailable or InsufficientStock before
    anything is written. The storage layer re-checks stock atomically, so a
    concurrent sale that drained the product still fails with
    InsufficientStock and writes nothing.
    """
    if context.employee is None:
        raise NoEmployeeSelected()

    products = _load_products(lines)
    _validate_stock(lines, products)
    priced, total_cents = price_lines(lines, products)

    sale = get_storage().record_sale(
        account_id=context.account.id,
        employee_id=context.employee.id,
        payment_method=payment_method,
        total_cents=total_cents,
        lines=priced,
    )

    current_app.logger.info(
        "Recorded transaction %s: %d line(s), total_cents=%d, method=%s, employee=%s",
        sale.transaction.id,
        len(sale.items),
        sale.transaction.total_cents,
        payment_method,
        context.employee.id,
    )
    return sale


def list_transactions(context: SessionContext) -> list[Transaction]:
    """The selected employee's transactions, or the whole account's when none is selected."""
    storage = get_storage()
    if context.employee is not None:
        return storage.list_transactions(employee_id=context.employee.id)
    return storage.list_transactions(account_id=context.account.id)


def get_transaction(context: SessionContext, transaction_id: int) -> tuple[Transaction, list[TransactionItem]]:
    storage = get_storage()
    transaction = storage.get_transaction(transaction_id)
    if transaction is None or transaction.account_id != context.account.id:
        raise NotFound("Transaction not found")
    return transaction, storage.list_transaction_items(transaction.id)
