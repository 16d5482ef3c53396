"""
Storage contract suite.

Runs against both backends through the parametrized app fixture; both must
behave identically.
"""

import threading
from datetime import timedelta

import pytest

from flouz.errors import ConflictError, InsufficientStock, ProductUnavailable
from flouz.storage import get_storage
from flouz.storage.memory import MemoryStorage
from flouz.storage.records import SaleLine
from flouz.time_utils import utcnow


@pytest.fixture
def storage(app):
    return get_storage()


@pytest.fixture
def account(storage):
    return storage.create_account({"email": "shop@shop.test", "password_hash": "x"})


@pytest.fixture
def employee(storage, account):
    return storage.create_employee({"account_id": account.id, "first_name": "Alice", "last_name": "Martin"})


def _product(storage, **fields):
    data = {"name": "Coca-Cola", "price_cents": 250, "stock": 5, "is_active": True}
    data.update(fields)
    return storage.create_product(data)


def _sale(storage, account, employee, product, quantity, payment_method="cash"):
    line = SaleLine(
        product_id=product.id,
        quantity=quantity,
        unit_price_cents=product.price_cents,
        total_price_cents=product.price_cents * quantity,
    )
    return storage.record_sale(
        account_id=account.id,
        employee_id=employee.id,
        payment_method=payment_method,
        total_cents=line.total_price_cents,
        lines=[line],
    )


class TestAccounts:

    def test_ids_and_defaults(self, storage, account):
        assert account.id == 1
        assert account.is_active is True
        assert account.is_master is False
        assert account.created_at is not None
        assert storage.get_account_by_email("shop@shop.test").id == account.id

    def test_duplicate_email(self, storage, account):
        with pytest.raises(ConflictError):
            storage.create_account({"email": "shop@shop.test", "password_hash": "y"})

    def test_update_unknown_returns_none(self, storage):
        assert storage.update_account(42, {"is_active": False}) is None

    def test_returned_records_are_copies(self, storage, account):
        account.email = "mutated@shop.test"
        assert storage.get_account(account.id).email == "shop@shop.test"


class TestSessions:

    def test_lookup_by_token_hash(self, storage, account):
        session = storage.create_session({
            "account_id": account.id,
            "token_hash": "a" * 64,
            "expires_at": utcnow() + timedelta(days=7),
        })
        assert storage.get_session_by_token("a" * 64).id == session.id
        assert storage.get_session_by_token("b" * 64) is None

    def test_delete_for_account_and_expired(self, storage, account):
        now = utcnow()
        storage.create_session({"account_id": account.id, "token_hash": "a" * 64, "expires_at": now - timedelta(seconds=1)})
        storage.create_session({"account_id": account.id, "token_hash": "b" * 64, "expires_at": now + timedelta(days=1)})

        assert storage.delete_expired_sessions(now) == 1
        assert storage.get_session_by_token("a" * 64) is None
        assert storage.delete_sessions_for_account(account.id) == 1
        assert storage.get_session_by_token("b" * 64) is None


class TestCatalog:

    def test_category_delete_blocked_while_referenced(self, storage):
        category = storage.create_category({"name": "Boissons"})
        assert category.color == "#2F80ED"
        product = _product(storage, category_id=category.id)

        assert storage.delete_category(category.id) is False
        storage.update_product(product.id, {"category_id": None})
        assert storage.delete_category(category.id) is True
        assert storage.get_category(category.id) is None

    def test_product_queries(self, storage):
        snacks = storage.create_category({"name": "Snacks"})
        _product(storage, name="Chips", category_id=snacks.id, barcode="111")
        _product(storage, name="Bonbons", category_id=snacks.id, is_active=False)
        _product(storage, name="Eau")

        assert [p.name for p in storage.list_products()] == ["Bonbons", "Chips", "Eau"]
        assert [p.name for p in storage.list_products(category_id=snacks.id, active_only=True)] == ["Chips"]
        assert storage.get_product_by_barcode("111").name == "Chips"
        assert storage.get_product_by_barcode("222") is None

    def test_decrement_stock(self, storage):
        tracked = _product(storage, stock=2)
        untracked = _product(storage, name="Café", stock=None)

        assert storage.decrement_stock(tracked.id, 2) is True
        assert storage.decrement_stock(tracked.id, 1) is False
        assert storage.get_product(tracked.id).stock == 0

        assert storage.decrement_stock(untracked.id, 1000) is True
        assert storage.get_product(untracked.id).stock is None


class TestRecordSale:

    def test_writes_transaction_items_and_stock(self, storage, account, employee):
        product = _product(storage)
        sale = _sale(storage, account, employee, product, 3)

        assert sale.transaction.total_cents == 750
        assert [(i.product_id, i.quantity, i.total_price_cents) for i in sale.items] == [(product.id, 3, 750)]
        assert storage.get_product(product.id).stock == 2
        assert storage.get_transaction(sale.transaction.id).payment_method == "cash"
        assert len(storage.list_transaction_items(sale.transaction.id)) == 1

    def test_insufficient_stock_writes_nothing(self, storage, account, employee):
        product = _product(storage, stock=2)
        with pytest.raises(InsufficientStock):
            _sale(storage, account, employee, product, 3)

        assert storage.get_product(product.id).stock == 2
        assert storage.list_transactions() == []

    def test_missing_product_writes_nothing(self, storage, account, employee):
        product = _product(storage)
        storage.delete_product(product.id)
        with pytest.raises(ProductUnavailable):
            _sale(storage, account, employee, product, 1)
        assert storage.list_transactions() == []

    def test_employee_with_sales_cannot_be_deleted(self, storage, account, employee):
        _sale(storage, account, employee, _product(storage), 1)
        assert storage.delete_employee(employee.id) is False
        assert storage.delete_account(account.id) is False

    def test_list_filters_newest_first(self, storage, account, employee):
        product = _product(storage, stock=None)
        first = _sale(storage, account, employee, product, 1)
        second = _sale(storage, account, employee, product, 2, "card")

        ids = [t.id for t in storage.list_transactions(employee_id=employee.id)]
        assert ids == [second.transaction.id, first.transaction.id]

        assert storage.list_transactions(account_id=account.id + 1) == []
        assert storage.list_transactions(since=utcnow() + timedelta(minutes=1)) == []
        assert len(storage.list_transactions(until=utcnow() + timedelta(minutes=1))) == 2


def test_parallel_sales_never_oversell():
    """Eight cashiers race for the last three units; exactly three sales land."""
    storage = MemoryStorage()
    account = storage.create_account({"email": "shop@shop.test", "password_hash": "x"})
    employee = storage.create_employee({"account_id": account.id, "first_name": "Alice", "last_name": "Martin"})
    product = _product(storage, stock=3)

    start = threading.Barrier(8)
    outcomes = []

    def sell():
        start.wait()
        try:
            _sale(storage, account, employee, product, 1)
            outcomes.append("sold")
        except InsufficientStock:
            outcomes.append("refused")

    threads = [threading.Thread(target=sell) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    assert sorted(outcomes) == ["refused"] * 5 + ["sold"] * 3
    assert storage.get_product(product.id).stock == 0
    assert len(storage.list_transactions()) == 3
    assert sum(len(storage.list_transaction_items(t.id)) for t in storage.list_transactions()) == 3
