# Overview: Idempotent bootstrap of the master account and the demo tenant.

"""
Bootstrap data.

Safe to run any number of times: each piece is only created when missing
(master and demo accounts by email, demo catalog only when the catalog is
empty). Used by `flask system init` and by SEED_ON_STARTUP.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from flask import current_app

from ..money import parse_money
from ..storage import get_storage
from . import account_service

DEMO_CATEGORIES = [
    ("Boissons", "#2F80ED"),
    ("Snacks", "#56CCF2"),
    ("Plats", "#27AE60"),
    ("Desserts", "#F2994A"),
]

# (name, price, category name, stock)
DEMO_PRODUCTS = [
    ("Coca-Cola", "2.50", "Boissons", 50),
    ("Eau minérale", "1.20", "Boissons", 30),
    ("Café", "1.80", "Boissons", 100),
    ("Chips", "3.50", "Snacks", 25),
    ("Sandwich jambon", "4.50", "Plats", 15),
    ("Salade César", "7.90", "Plats", 10),
    ("Muffin chocolat", "2.80", "Desserts", 20),
    ("Tarte aux pommes", "3.20", "Desserts", 12),
]


@dataclass
class BootstrapReport:
    created: list[str] = field(default_factory=list)
    existing: list[str] = field(default_factory=list)


def _ensure_account(report: BootstrapReport, *, email: str, password: str, is_master: bool, is_demo: bool):
    storage = get_storage()
    account = storage.get_account_by_email(email.lower())
    if account is not None:
        report.existing.append(f"account {account.email}")
        return account, False
    account = account_service.create_account(
        email=email,
        password=password,
        is_master=is_master,
        is_demo=is_demo,
    )
    report.created.append(f"account {account.email}")
    return account, True


def bootstrap(include_demo: bool = True) -> BootstrapReport:
    config = current_app.config
    storage = get_storage()
    report = BootstrapReport()

    _ensure_account(
        report,
        email=config["MASTER_EMAIL"],
        password=config["MASTER_PASSWORD"],
        is_master=True,
        is_demo=False,
    )

    if not include_demo:
        return report

    demo, created = _ensure_account(
        report,
        email=config["DEMO_EMAIL"],
        password=config["DEMO_PASSWORD"],
        is_master=False,
        is_demo=True,
    )
    if created or not storage.list_employees(demo.id):
        account_service.create_employee(account_id=demo.id, first_name="Demo", last_name="User")
        report.created.append("employee Demo User")

    if storage.list_categories() or storage.list_products():
        report.existing.append("catalog")
        return report

    category_ids = {}
    for name, color in DEMO_CATEGORIES:
        category_ids[name] = storage.create_category({"name": name, "color": color}).id
    for name, price, category_name, stock in DEMO_PRODUCTS:
        storage.create_product({
            "name": name,
            "price_cents": parse_money(price, "price"),
            "category_id": category_ids[category_name],
            "stock": stock,
            "is_active": True,
        })
    report.created.append(f"{len(DEMO_CATEGORIES)} categories, {len(DEMO_PRODUCTS)} products")

    current_app.logger.info("Bootstrap created: %s", ", ".join(report.created) or "nothing")
    return report
