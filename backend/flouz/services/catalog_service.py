# backend/flouz/services/catalog_service.py
"""
Catalog Service

Categories and products form one catalog shared by every account.
Patches reaching this module have already been validated by the routes
(validate_payload + enforce_rules_*); this layer owns the referential rules:
- a product's category must exist
- a category cannot be deleted while a product still points at it
- product deletion is unconditional; sale lines keep their price snapshots
"""
from __future__ import annotations

from flask import current_app

from ..errors import CategoryInUse, NotFound, ValidationError
from ..storage import get_storage
from ..storage.records import Category, Product

DEFAULT_CATEGORY_COLOR = "#2F80ED"


def list_categories() -> list[Category]:
    return get_storage().list_categories()


def get_category(category_id: int) -> Category:
    category = get_storage().get_category(category_id)
    if category is None:
        raise NotFound("Category not found")
    return category


def create_category(*, name: str, color: str | None = None) -> Category:
    return get_storage().create_category({
        "name": name,
        "color": color or DEFAULT_CATEGORY_COLOR,
    })


def update_category(category_id: int, patch: dict) -> Category:
    updated = get_storage().update_category(category_id, patch)
    if updated is None:
        raise NotFound("Category not found")
    return updated


def delete_category(category_id: int) -> None:
    storage = get_storage()
    get_category(category_id)
    if not storage.delete_category(category_id):
        in_use = len(storage.list_products(category_id=category_id))
        raise CategoryInUse(
            "Category is used by products; reassign or delete them first",
            details={"category_id": category_id, "product_count": in_use},
        )


def _require_category(category_id: int | None) -> None:
    if category_id is not None and get_storage().get_category(category_id) is None:
        raise ValidationError("category_id does not reference an existing category")


def list_products(category_id: int | None = None, active_only: bool = False) -> list[Product]:
    return get_storage().list_products(category_id=category_id, active_only=active_only)


def get_product(product_id: int) -> Product:
    product = get_storage().get_product(product_id)
    if product is None:
        raise NotFound("Product not found")
    return product


def get_product_by_barcode(barcode: str) -> Product:
    product = get_storage().get_product_by_barcode(barcode)
    if product is None:
        raise NotFound("Product not found")
    return product


def create_product(patch: dict) -> Product:
    """
    Create a product from a validated patch (price already in cents).

    Stock defaults to 0 when TRACK_STOCK_BY_DEFAULT is on, otherwise to
    None (untracked); is_active defaults to True.
    """
    fields = dict(patch)
    _require_category(fields.get("category_id"))

    if "stock" not in fields:
        fields["stock"] = 0 if current_app.config.get("TRACK_STOCK_BY_DEFAULT", True) else None
    fields.setdefault("is_active", True)

    return get_storage().create_product(fields)


def update_product(product_id: int, patch: dict) -> Product:
    if "category_id" in patch:
        _require_category(patch["category_id"])
    updated = get_storage().update_product(product_id, patch)
    if updated is None:
        raise NotFound("Product not found")
    return updated


def delete_product(product_id: int) -> None:
    if not get_storage().delete_product(product_id):
        raise NotFound("Product not found")
