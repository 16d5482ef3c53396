# Overview: Flask API routes for categories and products; parses input and returns JSON responses.

# backend/flouz/routes/catalog.py
"""
Catalog routes.

The catalog is shared by all accounts. Every route requires authentication;
prices travel as decimal strings ("2.50") and are stored as cents.
"""
from flask import Blueprint, current_app, jsonify, request

from ..decorators import require_auth
from ..errors import FlouzError
from ..models import Category, Product
from ..services import catalog_service
from ..validation import (
    ModelValidationPolicy,
    enforce_rules_category,
    enforce_rules_product,
    prepare_product_payload,
    validate_payload,
)

CATEGORY_POLICY = ModelValidationPolicy(
    writable_fields={"name", "color"},
    required_on_create={"name"},
)

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={"name", "price_cents", "category_id", "barcode", "image", "stock", "is_active"},
    required_on_create={"name", "price_cents"},
)

categories_bp = Blueprint("categories", __name__, url_prefix="/api/categories")
products_bp = Blueprint("products", __name__, url_prefix="/api/products")


# =============================================================================
# CATEGORIES
# =============================================================================

@categories_bp.get("")
@require_auth
def list_categories_route():
    categories = catalog_service.list_categories()
    return jsonify({"items": [c.to_dict() for c in categories], "count": len(categories)})


@categories_bp.get("/<int:category_id>")
@require_auth
def get_category_route(category_id: int):
    try:
        return jsonify(catalog_service.get_category(category_id).to_dict())
    except FlouzError as e:
        return jsonify(e.to_dict()), e.status_code


@categories_bp.post("")
@require_auth
def create_category_route():
    try:
        patch = validate_payload(
            model=Category, payload=request.get_json(silent=True), policy=CATEGORY_POLICY, partial=False
        )
        enforce_rules_category(patch)
        category = catalog_service.create_category(name=patch["name"], color=patch.get("color"))
        return jsonify(category.to_dict()), 201

    except FlouzError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create category")
        return jsonify({"error": "Internal server error"}), 500


@categories_bp.put("/<int:category_id>")
@require_auth
def update_category_route(category_id: int):
    try:
        patch = validate_payload(
            model=Category, payload=request.get_json(silent=True), policy=CATEGORY_POLICY, partial=True
        )
        enforce_rules_category(patch)
        category = catalog_service.update_category(category_id, patch)
        return jsonify(category.to_dict()), 200

    except FlouzError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update category")
        return jsonify({"error": "Internal server error"}), 500


@categories_bp.delete("/<int:category_id>")
@require_auth
def delete_category_route(category_id: int):
    """Delete a category; 400 (CategoryInUse) while products reference it."""
    try:
        catalog_service.delete_category(category_id)
        return jsonify({"ok": True}), 200

    except FlouzError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to delete category")
        return jsonify({"error": "Internal server error"}), 500


# =============================================================================
# PRODUCTS
# =============================================================================

@products_bp.get("")
@require_auth
def list_products_route():
    """
    List products.

    Query params:
    - category_id: int (optional) - only products of this category
    - active: "true" (optional) - hide deactivated products
    """
    category_id = request.args.get("category_id", type=int)
    active_only = request.args.get("active", "false").lower() == "true"

    products = catalog_service.list_products(category_id=category_id, active_only=active_only)
    return jsonify({"items": [p.to_dict() for p in products], "count": len(products)})


@products_bp.get("/<int:product_id>")
@require_auth
def get_product_route(product_id: int):
    try:
        return jsonify(catalog_service.get_product(product_id).to_dict())
    except FlouzError as e:
        return jsonify(e.to_dict()), e.status_code


@products_bp.get("/barcode/<string:barcode>")
@require_auth
def get_product_by_barcode_route(barcode: str):
    try:
        return jsonify(catalog_service.get_product_by_barcode(barcode).to_dict())
    except FlouzError as e:
        return jsonify(e.to_dict()), e.status_code


@products_bp.post("")
@require_auth
def create_product_route():
    try:
        payload = prepare_product_payload(request.get_json(silent=True) or {})
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=False)
        enforce_rules_product(patch)
        product = catalog_service.create_product(patch)
        return jsonify(product.to_dict()), 201

    except FlouzError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.put("/<int:product_id>")
@require_auth
def update_product_route(product_id: int):
    try:
        payload = prepare_product_payload(request.get_json(silent=True) or {})
        patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=True)
        enforce_rules_product(patch)
        product = catalog_service.update_product(product_id, patch)
        return jsonify(product.to_dict()), 200

    except FlouzError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update product")
        return jsonify({"error": "Internal server error"}), 500


@products_bp.delete("/<int:product_id>")
@require_auth
def delete_product_route(product_id: int):
    try:
        catalog_service.delete_product(product_id)
        return jsonify({"ok": True}), 200

    except FlouzError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to delete product")
        return jsonify({"error": "Internal server error"}), 500
