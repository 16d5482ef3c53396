# Overview: Flask API routes for checkout and transaction history.

# backend/flouz/routes/sales.py
"""
Sales routes.

POST /api/checkout records a whole cart at once. The session must have an
employee selected; the sale is attributed to that employee.
"""
from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth
from ..errors import FlouzError
from ..money import format_cents
from ..services import checkout_service
from ..validation import validate_checkout_payload

sales_bp = Blueprint("sales", __name__, url_prefix="/api")


@sales_bp.post("/checkout")
@require_auth
def checkout_route():
    """
    Checkout a cart.

    Request body:
    {
        "items": [{"product_id": 1, "quantity": 3}, ...],
        "payment_method": "cash" | "card" | "check"
    }

    Returns 201 with the transaction, its line items and the total.
    Nothing is written when any line fails validation or stock checks.
    """
    try:
        lines, payment_method = validate_checkout_payload(request.get_json(silent=True))
        sale = checkout_service.checkout(g.session_context, lines, payment_method)

        return jsonify({
            "transaction": sale.transaction.to_dict(),
            "items": [item.to_dict() for item in sale.items],
            "total": format_cents(sale.transaction.total_cents),
        }), 201

    except FlouzError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Checkout failed")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("/transactions")
@require_auth
def list_transactions_route():
    try:
        transactions = checkout_service.list_transactions(g.session_context)
        return jsonify({
            "items": [t.to_dict() for t in transactions],
            "count": len(transactions),
        }), 200

    except Exception:
        current_app.logger.exception("Failed to list transactions")
        return jsonify({"error": "Internal server error"}), 500


@sales_bp.get("/transactions/<int:transaction_id>")
@require_auth
def get_transaction_route(transaction_id: int):
    try:
        transaction, items = checkout_service.get_transaction(g.session_context, transaction_id)
        return jsonify({
            "transaction": transaction.to_dict(),
            "items": [item.to_dict() for item in items],
        }), 200

    except FlouzError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to load transaction")
        return jsonify({"error": "Internal server error"}), 500
