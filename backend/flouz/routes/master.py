# Overview: Flask API routes for the master tier; accounts, employees and analytics across all accounts.

# backend/flouz/routes/master.py
"""
Master routes.

Provides endpoints for:
- Account management (list, create, update, toggle, delete)
- Employee management across every account
- Platform analytics

All endpoints require authentication and a master account (403 otherwise).
"""

from flask import Blueprint, current_app, jsonify, request

from ..decorators import master_required, require_auth
from ..errors import FlouzError, ValidationError
from ..models import Account, Employee
from ..services import account_service, reporting_service
from ..validation import ModelValidationPolicy, enforce_rules_account, validate_payload

ACCOUNT_POLICY = ModelValidationPolicy(
    writable_fields={"email", "is_demo", "is_active", "telegram_chat_id", "telegram_bot_token"},
    required_on_create={"email"},
)

MASTER_EMPLOYEE_POLICY = ModelValidationPolicy(
    writable_fields={"account_id", "first_name", "last_name", "is_active"},
    required_on_create={"account_id", "first_name", "last_name"},
)

master_bp = Blueprint("master", __name__, url_prefix="/api/master")


def _split_password(data) -> tuple[dict, str | None]:
    """Password is not a column; pull it out before column validation."""
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")
    data = dict(data)
    password = data.pop("password", None)
    if password is not None and not isinstance(password, str):
        raise ValidationError("password must be a string")
    return data, password or None


# =============================================================================
# ACCOUNT MANAGEMENT
# =============================================================================

@master_bp.get("/accounts")
@require_auth
@master_required
def list_accounts_route():
    """List every account with its employee count and Telegram settings."""
    accounts = account_service.list_accounts_with_counts()
    return jsonify({"items": accounts, "count": len(accounts)})


@master_bp.get("/accounts/<int:account_id>")
@require_auth
@master_required
def get_account_route(account_id: int):
    try:
        account = account_service.get_account(account_id)
        data = account.to_dict(include_secrets=True)
        data["employees"] = [e.to_dict() for e in account_service.list_employees(account_id)]
        return jsonify(data), 200

    except FlouzError as e:
        return jsonify(e.to_dict()), e.status_code


@master_bp.post("/accounts")
@require_auth
@master_required
def create_account_route():
    """
    Create an account.

    Request body:
    {
        "email": "shop@example.com",
        "password": "Secret123!",
        "is_active": true,                  (optional)
        "telegram_chat_id": "...",          (optional)
        "telegram_bot_token": "..."         (optional)
    }
    """
    try:
        data, password = _split_password(request.get_json(silent=True))
        if password is None:
            raise ValidationError("Missing required fields: password")

        patch = validate_payload(model=Account, payload=data, policy=ACCOUNT_POLICY, partial=False)
        enforce_rules_account(patch)

        account = account_service.create_account(password=password, **patch)
        current_app.logger.info("Master created account %s", account.id)
        return jsonify(account.to_dict(include_secrets=True)), 201

    except FlouzError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create account")
        return jsonify({"error": "Internal server error"}), 500


@master_bp.put("/accounts/<int:account_id>")
@require_auth
@master_required
def update_account_route(account_id: int):
    """
    Update an account. A new "password" is hashed; changing the password or
    deactivating the account ends its session.
    """
    try:
        data, password = _split_password(request.get_json(silent=True))
        patch = validate_payload(model=Account, payload=data, policy=ACCOUNT_POLICY, partial=True)
        enforce_rules_account(patch)

        account = account_service.update_account(account_id, patch, password=password)
        return jsonify(account.to_dict(include_secrets=True)), 200

    except FlouzError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update account")
        return jsonify({"error": "Internal server error"}), 500


@master_bp.post("/accounts/<int:account_id>/toggle")
@require_auth
@master_required
def toggle_account_route(account_id: int):
    try:
        account = account_service.toggle_account(account_id)
        current_app.logger.info(
            "Account %s %s", account.id, "activated" if account.is_active else "deactivated"
        )
        return jsonify(account.to_dict(include_secrets=True)), 200

    except FlouzError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to toggle account")
        return jsonify({"error": "Internal server error"}), 500


@master_bp.delete("/accounts/<int:account_id>")
@require_auth
@master_required
def delete_account_route(account_id: int):
    """Refused (400, AccountInUse) for master accounts and accounts that still have employees."""
    try:
        account_service.delete_account(account_id)
        return jsonify({"ok": True}), 200

    except FlouzError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to delete account")
        return jsonify({"error": "Internal server error"}), 500


# =============================================================================
# EMPLOYEE MANAGEMENT
# =============================================================================

@master_bp.get("/employees")
@require_auth
@master_required
def list_all_employees_route():
    """
    List employees.

    Query params:
    - account_id: int (optional) - only employees of this account
    """
    account_id = request.args.get("account_id", type=int)
    employees = account_service.list_employees(account_id)
    return jsonify({"items": [e.to_dict() for e in employees], "count": len(employees)})


@master_bp.post("/employees")
@require_auth
@master_required
def create_any_employee_route():
    try:
        patch = validate_payload(
            model=Employee,
            payload=request.get_json(silent=True),
            policy=MASTER_EMPLOYEE_POLICY,
            partial=False,
        )
        employee = account_service.create_employee(**patch)
        return jsonify(employee.to_dict()), 201

    except FlouzError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create employee")
        return jsonify({"error": "Internal server error"}), 500


@master_bp.put("/employees/<int:employee_id>")
@require_auth
@master_required
def update_any_employee_route(employee_id: int):
    try:
        patch = validate_payload(
            model=Employee,
            payload=request.get_json(silent=True),
            policy=MASTER_EMPLOYEE_POLICY,
            partial=True,
        )
        employee = account_service.update_employee(employee_id, patch)
        return jsonify(employee.to_dict()), 200

    except FlouzError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update employee")
        return jsonify({"error": "Internal server error"}), 500


@master_bp.delete("/employees/<int:employee_id>")
@require_auth
@master_required
def delete_any_employee_route(employee_id: int):
    try:
        account_service.delete_employee(employee_id)
        return jsonify({"ok": True}), 200

    except FlouzError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to delete employee")
        return jsonify({"error": "Internal server error"}), 500


# =============================================================================
# ANALYTICS
# =============================================================================

@master_bp.get("/analytics")
@require_auth
@master_required
def analytics_route():
    try:
        return jsonify(reporting_service.master_analytics()), 200
    except Exception:
        current_app.logger.exception("Failed to compute analytics")
        return jsonify({"error": "Internal server error"}), 500
