# Overview: Flask API routes for an account owner's employees.

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import require_auth
from ..errors import FlouzError
from ..models import Employee
from ..services import account_service
from ..validation import ModelValidationPolicy, validate_payload

EMPLOYEE_POLICY = ModelValidationPolicy(
    writable_fields={"first_name", "last_name", "is_active"},
    required_on_create={"first_name", "last_name"},
)

employees_bp = Blueprint("employees", __name__, url_prefix="/api/employees")


@employees_bp.get("")
@require_auth
def list_employees_route():
    employees = account_service.list_employees(g.account.id)
    return jsonify({"items": [e.to_dict() for e in employees], "count": len(employees)})


@employees_bp.post("")
@require_auth
def create_employee_route():
    try:
        patch = validate_payload(
            model=Employee, payload=request.get_json(silent=True), policy=EMPLOYEE_POLICY, partial=False
        )
        employee = account_service.create_employee(account_id=g.account.id, **patch)
        return jsonify(employee.to_dict()), 201

    except FlouzError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to create employee")
        return jsonify({"error": "Internal server error"}), 500


@employees_bp.put("/<int:employee_id>")
@require_auth
def update_employee_route(employee_id: int):
    try:
        patch = validate_payload(
            model=Employee, payload=request.get_json(silent=True), policy=EMPLOYEE_POLICY, partial=True
        )
        employee = account_service.update_employee(employee_id, patch, account_id=g.account.id)
        return jsonify(employee.to_dict()), 200

    except FlouzError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to update employee")
        return jsonify({"error": "Internal server error"}), 500


@employees_bp.delete("/<int:employee_id>")
@require_auth
def delete_employee_route(employee_id: int):
    try:
        account_service.delete_employee(employee_id, account_id=g.account.id)
        return jsonify({"ok": True}), 200

    except FlouzError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to delete employee")
        return jsonify({"error": "Internal server error"}), 500
