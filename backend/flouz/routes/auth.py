# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/flouz/routes/auth.py
"""
Authentication API routes

- Login / demo login / registration issue a bearer token
- One live session per account: logging in elsewhere kills the old token
- Employee selection binds the session to the operator who rings up sales
"""

from flask import Blueprint, current_app, g, jsonify, request

from ..decorators import bearer_token, require_auth
from ..errors import FlouzError, ValidationError
from ..services import account_service, session_service
from ..storage import get_storage
from ..validation import enforce_rules_account, require_int


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _login_response(account, session, token, status=200):
    return jsonify({
        "account": account.to_dict(),
        "token": token,
        "session": session.to_dict(),
        "message": "Login successful",
    }), status


def _credentials(data) -> tuple[str, str]:
    if not isinstance(data, dict):
        raise ValidationError("Invalid JSON payload")
    email = data.get("email")
    password = data.get("password")
    if not email or not password or not isinstance(email, str) or not isinstance(password, str):
        raise ValidationError("email and password required")
    return email, password


@auth_bp.post("/login")
def login_route():
    """
    Authenticate an account and create its session token.

    Any earlier session of the same account is invalidated.
    Token must be included in Authorization header for protected routes.
    """
    try:
        email, password = _credentials(request.get_json(silent=True))
        account, session, token = session_service.login(email, password)
        return _login_response(account, session, token)

    except FlouzError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to login account")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/demo")
def demo_login_route():
    """Log into the seeded demo account without credentials."""
    try:
        demo = get_storage().get_account_by_email(current_app.config["DEMO_EMAIL"].lower())
        if demo is None or not demo.is_demo or not demo.is_active:
            return jsonify({"error": "Demo account not available"}), 503

        session, token = session_service.create_session(demo.id)
        current_app.logger.info("Demo login (session %s)", session.id)
        return _login_response(demo, session, token)

    except Exception:
        current_app.logger.exception("Failed to login demo account")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/register")
def register_route():
    """
    Self-registration of a (non-master) account.

    Request body: {"email": "...", "password": "..."}
    The password must meet the strength policy. Returns a session token.
    """
    try:
        email, password = _credentials(request.get_json(silent=True))
        patch = {"email": email.strip()}
        enforce_rules_account(patch)

        account = account_service.create_account(email=patch["email"], password=password)
        session, token = session_service.create_session(account.id)
        current_app.logger.info("Registered account %s", account.id)
        return _login_response(account, session, token, status=201)

    except FlouzError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to register account")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/logout")
def logout_route():
    """
    Delete the session behind the bearer token.

    Idempotent: an already deleted or expired token still gets 200.
    """
    token = bearer_token()
    if token is None:
        return jsonify({"error": "Authorization header required", "code": "Unauthenticated"}), 401

    try:
        session_service.logout(token)
        return jsonify({"message": "Logout successful"}), 200

    except Exception:
        current_app.logger.exception("Failed to logout")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/me")
@require_auth
def me_route():
    """Current account, its employees and the selected employee."""
    try:
        employees = account_service.list_employees(g.account.id)
        return jsonify({
            "account": g.account.to_dict(),
            "employees": [e.to_dict() for e in employees],
            "selected_employee_id": g.employee.id if g.employee else None,
            "selected_employee": g.employee.to_dict() if g.employee else None,
            "session": g.session_context.session.to_dict(),
        }), 200

    except Exception:
        current_app.logger.exception("Failed to load current account")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.post("/select-employee")
@require_auth
def select_employee_route():
    """
    Bind an employee of this account to the session.

    Request body: {"employee_id": 3}
    """
    try:
        employee_id = require_int(request.get_json(silent=True) or {}, "employee_id")
        employee = session_service.select_employee(g.session_context, employee_id)
        return jsonify({"selected_employee": employee.to_dict()}), 200

    except FlouzError as e:
        return jsonify(e.to_dict()), e.status_code
    except Exception:
        current_app.logger.exception("Failed to select employee")
        return jsonify({"error": "Internal server error"}), 500
