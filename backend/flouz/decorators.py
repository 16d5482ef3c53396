# Overview: Request decorators for API routes (bearer auth and master gating).

from functools import wraps

from flask import g, jsonify, request

from .errors import Forbidden, Unauthenticated
from .services import session_service


def bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    token = auth_header.split(" ", 1)[1].strip()
    return token or None


def require_auth(f):
    """
    Require a valid bearer token.

    Sets the following Flask g attributes:
    - g.token: the plaintext bearer token
    - g.session_context: SessionContext(account, session, employee)
    - g.account: the authenticated Account record
    - g.employee: the selected Employee record or None

    Returns 401 if the header is missing, the token is unknown or expired,
    or the account has been deactivated.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = bearer_token()
        if token is None:
            return jsonify({"error": "Authentication required", "code": "Unauthenticated"}), 401

        try:
            context = session_service.resolve_token(token)
        except Unauthenticated as e:
            return jsonify(e.to_dict()), e.status_code

        g.token = token
        g.session_context = context
        g.account = context.account
        g.employee = context.employee

        return f(*args, **kwargs)

    return decorated_function


def require_master(account) -> None:
    """Raise Forbidden unless the account is a master account."""
    if account is None or not account.is_master:
        raise Forbidden("Master access required")


def master_required(f):
    """Route guard; stack under @require_auth."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not hasattr(g, "account"):
            return jsonify({"error": "Authentication required", "code": "Unauthenticated"}), 401
        try:
            require_master(g.account)
        except Forbidden as e:
            return jsonify(e.to_dict()), e.status_code
        return f(*args, **kwargs)
    return decorated_function
