# Overview: Service-layer operations for sessions; bearer tokens and the single-session rule.

"""
Session Token Management Service

WHY: One live session per account. A new login deletes every earlier
session of that account, so the previous till's token fails on its next
request; that is the only mutual exclusion between operators of a tenant.

SECURITY FEATURES:
- Cryptographically secure random tokens (32 bytes)
- Tokens hashed with SHA-256 before storage (fast, one-way)
- Fixed expiry (SESSION_TTL_DAYS, 7 days) checked lazily on every lookup
- Expired sessions are deleted when they are presented
"""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import timedelta

from flask import current_app

from ..errors import InvalidSelection, Unauthenticated
from ..storage import get_storage
from ..storage.records import Account, Employee, Session
from ..time_utils import utcnow
from . import auth_service


@dataclass
class SessionContext:
    """Everything a request needs to know about its caller."""
    account: Account
    session: Session
    employee: Employee | None = None


def generate_token() -> str:
    """
    Generate cryptographically secure random token.

    Returns 64-character hex string (32 bytes of entropy).
    This is the plaintext token sent to client (never stored).
    """
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """
    Hash token for storage using SHA-256.

    WHY SHA-256 not bcrypt: tokens are already high-entropy (unlike passwords).
    """
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def session_ttl() -> timedelta:
    return timedelta(days=int(current_app.config.get("SESSION_TTL_DAYS", 7)))


def create_session(account_id: int) -> tuple[Session, str]:
    """
    Replace every session of the account with a fresh one.

    Returns (session_record, plaintext_token).
    """
    storage = get_storage()
    invalidated = storage.delete_sessions_for_account(account_id)
    if invalidated:
        current_app.logger.info("Invalidated %d prior session(s) for account %s", invalidated, account_id)

    token = generate_token()
    session = storage.create_session({
        "account_id": account_id,
        "token_hash": hash_token(token),
        "expires_at": utcnow() + session_ttl(),
        "selected_employee_id": None,
    })
    return session, token


def login(email: str, password: str) -> tuple[Account, Session, str]:
    """
    Authenticate and open the account's single session.

    Raises InvalidCredentials or AccountDisabled; no session is touched on failure.
    """
    account = auth_service.authenticate(email, password)
    session, token = create_session(account.id)
    current_app.logger.info("Account %s logged in (session %s)", account.id, session.id)
    return account, session, token


def resolve_token(token: str | None) -> SessionContext:
    """
    Resolve a bearer token to its session, account and selected employee.

    Raises Unauthenticated if the token is missing, unknown or expired, or if
    the account behind it has been deactivated. Expired sessions and sessions
    of deactivated accounts are deleted here.
    """
    if not token:
        raise Unauthenticated("Authentication required")

    storage = get_storage()
    session = storage.get_session_by_token(hash_token(token))
    if session is None:
        raise Unauthenticated("Invalid or expired token")

    if session.expires_at <= utcnow():
        storage.delete_session(session.id)
        raise Unauthenticated("Invalid or expired token")

    account = storage.get_account(session.account_id)
    if account is None or not account.is_active:
        storage.delete_session(session.id)
        raise Unauthenticated("Invalid or expired token")

    employee = None
    if session.selected_employee_id is not None:
        employee = storage.get_employee(session.selected_employee_id)
        # A deactivated or reassigned employee no longer counts as selected
        if employee is None or employee.account_id != account.id or not employee.is_active:
            employee = None

    return SessionContext(account=account, session=session, employee=employee)


def select_employee(context: SessionContext, employee_id: int) -> Employee:
    """Attach an employee of the same account to the session."""
    storage = get_storage()
    employee = storage.get_employee(employee_id)
    if employee is None or employee.account_id != context.account.id:
        raise InvalidSelection("Employee not found for this account")
    if not employee.is_active:
        raise InvalidSelection("Employee is inactive")

    updated = storage.update_session(context.session.id, {"selected_employee_id": employee.id})
    if updated is None:
        # Session vanished between resolve and update (concurrent login/logout)
        raise Unauthenticated("Invalid or expired token")

    context.session = updated
    context.employee = employee
    return employee


def logout(token: str) -> bool:
    """Delete the session behind token. Idempotent; returns whether one existed."""
    storage = get_storage()
    session = storage.get_session_by_token(hash_token(token))
    if session is None:
        return False
    current_app.logger.info("Account %s logged out (session %s)", session.account_id, session.id)
    return storage.delete_session(session.id)


def end_session(session: Session) -> bool:
    return get_storage().delete_session(session.id)


def revoke_account_sessions(account_id: int) -> int:
    """Force re-authentication (account deactivated, password changed)."""
    return get_storage().delete_sessions_for_account(account_id)


def cleanup_expired_sessions() -> int:
    """Delete every session already past expires_at."""
    return get_storage().delete_expired_sessions(utcnow())
