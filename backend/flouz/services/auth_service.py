# Overview: Service-layer operations for auth; password hashing and credential checks.

"""
Authentication Service

WHY: Accounts are the tenant login identity. Passwords are stored only as
bcrypt hashes and checked in constant time; there is no plaintext
comparison anywhere.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor from BCRYPT_ROUNDS, default 12)
- Minimum 8 characters, upper, lower, digit and special char required
- Session tokens managed separately (see session_service.py)
"""

import re

import bcrypt
from flask import current_app, has_app_context

from ..errors import AccountDisabled, InvalidCredentials, PasswordValidationError
from ..storage import get_storage
from ..storage.records import Account


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Raises PasswordValidationError if requirements not met.
    """
    if not isinstance(password, str):
        raise PasswordValidationError("Password must be a string")

    if len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")

    if not re.search(r"[!@#$%^&*(),.'\":{}|<>?_\-+=\[\]/\\;~`]", password):
        raise PasswordValidationError("Password must contain at least one special character")


def _bcrypt_rounds() -> int:
    if has_app_context():
        return int(current_app.config.get("BCRYPT_ROUNDS", 12))
    return 12


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt.

    Password is validated for strength before hashing.
    """
    validate_password_strength(password)
    salt = bcrypt.gensalt(rounds=_bcrypt_rounds())
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    WHY timing-safe: bcrypt.checkpw() compares in constant time.
    """
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed hash in storage
        return False


def authenticate(email: str, password: str) -> Account:
    """
    Check credentials and return the account.

    Raises InvalidCredentials for an unknown email or a wrong password, and
    AccountDisabled only once the password has verified, so a disabled
    account's existence is not revealed to someone without its password.
    """
    account = get_storage().get_account_by_email((email or "").strip().lower())
    if account is None or not verify_password(password, account.password_hash):
        raise InvalidCredentials()

    if not account.is_active:
        raise AccountDisabled()

    return account
