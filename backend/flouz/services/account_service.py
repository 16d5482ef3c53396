# Overview: Service-layer operations for accounts and employees (owner and master tiers).

from __future__ import annotations

from ..errors import AccountInUse, ConflictError, EmployeeInUse, NotFound, ValidationError
from ..storage import get_storage
from ..storage.records import Account, Employee
from . import auth_service, session_service


def create_account(
    *,
    email: str,
    password: str,
    is_demo: bool = False,
    is_master: bool = False,
    is_active: bool = True,
    telegram_chat_id: str | None = None,
    telegram_bot_token: str | None = None,
) -> Account:
    """
    Create an account with a bcrypt-hashed password.

    Raises PasswordValidationError for a weak password and ConflictError if
    the email is taken.
    """
    email = (email or "").strip().lower()
    if not email:
        raise ValidationError("email is required")

    storage = get_storage()
    if storage.get_account_by_email(email):
        raise ConflictError("Email already in use")

    return storage.create_account({
        "email": email,
        "password_hash": auth_service.hash_password(password),
        "is_demo": is_demo,
        "is_master": is_master,
        "is_active": is_active,
        "telegram_chat_id": telegram_chat_id or None,
        "telegram_bot_token": telegram_bot_token or None,
    })


def get_account(account_id: int) -> Account:
    account = get_storage().get_account(account_id)
    if account is None:
        raise NotFound("Account not found")
    return account


def list_accounts_with_counts() -> list[dict]:
    storage = get_storage()
    counts: dict[int, int] = {}
    for employee in storage.list_employees():
        counts[employee.account_id] = counts.get(employee.account_id, 0) + 1

    result = []
    for account in storage.list_accounts():
        data = account.to_dict(include_secrets=True)
        data["employee_count"] = counts.get(account.id, 0)
        result.append(data)
    return result


def update_account(account_id: int, patch: dict, password: str | None = None) -> Account:
    """
    Merge an already-validated patch; a new password is hashed here.

    Deactivating an account or changing its password drops its session.
    """
    storage = get_storage()
    current = get_account(account_id)

    patch = dict(patch)
    if password:
        patch["password_hash"] = auth_service.hash_password(password)

    if current.is_master and patch.get("is_active") is False:
        raise ConflictError("Master accounts cannot be deactivated")

    updated = storage.update_account(account_id, patch)
    if updated is None:
        raise NotFound("Account not found")

    if password or (current.is_active and not updated.is_active):
        session_service.revoke_account_sessions(account_id)
    return updated


def toggle_account(account_id: int) -> Account:
    account = get_account(account_id)
    return update_account(account_id, {"is_active": not account.is_active})


def delete_account(account_id: int) -> None:
    account = get_account(account_id)
    if account.is_master:
        raise AccountInUse("Master accounts cannot be deleted")
    if not get_storage().delete_account(account_id):
        raise AccountInUse(
            "Account still has employees; delete or reassign them first",
            details={"account_id": account_id},
        )


# Employees

def create_employee(*, account_id: int, first_name: str, last_name: str, is_active: bool = True) -> Employee:
    get_account(account_id)
    return get_storage().create_employee({
        "account_id": account_id,
        "first_name": first_name,
        "last_name": last_name,
        "is_active": is_active,
    })


def get_employee(employee_id: int, account_id: int | None = None) -> Employee:
    """Fetch an employee; with account_id, employees of other accounts read as missing."""
    employee = get_storage().get_employee(employee_id)
    if employee is None or (account_id is not None and employee.account_id != account_id):
        raise NotFound("Employee not found")
    return employee


def list_employees(account_id: int | None = None) -> list[Employee]:
    return get_storage().list_employees(account_id)


def update_employee(employee_id: int, patch: dict, account_id: int | None = None) -> Employee:
    get_employee(employee_id, account_id)
    if "account_id" in patch:
        get_account(patch["account_id"])
    updated = get_storage().update_employee(employee_id, patch)
    if updated is None:
        raise NotFound("Employee not found")
    return updated


def delete_employee(employee_id: int, account_id: int | None = None) -> None:
    get_employee(employee_id, account_id)
    if not get_storage().delete_employee(employee_id):
        raise EmployeeInUse(
            "Employee has recorded transactions; deactivate instead",
            details={"employee_id": employee_id},
        )
