# Overview: Domain exception taxonomy; every error carries its HTTP status.

from __future__ import annotations


class FlouzError(Exception):
    """
    Base class for failures surfaced to API callers.

    Routes translate these into JSON bodies of the form
    {"error": <message>, "code": <class name>, ...details}.
    """
    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    @property
    def code(self) -> str:
        return type(self).__name__

    def to_dict(self) -> dict:
        body = {"error": self.message, "code": self.code}
        body.update(self.details)
        return body


class ValidationError(FlouzError, ValueError):
    """400-level input problem."""
    status_code = 400


class Unauthenticated(FlouzError):
    status_code = 401


class Forbidden(FlouzError):
    status_code = 403


class NotFound(FlouzError):
    status_code = 404


class ConflictError(FlouzError):
    """Business rule conflict (category in use, insufficient stock, ...)."""
    status_code = 400


class ExternalDependencyFailure(FlouzError):
    status_code = 500


# Auth

class InvalidCredentials(Unauthenticated):
    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class AccountDisabled(Unauthenticated):
    def __init__(self, message: str = "Account is disabled"):
        super().__init__(message)


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""


class InvalidSelection(ValidationError):
    pass


# Catalog / accounts

class CategoryInUse(ConflictError):
    pass


class AccountInUse(ConflictError):
    pass


class EmployeeInUse(ConflictError):
    pass


# Checkout

class NoEmployeeSelected(ValidationError):
    def __init__(self, message: str = "No employee selected for this session"):
        super().__init__(message)


class ProductUnavailable(ConflictError):
    pass


class InsufficientStock(ConflictError):
    pass


# Register closure

class NotificationConfigMissing(ValidationError):
    def __init__(self, message: str = "Telegram notification is not configured for this account"):
        super().__init__(message)


class NotificationDispatchError(ExternalDependencyFailure):
    pass
