from __future__ import annotations

from ..extensions import db
from ..storage import records


class Account(db.Model):
    """
    Tenant-level login identity (a shop or till owner).

    WHY: Transactions are attributed to an Employee, but authentication and
    the notification channel belong to the Account that owns them.
    """
    __tablename__ = "accounts"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    is_demo = db.Column(db.Boolean, nullable=False, default=False)
    is_master = db.Column(db.Boolean, nullable=False, default=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    # Close-register reports go to this Telegram chat through this bot
    telegram_chat_id = db.Column(db.String(64), nullable=True)
    telegram_bot_token = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False)

    def to_record(self) -> records.Account:
        return records.Account(
            id=self.id,
            email=self.email,
            password_hash=self.password_hash,
            is_demo=bool(self.is_demo),
            is_master=bool(self.is_master),
            is_active=bool(self.is_active),
            telegram_chat_id=self.telegram_chat_id,
            telegram_bot_token=self.telegram_bot_token,
            created_at=self.created_at,
        )


class Employee(db.Model):
    """Named operator under an Account, selected after login to attribute sales."""
    __tablename__ = "employees"
    __table_args__ = (
        db.Index("ix_employees_account_id", "account_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    account_id = db.Column(db.Integer, db.ForeignKey("accounts.id"), nullable=False)

    first_name = db.Column(db.String(120), nullable=False)
    last_name = db.Column(db.String(120), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False)

    account = db.relationship("Account", backref=db.backref("employees", lazy=True))

    def to_record(self) -> records.Employee:
        return records.Employee(
            id=self.id,
            account_id=self.account_id,
            first_name=self.first_name,
            last_name=self.last_name,
            is_active=bool(self.is_active),
            created_at=self.created_at,
        )


class SessionToken(db.Model):
    """
    Server-side record backing a bearer token.

    The plaintext token is only ever returned to the client at login;
    the table stores its SHA-256 digest.
    """
    __tablename__ = "sessions"
    __table_args__ = (
        db.Index("ix_sessions_account_id", "account_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    account_id = db.Column(db.Integer, db.ForeignKey("accounts.id"), nullable=False)
    selected_employee_id = db.Column(db.Integer, db.ForeignKey("employees.id"), nullable=True)

    token_hash = db.Column(db.String(64), nullable=False, unique=True, index=True)
    expires_at = db.Column(db.DateTime, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False)

    def to_record(self) -> records.Session:
        return records.Session(
            id=self.id,
            account_id=self.account_id,
            token_hash=self.token_hash,
            expires_at=self.expires_at,
            selected_employee_id=self.selected_employee_id,
            created_at=self.created_at,
        )
