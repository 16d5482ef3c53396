# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/flouz/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init [--no-demo]
#   Idempotent bootstrap: master account, demo account + employee, demo catalog.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Account inspection/bootstrap:
# - python -m flask accounts list
#   List all accounts with employee counts and active status.
# - python -m flask accounts create --email shop@example.com --password "Password123!"
#   Create an account (prompts if options are omitted).
#
# Maintenance:
# - python -m flask maintenance cleanup-sessions
#   Delete expired session tokens.

import click
from flask import current_app
from flask.cli import with_appcontext

from .errors import FlouzError
from .extensions import db
from .services import account_service, seed_service, session_service
from .storage import get_storage


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@click.option('--no-demo', is_flag=True, help='Only create the master account')
@with_appcontext
def init_system(no_demo):
    """
    Initialize FLOUZ: master account, demo account and demo catalog.

    Safe to re-run; anything that already exists is left untouched.

    SECURITY: Change the master password immediately in production!
    """
    click.echo("START Initializing FLOUZ...")

    if current_app.config["STORAGE_BACKEND"] == "database":
        db.create_all()

    report = seed_service.bootstrap(include_demo=not no_demo)

    for item in report.created:
        click.echo(f"PASS Created {item}")
    for item in report.existing:
        click.echo(f"PASS Using existing {item}")

    click.echo(f"\nDONE Master login: {current_app.config['MASTER_EMAIL']}")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping and recreating storage...")
    get_storage().reset()

    click.echo("PASS Storage reset complete. Run 'python -m flask system init' to initialize.")


@click.group('accounts')
def accounts_group():
    """Account inspection and bootstrap commands."""


@accounts_group.command('list')
@with_appcontext
def list_accounts():
    """List all accounts with their employee counts."""
    accounts = account_service.list_accounts_with_counts()

    if not accounts:
        click.echo("No accounts found.")
        return

    click.echo("\n" + "="*90)
    click.echo(f"{'ID':<5} {'Email':<35} {'Active':<8} {'Master':<8} {'Demo':<6} {'Employees':<10} {'Telegram'}")
    click.echo("="*90)

    for account in accounts:
        active_str = "Yes" if account["is_active"] else "No"
        master_str = "Yes" if account["is_master"] else "No"
        demo_str = "Yes" if account["is_demo"] else "No"
        telegram_str = "configured" if account["telegram_configured"] else "-"
        click.echo(
            f"{account['id']:<5} {account['email']:<35} {active_str:<8} {master_str:<8} "
            f"{demo_str:<6} {account['employee_count']:<10} {telegram_str}"
        )

    click.echo("="*90 + "\n")


@accounts_group.command('create')
@click.option('--email', prompt=True, help='Login email')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--master', 'is_master', is_flag=True, help='Grant master access')
@with_appcontext
def create_account_cli(email, password, is_master):
    """Create an account."""
    try:
        account = account_service.create_account(email=email, password=password, is_master=is_master)
    except FlouzError as e:
        click.echo(f"FAIL {e.message}")
        raise SystemExit(1)

    kind = "master account" if account.is_master else "account"
    click.echo(f"PASS Created {kind}: {account.email} (ID: {account.id})")


@click.group('maintenance')
def maintenance_group():
    """Maintenance commands."""


@maintenance_group.command('cleanup-sessions')
@with_appcontext
def cleanup_sessions_cli():
    """Delete sessions whose 7-day lifetime has passed."""
    deleted = session_service.cleanup_expired_sessions()
    click.echo(f"Deleted {deleted} expired sessions.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(accounts_group)
    app.cli.add_command(maintenance_group)
