# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/asset_tracker/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Idempotent bootstrap: creates tables and the default Admin and Manager users.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system seed-demo
#   Add sample employees and categories (skips rows that already exist).
#
# User inspection/bootstrap:
# - python -m flask users list
#   List all users with role and status.
# - python -m flask users create --name "Jane Admin" --email jane@company.com --password "secret123" --role Admin
#   Create a user (prompts if options are omitted).
#
# Maintenance:
# - python -m flask maintenance cleanup-sessions --older-than-days 30
#   Delete expired or revoked session tokens older than the cutoff.

import click
from datetime import date
from flask.cli import with_appcontext

from .extensions import db
from .models import User, Employee, Category
from .models.auth import USER_ROLES
from .services.auth_service import create_user, PasswordValidationError
from .services import session_service
from .errors import AssetTrackerError


DEFAULT_USERS = [
    ("Admin User", "admin@assetmanagement.com", "Admin", "admin123"),
    ("Manager User", "manager@assetmanagement.com", "Manager", "manager123"),
]

DEMO_EMPLOYEES = [
    ("EMP001", "John Doe", "IT", "Software Engineer", "+1234567890", "john.doe@company.com", "Head Office", date(2023, 1, 15)),
    ("EMP002", "Jane Smith", "HR", "HR Manager", "+1234567891", "jane.smith@company.com", "Head Office", date(2022, 6, 10)),
    ("EMP003", "Bob Johnson", "Finance", "Accountant", "+1234567892", "bob.johnson@company.com", "Branch A", date(2023, 3, 20)),
]

DEMO_CATEGORIES = [
    ("Laptop", "LAP", "Laptop computers"),
    ("Desktop", "DSK", "Desktop computers"),
    ("Mobile Phone", "MOB", "Mobile phones and smartphones"),
    ("Monitor", "MON", "Computer monitors"),
    ("Keyboard", "KEY", "Computer keyboards"),
    ("Mouse", "MOU", "Computer mice"),
    ("Printer", "PRI", "Printers and scanners"),
    ("Router", "ROU", "Network routers"),
]


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Create tables (if missing) and the default Admin and Manager accounts.

    SECURITY: Change the default passwords immediately in production!
    """
    click.echo("START Initializing asset tracker...")
    db.create_all()

    for name, email, role, password in DEFAULT_USERS:
        if db.session.query(User).filter_by(email=email).first():
            click.echo(f"WARN  User '{email}' already exists, skipping...")
            continue
        try:
            create_user(name=name, email=email, password=password, role=role)
            click.echo(f"PASS Created user: {email} with role '{role}'")
        except AssetTrackerError as e:
            db.session.rollback()
            click.echo(f"FAIL Failed to create user '{email}': {e.message}")

    click.echo("\nDefault Credentials (CHANGE IN PRODUCTION!):")
    for _, email, role, password in DEFAULT_USERS:
        click.echo(f"   {role:<8} -> {email} / {password}")


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

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


@system_group.command('seed-demo')
@with_appcontext
def seed_demo():
    """Add sample employees and categories. Existing rows are left alone."""
    created = 0
    for employee_id, name, department, designation, contact, email, branch, joined in DEMO_EMPLOYEES:
        if db.session.query(Employee).filter_by(employee_id=employee_id).first():
            continue
        db.session.add(Employee(
            employee_id=employee_id,
            name=name,
            department=department,
            designation=designation,
            contact=contact,
            email=email,
            branch=branch,
            joining_date=joined,
        ))
        created += 1

    for name, code, description in DEMO_CATEGORIES:
        if db.session.query(Category).filter_by(code=code).first():
            continue
        db.session.add(Category(name=name, code=code, description=description))
        created += 1

    db.session.commit()
    click.echo(f"PASS Seeded {created} demo rows.")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--name', prompt=True, help='Display name')
@click.option('--email', prompt=True, help='Email address (login)')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(list(USER_ROLES)), prompt=True, help='Role')
@with_appcontext
def create_user_cli(name, email, password, role):
    """Create a new user. Passwords need at least 6 characters."""
    try:
        user = create_user(name=name, email=email, password=password, role=role)
        click.echo(f"PASS Created user: {user.email} with role '{user.role}' (ID: {user.id})")
        click.echo("SECURITY Password securely hashed with bcrypt")
    except PasswordValidationError as e:
        click.echo(f"FAIL Password validation failed: {e.message}")
    except AssetTrackerError as e:
        db.session.rollback()
        click.echo(f"FAIL Failed to create user: {e.message}")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with their role and status."""
    users = db.session.query(User).order_by(User.id.asc()).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*90)
    click.echo(f"{'ID':<5} {'Name':<25} {'Email':<35} {'Role':<10} {'Status'}")
    click.echo("="*90)

    for user in users:
        click.echo(f"{user.id:<5} {user.name:<25} {user.email:<35} {user.role:<10} {user.status}")

    click.echo("="*90 + "\n")


@click.group('maintenance')
def maintenance_group():
    """Maintenance commands."""


@maintenance_group.command('cleanup-sessions')
@click.option('--older-than-days', type=int, default=30, show_default=True)
@with_appcontext
def cleanup_sessions_cli(older_than_days):
    """Delete expired or revoked session tokens."""
    deleted = session_service.cleanup_expired_sessions(older_than_days=older_than_days)
    click.echo(f"Deleted {deleted} sessions older than {older_than_days} days.")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(maintenance_group)
