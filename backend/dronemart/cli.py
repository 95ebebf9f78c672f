# Overview: Flask CLI command groups for bootstrap and operator actions.

# backend/dronemart/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Create all tables and the statistics row (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User administration:
# - python -m flask users list
#   List all users with admin and active status.
# - python -m flask users promote-admin alice
#   Grant admin rights (may update or deactivate other users).
#
# Business verification:
# - python -m flask businesses verify 3
#   Mark a business as verified so its products can be ordered.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Admin, Business, User
from .services.persistence import fetch_admin_flag
from .services.stats_service import STATS_ROW_ID, ensure_stats_row


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Initialize the dronemart schema.

    Creates:
    - All tables that do not exist yet
    - The single statistics row (id=1), seeded from existing accounts
    """
    click.echo("START Initializing dronemart...")

    db.create_all()
    click.echo("PASS Tables created")

    stats = ensure_stats_row()
    if not stats.total_accounts:
        total = db.session.query(User).count()
        active = db.session.query(User).filter(User.is_active.is_(True)).count()
        stats.total_accounts = total
        stats.active_accounts = active
        stats.inactive_accounts = total - active
    db.session.commit()
    click.echo(f"PASS Statistics row ready (ID: {STATS_ROW_ID}, accounts: {stats.total_accounts})")

    click.echo("DONE dronemart initialized")


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

    click.echo("DONE Database reset")


@click.group('users')
def users_group():
    """User administration commands."""


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users."""
    users = db.session.query(User).order_by(User.id).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*70)
    click.echo(f"{'ID':<5} {'Username':<20} {'Email':<30} {'Admin':<6} {'Active'}")
    click.echo("="*70)
    for user in users:
        admin = "yes" if fetch_admin_flag(user.id) else "no"
        active = "yes" if user.is_active else "no"
        click.echo(f"{user.id:<5} {user.username:<20} {user.email:<30} {admin:<6} {active}")
    click.echo("="*70 + "\n")


@users_group.command('promote-admin')
@click.argument('username')
@with_appcontext
def promote_admin(username):
    """Grant admin rights to USERNAME."""
    user = db.session.query(User).filter_by(username=username).first()
    if not user:
        raise click.ClickException(f"User '{username}' not found")

    if fetch_admin_flag(user.id):
        click.echo(f"WARN  User '{username}' is already an admin, skipping...")
        return

    db.session.add(Admin(user_id=user.id))
    db.session.commit()
    click.echo(f"PASS User '{username}' (ID: {user.id}) is now an admin")


@click.group('businesses')
def businesses_group():
    """Business verification commands."""


@businesses_group.command('verify')
@click.argument('business_id', type=int)
@with_appcontext
def verify_business(business_id):
    """Mark BUSINESS_ID as verified."""
    business = db.session.get(Business, business_id)
    if not business:
        raise click.ClickException(f"Business {business_id} not found")

    if business.is_verified:
        click.echo(f"WARN  Business {business_id} is already verified")
        return

    business.is_verified = True
    db.session.commit()
    click.echo(f"PASS Business {business_id} ({business.name}) verified")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(businesses_group)
