# Overview: Flask CLI command groups for bootstrap, accounts, and demo data.

# backend/billcraft/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System:
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Accounts:
# - python -m flask accounts create --email owner@example.com --password secret1
#   Create an account (prompts if options are omitted).
# - python -m flask accounts list
#   List accounts with product and invoice counts.
#
# Demo data:
# - python -m flask demo seed --email owner@example.com
#   Add the sample catalog to an account (skips SKUs it already has).

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Invoice, Product, User
from .services.auth_service import sign_up, PasswordValidationError
from .storage import get_storage
from .storage.demo_data import seed_demo_catalog
from .validation import ConflictError, ValidationError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


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

    click.echo("PASS Database reset complete. Run 'python -m flask accounts create' to add an account.")


@click.group('accounts')
def accounts_group():
    """Account inspection and bootstrap commands."""


@accounts_group.command('create')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@with_appcontext
def create_account_cli(email, password):
    """Create an account."""
    try:
        user = sign_up(email, password)
    except PasswordValidationError as e:
        raise click.ClickException(f"Password validation failed: {e}")
    except (ValidationError, ConflictError) as e:
        raise click.ClickException(str(e))

    click.echo(f"PASS Created account {user.email} (ID: {user.id})")


@accounts_group.command('list')
@with_appcontext
def list_accounts():
    """List all accounts."""
    users = db.session.query(User).order_by(User.id.asc()).all()

    if not users:
        click.echo("No accounts found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Email':<35} {'Active':<8} {'Products':<10} {'Invoices'}")
    click.echo("="*80)

    for user in users:
        products = db.session.query(Product).filter_by(owner_id=user.id).count()
        invoices = db.session.query(Invoice).filter_by(owner_id=user.id).count()
        active_str = "Yes" if user.is_active else "No"
        click.echo(f"{user.id:<5} {user.email:<35} {active_str:<8} {products:<10} {invoices}")

    click.echo("="*80 + "\n")


@click.group('demo')
def demo_group():
    """Demo data commands."""


@demo_group.command('seed')
@click.option('--email', required=True, help='Account to seed')
@with_appcontext
def seed_demo(email):
    """Add the sample catalog to an account."""
    user = db.session.query(User).filter_by(email=email.strip().lower()).first()
    if not user:
        raise click.ClickException(f"No account with email {email}")

    created = seed_demo_catalog(get_storage(), user.id)
    click.echo(f"PASS Seeded {created} sample products for {user.email}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(accounts_group)
    app.cli.add_command(demo_group)
