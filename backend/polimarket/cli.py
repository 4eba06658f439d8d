# Overview: Flask CLI command groups for bootstrap and stock inspection.

# backend/polimarket/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to polimarket (PowerShell: $env:FLASK_APP="polimarket").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create all tables that do not exist yet (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system seed-seller [--name "Main Seller"] [--document "S-0001"]
#   Register the seller that initial stock is attributed to, unless one exists.
#
# Stock inspection:
# - python -m flask stock reconcile [--product-id <uuid>]
#   Compare each product's available quantity with its movement history.

import click
from flask.cli import with_appcontext

from .errors import ApiError
from .extensions import db
from .models import PartyProfile
from .services import ledger_service, party_service, products_service
from .validation import parse_id


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create database tables."""
    db.create_all()
    click.echo("PASS Tables created.")


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

    click.echo("PASS Database reset complete. Run 'python -m flask system seed-seller' next.")


@system_group.command('seed-seller')
@click.option('--name', default='Main Seller', help='Seller display name')
@click.option('--document', default='SELLER-0001', help='Seller document number')
@with_appcontext
def seed_seller(name, document):
    """Register a default seller if no active seller exists."""
    existing = party_service.first_active_seller()
    if existing is not None:
        click.echo(f"PASS Using existing seller: {existing.name} (ID: {existing.id})")
        return

    try:
        seller = party_service.create_party(
            name=name,
            document=document,
            profile=PartyProfile.SELLER.value,
        )
    except ApiError as exc:
        raise click.ClickException(exc.message)
    click.echo(f"PASS Created seller: {seller.name} (ID: {seller.id})")


@click.group('stock')
def stock_group():
    """Stock inspection commands."""


@stock_group.command('reconcile')
@click.option('--product-id', default=None, help='Check a single product (default: all active products)')
@with_appcontext
def reconcile_stock(product_id):
    """
    Compare stored quantities with the signed sum of recorded movements.

    Exits with status 1 if any product is inconsistent.
    """
    try:
        if product_id:
            product_ids = [parse_id(product_id, "product")]
        else:
            product_ids = [p.id for p in products_service.list_active_products()]

        mismatches = 0
        for pid in product_ids:
            report = ledger_service.reconcile(pid)
            status = "OK  " if report["consistent"] else "FAIL"
            if not report["consistent"]:
                mismatches += 1
            click.echo(
                f"{status} {report['product_id']}: available={report['available_quantity']} "
                f"audited={report['audited_quantity']}"
            )
    except ApiError as exc:
        raise click.ClickException(exc.message)

    click.echo(f"\nChecked {len(product_ids)} product(s), {mismatches} inconsistent.")
    if mismatches:
        click.get_current_context().exit(1)


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(stock_group)
