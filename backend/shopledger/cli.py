# Overview: Flask CLI command groups for bootstrap and inspection.

# backend/shopledger/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to shopledger (PowerShell: $env:FLASK_APP="shopledger").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init-db
#   Create all tables (use `flask db upgrade` for migration-managed databases).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Shops:
# - python -m flask shops list
# - python -m flask shops create --name "Corner Store" --currency INR --timezone Asia/Kolkata
#
# Inspection:
# - python -m flask reports daily --shop-id 1 [--date 2026-10-17]
#   Print the daily sales report (defaults to today in the shop's timezone).
# - python -m flask items low-stock --shop-id 1
#   List active items at or below their minimum stock alert.

import json

import click
from flask.cli import with_appcontext

from .errors import LedgerError
from .extensions import db
from .services import reporting_service, shop_service
from .services.inventory_service import low_stock_for_shop
from .time_utils import parse_iso_date


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet."""
    db.create_all()
    click.echo("PASS Database tables created")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Confirm destructive reset')
@with_appcontext
def reset_db(yes):
    """DEV/TEST only: drop and recreate all tables."""
    if not yes:
        raise click.UsageError("Refusing to reset without --yes")
    db.drop_all()
    db.create_all()
    click.echo("PASS Database reset")


@click.group('shops')
def shops_group():
    """Shop management commands."""


@shops_group.command('list')
@with_appcontext
def list_shops():
    shops = shop_service.list_shops()
    if not shops:
        click.echo("No shops found.")
        return
    for shop in shops:
        click.echo(f"{shop.id}\t{shop.name}\t{shop.currency}\t{shop.timezone}")


@shops_group.command('create')
@click.option('--name', required=True, help='Shop name')
@click.option('--currency', default=None, help='ISO currency code (default from config)')
@click.option('--timezone', 'tz_name', default=None, help='IANA timezone (default from config)')
@click.option('--upi-id', default=None, help='UPI identifier for payments')
@with_appcontext
def create_shop(name, currency, tz_name, upi_id):
    fields = {"name": name}
    if currency:
        fields["currency"] = currency
    if tz_name:
        fields["timezone"] = tz_name
    if upi_id:
        fields["upi_id"] = upi_id
    try:
        shop = shop_service.create_shop(fields)
    except LedgerError as e:
        raise click.ClickException(e.message)
    click.echo(f"PASS Created shop: {shop.name} (ID: {shop.id})")


@click.group('reports')
def reports_group():
    """Reporting commands."""


@reports_group.command('daily')
@click.option('--shop-id', type=int, required=True)
@click.option('--date', 'day', default=None, help='YYYY-MM-DD in the shop timezone')
@with_appcontext
def daily(shop_id, day):
    try:
        on_date = parse_iso_date(day)
    except ValueError:
        raise click.BadParameter("date must be YYYY-MM-DD", param_hint="--date")
    try:
        settings = shop_service.settings_for(shop_id)
        report = reporting_service.daily_report(shop_id, on_date)
    except LedgerError as e:
        raise click.ClickException(e.message)
    click.echo(json.dumps(report.to_dict(settings), indent=2))


@click.group('items')
def items_group():
    """Catalog inspection commands."""


@items_group.command('low-stock')
@click.option('--shop-id', type=int, required=True)
@with_appcontext
def low_stock(shop_id):
    try:
        shop_service.get_shop(shop_id)
    except LedgerError as e:
        raise click.ClickException(e.message)
    items = low_stock_for_shop(shop_id)
    if not items:
        click.echo("No low-stock items.")
        return
    for item in items:
        click.echo(f"{item.name}: {item.stock_quantity} left (alert at {item.min_stock_alert})")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(shops_group)
    app.cli.add_command(reports_group)
    app.cli.add_command(items_group)
