# Overview: Flask CLI command groups for bootstrap, reporting and snapshots.

# backend/shopledger/cli.py
# Commands Legend:
# - flask --app shopledger system init
#   Create tables and seed the default products and stock (idempotent).
# - flask --app shopledger system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - flask --app shopledger ledger summary
#   Print sales, cash, mobile-money, withdrawal and stock-value totals.
# - flask --app shopledger ledger export snapshot.json
#   Write the full ledger state as JSON.
# - flask --app shopledger ledger import snapshot.json --yes
#   Replace the full ledger state from a JSON snapshot.

import json

import click
from flask import current_app
from flask.cli import with_appcontext

from .extensions import db
from .models import Product
from .money_utils import format_cents
from .services.errors import LedgerError
from .services.ledger_store import LedgerStore
from .services.snapshot_service import export_snapshot, import_snapshot


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Create all tables and seed the configured products.

    Products that already exist are left alone, so running this twice is safe.
    """
    click.echo("START Initializing shop ledger...")
    db.create_all()

    store = LedgerStore(db.session)
    for spec in current_app.config.get("SEED_PRODUCTS", []):
        if db.session.get(Product, spec["id"]) is not None:
            click.echo(f"WARN  Product '{spec['id']}' already exists, skipping...")
            continue
        try:
            store.add_product(
                product_id=spec["id"],
                name=spec["name"],
                unit_price_cents=spec.get("unit_price_cents"),
                starting_stock=spec.get("starting_stock", 0),
            )
        except LedgerError as e:
            click.echo(f"FAIL Could not seed product '{spec['id']}': {e}")
            continue
        click.echo(f"PASS Created product: {spec['name']} ({spec['id']}) with {spec.get('starting_stock', 0)} units")

    click.echo("DONE Shop ledger initialized")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Confirm destructive reset')
@with_appcontext
def reset_db(yes):
    """DEV/TEST only: drop and recreate all tables."""
    if not yes:
        click.echo("FAIL Refusing to reset without --yes")
        raise SystemExit(1)
    db.session.remove()
    db.drop_all()
    db.create_all()
    click.echo("PASS Database reset")


@click.group('ledger')
def ledger_group():
    """Ledger reporting and snapshot commands."""


@ledger_group.command('summary')
@with_appcontext
def summary():
    """Print current totals."""
    totals = LedgerStore(db.session).compute_summary()
    symbol = current_app.config.get("CURRENCY_SYMBOL", "$")
    labels = {
        "total_sales": "Total sales",
        "total_cash": "Cash",
        "total_momo": "Mobile money",
        "total_withdrawals": "Withdrawals",
        "total_stock_value": "Stock value",
    }
    for key, label in labels.items():
        click.echo(f"{label:<14} {format_cents(totals[key], symbol)}")


@ledger_group.command('export')
@click.argument('path', type=click.Path(dir_okay=False, writable=True))
@with_appcontext
def export_command(path):
    """Write the full ledger state to PATH as JSON."""
    snapshot = export_snapshot(LedgerStore(db.session))
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(snapshot, fh, indent=2)
    click.echo(f"PASS Exported {len(snapshot['sales'])} sales to {path}")


@ledger_group.command('import')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--yes', is_flag=True, help='Confirm replacing all ledger data')
@with_appcontext
def import_command(path, yes):
    """Replace the full ledger state with the snapshot at PATH."""
    if not yes:
        click.echo("FAIL Refusing to replace ledger data without --yes")
        raise SystemExit(1)
    with open(path, encoding="utf-8") as fh:
        try:
            data = json.load(fh)
        except json.JSONDecodeError as e:
            click.echo(f"FAIL {path} is not valid JSON: {e}")
            raise SystemExit(1)
    try:
        counts = import_snapshot(LedgerStore(db.session), data)
    except LedgerError as e:
        click.echo(f"FAIL Snapshot rejected: {e}")
        raise SystemExit(1)
    click.echo("PASS Imported " + ", ".join(f"{n} {k}" for k, n in counts.items()))


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(ledger_group)
