from __future__ import annotations

import json

import click
from flask import Blueprint

from piscan.app.common.account import get_designated_account
from piscan.app.extensions import db
from piscan.app.models import Item
from piscan.modules.lookup.client import VendorLookupError
from piscan.modules.lookup.routes import vendor_client
from piscan.modules.lookup.service import lookup_barcode

cli_bp = Blueprint("cli", __name__, cli_group=None)


@cli_bp.cli.command("init-db")
def init_db() -> None:
    """Create tables."""
    db.create_all()
    print("DB initialized (tables created).")


@cli_bp.cli.command("seed")
def seed_data() -> None:
    """Seed the designated account and a few demo scans.

    Safe to run multiple times; it will no-op if items exist.
    """
    acc = get_designated_account()
    if Item.query.filter_by(account_id=acc.id).count() == 0:
        db.session.add_all([
            Item(account_id=acc.id, barcode="0041250917008", description="Spring Water 1L"),
            Item(account_id=acc.id, barcode="0012000161155", description="Sparkling Lemon Soda", favorite=True),
            Item(account_id=acc.id, barcode="9780262033848"),
        ])
        db.session.commit()
    print(f"Seed complete. Designated account: {acc.email}")


@cli_bp.cli.command("lookup")
@click.argument("barcode")
def lookup_cmd(barcode: str) -> None:
    """Look up BARCODE through the product cache and print the JSON result."""
    try:
        results = lookup_barcode(barcode, vendor_client())
    except VendorLookupError as exc:
        raise click.ClickException(str(exc)) from exc
    print(json.dumps(results, indent=2))
