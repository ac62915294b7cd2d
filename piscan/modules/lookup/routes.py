from __future__ import annotations

import logging

from flask import Blueprint, current_app

from piscan.app.common.errors import abort_json
from piscan.modules.lookup.client import VendorClient, VendorLookupError
from piscan.modules.lookup.service import lookup_barcode

log = logging.getLogger(__name__)

bp = Blueprint("lookup", __name__)

EXTENSION_KEY = "vendor_client"


def init_vendor_client(app) -> None:
    app.extensions[EXTENSION_KEY] = VendorClient.from_config(app.config)


def vendor_client():
    return current_app.extensions[EXTENSION_KEY]


@bp.get("/lookup/<barcode>")
def lookup(barcode: str):
    """GET /api/lookup/<barcode> - Vendor catalog entries for a barcode."""
    barcode = barcode.strip()
    if not barcode:
        abort_json(400, "validation_error", "Barcode required")

    try:
        results = lookup_barcode(barcode, vendor_client())
    except VendorLookupError as exc:
        log.warning("Lookup failed for %s: %s", barcode, exc)
        abort_json(502, "lookup_failed", "Product lookup failed", {"reason": str(exc)})

    return {"barcode": barcode, "results": results}, 200
