from __future__ import annotations

import logging
from typing import Dict, List

from flask import current_app

from piscan.app.extensions import db
from piscan.app.models import AmazonProduct

log = logging.getLogger(__name__)


def _normalized(sku: str, product_name: str | None, product_type: str | None, vendor: str) -> Dict[str, str]:
    return {
        "sku": sku,
        "desc": product_name or "",
        "type": product_type or "",
        "vnd": vendor,
    }


def lookup_barcode(barcode: str, client) -> List[Dict[str, str]]:
    """Return the vendor catalog entries for a barcode.

    Cached rows win: once any row exists for the barcode the vendor is never
    asked again. On a miss the whole vendor response is parsed before
    anything is written, so a malformed batch persists nothing.
    Raises ``VendorLookupError`` when the vendor call or its parsing fails.
    """
    cached = AmazonProduct.query.filter_by(barcode=barcode).order_by(AmazonProduct.id.asc()).all()
    if cached:
        log.info("Cache hit for %s (%d product(s))", barcode, len(cached))
        return [_normalized(p.sku, p.product_name, p.product_type, p.vendor_tag) for p in cached]

    log.info("Cache miss for %s; asking vendor", barcode)
    products = client.lookup(barcode)

    default_locale = current_app.config["DEFAULT_LOCALE"]
    results = []
    for product in products:
        # amazon_products holds Amazon entries only
        if product.source != AmazonProduct.VENDOR_ID:
            log.info("Skipping %s entry %s for %s", product.source, product.sku, barcode)
            continue
        row = AmazonProduct(
            barcode=barcode,
            sku=product.sku,
            product_name=product.product_name,
            product_type=product.product_type,
            locale=product.locale(default_locale),
        )
        db.session.add(row)
        results.append(_normalized(row.sku, row.product_name, row.product_type, row.vendor_tag))
    db.session.commit()

    log.info("Cached %d product(s) for %s", len(results), barcode)
    return results
