# run with: pytest tests/test_lookup_module.py -v

from piscan.app.extensions import db
from piscan.app.models import AmazonProduct, Item
from piscan.modules.lookup.client import VendorLookupError


def seed_cache(app, barcode, **kwargs):
    with app.app_context():
        row = AmazonProduct(
            barcode=barcode,
            sku=kwargs.get("sku", "B000CACHED"),
            product_name=kwargs.get("product_name", "Cached Widget"),
            product_type=kwargs.get("product_type", "Toy"),
            locale=kwargs.get("locale", "uk"),
        )
        db.session.add(row)
        db.session.commit()


def cached_rows(app, barcode):
    with app.app_context():
        return [
            (p.sku, p.product_name, p.product_type, p.locale)
            for p in AmazonProduct.query.filter_by(barcode=barcode).order_by(AmazonProduct.id).all()
        ]


# LOOKUP-001: cache hit never calls the vendor
def test_cache_hit_skips_vendor(app, client, vendor):
    seed_cache(app, "0012000161155")
    vendor.payload = [{"sku": "B999", "vnd": "AMZN:us"}]

    r = client.get("/api/lookup/0012000161155")
    assert r.status_code == 200
    assert r.json["results"] == [
        {"sku": "B000CACHED", "desc": "Cached Widget", "type": "Toy", "vnd": "AMZN:uk"},
    ]
    assert vendor.calls == []


# LOOKUP-002: cache miss persists every vendor entry
def test_cache_miss_persists_results(app, client, vendor):
    vendor.payload = [
        {"sku": "B0001", "desc": "Widget", "type": "Toy", "vnd": "AMZN:de"},
        {"sku": "B0002", "desc": "Widget XL", "vnd": "AMZN"},
        {"sku": "B0003", "vnd": "AMZN:"},
    ]

    r = client.get("/api/lookup/0041250917008")
    assert r.status_code == 200
    assert vendor.calls == ["0041250917008"]
    assert r.json["results"] == [
        {"sku": "B0001", "desc": "Widget", "type": "Toy", "vnd": "AMZN:de"},
        {"sku": "B0002", "desc": "Widget XL", "type": "", "vnd": "AMZN:us"},
        {"sku": "B0003", "desc": "", "type": "", "vnd": "AMZN:us"},
    ]
    assert cached_rows(app, "0041250917008") == [
        ("B0001", "Widget", "Toy", "de"),
        ("B0002", "Widget XL", "", "us"),
        ("B0003", "", "", "us"),
    ]


def test_second_lookup_is_served_from_cache(client, vendor):
    vendor.payload = [{"sku": "B0001", "desc": "Widget", "vnd": "AMZN:us"}]

    first = client.get("/api/lookup/0041250917008").json["results"]
    second = client.get("/api/lookup/0041250917008").json["results"]
    assert first == second
    assert vendor.calls == ["0041250917008"]


def test_empty_vendor_answer_is_not_cached(app, client, vendor):
    vendor.payload = []

    assert client.get("/api/lookup/123").json["results"] == []
    assert client.get("/api/lookup/123").json["results"] == []
    assert vendor.calls == ["123", "123"]
    assert cached_rows(app, "123") == []


# LOOKUP-003: failures are reported, nothing is persisted
def test_malformed_batch_persists_nothing(app, client, vendor):
    vendor.payload = [
        {"sku": "B0001", "vnd": "AMZN:us"},
        {"desc": "no sku here", "vnd": "AMZN:us"},
    ]

    r = client.get("/api/lookup/0041250917008")
    assert r.status_code == 502
    assert r.json["error"]["code"] == "lookup_failed"
    assert cached_rows(app, "0041250917008") == []


def test_vendor_failure_is_reported(app, client, vendor):
    vendor.error = VendorLookupError("connection refused")

    r = client.get("/api/lookup/0041250917008")
    assert r.status_code == 502
    assert "connection refused" in r.json["error"]["details"]["reason"]
    assert cached_rows(app, "0041250917008") == []


def test_lookup_cli_prints_results(app, vendor):
    vendor.payload = [{"sku": "B0001", "desc": "Widget", "vnd": "AMZN:ca"}]

    result = app.test_cli_runner().invoke(args=["lookup", "0041250917008"])
    assert result.exit_code == 0
    assert '"vnd": "AMZN:ca"' in result.output


def test_lookup_cli_reports_failure(app, vendor):
    vendor.error = VendorLookupError("timed out")

    result = app.test_cli_runner().invoke(args=["lookup", "0041250917008"])
    assert result.exit_code != 0
    assert "timed out" in result.output


def test_seed_cli_is_repeatable(app):
    runner = app.test_cli_runner()
    assert runner.invoke(args=["seed"]).exit_code == 0
    assert runner.invoke(args=["seed"]).exit_code == 0
    with app.app_context():
        assert Item.query.count() == 3


def test_other_vendor_entries_are_not_cached_as_amazon(app, client, vendor):
    vendor.payload = [
        {"sku": "W1", "desc": "Walmart Widget", "vnd": "WMT:us"},
        {"sku": "B0001", "desc": "Widget", "vnd": "AMZN:de"},
    ]

    miss = client.get("/api/lookup/0041250917008").json["results"]
    hit = client.get("/api/lookup/0041250917008").json["results"]
    assert miss == [{"sku": "B0001", "desc": "Widget", "type": "", "vnd": "AMZN:de"}]
    assert hit == miss
    assert vendor.calls == ["0041250917008"]
    assert cached_rows(app, "0041250917008") == [("B0001", "Widget", "", "de")]
