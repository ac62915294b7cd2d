import os
import sys
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from piscan.app.config import TestConfig
from piscan.app.factory import create_app
from piscan.app.extensions import db
from piscan.app.models import Account, Item
from piscan.app.common.account import get_designated_account
from piscan.modules.lookup.client import parse_products


class FakeVendorClient:
    """Stands in for VendorClient; answers with a canned JSON payload."""

    def __init__(self, payload=None, error=None):
        self.payload = payload if payload is not None else []
        self.error = error
        self.calls = []

    def lookup(self, barcode):
        self.calls.append(barcode)
        if self.error is not None:
            raise self.error
        return parse_products(self.payload)


@pytest.fixture()
def app():
    app = create_app(TestConfig)
    app.extensions["vendor_client"] = FakeVendorClient()
    yield app
    with app.app_context():
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def vendor(app):
    return app.extensions["vendor_client"]


@pytest.fixture()
def account_id(app):
    with app.app_context():
        return get_designated_account().id


@pytest.fixture()
def other_account_id(app, account_id):
    # created after the designated account, so it never becomes designated
    with app.app_context():
        other = Account(email="neighbour@example.org")
        db.session.add(other)
        db.session.commit()
        return other.id


@pytest.fixture()
def add_item(app):
    def _add(account_id, barcode="0012000161155", description="", favorite=False):
        with app.app_context():
            item = Item(account_id=account_id, barcode=barcode, description=description, favorite=favorite)
            db.session.add(item)
            db.session.commit()
            return item.id

    return _add


@pytest.fixture()
def get_item(app):
    def _get(item_id):
        with app.app_context():
            item = db.session.get(Item, item_id)
            if item is None:
                return None
            db.session.expunge(item)
            return item

    return _get
