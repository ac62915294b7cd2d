from __future__ import annotations

import secrets
from datetime import datetime, timezone

from sqlalchemy import Index

from piscan.app.extensions import db


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Account(db.Model):
    __tablename__ = "accounts"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)
    api_code = db.Column(db.String(64), nullable=False, default=lambda: secrets.token_hex(16))
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)

    items = db.relationship("Item", backref="account", lazy=True, cascade="all, delete-orphan")


class Item(db.Model):
    __tablename__ = "items"

    id = db.Column(db.Integer, primary_key=True)
    account_id = db.Column(db.Integer, db.ForeignKey("accounts.id"), nullable=False, index=True)

    barcode = db.Column(db.String(64), nullable=False, index=True)
    description = db.Column(db.String(255), nullable=False, default="")
    user_contributed = db.Column(db.Boolean, nullable=False, default=False)
    favorite = db.Column(db.Boolean, nullable=False, default=False)
    scanned_at = db.Column(db.DateTime, nullable=False, default=_utcnow)

    __table_args__ = (
        Index("ix_items_account_favorite", "account_id", "favorite"),
    )

    # Each mutation below is its own single-row commit

    def favorite_item(self) -> None:
        if not self.favorite:
            self.favorite = True
            db.session.commit()

    def unfavorite_item(self) -> None:
        if self.favorite:
            self.favorite = False
            db.session.commit()

    def contribute(self, description: str) -> None:
        """Record a user-supplied description for a barcode the lookup could not name."""
        self.description = description
        self.user_contributed = True
        db.session.commit()

    def delete(self) -> None:
        db.session.delete(self)
        db.session.commit()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "barcode": self.barcode,
            "description": self.description,
            "user_contributed": self.user_contributed,
            "favorite": self.favorite,
            "scanned_at": self.scanned_at.isoformat() if self.scanned_at else None,
        }


class AmazonProduct(db.Model):
    """Amazon catalog entry cached against the barcode it was found for.

    Rows are written once after a successful vendor lookup and never
    updated or evicted.
    """

    __tablename__ = "amazon_products"

    VENDOR_ID = "AMZN"

    id = db.Column(db.Integer, primary_key=True)
    barcode = db.Column(db.String(64), nullable=False, index=True)
    sku = db.Column(db.String(64), nullable=False)  # ASIN
    product_name = db.Column(db.String(512), nullable=True)
    product_type = db.Column(db.String(255), nullable=True)
    locale = db.Column(db.String(8), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)

    @property
    def vendor_tag(self) -> str:
        return f"{self.VENDOR_ID}:{self.locale}"
