from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List

from flask import Blueprint, g, redirect, render_template, request, url_for
from sqlalchemy.exc import SQLAlchemyError

from piscan.app.common.account import account_required, get_designated_account
from piscan.app.common.errors import BAD_REQUEST, abort_json, request_failed
from piscan.app.common.json import ack
from piscan.app.common.validation import form_ids, get_json, require_fields
from piscan.app.extensions import db
from piscan.app.models import Item

log = logging.getLogger(__name__)

bp = Blueprint("items", __name__)
api_bp = Blueprint("items_api", __name__)


# --- Page models ---

@dataclass
class ActiveTab:
    scanned: bool
    favorites: bool
    show_tabs: bool = True


@dataclass
class Action:
    icon: str
    link: str
    action: str


@dataclass
class ItemsPage:
    title: str
    active_tab: ActiveTab
    scanned: bool
    items: List[Item] = field(default_factory=list)
    actions: List[Action] = field(default_factory=list)


def _account_items(favorites: bool = False) -> List[Item]:
    q = Item.query.filter_by(account_id=g.account.id)
    if favorites:
        q = q.filter_by(favorite=True)
    return q.order_by(Item.scanned_at.desc(), Item.id.desc()).all()


def _page_title(favorites: bool, count: int) -> str:
    title = "Favorite Item" if favorites else "Scanned Item"
    if count != 1:
        title += "s"
    return title


def _page_actions(favorites: bool) -> List[Action]:
    actions = []
    if favorites:
        actions.append(Action(icon="fa fa-star-o", link=url_for("items.unfavorite_items"), action="Remove from favorites"))
    else:
        actions.append(Action(icon="fa fa-star", link=url_for("items.favorite_items"), action="Add to favorites"))
    actions.append(Action(icon="fa fa-trash", link=url_for("items.delete_items"), action="Delete"))
    return actions


def _render_items(favorites: bool):
    items = _account_items(favorites)
    page = ItemsPage(
        title=_page_title(favorites, len(items)),
        active_tab=ActiveTab(scanned=not favorites, favorites=favorites),
        scanned=not favorites,
        items=items,
        actions=_page_actions(favorites),
    )
    return render_template("items.html", page=page)


def _process_items(fn: Callable[[Item], None], target: str):
    """Apply fn to every posted item id that belongs to the account.

    Ids that are malformed or owned by someone else are skipped. Each call
    commits on its own; there is no transaction across the batch.
    """
    account_items: Dict[int, Item] = {i.id: i for i in _account_items()}
    applied = 0
    for item_id in form_ids("item"):
        item = account_items.get(item_id)
        if item is not None:
            fn(item)
            applied += 1
    log.info("%s applied to %d item(s)", fn.__name__, applied)
    return redirect(url_for(target))


# --- Web pages ---

@bp.get("/")
def home():
    return redirect(url_for("items.scanned_items"))


@bp.get("/scanned/")
@account_required
def scanned_items():
    """All scanned products, favorited or not, named or not."""
    return _render_items(favorites=False)


@bp.get("/favorites/")
@account_required
def favorite_items_page():
    return _render_items(favorites=True)


@bp.post("/delete/")
@account_required
def delete_items():
    def delete(item: Item) -> None:
        item.delete()

    return _process_items(delete, "items.scanned_items")


@bp.post("/favorite/")
@account_required
def favorite_items():
    def favorite(item: Item) -> None:
        item.favorite_item()

    return _process_items(favorite, "items.favorite_items_page")


@bp.post("/unfavorite/")
@account_required
def unfavorite_items():
    def unfavorite(item: Item) -> None:
        item.unfavorite_item()

    return _process_items(unfavorite, "items.favorite_items_page")


@bp.get("/input/<int:item_id>/")
@account_required
def input_unknown_item(item_id: int):
    """Form for naming a product whose barcode lookup came back empty."""
    item = Item.query.filter_by(id=item_id, account_id=g.account.id).first()
    if item is None:
        request_failed("No such item", 404)
    return render_template(
        "define_item.html",
        title="Contribute Product Information",
        item=item,
        cancel_url=url_for("items.scanned_items"),
    )


@bp.post("/input/")
@account_required
def input_unknown_item_post():
    item_raw = request.form.get("item")
    barcode = request.form.get("barcode")
    prod_name = request.form.get("prodName")
    if item_raw is None or barcode is None or prod_name is None:
        request_failed(BAD_REQUEST)

    try:
        item_id = int(item_raw)
    except ValueError:
        request_failed(BAD_REQUEST)

    item = Item.query.filter_by(id=item_id, account_id=g.account.id).first()
    if item is None:
        request_failed("No such item", 404)

    # the hidden barcode must match the stored item
    if item.barcode != barcode:
        log.warning("Rejected contribution for item %s: barcode mismatch", item.id)
        request_failed(BAD_REQUEST)

    prod_name = prod_name.strip()
    if not prod_name:
        request_failed("Product name is required")

    item.contribute(prod_name)
    return redirect(url_for("items.scanned_items"))


# --- Ajax ---

@bp.route("/remove/", methods=["GET", "POST"])
def remove_single_item():
    """Delete the item named by ``itemId`` and acknowledge in JSON.

    Every outcome, storage failures included, is answered with an ack.
    """
    if request.method != "POST":
        return ack(error="Bad Request")
    if "itemId" not in request.form:
        return ack(error="Bad POST data")
    raw = request.form.get("itemId", "").strip()
    if not raw:
        return ack(error="Missing item id")
    try:
        item_id = int(raw)
    except ValueError:
        return ack(error=f"Invalid item id: {raw!r}")

    try:
        acc = get_designated_account()
        item = Item.query.filter_by(id=item_id, account_id=acc.id).first()
        if item is None:
            return ack(error="No such item")
        item.delete()
    except SQLAlchemyError as exc:
        log.warning("Could not remove item %s: %s", item_id, exc)
        db.session.rollback()
        return ack(error=str(exc))
    return ack(message="Ok")


# --- JSON API (mounted under /api) ---

@api_bp.get("/items")
@account_required
def list_items():
    favorites = request.args.get("favorites", "").lower() in ("1", "true", "yes")
    return {"items": [i.to_dict() for i in _account_items(favorites)]}, 200


@api_bp.post("/items")
@account_required
def record_scan():
    """POST /api/items - Record a scanned barcode for the account."""
    data = get_json()
    require_fields(data, ["barcode"])

    raw = data["barcode"]
    # bool is an int subclass but never a barcode
    if isinstance(raw, bool) or not isinstance(raw, (str, int)):
        abort_json(400, "validation_error", "Barcode must be a string or number")
    barcode = str(raw).strip()
    if not barcode:
        abort_json(400, "validation_error", "Barcode must not be empty")

    item = Item(
        account_id=g.account.id,
        barcode=barcode,
        description=str(data.get("description") or "").strip(),
    )
    db.session.add(item)
    db.session.commit()
    log.info("Recorded scan %s as item %s", barcode, item.id)
    return item.to_dict(), 201
