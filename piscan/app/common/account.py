"""Designated account resolution.

The companion UI runs on the scanning device itself and has no login: every
request acts on behalf of the single local account. It is created the first
time it is needed and is afterwards read on every request.
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Callable, TypeVar

from flask import current_app, g

from piscan.app.extensions import db
from piscan.app.models import Account

log = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def get_designated_account() -> Account:
    acc = Account.query.order_by(Account.id.asc()).first()
    if acc is None:
        acc = Account(email=current_app.config["ANONYMOUS_EMAIL"])
        db.session.add(acc)
        db.session.commit()
        log.info("Created designated account %s", acc.id)
    return acc


def account_required(fn: F) -> F:
    @wraps(fn)
    def wrapper(*args, **kwargs):
        g.account = get_designated_account()
        return fn(*args, **kwargs)

    return wrapper  # type: ignore
