from __future__ import annotations

from flask import jsonify


def ack(message: str = "", error: str = ""):
    """Acknowledgment for ajax calls: ``msg`` always, ``err`` only when set."""
    payload = {"msg": message}
    if error:
        payload["err"] = error
    return jsonify(payload)
