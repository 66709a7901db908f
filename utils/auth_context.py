from functools import wraps
from flask import current_app, g, jsonify, request, session

from models import db
from models.login_log import IP_MAX_LENGTH
from security.accounts import find_user_by_id
from security.ledger import AttemptLedger
from security.login import LoginService


def client_ip() -> str:
    if current_app.config.get("TRUST_X_FORWARDED_FOR", False):
        forwarded = request.headers.get("X-Forwarded-For", "")
        first = forwarded.split(",")[0].strip()
        if first:
            return first[:IP_MAX_LENGTH]
    # Callers without a peer address share the "unknown" origin and its ban streak
    return (request.remote_addr or "unknown")[:IP_MAX_LENGTH]


def get_login_service() -> LoginService:
    if "login_service" not in g:
        ledger = AttemptLedger(db.session)
        g.login_service = LoginService(ledger, current_app.extensions["login_policy"])
    return g.login_service


def load_current_user():
    user_id = session.get("user_id")
    if user_id is None:
        g.user = None
        return
    g.user = find_user_by_id(user_id)
    if g.user is None:
        # user row is gone, drop the stale session
        session.pop("user_id", None)


def login_required(fn):
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if getattr(g, "user", None) is None:
            return jsonify(error="You must be logged in"), 401
        return fn(*args, **kwargs)
    return wrapper
