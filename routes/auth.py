from flask import Blueprint, g, jsonify, request, session

from security.login import LoginFailure
from utils.audit import log_event
from utils.auth_context import client_ip, get_login_service, login_required
from utils.timing import track

auth_bp = Blueprint("auth", __name__)

FAILURE_MESSAGES = {
    LoginFailure.BANNED: "You're banned.",
    LoginFailure.LOCKED: "This account is locked.",
}
DEFAULT_FAILURE_MESSAGE = "Wrong username or password"

FAILURE_EVENTS = {
    LoginFailure.BANNED: "LOGIN_BANNED",
    LoginFailure.LOCKED: "LOGIN_LOCKED",
}


def _credentials():
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = request.form
    login = data.get("login") or ""
    password = data.get("password") or ""
    if not isinstance(login, str) or not isinstance(password, str):
        return "", ""
    return login, password


@auth_bp.post("/login")
def login():
    login_name, password = _credentials()
    ip = client_ip()

    outcome = get_login_service().attempt_login(login_name, password, ip)

    if outcome.succeeded:
        session.clear()
        session["user_id"] = outcome.user.id
        log_event("LOGIN_SUCCESS", user_id=outcome.user.id, ip=ip)
        with track("view"):
            resp = jsonify(message="Login OK", user=outcome.user.to_dict())
        return resp, 200

    log_event(
        FAILURE_EVENTS.get(outcome.failure, "LOGIN_FAIL"),
        ip=ip,
        metadata={"login": login_name, "reason": outcome.failure.value},
    )
    status = 429 if outcome.failure in FAILURE_MESSAGES else 401
    with track("view"):
        resp = jsonify(error=FAILURE_MESSAGES.get(outcome.failure, DEFAULT_FAILURE_MESSAGE))
    return resp, status


@auth_bp.get("/mypage")
@login_required
def mypage():
    last = get_login_service().last_login(g.user)
    with track("view"):
        resp = jsonify(
            user=g.user.to_dict(),
            last_login=last.to_dict() if last else None,
        )
    return resp, 200


@auth_bp.post("/logout")
def logout():
    user = getattr(g, "user", None)
    session.clear()
    if user is not None:
        log_event("LOGOUT", user_id=user.id, ip=client_ip())
    return jsonify(message="Logged out"), 200
