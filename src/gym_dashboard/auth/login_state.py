"""Login freshness and the caller identity attached to every request.

The browser flow keeps ``owner_id`` and ``login_time`` in the Flask session.
API clients may instead send ``Authorization: Bearer <token>`` with a token
issued at login.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from functools import wraps
from typing import Optional

from flask import current_app, g, jsonify, request, session
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from ..common.datetime_utils import now_local, parse_iso_datetime
from ..core.constants import LOGIN_TTL_HOURS

_TOKEN_SALT = "gym-dashboard-owner"


def _ttl_hours() -> int:
    return int(current_app.config.get("LOGIN_TTL_HOURS", LOGIN_TTL_HOURS))


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.secret_key, salt=_TOKEN_SALT)


def issue_token(owner_id: int) -> str:
    return _serializer().dumps({"owner_id": int(owner_id)})


def verify_token(token: str) -> Optional[int]:
    try:
        payload = _serializer().loads(token, max_age=_ttl_hours() * 3600)
    except (SignatureExpired, BadSignature):
        return None
    try:
        return int(payload["owner_id"])
    except (KeyError, TypeError, ValueError):
        return None


def start_login(owner_id: int, *, now: datetime | None = None) -> None:
    now = now or now_local()
    session.clear()
    session["owner_id"] = int(owner_id)
    session["login_time"] = now.isoformat()


def end_login() -> None:
    session.clear()


def is_login_fresh(login_time: str | None, *, now: datetime | None = None, ttl_hours: int = LOGIN_TTL_HOURS) -> bool:
    if not login_time:
        return False
    try:
        started = parse_iso_datetime(login_time)
    except ValueError:
        return False
    now = now or now_local()
    return now - started < timedelta(hours=ttl_hours)


def current_owner_id() -> Optional[int]:
    owner_id = session.get("owner_id")
    if owner_id is not None:
        if is_login_fresh(session.get("login_time"), ttl_hours=_ttl_hours()):
            return int(owner_id)
        end_login()

    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return verify_token(header[len("Bearer "):].strip())
    return None


def require_owner(view):
    """Reject the request with 401 unless a fresh login is attached; sets ``g.owner_id``."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        owner_id = current_owner_id()
        if owner_id is None:
            return jsonify({"success": False, "message": "login required"}), 401
        g.owner_id = owner_id
        return view(*args, **kwargs)

    return wrapper
