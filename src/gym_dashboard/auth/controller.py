from __future__ import annotations

import logging

from flask import Flask, g, jsonify, request

from ..container import Container
from ..core.exceptions import AuthenticationError
from .login_state import end_login, issue_token, require_owner, start_login

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="api_login")
    def login():
        payload = request.get_json(silent=True) or {}
        username = payload.get("username") or request.form.get("username", "")
        password = payload.get("password") or request.form.get("password", "")

        try:
            owner = container.auth_service.authenticate(username, password)
        except AuthenticationError as e:
            return jsonify({"success": False, "message": str(e)}), 401
        except Exception:
            logger.exception("Login failed")
            return jsonify({"success": False, "message": "internal error during login"}), 500

        start_login(owner.owner_id)
        return jsonify({
            "success": True,
            "data": {
                "ownerId": owner.owner_id,
                "username": owner.username,
                "fullName": owner.full_name,
                "token": issue_token(owner.owner_id),
            },
        })

    @app.route("/api/auth/logout", methods=["POST"], endpoint="api_logout")
    def logout():
        end_login()
        return jsonify({"success": True, "message": "logged out"})

    @app.route("/api/auth/me", methods=["GET"], endpoint="api_me")
    @require_owner
    def me():
        owner = container.auth_service.get_session_owner(g.owner_id)
        if owner is None:
            end_login()
            return jsonify({"success": False, "message": "login required"}), 401
        return jsonify({
            "success": True,
            "data": {
                "ownerId": owner.owner_id,
                "username": owner.username,
                "fullName": owner.full_name,
                "statsRefreshSeconds": app.config.get("STATS_REFRESH_SECONDS"),
                "activityRefreshSeconds": app.config.get("ACTIVITY_REFRESH_SECONDS"),
            },
        })
