from __future__ import annotations

from flask import Flask, g, request

from ..auth.login_state import require_owner
from ..common.http import ok
from ..container import Container
from ..core.constants import DEFAULT_ACTIVITY_LIMIT


def register(app: Flask, container: Container) -> None:
    @app.route("/api/dashboard/statistics", methods=["GET"], endpoint="api_dashboard_statistics")
    @require_owner
    def dashboard_statistics():
        return ok(container.dashboard_service.overview(g.owner_id))

    @app.route("/api/activities", methods=["GET"], endpoint="api_activities")
    @require_owner
    def recent_activities():
        limit = request.args.get("limit", default=DEFAULT_ACTIVITY_LIMIT, type=int)
        return ok(container.activity_service.recent(g.owner_id, limit))
