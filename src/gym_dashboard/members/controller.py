from __future__ import annotations

from flask import Flask, g, request

from ..auth.login_state import require_owner
from ..common.datetime_utils import now_local
from ..common.http import json_body, ok
from ..common.mapping import apply_member_changes, member_draft_from_json, session_draft_from_json, to_json
from ..common.validators import optional_enum
from ..container import Container
from ..core.enums import MembershipStatus
from ..core.exceptions import MemberNotFoundError


def register(app: Flask, container: Container) -> None:
    members = container.member_service

    @app.route("/api/members", methods=["GET"], endpoint="api_members")
    @require_owner
    def list_members():
        query = request.args.get("q") or request.args.get("search")
        status = optional_enum(MembershipStatus, request.args.get("status"), "status")
        if query or status:
            return ok(members.search_and_filter(g.owner_id, query, status))
        return ok(members.list_members(g.owner_id))

    @app.route("/api/members", methods=["POST"], endpoint="api_members_create")
    @require_owner
    def create_member():
        draft = member_draft_from_json(json_body())
        return ok(members.add_member(g.owner_id, draft), 201)

    @app.route("/api/members/<int:member_id>", methods=["GET"], endpoint="api_member")
    @require_owner
    def get_member(member_id: int):
        member = members.get_member(g.owner_id, member_id)
        if member is None:
            raise MemberNotFoundError(member_id)
        return ok(member)

    @app.route("/api/members/<int:member_id>", methods=["PUT"], endpoint="api_member_update")
    @require_owner
    def update_member(member_id: int):
        existing = members.get_member(g.owner_id, member_id)
        if existing is None:
            raise MemberNotFoundError(member_id)
        changed = apply_member_changes(existing, json_body())
        return ok(members.update_member(g.owner_id, changed))

    @app.route("/api/members/<int:member_id>", methods=["DELETE"], endpoint="api_member_delete")
    @require_owner
    def delete_member(member_id: int):
        members.delete_member(g.owner_id, member_id)
        return ok({"id": member_id})

    @app.route("/api/members/<int:member_id>/attendance", methods=["POST"], endpoint="api_member_checkin")
    @require_owner
    def mark_attendance(member_id: int):
        return ok(members.mark_attendance(g.owner_id, member_id))

    @app.route("/api/members/<int:member_id>/attendance", methods=["DELETE"], endpoint="api_member_checkin_undo")
    @require_owner
    def remove_attendance(member_id: int):
        return ok(members.remove_attendance(g.owner_id, member_id))

    @app.route("/api/members/<int:member_id>/reset-sessions", methods=["POST"], endpoint="api_member_reset")
    @require_owner
    def reset_sessions(member_id: int):
        return ok(members.reset_sessions(g.owner_id, member_id))

    @app.route("/api/members/<int:member_id>/sessions", methods=["GET"], endpoint="api_member_sessions")
    @require_owner
    def list_sessions(member_id: int):
        return ok(members.active_sessions(g.owner_id, member_id))

    @app.route("/api/members/<int:member_id>/sessions", methods=["POST"], endpoint="api_member_sessions_create")
    @require_owner
    def create_session(member_id: int):
        member = members.get_member(g.owner_id, member_id)
        if member is None:
            raise MemberNotFoundError(member_id)
        draft = session_draft_from_json(member, json_body(), today=now_local().date())
        return ok(members.create_session(g.owner_id, draft), 201)

    @app.route("/api/attendance/today", methods=["GET"], endpoint="api_attendance_today")
    @require_owner
    def today_attendance():
        today = members.today_attendance(g.owner_id)
        data = to_json(today)
        data["total"] = today.total
        return ok(data)
