from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List

from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import add_months, now_local
from ..core.enums import SessionType
from ..core.exceptions import StoreError
from ..members.model import Member
from ..members.repository import MemberRepository
from .aggregation import trend_percentage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Trends:
    total_members: int = 0
    today_attendance: int = 0
    weekly_attendance: int = 0


@dataclass(frozen=True)
class DashboardOverview:
    total_members: int = 0
    today_regular: int = 0
    today_walk_in: int = 0
    today_total: int = 0
    weekly_attendance: int = 0
    pending_payments: int = 0
    pending_members: List[Member] = field(default_factory=list)
    trends: Trends = field(default_factory=Trends)


class DashboardStatisticsService:
    """Figures for the dashboard header cards."""

    def __init__(self, members: MemberRepository, attendance: AttendanceRepository):
        self._members = members
        self._attendance = attendance

    def overview(self, owner_id: int, *, now: datetime | None = None) -> DashboardOverview:
        now = now or now_local()
        today = now.date()
        tomorrow = today + timedelta(days=1)
        week_ago = today - timedelta(days=7)

        try:
            members = list(self._members.list_for_owner(owner_id))
            today_rows = self._attendance.list_for_day(owner_id, today)
            yesterday_count = self._attendance.count_between(owner_id, start=today - timedelta(days=1), end=today)
            weekly = self._attendance.count_between(owner_id, start=week_ago, end=tomorrow)
            previous_week = self._attendance.count_between(
                owner_id, start=today - timedelta(days=14), end=week_ago
            )
            month_ago_members = self._members.count_created_until(owner_id, add_months(now, -1))
        except StoreError:
            logger.exception("Could not load dashboard statistics for owner %s", owner_id)
            return DashboardOverview()

        regular = sum(1 for r in today_rows if r.session_type == SessionType.REGULAR)
        walk_in = sum(1 for r in today_rows if r.session_type == SessionType.SINGLE_SESSION)
        pending = [m for m in members if m.owes_payment]

        return DashboardOverview(
            total_members=len(members),
            today_regular=regular,
            today_walk_in=walk_in,
            today_total=regular + walk_in,
            weekly_attendance=weekly,
            pending_payments=len(pending),
            pending_members=pending,
            trends=Trends(
                total_members=trend_percentage(len(members), month_ago_members),
                today_attendance=trend_percentage(regular + walk_in, yesterday_count),
                weekly_attendance=trend_percentage(weekly, previous_week),
            ),
        )
