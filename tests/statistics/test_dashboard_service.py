from __future__ import annotations

from datetime import timedelta

from gym_dashboard.core.enums import MembershipStatus, PaymentStatus, SubscriptionType
from gym_dashboard.core.exceptions import StoreError
from gym_dashboard.members.model import MemberDraft
from gym_dashboard.statistics.service import DashboardStatisticsService

OWNER_ID = 1


def _member(service, now, name, *, remaining=10, **kw):
    return service.add_member(
        OWNER_ID,
        MemberDraft(
            name=name,
            membership_status=kw.pop("membership_status", MembershipStatus.ACTIVE),
            subscription_type=SubscriptionType.SESSIONS_30,
            sessions_remaining=remaining,
            **kw,
        ),
        now=now,
    )


def test_overview_counts_and_trends(container, fixed_now):
    members = container.member_service
    old = _member(members, fixed_now - timedelta(days=60), "Old Timer")
    a = _member(members, fixed_now, "Amine")
    _member(members, fixed_now, "Unpaid", payment_status=PaymentStatus.UNPAID)
    _member(members, fixed_now, "Empty", remaining=0)

    members.mark_attendance(OWNER_ID, old.member_id, now=fixed_now - timedelta(days=1))
    members.mark_attendance(OWNER_ID, old.member_id, now=fixed_now)
    members.mark_attendance(OWNER_ID, a.member_id, now=fixed_now)
    container.payment_service.add_walk_in_payment(OWNER_ID, "Guest", None, now=fixed_now)

    overview = container.dashboard_service.overview(OWNER_ID, now=fixed_now)

    assert overview.total_members == 4
    assert overview.today_regular == 2
    assert overview.today_walk_in == 1
    assert overview.today_total == 3
    assert overview.weekly_attendance == 4
    assert overview.pending_payments == 2
    assert {m.name for m in overview.pending_members} == {"Unpaid", "Empty"}
    assert overview.trends.total_members == 300  # 1 member a month ago -> 4 now
    assert overview.trends.today_attendance == 200  # 1 yesterday -> 3 today
    assert overview.trends.weekly_attendance == 100  # nothing the week before


def test_overview_falls_back_to_zero_on_store_failure(repos, fixed_now):
    class BrokenMembers:
        def list_for_owner(self, owner_id):
            raise StoreError("connection refused")

    service = DashboardStatisticsService(BrokenMembers(), repos.attendance)
    overview = service.overview(OWNER_ID, now=fixed_now)

    assert overview.total_members == 0
    assert overview.today_total == 0
    assert overview.trends.weekly_attendance == 0
