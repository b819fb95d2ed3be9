from __future__ import annotations

import logging
from contextlib import nullcontext
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable, ContextManager, List, Optional

from ..activities.service import ActivityService
from ..attendance.model import AttendanceRecord, NewAttendance
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..common.validators import require_non_empty, require_non_negative_int
from ..core.constants import SESSIONS_BY_SUBSCRIPTION
from ..core.enums import (
    ActivityType,
    MembershipStatus,
    PaymentStatus,
    SessionType,
    SubscriptionType,
)
from ..core.exceptions import (
    AlreadyCheckedInError,
    DuplicateKeyError,
    MemberNotFoundError,
    NoAttendanceTodayError,
    NoRemainingSessionsError,
    StoreError,
    ValidationError,
)
from ..customers.model import NonSubscribedCustomer
from ..customers.repository import CustomerRepository
from ..payments.model import Payment
from ..payments.repository import PaymentRepository
from ..sessions.model import NewSession, SubscriptionSession
from ..sessions.repository import SessionRepository
from .model import Member, MemberDraft
from .repository import MemberRepository

logger = logging.getLogger(__name__)


def sessions_for(subscription_type: Optional[SubscriptionType]) -> int:
    """Number of visits included in a plan; plans without a count give 0."""
    if subscription_type is None:
        return 0
    return SESSIONS_BY_SUBSCRIPTION.get(subscription_type, 0)


@dataclass(frozen=True)
class CheckedInMember:
    member: Member
    attendance: AttendanceRecord


@dataclass(frozen=True)
class TodayAttendance:
    """Everyone who came in today, split the way the front desk reads it."""

    regular: List[CheckedInMember] = field(default_factory=list)
    single_session_payments: List[Payment] = field(default_factory=list)
    walk_in_customers: List[NonSubscribedCustomer] = field(default_factory=list)
    walk_in_check_ins: List[AttendanceRecord] = field(default_factory=list)

    @property
    def total(self) -> int:
        # Visits, not people: a repeat walk-in counts every time.
        return len(self.regular) + len(self.walk_in_check_ins)


class MemberService:
    def __init__(
        self,
        members: MemberRepository,
        sessions: SessionRepository,
        attendance: AttendanceRepository,
        activities: ActivityService,
        payments: PaymentRepository,
        customers: CustomerRepository,
        *,
        transaction: Callable[[], ContextManager] | None = None,
    ):
        self._members = members
        self._sessions = sessions
        self._attendance = attendance
        self._activities = activities
        self._payments = payments
        self._customers = customers
        self._transaction = transaction or nullcontext

    # ---- reads ----

    def list_members(self, owner_id: int) -> List[Member]:
        try:
            return list(self._members.list_for_owner(owner_id))
        except StoreError:
            logger.exception("Could not list members for owner %s", owner_id)
            return []

    def get_member(self, owner_id: int, member_id: int) -> Optional[Member]:
        try:
            return self._members.get(owner_id, member_id)
        except StoreError:
            logger.exception("Could not load member %s", member_id)
            return None

    def load_member(self, owner_id: int, member_id: int) -> Optional[Member]:
        """Like ``get_member`` but store errors propagate (for use inside writes)."""
        return self._members.get(owner_id, member_id)

    def search_members(self, owner_id: int, query: str) -> List[Member]:
        return self.search_and_filter(owner_id, query, None)

    def filter_members(self, owner_id: int, status: Optional[MembershipStatus]) -> List[Member]:
        return self.search_and_filter(owner_id, None, status)

    def search_and_filter(
        self,
        owner_id: int,
        query: Optional[str],
        status: Optional[MembershipStatus],
    ) -> List[Member]:
        needle = (query or "").strip().lower()
        result = []
        for m in self.list_members(owner_id):
            if needle and needle not in m.name.lower():
                continue
            if status is not None and m.membership_status != status:
                continue
            result.append(m)
        return result

    def active_sessions(self, owner_id: int, member_id: int) -> List[SubscriptionSession]:
        try:
            return list(self._sessions.list_active_for_member(owner_id, member_id))
        except StoreError:
            logger.exception("Could not load sessions for member %s", member_id)
            return []

    def today_attendance(self, owner_id: int, *, now: datetime | None = None) -> TodayAttendance:
        today = (now or now_local()).date()
        try:
            records = self._attendance.list_for_day(owner_id, today)
            members = {m.member_id: m for m in self._members.list_for_owner(owner_id)}
            payments = self._payments.list_for_owner(owner_id)
            customers = self._customers.list_visited_on(owner_id, today)
        except StoreError:
            logger.exception("Could not load today's attendance for owner %s", owner_id)
            return TodayAttendance()

        regular = []
        walk_in_check_ins = [r for r in records if r.session_type == SessionType.SINGLE_SESSION]
        for r in records:
            if r.session_type != SessionType.REGULAR or r.member_id is None:
                continue
            m = members.get(r.member_id)
            if m is not None:
                regular.append(CheckedInMember(member=m, attendance=r))

        single = [
            p
            for p in payments
            if p.subscription_type == SubscriptionType.SINGLE_SESSION.value and p.date.date() == today
        ]

        seen = set()
        walk_ins = []
        for c in customers:
            key = (c.customer_name, c.phone_number)
            if key in seen:
                continue
            seen.add(key)
            walk_ins.append(c)

        return TodayAttendance(
            regular=regular,
            single_session_payments=single,
            walk_in_customers=walk_ins,
            walk_in_check_ins=walk_in_check_ins,
        )

    # ---- writes ----

    def add_member(self, owner_id: int, draft: MemberDraft, *, now: datetime | None = None) -> Member:
        now = now or now_local()
        draft = replace(
            draft,
            name=require_non_empty(draft.name, "name"),
            sessions_remaining=require_non_negative_int(draft.sessions_remaining, "sessionsRemaining"),
        )

        try:
            member = self._members.create(owner_id, draft, created_at=now)
        except StoreError:
            logger.exception("Could not add member %r", draft.name)
            raise
        logger.info("Member %s added for owner %s", member.member_id, owner_id)

        if member.subscription_type is not None and member.sessions_remaining > 0:
            try:
                self._sessions.create(
                    owner_id,
                    NewSession(
                        member_id=member.member_id,
                        member_name=member.name,
                        subscription_type=member.subscription_type.value,
                        total_sessions=member.sessions_remaining,
                        start_date=member.membership_start_date or now.date(),
                        end_date=member.membership_end_date,
                        price=member.subscription_price,
                        payment_status=member.payment_status or PaymentStatus.PAID,
                        notes=f"حصص أولية للعضو {member.name}",
                    ),
                )
            except StoreError:
                # The member row is already saved; the session can be recreated by a reset.
                logger.exception("Could not create initial session for member %s", member.member_id)

        return member

    def update_member(self, owner_id: int, member: Member) -> Member:
        member = replace(member, owner_id=owner_id, name=require_non_empty(member.name, "name"))
        require_non_negative_int(member.sessions_remaining, "sessionsRemaining")
        try:
            updated = self._members.update(member)
        except StoreError:
            logger.exception("Could not update member %s", member.member_id)
            raise
        if updated is None:
            raise MemberNotFoundError(member.member_id)
        logger.info("Member %s updated", member.member_id)
        return updated

    def delete_member(self, owner_id: int, member_id: int) -> None:
        try:
            with self._transaction():
                if self._members.get(owner_id, member_id) is None:
                    raise MemberNotFoundError(member_id)
                self._attendance.delete_for_member(owner_id, member_id)
                self._sessions.delete_for_member(owner_id, member_id)
                self._activities.forget_member(owner_id, member_id)
                self._payments.delete_for_member(owner_id, member_id)
                self._members.delete(owner_id, member_id)
        except StoreError:
            logger.exception("Could not delete member %s", member_id)
            raise
        logger.info("Member %s deleted with related records", member_id)

    def create_session(self, owner_id: int, draft: NewSession) -> SubscriptionSession:
        require_non_empty(draft.subscription_type, "subscriptionType")
        require_non_negative_int(draft.total_sessions, "totalSessions")
        require_non_negative_int(draft.used_sessions, "usedSessions")
        if draft.used_sessions > draft.total_sessions:
            raise ValidationError("usedSessions cannot exceed totalSessions")
        try:
            created = self._sessions.create(owner_id, draft)
        except StoreError:
            logger.exception("Could not create session for member %s", draft.member_id)
            raise
        logger.info("Session %s created for member %s", created.session_id, draft.member_id)
        return created

    def mark_attendance(self, owner_id: int, member_id: int, *, now: datetime | None = None) -> Member:
        now = now or now_local()
        today = now.date()

        try:
            with self._transaction():
                member = self._members.get(owner_id, member_id)
                if member is None:
                    raise MemberNotFoundError(member_id)

                if self._attendance.get_latest_for_member_on(owner_id, member_id, today):
                    raise AlreadyCheckedInError()

                session = self._sessions.get_consumable(owner_id, member_id)
                if session is None:
                    raise NoRemainingSessionsError()
                if not self._sessions.consume_one(session.session_id):
                    # Another check-in consumed the last visit first.
                    raise NoRemainingSessionsError()

                try:
                    self._attendance.create(
                        owner_id,
                        NewAttendance(
                            member_id=member.member_id,
                            member_name=member.name,
                            member_image=member.image_url,
                            attendance_time=now,
                            session_type=SessionType.REGULAR,
                            session_id=session.session_id,
                        ),
                    )
                except DuplicateKeyError:
                    raise AlreadyCheckedInError() from None

                remaining = session.remaining_sessions - 1
                updated = self._members.set_sessions_remaining(
                    owner_id, member_id, sessions_remaining=remaining, last_attendance=today
                )
                if updated is None:
                    raise MemberNotFoundError(member_id)

                self._activities.record(
                    owner_id,
                    ActivityType.CHECK_IN,
                    f"تسجيل حضور - متبقي {remaining} حصة",
                    member_id=member.member_id,
                    member_name=member.name,
                    member_image=member.image_url,
                    now=now,
                )
        except StoreError:
            logger.exception("Could not mark attendance for member %s", member_id)
            raise

        logger.info("Member %s checked in, %s sessions left", member_id, updated.sessions_remaining)
        return updated

    def remove_attendance(self, owner_id: int, member_id: int, *, now: datetime | None = None) -> Member:
        now = now or now_local()
        today = now.date()

        try:
            with self._transaction():
                member = self._members.get(owner_id, member_id)
                if member is None:
                    raise MemberNotFoundError(member_id)

                record = self._attendance.get_latest_for_member_on(owner_id, member_id, today)
                if record is None:
                    raise NoAttendanceTodayError()
                self._attendance.delete(owner_id, record.attendance_id)

                updated = member
                # A block expired by a later reset keeps its count; so does the member.
                restored = (
                    record.session_type == SessionType.REGULAR
                    and record.session_id is not None
                    and self._sessions.restore_one(record.session_id)
                )
                if restored:
                    updated = self._members.set_sessions_remaining(
                        owner_id, member_id, sessions_remaining=member.sessions_remaining + 1
                    )
                    if updated is None:
                        raise MemberNotFoundError(member_id)

                details = "إلغاء حضور"
                if member.subscription_type is not None:
                    details = f"إلغاء حضور - متبقي {updated.sessions_remaining} حصة"
                self._activities.record(
                    owner_id,
                    ActivityType.OTHER,
                    details,
                    member_id=member.member_id,
                    member_name=member.name,
                    member_image=member.image_url,
                    now=now,
                )
        except StoreError:
            logger.exception("Could not remove attendance for member %s", member_id)
            raise

        logger.info("Attendance removed for member %s", member_id)
        return updated

    def reset_sessions(self, owner_id: int, member_id: int, *, now: datetime | None = None) -> Member:
        now = now or now_local()

        try:
            with self._transaction():
                member = self._members.get(owner_id, member_id)
                if member is None:
                    raise MemberNotFoundError(member_id)

                total = sessions_for(member.subscription_type)
                updated = self._members.update(
                    replace(
                        member,
                        sessions_remaining=total,
                        payment_status=PaymentStatus.PAID,
                        membership_status=MembershipStatus.ACTIVE,
                    )
                )
                if updated is None:
                    raise MemberNotFoundError(member_id)

                self._sessions.expire_active_for_member(owner_id, member_id)
                if member.subscription_type is not None and total > 0:
                    self._sessions.create(
                        owner_id,
                        NewSession(
                            member_id=member.member_id,
                            member_name=member.name,
                            subscription_type=member.subscription_type.value,
                            total_sessions=total,
                            start_date=now.date(),
                            end_date=member.membership_end_date,
                            price=member.subscription_price,
                            payment_status=PaymentStatus.PAID,
                            notes=f"إعادة تعيين الحصص - {now.date().isoformat()}",
                        ),
                    )

                self._activities.record(
                    owner_id,
                    ActivityType.MEMBERSHIP_RENEWAL,
                    f"تم إعادة تعيين الحصص - {total}/{total} حصة",
                    member_id=member.member_id,
                    member_name=member.name,
                    member_image=member.image_url,
                    now=now,
                )
        except StoreError:
            logger.exception("Could not reset sessions for member %s", member_id)
            raise

        logger.info("Sessions reset for member %s to %s", member_id, total)
        return updated
