from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import MembershipStatus, PaymentStatus, SubscriptionType
from ..database.connection import ConnectionFactory
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_decimal
from .model import Member, MemberDraft
from .repository import MemberRepository

_COLUMNS = """
    member_id, owner_id, name, membership_status, last_attendance, image_url, phone_number, email,
    membership_type, membership_start_date, membership_end_date, subscription_type,
    sessions_remaining, subscription_price, payment_status, note, created_at
"""


def _enum_or_none(enum_cls, value):
    if value in (None, ""):
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return None


def _to_member(r: dict) -> Member:
    return Member(
        member_id=int(r["member_id"]),
        owner_id=int(r["owner_id"]),
        name=r["name"],
        membership_status=_enum_or_none(MembershipStatus, r.get("membership_status")) or MembershipStatus.PENDING,
        last_attendance=r.get("last_attendance"),
        image_url=r.get("image_url"),
        phone_number=r.get("phone_number"),
        email=r.get("email"),
        membership_type=r.get("membership_type"),
        membership_start_date=r.get("membership_start_date"),
        membership_end_date=r.get("membership_end_date"),
        subscription_type=_enum_or_none(SubscriptionType, r.get("subscription_type")),
        sessions_remaining=int(r.get("sessions_remaining") or 0),
        subscription_price=to_decimal(r.get("subscription_price")),
        payment_status=_enum_or_none(PaymentStatus, r.get("payment_status")),
        note=r.get("note"),
        created_at=r.get("created_at"),
    )


def _value(e):
    return e.value if e is not None else None


class MySQLMemberRepository(MemberRepository):
    def __init__(self, conn_factory: ConnectionFactory):
        self._conn_factory = conn_factory

    def list_for_owner(self, owner_id: int) -> Sequence[Member]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM members WHERE owner_id=%s ORDER BY created_at DESC, member_id DESC",
                (owner_id,),
            )
            return [_to_member(r) for r in fetchall(cur)]

    def get(self, owner_id: int, member_id: int) -> Optional[Member]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM members WHERE owner_id=%s AND member_id=%s",
                (owner_id, member_id),
            )
            r = fetchone(cur)
            return _to_member(r) if r else None

    def create(self, owner_id: int, draft: MemberDraft, *, created_at: datetime) -> Member:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO members(
                    owner_id, name, membership_status, last_attendance, image_url, phone_number, email,
                    membership_type, membership_start_date, membership_end_date, subscription_type,
                    sessions_remaining, subscription_price, payment_status, note, created_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    owner_id,
                    draft.name,
                    draft.membership_status.value,
                    draft.last_attendance,
                    draft.image_url,
                    draft.phone_number,
                    draft.email,
                    draft.membership_type,
                    draft.membership_start_date,
                    draft.membership_end_date,
                    _value(draft.subscription_type),
                    int(draft.sessions_remaining),
                    draft.subscription_price,
                    _value(draft.payment_status),
                    draft.note,
                    created_at,
                ),
            )
            member_id = int(cur.lastrowid)
            cur.execute(f"SELECT {_COLUMNS} FROM members WHERE member_id=%s", (member_id,))
            return _to_member(fetchone(cur))

    def update(self, member: Member) -> Optional[Member]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE members
                SET name=%s, membership_status=%s, last_attendance=%s, image_url=%s, phone_number=%s,
                    email=%s, membership_type=%s, membership_start_date=%s, membership_end_date=%s,
                    subscription_type=%s, sessions_remaining=%s, subscription_price=%s,
                    payment_status=%s, note=%s
                WHERE owner_id=%s AND member_id=%s
                """,
                (
                    member.name,
                    member.membership_status.value,
                    member.last_attendance,
                    member.image_url,
                    member.phone_number,
                    member.email,
                    member.membership_type,
                    member.membership_start_date,
                    member.membership_end_date,
                    _value(member.subscription_type),
                    int(member.sessions_remaining),
                    member.subscription_price,
                    _value(member.payment_status),
                    member.note,
                    member.owner_id,
                    member.member_id,
                ),
            )
            # rowcount is 0 for an unchanged row too, so re-read instead.
            cur.execute(
                f"SELECT {_COLUMNS} FROM members WHERE owner_id=%s AND member_id=%s",
                (member.owner_id, member.member_id),
            )
            r = fetchone(cur)
            return _to_member(r) if r else None

    def set_sessions_remaining(
        self,
        owner_id: int,
        member_id: int,
        *,
        sessions_remaining: int,
        last_attendance: Optional[date] = None,
    ) -> Optional[Member]:
        with db_cursor(self._conn_factory) as (_, cur):
            if last_attendance is None:
                cur.execute(
                    "UPDATE members SET sessions_remaining=%s WHERE owner_id=%s AND member_id=%s",
                    (int(sessions_remaining), owner_id, member_id),
                )
            else:
                cur.execute(
                    """
                    UPDATE members SET sessions_remaining=%s, last_attendance=%s
                    WHERE owner_id=%s AND member_id=%s
                    """,
                    (int(sessions_remaining), last_attendance, owner_id, member_id),
                )
            cur.execute(
                f"SELECT {_COLUMNS} FROM members WHERE owner_id=%s AND member_id=%s",
                (owner_id, member_id),
            )
            r = fetchone(cur)
            return _to_member(r) if r else None

    def delete(self, owner_id: int, member_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM members WHERE owner_id=%s AND member_id=%s", (owner_id, member_id))
            return cur.rowcount > 0

    def count_created_until(self, owner_id: int, cutoff: datetime) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT COUNT(*) AS c FROM members WHERE owner_id=%s AND created_at <= %s",
                (owner_id, cutoff),
            )
            r = fetchone(cur)
            return int(r["c"]) if r else 0
