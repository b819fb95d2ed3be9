from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import PaymentStatus, SessionStatus
from ..database.connection import ConnectionFactory
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_decimal
from .model import NewSession, SubscriptionSession
from .repository import SessionRepository

_COLUMNS = """
    session_id, owner_id, member_id, member_name, subscription_type, total_sessions, used_sessions,
    remaining_sessions, start_date, end_date, status, price, payment_status, notes, created_at
"""


def _to_session(r: dict) -> SubscriptionSession:
    return SubscriptionSession(
        session_id=int(r["session_id"]),
        owner_id=int(r["owner_id"]),
        member_id=int(r["member_id"]),
        member_name=r["member_name"],
        subscription_type=r["subscription_type"],
        total_sessions=int(r["total_sessions"]),
        used_sessions=int(r["used_sessions"]),
        remaining_sessions=int(r["remaining_sessions"]),
        start_date=r["start_date"],
        end_date=r.get("end_date"),
        status=SessionStatus(r["status"]),
        price=to_decimal(r.get("price")),
        payment_status=PaymentStatus(r.get("payment_status") or PaymentStatus.PAID.value),
        notes=r.get("notes"),
        created_at=r.get("created_at"),
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: ConnectionFactory):
        self._conn_factory = conn_factory

    def create(self, owner_id: int, new: NewSession) -> SubscriptionSession:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO sessions(
                    owner_id, member_id, member_name, subscription_type, total_sessions, used_sessions,
                    remaining_sessions, start_date, end_date, status, price, payment_status, notes
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    owner_id,
                    new.member_id,
                    new.member_name,
                    new.subscription_type,
                    new.total_sessions,
                    new.used_sessions,
                    new.remaining_sessions,
                    new.start_date,
                    new.end_date,
                    new.status.value,
                    new.price,
                    new.payment_status.value,
                    new.notes,
                ),
            )
            session_id = int(cur.lastrowid)
            cur.execute(f"SELECT {_COLUMNS} FROM sessions WHERE session_id=%s", (session_id,))
            return _to_session(fetchone(cur))

    def list_active_for_member(self, owner_id: int, member_id: int) -> Sequence[SubscriptionSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM sessions
                WHERE owner_id=%s AND member_id=%s AND status=%s
                ORDER BY created_at DESC, session_id DESC
                """,
                (owner_id, member_id, SessionStatus.ACTIVE.value),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def get_consumable(self, owner_id: int, member_id: int) -> Optional[SubscriptionSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM sessions
                WHERE owner_id=%s AND member_id=%s AND status=%s AND remaining_sessions > 0
                ORDER BY created_at DESC, session_id DESC
                LIMIT 1
                """,
                (owner_id, member_id, SessionStatus.ACTIVE.value),
            )
            r = fetchone(cur)
            return _to_session(r) if r else None

    def consume_one(self, session_id: int) -> bool:
        # MySQL applies SET assignments left to right, so the IF sees the decremented count.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE sessions
                SET used_sessions = used_sessions + 1,
                    remaining_sessions = remaining_sessions - 1,
                    status = IF(remaining_sessions = 0, %s, status)
                WHERE session_id=%s AND status=%s AND remaining_sessions > 0
                """,
                (SessionStatus.COMPLETED.value, session_id, SessionStatus.ACTIVE.value),
            )
            return cur.rowcount > 0

    def restore_one(self, session_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE sessions
                SET used_sessions = used_sessions - 1,
                    remaining_sessions = remaining_sessions + 1,
                    status = %s
                WHERE session_id=%s AND used_sessions > 0 AND status IN (%s, %s)
                """,
                (
                    SessionStatus.ACTIVE.value,
                    session_id,
                    SessionStatus.ACTIVE.value,
                    SessionStatus.COMPLETED.value,
                ),
            )
            return cur.rowcount > 0

    def expire_active_for_member(self, owner_id: int, member_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE sessions SET status=%s WHERE owner_id=%s AND member_id=%s AND status=%s",
                (SessionStatus.EXPIRED.value, owner_id, member_id, SessionStatus.ACTIVE.value),
            )
            return int(cur.rowcount)

    def delete_for_member(self, owner_id: int, member_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM sessions WHERE owner_id=%s AND member_id=%s", (owner_id, member_id))
            return int(cur.rowcount)
