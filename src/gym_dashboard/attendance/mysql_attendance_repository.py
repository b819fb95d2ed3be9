from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import SessionType
from ..database.connection import ConnectionFactory
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceRecord, NewAttendance
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, owner_id, member_id, customer_id, session_id, member_name, member_image,
    attendance_date, attendance_time, session_type, notes
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        owner_id=int(r["owner_id"]),
        member_id=r.get("member_id"),
        customer_id=r.get("customer_id"),
        session_id=r.get("session_id"),
        member_name=r["member_name"],
        member_image=r.get("member_image"),
        attendance_date=r["attendance_date"],
        attendance_time=r["attendance_time"],
        session_type=SessionType(r["session_type"]),
        notes=r.get("notes"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: ConnectionFactory):
        self._conn_factory = conn_factory

    def get_latest_for_member_on(self, owner_id: int, member_id: int, day: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance
                WHERE owner_id=%s AND member_id=%s AND attendance_date=%s
                ORDER BY attendance_time DESC
                LIMIT 1
                """,
                (owner_id, member_id, day),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create(self, owner_id: int, new: NewAttendance) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance(
                    owner_id, member_id, customer_id, session_id, member_name, member_image,
                    attendance_date, attendance_time, session_type, notes
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    owner_id,
                    new.member_id,
                    new.customer_id,
                    new.session_id,
                    new.member_name,
                    new.member_image,
                    new.attendance_date,
                    new.attendance_time,
                    new.session_type.value,
                    new.notes,
                ),
            )
            return AttendanceRecord(
                attendance_id=int(cur.lastrowid),
                owner_id=owner_id,
                member_id=new.member_id,
                customer_id=new.customer_id,
                session_id=new.session_id,
                member_name=new.member_name,
                member_image=new.member_image,
                attendance_date=new.attendance_date,
                attendance_time=new.attendance_time,
                session_type=new.session_type,
                notes=new.notes,
            )

    def delete(self, owner_id: int, attendance_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM attendance WHERE owner_id=%s AND attendance_id=%s",
                (owner_id, attendance_id),
            )
            return cur.rowcount > 0

    def list_for_day(self, owner_id: int, day: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM attendance
                WHERE owner_id=%s AND attendance_date=%s
                ORDER BY attendance_time DESC
                """,
                (owner_id, day),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def count_between(self, owner_id: int, *, start: date, end: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COUNT(*) AS c FROM attendance
                WHERE owner_id=%s AND attendance_date >= %s AND attendance_date < %s
                """,
                (owner_id, start, end),
            )
            r = fetchone(cur)
            return int(r["c"]) if r else 0

    def delete_for_member(self, owner_id: int, member_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendance WHERE owner_id=%s AND member_id=%s", (owner_id, member_id))
            return int(cur.rowcount)
