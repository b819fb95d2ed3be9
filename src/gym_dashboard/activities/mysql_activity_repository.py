from __future__ import annotations

from typing import Sequence

from ..core.enums import ActivityType
from ..database.connection import ConnectionFactory
from ..database.mysql_base import db_cursor, fetchall
from .model import Activity, NewActivity
from .repository import ActivityRepository


class MySQLActivityRepository(ActivityRepository):
    def __init__(self, conn_factory: ConnectionFactory):
        self._conn_factory = conn_factory

    def create(self, owner_id: int, new: NewActivity) -> Activity:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO activities(
                    owner_id, member_id, customer_id, member_name, member_image, activity_type, timestamp, details
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    owner_id,
                    new.member_id,
                    new.customer_id,
                    new.member_name,
                    new.member_image,
                    new.activity_type.value,
                    new.timestamp,
                    new.details,
                ),
            )
            return Activity(
                activity_id=int(cur.lastrowid),
                owner_id=owner_id,
                activity_type=new.activity_type,
                timestamp=new.timestamp,
                details=new.details,
                member_id=new.member_id,
                customer_id=new.customer_id,
                member_name=new.member_name,
                member_image=new.member_image,
            )

    def list_recent(self, owner_id: int, limit: int) -> Sequence[Activity]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT activity_id, owner_id, member_id, customer_id, member_name, member_image,
                       activity_type, timestamp, details
                FROM activities
                WHERE owner_id=%s
                ORDER BY timestamp DESC, activity_id DESC
                LIMIT %s
                """,
                (owner_id, int(limit)),
            )
            return [
                Activity(
                    activity_id=int(r["activity_id"]),
                    owner_id=int(r["owner_id"]),
                    activity_type=ActivityType(r["activity_type"]),
                    timestamp=r["timestamp"],
                    details=r["details"],
                    member_id=r.get("member_id"),
                    customer_id=r.get("customer_id"),
                    member_name=r.get("member_name"),
                    member_image=r.get("member_image"),
                )
                for r in fetchall(cur)
            ]

    def delete_for_member(self, owner_id: int, member_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM activities WHERE owner_id=%s AND member_id=%s", (owner_id, member_id))
            return int(cur.rowcount)
