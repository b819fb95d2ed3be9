from __future__ import annotations

from typing import Optional

from ..database.connection import ConnectionFactory
from ..database.mysql_base import db_cursor, fetchone
from .model import Owner
from .repository import OwnerRepository


def _to_owner(row: dict) -> Owner:
    return Owner(
        owner_id=int(row["owner_id"]),
        username=row["username"],
        full_name=row["full_name"],
        password_hash=row["password_hash"],
        is_active=bool(row.get("is_active", True)),
    )


class MySQLOwnerRepository(OwnerRepository):
    def __init__(self, conn_factory: ConnectionFactory):
        self._conn_factory = conn_factory

    def get_by_id(self, owner_id: int) -> Optional[Owner]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT owner_id, username, full_name, password_hash, is_active
                FROM owners
                WHERE owner_id=%s
                """,
                (owner_id,),
            )
            row = fetchone(cur)
            return _to_owner(row) if row else None

    def get_by_username(self, username: str) -> Optional[Owner]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT owner_id, username, full_name, password_hash, is_active
                FROM owners
                WHERE username=%s
                """,
                (username,),
            )
            row = fetchone(cur)
            return _to_owner(row) if row else None
