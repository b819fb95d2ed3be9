from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from ..database.connection import ConnectionFactory
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_decimal
from .model import NonSubscribedCustomer
from .repository import CustomerRepository

_COLUMNS = """
    customer_id, owner_id, customer_name, phone_number, total_sessions, total_amount_paid,
    last_visit_date, updated_at
"""


def _to_customer(r: dict) -> NonSubscribedCustomer:
    return NonSubscribedCustomer(
        customer_id=int(r["customer_id"]),
        owner_id=int(r["owner_id"]),
        customer_name=r["customer_name"],
        phone_number=r.get("phone_number"),
        total_sessions=int(r.get("total_sessions") or 0),
        total_amount_paid=to_decimal(r.get("total_amount_paid")) or Decimal("0"),
        last_visit_date=r.get("last_visit_date"),
        updated_at=r.get("updated_at"),
    )


class MySQLCustomerRepository(CustomerRepository):
    def __init__(self, conn_factory: ConnectionFactory):
        self._conn_factory = conn_factory

    def find_by_identity(
        self, owner_id: int, customer_name: str, phone_number: Optional[str]
    ) -> Optional[NonSubscribedCustomer]:
        with db_cursor(self._conn_factory) as (_, cur):
            # NULL-safe equality: walk-ins without a phone share one aggregate per name.
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM non_subscribed_customers
                WHERE owner_id=%s AND customer_name=%s AND phone_number <=> %s
                ORDER BY customer_id
                LIMIT 1
                FOR UPDATE
                """,
                (owner_id, customer_name, phone_number),
            )
            r = fetchone(cur)
            return _to_customer(r) if r else None

    def create(
        self,
        owner_id: int,
        *,
        customer_name: str,
        phone_number: Optional[str],
        amount: Decimal,
        visit_date: date,
    ) -> NonSubscribedCustomer:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO non_subscribed_customers(
                    owner_id, customer_name, phone_number, total_sessions, total_amount_paid, last_visit_date
                )
                VALUES(%s,%s,%s,1,%s,%s)
                """,
                (owner_id, customer_name, phone_number, amount, visit_date),
            )
            customer_id = int(cur.lastrowid)
            cur.execute(f"SELECT {_COLUMNS} FROM non_subscribed_customers WHERE customer_id=%s", (customer_id,))
            return _to_customer(fetchone(cur))

    def record_visit(self, customer_id: int, *, amount: Decimal, visit_date: date) -> NonSubscribedCustomer:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE non_subscribed_customers
                SET total_sessions = total_sessions + 1,
                    total_amount_paid = total_amount_paid + %s,
                    last_visit_date = %s
                WHERE customer_id=%s
                """,
                (amount, visit_date, customer_id),
            )
            cur.execute(f"SELECT {_COLUMNS} FROM non_subscribed_customers WHERE customer_id=%s", (customer_id,))
            return _to_customer(fetchone(cur))

    def list_for_owner(self, owner_id: int) -> Sequence[NonSubscribedCustomer]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM non_subscribed_customers WHERE owner_id=%s ORDER BY updated_at DESC",
                (owner_id,),
            )
            return [_to_customer(r) for r in fetchall(cur)]

    def list_visited_on(self, owner_id: int, day: date) -> Sequence[NonSubscribedCustomer]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM non_subscribed_customers
                WHERE owner_id=%s AND last_visit_date=%s
                ORDER BY updated_at DESC
                """,
                (owner_id, day),
            )
            return [_to_customer(r) for r in fetchall(cur)]
