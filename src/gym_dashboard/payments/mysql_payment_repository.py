from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import PaymentMethod, PaymentRecordStatus
from ..database.connection import ConnectionFactory
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_decimal
from .model import NewPayment, Payment
from .repository import PaymentRepository

_COLUMNS = """
    payment_id, owner_id, member_id, amount, date, subscription_type, payment_method, notes,
    status, invoice_number, receipt_url
"""


def _to_payment(r: dict) -> Payment:
    return Payment(
        payment_id=int(r["payment_id"]),
        owner_id=int(r["owner_id"]),
        member_id=r.get("member_id"),
        amount=to_decimal(r["amount"]),
        date=r["date"],
        subscription_type=r.get("subscription_type"),
        payment_method=PaymentMethod(r.get("payment_method") or PaymentMethod.CASH.value),
        notes=r.get("notes"),
        status=PaymentRecordStatus(r.get("status") or PaymentRecordStatus.COMPLETED.value),
        invoice_number=r["invoice_number"],
        receipt_url=r.get("receipt_url"),
    )


class MySQLPaymentRepository(PaymentRepository):
    def __init__(self, conn_factory: ConnectionFactory):
        self._conn_factory = conn_factory

    def list_for_owner(self, owner_id: int) -> Sequence[Payment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM payments WHERE owner_id=%s ORDER BY date DESC, payment_id DESC",
                (owner_id,),
            )
            return [_to_payment(r) for r in fetchall(cur)]

    def get(self, owner_id: int, payment_id: int) -> Optional[Payment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM payments WHERE owner_id=%s AND payment_id=%s",
                (owner_id, payment_id),
            )
            r = fetchone(cur)
            return _to_payment(r) if r else None

    def create(self, owner_id: int, new: NewPayment) -> Payment:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payments(
                    owner_id, member_id, amount, date, subscription_type, payment_method, notes,
                    status, invoice_number, receipt_url
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    owner_id,
                    new.member_id,
                    new.amount,
                    new.date,
                    new.subscription_type,
                    new.payment_method.value,
                    new.notes,
                    new.status.value,
                    new.invoice_number,
                    new.receipt_url,
                ),
            )
            return Payment(
                payment_id=int(cur.lastrowid),
                owner_id=owner_id,
                amount=new.amount,
                date=new.date,
                subscription_type=new.subscription_type,
                payment_method=new.payment_method,
                status=new.status,
                invoice_number=new.invoice_number,
                member_id=new.member_id,
                notes=new.notes,
                receipt_url=new.receipt_url,
            )

    def update(self, payment: Payment) -> Optional[Payment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE payments
                SET member_id=%s, amount=%s, date=%s, subscription_type=%s, payment_method=%s,
                    notes=%s, status=%s, invoice_number=%s, receipt_url=%s
                WHERE owner_id=%s AND payment_id=%s
                """,
                (
                    payment.member_id,
                    payment.amount,
                    payment.date,
                    payment.subscription_type,
                    payment.payment_method.value,
                    payment.notes,
                    payment.status.value,
                    payment.invoice_number,
                    payment.receipt_url,
                    payment.owner_id,
                    payment.payment_id,
                ),
            )
            cur.execute(
                f"SELECT {_COLUMNS} FROM payments WHERE owner_id=%s AND payment_id=%s",
                (payment.owner_id, payment.payment_id),
            )
            r = fetchone(cur)
            return _to_payment(r) if r else None

    def delete(self, owner_id: int, payment_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM payments WHERE owner_id=%s AND payment_id=%s", (owner_id, payment_id))
            return cur.rowcount > 0

    def delete_for_member(self, owner_id: int, member_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM payments WHERE owner_id=%s AND member_id=%s", (owner_id, member_id))
            return int(cur.rowcount)
