from __future__ import annotations

import logging
import random
from contextlib import nullcontext
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Callable, ContextManager, List, Optional

from ..activities.service import ActivityService
from ..attendance.model import AttendanceRecord, NewAttendance
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import now_local
from ..common.validators import require_amount
from ..core.constants import (
    DEFAULT_SUBSCRIPTION_PRICE,
    PRICE_BY_SUBSCRIPTION,
    RECENT_ITEMS_LIMIT,
    SINGLE_SESSION_PRICE,
    WALK_IN_CUSTOMER_NAME,
)
from ..core.enums import ActivityType, PaymentMethod, PaymentRecordStatus, SessionType, SubscriptionType
from ..core.exceptions import PaymentNotFoundError, StoreError
from ..customers.model import NonSubscribedCustomer
from ..customers.repository import CustomerRepository
from ..members.service import MemberService
from ..statistics.aggregation import (
    PaymentStatistics,
    WalkInStatistics,
    payment_statistics,
    walk_in_statistics,
)
from .model import NewPayment, Payment, PaymentDraft
from .repository import PaymentRepository

logger = logging.getLogger(__name__)


def new_invoice_number() -> str:
    return f"INV-{random.randint(0, 9999):04d}"


def calculate_subscription_price(subscription_type: Optional[str]) -> Decimal:
    """List price of a plan; unknown or missing plans cost the default."""
    try:
        text = (subscription_type or "").strip()
        key = SubscriptionType(text) if text else None
    except ValueError:
        key = None
    if key is None:
        return DEFAULT_SUBSCRIPTION_PRICE
    return PRICE_BY_SUBSCRIPTION.get(key, DEFAULT_SUBSCRIPTION_PRICE)


def _is_walk_in(p: Payment) -> bool:
    return p.member_id is None and p.subscription_type == SubscriptionType.SINGLE_SESSION.value


@dataclass(frozen=True)
class WalkInResult:
    payment: Payment
    customer: NonSubscribedCustomer
    attendance: AttendanceRecord


class PaymentService:
    def __init__(
        self,
        payments: PaymentRepository,
        customers: CustomerRepository,
        attendance: AttendanceRepository,
        activities: ActivityService,
        members: MemberService,
        *,
        transaction: Callable[[], ContextManager] | None = None,
    ):
        self._payments = payments
        self._customers = customers
        self._attendance = attendance
        self._activities = activities
        self._members = members
        self._transaction = transaction or nullcontext

    # ---- reads ----

    def list_payments(self, owner_id: int) -> List[Payment]:
        try:
            items = list(self._payments.list_for_owner(owner_id))
        except StoreError:
            logger.exception("Could not list payments for owner %s", owner_id)
            return []
        return sorted(items, key=lambda p: p.date, reverse=True)

    def get_payment(self, owner_id: int, payment_id: int) -> Optional[Payment]:
        try:
            return self._payments.get(owner_id, payment_id)
        except StoreError:
            logger.exception("Could not load payment %s", payment_id)
            return None

    def payments_for_member(self, owner_id: int, member_id: int) -> List[Payment]:
        return [p for p in self.list_payments(owner_id) if p.member_id == member_id]

    def calculate_subscription_price(self, subscription_type: Optional[str]) -> Decimal:
        return calculate_subscription_price(subscription_type)

    # ---- writes ----

    def add_payment(self, owner_id: int, draft: PaymentDraft, *, now: datetime | None = None) -> Payment:
        now = now or now_local()
        new = NewPayment(
            amount=require_amount(draft.amount, "amount"),
            date=draft.date or now,
            subscription_type=draft.subscription_type,
            payment_method=draft.payment_method or PaymentMethod.CASH,
            status=PaymentRecordStatus.COMPLETED,
            invoice_number=new_invoice_number(),
            member_id=draft.member_id,
            notes=draft.notes,
            receipt_url=draft.receipt_url,
        )

        # The payment and the renewal it pays for commit together.
        try:
            with self._transaction():
                payment = self._payments.create(owner_id, new)
                member = None
                if payment.member_id is not None:
                    member = self._members.load_member(owner_id, payment.member_id)
                if member is not None:
                    self._activities.record(
                        owner_id,
                        ActivityType.PAYMENT,
                        f"دفع {payment.amount} - {payment.subscription_type}" if payment.subscription_type else f"دفع {payment.amount}",
                        member_id=member.member_id,
                        member_name=member.name,
                        member_image=member.image_url,
                        now=now,
                    )
                    self._members.reset_sessions(owner_id, member.member_id, now=now)
        except StoreError:
            logger.exception("Could not add payment for member %s", draft.member_id)
            raise

        logger.info("Payment %s (%s) recorded for owner %s", payment.payment_id, payment.invoice_number, owner_id)
        return payment

    def update_payment(self, owner_id: int, payment: Payment) -> Payment:
        existing = self.get_payment(owner_id, payment.payment_id)
        if existing is None:
            raise PaymentNotFoundError(payment.payment_id)

        payment = replace(
            payment,
            owner_id=owner_id,
            amount=require_amount(payment.amount, "amount"),
            date=payment.date or existing.date,
            invoice_number=payment.invoice_number or existing.invoice_number or new_invoice_number(),
            status=payment.status or existing.status or PaymentRecordStatus.COMPLETED,
        )
        try:
            updated = self._payments.update(payment)
        except StoreError:
            logger.exception("Could not update payment %s", payment.payment_id)
            raise
        if updated is None:
            raise PaymentNotFoundError(payment.payment_id)
        logger.info("Payment %s updated", payment.payment_id)
        return updated

    def delete_payment(self, owner_id: int, payment_id: int) -> None:
        try:
            deleted = self._payments.delete(owner_id, payment_id)
        except StoreError:
            logger.exception("Could not delete payment %s", payment_id)
            raise
        if not deleted:
            raise PaymentNotFoundError(payment_id)
        logger.info("Payment %s deleted", payment_id)

    def add_walk_in_payment(
        self,
        owner_id: int,
        customer_name: Optional[str] = None,
        phone_number: Optional[str] = None,
        amount=None,
        payment_method: Optional[PaymentMethod] = None,
        *,
        now: datetime | None = None,
    ) -> WalkInResult:
        now = now or now_local()
        today = now.date()
        name = (customer_name or "").strip() or WALK_IN_CUSTOMER_NAME
        phone = (phone_number or "").strip() or None
        amount = SINGLE_SESSION_PRICE if amount in (None, "") else require_amount(amount, "amount")
        method = payment_method or PaymentMethod.CASH

        try:
            with self._transaction():
                customer = self._customers.find_by_identity(owner_id, name, phone)
                if customer is None:
                    customer = self._customers.create(
                        owner_id,
                        customer_name=name,
                        phone_number=phone,
                        amount=amount,
                        visit_date=today,
                    )
                else:
                    customer = self._customers.record_visit(customer.customer_id, amount=amount, visit_date=today)

                payment = self._payments.create(
                    owner_id,
                    NewPayment(
                        amount=amount,
                        date=now,
                        subscription_type=SubscriptionType.SINGLE_SESSION.value,
                        payment_method=method,
                        status=PaymentRecordStatus.COMPLETED,
                        invoice_number=new_invoice_number(),
                        notes=f"دفع حصة واحدة - {name}" + (f" - {phone}" if phone else ""),
                    ),
                )

                attendance = self._attendance.create(
                    owner_id,
                    NewAttendance(
                        member_name=name,
                        attendance_time=now,
                        session_type=SessionType.SINGLE_SESSION,
                        customer_id=customer.customer_id,
                        notes=f"حصة واحدة - {payment.invoice_number}",
                    ),
                )

                self._activities.record(
                    owner_id,
                    ActivityType.PAYMENT,
                    f"دفع حصة واحدة - {amount} دج - معرف العميل: {customer.customer_id}",
                    customer_id=customer.customer_id,
                    member_name=name,
                    now=now,
                )
                self._activities.record(
                    owner_id,
                    ActivityType.CHECK_IN,
                    f"تسجيل حضور حصة واحدة - معرف العميل: {customer.customer_id}",
                    customer_id=customer.customer_id,
                    member_name=name,
                    now=now,
                )
        except StoreError:
            logger.exception("Could not record walk-in payment for %r", name)
            raise

        logger.info("Walk-in %s paid %s (visit #%s)", customer.customer_id, amount, customer.total_sessions)
        return WalkInResult(payment=payment, customer=customer, attendance=attendance)

    # ---- statistics ----

    def walk_in_statistics(self, owner_id: int, *, now: datetime | None = None) -> WalkInStatistics:
        now = now or now_local()
        try:
            customers = self._customers.list_for_owner(owner_id)
            payments = self._payments.list_for_owner(owner_id)
        except StoreError:
            logger.exception("Could not load walk-in statistics for owner %s", owner_id)
            return WalkInStatistics()
        return walk_in_statistics(
            customers,
            [p for p in payments if _is_walk_in(p)],
            now=now,
            recent_limit=RECENT_ITEMS_LIMIT,
        )

    def payment_statistics(self, owner_id: int, *, now: datetime | None = None) -> PaymentStatistics:
        now = now or now_local()
        try:
            customers = self._customers.list_for_owner(owner_id)
            payments = list(self._payments.list_for_owner(owner_id))
        except StoreError:
            logger.exception("Could not load payment statistics for owner %s", owner_id)
            return PaymentStatistics()
        walk_in = walk_in_statistics(
            customers,
            [p for p in payments if _is_walk_in(p)],
            now=now,
            recent_limit=RECENT_ITEMS_LIMIT,
        )
        return payment_statistics(payments, walk_in, now=now, recent_limit=RECENT_ITEMS_LIMIT)
