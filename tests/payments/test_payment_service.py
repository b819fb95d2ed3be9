from __future__ import annotations

import re
from contextlib import contextmanager
from dataclasses import replace
from datetime import timedelta
from decimal import Decimal

import pytest

from gym_dashboard.core.enums import (
    ActivityType,
    MembershipStatus,
    PaymentMethod,
    PaymentRecordStatus,
    SessionType,
    SubscriptionType,
)
from gym_dashboard.container import assemble
from gym_dashboard.core.exceptions import PaymentNotFoundError, StoreError, ValidationError
from gym_dashboard.members.model import MemberDraft
from gym_dashboard.payments.model import PaymentDraft
from gym_dashboard.payments.service import calculate_subscription_price

OWNER_ID = 1


def test_walk_in_creates_customer_payment_and_check_in(payment_service, repos, fixed_now):
    result = payment_service.add_walk_in_payment(OWNER_ID, "Nadia", "0770", Decimal("200"), now=fixed_now)

    assert result.customer.total_sessions == 1
    assert result.customer.total_amount_paid == Decimal("200")
    assert result.customer.last_visit_date == fixed_now.date()
    assert result.payment.amount == Decimal("200")
    assert result.payment.subscription_type == SubscriptionType.SINGLE_SESSION.value
    assert result.payment.payment_method == PaymentMethod.CASH
    assert result.attendance.session_type == SessionType.SINGLE_SESSION
    assert result.attendance.customer_id == result.customer.customer_id
    assert result.attendance.member_id is None

    kinds = [a.activity_type for a in repos.activities.rows]
    assert kinds == [ActivityType.PAYMENT, ActivityType.CHECK_IN]

    stats = payment_service.walk_in_statistics(OWNER_ID, now=fixed_now)
    assert stats.total_customers == 1
    assert stats.total_sessions == 1
    assert stats.total_revenue == Decimal("200")


def test_walk_in_defaults(payment_service, fixed_now):
    result = payment_service.add_walk_in_payment(OWNER_ID, now=fixed_now)
    assert result.customer.customer_name == "زبون غير مشترك"
    assert result.customer.phone_number is None
    assert result.payment.amount == Decimal("200")


def test_repeat_walk_in_accumulates(payment_service, repos, fixed_now):
    payment_service.add_walk_in_payment(OWNER_ID, "Nadia", "0770", 200, now=fixed_now)
    result = payment_service.add_walk_in_payment(OWNER_ID, "Nadia", "0770", 250, now=fixed_now + timedelta(days=2))

    assert len(repos.customers.rows) == 1
    assert result.customer.total_sessions == 2
    assert result.customer.total_amount_paid == Decimal("450")
    assert result.customer.last_visit_date == (fixed_now + timedelta(days=2)).date()


def test_walk_in_with_other_phone_is_a_new_customer(payment_service, repos, fixed_now):
    payment_service.add_walk_in_payment(OWNER_ID, "Nadia", "0770", now=fixed_now)
    payment_service.add_walk_in_payment(OWNER_ID, "Nadia", "0550", now=fixed_now)
    assert len(repos.customers.rows) == 2


def test_walk_in_rejects_negative_amount(payment_service, fixed_now):
    with pytest.raises(ValidationError):
        payment_service.add_walk_in_payment(OWNER_ID, "Nadia", None, -5, now=fixed_now)


def test_add_payment_renews_member(payment_service, member_service, repos, fixed_now):
    member = member_service.add_member(
        OWNER_ID,
        MemberDraft(
            name="Karim",
            membership_status=MembershipStatus.PENDING,
            subscription_type=SubscriptionType.SESSIONS_15,
            sessions_remaining=0,
        ),
        now=fixed_now,
    )

    payment = payment_service.add_payment(
        OWNER_ID,
        PaymentDraft(amount=Decimal("1800"), subscription_type="15 حصة", member_id=member.member_id),
        now=fixed_now,
    )

    assert payment.status == PaymentRecordStatus.COMPLETED
    assert payment.date == fixed_now
    assert re.fullmatch(r"INV-\d{4}", payment.invoice_number)

    renewed = member_service.get_member(OWNER_ID, member.member_id)
    assert renewed.sessions_remaining == 15
    assert renewed.membership_status == MembershipStatus.ACTIVE

    kinds = [a.activity_type for a in repos.activities.rows]
    assert ActivityType.PAYMENT in kinds
    assert kinds[-1] == ActivityType.MEMBERSHIP_RENEWAL


def test_add_payment_without_member_only_records_it(payment_service, repos, fixed_now):
    payment_service.add_payment(OWNER_ID, PaymentDraft(amount=Decimal("500"), subscription_type=None), now=fixed_now)
    assert len(repos.payments.rows) == 1
    assert repos.activities.rows == []


def test_update_payment_keeps_invoice_and_date(payment_service, fixed_now):
    payment = payment_service.add_payment(
        OWNER_ID, PaymentDraft(amount=Decimal("1000"), subscription_type="13 حصة"), now=fixed_now
    )

    updated = payment_service.update_payment(OWNER_ID, replace(payment, amount=Decimal("900"), notes="discount"))

    assert updated.amount == Decimal("900")
    assert updated.notes == "discount"
    assert updated.invoice_number == payment.invoice_number
    assert updated.date == payment.date


def test_update_missing_payment(payment_service, fixed_now):
    payment = payment_service.add_payment(
        OWNER_ID, PaymentDraft(amount=Decimal("1000"), subscription_type=None), now=fixed_now
    )
    with pytest.raises(PaymentNotFoundError):
        payment_service.update_payment(OWNER_ID, replace(payment, payment_id=404))


def test_delete_payment(payment_service, fixed_now):
    payment = payment_service.add_payment(
        OWNER_ID, PaymentDraft(amount=Decimal("1000"), subscription_type=None), now=fixed_now
    )
    payment_service.delete_payment(OWNER_ID, payment.payment_id)
    assert payment_service.get_payment(OWNER_ID, payment.payment_id) is None

    with pytest.raises(PaymentNotFoundError):
        payment_service.delete_payment(OWNER_ID, payment.payment_id)


def test_payments_for_member(payment_service, fixed_now):
    payment_service.add_payment(OWNER_ID, PaymentDraft(amount=Decimal("10"), subscription_type=None), now=fixed_now)
    assert payment_service.payments_for_member(OWNER_ID, 5) == []


@pytest.mark.parametrize(
    "subscription_type, expected",
    [
        ("شهري", Decimal("1500")),
        (" شهري ", Decimal("1500")),
        ("13 حصة", Decimal("1000")),
        ("15 حصة", Decimal("1800")),
        ("30 حصة", Decimal("1800")),
        ("حصة واحدة", Decimal("200")),
        ("20 حصة", Decimal("1000")),
        (None, Decimal("1000")),
        ("yearly", Decimal("1000")),
    ],
)
def test_subscription_price(subscription_type, expected):
    assert calculate_subscription_price(subscription_type) == expected


def test_payment_statistics_counts_walk_ins_once(payment_service, fixed_now):
    payment_service.add_payment(
        OWNER_ID, PaymentDraft(amount=Decimal("1000"), subscription_type="13 حصة"), now=fixed_now
    )
    payment_service.add_walk_in_payment(OWNER_ID, "Nadia", None, 200, now=fixed_now)

    stats = payment_service.payment_statistics(OWNER_ID, now=fixed_now)

    assert stats.total_revenue == Decimal("1200")
    assert stats.today_revenue == Decimal("1200")
    assert stats.payment_count == 2
    assert stats.average_payment == Decimal("600.00")
    assert stats.subscription_type_breakdown["13 حصة"] == 1
    assert stats.subscription_type_breakdown["حصص منفردة"] == 1
    assert stats.walk_in.today_revenue == Decimal("200")
    assert stats.today_trend == 100


def test_add_payment_and_renewal_share_one_transaction(repos, fixed_now):
    events = []

    @contextmanager
    def tracking_transaction():
        events.append("begin")
        yield
        events.append("commit")

    container = assemble(
        owners_repo=repos.owners,
        members_repo=repos.members,
        sessions_repo=repos.sessions,
        attendance_repo=repos.attendance,
        payments_repo=repos.payments,
        customers_repo=repos.customers,
        activities_repo=repos.activities,
        transaction_factory=tracking_transaction,
    )
    member = container.member_service.add_member(
        OWNER_ID,
        MemberDraft(name="Karim", subscription_type=SubscriptionType.SESSIONS_13, sessions_remaining=0),
        now=fixed_now,
    )
    create = repos.payments.create

    def recording_create(owner_id, new):
        events.append("payment")
        return create(owner_id, new)

    repos.payments.create = recording_create
    events.clear()

    container.payment_service.add_payment(
        OWNER_ID,
        PaymentDraft(amount=Decimal("1000"), subscription_type="13 حصة", member_id=member.member_id),
        now=fixed_now,
    )

    assert events[0] == "begin"
    assert events[1] == "payment"
    assert events[-1] == "commit"
    assert repos.members.rows[member.member_id].sessions_remaining == 13


def test_add_payment_surfaces_member_lookup_failure(payment_service, member_service, repos, fixed_now):
    member = member_service.add_member(
        OWNER_ID,
        MemberDraft(name="Karim", subscription_type=SubscriptionType.SESSIONS_13, sessions_remaining=0),
        now=fixed_now,
    )

    def broken_get(owner_id, member_id):
        raise StoreError("connection lost")

    repos.members.get = broken_get

    with pytest.raises(StoreError):
        payment_service.add_payment(
            OWNER_ID,
            PaymentDraft(amount=Decimal("1000"), subscription_type="13 حصة", member_id=member.member_id),
            now=fixed_now,
        )
