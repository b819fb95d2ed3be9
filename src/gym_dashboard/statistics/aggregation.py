"""Pure aggregation helpers behind the revenue and attendance figures.

Nothing here touches the store: services fetch the rows, these functions
fold them into numbers.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Dict, Iterable, List, Optional

from ..common.datetime_utils import add_months
from ..core.constants import UNSPECIFIED_SUBSCRIPTION_LABEL, WALK_IN_SESSIONS_LABEL
from ..customers.model import NonSubscribedCustomer
from ..payments.model import Payment

ZERO = Decimal("0")


def safe_sum(values: Iterable) -> Decimal:
    """Sum amounts, skipping None, NaN and infinities."""
    total = ZERO
    for v in values:
        if v is None:
            continue
        try:
            d = v if isinstance(v, Decimal) else Decimal(str(v))
        except (InvalidOperation, ValueError):
            continue
        if not d.is_finite():
            continue
        total += d
    return total


def _comparable(value, bound):
    # Dates and datetimes do not compare with each other directly.
    if isinstance(bound, datetime) and not isinstance(value, datetime):
        return datetime.combine(value, time.min)
    if not isinstance(bound, datetime) and isinstance(value, datetime):
        return value.date()
    return value


def in_window(value, start, end) -> bool:
    """Half-open membership test ``start <= value < end``; ``end=None`` means unbounded."""
    if value is None:
        return False
    if _comparable(value, start) < start:
        return False
    return end is None or _comparable(value, end) < end


def trend_percentage(current, previous) -> int:
    """Relative change in percent, rounded half up; 100 when there is nothing to compare to."""
    current = Decimal(str(current))
    previous = Decimal(str(previous))
    if previous > 0:
        ratio = (current - previous) / previous * 100
        return int(math.floor(ratio + Decimal("0.5")))
    return 100 if current > 0 else 0


@dataclass(frozen=True)
class Window:
    start: datetime
    end: Optional[datetime]

    def contains(self, value) -> bool:
        return in_window(value, self.start, self.end)


@dataclass(frozen=True)
class Windows:
    today: Window
    yesterday: Window
    week: Window
    previous_week: Window
    month: Window
    previous_month: Window


def windows(now: datetime) -> Windows:
    """Reporting periods relative to ``now``; the current ones run up to and including ``now``."""
    midnight = datetime.combine(now.date(), time.min)
    upto_now = now + timedelta(microseconds=1)
    week_start = now - timedelta(days=7)
    month_start = add_months(now, -1)
    return Windows(
        today=Window(midnight, midnight + timedelta(days=1)),
        yesterday=Window(midnight - timedelta(days=1), midnight),
        week=Window(week_start, upto_now),
        previous_week=Window(now - timedelta(days=14), week_start),
        month=Window(month_start, upto_now),
        previous_month=Window(add_months(now, -2), month_start),
    )


def _quantize(value: Decimal) -> Decimal:
    return value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class WalkInStatistics:
    total_customers: int = 0
    total_sessions: int = 0
    total_revenue: Decimal = ZERO
    avg_sessions_per_customer: Decimal = ZERO
    today_customers: int = 0
    recent_customers: List[NonSubscribedCustomer] = field(default_factory=list)
    today_revenue: Decimal = ZERO
    week_revenue: Decimal = ZERO
    month_revenue: Decimal = ZERO


@dataclass(frozen=True)
class PaymentStatistics:
    total_revenue: Decimal = ZERO
    today_revenue: Decimal = ZERO
    week_revenue: Decimal = ZERO
    month_revenue: Decimal = ZERO
    today_trend: int = 0
    week_trend: int = 0
    month_trend: int = 0
    payment_count: int = 0
    average_payment: Decimal = ZERO
    subscription_type_breakdown: Dict[str, int] = field(default_factory=dict)
    recent_payments: List[Payment] = field(default_factory=list)
    walk_in: WalkInStatistics = field(default_factory=WalkInStatistics)


def walk_in_statistics(
    customers: Iterable[NonSubscribedCustomer],
    walk_in_payments: Iterable[Payment],
    *,
    now: datetime,
    recent_limit: int = 5,
) -> WalkInStatistics:
    """Fold the walk-in aggregates; period revenue comes from the walk-in ledger rows."""
    customers = list(customers)
    walk_in_payments = list(walk_in_payments)
    today: date = now.date()
    w = windows(now)

    total_customers = len(customers)
    total_sessions = sum(int(c.total_sessions or 0) for c in customers)
    avg = _quantize(Decimal(total_sessions) / total_customers) if total_customers else ZERO
    recent = sorted(
        (c for c in customers if c.last_visit_date),
        key=lambda c: c.last_visit_date,
        reverse=True,
    )[:recent_limit]

    return WalkInStatistics(
        total_customers=total_customers,
        total_sessions=total_sessions,
        total_revenue=safe_sum(c.total_amount_paid for c in customers),
        avg_sessions_per_customer=avg,
        today_customers=sum(1 for c in customers if c.last_visit_date == today),
        recent_customers=recent,
        today_revenue=safe_sum(p.amount for p in walk_in_payments if w.today.contains(p.date)),
        week_revenue=safe_sum(p.amount for p in walk_in_payments if w.week.contains(p.date)),
        month_revenue=safe_sum(p.amount for p in walk_in_payments if w.month.contains(p.date)),
    )


def payment_statistics(
    payments: Iterable[Payment],
    walk_in: WalkInStatistics,
    *,
    now: datetime,
    recent_limit: int = 5,
) -> PaymentStatistics:
    """Revenue over the whole ledger (walk-in payments included, each counted once)."""
    payments = [p for p in payments if p.date is not None]
    w = windows(now)

    def revenue(window: Window) -> Decimal:
        return safe_sum(p.amount for p in payments if window.contains(p.date))

    today, yesterday = revenue(w.today), revenue(w.yesterday)
    week, previous_week = revenue(w.week), revenue(w.previous_week)
    month, previous_month = revenue(w.month), revenue(w.previous_month)
    total = safe_sum(p.amount for p in payments)

    breakdown: Dict[str, int] = {}
    for p in payments:
        key = p.subscription_type or UNSPECIFIED_SUBSCRIPTION_LABEL
        breakdown[key] = breakdown.get(key, 0) + 1
    breakdown[WALK_IN_SESSIONS_LABEL] = walk_in.total_sessions

    count = len(payments)
    return PaymentStatistics(
        total_revenue=total,
        today_revenue=today,
        week_revenue=week,
        month_revenue=month,
        today_trend=trend_percentage(today, yesterday),
        week_trend=trend_percentage(week, previous_week),
        month_trend=trend_percentage(month, previous_month),
        payment_count=count,
        average_payment=_quantize(total / count) if count else ZERO,
        subscription_type_breakdown=breakdown,
        recent_payments=sorted(payments, key=lambda p: p.date, reverse=True)[:recent_limit],
        walk_in=walk_in,
    )
