from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import PaymentStatus, SessionStatus


@dataclass(frozen=True)
class NewSession:
    member_id: int
    member_name: str
    subscription_type: str
    total_sessions: int
    start_date: date
    used_sessions: int = 0
    end_date: Optional[date] = None
    status: SessionStatus = SessionStatus.ACTIVE
    price: Optional[Decimal] = None
    payment_status: PaymentStatus = PaymentStatus.PAID
    notes: Optional[str] = None

    @property
    def remaining_sessions(self) -> int:
        return self.total_sessions - self.used_sessions


@dataclass(frozen=True)
class SubscriptionSession:
    """A purchased block of visits; remaining = total - used."""

    session_id: int
    owner_id: int
    member_id: int
    member_name: str
    subscription_type: str
    total_sessions: int
    used_sessions: int
    remaining_sessions: int
    start_date: date
    end_date: Optional[date]
    status: SessionStatus
    price: Optional[Decimal] = None
    payment_status: PaymentStatus = PaymentStatus.PAID
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
