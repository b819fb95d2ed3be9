from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import MembershipStatus, PaymentStatus, SubscriptionType


@dataclass(frozen=True)
class MemberDraft:
    """Input for registering a member (no identity yet)."""

    name: str
    membership_status: MembershipStatus = MembershipStatus.PENDING
    last_attendance: Optional[date] = None
    image_url: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    membership_type: Optional[str] = None
    membership_start_date: Optional[date] = None
    membership_end_date: Optional[date] = None
    subscription_type: Optional[SubscriptionType] = None
    sessions_remaining: int = 0
    subscription_price: Optional[Decimal] = None
    payment_status: Optional[PaymentStatus] = None
    note: Optional[str] = None


@dataclass(frozen=True)
class Member:
    """Domain entity: a registered gym member."""

    member_id: int
    owner_id: int
    name: str
    membership_status: MembershipStatus
    last_attendance: Optional[date] = None
    image_url: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None
    membership_type: Optional[str] = None
    membership_start_date: Optional[date] = None
    membership_end_date: Optional[date] = None
    subscription_type: Optional[SubscriptionType] = None
    sessions_remaining: int = 0
    subscription_price: Optional[Decimal] = None
    payment_status: Optional[PaymentStatus] = None
    note: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def owes_payment(self) -> bool:
        """Listed under "pending payments" on the dashboard."""

        return (
            self.payment_status in (PaymentStatus.UNPAID, PaymentStatus.PARTIAL)
            or self.membership_status == MembershipStatus.PENDING
            or self.sessions_remaining <= 0
        )
