from __future__ import annotations

from enum import Enum


class MembershipStatus(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    PENDING = "pending"


class PaymentStatus(str, Enum):
    """Settlement state of a member or of a purchased session block."""

    PAID = "paid"
    UNPAID = "unpaid"
    PARTIAL = "partial"


class SubscriptionType(str, Enum):
    """Plans sold at the front desk (values are stored verbatim in the DB)."""

    SESSIONS_13 = "13 حصة"
    SESSIONS_15 = "15 حصة"
    SESSIONS_20 = "20 حصة"
    SESSIONS_30 = "30 حصة"
    MONTHLY = "شهري"
    SINGLE_SESSION = "حصة واحدة"


class SessionStatus(str, Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    COMPLETED = "completed"


class SessionType(str, Enum):
    """Kind of check-in: consumed from a plan, or a single paid visit."""

    REGULAR = "regular"
    SINGLE_SESSION = "single_session"


class ActivityType(str, Enum):
    CHECK_IN = "check-in"
    MEMBERSHIP_RENEWAL = "membership-renewal"
    PAYMENT = "payment"
    OTHER = "other"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    TRANSFER = "transfer"


class PaymentRecordStatus(str, Enum):
    COMPLETED = "completed"
    PENDING = "pending"
    CANCELLED = "cancelled"
