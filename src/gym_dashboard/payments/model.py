from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import PaymentMethod, PaymentRecordStatus


@dataclass(frozen=True)
class PaymentDraft:
    """Input for recording a payment; service fills date/status/invoice."""

    amount: Decimal
    subscription_type: Optional[str]
    payment_method: PaymentMethod = PaymentMethod.CASH
    member_id: Optional[int] = None
    date: Optional[datetime] = None
    notes: Optional[str] = None
    receipt_url: Optional[str] = None


@dataclass(frozen=True)
class NewPayment:
    amount: Decimal
    date: datetime
    subscription_type: Optional[str]
    payment_method: PaymentMethod
    status: PaymentRecordStatus
    invoice_number: str
    member_id: Optional[int] = None
    notes: Optional[str] = None
    receipt_url: Optional[str] = None


@dataclass(frozen=True)
class Payment:
    """Ledger entry."""

    payment_id: int
    owner_id: int
    amount: Decimal
    date: datetime
    subscription_type: Optional[str]
    payment_method: PaymentMethod
    status: PaymentRecordStatus
    invoice_number: str
    member_id: Optional[int] = None
    notes: Optional[str] = None
    receipt_url: Optional[str] = None
