from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True)
class NonSubscribedCustomer:
    """Walk-in aggregate, identified by name + phone."""

    customer_id: int
    owner_id: int
    customer_name: str
    phone_number: Optional[str]
    total_sessions: int
    total_amount_paid: Decimal
    last_visit_date: Optional[date]
    updated_at: Optional[datetime] = None
