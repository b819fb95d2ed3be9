from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from .model import NonSubscribedCustomer


class CustomerRepository(Protocol):
    def find_by_identity(
        self, owner_id: int, customer_name: str, phone_number: Optional[str]
    ) -> Optional[NonSubscribedCustomer]:
        raise NotImplementedError

    def create(
        self,
        owner_id: int,
        *,
        customer_name: str,
        phone_number: Optional[str],
        amount: Decimal,
        visit_date: date,
    ) -> NonSubscribedCustomer:
        """Insert with one visit and ``amount`` paid."""
        raise NotImplementedError

    def record_visit(self, customer_id: int, *, amount: Decimal, visit_date: date) -> NonSubscribedCustomer:
        raise NotImplementedError

    def list_for_owner(self, owner_id: int) -> Sequence[NonSubscribedCustomer]:
        raise NotImplementedError

    def list_visited_on(self, owner_id: int, day: date) -> Sequence[NonSubscribedCustomer]:
        """Most recently updated first."""
        raise NotImplementedError
