from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import NewPayment, Payment


class PaymentRepository(Protocol):
    def list_for_owner(self, owner_id: int) -> Sequence[Payment]:
        """Most recent payment first."""
        raise NotImplementedError

    def get(self, owner_id: int, payment_id: int) -> Optional[Payment]:
        raise NotImplementedError

    def create(self, owner_id: int, new: NewPayment) -> Payment:
        raise NotImplementedError

    def update(self, payment: Payment) -> Optional[Payment]:
        raise NotImplementedError

    def delete(self, owner_id: int, payment_id: int) -> bool:
        raise NotImplementedError

    def delete_for_member(self, owner_id: int, member_id: int) -> int:
        raise NotImplementedError
