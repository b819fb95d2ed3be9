from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import Member, MemberDraft


class MemberRepository(Protocol):
    """Repository interface for Member.

    Every call is scoped by ``owner_id`` (the authenticated caller).
    """

    def list_for_owner(self, owner_id: int) -> Sequence[Member]:
        """Newest first."""
        raise NotImplementedError

    def get(self, owner_id: int, member_id: int) -> Optional[Member]:
        raise NotImplementedError

    def create(self, owner_id: int, draft: MemberDraft, *, created_at: datetime) -> Member:
        raise NotImplementedError

    def update(self, member: Member) -> Optional[Member]:
        raise NotImplementedError

    def set_sessions_remaining(
        self,
        owner_id: int,
        member_id: int,
        *,
        sessions_remaining: int,
        last_attendance: Optional[date] = None,
    ) -> Optional[Member]:
        """Update the balance (and the last check-in date when given)."""
        raise NotImplementedError

    def delete(self, owner_id: int, member_id: int) -> bool:
        raise NotImplementedError

    def count_created_until(self, owner_id: int, cutoff: datetime) -> int:
        raise NotImplementedError
