from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import NewSession, SubscriptionSession


class SessionRepository(Protocol):
    def create(self, owner_id: int, new: NewSession) -> SubscriptionSession:
        raise NotImplementedError

    def list_active_for_member(self, owner_id: int, member_id: int) -> Sequence[SubscriptionSession]:
        """Active sessions, newest first."""
        raise NotImplementedError

    def get_consumable(self, owner_id: int, member_id: int) -> Optional[SubscriptionSession]:
        """Newest active session with at least one visit left."""
        raise NotImplementedError

    def consume_one(self, session_id: int) -> bool:
        """used+1 / remaining-1, only while remaining > 0. Returns False if nothing was left."""
        raise NotImplementedError

    def restore_one(self, session_id: int) -> bool:
        """Reverse of ``consume_one``; re-activates a completed session. Expired blocks stay expired."""
        raise NotImplementedError

    def expire_active_for_member(self, owner_id: int, member_id: int) -> int:
        raise NotImplementedError

    def delete_for_member(self, owner_id: int, member_id: int) -> int:
        raise NotImplementedError
