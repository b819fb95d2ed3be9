from __future__ import annotations

from typing import Protocol, Sequence

from .model import Activity, NewActivity


class ActivityRepository(Protocol):
    def create(self, owner_id: int, new: NewActivity) -> Activity:
        raise NotImplementedError

    def list_recent(self, owner_id: int, limit: int) -> Sequence[Activity]:
        raise NotImplementedError

    def delete_for_member(self, owner_id: int, member_id: int) -> int:
        raise NotImplementedError
