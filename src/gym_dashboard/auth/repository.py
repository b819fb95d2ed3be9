from __future__ import annotations

from typing import Optional, Protocol

from .model import Owner


class OwnerRepository(Protocol):
    def get_by_id(self, owner_id: int) -> Optional[Owner]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[Owner]:
        raise NotImplementedError
