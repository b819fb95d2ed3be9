from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Owner:
    """Account that owns members, payments and the rest of the gym's rows."""

    owner_id: int
    username: str
    full_name: str
    password_hash: str
    is_active: bool = True


@dataclass(frozen=True)
class SessionOwner:
    """What we store into the Flask session after login."""

    owner_id: int
    username: str
    full_name: str
