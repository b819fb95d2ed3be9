from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import ActivityType


@dataclass(frozen=True)
class NewActivity:
    activity_type: ActivityType
    timestamp: datetime
    details: str
    member_id: Optional[int] = None
    customer_id: Optional[int] = None
    member_name: Optional[str] = None
    member_image: Optional[str] = None


@dataclass(frozen=True)
class Activity:
    """Append-only audit entry feeding the "recent activity" list."""

    activity_id: int
    owner_id: int
    activity_type: ActivityType
    timestamp: datetime
    details: str
    member_id: Optional[int] = None
    customer_id: Optional[int] = None
    member_name: Optional[str] = None
    member_image: Optional[str] = None
