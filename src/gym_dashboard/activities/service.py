from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_ACTIVITY_LIMIT
from ..core.enums import ActivityType
from ..core.exceptions import StoreError
from .model import Activity, NewActivity
from .repository import ActivityRepository

logger = logging.getLogger(__name__)


class ActivityService:
    """Append-only feed of check-ins, renewals and payments."""

    def __init__(self, activities: ActivityRepository):
        self._activities = activities

    def record(
        self,
        owner_id: int,
        activity_type: ActivityType,
        details: str,
        *,
        member_id: Optional[int] = None,
        customer_id: Optional[int] = None,
        member_name: Optional[str] = None,
        member_image: Optional[str] = None,
        now: datetime | None = None,
    ) -> Activity:
        new = NewActivity(
            activity_type=activity_type,
            timestamp=now or now_local(),
            details=details,
            member_id=member_id,
            customer_id=customer_id,
            member_name=member_name,
            member_image=member_image,
        )
        return self._activities.create(owner_id, new)

    def recent(self, owner_id: int, limit: int = DEFAULT_ACTIVITY_LIMIT) -> List[Activity]:
        limit = max(1, int(limit))
        try:
            return list(self._activities.list_recent(owner_id, limit))
        except StoreError:
            logger.exception("Could not load recent activities for owner %s", owner_id)
            return []

    def forget_member(self, owner_id: int, member_id: int) -> int:
        return self._activities.delete_for_member(owner_id, member_id)
