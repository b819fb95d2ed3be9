from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import SessionType


@dataclass(frozen=True)
class NewAttendance:
    member_name: str
    attendance_time: datetime
    session_type: SessionType
    member_id: Optional[int] = None
    customer_id: Optional[int] = None
    session_id: Optional[int] = None
    member_image: Optional[str] = None
    notes: Optional[str] = None

    @property
    def attendance_date(self) -> date:
        return self.attendance_time.date()


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one check-in event."""

    attendance_id: int
    owner_id: int
    member_id: Optional[int]
    member_name: str
    attendance_date: date
    attendance_time: datetime
    session_type: SessionType
    customer_id: Optional[int] = None
    session_id: Optional[int] = None
    member_image: Optional[str] = None
    notes: Optional[str] = None
