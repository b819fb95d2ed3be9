from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, NewAttendance


class AttendanceRepository(Protocol):
    def get_latest_for_member_on(self, owner_id: int, member_id: int, day: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create(self, owner_id: int, new: NewAttendance) -> AttendanceRecord:
        """Raises DuplicateKeyError if the member already has a row that day."""
        raise NotImplementedError

    def delete(self, owner_id: int, attendance_id: int) -> bool:
        raise NotImplementedError

    def list_for_day(self, owner_id: int, day: date) -> Sequence[AttendanceRecord]:
        """Latest check-in first."""
        raise NotImplementedError

    def count_between(self, owner_id: int, *, start: date, end: date) -> int:
        """Rows with start <= attendance_date < end."""
        raise NotImplementedError

    def delete_for_member(self, owner_id: int, member_id: int) -> int:
        raise NotImplementedError
