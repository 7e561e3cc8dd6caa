from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, NewAttendance


class AttendanceRepository(Protocol):
    def exists_valid_scan(
        self,
        *,
        user_id: int,
        meal_type: str,
        start: datetime,
        end: datetime,
        exclude_id: Optional[int] = None,
    ) -> bool:
        """True if a valid scan for this user/meal has ``start <= scan_time < end``."""

        raise NotImplementedError

    def create(self, attendance: NewAttendance) -> int:
        """Insert one scan attempt.

        Must raise DuplicateAttendanceError when a valid row already exists for
        the same (user_id, scan_date, meal_type).
        """

        raise NotImplementedError

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_recent_for_user(self, user_id: int, limit: int) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def get_valid_for_user_and_date(self, user_id: int, scan_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError


class SubscriptionLookup(Protocol):
    """Read access to the billing side: which subscription a scan belongs to.

    Called from a worker thread. Storage faults must surface as
    InfrastructureError subclasses (e.g. StorageUnavailableError).
    """

    def get_active_subscription_id(self, user_id: int, on_date: date) -> Optional[int]:
        raise NotImplementedError
