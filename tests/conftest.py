from __future__ import annotations

import threading
from datetime import date, datetime, timezone
from typing import Optional

import pytest

from src.mess_attendance.mess_attendance.attendance.model import AttendanceRecord, NewAttendance
from src.mess_attendance.mess_attendance.core.exceptions import DuplicateAttendanceError

# 08:30 in Kolkata, inside the default breakfast window
BREAKFAST_NOW = datetime(2025, 1, 1, 3, 0, tzinfo=timezone.utc)


class InMemoryAttendance:
    """Attendance store enforcing one valid row per (user, scan_date, meal)."""

    def __init__(self):
        self._rows: dict[int, AttendanceRecord] = {}
        self._id = 0
        self._lock = threading.Lock()

    def exists_valid_scan(self, *, user_id, meal_type, start, end, exclude_id=None) -> bool:
        return any(
            r.is_valid
            and r.user_id == user_id
            and r.meal_type == meal_type
            and start <= r.scan_time < end
            and r.attendance_id != exclude_id
            for r in list(self._rows.values())
        )

    def create(self, attendance: NewAttendance) -> int:
        with self._lock:
            if attendance.is_valid and any(
                r.is_valid
                and r.user_id == attendance.user_id
                and r.scan_date == attendance.scan_date
                and r.meal_type == attendance.meal_type
                for r in self._rows.values()
            ):
                raise DuplicateAttendanceError("duplicate valid scan")

            self._id += 1
            self._rows[self._id] = AttendanceRecord(
                attendance_id=self._id,
                user_id=attendance.user_id,
                subscription_id=attendance.subscription_id,
                meal_type=attendance.meal_type,
                scan_date=attendance.scan_date,
                scan_time=attendance.scan_time,
                qr_code=attendance.qr_code,
                latitude=attendance.latitude,
                longitude=attendance.longitude,
                distance_from_mess=attendance.distance_from_mess,
                device_id=attendance.device_id,
                scan_method=attendance.scan_method,
                is_valid=attendance.is_valid,
                validation_errors=tuple(attendance.validation_errors),
            )
            return self._id

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        return self._rows.get(attendance_id)

    def get_recent_for_user(self, user_id: int, limit: int):
        items = [r for r in self._rows.values() if r.user_id == user_id]
        items.sort(key=lambda r: r.scan_time, reverse=True)
        return items[:limit]

    def get_valid_for_user_and_date(self, user_id: int, scan_date: date):
        return [r for r in self._rows.values() if r.user_id == user_id and r.scan_date == scan_date and r.is_valid]

    def all(self) -> list[AttendanceRecord]:
        return list(self._rows.values())


@pytest.fixture
def attendance_repo():
    return InMemoryAttendance()


@pytest.fixture
def fixed_clock():
    return lambda: BREAKFAST_NOW
