from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import MealType, ScanMethod
from ..geo.distance import Coordinate


@dataclass(frozen=True)
class AttendanceCandidate:
    """One scan attempt, built from request data and not yet persisted.

    ``meal_type`` is kept as received so that an unknown value is reported by
    validation instead of failing while the candidate is built.
    """

    user_id: int
    meal_type: Optional[str]
    scan_instant: datetime
    scan_date: date
    presented_qr: str
    presented_geo: Optional[Coordinate] = None
    subscription_id: Optional[int] = None
    attendance_id: Optional[int] = None
    device_id: Optional[str] = None

    @property
    def parsed_meal_type(self) -> Optional[MealType]:
        return MealType.parse(self.meal_type)


@dataclass(frozen=True)
class ValidationVerdict:
    errors: tuple[str, ...] = ()
    distance_meters: Optional[float] = None

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict:
        return {
            "is_valid": self.is_valid,
            "errors": list(self.errors),
            "distance_meters": self.distance_meters,
        }


@dataclass(frozen=True)
class AttendanceRecord:
    """Persisted scan attempt: the candidate plus its verdict."""

    attendance_id: int
    user_id: int
    meal_type: str
    scan_date: date
    scan_time: datetime
    qr_code: str
    is_valid: bool
    validation_errors: tuple[str, ...] = ()
    subscription_id: Optional[int] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    distance_from_mess: Optional[float] = None
    device_id: Optional[str] = None
    scan_method: ScanMethod = ScanMethod.QR
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "attendance_id": self.attendance_id,
            "user_id": self.user_id,
            "subscription_id": self.subscription_id,
            "meal_type": self.meal_type,
            "scan_date": self.scan_date.strftime("%Y-%m-%d"),
            "scan_time": self.scan_time.isoformat(),
            "geo_location": (
                {"latitude": self.latitude, "longitude": self.longitude}
                if self.latitude is not None and self.longitude is not None
                else None
            ),
            "distance_from_mess": self.distance_from_mess,
            "device_id": self.device_id,
            "scan_method": self.scan_method.value,
            "is_valid": self.is_valid,
            "validation_errors": list(self.validation_errors),
        }


@dataclass(frozen=True)
class NewAttendance:
    """Insert payload handed to the repository."""

    user_id: int
    meal_type: str
    scan_date: date
    scan_time: datetime
    qr_code: str
    is_valid: bool
    validation_errors: tuple[str, ...] = field(default_factory=tuple)
    subscription_id: Optional[int] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    distance_from_mess: Optional[float] = None
    device_id: Optional[str] = None
    scan_method: ScanMethod = ScanMethod.QR
