from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import ensure_aware, now_utc
from ..core.constants import DEFAULT_HISTORY_LIMIT, ERR_DUPLICATE_SCAN
from ..core.enums import MealType
from ..core.exceptions import DuplicateAttendanceError
from ..geo.distance import Coordinate
from ..settings import SettingsStore, ValidationSettings
from .model import AttendanceCandidate, AttendanceRecord, NewAttendance, ValidationVerdict
from .repository import AttendanceRepository, SubscriptionLookup
from .validator import AttendanceValidator

logger = logging.getLogger(__name__)

MEAL_TYPE_MAX_LENGTH = 16


@dataclass(frozen=True)
class ScanOutcome:
    verdict: ValidationVerdict
    record: Optional[AttendanceRecord]


class AttendanceService:
    """Use case: confirm a meal scan and keep an audit row for every attempt."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        validator: AttendanceValidator,
        settings: SettingsStore,
        subscriptions: Optional[SubscriptionLookup] = None,
        *,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._attendance = attendance
        self._validator = validator
        self._settings = settings
        self._subscriptions = subscriptions
        self._clock = clock

    def now(self) -> datetime:
        return self._clock()

    def current_meal_type(self) -> Optional[MealType]:
        return self._settings.snapshot().meal_policy.current_meal_type(self._clock())

    def build_candidate(
        self,
        *,
        user_id: int,
        qr_code: str,
        settings: ValidationSettings,
        meal_type: Optional[str] = None,
        scan_time: Optional[datetime] = None,
        geo_location: Optional[Coordinate] = None,
        subscription_id: Optional[int] = None,
        device_id: Optional[str] = None,
        attendance_id: Optional[int] = None,
    ) -> AttendanceCandidate:
        policy = settings.meal_policy
        instant = ensure_aware(scan_time) if scan_time is not None else self._clock()

        if meal_type is None:
            current = policy.current_meal_type(instant)
            meal_type = current.value if current else None

        return AttendanceCandidate(
            user_id=user_id,
            subscription_id=subscription_id,
            meal_type=meal_type,
            scan_instant=instant,
            scan_date=policy.scan_date_for(instant),
            presented_geo=geo_location,
            presented_qr=qr_code,
            attendance_id=attendance_id,
            device_id=device_id,
        )

    async def record_scan(
        self,
        *,
        user_id: int,
        qr_code: str,
        meal_type: Optional[str] = None,
        scan_time: Optional[datetime] = None,
        geo_location: Optional[Coordinate] = None,
        subscription_id: Optional[int] = None,
        device_id: Optional[str] = None,
    ) -> ScanOutcome:
        """Validate a scan and persist it with its verdict.

        Infrastructure errors propagate and nothing is written, since the scan
        could not be judged.
        """
        settings = self._settings.snapshot()
        candidate = self.build_candidate(
            user_id=user_id,
            qr_code=qr_code,
            settings=settings,
            meal_type=meal_type,
            scan_time=scan_time,
            geo_location=geo_location,
            subscription_id=subscription_id,
            device_id=device_id,
        )
        if candidate.subscription_id is None and self._subscriptions is not None:
            subscription_id = await asyncio.to_thread(
                self._subscriptions.get_active_subscription_id, user_id, candidate.scan_date
            )
            candidate = replace(candidate, subscription_id=subscription_id)

        verdict = await self._validator.perform_full_validation(candidate, settings)

        try:
            attendance_id = await asyncio.to_thread(self._attendance.create, self._to_new(candidate, verdict))
        except DuplicateAttendanceError:
            # lost the race against a concurrent scan for the same meal
            logger.warning(
                "Concurrent duplicate scan user=%s meal=%s date=%s",
                candidate.user_id, candidate.meal_type, candidate.scan_date,
            )
            verdict = replace(verdict, errors=verdict.errors + (ERR_DUPLICATE_SCAN,))
            attendance_id = await asyncio.to_thread(self._attendance.create, self._to_new(candidate, verdict))

        if verdict.is_valid:
            logger.info("Attendance marked user=%s meal=%s date=%s", user_id, candidate.meal_type, candidate.scan_date)
        else:
            logger.info(
                "Scan rejected user=%s meal=%s date=%s reasons=%s",
                user_id, candidate.meal_type, candidate.scan_date, list(verdict.errors),
            )

        record = await asyncio.to_thread(self._attendance.get_by_id, attendance_id)
        return ScanOutcome(verdict=verdict, record=record)

    def list_history(self, user_id: int, *, limit: int = DEFAULT_HISTORY_LIMIT) -> Sequence[AttendanceRecord]:
        return self._attendance.get_recent_for_user(user_id, int(limit))

    def today_summary(self, user_id: int) -> dict[str, bool]:
        """Which meals the user already has a valid scan for, on the mess's today."""
        policy = self._settings.snapshot().meal_policy
        today = policy.scan_date_for(self._clock())
        attended = {r.meal_type for r in self._attendance.get_valid_for_user_and_date(user_id, today)}
        return {m.value: m.value in attended for m in MealType}

    @staticmethod
    def _to_new(candidate: AttendanceCandidate, verdict: ValidationVerdict) -> NewAttendance:
        geo = candidate.presented_geo
        return NewAttendance(
            user_id=candidate.user_id,
            subscription_id=candidate.subscription_id,
            meal_type=str(candidate.meal_type or "")[:MEAL_TYPE_MAX_LENGTH],
            scan_date=candidate.scan_date,
            scan_time=candidate.scan_instant,
            qr_code=candidate.presented_qr,
            latitude=geo.latitude if geo else None,
            longitude=geo.longitude if geo else None,
            distance_from_mess=verdict.distance_meters,
            device_id=candidate.device_id,
            is_valid=verdict.is_valid,
            validation_errors=verdict.errors,
        )
