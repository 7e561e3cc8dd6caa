from __future__ import annotations

import logging

from ..core.constants import ERR_DUPLICATE_SCAN
from ..geo.geofence import check_geolocation
from ..qr.authenticator import QRAuthenticator
from ..settings import ValidationSettings
from .model import AttendanceCandidate, ValidationVerdict
from .uniqueness import AttendanceUniquenessGuard

logger = logging.getLogger(__name__)


class AttendanceValidator:
    """Judges one scan attempt.

    Checks run in a fixed order (meal time, geolocation, QR, duplicate) and
    every failure is collected, so the user sees all reasons at once. Only
    infrastructure faults (StorageUnavailableError, QRVerificationUnavailable)
    are raised.
    """

    def __init__(self, authenticator: QRAuthenticator, guard: AttendanceUniquenessGuard):
        self._authenticator = authenticator
        self._guard = guard

    async def perform_full_validation(
        self,
        candidate: AttendanceCandidate,
        settings: ValidationSettings,
    ) -> ValidationVerdict:
        errors: list[str] = []

        window = settings.meal_policy.is_within_window(candidate.meal_type, candidate.scan_instant)
        if not window.valid:
            errors.append(window.error)

        geo = check_geolocation(candidate.presented_geo, settings.geofence)
        if not geo.valid:
            errors.append(geo.error)

        qr = await self._authenticator.authenticate(candidate.presented_qr, candidate)
        if not qr.valid:
            errors.append(qr.error)

        meal_type = candidate.parsed_meal_type
        # an unknown meal type has nothing to look up; the meal-time reason covers it
        if meal_type is not None:
            duplicate = await self._guard.has_existing_valid_scan(
                user_id=candidate.user_id,
                scan_date=candidate.scan_date,
                meal_type=meal_type,
                policy=settings.meal_policy,
                exclude_id=candidate.attendance_id,
            )
            if duplicate:
                errors.append(ERR_DUPLICATE_SCAN)

        verdict = ValidationVerdict(errors=tuple(errors), distance_meters=geo.distance_meters)
        logger.debug(
            "Validated scan user=%s meal=%s date=%s valid=%s errors=%s",
            candidate.user_id, candidate.meal_type, candidate.scan_date, verdict.is_valid, list(verdict.errors),
        )
        return verdict
