"""Mess settings as immutable value objects.

Settings modules under ``config/`` expose plain attributes read from the
environment; ``load_validation_settings`` turns them into the objects the
validator works with. ``SettingsStore`` lets an admin action swap the whole
configuration while scans are in flight.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import timedelta
from types import ModuleType
from typing import Any, Optional

from .core.constants import (
    DEFAULT_GEOFENCE_RADIUS_METERS,
    DEFAULT_MEAL_WINDOWS,
    DEFAULT_MESS_LATITUDE,
    DEFAULT_MESS_LONGITUDE,
    DEFAULT_QR_VERIFY_TIMEOUT_SECONDS,
    DEFAULT_TIMEZONE,
)
from .core.exceptions import ConfigurationError
from .geo.distance import Coordinate
from .geo.geofence import GeofenceConfig
from .meals.window import MealWindowPolicy
from .qr.authenticator import ExpectedCodeStrategy, QRAuthenticator, QRVerificationStrategy
from .qr.signed import MessInfo, SignedMessQRStrategy


@dataclass(frozen=True)
class ValidationSettings:
    meal_policy: MealWindowPolicy = field(default_factory=MealWindowPolicy)
    geofence: GeofenceConfig = field(default_factory=GeofenceConfig)


class SettingsStore:
    """Holds the current ValidationSettings; readers always get a whole snapshot."""

    def __init__(self, settings: Optional[ValidationSettings] = None):
        self._lock = threading.Lock()
        self._settings = settings or ValidationSettings()

    def snapshot(self) -> ValidationSettings:
        with self._lock:
            return self._settings

    def replace(self, settings: ValidationSettings) -> None:
        with self._lock:
            self._settings = settings


def _get(settings: Any, name: str, default: Any) -> Any:
    value = getattr(settings, name, None)
    if value is None or value == "":
        return default
    return value


def _as_float(settings: Any, name: str, default: float) -> float:
    value = _get(settings, name, default)
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from e


def _as_bool(settings: Any, name: str, default: bool) -> bool:
    value = _get(settings, name, default)
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def load_validation_settings(settings: ModuleType | Any) -> ValidationSettings:
    windows = {}
    for meal, (default_start, default_end) in DEFAULT_MEAL_WINDOWS.items():
        prefix = meal.upper()
        windows[meal] = (
            str(_get(settings, f"{prefix}_START", default_start)),
            str(_get(settings, f"{prefix}_END", default_end)),
        )

    meal_policy = MealWindowPolicy.from_strings(
        windows,
        timezone_name=str(_get(settings, "MESS_TIMEZONE", DEFAULT_TIMEZONE)),
    )

    radius = _as_float(settings, "GEOFENCE_RADIUS", DEFAULT_GEOFENCE_RADIUS_METERS)
    if radius < 0:
        raise ConfigurationError("GEOFENCE_RADIUS must not be negative")

    geofence = GeofenceConfig(
        mess_location=Coordinate(
            latitude=_as_float(settings, "MESS_LATITUDE", DEFAULT_MESS_LATITUDE),
            longitude=_as_float(settings, "MESS_LONGITUDE", DEFAULT_MESS_LONGITUDE),
        ),
        max_radius_meters=radius,
        require_location=_as_bool(settings, "REQUIRE_GEOLOCATION", False),
    )
    return ValidationSettings(meal_policy=meal_policy, geofence=geofence)


def load_mess_info(settings: ModuleType | Any) -> MessInfo:
    validation = load_validation_settings(settings)
    location = validation.geofence.mess_location
    return MessInfo(
        mess_id=str(_get(settings, "MESS_ID", "main")),
        name=str(_get(settings, "MESS_NAME", "Main Mess")),
        latitude=location.latitude,
        longitude=location.longitude,
        radius_meters=validation.geofence.max_radius_meters,
    )


def build_qr_authenticator(settings: ModuleType | Any) -> QRAuthenticator:
    """Signed mess codes when QR_SECRET is set, else a static expected code, else none."""
    strategy: Optional[QRVerificationStrategy] = None

    secret = _get(settings, "QR_SECRET", None)
    expected = _get(settings, "QR_EXPECTED_CODE", None)
    if secret:
        mess_id = _get(settings, "MESS_ID", None)
        max_age = _as_float(settings, "QR_MAX_AGE_SECONDS", 0)
        strategy = SignedMessQRStrategy(
            secret=str(secret),
            mess_id=str(mess_id) if mess_id is not None else None,
            max_age=timedelta(seconds=max_age) if max_age > 0 else None,
        )
    elif expected:
        strategy = ExpectedCodeStrategy(str(expected))

    return QRAuthenticator(
        strategy,
        timeout_seconds=_as_float(settings, "QR_VERIFY_TIMEOUT", DEFAULT_QR_VERIFY_TIMEOUT_SECONDS),
        require_strategy=_as_bool(settings, "REQUIRE_QR_STRATEGY", False),
    )
