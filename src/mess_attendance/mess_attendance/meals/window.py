from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from types import MappingProxyType
from typing import Mapping, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..common.datetime_utils import ensure_aware, parse_hhmm
from ..core.constants import DEFAULT_MEAL_WINDOWS, DEFAULT_TIMEZONE, ERR_INVALID_MEAL_TYPE
from ..core.enums import MealType
from ..core.exceptions import ConfigurationError


@dataclass(frozen=True)
class MealWindow:
    """Time-of-day interval (both ends inclusive) during which a meal is served."""

    start: time
    end: time

    def contains(self, moment: time) -> bool:
        return self.start <= moment <= self.end

    def describe(self) -> str:
        return f"{self.start:%H:%M} to {self.end:%H:%M}"


@dataclass(frozen=True)
class WindowCheck:
    valid: bool
    error: Optional[str] = None


def _default_windows() -> dict[MealType, MealWindow]:
    return {
        MealType(name): MealWindow(parse_hhmm(start), parse_hhmm(end))
        for name, (start, end) in DEFAULT_MEAL_WINDOWS.items()
    }


class MealWindowPolicy:
    """Meal windows evaluated in the mess's own timezone.

    Windows that cross midnight (start later than end) are refused when the
    policy is built; a late-night meal has to be configured so it ends by
    23:59 of the same local day.
    """

    def __init__(
        self,
        windows: Optional[Mapping[MealType, MealWindow]] = None,
        *,
        timezone_name: str = DEFAULT_TIMEZONE,
    ):
        merged = _default_windows()
        merged.update(windows or {})

        for meal_type, window in merged.items():
            if window.start > window.end:
                raise ConfigurationError(
                    f"{meal_type.value} window {window.describe()} crosses midnight; "
                    "wrap-around windows are not supported"
                )

        try:
            self._tz = ZoneInfo(timezone_name)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigurationError(f"Unknown timezone: {timezone_name!r}") from e

        self._timezone_name = timezone_name
        self._windows = MappingProxyType(merged)

    @classmethod
    def from_strings(
        cls,
        windows: Mapping[str, Tuple[str, str]],
        *,
        timezone_name: str = DEFAULT_TIMEZONE,
    ) -> "MealWindowPolicy":
        parsed: dict[MealType, MealWindow] = {}
        for name, (start, end) in windows.items():
            meal_type = MealType.parse(name)
            if meal_type is None:
                raise ConfigurationError(f"Unknown meal type in settings: {name!r}")
            try:
                parsed[meal_type] = MealWindow(parse_hhmm(start), parse_hhmm(end))
            except (AttributeError, ValueError) as e:
                raise ConfigurationError(f"{name} window must be HH:MM, got {start!r}-{end!r}") from e
        return cls(parsed, timezone_name=timezone_name)

    @property
    def timezone_name(self) -> str:
        return self._timezone_name

    @property
    def windows(self) -> Mapping[MealType, MealWindow]:
        return self._windows

    def to_local(self, instant: datetime) -> datetime:
        return ensure_aware(instant).astimezone(self._tz)

    def is_within_window(self, meal_type: object, instant: datetime) -> WindowCheck:
        parsed = MealType.parse(meal_type)
        if parsed is None:
            return WindowCheck(valid=False, error=ERR_INVALID_MEAL_TYPE)

        window = self._windows[parsed]
        local_time = self.to_local(instant).time()
        if window.contains(local_time):
            return WindowCheck(valid=True)
        return WindowCheck(
            valid=False,
            error=f"{parsed.value} is only available from {window.describe()}",
        )

    def scan_date_for(self, instant: datetime) -> date:
        """Calendar day the scan counts toward, in the mess timezone."""
        return self.to_local(instant).date()

    def day_bounds(self, scan_date: date) -> Tuple[datetime, datetime]:
        """Local midnight of ``scan_date`` and of the following day (half-open)."""
        start = datetime.combine(scan_date, time.min, tzinfo=self._tz)
        end = datetime.combine(scan_date + timedelta(days=1), time.min, tzinfo=self._tz)
        return start, end

    def current_meal_type(self, instant: datetime) -> Optional[MealType]:
        local_time = self.to_local(instant).time()
        for meal_type in MealType:
            if self._windows[meal_type].contains(local_time):
                return meal_type
        return None
