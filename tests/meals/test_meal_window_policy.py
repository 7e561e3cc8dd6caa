from datetime import date, datetime, timedelta, timezone

import pytest

from src.mess_attendance.mess_attendance.core.constants import ERR_INVALID_MEAL_TYPE
from src.mess_attendance.mess_attendance.core.enums import MealType
from src.mess_attendance.mess_attendance.core.exceptions import ConfigurationError
from src.mess_attendance.mess_attendance.meals.window import MealWindowPolicy

IST = timezone(timedelta(hours=5, minutes=30))


def ist(hour: int, minute: int = 0, second: int = 0) -> datetime:
    return datetime(2025, 1, 1, hour, minute, second, tzinfo=IST)


@pytest.fixture
def policy():
    return MealWindowPolicy(timezone_name="Asia/Kolkata")


def test_window_bounds_are_inclusive(policy):
    assert policy.is_within_window("breakfast", ist(7, 0)).valid is True
    assert policy.is_within_window("breakfast", ist(10, 0)).valid is True


def test_just_outside_window_is_rejected_with_bounds(policy):
    before = policy.is_within_window("breakfast", ist(6, 59, 59))
    after = policy.is_within_window("breakfast", ist(10, 0, 1))

    assert before.valid is False
    assert after.valid is False
    assert after.error == "breakfast is only available from 07:00 to 10:00"


def test_window_uses_mess_timezone_not_utc(policy):
    # 03:00 UTC is 08:30 in Kolkata
    instant = datetime(2025, 1, 1, 3, 0, tzinfo=timezone.utc)

    assert policy.is_within_window(MealType.BREAKFAST, instant).valid is True
    assert policy.is_within_window(MealType.LUNCH, instant).valid is False


def test_unknown_meal_type_is_rejected(policy):
    check = policy.is_within_window("brunch", ist(8, 0))

    assert check.valid is False
    assert check.error == ERR_INVALID_MEAL_TYPE


def test_scan_date_follows_local_day_across_utc_midnight(policy):
    instant = datetime(2025, 1, 1, 20, 0, tzinfo=timezone.utc)

    assert policy.scan_date_for(instant) == date(2025, 1, 2)


def test_day_bounds_are_local_midnights(policy):
    start, end = policy.day_bounds(date(2025, 1, 2))

    assert start == datetime(2025, 1, 1, 18, 30, tzinfo=timezone.utc)
    assert end - start == timedelta(days=1)


def test_current_meal_type(policy):
    assert policy.current_meal_type(ist(13, 0)) == MealType.LUNCH
    assert policy.current_meal_type(ist(21, 59)) == MealType.DINNER
    assert policy.current_meal_type(ist(11, 0)) is None


def test_custom_windows_override_defaults():
    policy = MealWindowPolicy.from_strings({"breakfast": ("06:30", "09:00")}, timezone_name="UTC")

    assert policy.is_within_window("breakfast", datetime(2025, 1, 1, 6, 45, tzinfo=timezone.utc)).valid is True
    assert policy.windows[MealType.LUNCH].describe() == "12:00 to 15:00"


def test_midnight_crossing_window_is_refused():
    with pytest.raises(ConfigurationError):
        MealWindowPolicy.from_strings({"dinner": ("22:00", "01:00")})


def test_malformed_window_is_refused():
    with pytest.raises(ConfigurationError):
        MealWindowPolicy.from_strings({"lunch": ("noon", "15:00")})


def test_unknown_timezone_is_refused():
    with pytest.raises(ConfigurationError):
        MealWindowPolicy(timezone_name="Mars/Olympus_Mons")


def test_instants_either_side_of_utc_midnight_share_local_scan_date(policy):
    before = datetime(2025, 1, 1, 23, 59, tzinfo=timezone.utc)
    after = datetime(2025, 1, 2, 0, 1, tzinfo=timezone.utc)

    assert policy.scan_date_for(before) == policy.scan_date_for(after) == date(2025, 1, 2)
