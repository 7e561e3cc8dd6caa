from __future__ import annotations

import asyncio
from datetime import date
from typing import Optional

from ..core.enums import MealType
from ..meals.window import MealWindowPolicy
from .repository import AttendanceRepository


class AttendanceUniquenessGuard:
    """Fast duplicate check ahead of the insert.

    Two concurrent scans can both pass this check; the unique index on
    (user_id, scan_date, meal_type) for valid rows decides which one wins.
    """

    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    async def has_existing_valid_scan(
        self,
        *,
        user_id: int,
        scan_date: date,
        meal_type: MealType,
        policy: MealWindowPolicy,
        exclude_id: Optional[int] = None,
    ) -> bool:
        start, end = policy.day_bounds(scan_date)
        return await asyncio.to_thread(
            self._attendance.exists_valid_scan,
            user_id=user_id,
            meal_type=meal_type.value,
            start=start,
            end=end,
            exclude_id=exclude_id,
        )
