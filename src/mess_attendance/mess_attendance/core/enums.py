from __future__ import annotations

from enum import Enum
from typing import Optional


class MealType(str, Enum):
    """Meals served by the mess; values are what we store in the database."""

    BREAKFAST = "breakfast"
    LUNCH = "lunch"
    DINNER = "dinner"

    @classmethod
    def parse(cls, value: object) -> Optional["MealType"]:
        if isinstance(value, MealType):
            return value
        try:
            return cls(str(value))
        except ValueError:
            return None


class ScanMethod(str, Enum):
    QR = "qr"


class Role(str, Enum):
    ADMIN = "admin"
