from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..core.enums import ScanMethod
from ..core.exceptions import DuplicateAttendanceError, StorageUnavailableError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchall,
    fetchone,
    from_db_datetime,
    is_duplicate_key,
    load_json_list,
    to_db_datetime,
)
from .model import AttendanceRecord, NewAttendance
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, user_id, subscription_id, meal_type, scan_date, scan_time, qr_code,
    latitude, longitude, distance_from_mess, device_id, scan_method, is_valid,
    validation_errors, created_at
"""


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        user_id=int(r["user_id"]),
        subscription_id=int(r["subscription_id"]) if r.get("subscription_id") is not None else None,
        meal_type=r["meal_type"],
        scan_date=r["scan_date"],
        scan_time=from_db_datetime(r["scan_time"]),
        qr_code=r["qr_code"],
        latitude=r.get("latitude"),
        longitude=r.get("longitude"),
        distance_from_mess=r.get("distance_from_mess"),
        device_id=r.get("device_id"),
        scan_method=ScanMethod(r.get("scan_method") or ScanMethod.QR.value),
        is_valid=bool(r["is_valid"]),
        validation_errors=load_json_list(r.get("validation_errors")),
        created_at=from_db_datetime(r.get("created_at")),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def exists_valid_scan(
        self,
        *,
        user_id: int,
        meal_type: str,
        start: datetime,
        end: datetime,
        exclude_id: Optional[int] = None,
    ) -> bool:
        sql = """
            SELECT 1
            FROM attendance_logs
            WHERE user_id=%s AND meal_type=%s AND is_valid=1
              AND scan_time >= %s AND scan_time < %s
        """
        params: list[object] = [user_id, meal_type, to_db_datetime(start), to_db_datetime(end)]
        if exclude_id is not None:
            sql += " AND attendance_id <> %s"
            params.append(int(exclude_id))
        sql += " LIMIT 1"

        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(sql, tuple(params))
                return fetchone(cur) is not None
        except mysql.connector.Error as e:
            raise StorageUnavailableError(f"Duplicate lookup failed: {e}") from e

    def create(self, attendance: NewAttendance) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO attendance_logs(
                        user_id, subscription_id, meal_type, scan_date, scan_time, qr_code,
                        latitude, longitude, distance_from_mess, device_id, scan_method,
                        is_valid, validation_errors
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (
                        attendance.user_id,
                        attendance.subscription_id,
                        attendance.meal_type,
                        attendance.scan_date,
                        to_db_datetime(attendance.scan_time),
                        attendance.qr_code,
                        attendance.latitude,
                        attendance.longitude,
                        attendance.distance_from_mess,
                        attendance.device_id,
                        attendance.scan_method.value,
                        1 if attendance.is_valid else 0,
                        json.dumps(list(attendance.validation_errors)),
                    ),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise DuplicateAttendanceError(
                    f"Valid attendance already exists for user {attendance.user_id} "
                    f"{attendance.meal_type} on {attendance.scan_date}"
                ) from e
            raise StorageUnavailableError(f"Insert failed: {e}") from e
        except mysql.connector.Error as e:
            raise StorageUnavailableError(f"Insert failed: {e}") from e

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"SELECT {_COLUMNS} FROM attendance_logs WHERE attendance_id=%s",
                    (int(attendance_id),),
                )
                r = fetchone(cur)
                return _to_record(r) if r else None
        except mysql.connector.Error as e:
            raise StorageUnavailableError(f"Read failed: {e}") from e

    def get_recent_for_user(self, user_id: int, limit: int) -> Sequence[AttendanceRecord]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM attendance_logs
                    WHERE user_id=%s
                    ORDER BY scan_time DESC
                    LIMIT %s
                    """,
                    (user_id, int(limit)),
                )
                return [_to_record(r) for r in fetchall(cur)]
        except mysql.connector.Error as e:
            raise StorageUnavailableError(f"Read failed: {e}") from e

    def get_valid_for_user_and_date(self, user_id: int, scan_date: date) -> Sequence[AttendanceRecord]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"""
                    SELECT {_COLUMNS}
                    FROM attendance_logs
                    WHERE user_id=%s AND scan_date=%s AND is_valid=1
                    ORDER BY scan_time
                    """,
                    (user_id, scan_date),
                )
                return [_to_record(r) for r in fetchall(cur)]
        except mysql.connector.Error as e:
            raise StorageUnavailableError(f"Read failed: {e}") from e
