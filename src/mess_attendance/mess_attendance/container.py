from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository, SubscriptionLookup
from .attendance.service import AttendanceService
from .attendance.uniqueness import AttendanceUniquenessGuard
from .attendance.validator import AttendanceValidator
from .database.connection import DatabaseConnection, DBConfig
from .qr.signed import MessInfo
from .settings import SettingsStore, build_qr_authenticator, load_mess_info, load_validation_settings


@dataclass(frozen=True)
class Container:
    attendance_repo: AttendanceRepository
    settings_store: SettingsStore
    attendance_service: AttendanceService
    mess_info: MessInfo
    qr_secret: Optional[str] = None
    conn: Optional[DatabaseConnection] = None


def build_container(
    *,
    settings: Any,
    attendance_repo: Optional[AttendanceRepository] = None,
    subscriptions: Optional[SubscriptionLookup] = None,
    **service_kwargs: Any,
) -> Container:
    """Wire repositories and services from a settings module.

    Passing ``attendance_repo`` skips MySQL entirely (used by tests and
    scripts that bring their own storage).
    """
    conn = None
    if attendance_repo is None:
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(getattr(settings, "DB_CONFIG")))
        attendance_repo = MySQLAttendanceRepository(conn)

    settings_store = SettingsStore(load_validation_settings(settings))
    validator = AttendanceValidator(
        build_qr_authenticator(settings),
        AttendanceUniquenessGuard(attendance_repo),
    )
    attendance_service = AttendanceService(
        attendance_repo,
        validator,
        settings_store,
        subscriptions,
        **service_kwargs,
    )

    return Container(
        attendance_repo=attendance_repo,
        settings_store=settings_store,
        attendance_service=attendance_service,
        mess_info=load_mess_info(settings),
        qr_secret=getattr(settings, "QR_SECRET", None) or None,
        conn=conn,
    )
