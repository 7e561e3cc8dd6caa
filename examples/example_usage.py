"""Example: record a scan through the service layer, without Flask.

Controllers stay thin; validation and persistence live in AttendanceService.
"""

import asyncio
import importlib

from config import get_settings_module

from src.mess_attendance.mess_attendance.container import build_container
from src.mess_attendance.mess_attendance.geo.distance import Coordinate
from src.mess_attendance.mess_attendance.qr.signed import issue_mess_qr


async def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(settings=settings)
    service = container.attendance_service

    qr_code = issue_mess_qr(container.mess_info, container.qr_secret, now=service.now()) if container.qr_secret else ""
    outcome = await service.record_scan(
        user_id=1,
        qr_code=qr_code,
        geo_location=Coordinate(latitude=container.mess_info.latitude, longitude=container.mess_info.longitude),
    )
    print(outcome.verdict.to_dict())
    print(service.today_summary(1))


if __name__ == "__main__":
    asyncio.run(main())
