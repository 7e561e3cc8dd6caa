from __future__ import annotations

import asyncio
import logging
from functools import wraps
from typing import Any, Optional

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import parse_iso_datetime
from ..common.validators import require_number_in_range, require_raw_string
from ..core.constants import DEFAULT_HISTORY_LIMIT, ERR_TRY_AGAIN
from ..core.enums import Role
from ..core.exceptions import InfrastructureError, ValidationError
from ..container import Container
from ..geo.distance import Coordinate
from ..qr.signed import issue_mess_qr, render_qr_png

logger = logging.getLogger(__name__)

MAX_HISTORY_LIMIT = 200
MAX_QR_CODE_LENGTH = 1024


def parse_scan_body(data: Any) -> dict:
    """Turn the scan request JSON into keyword arguments for record_scan."""
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")

    qr_code = require_raw_string(data.get("qr_code"), "qr_code")
    if len(qr_code) > MAX_QR_CODE_LENGTH:
        raise ValidationError(f"qr_code must be at most {MAX_QR_CODE_LENGTH} characters")

    meal_type = data.get("meal_type")
    if meal_type is not None:
        meal_type = str(meal_type).strip()

    scan_time = None
    if data.get("scan_time"):
        try:
            scan_time = parse_iso_datetime(str(data["scan_time"]))
        except ValueError:
            raise ValidationError("scan_time must be an ISO-8601 timestamp") from None

    geo_location: Optional[Coordinate] = None
    geo = data.get("geo_location")
    if geo is not None:
        if not isinstance(geo, dict):
            raise ValidationError("geo_location must be an object with latitude and longitude")
        geo_location = Coordinate(
            latitude=require_number_in_range(geo.get("latitude"), "latitude", -90, 90),
            longitude=require_number_in_range(geo.get("longitude"), "longitude", -180, 180),
        )

    device_id = data.get("device_id")
    return {
        "qr_code": qr_code,
        "meal_type": meal_type,
        "scan_time": scan_time,
        "geo_location": geo_location,
        "device_id": str(device_id)[:128] if device_id else None,
    }


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    def login_required(view):
        @wraps(view)
        async def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Please log in to continue"}), 401
            return await view(*args, **kwargs)

        return wrapper

    def admin_required(view):
        @wraps(view)
        async def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Please log in to continue"}), 401
            if session.get("role") != Role.ADMIN.value:
                return jsonify({"success": False, "message": "Admin access required"}), 403
            return await view(*args, **kwargs)

        return wrapper

    @app.route("/api/attendance/scan", methods=["POST"], endpoint="api_attendance_scan")
    @login_required
    async def api_attendance_scan():
        user_id = int(session["user_id"])
        try:
            kwargs = parse_scan_body(request.get_json(silent=True))
        except ValidationError as e:
            return jsonify({"success": False, "message": str(e)}), 400

        try:
            outcome = await service.record_scan(user_id=user_id, **kwargs)
        except InfrastructureError:
            logger.exception("Attendance scan for user %s could not be judged", user_id)
            return jsonify({"success": False, "message": ERR_TRY_AGAIN}), 503

        verdict = outcome.verdict
        return jsonify({
            "success": verdict.is_valid,
            "is_valid": verdict.is_valid,
            "errors": list(verdict.errors),
            "distance_meters": verdict.distance_meters,
            "attendance": outcome.record.to_dict() if outcome.record else None,
        }), 200

    @app.route("/api/attendance/history", methods=["GET"], endpoint="api_attendance_history")
    @login_required
    async def api_attendance_history():
        try:
            limit = int(request.args.get("limit", DEFAULT_HISTORY_LIMIT))
        except ValueError:
            return jsonify({"success": False, "message": "limit must be an integer"}), 400
        limit = max(1, min(limit, MAX_HISTORY_LIMIT))

        try:
            rows = await asyncio.to_thread(service.list_history, int(session["user_id"]), limit=limit)
        except InfrastructureError:
            logger.exception("Attendance history unavailable")
            return jsonify({"success": False, "message": ERR_TRY_AGAIN}), 503
        return jsonify({"success": True, "data": [r.to_dict() for r in rows]}), 200

    @app.route("/api/attendance/today", methods=["GET"], endpoint="api_attendance_today")
    @login_required
    async def api_attendance_today():
        try:
            summary = await asyncio.to_thread(service.today_summary, int(session["user_id"]))
        except InfrastructureError:
            logger.exception("Today's attendance unavailable")
            return jsonify({"success": False, "message": ERR_TRY_AGAIN}), 503
        return jsonify({"success": True, "data": summary}), 200

    @app.route("/api/attendance/current-meal", methods=["GET"], endpoint="api_current_meal")
    @login_required
    async def api_current_meal():
        meal_type = service.current_meal_type()
        return jsonify({"success": True, "meal_type": meal_type.value if meal_type else None}), 200

    @app.route("/api/mess/qr", methods=["GET"], endpoint="api_mess_qr")
    @admin_required
    async def api_mess_qr():
        if not container.qr_secret:
            return jsonify({"success": False, "message": "QR signing is not configured"}), 409

        payload = issue_mess_qr(container.mess_info, container.qr_secret, now=service.now())
        image = await asyncio.to_thread(render_qr_png, payload)
        return jsonify({"success": True, "qr_data": payload, "qr_code": image}), 200
