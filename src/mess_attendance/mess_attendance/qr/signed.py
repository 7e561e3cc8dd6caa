"""Signed mess QR codes.

The code displayed at the mess counter is a JSON document carrying the mess
identity and location plus an HMAC-SHA256 signature over every other field.
Scanners send the raw JSON text back as ``qr_code``.
"""
from __future__ import annotations

import base64
import hashlib
import hmac
import io
import json
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional

import qrcode

from ..attendance.model import AttendanceCandidate
from ..common.datetime_utils import ensure_aware, parse_iso_datetime
from ..core.constants import MESS_QR_TYPE


@dataclass(frozen=True)
class MessInfo:
    mess_id: str
    name: str
    latitude: float
    longitude: float
    radius_meters: float


def _canonical(data: dict[str, Any]) -> bytes:
    return json.dumps(data, sort_keys=True, separators=(",", ":")).encode("utf-8")


def sign(data: dict[str, Any], secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), _canonical(data), hashlib.sha256).hexdigest()


def issue_mess_qr(mess: MessInfo, secret: str, *, now: datetime) -> str:
    """Build the signed JSON payload for a mess QR code."""
    data = {
        "type": MESS_QR_TYPE,
        "mess_id": mess.mess_id,
        "name": mess.name,
        "latitude": mess.latitude,
        "longitude": mess.longitude,
        "radius_meters": mess.radius_meters,
        "generated_at": ensure_aware(now).isoformat(),
    }
    data["signature"] = sign(data, secret)
    return json.dumps(data, separators=(",", ":"))


def render_qr_png(payload: str) -> str:
    """Render a payload as a base64 PNG data URL."""
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_H,
        box_size=10,
        border=4,
    )
    qr.add_data(payload)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buffered = io.BytesIO()
    img.save(buffered, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffered.getvalue()).decode()


def decode_mess_qr(payload: str, secret: str) -> Optional[dict[str, Any]]:
    """Return the verified payload fields, or None if it is not a genuine mess QR."""
    try:
        data = json.loads(payload)
    except (TypeError, ValueError):
        return None
    if not isinstance(data, dict) or data.get("type") != MESS_QR_TYPE:
        return None

    signature = data.pop("signature", None)
    if not isinstance(signature, str):
        return None
    if not hmac.compare_digest(signature.encode("utf-8"), sign(data, secret).encode("utf-8")):
        return None
    return data


@dataclass(frozen=True)
class SignedMessQRStrategy:
    """Accepts mess QR codes signed with ``secret``.

    ``mess_id`` pins codes to one mess; ``max_age`` makes printed codes
    expire so they have to be rotated.
    """

    secret: str
    mess_id: Optional[str] = None
    max_age: Optional[timedelta] = None

    async def verify(self, payload: str, candidate: AttendanceCandidate) -> bool:
        data = decode_mess_qr(payload, self.secret)
        if data is None:
            return False

        if self.mess_id is not None and str(data.get("mess_id")) != self.mess_id:
            return False

        if self.max_age is not None:
            try:
                generated_at = parse_iso_datetime(str(data["generated_at"]))
            except (KeyError, ValueError):
                return False
            age = ensure_aware(candidate.scan_instant) - generated_at
            if age > self.max_age or age < -self.max_age:
                return False

        return True
