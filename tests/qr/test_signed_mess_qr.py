import json
from datetime import date, datetime, timedelta, timezone

import pytest

from src.mess_attendance.mess_attendance.attendance.model import AttendanceCandidate
from src.mess_attendance.mess_attendance.core.constants import ERR_INVALID_QR
from src.mess_attendance.mess_attendance.qr.authenticator import QRAuthenticator
from src.mess_attendance.mess_attendance.qr.signed import (
    MessInfo,
    SignedMessQRStrategy,
    decode_mess_qr,
    issue_mess_qr,
    render_qr_png,
)

SECRET = "s3cret"
ISSUED_AT = datetime(2025, 1, 1, 2, 0, tzinfo=timezone.utc)
MESS = MessInfo(mess_id="north", name="North Mess", latitude=28.7041, longitude=77.1025, radius_meters=200)


def candidate_at(instant: datetime, qr: str) -> AttendanceCandidate:
    return AttendanceCandidate(
        user_id=7,
        meal_type="breakfast",
        scan_instant=instant,
        scan_date=date(2025, 1, 1),
        presented_qr=qr,
    )


@pytest.fixture
def payload():
    return issue_mess_qr(MESS, SECRET, now=ISSUED_AT)


def test_issued_payload_decodes_with_same_secret(payload):
    data = decode_mess_qr(payload, SECRET)

    assert data["type"] == "MESS_QR"
    assert data["mess_id"] == "north"
    assert "signature" not in data


def test_wrong_secret_or_garbage_does_not_decode(payload):
    assert decode_mess_qr(payload, "other") is None
    assert decode_mess_qr("ABC123", SECRET) is None
    assert decode_mess_qr("[1, 2]", SECRET) is None


@pytest.mark.asyncio
async def test_fresh_code_for_this_mess_is_accepted(payload):
    strategy = SignedMessQRStrategy(SECRET, mess_id="north", max_age=timedelta(hours=1))

    assert await strategy.verify(payload, candidate_at(ISSUED_AT + timedelta(minutes=10), payload)) is True


@pytest.mark.asyncio
async def test_tampered_code_is_rejected(payload):
    data = json.loads(payload)
    data["latitude"] = 12.97
    tampered = json.dumps(data)
    strategy = SignedMessQRStrategy(SECRET)

    assert await strategy.verify(tampered, candidate_at(ISSUED_AT, tampered)) is False


@pytest.mark.asyncio
async def test_code_for_another_mess_is_rejected(payload):
    strategy = SignedMessQRStrategy(SECRET, mess_id="south")

    assert await strategy.verify(payload, candidate_at(ISSUED_AT, payload)) is False


@pytest.mark.asyncio
async def test_expired_code_is_rejected(payload):
    strategy = SignedMessQRStrategy(SECRET, max_age=timedelta(hours=1))

    assert await strategy.verify(payload, candidate_at(ISSUED_AT + timedelta(hours=2), payload)) is False


def test_render_qr_png_returns_data_url(payload):
    image = render_qr_png(payload)

    assert image.startswith("data:image/png;base64,")


@pytest.mark.parametrize(
    "signature",
    ["é", "é" * 64, 12345, None, ""],
)
def test_malformed_signature_does_not_decode(payload, signature):
    data = json.loads(payload)
    data["signature"] = signature

    assert decode_mess_qr(json.dumps(data), SECRET) is None


@pytest.mark.asyncio
async def test_non_ascii_signature_is_an_invalid_qr_not_a_crash():
    forged = '{"type":"MESS_QR","mess_id":"north","signature":"é"}'
    auth = QRAuthenticator(SignedMessQRStrategy(SECRET))

    check = await auth.authenticate(forged, candidate_at(ISSUED_AT, forged))

    assert check.valid is False
    assert check.error == ERR_INVALID_QR
