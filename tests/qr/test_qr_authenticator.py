import asyncio
from datetime import date, datetime, timezone

import pytest

from src.mess_attendance.mess_attendance.attendance.model import AttendanceCandidate
from src.mess_attendance.mess_attendance.core.constants import ERR_INVALID_QR
from src.mess_attendance.mess_attendance.core.exceptions import QRVerificationUnavailable
from src.mess_attendance.mess_attendance.qr.authenticator import ExpectedCodeStrategy, QRAuthenticator


def make_candidate(qr: str = "ABC123") -> AttendanceCandidate:
    return AttendanceCandidate(
        user_id=1,
        meal_type="breakfast",
        scan_instant=datetime(2025, 1, 1, 3, 0, tzinfo=timezone.utc),
        scan_date=date(2025, 1, 1),
        presented_qr=qr,
    )


class SlowStrategy:
    async def verify(self, payload, candidate):
        await asyncio.sleep(1)
        return True


class BrokenStrategy:
    async def verify(self, payload, candidate):
        raise ConnectionError("verification backend unreachable")


@pytest.mark.asyncio
async def test_expected_code_matches_exactly():
    auth = QRAuthenticator(ExpectedCodeStrategy("ABC123"))

    check = await auth.authenticate("ABC123", make_candidate())

    assert check.valid is True
    assert check.error is None


@pytest.mark.asyncio
async def test_expected_code_is_case_sensitive():
    auth = QRAuthenticator(ExpectedCodeStrategy("ABC123"))

    check = await auth.authenticate("abc123", make_candidate("abc123"))

    assert check.valid is False
    assert check.error == ERR_INVALID_QR


@pytest.mark.asyncio
async def test_slow_strategy_fails_closed():
    auth = QRAuthenticator(SlowStrategy(), timeout_seconds=0.05)

    check = await auth.authenticate("ABC123", make_candidate())

    assert check.valid is False
    assert check.error == ERR_INVALID_QR


@pytest.mark.asyncio
async def test_strategy_io_error_is_raised_as_unavailable():
    auth = QRAuthenticator(BrokenStrategy())

    with pytest.raises(QRVerificationUnavailable):
        await auth.authenticate("ABC123", make_candidate())


@pytest.mark.asyncio
async def test_no_strategy_accepts_any_payload():
    auth = QRAuthenticator()

    check = await auth.authenticate("anything", make_candidate("anything"))

    assert auth.configured is False
    assert check.valid is True


@pytest.mark.asyncio
async def test_no_strategy_rejects_when_required():
    auth = QRAuthenticator(require_strategy=True)

    check = await auth.authenticate("anything", make_candidate("anything"))

    assert check.valid is False
    assert check.error == ERR_INVALID_QR
