from __future__ import annotations

import asyncio
import hmac
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from ..attendance.model import AttendanceCandidate
from ..core.constants import DEFAULT_QR_VERIFY_TIMEOUT_SECONDS, ERR_INVALID_QR
from ..core.exceptions import QRVerificationUnavailable

logger = logging.getLogger(__name__)


class QRVerificationStrategy(Protocol):
    """Decides whether a presented QR payload is genuine for one scan attempt."""

    async def verify(self, payload: str, candidate: AttendanceCandidate) -> bool:
        raise NotImplementedError


@dataclass(frozen=True)
class ExpectedCodeStrategy:
    """Static code printed at the counter: exact, case-sensitive match."""

    expected: str

    async def verify(self, payload: str, candidate: AttendanceCandidate) -> bool:
        return hmac.compare_digest(payload.encode("utf-8"), self.expected.encode("utf-8"))


@dataclass(frozen=True)
class QRCheck:
    valid: bool
    error: Optional[str] = None


class QRAuthenticator:
    """Runs the configured QR strategy with a time limit.

    Without a strategy every payload is accepted unless ``require_strategy``
    is set. A production mess should always configure one; the permissive
    path is kept for kiosks that have no way to verify codes.
    """

    def __init__(
        self,
        strategy: Optional[QRVerificationStrategy] = None,
        *,
        timeout_seconds: float = DEFAULT_QR_VERIFY_TIMEOUT_SECONDS,
        require_strategy: bool = False,
    ):
        self._strategy = strategy
        self._timeout = float(timeout_seconds)
        self._require_strategy = bool(require_strategy)

    @property
    def configured(self) -> bool:
        return self._strategy is not None

    async def authenticate(self, payload: str, candidate: AttendanceCandidate) -> QRCheck:
        if self._strategy is None:
            if self._require_strategy:
                return QRCheck(valid=False, error=ERR_INVALID_QR)
            logger.warning("No QR strategy configured; accepting scan by user %s unchecked", candidate.user_id)
            return QRCheck(valid=True)

        try:
            ok = await asyncio.wait_for(self._strategy.verify(payload, candidate), timeout=self._timeout)
        except asyncio.TimeoutError:
            logger.warning("QR verification timed out after %.1fs for user %s", self._timeout, candidate.user_id)
            return QRCheck(valid=False, error=ERR_INVALID_QR)
        except QRVerificationUnavailable:
            raise
        except (ConnectionError, OSError) as e:
            logger.error("QR verification backend failed for user %s: %s", candidate.user_id, e)
            raise QRVerificationUnavailable(str(e)) from e

        if not ok:
            return QRCheck(valid=False, error=ERR_INVALID_QR)
        return QRCheck(valid=True)
