"""
Verification ledger: pending one-time codes keyed by handle.
Entries live in memory only; a restart invalidates every pending code.
Expiry is checked lazily on verify, with an optional sweep for memory hygiene.
"""
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from regbridge.services.errors import Expired, Mismatch, NotFound
from regbridge.services.handles import normalize_handle

logger = logging.getLogger(__name__)


CODE_TTL_MINUTES = 10
CODE_MIN = 100000
CODE_MAX = 999999


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def generate_code() -> str:
    """Uniform over 100000–999999 inclusive."""
    return str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))


@dataclass
class VerificationEntry:
    handle: str
    code: str
    expires_at: datetime


class VerificationLedger:
    def __init__(
        self,
        ttl: timedelta = timedelta(minutes=CODE_TTL_MINUTES),
        clock: Callable[[], datetime] = utcnow,
    ):
        self.ttl = ttl
        self.clock = clock
        self._entries: dict[str, VerificationEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, handle: str) -> VerificationEntry | None:
        return self._entries.get(normalize_handle(handle))

    def issue(self, handle: str) -> str:
        """Create a fresh code for the handle, replacing any pending one."""
        key = normalize_handle(handle)
        code = generate_code()
        self._entries[key] = VerificationEntry(
            handle=key,
            code=code,
            expires_at=self.clock() + self.ttl,
        )
        return code

    def verify(self, handle: str, submitted_code: str) -> None:
        """
        Consume the pending code for the handle.
        Raises NotFound, Expired (entry dropped) or Mismatch (entry kept, the
        user may retry until expiry). Returns None on success.
        """
        key = normalize_handle(handle)
        entry = self._entries.get(key)
        if entry is None:
            raise NotFound("No verification code found for this user")

        if self.clock() > entry.expires_at:
            del self._entries[key]
            raise Expired("Verification code has expired")

        if entry.code != submitted_code:
            raise Mismatch("Invalid verification code")

        del self._entries[key]

    def sweep(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        now = self.clock()
        expired = [key for key, entry in self._entries.items() if now > entry.expires_at]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.info("Swept %d expired verification codes", len(expired))
        return len(expired)
