"""
Single-use server nonces with a fixed time-to-live.

Issue, consume and the periodic sweep all go through one lock, so a nonce
is handed to at most one consumer and the sweep can never remove an entry
that a consumer has already claimed (or vice versa).
"""
import asyncio
import logging
import secrets
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

from utils.formatting import truncate_nonce

logger = logging.getLogger(__name__)

NONCE_BYTES = 32  # 256 bits of entropy


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Nonce:
    """An issued nonce."""
    value: str
    created_at: datetime
    expires_at: datetime

    @property
    def expires_in(self) -> int:
        """TTL in whole seconds."""
        return int((self.expires_at - self.created_at).total_seconds())


class NonceRegistry:
    """In-memory registry of live nonces."""

    def __init__(self, ttl_seconds: int = 300, clock: Optional[Callable[[], datetime]] = None):
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self.ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock or utc_now
        self._nonces: Dict[str, Nonce] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._nonces)

    def issue(self) -> Nonce:
        """Generate and register a fresh nonce."""
        created_at = self._clock()
        nonce = Nonce(
            value=secrets.token_hex(NONCE_BYTES),
            created_at=created_at,
            expires_at=created_at + self.ttl,
        )
        with self._lock:
            self._nonces[nonce.value] = nonce
        logger.debug(f"Issued nonce {truncate_nonce(nonce.value)} (expires {nonce.expires_at.isoformat()})")
        return nonce

    def validate(self, value: str) -> bool:
        """True iff the nonce is registered and not yet expired."""
        now = self._clock()
        with self._lock:
            nonce = self._nonces.get(value)
            return nonce is not None and now < nonce.expires_at

    def consume(self, value: str) -> bool:
        """Remove the nonce and report whether it was live.

        Returns True exactly once per issued nonce. An expired entry is
        removed as well but reported as False.
        """
        now = self._clock()
        with self._lock:
            nonce = self._nonces.pop(value, None)

        if nonce is None:
            return False
        if now >= nonce.expires_at:
            logger.info(f"Rejected expired nonce {truncate_nonce(value)}")
            return False
        return True

    def sweep(self) -> int:
        """Drop every expired nonce. Returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [value for value, nonce in self._nonces.items() if now >= nonce.expires_at]
            for value in expired:
                del self._nonces[value]

        if expired:
            logger.info(f"Nonce sweep removed {len(expired)} expired nonce(s)")
        return len(expired)

    async def run_sweeper(self, interval_seconds: float = 60):
        """Sweep forever every ``interval_seconds``. Cancel the task to stop."""
        logger.info(f"Nonce sweeper started (interval {interval_seconds}s)")
        try:
            while True:
                await asyncio.sleep(interval_seconds)
                self.sweep()
        except asyncio.CancelledError:
            logger.info("Nonce sweeper stopped")
            raise
