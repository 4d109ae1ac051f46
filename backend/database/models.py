"""
Data models for the casino backend.
"""
from dataclasses import dataclass, field
from typing import Optional
from datetime import datetime, timezone
from enum import Enum


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BetStatus(Enum):
    """Lifecycle of a bet. PENDING -> SETTLED, never back."""
    PENDING = "PENDING"
    SETTLED = "SETTLED"


class BetOutcome(Enum):
    """Result of a settled bet."""
    WIN = "WIN"
    LOSS = "LOSS"


@dataclass
class User:
    """Player account, keyed by wallet address."""
    user_id: int  # Auto-incrementing ID (0 = not yet saved)
    wallet_address: str

    # Session token (issued externally, checked by the API)
    session_token: Optional[str] = None
    session_expires: Optional[datetime] = None

    created_at: datetime = field(default_factory=utc_now)


@dataclass
class Bet:
    """A wager bound to one nonce and one client seed."""
    bet_id: str
    user_id: int
    game_id: str
    bet_amount: float
    nonce: str
    client_seed: str

    status: BetStatus = BetStatus.PENDING

    # Settlement (all None while PENDING)
    outcome: Optional[BetOutcome] = None
    win_amount: Optional[float] = None
    settled_at: Optional[datetime] = None

    created_at: datetime = field(default_factory=utc_now)

    @property
    def is_settled(self) -> bool:
        return self.status == BetStatus.SETTLED
