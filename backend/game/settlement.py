"""
Bet settlement with provably fair outcomes.

A bet moves PENDING -> SETTLED exactly once. The outcome is a pure function
of (nonce, client_seed, rtp, volatility, house_edge, bet_amount), so it can
be recomputed at any time for audit.
"""
import logging
import sqlite3
from dataclasses import dataclass
from decimal import Decimal

from database import Database, Bet, BetStatus, BetOutcome
from database.models import utc_now
from utils.formatting import format_amount
from .catalog import GameParameters, get_game
from .errors import ConflictError, InternalError, NotFoundError, OwnershipError
from .rng import derive_integer

logger = logging.getLogger(__name__)

ROLL_MODULUS = 100


@dataclass(frozen=True)
class SettlementResult:
    """Outcome of one settlement computation."""
    roll: int
    threshold: Decimal
    outcome: BetOutcome
    win_amount: float


def win_threshold(rtp: float) -> Decimal:
    """rtp as a percentage, computed exactly.

    0.99 -> 99, 0.973 -> 97.3, 1.0 -> 100 (every roll wins).
    """
    return Decimal(repr(rtp)) * ROLL_MODULUS


def compute_settlement(nonce: str, client_seed: str, game: GameParameters,
                       bet_amount: float, house_edge: float) -> SettlementResult:
    """Derive the outcome and payout of a bet.

    WIN iff roll < rtp * 100 (strict). A win pays
    bet_amount * volatility multiplier * (1 - house_edge); a loss pays 0.
    """
    roll = derive_integer(nonce, client_seed, ROLL_MODULUS)
    threshold = win_threshold(game.rtp)

    if roll < threshold:
        return SettlementResult(
            roll=roll,
            threshold=threshold,
            outcome=BetOutcome.WIN,
            win_amount=bet_amount * game.payout_multiplier * (1 - house_edge),
        )

    return SettlementResult(roll=roll, threshold=threshold, outcome=BetOutcome.LOSS, win_amount=0.0)


class SettlementEngine:
    """Settles stored bets against the game catalog."""

    def __init__(self, db: Database, house_edge: float = 0.03):
        if not 0 <= house_edge < 1:
            raise ValueError(f"house_edge must be in [0, 1), got {house_edge}")
        self.db = db
        self.house_edge = house_edge

    def settle(self, bet_id: str, user_id: int) -> Bet:
        """Settle a PENDING bet owned by ``user_id``.

        Raises:
            NotFoundError: Unknown bet, or the bet references an unknown game
            OwnershipError: Bet belongs to another user
            ConflictError: Bet is already SETTLED (including losing a race)
            InternalError: Storage failure; the bet is left PENDING
        """
        try:
            bet = self.db.get_bet(bet_id)
        except sqlite3.Error as e:
            logger.error(f"Failed to load bet {bet_id}: {e}", exc_info=True)
            raise InternalError(f"Failed to load bet {bet_id}") from e

        if not bet:
            raise NotFoundError("Bet not found")

        if bet.user_id != user_id:
            raise OwnershipError("Unauthorized")

        if bet.status != BetStatus.PENDING:
            raise ConflictError("Bet is already settled")

        game = get_game(bet.game_id)
        if not game:
            raise NotFoundError("Game not found")

        result = compute_settlement(bet.nonce, bet.client_seed, game, bet.bet_amount, self.house_edge)
        settled_at = utc_now()

        try:
            settled = self.db.atomic_settle_bet(bet_id, result.outcome, result.win_amount, settled_at)
        except sqlite3.Error as e:
            logger.error(f"Settlement write failed for bet {bet_id}: {e}", exc_info=True)
            raise InternalError(f"Settlement write failed for bet {bet_id}") from e

        if not settled:
            logger.warning(f"Bet {bet_id} was settled concurrently, rejecting duplicate settlement")
            raise ConflictError("Bet is already settled")

        bet.status = BetStatus.SETTLED
        bet.outcome = result.outcome
        bet.win_amount = result.win_amount
        bet.settled_at = settled_at

        logger.info(
            f"Settled bet {bet_id}: game={game.game_id} roll={result.roll} "
            f"threshold={result.threshold} outcome={result.outcome.value} "
            f"win_amount={format_amount(result.win_amount)}"
        )
        return bet
