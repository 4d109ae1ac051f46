"""
Bet placement, lookup and history.
"""
import logging
import sqlite3
import uuid
from typing import List, Optional, Tuple

from database import Database, Bet, BetStatus
from utils.formatting import format_amount, truncate_nonce
from utils.validation import is_valid_amount, is_valid_client_seed, is_valid_nonce, is_valid_page
from .catalog import GameParameters, get_game
from .errors import InternalError, NonceError, NotFoundError, OwnershipError, ValidationError
from .nonces import NonceRegistry

logger = logging.getLogger(__name__)


def generate_bet_id() -> str:
    """Generate unique bet ID."""
    return f"bet_{uuid.uuid4().hex[:16]}"


def parse_status(status: Optional[str]) -> Optional[BetStatus]:
    """Parse an optional status filter ("PENDING"/"SETTLED", any case)."""
    if not status:
        return None
    try:
        return BetStatus(status.upper())
    except ValueError:
        raise ValidationError(f"Invalid status filter: {status}")


class BetService:
    """Places bets and reads them back for their owners."""

    def __init__(self, db: Database, nonce_registry: NonceRegistry):
        self.db = db
        self.nonce_registry = nonce_registry

    def place_bet(self, user_id: int, game_id: str, bet_amount: float, client_seed: str,
                  nonce: Optional[str] = None) -> Tuple[Bet, GameParameters]:
        """Validate and persist a new PENDING bet.

        All input checks run before any nonce is touched. A supplied nonce
        must be live and is consumed; without one a fresh nonce is issued
        and consumed on the spot.

        Returns:
            (bet, game) tuple
        """
        if not game_id:
            raise ValidationError("Missing required field: game_id")

        game = get_game(game_id)
        if not game:
            raise NotFoundError("Game not found")

        ok, message = is_valid_amount(bet_amount, game.min_bet, game.max_bet)
        if not ok:
            raise ValidationError(message)

        ok, message = is_valid_client_seed(client_seed)
        if not ok:
            raise ValidationError(message)

        if nonce is None:
            nonce = self.nonce_registry.issue().value
        else:
            ok, message = is_valid_nonce(nonce)
            if not ok:
                raise NonceError(message)

        if not self.nonce_registry.consume(nonce):
            logger.warning(f"Bet rejected for user {user_id}: nonce {truncate_nonce(nonce)} invalid or expired")
            raise NonceError("Invalid or expired nonce")

        bet = Bet(
            bet_id=generate_bet_id(),
            user_id=user_id,
            game_id=game.game_id,
            bet_amount=float(bet_amount),
            nonce=nonce,
            client_seed=client_seed,
        )

        try:
            self.db.create_bet(bet)
        except sqlite3.IntegrityError as e:
            logger.error(f"Nonce {truncate_nonce(nonce)} already bound to a bet: {e}")
            raise NonceError("Nonce already used") from e
        except sqlite3.Error as e:
            logger.error(f"Failed to store bet for user {user_id}: {e}", exc_info=True)
            raise InternalError("Failed to store bet") from e

        logger.info(
            f"Bet {bet.bet_id} placed: user={user_id} game={game.game_id} "
            f"amount={format_amount(bet.bet_amount)} nonce={truncate_nonce(nonce)}"
        )
        return bet, game

    def get_bet(self, bet_id: str, user_id: int) -> Bet:
        """Get a bet owned by ``user_id``."""
        try:
            bet = self.db.get_bet(bet_id)
        except sqlite3.Error as e:
            logger.error(f"Failed to load bet {bet_id}: {e}", exc_info=True)
            raise InternalError("Failed to load bet") from e

        if not bet:
            raise NotFoundError("Bet not found")

        if bet.user_id != user_id:
            raise OwnershipError("Unauthorized")

        return bet

    def list_bets(self, user_id: int, status: Optional[str] = None,
                  limit: int = 20, offset: int = 0) -> Tuple[List[Bet], int]:
        """Page through a user's bet history, newest first.

        Returns:
            (bets, total) where total counts every bet matching the filter
        """
        status_filter = parse_status(status)

        ok, message = is_valid_page(limit, offset)
        if not ok:
            raise ValidationError(message)

        try:
            bets = self.db.get_user_bets(user_id, status=status_filter, limit=limit, offset=offset)
            total = self.db.count_user_bets(user_id, status=status_filter)
        except sqlite3.Error as e:
            logger.error(f"Failed to list bets for user {user_id}: {e}", exc_info=True)
            raise InternalError("Failed to list bets") from e

        return bets, total
