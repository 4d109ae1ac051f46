"""Game logic module for the provably fair casino."""
from .rng import compute_hash, derive_integer, derive_sequence, shuffle
from .nonces import Nonce, NonceRegistry
from .catalog import GameParameters, Volatility, get_game, game_exists, get_games_by_category, list_games
from .settlement import SettlementEngine, SettlementResult, compute_settlement
from .proof import ProofBundle, build_proof, verify_hash, verify_bet
from .bets import BetService
from .errors import (
    CasinoError,
    ValidationError,
    NonceError,
    OwnershipError,
    NotFoundError,
    ConflictError,
    InternalError,
)

__all__ = [
    "compute_hash",
    "derive_integer",
    "derive_sequence",
    "shuffle",
    "Nonce",
    "NonceRegistry",
    "GameParameters",
    "Volatility",
    "get_game",
    "game_exists",
    "get_games_by_category",
    "list_games",
    "SettlementEngine",
    "SettlementResult",
    "compute_settlement",
    "ProofBundle",
    "build_proof",
    "verify_hash",
    "verify_bet",
    "BetService",
    "CasinoError",
    "ValidationError",
    "NonceError",
    "OwnershipError",
    "NotFoundError",
    "ConflictError",
    "InternalError",
]
