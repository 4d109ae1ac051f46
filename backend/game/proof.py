"""
Proof bundles for third-party verification of bet outcomes.

Nothing here touches storage: a proof is recomputed from (nonce,
client_seed) every time it is requested, before or after settlement.
"""
import hmac
from dataclasses import dataclass, asdict

from database import Bet
from .catalog import GameParameters
from .rng import compute_hash, derive_integer, HASH_ALGORITHM
from .settlement import ROLL_MODULUS, compute_settlement


@dataclass(frozen=True)
class ProofBundle:
    """Everything needed to recompute a bet's roll."""
    nonce: str
    client_seed: str
    hash: str
    derived_number: int
    algorithm: str = HASH_ALGORITHM

    def to_dict(self) -> dict:
        return asdict(self)


def build_proof(nonce: str, client_seed: str) -> ProofBundle:
    """Recompute the hash and the roll used at settlement."""
    return ProofBundle(
        nonce=nonce,
        client_seed=client_seed,
        hash=compute_hash(nonce, client_seed),
        derived_number=derive_integer(nonce, client_seed, ROLL_MODULUS),
    )


def verify_hash(nonce: str, client_seed: str, expected_hash: str) -> bool:
    """Check a published hash against (nonce, client_seed).

    Any string is accepted; one that is not a hex digest simply fails.
    """
    return hmac.compare_digest(
        compute_hash(nonce, client_seed).encode("ascii"),
        expected_hash.lower().encode("utf-8"),
    )


def verify_bet(bet: Bet, game: GameParameters, house_edge: float) -> bool:
    """Verify a settled bet's recorded outcome and payout.

    Allows anyone holding the bet's inputs to confirm it was settled fairly.

    Args:
        bet: Bet with nonce, client seed and settlement fields
        game: Parameters of the bet's game
        house_edge: House edge in force when the bet was settled

    Returns:
        True if the recorded outcome and win amount match a recomputation,
        False if they differ or the bet is not settled
    """
    if not bet.is_settled or bet.outcome is None or bet.win_amount is None:
        return False

    expected = compute_settlement(bet.nonce, bet.client_seed, game, bet.bet_amount, house_edge)
    return expected.outcome == bet.outcome and expected.win_amount == bet.win_amount
