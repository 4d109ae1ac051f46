"""
Provably fair randomness derived from a server nonce and a client seed.

Every function here is pure: no state, no clock, no I/O. Anyone holding
(nonce, client_seed) can recompute every value with the same rules:

- hash: SHA-256 over the UTF-8 string "nonce:seed", hex digest
- integer: first 8 hex characters (32 bits) of the hash, modulo the modulus

KNOWN BIAS: reducing a 32-bit value modulo anything that is not a power of
two favours the low residues slightly (for modulus 100 the first 96 values
are hit 42949673 times out of 2**32, the rest 42949672 times). This
reduction is kept as-is because changing it would change the outcome of
every bet already settled and break their verification.
"""
import hashlib
from typing import List

HASH_ALGORITHM = "sha256"
PREFIX_HEX_CHARS = 8  # 32-bit prefix


def compute_hash(nonce: str, client_seed: str) -> str:
    """SHA-256 hex digest of "nonce:client_seed"."""
    combined = f"{nonce}:{client_seed}"
    return hashlib.sha256(combined.encode("utf-8")).hexdigest()


def _reduce(hash_digest: str, modulus: int) -> int:
    if modulus <= 0:
        raise ValueError(f"modulus must be positive, got {modulus}")
    return int(hash_digest[:PREFIX_HEX_CHARS], 16) % modulus


def derive_integer(nonce: str, client_seed: str, modulus: int) -> int:
    """Derive an integer in [0, modulus) from (nonce, client_seed).

    Args:
        nonce: Server nonce
        client_seed: Client seed
        modulus: Exclusive upper bound, must be positive

    Returns:
        First 32 bits of the hash modulo ``modulus`` (see module note on bias)
    """
    return _reduce(compute_hash(nonce, client_seed), modulus)


def derive_sequence(nonce: str, client_seed: str, count: int, modulus: int) -> List[int]:
    """Derive ``count`` integers in [0, modulus) for multi-draw games.

    Draw ``i`` hashes "nonce:client_seed:i". Draws do not depend on each
    other's output; they only look independent because each hash input is
    distinct. This is not a multi-party randomness guarantee.
    """
    if count < 0:
        raise ValueError(f"count must not be negative, got {count}")
    return [
        _reduce(compute_hash(nonce, f"{client_seed}:{i}"), modulus)
        for i in range(count)
    ]


def shuffle(n: int, nonce: str, client_seed: str) -> List[int]:
    """Deterministic Fisher-Yates permutation of [0, n).

    Walks i from n-1 down to 1 and swaps position i with
    j = derive_integer(nonce, "client_seed:shuffle:i", i + 1).
    Only integer arithmetic is involved, so the permutation is identical
    on every platform.
    """
    if n < 0:
        raise ValueError(f"n must not be negative, got {n}")

    arr = list(range(n))
    for i in range(n - 1, 0, -1):
        j = derive_integer(nonce, f"{client_seed}:shuffle:{i}", i + 1)
        arr[i], arr[j] = arr[j], arr[i]
    return arr
