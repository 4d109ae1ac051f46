"""
Input validation utilities for security.
"""
import math
import re
from typing import Tuple

CLIENT_SEED_MAX_LENGTH = 128
NONCE_PATTERN = re.compile(r'^[0-9a-f]{64}$')
MAX_PAGE_SIZE = 100


def is_valid_amount(amount: float, min_amount: float, max_amount: float) -> Tuple[bool, str]:
    """Validate bet amount against a game's limits.

    Args:
        amount: Bet amount
        min_amount: Minimum allowed amount (inclusive)
        max_amount: Maximum allowed amount (inclusive)

    Returns:
        Tuple of (is_valid, error_message)
    """
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        return False, "Amount must be a number"

    if not math.isfinite(amount):
        return False, "Amount must be finite"

    if amount <= 0:
        return False, "Amount must be greater than 0"

    if amount < min_amount:
        return False, f"Minimum bet is {min_amount}"

    if amount > max_amount:
        return False, f"Maximum bet is {max_amount}"

    return True, ""


def is_valid_client_seed(client_seed: str) -> Tuple[bool, str]:
    """Validate a caller-supplied client seed.

    Args:
        client_seed: Seed mixed into the outcome hash

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not client_seed:
        return False, "Client seed is required"

    if not isinstance(client_seed, str):
        return False, "Client seed must be a string"

    if len(client_seed) > CLIENT_SEED_MAX_LENGTH:
        return False, f"Client seed cannot exceed {CLIENT_SEED_MAX_LENGTH} characters"

    if not client_seed.isprintable():
        return False, "Client seed contains control characters"

    if client_seed != client_seed.strip():
        return False, "Client seed cannot start or end with whitespace"

    return True, ""


def is_valid_nonce(nonce: str) -> Tuple[bool, str]:
    """Validate server nonce format (64 lowercase hex characters)."""
    if not nonce:
        return False, "Nonce is required"

    if not isinstance(nonce, str) or not NONCE_PATTERN.match(nonce):
        return False, "Invalid nonce format"

    return True, ""


def is_valid_page(limit: int, offset: int) -> Tuple[bool, str]:
    """Validate pagination parameters."""
    if limit < 1 or limit > MAX_PAGE_SIZE:
        return False, f"Limit must be between 1 and {MAX_PAGE_SIZE}"

    if offset < 0:
        return False, "Offset cannot be negative"

    return True, ""
