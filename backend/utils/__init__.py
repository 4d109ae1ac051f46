"""Utility modules for the casino backend."""
from .formatting import format_amount, format_timestamp, truncate_nonce
from .validation import (
    is_valid_amount,
    is_valid_client_seed,
    is_valid_nonce,
    is_valid_page,
)

__all__ = [
    "format_amount",
    "format_timestamp",
    "truncate_nonce",
    "is_valid_amount",
    "is_valid_client_seed",
    "is_valid_nonce",
    "is_valid_page",
]
