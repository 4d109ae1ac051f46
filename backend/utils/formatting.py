"""
Formatting utilities for display.
"""
from datetime import datetime
from typing import Optional


def format_amount(amount: Optional[float]) -> str:
    """Format a bet or payout amount for display."""
    if amount is None:
        return "N/A"
    if amount >= 1000:
        return f"{amount:,.2f}"
    elif amount >= 1:
        return f"{amount:.4f}"
    else:
        return f"{amount:.6f}"


def format_timestamp(dt: Optional[datetime]) -> Optional[str]:
    """ISO-8601 timestamp, or None."""
    if not dt:
        return None
    return dt.isoformat()


def truncate_nonce(nonce: str, start: int = 8, end: int = 4) -> str:
    """Truncate nonce for log lines."""
    if len(nonce) <= start + end:
        return nonce
    return f"{nonce[:start]}...{nonce[-end:]}"


