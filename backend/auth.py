"""
Session helpers.
Tokens are issued by the wallet-login flow; the API only looks them up.
"""
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from config import SESSION_DURATION_DAYS
from database import User


def generate_session_token() -> str:
    """Generate a secure random session token."""
    return secrets.token_urlsafe(32)


def create_session(user: User, duration_days: int = SESSION_DURATION_DAYS) -> Tuple[str, datetime]:
    """Create a new session for user. Returns (token, expires_at)."""
    token = generate_session_token()
    expires_at = datetime.now(timezone.utc) + timedelta(days=duration_days)
    user.session_token = token
    user.session_expires = expires_at
    return token, expires_at


def get_bearer_token(auth_header: Optional[str]) -> Optional[str]:
    """Extract the token from an "Authorization: Bearer <token>" header value."""
    if auth_header and auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
        return token or None
    return None
