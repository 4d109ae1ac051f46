"""Database module for the casino backend."""
from .models import User, Bet, BetStatus, BetOutcome
from .repo import Database

__all__ = ["User", "Bet", "BetStatus", "BetOutcome", "Database"]
