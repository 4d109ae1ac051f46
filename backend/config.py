"""
Runtime configuration for the provably fair casino backend.

Values are read from the environment (or a .env file) once at import time
and handed to the engines at construction. Nothing below is mutated at runtime.
"""
import os
from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# STORAGE
# =============================================================================

DB_PATH = os.getenv("DB_PATH", "casino.db")
DB_TIMEOUT_SECONDS = float(os.getenv("DB_TIMEOUT_SECONDS", "10"))

# =============================================================================
# SETTLEMENT
# =============================================================================

# Fraction deducted from every winning payout (0.03 = 3%)
HOUSE_EDGE = float(os.getenv("HOUSE_EDGE", "0.03"))

if not 0 <= HOUSE_EDGE < 1:
    raise ValueError(f"HOUSE_EDGE must be in [0, 1), got {HOUSE_EDGE}")

# =============================================================================
# NONCES
# =============================================================================

NONCE_TTL_SECONDS = int(os.getenv("NONCE_TTL_SECONDS", "300"))  # 5 minutes
NONCE_SWEEP_INTERVAL_SECONDS = int(os.getenv("NONCE_SWEEP_INTERVAL_SECONDS", "60"))

# =============================================================================
# API
# =============================================================================

CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*").split(",")
SESSION_DURATION_DAYS = int(os.getenv("SESSION_DURATION_DAYS", "30"))
