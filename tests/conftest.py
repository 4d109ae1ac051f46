"""
Shared fixtures.

DB_PATH must point somewhere disposable before `api` is imported, since
the app builds its services at import time.
"""
import os
import sqlite3
import tempfile

os.environ.setdefault("DB_PATH", os.path.join(tempfile.mkdtemp(prefix="casino-tests-"), "casino.db"))

from datetime import datetime, timedelta, timezone

import pytest

from auth import create_session
from database import Database, User
from game import BetService, NonceRegistry, SettlementEngine, derive_integer
from security import AuditLogger

HOUSE_EDGE = 0.03


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime = None):
        self.now = start or datetime(2026, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float):
        self.now += timedelta(seconds=seconds)


def find_seed(nonce: str, target: int, modulus: int = 100, prefix: str = "seed") -> str:
    """Search for a client seed whose roll under ``nonce`` equals ``target``."""
    for i in range(200_000):
        seed = f"{prefix}-{i}"
        if derive_integer(nonce, seed, modulus) == target:
            return seed
    raise AssertionError(f"No seed found for roll {target}")


class ClosingSpy:
    """Connection stand-in whose statements fail, recording close()."""

    def __init__(self):
        self.closed = False

    def execute(self, *args, **kwargs):
        raise sqlite3.OperationalError("disk I/O error")

    def close(self):
        self.closed = True


def audit_events(db_path: str, event_type=None) -> list:
    """Rows of the audit_logs table, oldest first."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    try:
        if event_type is None:
            rows = conn.execute("SELECT * FROM audit_logs ORDER BY id").fetchall()
        else:
            rows = conn.execute(
                "SELECT * FROM audit_logs WHERE event_type = ? ORDER BY id", (event_type.value,)
            ).fetchall()
    finally:
        conn.close()
    return [dict(row) for row in rows]


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "casino.db")


@pytest.fixture
def db(db_path):
    return Database(db_path)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry():
    return NonceRegistry(ttl_seconds=300)


@pytest.fixture
def bet_service(db, registry):
    return BetService(db, registry)


@pytest.fixture
def engine(db):
    return SettlementEngine(db, house_edge=HOUSE_EDGE)


def make_user(db: Database, wallet: str) -> User:
    user = User(user_id=0, wallet_address=wallet)
    create_session(user)
    db.save_user(user)
    return user


@pytest.fixture
def user(db):
    return make_user(db, "0xAaAaAaAaAaAaAaAaAaAaAaAaAaAaAaAaAaAaAaAa")


@pytest.fixture
def other_user(db):
    return make_user(db, "0xBbBbBbBbBbBbBbBbBbBbBbBbBbBbBbBbBbBbBbBb")


@pytest.fixture
def audit(db_path):
    return AuditLogger(db_path)
