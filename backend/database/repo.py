"""
Database repository for the casino backend.
Stores users and bets in SQLite.
"""
import sqlite3
import logging
from typing import Optional, List
from datetime import datetime
from .models import User, Bet, BetStatus, BetOutcome, utc_now

logger = logging.getLogger(__name__)


def _parse_dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


class Database:
    """Database repository."""

    def __init__(self, db_path: str = "casino.db", timeout: float = 10.0):
        self.db_path = db_path
        self.timeout = timeout
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        # isolation_level=None: transactions are opened explicitly where needed
        conn = sqlite3.connect(self.db_path, timeout=self.timeout, isolation_level=None)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self):
        """Initialize database schema."""
        conn = self._connect()
        try:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    user_id INTEGER PRIMARY KEY AUTOINCREMENT,
                    wallet_address TEXT UNIQUE NOT NULL,
                    session_token TEXT,
                    session_expires TEXT,
                    created_at TEXT
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS bets (
                    bet_id TEXT PRIMARY KEY,
                    user_id INTEGER NOT NULL,
                    game_id TEXT NOT NULL,
                    bet_amount REAL NOT NULL,
                    nonce TEXT UNIQUE NOT NULL,
                    client_seed TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'PENDING',
                    outcome TEXT,
                    win_amount REAL,
                    settled_at TEXT,
                    created_at TEXT NOT NULL,
                    FOREIGN KEY (user_id) REFERENCES users(user_id)
                )
            """)

            cursor.execute("CREATE INDEX IF NOT EXISTS idx_users_session ON users(session_token)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_bets_user ON bets(user_id)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_bets_status ON bets(status)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_bets_created ON bets(created_at)")
        finally:
            conn.close()
        logger.info(f"Database initialized at {self.db_path}")

    def get_counts(self) -> dict:
        """Row counts for the connectivity check."""
        conn = self._connect()
        try:
            users = conn.execute("SELECT COUNT(*) FROM users").fetchone()[0]
            bets = conn.execute("SELECT COUNT(*) FROM bets").fetchone()[0]
        finally:
            conn.close()
        return {"users": users, "bets": bets}

    # === User Operations ===

    def get_user_by_session(self, session_token: str) -> Optional[User]:
        """Get user by a live session token. Expired sessions return None."""
        conn = self._connect()
        try:
            row = conn.execute("SELECT * FROM users WHERE session_token = ?", (session_token,)).fetchone()
        finally:
            conn.close()

        if not row:
            return None

        user = self._row_to_user(row)
        if user.session_expires and user.session_expires <= utc_now():
            logger.info(f"Session expired for user {user.user_id}")
            return None
        return user

    def save_user(self, user: User) -> int:
        """Insert or update user. Returns the user ID."""
        params = (
            user.wallet_address.lower(),
            user.session_token,
            user.session_expires.isoformat() if user.session_expires else None,
            user.created_at.isoformat(),
        )

        conn = self._connect()
        try:
            cursor = conn.cursor()
            if user.user_id:
                cursor.execute("""
                    UPDATE users
                    SET wallet_address = ?, session_token = ?, session_expires = ?, created_at = ?
                    WHERE user_id = ?
                """, params + (user.user_id,))
            else:
                cursor.execute("""
                    INSERT INTO users (wallet_address, session_token, session_expires, created_at)
                    VALUES (?, ?, ?, ?)
                """, params)
                user.user_id = cursor.lastrowid
        finally:
            conn.close()

        return user.user_id

    def _row_to_user(self, row: sqlite3.Row) -> User:
        """Convert database row to User object."""
        return User(
            user_id=row["user_id"],
            wallet_address=row["wallet_address"],
            session_token=row["session_token"],
            session_expires=_parse_dt(row["session_expires"]),
            created_at=_parse_dt(row["created_at"]) or utc_now(),
        )

    # === Bet Operations ===

    def create_bet(self, bet: Bet):
        """Insert a new PENDING bet. Fails if the bet ID or nonce is already used."""
        if bet.status != BetStatus.PENDING:
            raise ValueError(f"New bets must be PENDING, got {bet.status.value}")

        conn = self._connect()
        try:
            conn.execute("""
                INSERT INTO bets (
                    bet_id, user_id, game_id, bet_amount, nonce, client_seed,
                    status, outcome, win_amount, settled_at, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, NULL, NULL, NULL, ?)
            """, (
                bet.bet_id, bet.user_id, bet.game_id, bet.bet_amount,
                bet.nonce, bet.client_seed, bet.status.value,
                bet.created_at.isoformat(),
            ))
        finally:
            conn.close()

    def get_bet(self, bet_id: str) -> Optional[Bet]:
        """Get bet by ID."""
        conn = self._connect()
        try:
            row = conn.execute("SELECT * FROM bets WHERE bet_id = ?", (bet_id,)).fetchone()
        finally:
            conn.close()

        if not row:
            return None
        return self._row_to_bet(row)

    def get_user_bets(self, user_id: int, status: Optional[BetStatus] = None,
                      limit: int = 20, offset: int = 0) -> List[Bet]:
        """Get a page of a user's bets, newest first."""
        query = "SELECT * FROM bets WHERE user_id = ?"
        params = [user_id]

        if status:
            query += " AND status = ?"
            params.append(status.value)

        query += " ORDER BY created_at DESC, bet_id DESC LIMIT ? OFFSET ?"
        params.extend([limit, offset])

        conn = self._connect()
        try:
            rows = conn.execute(query, params).fetchall()
        finally:
            conn.close()

        return [self._row_to_bet(row) for row in rows]

    def count_user_bets(self, user_id: int, status: Optional[BetStatus] = None) -> int:
        """Count a user's bets with optional status filter."""
        query = "SELECT COUNT(*) FROM bets WHERE user_id = ?"
        params = [user_id]

        if status:
            query += " AND status = ?"
            params.append(status.value)

        conn = self._connect()
        try:
            return conn.execute(query, params).fetchone()[0]
        finally:
            conn.close()

    def _row_to_bet(self, row: sqlite3.Row) -> Bet:
        """Convert database row to Bet object."""
        return Bet(
            bet_id=row["bet_id"],
            user_id=row["user_id"],
            game_id=row["game_id"],
            bet_amount=row["bet_amount"],
            nonce=row["nonce"],
            client_seed=row["client_seed"],
            status=BetStatus(row["status"]),
            outcome=BetOutcome(row["outcome"]) if row["outcome"] else None,
            win_amount=row["win_amount"],
            settled_at=_parse_dt(row["settled_at"]),
            created_at=_parse_dt(row["created_at"]) or utc_now(),
        )

    # === Atomic Operations (SECURITY: Prevent race conditions) ===

    def atomic_settle_bet(self, bet_id: str, outcome: BetOutcome, win_amount: float,
                          settled_at: datetime) -> bool:
        """Atomically settle a bet if it is still PENDING.

        The status check and the write of (status, outcome, win_amount,
        settled_at) happen in one conditional UPDATE under an exclusive
        lock, so concurrent settlers cannot both succeed.

        Returns:
            True if this call settled the bet, False if it was not PENDING
            (already settled or missing)
        """
        conn = self._connect()
        cursor = conn.cursor()

        try:
            cursor.execute("BEGIN EXCLUSIVE")

            cursor.execute("""
                UPDATE bets
                SET status = ?, outcome = ?, win_amount = ?, settled_at = ?
                WHERE bet_id = ? AND status = ?
            """, (
                BetStatus.SETTLED.value, outcome.value, win_amount, settled_at.isoformat(),
                bet_id, BetStatus.PENDING.value,
            ))

            if cursor.rowcount == 0:
                conn.rollback()
                return False

            conn.commit()
            return True

        except Exception as e:
            logger.error(f"Atomic settle failed for bet {bet_id}: {e}", exc_info=True)
            conn.rollback()
            raise

        finally:
            conn.close()
