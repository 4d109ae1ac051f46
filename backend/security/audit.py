"""
Security audit logging system.
Tracks nonce and settlement events for forensics and monitoring.
"""
import logging
import sqlite3
from datetime import datetime, timezone
from typing import List, Optional
from enum import Enum

logger = logging.getLogger(__name__)


class AuditEventType(Enum):
    """Types of security events to audit."""
    # Nonces
    NONCE_ISSUED = "nonce_issued"
    NONCE_REJECTED = "nonce_rejected"

    # Bets
    BET_PLACED = "bet_placed"
    BET_SETTLED = "bet_settled"
    SETTLEMENT_CONFLICT = "settlement_conflict"

    # Access
    UNAUTHORIZED_ACCESS = "unauthorized_access"
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"
    INTERNAL_ERROR = "internal_error"


class AuditSeverity(Enum):
    """Severity levels for audit events."""
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class AuditLogger:
    """Audit logging system for security events."""

    def __init__(self, db_path: str = "casino.db"):
        self.db_path = db_path
        self._init_audit_table()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _init_audit_table(self):
        """Initialize audit log table."""
        conn = self._connect()
        try:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS audit_logs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    event_type TEXT NOT NULL,
                    user_id INTEGER,
                    ip_address TEXT,
                    bet_id TEXT,
                    details TEXT,
                    severity TEXT NOT NULL,
                    timestamp TEXT NOT NULL
                )
            """)

            cursor.execute("CREATE INDEX IF NOT EXISTS idx_audit_timestamp ON audit_logs(timestamp)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_audit_bet ON audit_logs(bet_id)")

            conn.commit()
        finally:
            conn.close()

    def log(
        self,
        event_type: AuditEventType,
        severity: AuditSeverity = AuditSeverity.INFO,
        user_id: Optional[int] = None,
        ip_address: Optional[str] = None,
        bet_id: Optional[str] = None,
        details: Optional[str] = None,
    ):
        """Log a security event.

        A failed audit write is logged and swallowed; it never fails the
        request that triggered it.

        Args:
            event_type: Type of event
            severity: Severity level
            user_id: User ID if applicable
            ip_address: IP address if applicable
            bet_id: Bet ID if applicable
            details: Additional details (JSON string or text)
        """
        try:
            conn = self._connect()
            try:
                conn.execute("""
                    INSERT INTO audit_logs (
                        event_type, user_id, ip_address, bet_id, details, severity, timestamp
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """, (
                    event_type.value,
                    user_id,
                    ip_address,
                    bet_id,
                    details,
                    severity.value,
                    datetime.now(timezone.utc).isoformat()
                ))
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error(f"Failed to write audit log: {e}", exc_info=True)
            return

        log_msg = f"[AUDIT] {event_type.value}"
        if user_id:
            log_msg += f" | user={user_id}"
        if bet_id:
            log_msg += f" | bet={bet_id}"
        if ip_address:
            log_msg += f" | ip={ip_address}"
        if details:
            log_msg += f" | {details}"

        if severity == AuditSeverity.CRITICAL:
            logger.critical(log_msg)
        elif severity == AuditSeverity.WARNING:
            logger.warning(log_msg)
        else:
            logger.info(log_msg)

    def get_bet_events(self, bet_id: str, limit: int = 100) -> List[dict]:
        """Audit trail of one bet, oldest first.

        IP addresses are left out; the trail is shown to the bet's owner.
        """
        conn = self._connect()
        try:
            rows = conn.execute("""
                SELECT event_type, severity, user_id, details, timestamp
                FROM audit_logs
                WHERE bet_id = ?
                ORDER BY id ASC
                LIMIT ?
            """, (bet_id, limit)).fetchall()
        finally:
            conn.close()

        return [dict(row) for row in rows]
