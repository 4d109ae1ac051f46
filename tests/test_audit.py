"""
Tests for the audit trail.
"""
from conftest import ClosingSpy, audit_events
from security import AuditEventType, AuditLogger, AuditSeverity


def test_events_are_recorded(audit):
    audit.log(AuditEventType.BET_PLACED, user_id=1, bet_id="bet_1", details="game=028")
    audit.log(AuditEventType.SETTLEMENT_CONFLICT, severity=AuditSeverity.WARNING, user_id=1, bet_id="bet_1")

    rows = audit_events(audit.db_path)
    assert [r["event_type"] for r in rows] == ["bet_placed", "settlement_conflict"]
    assert [r["severity"] for r in rows] == ["info", "warning"]
    assert rows[0]["details"] == "game=028"


def test_bet_events_are_scoped_and_ordered(audit):
    audit.log(AuditEventType.BET_PLACED, user_id=1, bet_id="bet_1", ip_address="10.0.0.1")
    audit.log(AuditEventType.BET_PLACED, user_id=2, bet_id="bet_2")
    audit.log(AuditEventType.BET_SETTLED, user_id=1, bet_id="bet_1", details="outcome=WIN")
    audit.log(AuditEventType.NONCE_ISSUED)

    events = audit.get_bet_events("bet_1")
    assert [e["event_type"] for e in events] == ["bet_placed", "bet_settled"]
    assert "ip_address" not in events[0]
    assert audit.get_bet_events("bet_1", limit=1)[0]["event_type"] == "bet_placed"
    assert audit.get_bet_events("bet_none") == []


def test_write_failure_does_not_raise(tmp_path):
    audit = AuditLogger(str(tmp_path / "audit.db"))
    audit.db_path = str(tmp_path / "missing" / "audit.db")

    audit.log(AuditEventType.NONCE_ISSUED)


def test_failed_write_closes_connection(audit, monkeypatch):
    spy = ClosingSpy()
    monkeypatch.setattr(audit, "_connect", lambda: spy)

    audit.log(AuditEventType.NONCE_ISSUED)

    assert spy.closed
