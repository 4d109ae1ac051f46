"""Security utilities for the casino backend."""
from .audit import AuditEventType, AuditSeverity, AuditLogger

__all__ = ["AuditEventType", "AuditSeverity", "AuditLogger"]
