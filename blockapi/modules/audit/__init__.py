"""
Audit Module - Black Box Interface

Purpose: Keep an audit trail of capability registrations and removals
Interface: AuditLog.record(), create_audit_log()
Hidden: Redis storage, trimming, serialization
"""

from .audit import AuditLog, create_audit_log

__all__ = ["AuditLog", "create_audit_log"]
