"""Audit logging package."""

from moneymigo.audit.logger import AuthAuditLogger, create_correlation_id

__all__ = ["AuthAuditLogger", "create_correlation_id"]
