"""Data models for autodown."""

from autodown.models.schedule import Schedule
from autodown.models.audit_log import AuditLogEntry, AuditLogAction
from autodown.models.product import Product

__all__ = [
    "Schedule",
    "AuditLogEntry",
    "AuditLogAction",
    "Product",
]
