"""Scheduling and execution engine for autodown."""

from autodown.engine.targets import TargetCatalog
from autodown.engine.audit_log_service import AuditLogService
from autodown.engine.scheduling_service import SchedulingService
from autodown.engine.executor import AutoDownExecutor, RunSummary, TickResult
from autodown.engine.factory import build_audit_log_service, build_scheduling_service, build_executor

__all__ = [
    "TargetCatalog",
    "AuditLogService",
    "SchedulingService",
    "AutoDownExecutor",
    "RunSummary",
    "TickResult",
    "build_audit_log_service",
    "build_scheduling_service",
    "build_executor",
]
