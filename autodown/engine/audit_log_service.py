"""Audit log writer used by the scheduling service and the executor."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from autodown.database.audit_log_repository import AuditLogRepository
from autodown.models.audit_log import AuditLogAction, AuditLogEntry
from autodown.models.constants import DEFAULT_AUDIT_QUERY_LIMIT
from autodown.models.schedule import Schedule


class AuditLogService:
    """Append audit entries and read them back for display."""

    def __init__(self, repository: AuditLogRepository):
        self.repository = repository

    def append(
        self,
        schedule: Schedule,
        action: AuditLogAction,
        description: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> AuditLogEntry:
        return self.repository.append(schedule, action, description, context)

    def log_scheduled(self, schedule: Schedule, description: Optional[str] = None, context: Optional[Dict[str, Any]] = None) -> AuditLogEntry:
        return self.append(schedule, AuditLogAction.SCHEDULED, description, context)

    def log_executed(self, schedule: Schedule, description: Optional[str] = None, context: Optional[Dict[str, Any]] = None) -> AuditLogEntry:
        return self.append(schedule, AuditLogAction.EXECUTED, description, context)

    def log_skipped(self, schedule: Schedule, description: Optional[str] = None, context: Optional[Dict[str, Any]] = None) -> AuditLogEntry:
        return self.append(schedule, AuditLogAction.SKIPPED, description, context)

    def log_error(self, schedule: Schedule, description: Optional[str] = None, context: Optional[Dict[str, Any]] = None) -> AuditLogEntry:
        return self.append(schedule, AuditLogAction.ERROR, description, context)

    def log_canceled(self, schedule: Schedule, description: Optional[str] = None, context: Optional[Dict[str, Any]] = None) -> AuditLogEntry:
        return self.append(schedule, AuditLogAction.CANCELED, description, context)

    def search(
        self,
        target_id: Optional[str] = None,
        schedule_id: Optional[str] = None,
        action: Optional[AuditLogAction] = None,
        limit: int = DEFAULT_AUDIT_QUERY_LIMIT,
    ) -> List[AuditLogEntry]:
        return self.repository.search(target_id=target_id, schedule_id=schedule_id, action=action, limit=limit)

    def counts_by_action(self) -> Dict[AuditLogAction, int]:
        return self.repository.counts_by_action()

    def cleanup_old_entries(self, cutoff: datetime) -> int:
        return self.repository.purge_older_than(cutoff)
