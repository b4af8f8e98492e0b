"""Repository for AuditLogEntry database operations.

Entries are append-only: there is no update path. Deletion happens only via
the retention sweep or the schedule FK cascade.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import ulid
from sqlalchemy import desc, func
from sqlalchemy.orm import Session

from autodown.clock import utcnow
from autodown.models.audit_log import AuditLogAction, AuditLogEntry
from autodown.models.constants import DEFAULT_AUDIT_QUERY_LIMIT, DESCRIPTION_MAX_LENGTH
from autodown.models.schedule import Schedule
from autodown.database.models import AuditLogDB, enum_to_value, value_to_enum

logger = logging.getLogger(__name__)


class AuditLogRepository:
    """Repository for AuditLogEntry database operations."""

    def __init__(self, db: Session):
        self.db = db

    def _newest_first(self, query):
        return query.order_by(desc(AuditLogDB.created_at), desc(AuditLogDB.id))

    def append(
        self,
        schedule: Schedule,
        action: AuditLogAction,
        description: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        *,
        created_at: Optional[datetime] = None,
    ) -> AuditLogEntry:
        """Persist a new entry for `schedule`, copying its target_id."""
        if description is not None and len(description) > DESCRIPTION_MAX_LENGTH:
            description = description[:DESCRIPTION_MAX_LENGTH]
        row = AuditLogDB(
            id=str(ulid.new()),
            target_id=schedule.target_id,
            schedule_id=schedule.id,
            action=enum_to_value(action),
            description=description,
            context=dict(context) if context is not None else None,
            created_at=created_at or utcnow(),
        )
        try:
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
            logger.debug(f"Appended {row.action} audit entry {row.id} for target {row.target_id}")
            return row.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(
                f"Failed to append {enum_to_value(action)} audit entry for schedule {schedule.id}: "
                f"{type(e).__name__}: {str(e)}"
            )
            raise

    def search(
        self,
        target_id: Optional[str] = None,
        schedule_id: Optional[str] = None,
        action: Optional[AuditLogAction] = None,
        limit: int = DEFAULT_AUDIT_QUERY_LIMIT,
    ) -> List[AuditLogEntry]:
        """Entries matching every given filter, newest first. No filters lists everything."""
        query = self.db.query(AuditLogDB)
        if target_id is not None:
            query = query.filter(AuditLogDB.target_id == target_id)
        if schedule_id is not None:
            query = query.filter(AuditLogDB.schedule_id == schedule_id)
        if action is not None:
            query = query.filter(AuditLogDB.action == enum_to_value(action))
        rows = self._newest_first(query).limit(limit).all()
        return [row.to_pydantic() for row in rows]

    def by_target(self, target_id: str, limit: int = DEFAULT_AUDIT_QUERY_LIMIT) -> List[AuditLogEntry]:
        """Entries for a target, newest first."""
        return self.search(target_id=target_id, limit=limit)

    def by_schedule(self, schedule_id: str, limit: int = DEFAULT_AUDIT_QUERY_LIMIT) -> List[AuditLogEntry]:
        return self.search(schedule_id=schedule_id, limit=limit)

    def by_action(self, action: AuditLogAction, limit: int = DEFAULT_AUDIT_QUERY_LIMIT) -> List[AuditLogEntry]:
        """Entries of one action kind, newest first."""
        return self.search(action=action, limit=limit)

    def counts_by_action(self) -> Dict[AuditLogAction, int]:
        """Number of entries per action kind. Kinds with no entries are omitted."""
        rows = (
            self.db.query(AuditLogDB.action, func.count(AuditLogDB.id))
            .group_by(AuditLogDB.action)
            .all()
        )
        counts: Dict[AuditLogAction, int] = {}
        for action_value, count in rows:
            action = value_to_enum(action_value, AuditLogAction, None)
            if action is None:
                logger.warning(f"Ignoring unknown audit action {action_value!r} in counts")
                continue
            counts[action] = int(count)
        return counts

    def purge_older_than(self, cutoff: datetime) -> int:
        """Permanently delete entries written before `cutoff`.

        Returns:
            Number of entries deleted
        """
        try:
            deleted_count = (
                self.db.query(AuditLogDB)
                .filter(AuditLogDB.created_at < cutoff)
                .delete(synchronize_session=False)
            )
            self.db.commit()
            logger.debug(f"Purged {deleted_count} audit entries written before {cutoff.isoformat()}")
            return int(deleted_count)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to purge audit entries: {type(e).__name__}: {str(e)}")
            raise
