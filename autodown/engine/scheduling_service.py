"""Scheduling service: configure and cancel take-down schedules.

Each mutation persists the schedule first and then writes its audit entry.
The two writes are separate commits; see DESIGN.md for why they are not one
transaction.
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Optional

from autodown.clock import Clock, to_naive_utc, utcnow
from autodown.database.schedule_repository import ScheduleRepository
from autodown.engine.audit_log_service import AuditLogService
from autodown.engine.targets import TargetCatalog
from autodown.errors import TargetNotFoundError
from autodown.models.constants import DATETIME_DISPLAY_FORMAT, DEFAULT_SCHEDULE_RETENTION_DAYS, SYSTEM_ACTOR
from autodown.models.schedule import Schedule

logger = logging.getLogger(__name__)


class SchedulingService:
    """Owns creation and mutation of schedules."""

    def __init__(
        self,
        schedules: ScheduleRepository,
        audit: AuditLogService,
        targets: Optional[TargetCatalog] = None,
        clock: Clock = utcnow,
    ):
        self.schedules = schedules
        self.audit = audit
        self.targets = targets
        self.clock = clock

    def get_schedule(self, target_id: str) -> Optional[Schedule]:
        return self.schedules.find_by_target(target_id)

    def configure(self, target_id: str, due_at: datetime, actor: Optional[str] = None) -> Schedule:
        """Set (or reset) the take-down time for a target.

        Creates the schedule on first call; afterwards updates the same row,
        reactivating it if it had been canceled. Always writes a SCHEDULED entry.

        Raises:
            TargetNotFoundError: a target catalog is wired in and does not know the target
            ScheduleConflictError: a concurrent configure created the row first
        """
        if self.targets is not None and self.targets.load_by_id(target_id) is None:
            raise TargetNotFoundError(target_id)

        due_at = to_naive_utc(due_at)
        actor = actor or SYSTEM_ACTOR
        now = self.clock()

        existing = self.schedules.find_by_target(target_id)
        previous_due_at = None
        reactivated = False
        if existing is None:
            schedule = Schedule(
                id=str(uuid.uuid4()),
                target_id=target_id,
                due_at=due_at,
                is_active=True,
                created_at=now,
                updated_at=now,
                created_by=actor,
                updated_by=actor,
            )
        else:
            previous_due_at = existing.due_at
            reactivated = not existing.is_active
            schedule = existing.model_copy(update={
                "due_at": due_at,
                "is_active": True,
                "updated_at": now,
                "updated_by": actor,
            })

        saved = self.schedules.upsert(schedule)
        self.audit.log_scheduled(
            saved,
            f"Set auto take-down time for {target_id} to {due_at.strftime(DATETIME_DISPLAY_FORMAT)}",
            {
                "due_at": due_at.isoformat(),
                "previous_due_at": previous_due_at.isoformat() if previous_due_at else None,
                "reactivated": reactivated,
                "operator": actor,
            },
        )
        logger.info(f"Scheduled take-down of {target_id} at {due_at.isoformat()} (schedule {saved.id})")
        return saved

    def cancel(self, target_id: str, actor: Optional[str] = None) -> bool:
        """Cancel the pending take-down for a target.

        Returns False without writing anything when there is no schedule or it
        is already canceled.
        """
        existing = self.schedules.find_by_target(target_id)
        if existing is None or not existing.is_active:
            return False

        actor = actor or SYSTEM_ACTOR
        schedule = existing.model_copy(update={
            "is_active": False,
            "updated_at": self.clock(),
            "updated_by": actor,
        })
        saved = self.schedules.upsert(schedule)
        self.audit.log_canceled(
            saved,
            f"Canceled auto take-down for {target_id}",
            {"due_at": saved.due_at.isoformat(), "operator": actor},
        )
        logger.info(f"Canceled take-down of {target_id} (schedule {saved.id})")
        return True

    def count_active(self) -> int:
        """Active schedules, due or not yet due."""
        return self.schedules.count_active()

    def count_due(self, now: Optional[datetime] = None) -> int:
        return self.schedules.count_due(to_naive_utc(now or self.clock()))

    def cleanup_old_schedules(self, days_old: int = DEFAULT_SCHEDULE_RETENTION_DAYS, now: Optional[datetime] = None) -> int:
        """Delete canceled schedules untouched for `days_old` days."""
        cutoff = to_naive_utc(now or self.clock()) - timedelta(days=days_old)
        deleted = self.schedules.purge_inactive_older_than(cutoff)
        logger.info(f"Removed {deleted} canceled schedules older than {days_old} days")
        return deleted
