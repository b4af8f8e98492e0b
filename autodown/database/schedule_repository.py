"""Repository for Schedule database operations."""

import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from autodown.errors import ScheduleConflictError
from autodown.models.schedule import Schedule
from autodown.database.models import ScheduleDB

logger = logging.getLogger(__name__)


class ScheduleRepository:
    """Repository for Schedule database operations."""

    def __init__(self, db: Session):
        self.db = db

    def _due_filter(self, now: datetime):
        return (ScheduleDB.is_active.is_(True), ScheduleDB.due_at <= now)

    def get(self, schedule_id: str) -> Optional[Schedule]:
        """Get schedule by ID."""
        row = self.db.query(ScheduleDB).filter(ScheduleDB.id == schedule_id).first()
        return row.to_pydantic() if row else None

    def find_by_target(self, target_id: str) -> Optional[Schedule]:
        """Get the single schedule for a target, active or not."""
        row = self.db.query(ScheduleDB).filter(ScheduleDB.target_id == target_id).first()
        return row.to_pydantic() if row else None

    def find_due(self, now: datetime) -> List[Schedule]:
        """Get all active schedules whose due time has passed.

        Order is unspecified; callers must not depend on it.
        """
        rows = self.db.query(ScheduleDB).filter(*self._due_filter(now)).all()
        return [row.to_pydantic() for row in rows]

    def count_due(self, now: datetime) -> int:
        """Count active schedules whose due time has passed."""
        return int(
            self.db.query(func.count(ScheduleDB.id)).filter(*self._due_filter(now)).scalar() or 0
        )

    def count_active(self) -> int:
        """Count all active schedules, due or not yet due."""
        return int(
            self.db.query(func.count(ScheduleDB.id)).filter(ScheduleDB.is_active.is_(True)).scalar() or 0
        )

    def upsert(self, schedule: Schedule) -> Schedule:
        """Insert a new schedule or update the existing row with the same ID.

        Raises:
            ScheduleConflictError: another schedule already exists for the target
        """
        row = self.db.query(ScheduleDB).filter(ScheduleDB.id == schedule.id).first()
        try:
            if row is None:
                row = ScheduleDB.from_pydantic(schedule)
                self.db.add(row)
            else:
                row.target_id = schedule.target_id
                row.due_at = schedule.due_at
                row.is_active = schedule.is_active
                row.updated_at = schedule.updated_at
                row.updated_by = schedule.updated_by
            self.db.commit()
            self.db.refresh(row)
            logger.debug(f"Saved schedule {schedule.id} for target {schedule.target_id}")
            return row.to_pydantic()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Schedule for target {schedule.target_id} already exists: {str(e.orig)}")
            raise ScheduleConflictError(schedule.target_id) from e
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to save schedule {schedule.id}: {type(e).__name__}: {str(e)}")
            raise

    def purge_inactive_older_than(self, cutoff: datetime) -> int:
        """Permanently delete canceled schedules not modified since `cutoff`.

        Active schedules are never touched regardless of age. Audit entries of
        deleted schedules go with them (FK cascade).

        Returns:
            Number of schedules deleted
        """
        try:
            deleted_count = (
                self.db.query(ScheduleDB)
                .filter(ScheduleDB.is_active.is_(False), ScheduleDB.updated_at < cutoff)
                .delete(synchronize_session=False)
            )
            self.db.commit()
            logger.debug(f"Purged {deleted_count} canceled schedules last updated before {cutoff.isoformat()}")
            return int(deleted_count)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to purge canceled schedules: {type(e).__name__}: {str(e)}")
            raise
