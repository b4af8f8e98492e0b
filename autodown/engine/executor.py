"""Auto take-down executor.

Invoked once per tick by an external trigger. Selects due schedules, takes
each target down with per-item failure isolation, and records the outcome of
every item in the audit log.

Schedules are NOT deactivated after execution or skip. A due schedule whose
target is already down is selected again on every tick and recorded as
SKIPPED; execution is idempotent through the target-state check.

Overlapping ticks (two trigger instances) can both select and execute the same
due item. Restoring at-most-once execution requires a claim step before
processing, e.g. a conditional UPDATE marking the schedule in progress.
"""

import logging
import traceback
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError

from autodown.clock import Clock, to_naive_utc, utcnow
from autodown.database.schedule_repository import ScheduleRepository
from autodown.engine.audit_log_service import AuditLogService
from autodown.engine.targets import TargetCatalog
from autodown.errors import StoreUnavailableError, TargetNotFoundError
from autodown.models.audit_log import AuditLogAction
from autodown.models.schedule import Schedule

logger = logging.getLogger(__name__)


class RunSummary(BaseModel):
    """Per-run outcome counts."""
    run_at: datetime
    due_count: int = 0
    executed_count: int = 0
    skipped_count: int = 0
    failed_count: int = 0


class TickResult(BaseModel):
    """What the invoking process reports after a successful tick."""
    executed_count: int = Field(..., description="Targets taken down in this tick")
    active_count: int = Field(..., description="Active schedules after the tick (due or not yet due)")


def _error_context(exc: BaseException, run_at: datetime) -> dict:
    frames = traceback.extract_tb(exc.__traceback__)
    last = frames[-1] if frames else None
    return {
        "error_type": type(exc).__name__,
        "error_message": str(exc),
        "error_file": last.filename if last else None,
        "error_line": last.lineno if last else None,
        "run_at": run_at.isoformat(),
    }


class AutoDownExecutor:
    """Execute due take-down schedules."""

    def __init__(
        self,
        schedules: ScheduleRepository,
        targets: TargetCatalog,
        audit: AuditLogService,
        clock: Clock = utcnow,
    ):
        self.schedules = schedules
        self.targets = targets
        self.audit = audit
        self.clock = clock

    def run(self, now: Optional[datetime] = None) -> int:
        """Process every due schedule once.

        Returns:
            Number of targets taken down (skips and errors excluded)

        Raises:
            StoreUnavailableError: the due-item query itself failed
        """
        return self.run_with_summary(now).executed_count

    def run_with_summary(self, now: Optional[datetime] = None) -> RunSummary:
        now = to_naive_utc(now or self.clock())
        try:
            due = self.schedules.find_due(now)
        except SQLAlchemyError as e:
            raise StoreUnavailableError(f"Could not load due schedules: {type(e).__name__}: {str(e)}") from e

        summary = RunSummary(run_at=now, due_count=len(due))
        for schedule in due:
            try:
                outcome = self._process(schedule, now)
            except Exception as e:
                summary.failed_count += 1
                logger.exception(
                    f"Auto take-down failed for target {schedule.target_id} (schedule {schedule.id})"
                )
                # If this write fails too, the store is broken; let it propagate.
                self.audit.log_error(
                    schedule,
                    f"Auto take-down failed: {str(e)}",
                    _error_context(e, now),
                )
                continue

            if outcome == AuditLogAction.EXECUTED:
                summary.executed_count += 1
            else:
                summary.skipped_count += 1

        logger.info(
            f"Auto take-down run at {now.isoformat()}: due={summary.due_count} "
            f"executed={summary.executed_count} skipped={summary.skipped_count} failed={summary.failed_count}"
        )
        return summary

    def _process(self, schedule: Schedule, now: datetime) -> AuditLogAction:
        target = self.targets.load_by_id(schedule.target_id)
        if target is None:
            raise TargetNotFoundError(schedule.target_id)

        if self.targets.is_terminal(target):
            self.audit.log_skipped(
                schedule,
                f"{schedule.target_id} is already taken down, skipping",
                {"reason": "already_terminal", "run_at": now.isoformat()},
            )
            return AuditLogAction.SKIPPED

        self.targets.mark_terminal(target)
        self.audit.log_executed(
            schedule,
            f"Took down {schedule.target_id}",
            {"due_at": schedule.due_at.isoformat(), "run_at": now.isoformat()},
        )
        return AuditLogAction.EXECUTED

    def tick(self, now: Optional[datetime] = None) -> TickResult:
        """Run once and report executed and active counts."""
        executed_count = self.run(now)
        return TickResult(executed_count=executed_count, active_count=self.schedules.count_active())
