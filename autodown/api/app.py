"""FastAPI admin application for autodown.

Create/update/cancel schedules and browse the audit log. The tick endpoint
exists for manual runs; production ticks come from the `autodown tick`
command.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from fastapi import Depends, FastAPI, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from autodown.database.database import get_db
from autodown.engine.factory import build_audit_log_service, build_executor, build_scheduling_service
from autodown.errors import ScheduleConflictError, StoreUnavailableError, TargetNotFoundError
from autodown.models.audit_log import AuditLogAction, AuditLogEntry
from autodown.models.constants import DEFAULT_AUDIT_QUERY_LIMIT, MAX_AUDIT_QUERY_LIMIT
from autodown.models.schedule import Schedule

# Initialize FastAPI app
app = FastAPI(
    title="autodown API",
    description="Schedule product listings to be taken down and review what happened",
    version="0.1.0"
)


# Request/response models
class ConfigureScheduleRequest(BaseModel):
    """Body for setting a target's take-down time."""
    due_at: datetime = Field(..., description="When to take the target down (UTC if naive)")
    actor: Optional[str] = Field(None, description="Operator making the change")


class CancelResponse(BaseModel):
    """Response for cancel."""
    canceled: bool


class AuditLogEntryResponse(BaseModel):
    """Audit entry as shown to operators."""
    id: str
    target_id: str
    schedule_id: str
    action: AuditLogAction
    action_label: str
    description: Optional[str]
    context: Optional[Dict[str, Any]]
    created_at: datetime

    @classmethod
    def from_entry(cls, entry: AuditLogEntry) -> "AuditLogEntryResponse":
        return cls(**entry.model_dump(), action_label=entry.action.label)


class TickResponse(BaseModel):
    """Response for a manual tick."""
    executed_count: int
    active_count: int


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/schedules/{target_id}", response_model=Schedule)
def get_schedule(target_id: str, db: Session = Depends(get_db)):
    """Get the schedule for a target."""
    schedule = build_scheduling_service(db).get_schedule(target_id)
    if schedule is None:
        raise HTTPException(status_code=404, detail=f"No schedule for target {target_id}")
    return schedule


@app.put("/schedules/{target_id}", response_model=Schedule)
def configure_schedule(target_id: str, body: ConfigureScheduleRequest, db: Session = Depends(get_db)):
    """Create or update the take-down time for a target."""
    try:
        return build_scheduling_service(db).configure(target_id, body.due_at, actor=body.actor)
    except TargetNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ScheduleConflictError as e:
        raise HTTPException(status_code=409, detail=f"{str(e)}; retry the request")


@app.delete("/schedules/{target_id}", response_model=CancelResponse)
def cancel_schedule(target_id: str, actor: Optional[str] = None, db: Session = Depends(get_db)):
    """Cancel a pending take-down. `canceled` is false if nothing was pending."""
    return CancelResponse(canceled=build_scheduling_service(db).cancel(target_id, actor=actor))


@app.get("/audit-logs", response_model=List[AuditLogEntryResponse])
def list_audit_logs(
    target_id: Optional[str] = None,
    schedule_id: Optional[str] = None,
    action: Optional[AuditLogAction] = None,
    limit: int = Query(DEFAULT_AUDIT_QUERY_LIMIT, ge=1, le=MAX_AUDIT_QUERY_LIMIT),
    db: Session = Depends(get_db),
):
    """List audit entries matching all given filters, newest first."""
    entries = build_audit_log_service(db).search(
        target_id=target_id,
        schedule_id=schedule_id,
        action=action,
        limit=limit,
    )
    return [AuditLogEntryResponse.from_entry(entry) for entry in entries]


@app.get("/audit-logs/counts", response_model=Dict[str, int])
def audit_log_counts(db: Session = Depends(get_db)):
    """Number of audit entries per action (absent actions omitted)."""
    counts = build_audit_log_service(db).counts_by_action()
    return {action.value: count for action, count in counts.items()}


@app.get("/audit-logs/actions", response_model=Dict[str, str])
def audit_log_actions():
    """Action values and their display labels."""
    return AuditLogAction.items()


@app.post("/ticks", response_model=TickResponse)
def run_tick(db: Session = Depends(get_db)):
    """Run one take-down tick now."""
    try:
        result = build_executor(db).tick()
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return TickResponse(executed_count=result.executed_count, active_count=result.active_count)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
