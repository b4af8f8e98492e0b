"""Audit log data model for autodown."""

from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field


class AuditLogAction(str, Enum):
    """What happened to a schedule. Closed set."""
    SCHEDULED = "scheduled"
    EXECUTED = "executed"
    SKIPPED = "skipped"
    ERROR = "error"
    CANCELED = "canceled"

    @property
    def label(self) -> str:
        """Human-readable label for admin listings."""
        return _ACTION_LABELS[self]

    @classmethod
    def items(cls) -> Dict[str, str]:
        """Map of stored value to display label, in declaration order."""
        return {action.value: action.label for action in cls}


_ACTION_LABELS = {
    AuditLogAction.SCHEDULED: "Scheduled",
    AuditLogAction.EXECUTED: "Executed",
    AuditLogAction.SKIPPED: "Skipped",
    AuditLogAction.ERROR: "Error",
    AuditLogAction.CANCELED: "Canceled",
}


class AuditLogEntry(BaseModel):
    """Immutable record of one action taken (or not taken) against a schedule."""

    id: str = Field(..., description="Time-sortable entry identifier (ULID)")
    target_id: str = Field(..., description="Denormalized ID of the governed target")
    schedule_id: str = Field(..., description="ID of the owning schedule")
    action: AuditLogAction = Field(..., description="Type of action recorded")
    description: Optional[str] = Field(None, description="Human-readable summary")
    context: Optional[Dict[str, Any]] = Field(None, description="Action-specific structured detail")
    created_at: datetime = Field(..., description="Write timestamp")

    def __str__(self) -> str:
        return f"{self.target_id} {self.action.label}"
