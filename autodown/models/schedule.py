"""Schedule data model for autodown."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class Schedule(BaseModel):
    """A pending (or canceled) take-down for one target."""

    id: str = Field(..., description="Unique schedule identifier (UUID v4)")
    target_id: str = Field(..., description="ID of the target this schedule governs (unique)")
    due_at: datetime = Field(..., description="When the take-down becomes eligible (naive UTC)")
    is_active: bool = Field(True, description="True while pending; False once canceled")
    created_at: datetime = Field(..., description="Schedule creation timestamp")
    updated_at: datetime = Field(..., description="Schedule last update timestamp")
    created_by: Optional[str] = Field(None, description="Who created the schedule")
    updated_by: Optional[str] = Field(None, description="Who last changed the schedule")

    def is_due(self, now: datetime) -> bool:
        """Active and past its due time."""
        return self.is_active and self.due_at <= now

    def __str__(self) -> str:
        return f"{self.target_id} auto take-down at {self.due_at:%Y-%m-%d %H:%M:%S}"
