"""Exception taxonomy for autodown.

Per-item faults (a target that no longer resolves) are contained by the
executor and converted to audit entries. Store faults propagate to the caller
of a tick.
"""

from typing import Optional


class AutoDownError(Exception):
    """Base class for autodown errors."""

    retryable = False


class TargetNotFoundError(AutoDownError):
    """The schedule's target identity no longer resolves."""

    def __init__(self, target_id: Optional[str]):
        self.target_id = target_id
        super().__init__(f"Target {target_id} not found")


class ScheduleConflictError(AutoDownError):
    """A second schedule was inserted for a target that already has one.

    The service checks for an existing schedule first, so this means two writers
    raced on the same target. Retrying the configure call converges.
    """

    retryable = True

    def __init__(self, target_id: str):
        self.target_id = target_id
        super().__init__(f"Schedule for target {target_id} already exists")


class StoreUnavailableError(AutoDownError):
    """The schedule store could not answer the due-item query."""

    retryable = True
