"""Capability interface for the subsystem that owns take-down targets.

The engine never touches the target subsystem's tables directly; it only
resolves targets, checks whether they are already down, and asks for them to
be taken down.
"""

from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class TargetCatalog(Protocol):
    """Resolve and take down targets by identity."""

    def load_by_id(self, target_id: str) -> Optional[Any]:
        """Return the target, or None if it no longer exists."""
        ...

    def is_terminal(self, target: Any) -> bool:
        """Whether the target is already taken down."""
        ...

    def mark_terminal(self, target: Any) -> Any:
        """Take the target down, persist it, and return the updated target."""
        ...
