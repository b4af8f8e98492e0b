"""SQLAlchemy database models for autodown."""

import uuid
from typing import Union, TypeVar, Type
from sqlalchemy import Column, String, Text, Boolean, DateTime, JSON, ForeignKey, Index

from autodown.clock import utcnow
from autodown.database.database import Base
from autodown.models.audit_log import AuditLogAction

T = TypeVar('T')


def enum_to_value(enum_obj: Union[str, T]) -> str:
    """Convert enum to string value (handles both enum and string).

    Args:
        enum_obj: Enum instance or string value

    Returns:
        String value of the enum, or the string itself if already a string
    """
    if hasattr(enum_obj, 'value'):
        return enum_obj.value
    return str(enum_obj)


def value_to_enum(value: str, enum_class: Type[T], default: T) -> T:
    """Convert string to enum with fallback to default.

    Args:
        value: String value to convert
        enum_class: Enum class to convert to
        default: Default enum value if conversion fails

    Returns:
        Enum instance, or default if conversion fails
    """
    if not value:
        return default
    try:
        return enum_class(value.lower())
    except (ValueError, AttributeError):
        return default


class ScheduleDB(Base):
    """Database model for Schedule."""

    __tablename__ = "schedules"
    __table_args__ = (
        # Due-item selection filters on both columns.
        Index("ix_schedules_active_due_at", "is_active", "due_at"),
    )

    # Primary key
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    # Target identity; lives in another subsystem, so no FK.
    target_id = Column(String, nullable=False, unique=True)

    due_at = Column(DateTime, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    # Provenance
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)
    created_by = Column(String, nullable=True)
    updated_by = Column(String, nullable=True)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from autodown.models.schedule import Schedule
        return Schedule(
            id=self.id,
            target_id=self.target_id,
            due_at=self.due_at,
            is_active=self.is_active,
            created_at=self.created_at,
            updated_at=self.updated_at,
            created_by=self.created_by,
            updated_by=self.updated_by,
        )

    @classmethod
    def from_pydantic(cls, schedule):
        """Create database model from Pydantic model."""
        return cls(
            id=schedule.id,
            target_id=schedule.target_id,
            due_at=schedule.due_at,
            is_active=schedule.is_active,
            created_at=schedule.created_at,
            updated_at=schedule.updated_at,
            created_by=schedule.created_by,
            updated_by=schedule.updated_by,
        )


class AuditLogDB(Base):
    """Database model for AuditLogEntry. Rows are insert-only."""

    __tablename__ = "audit_log"

    # ULID; sorts by creation time.
    id = Column(String, primary_key=True)

    # Denormalized so history survives independently of the target subsystem.
    target_id = Column(String, nullable=False, index=True)
    schedule_id = Column(String, ForeignKey("schedules.id", ondelete="CASCADE"), nullable=False, index=True)

    action = Column(String(20), nullable=False, index=True)
    description = Column(Text, nullable=True)
    context = Column(JSON, nullable=True)

    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from autodown.models.audit_log import AuditLogEntry
        return AuditLogEntry(
            id=self.id,
            target_id=self.target_id,
            schedule_id=self.schedule_id,
            action=value_to_enum(self.action, AuditLogAction, AuditLogAction.ERROR),
            description=self.description,
            context=self.context,
            created_at=self.created_at,
        )


class ProductDB(Base):
    """Database model for Product (take-down target)."""

    __tablename__ = "products"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    is_valid = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from autodown.models.product import Product
        return Product(
            id=self.id,
            name=self.name,
            is_valid=self.is_valid,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_pydantic(cls, product):
        """Create database model from Pydantic model."""
        return cls(
            id=product.id,
            name=product.name,
            is_valid=product.is_valid,
            created_at=product.created_at,
            updated_at=product.updated_at,
        )
