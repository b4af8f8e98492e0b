"""Wire services and the executor to a database session."""

from sqlalchemy.orm import Session

from autodown.clock import Clock, utcnow
from autodown.database.audit_log_repository import AuditLogRepository
from autodown.database.product_repository import ProductRepository
from autodown.database.schedule_repository import ScheduleRepository
from autodown.engine.audit_log_service import AuditLogService
from autodown.engine.executor import AutoDownExecutor
from autodown.engine.scheduling_service import SchedulingService


def build_audit_log_service(db: Session) -> AuditLogService:
    return AuditLogService(AuditLogRepository(db))


def build_scheduling_service(db: Session, clock: Clock = utcnow) -> SchedulingService:
    return SchedulingService(
        ScheduleRepository(db),
        build_audit_log_service(db),
        targets=ProductRepository(db),
        clock=clock,
    )


def build_executor(db: Session, clock: Clock = utcnow) -> AutoDownExecutor:
    return AutoDownExecutor(
        ScheduleRepository(db),
        ProductRepository(db),
        build_audit_log_service(db),
        clock=clock,
    )
