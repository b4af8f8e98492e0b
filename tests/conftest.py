"""Pytest fixtures and configuration for autodown tests."""

import pytest
import uuid
from datetime import datetime, timedelta
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from autodown.database.database import Base
from autodown.database import models  # noqa: F401
from autodown.database.audit_log_repository import AuditLogRepository
from autodown.database.product_repository import ProductRepository
from autodown.database.schedule_repository import ScheduleRepository
from autodown.engine.audit_log_service import AuditLogService
from autodown.engine.executor import AutoDownExecutor
from autodown.engine.scheduling_service import SchedulingService
from autodown.models.product import Product
from autodown.models.schedule import Schedule


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_engine():
    """In-memory SQLite engine, fresh for each test, with foreign keys enforced."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragmas(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def session_factory(db_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=db_engine)


@pytest.fixture(scope="function")
def db_session(session_factory):
    """Create a database session for testing."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def now():
    """Fixed 'current time' for deterministic runs."""
    return datetime(2026, 3, 1, 12, 0, 0)


@pytest.fixture
def clock(now):
    return lambda: now


@pytest.fixture
def schedule_repository(db_session: Session):
    return ScheduleRepository(db_session)


@pytest.fixture
def audit_log_repository(db_session: Session):
    return AuditLogRepository(db_session)


@pytest.fixture
def product_repository(db_session: Session):
    return ProductRepository(db_session)


@pytest.fixture
def audit_log_service(audit_log_repository):
    return AuditLogService(audit_log_repository)


@pytest.fixture
def scheduling_service(schedule_repository, audit_log_service, product_repository, clock):
    return SchedulingService(schedule_repository, audit_log_service, targets=product_repository, clock=clock)


@pytest.fixture
def executor(schedule_repository, product_repository, audit_log_service, clock):
    return AutoDownExecutor(schedule_repository, product_repository, audit_log_service, clock=clock)


@pytest.fixture
def make_product(product_repository, now):
    """Create and persist a product; pass is_valid=False for one already taken down."""
    def _make(name: str = "Test Product", is_valid: bool = True, product_id: str = None) -> Product:
        return product_repository.create(Product(
            id=product_id or str(uuid.uuid4()),
            name=name,
            is_valid=is_valid,
            created_at=now - timedelta(days=10),
            updated_at=now - timedelta(days=10),
        ))
    return _make


@pytest.fixture
def make_schedule(schedule_repository, now):
    """Persist a schedule row directly, bypassing the service (no audit entry)."""
    def _make(
        target_id: str,
        due_at: datetime = None,
        is_active: bool = True,
        updated_at: datetime = None,
    ) -> Schedule:
        return schedule_repository.upsert(Schedule(
            id=str(uuid.uuid4()),
            target_id=target_id,
            due_at=due_at or now - timedelta(hours=1),
            is_active=is_active,
            created_at=updated_at or now - timedelta(days=1),
            updated_at=updated_at or now - timedelta(days=1),
            created_by="test",
            updated_by="test",
        ))
    return _make


@pytest.fixture
def test_client(db_session: Session):
    """Create a FastAPI test client with overridden database dependency."""
    from autodown.api.app import app
    from autodown.database.database import get_db

    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()
