"""Tests for ProductRepository as the take-down target catalog."""

import pytest
from datetime import datetime, timedelta
from unittest.mock import MagicMock
from sqlalchemy.exc import OperationalError

from autodown.database.product_repository import ProductRepository
from autodown.engine.targets import TargetCatalog
from autodown.errors import TargetNotFoundError
from autodown.models.product import Product
from autodown.models.schedule import Schedule


def test_implements_target_catalog(product_repository):
    assert isinstance(product_repository, TargetCatalog)


def test_load_by_id(product_repository, make_product):
    product = make_product("Widget")
    loaded = product_repository.load_by_id(product.id)
    assert loaded.name == "Widget"
    assert product_repository.load_by_id("missing") is None


def test_mark_terminal(product_repository, make_product):
    product = make_product()
    assert product_repository.is_terminal(product) is False

    updated = product_repository.mark_terminal(product)

    assert updated.is_valid is False
    assert product_repository.is_terminal(updated) is True
    assert product_repository.get(product.id).is_valid is False


def test_mark_terminal_missing_product_raises(product_repository, now):
    ghost = Product(id="ghost", name="Ghost", created_at=now, updated_at=now)
    with pytest.raises(TargetNotFoundError):
        product_repository.mark_terminal(ghost)


def test_schedule_is_due():
    now = datetime(2026, 1, 1, 12, 0)
    schedule = Schedule(id="s", target_id="p", due_at=now - timedelta(seconds=1), created_at=now, updated_at=now)
    assert schedule.is_due(now) is True
    assert schedule.model_copy(update={"is_active": False}).is_due(now) is False
    assert schedule.model_copy(update={"due_at": now + timedelta(seconds=1)}).is_due(now) is False


def test_failed_read_rolls_back_session():
    db = MagicMock()
    db.query.side_effect = OperationalError("SELECT", {}, Exception("server closed the connection"))

    with pytest.raises(OperationalError):
        ProductRepository(db).load_by_id("p-1")
    db.rollback.assert_called_once()


def test_models_without_enum_fields_keep_default_config():
    assert "use_enum_values" not in Schedule.model_config
    assert "use_enum_values" not in Product.model_config
