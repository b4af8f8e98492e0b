"""Integration tests for the admin API endpoints."""

from datetime import timedelta
from unittest.mock import patch

from autodown.clock import utcnow
from autodown.errors import ScheduleConflictError, StoreUnavailableError


class TestScheduleEndpoints:
    """Test schedule configure/get/cancel endpoints."""

    def test_configure_and_get(self, test_client, make_product):
        product = make_product()
        due_at = (utcnow() + timedelta(days=1)).replace(microsecond=0)

        response = test_client.put(
            f"/schedules/{product.id}",
            json={"due_at": due_at.isoformat(), "actor": "alice"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["target_id"] == product.id
        assert data["is_active"] is True
        assert data["created_by"] == "alice"

        response = test_client.get(f"/schedules/{product.id}")
        assert response.status_code == 200
        assert response.json()["id"] == data["id"]

    def test_configure_unknown_target_404(self, test_client):
        response = test_client.put("/schedules/missing", json={"due_at": utcnow().isoformat()})
        assert response.status_code == 404

    def test_configure_conflict_409(self, test_client, make_product):
        product = make_product()
        with patch(
            "autodown.engine.scheduling_service.SchedulingService.configure",
            side_effect=ScheduleConflictError(product.id),
        ):
            response = test_client.put(f"/schedules/{product.id}", json={"due_at": utcnow().isoformat()})
        assert response.status_code == 409

    def test_get_missing_schedule_404(self, test_client):
        assert test_client.get("/schedules/nothing").status_code == 404

    def test_cancel(self, test_client, make_product):
        product = make_product()
        test_client.put(f"/schedules/{product.id}", json={"due_at": utcnow().isoformat()})

        first = test_client.delete(f"/schedules/{product.id}", params={"actor": "bob"})
        second = test_client.delete(f"/schedules/{product.id}")

        assert first.json() == {"canceled": True}
        assert second.json() == {"canceled": False}
        assert test_client.get(f"/schedules/{product.id}").json()["is_active"] is False


class TestAuditLogEndpoints:
    """Test audit listing endpoints."""

    def test_list_by_target_and_counts(self, test_client, make_product):
        product = make_product()
        test_client.put(f"/schedules/{product.id}", json={"due_at": utcnow().isoformat()})
        test_client.delete(f"/schedules/{product.id}")

        response = test_client.get("/audit-logs", params={"target_id": product.id})
        assert response.status_code == 200
        entries = response.json()
        assert {e["action"] for e in entries} == {"scheduled", "canceled"}
        assert {e["action_label"] for e in entries} == {"Scheduled", "Canceled"}

        counts = test_client.get("/audit-logs/counts").json()
        assert counts == {"scheduled": 1, "canceled": 1}

    def test_filter_by_action(self, test_client, make_product):
        product = make_product()
        test_client.put(f"/schedules/{product.id}", json={"due_at": utcnow().isoformat()})

        entries = test_client.get("/audit-logs", params={"action": "canceled"}).json()
        assert entries == []

    def test_filters_combine(self, test_client, make_product):
        product = make_product()
        other = make_product("Other")
        for target in (product, other):
            test_client.put(f"/schedules/{target.id}", json={"due_at": utcnow().isoformat()})
        test_client.delete(f"/schedules/{other.id}")

        params = {"target_id": product.id, "action": "canceled"}
        assert test_client.get("/audit-logs", params=params).json() == []

        params = {"target_id": other.id, "action": "canceled"}
        entries = test_client.get("/audit-logs", params=params).json()
        assert [(e["target_id"], e["action"]) for e in entries] == [(other.id, "canceled")]

    def test_invalid_action_rejected(self, test_client):
        assert test_client.get("/audit-logs", params={"action": "exploded"}).status_code == 422

    def test_actions(self, test_client):
        actions = test_client.get("/audit-logs/actions").json()
        assert actions["skipped"] == "Skipped"
        assert len(actions) == 5


class TestTickEndpoint:
    """Test manual tick."""

    def test_tick(self, test_client, make_product, product_repository):
        product = make_product()
        test_client.put(
            f"/schedules/{product.id}",
            json={"due_at": (utcnow() - timedelta(hours=1)).isoformat()},
        )

        response = test_client.post("/ticks")

        assert response.status_code == 200
        assert response.json() == {"executed_count": 1, "active_count": 1}
        assert product_repository.get(product.id).is_valid is False

    def test_tick_store_unavailable_503(self, test_client):
        with patch(
            "autodown.engine.executor.AutoDownExecutor.tick",
            side_effect=StoreUnavailableError("db down"),
        ):
            response = test_client.post("/ticks")
        assert response.status_code == 503


def test_health(test_client):
    assert test_client.get("/health").json() == {"status": "ok"}
