"""
Tests for ReconciliationWorker.
"""

from contextlib import contextmanager
from datetime import timedelta

import pytest

from app.models.worker_deployment import DeploymentStatus
from app.workers.reconciliation_worker import ReconciliationWorker


@pytest.fixture
def worker(reconciler):
    @contextmanager
    def factory():
        yield reconciler

    return ReconciliationWorker(factory, interval_seconds=1, stale_after_seconds=300)


class TestReconciliationWorker:

    def test_run_once_fails_stale_records(self, worker, deployment_repo, clock):
        deployment_repo.create_deploying("stuck", "weather", "srv-1", "meta-mcp", "code", [],
                                         created_at=clock.now - timedelta(hours=1))

        result = worker.run_once()

        assert result["reconciled"] == ["stuck"]
        assert worker.last_run["reconciled"] == ["stuck"]
        assert worker.last_run["timestamp"] is not None
        assert deployment_repo.get_by_id("stuck").status == DeploymentStatus.FAILED

    def test_run_once_with_nothing_to_do(self, worker):
        result = worker.run_once()

        assert result == {"success": True, "reconciled": [], "count": 0}
        assert worker.last_run["error"] is None

    def test_not_healthy_before_start(self, worker):
        assert worker.running is False
        assert worker.is_healthy() is False

    def test_stop(self, worker):
        worker.running = True

        worker.stop()

        assert worker.running is False
