"""Unit tests for the retention Celery tasks and beat schedule."""

from datetime import timedelta

import pytest

import retention.tasks as tasks
from conftest import UnavailableRequestStore
from retention.service import RetentionService


@pytest.fixture
def use_service(monkeypatch):
    def install(service):
        monkeypatch.setattr(tasks, "_build_service", lambda: service)
    return install


def test_full_sweep_task_returns_summary(use_service, retention_service, seed):
    use_service(retention_service)
    seed.request(age=timedelta(days=45))
    seed.notification(age=timedelta(days=8))

    result = tasks.retention_full_sweep_task()

    assert result["status"] == "completed"
    assert result["totalDeleted"] == 2
    assert result["requests"]["deletedCount"] == 1
    assert result["notifications"]["deletedCount"] == 1


def test_full_sweep_task_reports_errors_without_raising(
    use_service, session_factory, notification_store, image_store, clock
):
    use_service(RetentionService(
        UnavailableRequestStore(session_factory), notification_store, image_store, clock=clock
    ))

    result = tasks.retention_full_sweep_task()

    assert result["status"] == "completed_with_errors"
    assert result["requests"]["success"] is False


def test_full_sweep_task_survives_construction_failure(monkeypatch):
    def broken():
        raise RuntimeError("no database")
    monkeypatch.setattr(tasks, "_build_service", broken)

    result = tasks.retention_full_sweep_task()

    assert result == {"status": "failed", "error": "no database", "totalDeleted": 0}


def test_request_sweep_task_honours_days(use_service, retention_service, seed):
    use_service(retention_service)
    seed.request(age=timedelta(days=10))

    assert tasks.retention_sweep_requests_task(30)["deletedCount"] == 0
    assert tasks.retention_sweep_requests_task(5)["deletedCount"] == 1


def test_notification_sweep_task(use_service, retention_service, seed):
    use_service(retention_service)
    seed.notification(age=timedelta(days=3))

    result = tasks.retention_sweep_notifications_task(1)

    assert result["success"] is True
    assert result["deletedCount"] == 1


def test_beat_schedule_runs_daily_at_two():
    from workers.celery_app import celery_app

    entry = celery_app.conf.beat_schedule["retention-full-sweep-daily"]

    assert entry["task"] == "retention.full_sweep"
    assert entry["schedule"].hour == {2}
    assert entry["schedule"].minute == {0}
