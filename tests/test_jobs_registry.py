"""Tests for job registry state transitions, deletion, eviction and mirroring."""

from __future__ import annotations

import threading
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone

import pytest

from procgate.db import BackgroundWriter
from procgate.domain import AsyncJob, JobStatus
from procgate.jobs import JobRegistry, JobTransitionError, JobUpdate


class _ManualClock:
    """Deterministic clock advanced explicitly by tests."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


class _RecordingJobStore:
    """Job store double recording mirror writes in arrival order."""

    def __init__(self, stored_jobs: list[AsyncJob] | None = None):
        self.calls: list[tuple[str, object]] = []
        self.stored_jobs = stored_jobs or []
        self.insert_release = threading.Event()
        self.insert_release.set()
        self.update_recorded = threading.Event()
        self._lock = threading.Lock()

    def db_job_insert(self, job: AsyncJob) -> None:
        self.insert_release.wait(timeout=5)
        with self._lock:
            self.calls.append(("insert", job))

    def db_job_update(self, job: AsyncJob) -> None:
        with self._lock:
            self.calls.append(("update", job))
        self.update_recorded.set()

    def db_job_delete_many(self, job_ids: Iterable[str]) -> int:
        with self._lock:
            self.calls.append(("delete", tuple(job_ids)))
        return 0

    def db_job_list_started_since(self, started_after: datetime) -> list[AsyncJob]:
        return [job for job in self.stored_jobs if job.start_time >= started_after]


class _FailingJobStore(_RecordingJobStore):
    """Job store double failing every write."""

    def db_job_insert(self, job: AsyncJob) -> None:
        raise RuntimeError("store unavailable")

    def db_job_list_started_since(self, started_after: datetime) -> list[AsyncJob]:
        raise RuntimeError("store unavailable")


def _registry_build(clock: _ManualClock | None = None) -> JobRegistry:
    return JobRegistry(clock=clock or _ManualClock(datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)))


def test_jobs_registry_create_returns_pending_job_with_hex_id() -> None:
    registry = _registry_build()

    job = registry.job_registry_create("calc_total", {"name": "calc_total"})

    assert job.status is JobStatus.PENDING
    assert job.progress == 0
    assert len(job.job_id) == 32
    int(job.job_id, 16)
    assert registry.job_registry_get(job.job_id) == job


def test_jobs_registry_progress_is_clamped_non_decreasing() -> None:
    registry = _registry_build()
    job = registry.job_registry_create("p", None)

    registry.job_registry_update(job.job_id, JobUpdate(status=JobStatus.RUNNING, progress=50))
    lowered_job = registry.job_registry_update(job.job_id, JobUpdate(progress=30))
    capped_job = registry.job_registry_update(job.job_id, JobUpdate(progress=150))

    assert lowered_job.progress == 50
    assert capped_job.progress == 100
    assert capped_job.status is JobStatus.RUNNING


def test_jobs_registry_terminal_transition_stamps_end_time_and_duration() -> None:
    """Stamp end time, duration and full progress on completion.

    Returns:
        None: Assertions validate terminal snapshot fields.

    Raises:
        AssertionError: Raised when terminal stamping differs.
    """

    clock = _ManualClock(datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc))
    registry = _registry_build(clock)
    job = registry.job_registry_create("p", None)
    registry.job_registry_update(job.job_id, JobUpdate(status=JobStatus.RUNNING, progress=10))
    clock.advance(timedelta(seconds=3))

    finished_job = registry.job_registry_update(
        job.job_id,
        JobUpdate(status=JobStatus.COMPLETED, result={"total": 1.0}, error="ignored"),
    )

    assert finished_job.status is JobStatus.COMPLETED
    assert finished_job.progress == 100
    assert finished_job.end_time == clock.now
    assert finished_job.duration == "0:00:03"
    assert finished_job.result == {"total": 1.0}
    assert finished_job.error is None


def test_jobs_registry_terminal_jobs_are_never_mutated() -> None:
    registry = _registry_build()
    job = registry.job_registry_create("p", None)
    registry.job_registry_update(job.job_id, JobUpdate(status=JobStatus.RUNNING))
    failed_job = registry.job_registry_update(job.job_id, JobUpdate(status=JobStatus.FAILED, error="boom"))

    after_job = registry.job_registry_update(job.job_id, JobUpdate(status=JobStatus.COMPLETED, progress=10))

    assert after_job == failed_job
    assert registry.job_registry_get(job.job_id).status is JobStatus.FAILED


def test_jobs_registry_rejects_backward_transition() -> None:
    registry = _registry_build()
    job = registry.job_registry_create("p", None)
    registry.job_registry_update(job.job_id, JobUpdate(status=JobStatus.RUNNING))

    with pytest.raises(JobTransitionError):
        registry.job_registry_update(job.job_id, JobUpdate(status=JobStatus.PENDING))


def test_jobs_registry_rejects_completion_from_pending() -> None:
    registry = _registry_build()
    job = registry.job_registry_create("p", None)

    with pytest.raises(JobTransitionError):
        registry.job_registry_update(job.job_id, JobUpdate(status=JobStatus.COMPLETED))


def test_jobs_registry_update_of_unknown_job_returns_none() -> None:
    assert _registry_build().job_registry_update("missing", JobUpdate(progress=10)) is None


def test_jobs_registry_list_is_newest_first() -> None:
    clock = _ManualClock(datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc))
    registry = _registry_build(clock)
    first_job = registry.job_registry_create("first", None)
    clock.advance(timedelta(seconds=1))
    second_job = registry.job_registry_create("second", None)

    assert [job.job_id for job in registry.job_registry_list()] == [second_job.job_id, first_job.job_id]


def test_jobs_registry_delete_single_job() -> None:
    registry = _registry_build()
    job = registry.job_registry_create("p", None)

    assert registry.job_registry_delete(job.job_id) is True
    assert registry.job_registry_delete(job.job_id) is False
    assert registry.job_registry_get(job.job_id) is None


def test_jobs_registry_delete_matching_requires_a_filter() -> None:
    registry = _registry_build()
    registry.job_registry_create("p", None)

    with pytest.raises(ValueError):
        registry.job_registry_delete_matching()
    with pytest.raises(ValueError):
        registry.job_registry_delete_matching(statuses=[" ", ""])
    with pytest.raises(ValueError):
        registry.job_registry_delete_matching(older_than_days=0)

    assert len(registry.job_registry_list()) == 1


def test_jobs_registry_delete_matching_by_status_ignores_age() -> None:
    """Delete by status set, matched case-insensitively, regardless of age.

    Returns:
        None: Assertions validate remaining jobs.

    Raises:
        AssertionError: Raised when deletion differs.
    """

    registry = _registry_build()
    pending_job = registry.job_registry_create("pending", None)
    failed_job = registry.job_registry_create("failed", None)
    registry.job_registry_update(failed_job.job_id, JobUpdate(status=JobStatus.FAILED, error="boom"))

    deleted_count = registry.job_registry_delete_matching(statuses=["FAILED", "completed"], older_than_days=365)

    assert deleted_count == 1
    assert [job.job_id for job in registry.job_registry_list()] == [pending_job.job_id]


def test_jobs_registry_delete_matching_by_age_removes_only_old_jobs() -> None:
    clock = _ManualClock(datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc))
    registry = _registry_build(clock)
    old_job = registry.job_registry_create("old", None)
    clock.advance(timedelta(days=15))
    recent_job = registry.job_registry_create("recent", None)
    clock.advance(timedelta(days=3))

    deleted_count = registry.job_registry_delete_matching(older_than_days=7)

    assert deleted_count == 1
    assert registry.job_registry_get(old_job.job_id) is None
    assert registry.job_registry_get(recent_job.job_id) is not None


def test_jobs_registry_evict_expired_keeps_non_terminal_jobs() -> None:
    """Evict only terminal jobs whose end time is past retention.

    Returns:
        None: Assertions validate eviction.

    Raises:
        AssertionError: Raised when eviction differs.
    """

    clock = _ManualClock(datetime(2026, 10, 18, 0, 0, tzinfo=timezone.utc))
    registry = _registry_build(clock)
    running_job = registry.job_registry_create("running", None)
    registry.job_registry_update(running_job.job_id, JobUpdate(status=JobStatus.RUNNING))
    done_job = registry.job_registry_create("done", None)
    registry.job_registry_update(done_job.job_id, JobUpdate(status=JobStatus.FAILED, error="x"))
    clock.advance(timedelta(hours=23))
    fresh_job = registry.job_registry_create("fresh", None)
    registry.job_registry_update(fresh_job.job_id, JobUpdate(status=JobStatus.FAILED, error="y"))
    clock.advance(timedelta(hours=2))

    evicted_count = registry.job_registry_evict_expired()

    assert evicted_count == 1
    assert registry.job_registry_get(done_job.job_id) is None
    assert registry.job_registry_get(running_job.job_id) is not None
    assert registry.job_registry_get(fresh_job.job_id) is not None


def test_jobs_registry_rehydrate_loads_recent_jobs_only() -> None:
    now = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)
    recent_job = AsyncJob("r" * 32, JobStatus.COMPLETED, "p", None, now - timedelta(hours=1), progress=100)
    old_job = AsyncJob("o" * 32, JobStatus.COMPLETED, "p", None, now - timedelta(hours=25), progress=100)
    store = _RecordingJobStore(stored_jobs=[recent_job, old_job])
    writer = BackgroundWriter(max_workers=1)
    registry = JobRegistry(store=store, background_writer=writer, clock=_ManualClock(now))

    loaded_count = registry.job_registry_rehydrate()
    writer.writer_shutdown(wait=True)

    assert loaded_count == 1
    assert registry.job_registry_get(recent_job.job_id) == recent_job
    assert registry.job_registry_get(old_job.job_id) is None


def test_jobs_registry_mirror_failures_do_not_roll_back_memory() -> None:
    writer = BackgroundWriter(max_workers=1)
    registry = JobRegistry(store=_FailingJobStore(), background_writer=writer)

    job = registry.job_registry_create("p", None)
    writer.writer_shutdown(wait=True)

    assert registry.job_registry_get(job.job_id) == job
    assert registry.job_registry_rehydrate() == 0


def test_jobs_registry_mirror_writes_may_land_out_of_order() -> None:
    """Document that a later update can reach the store before the insert.

    The in-memory snapshot stays authoritative while the store ends up with
    the stale pending row written last.

    Returns:
        None: Assertions validate the accepted ordering gap.

    Raises:
        AssertionError: Raised when ordering behavior differs.
    """

    store = _RecordingJobStore()
    store.insert_release.clear()
    writer = BackgroundWriter(max_workers=2)
    registry = JobRegistry(store=store, background_writer=writer)

    job = registry.job_registry_create("p", None)
    registry.job_registry_update(job.job_id, JobUpdate(status=JobStatus.RUNNING, progress=10))
    assert store.update_recorded.wait(timeout=5)
    store.insert_release.set()
    writer.writer_shutdown(wait=True)

    assert [operation for operation, _ in store.calls] == ["update", "insert"]
    last_written_job = store.calls[-1][1]
    assert last_written_job.status is JobStatus.PENDING
    assert registry.job_registry_get(job.job_id).status is JobStatus.RUNNING


def test_jobs_registry_requires_writer_with_store() -> None:
    with pytest.raises(ValueError):
        JobRegistry(store=_RecordingJobStore())
