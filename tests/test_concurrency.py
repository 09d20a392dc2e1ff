"""Tests for serialized coordinator operations under concurrent requests."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from potting_api.database import Base
from potting_api.models.batch import Batch
from potting_api.schemas.batch import BatchStatus
from potting_api.services.coordinator import BatchCoordinator
from potting_api.services.errors import AlreadyActiveError

from tests.conftest import RecordingNotifier


@pytest.fixture
def session_factory(tmp_path):
    """File-backed database so every worker thread gets its own connection."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'concurrency.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


def run_in_session(session_factory, fn):
    db = session_factory()
    try:
        return fn(db)
    finally:
        db.close()


def test_concurrent_progress_loses_no_increments(session_factory):
    coordinator = BatchCoordinator(RecordingNotifier())
    batch_id = run_in_session(session_factory, lambda db: coordinator.create_batch(db, "Basil", 1, 100).id)

    def report(_):
        return run_in_session(session_factory, lambda db: coordinator.report_progress(db, batch_id, 1))

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(report, range(40)))

    batch = run_in_session(session_factory, lambda db: coordinator.get_batch(db, batch_id))
    assert batch.pots_done_count == 40
    assert batch.status == BatchStatus.ONGOING


def test_concurrent_creates_yield_one_active_batch(session_factory):
    coordinator = BatchCoordinator(RecordingNotifier())

    def attempt(i):
        try:
            run_in_session(session_factory, lambda db: coordinator.create_batch(db, f"batch {i}", 1, 5))
            return "created"
        except AlreadyActiveError:
            return "rejected"

    with ThreadPoolExecutor(max_workers=8) as pool:
        outcomes = list(pool.map(attempt, range(16)))

    assert outcomes.count("created") == 1
    assert outcomes.count("rejected") == 15

    def check(db):
        running = db.query(Batch).filter(Batch.status.in_(BatchStatus.ACTIVE)).all()
        state = coordinator.get_machine_state(db)
        assert len(running) == 1
        assert state.active_batch_id == running[0].id

    run_in_session(session_factory, check)


def test_operations_wait_for_injected_lock(session_factory):
    lock = threading.RLock()
    coordinator = BatchCoordinator(RecordingNotifier(), lock=lock)
    batch_id = run_in_session(session_factory, lambda db: coordinator.create_batch(db, "Basil", 1, 10).id)

    worker = threading.Thread(
        target=run_in_session,
        args=(session_factory, lambda db: coordinator.report_progress(db, batch_id, 3)),
    )
    with lock:
        worker.start()
        worker.join(timeout=0.2)
        assert worker.is_alive()

    worker.join(timeout=5)
    assert not worker.is_alive()
    batch = run_in_session(session_factory, lambda db: coordinator.get_batch(db, batch_id))
    assert batch.pots_done_count == 3


def test_finish_race_frees_machine_once(session_factory):
    notifier = RecordingNotifier()
    coordinator = BatchCoordinator(notifier)
    batch_id = run_in_session(session_factory, lambda db: coordinator.create_batch(db, "Basil", 1, 5).id)

    def report(_):
        try:
            run_in_session(session_factory, lambda db: coordinator.report_progress(db, batch_id, 1))
            return "ok"
        except Exception as e:
            return type(e).__name__

    with ThreadPoolExecutor(max_workers=8) as pool:
        outcomes = list(pool.map(report, range(12)))

    assert outcomes.count("ok") == 5
    assert outcomes.count("AlreadyTerminalError") == 7
    batch = run_in_session(session_factory, lambda db: coordinator.get_batch(db, batch_id))
    assert batch.status == BatchStatus.FINISHED
    assert batch.pots_done_count == 5
