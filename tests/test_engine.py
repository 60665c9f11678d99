from __future__ import annotations

import threading
import time

from geolocate.core.engine import Scheduler, TaskEngine


def test_jobs_run_on_worker_threads() -> None:
    engine = TaskEngine(workers=2)
    ran: list[str] = []
    lock = threading.Lock()

    def job() -> None:
        with lock:
            ran.append(threading.current_thread().name)

    for _ in range(10):
        engine.submit(job)
    assert engine.wait_idle(5)
    assert len(ran) == 10
    assert all(name.startswith("background-tasks-") for name in ran)
    engine.shutdown()
    assert engine.join(5)


def test_failing_job_is_reported_and_worker_survives() -> None:
    failures = []
    engine = TaskEngine(workers=1, on_error=lambda job, exc: failures.append(exc))

    def bad() -> None:
        raise RuntimeError("bad job")

    ran = threading.Event()
    engine.submit(bad)
    engine.submit(ran.set)
    assert ran.wait(5)
    assert engine.wait_idle(5)
    assert len(failures) == 1
    assert str(failures[0]) == "bad job"
    engine.shutdown()


def test_two_workers_run_concurrently() -> None:
    engine = TaskEngine(workers=2)
    barrier = threading.Barrier(2, timeout=5)
    passed = []

    def job() -> None:
        barrier.wait()
        passed.append(True)

    engine.submit(job)
    engine.submit(job)
    assert engine.wait_idle(5)
    assert passed == [True, True]
    engine.shutdown()


def test_shutdown_discards_queued_jobs() -> None:
    engine = TaskEngine(workers=1)
    gate = threading.Event()
    started = threading.Event()
    ran = []

    def blocker() -> None:
        started.set()
        gate.wait(5)

    engine.submit(blocker)
    assert started.wait(5)
    for i in range(5):
        engine.submit(lambda i=i: ran.append(i))
    engine.shutdown()
    gate.set()
    assert engine.join(5)
    assert ran == []

    engine.submit(lambda: ran.append("late"))
    assert ran == []


def test_scheduler_runs_in_due_order() -> None:
    scheduler = Scheduler()
    order = []
    done = threading.Event()
    scheduler.schedule(0.15, lambda: (order.append("late"), done.set()))
    scheduler.schedule(0.05, lambda: order.append("early"))
    assert done.wait(5)
    assert order == ["early", "late"]
    scheduler.shutdown()


def test_scheduler_shutdown_drops_pending() -> None:
    scheduler = Scheduler()
    ran = []
    scheduler.schedule(0.2, lambda: ran.append(1))
    scheduler.shutdown()
    time.sleep(0.3)
    scheduler.schedule(0.0, lambda: ran.append(2))
    time.sleep(0.05)
    assert ran == []
