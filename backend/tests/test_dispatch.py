from __future__ import annotations

import threading
from concurrent.futures import TimeoutError as FutureTimeout

import pytest

from render.dispatch import DispatcherClosed, UiDispatcher


def test_work_runs_in_submission_order_on_one_thread():
    d = UiDispatcher()
    seen: list[tuple[int, str]] = []
    try:
        futs = [
            d.submit(lambda i=i: seen.append((i, threading.current_thread().name)))
            for i in range(50)
        ]
        for f in futs:
            f.result(timeout=2.0)
    finally:
        d.stop()

    assert [i for i, _ in seen] == list(range(50))
    assert {name for _, name in seen} == {"ui-dispatch"}


def test_call_returns_result_and_propagates_errors():
    d = UiDispatcher()
    try:
        assert d.call(lambda a, b: a + b, 2, 3) == 5

        def boom():
            raise ValueError("nope")

        with pytest.raises(ValueError):
            d.call(boom)
        # Worker survives a failing task.
        assert d.call(lambda: "still here") == "still here"
    finally:
        d.stop()


def test_call_from_dispatch_thread_runs_inline():
    d = UiDispatcher()
    try:
        assert d.call(lambda: d.call(lambda: d.is_dispatch_thread())) is True
        assert d.is_dispatch_thread() is False
    finally:
        d.stop()


def test_concurrent_submitters_are_serialized():
    d = UiDispatcher()
    counter = {"n": 0, "max_inside": 0, "inside": 0}

    def bump():
        counter["inside"] += 1
        counter["max_inside"] = max(counter["max_inside"], counter["inside"])
        counter["n"] += 1
        counter["inside"] -= 1

    def worker():
        for _ in range(100):
            d.submit(bump)

    try:
        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        d.flush(timeout_s=5.0)
    finally:
        d.stop()

    assert counter["n"] == 400
    assert counter["max_inside"] == 1


def test_stopped_dispatcher_refuses_work_and_stays_down():
    d = UiDispatcher()
    d.start()
    d.stop()
    assert d.closed

    with pytest.raises(DispatcherClosed):
        d.submit(lambda: None)
    with pytest.raises(DispatcherClosed):
        d.call(lambda: None)
    assert d._worker is not None and not d._worker.is_alive()


def test_stop_runs_work_queued_before_closing():
    d = UiDispatcher()
    gate = threading.Event()
    ran: list[int] = []
    d.submit(gate.wait, 2.0)
    futs = [d.submit(ran.append, i) for i in range(3)]

    stopper = threading.Thread(target=d.stop)
    stopper.start()
    gate.set()
    stopper.join(2.0)

    assert ran == [0, 1, 2]
    assert all(f.done() for f in futs)


def test_flush_times_out_on_a_stalled_worker():
    d = UiDispatcher()
    gate = threading.Event()
    try:
        d.submit(gate.wait, 5.0)
        with pytest.raises(FutureTimeout):
            d.flush(timeout_s=0.05)
    finally:
        gate.set()
        d.stop()
