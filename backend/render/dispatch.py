from __future__ import annotations

import logging
import queue
import threading
from concurrent.futures import Future
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

log = logging.getLogger(__name__)

T = TypeVar("T")


class DispatcherClosed(RuntimeError):
    """Work was offered to a dispatcher that has been stopped."""


@dataclass
class _Work:
    fn: Callable[..., Any]
    args: tuple[Any, ...]
    future: Future


@dataclass
class UiDispatcher:
    """
    The single execution context that owns the renderer.

    All style mutations (feed merges and gesture transitions) are queued here and
    executed one at a time on a dedicated worker thread, in submission order.
    Once stopped, a dispatcher stays closed: later work is refused, never run.
    """

    name: str = "ui-dispatch"
    _q: "queue.Queue[_Work]" = field(default_factory=queue.Queue, repr=False)
    _stop: threading.Event = field(default_factory=threading.Event, repr=False)
    _worker: threading.Thread | None = field(default=None, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _closed: bool = field(default=False, repr=False)

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        with self._lock:
            if self._closed:
                return
            if self._worker is not None and self._worker.is_alive():
                return
            self._worker = threading.Thread(target=self._run, name=self.name, daemon=True)
            self._worker.start()

    def stop(self, *, timeout_s: float = 2.0) -> None:
        """
        Close the dispatcher; the worker runs what was queued before closing, then exits.
        """
        with self._lock:
            self._closed = True
            self._stop.set()
            w = self._worker
        if w is not None and w.is_alive() and w is not threading.current_thread():
            w.join(timeout=timeout_s)

    def is_dispatch_thread(self) -> bool:
        w = self._worker
        return w is not None and w is threading.current_thread()

    def submit(self, fn: Callable[..., T], *args: Any) -> "Future[T]":
        self.start()
        fut: Future = Future()
        # Enqueue under the lock so nothing lands after the worker's final drain.
        with self._lock:
            if self._closed:
                raise DispatcherClosed(f"{self.name} is closed")
            self._q.put(_Work(fn=fn, args=args, future=fut))
        return fut

    def call(self, fn: Callable[..., T], *args: Any, timeout_s: float = 5.0) -> T:
        """
        Run `fn` on the dispatch thread and wait for its result.

        Runs inline when already on the dispatch thread (a queued call would deadlock).
        """
        if self.is_dispatch_thread():
            return fn(*args)
        return self.submit(fn, *args).result(timeout=timeout_s)

    def flush(self, *, timeout_s: float = 2.0) -> None:
        """
        Wait until everything queued so far has executed.

        Raises `concurrent.futures.TimeoutError` if the worker does not get there in time.
        """
        if self.is_dispatch_thread():
            return
        self.submit(lambda: None).result(timeout=timeout_s)

    def _execute(self, work: _Work) -> None:
        if not work.future.set_running_or_notify_cancel():
            return
        try:
            result = work.fn(*work.args)
        except Exception as exc:
            log.exception("Dispatched call %r failed", getattr(work.fn, "__name__", work.fn))
            work.future.set_exception(exc)
        else:
            work.future.set_result(result)

    def _run(self) -> None:
        while not self._stop.is_set():
            try:
                work = self._q.get(timeout=0.1)
            except queue.Empty:
                continue
            self._execute(work)

        # Drain what was queued before closing.
        while True:
            try:
                work = self._q.get_nowait()
            except queue.Empty:
                break
            self._execute(work)
