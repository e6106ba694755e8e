"""
Cancellable execution context passed to every storage call.

A Context carries a cancellation flag and an optional deadline. The db layer
checks it before each statement and, for drivers that support it, interrupts
a statement that is still running when the context is cancelled.

    ctx = Context.with_timeout(2.0)
    storage.get(ctx, User, 1)
"""
from __future__ import annotations

import threading
import time
from typing import Callable, Optional


class Cancelled(Exception):
    """The context was cancelled before or during a backend call."""

    def __init__(self, message: str = "context canceled") -> None:
        super().__init__(message)


class DeadlineExceeded(Cancelled):
    def __init__(self, message: str = "context deadline exceeded") -> None:
        super().__init__(message)


class Context:
    def __init__(self, parent: Optional["Context"] = None, deadline: Optional[float] = None) -> None:
        self._lock = threading.Lock()
        self._err: Optional[Cancelled] = None
        self._callbacks: dict[int, Callable[[], None]] = {}
        self._next_id = 0
        self._timer: Optional[threading.Timer] = None
        self._detach: Optional[Callable[[], None]] = None
        if parent is not None and parent.deadline is not None:
            deadline = parent.deadline if deadline is None else min(deadline, parent.deadline)
        self.deadline = deadline
        if parent is not None:
            detach = parent.add_done_callback(lambda: self._finish(parent.err() or Cancelled()))
            with self._lock:
                # a child that finished meanwhile must not stay registered on the parent
                if self._err is None:
                    self._detach = detach
                    detach = None
            if detach is not None:
                detach()
        if deadline is not None:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                self._finish(DeadlineExceeded())
            else:
                self._timer = threading.Timer(remaining, self._finish, args=(DeadlineExceeded(),))
                self._timer.daemon = True
                self._timer.start()

    @classmethod
    def background(cls) -> "Context":
        """A context that is never cancelled and has no deadline."""
        return cls()

    @classmethod
    def with_cancel(cls, parent: Optional["Context"] = None) -> "Context":
        return cls(parent=parent)

    @classmethod
    def with_timeout(cls, seconds: float, parent: Optional["Context"] = None) -> "Context":
        return cls(parent=parent, deadline=time.monotonic() + seconds)

    def cancel(self) -> None:
        self._finish(Cancelled())

    def done(self) -> bool:
        return self.err() is not None

    def err(self) -> Optional[Cancelled]:
        with self._lock:
            if self._err is None and self.deadline is not None and time.monotonic() >= self.deadline:
                self._err = DeadlineExceeded()
            return self._err

    def check(self) -> None:
        """Raise the context error if the context is already done."""
        err = self.err()
        if err is not None:
            raise err

    def add_done_callback(self, fn: Callable[[], None]) -> Callable[[], None]:
        """Run ``fn`` once the context is done; returns a function that unregisters it.

        If the context is already done ``fn`` runs immediately.
        """
        with self._lock:
            if self._err is None:
                key = self._next_id
                self._next_id += 1
                self._callbacks[key] = fn
                return lambda: self._remove_callback(key)
        fn()
        return lambda: None

    def _remove_callback(self, key: int) -> None:
        with self._lock:
            self._callbacks.pop(key, None)

    def _finish(self, err: Cancelled) -> None:
        with self._lock:
            if self._err is None:
                self._err = err
            callbacks = list(self._callbacks.values())
            self._callbacks.clear()
            timer, self._timer = self._timer, None
            detach, self._detach = self._detach, None
        if timer is not None:
            timer.cancel()
        if detach is not None:
            detach()
        for fn in callbacks:
            fn()
