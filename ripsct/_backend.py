"""
Task execution backends for ripsct.

Per-cell work (point sampling, edge discovery, simplex extension) is
independent across cells, so it is dispatched through a small backend
interface. Every backend returns the results in submission order and only
after all tasks have finished, so callers can merge them directly. Backends:

- ``SerialBackend``: Runs every task in the calling thread (default)
- ``ThreadBackend``: Thread parallelism via ``multiprocessing.pool.ThreadPool``

Usage::

    from ripsct._backend import get_backend

    backend = get_backend()                       # serial
    backend = get_backend("threads", workers=4)   # thread pool
"""
from __future__ import annotations

import threading
from typing import Protocol, runtime_checkable, Any, Callable, Iterable

from ripsct._errors import InvalidConfiguration


# ---------------------------------------------------------------------------
# Protocol (structural typing interface)
# ---------------------------------------------------------------------------
@runtime_checkable
class TaskBackend(Protocol):
    """Protocol for task execution backends."""

    name: str

    def map(self, fn: Callable, items: Iterable) -> list:
        """Apply ``fn`` to every item and wait for all of them.

        Parameters
        ----------
        fn : callable, fn(item) -> result
        items : iterable of task inputs

        Returns
        -------
        list of results in the order of ``items``
        """
        ...


# ---------------------------------------------------------------------------
# Serial backend (always available)
# ---------------------------------------------------------------------------
class SerialBackend:
    """Runs tasks one after another in the calling thread."""

    name = "serial"
    workers = 1

    def map(self, fn: Callable, items: Iterable) -> list:
        return [fn(item) for item in items]

    def terminate(self):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.terminate()


# ---------------------------------------------------------------------------
# Thread pool backend
# ---------------------------------------------------------------------------
class ThreadBackend:
    """Thread-parallel backend using multiprocessing.pool.ThreadPool.

    Threads share memory with the caller, so tasks may read the adjacency
    matrix and draw ids from an ``AtomicCounter`` without pickling.
    """

    name = "threads"

    def __init__(self, workers: int = 2):
        from multiprocessing.pool import ThreadPool
        if workers < 1:
            raise InvalidConfiguration(
                f"ThreadBackend requires at least one worker, got {workers}."
            )
        self.workers = workers
        self.pool = ThreadPool(processes=workers)

    def _get_chunksize(self, n: int) -> int:
        return max(1, n // (4 * self.workers))

    def map(self, fn: Callable, items: Iterable) -> list:
        items = list(items)
        if not items:
            return []
        # ThreadPool.map blocks until every chunk is done
        return self.pool.map(fn, items, chunksize=self._get_chunksize(len(items)))

    def terminate(self):
        self.pool.terminate()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.terminate()

    def __del__(self):
        try:
            self.pool.terminate()
        except Exception:
            pass


# ---------------------------------------------------------------------------
# Shared id counter
# ---------------------------------------------------------------------------
class AtomicCounter:
    """Lock protected counter handing out consecutive integers."""

    def __init__(self, start: int = 0):
        self._value = start
        self._lock = threading.Lock()

    def next(self) -> int:
        """Return the current value and advance the counter by one."""
        with self._lock:
            value = self._value
            self._value += 1
            return value

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


# ---------------------------------------------------------------------------
# Backend registry
# ---------------------------------------------------------------------------
_BACKENDS: dict[str, type] = {
    "serial": SerialBackend,
    "threads": ThreadBackend,
}


def get_backend(name: str | None = None, **kwargs: Any) -> TaskBackend:
    """Get a task backend by name.

    Parameters
    ----------
    name : str or None
        Backend name: ``"serial"``, ``"threads"`` or ``None`` (serial).
    **kwargs
        Passed to the backend constructor (e.g. ``workers=4`` for threads).

    Returns
    -------
    TaskBackend
        An instance satisfying the :class:`TaskBackend` protocol.
    """
    if name is None or name == "serial":
        return SerialBackend()
    if name not in _BACKENDS:
        raise InvalidConfiguration(
            f"Unknown backend {name!r}. Available: {list(_BACKENDS.keys())}"
        )
    return _BACKENDS[name](**kwargs)


def resolve_backend(backend: TaskBackend | str | None = None,
                    workers: int | None = None) -> TaskBackend:
    """Accept a backend instance, a backend name or a worker count.

    ``workers`` without a backend name selects the thread backend when more
    than one worker is requested. A pool created here belongs to the caller
    and keeps its threads until ``terminate()`` is called (or the backend is
    used as a context manager); ``build_complex`` does this for the pools it
    creates.
    """
    if isinstance(backend, TaskBackend):
        return backend
    if backend is None and workers is not None:
        if workers < 1:
            raise InvalidConfiguration(
                f"workers must be a positive integer, got {workers}."
            )
        backend = "threads" if workers > 1 else "serial"
    if backend == "threads":
        return get_backend(backend, workers=workers or 2)
    return get_backend(backend)
