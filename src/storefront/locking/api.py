from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Protocol

import structlog
from django.db import connection

from ..exceptions import LockAcquireTimeout
from .backends import LocalLockBackend, PostgresAdvisoryLockBackend

log = structlog.get_logger(__name__)


class LockBackend(Protocol):
    """
    Minimal interface every lock backend implements.
    """
    def acquire(self, key: str, timeout: float | None) -> bool: ...
    def release(self, key: str) -> None: ...


_postgres_backend = PostgresAdvisoryLockBackend()
_local_backend = LocalLockBackend()


def default_backend() -> LockBackend:
    """
    Pick the backend that matches the configured database.

    PostgreSQL gets advisory locks, shared by every worker on the cluster.
    Anything else falls back to the in-process backend.
    """
    if connection.vendor == "postgresql":
        return _postgres_backend
    return _local_backend


@contextmanager
def lock(
    key: str,
    timeout: float | None = 3.0,
    backend: LockBackend | None = None,
) -> Iterator[None]:
    """
    Hold the business-key lock ``key`` for the duration of the block.

    Parameters
    ----------
    key : str
        Lock identifier derived from business context, e.g.
        "checkout:customer:42".

    timeout : float | None, default=3.0
        Seconds to wait for the lock. None waits forever.

    backend : LockBackend | None
        Backend override, mostly for tests. Defaults to `default_backend()`.

    Raises
    ------
    LockAcquireTimeout
        If the lock cannot be acquired within the timeout.

    Example
    -------
    >>> with lock("checkout:customer:42"):
    ...     convert_cart()
    """
    be = backend or default_backend()

    if not be.acquire(key, timeout):
        log.warning("lock.timeout", key=key, timeout=timeout)
        raise LockAcquireTimeout(
            f"Another request is already in progress (key='{key}'), try again"
        )

    try:
        yield
    finally:
        be.release(key)
