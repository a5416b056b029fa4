import threading


class _Slot:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        # Holder plus waiters; the slot is dropped when this reaches zero.
        self.users = 0


class LocalLockBackend:
    """
    In-process lock backend for databases without advisory locks.

    Only meant for SQLite development setups and tests, where a single
    process owns the database file anyway. It gives no protection across
    processes; production deployments run on PostgreSQL and use
    `PostgresAdvisoryLockBackend`.

    A key's lock only exists while someone holds or waits for it.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, _Slot] = {}

    def acquire(self, key: str, timeout: float | None) -> bool:
        with self._guard:
            slot = self._locks.setdefault(key, _Slot())
            slot.users += 1

        acquired = slot.lock.acquire() if timeout is None else slot.lock.acquire(timeout=timeout)
        if not acquired:
            with self._guard:
                self._leave(key, slot)
        return acquired

    def release(self, key: str) -> None:
        with self._guard:
            slot = self._locks.get(key)
            if slot is None or not slot.lock.locked():
                return
            slot.lock.release()
            self._leave(key, slot)

    def _leave(self, key: str, slot: _Slot) -> None:
        slot.users -= 1
        if slot.users == 0:
            del self._locks[key]
