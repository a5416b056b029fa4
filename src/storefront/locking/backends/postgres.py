import time

from django.db import connection

from ..hashing import lock_id_for

#: Pause between two pg_try_advisory_lock attempts.
POLL_INTERVAL = 0.05


class PostgresAdvisoryLockBackend:
    """
    Business-key locks on top of PostgreSQL session-level advisory locks.

    The lock belongs to the current database connection, so every worker
    process and every host that talks to the same cluster competes for the
    same ids. PostgreSQL drops the lock by itself when the connection goes
    away, which covers crashed workers.

    Session-level (not transaction-level) locks are used on purpose: the
    checkout takes the lock *before* opening its transaction and gives it back
    only after the commit or rollback, so a second checkout for the same
    customer never sees the cart in a half-converted state.

    Timeout behavior
    ----------------
    - timeout=None: block in pg_advisory_lock until acquired.
    - timeout=float: poll pg_try_advisory_lock until the deadline.
    """

    def acquire(self, key: str, timeout: float | None) -> bool:
        lock_id = lock_id_for(key)

        if timeout is None:
            with connection.cursor() as cursor:
                cursor.execute("SELECT pg_advisory_lock(%s);", [lock_id])
            return True

        deadline = time.monotonic() + timeout

        while True:
            with connection.cursor() as cursor:
                cursor.execute("SELECT pg_try_advisory_lock(%s);", [lock_id])
                acquired = cursor.fetchone()[0]

            if acquired:
                return True
            if time.monotonic() >= deadline:
                return False

            time.sleep(POLL_INTERVAL)

    def release(self, key: str) -> None:
        # Unlocking an id this session does not hold only returns false.
        with connection.cursor() as cursor:
            cursor.execute("SELECT pg_advisory_unlock(%s);", [lock_id_for(key)])
