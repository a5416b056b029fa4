"""Transaction helpers shared by the services."""

from __future__ import annotations

import time
from functools import wraps

import structlog
from django.conf import settings
from django.db import connection

log = structlog.get_logger(__name__)

# PostgreSQL SQLSTATEs worth retrying: serialization_failure, deadlock_detected.
RETRYABLE_PGCODES = {"40001", "40P01"}


def _pgcode_from(exc: BaseException) -> str | None:
    code = getattr(exc, "pgcode", None)
    if code:
        return code
    cause = exc.__cause__
    return getattr(cause, "pgcode", None) if cause is not None else None


def is_retryable(exc: BaseException) -> bool:
    """True for failures where re-running the whole transaction can succeed."""
    code = _pgcode_from(exc)
    if code in RETRYABLE_PGCODES:
        return True
    msg = str(exc).lower()
    return any(k in msg for k in ("deadlock detected", "could not serialize access", "database is locked"))


def retry_on_transaction_failure(attempts=None, backoff=0.05):
    """
    Re-run a transactional function after a deadlock or serialization failure.

    Must wrap the ``transaction.atomic`` boundary, not sit inside it: every
    attempt has to start from a clean transaction. ``attempts`` defaults to
    ``settings.STOREFRONT_CHECKOUT_RETRIES``.
    """

    def deco(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            max_attempts = attempts or settings.STOREFRONT_CHECKOUT_RETRIES
            attempt = 0
            while True:
                attempt += 1
                try:
                    return fn(*args, **kwargs)
                except Exception as e:
                    if attempt >= max_attempts or not is_retryable(e):
                        raise
                    log.info("transaction.retry", fn=fn.__qualname__, attempt=attempt, error=str(e))
                    time.sleep(backoff * attempt)

        return wrapper

    return deco


def bound_transaction() -> None:
    """
    Cap how long the current transaction may wait on locks and statements.

    Must be called inside an atomic block; ``SET LOCAL`` only lasts until the
    transaction ends. A no-op on databases other than PostgreSQL.
    """
    if connection.vendor != "postgresql":
        return
    timeout_ms = int(settings.STOREFRONT_CHECKOUT_STATEMENT_TIMEOUT_MS)
    with connection.cursor() as cursor:
        cursor.execute(f"SET LOCAL lock_timeout = {timeout_ms}")
        cursor.execute(f"SET LOCAL statement_timeout = {timeout_ms}")
