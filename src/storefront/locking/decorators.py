from __future__ import annotations

from functools import wraps
from inspect import signature
from typing import Any, Callable, Mapping

from . import api


def _resolve_key(
    key: str | Callable[..., str],
    fn: Callable[..., Any],
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
) -> str:
    """
    Build the lock key for one call of ``fn``.

    ``key`` is either a format string using the function's parameter names
    ("checkout:customer:{customer_id}") or a callable receiving the same
    arguments as ``fn``.
    """
    if callable(key):
        return key(*args, **kwargs)

    bound = signature(fn).bind_partial(*args, **kwargs)
    bound.apply_defaults()
    values: Mapping[str, Any] = bound.arguments

    try:
        return key.format(**values)
    except KeyError as e:
        raise KeyError(
            f"lock key template references '{e.args[0]}', which is not a parameter "
            f"of {fn.__qualname__}. Available: {sorted(values.keys())}"
        ) from e


def exclusive(
    *,
    key: str | Callable[..., str],
    timeout: float | Callable[[], float | None] | None = 3.0,
):
    """
    Allow only one concurrent execution of the decorated function per key.

    When the lock is not acquired within ``timeout``, `LockAcquireTimeout`
    propagates to the caller and the function does not run.

    ``timeout`` may be a zero-argument callable so that it is read from
    settings at call time rather than at import time.

    Example
    -------
    @exclusive(key="checkout:customer:{customer_id}", timeout=2)
    def place_order(customer_id, shipping):
        ...
    """

    def decorator(fn: Callable[..., Any]):
        @wraps(fn)
        def wrapper(*args: Any, **kwargs: Any):
            resolved_key = _resolve_key(key, fn, args, kwargs)
            resolved_timeout = timeout() if callable(timeout) else timeout

            with api.lock(resolved_key, timeout=resolved_timeout):
                return fn(*args, **kwargs)

        return wrapper

    return decorator
