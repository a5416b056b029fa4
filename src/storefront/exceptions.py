"""
Exception hierarchy for the storefront.

Services raise these; the ``api_endpoint`` view decorator turns them into the
JSON error envelope. Each class carries a stable ``code`` for clients and the
HTTP ``status`` it maps to.

Catch `StorefrontError` to handle every business failure at once, or a
specific subclass such as `InsufficientStock` for fine-grained control.
"""

from __future__ import annotations

from typing import Any


class StorefrontError(Exception):
    """
    Base exception for all storefront errors.

    Example
    -------
    >>> try:
    ...     place_order(customer_id, shipping)
    ... except StorefrontError as exc:
    ...     return error_response(exc)
    """

    code: str = "storefront_error"
    status: int = 400

    def __init__(self, message: str | None = None, *, details: Any = None) -> None:
        if message is None:
            message = "An unspecified storefront error occurred."
        super().__init__(message)
        self.message = message
        self.details = details


class NotFound(StorefrontError):
    code = "not_found"
    status = 404


class CustomerNotFound(NotFound):
    code = "customer_not_found"

    def __init__(self, customer_id: Any) -> None:
        super().__init__(f"Customer {customer_id} not found")
        self.customer_id = customer_id


class ValidationError(StorefrontError):
    """
    Bad input shape or range.

    ``details`` holds per-field messages when the failure came from a form.
    """

    code = "validation_error"


class InsufficientStock(StorefrontError):
    """
    Requested quantity exceeds what is on hand.

    Carries the product name and the shortfall so clients can tell the
    customer exactly which line to reduce.
    """

    code = "insufficient_stock"

    def __init__(self, product: str, requested: int, available: int) -> None:
        super().__init__(
            f"Insufficient stock for {product}: requested {requested}, available {available}",
            details={
                "product": product,
                "requested": requested,
                "available": available,
                "shortfall": requested - available,
            },
        )
        self.product = product
        self.requested = requested
        self.available = available

    @property
    def shortfall(self) -> int:
        return self.requested - self.available


class EmptyCart(StorefrontError):
    code = "empty_cart"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "Cart is empty")


class Unauthorized(StorefrontError):
    code = "unauthorized"
    status = 401


class Forbidden(StorefrontError):
    code = "forbidden"
    status = 403


class Conflict(StorefrontError):
    """
    A concurrent mutation won the race, or the requested state change is not
    allowed from the current state.
    """

    code = "conflict"
    status = 409


class LockAcquireTimeout(Conflict):
    """
    Raised when a business-key lock cannot be acquired within the timeout.

    This typically means another request for the same key (for example a
    double-submitted checkout) is still running.

    Example
    -------
    >>> try:
    ...     with lock("checkout:customer:42", timeout=1):
    ...         ...
    ... except LockAcquireTimeout:
    ...     retry_later()
    """

    code = "lock_acquire_timeout"


class TransactionAborted(StorefrontError):
    """
    A lower-level failure interrupted a transaction.

    Only ever raised after the surrounding atomic block has rolled back, so no
    partial state is visible.
    """

    code = "transaction_aborted"
    status = 503

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "The operation could not be completed, please retry")
