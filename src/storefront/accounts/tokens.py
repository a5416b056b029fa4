"""
Bearer tokens for customers.

A token is a Django-signed, timestamped payload holding the customer id.
Resolving one is a pure function of the token, the secret key and the clock;
it never touches the database.
"""

from __future__ import annotations

from django.conf import settings
from django.core import signing

from ..exceptions import Forbidden, Unauthorized

SALT = "storefront.accounts.token"


def issue_token(customer) -> str:
    return signing.dumps({"cid": customer.pk, "email": customer.email}, salt=SALT, compress=True)


def resolve_credential(credential: str | None, *, max_age: int | None = None) -> int:
    """
    Turn a bearer credential into a customer id.

    Raises
    ------
    Unauthorized
        No credential was presented.
    Forbidden
        The credential is malformed, tampered with or expired.
    """
    if not credential:
        raise Unauthorized("Access token required")

    if max_age is None:
        max_age = settings.STOREFRONT_TOKEN_MAX_AGE

    try:
        payload = signing.loads(credential, salt=SALT, max_age=max_age)
    except signing.BadSignature as e:
        raise Forbidden("Invalid or expired token") from e

    customer_id = payload.get("cid") if isinstance(payload, dict) else None
    if not isinstance(customer_id, int):
        raise Forbidden("Invalid or expired token")
    return customer_id


def bearer_credential(authorization: str | None) -> str | None:
    """Extract the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None
