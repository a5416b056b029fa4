import hashlib


def lock_id_for(key: str) -> int:
    """
    Map a business lock key onto a PostgreSQL advisory lock id.

    Advisory locks are identified by a signed BIGINT, while our keys are
    strings such as "checkout:customer:42". The key is hashed with an 8-byte
    BLAKE2b digest, which is stable across processes, Python versions and
    hosts, and then shifted into the signed 64-bit range.

    Parameters
    ----------
    key : str
        Business lock key.

    Returns
    -------
    int
        Signed 64-bit integer suitable for pg_advisory_lock.
    """
    digest = hashlib.blake2b(key.encode("utf-8"), digest_size=8).digest()
    value = int.from_bytes(digest, byteorder="big", signed=False)

    if value >= 2**63:
        value -= 2**64

    return value
