from .local import LocalLockBackend
from .postgres import PostgresAdvisoryLockBackend

__all__ = ["LocalLockBackend", "PostgresAdvisoryLockBackend"]
