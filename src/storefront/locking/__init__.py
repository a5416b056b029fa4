from .api import default_backend, lock
from .decorators import exclusive

__all__ = ["lock", "exclusive", "default_backend"]
