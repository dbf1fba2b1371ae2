"""Domain repository interfaces.

All abstractions are defined here with abc.ABC and @abstractmethod.
Concrete implementations live in pathmapper/infrastructure/ and are wired
at the application boundary through an explicit Session.

Import from this package rather than individual modules to avoid coupling
callers to specific repository module paths.
"""

from .base import Bindings, Repository, take_first
from .store import Children, StoreAdapter, TransactionFn

__all__ = [
    "Bindings",
    "Children",
    "Repository",
    "StoreAdapter",
    "TransactionFn",
    "take_first",
]
