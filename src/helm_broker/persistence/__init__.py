"""Instance registry implementations."""

from .interfaces import InstanceRegistry, PutOutcome, PutResult, compare_for_put
from .memory import InMemoryInstanceRegistry

__all__ = [
    "InMemoryInstanceRegistry",
    "InstanceRegistry",
    "PutOutcome",
    "PutResult",
    "compare_for_put",
]
