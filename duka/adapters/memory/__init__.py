"""In-memory store adapters."""
from duka.adapters.memory.store import MemoryProductStore, MemorySalespersonStore

__all__ = ["MemoryProductStore", "MemorySalespersonStore"]
