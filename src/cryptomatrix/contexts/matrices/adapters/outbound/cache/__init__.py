from .in_memory_opening_ts_cache import InMemoryOpeningTimestampCache

__all__ = ["InMemoryOpeningTimestampCache"]
