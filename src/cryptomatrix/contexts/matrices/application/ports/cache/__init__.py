from .opening_ts_cache import OpeningTimestampCache

__all__ = ["OpeningTimestampCache"]
