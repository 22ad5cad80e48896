from __future__ import annotations

from threading import Lock

from cryptomatrix.contexts.matrices.application.ports.cache import OpeningTimestampCache


class InMemoryOpeningTimestampCache(OpeningTimestampCache):
    """
    InMemoryOpeningTimestampCache — process-local opening timestamp cache.

    Related:
      - src/cryptomatrix/contexts/matrices/application/ports/cache/opening_ts_cache.py
      - src/cryptomatrix/contexts/matrices/application/services/opening_grid_resolver.py
      - apps/cli/wiring/modules/matrices.py
    """

    def __init__(self) -> None:
        """
        Initialize empty cache state.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Adapter lifetime is process-local and non-persistent.
        Raises:
            None.
        Side Effects:
            Creates mutable in-memory dictionary state.
        """
        self._lock = Lock()
        self._values: dict[str, int] = {}

    def get(self, key: str) -> int | None:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, ts: int) -> None:
        if isinstance(ts, bool):
            raise ValueError("InMemoryOpeningTimestampCache.ts must be epoch milliseconds")
        with self._lock:
            self._values[key] = int(ts)
