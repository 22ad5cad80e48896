from __future__ import annotations

from typing import Protocol


class OpeningTimestampCache(Protocol):
    """
    Cache of last resolved opening timestamps keyed by `session|window|pivot`.

    Related:
      - src/cryptomatrix/contexts/matrices/application/services/opening_grid_resolver.py
      - src/cryptomatrix/contexts/matrices/adapters/outbound/cache/in_memory_opening_ts_cache.py
    """

    def get(self, key: str) -> int | None:
        """
        Return cached opening timestamp for key.

        Parameters:
        - key: `session|window|pivot` cache key.

        Returns:
        - Epoch milliseconds or `None` when key was never stored.

        Assumptions/Invariants:
        - Entries are never invalidated by the resolver itself.

        Errors/Exceptions:
        - None.

        Side effects:
        - None.
        """
        ...

    def set(self, key: str, ts: int) -> None:
        """
        Store opening timestamp for key (last writer wins).

        Parameters:
        - key: `session|window|pivot` cache key.
        - ts: epoch milliseconds.

        Returns:
        - None.

        Assumptions/Invariants:
        - Concurrent writers for one key may race; values are display fallbacks only.

        Errors/Exceptions:
        - None.

        Side effects:
        - Mutates cache state.
        """
        ...
