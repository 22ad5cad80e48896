from __future__ import annotations

from typing import Mapping, Protocol, Sequence

from cryptomatrix.contexts.matrices.application.dto.ticker_price import TickerPrice


class TickerReader(Protocol):
    """
    Read contract for raw ticker prices used by the live grid builder.

    Related:
      - src/cryptomatrix/contexts/matrices/application/services/live_grid_builder.py
      - src/cryptomatrix/contexts/matrices/adapters/outbound/persistence/postgres/ticker_reader.py
    """

    def latest_prices(self, symbols: Sequence[str]) -> Mapping[str, TickerPrice]:
        """
        Return latest price per exchange symbol.

        Parameters:
        - symbols: upper-cased exchange symbols (e.g. `BTCUSDT`).

        Returns:
        - Mapping `symbol -> TickerPrice`; unknown symbols are absent.

        Assumptions/Invariants:
        - Keys are upper-cased.

        Errors/Exceptions:
        - Propagates storage-specific reader errors.

        Side effects:
        - May execute one storage read query.
        """
        ...

    def prices_hours_ago(self, symbols: Sequence[str], hours: int) -> Mapping[str, float]:
        """
        Return, per symbol, the last recorded price at or before `now - hours`.

        Parameters:
        - symbols: upper-cased exchange symbols.
        - hours: lookback in hours (24 for the daily change grid).

        Returns:
        - Mapping `symbol -> price`; symbols without old enough ticks are absent.

        Assumptions/Invariants:
        - Keys are upper-cased.

        Errors/Exceptions:
        - Propagates storage-specific reader errors.

        Side effects:
        - May execute one storage read query.
        """
        ...
