from __future__ import annotations

import math
from typing import Iterable

from cryptomatrix.contexts.matrices.domain.entities import (
    CoinUniverse,
    Grid,
    GridBuilder,
    MatrixValueRow,
)


def rows_to_grid(universe: CoinUniverse, rows: Iterable[MatrixValueRow]) -> Grid:
    """
    Place persisted pairwise rows onto universe grid coordinates.

    Args:
        universe: Coin universe defining grid order.
        rows: Persisted `base/quote -> value` rows of one timestamp.
    Returns:
        Grid: Grid with values only where a row for exactly `(base, quote)` exists.
    Assumptions:
        No reciprocal inference: `BTC/ETH` never fills `ETH/BTC`.
        When a pair appears twice, the last row wins.
    Raises:
        None.
    Side Effects:
        None.
    """
    builder = GridBuilder(universe.size)
    for row in rows:
        base_index = universe.index_of(row.base)
        quote_index = universe.index_of(row.quote)
        if base_index is None or quote_index is None or base_index == quote_index:
            continue
        value = _to_float(row.value)
        if value is None:
            continue
        builder.set(base_index, quote_index, value)
    return builder.build()


def _to_float(raw: object) -> float | None:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None
