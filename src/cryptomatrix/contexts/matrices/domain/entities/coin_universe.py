from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

from cryptomatrix.shared_kernel.primitives import CoinSymbol

DEFAULT_PIVOT = "USDT"


@dataclass(frozen=True, slots=True)
class CoinUniverse:
    """
    CoinUniverse — ordered, de-duplicated, upper-cased coin list defining grid row/column order.

    Related:
      - src/cryptomatrix/contexts/matrices/domain/entities/grid.py
      - src/cryptomatrix/contexts/matrices/application/services/derivation_engine.py
      - src/cryptomatrix/contexts/matrices/application/services/live_grid_builder.py
    """

    coins: tuple[str, ...]
    pivot: str = DEFAULT_PIVOT

    def __post_init__(self) -> None:
        """
        Validate universe invariants.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            Callers use `CoinUniverse.build` for raw, user-provided lists.
        Raises:
            ValueError: If coins are not normalized, duplicated, or the pivot is missing.
        Side Effects:
            Normalizes `coins` into a tuple and `pivot` into canonical form.
        """
        pivot = CoinSymbol(self.pivot).value
        coins = tuple(self.coins)
        for coin in coins:
            if CoinSymbol(coin).value != coin:
                raise ValueError(f"CoinUniverse coin must be normalized, got {coin!r}")
        if len(set(coins)) != len(coins):
            raise ValueError(f"CoinUniverse coins must be unique, got {coins}")
        if pivot not in coins:
            raise ValueError(f"CoinUniverse must include pivot {pivot!r}")
        object.__setattr__(self, "coins", coins)
        object.__setattr__(self, "pivot", pivot)

    @classmethod
    def build(cls, raw_coins: Iterable[str], pivot: str = DEFAULT_PIVOT) -> CoinUniverse:
        """
        Normalize a raw coin list: strip + upper, drop blanks and repeats, append pivot if absent.

        Args:
            raw_coins: Requested coins in caller order.
            pivot: Quote asset that must be part of every universe.
        Returns:
            CoinUniverse: Normalized universe keeping first-occurrence order.
        Assumptions:
            Blank entries are noise from CSV/cookie parsing and are skipped silently.
        Raises:
            ValueError: If one of non-blank entries is not a valid coin symbol.
        Side Effects:
            None.
        """
        pivot_symbol = CoinSymbol(pivot).value
        seen: set[str] = set()
        out: list[str] = []
        for raw in raw_coins:
            text = str(raw or "").strip()
            if not text:
                continue
            coin = CoinSymbol(text).value
            if coin in seen:
                continue
            seen.add(coin)
            out.append(coin)
        if pivot_symbol not in seen:
            out.append(pivot_symbol)
        return cls(coins=tuple(out), pivot=pivot_symbol)

    @property
    def size(self) -> int:
        return len(self.coins)

    def index_of(self, coin: str) -> int | None:
        """Grid index of `coin` (case-insensitive) or `None` when it is not in the universe."""
        normalized = str(coin or "").strip().upper()
        try:
            return self.coins.index(normalized)
        except ValueError:
            return None

    def non_pivot(self) -> tuple[str, ...]:
        return tuple(coin for coin in self.coins if coin != self.pivot)

    def __iter__(self) -> Iterator[str]:
        return iter(self.coins)

    def __len__(self) -> int:
        return len(self.coins)

    def __getitem__(self, index: int) -> str:
        return self.coins[index]
