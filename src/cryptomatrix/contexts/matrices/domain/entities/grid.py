from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence

from cryptomatrix.contexts.matrices.domain.errors import GridInvariantError

Cell = float | None
GridValues = dict[str, dict[str, float | None]]


@dataclass(frozen=True, slots=True)
class Grid:
    """
    Grid — immutable NxN matrix of optional numbers indexed by (base_index, quote_index).

    Related:
      - src/cryptomatrix/contexts/matrices/domain/entities/coin_universe.py
      - src/cryptomatrix/contexts/matrices/domain/entities/anchor_grid.py
      - src/cryptomatrix/contexts/matrices/application/services/derivation_engine.py
    """

    rows: tuple[tuple[Cell, ...], ...]

    def __post_init__(self) -> None:
        """
        Validate square shape and the "no rate against itself" diagonal invariant.

        Args:
            None.
        Returns:
            None.
        Assumptions:
            `None` is the only representation of "no data"; zero is a real value.
        Raises:
            GridInvariantError: If grid is not square or a diagonal cell is populated.
        Side Effects:
            Normalizes nested sequences into tuples.
        """
        normalized = tuple(tuple(row) for row in self.rows)
        size = len(normalized)
        for i, row in enumerate(normalized):
            if len(row) != size:
                raise GridInvariantError(
                    f"Grid must be square, row {i} has {len(row)} cells for size {size}"
                )
            if row[i] is not None:
                raise GridInvariantError(f"Grid diagonal cell ({i}, {i}) must be empty")
        object.__setattr__(self, "rows", normalized)

    @classmethod
    def empty(cls, size: int) -> Grid:
        """Grid of `size x size` cells with "no data" everywhere."""
        return GridBuilder(size).build()

    @property
    def size(self) -> int:
        return len(self.rows)

    def get(self, base_index: int, quote_index: int) -> Cell:
        """
        Return cell value; coordinates outside the grid are a programming error.

        Args:
            base_index: Row index in coin universe order.
            quote_index: Column index in coin universe order.
        Returns:
            float | None: Cell value or `None` for "no data".
        Assumptions:
            Negative indexes are not wrapped around.
        Raises:
            IndexError: If one of indexes is outside `[0, size)`.
        Side Effects:
            None.
        """
        _check_index(base_index, self.size)
        _check_index(quote_index, self.size)
        return self.rows[base_index][quote_index]

    def is_empty(self) -> bool:
        return all(cell is None for row in self.rows for cell in row)

    def cells(self) -> Iterator[tuple[int, int, Cell]]:
        """Iterate off-diagonal cells as `(base_index, quote_index, value)`."""
        for i, row in enumerate(self.rows):
            for j, value in enumerate(row):
                if i != j:
                    yield i, j, value

    def to_lists(self) -> list[list[Cell]]:
        return [list(row) for row in self.rows]

    def to_values(self, coins: Sequence[str]) -> GridValues:
        """
        Map grid into `{base: {quote: value}}` payload, diagonal omitted.

        Args:
            coins: Coin universe in grid order.
        Returns:
            GridValues: Nested mapping keyed by coin symbols.
        Assumptions:
            `coins` is the universe the grid was built for.
        Raises:
            GridInvariantError: If coin count differs from grid size.
        Side Effects:
            None.
        """
        if len(coins) != self.size:
            raise GridInvariantError(
                f"Grid of size {self.size} cannot be mapped onto {len(coins)} coins"
            )
        out: GridValues = {}
        for i, base in enumerate(coins):
            out[base] = {}
            for j, quote in enumerate(coins):
                if i == j:
                    continue
                out[base][quote] = self.rows[i][j]
        return out


class GridBuilder:
    """
    Mutable NxN cell buffer used while a grid is being computed.

    Diagonal cells can never be populated; `build()` freezes the buffer into `Grid`.
    """

    def __init__(self, size: int, fill: Cell = None) -> None:
        if isinstance(size, bool) or size < 0:
            raise ValueError(f"GridBuilder size must be a non-negative int, got {size!r}")
        self._size = size
        self._cells: list[list[Cell]] = [
            [None if i == j else fill for j in range(size)] for i in range(size)
        ]

    @property
    def size(self) -> int:
        return self._size

    def get(self, base_index: int, quote_index: int) -> Cell:
        _check_index(base_index, self._size)
        _check_index(quote_index, self._size)
        return self._cells[base_index][quote_index]

    def set(self, base_index: int, quote_index: int, value: Cell) -> None:
        _check_index(base_index, self._size)
        _check_index(quote_index, self._size)
        if base_index == quote_index and value is not None:
            raise GridInvariantError(
                f"Grid diagonal cell ({base_index}, {quote_index}) must stay empty"
            )
        self._cells[base_index][quote_index] = value

    def build(self) -> Grid:
        return Grid(rows=tuple(tuple(row) for row in self._cells))


def new_grid(n: int, fill: Cell = None) -> Grid:
    """
    Allocate an `n x n` grid with every cell set to `fill`.

    The diagonal is the exception: it always stays "no data".
    """
    return GridBuilder(n, fill).build()


def _check_index(index: int, size: int) -> None:
    if isinstance(index, bool) or not 0 <= index < size:
        raise IndexError(f"grid index {index!r} out of range for size {size}")
