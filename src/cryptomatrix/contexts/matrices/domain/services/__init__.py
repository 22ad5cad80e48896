from .anchor_rows import rows_to_grid
from .grid_math import (
    DIVISION_EPSILON,
    anchor_relative_change,
    compute_ref_block,
    is_present,
    safe_divide,
)

__all__ = [
    "DIVISION_EPSILON",
    "anchor_relative_change",
    "compute_ref_block",
    "is_present",
    "rows_to_grid",
    "safe_divide",
]
