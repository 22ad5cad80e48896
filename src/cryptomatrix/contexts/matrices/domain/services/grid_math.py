"""
Numerically-safe arithmetic used by every derived matrix formula.

Every ratio goes through `safe_divide` so that zero, near-zero or missing anchors degrade to
"no data" (`None`) instead of `inf`/`nan`.
"""

from __future__ import annotations

import math
from typing import Final

DIVISION_EPSILON: Final[float] = 1e-300


def is_present(value: float | None) -> bool:
    """True for a finite number; `None`, `nan` and `inf` all count as "no data"."""
    return value is not None and math.isfinite(value)


def safe_divide(numerator: float | None, denominator: float | None) -> float | None:
    """
    Divide two optional numbers with "no data" propagation.

    Args:
        numerator: Dividend or `None`.
        denominator: Divisor or `None`.
    Returns:
        float | None: `numerator / denominator`, or `None` when either operand is missing or
        non-finite, or when `abs(denominator) < 1e-300`.
    Assumptions:
        Callers never need a signed infinity as a result.
    Raises:
        None.
    Side Effects:
        None.
    """
    if numerator is None or denominator is None:
        return None
    if not math.isfinite(numerator) or not math.isfinite(denominator):
        return None
    if abs(denominator) < DIVISION_EPSILON:
        return None
    return numerator / denominator


def anchor_relative_change(anchor: float | None, now: float | None) -> float | None:
    """`(anchor - now) / anchor`, the drift of a live value measured against its anchor."""
    if anchor is None or now is None:
        return None
    return safe_divide(anchor - now, anchor)


def compute_ref_block(
    *,
    benchmark_new: float | None,
    id_pct: float | None,
    ref_value: float | None,
) -> tuple[float | None, float | None]:
    """
    Reference block against the opening anchor.

    Args:
        benchmark_new: Latest live benchmark value.
        id_pct: Latest momentum value (decimal, e.g. 0.0123).
        ref_value: Opening anchor benchmark value.
    Returns:
        tuple[float | None, float | None]: `(pct_ref, ref)` where
        `pct_ref = (ref_value - benchmark_new) / ref_value` and `ref = pct_ref * id_pct`.
    Assumptions:
        Missing inputs propagate as `None`.
    Raises:
        None.
    Side Effects:
        None.
    """
    pct_ref = anchor_relative_change(ref_value, benchmark_new)
    ref = None if pct_ref is None or id_pct is None else pct_ref * id_pct
    return pct_ref, ref
