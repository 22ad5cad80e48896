from __future__ import annotations

import math

import pytest

from cryptomatrix.contexts.matrices.domain.services import (
    anchor_relative_change,
    compute_ref_block,
    is_present,
    safe_divide,
)


@pytest.mark.parametrize(
    ("numerator", "denominator"),
    [
        (1.0, 0.0),
        (1.0, 1e-301),
        (None, 2.0),
        (2.0, None),
        (math.nan, 2.0),
        (2.0, math.inf),
    ],
)
def test_safe_divide_returns_none_for_missing_non_finite_or_tiny_denominator(
    numerator: float | None,
    denominator: float | None,
) -> None:
    assert safe_divide(numerator, denominator) is None


def test_safe_divide_divides_regular_values() -> None:
    assert safe_divide(6.0, 3.0) == 2.0
    assert safe_divide(-1.0, 4.0) == -0.25
    assert safe_divide(0.0, 5.0) == 0.0


def test_is_present_treats_nan_and_inf_as_missing() -> None:
    assert is_present(0.0) is True
    assert is_present(None) is False
    assert is_present(math.nan) is False
    assert is_present(-math.inf) is False


def test_anchor_relative_change_measures_drift_from_anchor() -> None:
    assert anchor_relative_change(100.0, 90.0) == pytest.approx(0.1)
    assert anchor_relative_change(None, 90.0) is None
    assert anchor_relative_change(100.0, None) is None
    assert anchor_relative_change(0.0, 90.0) is None


def test_compute_ref_block_multiplies_pct_ref_by_id_pct() -> None:
    pct_ref, ref = compute_ref_block(benchmark_new=90.0, id_pct=0.5, ref_value=100.0)

    assert pct_ref == pytest.approx(0.1)
    assert ref == pytest.approx(0.05)


def test_compute_ref_block_without_id_pct_keeps_pct_ref_only() -> None:
    pct_ref, ref = compute_ref_block(benchmark_new=90.0, id_pct=None, ref_value=100.0)

    assert pct_ref == pytest.approx(0.1)
    assert ref is None
