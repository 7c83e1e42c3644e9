"""Tests for adaptive_fee/core/params.py: parameter store and bounds gate."""

from __future__ import annotations

import logging
from dataclasses import replace

import pytest

from adaptive_fee.core.errors import InvalidFeeBounds, InvalidParameter
from adaptive_fee.core.events import Event
from adaptive_fee.core.math import MAX_ADJ_RATE, MAX_LP_FEE, WAD
from adaptive_fee.core.params import (
    MIN_PERIOD_FLOOR,
    ParameterStore,
    PoolTypeParams,
    coerce_pool_type,
    validate_pool_type_params,
)
from adaptive_fee.state.pools import PoolType


def _standard_params(**overrides) -> PoolTypeParams:
    base = PoolTypeParams(
        min_fee=100,
        max_fee=10_000,
        base_max_fee_delta=1_000,
        min_period=3600,
        lookback_period=14,
        ratio_tolerance=WAD // 100,
        linear_slope=WAD // 10,
        lower_side_factor=2 * WAD,
        upper_side_factor=2 * WAD,
    )
    return replace(base, **overrides)


# ---------------------------------------------------------------------------
# PoolTypeParams record
# ---------------------------------------------------------------------------

def test_unset_params_are_all_zero() -> None:
    p = PoolTypeParams.unset()
    assert p == PoolTypeParams()
    assert not p.is_set
    assert _standard_params().is_set


def test_params_reject_bool_fields() -> None:
    with pytest.raises(TypeError):
        PoolTypeParams(min_fee=True)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# validate_pool_type_params
# ---------------------------------------------------------------------------

def test_valid_params_pass() -> None:
    assert validate_pool_type_params(_standard_params()) is None


def test_unset_params_fail() -> None:
    assert validate_pool_type_params(PoolTypeParams.unset()) is not None


@pytest.mark.parametrize(
    "field, bad",
    [
        ("max_fee", MAX_LP_FEE + 1),
        ("base_max_fee_delta", 0),
        ("base_max_fee_delta", MAX_LP_FEE + 1),
        ("min_period", MIN_PERIOD_FLOOR - 1),
        ("lookback_period", 6),
        ("lookback_period", 366),
        ("ratio_tolerance", WAD // 1000 - 1),
        ("ratio_tolerance", 10 * WAD + 1),
        ("linear_slope", WAD // 10 - 1),
        ("linear_slope", 10 * WAD + 1),
        ("lower_side_factor", WAD - 1),
        ("upper_side_factor", 10 * WAD + 1),
    ],
)
def test_out_of_range_field_reported(field: str, bad: int) -> None:
    violation = validate_pool_type_params(_standard_params(**{field: bad}))
    assert violation is not None
    assert violation.field == field
    assert violation.value == bad


@pytest.mark.parametrize(
    "field, value",
    [
        ("lookback_period", 7),
        ("lookback_period", 365),
        ("ratio_tolerance", WAD // 1000),
        ("ratio_tolerance", 10 * WAD),
        ("linear_slope", WAD // 10),
        ("lower_side_factor", WAD),
        ("upper_side_factor", 10 * WAD),
        ("min_period", MIN_PERIOD_FLOOR),
    ],
)
def test_inclusive_bounds_accepted(field: str, value: int) -> None:
    assert validate_pool_type_params(_standard_params(**{field: value})) is None


def test_min_fee_above_max_fee_rejected() -> None:
    violation = validate_pool_type_params(_standard_params(min_fee=5_000, max_fee=4_000))
    assert violation is not None
    assert violation.field == "min_fee"


def test_equal_fee_bounds_accepted() -> None:
    assert validate_pool_type_params(_standard_params(min_fee=3_000, max_fee=3_000)) is None


# ---------------------------------------------------------------------------
# ParameterStore
# ---------------------------------------------------------------------------

class TestParameterStore:
    def test_unset_type_reads_zero(self):
        store = ParameterStore(WAD // 2)
        assert store.get_pool_type_params(PoolType.VOLATILE) == PoolTypeParams.unset()

    def test_require_unset_type_raises(self):
        store = ParameterStore(WAD // 2)
        with pytest.raises(InvalidParameter) as ei:
            store.require_pool_type_params(PoolType.STABLE)
        assert ei.value.field == "pool_type"

    def test_set_and_get(self):
        store = ParameterStore(WAD // 2)
        store.set_pool_type_params(PoolType.STANDARD, _standard_params())
        assert store.get_pool_type_params(PoolType.STANDARD) == _standard_params()
        assert store.configured_pool_types() == [PoolType.STANDARD]

    def test_accepts_pool_type_value_string(self):
        store = ParameterStore(WAD // 2)
        store.set_pool_type_params("STABLE", _standard_params())  # type: ignore[arg-type]
        assert store.get_pool_type_params(PoolType.STABLE).is_set

    def test_rejected_update_leaves_previous_params(self):
        store = ParameterStore(WAD // 2)
        good = _standard_params()
        store.set_pool_type_params(PoolType.STANDARD, good)
        bad = _standard_params(max_fee=20_000, linear_slope=0)
        with pytest.raises(InvalidParameter) as ei:
            store.set_pool_type_params(PoolType.STANDARD, bad)
        assert ei.value.field == "linear_slope"
        assert store.get_pool_type_params(PoolType.STANDARD) == good

    def test_fee_bound_violation_is_invalid_fee_bounds(self):
        store = ParameterStore(WAD // 2)
        with pytest.raises(InvalidFeeBounds) as ei:
            store.set_pool_type_params(PoolType.STANDARD, _standard_params(min_fee=9_000, max_fee=8_000))
        assert ei.value.min_fee == 9_000
        assert ei.value.max_fee == 8_000
        assert store.get_pool_type_params(PoolType.STANDARD) == PoolTypeParams.unset()

    def test_non_params_object_rejected(self):
        store = ParameterStore(WAD // 2)
        with pytest.raises(InvalidParameter):
            store.set_pool_type_params(PoolType.STANDARD, {"min_fee": 1})  # type: ignore[arg-type]

    def test_set_emits_old_and_new(self):
        seen = []
        store = ParameterStore(WAD // 2, emit=seen.append)
        first = _standard_params()
        second = _standard_params(max_fee=9_000)
        store.set_pool_type_params(PoolType.STANDARD, first)
        store.set_pool_type_params(PoolType.STANDARD, second)
        assert [n.event for n in seen] == [Event.POOL_TYPE_PARAMS_SET] * 2
        assert seen[0].old == PoolTypeParams.unset() and seen[0].new == first
        assert seen[1].old == first and seen[1].new == second
        assert seen[1].subject == "STANDARD"

    def test_rejected_set_emits_nothing(self):
        seen = []
        store = ParameterStore(WAD // 2, emit=seen.append)
        with pytest.raises(InvalidParameter):
            store.set_pool_type_params(PoolType.STANDARD, _standard_params(lookback_period=1))
        assert seen == []


class TestGlobalMaxAdjRate:
    def test_initial_rate_validated(self):
        with pytest.raises(InvalidParameter):
            ParameterStore(0)

    def test_zero_rejected_and_rate_unchanged(self):
        store = ParameterStore(WAD // 2)
        with pytest.raises(InvalidParameter) as ei:
            store.set_global_max_adj_rate(0)
        assert ei.value.field == "global_max_adj_rate"
        assert store.get_global_max_adj_rate() == WAD // 2

    def test_ceiling_inclusive(self):
        store = ParameterStore(WAD // 2)
        store.set_global_max_adj_rate(MAX_ADJ_RATE)
        assert store.get_global_max_adj_rate() == MAX_ADJ_RATE
        with pytest.raises(InvalidParameter):
            store.set_global_max_adj_rate(MAX_ADJ_RATE + 1)
        assert store.get_global_max_adj_rate() == MAX_ADJ_RATE

    def test_bool_rejected(self):
        store = ParameterStore(WAD // 2)
        with pytest.raises(InvalidParameter):
            store.set_global_max_adj_rate(True)  # type: ignore[arg-type]

    def test_set_emits_old_and_new(self):
        seen = []
        store = ParameterStore(WAD // 2, emit=seen.append)
        store.set_global_max_adj_rate(WAD)
        assert len(seen) == 1
        assert seen[0].event == Event.GLOBAL_MAX_ADJ_RATE_SET
        assert (seen[0].old, seen[0].new) == (WAD // 2, WAD)


class TestPoolTypeCoercion:
    def test_unknown_pool_type_rejected(self):
        store = ParameterStore(WAD // 2)
        with pytest.raises(InvalidParameter) as ei:
            store.set_pool_type_params("BOGUS", _standard_params())  # type: ignore[arg-type]
        assert ei.value.field == "pool_type"
        assert ei.value.value == "BOGUS"
        assert store.configured_pool_types() == []

    def test_unknown_pool_type_on_read(self):
        with pytest.raises(InvalidParameter):
            ParameterStore(WAD // 2).get_pool_type_params("stable")  # type: ignore[arg-type]

    @pytest.mark.parametrize("value", [PoolType.VOLATILE, "VOLATILE"])
    def test_coerce_accepts_member_or_value(self, value):
        assert coerce_pool_type(value) is PoolType.VOLATILE

    @pytest.mark.parametrize("value", [None, 1, "", ["STABLE"]])
    def test_coerce_rejects_everything_else(self, value):
        with pytest.raises(InvalidParameter):
            coerce_pool_type(value)


def test_failing_emit_keeps_committed_write(caplog) -> None:
    def broken(note):
        raise RuntimeError("sink down")

    store = ParameterStore(WAD // 2, emit=broken)
    with caplog.at_level(logging.ERROR, logger="adaptive_fee.core.params"):
        note = store.set_global_max_adj_rate(WAD)
        store.set_pool_type_params(PoolType.STANDARD, _standard_params())
    assert note.new == WAD
    assert store.get_global_max_adj_rate() == WAD
    assert store.get_pool_type_params(PoolType.STANDARD) == _standard_params()
    assert len(caplog.records) == 2
