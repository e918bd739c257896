from __future__ import annotations

import math

import numpy as np
import pytest

from ranchgrowth.modeling.report import (
    REC_CHECK_ENVIRONMENT,
    REC_CHECK_MEASUREMENT,
    REC_LONGER_SPAN,
    REC_MORE_SAMPLES,
    REC_OTHER_FACTORS,
    assess_data_quality,
    perform_comprehensive_modeling,
    select_best_model,
)
from ranchgrowth.modeling.types import (
    GrowthObservation, InsufficientDataError, ModelingConfig, ModelResult,
)


def _obs(xs, ys, species="tilapia") -> list[GrowthObservation]:
    return [GrowthObservation(float(x), float(y), species) for x, y in zip(xs, ys)]


def _steady(n: int, span: float) -> list[GrowthObservation]:
    # clean linear growth: good fit, low variability, positive rate
    x = np.linspace(0.0, span, n)
    return _obs(x, 20.0 + 0.1 * x)


def _stub(model_type: str, r2: float) -> ModelResult:
    return ModelResult(name=model_type, type=model_type, equation="", r_squared=r2, predictions=[], analysis="x")


@pytest.mark.parametrize("n", [0, 1, 2])
def test_insufficient_data_raises(n):
    with pytest.raises(InsufficientDataError):
        perform_comprehensive_modeling(_obs(range(n), range(1, n + 1)))


def test_three_points_is_enough():
    report = perform_comprehensive_modeling(_obs([0, 1, 2], [1, 3, 7]))
    assert len(report.models) == 4
    poly = report.models[1]
    assert poly.r_squared == pytest.approx(1.0, abs=1e-9)


def test_report_structure():
    x = np.arange(0.0, 60.0, 5.0)
    y = 4.0 + 0.5 * x - 0.003 * x ** 2
    report = perform_comprehensive_modeling(_obs(x, y))
    assert [m.type for m in report.models] == ["linear", "polynomial", "exponential", "logistic"]
    assert all(len(m.predictions) == 30 for m in report.models)
    assert sum(m is report.best_model for m in report.models) == 1
    assert all(report.best_model.r_squared >= m.r_squared for m in report.models)
    assert report.best_model.type == "polynomial"


def test_linear_wins_ties():
    report = perform_comprehensive_modeling(_obs([1, 2, 3, 4], [2, 4, 6, 8]))
    assert report.best_model is report.models[0]


def test_select_best_model_first_wins_and_nan_never_wins():
    a, b, c = _stub("linear", 0.9), _stub("polynomial", 0.9), _stub("exponential", float("nan"))
    assert select_best_model([a, b, c]) is a
    d = _stub("logistic", 0.95)
    assert select_best_model([a, c, d]) is d


def test_data_quality_values():
    obs = _obs([0, 10, 20, 30], [2, 4, 6, 8])
    q = assess_data_quality(obs)
    assert q.sample_size == 4
    assert q.time_span == 30.0
    assert q.growth_rate == pytest.approx(6.0 / 30.0)
    lengths = np.array([2.0, 4.0, 6.0, 8.0])
    assert q.variability == pytest.approx(lengths.std() / lengths.mean())


def test_growth_rate_follows_input_order():
    obs = _obs([30, 0, 10, 20], [8, 2, 4, 6])
    # last-minus-first in the order given, not chronologically
    assert assess_data_quality(obs).growth_rate == pytest.approx((6.0 - 8.0) / 30.0)

    unsorted = perform_comprehensive_modeling(obs)
    assert REC_CHECK_ENVIRONMENT in unsorted.recommendations
    hardened = perform_comprehensive_modeling(obs, ModelingConfig(sort_by_time=True))
    assert hardened.data_quality.growth_rate == pytest.approx(6.0 / 30.0)
    assert REC_CHECK_ENVIRONMENT not in hardened.recommendations
    assert hardened.models[3].params["t0"] == 0.0


def test_clean_dataset_has_no_recommendations():
    report = perform_comprehensive_modeling(_steady(10, 45.0))
    assert report.recommendations == []


def test_sample_size_rule_boundary():
    assert perform_comprehensive_modeling(_steady(9, 45.0)).recommendations == [REC_MORE_SAMPLES]
    assert REC_MORE_SAMPLES not in perform_comprehensive_modeling(_steady(10, 45.0)).recommendations


def test_time_span_rule_boundary():
    assert REC_LONGER_SPAN not in perform_comprehensive_modeling(_steady(10, 30.0)).recommendations
    assert perform_comprehensive_modeling(_steady(10, 29.9)).recommendations == [REC_LONGER_SPAN]


def test_variability_rule():
    x = np.linspace(0.0, 45.0, 10)
    y = 1.0 + 2.0 * x
    report = perform_comprehensive_modeling(_obs(x, y))
    assert report.data_quality.variability > 0.3
    assert report.recommendations == [REC_CHECK_MEASUREMENT]


def test_poor_fit_rule():
    x = np.linspace(0.0, 45.0, 10)
    y = np.array([20.0, 22.0] * 5)
    report = perform_comprehensive_modeling(_obs(x, y))
    assert report.best_model.r_squared < 0.7
    assert REC_OTHER_FACTORS in report.recommendations


def test_all_rules_fire_in_order():
    report = perform_comprehensive_modeling(_obs([0, 1, 2, 3], [10, 1, 12, 2]))
    assert report.recommendations == [
        REC_MORE_SAMPLES,
        REC_LONGER_SPAN,
        REC_CHECK_MEASUREMENT,
        REC_OTHER_FACTORS,
        REC_CHECK_ENVIRONMENT,
    ]


def _check_interval_order(report) -> int:
    """Return the number of rows whose unclamped upper bound fell below zero."""
    below_zero = 0
    for m in report.models:
        for p in m.predictions:
            lo, hi = p.confidence_interval
            if not (math.isfinite(lo) and math.isfinite(hi)):
                continue
            assert lo <= p.predicted_length
            if hi >= 0.0:
                assert p.predicted_length <= hi
            else:
                # point is clamped at 0, upper bound is not
                assert p.predicted_length == 0.0
                below_zero += 1
    return below_zero


def test_confidence_intervals_ordered_when_finite():
    x = np.arange(0.0, 50.0, 5.0)
    y = 3.0 + 0.4 * x + np.array([0.2, -0.1, 0.3, -0.2, 0.1, -0.3, 0.2, 0.0, -0.1, 0.1])
    report = perform_comprehensive_modeling(_obs(x, y))
    assert _check_interval_order(report) == 0


def test_declining_series_upper_bound_drops_below_clamped_point():
    report = perform_comprehensive_modeling(_obs([0, 1, 2, 3, 4], [10, 8.1, 5.9, 4.1, 1.9]))
    assert _check_interval_order(report) > 0
    first = report.models[0].predictions[1]
    assert first.time_point == 6.0
    assert first.predicted_length == 0.0
    assert first.confidence_interval[0] == 0.0
    assert first.confidence_interval[1] < 0.0


def test_to_dict_uses_camel_case_keys():
    d = perform_comprehensive_modeling(_steady(10, 45.0)).to_dict()
    assert set(d) == {"models", "bestModel", "dataQuality", "recommendations"}
    assert set(d["dataQuality"]) == {"sampleSize", "timeSpan", "growthRate", "variability"}
    assert len(d["bestModel"]["predictions"]) == 30
    assert len(d["bestModel"]["predictions"][0]["confidence_interval"]) == 2


def test_custom_horizon():
    report = perform_comprehensive_modeling(_steady(10, 45.0), ModelingConfig(horizon=5))
    assert all(len(m.predictions) == 5 for m in report.models)


@pytest.mark.parametrize("horizon", [0, -5])
def test_non_positive_horizon_rejected(horizon):
    with pytest.raises(ValueError):
        ModelingConfig(horizon=horizon)
