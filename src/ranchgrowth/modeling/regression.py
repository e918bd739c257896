# src/ranchgrowth/modeling/regression.py
from __future__ import annotations
import logging
import numpy as np
from typing import Callable, List, Optional, Sequence, Tuple

from .linalg import gaussian_elimination
from .types import (
    GrowthObservation, InsufficientDataError, ModelingConfig, ModelResult, Prediction,
)

DEGENERATE_IDENTICAL_TIMES = "identical time points"
DEGENERATE_NO_DOF = "no residual degrees of freedom"
DEGENERATE_SINGULAR = "singular normal equations"
DEGENERATE_ZERO_L0 = "zero initial length"


# --------- Helpers ---------
def _as_arrays(observations: Sequence[GrowthObservation]) -> Tuple[np.ndarray, np.ndarray]:
    # input order is kept on purpose; callers decide whether to sort
    x = np.array([o.time_point for o in observations], dtype=float)
    y = np.array([o.length for o in observations], dtype=float)
    return x, y


def _require(observations: Sequence[GrowthObservation], n_min: int, what: str) -> None:
    if len(observations) < n_min:
        raise InsufficientDataError(
            f"{what} needs at least {n_min} data points, got {len(observations)}"
        )


def _ols(x: np.ndarray, y: np.ndarray) -> Tuple[float, float]:
    # y = slope * x + intercept, closed form
    n = len(x)
    sum_x = np.sum(x)
    sum_y = np.sum(y)
    sum_xy = np.sum(x * y)
    sum_xx = np.sum(x * x)
    slope = (n * sum_xy - sum_x * sum_y) / (n * sum_xx - sum_x * sum_x)
    intercept = (sum_y - slope * sum_x) / n
    return slope, intercept


def _fit_stats(y: np.ndarray, y_hat: np.ndarray) -> Tuple[float, float]:
    """R² against the sample-mean baseline, plus the residual sum of squares."""
    mean_y = np.mean(y)
    ss_total = np.sum((y - mean_y) ** 2)
    ss_residual = np.sum((y - y_hat) ** 2)
    return 1.0 - ss_residual / ss_total, ss_residual


def _forecast(
    func: Callable[[np.ndarray], np.ndarray],
    max_time: float,
    ss_residual: float,
    dof: int,
    cfg: ModelingConfig,
) -> List[Prediction]:
    t = max_time + np.arange(1, cfg.horizon + 1, dtype=float)
    p = func(t)
    se = np.sqrt(ss_residual / np.float64(dof))
    point = np.maximum(0.0, p)
    lower = np.maximum(0.0, p - cfg.z_score * se)
    upper = p + cfg.z_score * se
    return [
        Prediction(
            time_point=float(tt),
            predicted_length=float(pp),
            confidence_interval=(float(lo), float(hi)),
        )
        for tt, pp, lo, hi in zip(t, point, lower, upper)
    ]


def _fmt_num(v: float) -> str:
    v = float(v)
    if np.isfinite(v) and v.is_integer():
        return str(int(v))
    return repr(v)


def _fit_label(r2: float) -> str:
    if r2 > 0.8:
        return "a good fit"
    if r2 > 0.6:
        return "a moderate fit"
    return "a poor fit"


def _flag(name: str, reason: Optional[str]) -> Optional[str]:
    if reason is not None:
        logging.warning(f"{name}: degenerate fit ({reason}); values may be NaN or infinite")
    return reason


# --------- Fitters ---------
def linear_regression(
    observations: Sequence[GrowthObservation], cfg: Optional[ModelingConfig] = None
) -> ModelResult:
    cfg = cfg or ModelingConfig()
    _require(observations, 2, "Linear regression")
    x, y = _as_arrays(observations)
    n = len(x)

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        slope, intercept = _ols(x, y)
        r2, ss_res = _fit_stats(y, slope * x + intercept)
        predictions = _forecast(lambda t: slope * t + intercept, float(np.max(x)), ss_res, n - 2, cfg)

    reason = None
    if np.ptp(x) == 0:
        reason = DEGENERATE_IDENTICAL_TIMES
    elif n - 2 <= 0:
        reason = DEGENERATE_NO_DOF

    analysis = (
        f"The linear model shows a {'positive' if slope > 0 else 'negative'} growth trend, "
        f"averaging {abs(slope):.3f} cm per day. "
        f"Goodness of fit is {r2 * 100:.1f}%, {_fit_label(r2)}."
    )
    return ModelResult(
        name="Linear regression model",
        type="linear",
        equation=f"y = {slope:.4f}x + {intercept:.4f}",
        r_squared=float(r2),
        predictions=predictions,
        analysis=analysis,
        params={"slope": float(slope), "intercept": float(intercept)},
        degenerate=_flag("linear", reason),
    )


def polynomial_regression(
    observations: Sequence[GrowthObservation], cfg: Optional[ModelingConfig] = None
) -> ModelResult:
    """Quadratic least squares via the 3x3 normal equations."""
    cfg = cfg or ModelingConfig()
    _require(observations, 3, "Quadratic regression")
    x, y = _as_arrays(observations)
    n = len(x)

    x2 = x * x
    matrix = np.array([
        [n, np.sum(x), np.sum(x2), np.sum(y)],
        [np.sum(x), np.sum(x2), np.sum(x2 * x), np.sum(x * y)],
        [np.sum(x2), np.sum(x2 * x), np.sum(x2 * x2), np.sum(x2 * y)],
    ], dtype=float)
    a0, a1, a2 = gaussian_elimination(matrix)

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        r2, ss_res = _fit_stats(y, a0 + a1 * x + a2 * x2)
        predictions = _forecast(lambda t: a0 + a1 * t + a2 * t * t, float(np.max(x)), ss_res, n - 3, cfg)

    reason = None
    # the normal matrix is singular with fewer than three distinct time points
    if np.unique(x).size < 3 or not np.all(np.isfinite([a0, a1, a2])):
        reason = DEGENERATE_SINGULAR
    elif n - 3 <= 0:
        reason = DEGENERATE_NO_DOF

    analysis = (
        f"The quadratic model captures {'accelerating' if a2 > 0 else 'decelerating'} growth: "
        f"the growth rate {'increases' if a2 > 0 else 'decreases'} over time. "
        f"Goodness of fit is {r2 * 100:.1f}%. "
        f"{'Non-linearity is pronounced.' if abs(a2) > 0.001 else 'Growth is close to linear.'}"
    )
    return ModelResult(
        name="Quadratic polynomial model",
        type="polynomial",
        equation=f"y = {a2:.6f}x² + {a1:.4f}x + {a0:.4f}",
        r_squared=float(r2),
        predictions=predictions,
        analysis=analysis,
        params={"a0": float(a0), "a1": float(a1), "a2": float(a2)},
        degenerate=_flag("polynomial", reason),
    )


def exponential_regression(
    observations: Sequence[GrowthObservation], cfg: Optional[ModelingConfig] = None
) -> ModelResult:
    """
    y = a * exp(b x), fitted by OLS on ln(max(y, floor)).

    R² is measured on the original length scale, not on the log residuals.
    """
    cfg = cfg or ModelingConfig()
    _require(observations, 2, "Exponential regression")
    x, y = _as_arrays(observations)
    n = len(x)

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        b, ln_a = _ols(x, np.log(np.maximum(cfg.exp_floor, y)))
        a = np.exp(ln_a)
        r2, ss_res = _fit_stats(y, a * np.exp(b * x))
        predictions = _forecast(lambda t: a * np.exp(b * t), float(np.max(x)), ss_res, n - 2, cfg)

    reason = None
    if np.ptp(x) == 0:
        reason = DEGENERATE_IDENTICAL_TIMES
    elif n - 2 <= 0:
        reason = DEGENERATE_NO_DOF

    if b > 0.05:
        phase = "a rapid growth phase"
    elif b > 0.01:
        phase = "a steady growth phase"
    else:
        phase = "a slow growth phase"
    analysis = (
        f"The exponential model shows {'exponential growth' if b > 0 else 'exponential decay'} "
        f"at {b * 100:.2f}% per day. Goodness of fit is {r2 * 100:.1f}%, "
        f"consistent with {phase}."
    )
    return ModelResult(
        name="Exponential growth model",
        type="exponential",
        equation=f"y = {a:.4f} × e^({b:.4f}x)",
        r_squared=float(r2),
        predictions=predictions,
        analysis=analysis,
        params={"a": float(a), "b": float(b)},
        degenerate=_flag("exponential", reason),
    )


def logistic_curve(t, K, r, t0, L0):
    # y(t) = K / (1 + ((K - L0) / L0) * exp(-r (t - t0)))
    return K / (1.0 + ((K - L0) / L0) * np.exp(-r * (t - t0)))


def logistic_regression(
    observations: Sequence[GrowthObservation], cfg: Optional[ModelingConfig] = None
) -> ModelResult:
    """
    Heuristic logistic curve, not a least-squares fit.

    K is the largest observed length times cfg.carrying_capacity_multiplier,
    r is cfg.logistic_growth_rate, and (t0, L0) is the first observation in
    input order.
    """
    cfg = cfg or ModelingConfig()
    _require(observations, 2, "Logistic model")
    x, y = _as_arrays(observations)
    n = len(x)

    K = np.max(y) * cfg.carrying_capacity_multiplier
    r = np.float64(cfg.logistic_growth_rate)
    t0 = x[0]
    L0 = y[0]

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        ratio = (K - L0) / L0
        r2, ss_res = _fit_stats(y, logistic_curve(x, K, r, t0, L0))
        # three heuristic parameters, so n - 3 degrees of freedom
        predictions = _forecast(lambda t: logistic_curve(t, K, r, t0, L0), float(np.max(x)), ss_res, n - 3, cfg)
        stage_ratio = y[-1] / K

    reason = None
    if L0 == 0:
        reason = DEGENERATE_ZERO_L0
    elif n - 3 <= 0:
        reason = DEGENERATE_NO_DOF

    if stage_ratio > 0.8:
        stage = "the mature stage"
    elif stage_ratio > 0.5:
        stage = "the rapid growth stage"
    else:
        stage = "the early growth stage"
    analysis = (
        f"The logistic model describes an S-shaped growth curve with a carrying length of "
        f"about {K:.2f} cm; the population is currently in {stage}. "
        f"Goodness of fit is {r2 * 100:.1f}%."
    )
    return ModelResult(
        name="Logistic growth model",
        type="logistic",
        equation=f"y = {K:.2f} / (1 + {ratio:.2f} × e^(-{r:.4f}(x-{_fmt_num(t0)})))",
        r_squared=float(r2),
        predictions=predictions,
        analysis=analysis,
        params={"K": float(K), "r": float(r), "t0": float(t0), "L0": float(L0)},
        degenerate=_flag("logistic", reason),
    )


def evaluate_model(result: ModelResult, t) -> np.ndarray:
    """Evaluate a fitted model at time points t from its stored params."""
    t = np.asarray(t, dtype=float)
    p = {k: np.float64(v) for k, v in result.params.items()}
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        if result.type == "linear":
            return p["slope"] * t + p["intercept"]
        if result.type == "polynomial":
            return p["a0"] + p["a1"] * t + p["a2"] * t * t
        if result.type == "exponential":
            return p["a"] * np.exp(p["b"] * t)
        if result.type == "logistic":
            return logistic_curve(t, p["K"], p["r"], p["t0"], p["L0"])
    raise ValueError(f"Unknown model type: {result.type}")


FITTERS = (
    linear_regression,
    polynomial_regression,
    exponential_regression,
    logistic_regression,
)
