from __future__ import annotations

from typing import Optional, Sequence
import numpy as np

from ranchgrowth.modeling.regression import evaluate_model
from ranchgrowth.modeling.types import GrowthObservation, ModelingReport, ModelResult


def _band(model: ModelResult) -> dict:
    t = np.array([p.time_point for p in model.predictions], dtype=float)
    return {
        "t": t,
        "y_hat": np.array([p.predicted_length for p in model.predictions], dtype=float),
        "lower": np.array([p.confidence_interval[0] for p in model.predictions], dtype=float),
        "upper": np.array([p.confidence_interval[1] for p in model.predictions], dtype=float),
    }


def build_chart_payload(
    report: ModelingReport,
    observations: Sequence[GrowthObservation],
    *,
    n_grid: int = 200,
    model: Optional[ModelResult] = None,
) -> dict:
    """
    Arrays for a growth chart: observed points, the fitted curve over the
    observed range and the forecast band. Defaults to the best model.
    """
    m = model if model is not None else report.best_model
    t_obs = np.array([o.time_point for o in observations], dtype=float)
    y_obs = np.array([o.length for o in observations], dtype=float)

    if t_obs.size:
        t_grid = np.linspace(float(np.min(t_obs)), float(np.max(t_obs)), n_grid)
        y_fit = evaluate_model(m, t_grid)
    else:
        t_grid = np.array([], dtype=float)
        y_fit = np.array([], dtype=float)

    return {
        "model_type": m.type,
        "title": f"{m.name} - R² = {m.r_squared:.3f}",
        "observed": {"t": t_obs, "y": y_obs},
        "fit": {"t": t_grid, "y_hat": y_fit},
        "forecast": _band(m),
        "models": {r.type: r.r_squared for r in report.models},
    }
