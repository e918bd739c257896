# src/ranchgrowth/modeling/report.py
from __future__ import annotations
import logging
import numpy as np
from typing import List, Optional, Sequence

from .regression import FITTERS
from .types import (
    DataQuality, GrowthObservation, InsufficientDataError, ModelingConfig, ModelingReport, ModelResult,
)

REC_MORE_SAMPLES = "Collect more data points to improve prediction accuracy."
REC_LONGER_SPAN = "Extend the observation period to capture the long-term growth trend."
REC_CHECK_MEASUREMENT = "Length variability is high; check that measurements are taken consistently."
REC_OTHER_FACTORS = "Model fit is weak; other factors affecting growth may need to be considered."
REC_CHECK_ENVIRONMENT = "A negative growth trend was detected; check the environmental conditions."


def select_best_model(models: Sequence[ModelResult]) -> ModelResult:
    """Highest R², left to right; a later model must be strictly better to win."""
    best = models[0]
    for current in models[1:]:
        if current.r_squared > best.r_squared:
            best = current
    return best


def assess_data_quality(observations: Sequence[GrowthObservation]) -> DataQuality:
    """
    Sample size, time span, average growth rate and coefficient of variation.

    growth_rate uses the first and last observations as given, so it assumes
    chronological input.
    """
    t = np.array([o.time_point for o in observations], dtype=float)
    y = np.array([o.length for o in observations], dtype=float)

    with np.errstate(divide="ignore", invalid="ignore"):
        time_span = np.max(t) - np.min(t)
        growth_rate = (y[-1] - y[0]) / time_span
        mean_len = np.mean(y)
        # population standard deviation
        variability = np.sqrt(np.mean((y - mean_len) ** 2)) / mean_len

    return DataQuality(
        sample_size=int(len(observations)),
        time_span=float(time_span),
        growth_rate=float(growth_rate),
        variability=float(variability),
    )


def build_recommendations(
    quality: DataQuality, best_model: ModelResult, cfg: ModelingConfig
) -> List[str]:
    recs: List[str] = []
    if quality.sample_size < cfg.min_sample_size:
        recs.append(REC_MORE_SAMPLES)
    if quality.time_span < cfg.min_time_span:
        recs.append(REC_LONGER_SPAN)
    if quality.variability > cfg.max_variability:
        recs.append(REC_CHECK_MEASUREMENT)
    if best_model.r_squared < cfg.min_r_squared:
        recs.append(REC_OTHER_FACTORS)
    if quality.growth_rate < 0:
        recs.append(REC_CHECK_ENVIRONMENT)
    return recs


def perform_comprehensive_modeling(
    observations: Sequence[GrowthObservation], cfg: Optional[ModelingConfig] = None
) -> ModelingReport:
    """
    Fit the linear, quadratic, exponential and logistic models, pick the best
    by R² and assess data quality.

    Raises InsufficientDataError below cfg.min_points observations.
    """
    cfg = cfg or ModelingConfig()
    if len(observations) < cfg.min_points:
        raise InsufficientDataError(
            f"Insufficient data points: at least {cfg.min_points} are required for modeling"
        )

    data = list(observations)
    if cfg.sort_by_time:
        data = sorted(data, key=lambda o: o.time_point)

    models = [fit(data, cfg) for fit in FITTERS]
    best = select_best_model(models)
    quality = assess_data_quality(data)
    recommendations = build_recommendations(quality, best, cfg)

    species = {o.species_name for o in data}
    logging.info(
        f"Modeled {quality.sample_size} observations ({', '.join(sorted(species))}): "
        f"best={best.type} r2={best.r_squared:.4f}"
    )
    return ModelingReport(
        models=models,
        best_model=best,
        data_quality=quality,
        recommendations=recommendations,
    )
