# src/ranchgrowth/modeling/types.py
from __future__ import annotations
from dataclasses import asdict, dataclass, field
from typing import Optional, Dict, Any, List, Literal, Tuple

ModelType = Literal["linear", "polynomial", "exponential", "logistic"]


class InsufficientDataError(ValueError):
    """Raised when there are too few observations to fit a model."""


class SingularMatrixError(ArithmeticError):
    """Raised by strict Gaussian elimination on a zero pivot."""


@dataclass(frozen=True)
class GrowthObservation:
    time_point: float   # days since start by convention
    length: float       # body length (cm)
    species_name: str


@dataclass
class Prediction:
    time_point: float
    predicted_length: float
    confidence_interval: Tuple[float, float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "time_point": self.time_point,
            "predicted_length": self.predicted_length,
            "confidence_interval": [self.confidence_interval[0], self.confidence_interval[1]],
        }


@dataclass
class ModelResult:
    name: str
    type: ModelType
    equation: str
    r_squared: float
    predictions: List[Prediction]
    analysis: str

    # fitted coefficients, keyed by name (slope/intercept, a0/a1/a2, a/b, K/r/t0/L0)
    params: Dict[str, float] = field(default_factory=dict)
    # None for a well-posed fit, otherwise a short reason
    degenerate: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "equation": self.equation,
            "r_squared": self.r_squared,
            "predictions": [p.to_dict() for p in self.predictions],
            "analysis": self.analysis,
            "params": dict(self.params),
            "degenerate": self.degenerate,
        }


@dataclass
class DataQuality:
    sample_size: int
    time_span: float
    growth_rate: float
    variability: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sampleSize": self.sample_size,
            "timeSpan": self.time_span,
            "growthRate": self.growth_rate,
            "variability": self.variability,
        }


@dataclass
class ModelingReport:
    models: List[ModelResult]
    best_model: ModelResult
    data_quality: DataQuality
    recommendations: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "models": [m.to_dict() for m in self.models],
            "bestModel": self.best_model.to_dict(),
            "dataQuality": self.data_quality.to_dict(),
            "recommendations": list(self.recommendations),
        }


@dataclass
class ModelingConfig:
    # Forecast
    horizon: int = 30
    z_score: float = 1.96

    # Exponential fit
    exp_floor: float = 0.1

    # Logistic heuristic (not fitted)
    logistic_growth_rate: float = 0.1
    carrying_capacity_multiplier: float = 1.2

    # Report
    min_points: int = 3
    sort_by_time: bool = False

    # Recommendation thresholds
    min_sample_size: int = 10
    min_time_span: float = 30.0
    max_variability: float = 0.3
    min_r_squared: float = 0.7

    def __post_init__(self) -> None:
        if self.horizon < 1:
            raise ValueError(f"horizon must be at least 1, got {self.horizon}")

    def to_dict(self) -> dict[str, float | int | bool]:
        return asdict(self)
