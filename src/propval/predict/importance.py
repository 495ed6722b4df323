from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass

from .normalize import TrainingStatistics


@dataclass(frozen=True)
class FeatureImportance:
    feature: str
    importance: float  # |standardized coefficient|
    coefficient: float

    def as_dict(self) -> dict[str, float | str]:
        return asdict(self)


def rank_features(
    features: Sequence[str], coefficients: Mapping[str, float], stats: TrainingStatistics
) -> list[FeatureImportance]:
    """Standardized coefficients ``|coef * std_f / std_target|``, largest first.

    Ties keep the training feature order.
    """
    std_target = stats.std_target or 1.0
    ranked = [
        FeatureImportance(
            feature=f,
            importance=abs(coefficients.get(f, 0.0) * stats.std(f) / std_target),
            coefficient=coefficients.get(f, 0.0),
        )
        for f in features
    ]
    return sorted(ranked, key=lambda fi: -fi.importance)
