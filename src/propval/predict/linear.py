from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ..records.models import PropertyRecord
from .importance import FeatureImportance, rank_features
from .normalize import TrainingStatistics, build_design_matrix, compute_statistics
from .solver import DEFAULT_PIVOT_EPSILON, solve_normal_equation


@dataclass(frozen=True)
class Model:
    """A fitted regression model. Never mutated; retraining builds a new one."""

    features: tuple[str, ...]
    coefficients: dict[str, float]  # keys == features, normalized space
    intercept: float
    stats: TrainingStatistics
    importance: tuple[FeatureImportance, ...]

    def coefficient(self, feature: str) -> float:
        return self.coefficients.get(feature, 0.0)


def fit_model(
    features: Sequence[str],
    records: Sequence[PropertyRecord],
    eps: float = DEFAULT_PIVOT_EPSILON,
) -> Model:
    feats = tuple(features)
    stats = compute_statistics(feats, records)
    X, y = build_design_matrix(feats, records, stats)
    intercept, beta = solve_normal_equation(X, y, eps=eps)
    coefficients = {f: float(beta[i]) for i, f in enumerate(feats)}
    return Model(
        features=feats,
        coefficients=coefficients,
        intercept=intercept,
        stats=stats,
        importance=tuple(rank_features(feats, coefficients, stats)),
    )
