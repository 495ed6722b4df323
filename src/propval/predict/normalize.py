from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from ..errors import TrainingComputationError
from ..records.models import PropertyRecord, numeric_attribute, parse_target


@dataclass(frozen=True)
class TrainingStatistics:
    mean_values: dict[str, float]
    std_values: dict[str, float]
    mean_target: float
    std_target: float

    def mean(self, feature: str) -> float:
        return self.mean_values.get(feature, 0.0)

    def std(self, feature: str) -> float:
        return self.std_values.get(feature, 1.0)


def _mean_std(values: list[float]) -> tuple[float, float]:
    """Population mean and standard deviation; a zero or empty spread becomes 1."""
    if not values:
        return 0.0, 1.0
    arr = np.asarray(values, dtype=np.float64)
    mean = float(arr.mean())
    std = float(arr.std())
    return mean, (std if std > 0.0 else 1.0)


def compute_statistics(
    features: Sequence[str], records: Sequence[PropertyRecord]
) -> TrainingStatistics:
    """Per-feature and target statistics over the positive numeric values present."""
    mean_values: dict[str, float] = {}
    std_values: dict[str, float] = {}
    for feature in features:
        vals = [v for r in records if (v := numeric_attribute(r, feature)) is not None and v > 0]
        mean_values[feature], std_values[feature] = _mean_std(vals)

    targets = [t for r in records if (t := parse_target(r.value)) is not None]
    if not targets:
        raise TrainingComputationError("no properties with a positive value to train on")
    mean_target, std_target = _mean_std(targets)
    return TrainingStatistics(
        mean_values=mean_values,
        std_values=std_values,
        mean_target=mean_target,
        std_target=std_target,
    )


def normalize_row(
    features: Sequence[str], raw: Sequence[float], stats: TrainingStatistics
) -> np.ndarray:
    mean = np.array([stats.mean(f) for f in features], dtype=np.float64)
    std = np.array([stats.std(f) for f in features], dtype=np.float64)
    return (np.asarray(raw, dtype=np.float64) - mean) / std


def build_design_matrix(
    features: Sequence[str], records: Sequence[PropertyRecord], stats: TrainingStatistics
) -> tuple[np.ndarray, np.ndarray]:
    """Return normalized ``X`` (n, p) and ``y`` (n,).

    Records without a positive parsable value are skipped. Missing or
    non-numeric feature values are replaced by the feature mean.
    """
    rows: list[list[float]] = []
    targets: list[float] = []
    for record in records:
        target = parse_target(record.value)
        if target is None:
            continue
        row = []
        for feature in features:
            v = numeric_attribute(record, feature)
            row.append(stats.mean(feature) if v is None else v)
        rows.append(row)
        targets.append(target)

    if not rows:
        raise TrainingComputationError("no properties with a positive value to train on")
    raw = np.asarray(rows, dtype=np.float64)
    mean = np.array([stats.mean(f) for f in features], dtype=np.float64)
    std = np.array([stats.std(f) for f in features], dtype=np.float64)
    X = (raw - mean) / std
    y = (np.asarray(targets, dtype=np.float64) - stats.mean_target) / stats.std_target
    return X, y
