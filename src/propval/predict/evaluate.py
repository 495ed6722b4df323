from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from ..records.models import PropertyRecord, as_record, parse_target
from .infer import predict_record
from .linear import Model


@dataclass(frozen=True)
class EvaluatedPrediction:
    actual: float
    predicted: float
    error: float
    percent_error: float


@dataclass(frozen=True)
class EvaluationResult:
    accuracy: float
    rmse: float
    r2: float
    predictions: list[EvaluatedPrediction] = field(default_factory=list)

    def as_dict(self, include_predictions: bool = True) -> dict[str, Any]:
        out: dict[str, Any] = {"accuracy": self.accuracy, "rmse": self.rmse, "r2": self.r2}
        if include_predictions:
            out["predictions"] = [
                {
                    "actual": p.actual,
                    "predicted": p.predicted,
                    "error": p.error,
                    "percentError": p.percent_error,
                }
                for p in self.predictions
            ]
        return out


def pearson_r(actual: np.ndarray, predicted: np.ndarray) -> float:
    """Pearson correlation from raw sums; 0.0 when either side has no spread."""
    n = float(actual.size)
    sum_a = actual.sum()
    sum_p = predicted.sum()
    num = n * float(actual @ predicted) - sum_a * sum_p
    spread = (n * float(actual @ actual) - sum_a**2) * (n * float(predicted @ predicted) - sum_p**2)
    if not spread > 0.0 or not math.isfinite(spread):
        return 0.0
    return float(num / math.sqrt(spread))


def evaluate_model(
    model: Model,
    records: Iterable[PropertyRecord | Mapping[str, Any]],
    missing_penalty: float = 0.5,
) -> EvaluationResult:
    """Score ``model`` against records carrying a positive value, in input order.

    Records without a parsable positive value are skipped and not counted.
    """
    rows: list[EvaluatedPrediction] = []
    for obj in records:
        rec = as_record(obj)
        actual = parse_target(rec.value)
        if actual is None:
            continue
        predicted = predict_record(model, rec, missing_penalty).value
        error = predicted - actual
        rows.append(
            EvaluatedPrediction(
                actual=actual,
                predicted=predicted,
                error=error,
                percent_error=error / actual * 100.0,
            )
        )

    if not rows:
        return EvaluationResult(accuracy=0.0, rmse=0.0, r2=0.0, predictions=[])

    actual = np.array([p.actual for p in rows], dtype=np.float64)
    predicted = np.array([p.predicted for p in rows], dtype=np.float64)
    errors = predicted - actual
    rmse = float(np.sqrt(np.mean(errors**2)))
    r = pearson_r(actual, predicted)
    mape = float(np.mean(np.abs([p.percent_error for p in rows])))
    return EvaluationResult(
        accuracy=max(0.0, 1.0 - mape / 100.0),
        rmse=rmse,
        r2=r * r,
        predictions=rows,
    )
