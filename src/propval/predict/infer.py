from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import numpy as np

from ..records.models import PropertyRecord, as_record, numeric_attribute
from ..utils.formatting import format_currency
from .linear import Model
from .normalize import normalize_row


@dataclass(frozen=True)
class PredictionResult:
    value: float
    formatted_value: str
    confidence: float
    warning: str | None = None

    def as_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "value": self.value,
            "formattedValue": self.formatted_value,
            "confidence": self.confidence,
        }
        if self.warning is not None:
            out["warning"] = self.warning
        return out


def missing_features(model: Model, record: PropertyRecord) -> list[str]:
    return [f for f in model.features if not record.has(f)]


def confidence_for(n_missing: int, n_features: int, penalty: float = 0.5) -> float:
    if n_features == 0:
        return 0.0
    return max(0.0, 1.0 - (n_missing / n_features) * penalty)


def predict_record(
    model: Model, record: PropertyRecord | Mapping[str, Any], missing_penalty: float = 0.5
) -> PredictionResult:
    """Predict one property's value.

    Missing features fall back to their training mean and lower the
    confidence; present values that are not numbers count as 0.
    """
    rec = as_record(record)
    missing = missing_features(model, rec)
    confidence = confidence_for(len(missing), len(model.features), missing_penalty)

    raw: list[float] = []
    for feature in model.features:
        if not rec.has(feature):
            raw.append(model.stats.mean(feature))
            continue
        v = numeric_attribute(rec, feature)
        raw.append(0.0 if v is None else v)

    coef = np.array([model.coefficient(f) for f in model.features], dtype=np.float64)
    with np.errstate(over="ignore", invalid="ignore"):
        z = normalize_row(model.features, raw, model.stats)
        normalized = model.intercept + float(coef @ z)
    value = normalized * model.stats.std_target + model.stats.mean_target
    # clamp: negative and overflowed predictions are reported as 0
    value = max(0.0, value) if math.isfinite(value) else 0.0

    warning = None
    if missing:
        warning = f"Missing {len(missing)} features; prediction may be less accurate"
    return PredictionResult(
        value=value,
        formatted_value=format_currency(value),
        confidence=confidence,
        warning=warning,
    )
