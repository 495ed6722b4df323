from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from ..errors import (
    InsufficientDataError,
    InsufficientFeatureCoverageError,
    NoFeaturesError,
    NotTrainedError,
)
from ..records.models import PropertyRecord, as_records
from ..spec.models import EngineConfig
from .evaluate import EvaluationResult, evaluate_model
from .importance import FeatureImportance
from .infer import PredictionResult, predict_record
from .linear import Model, fit_model

logger = logging.getLogger(__name__)

RecordLike = PropertyRecord | Mapping[str, Any]


@dataclass(frozen=True)
class TrainingResult:
    trained: bool
    features: list[str]
    error: str | None = None
    metrics: dict[str, float] | None = None

    def as_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"trained": self.trained, "features": list(self.features)}
        if self.error is not None:
            out["error"] = self.error
        if self.metrics is not None:
            out["metrics"] = dict(self.metrics)
        return out


def _presence_ratio(records: Sequence[PropertyRecord], name: str) -> float:
    return sum(1 for r in records if r.has(name)) / len(records)


class PropertyValueModel:
    """Multiple linear regression over property records.

    The trained state is a single immutable :class:`Model` swapped in on a
    successful ``train()`` and dropped on ``reset()`` or a failed ``train()``.
    Instances are not meant to be trained from several threads at once.
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.config = config or EngineConfig()
        self._model: Model | None = None

    @property
    def is_trained(self) -> bool:
        return self._model is not None

    @property
    def features(self) -> list[str]:
        model = self._model
        return list(model.features) if model is not None else []

    @property
    def model(self) -> Model:
        return self._require_model()

    def _require_model(self) -> Model:
        model = self._model
        if model is None:
            raise NotTrainedError()
        return model

    def _check_training_data(self, features: list[str], records: list[PropertyRecord]) -> None:
        if len(records) < self.config.min_records:
            raise InsufficientDataError(self.config.min_records)
        if not features:
            raise NoFeaturesError()
        for column in [*features, "value"]:
            ratio = _presence_ratio(records, column)
            if ratio < self.config.min_coverage:
                raise InsufficientFeatureCoverageError(column, ratio)

    def train(self, features: Iterable[str], records: Iterable[RecordLike]) -> TrainingResult:
        feats = list(features)
        self._model = None
        try:
            recs = as_records(records)
            self._check_training_data(feats, recs)
            model = fit_model(feats, recs, eps=self.config.pivot_epsilon)
            evaluation = evaluate_model(model, recs, self.config.missing_penalty)
        except (InsufficientDataError, NoFeaturesError, InsufficientFeatureCoverageError) as e:
            logger.info("training rejected: %s", e)
            return TrainingResult(trained=False, features=feats, error=str(e))
        except Exception as e:
            logger.warning("training failed: %s", e)
            return TrainingResult(trained=False, features=feats, error=f"training failed: {e}")

        self._model = model
        logger.debug(
            "trained on %d properties, features=%s r2=%.4f rmse=%.2f",
            len(recs),
            feats,
            evaluation.r2,
            evaluation.rmse,
        )
        return TrainingResult(
            trained=True,
            features=feats,
            metrics={"r2": evaluation.r2, "rmse": evaluation.rmse},
        )

    def predict(self, record: RecordLike) -> PredictionResult:
        return predict_record(self._require_model(), record, self.config.missing_penalty)

    def evaluate(self, records: Iterable[RecordLike]) -> EvaluationResult:
        return evaluate_model(self._require_model(), records, self.config.missing_penalty)

    def get_feature_importance(self) -> list[FeatureImportance]:
        return list(self._require_model().importance)

    def reset(self) -> None:
        self._model = None
