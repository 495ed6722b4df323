from __future__ import annotations

from decimal import Decimal

import numpy as np
import pytest

from propval import NotTrainedError, PropertyValueModel
from propval.records.models import FEATURE_NAMES, PropertyRecord
from propval.spec.models import EngineConfig

THREE = ["square_feet", "bedrooms", "year_built"]


def _residential(n: int) -> list[dict]:
    base = [
        {"squareFeet": 1850, "bedrooms": 3, "yearBuilt": 1998, "value": "310000"},
        {"squareFeet": 2200, "bedrooms": 4, "yearBuilt": 2005, "value": "380000"},
        {"squareFeet": 1500, "bedrooms": 2, "yearBuilt": 1985, "value": "280000"},
        {"squareFeet": 2000, "bedrooms": 3, "yearBuilt": 2010, "value": "350000"},
    ]
    return (base * (n // len(base) + 1))[:n]


def test_empty_records_rejected():
    result = PropertyValueModel().train(THREE, [])
    assert result.trained is False
    assert "insufficient data" in result.error
    assert result.metrics is None


def test_four_records_are_not_enough():
    result = PropertyValueModel().train(THREE, _residential(4))
    assert not result.trained
    assert result.error == (
        "insufficient data for reliable training (minimum 10 properties required)"
    )


def test_train_reports_metrics(linear_records):
    model = PropertyValueModel()
    result = model.train(THREE, linear_records)
    assert result.trained
    assert "square_feet" in result.features
    assert result.error is None
    assert set(result.metrics) == {"r2", "rmse"}
    assert model.is_trained
    assert model.features == THREE


def test_exact_linear_data_is_recovered(linear_records):
    model = PropertyValueModel()
    assert model.train(FEATURE_NAMES, linear_records).trained
    for rec in linear_records:
        pred = model.predict(rec)
        assert pred.value == pytest.approx(float(rec.value), rel=1e-6)
        assert pred.confidence == 1.0
        assert pred.warning is None
    evaluation = model.evaluate(linear_records)
    assert evaluation.r2 == pytest.approx(1.0, abs=1e-9)
    assert evaluation.accuracy == pytest.approx(1.0, abs=1e-6)


def test_missing_feature_coverage_rejected(linear_records):
    recs = [
        r.model_copy(update={"bedrooms": None}) if i < 7 else r
        for i, r in enumerate(linear_records)
    ]
    result = PropertyValueModel().train(THREE, recs)
    assert not result.trained
    assert result.error == "selected features have too many missing values"


def test_missing_target_coverage_rejected(linear_records):
    recs = [
        r.model_copy(update={"value": None}) if i < 7 else r
        for i, r in enumerate(linear_records)
    ]
    result = PropertyValueModel().train(THREE, recs)
    assert result.error == "selected features have too many missing values"


def test_no_features_rejected(linear_records):
    result = PropertyValueModel().train([], linear_records)
    assert not result.trained
    assert result.error == "no features selected for training"


def test_collinear_features_fail_cleanly(linear_records):
    recs = [
        PropertyRecord.model_validate({**r.model_dump(), "sqft_copy": r.square_feet})
        for r in linear_records
    ]
    model = PropertyValueModel()
    result = model.train(["square_feet", "sqft_copy"], recs)
    assert not result.trained
    assert result.error.startswith("training failed: ")
    assert "singular" in result.error
    assert not model.is_trained


def test_failed_retrain_leaves_model_untrained(linear_records):
    model = PropertyValueModel()
    assert model.train(THREE, linear_records).trained
    assert not model.train(THREE, linear_records[:3]).trained
    with pytest.raises(NotTrainedError):
        model.predict(linear_records[0])


def test_prediction_with_missing_features(linear_records):
    model = PropertyValueModel()
    model.train(THREE, linear_records)
    full = model.predict({"squareFeet": 1800, "bedrooms": 3, "yearBuilt": 2001})
    assert full.value > 0
    assert 0.0 <= full.confidence <= 1.0
    assert full.formatted_value.startswith("$")

    partial = model.predict({"bedrooms": 3})
    assert partial.confidence == pytest.approx(1 - (2 / 3) * 0.5)
    assert partial.confidence < 0.8
    assert partial.warning == "Missing 2 features; prediction may be less accurate"
    assert "warning" in partial.as_dict()
    assert "warning" not in full.as_dict()


def test_all_features_missing_uses_training_means(linear_records):
    model = PropertyValueModel()
    model.train(THREE, linear_records)
    pred = model.predict({})
    assert pred.confidence == pytest.approx(0.5)
    stats = model.model.stats
    assert pred.value == pytest.approx(stats.mean_target + model.model.intercept * stats.std_target)


def test_malformed_record_degrades_instead_of_raising(linear_records):
    model = PropertyValueModel()
    model.train(THREE, linear_records)
    pred = model.predict({"square_feet": "about 2k", "bedrooms": [3], "year_built": 2001})
    assert pred.value >= 0.0
    assert pred.confidence == 1.0


def test_predictions_never_negative(linear_records):
    model = PropertyValueModel()
    model.train(THREE, linear_records)
    assert model.model.coefficient("square_feet") > 0
    pred = model.predict({"square_feet": -1e7, "bedrooms": 3, "year_built": 2001})
    assert pred.value == 0.0
    assert pred.formatted_value == "$0"
    huge = model.predict({"square_feet": 1e308, "bedrooms": -1e308, "year_built": 1e308})
    assert huge.value >= 0.0


def test_feature_importance_sorted(linear_records):
    model = PropertyValueModel()
    model.train(FEATURE_NAMES, linear_records)
    importance = model.get_feature_importance()
    assert len(importance) == 5
    assert {fi.feature for fi in importance} == set(FEATURE_NAMES)
    values = [fi.importance for fi in importance]
    assert values == sorted(values, reverse=True)
    stats = model.model.stats
    for fi in importance:
        expected = abs(fi.coefficient * stats.std(fi.feature) / stats.std_target)
        assert fi.importance == pytest.approx(expected)
    # callers get a copy
    importance.clear()
    assert len(model.get_feature_importance()) == 5


def test_training_is_deterministic(linear_records):
    a, b = PropertyValueModel(), PropertyValueModel()
    a.train(FEATURE_NAMES, linear_records)
    b.train(FEATURE_NAMES, linear_records)
    assert a.model.intercept == pytest.approx(b.model.intercept)
    for f in FEATURE_NAMES:
        assert a.model.coefficient(f) == pytest.approx(b.model.coefficient(f))


@pytest.mark.parametrize(
    "call",
    [
        lambda m, recs: m.predict(recs[0]),
        lambda m, recs: m.evaluate(recs),
        lambda m, recs: m.get_feature_importance(),
    ],
)
def test_reset_returns_to_untrained(linear_records, call):
    model = PropertyValueModel()
    assert model.train(THREE, linear_records).trained
    model.reset()
    assert not model.is_trained
    assert model.features == []
    with pytest.raises(NotTrainedError):
        call(model, linear_records)


def test_untrained_model_raises():
    with pytest.raises(NotTrainedError, match="has not been trained"):
        PropertyValueModel().predict({"square_feet": 1})


def test_engine_config_thresholds(linear_records):
    model = PropertyValueModel(EngineConfig(min_records=20))
    result = model.train(THREE, linear_records)
    assert "minimum 20 properties" in result.error


def test_matches_sklearn_reference(linear_records):
    sklearn = pytest.importorskip("sklearn")  # noqa: F841
    from sklearn.linear_model import LinearRegression

    noisy = [
        r.model_copy(update={"value": float(r.value) + (-1) ** i * 5000.0})
        for i, r in enumerate(linear_records)
    ]
    model = PropertyValueModel()
    model.train(THREE, noisy)
    X = np.array([[r.square_feet, r.bedrooms, r.year_built] for r in noisy], dtype=float)
    y = np.array([r.value for r in noisy], dtype=float)
    ref = LinearRegression().fit(X, y).predict(X)
    ours = [model.predict(r).value for r in noisy]
    assert ours == pytest.approx(list(ref), rel=1e-6)


@pytest.mark.parametrize("sqft", [np.int64(2400), np.float32(2400), Decimal("2400")])
def test_numpy_and_decimal_inputs_predict_like_builtins(linear_records, sqft):
    model = PropertyValueModel()
    model.train(THREE, linear_records)
    expected = model.predict({"square_feet": 2400, "bedrooms": 4, "year_built": 2010})
    pred = model.predict({"square_feet": sqft, "bedrooms": np.int64(4), "year_built": 2010})
    assert pred.value == pytest.approx(expected.value)
    assert pred.confidence == 1.0


def test_training_on_numpy_records_matches_builtins(linear_records):
    rows = [
        {
            "square_feet": np.int64(r.square_feet),
            "bedrooms": np.int32(r.bedrooms),
            "year_built": np.int64(r.year_built),
            "value": Decimal(r.value),
        }
        for r in linear_records
    ]
    builtin, numpy_model = PropertyValueModel(), PropertyValueModel()
    builtin.train(THREE, linear_records)
    assert numpy_model.train(THREE, rows).trained
    for f in THREE:
        assert numpy_model.model.coefficient(f) == pytest.approx(builtin.model.coefficient(f))


def test_non_string_keys_do_not_break_predict_or_evaluate(linear_records):
    model = PropertyValueModel()
    model.train(THREE, linear_records)
    pred = model.predict({1: 2, "square_feet": 1500, "bedrooms": 3, "year_built": 2000})
    assert pred.value > 0.0
    evaluation = model.evaluate([{None: "x", "square_feet": 1500, "value": "250000"}])
    assert len(evaluation.predictions) == 1
