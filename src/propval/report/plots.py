from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from ..predict.evaluate import EvaluationResult
from ..predict.importance import FeatureImportance


def _pyplot():
    try:
        import matplotlib

        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
    except Exception as e:  # pragma: no cover
        raise RuntimeError("matplotlib not installed. Install extras: '.[ml]'") from e
    return plt


def plot_predicted_vs_actual(
    evaluation: EvaluationResult,
    out_path: str | Path,
    title: str = "Predicted vs actual value",
) -> None:
    plt = _pyplot()
    actual = [p.actual for p in evaluation.predictions]
    predicted = [p.predicted for p in evaluation.predictions]
    hi = max(actual + predicted, default=1.0)
    fig, ax = plt.subplots(figsize=(4, 4), dpi=150)
    ax.plot([0, hi], [0, hi], "k--", lw=1, label="ideal")
    ax.scatter(actual, predicted, s=12, label="properties")
    ax.set_xlim(0, hi * 1.05)
    ax.set_ylim(0, hi * 1.05)
    ax.set_xlabel("actual value ($)")
    ax.set_ylabel("predicted value ($)")
    ax.set_title(f"{title}\nR²={evaluation.r2:.3f}  RMSE={evaluation.rmse:,.0f}")
    ax.legend()
    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(out_path)
    plt.close(fig)


def plot_feature_importance(
    importance: Sequence[FeatureImportance],
    out_path: str | Path,
    title: str = "Feature importance",
) -> None:
    plt = _pyplot()
    # largest at the top
    names = [fi.feature for fi in reversed(importance)]
    values = [fi.importance for fi in reversed(importance)]
    fig, ax = plt.subplots(figsize=(5, 0.5 * max(len(names), 2) + 1), dpi=150)
    ax.barh(names, values)
    ax.set_xlabel("|standardized coefficient|")
    ax.set_title(title)
    Path(out_path).parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(out_path)
    plt.close(fig)
