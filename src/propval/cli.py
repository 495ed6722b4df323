from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

from . import __version__
from .predict.datasets import load_records
from .predict.model import PropertyValueModel, TrainingResult
from .report.plots import plot_feature_importance, plot_predicted_vs_actual
from .spec.models import TrainingSpec, validate_spec_payload
from .utils.formatting import confidence_label
from .utils.io import dump_json, load_yaml_or_json
from .utils.run import log_event, new_run_id, snapshot_config


def _add_training_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--spec",
        type=str,
        required=False,
        help="Path to a training spec YAML/JSON (features, data, engine settings)",
    )
    p.add_argument(
        "--data",
        type=str,
        required=False,
        help="Training records (CSV/JSON/JSONL) or 'sample' for the bundled dataset",
    )
    p.add_argument(
        "--features",
        type=str,
        required=False,
        help="Comma-separated, ordered feature names (e.g. square_feet,bedrooms)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="propval",
        description="Property value regression engine: train, predict, evaluate.",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"propval {__version__}",
        help="Show version and exit",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command")

    train_parser = subparsers.add_parser(
        "train", help="Train on property records and print metrics and feature importance"
    )
    _add_training_args(train_parser)
    train_parser.add_argument(
        "--importance-plot", type=str, required=False, help="Write a feature importance PNG"
    )
    train_parser.add_argument(
        "--run-log",
        action="store_true",
        help="Record the run under artifacts/<run_id>/ (config snapshot + JSONL events)",
    )
    train_parser.add_argument(
        "--artifacts", type=str, default="artifacts", help="Root directory for run artifacts"
    )

    predict_parser = subparsers.add_parser(
        "predict", help="Train, then predict values for the given records"
    )
    _add_training_args(predict_parser)
    predict_parser.add_argument(
        "--records", type=str, required=True, help="Records to value (CSV/JSON/JSONL)"
    )

    evaluate_parser = subparsers.add_parser(
        "evaluate", help="Train, then report accuracy on a holdout (or the training data)"
    )
    _add_training_args(evaluate_parser)
    evaluate_parser.add_argument(
        "--holdout", type=str, required=False, help="Evaluation records; defaults to training data"
    )
    evaluate_parser.add_argument(
        "--plot", type=str, required=False, help="Write a predicted-vs-actual PNG"
    )
    evaluate_parser.add_argument(
        "--details", action="store_true", help="Include per-record predictions in the output"
    )

    schema_parser = subparsers.add_parser("schema", help="Print the training spec JSON Schema")
    schema_parser.add_argument(
        "--out",
        type=str,
        required=False,
        help="Optional path to write the JSON schema",
    )

    return parser


def _resolve_spec(args: argparse.Namespace) -> tuple[TrainingSpec, dict[str, Any]]:
    payload: dict[str, Any] = load_yaml_or_json(args.spec) if args.spec else {}
    if args.data:
        payload["data"] = args.data
    if args.features:
        payload["features"] = [f.strip() for f in args.features.split(",") if f.strip()]
    return validate_spec_payload(payload), payload


def _train(spec: TrainingSpec) -> tuple[PropertyValueModel, TrainingResult]:
    records = load_records(spec.data)
    model = PropertyValueModel(spec.engine)
    return model, model.train(spec.features, records)


def _report_failure(result: TrainingResult) -> int:
    sys.stderr.write(f"Training failed: {result.error}\n")
    return 2


def _cmd_train(args: argparse.Namespace) -> int:
    spec, payload = _resolve_spec(args)
    run_id = None
    if args.run_log:
        run_id = new_run_id()
        snapshot_config(run_id, payload, root=args.artifacts)
        log_event(run_id, "train_start", root=args.artifacts, features=spec.features)

    model, result = _train(spec)
    if run_id:
        log_event(run_id, "train_end", root=args.artifacts, **result.as_dict())
    if not result.trained:
        return _report_failure(result)

    importance = model.get_feature_importance()
    out: dict[str, Any] = {
        "training": result.as_dict(),
        "importance": [fi.as_dict() for fi in importance],
    }
    if run_id:
        out["run_id"] = run_id
    if args.importance_plot:
        plot_feature_importance(importance, args.importance_plot)
    sys.stdout.write(dump_json(out) + "\n")
    return 0


def _cmd_predict(args: argparse.Namespace) -> int:
    spec, _ = _resolve_spec(args)
    model, result = _train(spec)
    if not result.trained:
        return _report_failure(result)

    rows: list[dict[str, Any]] = []
    for record in load_records(args.records):
        pred = model.predict(record)
        rows.append(
            {
                "parcelId": record.parcel_id,
                **pred.as_dict(),
                "confidenceLabel": confidence_label(pred.confidence),
            }
        )
    sys.stdout.write(dump_json(rows) + "\n")
    return 0


def _cmd_evaluate(args: argparse.Namespace) -> int:
    spec, _ = _resolve_spec(args)
    model, result = _train(spec)
    if not result.trained:
        return _report_failure(result)

    records = load_records(args.holdout) if args.holdout else load_records(spec.data)
    evaluation = model.evaluate(records)
    if args.plot:
        plot_predicted_vs_actual(evaluation, args.plot)
    sys.stdout.write(dump_json(evaluation.as_dict(include_predictions=args.details)) + "\n")
    return 0


def _cmd_schema(out: str | None) -> int:
    schema = TrainingSpec.json_schema()
    data = dump_json(schema)
    if out:
        Path(out).write_text(data, encoding="utf-8")
        sys.stdout.write(f"Wrote schema to {out}\n")
    else:
        sys.stdout.write(data + "\n")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    commands = {"train": _cmd_train, "predict": _cmd_predict, "evaluate": _cmd_evaluate}
    if args.command in commands:
        try:
            return commands[args.command](args)
        except (FileNotFoundError, ValueError) as e:
            sys.stderr.write(f"{e}\n")
            return 2
    if args.command == "schema":
        return _cmd_schema(args.out)
    # Default: print help
    parser.print_help()
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
