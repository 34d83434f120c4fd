"""Command line entry point for nlayernet sessions."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Iterable

from nlayernet.config import NetworkConfig, read_config
from nlayernet.core.activations import names as activation_names
from nlayernet.core.errors import NetworkError
from nlayernet.reporting.report import format_echo, format_run_table, format_training_report
from nlayernet.training import pipelines


def _format_result(result) -> str:
    payload = {
        "topology": str(result.topology),
        "train_ms": result.train_ms,
        "run_ms": result.run_ms,
        "weights_loaded": result.weights_loaded,
        "weights_saved": result.weights_saved,
        "load_error": result.load_error,
        "save_error": result.save_error,
    }
    if result.train is not None:
        payload.update(
            {
                "iterations": result.train.iterations,
                "error": result.train.average_error,
                "status": result.train.status.value,
            }
        )
    if result.outputs is not None:
        payload["outputs"] = result.outputs.tolist()
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="xor",
        help="Preset configuration to execute",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Config file (JSON, YAML or key,value text) replacing the preset",
    )
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--train", action=argparse.BooleanOptionalAction, default=None, help="Train the network"
    )
    parser.add_argument(
        "--run",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Run every test case through the network",
    )
    parser.add_argument("--load", help="Load weights from this file before training/running")
    parser.add_argument("--save", help="Save weights to this file at the end of the session")
    parser.add_argument("--activation", choices=list(activation_names()))
    parser.add_argument("--seed", type=int, help="Seed for the random weight initialisation")
    parser.add_argument("--max-iterations", type=int)
    parser.add_argument("--error-threshold", type=float)
    parser.add_argument("--lambda", dest="learning_rate", type=float, help="Learning rate")
    parser.add_argument(
        "--keep-alive", type=int, help="Iterations between progress messages (0 disables)"
    )
    parser.add_argument("--metrics", help="Write progress records to this JSONL file")
    parser.add_argument("--metrics-csv", help="Write progress records to this CSV file")
    parser.add_argument("--plot-dir", help="Write an error curve PNG into this directory")
    parser.add_argument(
        "--print-test-cases",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Show the inputs next to each output row",
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    parser.add_argument(
        "--json", action="store_true", help="Print a JSON summary instead of the text report"
    )
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")
    return parser.parse_args(argv)


def _apply_overrides(cfg: NetworkConfig, args: argparse.Namespace) -> NetworkConfig:
    overrides = {
        "training": args.train,
        "running": args.run,
        "load_path": args.load,
        "save_path": args.save,
        "activation": args.activation,
        "seed": args.seed,
        "max_iterations": args.max_iterations,
        "error_threshold": args.error_threshold,
        "learning_rate": args.learning_rate,
        "keep_alive": args.keep_alive,
        "metrics_jsonl": args.metrics,
        "metrics_csv": args.metrics_csv,
        "plot_dir": args.plot_dir,
        "print_test_cases": args.print_test_cases,
    }
    for name, value in overrides.items():
        if value is not None:
            setattr(cfg, name, value)
    cfg.__post_init__()
    return cfg


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    try:
        if args.config:
            mapping = read_config(args.config)
        else:
            mapping = pipelines.load_preset(args.preset)
            mapping["source"] = f"preset:{args.preset}"
        cfg = _apply_overrides(NetworkConfig.from_mapping(mapping), args)

        if args.dump_config:
            args.dump_config.parent.mkdir(parents=True, exist_ok=True)
            args.dump_config.write_text(json.dumps(cfg.to_mapping(), indent=2))

        if not args.json:
            print(format_echo(cfg))
        result = pipelines.run_pipeline(cfg)
    except (NetworkError, KeyError) as exc:
        raise SystemExit(f"error: {exc}") from None

    if args.json:
        print(_format_result(result))
    else:
        if result.train is not None:
            print(format_training_report(result.train, result.train_ms))
        if result.outputs is not None:
            print(
                format_run_table(
                    result.dataset,
                    result.outputs,
                    print_test_cases=cfg.print_test_cases,
                    run_ms=result.run_ms,
                )
            )

    if not result.ok:
        raise SystemExit(1)


if __name__ == "__main__":
    main()
