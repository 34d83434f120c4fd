"""Session configuration.

A configuration is a nested mapping with the sections ``data``, ``model``,
``train``, ``mode`` and ``report``::

    {
        "data": {"name": "xor", "options": {}},
        "model": {"layers": [2, 2, 1], "activation": "sigmoid"},
        "train": {"lambda": 0.3, "max_iterations": 100000,
                  "error_threshold": 0.0002, "random_low": -1.5,
                  "random_high": 1.5, "keep_alive": 0, "seed": 0},
        "mode": {"train": true, "run": true, "load": null, "save": null},
        "report": {"print_test_cases": true, "metrics_jsonl": null,
                   "metrics_csv": null, "plot_dir": null},
    }

It can be read from JSON, YAML or the flat ``key,value`` text format used by
older network config files (``layer,2-2-1``, ``is_training,y`` ...).
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from .core.errors import IOFailure, MalformedInput
from .core.types import Topology, as_topology

DEFAULT_RANDOM_LOW = -1.5
DEFAULT_RANDOM_HIGH = 1.5
DEFAULT_MAX_ITERATIONS = 100000
DEFAULT_ERROR_THRESHOLD = 0.0002
DEFAULT_LEARNING_RATE = 0.3


@dataclass
class NetworkConfig:
    """Already-parsed configuration consumed by :func:`run_pipeline`."""

    layers: Tuple[int, ...]
    activation: str = "sigmoid"
    data_name: str = "xor"
    data_options: Dict[str, Any] = field(default_factory=dict)
    training: bool = True
    running: bool = True
    load_path: Optional[str] = None
    save_path: Optional[str] = None
    random_low: float = DEFAULT_RANDOM_LOW
    random_high: float = DEFAULT_RANDOM_HIGH
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    error_threshold: float = DEFAULT_ERROR_THRESHOLD
    learning_rate: float = DEFAULT_LEARNING_RATE
    keep_alive: int = 0
    seed: Optional[int] = None
    print_test_cases: bool = True
    metrics_jsonl: Optional[str] = None
    metrics_csv: Optional[str] = None
    plot_dir: Optional[str] = None
    source: Optional[str] = None

    def __post_init__(self) -> None:
        self.layers = self.topology.sizes
        if self.random_low > self.random_high:
            raise MalformedInput(
                f"Random bounds are reversed: [{self.random_low}, {self.random_high})"
            )
        if self.max_iterations < 0 or self.keep_alive < 0:
            raise MalformedInput("max_iterations and keep_alive must not be negative")

    @property
    def topology(self) -> Topology:
        return as_topology(self.layers)

    @property
    def loading(self) -> bool:
        return self.load_path is not None

    @property
    def saving(self) -> bool:
        return self.save_path is not None

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "NetworkConfig":
        data_cfg = dict(config.get("data") or {})
        model_cfg = dict(config.get("model") or {})
        train_cfg = dict(config.get("train") or {})
        mode_cfg = dict(config.get("mode") or {})
        report_cfg = dict(config.get("report") or {})

        if "layers" not in model_cfg:
            raise MalformedInput("Configuration is missing model.layers")
        learning_rate = train_cfg.get("lambda", train_cfg.get("learning_rate"))
        seed = train_cfg.get("seed")
        return cls(
            layers=as_topology(model_cfg["layers"]).sizes,
            activation=str(model_cfg.get("activation", "sigmoid")),
            data_name=str(data_cfg.get("name", "xor")),
            data_options=dict(data_cfg.get("options") or {}),
            training=bool(mode_cfg.get("train", True)),
            running=bool(mode_cfg.get("run", True)),
            load_path=_optional_str(mode_cfg.get("load")),
            save_path=_optional_str(mode_cfg.get("save")),
            random_low=float(train_cfg.get("random_low", DEFAULT_RANDOM_LOW)),
            random_high=float(train_cfg.get("random_high", DEFAULT_RANDOM_HIGH)),
            max_iterations=int(train_cfg.get("max_iterations", DEFAULT_MAX_ITERATIONS)),
            error_threshold=float(train_cfg.get("error_threshold", DEFAULT_ERROR_THRESHOLD)),
            learning_rate=float(
                DEFAULT_LEARNING_RATE if learning_rate is None else learning_rate
            ),
            keep_alive=int(train_cfg.get("keep_alive", 0)),
            seed=None if seed is None else int(seed),
            print_test_cases=bool(report_cfg.get("print_test_cases", True)),
            metrics_jsonl=_optional_str(report_cfg.get("metrics_jsonl")),
            metrics_csv=_optional_str(report_cfg.get("metrics_csv")),
            plot_dir=_optional_str(report_cfg.get("plot_dir")),
            source=_optional_str(config.get("source")),
        )

    def to_mapping(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "data": {"name": self.data_name, "options": dict(self.data_options)},
            "model": {"layers": list(self.layers), "activation": self.activation},
            "train": {
                "lambda": self.learning_rate,
                "max_iterations": self.max_iterations,
                "error_threshold": self.error_threshold,
                "random_low": self.random_low,
                "random_high": self.random_high,
                "keep_alive": self.keep_alive,
                "seed": self.seed,
            },
            "mode": {
                "train": self.training,
                "run": self.running,
                "load": self.load_path,
                "save": self.save_path,
            },
            "report": {
                "print_test_cases": self.print_test_cases,
                "metrics_jsonl": self.metrics_jsonl,
                "metrics_csv": self.metrics_csv,
                "plot_dir": self.plot_dir,
            },
        }


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _flag(value: str) -> bool:
    return value.strip().lower() in {"y", "yes", "true", "1"}


def parse_key_value(text: str) -> Dict[str, Any]:
    """Convert ``key,value`` config text into the nested mapping layout.

    Lines that do not split into exactly two fields are ignored.
    """

    read: Dict[str, str] = {}
    for line in text.splitlines():
        parts = line.split(",")
        if len(parts) == 2:
            read[parts[0].strip()] = parts[1].strip()

    if "layer" not in read:
        raise MalformedInput("Config text has no 'layer' entry")

    training = _flag(read.get("is_training", "n"))
    data: Dict[str, Any] = {"name": "xor", "options": {}}
    if "testcase_file" in read:
        options: Dict[str, Any] = {
            "testcase_file": read["testcase_file"],
            "binary": _flag(read.get("binarytc", "n")),
        }
        if "truthtable_file" in read:
            options["truthtable_file"] = read["truthtable_file"]
        data = {"name": "files", "options": options}
    elif "dataset" in read:
        data = {"name": read["dataset"], "options": {}}

    train: Dict[str, Any] = {}
    numeric = {
        "random_lower_bound": ("random_low", float),
        "random_upper_bound": ("random_high", float),
        "max_iterations": ("max_iterations", int),
        "error_threshold": ("error_threshold", float),
        "lambda": ("lambda", float),
        "keepalive": ("keep_alive", int),
        "seed": ("seed", int),
    }
    try:
        for key, (target, cast) in numeric.items():
            if key in read:
                train[target] = cast(read[key])
        if data["name"] == "files" and "num_test_cases" in read:
            data["options"]["num_test_cases"] = int(read["num_test_cases"])
        layers = Topology.parse(read["layer"]).sizes
    except ValueError as exc:
        raise MalformedInput(f"Invalid config value: {exc}") from exc

    loading = _flag(read.get("is_loading", "n"))
    saving = _flag(read.get("is_saving", "n"))
    if loading and not read.get("weights_in_file"):
        raise MalformedInput("is_loading is set but no weights_in_file is given")
    if saving and not read.get("weights_out_file"):
        raise MalformedInput("is_saving is set but no weights_out_file is given")
    return {
        "data": data,
        "model": {"layers": list(layers), "activation": read.get("activation", "sigmoid")},
        "train": train,
        "mode": {
            "train": training,
            "run": _flag(read.get("is_running", "y")),
            "load": read.get("weights_in_file") if loading else None,
            "save": read.get("weights_out_file") if saving else None,
        },
        "report": {"print_test_cases": _flag(read.get("printtc", "y"))},
    }


def read_config(path: str | Path) -> Dict[str, Any]:
    """Read a config file (``.json``, ``.yaml``/``.yml`` or ``key,value`` text)."""

    path = Path(path)
    try:
        text = path.read_text()
    except OSError as exc:
        raise IOFailure(f"Cannot read config {path}: {exc}") from exc
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        data = parse_key_value(text)
    if not isinstance(data, Mapping):
        raise MalformedInput(f"Config {path.name} must decode to a mapping")
    data = dict(data)
    data.setdefault("source", str(path))
    return data


def load_config(path: str | Path) -> NetworkConfig:
    return NetworkConfig.from_mapping(read_config(path))


__all__ = [
    "NetworkConfig",
    "load_config",
    "parse_key_value",
    "read_config",
]
