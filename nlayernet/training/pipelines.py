"""Session assembly: load, train, run and save a network."""

from __future__ import annotations

import logging
import time
from copy import deepcopy
from typing import Dict, List, Mapping

import numpy as np

from ..config import NetworkConfig
from ..core.activations import get_activation
from ..core.codec import WeightCodec
from ..core.errors import ConfigMismatch, IOFailure
from ..core.state import NetworkState
from ..core.types import SessionResult
from ..data import get_dataset
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from .runner import Runner
from .trainer import Trainer

logger = logging.getLogger(__name__)

NANO_TO_MILLI = 1_000_000.0


def _preset(dataset: str, layers: List[int], activation: str = "sigmoid") -> Mapping[str, object]:
    return {
        "data": {"name": dataset, "options": {}},
        "model": {"layers": layers, "activation": activation},
        "train": {
            "lambda": 0.3,
            "max_iterations": 100000,
            "error_threshold": 0.0002,
            "random_low": -1.5,
            "random_high": 1.5,
            "keep_alive": 10000,
            "seed": 0,
        },
        "mode": {"train": True, "run": True, "load": None, "save": None},
        "report": {"print_test_cases": True},
    }


_PRESETS: Dict[str, Mapping[str, object]] = {
    "and": _preset("and", [2, 2, 1]),
    "or": _preset("or", [2, 2, 1]),
    "xor": _preset("xor", [2, 2, 1]),
    "xor-tanh": _preset("xor", [2, 5, 1], activation="tanh"),
}


def presets() -> Mapping[str, Mapping[str, object]]:
    return {name: deepcopy(cfg) for name, cfg in _PRESETS.items()}


def load_preset(name: str) -> Dict[str, object]:
    try:
        return deepcopy(dict(_PRESETS[name]))
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def _elapsed_ms(start: int) -> float:
    return (time.perf_counter_ns() - start) / NANO_TO_MILLI


def run_pipeline(config: Mapping[str, object] | NetworkConfig) -> SessionResult:
    """Execute one session as described by ``config``.

    Weight load and save failures are logged and recorded on the returned
    :class:`SessionResult`; they never abort the rest of the session, except
    that inference is skipped when the requested weights could not be loaded.
    """

    cfg = config if isinstance(config, NetworkConfig) else NetworkConfig.from_mapping(config)
    topology = cfg.topology
    activation = get_activation(cfg.activation)

    data_options = dict(cfg.data_options)
    if cfg.data_name == "files":
        data_options.setdefault("input_size", topology.input_size)
    dataset = get_dataset(cfg.data_name, **data_options)
    dataset.validate(topology, require_targets=cfg.training)

    state = NetworkState.allocate(topology, training=cfg.training)
    codec = WeightCodec(state)
    result = SessionResult(topology=topology, dataset=dataset)
    logger.info(
        "session %s network, %s activation, %d test cases",
        topology,
        activation.name,
        dataset.num_test_cases,
    )

    if cfg.loading:
        try:
            codec.load(cfg.load_path)
            result.weights_loaded = True
        except (ConfigMismatch, IOFailure) as exc:
            result.load_error = str(exc)
            logger.error("error loading weights: %s", exc)
    if not result.weights_loaded:
        state.randomize(cfg.random_low, cfg.random_high, np.random.default_rng(cfg.seed))

    if cfg.training:
        callbacks: List[object] = []
        if cfg.metrics_jsonl:
            callbacks.append(JsonlSink(cfg.metrics_jsonl, seed=cfg.seed))
        if cfg.metrics_csv:
            callbacks.append(CsvSink(cfg.metrics_csv))
        plots = PlotAdapter(cfg.plot_dir or ".", enable_plots=bool(cfg.plot_dir))
        callbacks.append(plots)

        trainer = Trainer(
            state,
            dataset,
            activation,
            learning_rate=cfg.learning_rate,
            max_iterations=cfg.max_iterations,
            error_threshold=cfg.error_threshold,
            keep_alive=cfg.keep_alive,
            callbacks=callbacks,
        )
        start = time.perf_counter_ns()
        result.train = trainer.train()
        result.train_ms = _elapsed_ms(start)
        plot_path = plots.close(cfg.error_threshold)
        if plot_path is not None:
            result.extra["plot"] = str(plot_path)
        logger.info(
            "training %s after %d iterations, error %g",
            "converged" if result.train.converged else "stopped",
            result.train.iterations,
            result.train.average_error,
        )

    if cfg.running:
        if result.load_error is not None:
            logger.warning("skipping run: weights were not loaded")
        else:
            start = time.perf_counter_ns()
            result.outputs = Runner(state, activation).run(dataset)
            result.run_ms = _elapsed_ms(start)

    if cfg.saving:
        try:
            codec.save(cfg.save_path)
            result.weights_saved = True
        except IOFailure as exc:
            result.save_error = str(exc)
            logger.error("error saving weights: %s", exc)

    result.extra["weights"] = state.copy_weights()
    return result


__all__ = ["load_preset", "presets", "run_pipeline"]
