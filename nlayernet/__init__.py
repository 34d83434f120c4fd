"""nlayernet public API."""

from .config import NetworkConfig, load_config
from .core import activations, types  # noqa: F401
from .core.activations import SIGMOID, TANH, get_activation
from .core.codec import WeightCodec
from .core.errors import (
    AllocationFailure,
    ConfigMismatch,
    IOFailure,
    MalformedInput,
    NetworkError,
)
from .core.forward import ForwardPropagator
from .core.state import NetworkState
from .core.types import Dataset, SessionResult, Topology, TrainResult, TrainStatus
from .training.pipelines import load_preset, presets, run_pipeline
from .training.runner import Runner
from .training.trainer import Trainer

__all__ = [
    "AllocationFailure",
    "ConfigMismatch",
    "Dataset",
    "ForwardPropagator",
    "IOFailure",
    "MalformedInput",
    "NetworkConfig",
    "NetworkError",
    "NetworkState",
    "Runner",
    "SIGMOID",
    "SessionResult",
    "TANH",
    "Topology",
    "TrainResult",
    "TrainStatus",
    "Trainer",
    "WeightCodec",
    "activations",
    "get_activation",
    "load_config",
    "load_preset",
    "presets",
    "run_pipeline",
    "types",
]
