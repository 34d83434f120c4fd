"""Core typing contracts for nlayernet."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .errors import MalformedInput

Array = np.ndarray


@dataclass(frozen=True)
class Topology:
    """Ordered layer sizes of the network, input layer first."""

    sizes: Tuple[int, ...]

    def __post_init__(self) -> None:
        sizes = tuple(self.sizes)
        if len(sizes) < 2:
            raise MalformedInput(
                f"A network needs at least an input and an output layer, got {list(sizes)}"
            )
        for layer, size in enumerate(sizes):
            if isinstance(size, bool) or not isinstance(size, (int, np.integer)) or size < 1:
                raise MalformedInput(f"Layer {layer} must have a positive node count, got {size!r}")
        object.__setattr__(self, "sizes", tuple(int(s) for s in sizes))

    @classmethod
    def parse(cls, text: str) -> "Topology":
        """Build a topology from the ``"2-2-1"`` notation."""

        parts = [p.strip() for p in str(text).split("-") if p.strip()]
        try:
            return cls(tuple(int(p) for p in parts))
        except ValueError as exc:
            raise MalformedInput(f"Cannot parse topology {text!r}") from exc

    def __len__(self) -> int:
        return len(self.sizes)

    def __getitem__(self, layer: int) -> int:
        return self.sizes[layer]

    def __iter__(self) -> Iterator[int]:
        return iter(self.sizes)

    def __str__(self) -> str:
        return "-".join(str(s) for s in self.sizes)

    @property
    def num_layers(self) -> int:
        return len(self.sizes)

    @property
    def output_layer_index(self) -> int:
        return len(self.sizes) - 1

    @property
    def final_hidden_layer_index(self) -> int:
        return len(self.sizes) - 2

    @property
    def hidden_layers(self) -> range:
        """True indices of the hidden layers (empty for a two-layer network)."""

        return range(1, self.final_hidden_layer_index + 1)

    @property
    def input_size(self) -> int:
        return self.sizes[0]

    @property
    def output_size(self) -> int:
        return self.sizes[-1]

    def weight_shapes(self) -> List[Tuple[int, int]]:
        """Shapes of the matrices connecting layer ``n`` to ``n + 1``."""

        return list(zip(self.sizes[:-1], self.sizes[1:]))


@dataclass(frozen=True)
class Dataset:
    """Input test cases and their optional truth table, one row per example."""

    test_cases: Array
    truth_table: Optional[Array] = None
    name: str = "dataset"

    def __post_init__(self) -> None:
        cases = np.asarray(self.test_cases, dtype=np.float64)
        if cases.ndim != 2 or cases.shape[0] == 0:
            raise MalformedInput(
                f"Test cases must be a non-empty 2-D array, got shape {cases.shape}"
            )
        object.__setattr__(self, "test_cases", cases)
        if self.truth_table is not None:
            truth = np.asarray(self.truth_table, dtype=np.float64)
            if truth.ndim != 2 or truth.shape[0] != cases.shape[0]:
                raise MalformedInput(
                    f"Truth table shape {truth.shape} does not pair with "
                    f"{cases.shape[0]} test cases"
                )
            object.__setattr__(self, "truth_table", truth)

    @property
    def num_test_cases(self) -> int:
        return int(self.test_cases.shape[0])

    @property
    def has_targets(self) -> bool:
        return self.truth_table is not None

    def validate(self, topology: Topology, *, require_targets: bool = False) -> None:
        """Check every row length against ``topology``."""

        if self.test_cases.shape[1] != topology.input_size:
            raise MalformedInput(
                f"{self.name}: test cases have {self.test_cases.shape[1]} values per row, "
                f"the input layer has {topology.input_size} nodes"
            )
        if self.truth_table is None:
            if require_targets:
                raise MalformedInput(f"{self.name}: training requires a truth table")
            return
        if self.truth_table.shape[1] != topology.output_size:
            raise MalformedInput(
                f"{self.name}: truth table has {self.truth_table.shape[1]} values per row, "
                f"the output layer has {topology.output_size} nodes"
            )


class TrainStatus(enum.Enum):
    """Lifecycle of a :class:`~nlayernet.training.trainer.Trainer`."""

    INIT = "init"
    ITERATING = "iterating"
    CONVERGED = "converged"
    MAX_ITERS_REACHED = "max_iters_reached"


@dataclass(frozen=True)
class TrainResult:
    """Outcome of one call to :meth:`Trainer.train`."""

    iterations: int
    average_error: float
    status: TrainStatus
    max_iterations: int
    error_threshold: float

    @property
    def converged(self) -> bool:
        return self.status is TrainStatus.CONVERGED


@dataclass
class SessionResult:
    """Everything a session hands to the reporting collaborators."""

    topology: Topology
    dataset: Dataset
    train: Optional[TrainResult] = None
    outputs: Optional[Array] = None
    train_ms: float = 0.0
    run_ms: float = 0.0
    weights_loaded: bool = False
    weights_saved: bool = False
    load_error: Optional[str] = None
    save_error: Optional[str] = None
    extra: Dict[str, object] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.load_error is None and self.save_error is None


def as_topology(layers: Sequence[int] | str | Topology) -> Topology:
    if isinstance(layers, Topology):
        return layers
    if isinstance(layers, str):
        return Topology.parse(layers)
    return Topology(tuple(layers))


__all__ = [
    "Array",
    "Dataset",
    "SessionResult",
    "Topology",
    "TrainResult",
    "TrainStatus",
    "as_topology",
]
