"""Session-lifetime network buffers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Sequence

import numpy as np

from .errors import AllocationFailure, MalformedInput
from .types import Array, Topology


@dataclass
class NetworkState:
    """Activations, weights and the training staging buffers of one network.

    Buffers are allocated once by :meth:`allocate` and overwritten in place
    afterwards.  ``theta`` and ``psi`` are keyed by true layer index:
    ``theta`` covers the hidden layers ``1..L-2`` and ``psi`` covers
    ``1..L-1``.  Both stay empty when the state is not used for training.
    """

    topology: Topology
    activations: List[Array] = field(repr=False)
    weights: List[Array] = field(repr=False)
    theta: Dict[int, Array] = field(default_factory=dict, repr=False)
    psi: Dict[int, Array] = field(default_factory=dict, repr=False)

    @classmethod
    def allocate(cls, topology: Topology, *, training: bool = False) -> "NetworkState":
        try:
            activations = [np.zeros(size, dtype=np.float64) for size in topology]
            weights = [
                np.zeros(shape, dtype=np.float64) for shape in topology.weight_shapes()
            ]
            theta: Dict[int, Array] = {}
            psi: Dict[int, Array] = {}
            if training:
                theta = {n: np.zeros(topology[n]) for n in topology.hidden_layers}
                psi = {
                    n: np.zeros(topology[n])
                    for n in range(1, topology.output_layer_index + 1)
                }
        except MemoryError as exc:
            raise AllocationFailure(f"Cannot allocate buffers for a {topology} network") from exc
        return cls(
            topology=topology,
            activations=activations,
            weights=weights,
            theta=theta,
            psi=psi,
        )

    @property
    def training_ready(self) -> bool:
        return bool(self.psi)

    @property
    def output(self) -> Array:
        return self.activations[self.topology.output_layer_index]

    def randomize(self, low: float, high: float, rng: np.random.Generator) -> None:
        """Fill every weight uniformly from ``[low, high)``."""

        for W in self.weights:
            W[...] = rng.uniform(low, high, size=W.shape)

    def load_input(self, row: Array) -> None:
        """Copy one test case into the input activation layer."""

        a0 = self.activations[0]
        if np.shape(row) != a0.shape:
            raise MalformedInput(
                f"Input row has shape {np.shape(row)}, expected {a0.shape}"
            )
        a0[...] = row

    def set_weights(self, weights: Sequence[Array]) -> None:
        """Replace every weight matrix at once after checking all shapes."""

        expected = self.topology.weight_shapes()
        if len(weights) != len(expected):
            raise MalformedInput(
                f"Expected {len(expected)} weight matrices, got {len(weights)}"
            )
        for idx, (W, shape) in enumerate(zip(weights, expected)):
            if np.shape(W) != shape:
                raise MalformedInput(
                    f"Weight matrix {idx} has shape {np.shape(W)}, expected {shape}"
                )
        for dst, src in zip(self.weights, weights):
            np.copyto(dst, src)

    def copy_weights(self) -> List[Array]:
        return [W.copy() for W in self.weights]

    def parameter_count(self) -> int:
        return int(sum(int(W.size) for W in self.weights))


__all__ = ["NetworkState"]
