"""Inference over every test case of a dataset."""

from __future__ import annotations

import numpy as np

from ..core.activations import Activation
from ..core.forward import ForwardPropagator
from ..core.state import NetworkState
from ..core.types import Array, Dataset


class Runner:
    """Collect the output layer for each test case, in dataset order."""

    def __init__(self, state: NetworkState, activation: Activation) -> None:
        self.state = state
        self.propagator = ForwardPropagator(state, activation)

    def run(self, dataset: Dataset) -> Array:
        dataset.validate(self.state.topology)
        outputs = np.empty((dataset.num_test_cases, self.state.topology.output_size))
        for idx in range(dataset.num_test_cases):
            self.state.load_input(dataset.test_cases[idx])
            outputs[idx] = self.propagator.run_inference()
        return outputs


__all__ = ["Runner"]
