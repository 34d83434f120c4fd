"""Layer-by-layer forward propagation."""

from __future__ import annotations

import numpy as np

from .activations import Activation
from .errors import MalformedInput
from .state import NetworkState
from .types import Array


class ForwardPropagator:
    """Propagate the input activation layer through every weight matrix.

    The input layer must already hold the current test case (see
    :meth:`NetworkState.load_input`).
    """

    def __init__(self, state: NetworkState, activation: Activation) -> None:
        self.state = state
        self.activation = activation

    def run_inference(self) -> Array:
        """Plain forward pass; returns a view of the output layer."""

        a = self.state.activations
        for n, W in enumerate(self.state.weights):
            np.dot(a[n], W, out=a[n + 1])
            a[n + 1][...] = self.activation(a[n + 1])
        return a[-1]

    def run_for_training(self, target: Array) -> float:
        """Forward pass that fills the staging buffers.

        Stores ``theta`` for every hidden layer and ``psi`` for the output
        layer, then returns the un-halved sum of squared residuals
        ``sum((target - output) ** 2)``.
        """

        state = self.state
        if not state.training_ready:
            raise MalformedInput("State was allocated without training buffers")
        a = state.activations
        W = state.weights
        fn = self.activation

        for n in state.topology.hidden_layers:
            theta = state.theta[n]
            np.dot(a[n - 1], W[n - 1], out=theta)
            a[n][...] = fn(theta)

        out = state.topology.output_layer_index
        theta_out = a[out - 1] @ W[out - 1]
        a[out][...] = fn(theta_out)
        omega = target - a[out]
        state.psi[out][...] = omega * fn.derivative(theta_out)
        return float(np.dot(omega, omega))


__all__ = ["ForwardPropagator"]
