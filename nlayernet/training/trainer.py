"""Online gradient-descent training loop."""

from __future__ import annotations

import logging
import math
from typing import Sequence

import numpy as np

from ..core.activations import Activation
from ..core.errors import MalformedInput
from ..core.forward import ForwardPropagator
from ..core.state import NetworkState
from ..core.types import Dataset, TrainResult, TrainStatus

logger = logging.getLogger(__name__)


class Trainer:
    """Train the weights of ``state`` against ``dataset``'s truth table.

    One iteration is an in-order pass over every example.  Weights are
    updated after each example, never accumulated over the pass.  Training
    stops once the average error ``sum(omega**2) / 2 / num_cases`` drops to
    ``error_threshold`` or ``max_iterations`` passes have been made.

    Every ``keep_alive`` iterations (``0`` disables it) each callback is
    notified with ``(iteration, average_error)``.  Callbacks may expose an
    ``on_iteration`` method or simply be callables.
    """

    def __init__(
        self,
        state: NetworkState,
        dataset: Dataset,
        activation: Activation,
        *,
        learning_rate: float,
        max_iterations: int,
        error_threshold: float,
        keep_alive: int = 0,
        callbacks: Sequence[object] | None = None,
    ) -> None:
        if not state.training_ready:
            raise MalformedInput("Trainer needs a state allocated with training=True")
        dataset.validate(state.topology, require_targets=True)
        if max_iterations < 0:
            raise MalformedInput(f"max_iterations must be >= 0, got {max_iterations}")
        if keep_alive < 0:
            raise MalformedInput(f"keep_alive must be >= 0, got {keep_alive}")
        self.state = state
        self.dataset = dataset
        self.activation = activation
        self.learning_rate = float(learning_rate)
        self.max_iterations = int(max_iterations)
        self.error_threshold = float(error_threshold)
        self.keep_alive = int(keep_alive)
        self.callbacks = list(callbacks or [])
        self.propagator = ForwardPropagator(state, activation)
        self.status = TrainStatus.INIT
        self.iteration = 0
        self.average_error = math.inf

    def train(self) -> TrainResult:
        dataset = self.dataset
        num_cases = dataset.num_test_cases
        self.status = TrainStatus.ITERATING
        self.iteration = 0
        self.average_error = math.inf

        # NaN never satisfies the threshold, so a diverged run ends at the cap.
        while self.iteration < self.max_iterations and not (
            self.average_error <= self.error_threshold
        ):
            error_sum = 0.0
            for idx in range(num_cases):
                self.state.load_input(dataset.test_cases[idx])
                error_sum += self.propagator.run_for_training(dataset.truth_table[idx])
                self.backward()
            self.average_error = (error_sum / 2.0) / num_cases
            self.iteration += 1

            if self.keep_alive and self.iteration % self.keep_alive == 0:
                self._emit(self.iteration, self.average_error)

        if self.average_error <= self.error_threshold:
            self.status = TrainStatus.CONVERGED
        else:
            self.status = TrainStatus.MAX_ITERS_REACHED
        return TrainResult(
            iterations=self.iteration,
            average_error=float(self.average_error),
            status=self.status,
            max_iterations=self.max_iterations,
            error_threshold=self.error_threshold,
        )

    def backward(self) -> None:
        """Back-propagate ``psi`` from the output layer and update every weight.

        For each layer ``n`` from the final hidden layer down to 1,
        ``omega[k] = sum_i psi[n+1][i] * W[n][k][i]`` is read before
        ``W[n][k][i] += lambda * a[n][k] * psi[n+1][i]`` is applied; an update
        to row ``k`` only touches row ``k``, so computing all of ``omega``
        first keeps each read ahead of its own write.  The input-layer
        matrix is then updated from ``psi[1]``, which is the output psi when
        the network has no hidden layer.
        """

        state = self.state
        a = state.activations
        W = state.weights
        psi = state.psi
        lam = self.learning_rate
        deriv = self.activation.derivative

        for n in range(state.topology.final_hidden_layer_index, 0, -1):
            omega = W[n] @ psi[n + 1]
            W[n] += lam * np.outer(a[n], psi[n + 1])
            psi[n][...] = omega * deriv(state.theta[n])

        W[0] += lam * np.outer(a[0], psi[1])

    def _emit(self, iteration: int, average_error: float) -> None:
        logger.info("Iteration %d, Error = %f", iteration, average_error)
        for callback in self.callbacks:
            if hasattr(callback, "on_iteration"):
                callback.on_iteration(iteration, average_error)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(iteration, average_error)


__all__ = ["Trainer"]
