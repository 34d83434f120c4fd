import math

import numpy as np
import pytest

from nlayernet.core.activations import SIGMOID, TANH
from nlayernet.core.errors import MalformedInput
from nlayernet.core.forward import ForwardPropagator
from nlayernet.core.state import NetworkState
from nlayernet.core.types import Dataset, Topology, TrainStatus
from nlayernet.data import get_dataset
from nlayernet.training.trainer import Trainer


def _state(layers, seed, low=-1.5, high=1.5):
    state = NetworkState.allocate(Topology(tuple(layers)), training=True)
    state.randomize(low, high, np.random.default_rng(seed))
    return state


def _trainer(state, dataset, activation=SIGMOID, **overrides):
    params = dict(learning_rate=0.3, max_iterations=100000, error_threshold=0.0002)
    params.update(overrides)
    return Trainer(state, dataset, activation, **params)


def _reference_iteration(layers, weights, dataset, activation, lam):
    """One training pass written node by node, reading and updating each
    weight in the same inner loop."""

    W = [w.copy() for w in weights]
    L = len(layers)
    error_sum = 0.0
    for x, target in zip(dataset.test_cases, dataset.truth_table):
        a = [np.array(x, dtype=float)] + [np.zeros(n) for n in layers[1:]]
        theta = {n: np.zeros(layers[n]) for n in range(1, L - 1)}
        psi = {n: np.zeros(layers[n]) for n in range(1, L)}
        for n in range(1, L - 1):
            for j in range(layers[n]):
                t = sum(a[n - 1][k] * W[n - 1][k][j] for k in range(layers[n - 1]))
                theta[n][j] = t
                a[n][j] = float(activation(t))
        out = L - 1
        for i in range(layers[out]):
            t = sum(a[out - 1][j] * W[out - 1][j][i] for j in range(layers[out - 1]))
            a[out][i] = float(activation(t))
            omega = target[i] - a[out][i]
            psi[out][i] = omega * float(activation.derivative(t))
            error_sum += omega * omega

        for n in range(L - 2, 1, -1):
            for k in range(layers[n]):
                omega = 0.0
                for i in range(layers[n + 1]):
                    omega += psi[n + 1][i] * W[n][k][i]
                    W[n][k][i] += lam * a[n][k] * psi[n + 1][i]
                psi[n][k] = omega * float(activation.derivative(theta[n][k]))
        for k in range(layers[1]):
            omega = 0.0
            for i in range(layers[2]):
                omega += psi[2][i] * W[1][k][i]
                W[1][k][i] += lam * a[1][k] * psi[2][i]
            psi_k = omega * float(activation.derivative(theta[1][k]))
            for m in range(layers[0]):
                W[0][m][k] += lam * a[0][m] * psi_k
    return W, (error_sum / 2.0) / dataset.num_test_cases


@pytest.mark.parametrize(
    "layers, activation",
    [((2, 2, 1), SIGMOID), ((3, 4, 3, 2), TANH), ((2, 3, 4, 3, 2), SIGMOID)],
)
def test_single_iteration_matches_node_by_node_reference(layers, activation):
    rng = np.random.default_rng(11)
    n = 5
    dataset = Dataset(
        test_cases=rng.uniform(-1.0, 1.0, size=(n, layers[0])),
        truth_table=rng.uniform(0.1, 0.9, size=(n, layers[-1])),
    )
    state = _state(layers, seed=3)
    expected_weights, expected_error = _reference_iteration(
        layers, state.weights, dataset, activation, lam=0.3
    )

    result = _trainer(state, dataset, activation, max_iterations=1).train()

    assert result.iterations == 1
    assert result.average_error == pytest.approx(expected_error, rel=1e-12)
    for got, want in zip(state.weights, expected_weights):
        assert np.allclose(got, np.asarray(want), rtol=1e-12, atol=1e-14)


def test_backward_uses_weights_before_their_update():
    state = _state((2, 2, 2, 1), seed=1)
    dataset = Dataset(test_cases=[[1.0, 0.5]], truth_table=[[1.0]])
    trainer = _trainer(state, dataset)
    state.load_input(dataset.test_cases[0])
    ForwardPropagator(state, SIGMOID).run_for_training(dataset.truth_table[0])

    W2 = state.weights[2].copy()
    psi3 = state.psi[3].copy()
    theta2 = state.theta[2].copy()
    trainer.backward()

    expected_psi2 = (W2 @ psi3) * SIGMOID.derivative(theta2)
    assert np.allclose(state.psi[2], expected_psi2)
    assert np.allclose(state.weights[2], W2 + 0.3 * np.outer(state.activations[2], psi3))


def test_and_converges_with_one_hidden_layer():
    # h0 = sigmoid(3 * (x0 + x1)), h1 = 1 - h0 and the output logit is
    # 160 * h0 - 156: every case is on the right side, but with a margin of
    # about 3.6 the first pass still averages ~2.7e-4.
    state = NetworkState.allocate(Topology((2, 2, 1)), training=True)
    state.set_weights([np.array([[3.0, -3.0], [3.0, -3.0]]), np.array([[4.0], [-156.0]])])

    result = _trainer(state, get_dataset("and")).train()

    assert result.status is TrainStatus.CONVERGED
    assert result.average_error <= 0.0002
    assert 1 < result.iterations < 100000


def test_hidden_layer_fits_xor_far_below_the_direct_network_floor():
    # Without bias terms a 2-2-1 network levels off above the 0.0002
    # threshold, but from a positive start it gets far under the 0.03125
    # that a network without a hidden layer can never beat.
    state = _state((2, 2, 1), seed=1, low=0.1, high=1.5)
    result = _trainer(state, get_dataset("xor")).train()

    assert result.iterations == 100000
    assert result.average_error < 0.03125 / 4


def test_xor_cannot_be_learned_without_a_hidden_layer():
    state = _state((2, 1), seed=0)
    result = _trainer(state, get_dataset("xor"), max_iterations=3000).train()
    assert result.status is TrainStatus.MAX_ITERS_REACHED
    assert result.iterations == 3000
    # (0, 0) always produces 0.5 without a hidden layer
    assert result.average_error >= 0.25 / 2 / 4 - 1e-12


def test_two_layer_network_still_learns_separable_data():
    state = _state((2, 1), seed=0)
    dataset = Dataset(test_cases=[[1.0, 0.0], [0.0, 1.0]], truth_table=[[0.9], [0.1]])
    before = state.copy_weights()
    first = _trainer(state, dataset, max_iterations=1).train()
    assert not np.array_equal(before[0], state.weights[0])
    later = _trainer(state, dataset, max_iterations=2000).train()
    assert later.average_error < first.average_error


def test_keep_alive_callbacks():
    seen = []

    class Sink:
        def __init__(self):
            self.records = []

        def on_iteration(self, iteration, error):
            self.records.append(iteration)

    sink = Sink()
    state = _state((2, 2, 1), seed=0)
    trainer = _trainer(
        state,
        get_dataset("xor"),
        max_iterations=10,
        error_threshold=0.0,
        keep_alive=3,
        callbacks=[sink, lambda it, err: seen.append((it, err))],
    )
    result = trainer.train()

    assert result.status is TrainStatus.MAX_ITERS_REACHED
    assert trainer.status is TrainStatus.MAX_ITERS_REACHED
    assert sink.records == [3, 6, 9]
    assert [it for it, _ in seen] == [3, 6, 9]
    assert all(err > 0 for _, err in seen)


def test_keep_alive_zero_disables_callbacks():
    calls = []
    state = _state((2, 2, 1), seed=0)
    _trainer(
        state, get_dataset("and"), max_iterations=5, keep_alive=0, callbacks=[calls.append]
    ).train()
    assert calls == []


def test_zero_iterations_reports_infinite_error():
    state = _state((2, 2, 1), seed=0)
    trainer = _trainer(state, get_dataset("xor"), max_iterations=0)
    assert trainer.status is TrainStatus.INIT
    result = trainer.train()
    assert result.iterations == 0
    assert math.isinf(result.average_error)
    assert result.status is TrainStatus.MAX_ITERS_REACHED


def test_trainer_requires_truth_table_and_training_buffers():
    state = _state((2, 2, 1), seed=0)
    with pytest.raises(MalformedInput):
        _trainer(state, Dataset(test_cases=[[0.0, 1.0]]))

    plain = NetworkState.allocate(Topology((2, 2, 1)))
    with pytest.raises(MalformedInput):
        _trainer(plain, get_dataset("xor"))


@pytest.mark.parametrize("overrides", [{"max_iterations": -1}, {"keep_alive": -5}])
def test_negative_counts_are_malformed(overrides):
    state = _state((2, 2, 1), seed=0)
    with pytest.raises(MalformedInput):
        _trainer(state, get_dataset("and"), **overrides)
