"""Activation functions for nlayernet.

Exactly one activation is bound to a network for its whole lifetime.  Each
variant carries its forward form and its derivative; the derivative always
receives the pre-activation sum ``theta``, never a cached activation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Tuple

import numpy as np

from .types import Array

ActivationFn = Callable[[Array], Array]


def sigmoid(x: Array) -> Array:
    """Return the logistic sigmoid ``1 / (1 + e^-x)``."""

    return 1.0 / (1.0 + np.exp(-np.asarray(x, dtype=np.float64)))


def sigmoid_deriv(x: Array) -> Array:
    """Return ``s(x) * (1 - s(x))`` with ``s`` re-evaluated from ``x``."""

    s = sigmoid(x)
    return s * (1.0 - s)


def tanh(x: Array) -> Array:
    """Hyperbolic tangent that only ever exponentiates ``-2|x|``."""

    x = np.asarray(x, dtype=np.float64)
    sign = np.where(x < 0.0, 1.0, -1.0)
    e = np.exp(sign * 2.0 * x)
    return sign * ((e - 1.0) / (e + 1.0))


def tanh_deriv(x: Array) -> Array:
    t = tanh(x)
    return 1.0 - t * t


@dataclass(frozen=True)
class Activation:
    """A named activation variant bundling ``f`` and ``f'``."""

    name: str
    fn: ActivationFn
    deriv: ActivationFn
    bounds: Tuple[float, float]

    def __call__(self, x: Array) -> Array:
        return self.fn(x)

    def derivative(self, theta: Array) -> Array:
        return self.deriv(theta)


SIGMOID = Activation("sigmoid", sigmoid, sigmoid_deriv, (0.0, 1.0))
TANH = Activation("tanh", tanh, tanh_deriv, (-1.0, 1.0))

_REGISTRY: Dict[str, Activation] = {SIGMOID.name: SIGMOID, TANH.name: TANH}


def names() -> Iterable[str]:
    return sorted(_REGISTRY)


def get_activation(name: str | Activation) -> Activation:
    """Resolve ``name`` to one of the registered activation variants."""

    if isinstance(name, Activation):
        return name
    key = str(name).strip().lower()
    if key not in _REGISTRY:
        available = ", ".join(names())
        raise KeyError(f"Unknown activation {name!r}. Available activations: {available}")
    return _REGISTRY[key]


__all__ = [
    "Activation",
    "SIGMOID",
    "TANH",
    "get_activation",
    "names",
    "sigmoid",
    "sigmoid_deriv",
    "tanh",
    "tanh_deriv",
]
