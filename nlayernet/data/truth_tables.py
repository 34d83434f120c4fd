"""Built-in two-input boolean truth tables."""

from __future__ import annotations

import numpy as np

from ..core.types import Dataset
from .registry import register_dataset

_INPUTS = np.array([[0.0, 0.0], [0.0, 1.0], [1.0, 0.0], [1.0, 1.0]])

_TARGETS = {
    "and": [0.0, 0.0, 0.0, 1.0],
    "or": [0.0, 1.0, 1.0, 1.0],
    "xor": [0.0, 1.0, 1.0, 0.0],
}


def truth_table(name: str) -> Dataset:
    targets = np.asarray(_TARGETS[name], dtype=np.float64).reshape(-1, 1)
    return Dataset(test_cases=_INPUTS.copy(), truth_table=targets, name=name)


def _factory(name: str):
    def factory(**_: object) -> Dataset:
        return truth_table(name)

    factory.__name__ = f"make_{name}"
    return factory


for _name in _TARGETS:
    register_dataset(_name, _factory(_name))


__all__ = ["truth_table"]
