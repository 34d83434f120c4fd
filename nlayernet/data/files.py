"""Test-case and truth-table files.

Test cases are stored one example per line (comma separated) or as raw
big-endian float64 values, row after row.  Truth tables use the transposed
layout: one line per output node, one column per test case.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd

from ..core.errors import IOFailure, MalformedInput
from ..core.types import Array, Dataset
from .registry import register_dataset

BINARY_DTYPE = np.dtype(">f8")


def _read_csv(path: Path) -> Array:
    try:
        frame = pd.read_csv(path, header=None, skipinitialspace=True)
    except OSError as exc:
        raise IOFailure(f"Cannot read {path}: {exc}") from exc
    except (pd.errors.EmptyDataError, pd.errors.ParserError) as exc:
        raise MalformedInput(f"{path}: {exc}") from exc
    try:
        values = frame.to_numpy(dtype=np.float64)
    except ValueError as exc:
        raise MalformedInput(f"{path} contains non-numeric values") from exc
    if np.isnan(values).any():
        raise MalformedInput(f"{path} has missing values or rows of unequal length")
    return values


def _take_rows(values: Array, count: int | None, path: Path, what: str) -> Array:
    if count is None:
        return values
    if count < 1 or values.shape[0] < count:
        raise MalformedInput(f"{path}: expected {count} {what}, found {values.shape[0]}")
    return values[:count]


def read_test_cases(path: str | Path, num_test_cases: int | None = None) -> Array:
    path = Path(path)
    return _take_rows(_read_csv(path), num_test_cases, path, "test cases")


def read_binary_test_cases(
    path: str | Path, input_size: int, num_test_cases: int | None = None
) -> Array:
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise IOFailure(f"Cannot read {path}: {exc}") from exc
    row_bytes = input_size * BINARY_DTYPE.itemsize
    if row_bytes == 0 or len(data) % row_bytes:
        raise MalformedInput(
            f"{path}: {len(data)} bytes is not a whole number of {input_size}-value rows"
        )
    values = np.frombuffer(data, dtype=BINARY_DTYPE).astype(np.float64)
    return _take_rows(values.reshape(-1, input_size), num_test_cases, path, "test cases")


def write_binary_test_cases(path: str | Path, test_cases: Array) -> Path:
    path = Path(path)
    try:
        path.write_bytes(np.ascontiguousarray(test_cases, dtype=BINARY_DTYPE).tobytes())
    except OSError as exc:
        raise IOFailure(f"Cannot write {path}: {exc}") from exc
    return path


def read_truth_table(path: str | Path, num_test_cases: int | None = None) -> Array:
    """Return the truth table as ``(num_test_cases, output_nodes)``."""

    path = Path(path)
    columns = _read_csv(path).T
    return _take_rows(columns, num_test_cases, path, "truth table columns")


@register_dataset("files")
def load_files(
    *,
    testcase_file: str | Path,
    truthtable_file: str | Path | None = None,
    num_test_cases: int | None = None,
    binary: bool = False,
    input_size: int | None = None,
    **_: object,
) -> Dataset:
    """Load a dataset from the files named in a network configuration."""

    if binary:
        if input_size is None:
            raise MalformedInput("Binary test case files need the input layer size")
        cases = read_binary_test_cases(testcase_file, int(input_size), num_test_cases)
    else:
        cases = read_test_cases(testcase_file, num_test_cases)
    truth = None
    if truthtable_file is not None:
        truth = read_truth_table(truthtable_file, num_test_cases or cases.shape[0])
    return Dataset(test_cases=cases, truth_table=truth, name=Path(testcase_file).name)


__all__ = [
    "load_files",
    "read_binary_test_cases",
    "read_test_cases",
    "read_truth_table",
    "write_binary_test_cases",
]
