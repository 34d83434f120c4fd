"""Binary persistence of trained weights.

File layout (big-endian)::

    int32 x L        node count of every layer, input layer first
    float64 x ...    W[0], W[1], ..., W[L-2], each row-major
                     (outer index = source node, inner = destination node)

No other framing is written; the topology header is the only validation
data.  A file must decode to exactly the expected number of bytes.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

import numpy as np

from .errors import ConfigMismatch, IOFailure
from .state import NetworkState
from .types import Array, Topology

logger = logging.getLogger(__name__)

HEADER_DTYPE = np.dtype(">i4")
WEIGHT_DTYPE = np.dtype(">f8")


def payload_size(topology: Topology) -> int:
    """Number of bytes a weight file for ``topology`` occupies."""

    weights = sum(rows * cols for rows, cols in topology.weight_shapes())
    return topology.num_layers * HEADER_DTYPE.itemsize + weights * WEIGHT_DTYPE.itemsize


def encode(topology: Topology, weights: List[Array]) -> bytes:
    parts = [np.asarray(topology.sizes, dtype=HEADER_DTYPE).tobytes()]
    for W in weights:
        parts.append(np.ascontiguousarray(W, dtype=WEIGHT_DTYPE).tobytes(order="C"))
    return b"".join(parts)


def decode(topology: Topology, data: bytes) -> List[Array]:
    """Decode ``data`` into fresh native float64 matrices for ``topology``."""

    header_bytes = topology.num_layers * HEADER_DTYPE.itemsize
    # Compare whatever header is present before judging the length.
    readable = min(len(data) // HEADER_DTYPE.itemsize, topology.num_layers)
    header = []
    if readable:
        header = np.frombuffer(data, dtype=HEADER_DTYPE, count=readable).tolist()
    for layer, (stored, current) in enumerate(zip(header, topology.sizes)):
        if stored != current:
            raise ConfigMismatch(
                f"Weight file layer {layer} has {stored} nodes, network has {current} "
                f"(network is {topology})"
            )
    if len(data) < header_bytes:
        raise IOFailure(
            f"Weight file truncated: {len(data)} bytes, header alone needs {header_bytes}"
        )

    expected = payload_size(topology)
    if len(data) < expected:
        raise IOFailure(f"Weight file truncated: {len(data)} of {expected} bytes present")
    if len(data) > expected:
        raise ConfigMismatch(
            f"Weight file has {len(data) - expected} trailing bytes beyond a {topology} network"
        )

    weights: List[Array] = []
    offset = header_bytes
    for rows, cols in topology.weight_shapes():
        count = rows * cols
        flat = np.frombuffer(data, dtype=WEIGHT_DTYPE, count=count, offset=offset)
        weights.append(flat.astype(np.float64).reshape(rows, cols))
        offset += count * WEIGHT_DTYPE.itemsize
    return weights


class WeightCodec:
    """Save and load the weights of ``state`` in the binary format above."""

    def __init__(self, state: NetworkState) -> None:
        self.state = state

    def save(self, path: str | Path) -> Path:
        path = Path(path)
        payload = encode(self.state.topology, self.state.weights)
        try:
            with path.open("wb") as handle:
                written = handle.write(payload)
        except OSError as exc:
            raise IOFailure(f"Cannot write weights to {path}: {exc}") from exc
        if written != len(payload):
            raise IOFailure(f"Incomplete write to {path}: {written} of {len(payload)} bytes")
        logger.info("saved weights to %s", path)
        return path

    def load(self, path: str | Path) -> Path:
        """Replace the state's weights with the contents of ``path``.

        Nothing is modified unless the whole file decodes successfully.
        """

        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise IOFailure(f"Cannot read weights from {path}: {exc}") from exc
        weights = decode(self.state.topology, data)
        self.state.set_weights(weights)
        logger.info("weights loaded from %s", path)
        return path


__all__ = ["WeightCodec", "decode", "encode", "payload_size"]
