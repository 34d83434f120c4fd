"""Core numerical primitives for nlayernet."""

from . import activations, codec, errors, forward, state, types

__all__ = ["activations", "codec", "errors", "forward", "state", "types"]
