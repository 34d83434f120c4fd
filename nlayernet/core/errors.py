"""Error kinds raised by the numeric core."""

from __future__ import annotations


class NetworkError(Exception):
    """Base class for every error raised by :mod:`nlayernet`."""


class ConfigMismatch(NetworkError, ValueError):
    """Stored topology disagrees with the topology of the current session."""


class IOFailure(NetworkError, OSError):
    """A file could not be opened, read or written completely."""


class AllocationFailure(NetworkError, MemoryError):
    """Network buffers could not be allocated."""


class MalformedInput(NetworkError, ValueError):
    """Topology or dataset rows do not have the expected shape."""


__all__ = [
    "AllocationFailure",
    "ConfigMismatch",
    "IOFailure",
    "MalformedInput",
    "NetworkError",
]
