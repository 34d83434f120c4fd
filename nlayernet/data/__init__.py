"""Dataset sources for nlayernet."""

from . import files, truth_tables  # noqa: F401  (register built-in datasets)
from .registry import available_datasets, get_dataset, register_dataset

__all__ = ["available_datasets", "get_dataset", "register_dataset"]
