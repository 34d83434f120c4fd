"""Training and inference drivers."""

from .runner import Runner
from .trainer import Trainer

__all__ = ["Runner", "Trainer"]
