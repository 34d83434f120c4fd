"""Headless-safe plotting adapters."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple


class PlotAdapter:
    """Collect progress records and emit an error curve with matplotlib."""

    def __init__(self, run_dir: str | Path, enable_plots: bool = False):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self._history: List[Tuple[int, float]] = []
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def on_iteration(self, iteration: int, average_error: float) -> None:
        if not self.enable_plots:
            return
        self._history.append((int(iteration), float(average_error)))

    def close(self, error_threshold: Optional[float] = None) -> Optional[Path]:
        if not self.enable_plots or not self._history:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # imported lazily for headless safety

        iterations, errors = zip(*self._history)
        fig, ax = plt.subplots()
        ax.plot(iterations, errors)
        if error_threshold is not None and error_threshold > 0:
            ax.axhline(error_threshold, linestyle="--", color="grey")
        if all(e > 0 for e in errors):
            ax.set_yscale("log")
        ax.set_xlabel("Iteration")
        ax.set_ylabel("Average error")
        ax.set_title("Training Error")
        plot_path = self.run_dir / "error.png"
        fig.savefig(plot_path)
        plt.close(fig)
        return plot_path

    __call__ = on_iteration
