"""Training progress sinks."""

from __future__ import annotations

import csv
import json
from pathlib import Path


class JsonlSink:
    """Append-only JSONL writer for ``(iteration, average_error)`` records."""

    def __init__(self, path: str | Path, *, seed: int | None = None) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.seed = seed

    def on_iteration(self, iteration: int, average_error: float) -> None:
        record = {
            "iteration": int(iteration),
            "error": float(average_error),
            "seed": self.seed,
        }
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record) + "\n")

    __call__ = on_iteration


class CsvSink:
    """Write progress records to CSV with a stable ``iteration,error`` schema."""

    fieldnames = ("iteration", "error")

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")

    def on_iteration(self, iteration: int, average_error: float) -> None:
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=self.fieldnames)
            if handle.tell() == 0:
                writer.writeheader()
            writer.writerow({"iteration": int(iteration), "error": float(average_error)})

    __call__ = on_iteration
