"""Human-readable session reports."""

from __future__ import annotations

from typing import List, Optional

from ..config import NetworkConfig
from ..core.types import Array, Dataset, TrainResult

RULE = "-" * 30


def format_echo(config: NetworkConfig) -> str:
    """Summarise the configuration a session is about to execute."""

    lines: List[str] = [RULE, "CONFIG ECHO", ""]
    if config.source:
        lines.append(f"config read from: {config.source}")
    lines.append(f"{config.topology} network, {config.activation} activation")
    lines.append(f"dataset: {config.data_name}")
    lines.append(f"using random weights = {not config.loading}")
    lines.append(f"training = {config.training}")
    lines.append(f"running = {config.running}")
    if config.training:
        lines.append(f"rand range: [{config.random_low:.2f}, {config.random_high:.2f})")
        lines.append(f"max iterations = {config.max_iterations}")
        lines.append(f"error threshold = {config.error_threshold:.5f}")
        lines.append(f"lambda = {config.learning_rate:.2f}")
        lines.append(f"keep alive (iterations between messages) = {config.keep_alive}")
        if config.seed is not None:
            lines.append(f"seed = {config.seed}")
    if config.loading:
        lines.append(f"loading weights from: {config.load_path}")
    if config.saving:
        lines.append(f"saving weights into: {config.save_path}")
    lines.append(RULE)
    return "\n".join(lines)


def format_training_report(result: TrainResult, train_ms: float = 0.0) -> str:
    lines: List[str] = []
    if result.iterations >= result.max_iterations:
        lines.append(f"max iterations reached; iterations: {result.iterations}")
    else:
        lines.append(f"{result.iterations} iterations reached")
    outcome = "successful" if result.converged else "failed"
    lines.append(f"training {outcome}; error is: {result.average_error}")
    lines.append(f"training took {train_ms:.3f} milliseconds")
    return "\n".join(lines)


def _row(values: Array) -> str:
    return " ".join(f"{float(v):.2f}" for v in values)


def format_run_table(
    dataset: Dataset,
    outputs: Array,
    *,
    print_test_cases: bool = True,
    run_ms: Optional[float] = None,
) -> str:
    """Tabulate one output row per test case next to its truth values."""

    show_truth = dataset.truth_table is not None
    header = "inputs\t\t| outputs\t\t"
    if show_truth:
        header += "| truth table"
    lines: List[str] = [header, RULE]
    for idx in range(dataset.num_test_cases):
        line = ""
        if print_test_cases:
            line += "  ".join(f"{float(v):g}" for v in dataset.test_cases[idx])
        line += "\t| " + _row(outputs[idx]) + "\t\t"
        if show_truth:
            line += "| " + _row(dataset.truth_table[idx])
        lines.append(line.rstrip())
    lines.append(RULE)
    if run_ms is not None:
        lines.append(f"running took {run_ms:.3f} milliseconds")
    return "\n".join(lines)


__all__ = ["format_echo", "format_run_table", "format_training_report"]
