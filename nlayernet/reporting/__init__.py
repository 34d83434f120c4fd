"""Reporting utilities for nlayernet."""

from .metrics import CsvSink, JsonlSink
from .plots import PlotAdapter
from .report import format_echo, format_run_table, format_training_report

__all__ = [
    "CsvSink",
    "JsonlSink",
    "PlotAdapter",
    "format_echo",
    "format_run_table",
    "format_training_report",
]
