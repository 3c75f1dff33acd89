"""Reporting utilities for DigitNet."""

from .artifacts import write_manifest
from .metrics import ConsoleSink, CsvSink, JsonlSink
from .plots import PlotAdapter
from .summary import write_summary

__all__ = ["write_manifest", "ConsoleSink", "CsvSink", "JsonlSink", "PlotAdapter", "write_summary"]
