"""Core components for sugarbit: parsing, windowing, summary and projection."""

from .exceptions import ExitCode, FetchFailed, InvalidScale, MalformedPayload, MalformedTimestamp
from .graph import (
    AxisTick,
    GraphPoint,
    Level,
    Projection,
    TargetBand,
    Viewport,
    classify,
    project,
    project_target_band,
)
from .logging import get_logger, setup_logging
from .series import Sample, SampleSeries
from .state import AppState
from .summary import Summary, format_delta, format_value, round_tenths, summarize
from .timeparse import format_clock, last_round_hour, parse_time
from .timescale import Timescale, TimescaleCycler

__all__ = [
    "AppState",
    "AxisTick",
    "ExitCode",
    "FetchFailed",
    "GraphPoint",
    "InvalidScale",
    "Level",
    "MalformedPayload",
    "MalformedTimestamp",
    "Projection",
    "Sample",
    "SampleSeries",
    "Summary",
    "TargetBand",
    "Timescale",
    "TimescaleCycler",
    "Viewport",
    "classify",
    "format_clock",
    "format_delta",
    "format_value",
    "get_logger",
    "last_round_hour",
    "parse_time",
    "project",
    "project_target_band",
    "round_tenths",
    "setup_logging",
    "summarize",
]
