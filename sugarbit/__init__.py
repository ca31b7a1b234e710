"""
sugarbit - glucose readings on a rotating-timescale terminal graph

Polls a report endpoint for timestamped readings and draws them with a
target band, a live "now" marker and a staleness-aware current value.
"""

__version__ = "1.0.0"

from .core.series import SampleSeries
from .core.state import AppState

__all__ = ["AppState", "SampleSeries", "__version__"]
