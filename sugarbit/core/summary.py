"""
Dashboard readout: current value, trend delta and staleness.

Staleness is judged against the most recent reading only. The delta has its
own gate: two readings too far apart (e.g. across a connectivity gap) give no
delta rather than a misleading trend.
"""

import math
from dataclasses import dataclass
from typing import Optional

from .series import SampleSeries

# Readings older than this are stale [s]
MAX_AGE = 15 * 60
# Two readings further apart than this give no delta [s]
MAX_DELTA_AGE = 10 * 60

NO_VALUE = "---"


@dataclass(frozen=True)
class Summary:
    """Facts shown in the dashboard header."""
    current: Optional[float]
    is_stale: bool
    delta: Optional[float]
    delta_is_stale_or_invalid: bool

    @property
    def shows_delta(self) -> bool:
        return self.delta is not None and not self.delta_is_stale_or_invalid

    def to_dict(self) -> dict:
        return {
            "current": self.current,
            "is_stale": self.is_stale,
            "delta": self.delta,
            "delta_is_stale_or_invalid": self.delta_is_stale_or_invalid,
        }


def summarize(
    series: SampleSeries,
    now: int,
    max_age: int = MAX_AGE,
    max_delta_age: int = MAX_DELTA_AGE,
) -> Summary:
    """Derive the dashboard readout from the newest two samples.

    An empty series counts as stale. Never raises.
    """
    last2 = series.latest(2)

    if not last2:
        return Summary(current=None, is_stale=True, delta=None, delta_is_stale_or_invalid=True)

    b = last2[-1]
    is_stale = (now - b.instant) >= max_age

    delta = None
    if len(last2) == 2:
        a = last2[0]
        if b.instant - a.instant < max_delta_age:
            delta = b.value - a.value

    return Summary(
        current=b.value,
        is_stale=is_stale,
        delta=delta,
        delta_is_stale_or_invalid=is_stale or delta is None,
    )


def round_tenths(value: float) -> float:
    """Round to the nearest tenth, halves away from zero.

    The rounding is applied to ``value * 10``, so 7.25 gives 7.3 and
    -0.05 gives -0.1.
    """
    scaled = abs(value * 10)
    rounded = math.floor(scaled + 0.5)
    return math.copysign(rounded, value) / 10


def format_value(value: Optional[float]) -> str:
    """Format a reading with exactly one decimal (``"7.0"``, ``"7.3"``)."""
    if value is None:
        return NO_VALUE
    rounded = round_tenths(value)
    # Avoid "-0.0"
    if rounded == 0:
        rounded = 0.0
    return f"{rounded:.1f}"


def format_delta(delta: float) -> str:
    """Format a delta with a forced sign (``"+0.5"``, ``"-1.2"``)."""
    text = format_value(delta)
    return text if text.startswith("-") else f"+{text}"
