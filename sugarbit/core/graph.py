"""
Projection of samples onto the graph viewport.

Coordinates follow screen conventions: x grows to the right with time, y
grows downwards, so higher readings get smaller y. The right edge of the
viewport is "now" and the left edge is ``now - timescale``.

Nothing here clamps to the viewport; samples older than the window get a
negative x and the renderer decides what to do with them.
"""

from dataclasses import dataclass, field
from enum import Enum
from datetime import tzinfo
from typing import Optional

from .exceptions import InvalidScale
from .series import SampleSeries
from .timeparse import HOUR, format_clock, last_round_hour
from .timescale import Timescale

# Dots available to the renderer (24h of 5-minute readings)
SLOT_CAPACITY = 288

# Target range [mmol/L]
TARGET_LOW = 3.8
TARGET_HIGH = 8.0

# Tick positions as hour offsets from the last round hour
TICK_HOURS: dict[Timescale, tuple[int, int, int]] = {
    Timescale.H3: (-2, -1, 0),
    Timescale.H6: (-4, -2, 0),
    Timescale.H12: (-8, -4, 0),
    Timescale.H24: (-16, -8, 0),
}


class Level(Enum):
    """Where a reading sits relative to the target range."""
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


def classify(value: float, low: float = TARGET_LOW, high: float = TARGET_HIGH) -> Level:
    if value >= high:
        return Level.HIGH
    if value <= low:
        return Level.LOW
    return Level.NORMAL


@dataclass(frozen=True)
class Viewport:
    width: float
    height: float

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Viewport must have a positive size, got {self.width}x{self.height}")


@dataclass(frozen=True)
class GraphPoint:
    x: float
    y: float
    value: float


@dataclass(frozen=True)
class AxisTick:
    x: float
    instant: int
    label: str


@dataclass(frozen=True)
class TargetBand:
    low_y: float
    high_y: float


@dataclass
class Projection:
    """Everything the renderer needs to draw one frame of the graph."""
    points: list[GraphPoint] = field(default_factory=list)
    ticks: list[AxisTick] = field(default_factory=list)
    now_marker_x: float = 0.0
    band: Optional[TargetBand] = None

    def to_dict(self) -> dict:
        data = {
            "points": [{"x": p.x, "y": p.y, "value": p.value} for p in self.points],
            "ticks": [{"x": t.x, "instant": t.instant, "label": t.label} for t in self.ticks],
            "now_marker_x": self.now_marker_x,
        }
        if self.band is not None:
            data["band"] = {"low_y": self.band.low_y, "high_y": self.band.high_y}
        return data


def _check_ceiling(value_ceiling: float) -> None:
    if not value_ceiling > 0:
        raise InvalidScale(value_ceiling)


def project_x(instant: int, now: int, timescale: int, width: float) -> float:
    then = now - timescale
    return (instant - then) / timescale * width


def project_y(value: float, value_ceiling: float, height: float) -> float:
    return (value_ceiling - value) / value_ceiling * height


def axis_ticks(
    now: int,
    timescale: Timescale,
    viewport: Viewport,
    tz: Optional[tzinfo] = None,
) -> list[AxisTick]:
    """Ticks at round hours, the last one at the most recent round hour."""
    last = last_round_hour(now)
    ticks = []
    for offset in TICK_HOURS[Timescale(timescale)]:
        instant = last + offset * HOUR
        ticks.append(AxisTick(
            x=project_x(instant, now, timescale, viewport.width),
            instant=instant,
            label=format_clock(instant, tz),
        ))
    return ticks


def project_target_band(
    low: float,
    high: float,
    value_ceiling: float,
    viewport: Viewport,
) -> TargetBand:
    """Vertical position of the target range lines."""
    _check_ceiling(value_ceiling)
    return TargetBand(
        low_y=project_y(low, value_ceiling, viewport.height),
        high_y=project_y(high, value_ceiling, viewport.height),
    )


def project(
    series: SampleSeries,
    now: int,
    timescale: Timescale,
    value_ceiling: float,
    viewport: Viewport,
    capacity: int = SLOT_CAPACITY,
    target: Optional[tuple[float, float]] = (TARGET_LOW, TARGET_HIGH),
    tz: Optional[tzinfo] = None,
) -> Projection:
    """Project a series onto the viewport for the given timescale.

    Only the first ``capacity`` samples are projected. Ticks depend on
    ``now`` and ``timescale`` alone, so an empty series still gets them.

    Raises:
        InvalidScale: If value_ceiling <= 0
    """
    _check_ceiling(value_ceiling)

    points = [
        GraphPoint(
            x=project_x(sample.instant, now, timescale, viewport.width),
            y=project_y(sample.value, value_ceiling, viewport.height),
            value=sample.value,
        )
        for sample in series.samples[:capacity]
    ]

    band = None
    if target is not None:
        band = project_target_band(target[0], target[1], value_ceiling, viewport)

    return Projection(
        points=points,
        ticks=axis_ticks(now, timescale, viewport, tz),
        now_marker_x=viewport.width,
        band=band,
    )
