"""
Terminal rendering of a dashboard frame.

The core hands over plain numbers (a Summary and a Projection in viewport
units); this module maps them onto a character grid with rich styling. One
viewport unit is one terminal cell.
"""

from datetime import tzinfo
from typing import Optional

from rich.console import Group
from rich.text import Text

from .core.graph import Level, Projection, classify
from .core.summary import NO_VALUE, Summary, format_delta, format_value
from .core.timeparse import format_clock
from .core.timescale import Timescale

UNITS = "mmol/L"

LEVEL_COLORS = {
    Level.HIGH: "#ff9d2f",
    Level.LOW: "#e50000",
    Level.NORMAL: "#999999",
}

# Dot radius per timescale [px]; denser timescales get smaller dots
DOT_RADIUS = {
    Timescale.H3: 3.0,
    Timescale.H6: 2.5,
    Timescale.H12: 2.0,
    Timescale.H24: 1.5,
}

BAND_STYLE = "dim"
AXIS_STYLE = "dim"


def dot_glyph(timescale: Timescale) -> str:
    """Terminal stand-in for the dot radius of a timescale."""
    radius = DOT_RADIUS[timescale]
    if radius >= 3:
        return "●"
    if radius >= 2.5:
        return "•"
    if radius >= 2:
        return "∙"
    return "·"


def level_color(value: float, low: float, high: float) -> str:
    return LEVEL_COLORS[classify(value, low, high)]


def render_header(
    summary: Summary,
    now: int,
    timescale: Timescale,
    low: float,
    high: float,
    tz: Optional[tzinfo] = None,
) -> Text:
    """Clock, current value, delta and units on one line."""
    header = Text(format_clock(now, tz), style="bold")
    header.append("  ")

    if summary.current is None:
        header.append(NO_VALUE, style="bold")
    else:
        color = level_color(summary.current, low, high)
        style = f"bold {color}"
        if summary.is_stale:
            style += " strike"
        header.append(format_value(summary.current), style=style)
        if summary.shows_delta:
            header.append(f" ({format_delta(summary.delta)})", style=color)

    header.append(f" {UNITS}", style="dim")
    header.append(f"  [{timescale.label}]", style="dim")
    return header


def _cell(value: float, size: int) -> Optional[int]:
    """Map a viewport coordinate to a cell index, None when outside."""
    if value < 0 or value > size:
        return None
    return min(int(round(value)), size - 1)


def render_plot(
    projection: Projection,
    timescale: Timescale,
    width: int,
    height: int,
    low: float,
    high: float,
) -> Text:
    """Character plot with target band, dots, now marker and tick labels."""
    grid: list[list[tuple[str, str]]] = [[(" ", "")] * width for _ in range(height)]

    if projection.band is not None:
        for band_y in (projection.band.low_y, projection.band.high_y):
            row = _cell(band_y, height)
            if row is not None:
                grid[row] = [("─", BAND_STYLE)] * width

    glyph = dot_glyph(timescale)
    for point in projection.points:
        col = _cell(point.x, width)
        if col is None:
            continue
        # Readings above the ceiling or below zero stick to the edges
        row = min(max(int(round(point.y)), 0), height - 1)
        grid[row][col] = (glyph, level_color(point.value, low, high))

    plot = Text()
    for cells in grid:
        for char, style in cells:
            plot.append(char, style=style or None)
        plot.append("│\n", style=AXIS_STYLE)

    axis = [("─", AXIS_STYLE)] * width
    labels = [" "] * (width + 1)
    for tick in projection.ticks:
        col = _cell(tick.x, width)
        if col is None:
            continue
        axis[col] = ("┴", AXIS_STYLE)
        if len(tick.label) > width + 1:
            continue
        start = min(max(col - len(tick.label) // 2, 0), width + 1 - len(tick.label))
        labels[start:start + len(tick.label)] = list(tick.label)

    for char, style in axis:
        plot.append(char, style=style)
    plot.append("┘\n", style=AXIS_STYLE)
    plot.append("".join(labels).rstrip(), style=AXIS_STYLE)
    return plot


def render_dashboard(
    summary: Summary,
    projection: Projection,
    timescale: Timescale,
    now: int,
    width: int,
    height: int,
    low: float,
    high: float,
    tz: Optional[tzinfo] = None,
) -> Group:
    """Full dashboard frame: header above the plot."""
    return Group(
        render_header(summary, now, timescale, low, high, tz),
        render_plot(projection, timescale, width, height, low, high),
    )
