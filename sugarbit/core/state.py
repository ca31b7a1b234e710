"""
Application state shared by the update scheduler and the CLI.

Holds the one series and the one timescale cycler of a running display.
Only ``refresh`` and ``advance_timescale`` mutate it, and each replaces the
series in a single assignment, so readers never see a partial load.
"""

import logging
from dataclasses import dataclass, field
from datetime import tzinfo
from typing import Any, Mapping, Optional

from .graph import SLOT_CAPACITY, TARGET_HIGH, TARGET_LOW, Projection, Viewport, project
from .logging import get_logger
from .series import ON_MALFORMED_SKIP, VALUE_CEILING_FLOOR, SampleSeries
from .summary import MAX_AGE, MAX_DELTA_AGE, Summary, summarize
from .timescale import Timescale, TimescaleCycler

logger = get_logger(__name__)


@dataclass
class AppState:
    cycler: TimescaleCycler = field(default_factory=TimescaleCycler)
    series: SampleSeries = field(default_factory=SampleSeries)
    ceiling_floor: float = VALUE_CEILING_FLOOR
    value_ceiling: float = VALUE_CEILING_FLOOR
    on_malformed: str = ON_MALFORMED_SKIP
    last_payload: Optional[Mapping[str, Any]] = None
    tz: Optional[tzinfo] = None

    @property
    def timescale(self) -> Timescale:
        return self.cycler.current()

    def refresh(self, raw: Mapping[str, Any], now: int, rewindow: bool = False) -> SampleSeries:
        """Replace the series with the readings of a new payload.

        Raises:
            MalformedPayload, MalformedTimestamp: Only under the "abort"
                policy (or for a non-mapping payload); the previous series
                is kept in that case.

        A re-window of an already loaded payload logs skipped entries at
        DEBUG, since they were reported when the payload first arrived.
        """
        series = SampleSeries.load(
            raw, now, self.timescale, on_malformed=self.on_malformed, tz=self.tz,
            skip_log_level=logging.DEBUG if rewindow else logging.WARNING,
        )
        self.series = series
        self.value_ceiling = max(self.ceiling_floor, series.max_value(self.ceiling_floor))
        self.last_payload = raw
        logger.info(f"Loaded {len(series)} readings for {self.timescale.label} window")
        return series

    def advance_timescale(self, now: int) -> Timescale:
        """Rotate to the next timescale and re-window the last payload."""
        timescale = self.cycler.advance()
        logger.info(f"Timescale is now {timescale.label}")
        if self.last_payload is not None:
            self.refresh(self.last_payload, now, rewindow=True)
        return timescale

    def summarize(self, now: int, max_age: int = MAX_AGE, max_delta_age: int = MAX_DELTA_AGE) -> Summary:
        return summarize(self.series, now, max_age, max_delta_age)

    def project(
        self,
        now: int,
        viewport: Viewport,
        capacity: int = SLOT_CAPACITY,
        target: Optional[tuple[float, float]] = (TARGET_LOW, TARGET_HIGH),
    ) -> Projection:
        return project(
            self.series, now, self.timescale, self.value_ceiling, viewport,
            capacity=capacity, target=target, tz=self.tz,
        )
