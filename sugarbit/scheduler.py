"""
Update scheduler: fetch, load, draw, wait, repeat.

Ticks run strictly one after another in the calling thread, so a load
always finishes before the frame that reads it is drawn and no fetch ever
overlaps another. A failed fetch leaves the previous readings in place;
their growing age then shows up as staleness on the next frame.
"""

import time
from typing import Callable, Optional

from .core.config import Config
from .core.exceptions import FetchFailed, MalformedPayload, MalformedTimestamp
from .core.graph import Projection, Viewport
from .core.logging import TickContext, get_logger, set_tick_context
from .core.state import AppState
from .core.summary import Summary
from .fetch import FetchResult

logger = get_logger(__name__)

DrawCallback = Callable[[Summary, Projection, int], None]


class UpdateScheduler:
    """Drives an AppState from a fetch function on a timer.

    Args:
        state: State to refresh
        fetch: Zero-argument callable returning a FetchResult
        draw: Called with (summary, projection, now) after every tick
        config: Thresholds, graph geometry and refresh cadence
        clock: Returns the current epoch time (default time.time)
        sleep: Blocks for the given number of seconds (default time.sleep)
    """

    def __init__(
        self,
        state: AppState,
        fetch: Callable[[], FetchResult],
        draw: DrawCallback,
        config: Optional[Config] = None,
        clock: Optional[Callable[[], float]] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.state = state
        self.fetch = fetch
        self.draw = draw
        self.config = config or Config()
        self.clock = clock or time.time
        self.sleep = sleep or time.sleep
        self.ticks = 0
        self.last_modified: Optional[int] = None
        self.last_error: Optional[Exception] = None
        self.context = TickContext()

    @property
    def viewport(self) -> Viewport:
        return Viewport(self.config.graph.width, self.config.graph.height)

    def now(self) -> int:
        return int(self.clock())

    def redraw(self, now: int) -> None:
        th = self.config.thresholds
        gr = self.config.graph
        summary = self.state.summarize(now, th.max_age, th.max_delta_age)
        projection = self.state.project(
            now, self.viewport, capacity=gr.capacity, target=(gr.target_low, gr.target_high)
        )
        self.draw(summary, projection, now)

    def tick(self) -> bool:
        """Run one fetch-load-draw cycle.

        Returns:
            True if new readings were loaded
        """
        self.ticks += 1
        self.context.tick = self.ticks
        self.context.timescale = self.state.timescale.label
        now = self.now()
        loaded = False

        try:
            result = self.fetch()
            self.state.refresh(result.payload, now)
        except (FetchFailed, MalformedPayload, MalformedTimestamp) as e:
            self.last_error = e
            logger.warning(f"Could not fetch readings, keeping previous ones: {e}")
        else:
            self.last_error = None
            self.last_modified = result.last_modified
            loaded = True

        self.redraw(now)
        return loaded

    def interact(self) -> None:
        """Handle a user interaction: rotate the timescale and redraw."""
        now = self.now()
        timescale = self.state.advance_timescale(now)
        self.context.timescale = timescale.label
        self.redraw(now)

    def next_delay(self, now: int) -> int:
        """Seconds to wait before the next tick.

        With a known Last-Modified the next upload is expected one upload
        interval (plus grace) later; waiting until then avoids refetching an
        unchanged report. The delay stays within [min_interval, interval].
        """
        ref = self.config.refresh
        if self.last_modified is None:
            return ref.interval

        due = self.last_modified + ref.upload_interval + ref.grace
        delay = min(max(due - now, ref.min_interval), ref.interval)
        logger.debug(f"Next upload due at {due}, waiting {delay}s")
        return delay

    def run(self, max_ticks: Optional[int] = None, rotate_every: Optional[int] = None) -> None:
        """Tick until interrupted, or until max_ticks have run.

        Args:
            max_ticks: Stop after this many ticks (None = forever)
            rotate_every: Rotate the timescale every N ticks, standing in
                for a user interaction on devices without one
        """
        set_tick_context(self.context)
        try:
            while max_ticks is None or self.ticks < max_ticks:
                self.tick()
                if rotate_every and self.ticks % rotate_every == 0:
                    self.interact()
                if max_ticks is not None and self.ticks >= max_ticks:
                    break
                self.sleep(self.next_delay(self.now()))
        finally:
            set_tick_context(None)
