"""
Logging configuration for sugarbit.

Provides centralized logging setup with verbosity levels:
- 0 (default): WARNING - fetch failures and skipped entries only
- 1 (-v):      INFO - fetches, loads, timescale changes
- 2 (-vv):     DEBUG - sample counts, cadence decisions, projections
- 3+ (-vvv):   TRACE - everything, including per-entry parsing

While the update scheduler runs, records are prefixed with the current
tick and timescale, e.g. ``[tick 3:6h] Loaded 72 samples``.
"""

import logging
import sys
from dataclasses import dataclass
from typing import Optional

# Custom TRACE level (more verbose than DEBUG)
TRACE = 5
logging.addLevelName(TRACE, "TRACE")


def trace(self, message, *args, **kwargs):
    """Log at TRACE level."""
    if self.isEnabledFor(TRACE):
        self._log(TRACE, message, args, **kwargs)


logging.Logger.trace = trace


@dataclass
class TickContext:
    """Position of the update scheduler, used as a log prefix."""
    tick: Optional[int] = None
    timescale: Optional[str] = None

    def format_prefix(self) -> str:
        """Format the context as a log prefix.

        Examples:
            [tick 3]
            [tick 3:6h]
            [6h]
        """
        parts = []
        if self.tick is not None:
            parts.append(f"tick {self.tick}")
        if self.timescale:
            parts.append(self.timescale)
        if not parts:
            return ""
        return f"[{':'.join(parts)}]"


_current_tick_context: Optional[TickContext] = None


def get_tick_context() -> Optional[TickContext]:
    """Get the current tick context."""
    return _current_tick_context


def set_tick_context(context: Optional[TickContext]) -> None:
    """Set the current tick context."""
    global _current_tick_context
    _current_tick_context = context


class TickContextFormatter(logging.Formatter):
    """Formatter that includes tick context if available."""

    def format(self, record):
        ctx = get_tick_context()
        prefix = ctx.format_prefix() if ctx else ""
        if prefix:
            # Other handlers see the same record
            record = logging.makeLogRecord(record.__dict__)
            record.msg = f"{prefix} {record.msg}"
        return super().format(record)


def setup_logging(verbosity: int = 0, quiet: bool = False) -> logging.Logger:
    """Configure logging based on verbosity level.

    Args:
        verbosity: Number of -v flags (0=WARNING, 1=INFO, 2=DEBUG, 3+=TRACE)
        quiet: If True, suppress all output except errors

    Returns:
        The configured root logger for sugarbit
    """
    if quiet:
        level = logging.ERROR
    elif verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    elif verbosity == 2:
        level = logging.DEBUG
    else:
        level = TRACE

    logger = logging.getLogger("sugarbit")
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if verbosity >= 2:
        fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
        formatter = TickContextFormatter(fmt, datefmt="%H:%M:%S")
    elif verbosity == 1:
        formatter = TickContextFormatter("[%(levelname)s] %(message)s")
    else:
        formatter = logging.Formatter("%(message)s")

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # At TRACE level, also show urllib3 connection chatter
    if verbosity >= 3:
        logging.getLogger().setLevel(logging.DEBUG)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger for a module.

    Args:
        name: Module name (e.g., "sugarbit.core.series").
              If None, returns the root sugarbit logger.
    """
    if name is None:
        return logging.getLogger("sugarbit")
    return logging.getLogger(name)
