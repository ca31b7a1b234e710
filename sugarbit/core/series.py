"""
Ordered, age-bounded store of glucose samples.

A payload maps ``YYYY.MM.DD - HH:MM:SS`` keys to readings in mmol/L:

    {"2024.01.01 - 10:00:00": 5.5, "2024.01.01 - 10:05:00": 6.0}

``SampleSeries.load`` turns it into samples sorted by instant, keeping only
those inside the look-back window. A series is never mutated in place; each
load produces a new one.
"""

import logging
import math
from dataclasses import dataclass
from datetime import tzinfo
from typing import Any, Iterable, Mapping, Optional

from .exceptions import MalformedPayload, MalformedTimestamp
from .logging import get_logger
from .timeparse import parse_time

logger = get_logger(__name__)

# Lowest ceiling of the value axis [mmol/L]
VALUE_CEILING_FLOOR = 16.0

ON_MALFORMED_SKIP = "skip"
ON_MALFORMED_ABORT = "abort"
ON_MALFORMED_CHOICES = (ON_MALFORMED_SKIP, ON_MALFORMED_ABORT)


@dataclass(frozen=True)
class Sample:
    """One reading at an instant (epoch seconds)."""
    instant: int
    value: float


def _coerce_value(key: str, raw: Any) -> float:
    # bool is an int subclass but never a reading
    if isinstance(raw, bool) or not isinstance(raw, (int, float, str)):
        raise MalformedPayload(f"reading is not a number: {raw!r}", key=key)
    try:
        value = float(raw)
    except ValueError as e:
        raise MalformedPayload(f"reading is not a number: {raw!r}", key=key) from e
    if not math.isfinite(value):
        raise MalformedPayload(f"reading is not finite: {raw!r}", key=key)
    return value


class SampleSeries:
    """Samples sorted ascending by instant. Duplicate instants are kept."""

    def __init__(self, samples: Iterable[Sample] = ()):
        self._samples: tuple[Sample, ...] = tuple(sorted(samples, key=lambda s: s.instant))

    @classmethod
    def load(
        cls,
        raw: Mapping[str, Any],
        now: int,
        lookback: int,
        on_malformed: str = ON_MALFORMED_SKIP,
        tz: Optional[tzinfo] = None,
        skip_log_level: int = logging.WARNING,
    ) -> "SampleSeries":
        """Build a series from a raw payload.

        Args:
            raw: Mapping of timestamp text to reading
            now: Current instant
            lookback: Window length in seconds; samples older than
                ``now - lookback`` are dropped (the bound itself is kept)
            on_malformed: "skip" to drop bad entries with a warning,
                "abort" to raise on the first one
            tz: Zone of the payload's wall-clock timestamps (None = local)
            skip_log_level: Level for the message logged per skipped entry

        Raises:
            MalformedPayload: If raw is not a mapping, or a value is bad and
                on_malformed is "abort"
            MalformedTimestamp: If a key is bad and on_malformed is "abort"
        """
        if on_malformed not in ON_MALFORMED_CHOICES:
            raise ValueError(
                f"Unknown on_malformed policy: {on_malformed!r}. "
                f"Valid policies: {', '.join(ON_MALFORMED_CHOICES)}"
            )
        if not isinstance(raw, Mapping):
            raise MalformedPayload(f"expected an object, got {type(raw).__name__}")

        start = now - lookback
        samples = []
        skipped = 0

        for key, reading in raw.items():
            try:
                sample = Sample(parse_time(key, tz), _coerce_value(key, reading))
            except (MalformedTimestamp, MalformedPayload) as e:
                if on_malformed == ON_MALFORMED_ABORT:
                    raise
                logger.log(skip_log_level, f"Skipping entry: {e}")
                skipped += 1
                continue

            if sample.instant >= start:
                samples.append(sample)
            else:
                logger.trace(f"Dropping {key!r}: older than window")

        series = cls(samples)
        logger.debug(
            f"Loaded {len(series)} of {len(raw)} entries "
            f"(window {lookback}s, {skipped} skipped)"
        )
        return series

    @property
    def samples(self) -> tuple[Sample, ...]:
        return self._samples

    def latest(self, n: int) -> tuple[Sample, ...]:
        """Return the last ``n`` samples in ascending order (fewer if short)."""
        if n <= 0:
            return ()
        return self._samples[-n:]

    def max_value(self, floor: float = VALUE_CEILING_FLOOR) -> float:
        """Largest reading, or ``floor`` when the series is empty."""
        if not self._samples:
            return floor
        return max(s.value for s in self._samples)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self):
        return iter(self._samples)

    def __bool__(self) -> bool:
        return bool(self._samples)

    def __repr__(self) -> str:
        return f"SampleSeries({len(self._samples)} samples)"
