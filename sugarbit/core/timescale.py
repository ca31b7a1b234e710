"""Look-back windows and the rotation between them."""

from enum import IntEnum

from .timeparse import HOUR


class Timescale(IntEnum):
    """Supported look-back windows, in seconds."""
    H3 = 3 * HOUR
    H6 = 6 * HOUR
    H12 = 12 * HOUR
    H24 = 24 * HOUR

    @property
    def label(self) -> str:
        return f"{self.value // HOUR}h"

    @classmethod
    def from_label(cls, label: str) -> "Timescale":
        """Parse a label such as ``"6h"``.

        Raises:
            ValueError: If the label names no supported timescale
        """
        for timescale in cls:
            if timescale.label == label.strip().lower():
                return timescale
        valid = ", ".join(t.label for t in cls)
        raise ValueError(f"Unknown timescale: {label!r}. Valid timescales: {valid}")


ROTATION: tuple[Timescale, ...] = (Timescale.H3, Timescale.H6, Timescale.H12, Timescale.H24)


class TimescaleCycler:
    """Cycles through ``ROTATION``, wrapping after the last window.

    Usage:
        cycler = TimescaleCycler()
        cycler.current()   # Timescale.H3
        cycler.advance()   # Timescale.H6
    """

    def __init__(self, start: int = 0):
        self._index = start % len(ROTATION)

    @classmethod
    def starting_at(cls, timescale: Timescale) -> "TimescaleCycler":
        return cls(ROTATION.index(timescale))

    def current(self) -> Timescale:
        return ROTATION[self._index]

    def advance(self) -> Timescale:
        self._index = (self._index + 1) % len(ROTATION)
        return self.current()
