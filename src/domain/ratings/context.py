"""Run-wide ranking context: time-decay window and outlier settings."""

from __future__ import annotations

from typing import Final

DEFAULT_OUTLIER_RANK: Final[int] = 5


def remap_value_clamped(
    value: float,
    in_min: float,
    in_max: float,
    out_min: float,
    out_max: float,
) -> float:
    """Linearly map ``value`` from ``[in_min, in_max]`` onto ``[out_min, out_max]``.

    The result is clamped to the output range. A zero-width input range is a
    step: values at or above ``in_max`` map to ``out_max``, the rest to ``out_min``.
    """
    if in_max == in_min:
        return out_max if value >= in_max else out_min
    ratio = (value - in_min) / (in_max - in_min)
    ratio = max(0.0, min(1.0, ratio))
    return out_min + ratio * (out_max - out_min)


class RankingContext:
    """Tunables shared by every stage of one ranking run.

    Read-only once configured, apart from ``set_time_window`` which the
    dataset ingestor calls once the time bounds of the data are known.
    """

    def __init__(
        self,
        *,
        outlier_rank: int = DEFAULT_OUTLIER_RANK,
        decay_exponent: float = 1.0,
        high_value_event_modifier: float = 1.0,
    ) -> None:
        if outlier_rank < 1:
            raise ValueError("outlier_rank must be >= 1")
        if decay_exponent <= 0.0:
            raise ValueError("decay_exponent must be > 0")
        self.outlier_rank = outlier_rank
        self.decay_exponent = decay_exponent
        # Exposed for callers; no formula applies it yet.
        self.high_value_event_modifier = high_value_event_modifier
        self.window_start: float | None = None
        self.window_end: float | None = None

    @property
    def has_time_window(self) -> bool:
        return self.window_start is not None and self.window_end is not None

    def set_time_window(self, start: float, end: float) -> None:
        self.window_start = start
        self.window_end = max(start, end)

    def decay(self, timestamp: float) -> float:
        """Information weight in ``[0, 1]`` for a result at ``timestamp``."""
        if self.window_start is None or self.window_end is None:
            return 1.0
        position = remap_value_clamped(timestamp, self.window_start, self.window_end, 0.0, 1.0)
        return position**self.decay_exponent
