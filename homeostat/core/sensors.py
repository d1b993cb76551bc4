"""
core/sensors.py

The body feels through eight infrared eyes.

Raw proximity readings are noisy and unbounded. The window clamps them
into a working band, rescales them, and keeps exactly two frames alive:
what the body feels now, and what it felt one cycle ago.
Everything that reasons about change reads from here.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Sequence
import numpy as np


MIN_DIST = 80      # Below this the IR channel sees nothing useful
MAX_DIST = 500     # Saturation point of the IR channel
NUM_CHANNELS = 8   # Proximity sensors around the body


@dataclass
class SensorConfig:
    """Working band of the proximity sensors."""
    min_dist: float = MIN_DIST
    max_dist: float = MAX_DIST
    num_channels: int = NUM_CHANNELS

    def __post_init__(self):
        if self.max_dist <= self.min_dist:
            raise ValueError(
                f"max_dist ({self.max_dist}) must exceed min_dist ({self.min_dist})"
            )
        if self.num_channels < 2:
            raise ValueError("At least two proximity channels are required")

    @property
    def span(self) -> float:
        return self.max_dist - self.min_dist


class SensorWindow:
    """
    Current and previous proximity frames.

    The previous frame is overwritten by the current one only through
    snapshot_previous(), once per cycle, after damage detection.
    """

    def __init__(self, config: Optional[SensorConfig] = None):
        self.config = config or SensorConfig()
        n = self.config.num_channels
        self.current = np.zeros(n, dtype=np.float64)
        self.previous = np.zeros(n, dtype=np.float64)

    def scale(self, raw: Sequence[float]) -> np.ndarray:
        """
        Clamp raw readings into [min_dist, max_dist] and rescale them.

        Readings under min_dist map to 0. Out-of-range input is never
        rejected, only clamped.
        """
        values = np.asarray(raw, dtype=np.float64)
        if values.shape != (self.config.num_channels,):
            raise ValueError(
                f"Expected {self.config.num_channels} proximity readings, "
                f"got shape {values.shape}"
            )
        lo, hi = self.config.min_dist, self.config.max_dist
        clamped = np.clip(values, lo, hi)
        return np.where(values >= lo, (clamped - lo) / 2.0, 0.0)

    def refresh(self, raw: Sequence[float]) -> np.ndarray:
        """Replace the current frame with a fresh reading. Returns a copy."""
        self.current = self.scale(raw)
        return self.current.copy()

    def snapshot_previous(self) -> None:
        """Archive the current frame as the previous one."""
        self.previous = self.current.copy()

    def diff(self) -> np.ndarray:
        return self.current - self.previous

    def mean_normalized(self) -> float:
        """
        Mean of the current frame normalized with the working band.

        Clipped to [0, 1]; this is the Integrity cue.
        """
        lo = self.config.min_dist
        mean = float(self.current.mean())
        return float(np.clip((mean - lo) / self.config.span, 0.0, 1.0))

    def __repr__(self) -> str:
        return (
            f"SensorWindow(current={np.round(self.current, 1).tolist()}, "
            f"previous={np.round(self.previous, 1).tolist()})"
        )
