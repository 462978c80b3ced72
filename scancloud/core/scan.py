from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

import numpy as np


@dataclass
class LaserScan:
    """One sweep of a planar range sensor.

    ``ranges[i]`` was measured along bearing ``angle_min + i * angle_increment`` at
    ``stamp + i * time_increment``. ``intensities`` shares the beam indexing; beams
    past its end have no intensity.
    """
    ranges: np.ndarray                       # (N,) metres
    angle_min: float                         # rad
    angle_increment: float                   # rad
    range_min: float                         # m
    range_max: float                         # m
    time_increment: float = 0.0              # s between consecutive beams
    stamp: float = 0.0                       # s, first beam
    frame_id: str = "laser"
    intensities: Optional[np.ndarray] = None

    def __post_init__(self) -> None:
        self.ranges = np.asarray(self.ranges, dtype=np.float64).reshape(-1)
        if self.intensities is not None:
            self.intensities = np.asarray(self.intensities, dtype=np.float64).reshape(-1)
        if not self.frame_id:
            raise ValueError("LaserScan requires a frame_id.")
        if self.time_increment < 0.0:
            raise ValueError("time_increment must be non-negative.")

    @property
    def beam_count(self) -> int:
        return int(self.ranges.shape[0])

    @property
    def angle_max(self) -> float:
        return self.angle_min + max(self.beam_count - 1, 0) * self.angle_increment

    @property
    def duration_s(self) -> float:
        return max(self.beam_count - 1, 0) * self.time_increment

    @property
    def end_time(self) -> float:
        return self.stamp + self.duration_s

    @property
    def middle_time(self) -> float:
        return self.stamp + 0.5 * self.duration_s

    def beam_angles(self) -> np.ndarray:
        return self.angle_min + np.arange(self.beam_count, dtype=np.float64) * self.angle_increment

    def beam_times(self) -> np.ndarray:
        return self.stamp + np.arange(self.beam_count, dtype=np.float64) * self.time_increment

    def beam_intensities(self) -> np.ndarray:
        """Per-beam intensity, zero where none was reported."""
        out = np.zeros(self.beam_count, dtype=np.float64)
        if self.intensities is not None:
            n = min(len(self.intensities), self.beam_count)
            out[:n] = self.intensities[:n]
        return out
