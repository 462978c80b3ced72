from __future__ import annotations

from typing import Optional

import numpy as np

from .scan import LaserScan
from .utils import get_logger

_log = get_logger()


class ProjectionCache:
    """Per-beam ``(cos, sin)`` factors for polar to cartesian projection.

    The table is rebuilt only when the beam count changes. Two scans with the same
    beam count but different angular spans therefore share the cached table unless
    ``angle_tolerance`` is set, in which case ``angle_min`` and ``angle_increment``
    are compared as well.
    """

    def __init__(self, angle_tolerance: Optional[float] = None) -> None:
        if angle_tolerance is not None and angle_tolerance < 0.0:
            raise ValueError("angle_tolerance must be non-negative.")
        self.angle_tolerance = angle_tolerance
        self._factors = np.zeros((0, 2), dtype=np.float64)
        self._angle_min = 0.0
        self._angle_increment = 0.0
        self.rebuilds = 0

    @property
    def beam_count(self) -> int:
        return int(self._factors.shape[0])

    @property
    def factors(self) -> np.ndarray:
        view = self._factors.view()
        view.flags.writeable = False
        return view

    def _angles_changed(self, scan: LaserScan) -> bool:
        if self.angle_tolerance is None:
            return False
        return (
            abs(scan.angle_min - self._angle_min) > self.angle_tolerance
            or abs(scan.angle_increment - self._angle_increment) > self.angle_tolerance
        )

    def update(self, scan: LaserScan) -> bool:
        """Rebuild the table for ``scan`` if needed; returns whether it was rebuilt."""
        if scan.beam_count == self.beam_count and not self._angles_changed(scan):
            return False

        _log.debug(
            "Updating projection table: beams=%d angle_min=%.6f angle_max=%.6f increment=%.6f",
            scan.beam_count, scan.angle_min, scan.angle_max, scan.angle_increment,
        )
        angles = scan.beam_angles()
        self._factors = np.column_stack([np.cos(angles), np.sin(angles)])
        self._angle_min = float(scan.angle_min)
        self._angle_increment = float(scan.angle_increment)
        self.rebuilds += 1
        return True

    def project(self, ranges: np.ndarray) -> np.ndarray:
        """Points ``(r cos, r sin, 0)`` in the sensor plane, shape (N, 3)."""
        r = np.asarray(ranges, dtype=np.float64).reshape(-1)
        if r.shape[0] != self.beam_count:
            raise ValueError(f"Expected {self.beam_count} ranges, got {r.shape[0]}")
        xy = r[:, None] * self._factors
        return np.column_stack([xy, np.zeros_like(r)])
