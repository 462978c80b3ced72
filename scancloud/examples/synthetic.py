from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Optional, Tuple

import numpy as np

from ..core.scan import LaserScan
from ..motion.pose import Pose
from ..motion.trajectory import Trajectory


@dataclass
class RectangularRoom:
    """Axis-aligned room with vertical walls, centred on ``center_xy``."""

    width_m: float
    depth_m: float
    center_xy: Tuple[float, float] = (0.0, 0.0)

    def __post_init__(self) -> None:
        if self.width_m <= 0.0 or self.depth_m <= 0.0:
            raise ValueError("Room dimensions must be positive.")

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        cx, cy = self.center_xy
        hx, hy = 0.5 * self.width_m, 0.5 * self.depth_m
        return (cx - hx, cx + hx, cy - hy, cy + hy)

    def contains(self, xy: np.ndarray) -> np.ndarray:
        xmin, xmax, ymin, ymax = self.bounds
        xy = np.atleast_2d(xy)
        return (xy[:, 0] > xmin) & (xy[:, 0] < xmax) & (xy[:, 1] > ymin) & (xy[:, 1] < ymax)

    def wall_distance(self, xy: np.ndarray) -> np.ndarray:
        """Distance from each point to the nearest wall (0 on the wall)."""
        xmin, xmax, ymin, ymax = self.bounds
        xy = np.atleast_2d(xy)
        dx = np.minimum(np.abs(xy[:, 0] - xmin), np.abs(xy[:, 0] - xmax))
        dy = np.minimum(np.abs(xy[:, 1] - ymin), np.abs(xy[:, 1] - ymax))
        return np.minimum(dx, dy)

    def cast(self, origins: np.ndarray, directions: np.ndarray) -> np.ndarray:
        """Ray parameter at which each ray leaves the room through a wall.

        ``directions`` may be 3D; only their horizontal part matters because the
        walls are vertical, so the returned value is the 3D range along the ray.
        """
        xmin, xmax, ymin, ymax = self.bounds
        ox, oy = origins[:, 0], origins[:, 1]
        dx, dy = directions[:, 0], directions[:, 1]
        with np.errstate(divide="ignore", invalid="ignore"):
            tx = np.where(dx > 0.0, (xmax - ox) / dx, np.where(dx < 0.0, (xmin - ox) / dx, np.inf))
            ty = np.where(dy > 0.0, (ymax - oy) / dy, np.where(dy < 0.0, (ymin - oy) / dy, np.inf))
        return np.minimum(tx, ty)


@dataclass
class SyntheticScanner:
    """Planar range sensor carried along a trajectory inside a :class:`RectangularRoom`.

    Each beam is ray-cast from the sensor pose at that beam's own timestamp, so
    scans taken while moving carry the same skew a real spinning sensor would.
    Returns beyond ``range_max`` are reported as ``inf``.
    """

    room: RectangularRoom
    trajectory: Trajectory
    mount: Pose = field(default_factory=Pose.identity)
    beam_count: int = 360
    angle_min: float = -np.pi
    angle_max: float = np.pi
    range_min: float = 0.1
    range_max: float = 30.0
    scan_period_s: float = 0.1
    time_increment_s: Optional[float] = None
    sigma_range_m: float = 0.0
    frame_id: str = "laser"

    def __post_init__(self) -> None:
        if self.beam_count <= 0:
            raise ValueError("beam_count must be positive.")
        if self.scan_period_s <= 0.0:
            raise ValueError("scan_period_s must be positive.")
        if self.range_max <= self.range_min:
            raise ValueError("range_max must be greater than range_min.")
        if self.time_increment_s is None:
            self.time_increment_s = self.scan_period_s / self.beam_count
        if self.time_increment_s < 0.0:
            raise ValueError("time_increment_s must be non-negative.")

    @property
    def angle_increment(self) -> float:
        if self.beam_count == 1:
            return 0.0
        return (self.angle_max - self.angle_min) / (self.beam_count - 1)

    def sensor_pose(self, t: float) -> Pose:
        return self.trajectory.sample(t).compose(self.mount)

    def scan_at(self, stamp: float, rng: Optional[np.random.Generator] = None) -> LaserScan:
        idx = np.arange(self.beam_count, dtype=np.float64)
        angles = self.angle_min + idx * self.angle_increment
        times = stamp + idx * self.time_increment_s

        local_dirs = np.column_stack([np.cos(angles), np.sin(angles), np.zeros_like(angles)])
        origins = np.empty((self.beam_count, 3), dtype=np.float64)
        dirs = np.empty((self.beam_count, 3), dtype=np.float64)
        for i, t in enumerate(times):
            pose = self.sensor_pose(float(t))
            origins[i] = pose.t
            dirs[i] = pose.R @ local_dirs[i]

        ranges = self.room.cast(origins, dirs)
        if self.sigma_range_m > 0.0:
            if rng is None:
                rng = np.random.default_rng()
            ranges = ranges + rng.normal(scale=self.sigma_range_m, size=ranges.shape)
        ranges = np.where(ranges >= self.range_max, np.inf, ranges)

        with np.errstate(divide="ignore"):
            intensities = np.where(np.isfinite(ranges), 1000.0 / np.maximum(ranges, 1.0) ** 2, 0.0)

        return LaserScan(
            ranges=ranges,
            intensities=intensities,
            angle_min=self.angle_min,
            angle_increment=self.angle_increment,
            range_min=self.range_min,
            range_max=self.range_max,
            time_increment=float(self.time_increment_s),
            stamp=float(stamp),
            frame_id=self.frame_id,
        )

    def scans(self, count: int, start_time_s: float = 0.0, rng: Optional[np.random.Generator] = None) -> Iterator[LaserScan]:
        for k in range(count):
            yield self.scan_at(start_time_s + k * self.scan_period_s, rng)
