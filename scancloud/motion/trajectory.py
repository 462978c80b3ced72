from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

import numpy as np

from .pose import Pose


class Trajectory:
    """Base interface for platform motion."""

    def sample(self, t: float) -> Pose:
        raise NotImplementedError

    def timeline(self) -> Iterable[tuple[float, Pose]]:
        raise NotImplementedError

    def start_time(self) -> float:
        return next(iter(self.timeline()))[0]


@dataclass
class StaticTrajectory(Trajectory):
    """A trajectory with a single, fixed pose."""

    pose: Pose
    start_time_s: float = 0.0

    def sample(self, t: float) -> Pose:
        return self.pose

    def timeline(self) -> Iterable[tuple[float, Pose]]:
        yield (self.start_time_s, self.pose)


class KeyframeTrajectory(Trajectory):
    """Time-stamped pose keyframes, blended with lerp (position) and slerp (rotation).

    Samples before the first or after the last keyframe are clamped.
    """

    def __init__(self, times: Sequence[float], poses: Sequence[Pose]) -> None:
        if len(times) == 0:
            raise ValueError("KeyframeTrajectory requires at least one keyframe.")
        if len(times) != len(poses):
            raise ValueError("times and poses must have the same length.")
        self._times = np.asarray(times, dtype=np.float64)
        if np.any(np.diff(self._times) <= 0.0):
            raise ValueError("Keyframe times must be strictly increasing.")
        self._poses = list(poses)

    @classmethod
    def from_waypoints(
        cls,
        waypoints: Sequence[Sequence[float]],
        speed_mps: float,
        start_time_s: float = 0.0,
        yaw_deg: Optional[float] = None,
    ) -> "KeyframeTrajectory":
        """Constant-speed path through waypoints.

        With ``yaw_deg`` unset each keyframe faces along its outgoing segment, so the
        heading turns smoothly over a segment. A fixed ``yaw_deg`` gives pure translation.
        """
        if len(waypoints) < 2:
            raise ValueError("A waypoint trajectory requires at least two waypoints.")
        if speed_mps <= 0.0:
            raise ValueError("speed_mps must be positive.")

        points = np.asarray(waypoints, dtype=np.float64)
        seg_vecs = np.diff(points, axis=0)
        seg_lengths = np.linalg.norm(seg_vecs, axis=1)
        if np.any(seg_lengths == 0):
            raise ValueError("Consecutive waypoints must be distinct.")

        times = start_time_s + np.concatenate([[0.0], np.cumsum(seg_lengths / speed_mps)])
        # reuse the last segment's heading for the final waypoint
        seg_dirs = np.vstack([seg_vecs, seg_vecs[-1]])
        poses: List[Pose] = []
        for point, dir_vec in zip(points, seg_dirs):
            yaw = yaw_deg if yaw_deg is not None else np.degrees(np.arctan2(dir_vec[1], dir_vec[0]))
            poses.append(Pose.from_xyz_rpy(tuple(point), (0.0, 0.0, float(yaw))))
        return cls(times, poses)

    def sample(self, t: float) -> Pose:
        if t <= self._times[0]:
            return self._poses[0]
        if t >= self._times[-1]:
            return self._poses[-1]

        idx = int(np.searchsorted(self._times, t, side="right")) - 1
        t0, t1 = self._times[idx], self._times[idx + 1]
        alpha = (t - t0) / max(t1 - t0, 1e-9)
        return self._poses[idx].interpolate(self._poses[idx + 1], float(alpha))

    def timeline(self) -> Iterable[tuple[float, Pose]]:
        for t, pose in zip(self._times, self._poses):
            yield (float(t), pose)

    def end_time(self) -> float:
        return float(self._times[-1])
