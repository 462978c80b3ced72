from __future__ import annotations
from dataclasses import dataclass, replace
from typing import List, Optional

import numpy as np

from ..motion.pose import Pose, interpolate_transforms
from ..motion.provider import PoseProvider
from .projection import ProjectionCache
from .recovery import PoseRequest, RecoveryChain
from .scan import LaserScan
from .sink import PointSink
from .utils import get_logger

_log = get_logger()


@dataclass(frozen=True)
class IntegratorSettings:
    """Fixed integrator parameters.

    The cutoff offsets scale the scan's own ``range_min`` / ``range_max`` and are
    deliberately unbounded: values outside [0, 1] widen the accepted band.
    """
    target_frame: str
    min_range_cutoff_offset: float = 1.0
    max_range_cutoff_offset: float = 1.0
    interpolate_scans: bool = True
    tf_lookup_timeout_s: float = 0.2
    recovery_frame: Optional[str] = None
    recovery_to_target: Optional[Pose] = None
    projection_angle_tolerance: Optional[float] = None

    def __post_init__(self) -> None:
        if not self.target_frame:
            raise ValueError("target_frame must be a non-empty frame id.")
        if self.tf_lookup_timeout_s < 0.0:
            raise ValueError("tf_lookup_timeout_s must be non-negative.")


@dataclass
class CloudCounters:
    """Running totals for the cloud currently being assembled.

    Only :meth:`ScanIntegrator.start_new_cloud` resets ``points_in_cloud`` and
    ``scans_in_cloud`` (and bumps ``clouds_created``); the integrator itself never
    decides where a cloud ends.
    """
    clouds_created: int = 0
    points_in_cloud: int = 0
    scans_in_cloud: int = 0


class ScanIntegrator:
    """Projects laser scans into the target frame with per-beam motion compensation.

    Not reentrant: the projection cache and counters are mutated in place, so calls
    on one instance must be serialized.
    """

    def __init__(self, provider: PoseProvider, sink: PointSink, settings: IntegratorSettings) -> None:
        self.provider = provider
        self.sink = sink
        self.settings = settings
        self.projection = ProjectionCache(angle_tolerance=settings.projection_angle_tolerance)
        self.recovery = RecoveryChain(
            provider,
            settings.target_frame,
            recovery_frame=settings.recovery_frame,
            recovery_to_target=settings.recovery_to_target,
            timeout_s=settings.tf_lookup_timeout_s,
        )
        self._counters = CloudCounters()

    @property
    def counters(self) -> CloudCounters:
        return replace(self._counters)

    def start_new_cloud(self) -> CloudCounters:
        """Close the current cloud; returns the counters it finished with."""
        finished = replace(self._counters)
        self._counters.clouds_created += 1
        self._counters.points_in_cloud = 0
        self._counters.scans_in_cloud = 0
        return finished

    def _acquire_poses(self, scan: LaserScan) -> Optional[List[Pose]]:
        request = PoseRequest.for_scan(scan, self.settings.interpolate_scans)
        poses = request.resolve(
            self.provider, self.settings.target_frame, scan.frame_id, self.settings.tf_lookup_timeout_s
        )
        if poses is None:
            poses = self.recovery.resolve(request, scan.frame_id)
        return poses

    def _transform(self, local: np.ndarray, beam_indices: np.ndarray, beam_count: int, poses: List[Pose]) -> np.ndarray:
        if self.settings.interpolate_scans and len(poses) >= 2:
            fractions = beam_indices / float(max(beam_count - 1, 1))
            translations, rotations = interpolate_transforms(poses[0], poses[-1], fractions)
            return np.einsum("nij,nj->ni", rotations, local) + translations
        # a single collected pose is held constant over the whole scan
        return poses[0].apply(local)

    def integrate(self, scan: LaserScan) -> bool:
        """Integrate one scan into the sink.

        Returns ``False`` (and touches nothing) when no pose into the target frame
        could be resolved, directly or through the recovery frame.
        """
        poses = self._acquire_poses(scan)
        if poses is None:
            _log.debug(
                "Dropping scan from %s at %.6f: no transform to %s",
                scan.frame_id, scan.stamp, self.settings.target_frame,
            )
            return False

        self.projection.update(scan)

        min_cutoff = scan.range_min * self.settings.min_range_cutoff_offset
        max_cutoff = scan.range_max * self.settings.max_range_cutoff_offset

        beam_count = scan.beam_count
        self.sink.begin_scan(beam_count)

        ranges = scan.ranges
        with np.errstate(invalid="ignore"):
            in_band = (ranges > min_cutoff) & (ranges < max_cutoff)
        beam_indices = np.flatnonzero(in_band)

        with np.errstate(over="ignore", invalid="ignore"):
            local = self.projection.project(ranges)[beam_indices]
            points = self._transform(local, beam_indices, beam_count, poses)
        finite = np.all(np.isfinite(points), axis=1)
        intensities = scan.beam_intensities()[beam_indices]

        emitted = 0
        for point, intensity in zip(points[finite], intensities[finite]):
            self.sink.add_point(point, float(intensity))
            emitted += 1
        self._counters.points_in_cloud += emitted

        self.sink.end_scan()
        self._counters.scans_in_cloud += 1
        return True
