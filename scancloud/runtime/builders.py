from __future__ import annotations

from typing import Optional

import numpy as np

from ..config import ScenarioConfig
from ..core.integrator import IntegratorSettings, ScanIntegrator
from ..core.sink import PointSink
from ..examples.synthetic import RectangularRoom, SyntheticScanner
from ..motion.buffer import TransformBuffer
from ..motion.pose import Pose
from ..motion.provider import PoseProvider
from ..motion.trajectory import KeyframeTrajectory, StaticTrajectory, Trajectory


def build_trajectory(cfg: ScenarioConfig) -> Trajectory:
    traj_cfg = cfg.trajectory
    if traj_cfg.kind == "static":
        pose = Pose.from_xyz_rpy(traj_cfg.xyz, traj_cfg.rpy_deg)
        return StaticTrajectory(pose, start_time_s=traj_cfg.start_time_s)
    if traj_cfg.kind == "waypoints":
        return KeyframeTrajectory.from_waypoints(
            traj_cfg.waypoints,
            speed_mps=traj_cfg.speed_mps,
            start_time_s=traj_cfg.start_time_s,
            yaw_deg=traj_cfg.yaw_deg,
        )
    raise ValueError(f"Unsupported trajectory kind: {traj_cfg.kind}")


def build_mount(cfg: ScenarioConfig) -> Pose:
    return Pose.from_xyz_rpy(cfg.mount.xyz, cfg.mount.rpy_deg)


def build_scanner(cfg: ScenarioConfig, trajectory: Trajectory) -> SyntheticScanner:
    sc = cfg.scanner
    room = RectangularRoom(cfg.room.width_m, cfg.room.depth_m, center_xy=cfg.room.center_xy)
    return SyntheticScanner(
        room=room,
        trajectory=trajectory,
        mount=build_mount(cfg),
        beam_count=sc.beam_count,
        angle_min=float(np.deg2rad(sc.angle_min_deg)),
        angle_max=float(np.deg2rad(sc.angle_max_deg)),
        range_min=sc.range_min_m,
        range_max=sc.range_max_m,
        scan_period_s=1.0 / sc.scan_rate_hz,
        time_increment_s=sc.time_increment_s,
        sigma_range_m=sc.sigma_range_m,
        frame_id=cfg.frames.sensor,
    )


def build_transform_buffer(cfg: ScenarioConfig) -> TransformBuffer:
    """Buffer pre-loaded with the static ``base <- sensor`` mount."""
    buffer = TransformBuffer(cache_time_s=cfg.transforms.cache_time_s)
    buffer.set_static_transform(cfg.frames.base, cfg.frames.sensor, build_mount(cfg))
    return buffer


def build_settings(cfg: ScenarioConfig) -> IntegratorSettings:
    icfg = cfg.integrator
    recovery_frame: Optional[str] = None
    recovery_pose: Optional[Pose] = None
    if icfg.recovery is not None:
        recovery_frame = icfg.recovery.frame
        recovery_pose = Pose.from_xyz_rpy(icfg.recovery.xyz, icfg.recovery.rpy_deg)
    return IntegratorSettings(
        target_frame=icfg.target_frame,
        min_range_cutoff_offset=icfg.min_range_cutoff_offset,
        max_range_cutoff_offset=icfg.max_range_cutoff_offset,
        interpolate_scans=icfg.interpolate_scans,
        tf_lookup_timeout_s=icfg.tf_lookup_timeout_s,
        recovery_frame=recovery_frame,
        recovery_to_target=recovery_pose,
        projection_angle_tolerance=icfg.projection_angle_tolerance,
    )


def build_integrator(cfg: ScenarioConfig, provider: PoseProvider, sink: PointSink) -> ScanIntegrator:
    return ScanIntegrator(provider, sink, build_settings(cfg))
