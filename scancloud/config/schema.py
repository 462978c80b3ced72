from __future__ import annotations

from pathlib import Path
from typing import Annotated, List, Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field, model_validator


class RecoveryConfig(BaseModel):
    frame: str
    xyz: tuple[float, float, float] = (0.0, 0.0, 0.0)
    rpy_deg: tuple[float, float, float] = (0.0, 0.0, 0.0)


class IntegratorConfig(BaseModel):
    target_frame: str = "odom"
    # multipliers on the scan's range_min / range_max, intentionally unbounded
    min_range_cutoff_offset: float = 1.0
    max_range_cutoff_offset: float = 1.0
    interpolate_scans: bool = True
    tf_lookup_timeout_s: float = Field(0.0, ge=0.0)
    recovery: Optional[RecoveryConfig] = None
    projection_angle_tolerance: Optional[float] = Field(None, ge=0.0)

    @model_validator(mode="after")
    def _validate_recovery(self) -> "IntegratorConfig":
        if self.recovery is not None and self.recovery.frame == self.target_frame:
            raise ValueError("recovery frame must differ from target_frame")
        return self


class FramesConfig(BaseModel):
    fixed: str = "odom"
    base: str = "base_link"
    sensor: str = "laser"

    @model_validator(mode="after")
    def _distinct(self) -> "FramesConfig":
        if len({self.fixed, self.base, self.sensor}) != 3:
            raise ValueError("fixed, base and sensor frames must be distinct")
        return self


class StaticTrajectoryConfig(BaseModel):
    kind: Literal["static"]
    xyz: tuple[float, float, float] = (0.0, 0.0, 0.0)
    rpy_deg: tuple[float, float, float] = (0.0, 0.0, 0.0)
    start_time_s: float = 0.0


class WaypointTrajectoryConfig(BaseModel):
    kind: Literal["waypoints"]
    waypoints: List[tuple[float, float, float]]
    speed_mps: float = Field(gt=0.0)
    yaw_deg: Optional[float] = None
    start_time_s: float = 0.0

    @model_validator(mode="after")
    def _enough_points(self) -> "WaypointTrajectoryConfig":
        if len(self.waypoints) < 2:
            raise ValueError("waypoint trajectory requires at least two waypoints")
        return self


TrajectoryConfig = Annotated[
    Union[StaticTrajectoryConfig, WaypointTrajectoryConfig],
    Field(discriminator="kind"),
]


class MountConfig(BaseModel):
    xyz: tuple[float, float, float] = (0.0, 0.0, 0.0)
    rpy_deg: tuple[float, float, float] = (0.0, 0.0, 0.0)


class ScannerConfig(BaseModel):
    beam_count: int = Field(360, gt=0)
    angle_min_deg: float = -180.0
    angle_max_deg: float = 180.0
    range_min_m: float = Field(0.1, ge=0.0)
    range_max_m: float = Field(30.0, gt=0.0)
    scan_rate_hz: float = Field(10.0, gt=0.0)
    time_increment_s: Optional[float] = Field(None, ge=0.0)
    num_scans: int = Field(10, ge=0)
    start_time_s: Optional[float] = None
    sigma_range_m: float = Field(0.0, ge=0.0)

    @model_validator(mode="after")
    def _validate_ranges(self) -> "ScannerConfig":
        if self.range_max_m <= self.range_min_m:
            raise ValueError("range_max_m must be greater than range_min_m")
        return self


class RoomConfig(BaseModel):
    width_m: float = Field(10.0, gt=0.0)
    depth_m: float = Field(6.0, gt=0.0)
    center_xy: tuple[float, float] = (0.0, 0.0)


class TransformsConfig(BaseModel):
    publish_rate_hz: float = Field(100.0, gt=0.0)
    cache_time_s: float = Field(10.0, gt=0.0)


class CloudConfig(BaseModel):
    scans_per_cloud: Optional[int] = Field(None, ge=1)


class ScenarioConfig(BaseModel):
    integrator: IntegratorConfig = IntegratorConfig()
    frames: FramesConfig = FramesConfig()
    trajectory: TrajectoryConfig
    mount: MountConfig = MountConfig()
    scanner: ScannerConfig = ScannerConfig()
    room: RoomConfig = RoomConfig()
    transforms: TransformsConfig = TransformsConfig()
    cloud: CloudConfig = CloudConfig()
    seed: Optional[int] = None


def load_config(path: str | Path) -> ScenarioConfig:
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError("Configuration root must be a mapping.")
    return ScenarioConfig.model_validate(data)
