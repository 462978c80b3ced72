from typing import Dict, List, Optional, Tuple

import numpy as np
import pytest

from scancloud.core.recovery import PoseRequest, RecoveryChain
from scancloud.core.scan import LaserScan
from scancloud.motion.pose import Pose


class DummyProvider:
    def __init__(
        self,
        single: Optional[Dict[Tuple[str, str], Pose]] = None,
        interval: Optional[Dict[Tuple[str, str], List[Pose]]] = None,
    ) -> None:
        self.single = single or {}
        self.interval = interval or {}
        self.calls: list = []

    def lookup_single(self, target_frame, source_frame, time, timeout):
        self.calls.append(("single", target_frame, source_frame, time))
        return self.single.get((target_frame, source_frame))

    def lookup_interval(self, target_frame, source_frame, start_time, end_time, sample_count, timeout):
        self.calls.append(("interval", target_frame, source_frame, start_time, end_time, sample_count))
        return self.interval.get((target_frame, source_frame))


def _scan() -> LaserScan:
    return LaserScan(
        ranges=np.ones(11),
        angle_min=0.0,
        angle_increment=0.1,
        range_min=0.1,
        range_max=10.0,
        time_increment=0.01,
        stamp=2.0,
    )


def test_request_for_scan_modes() -> None:
    single = PoseRequest.for_scan(_scan(), interpolate=False)
    assert single.mode == "single"
    assert single.start_time == pytest.approx(2.05)
    interval = PoseRequest.for_scan(_scan(), interpolate=True)
    assert interval.mode == "interval"
    assert interval.start_time == pytest.approx(2.0)
    assert interval.end_time == pytest.approx(2.1)
    assert interval.sample_count == 2


def test_request_rejects_unknown_mode() -> None:
    with pytest.raises(ValueError):
        PoseRequest("burst", 0.0, 1.0, 2)  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        PoseRequest.interval(0.0, 1.0, 0)


def test_request_resolve_dispatches_by_mode() -> None:
    pose = Pose.from_xyz_rpy((1.0, 0.0, 0.0), (0.0, 0.0, 0.0))
    provider = DummyProvider(single={("odom", "laser"): pose}, interval={("odom", "laser"): [pose, pose]})
    assert PoseRequest.single(1.0).resolve(provider, "odom", "laser", 0.1) == [pose]
    assert len(PoseRequest.interval(1.0, 2.0).resolve(provider, "odom", "laser", 0.1)) == 2
    assert provider.calls == [
        ("single", "odom", "laser", 1.0),
        ("interval", "odom", "laser", 1.0, 2.0, 2),
    ]


def test_request_treats_empty_interval_as_unavailable() -> None:
    provider = DummyProvider(interval={("odom", "laser"): []})
    assert PoseRequest.interval(1.0, 2.0).resolve(provider, "odom", "laser", 0.1) is None


def test_chain_without_recovery_frame_fails() -> None:
    provider = DummyProvider()
    chain = RecoveryChain(provider, "map")
    assert not chain.enabled
    assert chain.resolve(PoseRequest.single(1.0), "laser") is None
    assert provider.calls == []


def test_chain_composes_recovery_to_target() -> None:
    map_from_odom = Pose.from_xyz_rpy((10.0, 0.0, 0.0), (0.0, 0.0, 90.0))
    odom_from_laser = [
        Pose.from_xyz_rpy((1.0, 0.0, 0.0), (0.0, 0.0, 0.0)),
        Pose.from_xyz_rpy((2.0, 0.0, 0.0), (0.0, 0.0, 10.0)),
    ]
    provider = DummyProvider(
        single={("map", "odom"): map_from_odom},
        interval={("odom", "laser"): odom_from_laser},
    )
    chain = RecoveryChain(provider, "map", recovery_frame="odom")
    poses = chain.resolve(PoseRequest.interval(0.0, 1.0), "laser")
    assert poses is not None and len(poses) == 2
    for got, leg in zip(poses, odom_from_laser):
        assert got.allclose(map_from_odom.compose(leg))
    # the recovery leg is looked up at the latest time
    assert provider.calls[0] == ("single", "map", "odom", None)


def test_chain_falls_back_to_configured_pose() -> None:
    fixed = Pose.from_xyz_rpy((0.0, 5.0, 0.0), (0.0, 0.0, 0.0))
    leg = Pose.from_xyz_rpy((1.0, 0.0, 0.0), (0.0, 0.0, 0.0))
    provider = DummyProvider(single={("odom", "laser"): leg})
    chain = RecoveryChain(provider, "map", recovery_frame="odom", recovery_to_target=fixed)
    poses = chain.resolve(PoseRequest.single(0.5), "laser")
    assert poses is not None
    np.testing.assert_allclose(poses[0].t, [1.0, 5.0, 0.0])


def test_chain_caches_last_resolved_recovery_pose() -> None:
    looked_up = Pose.from_xyz_rpy((3.0, 0.0, 0.0), (0.0, 0.0, 0.0))
    leg = Pose.identity()
    provider = DummyProvider(single={("map", "odom"): looked_up, ("odom", "laser"): leg})
    chain = RecoveryChain(provider, "map", recovery_frame="odom")
    assert chain.resolve(PoseRequest.single(0.5), "laser") is not None
    del provider.single[("map", "odom")]
    poses = chain.resolve(PoseRequest.single(0.6), "laser")
    assert poses is not None
    np.testing.assert_allclose(poses[0].t, [3.0, 0.0, 0.0])
    assert chain.recovery_to_target is looked_up


def test_chain_fails_without_any_recovery_pose() -> None:
    provider = DummyProvider(single={("odom", "laser"): Pose.identity()})
    chain = RecoveryChain(provider, "map", recovery_frame="odom")
    assert chain.resolve(PoseRequest.single(0.5), "laser") is None


def test_chain_fails_when_sensor_leg_missing() -> None:
    provider = DummyProvider(single={("map", "odom"): Pose.identity()})
    chain = RecoveryChain(provider, "map", recovery_frame="odom")
    assert chain.resolve(PoseRequest.single(0.5), "laser") is None


def test_chain_rejects_target_as_recovery_frame() -> None:
    with pytest.raises(ValueError):
        RecoveryChain(DummyProvider(), "map", recovery_frame="map")
