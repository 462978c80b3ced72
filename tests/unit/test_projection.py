import numpy as np
import pytest

from scancloud.core.projection import ProjectionCache
from scancloud.core.scan import LaserScan


def _scan(n: int, angle_min: float = 0.0, angle_increment: float = np.pi / 2) -> LaserScan:
    return LaserScan(
        ranges=np.full(n, 5.0),
        angle_min=angle_min,
        angle_increment=angle_increment,
        range_min=0.1,
        range_max=10.0,
    )


def test_rebuilds_only_when_beam_count_changes() -> None:
    cache = ProjectionCache()
    assert cache.update(_scan(3)) is True
    assert cache.update(_scan(3)) is False
    assert cache.update(_scan(3)) is False
    assert cache.update(_scan(4)) is True
    assert cache.beam_count == 4
    assert cache.rebuilds == 2


def test_same_beam_count_keeps_stale_angles_by_default() -> None:
    cache = ProjectionCache()
    cache.update(_scan(3, angle_min=0.0))
    assert cache.update(_scan(3, angle_min=1.0)) is False
    np.testing.assert_allclose(cache.factors[0], [1.0, 0.0])


def test_angle_tolerance_detects_changed_geometry() -> None:
    cache = ProjectionCache(angle_tolerance=1e-6)
    cache.update(_scan(3, angle_min=0.0))
    assert cache.update(_scan(3, angle_min=1e-9)) is False
    assert cache.update(_scan(3, angle_min=1.0)) is True
    np.testing.assert_allclose(cache.factors[0], [np.cos(1.0), np.sin(1.0)])


def test_projects_example_scan() -> None:
    scan = _scan(3)
    cache = ProjectionCache()
    cache.update(scan)
    pts = cache.project(scan.ranges)
    np.testing.assert_allclose(pts, [[5.0, 0.0, 0.0], [0.0, 5.0, 0.0], [-5.0, 0.0, 0.0]], atol=1e-12)


def test_projection_matches_polar_formula() -> None:
    scan = _scan(7, angle_min=-0.8, angle_increment=0.27)
    scan.ranges = np.linspace(1.0, 4.0, 7)
    cache = ProjectionCache()
    cache.update(scan)
    theta = -0.8 + np.arange(7) * 0.27
    expected = np.column_stack([scan.ranges * np.cos(theta), scan.ranges * np.sin(theta), np.zeros(7)])
    np.testing.assert_allclose(cache.project(scan.ranges), expected, atol=1e-12)


def test_project_rejects_mismatched_ranges() -> None:
    cache = ProjectionCache()
    cache.update(_scan(3))
    with pytest.raises(ValueError):
        cache.project(np.ones(4))


def test_factors_are_read_only() -> None:
    cache = ProjectionCache()
    cache.update(_scan(2))
    with pytest.raises(ValueError):
        cache.factors[0, 0] = 3.0


def test_scan_timing_and_intensity_padding() -> None:
    scan = LaserScan(
        ranges=[1.0, 2.0, 3.0, 4.0],
        intensities=[7.0, 8.0],
        angle_min=0.0,
        angle_increment=0.1,
        range_min=0.1,
        range_max=10.0,
        time_increment=0.01,
        stamp=5.0,
    )
    assert scan.beam_count == 4
    assert scan.duration_s == pytest.approx(0.03)
    assert scan.end_time == pytest.approx(5.03)
    assert scan.middle_time == pytest.approx(5.015)
    assert scan.angle_max == pytest.approx(0.3)
    np.testing.assert_allclose(scan.beam_intensities(), [7.0, 8.0, 0.0, 0.0])
    np.testing.assert_allclose(scan.beam_times(), [5.0, 5.01, 5.02, 5.03])


def test_empty_scan_has_zero_duration() -> None:
    scan = LaserScan(ranges=[], angle_min=0.0, angle_increment=0.1, range_min=0.1, range_max=10.0, time_increment=0.01, stamp=2.0)
    assert scan.beam_count == 0
    assert scan.duration_s == 0.0
    assert scan.middle_time == 2.0
    assert scan.beam_intensities().shape == (0,)


def test_scan_rejects_negative_time_increment() -> None:
    with pytest.raises(ValueError):
        LaserScan(ranges=[1.0], angle_min=0.0, angle_increment=0.1, range_min=0.1, range_max=10.0, time_increment=-0.1)
