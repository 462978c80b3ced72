from __future__ import annotations
from typing import List, Protocol

import numpy as np

from .pointcloud import PointBatch


class PointSink(Protocol):
    """Receiver of integrated points. Storage and cloud boundaries are its own business."""

    def begin_scan(self, expected_point_count: int) -> None: ...

    def add_point(self, point: np.ndarray, intensity: float) -> None: ...

    def end_scan(self) -> None: ...


class PointCloudBuilder:
    """Point sink that accumulates scans into one :class:`PointBatch` per cloud.

    Each ``end_scan`` freezes the scan's points into a batch tagged with a
    ``scan_index`` attribute; :meth:`finish_cloud` hands back everything collected
    since the previous call and starts over.
    """

    def __init__(self) -> None:
        self._points: List[np.ndarray] = []
        self._intensities: List[float] = []
        self._batches: List[PointBatch] = []
        self._scan_index = 0
        self._in_scan = False

    @property
    def num_points(self) -> int:
        return sum(len(b) for b in self._batches) + len(self._points)

    @property
    def num_scans(self) -> int:
        return self._scan_index

    def begin_scan(self, expected_point_count: int) -> None:
        if self._in_scan:
            raise RuntimeError("begin_scan called twice without end_scan")
        self._in_scan = True
        self._points = []
        self._intensities = []

    def add_point(self, point: np.ndarray, intensity: float) -> None:
        if not self._in_scan:
            raise RuntimeError("add_point called outside of a scan")
        self._points.append(np.asarray(point, dtype=np.float64).reshape(3))
        self._intensities.append(float(intensity))

    def end_scan(self) -> None:
        if not self._in_scan:
            raise RuntimeError("end_scan called without begin_scan")
        if self._points:
            n = len(self._points)
            self._batches.append(
                PointBatch(
                    xyz=np.vstack(self._points),
                    attrs={
                        "intensity": np.asarray(self._intensities, dtype=np.float32),
                        "scan_index": np.full(n, self._scan_index, dtype=np.uint32),
                    },
                )
            )
        self._points = []
        self._intensities = []
        self._scan_index += 1
        self._in_scan = False

    def finish_cloud(self) -> PointBatch:
        cloud = PointBatch.concatenate(self._batches)
        self._batches = []
        self._scan_index = 0
        return cloud
