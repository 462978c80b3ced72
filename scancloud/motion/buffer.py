from __future__ import annotations

import bisect
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..core.utils import get_logger
from .pose import Pose

_log = get_logger()

_STAMP_EPS = 1e-9


@dataclass
class _Edge:
    parent: str
    static: bool = False
    stamps: List[float] = field(default_factory=list)
    poses: List[Pose] = field(default_factory=list)


class TransformBuffer:
    """Thread-safe tree of time-stamped frame transforms.

    Every child frame has exactly one parent and either a single static pose or a
    time-ordered history of ``parent <- child`` poses. Lookups walk both frames up
    to their common ancestor, interpolate each edge at the requested time and
    compose the result. Dynamic edges are never extrapolated: a time outside an
    edge's history makes the relation unavailable.

    Lookups block on a condition variable for up to ``timeout`` seconds, so a
    producer thread calling :meth:`set_transform` can satisfy a waiting consumer.
    """

    def __init__(self, cache_time_s: float = 10.0) -> None:
        if cache_time_s <= 0.0:
            raise ValueError("cache_time_s must be positive.")
        self.cache_time_s = float(cache_time_s)
        self._edges: Dict[str, _Edge] = {}
        self._cond = threading.Condition()

    # -- producer API --
    def set_transform(
        self,
        parent: str,
        child: str,
        pose: Pose,
        stamp: Optional[float] = None,
        static: bool = False,
    ) -> None:
        if parent == child:
            raise ValueError(f"Frame '{child}' cannot be its own parent.")
        if not static and stamp is None:
            raise ValueError("Dynamic transforms require a stamp.")
        with self._cond:
            if child in self._chain(parent):
                raise ValueError(f"Adding {parent} -> {child} would create a cycle.")
            edge = self._edges.get(child)
            if edge is None or edge.parent != parent or edge.static != static:
                if edge is not None:
                    _log.debug("Re-parenting frame %s from %s to %s", child, edge.parent, parent)
                edge = _Edge(parent=parent, static=static)
                self._edges[child] = edge

            if static:
                edge.stamps = [0.0]
                edge.poses = [pose]
            else:
                idx = bisect.bisect_right(edge.stamps, float(stamp))
                edge.stamps.insert(idx, float(stamp))
                edge.poses.insert(idx, pose)
                self._prune(edge)
            self._cond.notify_all()

    def set_static_transform(self, parent: str, child: str, pose: Pose) -> None:
        self.set_transform(parent, child, pose, static=True)

    def clear(self) -> None:
        with self._cond:
            self._edges.clear()

    # -- queries --
    def frames(self) -> List[str]:
        with self._cond:
            names = set(self._edges)
            names.update(edge.parent for edge in self._edges.values())
        return sorted(names)

    def can_transform(self, target_frame: str, source_frame: str, time: Optional[float] = None) -> bool:
        with self._cond:
            return self._resolve(target_frame, source_frame, time) is not None

    def lookup_single(
        self, target_frame: str, source_frame: str, time: Optional[float], timeout: float
    ) -> Optional[Pose]:
        poses = self._wait_for(target_frame, source_frame, [time], timeout)
        return None if poses is None else poses[0]

    def lookup_interval(
        self,
        target_frame: str,
        source_frame: str,
        start_time: float,
        end_time: float,
        sample_count: int,
        timeout: float,
    ) -> Optional[List[Pose]]:
        if sample_count < 2 or end_time <= start_time:
            times: List[Optional[float]] = [float(start_time)]
        else:
            times = [float(t) for t in np.linspace(start_time, end_time, sample_count)]
        return self._wait_for(target_frame, source_frame, times, timeout)

    # -- internals --
    def _wait_for(
        self,
        target_frame: str,
        source_frame: str,
        times: Sequence[Optional[float]],
        timeout: float,
    ) -> Optional[List[Pose]]:
        resolved: List[Pose] = []

        def ready() -> bool:
            resolved.clear()
            for t in times:
                pose = self._resolve(target_frame, source_frame, t)
                if pose is None:
                    return False
                resolved.append(pose)
            return True

        with self._cond:
            if not self._cond.wait_for(ready, timeout=max(float(timeout), 0.0)):
                _log.debug("No transform %s <- %s within %.3fs", target_frame, source_frame, timeout)
                return None
        return list(resolved)

    def _chain(self, frame: str) -> List[str]:
        chain = [frame]
        while chain[-1] in self._edges:
            chain.append(self._edges[chain[-1]].parent)
        return chain

    def _resolve(self, target_frame: str, source_frame: str, time: Optional[float]) -> Optional[Pose]:
        if target_frame == source_frame:
            return Pose.identity()
        source_chain = self._chain(source_frame)
        target_chain = self._chain(target_frame)
        target_set = set(target_chain)
        common = next((f for f in source_chain if f in target_set), None)
        if common is None:
            return None

        ancestor_from_source = self._accumulate(source_chain, common, time)
        ancestor_from_target = self._accumulate(target_chain, common, time)
        if ancestor_from_source is None or ancestor_from_target is None:
            return None
        return ancestor_from_target.inverse().compose(ancestor_from_source)

    def _accumulate(self, chain: List[str], stop: str, time: Optional[float]) -> Optional[Pose]:
        pose = Pose.identity()
        for frame in chain:
            if frame == stop:
                break
            edge_pose = self._edge_pose(self._edges[frame], time)
            if edge_pose is None:
                return None
            pose = edge_pose.compose(pose)
        return pose

    @staticmethod
    def _edge_pose(edge: _Edge, time: Optional[float]) -> Optional[Pose]:
        if not edge.poses:
            return None
        if edge.static or time is None:
            return edge.poses[-1]
        stamps = edge.stamps
        if time < stamps[0] - _STAMP_EPS or time > stamps[-1] + _STAMP_EPS:
            return None
        idx = bisect.bisect_left(stamps, time)
        if idx == 0:
            return edge.poses[0]
        if idx >= len(stamps):
            return edge.poses[-1]
        t0, t1 = stamps[idx - 1], stamps[idx]
        if t1 - t0 <= _STAMP_EPS:
            return edge.poses[idx]
        alpha = (time - t0) / (t1 - t0)
        return edge.poses[idx - 1].interpolate(edge.poses[idx], alpha)

    def _prune(self, edge: _Edge) -> None:
        oldest = edge.stamps[-1] - self.cache_time_s
        cut = bisect.bisect_left(edge.stamps, oldest)
        if cut > 0:
            del edge.stamps[:cut]
            del edge.poses[:cut]
