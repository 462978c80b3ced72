from __future__ import annotations

from dataclasses import dataclass
from typing import List, Literal, Optional

from ..motion.pose import Pose
from ..motion.provider import PoseProvider
from .scan import LaserScan
from .utils import get_logger

_log = get_logger()

RequestMode = Literal["single", "interval"]


@dataclass(frozen=True)
class PoseRequest:
    """What to ask a :class:`PoseProvider` for, independent of the frame pair.

    ``single`` asks for one pose at ``start_time``; ``interval`` asks for
    ``sample_count`` poses spanning ``[start_time, end_time]``.
    """

    mode: RequestMode
    start_time: float
    end_time: float
    sample_count: int = 1

    def __post_init__(self) -> None:
        if self.mode not in ("single", "interval"):
            raise ValueError(f"Unknown request mode '{self.mode}'")
        if self.sample_count < 1:
            raise ValueError("sample_count must be at least 1.")

    @classmethod
    def single(cls, time: float) -> "PoseRequest":
        return cls("single", float(time), float(time), 1)

    @classmethod
    def interval(cls, start_time: float, end_time: float, sample_count: int = 2) -> "PoseRequest":
        return cls("interval", float(start_time), float(end_time), int(sample_count))

    @classmethod
    def for_scan(cls, scan: LaserScan, interpolate: bool) -> "PoseRequest":
        if interpolate:
            return cls.interval(scan.stamp, scan.end_time, 2)
        return cls.single(scan.middle_time)

    def resolve(
        self, provider: PoseProvider, target_frame: str, source_frame: str, timeout: float
    ) -> Optional[List[Pose]]:
        if self.mode == "single":
            pose = provider.lookup_single(target_frame, source_frame, self.start_time, timeout)
            return None if pose is None else [pose]
        poses = provider.lookup_interval(
            target_frame, source_frame, self.start_time, self.end_time, self.sample_count, timeout
        )
        if not poses:
            return None
        return list(poses)


class RecoveryChain:
    """Resolve ``target <- sensor`` through one intermediate recovery frame.

    Used when the direct relation is unavailable (for example a localization frame
    that stopped publishing). The ``target <- recovery`` pose is looked up at the
    latest time on every attempt; the last pose obtained, seeded with the
    caller-supplied one, is reused when that lookup fails.
    """

    def __init__(
        self,
        provider: PoseProvider,
        target_frame: str,
        recovery_frame: Optional[str] = None,
        recovery_to_target: Optional[Pose] = None,
        timeout_s: float = 0.0,
    ) -> None:
        if recovery_frame is not None and recovery_frame == target_frame:
            raise ValueError("recovery_frame must differ from target_frame.")
        self.provider = provider
        self.target_frame = target_frame
        self.recovery_frame = recovery_frame or None
        self.timeout_s = float(timeout_s)
        self._recovery_to_target = recovery_to_target

    @property
    def enabled(self) -> bool:
        return self.recovery_frame is not None

    @property
    def recovery_to_target(self) -> Optional[Pose]:
        return self._recovery_to_target

    def _resolve_recovery_to_target(self) -> Optional[Pose]:
        """Latest ``target <- recovery`` pose; refreshes the cache even if the scan is later rejected."""
        assert self.recovery_frame is not None
        pose = self.provider.lookup_single(self.target_frame, self.recovery_frame, None, self.timeout_s)
        if pose is not None:
            self._recovery_to_target = pose
        return self._recovery_to_target

    def resolve(self, request: PoseRequest, source_frame: str) -> Optional[List[Pose]]:
        """Poses for ``request`` expressed in the target frame, or ``None``."""
        if self.recovery_frame is None:
            return None
        recovery_to_target = self._resolve_recovery_to_target()
        if recovery_to_target is None:
            return None
        poses = request.resolve(self.provider, self.recovery_frame, source_frame, self.timeout_s)
        if poses is None:
            return None
        _log.warning(
            "Recovering from lack of transform between %s and %s using %s as recovery frame",
            source_frame, self.target_frame, self.recovery_frame,
        )
        return [recovery_to_target.compose(p) for p in poses]
