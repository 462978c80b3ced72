from __future__ import annotations

from dataclasses import dataclass, field

from ..motion.buffer import TransformBuffer
from ..motion.trajectory import Trajectory


@dataclass
class TrajectoryPublisher:
    """Feeds ``parent <- child`` samples of a trajectory into a transform buffer at a fixed rate.

    Mimics a pose source publishing alongside the scanner: callers advance it with
    :meth:`publish_until` before integrating data stamped up to that time.
    """

    buffer: TransformBuffer
    trajectory: Trajectory
    parent: str
    child: str
    rate_hz: float = 100.0
    start_time_s: float = 0.0
    _next_index: int = field(default=0, init=False)

    def __post_init__(self) -> None:
        if self.rate_hz <= 0.0:
            raise ValueError("rate_hz must be positive.")

    @property
    def period_s(self) -> float:
        return 1.0 / self.rate_hz

    @property
    def last_stamp(self) -> float:
        return self.start_time_s + (self._next_index - 1) * self.period_s

    def publish_until(self, t: float) -> int:
        """Publish every pending sample stamped at or before ``t``; returns how many."""
        published = 0
        while True:
            stamp = self.start_time_s + self._next_index * self.period_s
            if stamp > t + 1e-12:
                break
            self.buffer.set_transform(self.parent, self.child, self.trajectory.sample(stamp), stamp=stamp)
            self._next_index += 1
            published += 1
        return published
