from __future__ import annotations
from typing import List, Optional, Protocol

from .pose import Pose


class PoseProvider(Protocol):
    """Source of ``target_frame <- source_frame`` transforms.

    Both lookups return ``None`` when the relation cannot be resolved within
    ``timeout`` seconds. A ``time`` of ``None`` asks for the latest known pose.
    """

    def lookup_single(
        self, target_frame: str, source_frame: str, time: Optional[float], timeout: float
    ) -> Optional[Pose]: ...

    def lookup_interval(
        self,
        target_frame: str,
        source_frame: str,
        start_time: float,
        end_time: float,
        sample_count: int,
        timeout: float,
    ) -> Optional[List[Pose]]: ...
