from __future__ import annotations
from dataclasses import dataclass, field
import numpy as np
from typing import Dict, Sequence

@dataclass
class PointBatch:
    """A batch of point data with arbitrary per-point attributes."""
    xyz: np.ndarray                       # (N, 3)
    attrs: Dict[str, np.ndarray] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.xyz = np.asarray(self.xyz).reshape(-1, 3).astype(np.float32, copy=False)
        # Attributes are 1D or 2D with matching length
        n = len(self.xyz)
        for k, v in list(self.attrs.items()):
            v = np.asarray(v)
            if v.ndim >= 1 and v.shape[0] != n:
                raise ValueError(f"Attribute '{k}' length {v.shape[0]} != {n}")
            self.attrs[k] = v

    def __len__(self) -> int:
        return int(self.xyz.shape[0])

    @staticmethod
    def empty() -> "PointBatch":
        return PointBatch(
            xyz=np.zeros((0, 3), dtype=np.float32),
            attrs={
                "intensity": np.zeros((0,), dtype=np.float32),
                "scan_index": np.zeros((0,), dtype=np.uint32),
            },
        )

    @staticmethod
    def concatenate(batches: Sequence["PointBatch"]) -> "PointBatch":
        if not batches:
            return PointBatch.empty()
        keys = set(batches[0].attrs)
        for b in batches[1:]:
            if set(b.attrs) != keys:
                raise ValueError("Cannot concatenate batches with different attributes.")
        xyz = np.vstack([b.xyz for b in batches])
        attrs = {k: np.concatenate([b.attrs[k] for b in batches], axis=0) for k in sorted(keys)}
        return PointBatch(xyz=xyz, attrs=attrs)
