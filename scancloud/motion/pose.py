from __future__ import annotations
from dataclasses import dataclass
import numpy as np

from .quaternion import quat_conjugate, quat_from_rpy, quat_multiply, quat_normalize, quat_slerp, quat_to_matrix


@dataclass
class Pose:
    """Rigid transform taking points from a child frame into its parent frame."""
    t: np.ndarray   # (3,)
    q: np.ndarray   # (4,) x, y, z, w

    def __post_init__(self) -> None:
        self.t = np.asarray(self.t, dtype=np.float64).reshape(3)
        q = np.asarray(self.q, dtype=np.float64).reshape(4)
        if np.linalg.norm(q) < 1e-12:
            raise ValueError("Pose rotation quaternion must have non-zero norm.")
        self.q = quat_normalize(q)

    @staticmethod
    def identity() -> "Pose":
        return Pose(t=np.zeros(3), q=np.array([0.0, 0.0, 0.0, 1.0]))

    @staticmethod
    def from_xyz_rpy(xyz: tuple[float,float,float], rpy_deg: tuple[float,float,float]) -> "Pose":
        rx, ry, rz = np.deg2rad(rpy_deg)
        return Pose(t=np.array(xyz, dtype=float), q=quat_from_rpy(rx, ry, rz))

    @property
    def R(self) -> np.ndarray:
        return quat_to_matrix(self.q)

    def apply(self, p_child: np.ndarray) -> np.ndarray:
        return (self.R @ np.asarray(p_child, dtype=np.float64).T).T + self.t

    def compose(self, other: "Pose") -> "Pose":
        """Chain two transforms: ``other`` is applied first, then ``self``."""
        return Pose(t=self.t + self.R @ other.t, q=quat_multiply(self.q, other.q))

    def __mul__(self, other: "Pose") -> "Pose":
        return self.compose(other)

    def inverse(self) -> "Pose":
        q_inv = quat_conjugate(self.q)
        return Pose(t=-(quat_to_matrix(q_inv) @ self.t), q=q_inv)

    def interpolate(self, other: "Pose", fraction: float) -> "Pose":
        t = (1.0 - fraction) * self.t + fraction * other.t
        return Pose(t=t, q=quat_slerp(self.q, other.q, fraction))

    def allclose(self, other: "Pose", atol: float = 1e-9) -> bool:
        # q and -q encode the same rotation
        same_rot = np.allclose(self.q, other.q, atol=atol) or np.allclose(self.q, -other.q, atol=atol)
        return bool(np.allclose(self.t, other.t, atol=atol) and same_rot)


def interpolate_transforms(start: Pose, end: Pose, fractions: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Per-fraction translations (N, 3) and rotation matrices (N, 3, 3).

    Translation is blended linearly, rotation with shortest-path slerp.
    """
    f = np.asarray(fractions, dtype=np.float64).reshape(-1)
    translations = (1.0 - f)[:, None] * start.t + f[:, None] * end.t
    rotations = quat_to_matrix(quat_slerp(start.q, end.q, f))
    return translations, rotations
