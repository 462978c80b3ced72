"""scancloud: planar laser scans to motion-compensated 3D point clouds.

Components:
- LaserScan (core.scan)
- ProjectionCache (core.projection)
- PoseRequest & RecoveryChain (core.recovery)
- ScanIntegrator, IntegratorSettings, CloudCounters (core.integrator)
- PointSink protocol & PointCloudBuilder (core.sink)
- Pose, TransformBuffer and trajectories (motion)
"""

from .core.scan import LaserScan
from .core.projection import ProjectionCache
from .core.pointcloud import PointBatch
from .core.recovery import PoseRequest, RecoveryChain
from .core.integrator import CloudCounters, IntegratorSettings, ScanIntegrator
from .core.sink import PointCloudBuilder, PointSink
from .motion.pose import Pose
from .motion.provider import PoseProvider
from .motion.buffer import TransformBuffer
from .motion.trajectory import KeyframeTrajectory, StaticTrajectory, Trajectory
