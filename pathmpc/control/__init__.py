from pathmpc.control.config import MPCConfig, DecisionLayout
from pathmpc.control.mpc import (
    MPCController,
    MPCResult,
    interpolate_latency,
    latency_parameters,
    trajectory_curvature,
)
from pathmpc.control import dynamics, reference_speed
