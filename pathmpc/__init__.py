from pathmpc.control import (
    MPCConfig,
    DecisionLayout,
    MPCController,
    MPCResult,
    interpolate_latency,
    latency_parameters,
)
from pathmpc.telemetry import Telemetry, TelemetryError, TelemetryHandler
from pathmpc.util import setup_logging

__version__ = "0.1.0"
