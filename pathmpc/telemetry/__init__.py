from pathmpc.telemetry.processing import (
    Telemetry,
    TelemetryError,
    build_state,
    mph_to_mps,
    polyeval,
    polyfit,
    to_vehicle_frame,
)
from pathmpc.telemetry.handler import TelemetryHandler
from pathmpc.telemetry import messages
