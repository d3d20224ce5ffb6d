"""Turn simulator telemetry into controller inputs.

Waypoints arrive in map coordinates; they are moved into the vehicle
frame (vehicle at the origin, heading along +x) and a cubic is fitted to
them.  In that frame the cross-track error is the cubic at ``x = 0`` and
the heading error is ``-atan(c1)``.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)

MPH_TO_MPS = 1609.34 / 3600.


class TelemetryError(ValueError):
    """Telemetry that cannot be turned into a controller input."""


@dataclass
class Telemetry:
    """One telemetry event from the simulator.

    Attributes:
        ptsx, ptsy: Upcoming waypoints in map coordinates.
        x, y: Vehicle position in map coordinates.
        psi: Vehicle heading (rad).
        speed: Vehicle speed (mph).
    """
    ptsx: List[float]
    ptsy: List[float]
    x: float
    y: float
    psi: float
    speed: float

    @classmethod
    def from_dict(cls, data: dict) -> "Telemetry":
        try:
            return cls(ptsx=[float(v) for v in data["ptsx"]],
                       ptsy=[float(v) for v in data["ptsy"]],
                       x=float(data["x"]),
                       y=float(data["y"]),
                       psi=float(data["psi"]),
                       speed=float(data["speed"]))
        except (KeyError, TypeError, ValueError) as e:
            raise TelemetryError(f"Malformed telemetry: {e}") from e


def mph_to_mps(speed: float) -> float:
    return speed * MPH_TO_MPS


def polyfit(xs: Sequence[float], ys: Sequence[float], order: int = 3) -> np.ndarray:
    """Least-squares polynomial fit, coefficients in ascending order."""
    xs = np.asarray(xs, dtype=float)
    ys = np.asarray(ys, dtype=float)
    if len(xs) != len(ys):
        raise TelemetryError(f"Got {len(xs)} x values but {len(ys)} y values")
    if order < 1 or order > len(xs) - 1:
        raise TelemetryError(f"Cannot fit order {order} polynomial to {len(xs)} points")
    if not (np.all(np.isfinite(xs)) and np.all(np.isfinite(ys))):
        raise TelemetryError("Waypoints contain non-finite values")
    try:
        return np.polynomial.polynomial.polyfit(xs, ys, order)
    except np.linalg.LinAlgError as e:
        raise TelemetryError(f"Polynomial fit failed: {e}") from e


def polyeval(coeffs: Sequence[float], x):
    return np.polynomial.polynomial.polyval(x, coeffs)


def to_vehicle_frame(ptsx: Sequence[float], ptsy: Sequence[float],
                     px: float, py: float, psi: float) -> Tuple[np.ndarray, np.ndarray]:
    """Translate by ``(-px, -py)`` then rotate by ``-psi``."""
    dx = np.asarray(ptsx, dtype=float) - px
    dy = np.asarray(ptsy, dtype=float) - py
    cos_psi = np.cos(-psi)
    sin_psi = np.sin(-psi)
    return dx * cos_psi - dy * sin_psi, dx * sin_psi + dy * cos_psi


def build_state(telemetry: Telemetry):
    """Controller inputs for one telemetry event.

    Returns:
        ``(state, coeffs, local_x, local_y)`` where ``state`` is
        ``[0, 0, 0, v, cte, epsi]`` and ``local_x``/``local_y`` are the
        waypoints in the vehicle frame.
    """
    local_x, local_y = to_vehicle_frame(telemetry.ptsx, telemetry.ptsy,
                                        telemetry.x, telemetry.y, telemetry.psi)
    coeffs = polyfit(local_x, local_y, 3)
    v = mph_to_mps(telemetry.speed)
    cte = float(polyeval(coeffs, 0.))
    epsi = -math.atan(coeffs[1])
    state = np.array([0., 0., 0., v, cte, epsi])
    return state, coeffs, local_x, local_y
