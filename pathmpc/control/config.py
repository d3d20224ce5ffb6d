"""Controller configuration and decision-vector layout.

:class:`MPCConfig` holds every constant a controller needs (horizon,
timestep, vehicle length, actuator limits, cost weights and the
reference-speed mapping).  It is immutable so that one instance can be
shared by the dynamics model, the cost builder and the extractor.

:class:`DecisionLayout` fixes where each block of predicted states and
controls lives inside the flat decision vector::

    [ x(N) | y(N) | psi(N) | v(N) | cte(N) | epsi(N) | delta(N-1) | a(N-1) ]
"""

import json
import logging
import math
from dataclasses import dataclass, fields, asdict
from typing import Dict, Optional

logger = logging.getLogger(__name__)

N_STATES = 6
N_CONTROLS = 2


@dataclass(frozen=True)
class MPCConfig:
    """Immutable controller parameters.

    Args:
        horizon: Number of predicted states N.
        dt: Prediction timestep (s).
        lf: Effective distance from front axle to centre of gravity (m).
            Tuned so that the bicycle model reproduces the turning radius
            of the simulated vehicle.
        latency: Delay between measuring the state and the command taking
            effect (s).
        steer_limit_deg: Steering magnitude limit (deg).
        accel_min: Lower acceleration/throttle limit.
        accel_max: Upper acceleration/throttle limit.
        state_bound: Magnitude used as "unbounded" for state variables.
        time_budget: Solver CPU time budget per solve (s).
        w_cte: Weight on squared cross-track error.
        w_epsi: Weight on squared heading error.
        w_v: Weight on squared deviation from the target speed.
        w_steer: Weight on squared steering.
        w_accel: Weight on squared acceleration.
        w_steer_rate: Weight on squared change of steering between steps.
        w_accel_rate: Weight on squared change of acceleration between steps.
        v_min: Target speed on very curvy paths.
        v_max: Target speed on straight paths.
        curvature_steepness: Slope of the curvature-to-speed sigmoid.
        curvature_midpoint: Mean squared curvature at which the target
            speed is halfway between ``v_min`` and ``v_max``.
        curvature_samples: Number of Riemann samples over the path domain.
    """

    horizon: int = 40
    dt: float = 0.05
    lf: float = 2.67
    latency: float = 0.1
    steer_limit_deg: float = 25.0
    accel_min: float = -1.0
    accel_max: float = 1.0
    state_bound: float = 1.0e19
    time_budget: float = 0.5

    w_cte: float = 1.0
    w_epsi: float = 1.0
    w_v: float = 0.1
    w_steer: float = 100.0
    w_accel: float = 5.0
    w_steer_rate: float = 5.0e6
    w_accel_rate: float = 0.0

    v_min: float = 20.0
    v_max: float = 50.0
    curvature_steepness: float = 5.0e4
    curvature_midpoint: float = 1.2e-4
    curvature_samples: int = 1000

    def __post_init__(self):
        if self.horizon < 3:
            raise ValueError(f"horizon must be at least 3, got {self.horizon}")
        if self.dt <= 0:
            raise ValueError(f"dt must be positive, got {self.dt}")
        if self.lf <= 0:
            raise ValueError(f"lf must be positive, got {self.lf}")
        if self.latency < 0:
            raise ValueError(f"latency must be non-negative, got {self.latency}")
        if self.time_budget <= 0:
            raise ValueError(f"time_budget must be positive, got {self.time_budget}")
        if self.accel_min > self.accel_max:
            raise ValueError(f"accel_min ({self.accel_min}) exceeds accel_max ({self.accel_max})")
        if self.steer_limit_deg < 0:
            raise ValueError(f"steer_limit_deg must be non-negative, got {self.steer_limit_deg}")
        if self.v_min > self.v_max:
            raise ValueError(f"v_min ({self.v_min}) exceeds v_max ({self.v_max})")
        if self.curvature_samples < 1:
            raise ValueError("curvature_samples must be at least 1")

    @property
    def steer_limit(self) -> float:
        """Steering limit in radians."""
        return math.radians(self.steer_limit_deg)

    @property
    def layout(self) -> "DecisionLayout":
        return DecisionLayout(self.horizon)

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_params(cls, params: Optional[Dict] = None) -> "MPCConfig":
        """Overlay ``params`` on the defaults.

        Raises:
            ValueError: if ``params`` contains an unknown key.
        """
        params = dict(params or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(params) - known)
        if unknown:
            raise ValueError(f"Unknown controller parameters: {', '.join(unknown)}")
        return cls(**params)

    @classmethod
    def from_json(cls, path: str) -> "MPCConfig":
        try:
            with open(path, "r") as f:
                params = json.load(f)
        except FileNotFoundError as e:
            logger.exception(msg="No controller configuration file was found", exc_info=e)
            raise e
        return cls.from_params(params)


@dataclass(frozen=True)
class DecisionLayout:
    """Offsets of each block in the flat decision vector of horizon ``horizon``."""

    horizon: int

    @property
    def x_start(self) -> int:
        return 0

    @property
    def y_start(self) -> int:
        return self.x_start + self.horizon

    @property
    def psi_start(self) -> int:
        return self.y_start + self.horizon

    @property
    def v_start(self) -> int:
        return self.psi_start + self.horizon

    @property
    def cte_start(self) -> int:
        return self.v_start + self.horizon

    @property
    def epsi_start(self) -> int:
        return self.cte_start + self.horizon

    @property
    def delta_start(self) -> int:
        return self.epsi_start + self.horizon

    @property
    def a_start(self) -> int:
        return self.delta_start + self.horizon - 1

    @property
    def state_starts(self):
        """Start offsets of the six state blocks, in state order."""
        return (self.x_start, self.y_start, self.psi_start,
                self.v_start, self.cte_start, self.epsi_start)

    @property
    def n_vars(self) -> int:
        return N_STATES * self.horizon + N_CONTROLS * (self.horizon - 1)

    @property
    def n_constraints(self) -> int:
        return N_STATES * self.horizon

    def state_block(self, start: int) -> slice:
        return slice(start, start + self.horizon)

    @property
    def steering(self) -> slice:
        return slice(self.delta_start, self.delta_start + self.horizon - 1)

    @property
    def acceleration(self) -> slice:
        return slice(self.a_start, self.a_start + self.horizon - 1)

    def initial_state(self, vars):
        """The first predicted state ``(x, y, psi, v, cte, epsi)`` of ``vars``."""
        return [vars[start] for start in self.state_starts]
