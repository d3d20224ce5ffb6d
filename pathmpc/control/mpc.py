"""Receding-horizon path-tracking controller using CasADi + IPOPT.

Each call to :meth:`MPCController.solve` fits a dynamically consistent
trajectory of ``N`` kinematic bicycle states to a cubic reference path
expressed in the vehicle frame, and returns the steering and
acceleration to apply once the actuation latency has elapsed.

The NLP is assembled symbolically once per controller; the reference
coefficients and the curvature-adaptive target speed enter it as
parameters, so nothing computed for one tick carries over to the next.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np
import casadi as ca

from pathmpc.control import cost as nlp_cost
from pathmpc.control import reference_speed
from pathmpc.control.config import MPCConfig, N_STATES

logger = logging.getLogger(__name__)

N_COEFFS = 4


@dataclass
class MPCResult:
    """Outcome of one solve.

    A failed solve has ``success=False``, zero actuation, empty predicted
    paths and a NaN cost; ``target_speed`` is still the value computed for
    that tick.
    """
    steering: float
    acceleration: float
    predicted_x: List[float]
    predicted_y: List[float]
    cost: float
    target_speed: float
    success: bool = True
    status: str = "Solve_Succeeded"
    path_curvature: float = 0.0  # mean squared curvature of the reference
    trajectory_curvature: float = float("nan")  # diagnostic only
    solution: Optional[np.ndarray] = field(default=None, repr=False)

    @classmethod
    def failure(cls, target_speed: float, status: str, path_curvature: float = 0.0) -> "MPCResult":
        return cls(steering=0.0,
                   acceleration=0.0,
                   predicted_x=[],
                   predicted_y=[],
                   cost=float("nan"),
                   target_speed=target_speed,
                   success=False,
                   status=status,
                   path_curvature=path_curvature)

    def as_tuple(self) -> Tuple[float, float, List[float], List[float], float, float]:
        return (self.steering, self.acceleration, self.predicted_x,
                self.predicted_y, self.cost, self.target_speed)


def latency_parameters(latency: float, dt: float) -> Tuple[int, float]:
    """Split ``latency / dt`` into an integer horizon index and a fraction."""
    steps = latency / dt
    position = int(math.floor(steps))
    return position, steps - position


def interpolate_latency(raw: Sequence[float], position: int, offset: float) -> float:
    """Linear interpolation of ``raw`` between ``position`` and ``position + 1``."""
    return raw[position] + (raw[position + 1] - raw[position]) * offset


def trajectory_curvature(xs: np.ndarray, ys: np.ndarray, dt: float) -> float:
    """Mean squared curvature of a predicted trajectory.

    Central differences at interior steps, trapezoid integration with
    half-step end caps, normalised by the horizon duration.  Returns NaN
    when the curvature is undefined (e.g. a stationary trajectory).
    """
    xs = np.asarray(xs, dtype=float)
    ys = np.asarray(ys, dtype=float)
    n = len(xs)
    if n < 3:
        return float("nan")

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        dx = (xs[2:] - xs[:-2]) / (2. * dt)
        dy = (ys[2:] - ys[:-2]) / (2. * dt)
        d2x = (xs[2:] - 2. * xs[1:-1] + xs[:-2]) / (dt * dt)
        d2y = (ys[2:] - 2. * ys[1:-1] + ys[:-2]) / (dt * dt)
        curv2 = ((dx * d2y - dy * d2x) / np.power(dx * dx + dy * dy, 1.5)) ** 2

        # curv2[k] belongs to step k + 1
        total = curv2[0] * dt
        total += np.sum((curv2[1:] + curv2[:-1]) * dt / 2.)
        total += curv2[-1] * dt
        value = float(total / (n * dt))
    return value if np.isfinite(value) else float("nan")


class MPCController:
    """Kinematic-bicycle MPC tracking a cubic reference path.

    The instance only holds immutable configuration and the compiled
    solver; it is safe to reuse across ticks, but a single instance must
    not be solved from several threads at once.  Use one controller per
    vehicle.

    Args:
        config: Controller parameters. Defaults to :class:`MPCConfig`.
    """

    SOLVER = 'ipopt'

    def __init__(self, config: Optional[MPCConfig] = None):
        self._config = config if config is not None else MPCConfig()
        self._layout = self._config.layout

        self._latency_position, self._latency_offset = latency_parameters(
            self._config.latency, self._config.dt)
        if self._latency_position + 1 > self._config.horizon - 2:
            raise ValueError(
                f"Latency {self._config.latency}s reaches beyond the control horizon "
                f"({self._config.horizon - 1} steps of {self._config.dt}s)")

        self._lbx, self._ubx = nlp_cost.variable_bounds(self._layout, self._config)
        self._solver = self._build_solver()

    @property
    def config(self) -> MPCConfig:
        return self._config

    @property
    def latency_position(self) -> int:
        return self._latency_position

    @property
    def latency_offset(self) -> float:
        return self._latency_offset

    def _build_solver(self):
        layout = self._layout
        vars = ca.SX.sym('vars', layout.n_vars)
        params = ca.SX.sym('params', N_COEFFS + 1)
        coeffs = [params[i] for i in range(N_COEFFS)]
        ref_v = params[N_COEFFS]

        f = nlp_cost.build_objective(vars, layout, ref_v, self._config)
        g = ca.vertcat(*nlp_cost.build_constraints(vars, layout, coeffs, self._config))
        nlp = {'x': vars, 'p': params, 'f': f, 'g': g}

        opts = {
            'print_time': False,
            'error_on_fail': False,
            'ipopt.print_level': 0,
            'ipopt.sb': 'yes',
            'ipopt.max_cpu_time': self._config.time_budget,
        }
        return ca.nlpsol('mpc', self.SOLVER, nlp, opts)

    def solve(self, state: Sequence[float],
              coeffs: Sequence[float],
              domain_min: float,
              domain_max: float) -> MPCResult:
        """Solve one tick.

        Args:
            state: ``(x, y, psi, v, cte, epsi)`` in the vehicle frame.
            coeffs: Reference cubic ``[c0, c1, c2, c3]`` in the vehicle frame.
            domain_min: Smallest x of the waypoints the cubic was fitted to.
            domain_max: Largest x of the waypoints the cubic was fitted to.

        Returns:
            An :class:`MPCResult`. Solver failures are reported through
            ``success=False`` rather than raised.
        """
        state = np.asarray(state, dtype=float).flatten()
        coeffs = np.asarray(coeffs, dtype=float).flatten()
        if len(state) != N_STATES:
            raise ValueError(f"Expected a state of length {N_STATES}, got {len(state)}")
        if len(coeffs) != N_COEFFS:
            raise ValueError(f"Expected {N_COEFFS} polynomial coefficients, got {len(coeffs)}")

        layout = self._layout
        ref_v, curv2 = reference_speed.estimate(coeffs, domain_min, domain_max, self._config)

        x0 = nlp_cost.initial_guess(layout, state)
        lbg, ubg = nlp_cost.constraint_bounds(layout, state)
        params = np.concatenate([coeffs, [ref_v]])

        try:
            sol = self._solver(x0=x0, lbx=self._lbx, ubx=self._ubx,
                               lbg=lbg, ubg=ubg, p=params)
        except RuntimeError as e:
            logger.warning("MPC solver raised: %s", e)
            return MPCResult.failure(ref_v, "Solver_Exception", curv2)

        stats = self._solver.stats()
        status = stats.get('return_status', 'unknown')
        if not stats.get('success', False):
            logger.warning("MPC solve failed with status %s", status)
            return MPCResult.failure(ref_v, status, curv2)

        solution = np.array(sol['x']).flatten()
        objective = float(sol['f'])
        return self._extract(solution, objective, ref_v, curv2, status, domain_max)

    def _extract(self, solution: np.ndarray, objective: float, ref_v: float,
                 curv2: float, status: str, domain_max: float) -> MPCResult:
        layout = self._layout
        config = self._config

        xs = solution[layout.state_block(layout.x_start)]
        ys = solution[layout.state_block(layout.y_start)]
        steering_raw = solution[layout.steering]
        accel_raw = solution[layout.acceleration]

        steering = interpolate_latency(steering_raw, self._latency_position, self._latency_offset)
        acceleration = interpolate_latency(accel_raw, self._latency_position, self._latency_offset)
        steering = float(np.clip(steering, -config.steer_limit, config.steer_limit))
        acceleration = float(np.clip(acceleration, config.accel_min, config.accel_max))

        curv2_xy = trajectory_curvature(xs, ys, config.dt)
        logger.debug("Cost %.4f delta0 %.5f a0 %.5f maxx %.2f curvature %.3e vs %.3e",
                     objective, steering_raw[0], accel_raw[0], domain_max, curv2, curv2_xy)

        return MPCResult(steering=steering,
                         acceleration=acceleration,
                         predicted_x=xs.tolist(),
                         predicted_y=ys.tolist(),
                         cost=objective,
                         target_speed=ref_v,
                         success=True,
                         status=status,
                         path_curvature=curv2,
                         trajectory_curvature=curv2_xy,
                         solution=solution)
