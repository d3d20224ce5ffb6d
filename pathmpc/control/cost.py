"""Objective, constraints and bounds of the tracking NLP.

The builders operate on any indexable decision vector: a CasADi ``SX``
symbol when assembling the solver, or a numpy array when checking a
solution.  Layout offsets come from :class:`DecisionLayout`.
"""

import logging
from typing import Sequence, Tuple, List

import numpy as np

from pathmpc.control import dynamics
from pathmpc.control.config import MPCConfig, DecisionLayout

logger = logging.getLogger(__name__)


def build_objective(vars, layout: DecisionLayout, target_speed, config: MPCConfig):
    """Sum of tracking, speed, actuator and smoothness costs.

    Args:
        vars: Flat decision vector.
        layout: Block offsets of ``vars``.
        target_speed: Speed the ``w_v`` term tracks for this solve.
        config: Controller parameters holding the weights.
    """
    N = layout.horizon
    cost = 0.0

    # Reference state cost
    for i in range(N):
        cost += config.w_cte * vars[layout.cte_start + i] ** 2
        cost += config.w_epsi * vars[layout.epsi_start + i] ** 2
        cost += config.w_v * (vars[layout.v_start + i] - target_speed) ** 2

    # Actuator use
    for i in range(N - 1):
        cost += config.w_steer * vars[layout.delta_start + i] ** 2
        cost += config.w_accel * vars[layout.a_start + i] ** 2

    # Sudden changes between consecutive actuations
    for i in range(N - 2):
        cost += config.w_steer_rate * (vars[layout.delta_start + i + 1] - vars[layout.delta_start + i]) ** 2
        cost += config.w_accel_rate * (vars[layout.a_start + i + 1] - vars[layout.a_start + i]) ** 2

    return cost


def build_constraints(vars, layout: DecisionLayout, coeffs, config: MPCConfig) -> List:
    """Constraint vector of length ``6N``.

    Entry ``start`` of each state block is the initial value of that
    state; entry ``start + i + 1`` is the model residual between steps
    ``i`` and ``i + 1``.
    """
    N = layout.horizon
    starts = layout.state_starts
    g = [None] * layout.n_constraints

    for start in starts:
        g[start] = vars[start]

    for i in range(N - 1):
        state0 = [vars[start + i] for start in starts]
        state1 = [vars[start + i + 1] for start in starts]
        control0 = (vars[layout.delta_start + i], vars[layout.a_start + i])

        res = dynamics.residual(state1, state0, control0, coeffs, config.dt, config.lf)
        for start, r in zip(starts, res):
            g[start + i + 1] = r

    return g


def variable_bounds(layout: DecisionLayout, config: MPCConfig) -> Tuple[np.ndarray, np.ndarray]:
    """States unbounded, steering within the steering limit, acceleration within its limits."""
    lbx = np.full(layout.n_vars, -config.state_bound)
    ubx = np.full(layout.n_vars, config.state_bound)

    lbx[layout.steering] = -config.steer_limit
    ubx[layout.steering] = config.steer_limit

    lbx[layout.acceleration] = config.accel_min
    ubx[layout.acceleration] = config.accel_max
    return lbx, ubx


def constraint_bounds(layout: DecisionLayout, state: Sequence[float]) -> Tuple[np.ndarray, np.ndarray]:
    """Zero for every model residual; the measured state for the initial entries."""
    lbg = np.zeros(layout.n_constraints)
    ubg = np.zeros(layout.n_constraints)
    for start, value in zip(layout.state_starts, state):
        lbg[start] = value
        ubg[start] = value
    return lbg, ubg


def initial_guess(layout: DecisionLayout, state: Sequence[float]) -> np.ndarray:
    """All zeros apart from the first predicted state."""
    x0 = np.zeros(layout.n_vars)
    for start, value in zip(layout.state_starts, state):
        x0[start] = value
    return x0


def constraint_violation(vars: np.ndarray, layout: DecisionLayout, coeffs,
                         state: Sequence[float], config: MPCConfig) -> float:
    """Largest absolute violation of the constraint bounds by a numeric ``vars``."""
    g = np.asarray(build_constraints(np.asarray(vars, dtype=float), layout,
                                     np.asarray(coeffs, dtype=float), config),
                   dtype=float)
    lbg, _ = constraint_bounds(layout, state)
    return float(np.max(np.abs(g - lbg)))
