"""Discrete kinematic bicycle model.

Forward-Euler integration of a front-steered single-track vehicle whose
state is ``[x, y, psi, v, cte, epsi]`` and control is ``[delta, a]``::

    x_{t+1}    = x_t + v_t * cos(psi_t) * dt
    y_{t+1}    = y_t + v_t * sin(psi_t) * dt
    psi_{t+1}  = psi_t + v_t / Lf * delta_t * dt
    v_{t+1}    = v_t + a_t * dt
    cte_{t+1}  = f(x_t) - y_t + v_t * sin(epsi_t) * dt
    epsi_{t+1} = psi_t - psides_t + v_t * delta_t / Lf * dt

where ``f`` is the cubic reference path and ``psides_t = atan(f'(x_t))``.

Every function here works on CasADi symbols as well as on floats and
numpy arrays, so the same equations are used to build solver
constraints and to check solutions numerically.
"""

import casadi as ca
import numpy as np


def _ops(*values):
    """Pick ``casadi`` when any value is symbolic, ``numpy`` otherwise."""
    if any(isinstance(v, (ca.SX, ca.MX, ca.DM)) for v in values):
        return ca
    return np


def poly(coeffs, x):
    """Evaluate the cubic ``c0 + c1*x + c2*x^2 + c3*x^3``."""
    return coeffs[0] + coeffs[1] * x + coeffs[2] * x * x + coeffs[3] * x * x * x


def poly_derivative(coeffs, x):
    return coeffs[1] + 2 * coeffs[2] * x + 3 * coeffs[3] * x * x


def desired_heading(coeffs, x):
    """Tangent direction of the reference path at ``x``."""
    ops = _ops(x, *coeffs)
    slope = poly_derivative(coeffs, x)
    return ops.arctan(slope) if ops is np else ops.atan(slope)


def step(state, control, coeffs, dt: float, lf: float):
    """Predict the next state.

    Args:
        state: ``(x, y, psi, v, cte, epsi)`` at time t.
        control: ``(delta, a)`` applied at time t.
        coeffs: Reference path coefficients ``[c0, c1, c2, c3]``.
        dt: Timestep (s).
        lf: Effective front length (m).

    Returns:
        Tuple of the six state components at time t+1.
    """
    x0, y0, psi0, v0, cte0, epsi0 = state
    delta0, a0 = control
    ops = _ops(*state, *control, *coeffs)

    f0 = poly(coeffs, x0)
    psides0 = desired_heading(coeffs, x0)

    return (x0 + v0 * ops.cos(psi0) * dt,
            y0 + v0 * ops.sin(psi0) * dt,
            psi0 + v0 / lf * delta0 * dt,
            v0 + a0 * dt,
            (f0 - y0) + v0 * ops.sin(epsi0) * dt,
            (psi0 - psides0) + v0 * delta0 / lf * dt)


def residual(next_state, state, control, coeffs, dt: float, lf: float):
    """``next_state - step(state, control)``, zero on a consistent trajectory."""
    predicted = step(state, control, coeffs, dt, lf)
    return tuple(n - p for n, p in zip(next_state, predicted))
