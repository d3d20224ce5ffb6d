"""Curvature-adaptive target speed.

The mean squared curvature of the reference cubic over the visible path
domain is mapped through a logistic function onto a cruising speed:
straight roads give ``v_max``, tight bends approach ``v_min``.
"""

import logging
from typing import Sequence, Tuple

import numpy as np
from scipy.special import expit

from pathmpc.control.config import MPCConfig

logger = logging.getLogger(__name__)


def curvature(coeffs: Sequence[float], x):
    """Signed curvature ``y'' / (1 + y'^2)^1.5`` of the cubic at ``x``."""
    c = np.asarray(coeffs, dtype=float)
    x = np.asarray(x, dtype=float)
    dy = c[1] + 2. * c[2] * x + 3. * c[3] * x * x
    d2y = 2. * c[2] + 6. * c[3] * x
    return d2y / np.power(dy * dy + 1., 1.5)


def mean_squared_curvature(coeffs: Sequence[float],
                           domain_min: float,
                           domain_max: float,
                           samples: int = 1000) -> float:
    """Riemann estimate of the mean of ``curvature^2`` over ``[domain_min, domain_max]``.

    An empty or non-finite domain has zero mean curvature.
    """
    length = domain_max - domain_min
    if not np.isfinite(length) or length <= 0:
        logger.debug("Degenerate path domain [%s, %s]", domain_min, domain_max)
        return 0.0

    dx = length / samples
    xs = domain_min + dx * np.arange(samples + 1)
    total = np.sum(curvature(coeffs, xs) ** 2) * dx
    return float(total / length)


def target_speed(curv2: float, config: MPCConfig) -> float:
    """Map a mean squared curvature onto a speed in ``[v_min, v_max]``."""
    span = config.v_max - config.v_min
    return float(config.v_max - span * expit(
        config.curvature_steepness * (curv2 - config.curvature_midpoint)))


def estimate(coeffs: Sequence[float],
             domain_min: float,
             domain_max: float,
             config: MPCConfig) -> Tuple[float, float]:
    """Compute the target speed for one solve.

    Returns:
        ``(target_speed, mean_squared_curvature)``.
    """
    curv2 = mean_squared_curvature(coeffs, domain_min, domain_max,
                                   config.curvature_samples)
    return target_speed(curv2, config), curv2
