"""Matplotlib view of one controller tick.

Draws, in the vehicle frame, the waypoints the reference cubic was
fitted to (yellow in the simulator) and the trajectory predicted by the
controller (green in the simulator).
"""

import logging
from typing import Optional, Sequence

import matplotlib.pyplot as plt

from pathmpc.control.mpc import MPCResult

logger = logging.getLogger(__name__)


def plot_solution(result: MPCResult,
                  reference_x: Sequence[float],
                  reference_y: Sequence[float],
                  ax: Optional[plt.Axes] = None) -> plt.Axes:
    """Plot the reference waypoints and the predicted trajectory of ``result``."""
    if ax is None:
        _, ax = plt.subplots(1, 1, figsize=(8, 6))

    if len(reference_x) > 0:
        ax.plot(reference_x, reference_y, 'y-', linewidth=2, label='Reference', zorder=3)

    if result.success:
        ax.plot(result.predicted_x, result.predicted_y, 'g-', linewidth=2,
                label='Predicted', zorder=4)
        title = (f"steer {result.steering:+.3f} rad  accel {result.acceleration:+.2f}  "
                 f"v_ref {result.target_speed:.1f}")
    else:
        logger.debug("Nothing to plot for failed solve (%s)", result.status)
        title = f"solve failed: {result.status}"

    ax.plot(0.0, 0.0, 'ko', markersize=6, zorder=5)
    ax.set_title(title, fontsize=9)
    ax.set_aspect('equal')
    ax.legend(loc='upper right', fontsize=8)
    return ax
