"""Simulator message handler.

:class:`TelemetryHandler` turns one incoming frame into the reply frame:
telemetry events are run through the controller and answered with a
``steer`` event; event frames without data get the ``manual`` reply.
"""

import logging
from typing import Optional, Tuple

import numpy as np

from pathmpc.control.mpc import MPCController, MPCResult
from pathmpc.telemetry import messages
from pathmpc.telemetry.processing import Telemetry, TelemetryError, build_state

logger = logging.getLogger(__name__)


class TelemetryHandler:
    """Answer simulator frames using one controller.

    Args:
        controller: Controller used for every telemetry event. Owned by
            this handler; frames must be handled one at a time.
    """

    def __init__(self, controller: MPCController):
        self._controller = controller
        self._last_result: Optional[MPCResult] = None
        self._last_reference: Optional[Tuple[np.ndarray, np.ndarray]] = None

    @property
    def controller(self) -> MPCController:
        return self._controller

    @property
    def last_result(self) -> Optional[MPCResult]:
        """Result of the most recent telemetry event, if any."""
        return self._last_result

    @property
    def last_reference(self) -> Optional[Tuple[np.ndarray, np.ndarray]]:
        """Waypoints of the most recent telemetry event in the vehicle frame."""
        return self._last_reference

    def handle(self, frame: str) -> Optional[str]:
        """Reply to ``frame``, or None when no reply is due."""
        if not messages.is_event(frame):
            return None

        try:
            event = messages.parse_event(frame)
        except ValueError as e:
            logger.warning("Dropping undecodable frame: %s", e)
            return messages.MANUAL_MESSAGE

        if event is None:
            return messages.MANUAL_MESSAGE

        name, data = event
        if name != "telemetry":
            logger.debug("Ignoring event %s", name)
            return None

        try:
            telemetry = Telemetry.from_dict(data or {})
            return self.on_telemetry(telemetry)
        except TelemetryError as e:
            logger.warning("Cannot control from telemetry: %s", e)
            return messages.MANUAL_MESSAGE

    def on_telemetry(self, telemetry: Telemetry) -> str:
        state, coeffs, local_x, local_y = build_state(telemetry)
        result = self._controller.solve(state, coeffs, local_x[0], local_x[-1])
        self._last_result = result
        self._last_reference = (local_x, local_y)

        logger.info("pos (%.2f, %.2f) psi %.3f v %.2f cost %.3f steer %.4f throttle %.3f ref_v %.2f",
                    telemetry.x, telemetry.y, telemetry.psi, state[3], result.cost,
                    result.steering, result.acceleration, result.target_speed)

        return messages.encode_steer(result.steering,
                                     result.acceleration,
                                     self._controller.config.steer_limit,
                                     result.predicted_x,
                                     result.predicted_y,
                                     local_x,
                                     local_y)
