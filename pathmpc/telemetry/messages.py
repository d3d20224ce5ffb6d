"""Socket.IO text frames exchanged with the simulator.

A frame starting with ``42`` is an event message; its payload is a JSON
array ``["event", {...}]``.  Replies use the same framing.
"""

import json
import logging
from typing import Any, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

EVENT_PREFIX = "42"
MANUAL_MESSAGE = '42["manual",{}]'


def extract_payload(frame: str) -> Optional[str]:
    """JSON payload of an event frame, or None if it carries no data."""
    if "null" in frame:
        return None
    b1 = frame.find("[")
    b2 = frame.rfind("}]")
    if b1 != -1 and b2 != -1:
        return frame[b1:b2 + 2]
    return None


def is_event(frame: str) -> bool:
    return len(frame) > 2 and frame.startswith(EVENT_PREFIX)


def parse_event(frame: str) -> Optional[Tuple[str, Any]]:
    """``(event, data)`` of an event frame, or None if there is no payload.

    Raises:
        ValueError: if the payload is not valid JSON.
    """
    payload = extract_payload(frame)
    if payload is None:
        return None
    message = json.loads(payload)
    return message[0], (message[1] if len(message) > 1 else None)


def encode_event(event: str, data: dict) -> str:
    return EVENT_PREFIX + json.dumps([event, data], separators=(",", ":"))


def encode_steer(steering: float,
                 throttle: float,
                 steer_limit: float,
                 mpc_x: Sequence[float],
                 mpc_y: Sequence[float],
                 next_x: Sequence[float],
                 next_y: Sequence[float]) -> str:
    """Steer reply.

    The simulator expects ``steering_angle`` in ``[-1, 1]`` with positive
    values turning right, hence the sign flip and the division by the
    steering limit (rad).
    """
    data = {
        "steering_angle": -steering / steer_limit,
        "throttle": throttle,
        "mpc_x": [float(v) for v in mpc_x],
        "mpc_y": [float(v) for v in mpc_y],
        "next_x": [float(v) for v in next_x],
        "next_y": [float(v) for v in next_y],
    }
    return encode_event("steer", data)
