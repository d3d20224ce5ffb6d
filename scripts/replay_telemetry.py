"""
Replay recorded simulator frames through the MPC controller.

Each line of the input file is one raw frame as received from the
simulator (e.g. ``42["telemetry",{...}]``).  Replies are printed to
stdout, one per frame that warrants a reply.

Usage:
    python scripts/replay_telemetry.py -f recording.txt
    python scripts/replay_telemetry.py -f recording.txt --config mpc.json --plot --debug
"""

import argparse
import logging
import os
import sys
import time

import matplotlib.pyplot as plt

# Ensure repo root is on the path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pathmpc as pm
from pathmpc.control.plotting import plot_solution

logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Replay simulator frames through the MPC controller")
    parser.add_argument("--file", "-f", type=str, required=True,
                        help="File with one simulator frame per line")
    parser.add_argument("--config", "-c", type=str, default=None,
                        help="JSON file of controller parameter overrides")
    parser.add_argument("--delay", type=float, default=0.1,
                        help="Seconds to wait before emitting each reply, mimicking actuation latency")
    parser.add_argument("--plot", action="store_true",
                        help="Plot reference and predicted trajectory after each tick")
    parser.add_argument("--debug", action="store_true",
                        help="Enable debug logging")
    parser.add_argument("--log_path", type=str, default=None,
                        help="Directory to write a log file to")
    return parser.parse_args()


def main():
    args = parse_args()
    pm.setup_logging(logger, debug=args.debug, log_path=args.log_path)

    config = pm.MPCConfig.from_json(args.config) if args.config else pm.MPCConfig()
    handler = pm.TelemetryHandler(pm.MPCController(config))

    ax = None
    if args.plot:
        plt.ion()
        _, ax = plt.subplots(1, 1, figsize=(8, 6))

    n_ticks = 0
    n_failed = 0
    with open(args.file, "r") as f:
        for line in f:
            frame = line.strip()
            if not frame:
                continue
            reply = handler.handle(frame)
            if reply is None:
                continue

            result = handler.last_result
            if result is not None and reply.startswith('42["steer"'):
                n_ticks += 1
                n_failed += not result.success
                if ax is not None:
                    ax.clear()
                    plot_solution(result, *handler.last_reference, ax=ax)
                    plt.pause(0.001)

            if args.delay > 0:
                time.sleep(args.delay)
            print(reply)

    logger.info("Replayed %d telemetry ticks, %d failed solves", n_ticks, n_failed)


if __name__ == '__main__':
    sys.exit(main())
