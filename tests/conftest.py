import matplotlib

matplotlib.use("Agg")

import pytest

from pathmpc.control.config import MPCConfig
from pathmpc.control.mpc import MPCController

# Generous CPU budget so solver-backed tests do not depend on machine speed.
TEST_TIME_BUDGET = 5.0


@pytest.fixture(scope="session")
def config():
    return MPCConfig(time_budget=TEST_TIME_BUDGET)


@pytest.fixture(scope="session")
def controller(config):
    return MPCController(config)


@pytest.fixture(scope="session")
def short_controller():
    return MPCController(MPCConfig(horizon=12, time_budget=TEST_TIME_BUDGET))
