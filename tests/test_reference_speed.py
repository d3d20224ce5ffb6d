import math

import numpy as np
import pytest

from pathmpc.control import reference_speed
from pathmpc.control.config import MPCConfig


@pytest.fixture
def config():
    return MPCConfig()


def test_curvature_of_parabola_vertex():
    assert reference_speed.curvature([0, 0, 0.5, 0], 0.0) == pytest.approx(1.0)
    assert reference_speed.curvature([0, 0, 0, 0], 3.0) == 0.0


def test_straight_path_has_zero_curvature():
    assert reference_speed.mean_squared_curvature([1, 0.3, 0, 0], 0, 50) == 0.0


def test_mean_squared_curvature_of_constant_curvature():
    # near the vertex the curvature of c2*x^2 is ~2*c2
    curv2 = reference_speed.mean_squared_curvature([0, 0, 0.01, 0], 0.0, 1e-3)
    assert curv2 == pytest.approx(0.02 ** 2, rel=1e-2)


@pytest.mark.parametrize("domain", [(5.0, 5.0), (10.0, 0.0), (0.0, float("inf"))])
def test_degenerate_domain(domain):
    assert reference_speed.mean_squared_curvature([0, 0, 0.1, 0.01], *domain) == 0.0


def test_straight_road_speed(config):
    speed, curv2 = reference_speed.estimate([0, 0, 0, 0], 0, 50, config)
    assert curv2 == 0.0
    assert speed == pytest.approx(50. - 30. / (1. + math.exp(6.)))


def test_tight_bend_is_slower(config):
    straight, _ = reference_speed.estimate([0, 0, 0, 0], 0, 50, config)
    bend, curv2 = reference_speed.estimate([0, 0, 0.02, 0], 0, 50, config)
    assert curv2 > config.curvature_midpoint
    assert bend < straight
    assert bend == pytest.approx(config.v_min, abs=1.0)


def test_target_speed_monotone_and_bounded(config):
    curv2 = np.concatenate([[0.0], np.logspace(-8, 3, 200)])
    speeds = np.array([reference_speed.target_speed(c, config) for c in curv2])
    assert np.all(np.diff(speeds) <= 0)
    assert np.all(speeds >= config.v_min)
    assert np.all(speeds <= config.v_max)


def test_target_speed_saturates_without_overflow(config):
    assert reference_speed.target_speed(1e300, config) == pytest.approx(config.v_min)
    assert reference_speed.target_speed(-1e300, config) == pytest.approx(config.v_max)


def test_midpoint_is_halfway(config):
    speed = reference_speed.target_speed(config.curvature_midpoint, config)
    assert speed == pytest.approx((config.v_min + config.v_max) / 2.)
