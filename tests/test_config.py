import dataclasses
import json
import math

import pytest

from pathmpc.control.config import MPCConfig, DecisionLayout


def test_defaults():
    config = MPCConfig()
    assert config.horizon == 40
    assert config.dt == 0.05
    assert config.lf == 2.67
    assert config.steer_limit == pytest.approx(math.radians(25))
    assert config.w_steer_rate == 5e6
    assert config.w_accel_rate == 0.0


def test_layout_offsets():
    layout = DecisionLayout(40)
    assert layout.state_starts == (0, 40, 80, 120, 160, 200)
    assert layout.delta_start == 240
    assert layout.a_start == 279
    assert layout.n_vars == 6 * 40 + 2 * 39
    assert layout.n_constraints == 240
    assert layout.steering == slice(240, 279)
    assert layout.acceleration == slice(279, 318)


def test_initial_state_reads_first_entry_of_each_block():
    layout = DecisionLayout(3)
    vars = list(range(layout.n_vars))
    assert layout.initial_state(vars) == [0, 3, 6, 9, 12, 15]


def test_config_is_immutable():
    config = MPCConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.horizon = 10


def test_from_params_overrides_defaults():
    config = MPCConfig.from_params({"horizon": 20, "w_accel_rate": 3.0})
    assert config.horizon == 20
    assert config.w_accel_rate == 3.0
    assert config.dt == MPCConfig().dt


def test_from_params_rejects_unknown_keys():
    with pytest.raises(ValueError, match="ref_v"):
        MPCConfig.from_params({"ref_v": 32})


@pytest.mark.parametrize("params", [
    {"horizon": 2},
    {"dt": 0.0},
    {"lf": -1.0},
    {"latency": -0.1},
    {"time_budget": 0.0},
    {"v_min": 60.0},
    {"accel_min": 1.0, "accel_max": -1.0},
    {"steer_limit_deg": -25.0},
])
def test_invalid_values_rejected(params):
    with pytest.raises(ValueError):
        MPCConfig.from_params(params)


def test_from_json(tmp_path):
    path = tmp_path / "mpc.json"
    path.write_text(json.dumps({"latency": 0.0, "v_max": 40.0}))
    config = MPCConfig.from_json(str(path))
    assert config.latency == 0.0
    assert config.v_max == 40.0


def test_from_json_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        MPCConfig.from_json(str(tmp_path / "missing.json"))
