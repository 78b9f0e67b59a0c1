import numpy as np
import pytest
import yaml

from body_ik.config import ConfigurationError, IKConfig


def write_config(tmp_path, data):
    path = tmp_path / "robot_config.yaml"
    path.write_text(yaml.safe_dump(data))
    return str(path)


def test_loads_arrays_and_defaults(tmp_path, config_data, Blist, M):
    config = IKConfig(write_config(tmp_path, config_data))

    np.testing.assert_array_equal(config.screw_axes, Blist)
    np.testing.assert_array_equal(config.home, M)
    np.testing.assert_array_equal(config.initial_guess, [1.5, 2.5, 3.0])
    assert config.get_ik_params() == {'eomg': 0.01, 'ev': 0.001, 'max_iterations': 20}
    assert config.get_export_paths() == {
        'log_path': 'log.txt', 'csv_path': 'iterates.csv', 'plot_path': None}
    assert config.log_level == 'INFO'
    assert config.log_file is None


def test_ik_params_from_file_are_typed(tmp_path, config_data):
    config_data['ik_params'] = {'eomg': '1e-3', 'ev': 0.0001, 'max_iterations': 50}
    params = IKConfig(write_config(tmp_path, config_data)).get_ik_params()

    assert params == {'eomg': 1e-3, 'ev': 1e-4, 'max_iterations': 50}
    assert isinstance(params['max_iterations'], int)


def test_environment_overrides(tmp_path, config_data, monkeypatch):
    monkeypatch.setenv("BODY_IK_MAX_ITERATIONS", "5")
    monkeypatch.setenv("BODY_IK_EV", "0.01")
    params = IKConfig(write_config(tmp_path, config_data)).get_ik_params()

    assert params['max_iterations'] == 5
    assert params['ev'] == 0.01
    assert params['eomg'] == 0.01


def test_invalid_environment_override(tmp_path, config_data, monkeypatch):
    monkeypatch.setenv("BODY_IK_EOMG", "small")
    with pytest.raises(ConfigurationError, match="eomg"):
        IKConfig(write_config(tmp_path, config_data))


def test_missing_file():
    with pytest.raises(ConfigurationError, match="not found"):
        IKConfig("/nonexistent/robot_config.yaml")


def test_missing_section(tmp_path, config_data):
    del config_data['target']
    with pytest.raises(ConfigurationError, match="target"):
        IKConfig(write_config(tmp_path, config_data))


def test_missing_field(tmp_path, config_data):
    del config_data['robot']['screw_axes']
    with pytest.raises(ConfigurationError, match="screw_axes"):
        IKConfig(write_config(tmp_path, config_data))


def test_unknown_ik_param(tmp_path, config_data):
    config_data['ik_params'] = {'damping': 0.1}
    with pytest.raises(ConfigurationError, match="damping"):
        IKConfig(write_config(tmp_path, config_data))


def test_invalid_yaml(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("robot: [unclosed\n")
    with pytest.raises(ConfigurationError, match="YAML"):
        IKConfig(str(path))


@pytest.mark.parametrize("value", [2.7, True, "2.7"])
def test_fractional_or_boolean_iteration_cap_rejected(tmp_path, config_data, value):
    config_data['ik_params'] = {'max_iterations': value}
    with pytest.raises(ConfigurationError, match="max_iterations"):
        IKConfig(write_config(tmp_path, config_data))


def test_integral_float_iteration_cap_accepted(tmp_path, config_data):
    config_data['ik_params'] = {'max_iterations': 30.0}
    params = IKConfig(write_config(tmp_path, config_data)).get_ik_params()
    assert params['max_iterations'] == 30
    assert isinstance(params['max_iterations'], int)


def test_boolean_tolerance_rejected(tmp_path, config_data):
    config_data['ik_params'] = {'eomg': True}
    with pytest.raises(ConfigurationError, match="eomg"):
        IKConfig(write_config(tmp_path, config_data))


@pytest.mark.parametrize("ik_params", [[0.01, 0.001], 0.01, "eomg"])
def test_ik_params_must_be_a_mapping(tmp_path, config_data, ik_params):
    config_data['ik_params'] = ik_params
    with pytest.raises(ConfigurationError, match="ik_params"):
        IKConfig(write_config(tmp_path, config_data))
