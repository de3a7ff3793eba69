#!/usr/bin/env python
"""
Solver Configuration Tests

Checks construction from mappings and YAML files, the legacy parameter
names, and range validation.
"""

import dataclasses
import sys
from pathlib import Path

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pfista.config import SolverConfig, as_solver_config, load_config_section, load_solver_config
from pfista.exceptions import ConfigError, ShapeError


VALID = {'beta': 0.95, 'lambda_bar': 1e-7, 'lambda_reg': 0.01, 'n': 256, 'iter_max': 50}


def _with(**overrides):
    params = dict(VALID)
    params.update(overrides)
    return params


def test_from_dict_applies_defaults():
    config = SolverConfig.from_dict(VALID)

    assert config.n == 256
    assert config.non_neg_orth is True
    assert config.large_scale is False
    assert config.n_jobs == 1


def test_legacy_parameter_names_are_accepted():
    config = SolverConfig.from_dict({
        'Beta': 0.9, 'LambdaBar': 1e-6, 'Lambda': 0.1, 'N': 64,
        'IterMax': 10, 'NonNegOrth': False, 'LargeScale': True
    })

    assert config == SolverConfig(beta=0.9, lambda_bar=1e-6, lambda_reg=0.1, n=64,
                                  iter_max=10, non_neg_orth=False, large_scale=True)


def test_unknown_parameter_raises():
    with pytest.raises(ConfigError, match="Unknown"):
        SolverConfig.from_dict(_with(tolerance=1e-6))


def test_missing_parameter_raises():
    params = dict(VALID)
    del params['iter_max']
    with pytest.raises(ConfigError, match="iter_max"):
        SolverConfig.from_dict(params)


@pytest.mark.parametrize("overrides", [
    {'beta': 0.0},
    {'beta': 1.0},
    {'beta': 1.5},
    {'iter_max': 0},
    {'iter_max': 2.5},
    {'iter_max': True},
    {'lambda_bar': -1e-3},
    {'lambda_reg': -0.1},
    {'lambda_reg': float('nan')},
    {'lambda_reg': float('inf')},
    {'lambda_bar': float('nan')},
    {'n_jobs': 0},
])
def test_out_of_range_parameters_raise(overrides):
    with pytest.raises(ConfigError):
        SolverConfig.from_dict(_with(**overrides))


@pytest.mark.parametrize("n", [15, 0, -4])
def test_non_square_n_raises_shape_error(n):
    with pytest.raises(ShapeError):
        SolverConfig.from_dict(_with(n=n))


def test_config_is_immutable():
    config = SolverConfig.from_dict(VALID)
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.beta = 0.5


def test_to_dict_round_trips():
    config = SolverConfig.from_dict(VALID)
    assert SolverConfig.from_dict(config.to_dict()) == config


def test_as_solver_config_validates_instances():
    with pytest.raises(ConfigError):
        as_solver_config(SolverConfig(beta=2.0, lambda_bar=0.0, lambda_reg=0.1, n=16, iter_max=5))


def test_load_from_yaml_section(tmp_path):
    path = tmp_path / "params.yaml"
    path.write_text(
        "solver:\n"
        "  beta: 0.99\n"
        "  lambda_bar: 1.0e-7\n"
        "  lambda_reg: 0.05\n"
        "  n: 1024\n"
        "  iter_max: 300\n"
        "  non_neg_orth: true\n"
        "simulation:\n"
        "  m: 32\n"
    )

    config = load_solver_config(path)

    assert config.beta == 0.99
    assert config.lambda_bar == pytest.approx(1e-7)
    assert config.n == 1024
    assert config.iter_max == 300


def test_load_from_top_level_yaml(tmp_path):
    path = tmp_path / "params.yaml"
    path.write_text("Beta: 0.9\nLambdaBar: 0.0\nLambda: 0.2\nN: 16\nIterMax: 5\n")

    config = load_solver_config(path, section=None)

    assert config.lambda_reg == 0.2
    assert config.n == 16


def test_missing_yaml_section_raises(tmp_path):
    path = tmp_path / "params.yaml"
    path.write_text("simulation:\n  m: 8\n")

    with pytest.raises(ConfigError, match="solver"):
        load_solver_config(path)


def test_shipped_configuration_loads():
    path = Path(__file__).parent.parent / "config" / "solver_parameters.yaml"

    config = load_solver_config(path)

    assert config.n == 1024
    assert 0 < config.beta < 1


def test_load_config_section_reads_other_sections(tmp_path):
    path = tmp_path / "params.yaml"
    path.write_text("solver:\n  beta: 0.9\nsimulation:\n  m: 8\n  sampling: random\n")

    assert load_config_section(path, 'simulation') == {'m': 8, 'sampling': 'random'}
    assert load_config_section(path, 'plotting', required=False) == {}
    with pytest.raises(ConfigError, match="plotting"):
        load_config_section(path, 'plotting')


def test_load_config_section_rejects_non_mapping(tmp_path):
    path = tmp_path / "params.yaml"
    path.write_text("solver:\n  - 0.9\n  - 0.1\n")

    with pytest.raises(ConfigError, match="mapping"):
        load_config_section(path, 'solver')
