#!/usr/bin/env python
"""
pFISTA Solver Tests

Covers the proximal step, the momentum and regularization schedules, the
non-negative projection, the single-iteration closed form, recovery under a
unitary operator and input validation.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from pfista.config import SolverConfig
from pfista.exceptions import ConfigError, ShapeError
from pfista.sparse_reconstruction import (
    compute_constant_term,
    compute_gradient,
    compute_spectrum,
    forward,
    nesterov_momentum,
    pfista_iterations,
    project_nonnegative,
    random_sparse_signal,
    sampling_weights,
    simulate_measurements,
    soft_threshold,
    solve_pfista_diag,
    update_lambda
)


def _config(**overrides):
    params = dict(beta=0.9, lambda_bar=1e-8, lambda_reg=1e-2, n=64, iter_max=100,
                  non_neg_orth=True)
    params.update(overrides)
    return SolverConfig(**params)


@pytest.fixture
def unitary_problem():
    """Full sampling with M = √N, so A is unitary and L = 1."""
    x_true = random_sparse_signal(64, 5, rng=0)
    h = np.ones(64)
    return x_true, h, forward(x_true, h)


@pytest.fixture
def noisy_problem():
    rng = np.random.default_rng(3)
    x_true = random_sparse_signal(64, 6, rng=rng)
    h = sampling_weights(10, kind='gaussian', fraction=0.6)
    y = simulate_measurements(x_true, h, snr_db=15.0, rng=rng)
    S = compute_spectrum(h, 64)
    return y, h, S, float(np.max(np.abs(S)))


# Proximal step

def test_soft_threshold_values():
    g = np.array([-3.0, -0.5, 0.0, 0.5, 2.0])
    np.testing.assert_allclose(soft_threshold(g, 1.0), [-2.0, 0.0, 0.0, 0.0, 1.0])


def test_soft_threshold_of_zero_is_zero():
    np.testing.assert_array_equal(soft_threshold(np.zeros(10), 0.3), np.zeros(10))
    np.testing.assert_array_equal(soft_threshold(np.zeros(10), np.linspace(0, 1, 10)), np.zeros(10))


def test_soft_threshold_is_positively_homogeneous():
    rng = np.random.default_rng(0)
    g = rng.standard_normal(50)
    thr = rng.random(50)

    np.testing.assert_allclose(soft_threshold(2.5 * g, 2.5 * thr), 2.5 * soft_threshold(g, thr))


def test_soft_threshold_with_zero_weight_is_identity():
    g = np.array([-1.0, 0.2, 3.0])
    np.testing.assert_array_equal(soft_threshold(g, 0.0), g)


def test_project_nonnegative_clamps_and_drops_imaginary_part():
    x = np.array([-1.0 + 2j, 0.5 - 1j, 2.0 + 0j])

    projected = project_nonnegative(x)

    np.testing.assert_array_equal(projected, [0.0, 0.5, 2.0])
    assert np.isrealobj(projected)


# Schedules

def test_nesterov_momentum_sequence():
    t = 1.0
    for _ in range(20):
        t_next = nesterov_momentum(t)
        assert t_next > t
        assert t_next == pytest.approx(0.5 * (1 + np.sqrt(4 * t * t + 1)))
        t = t_next
    assert nesterov_momentum(1.0) == pytest.approx((1 + np.sqrt(5)) / 2)


def test_update_lambda_is_floored():
    assert update_lambda(1.0, 0.5, 0.1) == 0.5
    assert update_lambda(0.15, 0.5, 0.1) == 0.1


def test_iteration_states_follow_schedules(unitary_problem):
    x_true, h, y = unitary_problem
    config = _config(iter_max=30, beta=0.8, lambda_bar=1e-4)

    states = list(pfista_iterations(y, h, None, 1.0, None, config))

    assert [s.iteration for s in states] == list(range(1, 31))
    assert states[0].t == 1.0
    assert states[0].lambda_reg == config.lambda_reg
    for prev, cur in zip(states, states[1:]):
        assert cur.t == pytest.approx(nesterov_momentum(prev.t))
        assert cur.t > prev.t
        assert cur.lambda_reg <= prev.lambda_reg
        assert cur.lambda_reg >= config.lambda_bar
    assert states[-1].lambda_reg == config.lambda_bar


def test_nonnegative_projection_holds_every_iteration(noisy_problem):
    y, h, S, L = noisy_problem
    config = _config(iter_max=40, lambda_reg=1e-3)

    for state in pfista_iterations(y, h, S, L, None, config):
        assert np.isrealobj(state.x)
        assert np.all(state.x >= 0)


def test_single_iteration_closed_form(noisy_problem):
    y, h, S, L = noisy_problem
    rng = np.random.default_rng(11)
    Pw = rng.random(64)
    config = _config(iter_max=1, non_neg_orth=False, lambda_reg=0.05)

    x = solve_pfista_diag(y, h, S, L, Pw, config)

    v = compute_constant_term(y, h, 64)
    grad = compute_gradient(np.zeros(64), S, v, 64)
    expected = soft_threshold(-grad / L, Pw * config.lambda_reg / L)

    np.testing.assert_allclose(x, expected, rtol=1e-12, atol=1e-14)


# Recovery

def test_unitary_operator_recovers_signal(unitary_problem):
    x_true, h, y = unitary_problem

    x = solve_pfista_diag(y, h, None, 1.0, None, _config())

    np.testing.assert_allclose(x, x_true, atol=1e-5)
    np.testing.assert_array_equal(np.flatnonzero(x), np.flatnonzero(x_true))


def test_supplied_spectrum_matches_computed(noisy_problem):
    y, h, S, L = noisy_problem
    config = _config(iter_max=25)

    np.testing.assert_allclose(
        solve_pfista_diag(y, h, S, L, None, config),
        solve_pfista_diag(y, h, None, L, None, config),
        atol=1e-12
    )


def test_large_scale_config_matches_batched(noisy_problem):
    y, h, S, L = noisy_problem

    np.testing.assert_allclose(
        solve_pfista_diag(y, h, None, L, None, _config(iter_max=20, large_scale=True)),
        solve_pfista_diag(y, h, None, L, None, _config(iter_max=20)),
        atol=1e-12
    )


def test_solver_is_deterministic(noisy_problem):
    y, h, S, L = noisy_problem
    config = _config(iter_max=15)

    first = solve_pfista_diag(y, h, S, L, None, config)
    second = solve_pfista_diag(y, h, S, L, None, config)

    np.testing.assert_array_equal(first, second)


def test_large_lambda_gives_zero_solution(unitary_problem):
    x_true, h, y = unitary_problem
    config = _config(lambda_reg=100.0, lambda_bar=50.0, iter_max=10)

    x = solve_pfista_diag(y, h, None, 1.0, None, config)

    np.testing.assert_array_equal(x, np.zeros(64))


def test_measurements_accepted_as_grid(unitary_problem):
    x_true, h, y = unitary_problem
    config = _config(iter_max=10)

    np.testing.assert_allclose(
        solve_pfista_diag(y.reshape(8, 8), h, None, 1.0, None, config),
        solve_pfista_diag(y, h, None, 1.0, None, config)
    )


def test_dict_config_with_legacy_parameter_names(unitary_problem):
    x_true, h, y = unitary_problem
    params = {'Beta': 0.9, 'LambdaBar': 1e-8, 'Lambda': 1e-2, 'N': 64,
              'IterMax': 100, 'NonNegOrth': True}

    x = solve_pfista_diag(y, h, None, 1.0, None, params)

    np.testing.assert_allclose(x, x_true, atol=1e-5)


# Validation

def test_lambda_bar_above_lambda_warns(unitary_problem):
    x_true, h, y = unitary_problem
    config = _config(lambda_reg=1e-3, lambda_bar=1e-2, iter_max=2)

    with pytest.warns(UserWarning, match="lambda_bar"):
        solve_pfista_diag(y, h, None, 1.0, None, config)


@pytest.mark.parametrize("L", [None, 0.0, -1.0, np.inf, np.nan, "abc"])
def test_invalid_lipschitz_constant_raises(unitary_problem, L):
    x_true, h, y = unitary_problem
    with pytest.raises(ConfigError):
        solve_pfista_diag(y, h, None, L, None, _config())


def test_invalid_config_raises_before_iterating(unitary_problem):
    x_true, h, y = unitary_problem
    with pytest.raises(ConfigError):
        pfista_iterations(y, h, None, 1.0, None, {'beta': 1.0, 'lambda_bar': 0.0,
                                                  'lambda_reg': 0.1, 'n': 64, 'iter_max': 5})


@pytest.mark.parametrize("field", ['lambda_reg', 'lambda_bar'])
def test_nan_regularization_raises_before_iterating(unitary_problem, field):
    x_true, h, y = unitary_problem
    config = _config(**{field: float('nan')})
    with pytest.raises(ConfigError, match=field):
        solve_pfista_diag(y, h, None, 1.0, None, config)


def test_negative_weights_raise(unitary_problem):
    x_true, h, y = unitary_problem
    Pw = np.ones(64)
    Pw[3] = -1.0
    with pytest.raises(ConfigError):
        solve_pfista_diag(y, h, None, 1.0, Pw, _config())


def test_shape_mismatches_raise(unitary_problem):
    x_true, h, y = unitary_problem
    config = _config()

    with pytest.raises(ShapeError):
        solve_pfista_diag(y, h, None, 1.0, np.ones(60), config)
    with pytest.raises(ShapeError):
        solve_pfista_diag(y[:60], h, None, 1.0, None, config)
    with pytest.raises(ShapeError):
        solve_pfista_diag(y, np.ones(49), None, 1.0, None, config)
    with pytest.raises(ShapeError):
        solve_pfista_diag(y, h, np.ones((4, 4)), 1.0, None, config)
    with pytest.raises(ShapeError):
        solve_pfista_diag(y, None, None, 1.0, None, config)


def test_verbose_output(unitary_problem, capsys):
    x_true, h, y = unitary_problem

    solve_pfista_diag(y, h, None, 1.0, None, _config(iter_max=3), verbose=0)
    assert capsys.readouterr().out == ""

    solve_pfista_diag(y, h, None, 1.0, None, _config(iter_max=3), verbose=1)
    out = capsys.readouterr().out
    assert "pFISTA Diagonal Solver" in out
    assert "Iteration #" not in out

    solve_pfista_diag(y, h, None, 1.0, None, _config(iter_max=3), verbose=3)
    out = capsys.readouterr().out
    assert "Iteration #3" in out
    assert "v_calc" in out
