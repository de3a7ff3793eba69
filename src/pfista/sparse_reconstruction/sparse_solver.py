"""
Fast proximal-gradient (pFISTA) solver for the structured sparse problem.

Solves:
    min_x  λ‖w ⊙ x‖₁ + ½‖y − A·x‖₂²

where:
- A = H·(Fp ⊗ Fp): diagonal weighting times a Kronecker partial Fourier matrix
- y ∈ ℂ^(M²): measurements
- x ∈ ℝ^N: sparse diagonal to recover (optionally non-negative)
- w ∈ ℝ^N: per-coordinate penalty weights (w ≥ 0)

Every iteration applies the gradient AᴴA·z − Aᴴy through its BCCB spectrum
(see spectral.py), so the cost per iteration is two N-point 2-D FFTs,
independent of the number of measurements.

Iteration k:
    z      = x + ((t_prev − 1)/t)·(x − x_prev)
    g      = z − (1/L)·∇f(z)
    x_new  = sign(g)·max(|g| − w·λ/L, 0)      [then clamp to ≥ 0 if requested]
    t_new  = ½(1 + √(4t² + 1))
    λ_new  = max(β·λ, λ̄)

The loop runs for exactly ``iter_max`` iterations; there is no convergence
test. The Lipschitz constant L is an input and is never estimated here.
"""

from collections import namedtuple
import time
import warnings

import numpy as np
from tqdm import tqdm

from ..config import as_solver_config
from ..exceptions import ConfigError, ShapeError
from ..utils.grid import square_side
from .spectral import compute_constant_term, compute_gradient, compute_spectrum
from .structured_operator import diagonal_of


IterationState = namedtuple('IterationState', ['iteration', 'x', 't', 'lambda_reg'])
IterationState.__doc__ = """
State after one pFISTA iteration.

``x`` is the new iterate; ``t`` and ``lambda_reg`` are the momentum
coefficient and regularization strength that produced it.
"""


def soft_threshold(g, threshold):
    """
    Elementwise soft thresholding: sign(g)·max(|g| − threshold, 0).

    Parameters
    ----------
    g : ndarray
        Input vector
    threshold : float or ndarray
        Non-negative threshold, scalar or one value per entry

    Returns
    -------
    ndarray
        Shrunk vector, same shape as ``g``

    Examples
    --------
    >>> soft_threshold(np.array([-3.0, 0.5, 2.0]), 1.0)
    array([-2.,  0.,  1.])
    """
    return np.sign(g) * np.maximum(np.abs(g) - threshold, 0.0)


def project_nonnegative(x):
    """Keep the real part and clamp negative entries to zero."""
    x = np.real(x).copy()
    x[x < 0] = 0.0
    return x


def nesterov_momentum(t):
    """Next momentum coefficient: ½(1 + √(4t² + 1))."""
    return 0.5 * (1.0 + np.sqrt(4.0 * t ** 2 + 1.0))


def update_lambda(lambda_reg, beta, lambda_bar):
    """Geometric decay of the regularization parameter, floored at lambda_bar."""
    return max(beta * lambda_reg, lambda_bar)


def validate_problem(y, H, S, L, Pw, N):
    """
    Check measurement, weighting, spectrum and step-size inputs.

    Parameters
    ----------
    y : array-like of length M²
    H : diagonal weighting of size M²
    S : ndarray of shape (√N, √N) or None
    L : float
    Pw : array-like with N entries or None
    N : int

    Returns
    -------
    y : ndarray of shape (M²,)
        Flattened measurements
    w : ndarray of shape (N,)
        Flattened penalty weights (ones if Pw is None)
    L : float

    Raises
    ------
    ShapeError
        If sizes are inconsistent
    ConfigError
        If L is not a positive finite number or Pw has negative entries
    """
    n = square_side(N, name="N")

    y = np.asarray(y).reshape(-1)
    square_side(y.size, name="length of y")
    if diagonal_of(H, size=y.size) is None:
        raise ShapeError("H is required to define the measurement operator")

    if L is None:
        raise ConfigError("The Lipschitz constant L must be supplied")
    try:
        L = float(L)
    except (TypeError, ValueError):
        raise ConfigError(f"The Lipschitz constant L must be a number, got {L!r}")
    if not np.isfinite(L) or L <= 0:
        raise ConfigError(f"The Lipschitz constant L must be positive and finite, got {L}")

    if Pw is None:
        w = np.ones(N)
    else:
        w = np.asarray(Pw, dtype=np.float64).reshape(-1)
        if w.size != N:
            raise ShapeError(f"Pw has {w.size} entries, expected N={N}")
        if np.any(w < 0):
            raise ConfigError("Pw must be non-negative")

    if S is not None:
        S = np.asarray(S)
        if S.shape != (n, n):
            raise ShapeError(f"S must have shape ({n}, {n}), got {S.shape}")
        scale = np.max(np.abs(S))
        if scale > 0 and np.min(np.real(S)) < -1e-8 * scale:
            warnings.warn(
                "Supplied spectrum has negative real entries; AᴴA is positive "
                "semi-definite, so S was probably not built from this H."
            )

    return y, w, L


def _print_header(y, N, L, config):
    print(f"\n{'='*60}")
    print("pFISTA Diagonal Solver")
    print(f"{'='*60}")
    print(f"Problem size: M²={y.size} measurements, N={N} unknowns")
    print(f"Lipschitz constant: L = {L:.4e}")
    print(f"Sparsity parameter: lambda = {config.lambda_reg:.2e} "
          f"(beta={config.beta}, floor={config.lambda_bar:.2e})")
    print(f"Iterations: {config.iter_max}")
    print(f"Non-negative projection: {'on' if config.non_neg_orth else 'off'}")


def pfista_iterations(y, H, S, L, Pw, config, verbose=0):
    """
    Run pFISTA and yield the state after every iteration.

    Parameters
    ----------
    y : ndarray of shape (M²,)
        Complex measurements (an M×M array is flattened)
    H : scipy.sparse matrix or ndarray of shape (M², M²), or ndarray (M²,)
        Diagonal measurement weighting
    S : ndarray of shape (√N, √N) or None
        Spectrum of AᴴA; computed from H when None
    L : float
        Lipschitz constant of the gradient (step size 1/L)
    Pw : ndarray with N entries or None
        Non-negative L1 weights
    config : SolverConfig or dict
        Solver parameters
    verbose : int or bool, optional
        0: silent, 1: summary, 2: progress bar, 3: per-iteration timing

    Returns
    -------
    generator of IterationState
        ``(iteration, x, t, lambda_reg)`` for iterations 1..iter_max.
        Validation and the precomputation of S and v happen before the
        generator is returned.

    Raises
    ------
    ConfigError, ShapeError
        Before the first iteration, for invalid parameters or sizes
    """
    config = as_solver_config(config)
    N = config.n
    y, w, L = validate_problem(y, H, S, L, Pw, N)
    verbose = int(verbose)

    if config.lambda_bar > config.lambda_reg:
        warnings.warn(
            f"lambda_bar ({config.lambda_bar:.2e}) exceeds lambda ({config.lambda_reg:.2e}); "
            "the regularization is held at lambda_bar after the first iteration."
        )

    if verbose >= 1:
        _print_header(y, N, L, config)

    if S is not None:
        S = np.asarray(S)
    else:
        if verbose >= 1:
            print("Computing spectrum of the normal operator...")
        t0 = time.perf_counter()
        S = compute_spectrum(H, N, large_scale=config.large_scale, n_jobs=config.n_jobs)
        if verbose >= 3:
            print(f"  S_calc: {time.perf_counter() - t0:.4f} s")

    # Aᴴy
    t0 = time.perf_counter()
    v = compute_constant_term(y, H, N, large_scale=config.large_scale, n_jobs=config.n_jobs)
    if verbose >= 3:
        print(f"  v_calc: {time.perf_counter() - t0:.4f} s")

    return _iterate(S, v, w, L, N, config, verbose)


def _iterate(S, v, w, L, N, config, verbose):
    """Driver loop: owns the iterate state (x, x_prev, t, t_prev, lambda)."""
    t = 1.0
    t_prev = 1.0
    lambda_reg = float(config.lambda_reg)

    x = np.zeros(N)
    x_prev = x

    if verbose >= 1:
        print("Running iterations...")

    iterations = range(1, config.iter_max + 1)
    if verbose == 2:
        iterations = tqdm(iterations, desc="pFISTA", unit="it")

    for kk in iterations:
        t_iter = time.perf_counter()

        # Z update
        z = x + ((t_prev - 1.0) / t) * (x - x_prev)

        # Gradient step: g = z - (1/L)·(AᴴA·z - Aᴴy)
        g = z - compute_gradient(z, S, v, N) / L

        x_prev = x
        x = soft_threshold(g, w * lambda_reg / L)

        if config.non_neg_orth:
            x = project_nonnegative(x)

        state = IterationState(kk, x, t, lambda_reg)

        t_prev = t
        t = nesterov_momentum(t)
        lambda_reg = update_lambda(lambda_reg, config.beta, config.lambda_bar)

        if verbose >= 3:
            print(f"Iteration #{kk}: {time.perf_counter() - t_iter:.4f} s")

        yield state

    if verbose >= 1:
        n_nonzero = int(np.count_nonzero(x))
        print(f"Done pFISTA: {n_nonzero}/{N} non-zero entries")


def solve_pfista_diag(y, H, S, L, Pw, config, verbose=0):
    """
    Recover the sparse diagonal x from Fourier measurements y.

    Runs exactly ``config.iter_max`` pFISTA iterations and returns the final
    iterate. See :func:`pfista_iterations` for the parameters.

    Returns
    -------
    x : ndarray of shape (N,)
        Estimated signal (real and non-negative when ``non_neg_orth`` is set)

    Examples
    --------
    >>> from pfista.config import SolverConfig
    >>> from pfista.sparse_reconstruction import forward
    >>> config = SolverConfig(beta=0.9, lambda_bar=1e-7, lambda_reg=1e-3,
    ...                       n=16, iter_max=50)
    >>> x_true = np.zeros(16); x_true[5] = 1.0
    >>> y = forward(x_true, np.ones(16))
    >>> x = solve_pfista_diag(y, np.ones(16), None, 1.0, None, config)
    >>> int(np.argmax(x))
    5
    """
    state = None
    for state in pfista_iterations(y, H, S, L, Pw, config, verbose=verbose):
        pass
    return state.x
