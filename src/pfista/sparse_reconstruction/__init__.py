"""
Sparse Diagonal Reconstruction from Structured Fourier Measurements.

This module implements a fast proximal-gradient (pFISTA) solver for recovering
a sparse, non-negative diagonal from undersampled Fourier-domain measurements,
exploiting the Kronecker structure of the measurement operator.

Mathematical Formulation:
------------------------
Given:
- M² complex measurements y ∈ ℂ^(M²) on an M×M frequency grid
- diagonal weighting H ∈ ℂ^(M²×M²)
- partial Fourier matrix Fp ∈ ℂ^(M×√N)
- forward operator A = H·(Fp ⊗ Fp)
- non-negative weights w ∈ ℝ^N

Find sparse x ∈ ℝ^N by solving:

    min  λ‖w ⊙ x‖₁ + ½‖y − A·x‖₂²
    x≥0  (optional)

Structure Exploited:
-------------------
1. A and Aᴴ act on √N×√N grids with 2-D FFTs (no Kronecker product is formed)
2. AᴴA is (approximately) BCCB, so it is diagonalized by the 2-D DFT; its
   spectrum S is computed once from |H|²
3. Each iteration costs two N-point 2-D FFTs and O(N) memory

Modules:
--------
- structured_operator: forward, adjoint and DC-coefficient adjoint of A
- spectral: spectrum of AᴴA, gradient, constant term Aᴴy
- sparse_solver: soft thresholding, momentum, the pFISTA loop
- reconstruction: main pipeline with diagnostics
- measurement_model: synthetic signals, weightings and measurements
"""

from .structured_operator import (
    forward,
    adjoint,
    adjoint_first_element,
    diagonal_of,
    diagonal_matrix
)

from .spectral import (
    compute_spectrum,
    compute_gradient,
    compute_constant_term,
    apply_normal_operator
)

from .sparse_solver import (
    IterationState,
    soft_threshold,
    project_nonnegative,
    nesterov_momentum,
    update_lambda,
    validate_problem,
    pfista_iterations,
    solve_pfista_diag
)

from .reconstruction import reconstruct_sparse_diagonal

from .measurement_model import (
    random_sparse_signal,
    sampling_weights,
    simulate_measurements
)

__all__ = [
    # Structured operator
    'forward',
    'adjoint',
    'adjoint_first_element',
    'diagonal_of',
    'diagonal_matrix',

    # Spectral normal operator
    'compute_spectrum',
    'compute_gradient',
    'compute_constant_term',
    'apply_normal_operator',

    # Solver
    'IterationState',
    'soft_threshold',
    'project_nonnegative',
    'nesterov_momentum',
    'update_lambda',
    'validate_problem',
    'pfista_iterations',
    'solve_pfista_diag',

    # Main reconstruction
    'reconstruct_sparse_diagonal',

    # Synthetic data
    'random_sparse_signal',
    'sampling_weights',
    'simulate_measurements',
]
