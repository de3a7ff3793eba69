"""
Fast Sparse Diagonal Recovery from Partial Fourier Measurements

This package reconstructs a sparse, non-negative diagonal from noisy and
possibly undersampled Fourier-domain measurements with a FISTA-type solver
whose forward, adjoint and normal operators are all applied with 2-D FFTs.

Based on: "SPARCOM: Sparsity Based Super-Resolution Correlation Microscopy"
by Solomon et al., where the recovered diagonal is the emitter variance map.
"""

__version__ = "1.0.0"

from .config import SolverConfig, load_config_section, load_solver_config
from .exceptions import ConfigError, ShapeError
from .sparse_reconstruction import (
    compute_spectrum,
    reconstruct_sparse_diagonal,
    solve_pfista_diag
)
