"""Visualization modules for reconstruction figures."""

from .plots import plot_diagonal_reconstruction, plot_objective_history

__all__ = [
    'plot_diagonal_reconstruction',
    'plot_objective_history'
]
