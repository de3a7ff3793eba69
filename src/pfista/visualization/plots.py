"""Figures for sparse diagonal reconstructions.

This module contains functions to visualize:
- True and recovered diagonals side by side on the √N×√N grid
- The objective value per iteration
"""

import numpy as np
import matplotlib.pyplot as plt

from ..evaluation.metrics import extract_support_locations
from ..utils.grid import to_grid


def plot_diagonal_reconstruction(x_true, x_hat, N, save_path=None, threshold=1e-10):
    """
    Show the true and recovered diagonals as √N×√N images.

    Parameters
    ----------
    x_true : ndarray of shape (N,) or None
        Ground truth (omitted panel when None)
    x_hat : ndarray of shape (N,)
        Reconstruction
    N : int
        Signal length (perfect square)
    save_path : str, optional
        Path to save the figure
    threshold : float, optional
        Magnitude above which true entries are marked on the reconstruction

    Returns
    -------
    fig, axes : matplotlib figure and array of axes
    """
    n = int(np.sqrt(N))
    panels = [("Recovered", np.real(x_hat))]
    if x_true is not None:
        panels.insert(0, ("True", np.real(x_true)))

    fig, axes = plt.subplots(1, len(panels), figsize=(5 * len(panels), 4.5), squeeze=False)
    axes = axes[0]
    vmax = max(float(np.max(np.abs(values))) for _, values in panels) or 1.0

    for ax, (title, values) in zip(axes, panels):
        im = ax.imshow(to_grid(values, n), cmap='hot', vmin=0.0, vmax=vmax)
        ax.set_title(title)
        ax.set_xticks([])
        ax.set_yticks([])
        fig.colorbar(im, ax=ax, fraction=0.046, pad=0.04)

    if x_true is not None:
        support = extract_support_locations(x_true, threshold=threshold)
        axes[-1].scatter(support[:, 1], support[:, 0], s=60, facecolors='none',
                         edgecolors='cyan', linewidth=1.5, label='True support')
        axes[-1].legend(loc='upper right', fontsize=9)

    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=300, bbox_inches='tight')
        print(f"Saved figure to {save_path}")

    return fig, axes


def plot_objective_history(history, save_path=None):
    """
    Plot the objective value against the iteration number (log scale).

    Returns
    -------
    fig, ax : matplotlib figure and axis objects
    """
    fig, ax = plt.subplots(figsize=(7, 4))
    iterations = np.arange(1, len(history) + 1)
    ax.semilogy(iterations, history, linewidth=2)
    ax.set_xlabel('Iteration')
    ax.set_ylabel('Objective value')
    ax.grid(True, which='both', alpha=0.3)
    plt.tight_layout()

    if save_path:
        plt.savefig(save_path, dpi=300, bbox_inches='tight')
        print(f"Saved figure to {save_path}")

    return fig, ax
