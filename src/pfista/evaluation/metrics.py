"""
Metrics for evaluating sparse diagonal reconstructions.
"""

import numpy as np

from ..sparse_reconstruction.structured_operator import forward
from ..utils.grid import deserialize_index, square_side


def objective_value(x, y, H, w, lambda_reg):
    """
    Value of λ‖w ⊙ x‖₁ + ½‖y − A·x‖₂² at x.

    Parameters
    ----------
    x : ndarray of shape (N,)
    y : ndarray of shape (M²,)
    H : diagonal weighting of size M²
    w : ndarray of shape (N,) or None
        L1 weights (ones when None)
    lambda_reg : float

    Returns
    -------
    float
    """
    x = np.asarray(x).reshape(-1)
    residual = np.asarray(y).reshape(-1) - forward(x, H)
    if w is None:
        w = np.ones_like(x, dtype=np.float64)
    penalty = np.sum(np.abs(np.asarray(w).reshape(-1) * x))
    return float(0.5 * np.sum(np.abs(residual) ** 2) + lambda_reg * penalty)


def relative_error(x_true, x_hat):
    """‖x_hat − x_true‖₂ / ‖x_true‖₂ (absolute error when x_true is zero)."""
    x_true = np.asarray(x_true).reshape(-1)
    err = np.linalg.norm(np.asarray(x_hat).reshape(-1) - x_true)
    norm = np.linalg.norm(x_true)
    return float(err / norm) if norm > 0 else float(err)


def extract_support_locations(x, threshold=1e-10):
    """
    Grid coordinates of the active entries of a flattened square signal.

    Returns
    -------
    ndarray
        (K, 2) array of [row, col] coordinates, row-major order.
    """
    x = np.asarray(x).reshape(-1)
    side = square_side(x.size, name="length of x")
    active = np.flatnonzero(np.abs(x) > threshold)
    rows, cols = deserialize_index(active, side)
    return np.column_stack((rows, cols))


def support_metrics(x_true, x_hat, threshold=1e-10):
    """
    Compare the supports of the true and estimated signals.

    Parameters
    ----------
    x_true : ndarray
        True signal
    x_hat : ndarray
        Estimated signal
    threshold : float, optional
        Magnitude above which an entry counts as active. Default is 1e-10.

    Returns
    -------
    dict
        Dictionary containing:
        - 'n_true': number of active entries in x_true
        - 'n_est': number of active entries in x_hat
        - 'tp', 'fp', 'fn': true/false positives, false negatives
        - 'recall': tp / n_true
        - 'precision': tp / n_est
        - 'f1_score': harmonic mean of precision and recall
    """
    true_support = np.abs(np.asarray(x_true).reshape(-1)) > threshold
    est_support = np.abs(np.asarray(x_hat).reshape(-1)) > threshold

    tp = int(np.sum(true_support & est_support))
    metrics = {
        'n_true': int(np.sum(true_support)),
        'n_est': int(np.sum(est_support)),
        'tp': tp,
        'fp': int(np.sum(~true_support & est_support)),
        'fn': int(np.sum(true_support & ~est_support)),
        'recall': 0.0,
        'precision': 0.0,
        'f1_score': 0.0
    }

    if metrics['n_true'] > 0:
        metrics['recall'] = tp / metrics['n_true']
    if metrics['n_est'] > 0:
        metrics['precision'] = tp / metrics['n_est']
    if metrics['precision'] + metrics['recall'] > 0:
        metrics['f1_score'] = 2 * (metrics['precision'] * metrics['recall']) / (metrics['precision'] + metrics['recall'])

    return metrics
