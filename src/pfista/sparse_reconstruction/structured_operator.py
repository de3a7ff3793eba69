"""
Structured measurement operator A = H·(Fp ⊗ Fp).

H is an M²×M² diagonal weighting and Fp an M×n partial Fourier matrix. Applying
A or Aᴴ to a column never forms the Kronecker product: the column is reshaped
into an n×n (or M×M) grid, transformed with a 2-D partial FFT, flattened and
weighted elementwise by the diagonal of H.

Multi-column inputs are transformed in one batched FFT call by default. With
``large_scale=True`` the columns are processed one at a time to bound memory,
optionally spread over joblib workers. Both paths give identical results.
"""

import numpy as np
import scipy.sparse as sp
from joblib import Parallel, delayed

from ..exceptions import ShapeError
from ..fourier.partial_fft import pfft2
from ..utils.grid import square_side


def diagonal_of(H, size=None):
    """
    Extract the diagonal of the weighting operator H.

    Parameters
    ----------
    H : scipy.sparse matrix, ndarray, scalar 1 or None
        Diagonal weighting. A sparse or dense square matrix must be diagonal;
        a 1-D array is taken as the diagonal itself; ``None`` or ``1`` is the
        identity.
    size : int, optional
        Expected dimension of H (checked when given)

    Returns
    -------
    ndarray or None
        Complex diagonal, or None for the identity

    Raises
    ------
    ShapeError
        If H is not square, not diagonal, or has the wrong size
    """
    if H is None or (np.isscalar(H) and H == 1):
        return None

    if sp.issparse(H):
        if H.shape[0] != H.shape[1]:
            raise ShapeError(f"H must be square, got shape {H.shape}")
        h = np.asarray(H.diagonal())
        off_diagonal = sp.csr_matrix(H) - sp.diags(h)
        if off_diagonal.count_nonzero() != 0:
            raise ShapeError("H must be a diagonal matrix")
    else:
        H = np.asarray(H)
        if H.ndim == 1:
            h = H
        elif H.ndim == 2:
            if H.shape[0] != H.shape[1]:
                raise ShapeError(f"H must be square, got shape {H.shape}")
            h = np.diag(H)
            if np.count_nonzero(H - np.diag(h)) != 0:
                raise ShapeError("H must be a diagonal matrix")
        else:
            raise ShapeError(f"H must be a matrix or a diagonal vector, got {H.ndim} dimensions")

    if size is not None and h.size != size:
        raise ShapeError(f"H has dimension {h.size}, expected {size}")

    return h.astype(np.complex128, copy=False)


def diagonal_matrix(h):
    """Sparse M²×M² diagonal weighting built from its diagonal entries."""
    return sp.diags(np.asarray(h).reshape(-1), format="csr")


def _as_columns(Y):
    """Return ``(Y2d, was_vector)`` with Y viewed as a dense 2-D column stack."""
    if sp.issparse(Y):
        Y = Y.toarray()
    Y = np.asarray(Y)
    if Y.ndim == 1:
        return Y[:, np.newaxis], True
    if Y.ndim != 2:
        raise ShapeError(f"Expected a vector or a matrix, got {Y.ndim} dimensions")
    return Y, False


def _transform_column(col, side_in, side_out, mode):
    """Transform a single flattened column."""
    return pfft2(col.reshape(side_in, side_in), side_out, mode).reshape(-1)


def _transform_columns(Y, side_in, side_out, mode, large_scale, n_jobs):
    """Reshape every column to a grid, apply pfft2, and stack flattened results."""
    n_cols = Y.shape[1]

    if not large_scale:
        grids = Y.T.reshape(n_cols, side_in, side_in)
        out = pfft2(grids, side_out, mode)
        return out.reshape(n_cols, side_out * side_out).T

    if n_jobs == 1:
        columns = [_transform_column(Y[:, ii], side_in, side_out, mode) for ii in range(n_cols)]
    else:
        columns = Parallel(n_jobs=n_jobs)(
            delayed(_transform_column)(Y[:, ii], side_in, side_out, mode)
            for ii in range(n_cols)
        )
    return np.column_stack(columns)


def forward(Y, H, large_scale=False, n_jobs=1):
    """
    Apply A = H·(Fp ⊗ Fp) to every column of Y.

    Parameters
    ----------
    Y : ndarray of shape (r², k) or (r²,)
        Input columns; r is the grid side of the signal domain
    H : scipy.sparse matrix or ndarray of shape (M², M²), or ndarray (M²,)
        Diagonal measurement weighting; its dimension fixes the output grid
        side M
    large_scale : bool, optional
        Transform columns one at a time instead of in a single batch
    n_jobs : int, optional
        joblib workers for the large-scale path, default: 1

    Returns
    -------
    ndarray of shape (M², k) or (M²,)
        Complex measurements

    Raises
    ------
    ShapeError
        If r² or M² is not a perfect square
    """
    Y, was_vector = _as_columns(Y)
    side_in = square_side(Y.shape[0], name="number of rows of Y")

    h = diagonal_of(H)
    if h is None:
        raise ShapeError("forward() needs H to determine the measurement grid size")
    side_out = square_side(h.size, name="dimension of H")

    X = _transform_columns(Y, side_in, side_out, 'fft', large_scale, n_jobs)
    X = h[:, np.newaxis] * X

    return X[:, 0] if was_vector else X


def adjoint(Y, H, N, large_scale=False, n_jobs=1):
    """
    Apply Aᴴ = (Fp ⊗ Fp)ᴴ·Hᴴ to every column of Y.

    Parameters
    ----------
    Y : ndarray of shape (M², k) or (M²,)
        Measurement-domain columns
    H : scipy.sparse matrix, ndarray or None
        Diagonal weighting of size M² (None for the identity)
    N : int
        Length of the reconstructed vector (perfect square)
    large_scale : bool, optional
        Transform columns one at a time instead of in a single batch
    n_jobs : int, optional
        joblib workers for the large-scale path, default: 1

    Returns
    -------
    ndarray of shape (N, k) or (N,)
        Complex result

    Raises
    ------
    ShapeError
        If the row count or N is not a perfect square, or H does not match
        the row count of Y
    """
    Y, was_vector = _as_columns(Y)
    side_in = square_side(Y.shape[0], name="number of rows of Y")
    side_out = square_side(N, name="N")

    h = diagonal_of(H, size=Y.shape[0])
    if h is not None:
        Y = np.conj(h)[:, np.newaxis] * Y

    X = _transform_columns(Y, side_in, side_out, 'fft_h', large_scale, n_jobs)

    return X[:, 0] if was_vector else X


def adjoint_first_element(Y, N):
    """
    Top-left element of the identity-weighted adjoint of every column of Y.

    The [0, 0] entry of the inverse unitary DFT of an r×r grid is its sum
    divided by r, and cropping or padding keeps that corner, so only this DC
    coefficient is evaluated. Sparse inputs stay sparse.

    Parameters
    ----------
    Y : ndarray or scipy.sparse matrix of shape (r², k), or ndarray (r²,)
    N : int
        Length of the reconstructed vector (perfect square)

    Returns
    -------
    ndarray of shape (k,)
        One complex value per column (a 1-D input gives shape (1,))
    """
    square_side(N, name="N")

    if sp.issparse(Y):
        side_in = square_side(Y.shape[0], name="number of rows of Y")
        sums = np.asarray(Y.sum(axis=0)).reshape(-1)
    else:
        Y, _ = _as_columns(Y)
        side_in = square_side(Y.shape[0], name="number of rows of Y")
        sums = Y.sum(axis=0)

    return sums.astype(np.complex128) / side_in
