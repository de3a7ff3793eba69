"""
Spectral representation of the normal operator AᴴA.

With A = H·(Fp ⊗ Fp), the normal operator is

    AᴴA = (Fp ⊗ Fp)ᴴ · |H|² · (Fp ⊗ Fp)

which is block-circulant with circulant blocks (BCCB) on the n×n signal grid
when M = n, and is approximated by one otherwise. A BCCB matrix is fully
described by its first column c and is diagonalized by the 2-D DFT:

    AᴴA·z = ifft2( fft2(c) ⊙ fft2(z) )

Precomputation:
--------------
1. q  = DC coefficients of the adjoint applied to the columns of diag(|H|²)
       (this is |H|²·A e₀, the image of the unit impulse)
2. A1 = Aᴴ q with H = I  (first column of AᴴA)
3. S  = fft2(reshape(A1, n, n))

S depends only on H and N and is computed once per reconstruction. No 1/N
normalization is applied; scaling is absorbed by the Lipschitz constant.
"""

import numpy as np
import scipy.sparse as sp
from scipy import fft as sp_fft

from ..exceptions import ShapeError
from ..utils.grid import square_side, to_grid
from .structured_operator import adjoint, adjoint_first_element, diagonal_of


def compute_spectrum(H, N, large_scale=False, n_jobs=1):
    """
    Fourier-domain diagonal S of the BCCB approximation of AᴴA.

    Parameters
    ----------
    H : scipy.sparse matrix or ndarray of shape (M², M²), or ndarray (M²,)
        Diagonal measurement weighting
    N : int
        Length of the reconstructed vector (perfect square)
    large_scale, n_jobs : optional
        Column processing strategy, forwarded to :func:`adjoint`

    Returns
    -------
    S : ndarray of shape (√N, √N), complex

    Examples
    --------
    >>> S = compute_spectrum(np.ones(16), 16)
    >>> np.allclose(S, 1.0)
    True
    """
    n = square_side(N, name="N")
    h = diagonal_of(H)
    if h is None:
        raise ShapeError("compute_spectrum() needs H to determine the measurement grid size")

    H2 = sp.diags(np.abs(h) ** 2)

    # Step 1: M² x 1 impulse response
    q = np.conj(adjoint_first_element(H2, N))

    # Step 2: N x 1 first column of the normal operator
    A1 = adjoint(q, None, N, large_scale=large_scale, n_jobs=n_jobs)

    # Step 3: N eigenvalues
    return sp_fft.fft2(to_grid(A1, n))


def apply_normal_operator(z, S, N):
    """Compute AᴴA·z with two 2-D FFTs (complex result, length N)."""
    n = square_side(N, name="N")
    B = sp_fft.ifft2(S * sp_fft.fft2(to_grid(z, n)))
    return B.reshape(-1)


def compute_gradient(z, S, v, N):
    """
    Gradient of ½‖y − A z‖² at z: real(AᴴA·z − v).

    Parameters
    ----------
    z : ndarray of shape (N,)
        Current momentum point
    S : ndarray of shape (√N, √N)
        Spectrum from :func:`compute_spectrum`
    v : ndarray of shape (N,)
        Constant term Aᴴy from :func:`compute_constant_term`
    N : int
        Length of the reconstructed vector

    Returns
    -------
    ndarray of shape (N,), real

    Notes
    -----
    The signal is real, so only the real part of the gradient is kept. Any
    imaginary part of AᴴA·z is round-off, AᴴA being Hermitian.
    """
    return np.real(apply_normal_operator(z, S, N) - v)


def compute_constant_term(y, H, N, large_scale=False, n_jobs=1):
    """Compute v = Aᴴ·y, flattened to length N."""
    y = np.asarray(y).reshape(-1)
    return adjoint(y, H, N, large_scale=large_scale, n_jobs=n_jobs).reshape(-1)
