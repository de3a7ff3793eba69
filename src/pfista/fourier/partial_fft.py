"""
Partial two-dimensional Fourier transform.

The partial Fourier matrix Fp maps an n-point signal onto an m-point spectrum by
zero-padding (m > n) or cropping (m < n) the signal before a unitary m-point
DFT. On square grids X the 2-D transform is

    Fp · X · Fpᵀ = vec⁻¹((Fp ⊗ Fp) · vec(X))

and its adjoint is the unitary inverse DFT followed by the transposed
pad/crop, i.e. cropping or zero-padding back to the signal size.

Both modes operate on the last two axes, so a stack of grids of shape
(k, r, r) is transformed in a single call.
"""

import numpy as np
from scipy import fft as sp_fft


def crop_or_pad(grid, side):
    """
    Crop or zero-pad the trailing two axes of ``grid`` to ``side x side``.

    The top-left corner is kept in both cases.

    Parameters
    ----------
    grid : ndarray of shape (..., r, r)
        Input grid(s)
    side : int
        Target side length

    Returns
    -------
    ndarray of shape (..., side, side)
    """
    grid = np.asarray(grid)
    r = grid.shape[-1]
    if r == side:
        return grid
    out = np.zeros(grid.shape[:-2] + (side, side), dtype=grid.dtype)
    k = min(r, side)
    out[..., :k, :k] = grid[..., :k, :k]
    return out


def pfft2(grid, side, mode='fft', workers=None):
    """
    Apply the partial 2-D Fourier transform or its adjoint.

    Parameters
    ----------
    grid : ndarray of shape (..., r, r)
        Input grid(s)
    side : int
        Side length of the output grid
    mode : {'fft', 'fft_h'}, optional
        - 'fft': pad/crop to ``side`` then unitary 2-D DFT (DFT / side)
        - 'fft_h': unitary inverse 2-D DFT of the r x r input, then crop/pad
          to ``side`` (exact adjoint of 'fft' with target r)
    workers : int, optional
        Worker threads passed to ``scipy.fft``

    Returns
    -------
    ndarray of shape (..., side, side), complex

    Raises
    ------
    ValueError
        If ``mode`` is not recognised

    Examples
    --------
    >>> X = np.ones((2, 2))
    >>> np.round(pfft2(X, 2, 'fft'), 12)
    array([[2.+0.j, 0.+0.j],
           [0.+0.j, 0.+0.j]])
    """
    grid = np.asarray(grid)
    if grid.ndim < 2 or grid.shape[-1] != grid.shape[-2]:
        raise ValueError(f"pfft2 expects square grids on the last two axes, got shape {grid.shape}")

    if mode == 'fft':
        # s= pads or truncates the input before transforming
        return sp_fft.fft2(grid, s=(side, side), axes=(-2, -1), norm='ortho', workers=workers)
    elif mode == 'fft_h':
        back = sp_fft.ifft2(grid, axes=(-2, -1), norm='ortho', workers=workers)
        return crop_or_pad(back, side)
    else:
        raise ValueError(f"Unknown mode '{mode}'. Choose 'fft' or 'fft_h'")


def partial_fourier_matrix(m, n):
    """
    Dense m x n partial Fourier matrix matching ``pfft2(..., m, 'fft')``.

    Only intended for small problems (verification and tests).
    """
    k = np.arange(m)[:, np.newaxis]
    a = np.arange(n)[np.newaxis, :]
    Fp = np.exp(-2j * np.pi * k * a / m) / np.sqrt(m)
    if n > m:
        # cropped input samples never reach the spectrum
        Fp[:, m:] = 0.0
    return Fp
