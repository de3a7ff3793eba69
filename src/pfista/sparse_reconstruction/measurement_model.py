"""
Synthetic measurements for the structured model y = H·(Fp ⊗ Fp)·x + noise.

Used by the demo script and the tests to generate sparse non-negative
diagonals, diagonal Fourier-domain weightings and noisy measurements.
"""

import numpy as np
from scipy import fft as sp_fft

from ..utils.grid import square_side
from .structured_operator import forward


def random_sparse_signal(N, n_active, rng=None, amplitude_range=(0.5, 1.5)):
    """
    Draw a non-negative sparse vector of length N.

    Parameters
    ----------
    N : int
        Signal length (perfect square)
    n_active : int
        Number of non-zero entries
    rng : numpy.random.Generator or int, optional
        Random generator or seed
    amplitude_range : tuple of float, optional
        Uniform range of the non-zero amplitudes, default: (0.5, 1.5)

    Returns
    -------
    x : ndarray of shape (N,)
    """
    square_side(N, name="N")
    if not 0 <= n_active <= N:
        raise ValueError(f"n_active must be between 0 and N={N}, got {n_active}")

    rng = np.random.default_rng(rng)
    low, high = amplitude_range
    if low < 0 or high < low:
        raise ValueError(f"Invalid amplitude range {amplitude_range}")

    x = np.zeros(N)
    support = rng.choice(N, size=n_active, replace=False)
    x[support] = rng.uniform(low, high, size=n_active)
    return x


def sampling_weights(M, kind='full', rng=None, fraction=0.5):
    """
    Diagonal of the Fourier-domain weighting H for an M×M measurement grid.

    Parameters
    ----------
    M : int
        Side of the measurement grid
    kind : {'full', 'random', 'gaussian'}, optional
        - 'full': all frequencies with unit weight
        - 'random': Bernoulli mask keeping about ``fraction`` of the
          frequencies (DC always kept)
        - 'gaussian': Gaussian low-pass transfer function whose standard
          deviation is ``fraction`` times the Nyquist frequency
    rng : numpy.random.Generator or int, optional
        Random generator or seed (used by 'random')
    fraction : float, optional
        Sampling fraction or relative bandwidth, in (0, 1]

    Returns
    -------
    h : ndarray of shape (M²,)
        Row-major diagonal of H
    """
    if M <= 0:
        raise ValueError(f"M must be positive, got {M}")
    if not 0 < fraction <= 1:
        raise ValueError(f"fraction must be in (0, 1], got {fraction}")

    if kind == 'full':
        return np.ones(M * M)
    elif kind == 'random':
        rng = np.random.default_rng(rng)
        mask = rng.random(M * M) < fraction
        mask[0] = True
        return mask.astype(np.float64)
    elif kind == 'gaussian':
        # frequencies in cycles/sample, Nyquist = 0.5
        k = sp_fft.fftfreq(M)
        kx, ky = np.meshgrid(k, k, indexing='ij')
        sigma = fraction * 0.5
        transfer = np.exp(-(kx ** 2 + ky ** 2) / (2.0 * sigma ** 2))
        return transfer.reshape(-1)
    else:
        raise ValueError(f"Unknown sampling kind '{kind}'. Choose 'full', 'random', or 'gaussian'")


def simulate_measurements(x, H, snr_db=None, rng=None):
    """
    Simulate y = A·x plus complex white Gaussian noise.

    Parameters
    ----------
    x : ndarray of shape (N,)
        True signal
    H : diagonal weighting of size M²
    snr_db : float, optional
        Signal-to-noise ratio in dB; noiseless when None
    rng : numpy.random.Generator or int, optional

    Returns
    -------
    y : ndarray of shape (M²,), complex
    """
    y = forward(np.asarray(x).reshape(-1), H)
    if snr_db is None:
        return y

    rng = np.random.default_rng(rng)
    signal_power = np.mean(np.abs(y) ** 2)
    noise_power = signal_power / (10 ** (snr_db / 10))
    noise = np.sqrt(noise_power / 2) * (rng.standard_normal(y.shape) + 1j * rng.standard_normal(y.shape))
    return y + noise
