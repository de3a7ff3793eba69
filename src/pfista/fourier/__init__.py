"""Partial Fourier transforms on square grids."""

from .partial_fft import crop_or_pad, pfft2, partial_fourier_matrix

__all__ = [
    'crop_or_pad',
    'pfft2',
    'partial_fourier_matrix'
]
