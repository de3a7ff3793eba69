"""Helpers for moving between flattened vectors and square grids."""

import math

import numpy as np

from ..exceptions import ShapeError


def square_side(length, name="length"):
    """
    Return the side of the square grid holding ``length`` entries.

    Parameters
    ----------
    length : int
        Number of entries (must be a perfect square)
    name : str, optional
        Name of the quantity, used in the error message

    Returns
    -------
    int
        ``sqrt(length)``

    Raises
    ------
    ShapeError
        If ``length`` is not a positive perfect square

    Examples
    --------
    >>> square_side(16)
    4
    """
    length = int(length)
    if length <= 0:
        raise ShapeError(f"{name} must be a positive perfect square, got {length}")
    side = math.isqrt(length)
    if side * side != length:
        raise ShapeError(f"{name} must be a perfect square, got {length}")
    return side


def to_grid(x, side=None):
    """
    Reshape a flattened vector into a ``side x side`` grid.

    If ``side`` is omitted it is inferred from the vector length.
    """
    x = np.asarray(x)
    if side is None:
        side = square_side(x.size, name="vector length")
    elif x.size != side * side:
        raise ShapeError(f"Cannot reshape {x.size} entries into a {side}x{side} grid")
    return x.reshape(side, side)


def deserialize_index(index, side):
    """Map a row-major flat index back to ``(row, col)``."""
    return index // side, index % side
