"""Utility functions for grid reshaping and index bookkeeping."""

from .grid import square_side, to_grid, deserialize_index

__all__ = [
    'square_side',
    'to_grid',
    'deserialize_index'
]
