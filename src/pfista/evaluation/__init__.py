"""
Evaluation metrics for sparse diagonal reconstruction.
"""

from .metrics import objective_value, relative_error, extract_support_locations, support_metrics
