"""Metric terms of curvilinear high-order spectral elements."""

from .geometry import (
    compute_metric_1d,
    compute_metric_2d,
    compute_metric_3d,
    create_grid_1d,
    create_grid_2d,
    create_grid_3d,
    cutoff_matrix,
    DimensionMismatchError,
    ElementMetric,
    ReferenceGrid,
)

__version__ = "1.0.0"

__all__ = [
    "compute_metric_1d",
    "compute_metric_2d",
    "compute_metric_3d",
    "create_grid_1d",
    "create_grid_2d",
    "create_grid_3d",
    "cutoff_matrix",
    "DimensionMismatchError",
    "ElementMetric",
    "ReferenceGrid",
]
