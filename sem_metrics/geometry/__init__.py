from .brick import brick_vertices, warp_coordinates
from .cutoff_filter import apply_cutoff, cutoff_matrices, cutoff_matrix, resolve_n_metric
from .diagnostics import gcl_residual, normal_norm_error
from .grid_blend import create_grid_1d, create_grid_2d, create_grid_3d
from .metric import ElementMetric
from .metric_1d import compute_metric_1d
from .metric_2d import compute_metric_2d
from .metric_3d import compute_metric_3d
from .operators import contract_axis, diffmat, legvander, orthonormal_vander
from .quadrature import collocation_points, gauss_legendre, gauss_lobatto
from .reference_grid import ReferenceGrid, reference_grids
from .views import DimensionMismatchError, face_point_counts

__all__ = [
    "apply_cutoff",
    "brick_vertices",
    "collocation_points",
    "compute_metric_1d",
    "compute_metric_2d",
    "compute_metric_3d",
    "contract_axis",
    "create_grid_1d",
    "create_grid_2d",
    "create_grid_3d",
    "cutoff_matrices",
    "cutoff_matrix",
    "diffmat",
    "DimensionMismatchError",
    "ElementMetric",
    "face_point_counts",
    "gauss_legendre",
    "gauss_lobatto",
    "gcl_residual",
    "legvander",
    "normal_norm_error",
    "orthonormal_vander",
    "ReferenceGrid",
    "reference_grids",
    "resolve_n_metric",
    "warp_coordinates",
]
