import math
from typing import Optional, Sequence

from numpy.typing import NDArray

from ..device import Device, default_device
from .grid_blend import create_grid_1d, create_grid_2d, create_grid_3d
from .metric_1d import compute_metric_1d
from .metric_2d import compute_metric_2d
from .metric_3d import compute_metric_3d
from .reference_grid import ReferenceGrid
from .views import face_point_counts


class ElementMetric:
    """Coordinates and metric terms of a set of elements sharing the same reference grids.

    All buffers are allocated once, here. `create_grid` and `build_metric` repopulate them in place, and can
    be called again whenever the geometry changes.

    Member arrays:
       * `coords[n]`: physical coordinate x_{n+1}, shape (Nq_1, ..., Nq_d, nelem)
       * `J`, `JcV`: Jacobian of the mapping and norm of the derivative along the last reference direction
       * `dxi_dx[i, k]`: derivative of reference coordinate xi_{i+1} with respect to x_{k+1}
       * `normals[k]`, `sJ`: component k+1 of the unit outward normal and surface Jacobian, shape
         (max(Nfp), 2d, nelem). Unused slots of the smaller faces hold NaN.
    """

    def __init__(self, grids: Sequence[ReferenceGrid], nelem: int, device: Device = default_device) -> None:
        xp = device.xp

        if not 1 <= len(grids) <= 3:
            raise ValueError(f"Elements must have 1, 2 or 3 dimensions, not {len(grids)}")

        self.grids = tuple(grids)
        self.dim = len(grids)
        self.num_points = tuple(g.num_solpts for g in grids)
        self.nelem = nelem
        self.device = device

        vol_shape = self.num_points + (nelem,)
        nface = 2 * self.dim
        max_nfp = 1 if self.dim == 1 else max(face_point_counts(self.num_points))
        face_shape = (max_nfp, nface, nelem)

        self.coords = xp.zeros((self.dim,) + vol_shape)
        self.J = xp.zeros(vol_shape)
        self.JcV = xp.zeros(vol_shape)
        self.dxi_dx = xp.zeros((self.dim, self.dim) + vol_shape)
        self.normals = xp.full((self.dim,) + face_shape, xp.nan)
        self.sJ = xp.full(face_shape, xp.nan)

    @property
    def num_points_per_element(self) -> int:
        return math.prod(self.num_points)

    @property
    def diffs(self):
        return tuple(g.diff for g in self.grids)

    def create_grid(self, e2c: NDArray) -> None:
        """Blend the element vertices `e2c` (shape (d, 2^d, nelem)) into the collocation point coordinates."""
        xi = [g.points for g in self.grids]
        x = self.coords
        if self.dim == 1:
            create_grid_1d(x[0], e2c, *xi, device=self.device)
        elif self.dim == 2:
            create_grid_2d(x[0], x[1], e2c, *xi, device=self.device)
        else:
            create_grid_3d(x[0], x[1], x[2], e2c, *xi, device=self.device)

    def build_metric(self, n_metric: Optional[Sequence[int]] = None, num_workers: int = 1) -> None:
        """Compute every metric term from the current coordinates.

        When `n_metric` truncates the polynomial degree in some direction, the coordinates are filtered (on the
        nodes of the reference grids) in place as a side effect.
        """
        x, m, n = self.coords, self.dxi_dx, self.normals
        points = [g.points for g in self.grids]
        options = dict(n_metric=n_metric, points=points, num_workers=num_workers, device=self.device)

        if self.dim == 1:
            compute_metric_1d(x[0], self.J, self.JcV, m[0, 0], self.sJ, n[0], *self.diffs, **options)
        elif self.dim == 2:
            compute_metric_2d(
                x[0], x[1], self.J, self.JcV, m[0, 0], m[1, 0], m[0, 1], m[1, 1], self.sJ, n[0], n[1],
                *self.diffs, **options,
            )
        else:
            compute_metric_3d(
                x[0], x[1], x[2], self.J, self.JcV,
                m[0, 0], m[1, 0], m[2, 0], m[0, 1], m[1, 1], m[2, 1], m[0, 2], m[1, 2], m[2, 2],
                self.sJ, n[0], n[1], n[2], *self.diffs, **options,
            )

    def scaled_metric(self) -> NDArray:
        """J * dxi_i/dx_k, the quantity on which the conservation law applies"""
        return self.J * self.dxi_dx
