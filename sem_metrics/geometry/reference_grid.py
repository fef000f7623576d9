from typing import Optional

from ..device import Device, default_device
from .operators import diffmat
from .quadrature import collocation_points


class ReferenceGrid:
    """Collocation points of one reference direction, with their quadrature weights and the matching
    differentiation matrix"""

    def __init__(self, num_solpts: int, node_type: str = "lobatto", device: Device = default_device) -> None:
        xp = device.xp

        points_sym, points, weights = collocation_points(num_solpts, node_type, xp)

        self.num_solpts = num_solpts
        self.node_type = node_type
        self.points_sym = points_sym
        self.points = points
        self.weights = weights

        # The matrix is built from the symbolic points, then rounded
        self.diff = device.array(diffmat(points_sym))

    @property
    def degree(self) -> int:
        return self.num_solpts - 1

    def __repr__(self) -> str:
        return f"ReferenceGrid({self.num_solpts}, '{self.node_type}')"


def reference_grids(num_solpts, node_type: str = "lobatto", device: Optional[Device] = None):
    """One reference grid per direction. Directions with the same number of points share their grid."""
    device = device or default_device
    cache = {}
    for n in num_solpts:
        if n not in cache:
            cache[n] = ReferenceGrid(n, node_type, device)
    return tuple(cache[n] for n in num_solpts)
