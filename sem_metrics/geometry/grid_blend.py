"""Physical coordinates of the collocation points, by linear blending of the element vertices.

The vertex coordinates of every element are given in an array `e2c` of shape (d, 2^d, nelem). Vertices
are numbered in binary-counting order: bit m of the vertex number selects the low (0) or high (1) end of
reference direction m. For instance, in 2-D the vertices are (-1,-1), (1,-1), (-1,1), (1,1).
"""

import math
from typing import Sequence

from numpy.typing import NDArray

from ..device import Device, default_device
from .views import DimensionMismatchError, volume_view

__all__ = ["create_grid_1d", "create_grid_2d", "create_grid_3d"]


def _corner_weights(xi: Sequence[NDArray], xp) -> NDArray:
    """Blending weight of each vertex at each reference point, shape (2^d, Nq_1, ..., Nq_d).

    The weight of vertex k is the product over the directions m of (1 - xi_m) or (1 + xi_m), depending
    on bit m of k, divided by 2^d.
    """
    d = len(xi)
    weights = xp.empty((2**d,) + tuple(len(x) for x in xi))
    for k in range(2**d):
        w = xp.ones(())
        for m, x in enumerate(xi):
            factor = (1.0 + x) if (k >> m) & 1 else (1.0 - x)
            w = xp.multiply.outer(w, factor)
        weights[k] = w / 2**d
    return weights


def _blend(coords: Sequence[NDArray], e2c: NDArray, xi: Sequence[NDArray], device: Device) -> None:
    xp = device.xp
    d = len(xi)

    if e2c.ndim != 3 or e2c.shape[0] != d:
        raise DimensionMismatchError(
            f"Vertex coordinates of shape {e2c.shape} do not describe {d}-dimensional elements"
        )
    if e2c.shape[1] != 2**d:
        raise DimensionMismatchError(f"A {d}-dimensional element has {2**d} vertices, got {e2c.shape[1]}")

    nelem = e2c.shape[2]
    num_points = tuple(len(x) for x in xi)
    if any(c.size != math.prod(num_points) * nelem for c in coords):
        raise DimensionMismatchError(
            f"Coordinate arrays must hold {math.prod(num_points)} points for each of the {nelem} elements"
        )

    views = [volume_view(field, num_points, nelem, name=f"x{n + 1}") for n, field in enumerate(coords)]

    weights = _corner_weights([xp.asarray(x, dtype=float) for x in xi], xp)
    for n, x in enumerate(views):
        x[...] = xp.tensordot(weights, e2c[n], axes=(0, 0))


def create_grid_1d(x1: NDArray, e2c: NDArray, xi1: NDArray, device: Device = default_device) -> None:
    """Fill the coordinates `x1` of a 1-D grid by linear interpolation between the two element vertices.

    `x1` must hold `len(xi1) * nelem` values, either with shape (Nq, nelem) or as a flat buffer.
    """
    _blend((x1,), e2c, (xi1,), device)


def create_grid_2d(
    x1: NDArray, x2: NDArray, e2c: NDArray, xi1: NDArray, xi2: NDArray, device: Device = default_device
) -> None:
    """Fill the coordinates `x1` and `x2` of a 2-D tensor-product grid by bilinear blending of the four
    element corners.

    Both arrays must hold `len(xi1) * len(xi2) * nelem` values, with shape (Nq1, Nq2, nelem) or flat.
    """
    _blend((x1, x2), e2c, (xi1, xi2), device)


def create_grid_3d(
    x1: NDArray,
    x2: NDArray,
    x3: NDArray,
    e2c: NDArray,
    xi1: NDArray,
    xi2: NDArray,
    xi3: NDArray,
    device: Device = default_device,
) -> None:
    """Fill the coordinates `x1`, `x2` and `x3` of a 3-D tensor-product grid by trilinear blending of the
    eight element corners.

    All arrays must hold `len(xi1) * len(xi2) * len(xi3) * nelem` values, with shape (Nq1, Nq2, Nq3, nelem)
    or flat.
    """
    _blend((x1, x2, x3), e2c, (xi1, xi2, xi3), device)
