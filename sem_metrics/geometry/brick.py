from typing import Sequence

import numpy
from numpy.typing import NDArray

from ..device import Device, default_device

__all__ = ["brick_vertices", "warp_coordinates"]


def brick_vertices(
    num_elements: Sequence[int],
    domain_min: Sequence[float],
    domain_max: Sequence[float],
    device: Device = default_device,
) -> NDArray:
    """Vertex coordinates of a structured brick of straight-sided elements.

    Elements are numbered lexicographically, the first direction varying fastest. The result has shape
    (d, 2^d, nelem) with vertices in binary-counting order, as expected by the grid blending routines.
    """
    xp = device.xp
    dim = len(num_elements)
    if not (len(domain_min) == len(domain_max) == dim):
        raise ValueError("The domain bounds must have one entry per direction")

    # Element interfaces along each direction
    itf = [
        numpy.linspace(lo, hi, num=n + 1) for lo, hi, n in zip(domain_min, domain_max, num_elements)
    ]

    nelem = int(numpy.prod(num_elements))
    e2c = numpy.empty((dim, 2**dim, nelem))

    # Index of every element along every direction, first direction fastest
    elem_index = numpy.unravel_index(numpy.arange(nelem), tuple(num_elements), order="F")

    for k in range(2**dim):
        for m in range(dim):
            high = (k >> m) & 1
            e2c[m, k, :] = itf[m][elem_index[m] + high]

    return xp.asarray(e2c)


def warp_coordinates(
    coords: NDArray,
    domain_min: Sequence[float],
    domain_max: Sequence[float],
    amplitude: float,
    device: Device = default_device,
) -> None:
    """Apply a smooth warp to the coordinates, in place, keeping the boundary of the domain fixed.

    Every coordinate is shifted by `amplitude * prod_m sin(pi * s_m)`, where s_m in [0, 1] is the scaled
    position along direction m. The displacement is the same for all coordinates, so it is computed once
    from the unwarped positions.

    `coords` has the coordinate index along its first axis.
    """
    if amplitude == 0.0:
        return

    xp = device.xp
    bump = xp.ones(coords.shape[1:])
    for m, (lo, hi) in enumerate(zip(domain_min, domain_max)):
        bump *= xp.sin(numpy.pi * (coords[m] - lo) / (hi - lo))

    for m in range(coords.shape[0]):
        coords[m] += amplitude * bump
