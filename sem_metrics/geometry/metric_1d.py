from typing import Optional, Sequence

import numpy
from numpy.typing import NDArray

from ..common.element_parallel import for_each_element_chunk
from ..device import Device, default_device
from .cutoff_filter import apply_cutoff, cutoff_matrices, resolve_n_metric
from .views import face_view, num_elements, volume_view

__all__ = ["compute_metric_1d"]


def compute_metric_1d(
    x1: NDArray,
    J: NDArray,
    JcV: NDArray,
    xi1x1: NDArray,
    sJ: NDArray,
    n1: NDArray,
    D: NDArray,
    n_metric: Optional[Sequence[int]] = None,
    points: Optional[Sequence[NDArray]] = None,
    num_workers: int = 1,
    device: Device = default_device,
) -> None:
    """Compute the 1-D metric terms from the element grid array `x1`.

    All arrays are preallocated by the caller and written in place. The square differentiation matrix `D`
    must be consistent with the reference points used to create the grid.

    Parameters
    ----------
    x1 : NDArray
       Physical coordinates, shape (Nq, nelem) or flat. Filtered in place when `n_metric` truncates.
    J, JcV, xi1x1 : NDArray
       [out] Jacobian dx1/dxi1, its copy used as a speed scale, and the inverse dxi1/dx1. Same shape as `x1`.
    sJ, n1 : NDArray
       [out] Surface Jacobian (always 1) and unit outward normal, shape (1, 2, nelem) or flat. Face 0 is the
       first point of the element, face 1 the last.
    D : NDArray
       Differentiation matrix, (Nq, Nq)
    n_metric : Sequence[int] | None
       Highest polynomial degree kept in the metric terms (one entry). None: no filtering.
    points : Sequence[NDArray] | None
       Reference nodes (one entry), on which the filter is built. None: Gauss-Lobatto nodes.
    num_workers : int
       Number of threads sharing the elements
    """
    xp = device.xp
    Nq = (D.shape[0],)
    nelem = num_elements(J, Nq)

    x1 = volume_view(x1, Nq, nelem, "x1")
    J = volume_view(J, Nq, nelem, "J")
    JcV = volume_view(JcV, Nq, nelem, "JcV")
    xi1x1 = volume_view(xi1x1, Nq, nelem, "xi1x1")
    sJ = face_view(sJ, Nq, nelem, "sJ")
    n1 = face_view(n1, Nq, nelem, "n1")

    filters = cutoff_matrices(resolve_n_metric(n_metric, Nq), Nq, points, device)

    def work(e: slice):
        apply_cutoff([x1[:, e]], filters, device)

        with numpy.errstate(divide="ignore", invalid="ignore"):
            J[:, e] = D @ x1[:, e]
            JcV[:, e] = J[:, e]
            xi1x1[:, e] = 1.0 / J[:, e]

        n1[0, 0, e] = -xp.sign(J[0, e])
        n1[0, 1, e] = xp.sign(J[-1, e])
        sJ[:, :, e] = 1.0

    for_each_element_chunk(work, nelem, num_workers)
