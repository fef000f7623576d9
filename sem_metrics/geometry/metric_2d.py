from typing import Optional, Sequence

import numpy
from numpy.typing import NDArray

from ..common.element_parallel import for_each_element_chunk
from ..device import Device, default_device
from .cutoff_filter import apply_cutoff, cutoff_matrices, resolve_n_metric
from .operators import contract_axis
from .views import face_point_counts, face_points, face_view, num_elements, volume_view

__all__ = ["compute_metric_2d"]


def compute_metric_2d(
    x1: NDArray,
    x2: NDArray,
    J: NDArray,
    JcV: NDArray,
    xi1x1: NDArray,
    xi2x1: NDArray,
    xi1x2: NDArray,
    xi2x2: NDArray,
    sJ: NDArray,
    n1: NDArray,
    n2: NDArray,
    D1: NDArray,
    D2: NDArray,
    n_metric: Optional[Sequence[int]] = None,
    points: Optional[Sequence[NDArray]] = None,
    num_workers: int = 1,
    device: Device = default_device,
) -> None:
    """Compute the 2-D metric terms from the element grid arrays `x1` and `x2`.

    All arrays are preallocated by the caller and written in place. The square differentiation matrices
    `D1` and `D2` must be consistent with the reference points used along each direction of the grid.

    Parameters
    ----------
    x1, x2 : NDArray
       Physical coordinates, shape (Nq1, Nq2, nelem) or flat. Filtered in place when `n_metric` truncates.
    J, JcV : NDArray
       [out] Jacobian of the mapping and norm of dx/dxi2 (a speed scale along the second direction)
    xi1x1, xi2x1, xi1x2, xi2x2 : NDArray
       [out] Metric derivatives, `xiixj` being the derivative of reference coordinate i with respect to
       physical coordinate j
    sJ, n1, n2 : NDArray
       [out] Surface Jacobian and unit outward normal, shape (max(Nfp), 4, nelem) or flat. Faces 0 and 1
       are the low and high ends of direction 1, faces 2 and 3 those of direction 2. Direction i faces have
       Nfp_i points, slots beyond that are set to NaN.
    D1, D2 : NDArray
       Differentiation matrices, (Nq1, Nq1) and (Nq2, Nq2)
    n_metric : Sequence[int] | None
       Highest polynomial degree kept in the metric terms, per direction. None: no filtering.
    points : Sequence[NDArray] | None
       Reference nodes of each direction, on which the filters are built. None: Gauss-Lobatto nodes.
    num_workers : int
       Number of threads sharing the elements
    """
    xp = device.xp
    Nq = (D1.shape[0], D2.shape[0])
    Nfp = face_point_counts(Nq)
    nelem = num_elements(J, Nq)

    x1, x2, J, JcV, xi1x1, xi2x1, xi1x2, xi2x2 = [
        volume_view(a, Nq, nelem, name)
        for a, name in zip(
            (x1, x2, J, JcV, xi1x1, xi2x1, xi1x2, xi2x2),
            ("x1", "x2", "J", "JcV", "xi1x1", "xi2x1", "xi1x2", "xi2x2"),
        )
    ]
    sJ, n1, n2 = [face_view(a, Nq, nelem, name) for a, name in zip((sJ, n1, n2), ("sJ", "n1", "n2"))]

    filters = cutoff_matrices(resolve_n_metric(n_metric, Nq), Nq, points, device)

    def work(e: slice):
        apply_cutoff([x1[..., e], x2[..., e]], filters, device)

        x1_1 = contract_axis(D1, x1[..., e], 0, xp)
        x2_1 = contract_axis(D1, x2[..., e], 0, xp)
        x1_2 = contract_axis(D2, x1[..., e], 1, xp)
        x2_2 = contract_axis(D2, x2[..., e], 1, xp)

        with numpy.errstate(divide="ignore", invalid="ignore"):
            JcV[..., e] = xp.hypot(x1_2, x2_2)
            J[..., e] = x1_1 * x2_2 - x2_1 * x1_2
            xi1x1[..., e] = x2_2 / J[..., e]
            xi2x1[..., e] = -x2_1 / J[..., e]
            xi1x2[..., e] = -x1_2 / J[..., e]
            xi2x2[..., e] = x1_1 / J[..., e]

            # Faces orthogonal to direction 1 (index 0 and 1), then direction 2 (index 2 and 3)
            for direction, (xi_x1, xi_x2) in enumerate(((xi1x1, xi1x2), (xi2x1, xi2x2))):
                nfp = Nfp[direction]
                for side, (index, sign) in enumerate(((0, -1.0), (Nq[direction] - 1, 1.0))):
                    f = 2 * direction + side
                    Jf = face_points(J[..., e], index, direction)
                    n1[:nfp, f, e] = sign * Jf * face_points(xi_x1[..., e], index, direction)
                    n2[:nfp, f, e] = sign * Jf * face_points(xi_x2[..., e], index, direction)
                    n1[nfp:, f, e] = xp.nan
                    n2[nfp:, f, e] = xp.nan

            sJ[..., e] = xp.hypot(n1[..., e], n2[..., e])
            n1[..., e] /= sJ[..., e]
            n2[..., e] /= sJ[..., e]

    for_each_element_chunk(work, nelem, num_workers)
