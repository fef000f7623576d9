from typing import Optional, Sequence

import numpy
from numpy.typing import NDArray

from ..common.element_parallel import for_each_element_chunk
from ..device import Device, default_device
from .cutoff_filter import apply_cutoff, cutoff_matrices, resolve_n_metric
from .operators import contract_axis
from .views import face_point_counts, face_points, face_view, num_elements, volume_view

__all__ = ["compute_metric_3d"]


def compute_metric_3d(
    x1: NDArray,
    x2: NDArray,
    x3: NDArray,
    J: NDArray,
    JcV: NDArray,
    xi1x1: NDArray,
    xi2x1: NDArray,
    xi3x1: NDArray,
    xi1x2: NDArray,
    xi2x2: NDArray,
    xi3x2: NDArray,
    xi1x3: NDArray,
    xi2x3: NDArray,
    xi3x3: NDArray,
    sJ: NDArray,
    n1: NDArray,
    n2: NDArray,
    n3: NDArray,
    D1: NDArray,
    D2: NDArray,
    D3: NDArray,
    n_metric: Optional[Sequence[int]] = None,
    points: Optional[Sequence[NDArray]] = None,
    num_workers: int = 1,
    device: Device = default_device,
) -> None:
    """Compute the 3-D metric terms from the element grid arrays `x1`, `x2` and `x3`.

    The curl invariant formulation of Kopriva (2006), equation 37, is used. Each scaled metric term
    J dxi_i/dx_k is computed as a discrete curl of the products x_a dx_b/dxi - x_b dx_a/dxi, so that
    sum_i d/dxi_i (J dxi_i/dx_k) = 0 holds exactly (to rounding) on the discrete grid. This is the discrete
    geometric conservation law that makes a uniform flow an exact solution on curved elements.

    Parameters
    ----------
    x1, x2, x3 : NDArray
       Physical coordinates, shape (Nq1, Nq2, Nq3, nelem) or flat. Filtered in place when `n_metric`
       truncates.
    J, JcV : NDArray
       [out] Jacobian of the mapping and norm of dx/dxi3 (a speed scale along the third direction)
    xi1x1, ..., xi3x3 : NDArray
       [out] Metric derivatives, `xiixj` being the derivative of reference coordinate i with respect to
       physical coordinate j
    sJ, n1, n2, n3 : NDArray
       [out] Surface Jacobian and unit outward normal, shape (max(Nfp), 6, nelem) or flat. Faces 2i and
       2i+1 are the low and high ends of direction i+1. On a face, point a + b * Nq_a combines the two
       in-face directions (the lower-numbered one varying fastest). Slots beyond a face's number of points
       are NaN.
    D1, D2, D3 : NDArray
       Differentiation matrices along each direction
    n_metric : Sequence[int] | None
       Highest polynomial degree kept in the metric terms, per direction. None: no filtering.
    points : Sequence[NDArray] | None
       Reference nodes of each direction, on which the filters are built. None: Gauss-Lobatto nodes.
    num_workers : int
       Number of threads sharing the elements

    Reference:
       Kopriva, D. A. (2006). Metric identities and the discontinuous spectral element method on curvilinear
       meshes. Journal of Scientific Computing, 26(3), 301-327.
    """
    xp = device.xp
    Nq = (D1.shape[0], D2.shape[0], D3.shape[0])
    Nfp = face_point_counts(Nq)
    nelem = num_elements(J, Nq)
    diff = (D1, D2, D3)

    volume_names = ["x1", "x2", "x3", "J", "JcV"] + [f"xi{i}x{k}" for k in (1, 2, 3) for i in (1, 2, 3)]
    volume_args = (x1, x2, x3, J, JcV, xi1x1, xi2x1, xi3x1, xi1x2, xi2x2, xi3x2, xi1x3, xi2x3, xi3x3)
    (x1, x2, x3, J, JcV, xi1x1, xi2x1, xi3x1, xi1x2, xi2x2, xi3x2, xi1x3, xi2x3, xi3x3) = [
        volume_view(a, Nq, nelem, name) for a, name in zip(volume_args, volume_names)
    ]
    sJ, n1, n2, n3 = [face_view(a, Nq, nelem, name) for a, name in zip((sJ, n1, n2, n3), ("sJ", "n1", "n2", "n3"))]

    # metric[k][i] is dxi_{i+1}/dx_{k+1}
    metric = ((xi1x1, xi2x1, xi3x1), (xi1x2, xi2x2, xi3x2), (xi1x3, xi2x3, xi3x3))

    filters = cutoff_matrices(resolve_n_metric(n_metric, Nq), Nq, points, device)

    def work(e: slice):
        coords = [x1[..., e], x2[..., e], x3[..., e]]
        apply_cutoff(coords, filters, device)

        # grad[a][r] is the derivative of x_{a+1} along reference direction r+1
        grad = [[contract_axis(diff[r], x, r, xp) for r in range(3)] for x in coords]

        JcV[..., e] = xp.sqrt(grad[0][2] ** 2 + grad[1][2] ** 2 + grad[2][2] ** 2)

        # This Jacobian is only used for its sign, to tell right-handed from left-handed elements
        J_naive = (
            grad[0][0] * (grad[1][1] * grad[2][2] - grad[2][1] * grad[1][2])
            + grad[1][0] * (grad[2][1] * grad[0][2] - grad[0][1] * grad[2][2])
            + grad[2][0] * (grad[0][1] * grad[1][2] - grad[1][1] * grad[0][2])
        )

        # aux[k][r] = x_b dx_c/dxi_r - x_c dx_b/dxi_r, with (k, b, c) a cyclic permutation of (1, 2, 3)
        aux = []
        for k in range(3):
            b, c = (k + 1) % 3, (k + 2) % 3
            aux.append([coords[b] * grad[c][r] - coords[c] * grad[b][r] for r in range(3)])

        # Filtering these products bounds the degree of J dxi_i/dx_k below
        apply_cutoff([JcV[..., e]] + [a for row in aux for a in row], filters, device)

        # Discrete curl: J dxi_i/dx_k = (D_{i+1} aux[k][i+2] - D_{i+2} aux[k][i+1]) / 2, indices cyclic
        for k in range(3):
            for i in range(3):
                p, q = (i + 1) % 3, (i + 2) % 3
                metric[k][i][..., e] = 0.5 * (
                    contract_axis(diff[p], aux[k][q], p, xp) - contract_axis(diff[q], aux[k][p], q, xp)
                )

        m = [[metric[k][i][..., e] for k in range(3)] for i in range(3)]
        det = (
            m[0][0] * (m[1][1] * m[2][2] - m[1][2] * m[2][1])
            - m[0][1] * (m[1][0] * m[2][2] - m[1][2] * m[2][0])
            + m[0][2] * (m[1][0] * m[2][1] - m[1][1] * m[2][0])
        )
        # det(J dxi/dx) = J^3 det(dxi/dx) = J^2
        J_new = xp.sqrt(xp.abs(det))
        J[..., e] = xp.where(J_naive > 0, J_new, -J_new)

        with numpy.errstate(divide="ignore", invalid="ignore"):
            for row in metric:
                for term in row:
                    term[..., e] /= J[..., e]

            for direction in range(3):
                nfp = Nfp[direction]
                for side, (index, sign) in enumerate(((0, -1.0), (Nq[direction] - 1, 1.0))):
                    f = 2 * direction + side
                    Jf = face_points(J[..., e], index, direction)
                    for n, k in ((n1, 0), (n2, 1), (n3, 2)):
                        n[:nfp, f, e] = sign * Jf * face_points(metric[k][direction][..., e], index, direction)
                        n[nfp:, f, e] = xp.nan

            sJ[..., e] = xp.sqrt(n1[..., e] ** 2 + n2[..., e] ** 2 + n3[..., e] ** 2)
            n1[..., e] /= sJ[..., e]
            n2[..., e] /= sJ[..., e]
            n3[..., e] /= sJ[..., e]

    for_each_element_chunk(work, nelem, num_workers)
