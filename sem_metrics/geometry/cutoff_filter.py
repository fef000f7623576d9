import logging
from typing import Optional, Sequence, Tuple

from numpy.typing import NDArray

from ..device import Device, default_device
from .operators import contract_axis, orthonormal_vander
from .quadrature import gauss_lobatto
from .views import DimensionMismatchError

__all__ = ["apply_cutoff", "cutoff_matrices", "cutoff_matrix", "resolve_n_metric"]


def cutoff_matrix(
    N: int, N_max: int, points: Optional[NDArray] = None, device: Device = default_device
) -> NDArray:
    r"""Create a cutoff filter matrix that removes every polynomial mode above degree `N_max`.

    The filter matrix \(\mathcal{F}\) is defined as \(\mathcal{F} = \mathcal{V}\Sigma\mathcal{V}^{-1}\),
    where \(\mathcal{V}\) is the Vandermonde matrix of the orthonormal Legendre polynomials and the diagonal
    matrix \(\Sigma\) keeps modes \(0,\ldots,N_{max}\) and zeroes the others. The result is a projection
    (\(\mathcal{F}^2 = \mathcal{F}\)).

    Inputs:
       N : Polynomial degree of the element (the operator is (N+1) x (N+1)).
       N_max : Highest degree that is kept. When N_max >= N, the identity is returned.
       points : The N+1 nodes on which the filter acts. Gauss-Lobatto nodes by default.
       device : Where the matrix is created

    Outputs:
       F : The filter matrix.
    """
    xp = device.xp

    if N_max < 0:
        raise ValueError(f"Cannot keep a negative number of modes (N_max = {N_max})")

    if points is not None and len(points) != N + 1:
        raise DimensionMismatchError(f"A filter of degree {N} needs {N + 1} points, got {len(points)}")

    # A single point only carries the constant mode, so N = 0 always ends here
    if N_max >= N:
        return xp.identity(N + 1)

    if points is None:
        _, points, _ = gauss_lobatto(N + 1, xp)

    V = orthonormal_vander(xp.asarray(points, dtype=float), N)

    sigma = xp.ones(N + 1)
    sigma[N_max + 1 :] = 0.0

    return V @ xp.diag(sigma) @ xp.linalg.inv(V)


def resolve_n_metric(n_metric: Optional[Sequence[int]], num_points: Sequence[int]) -> Tuple[int, ...]:
    """Check the per-direction metric degrees against the number of points.

    `None` means no filtering. A degree larger than Nq - 1 has no meaning and is clamped to Nq - 1 (which
    disables the filter in that direction).
    """
    max_degree = tuple(n - 1 for n in num_points)
    if n_metric is None:
        return max_degree

    n_metric = tuple(int(n) for n in n_metric)
    if len(n_metric) != len(num_points):
        raise DimensionMismatchError(
            f"Got {len(n_metric)} metric degrees for a {len(num_points)}-dimensional element"
        )

    resolved = []
    for direction, (n, n_max) in enumerate(zip(n_metric, max_degree)):
        if n < 0:
            raise ValueError(f"Metric degree in direction {direction + 1} must be non-negative, got {n}")
        if n > n_max:
            logging.warning(
                f"Metric degree {n} in direction {direction + 1} is larger than the element degree {n_max}, "
                f"using {n_max} instead"
            )
            n = n_max
        resolved.append(n)

    return tuple(resolved)


def cutoff_matrices(
    n_metric: Sequence[int],
    num_points: Sequence[int],
    points: Optional[Sequence[Optional[NDArray]]] = None,
    device: Device = default_device,
) -> Tuple[Optional[NDArray], ...]:
    """One filter per direction, or None in the directions where nothing is truncated.

    `points` gives the nodes of each direction, so that the filter is a projection on the grid it is applied
    to. Gauss-Lobatto nodes are used where it is None.
    """
    if points is None:
        points = [None] * len(num_points)
    elif len(points) != len(num_points):
        raise DimensionMismatchError(f"Got nodes for {len(points)} directions, expected {len(num_points)}")

    return tuple(
        cutoff_matrix(n - 1, m, points=p, device=device) if m < n - 1 else None
        for n, m, p in zip(num_points, n_metric, points)
    )


def apply_cutoff(fields: Sequence[NDArray], filters: Sequence[Optional[NDArray]], device: Device = default_device):
    """Filter each field in place, successively along every direction that has a filter.

    The fields are volume fields (the element index, if any, comes after the reference directions).
    """
    xp = device.xp
    for axis, fM in enumerate(filters):
        if fM is None:
            continue
        for field in fields:
            contract_axis(fM, field, axis, xp, out=field)
