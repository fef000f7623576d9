"""Checks on computed metric terms: discrete conservation law and normal vector length."""

from typing import Sequence

from numpy.typing import NDArray

from ..device import Device, default_device
from .operators import contract_axis

__all__ = ["gcl_residual", "normal_norm_error"]


def gcl_residual(J: NDArray, dxi_dx: NDArray, diffs: Sequence[NDArray], device: Device = default_device) -> NDArray:
    """Discrete geometric conservation law residual, sum_i d/dxi_i (J dxi_i/dx_k), for every k.

    Parameters
    ----------
    J : NDArray
       Jacobian, shape (Nq_1, ..., Nq_d, nelem)
    dxi_dx : NDArray
       Metric derivatives, shape (d, d, Nq_1, ..., Nq_d, nelem), `dxi_dx[i, k]` = dxi_{i+1}/dx_{k+1}
    diffs : Sequence[NDArray]
       Differentiation matrix of each direction

    Returns
    -------
    NDArray of shape (d, Nq_1, ..., Nq_d, nelem). Zero (to rounding) for metric terms that satisfy the law.
    """
    xp = device.xp
    dim = len(diffs)
    if dxi_dx.shape[:2] != (dim, dim) or dxi_dx.shape[2:] != J.shape:
        raise ValueError(f"Metric of shape {dxi_dx.shape} does not match a Jacobian of shape {J.shape}")

    residual = xp.zeros((dim,) + J.shape)
    for k in range(dim):
        for i in range(dim):
            residual[k] += contract_axis(diffs[i], J * dxi_dx[i, k], i, xp)
    return residual


def normal_norm_error(normals: NDArray, device: Device = default_device) -> float:
    """Largest deviation from 1 of the length of the normal vectors, ignoring the NaN (unused) slots.

    `normals` has the normal components along its first axis.
    """
    xp = device.xp
    length = xp.sqrt(xp.sum(normals**2, axis=0))
    valid = ~xp.isnan(length)
    if not bool(valid.any()):
        return 0.0
    return float(xp.max(xp.abs(length[valid] - 1.0)))
