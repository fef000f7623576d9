"""Element operators: differentiation matrices, Vandermonde matrices and tensor contractions along one axis."""

from types import ModuleType
from typing import Optional, Sequence, TypeVar

import numpy
from numpy.typing import NDArray
import sympy

__all__ = ["contract_axis", "diffmat", "lagrange_poly", "legvander", "orthonormal_vander"]

T = TypeVar("T", bound=numpy.generic)


def diffmat(points: Sequence) -> NDArray[numpy.float64]:
    """Create the differentiation matrix for the Lagrange basis of the given set of points.

    Entry `D[j, i]` is the derivative of the i-th Lagrange polynomial evaluated at point j, so that
    `D @ f` gives the derivative at the points of the polynomial interpolating `f`. When the points
    are given symbolically, the entries are computed exactly before being rounded to float.
    """
    M = len(points)
    D = numpy.zeros((M, M))

    x = sympy.symbols("x")
    for i in range(M):
        dL = sympy.diff(lagrange_poly(x, M - 1, i, points))
        for j in range(M):
            D[j, i] = dL.subs(x, points[j])

    return D


def lagrange_poly(x: sympy.Symbol, order: int, i: int, xi: Sequence):
    """Create a symbolic Lagrange polynomial basis function."""
    index = list(range(order + 1))
    index.pop(i)
    return sympy.prod([(x - xi[j]) / (xi[i] - xi[j]) for j in index])


def legvander(x: NDArray[numpy.float64], deg: int) -> NDArray[numpy.float64]:
    """
    NumPy's legvander, slightly modified to work with any array type.

    See: https://numpy.org/doc/stable/reference/generated/numpy.polynomial.legendre.legvander.html
    """

    dims = (deg + 1,) + x.shape
    v = numpy.empty_like(x, shape=dims)

    v[0] = 1
    if deg > 0:
        v[1] = x
        for i in range(2, deg + 1):
            v[i] = (v[i - 1] * x * (2 * i - 1) - v[i - 2] * (i - 1)) / i
    return numpy.moveaxis(v, 0, -1)


def orthonormal_vander(x: NDArray[numpy.float64], deg: int) -> NDArray[numpy.float64]:
    r"""Vandermonde matrix of the Legendre polynomials normalized on [-1, 1], \(\sqrt{(2j+1)/2}\,P_j(x_i)\)."""
    v = legvander(x, deg)
    scale = numpy.sqrt((2.0 * numpy.arange(deg + 1) + 1.0) / 2.0)
    return v * numpy.asarray(scale, like=v)


def contract_axis(
    mat: NDArray[T], field: NDArray[T], axis: int, xp: ModuleType = numpy, out: Optional[NDArray[T]] = None
) -> NDArray[T]:
    """Apply a square element matrix along a single tensor axis of `field`.

    Computes `out[.., i, ..] = sum_n mat[i, n] * field[.., n, ..]` where `i` and `n` run along `axis`.
    This is the point-wise tensor contraction used for differentiation and filtering in one reference
    direction at a time.

    Parameters
    ----------
    mat : NDArray
       Square matrix, with as many columns as `field` has entries along `axis`
    field : NDArray
       Array to be contracted. Any number of dimensions.
    axis : int
       Which axis of `field` the matrix acts on
    out : NDArray | None
       If given, the result is written in this array (which may be `field` itself)
    """
    result = xp.moveaxis(xp.tensordot(mat, field, axes=(1, axis)), 0, axis)
    if out is None:
        return result
    out[...] = result
    return out
