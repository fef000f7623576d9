from types import ModuleType
from typing import List, Tuple

import numpy
import numpy.polynomial.legendre as leg
from numpy.typing import NDArray
import scipy.special
import sympy

__all__ = ["gauss_legendre", "gauss_lobatto", "collocation_points"]

QuadratureRule = Tuple[List[sympy.Float], NDArray[numpy.float64], NDArray[numpy.float64]]

# Number of digits kept in symbolic points (equivalent to quadruple precision)
n_digits = 34

# Closed forms of the low-order Gauss-Legendre nodes
_legendre_sym = {
    1: ["0"],
    2: ["-1/sqrt(3)", "1/sqrt(3)"],
    3: ["-sqrt(3/5)", "0", "sqrt(3/5)"],
    4: ["-sqrt(2*sqrt(30)/35 + 3/7)", "-sqrt(3/7 - 2*sqrt(30)/35)", "sqrt(3/7 - 2*sqrt(30)/35)", "sqrt(2*sqrt(30)/35 + 3/7)"],
    5: ["-sqrt(2*sqrt(70)/63 + 5/9)", "-sqrt(5/9 - 2*sqrt(70)/63)", "0", "sqrt(5/9 - 2*sqrt(70)/63)", "sqrt(2*sqrt(70)/63 + 5/9)"],
}

# Closed forms of the low-order Gauss-Lobatto nodes
_lobatto_sym = {
    2: ["-1", "1"],
    3: ["-1", "0", "1"],
    4: ["-1", "-1/sqrt(5)", "1/sqrt(5)", "1"],
    5: ["-1", "-sqrt(3/7)", "0", "sqrt(3/7)", "1"],
}


def gauss_legendre(n: int, xp: ModuleType = numpy) -> QuadratureRule:
    """Computes the Gauss-Legendre quadrature points (symbolic and numerical) and weights.

    Gauss-Legendre nodes are the roots of the Legendre polynomial of degree `n`.

    Arguments:
    - `n`: Number of quadrature points
    - `xp`: [Optional] What python module to use for arrays. Default = numpy
    """
    if n < 1:
        raise ValueError(f"Invalid n = {n}")

    if n in _legendre_sym:
        points_sym = [sympy.sympify(p) for p in _legendre_sym[n]]
        points_num = numpy.array([p.evalf(n_digits, chop=True) for p in points_sym], dtype=float)
        # w_i = 2 / ((1 - x_i^2) P'_n(x_i)^2)
        dP = leg.Legendre.basis(n).deriv()(points_num)
        weights = 2.0 / ((1.0 - points_num**2) * dP**2)
    else:
        points_num, weights = scipy.special.roots_legendre(n)
        points_sym = [sympy.Float(p, n_digits) for p in points_num]

    return points_sym, xp.asarray(points_num), xp.asarray(weights)


def gauss_lobatto(n: int, xp: ModuleType = numpy) -> QuadratureRule:
    """Computes the Gauss-Lobatto-Legendre quadrature points (symbolic and numerical) and weights.

    The nodes are -1, 1 and the roots of P'_{n-1}, the derivative of the Legendre polynomial of degree n-1.
    A single "Lobatto" point degenerates to the midpoint rule.

    Arguments:
    - `n`: Number of quadrature points
    - `xp`: [Optional] What python module to use for arrays. Default = numpy
    """
    if n < 1:
        raise ValueError(f"Invalid n = {n}")

    if n == 1:
        return [sympy.sympify("0")], xp.asarray([0.0]), xp.asarray([2.0])

    if n in _lobatto_sym:
        points_sym = [sympy.sympify(p) for p in _lobatto_sym[n]]
        points_num = numpy.array([p.evalf(n_digits, chop=True) for p in points_sym], dtype=float)
    else:
        interior = numpy.sort(leg.Legendre.basis(n - 1).deriv().roots().real)
        points_num = numpy.concatenate(([-1.0], interior, [1.0]))
        # Symmetrize, the root finder does not keep the nodes exactly symmetric
        points_num = 0.5 * (points_num - points_num[::-1])
        if n % 2 == 1:
            points_num[n // 2] = 0.0
        points_sym = [sympy.Float(p, n_digits) for p in points_num]

    # w_i = 2 / (n (n-1) P_{n-1}(x_i)^2)
    weights = 2.0 / (n * (n - 1) * leg.Legendre.basis(n - 1)(points_num) ** 2)

    return points_sym, xp.asarray(points_num), xp.asarray(weights)


def collocation_points(n: int, node_type: str, xp: ModuleType = numpy) -> QuadratureRule:
    """Select the quadrature family by name ('lobatto' or 'legendre')."""
    if node_type == "lobatto":
        return gauss_lobatto(n, xp)
    if node_type == "legendre":
        return gauss_legendre(n, xp)
    raise ValueError(f"Unknown node type '{node_type}'")

