"""Shape checking and zero-copy views of the caller's volume and face buffers.

Volume fields have shape (Nq_1, ..., Nq_d, nelem) and face fields (max(Nfp), 2d, nelem). Either can also
be passed as a flat buffer, which is then viewed in column-major order (point index fastest, element index
slowest). Views always alias the caller's memory: when this is not possible, the call fails rather than
silently writing into a copy.
"""

import math
from typing import Sequence, Tuple

import numpy
from numpy.typing import NDArray

__all__ = [
    "DimensionMismatchError",
    "face_point_counts",
    "face_points",
    "face_view",
    "num_elements",
    "volume_view",
]


class DimensionMismatchError(ValueError):
    """An input array does not have the extents implied by the dimension or the number of points"""


def num_elements(field: NDArray, num_points: Sequence[int]) -> int:
    """Number of elements held by a volume field with the given number of points per direction."""
    np_elem = math.prod(num_points)
    if field.size % np_elem != 0:
        raise DimensionMismatchError(
            f"Field of size {field.size} cannot hold a whole number of elements of {tuple(num_points)} points"
        )
    return field.size // np_elem


def face_point_counts(num_points: Sequence[int]) -> Tuple[int, ...]:
    """Number of points on the faces orthogonal to each direction (Nfp_i = prod(Nq) / Nq_i)."""
    np_elem = math.prod(num_points)
    return tuple(np_elem // n for n in num_points)


def _view(field: NDArray, shape: Tuple[int, ...], name: str) -> NDArray:
    if field.shape == shape:
        return field

    if field.ndim == 1 and field.size == math.prod(shape):
        view = field.reshape(shape, order="F")
        if not numpy.may_share_memory(view, field):
            raise DimensionMismatchError(f"Buffer '{name}' cannot be viewed as {shape} without a copy")
        return view

    raise DimensionMismatchError(f"Array '{name}' has shape {field.shape}, expected {shape} (or a flat buffer)")


def volume_view(field: NDArray, num_points: Sequence[int], nelem: int, name: str = "field") -> NDArray:
    """View of a volume field with shape (Nq_1, ..., Nq_d, nelem)."""
    return _view(field, tuple(num_points) + (nelem,), name)


def face_view(field: NDArray, num_points: Sequence[int], nelem: int, name: str = "field") -> NDArray:
    """View of a face field with shape (max(Nfp), 2d, nelem)."""
    if len(num_points) == 1:
        shape = (1, 2, nelem)
    else:
        shape = (max(face_point_counts(num_points)), 2 * len(num_points), nelem)
    return _view(field, shape, name)


def face_points(field: NDArray, index: int, axis: int) -> NDArray:
    """Values of a volume field on the face at `index` along `axis`, flattened to (Nfp, nelem).

    The face point number combines the remaining reference directions, the first one varying fastest.
    """
    face = field.take(index, axis=axis)
    return face.reshape((-1, face.shape[-1]), order="F")
