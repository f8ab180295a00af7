"""
Shape and stride bookkeeping for `TensorStorage`.

`TensorShape` is an immutable, validated sequence of non-negative dimension
sizes. `TensorStride` is always derived from a shape with the row-major rule
(``stride[-1] == 1``, ``stride[i] == stride[i + 1] * shape[i + 1]``) and is
never mutated independently: a storage that changes shape recomputes its
stride.
"""

from __future__ import annotations

import operator
from functools import reduce
from typing import Iterable, Iterator, Sequence, Union

import numpy as np

from ...domain._errors import IndexOutOfRangeError, InvalidReshapeError

ShapeLike = Union["TensorShape", Sequence[int], int]


def _check_dim(d: object) -> int:
    if isinstance(d, (bool, np.bool_)) or not isinstance(d, (int, np.integer)):
        raise TypeError(f"Shape dimensions must be integers, got {d!r}")
    if d < 0:
        raise ValueError(f"Shape dimensions must be non-negative, got {d}")
    return int(d)


class TensorShape:
    """
    Immutable ordered sequence of dimension sizes.

    An empty shape denotes a scalar (rank 0, one element).

    Parameters
    ----------
    dims : Iterable[int] | int
        Dimension sizes. A bare int is treated as a one-dimensional shape.

    Raises
    ------
    TypeError
        If a dimension is not an integer.
    ValueError
        If a dimension is negative.
    """

    __slots__ = ("_dims",)

    def __init__(self, dims: Union[Iterable[int], int] = ()) -> None:
        if isinstance(dims, TensorShape):
            self._dims = dims._dims
            return
        if isinstance(dims, (int, np.integer)) and not isinstance(dims, bool):
            dims = (dims,)
        self._dims = tuple(_check_dim(d) for d in dims)

    @property
    def dims(self) -> tuple[int, ...]:
        return self._dims

    def rank(self) -> int:
        """
        Return the number of dimensions.
        """
        return len(self._dims)

    def total_size(self) -> int:
        """
        Return the number of elements (1 for the scalar shape).
        """
        return reduce(operator.mul, self._dims, 1)

    def __len__(self) -> int:
        return len(self._dims)

    def __iter__(self) -> Iterator[int]:
        return iter(self._dims)

    def __getitem__(self, index: int) -> int:
        return self._dims[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TensorShape):
            return self._dims == other._dims
        if isinstance(other, (tuple, list)):
            return self._dims == tuple(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._dims)

    def __str__(self) -> str:
        return str(self._dims)

    def __repr__(self) -> str:
        return f"TensorShape({self._dims})"

    def resolve(self, target: ShapeLike) -> "TensorShape":
        """
        Resolve a reshape target against this shape.

        A single ``-1`` entry is inferred from the remaining dimensions.

        Raises
        ------
        InvalidReshapeError
            If the target does not preserve `total_size`, or more than one
            dimension is ``-1``.
        """
        if isinstance(target, TensorShape):
            raw = target.dims
        elif isinstance(target, (int, np.integer)):
            raw = (int(target),)
        else:
            raw = tuple(target)

        if raw.count(-1) > 1:
            raise InvalidReshapeError(self._dims, raw)
        if -1 in raw:
            known = reduce(
                operator.mul, (_check_dim(d) for d in raw if d != -1), 1
            )
            if known == 0 or self.total_size() % known != 0:
                raise InvalidReshapeError(self._dims, raw)
            raw = tuple(self.total_size() // known if d == -1 else d for d in raw)

        try:
            new_shape = TensorShape(raw)
        except ValueError:
            raise InvalidReshapeError(self._dims, raw) from None
        if new_shape.total_size() != self.total_size():
            raise InvalidReshapeError(self._dims, new_shape.dims)
        return new_shape


class TensorStride:
    """
    Row-major strides derived from a `TensorShape`.
    """

    __slots__ = ("_strides", "_shape")

    def __init__(self, shape: TensorShape) -> None:
        self._shape = shape
        strides = [1] * shape.rank()
        for i in range(shape.rank() - 2, -1, -1):
            strides[i] = strides[i + 1] * shape[i + 1]
        self._strides = tuple(strides)

    @classmethod
    def from_shape(cls, shape: ShapeLike) -> "TensorStride":
        return cls(shape if isinstance(shape, TensorShape) else TensorShape(shape))

    @property
    def strides(self) -> tuple[int, ...]:
        return self._strides

    def __len__(self) -> int:
        return len(self._strides)

    def __getitem__(self, index: int) -> int:
        return self._strides[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TensorStride):
            return self._strides == other._strides
        if isinstance(other, (tuple, list)):
            return self._strides == tuple(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._strides)

    def __repr__(self) -> str:
        return f"TensorStride({self._strides})"

    def offset(self, indices: Sequence[int]) -> int:
        """
        Map a multi-index to its flat, row-major buffer offset.

        Raises
        ------
        IndexOutOfRangeError
            If the index count differs from the rank or any index falls
            outside ``[0, dim)``.
        """
        indices = tuple(indices)
        if len(indices) != len(self._strides):
            raise IndexOutOfRangeError(indices, self._shape.dims)
        offset = 0
        for idx, dim, stride in zip(indices, self._shape, self._strides):
            if isinstance(idx, bool) or not isinstance(idx, (int, np.integer)):
                raise TypeError(f"Indices must be integers, got {idx!r}")
            if idx < 0 or idx >= dim:
                raise IndexOutOfRangeError(indices, self._shape.dims)
            offset += int(idx) * stride
        return offset
