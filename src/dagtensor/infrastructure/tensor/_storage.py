"""
Flat-buffer tensor storage.

`TensorStorage` owns a flat, contiguous buffer of ``shape.total_size()``
elements together with its `TensorShape` and row-major `TensorStride`. It
provides indexed access and the numeric primitives (element-wise arithmetic,
reduction, matmul, reshape, transpose) that graph operations are built on.

Storage carries no autograd state: the requires-grad flag, the producing
operation and the accumulated gradient all live on the `ComputeNode` that
wraps a storage.

Design notes
------------
- Arithmetic is delegated to the kernel backend returned by `get_backend` for
  the storage's device; only the CPU target is executable.
- Binary element-wise operations require identical shapes (no implicit
  broadcasting). A Python scalar operand is lifted to a full tensor of the
  same shape.
- Division fails with `DivisionByZeroError` if any divisor element is
  exactly zero.
- `transpose` and `reshape` return deep copies, never views. `reshape_`
  changes the structure in place and leaves the buffer untouched.
- Results keep the dtype of the left operand.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence, Union

import numpy as np

from ...domain._errors import (
    DivisionByZeroError,
    ShapeMismatchError,
)
from ...domain.device._device import Device, as_device
from .._config import get_default_device, get_default_dtype, validate_dtype
from ..ops.kernels_cpu import get_backend
from ._shape import ShapeLike, TensorShape, TensorStride

Number = Union[int, float]
_SCALAR_TYPES = (int, float, np.number)


def _infer_nested_shape(data: Any) -> tuple[int, ...]:
    """
    Infer the shape of (possibly nested) list/tuple data.

    Raises
    ------
    ValueError
        If sibling sub-lists have different shapes (ragged data).
    TypeError
        If a leaf is not a number.
    """
    if isinstance(data, (list, tuple)):
        if len(data) == 0:
            return (0,)
        child_shapes = [_infer_nested_shape(item) for item in data]
        first = child_shapes[0]
        for s in child_shapes[1:]:
            if s != first:
                raise ValueError(
                    f"Ragged nested data: sub-shapes {first} and {s} differ"
                )
        return (len(data),) + first
    if isinstance(data, bool) or not isinstance(data, _SCALAR_TYPES):
        raise TypeError(f"Nested data leaves must be numbers, got {data!r}")
    return ()


class TensorStorage:
    """
    Shape, stride and a flat buffer of numeric elements.

    Parameters
    ----------
    shape : ShapeLike
        Tensor shape. ``()`` is a scalar.
    flat_data : array-like, optional
        Row-major element values. Must contain exactly
        ``shape.total_size()`` elements. Zero-initialized when omitted.
    dtype : optional
        Element dtype. Defaults to the configured default dtype.
    device : Device | str, optional
        Compute target. Defaults to the configured default device.

    Raises
    ------
    ValueError
        If `flat_data` has the wrong number of elements.
    UnsupportedOperationError
        If `device` is not the default compute target.
    """

    __slots__ = ("_shape", "_stride", "_data", "_device", "_backend")

    def __init__(
        self,
        shape: ShapeLike = (),
        flat_data: Optional[Any] = None,
        *,
        dtype: Any = None,
        device: Optional[Union[Device, str]] = None,
    ) -> None:
        self._shape = TensorShape(shape)
        self._stride = TensorStride(self._shape)
        self._device = get_default_device() if device is None else as_device(device)
        self._backend = get_backend(self._device)
        dt = get_default_dtype() if dtype is None else validate_dtype(dtype)

        n = self._shape.total_size()
        if flat_data is None:
            self._data = self._backend.allocate(n, dt)
        else:
            buf = self._backend.from_host(flat_data, dt)
            if buf.size != n:
                raise ValueError(
                    f"Expected {n} elements for shape {self._shape}, got {buf.size}"
                )
            self._data = buf

    # ----------------------------
    # Constructors
    # ----------------------------
    @classmethod
    def _wrap(
        cls, shape: TensorShape, buf: Any, device: Device
    ) -> "TensorStorage":
        """
        Build a storage around an existing backend buffer (no copy).
        """
        obj = cls.__new__(cls)
        obj._shape = shape
        obj._stride = TensorStride(shape)
        obj._device = device
        obj._backend = get_backend(device)
        obj._data = buf
        return obj

    @classmethod
    def scalar(
        cls, value: Number, *, dtype: Any = None, device=None
    ) -> "TensorStorage":
        """
        Create a rank-0 storage holding `value`.
        """
        return cls((), [value], dtype=dtype, device=device)

    @classmethod
    def from_nested(
        cls, data: Any, *, dtype: Any = None, device=None
    ) -> "TensorStorage":
        """
        Create a storage from nested lists/tuples of numbers.

        A bare number produces a scalar storage.

        Raises
        ------
        ValueError
            If the nesting is ragged.
        TypeError
            If a leaf is not a number.
        """
        shape = _infer_nested_shape(data)
        flat = np.asarray(data).reshape(-1) if shape else [data]
        return cls(shape, flat, dtype=dtype, device=device)

    @classmethod
    def from_numpy(cls, arr: Any, *, dtype: Any = None, device=None) -> "TensorStorage":
        """
        Copy a NumPy array (or array-like) into a new storage.

        The array dtype is kept when it is numeric and no `dtype` is given.
        """
        arr = np.asarray(arr)
        if dtype is None and arr.dtype != np.bool_ and np.issubdtype(
            arr.dtype, np.number
        ):
            dtype = arr.dtype
        return cls(arr.shape, arr.reshape(-1), dtype=dtype, device=device)

    @classmethod
    def full(
        cls, shape: ShapeLike, value: Number, *, dtype: Any = None, device=None
    ) -> "TensorStorage":
        out = cls(shape, dtype=dtype, device=device)
        out.fill(value)
        return out

    @classmethod
    def zeros(cls, shape: ShapeLike, *, dtype: Any = None, device=None) -> "TensorStorage":
        return cls(shape, dtype=dtype, device=device)

    @classmethod
    def ones(cls, shape: ShapeLike, *, dtype: Any = None, device=None) -> "TensorStorage":
        return cls.full(shape, 1, dtype=dtype, device=device)

    def zeros_like(self) -> "TensorStorage":
        return TensorStorage(self._shape, dtype=self.dtype, device=self._device)

    def ones_like(self) -> "TensorStorage":
        return TensorStorage.full(self._shape, 1, dtype=self.dtype, device=self._device)

    # ----------------------------
    # Properties
    # ----------------------------
    @property
    def shape(self) -> TensorShape:
        return self._shape

    @property
    def stride(self) -> TensorStride:
        return self._stride

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    @property
    def device(self) -> Device:
        return self._device

    @property
    def buffer(self) -> Any:
        """
        Return the flat backend buffer (shared, not copied).
        """
        return self._data

    def rank(self) -> int:
        return self._shape.rank()

    def total_size(self) -> int:
        return self._shape.total_size()

    def __len__(self) -> int:
        if self._shape.rank() == 0:
            raise TypeError("len() of a scalar storage")
        return self._shape[0]

    def __repr__(self) -> str:
        return (
            f"TensorStorage(shape={self._shape.dims}, dtype={self.dtype}, "
            f"data={self.tolist()})"
        )

    # ----------------------------
    # Element access
    # ----------------------------
    @staticmethod
    def _normalize_indices(indices: tuple) -> tuple:
        if len(indices) == 1 and isinstance(indices[0], (tuple, list)):
            return tuple(indices[0])
        return indices

    def at(self, *indices: int) -> Any:
        """
        Return the element at a multi-index.

        Accepts either ``at(i, j)`` or ``at((i, j))``; a scalar storage is
        read with ``at()``.

        Raises
        ------
        IndexOutOfRangeError
            If the index count differs from the rank or an index is out of
            range.
        """
        offset = self._stride.offset(self._normalize_indices(indices))
        return self._backend.get(self._data, offset)

    def set(self, indices: Sequence[int], value: Number) -> None:
        """
        Overwrite the element at `indices` with `value`.

        Raises
        ------
        IndexOutOfRangeError
            If the index count differs from the rank or an index is out of
            range.
        """
        if isinstance(indices, (int, np.integer)):
            indices = (indices,)
        offset = self._stride.offset(tuple(indices))
        self._backend.set(self._data, offset, value)

    def item(self) -> Any:
        """
        Return the single element of a one-element storage as a Python number.

        Raises
        ------
        ValueError
            If the storage does not hold exactly one element.
        """
        if self.total_size() != 1:
            raise ValueError(
                f"item() requires exactly one element, got shape {self._shape}"
            )
        return self._backend.get(self._data, 0)

    # ----------------------------
    # Host interop
    # ----------------------------
    def to_numpy(self) -> np.ndarray:
        """
        Return a shaped host copy of the values.
        """
        return self._backend.to_host(self._data).reshape(self._shape.dims)

    def tolist(self) -> Any:
        return self.to_numpy().tolist()

    def copy(self) -> "TensorStorage":
        """
        Return a deep copy with the same shape, dtype and device.
        """
        return TensorStorage._wrap(
            self._shape, self._backend.copy(self._data), self._device
        )

    def allclose(
        self, other: "TensorStorage", rtol: float = 1e-5, atol: float = 1e-8
    ) -> bool:
        """
        Element-wise closeness check for storages of identical shape.
        """
        if self._shape != other._shape:
            return False
        return self._backend.allclose(self._data, other._data, rtol, atol)

    # ----------------------------
    # Internal helpers
    # ----------------------------
    def _lift(self, other: Union["TensorStorage", Number]) -> "TensorStorage":
        if isinstance(other, TensorStorage):
            return other
        if isinstance(other, _SCALAR_TYPES) and not isinstance(other, bool):
            return TensorStorage.full(
                self._shape, other, dtype=self.dtype, device=self._device
            )
        raise TypeError(f"Unsupported operand type: {type(other)!r}")

    def _check_same_shape(self, other: "TensorStorage", op: str) -> None:
        if self._shape != other._shape:
            raise ShapeMismatchError(op, self._shape.dims, other._shape.dims)

    def _binary(self, other, op: str) -> "TensorStorage":
        other = self._lift(other)
        self._check_same_shape(other, op)
        if op == "div" and self._backend.any_zero(other._data):
            raise DivisionByZeroError(op)
        kernel = getattr(self._backend, op)
        return TensorStorage._wrap(
            self._shape, kernel(self._data, other._data), self._device
        )

    def _inplace(self, other, op: str) -> "TensorStorage":
        result = self._binary(other, op)
        self._backend.copy_into(self._data, result._data)
        return self

    def _unary(self, kernel_name: str) -> "TensorStorage":
        kernel = getattr(self._backend, kernel_name)
        return TensorStorage._wrap(self._shape, kernel(self._data), self._device)

    # ----------------------------
    # Element-wise arithmetic
    # ----------------------------
    def __add__(self, other) -> "TensorStorage":
        return self._binary(other, "add")

    def __radd__(self, other: Number) -> "TensorStorage":
        return self._lift(other)._binary(self, "add")

    def __sub__(self, other) -> "TensorStorage":
        return self._binary(other, "sub")

    def __rsub__(self, other: Number) -> "TensorStorage":
        return self._lift(other)._binary(self, "sub")

    def __mul__(self, other) -> "TensorStorage":
        return self._binary(other, "mul")

    def __rmul__(self, other: Number) -> "TensorStorage":
        return self._lift(other)._binary(self, "mul")

    def __truediv__(self, other) -> "TensorStorage":
        return self._binary(other, "div")

    def __rtruediv__(self, other: Number) -> "TensorStorage":
        return self._lift(other)._binary(self, "div")

    def __neg__(self) -> "TensorStorage":
        return self._unary("neg")

    def __iadd__(self, other) -> "TensorStorage":
        return self._inplace(other, "add")

    def __isub__(self, other) -> "TensorStorage":
        return self._inplace(other, "sub")

    def __imul__(self, other) -> "TensorStorage":
        return self._inplace(other, "mul")

    def __itruediv__(self, other) -> "TensorStorage":
        return self._inplace(other, "div")

    def axpy(self, alpha: Number, x: "TensorStorage") -> None:
        """
        In-place ``self += alpha * x``.

        Raises
        ------
        ShapeMismatchError
            If `x` does not have this storage's shape.
        """
        self._check_same_shape(x, "axpy")
        self._backend.axpy(alpha, x._data, self._data)

    # ----------------------------
    # Activations
    # ----------------------------
    def relu(self) -> "TensorStorage":
        return self._unary("relu")

    def relu_mask(self) -> "TensorStorage":
        """
        Return 1 where the element is strictly positive and 0 elsewhere.
        """
        return self._unary("relu_mask")

    def sigmoid(self) -> "TensorStorage":
        return self._unary("sigmoid")

    # ----------------------------
    # Linear algebra
    # ----------------------------
    def matmul(self, other: "TensorStorage") -> "TensorStorage":
        """
        Matrix product of two rank-2 storages.

        Returns
        -------
        TensorStorage
            Storage of shape ``(self.shape[0], other.shape[1])``.

        Raises
        ------
        ShapeMismatchError
            If either operand is not rank 2 or the inner dimensions differ.
        """
        if not isinstance(other, TensorStorage):
            raise TypeError(f"matmul expects a TensorStorage, got {type(other)!r}")
        if (
            self._shape.rank() != 2
            or other._shape.rank() != 2
            or self._shape[1] != other._shape[0]
        ):
            raise ShapeMismatchError("matmul", self._shape.dims, other._shape.dims)

        m, k = self._shape.dims
        n = other._shape[1]
        out = self._backend.matmul(self._data, other._data, m, k, n)
        return TensorStorage._wrap(TensorShape((m, n)), out, self._device)

    def transpose(self) -> "TensorStorage":
        """
        Return a new rank-2 storage with swapped dimensions (deep copy).

        Raises
        ------
        ValueError
            If the storage is not rank 2.
        """
        if self._shape.rank() != 2:
            raise ValueError(
                f"transpose requires a rank-2 tensor, got shape {self._shape}"
            )
        rows, cols = self._shape.dims
        out = self._backend.transpose2d(self._data, rows, cols)
        return TensorStorage._wrap(TensorShape((cols, rows)), out, self._device)

    # ----------------------------
    # Reductions
    # ----------------------------
    def sum(self) -> "TensorStorage":
        """
        Reduce all elements to a rank-0 storage.
        """
        total = self._backend.sum(self._data)
        return TensorStorage((), [total], dtype=self.dtype, device=self._device)

    def mean(self) -> "TensorStorage":
        """
        Reduce all elements to their arithmetic mean (rank-0).

        Raises
        ------
        DivisionByZeroError
            If the storage has no elements.
        """
        n = self.total_size()
        if n == 0:
            raise DivisionByZeroError("mean")
        total = self._backend.sum(self._data)
        return TensorStorage((), [total / n], dtype=self.dtype, device=self._device)

    # ----------------------------
    # Structure
    # ----------------------------
    def reshape(self, new_shape: ShapeLike) -> "TensorStorage":
        """
        Return a copy with a new shape and unchanged row-major order.

        Raises
        ------
        InvalidReshapeError
            If the total element count is not preserved.
        """
        shape = self._shape.resolve(new_shape)
        return TensorStorage._wrap(shape, self._backend.copy(self._data), self._device)

    def reshape_(self, new_shape: ShapeLike) -> "TensorStorage":
        """
        Change the shape in place; the buffer is left untouched.

        The stride is recomputed from the new shape.

        Raises
        ------
        InvalidReshapeError
            If the total element count is not preserved.
        """
        self._shape = self._shape.resolve(new_shape)
        self._stride = TensorStride(self._shape)
        return self

    def assign(self, other: "TensorStorage") -> None:
        """
        Overwrite the elements in place with those of `other`.

        Raises
        ------
        ShapeMismatchError
            If `other` does not have this storage's shape.
        """
        self._check_same_shape(other, "assign")
        self._backend.copy_into(self._data, other._data)

    def fill(self, value: Number) -> None:
        self._backend.fill(self._data, value)

    def clear(self) -> None:
        """
        Set every element to zero in place.
        """
        self._backend.fill(self._data, 0)
