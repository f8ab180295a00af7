"""
User-facing differentiable tensor.

`Tensor` is a thin handle over a `ComputeNode`: the node holds the
`TensorStorage` value, the requires-grad flag, the producing operation and
the accumulated gradient. Arithmetic on tensors records the computation
graph as it runs; `backward()` hands the graph to the traversal engine.

Construction
------------
- ``Tensor(3.0)``: scalar.
- ``Tensor([[1, 2], [3, 4]])``: nested data; the shape is inferred.
- ``Tensor([1, 2, 3, 4], shape=(2, 2))``: flat row-major data plus shape.
- ``Tensor(np_array)``: copies a NumPy array.

Python scalars on either side of ``+ - * /`` become constant leaves of the
tensor's shape that never receive a gradient.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence, Union

import numpy as np

from ..domain._errors import UnsupportedOperationError
from ..domain.device._device import Device, as_device
from .autograd._engine import run_backward
from .autograd._functional import apply, leaf
from .autograd._node import ComputeNode
from .autograd._operations import (
    Add,
    Div,
    MatMul,
    Mean,
    Mul,
    Neg,
    ReLU,
    Reshape,
    Sigmoid,
    Sub,
    Sum,
    Transpose,
)
from .tensor._shape import ShapeLike
from .tensor._storage import TensorStorage

Number = Union[int, float]
_SCALAR_TYPES = (int, float, np.number)


def _is_scalar(x: Any) -> bool:
    return isinstance(x, _SCALAR_TYPES) and not isinstance(x, (bool, np.bool_))


class Tensor:
    """
    Differentiable multi-dimensional array.

    Parameters
    ----------
    data : Any, optional
        A number, nested lists/tuples of numbers, a NumPy array, a
        `TensorStorage` or another `Tensor` (values are copied). When
        `shape` is given, `data` is the flat row-major element sequence
        (zero-filled when omitted).
    shape : ShapeLike, optional
        Explicit shape for flat `data`.
    requires_grad : bool, optional
        Whether gradients are tracked for this tensor. Defaults to False
        (True for `Parameter`).
    dtype : optional
        Element dtype; defaults to the configured default dtype (or the
        dtype of a NumPy / storage input).
    device : Device | str, optional
        Compute target; only the CPU target is executable.
    """

    _default_requires_grad = False

    def __init__(
        self,
        data: Any = None,
        *,
        shape: Optional[ShapeLike] = None,
        requires_grad: Optional[bool] = None,
        dtype: Any = None,
        device: Optional[Union[Device, str]] = None,
    ) -> None:
        if requires_grad is None:
            requires_grad = self._default_requires_grad
        storage = self._make_storage(data, shape, dtype, device)
        self._node = leaf(storage, requires_grad)

    @staticmethod
    def _make_storage(data, shape, dtype, device) -> TensorStorage:
        if shape is not None:
            if isinstance(data, Tensor):
                data = data.to_numpy()
            elif isinstance(data, TensorStorage):
                data = data.to_numpy()
            flat = None if data is None else np.asarray(data).reshape(-1)
            return TensorStorage(shape, flat, dtype=dtype, device=device)
        if data is None:
            return TensorStorage((), dtype=dtype, device=device)
        if isinstance(data, Tensor):
            data = data.value
        if isinstance(data, TensorStorage):
            if dtype is None:
                dtype = data.dtype
            return TensorStorage.from_numpy(data.to_numpy(), dtype=dtype, device=device)
        if isinstance(data, np.ndarray):
            return TensorStorage.from_numpy(data, dtype=dtype, device=device)
        return TensorStorage.from_nested(data, dtype=dtype, device=device)

    @classmethod
    def _from_node(cls, node: ComputeNode) -> "Tensor":
        obj = cls.__new__(cls)
        obj._node = node
        return obj

    @classmethod
    def _from_storage(
        cls, storage: TensorStorage, requires_grad: Optional[bool] = None
    ) -> "Tensor":
        if requires_grad is None:
            requires_grad = cls._default_requires_grad
        return cls._from_node(leaf(storage, requires_grad))

    # ----------------------------
    # Factories
    # ----------------------------
    @classmethod
    def zeros(
        cls, shape: ShapeLike, *, requires_grad=None, dtype=None, device=None
    ) -> "Tensor":
        return cls._from_storage(
            TensorStorage.zeros(shape, dtype=dtype, device=device), requires_grad
        )

    @classmethod
    def ones(
        cls, shape: ShapeLike, *, requires_grad=None, dtype=None, device=None
    ) -> "Tensor":
        return cls._from_storage(
            TensorStorage.ones(shape, dtype=dtype, device=device), requires_grad
        )

    @classmethod
    def full(
        cls,
        shape: ShapeLike,
        value: Number,
        *,
        requires_grad=None,
        dtype=None,
        device=None,
    ) -> "Tensor":
        return cls._from_storage(
            TensorStorage.full(shape, value, dtype=dtype, device=device),
            requires_grad,
        )

    @classmethod
    def from_flat(
        cls,
        shape: ShapeLike,
        data: Sequence[Number],
        *,
        requires_grad=None,
        dtype=None,
        device=None,
    ) -> "Tensor":
        """
        Build a tensor from a shape and its flat row-major elements.

        Raises
        ------
        ValueError
            If the element count does not match the shape.
        """
        return cls._from_storage(
            TensorStorage(shape, data, dtype=dtype, device=device), requires_grad
        )

    @classmethod
    def from_numpy(
        cls, arr: Any, *, requires_grad=None, dtype=None, device=None
    ) -> "Tensor":
        return cls._from_storage(
            TensorStorage.from_numpy(arr, dtype=dtype, device=device), requires_grad
        )

    # ----------------------------
    # Properties
    # ----------------------------
    @property
    def value(self) -> TensorStorage:
        """
        The underlying storage (shared, not copied).
        """
        return self._node.value

    @property
    def node(self) -> ComputeNode:
        return self._node

    @property
    def shape(self) -> tuple[int, ...]:
        return self._node.value.shape.dims

    @property
    def dtype(self) -> np.dtype:
        return self._node.value.dtype

    @property
    def device(self) -> Device:
        return self._node.value.device

    @property
    def is_leaf(self) -> bool:
        return self._node.is_leaf

    @property
    def requires_grad(self) -> bool:
        return self._node.requires_grad

    @requires_grad.setter
    def requires_grad(self, value: bool) -> None:
        self._node.requires_grad = bool(value)

    @property
    def grad(self) -> Optional["Tensor"]:
        """
        Accumulated gradient, or None before any contribution.

        The returned tensor shares its buffer with the stored gradient.
        """
        g = self._node.grad
        if g is None:
            return None
        return Tensor._from_storage(g, requires_grad=False)

    @grad.setter
    def grad(self, value: Any) -> None:
        if value is None:
            self._node.reset_grad()
            return
        g = self._coerce_storage(value)
        self._node.reset_grad()
        self._node.accumulate_grad(g)

    @property
    def T(self) -> "Tensor":
        return self.transpose()

    def numel(self) -> int:
        return self._node.value.total_size()

    def __repr__(self) -> str:
        extra = ""
        if not self.is_leaf:
            extra = f", op={type(self._node.op).__name__}"
        return (
            f"Tensor({self.tolist()}, shape={self.shape}, dtype={self.dtype}, "
            f"requires_grad={self.requires_grad}{extra})"
        )

    # ----------------------------
    # Autograd
    # ----------------------------
    def _coerce_storage(self, value: Any) -> TensorStorage:
        if isinstance(value, Tensor):
            return value.value
        if isinstance(value, TensorStorage):
            return value
        if isinstance(value, np.ndarray):
            return TensorStorage.from_numpy(value, dtype=self.dtype, device=self.device)
        return TensorStorage.from_nested(value, dtype=self.dtype, device=self.device)

    def backward(self, grad_out: Any = None) -> None:
        """
        Backpropagate from this tensor through the recorded graph.

        Parameters
        ----------
        grad_out : Tensor | TensorStorage | array-like, optional
            Seed gradient with this tensor's shape. Defaults to all ones.

        Raises
        ------
        ShapeMismatchError
            If `grad_out` does not have this tensor's shape.

        Notes
        -----
        Calling this on a tensor that does not require grad is a no-op.
        Leaf gradients accumulate across calls; use `zero_grad` (or an
        optimizer's ``zero_grad``) between steps.
        """
        if grad_out is None:
            seed = self.value.ones_like()
        else:
            seed = self._coerce_storage(grad_out)
        run_backward(self._node, seed)

    def zero_grad(self) -> None:
        """
        Set the gradient to all zeros of this tensor's shape.
        """
        self._node.zero_grad()

    def clear_grad(self) -> None:
        """
        Zero the existing gradient in place; no-op when there is none.
        """
        self._node.clear_grad()

    def detach(self) -> "Tensor":
        """
        Return a new leaf holding a copy of the value, without history.
        """
        return Tensor._from_storage(self.value.copy(), requires_grad=False)

    # ----------------------------
    # Placement / host interop
    # ----------------------------
    def to(self, device: Union[Device, str]) -> "Tensor":
        """
        Move to `device`.

        Raises
        ------
        UnsupportedOperationError
            For any device other than the one the tensor lives on (only the
            CPU target is executable).
        """
        dev = as_device(device)
        if dev == self.device:
            return self
        raise UnsupportedOperationError("to", str(dev))

    def to_numpy(self) -> np.ndarray:
        return self.value.to_numpy()

    def tolist(self) -> Any:
        return self.value.tolist()

    def item(self) -> Number:
        return self.value.item()

    def at(self, *indices: int) -> Number:
        return self.value.at(*indices)

    def set(self, indices: Sequence[int], value: Number) -> None:
        self.value.set(indices, value)

    def clear(self) -> None:
        """
        Zero every element of the value in place.
        """
        self.value.clear()

    # ----------------------------
    # Graph-building operators
    # ----------------------------
    def _lift(self, other: Any) -> ComputeNode:
        if isinstance(other, Tensor):
            return other._node
        if _is_scalar(other):
            const = TensorStorage.full(
                self.value.shape, other, dtype=self.dtype, device=self.device
            )
            return leaf(const, requires_grad=False)
        raise TypeError(f"Unsupported operand type: {type(other)!r}")

    def _binary(self, a: ComputeNode, b: ComputeNode, kind: str) -> "Tensor":
        if kind == "add":
            op = Add()
        elif kind == "sub":
            op = Sub()
        elif kind == "mul":
            op = Mul(a.value, b.value)
        elif kind == "div":
            op = Div(a.value, b.value)
        else:
            op = MatMul(a.value, b.value)
        return Tensor._from_node(apply(op, a, b))

    def __add__(self, other: Any) -> "Tensor":
        return self._binary(self._node, self._lift(other), "add")

    def __radd__(self, other: Number) -> "Tensor":
        return self._binary(self._lift(other), self._node, "add")

    def __sub__(self, other: Any) -> "Tensor":
        return self._binary(self._node, self._lift(other), "sub")

    def __rsub__(self, other: Number) -> "Tensor":
        return self._binary(self._lift(other), self._node, "sub")

    def __mul__(self, other: Any) -> "Tensor":
        return self._binary(self._node, self._lift(other), "mul")

    def __rmul__(self, other: Number) -> "Tensor":
        return self._binary(self._lift(other), self._node, "mul")

    def __truediv__(self, other: Any) -> "Tensor":
        return self._binary(self._node, self._lift(other), "div")

    def __rtruediv__(self, other: Number) -> "Tensor":
        return self._binary(self._lift(other), self._node, "div")

    def __neg__(self) -> "Tensor":
        return Tensor._from_node(apply(Neg(), self._node))

    def matmul(self, other: "Tensor") -> "Tensor":
        """
        Rank-2 matrix product.

        Raises
        ------
        ShapeMismatchError
            If an operand is not rank 2 or the inner dimensions differ.
        """
        if not isinstance(other, Tensor):
            raise TypeError(f"matmul expects Tensor, got {type(other)!r}")
        return self._binary(self._node, other._node, "matmul")

    def __matmul__(self, other: "Tensor") -> "Tensor":
        return self.matmul(other)

    def transpose(self) -> "Tensor":
        return Tensor._from_node(apply(Transpose(), self._node))

    def sum(self) -> "Tensor":
        return Tensor._from_node(apply(Sum(self.value.shape), self._node))

    def mean(self) -> "Tensor":
        return Tensor._from_node(apply(Mean(self.value.shape), self._node))

    def relu(self) -> "Tensor":
        return Tensor._from_node(apply(ReLU(self.value), self._node))

    def sigmoid(self) -> "Tensor":
        return Tensor._from_node(apply(Sigmoid(self.value), self._node))

    def reshape(self, *shape: Any) -> "Tensor":
        """
        Return a tensor with the same elements in a new shape.

        Accepts ``reshape(2, 3)`` or ``reshape((2, 3))``; one dimension may
        be ``-1``.

        Raises
        ------
        InvalidReshapeError
            If the element count is not preserved.
        """
        if len(shape) == 1 and not isinstance(shape[0], (int, np.integer)):
            shape = shape[0]
        target = tuple(shape)
        return Tensor._from_node(
            apply(Reshape(self.value.shape, target), self._node)
        )
