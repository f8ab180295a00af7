"""
Error taxonomy for dagtensor.

This module defines the exceptions raised by tensor storage, the autograd
graph and the compute backend. Every failure is local and synchronous: it is
raised at the call site and never retried or silently recovered inside the
library.

Each concrete error subclasses the closest builtin exception (e.g.
`ShapeMismatchError` is a `ValueError`) so callers can catch either the
dagtensor-specific type or the generic Python one. `DagTensorError` is a
shared marker base that allows catching every library error at once.
"""

from __future__ import annotations

from typing import Any, Sequence


class DagTensorError(Exception):
    """
    Marker base class shared by all dagtensor errors.
    """


class ShapeMismatchError(DagTensorError, ValueError):
    """
    Raised when the operands of a binary operation have incompatible shapes.

    Element-wise operations require identical shapes (no implicit
    broadcasting); `matmul` requires two rank-2 operands whose inner
    dimensions agree.

    Attributes
    ----------
    op : str
        Name of the operation that was attempted (e.g. "add", "matmul").
    lhs_shape : tuple[int, ...]
        Shape of the left operand.
    rhs_shape : tuple[int, ...]
        Shape of the right operand.
    """

    def __init__(
        self, op: str, lhs_shape: Sequence[int], rhs_shape: Sequence[int]
    ) -> None:
        self.op = op
        self.lhs_shape = tuple(lhs_shape)
        self.rhs_shape = tuple(rhs_shape)
        super().__init__(
            f"Shape mismatch in {op}: {self.lhs_shape} vs {self.rhs_shape}"
        )


class IndexOutOfRangeError(DagTensorError, IndexError):
    """
    Raised by element access with the wrong number of indices or an index
    outside the corresponding dimension.

    Attributes
    ----------
    indices : tuple
        The indices that were requested.
    shape : tuple[int, ...]
        Shape of the tensor being indexed.
    """

    def __init__(self, indices: Sequence[Any], shape: Sequence[int]) -> None:
        self.indices = tuple(indices)
        self.shape = tuple(shape)
        super().__init__(
            f"Index {self.indices} is out of range for tensor of shape {self.shape}"
        )


class InvalidReshapeError(DagTensorError, ValueError):
    """
    Raised when a reshape target does not preserve the total element count.

    Attributes
    ----------
    from_shape : tuple[int, ...]
        Shape of the tensor being reshaped.
    to_shape : tuple[int, ...]
        Requested target shape.
    """

    def __init__(self, from_shape: Sequence[int], to_shape: Sequence[int]) -> None:
        self.from_shape = tuple(from_shape)
        self.to_shape = tuple(to_shape)
        super().__init__(
            f"Cannot reshape tensor of shape {self.from_shape} into {self.to_shape}"
        )


class DivisionByZeroError(DagTensorError, ZeroDivisionError):
    """
    Raised when an element-wise divisor contains an exact zero, or when a
    scalar division by zero is requested.

    Attributes
    ----------
    op : str
        Name of the operation that was attempted.
    """

    def __init__(self, op: str = "div") -> None:
        self.op = op
        super().__init__(f"Division by zero in {op}.")


class UnsupportedOperationError(DagTensorError, RuntimeError):
    """
    Raised when an operation is requested on a compute target other than the
    default one.

    Only the CPU ("default") target is implemented. Requesting any other
    device, for example moving a tensor to "cuda:0", fails with this error.

    Attributes
    ----------
    op : str
        The name of the operation that was attempted.
    device : str
        String representation of the requested device.
    """

    def __init__(self, op: str, device: str) -> None:
        self.op = op
        self.device = device
        super().__init__(f"{op} is not implemented for device '{device}'.")
