"""
Closed set of differentiable primitives.

Each primitive is a frozen dataclass carrying exactly the forward-pass state
its backward rule needs (for example `MatMul` keeps both operand values for
the transpose rule). Dispatch happens in two functions, `forward_rule` and
`backward_rule`, each a single ``match`` over the variant set. Adding a
primitive means adding a dataclass and one case to each function.

Backward contract
-----------------
``backward_rule(op, grad)`` receives the gradient with respect to the op's
output (same shape as the output) and returns one gradient per input, in
operand order, each with the shape of the corresponding input.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

from ..tensor._shape import TensorShape
from ..tensor._storage import TensorStorage


# ----------------------------
# Binary element-wise
# ----------------------------
@dataclass(frozen=True)
class Add:
    """``a + b``."""


@dataclass(frozen=True)
class Sub:
    """``a - b``."""


@dataclass(frozen=True)
class Mul:
    """``a * b``; keeps both operand values."""

    lhs: TensorStorage
    rhs: TensorStorage


@dataclass(frozen=True)
class Div:
    """``a / b``; keeps both operand values."""

    lhs: TensorStorage
    rhs: TensorStorage


# ----------------------------
# Linear algebra
# ----------------------------
@dataclass(frozen=True)
class MatMul:
    """Rank-2 matrix product; keeps both operand values."""

    lhs: TensorStorage
    rhs: TensorStorage


@dataclass(frozen=True)
class Transpose:
    """Rank-2 transpose."""


# ----------------------------
# Reductions
# ----------------------------
@dataclass(frozen=True)
class Sum:
    input_shape: TensorShape


@dataclass(frozen=True)
class Mean:
    input_shape: TensorShape


# ----------------------------
# Unary
# ----------------------------
@dataclass(frozen=True)
class ReLU:
    input: TensorStorage


@dataclass(frozen=True)
class Sigmoid:
    input: TensorStorage


@dataclass(frozen=True)
class Neg:
    pass


@dataclass(frozen=True)
class Reshape:
    input_shape: TensorShape
    target: Tuple[int, ...]


Operation = Union[
    Add, Sub, Mul, Div, MatMul, Sum, Mean, ReLU, Sigmoid, Neg, Reshape, Transpose
]

_ARITY = {
    Add: 2,
    Sub: 2,
    Mul: 2,
    Div: 2,
    MatMul: 2,
    Sum: 1,
    Mean: 1,
    ReLU: 1,
    Sigmoid: 1,
    Neg: 1,
    Reshape: 1,
    Transpose: 1,
}


def arity(op: Operation) -> int:
    """
    Return the number of inputs `op` consumes.
    """
    try:
        return _ARITY[type(op)]
    except KeyError:
        raise TypeError(f"Unknown operation {op!r}") from None


def forward_rule(op: Operation, *values: TensorStorage) -> TensorStorage:
    """
    Compute the forward value of `op` applied to `values`.

    Raises
    ------
    TypeError
        If the number of values does not match the op's arity.
    ShapeMismatchError, DivisionByZeroError, InvalidReshapeError, ValueError
        Propagated from the storage primitive.
    """
    if len(values) != arity(op):
        raise TypeError(
            f"{type(op).__name__} takes {arity(op)} input(s), got {len(values)}"
        )

    match op:
        case Add():
            return values[0] + values[1]
        case Sub():
            return values[0] - values[1]
        case Mul():
            return values[0] * values[1]
        case Div():
            return values[0] / values[1]
        case MatMul():
            return values[0].matmul(values[1])
        case Transpose():
            return values[0].transpose()
        case Sum():
            return values[0].sum()
        case Mean():
            return values[0].mean()
        case ReLU():
            return values[0].relu()
        case Sigmoid():
            return values[0].sigmoid()
        case Neg():
            return -values[0]
        case Reshape(target=target):
            return values[0].reshape(target)
    raise TypeError(f"Unknown operation {op!r}")


def backward_rule(
    op: Operation, grad: TensorStorage
) -> Tuple[TensorStorage, ...]:
    """
    Route the output gradient `grad` to the inputs of `op`.

    Returns
    -------
    tuple[TensorStorage, ...]
        One gradient per input, in operand order.
    """
    match op:
        case Add():
            return grad, grad
        case Sub():
            return grad, -grad
        case Mul(lhs=a, rhs=b):
            return grad * b, grad * a
        case Div(lhs=a, rhs=b):
            # d(a/b)/db = -a / b^2, factored so b^2 is never formed
            return grad / b, -(grad / b) * (a / b)
        case MatMul(lhs=a, rhs=b):
            return grad.matmul(b.transpose()), a.transpose().matmul(grad)
        case Transpose():
            return (grad.transpose(),)
        case Sum(input_shape=shape):
            return (
                TensorStorage.full(
                    shape, grad.item(), dtype=grad.dtype, device=grad.device
                ),
            )
        case Mean(input_shape=shape):
            n = shape.total_size()
            return (
                TensorStorage.full(
                    shape, grad.item() / n, dtype=grad.dtype, device=grad.device
                ),
            )
        case ReLU(input=x):
            return (grad * x.relu_mask(),)
        case Sigmoid(input=x):
            s = x.sigmoid()
            return (grad * s * (1 - s),)
        case Neg():
            return (-grad,)
        case Reshape(input_shape=shape):
            return (grad.reshape(shape),)
    raise TypeError(f"Unknown operation {op!r}")
