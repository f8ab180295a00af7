"""
Regression losses built from graph operations.

Both losses are composed of differentiable primitives (``-``, ``*``, ``sum``,
``mean``), so their gradients flow through the traversal engine without a
dedicated backward rule. The result is a rank-0 tensor suitable as the root
of ``backward()``.
"""

from __future__ import annotations

from ..domain._errors import ShapeMismatchError
from ._tensor import Tensor


def _squared_error(pred: Tensor, target: Tensor, name: str) -> Tensor:
    if pred.shape != target.shape:
        raise ShapeMismatchError(name, pred.shape, target.shape)
    diff = pred - target
    return diff * diff


def sse_loss(pred: Tensor, target: Tensor) -> Tensor:
    """
    Sum of squared errors, ``sum((pred - target) ** 2)``.

    Raises
    ------
    ShapeMismatchError
        If `pred` and `target` shapes differ.
    """
    return _squared_error(pred, target, "sse_loss").sum()


def mse_loss(pred: Tensor, target: Tensor) -> Tensor:
    """
    Mean squared error, ``mean((pred - target) ** 2)``.

    Raises
    ------
    ShapeMismatchError
        If `pred` and `target` shapes differ.
    """
    return _squared_error(pred, target, "mse_loss").mean()
