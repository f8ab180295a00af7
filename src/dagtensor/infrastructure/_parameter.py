"""
Trainable parameter.

A `Parameter` is a leaf `Tensor` meant to be updated by an optimizer. It
differs from a plain tensor only in its default: gradients are tracked unless
``requires_grad=False`` is passed. Setting ``requires_grad = False`` later
freezes the parameter; optimizers then leave it untouched even if a gradient
is present.
"""

from __future__ import annotations

from ..domain._parameter import IParameter
from ._tensor import Tensor


class Parameter(Tensor, IParameter):
    """
    Leaf tensor with ``requires_grad=True`` by default.

    Accepts the same constructor arguments and factories as `Tensor`
    (``Parameter.zeros((3, 1))`` builds a trainable zero matrix).
    """

    _default_requires_grad = True

    def __repr__(self) -> str:
        return (
            f"Parameter({self.tolist()}, shape={self.shape}, "
            f"requires_grad={self.requires_grad})"
        )
