"""
Tensor interface definitions.

This module defines the domain-level interface for the user-facing tensor
handle using structural typing. The interface captures what training code,
optimizers and losses rely on: shape and placement, the requires-grad flag,
gradient access and the entry point of backpropagation.

Notes
-----
The concrete implementation lives in
`dagtensor.infrastructure.tensor._tensor.Tensor`, which pairs a
`TensorStorage` value with the `ComputeNode` that produced it.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Union, runtime_checkable

from .device._device import Device

Number = Union[int, float]


@runtime_checkable
class ITensor(Protocol):
    """
    Tensor interface.

    An `ITensor` represents a multi-dimensional array that participates in
    numerical computation and, optionally, reverse-mode automatic
    differentiation.
    """

    # ---------------------------------------------------------------------
    # Core identity / placement
    # ---------------------------------------------------------------------
    @property
    def shape(self) -> tuple[int, ...]:
        """
        Return the shape of the tensor.
        """
        ...

    @property
    def device(self) -> Device:
        """
        Return the device on which this tensor resides.
        """
        ...

    # ---------------------------------------------------------------------
    # Autograd flags and gradient storage
    # ---------------------------------------------------------------------
    @property
    def requires_grad(self) -> bool:
        """
        Indicate whether this tensor takes part in gradient computation.
        """
        ...

    @requires_grad.setter
    def requires_grad(self, value: bool) -> None: ...

    @property
    def grad(self) -> Optional["ITensor"]:
        """
        Return the accumulated gradient, or None if none has been computed.
        """
        ...

    def backward(self, grad_out: Any = None) -> None:
        """
        Backpropagate from this tensor through its computation graph.

        Parameters
        ----------
        grad_out : Any, optional
            Seed gradient. Defaults to all-ones with this tensor's shape.
        """
        ...

    def zero_grad(self) -> None:
        """
        Reset the gradient to all zeros of this tensor's shape.
        """
        ...

    def clear_grad(self) -> None:
        """
        Zero an existing gradient in place; no-op when none is present.
        """
        ...

    # ---------------------------------------------------------------------
    # Host interop
    # ---------------------------------------------------------------------
    def to_numpy(self) -> Any:
        """
        Return a shaped host copy of the tensor values.
        """
        ...

    def numel(self) -> int:
        """
        Return the total number of elements.
        """
        ...
