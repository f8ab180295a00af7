"""
Trainable parameter interface definitions.

This module defines the domain-level interface for trainable parameters used
by optimization algorithms. It is structural (duck-typed) so optimizers can
work with any tensor-like object exposing these members.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from ._tensor import ITensor


@runtime_checkable
class IParameter(Protocol):
    """
    Domain-level interface for trainable parameters.

    Notes
    -----
    - Parameters may be frozen or unfrozen via the `requires_grad` flag.
    - Optimizers rely on this interface to discover and update parameters.
    """

    @property
    def requires_grad(self) -> bool: ...

    @requires_grad.setter
    def requires_grad(self, value: bool) -> None: ...

    @property
    def grad(self) -> Optional[ITensor]:
        """
        Return the accumulated gradient, or None when absent.
        """
        ...

    def zero_grad(self) -> None:
        """
        Reset the accumulated gradient to all zeros.
        """
        ...
