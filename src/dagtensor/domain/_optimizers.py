"""
Domain-level optimizer contracts for dagtensor.

This module defines the `IOptimizer` protocol, which specifies the minimal
interface required for optimizer implementations (e.g., SGD).

Notes
-----
- Domain contracts are backend-agnostic and must not depend on NumPy or
  infrastructure implementations.
- Optimizers update trainable parameters from their accumulated gradients.
  Gradient computation itself belongs to the traversal engine.
"""

from __future__ import annotations

from typing import Iterable, Protocol, runtime_checkable


@runtime_checkable
class IOptimizer(Protocol):
    """
    Optimizer interface contract.

    An optimizer holds references to trainable parameters and updates them
    in-place according to a specific optimization rule.

    Required methods
    ----------------
    - `step()` applies one optimization update to managed parameters.
    - `zero_grad()` resets gradients of managed parameters to zero.
    - `get_learning_rate()` / `set_learning_rate()` expose the step size.
    """

    def step(self) -> None:
        """
        Apply one optimization step.

        Implementations skip parameters that are frozen
        (`requires_grad is False`) or that have no gradient yet.
        """
        ...

    def zero_grad(self) -> None:
        """
        Reset gradients of all managed parameters to zero.
        """
        ...

    def get_learning_rate(self) -> float: ...

    def set_learning_rate(self, lr: float) -> None: ...

    @property
    def params(self) -> Iterable[object]:
        """
        Return the parameters managed by this optimizer.
        """
        ...
