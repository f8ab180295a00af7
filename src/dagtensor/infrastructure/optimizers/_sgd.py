"""
Stochastic Gradient Descent (SGD).

Parameters are updated in place on their storage from the gradient left by
the last backward traversal. No graph nodes are created by an update.

Design notes
------------
- Frozen parameters (``requires_grad is False``) are never modified, even
  when a gradient is present.
- Parameters without a gradient are skipped; this is not an error.
- Weight decay is classical (coupled) L2 regularization.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from .._tensor import Tensor
from ._base import Optimizer

logger = logging.getLogger(__name__)


@dataclass
class SGD(Optimizer):
    """
    Plain SGD.

    Update rule
    -----------
    For each trainable parameter ``p`` with gradient ``g``:

    - ``g <- g + weight_decay * p`` (only when ``weight_decay > 0``)
    - ``p <- p - lr * g``

    Parameters
    ----------
    params : Iterable[Tensor]
        Parameters to optimize.
    lr : float, optional
        Learning rate. Must be > 0. Defaults to 1e-3.
    weight_decay : float, optional
        L2 coefficient. Must be >= 0. Defaults to 0.0.

    Raises
    ------
    ValueError
        If ``lr <= 0`` or ``weight_decay < 0``.
    """

    params: Sequence[Tensor]
    lr: float = 1e-3
    weight_decay: float = 0.0

    def __init__(
        self,
        params: Iterable[Tensor],
        lr: float = 1e-3,
        *,
        weight_decay: float = 0.0,
    ) -> None:
        super().__init__(params, lr)
        self.weight_decay = float(weight_decay)
        if self.weight_decay < 0.0:
            raise ValueError(f"weight_decay must be >= 0, got {self.weight_decay}")

    def step(self) -> None:
        for p in self.params:
            if not p.requires_grad:
                continue
            g = p.grad
            if g is None:
                logger.debug("SGD: skipping parameter %s without gradient", p.shape)
                continue

            update = g.value
            if self.weight_decay != 0.0:
                update = update.copy()
                update.axpy(self.weight_decay, p.value)

            # p <- p - lr * g
            p.value.axpy(-self.lr, update)
