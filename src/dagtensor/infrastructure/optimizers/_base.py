"""
Optimizer base class.

`Optimizer` keeps the list of managed parameters and the learning rate, and
implements the bookkeeping every optimizer shares (`zero_grad`, learning-rate
access, adding parameters). Concrete optimizers implement `step`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Iterable, List

from .._tensor import Tensor

logger = logging.getLogger(__name__)


def _check_lr(lr: float) -> float:
    lr = float(lr)
    if lr <= 0.0:
        raise ValueError(f"lr must be > 0, got {lr}")
    return lr


class Optimizer(ABC):
    """
    Base class for in-place parameter optimizers.

    Parameters
    ----------
    params : Iterable[Tensor]
        Parameters to optimize. The iterable is consumed and stored.
    lr : float
        Learning rate. Must be > 0.

    Raises
    ------
    ValueError
        If ``lr <= 0``.
    TypeError
        If a parameter is not a `Tensor`.
    """

    def __init__(self, params: Iterable[Tensor], lr: float) -> None:
        self.params: List[Tensor] = []
        self.lr = _check_lr(lr)
        for p in params:
            self.add_parameter(p)

    def add_parameter(self, param: Tensor) -> None:
        """
        Start managing `param`.
        """
        if not isinstance(param, Tensor):
            raise TypeError(f"Optimizer parameters must be Tensors, got {type(param)!r}")
        self.params.append(param)

    def get_learning_rate(self) -> float:
        return self.lr

    def set_learning_rate(self, lr: float) -> None:
        """
        Change the learning rate.

        Raises
        ------
        ValueError
            If ``lr <= 0``.
        """
        new_lr = _check_lr(lr)
        logger.debug("learning rate %g -> %g", self.lr, new_lr)
        self.lr = new_lr

    def zero_grad(self) -> None:
        """
        Reset every managed parameter's gradient to zeros of its shape.

        Existing gradient buffers are reused.
        """
        for p in self.params:
            p.zero_grad()

    @abstractmethod
    def step(self) -> None:
        """
        Apply one update to the managed parameters.
        """
        raise NotImplementedError
