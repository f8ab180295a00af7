"""
Linear regression trained with SGD on the mean squared error.

The model computes ``y = x @ W + 1 @ b`` where ``W`` has shape
``(in_features, out_features)`` and ``b`` has shape ``(1, out_features)``.
Since element-wise operations require identical shapes, the bias is spread
over the batch by multiplying a column of ones with ``b``.
"""

from __future__ import annotations

import logging
from typing import Any, List

import numpy as np

from ...domain._errors import ShapeMismatchError
from .._losses import mse_loss
from .._parameter import Parameter
from .._tensor import Tensor
from ..optimizers._sgd import SGD
from ..tensor._storage import TensorStorage

logger = logging.getLogger(__name__)


class LinearRegression:
    """
    Single-layer linear model with its own SGD optimizer.

    Parameters
    ----------
    in_features : int
        Number of input features.
    out_features : int, optional
        Number of outputs. Defaults to 1.
    lr : float, optional
        SGD learning rate. Defaults to 1e-2.

    Attributes
    ----------
    weight : Parameter
        Shape ``(in_features, out_features)``, zero-initialized.
    bias : Parameter
        Shape ``(1, out_features)``, zero-initialized.
    optimizer : SGD
        Optimizer over ``[weight, bias]``.
    """

    def __init__(self, in_features: int, out_features: int = 1, lr: float = 1e-2):
        if int(in_features) <= 0 or int(out_features) <= 0:
            raise ValueError(
                f"in_features and out_features must be positive, "
                f"got {in_features} and {out_features}"
            )
        self.in_features = int(in_features)
        self.out_features = int(out_features)
        self.weight = Parameter.zeros((self.in_features, self.out_features))
        self.bias = Parameter.zeros((1, self.out_features))
        self.optimizer = SGD(self.parameters(), lr=lr)

    def parameters(self) -> List[Parameter]:
        return [self.weight, self.bias]

    def _as_matrix(self, data: Any) -> Tensor:
        t = data if isinstance(data, Tensor) else Tensor(data, dtype=self.weight.dtype)
        if len(t.shape) == 1:
            t = t.reshape(t.shape[0], 1)
        return t

    def predict(self, x: Any) -> Tensor:
        """
        Compute ``x @ weight + bias`` for a batch.

        Parameters
        ----------
        x : Tensor | array-like
            Inputs of shape ``(n, in_features)``. A 1-D input of length ``n``
            is treated as ``(n, 1)``.

        Raises
        ------
        ShapeMismatchError
            If the feature dimension does not match `in_features`.
        """
        x = self._as_matrix(x)
        ones = Tensor.ones((x.shape[0], 1), dtype=self.weight.dtype)
        return x @ self.weight + ones @ self.bias

    def train(self, x: Any, y: Any) -> float:
        """
        Run one SGD step on the MSE loss and return the loss before the step.
        """
        y = self._as_matrix(y)
        self.optimizer.zero_grad()
        loss = mse_loss(self.predict(x), y)
        loss.backward()
        self.optimizer.step()
        return float(loss.item())

    def fit(self, x: Any, y: Any, epochs: int = 100) -> List[float]:
        """
        Train for `epochs` full-batch steps.

        Returns
        -------
        list[float]
            Loss recorded at each epoch.
        """
        x = self._as_matrix(x)
        y = self._as_matrix(y)
        history: List[float] = []
        for epoch in range(int(epochs)):
            loss = self.train(x, y)
            history.append(loss)
            logger.info("epoch %d/%d loss=%.6f", epoch + 1, epochs, loss)
        return history

    def _assign(self, param: Parameter, values: Any) -> None:
        if isinstance(values, Tensor):
            src = values.value
        elif isinstance(values, np.ndarray):
            src = TensorStorage.from_numpy(values, dtype=param.dtype)
        else:
            src = TensorStorage.from_nested(values, dtype=param.dtype)
        if src.shape != param.value.shape:
            raise ShapeMismatchError("assign", param.shape, src.shape.dims)
        param.value.assign(src)

    def set_weights(self, values: Any) -> None:
        """
        Overwrite the weight matrix in place.

        Raises
        ------
        ShapeMismatchError
            If `values` does not have shape ``(in_features, out_features)``.
        """
        self._assign(self.weight, values)

    def set_bias(self, values: Any) -> None:
        """
        Overwrite the bias row in place.

        Raises
        ------
        ShapeMismatchError
            If `values` does not have shape ``(1, out_features)``.
        """
        self._assign(self.bias, values)
