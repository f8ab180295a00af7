"""
dagtensor: a small reverse-mode automatic-differentiation engine.

Arithmetic on `Tensor` objects records a dynamic computation graph;
``backward()`` walks it in reverse topological order and accumulates
gradients into every tensor created with ``requires_grad=True``.

>>> from dagtensor import Tensor
>>> x = Tensor(3.0, requires_grad=True)
>>> y = Tensor(4.0, requires_grad=True)
>>> (x * y).backward()
>>> x.grad.item(), y.grad.item()
(4.0, 3.0)
"""

import logging

from .domain import (
    DagTensorError,
    ShapeMismatchError,
    IndexOutOfRangeError,
    InvalidReshapeError,
    DivisionByZeroError,
    UnsupportedOperationError,
    Device,
    DeviceType,
)
from .infrastructure import (
    Config,
    load_config,
    get_config,
    get_default_dtype,
    set_default_dtype,
    get_default_device,
    configure_logging,
    TensorShape,
    TensorStride,
    TensorStorage,
    ComputeNode,
    Tensor,
    Parameter,
    mse_loss,
    sse_loss,
    Optimizer,
    SGD,
    LinearRegression,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    DagTensorError.__name__,
    ShapeMismatchError.__name__,
    IndexOutOfRangeError.__name__,
    InvalidReshapeError.__name__,
    DivisionByZeroError.__name__,
    UnsupportedOperationError.__name__,
    Device.__name__,
    DeviceType.__name__,
    Config.__name__,
    load_config.__name__,
    get_config.__name__,
    get_default_dtype.__name__,
    set_default_dtype.__name__,
    get_default_device.__name__,
    configure_logging.__name__,
    TensorShape.__name__,
    TensorStride.__name__,
    TensorStorage.__name__,
    ComputeNode.__name__,
    Tensor.__name__,
    Parameter.__name__,
    mse_loss.__name__,
    sse_loss.__name__,
    Optimizer.__name__,
    SGD.__name__,
    LinearRegression.__name__,
]
