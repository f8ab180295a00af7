"""
NumPy-backed implementation of the dagtensor contracts.
"""

from ._config import (
    Config,
    load_config,
    get_config,
    get_default_dtype,
    set_default_dtype,
    get_default_device,
)
from ._logging import configure_logging
from .ops import NumpyKernelBackend, get_backend
from .tensor import TensorShape, TensorStride, TensorStorage
from .autograd import ComputeNode, topological_order, run_backward
from ._tensor import Tensor
from ._parameter import Parameter
from ._losses import mse_loss, sse_loss
from .optimizers import Optimizer, SGD
from .models import LinearRegression

__all__ = [
    Config.__name__,
    load_config.__name__,
    get_config.__name__,
    get_default_dtype.__name__,
    set_default_dtype.__name__,
    get_default_device.__name__,
    configure_logging.__name__,
    NumpyKernelBackend.__name__,
    get_backend.__name__,
    TensorShape.__name__,
    TensorStride.__name__,
    TensorStorage.__name__,
    ComputeNode.__name__,
    topological_order.__name__,
    run_backward.__name__,
    Tensor.__name__,
    Parameter.__name__,
    mse_loss.__name__,
    sse_loss.__name__,
    Optimizer.__name__,
    SGD.__name__,
    LinearRegression.__name__,
]
