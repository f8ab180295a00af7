"""
Backend-agnostic contracts: error taxonomy, devices and protocols.
"""

from ._errors import (
    DagTensorError,
    ShapeMismatchError,
    IndexOutOfRangeError,
    InvalidReshapeError,
    DivisionByZeroError,
    UnsupportedOperationError,
)
from ._tensor import ITensor
from ._backend import IKernelBackend
from ._optimizers import IOptimizer
from ._parameter import IParameter
from .device import Device, DeviceType, as_device

__all__ = [
    DagTensorError.__name__,
    ShapeMismatchError.__name__,
    IndexOutOfRangeError.__name__,
    InvalidReshapeError.__name__,
    DivisionByZeroError.__name__,
    UnsupportedOperationError.__name__,
    ITensor.__name__,
    IKernelBackend.__name__,
    IOptimizer.__name__,
    IParameter.__name__,
    Device.__name__,
    DeviceType.__name__,
    as_device.__name__,
]
