"""
CPU (NumPy) implementation of the numeric-kernel interface.

`NumpyKernelBackend` satisfies `IKernelBackend` for the default compute
target. Buffers are flat, contiguous one-dimensional `numpy.ndarray` objects;
shape and stride handling stays in `TensorStorage`.

Notes
-----
- Binary kernels return a new buffer with the dtype of the left operand.
- `sigmoid` uses the two-branch formulation so large-magnitude inputs do not
  overflow in `exp`.
- `matmul` views the flat buffers as (m, k) and (k, n) matrices and performs a
  plain dense product.
"""

from __future__ import annotations

from typing import Any

import numpy as np

from ...domain._errors import UnsupportedOperationError
from ...domain.device._device import Device, as_device


class NumpyKernelBackend:
    """
    Synchronous NumPy kernels operating on flat buffers.
    """

    name = "numpy"

    # ----------------------------
    # Allocation / transfer
    # ----------------------------
    def allocate(self, size: int, dtype: Any) -> np.ndarray:
        return np.zeros(int(size), dtype=dtype)

    def from_host(self, data: Any, dtype: Any) -> np.ndarray:
        """
        Copy host data (array-like) into a new flat buffer of `dtype`.
        """
        return np.array(data, dtype=dtype, copy=True).reshape(-1)

    def to_host(self, buf: np.ndarray) -> np.ndarray:
        return buf.copy()

    def copy(self, buf: np.ndarray) -> np.ndarray:
        return buf.copy()

    def copy_into(self, dst: np.ndarray, src: np.ndarray) -> None:
        dst[...] = src

    def fill(self, buf: np.ndarray, value: Any) -> None:
        buf.fill(value)

    # ----------------------------
    # Element access
    # ----------------------------
    def get(self, buf: np.ndarray, offset: int) -> Any:
        return buf[offset].item()

    def set(self, buf: np.ndarray, offset: int, value: Any) -> None:
        buf[offset] = value

    # ----------------------------
    # Element-wise
    # ----------------------------
    @staticmethod
    def _cast(out: np.ndarray, like: np.ndarray) -> np.ndarray:
        return out.astype(like.dtype, copy=False)

    def add(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        return self._cast(a + b, a)

    def sub(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        return self._cast(a - b, a)

    def mul(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        return self._cast(a * b, a)

    def div(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        return self._cast(np.true_divide(a, b), a)

    def neg(self, a: np.ndarray) -> np.ndarray:
        return np.negative(a)

    def relu(self, a: np.ndarray) -> np.ndarray:
        return np.maximum(a, 0).astype(a.dtype, copy=False)

    def relu_mask(self, a: np.ndarray) -> np.ndarray:
        return (a > 0).astype(a.dtype)

    def sigmoid(self, a: np.ndarray) -> np.ndarray:
        x = a.astype(np.float64)
        out = np.empty_like(x)
        pos = x >= 0
        out[pos] = 1.0 / (1.0 + np.exp(-x[pos]))
        ex = np.exp(x[~pos])
        out[~pos] = ex / (1.0 + ex)
        return out.astype(a.dtype, copy=False)

    def axpy(self, alpha: Any, x: np.ndarray, y: np.ndarray) -> None:
        y += np.asarray(alpha * x, dtype=y.dtype)

    def any_zero(self, a: np.ndarray) -> bool:
        return bool(np.any(a == 0))

    def allclose(
        self, a: np.ndarray, b: np.ndarray, rtol: float, atol: float
    ) -> bool:
        return bool(np.allclose(a, b, rtol=rtol, atol=atol))

    # ----------------------------
    # Linear algebra / reduction
    # ----------------------------
    def matmul(
        self, a: np.ndarray, b: np.ndarray, m: int, k: int, n: int
    ) -> np.ndarray:
        out = a.reshape(m, k) @ b.reshape(k, n)
        return self._cast(out, a).reshape(-1)

    def transpose2d(self, a: np.ndarray, rows: int, cols: int) -> np.ndarray:
        return np.ascontiguousarray(a.reshape(rows, cols).T).reshape(-1)

    def sum(self, a: np.ndarray) -> Any:
        return a.sum(dtype=a.dtype)


_CPU_BACKEND = NumpyKernelBackend()


def get_backend(device: "Device | str") -> NumpyKernelBackend:
    """
    Return the kernel backend serving `device`.

    Parameters
    ----------
    device : Device | str
        Requested compute target.

    Returns
    -------
    NumpyKernelBackend
        The CPU backend.

    Raises
    ------
    UnsupportedOperationError
        If `device` is anything other than the default CPU target.
    """
    dev = as_device(device)
    if dev.is_cpu():
        return _CPU_BACKEND
    raise UnsupportedOperationError(op="dispatch", device=str(dev))
