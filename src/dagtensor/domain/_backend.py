"""
Compute backend contract.

The tensor core never depends on device-specific dispatch logic. It only
consumes the synchronous numeric-kernel interface defined here, operating on
flat, contiguous, one-dimensional buffers. Shape and stride bookkeeping is
owned by `TensorStorage`; kernels only see element counts.

Design notes
------------
- All kernels are synchronous and return freshly allocated buffers, except
  `fill`, `copy_into` and `axpy` which mutate their destination in place.
- The result of a binary kernel has the dtype of its left operand.
- Implementations are selected per `Device` by
  `dagtensor.infrastructure.ops.kernels_cpu.get_backend`.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

Buffer = Any


@runtime_checkable
class IKernelBackend(Protocol):
    """
    Synchronous numeric-kernel interface over flat buffers.
    """

    name: str

    # ---- allocation / transfer ----
    def allocate(self, size: int, dtype: Any) -> Buffer: ...
    def from_host(self, data: Any, dtype: Any) -> Buffer: ...
    def to_host(self, buf: Buffer) -> Any: ...
    def copy(self, buf: Buffer) -> Buffer: ...
    def copy_into(self, dst: Buffer, src: Buffer) -> None: ...
    def fill(self, buf: Buffer, value: Any) -> None: ...

    # ---- element access ----
    def get(self, buf: Buffer, offset: int) -> Any: ...
    def set(self, buf: Buffer, offset: int, value: Any) -> None: ...

    # ---- element-wise ----
    def add(self, a: Buffer, b: Buffer) -> Buffer: ...
    def sub(self, a: Buffer, b: Buffer) -> Buffer: ...
    def mul(self, a: Buffer, b: Buffer) -> Buffer: ...
    def div(self, a: Buffer, b: Buffer) -> Buffer: ...
    def neg(self, a: Buffer) -> Buffer: ...
    def relu(self, a: Buffer) -> Buffer: ...
    def relu_mask(self, a: Buffer) -> Buffer: ...
    def sigmoid(self, a: Buffer) -> Buffer: ...
    def axpy(self, alpha: Any, x: Buffer, y: Buffer) -> None: ...
    def any_zero(self, a: Buffer) -> bool: ...
    def allclose(self, a: Buffer, b: Buffer, rtol: float, atol: float) -> bool: ...

    # ---- linear algebra / reduction ----
    def matmul(self, a: Buffer, b: Buffer, m: int, k: int, n: int) -> Buffer: ...
    def transpose2d(self, a: Buffer, rows: int, cols: int) -> Buffer: ...
    def sum(self, a: Buffer) -> Any: ...
