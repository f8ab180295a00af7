"""
Compute-target descriptors.

Only the CPU target has a kernel backend. CUDA strings still parse so that
requesting one fails at dispatch with `UnsupportedOperationError` rather
than as a malformed argument.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class DeviceType(Enum):
    CPU = "cpu"
    CUDA = "cuda"


@dataclass(frozen=True)
class Device:
    """
    Immutable (type, index) pair naming a compute target.

    Build instances with `as_device("cpu")` or `as_device("cuda:<index>")`.
    """

    type: DeviceType
    index: Optional[int] = None

    def __str__(self) -> str:
        return self.type.value if self.index is None else f"{self.type.value}:{self.index}"

    def is_cpu(self) -> bool:
        return self.type is DeviceType.CPU


def as_device(device: "Device | str") -> Device:
    """
    Normalize a device argument into a `Device`.

    Raises
    ------
    ValueError
        If a string is neither "cpu" nor "cuda:<non-negative int>".
    TypeError
        If `device` is neither a `Device` nor a string.
    """
    if isinstance(device, Device):
        return device
    if not isinstance(device, str):
        raise TypeError(f"Expected Device or str, got {type(device)!r}")
    if device == "cpu":
        return Device(DeviceType.CPU)
    kind, _, index = device.partition(":")
    if kind == "cuda" and index.isdigit():
        return Device(DeviceType.CUDA, int(index))
    raise ValueError(f"Invalid device '{device}'. Expected 'cpu' or 'cuda:<index>'")
