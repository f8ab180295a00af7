from ._device import Device, DeviceType, as_device

__all__ = [Device.__name__, DeviceType.__name__, as_device.__name__]
