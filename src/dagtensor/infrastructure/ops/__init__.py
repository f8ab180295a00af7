from .kernels_cpu import NumpyKernelBackend, get_backend

__all__ = [NumpyKernelBackend.__name__, get_backend.__name__]
