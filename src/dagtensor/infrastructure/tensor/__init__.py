from ._shape import TensorShape, TensorStride
from ._storage import TensorStorage

__all__ = [
    TensorShape.__name__,
    TensorStride.__name__,
    TensorStorage.__name__,
]
