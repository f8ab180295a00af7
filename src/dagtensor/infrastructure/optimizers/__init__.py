from ._base import Optimizer
from ._sgd import SGD

__all__ = [
    Optimizer.__name__,
    SGD.__name__,
]
