from ._node import ComputeNode
from ._operations import (
    Operation,
    Add,
    Sub,
    Mul,
    Div,
    MatMul,
    Sum,
    Mean,
    ReLU,
    Sigmoid,
    Neg,
    Reshape,
    Transpose,
    forward_rule,
    backward_rule,
)
from ._functional import apply
from ._engine import topological_order, run_backward

__all__ = [
    ComputeNode.__name__,
    "Operation",
    Add.__name__,
    Sub.__name__,
    Mul.__name__,
    Div.__name__,
    MatMul.__name__,
    Sum.__name__,
    Mean.__name__,
    ReLU.__name__,
    Sigmoid.__name__,
    Neg.__name__,
    Reshape.__name__,
    Transpose.__name__,
    forward_rule.__name__,
    backward_rule.__name__,
    apply.__name__,
    topological_order.__name__,
    run_backward.__name__,
]
