"""
Graph construction.

`apply` is the single entry point through which every differentiable
primitive executes: it computes the forward value and records a new
`ComputeNode` pointing back at the input nodes.
"""

from __future__ import annotations

from ._node import ComputeNode
from ._operations import Operation, forward_rule


def _result_requires_grad(*nodes: ComputeNode) -> bool:
    return any(n.requires_grad for n in nodes)


def apply(op: Operation, *nodes: ComputeNode) -> ComputeNode:
    """
    Execute `op` on the values of `nodes` and return the output node.

    The output requires grad if any input does. A node is built even when no
    input requires grad; the engine then treats it as a no-op.

    Parameters
    ----------
    op : Operation
        Variant instance carrying the state its backward rule needs.
    *nodes : ComputeNode
        Input nodes in operand order.

    Returns
    -------
    ComputeNode
        New node wrapping the forward value.
    """
    value = forward_rule(op, *(n.value for n in nodes))
    return ComputeNode(
        value=value,
        inputs=list(nodes),
        op=op,
        requires_grad=_result_requires_grad(*nodes),
    )


def leaf(value, requires_grad: bool = False) -> ComputeNode:
    """
    Wrap a user-visible storage in a leaf node.
    """
    return ComputeNode(value=value, requires_grad=bool(requires_grad))
