"""
Backward traversal engine.

The engine orders every node reachable from the root so that a node runs its
backward rule only after all of its consumers have added their contribution
to its accumulated gradient.

Ordering
--------
`topological_order` performs an iterative depth-first visit that appends a
node only after all of its inputs (post-order). Each node is visited once
even when it is shared by several consumers. Walking that list in reverse
processes the root first and every consumer before its inputs.

Accumulation
------------
Contributions are *added* into an input's gradient. A node used twice (for
example ``x * x``) therefore receives both contributions.
"""

from __future__ import annotations

import logging
from typing import List

from ...domain._errors import ShapeMismatchError
from ..tensor._storage import TensorStorage
from ._node import ComputeNode
from ._operations import backward_rule

logger = logging.getLogger(__name__)


def topological_order(root: ComputeNode) -> List[ComputeNode]:
    """
    Return every node reachable from `root`, inputs before consumers.

    Parameters
    ----------
    root : ComputeNode
        Traversal root.

    Returns
    -------
    list[ComputeNode]
        Post-order listing; `root` is always the last element.
    """
    order: List[ComputeNode] = []
    visited: set[int] = set()
    # (node, inputs_expanded)
    stack = [(root, False)]

    while stack:
        node, expanded = stack.pop()
        if expanded:
            order.append(node)
            continue
        if id(node) in visited:
            continue
        visited.add(id(node))
        stack.append((node, True))
        for parent in reversed(node.inputs):
            if id(parent) not in visited:
                stack.append((parent, False))

    return order


def run_backward(root: ComputeNode, seed: TensorStorage) -> None:
    """
    Propagate `seed` from `root` back to every reachable node.

    Leaves that require grad accumulate into their existing gradient, so
    repeated calls sum up. Gradients of intermediate nodes are reset at the
    start of each traversal.

    Parameters
    ----------
    root : ComputeNode
        Node whose output gradient is `seed`.
    seed : TensorStorage
        Gradient with respect to the root value.

    Raises
    ------
    ShapeMismatchError
        If `seed` does not have the root's shape.
    """
    if not root.requires_grad:
        logger.debug("backward() on a node that does not require grad; no-op")
        return

    if seed.shape != root.value.shape:
        raise ShapeMismatchError("backward", root.value.shape.dims, seed.shape.dims)

    order = topological_order(root)
    logger.debug(
        "backward: %d node(s) reachable, seed shape %s", len(order), seed.shape
    )

    for node in order:
        if not node.is_leaf:
            node.reset_grad()

    root.accumulate_grad(seed)

    for node in reversed(order):
        if node.is_leaf or not node.requires_grad or node.grad is None:
            continue

        grads = backward_rule(node.op, node.grad)
        for parent, g in zip(node.inputs, grads):
            if not parent.requires_grad:
                continue
            parent.accumulate_grad(g)
