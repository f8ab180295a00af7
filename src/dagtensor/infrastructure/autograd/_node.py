"""
Graph vertex for reverse-mode differentiation.

A `ComputeNode` wraps the `TensorStorage` value it represents, the nodes it
was computed from, the operation variant that produced it (None for leaves)
and the gradient accumulated during a backward traversal.

Nodes form a DAG: a node may be an input to any number of consumers, but a
node never refers to its consumers, so there are no reference cycles to
break. A node lives as long as some `Tensor` or downstream node refers to it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional

from ...domain._errors import ShapeMismatchError
from ..tensor._storage import TensorStorage


@dataclass(eq=False)
class ComputeNode:
    """
    One vertex of the dynamic computation graph.

    Attributes
    ----------
    value : TensorStorage
        Forward value. For leaves this is the storage visible through the
        user's `Tensor`; for derived nodes it is the operation output.
    inputs : list[ComputeNode]
        Nodes this one was computed from, in operand order.
    op : Operation, optional
        Variant that produced the value, carrying its backward state.
        None for leaves.
    requires_grad : bool
        Whether gradients flow into this node.
    grad : TensorStorage, optional
        Accumulated gradient, absent until the first contribution.

    Notes
    -----
    Nodes compare and hash by identity so they can be used as set members
    and dict keys during traversal.
    """

    value: TensorStorage
    inputs: List["ComputeNode"] = field(default_factory=list)
    op: Optional[Any] = None
    requires_grad: bool = False
    grad: Optional[TensorStorage] = None

    @property
    def is_leaf(self) -> bool:
        return self.op is None

    @property
    def shape(self):
        return self.value.shape

    def add_input(self, node: "ComputeNode") -> None:
        self.inputs.append(node)

    def accumulate_grad(self, contribution: TensorStorage) -> None:
        """
        Add `contribution` into the accumulated gradient.

        The first contribution is copied so later in-place accumulation never
        aliases a buffer owned by someone else.

        Raises
        ------
        ShapeMismatchError
            If the contribution does not match the node's value shape.
        """
        if contribution.shape != self.value.shape:
            raise ShapeMismatchError(
                "accumulate_grad", self.value.shape.dims, contribution.shape.dims
            )
        if self.grad is None:
            self.grad = contribution.copy()
        else:
            self.grad += contribution

    def clear_grad(self) -> None:
        """
        Zero an existing gradient in place; no-op when none is present.
        """
        if self.grad is not None:
            self.grad.clear()

    def zero_grad(self) -> None:
        """
        Ensure the gradient is an all-zero buffer of the value's shape.

        An existing buffer is reused.
        """
        if self.grad is None or self.grad.shape != self.value.shape:
            self.grad = self.value.zeros_like()
        else:
            self.grad.clear()

    def reset_grad(self) -> None:
        """
        Drop the accumulated gradient.
        """
        self.grad = None

    def __repr__(self) -> str:
        op_name = type(self.op).__name__ if self.op is not None else "Leaf"
        return (
            f"ComputeNode(op={op_name}, shape={self.value.shape.dims}, "
            f"requires_grad={self.requires_grad}, inputs={len(self.inputs)})"
        )
