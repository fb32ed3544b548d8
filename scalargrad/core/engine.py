# scalargrad/core/engine.py
from __future__ import annotations
import logging
import warnings
from typing import List, Optional

from ..config import ORDERS, default_config
from ..ops.arithmetic import int_power
from .node import OpKind
from .traversal import reachable_indices, trace_indices
from .var import Scalar

logger = logging.getLogger(__name__)


def zero_grads(root: Scalar):
    """
    Set the gradient of every node reachable from `root` to zero.
    Each node is locked on its own while it is reset.
    """
    root.node  # raises ReferenceError for a dropped node
    tape = root.tape
    for i in reachable_indices(tape, root.index):
        node = tape.nodes[i]
        with node.lock:
            node.grad = 0.0


def backward(root: Scalar, order: Optional[str] = None):
    """
    Run one reverse pass from `root`.

    Args:
        root:  output node; its gradient is seeded with 1.0.
        order: 'topological' (default) walks reachable nodes in descending tape
               index, which closes every node before it is used as a source.
               'trace' walks them in breadth-first trace order instead; that
               order can understate gradients when a node is reachable along
               paths of different lengths, and a RuntimeWarning is raised then.

    Notes:
        - Gradients of every reachable node are reset first, so nothing from a
          previous pass leaks into this one.
        - For each node, we propagate: child.grad += node.grad * (d node/d child).
    """
    if order is None:
        order = default_config.order
    if order not in ORDERS:
        raise ValueError(f"order must be one of {ORDERS}, got {order!r}")

    tape = root.tape
    zero_grads(root)
    _seed(tape, root.index)

    if order == "topological":
        sequence = sorted(reachable_indices(tape, root.index), reverse=True)
    else:
        sequence, edges = trace_indices(tape, root.index)
        if default_config.warn_on_trace_order and _trace_order_unsafe(tape, sequence, edges):
            warnings.warn(
                "trace order visits a node before all of its parents; "
                "gradients of shared nodes may be understated",
                RuntimeWarning,
                stacklevel=2,
            )

    logger.debug("backward from node %d over %d nodes (order=%s)",
                 root.index, len(sequence), order)

    # Backward sweep
    for i in sequence:
        _propagate(tape, i)


def _seed(tape, index: int):
    node = tape.nodes[index]
    with node.lock:
        node.grad = 1.0


def _trace_order_unsafe(tape, sequence: List[int], edges: List[tuple]) -> bool:
    # a non-leaf discovered before one of its parents propagates too early
    return any(
        child < parent and not tape.nodes[sequence[child]].is_leaf
        for child, parent in edges
    )


def _read_data(tape, index: int) -> float:
    node = tape.nodes[index]
    with node.lock:
        return node.data


def _accumulate(tape, index: int, delta: float):
    node = tape.nodes[index]
    with node.lock:
        node.grad += delta


def _propagate(tape, index: int):
    """
    Apply the local gradient rule of one node to its children.

    At most one node lock is held at any time: operands may alias each other
    (a + a, a * a) and the node itself is released before its children are
    touched.
    """
    node = tape.nodes[index]
    op = node.op
    if op is None:
        return  # leaf: nothing to propagate
    with node.lock:
        out_grad = node.grad
        out_data = node.data
    children = node.children

    if op.kind is OpKind.ADD:
        left, right = children
        _accumulate(tape, left, out_grad)
        _accumulate(tape, right, out_grad)

    elif op.kind is OpKind.SUB:
        left, right = children
        _accumulate(tape, left, out_grad)
        _accumulate(tape, right, -out_grad)

    elif op.kind is OpKind.MUL:
        # read both operands before either gradient is written
        left, right = children
        left_data = _read_data(tape, left)
        right_data = _read_data(tape, right)
        _accumulate(tape, left, right_data * out_grad)
        _accumulate(tape, right, left_data * out_grad)

    elif op.kind is OpKind.POWI:
        (child,) = children
        n = op.exponent
        x = _read_data(tape, child)
        _accumulate(tape, child, n * int_power(x, n - 1) * out_grad)

    elif op.kind is OpKind.TANH:
        (child,) = children
        _accumulate(tape, child, (1.0 - out_data * out_data) * out_grad)

    else:
        raise ValueError(f"no gradient rule for op {op}")
