# scalargrad/core/traversal.py
"""
Breadth-first walks over the graph below a root node.

Both walks start at the root and follow children left to right. Node identity
is the tape index, so deduplication never looks at `data`.
"""
from __future__ import annotations
from typing import Dict, List, NamedTuple, Tuple

from .var import Scalar


class Trace(NamedTuple):
    """
    Deduplicated graph dump in discovery order.

    nodes : distinct nodes, root first
    edges : (child position, parent position) pairs into `nodes`; a node used
            twice by the same parent (e.g. a + a) yields two identical edges
    """
    nodes: List[Scalar]
    edges: List[Tuple[int, int]]


def reachable_indices(tape, root: int) -> List[int]:
    """Tape indices of every node reachable from `root`, each listed once."""
    order = [root]
    seen = {root}
    pointer = 0
    while pointer < len(order):
        for c in tape.nodes[order[pointer]].children:
            if c not in seen:
                seen.add(c)
                order.append(c)
        pointer += 1
    return order


def trace_indices(tape, root: int) -> Tuple[List[int], List[Tuple[int, int]]]:
    order = [root]
    position: Dict[int, int] = {root: 0}
    edges: List[Tuple[int, int]] = []
    pointer = 0
    while pointer < len(order):
        for c in tape.nodes[order[pointer]].children:
            pos = position.get(c)
            if pos is None:
                pos = len(order)
                position[c] = pos
                order.append(c)
            edges.append((pos, pointer))
        pointer += 1
    return order, edges


def traverse(root: Scalar) -> List[Scalar]:
    """All nodes reachable from root (root included), breadth-first."""
    root.node  # raises ReferenceError for a dropped node
    return [Scalar._wrap(root.tape, i) for i in reachable_indices(root.tape, root.index)]


def trace(root: Scalar) -> Trace:
    root.node
    order, edges = trace_indices(root.tape, root.index)
    return Trace([Scalar._wrap(root.tape, i) for i in order], edges)
