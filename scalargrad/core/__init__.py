# scalargrad/core/__init__.py

"""
Core public API for the scalargrad package.

Exports:
    Scalar        : Handle to one node of the scalar computation graph.
    Tape          : Append-only node arena that stores the graph.
    global_tape   : The default tape new leaves are recorded on.
    use_tape      : Context manager to temporarily switch the active tape.
    backward      : Reset, seed and run one reverse pass from an output.
    zero_grads    : Reset the gradients of every node below an output.
    traverse      : Reachable nodes, breadth-first, each once.
    trace         : Deduplicated node list + edge list.
    dump          : Formatted graph snapshot for an external renderer.
    grad, grads   : Convenience: gradients of small functions on a fresh tape.
    value         : Convenience: extract the primal value of a Scalar.
"""

from .node import Node, Op, OpKind
from .var import Scalar
from .tape import Tape, global_tape, use_tape
from .traversal import Trace, traverse, trace
from .engine import backward, zero_grads
from .graph_utils import (
    GraphDump,
    NodeDescriptor,
    dump,
    get_graph_stats,
    print_graph_summary,
    print_computation_graph,
)
from .seeds import grad, grads, grads_list, value, numerical_grads, check_grads

__all__ = [
    "Node", "Op", "OpKind",
    "Scalar",
    "Tape", "global_tape", "use_tape",
    "Trace", "traverse", "trace",
    "backward", "zero_grads",
    "GraphDump", "NodeDescriptor", "dump",
    "get_graph_stats", "print_graph_summary", "print_computation_graph",
    "grad", "grads", "grads_list", "value", "numerical_grads", "check_grads",
]
