"""
Computation graph utilities

Dump a graph for an external renderer, and print/analyse tape structure.
"""

import numpy as np
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
from collections import Counter

from ..config import default_config
from .traversal import trace


@dataclass(frozen=True)
class NodeDescriptor:
    """One node as handed to a renderer: values are preformatted strings."""
    label: str
    data: str
    grad: str
    op: Optional[str] = None


@dataclass
class GraphDump:
    """
    Distinct nodes in trace discovery order plus (child, parent) index edges.
    Layout and rendering are left entirely to the consumer.
    """
    nodes: List[NodeDescriptor]
    edges: List[Tuple[int, int]]

    def to_frame(self):
        """
        Node table as a pandas DataFrame (one row per node, indexed by trace
        position), with each row's parent positions in a `parents` column.
        """
        import pandas as pd

        parents: Dict[int, List[int]] = {i: [] for i in range(len(self.nodes))}
        for child, parent in self.edges:
            parents[child].append(parent)
        frame = pd.DataFrame(
            [
                {"label": n.label, "data": n.data, "grad": n.grad, "op": n.op,
                 "parents": parents[i]}
                for i, n in enumerate(self.nodes)
            ],
            columns=["label", "data", "grad", "op", "parents"],
        )
        frame.index.name = "node"
        return frame


def dump(root, precision: Optional[int] = None) -> GraphDump:
    """
    Snapshot the graph below `root` for visualisation.

    Args:
        root: output Scalar
        precision: decimals for data/grad (default_config.display_precision)

    Returns:
        GraphDump with the trace node order and edge list
    """
    if precision is None:
        precision = default_config.display_precision
    nodes, edges = trace(root)
    descriptors = []
    for s in nodes:
        node = s.node
        with node.lock:
            label, data, grad = node.label, node.data, node.grad
        descriptors.append(NodeDescriptor(
            label=label,
            data=f"{data:.{precision}f}",
            grad=f"{grad:.{precision}f}",
            op=node.op.symbol if node.op is not None else None,
        ))
    return GraphDump(nodes=descriptors, edges=list(edges))


def get_graph_stats(tape) -> Dict:
    """
    Structural statistics of everything recorded on a tape (no printing).

    Returns:
        dict with node/edge counts, fan-in/fan-out and an operation breakdown
    """
    if not tape.nodes:
        return {
            'nodes': 0,
            'edges': 0,
            'leaves': 0,
            'max_fan_in': 0,
            'avg_fan_in': 0.0,
            'max_fan_out': 0,
            'avg_fan_out': 0.0,
            'operations': {}
        }

    nodes = list(tape.nodes)
    n_nodes = len(nodes)

    # Fan-in: number of operands per node
    fan_ins = [len(node.children) for node in nodes]
    n_edges = sum(fan_ins)

    # Fan-out: how often each node is used as an operand
    fan_outs = [0] * n_nodes
    for node in nodes:
        for c in node.children:
            fan_outs[c] += 1

    op_counter = Counter(str(node.op) if node.op is not None else "leaf" for node in nodes)

    return {
        'nodes': n_nodes,
        'edges': n_edges,
        'leaves': op_counter.get("leaf", 0),
        'max_fan_in': max(fan_ins),
        'avg_fan_in': float(np.mean(fan_ins)),
        'max_fan_out': max(fan_outs),
        'avg_fan_out': float(np.mean(fan_outs)),
        'operations': dict(op_counter)
    }


def print_graph_summary(tape) -> Dict:
    """
    Print a summary of the tape and return the same statistics as get_graph_stats.
    """
    stats = get_graph_stats(tape)
    if stats['nodes'] == 0:
        print("Empty computation graph")
        return stats

    print("\n" + "="*70)
    print("COMPUTATION GRAPH SUMMARY")
    print("="*70)
    print(f"Total nodes:        {stats['nodes']:,}")
    print(f"Total edges:        {stats['edges']:,}")
    print(f"Leaves:             {stats['leaves']:,}")
    print(f"Max fan-in:         {stats['max_fan_in']}")
    print(f"Avg fan-in:         {stats['avg_fan_in']:.2f}")
    print(f"Max fan-out:        {stats['max_fan_out']}")
    print(f"Avg fan-out:        {stats['avg_fan_out']:.2f}")
    print()
    print("Operation breakdown:")
    for op_type, count in Counter(stats['operations']).most_common(10):
        pct = 100.0 * count / stats['nodes']
        print(f"  {op_type:12s}: {count:6,} ({pct:5.1f}%)")
    print("="*70 + "\n")
    return stats


def print_computation_graph(tape, max_nodes: int = 20) -> None:
    """
    Print the tape one node per line.

    Args:
        tape: Tape to print
        max_nodes: at most this many nodes are printed
    """
    print("\n" + "="*70)
    print("COMPUTATION GRAPH STRUCTURE")
    print("="*70)

    if not tape.nodes:
        print("Empty graph")
        return

    n_show = min(len(tape.nodes), max_nodes)

    for i, node in enumerate(tape.nodes[:n_show]):
        with node.lock:
            data, label = node.data, node.label
        name = f" {label}" if label else ""
        if node.children:
            child_info = ", ".join(f"Node{c}" for c in node.children)
            print(f"Node {i:4d}: {str(node.op):12s} ({data:10.6f}){name} <- [{child_info}]")
        else:
            print(f"Node {i:4d}: {'leaf':12s} ({data:10.6f}){name}")

    if len(tape.nodes) > max_nodes:
        print(f"... ({len(tape.nodes) - max_nodes} more nodes)")

    print("="*70 + "\n")
