# scalargrad/core/var.py
from __future__ import annotations
import numbers
from typing import Optional, Tuple

from . import tape as tape_mod  # module access so use_tape() swaps are visible
from .node import Node, Op


class Scalar:
    """
    Handle to one node of the computation graph.

    A Scalar is only an address: (tape, index, serial). Several handles may point at
    the same node, and two handles are equal exactly when they do. The node's
    value, gradient and label live in the tape record and are read and written
    under that record's own lock.

    Attributes
    ----------
    tape  : Tape
        Arena holding the node.
    index : int
        Position of the node on the tape.
    serial : int
        Tape-wide serial number of the node. A handle whose node was dropped by
        Tape.truncate() or Tape.reset() no longer matches and raises
        ReferenceError instead of reading whatever now sits at `index`.
    """

    __slots__ = ("tape", "index", "serial")

    def __init__(self, data, label: str = "", *, tape=None):
        if isinstance(data, bool) or not isinstance(data, numbers.Real):
            raise TypeError(f"Scalar only accepts real numbers, but got {type(data)}")
        self.tape = tape if tape is not None else tape_mod.global_tape
        self.index = self.tape.push_node(data=float(data), label=label)
        self.serial = self.tape.nodes[self.index].serial

    @classmethod
    def _wrap(cls, tape, index: int) -> "Scalar":
        obj = cls.__new__(cls)
        obj.tape = tape
        obj.index = index
        obj.serial = tape.nodes[index].serial
        return obj

    @property
    def node(self) -> Node:
        try:
            node = self.tape.nodes[self.index]
        except IndexError:
            node = None
        if node is None or node.serial != self.serial:
            raise ReferenceError(
                f"node {self.index} was dropped from its tape (truncate or reset)"
            )
        return node

    # ----- guarded field access -----
    @property
    def data(self) -> float:
        node = self.node
        with node.lock:
            return node.data

    @data.setter
    def data(self, value):
        self.set_data(value)

    def set_data(self, value):
        """Overwrite the forward value; parents already built keep their values."""
        node = self.node
        with node.lock:
            node.data = float(value)

    @property
    def grad(self) -> float:
        node = self.node
        with node.lock:
            return node.grad

    @property
    def label(self) -> str:
        node = self.node
        with node.lock:
            return node.label

    @label.setter
    def label(self, value: str):
        node = self.node
        with node.lock:
            node.label = value

    # op and children never change after creation
    @property
    def op(self) -> Optional[Op]:
        return self.node.op

    @property
    def children(self) -> Tuple["Scalar", ...]:
        return tuple(Scalar._wrap(self.tape, c) for c in self.node.children)

    @property
    def is_leaf(self) -> bool:
        return self.node.is_leaf

    def same_node(self, other: "Scalar") -> bool:
        return (self.tape is other.tape and self.index == other.index
                and self.serial == other.serial)

    def __eq__(self, other):
        if not isinstance(other, Scalar):
            return NotImplemented
        return self.same_node(other)

    def __hash__(self):
        return hash((id(self.tape), self.serial))

    def __repr__(self):
        node = self.node
        with node.lock:
            data, grad, label = node.data, node.grad, node.label
        return f"Scalar(data={data!r}, grad={grad!r}, label={label!r})"

    # Operator overloading for arithmetic operations
    def __add__(self, other):
        from ..ops.arithmetic import add
        return add(self, other)

    def __radd__(self, other):
        from ..ops.arithmetic import add
        return add(other, self)

    def __sub__(self, other):
        from ..ops.arithmetic import sub
        return sub(self, other)

    def __rsub__(self, other):
        from ..ops.arithmetic import sub
        return sub(other, self)

    def __mul__(self, other):
        from ..ops.arithmetic import mul
        return mul(self, other)

    def __rmul__(self, other):
        from ..ops.arithmetic import mul
        return mul(other, self)

    def __pow__(self, exponent):
        from ..ops.arithmetic import powi
        return powi(self, exponent)

    def powi(self, n: int) -> "Scalar":
        from ..ops.arithmetic import powi
        return powi(self, n)

    def tanh(self) -> "Scalar":
        from ..ops.transcendental import tanh
        return tanh(self)

    # Graph-level operations
    def backward(self, order: Optional[str] = None):
        from .engine import backward
        backward(self, order=order)

    def traverse(self):
        from .traversal import traverse
        return traverse(self)

    def trace(self):
        from .traversal import trace
        return trace(self)

    def dump(self, precision: Optional[int] = None):
        from .graph_utils import dump
        return dump(self, precision=precision)
