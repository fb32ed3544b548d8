# scalargrad/core/node.py
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class OpKind(Enum):
    """Closed set of primitive operations recorded on the tape."""
    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    POWI = "powi"
    TANH = "tanh"


_ARITY = {
    OpKind.ADD: 2,
    OpKind.SUB: 2,
    OpKind.MUL: 2,
    OpKind.POWI: 1,
    OpKind.TANH: 1,
}

_SYMBOL = {
    OpKind.ADD: "+",
    OpKind.SUB: "-",
    OpKind.MUL: "*",
    OpKind.POWI: "POWI",
    OpKind.TANH: "tanh",
}


@dataclass(frozen=True)
class Op:
    """
    Operator tag of a non-leaf node.

    Attributes
    ----------
    kind : OpKind
        Which local gradient rule applies.
    exponent : Optional[int]
        Integer exponent, only set for OpKind.POWI.
    """
    kind: OpKind
    exponent: Optional[int] = None

    def __post_init__(self):
        if (self.kind is OpKind.POWI) != (self.exponent is not None):
            raise ValueError(f"exponent must be given exactly for POWI, got {self!r}")

    @property
    def arity(self) -> int:
        return _ARITY[self.kind]

    @property
    def symbol(self) -> str:
        return _SYMBOL[self.kind]

    def __str__(self):
        if self.kind is OpKind.POWI:
            return f"powi({self.exponent})"
        return self.kind.value


@dataclass(eq=False)
class Node:
    """
    One record in the tape arena.

    Attributes
    ----------
    data     : float
        Forward value, captured when the node was created.
    label    : str
        Display name only; never used for identity.
    op       : Optional[Op]
        None for leaves.
    children : Tuple[int, ...]
        Tape indices of the operands, left to right.
    grad     : float
        Accumulated reverse-mode gradient.
    serial   : int
        Tape-wide number assigned on push, never reused by the tape.
    lock     : threading.Lock
        Guards `data`, `grad` and `label` of this record only.
    """
    data: float
    label: str = ""
    op: Optional[Op] = None
    children: Tuple[int, ...] = ()
    grad: float = 0.0
    serial: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def __post_init__(self):
        expected = 0 if self.op is None else self.op.arity
        if len(self.children) != expected:
            raise ValueError(
                f"op {self.op} expects {expected} children, got {len(self.children)}"
            )

    @property
    def is_leaf(self) -> bool:
        return self.op is None
