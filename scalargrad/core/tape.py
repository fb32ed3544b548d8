# scalargrad/core/tape.py
from __future__ import annotations
import threading
from typing import List, Optional, Sequence
from contextlib import contextmanager
from .node import Node, Op

class Tape:
    """
    Append-only arena of graph nodes, addressed by stable indices.

    Children are always recorded before their parents, so the tape order is a
    topological order of every graph stored on it.
    """
    def __init__(self):
        self.nodes: List[Node] = []
        self._grow_lock = threading.Lock()
        # serial numbers are never reused, so handles can detect dropped nodes
        self._next_serial = 0

    def __len__(self):
        return len(self.nodes)

    def reset(self):
        self.truncate(0)

    def mark(self) -> int:
        """Current size; pass it to truncate() to drop everything recorded later."""
        return len(self.nodes)

    def truncate(self, mark: int):
        """
        Drop every node recorded at or after `mark`. Nodes before the mark never
        reference later ones, so they stay intact; handles to dropped nodes
        raise ReferenceError from then on.
        """
        with self._grow_lock:
            if not 0 <= mark <= len(self.nodes):
                raise ValueError(f"mark {mark} is outside the tape (size {len(self.nodes)})")
            del self.nodes[mark:]

    @contextmanager
    def scope(self):
        """
        Record a temporary graph and drop it on exit:
            with tape.scope():
                loss = ...
                loss.backward()
                ... update parameters ...
        """
        mark = self.mark()
        try:
            yield self
        finally:
            self.truncate(mark)

    def push_node(self, *, data: float, op: Optional[Op] = None,
                  children: Sequence[int] = (), label: str = "") -> int:
        """
        Append a Node(data, label, op, children) to the tape and return its index.
        Every child index must already exist on this tape.
        """
        children = tuple(children)
        with self._grow_lock:
            n = len(self.nodes)
            for c in children:
                if not 0 <= c < n:
                    raise ValueError(f"child index {c} is not on the tape (size {n})")
            self.nodes.append(Node(data=data, label=label, op=op, children=children,
                                   serial=self._next_serial))
            self._next_serial += 1
            return n

    def node(self, index: int) -> Node:
        return self.nodes[index]

# Global default tape
global_tape = Tape()

@contextmanager
def use_tape(tape: Optional[Tape] = None):
    """
    Context manager to temporarily record onto a fresh (or given) tape:
        with use_tape():
            ... build computation ...
            y.backward()
    """
    from . import tape as _tape_mod  # local import so callers see the swap
    prev = _tape_mod.global_tape
    try:
        _tape_mod.global_tape = tape if tape is not None else Tape()
        yield _tape_mod.global_tape
    finally:
        _tape_mod.global_tape = prev
