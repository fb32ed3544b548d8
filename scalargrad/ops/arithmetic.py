# scalargrad/ops/arithmetic.py
import numbers
import numpy as np
from ..core.var import Scalar
from ..core.node import Op, OpKind
from ..core import tape as tape_mod  # Use module access for use_tape() compatibility

def _live_tape(x):
    if not isinstance(x, Scalar):
        return None
    x.node  # raises ReferenceError for a dropped node
    return x.tape

def _tape_for(x, y):
    """
    Pick the tape the result is recorded on; operands must agree and still be
    on it. Runs before any constant is wrapped, so a rejected call records nothing.
    """
    xt = _live_tape(x)
    yt = _live_tape(y)
    if xt is not None and yt is not None and xt is not yt:
        raise ValueError("operands are recorded on different tapes")
    if xt is not None:
        return xt
    if yt is not None:
        return yt
    return tape_mod.global_tape

def _as_scalar(x, tape):
    """Ensure x is a Scalar; otherwise wrap it as a constant leaf on `tape`."""
    return x if isinstance(x, Scalar) else Scalar(x, tape=tape)

def _read(x: Scalar) -> float:
    """Read one operand's data while holding only that operand's lock."""
    node = x.node
    with node.lock:
        return node.data

def _binary(x, y, f, kind):
    """
    Generic binary primitive:
      - reads x.data and y.data one lock at a time (x and y may alias)
      - records a node with children (x, y) in left-to-right order
    """
    tape = _tape_for(x, y)
    x = _as_scalar(x, tape)
    y = _as_scalar(y, tape)
    xv = _read(x)
    yv = _read(y)
    idx = tape.push_node(data=f(xv, yv), op=Op(kind), children=(x.index, y.index))
    return Scalar._wrap(tape, idx)

def add(x, y): return _binary(x, y, lambda a, b: a + b, OpKind.ADD)
def sub(x, y): return _binary(x, y, lambda a, b: a - b, OpKind.SUB)
def mul(x, y): return _binary(x, y, lambda a, b: a * b, OpKind.MUL)

def int_power(v: float, n: int) -> float:
    """v ** n without raising: overflow gives inf, 0 ** -n gives inf."""
    with np.errstate(all="ignore"):
        return float(np.float64(v) ** n)

def powi(x, n):
    """
    Integer power:
      out.data = x.data ** n
    Local partial (applied in the engine):
      d out / d x = n * x^(n-1)
    """
    if isinstance(n, bool) or not isinstance(n, numbers.Integral):
        raise TypeError(f"only integer exponents are supported, got {type(n).__name__}")
    n = int(n)
    tape = _tape_for(x, None)
    x = _as_scalar(x, tape)
    idx = tape.push_node(data=int_power(_read(x), n), op=Op(OpKind.POWI, n),
                         children=(x.index,))
    return Scalar._wrap(tape, idx)
