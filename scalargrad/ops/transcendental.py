# scalargrad/ops/transcendental.py
import numpy as np
from ..core.var import Scalar
from ..core.node import Op, OpKind
from .arithmetic import _as_scalar, _read, _tape_for

def tanh(x):
    """
    Hyperbolic tangent. The engine uses d tanh(x)/dx = 1 - tanh(x)^2,
    so only the output value is needed on the way back.
    """
    tape = _tape_for(x, None)
    x = _as_scalar(x, tape)
    out = float(np.tanh(_read(x)))
    idx = tape.push_node(data=out, op=Op(OpKind.TANH), children=(x.index,))
    return Scalar._wrap(tape, idx)
