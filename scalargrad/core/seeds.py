# scalargrad/core/seeds.py

#-----------------------------------------------------------------------------
# We "plant" a seed (dy/dy = 1) at the scalar output and let gradients grow
# backwards through the graph. Finite differences are kept next to it so the
# analytic gradients can be checked against bumped re-evaluations.
#-----------------------------------------------------------------------------
from __future__ import annotations
import logging
from typing import Any, Callable, Dict, Iterable, List
import numpy as np

from .var import Scalar
from .tape import use_tape
from .engine import backward

logger = logging.getLogger(__name__)


def value(x: Any) -> Any:
    """Return the numeric value of a Scalar; pass through plain numbers unchanged."""
    return x.data if isinstance(x, Scalar) else x


def _ensure_scalar(v: Any, *, name: str) -> Scalar:
    """Wrap a plain value as a leaf Scalar if needed; otherwise return it unchanged."""
    return v if isinstance(v, Scalar) else Scalar(v, name)


def _run_backward(y: Any):
    # a constant output has zero gradient everywhere; nothing to sweep
    if isinstance(y, Scalar):
        backward(y)


# ----------------------------- single-input grad ----------------------------- #
def grad(f: Callable[[Scalar], Scalar], x0: float) -> float:
    """
    Derivative of a scalar function y=f(x) at x0.
    Runs one reverse pass within a fresh, isolated tape.
    """
    with use_tape():
        x = _ensure_scalar(x0, name="x")
        _run_backward(f(x))
        return x.grad


# ----------------------------- multi-input grads ----------------------------- #
def grads(f: Callable[[Dict[str, Scalar]], Scalar],
          inputs: Dict[str, float]) -> Dict[str, float]:
    """
    Gradient of y=f(vars) w.r.t. ALL inputs (dict form), from ONE reverse pass.

    Parameters
    ----------
    f       : function taking a dict {name: Scalar} and returning a Scalar
    inputs  : dict {name: numeric}

    Returns
    -------
    dict {name: float}  # gradients in the same key order as `inputs`
    """
    with use_tape():
        xs = {k: _ensure_scalar(v, name=k) for k, v in inputs.items()}
        _run_backward(f(xs))
        return {k: xs[k].grad for k in inputs.keys()}


def grads_list(f: Callable[[List[Scalar]], Scalar],
               x0_list: Iterable[float]) -> List[float]:
    """
    Same as grads(), but the inputs are provided as a list and the result is a
    list of partials in the same order.

    Example
    -------
    f = lambda xs: xs[0]*xs[0] + 3*xs[1]
    grads_list(f, [2.0, 4.0]) -> [4.0, 3.0]
    """
    with use_tape():
        xs = [_ensure_scalar(v, name=f"x{i}") for i, v in enumerate(x0_list)]
        _run_backward(f(xs))
        return [x.grad for x in xs]


# ----------------------------- finite differences ----------------------------- #
def _evaluate(f, inputs: Dict[str, float]) -> float:
    with use_tape():
        xs = {k: Scalar(v, k) for k, v in inputs.items()}
        return float(value(f(xs)))


def numerical_grads(f: Callable[[Dict[str, Scalar]], Scalar],
                    inputs: Dict[str, float],
                    eps: float = 1e-4) -> Dict[str, float]:
    """
    Central-difference gradient of y=f(vars):

        dy/dx_k = [f(x + eps*e_k) - f(x - eps*e_k)] / (2*eps)

    Two evaluations per input, each on its own tape.
    """
    out = {}
    for k in inputs.keys():
        up = dict(inputs)
        down = dict(inputs)
        up[k] = inputs[k] + eps
        down[k] = inputs[k] - eps
        out[k] = (_evaluate(f, up) - _evaluate(f, down)) / (2 * eps)
    return out


def check_grads(f: Callable[[Dict[str, Scalar]], Scalar],
                inputs: Dict[str, float],
                eps: float = 1e-4,
                tol: float = 1e-3) -> bool:
    """
    Compare reverse-mode gradients with central differences.

    Returns True when every input agrees within `tol` (absolute or relative).
    Each disagreement is logged at WARNING level.
    """
    analytic = grads(f, inputs)
    numeric = numerical_grads(f, inputs, eps=eps)
    ok = True
    for k in inputs.keys():
        if not np.isclose(analytic[k], numeric[k], rtol=tol, atol=tol):
            logger.warning("gradient mismatch for %s: analytic=%.6g numeric=%.6g",
                           k, analytic[k], numeric[k])
            ok = False
    return ok
