# scalargrad/ops/__init__.py

# Convenience re-exports so users can do: from scalargrad.ops import mul, tanh, ...
from .arithmetic import add, sub, mul, powi
from .transcendental import tanh

__all__ = [
    "add", "sub", "mul", "powi",
    "tanh",
]
