"""
Neuron, Layer and MLP built on scalar graph nodes.

Every forward call grows the graph; parameters are leaf Scalars that an
external training loop reads (`data`, `grad`) and rewrites (`set_data`).
Running each step inside `tape.scope()` drops the step's graph and keeps
the parameters.
"""

import logging
from typing import List, Sequence

import numpy as np

from ..config import default_config
from ..core.var import Scalar

logger = logging.getLogger(__name__)


class InputLengthError(ValueError):
    """Input vector length does not match the number of weights."""

    def __init__(self, expected: int, got: int):
        super().__init__(f"input data length error: expected {expected}, got {got}")
        self.expected = expected
        self.got = got


def _make_rng(rng) -> np.random.Generator:
    # accepts None, an int seed or an existing Generator
    return np.random.default_rng(rng)


class Module:
    """Base class for all neural network modules."""

    def zero_grad(self):
        for p in self.parameters():
            node = p.node
            with node.lock:
                node.grad = 0.0

    def parameters(self) -> List[Scalar]:
        return []

    def __call__(self, inputs):
        return self.output(inputs)


class Neuron(Module):
    """
    Weighted sum of the inputs plus a bias, optionally squashed by tanh.

    Weights are drawn uniformly from the configured init range, the bias
    starts at zero.
    """

    def __init__(self, nin: int, nonlin: bool = True, *, rng=None, tape=None):
        rng = _make_rng(rng)
        low, high = default_config.validate().init_range
        self.w = [Scalar(float(rng.uniform(low, high)), tape=tape) for _ in range(nin)]
        self.b = Scalar(0.0, tape=tape)
        self.nonlin = nonlin

    def output(self, inputs: Sequence) -> Scalar:
        if len(inputs) != len(self.w):
            raise InputLengthError(len(self.w), len(inputs))
        tape = self.b.tape
        for xi in inputs:
            if isinstance(xi, Scalar):
                if xi.tape is not tape:
                    raise ValueError("input is recorded on a different tape than the neuron")
                xi.node  # raises ReferenceError for a dropped node

        out = Scalar(0.0, tape=tape)
        for xi, wi in zip(inputs, self.w):
            out = out + xi * wi
        out = out + self.b

        return out.tanh() if self.nonlin else out

    def parameters(self) -> List[Scalar]:
        return self.w + [self.b]

    def __repr__(self):
        kind = "Tanh" if self.nonlin else "Linear"
        return f"{kind}Neuron({len(self.w)})"


class Layer(Module):
    """Neurons that all consume the same input vector."""

    def __init__(self, nin: int, nout: int, nonlin: bool = True, *, rng=None, tape=None):
        rng = _make_rng(rng)
        self.neurons = [Neuron(nin, nonlin, rng=rng, tape=tape) for _ in range(nout)]

    def output(self, inputs: Sequence) -> List[Scalar]:
        # the first mismatching neuron raises before any later one runs
        return [n.output(inputs) for n in self.neurons]

    def parameters(self) -> List[Scalar]:
        return [p for n in self.neurons for p in n.parameters()]

    def __repr__(self):
        return f"Layer of [{', '.join(str(n) for n in self.neurons)}]"


class MLP(Module):
    """
    Multi-layer perceptron: tanh on every layer except the last, which stays
    linear so the network can produce unbounded regression outputs.
    """

    def __init__(self, nin: int, nouts: Sequence[int], *, rng=None, tape=None):
        rng = _make_rng(rng)
        sizes = [nin] + list(nouts)
        last = len(nouts) - 1
        self.layers = [
            Layer(sizes[i], sizes[i + 1], nonlin=i != last, rng=rng, tape=tape)
            for i in range(len(nouts))
        ]
        logger.debug("built MLP %s with %d parameters", sizes, len(self.parameters()))

    def output(self, inputs: Sequence) -> List[Scalar]:
        x = list(inputs)
        for layer in self.layers:
            x = layer.output(x)
        return x

    def parameters(self) -> List[Scalar]:
        return [p for layer in self.layers for p in layer.parameters()]

    def __repr__(self):
        return f"MLP of [{', '.join(str(layer) for layer in self.layers)}]"
