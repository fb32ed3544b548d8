# scalargrad/__init__.py
# Scalar reverse-mode automatic differentiation with a small neural-network layer

import logging

from .config import EngineConfig, default_config
from .core.var import Scalar
from .core.tape import Tape, global_tape, use_tape
from .core.engine import backward, zero_grads
from .core.traversal import Trace, traverse, trace
from .core.graph_utils import GraphDump, NodeDescriptor, dump

from . import ops
from . import nn
from .nn import Neuron, Layer, MLP, InputLengthError

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Config
    'EngineConfig',
    'default_config',
    # Core
    'Scalar',
    'Tape',
    'global_tape',
    'use_tape',
    # Engine
    'backward',
    'zero_grads',
    'Trace',
    'traverse',
    'trace',
    'GraphDump',
    'NodeDescriptor',
    'dump',
    # Neural network
    'ops',
    'nn',
    'Neuron',
    'Layer',
    'MLP',
    'InputLengthError',
]
