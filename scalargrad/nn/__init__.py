"""
Neural network package.

Provides a small feed-forward stack on top of the scalar graph:
1. Neuron: weighted sum + bias, optional tanh
2. Layer: neurons sharing one input vector
3. MLP: layers in sequence, last layer linear
"""

from .layers import Module, Neuron, Layer, MLP, InputLengthError

__all__ = [
    'Module',
    'Neuron',
    'Layer',
    'MLP',
    'InputLengthError',
]
