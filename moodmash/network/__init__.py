"""
Numeric network core for the MoodMash engine.

A two-layer feed-forward network with manual backpropagation.
"""

from .core import NeuralNetwork, NetworkParameters, TrainingHistory, softmax, relu

__all__ = [
    'NeuralNetwork',
    'NetworkParameters',
    'TrainingHistory',
    'softmax',
    'relu',
]
