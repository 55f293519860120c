"""
AI Module
=========

Online-learning pursuit components.

Classes:
    NeuralController - 4-16-16-2 network with manual backpropagation
    PursuitAgent     - Per-tick control loop with cadence-gated training
"""

from .network import NeuralController
from .agent import PursuitAgent, clamp_position

__all__ = ['NeuralController', 'PursuitAgent', 'clamp_position']
