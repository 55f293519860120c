"""
PyTorch Reference Model
=======================

Builds the torch equivalent of a NeuralController:

    Linear(4, 16) -> ReLU -> Linear(16, 16) -> ReLU -> Linear(16, 2) -> Tanh

Useful for checking the hand-written backward pass against autograd and for
handing trained weights to torch-based tooling. torch stores Linear weights
as (out_features, in_features), the transpose of the controller's layout.
"""

from typing import List

import numpy as np
import torch
import torch.nn as nn

from .network import NeuralController


def _linear_layers(module: nn.Sequential) -> List[nn.Linear]:
    layers = [layer for layer in module if isinstance(layer, nn.Linear)]
    if len(layers) != 3:
        raise ValueError(f"Expected 3 Linear layers, found {len(layers)}")
    return layers


def to_torch(controller: NeuralController, dtype: torch.dtype = torch.float64) -> nn.Sequential:
    """
    Create an nn.Sequential holding a copy of the controller's weights.

    Args:
        controller: Source network
        dtype: Parameter dtype (float64 keeps results comparable to numpy)

    Returns:
        Module computing the same function as controller.predict
    """
    module = nn.Sequential(
        nn.Linear(controller.input_size, controller.hidden_size),
        nn.ReLU(),
        nn.Linear(controller.hidden_size, controller.hidden_size),
        nn.ReLU(),
        nn.Linear(controller.hidden_size, controller.output_size),
        nn.Tanh(),
    ).to(dtype)

    pairs = [
        (controller.weights1, controller.bias1),
        (controller.weights2, controller.bias2),
        (controller.weights3, controller.bias3),
    ]
    with torch.no_grad():
        for layer, (weight, bias) in zip(_linear_layers(module), pairs):
            layer.weight.copy_(torch.from_numpy(np.ascontiguousarray(weight.T)))
            layer.bias.copy_(torch.from_numpy(bias))

    return module


def load_from_torch(controller: NeuralController, module: nn.Sequential) -> None:
    """
    Copy weights from a torch module back into the controller.

    Raises:
        ValueError: If the module's layers do not match the controller's shapes
    """
    layers = _linear_layers(module)
    params = {}
    for i, layer in enumerate(layers, start=1):
        params[f'weights{i}'] = layer.weight.detach().cpu().double().numpy().T
        params[f'bias{i}'] = layer.bias.detach().cpu().double().numpy()
    controller.set_parameters(params)
