"""
Tests for the PyTorch reference model.

These tests check the hand-written forward and backward passes
against torch autograd on an identical network.
"""

import pytest
import numpy as np
import torch
import torch.nn as nn
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from chaser.ai.network import NeuralController
from chaser.ai.reference import to_torch, load_from_torch


FEATURES = [0.5, -3.0, 1.2, 3.0]
TARGET = [0.1, -0.46875]


@pytest.fixture
def network():
    return NeuralController(seed=2024)


def linear_layers(module):
    return [layer for layer in module if isinstance(layer, nn.Linear)]


class TestExport:
    """Test conversion to torch."""

    def test_architecture(self, network):
        module = to_torch(network)
        layers = linear_layers(module)
        assert [(l.in_features, l.out_features) for l in layers] == [(4, 16), (16, 16), (16, 2)]
        assert isinstance(module[-1], nn.Tanh)

    def test_forward_matches(self, network):
        module = to_torch(network)
        with torch.no_grad():
            expected = module(torch.tensor(FEATURES, dtype=torch.float64)).numpy()
        np.testing.assert_allclose(network.predict(FEATURES), expected, rtol=1e-12, atol=1e-12)

    def test_export_is_a_copy(self, network):
        module = to_torch(network)
        network.train_step(FEATURES, TARGET)
        exported_bias = linear_layers(module)[2].bias.detach().numpy()
        assert np.all(exported_bias == 0)
        assert np.any(network.bias3 != 0)


class TestGradients:
    """Manual SGD step matches autograd."""

    def test_train_step_matches_autograd(self, network):
        module = to_torch(network)
        x = torch.tensor(FEATURES, dtype=torch.float64)
        t = torch.tensor(TARGET, dtype=torch.float64)

        y = module(x)
        torch_loss = 0.5 * ((y - t) ** 2).sum()
        torch_loss.backward()

        before = network.get_parameters()
        lr = network.learning_rate
        loss = network.train_step(FEATURES, TARGET)

        assert loss == pytest.approx(torch_loss.item(), rel=1e-12)

        for i, layer in enumerate(linear_layers(module), start=1):
            expected_w = before[f'weights{i}'] - lr * layer.weight.grad.numpy().T
            expected_b = before[f'bias{i}'] - lr * layer.bias.grad.numpy()
            np.testing.assert_allclose(getattr(network, f'weights{i}'), expected_w, rtol=1e-10, atol=1e-14)
            np.testing.assert_allclose(getattr(network, f'bias{i}'), expected_b, rtol=1e-10, atol=1e-14)

    def test_sgd_sequence_matches_torch_optimizer(self, network):
        """Several steps with torch.optim.SGD land on the same weights."""
        module = to_torch(network)
        optimizer = torch.optim.SGD(module.parameters(), lr=network.learning_rate)
        x = torch.tensor(FEATURES, dtype=torch.float64)
        t = torch.tensor(TARGET, dtype=torch.float64)

        for _ in range(5):
            optimizer.zero_grad()
            loss = 0.5 * ((module(x) - t) ** 2).sum()
            loss.backward()
            optimizer.step()
            network.train_step(FEATURES, TARGET)

        for i, layer in enumerate(linear_layers(module), start=1):
            np.testing.assert_allclose(
                getattr(network, f'weights{i}'), layer.weight.detach().numpy().T,
                rtol=1e-9, atol=1e-12,
            )


class TestImport:
    """Test loading weights back from torch."""

    def test_load_from_torch(self, network):
        module = to_torch(network)
        with torch.no_grad():
            for layer in linear_layers(module):
                layer.weight.mul_(0.5)
        load_from_torch(network, module)
        with torch.no_grad():
            expected = module(torch.tensor(FEATURES, dtype=torch.float64)).numpy()
        np.testing.assert_allclose(network.predict(FEATURES), expected, rtol=1e-12, atol=1e-12)

    def test_load_rejects_mismatched_module(self, network):
        module = nn.Sequential(nn.Linear(4, 8), nn.ReLU(), nn.Linear(8, 8), nn.ReLU(), nn.Linear(8, 2))
        with pytest.raises(ValueError):
            load_from_torch(network, module)
