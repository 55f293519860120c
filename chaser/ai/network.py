"""
Pursuit Controller Network
==========================

A tiny feed-forward network that turns raw positions into a movement
direction for the pursuer, trained online with hand-written backprop.

Architecture:
    Input (4)  -> Linear -> ReLU
    Hidden (16) -> Linear -> ReLU
    Hidden (16) -> Linear -> Tanh -> Output (2)

    Input:  [player_x, player_y, pursuer_x, pursuer_y] in world units
    Output: movement direction per axis, each component in (-1, 1)

Training:
    Single-sample SGD (no momentum, no weight decay) on
        Loss = 0.5 * sum((y - target)^2)
    where the target is the normalized direction from pursuer to player.

Key Features:
    - Pure numpy, no autograd
    - Injectable random generator for reproducible initialization
    - Cached activations for the backward pass and for diagnostics
"""

from typing import Dict, List, Optional

import numpy as np

from config import Config


def relu(x: np.ndarray) -> np.ndarray:
    return np.maximum(x, 0.0)


def relu_derivative(x: np.ndarray) -> np.ndarray:
    """ReLU slope evaluated at the pre-activation (1 where x > 0)."""
    return (x > 0).astype(np.float64)


def tanh_derivative(y: np.ndarray) -> np.ndarray:
    """Tanh slope expressed in terms of the already-activated output."""
    return 1.0 - y * y


class NeuralController:
    """
    Online-trained 3-layer network driving the pursuer.

    Weights are stored input-major, so a forward pass is ``x @ W + b``:
        weights1: (input_size, hidden_size)
        weights2: (hidden_size, hidden_size)
        weights3: (hidden_size, output_size)

    All weights are drawn in the constructor; there is no lazy
    initialization path, so the network is never observed half-built.

    Attributes:
        learning_rate (float): Fixed SGD step size
        last_output (np.ndarray): Output of the most recent forward pass
        last_loss (float): Loss of the most recent training step

    Example:
        >>> net = NeuralController(seed=42)
        >>> direction = net.predict([0.0, -3.0, 0.0, 3.0])
        >>> loss = net.train_step([0.0, -3.0, 0.0, 3.0], [0.0, -0.46875])
    """

    weights1: np.ndarray
    bias1: np.ndarray
    weights2: np.ndarray
    bias2: np.ndarray
    weights3: np.ndarray
    bias3: np.ndarray

    def __init__(
        self,
        input_size: Optional[int] = None,
        hidden_size: Optional[int] = None,
        output_size: Optional[int] = None,
        learning_rate: Optional[float] = None,
        config: Optional[Config] = None,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
    ):
        """
        Initialize the network.

        Args:
            input_size: Feature count (default: config.INPUT_SIZE)
            hidden_size: Width of both hidden layers (default: config.HIDDEN_SIZE)
            output_size: Output count (default: config.OUTPUT_SIZE)
            learning_rate: SGD step size (default: config.LEARNING_RATE)
            config: Configuration object
            rng: Random generator used for weight initialization
            seed: Seed for a fresh generator when rng is not given
                  (falls back to config.SEED)
        """
        self.config = config or Config()
        self.input_size = input_size if input_size is not None else self.config.INPUT_SIZE
        self.hidden_size = hidden_size if hidden_size is not None else self.config.HIDDEN_SIZE
        self.output_size = output_size if output_size is not None else self.config.OUTPUT_SIZE
        self.learning_rate = learning_rate if learning_rate is not None else self.config.LEARNING_RATE

        for what, size in (("input_size", self.input_size), ("hidden_size", self.hidden_size),
                           ("output_size", self.output_size)):
            if size < 1:
                raise ValueError(f"{what} must be >= 1, got {size}")
        if self.learning_rate <= 0:
            raise ValueError(f"learning_rate must be positive, got {self.learning_rate}")

        if rng is None:
            rng = np.random.default_rng(seed if seed is not None else self.config.SEED)
        self.rng = rng

        self._init_weights()
        self._clear_cache()

    def _init_weights(self) -> None:
        """
        Xavier-style uniform initialization.

        Each weight is U(-1, 1) * sqrt(2 / fan_in); fan_in is the input size
        for layer 1 and the hidden size for layers 2 and 3. Biases start at 0.
        Every array is built before any attribute is replaced.
        """
        scale1 = np.sqrt(2.0 / self.input_size)
        scale2 = np.sqrt(2.0 / self.hidden_size)

        weights1 = self.rng.uniform(-1.0, 1.0, (self.input_size, self.hidden_size)) * scale1
        weights2 = self.rng.uniform(-1.0, 1.0, (self.hidden_size, self.hidden_size)) * scale2
        weights3 = self.rng.uniform(-1.0, 1.0, (self.hidden_size, self.output_size)) * scale2

        self.weights1, self.bias1 = weights1, np.zeros(self.hidden_size)
        self.weights2, self.bias2 = weights2, np.zeros(self.hidden_size)
        self.weights3, self.bias3 = weights3, np.zeros(self.output_size)

    def _clear_cache(self) -> None:
        """Drop cached activations and the last-call snapshots."""
        self.layer1_pre = np.zeros(self.hidden_size)
        self.layer1_act = np.zeros(self.hidden_size)
        self.layer2_pre = np.zeros(self.hidden_size)
        self.layer2_act = np.zeros(self.hidden_size)
        self.output_pre = np.zeros(self.output_size)
        self.output = np.zeros(self.output_size)

        self.last_output = np.zeros(self.output_size)
        self.last_loss = 0.0

    def _as_vector(self, values, size: int, what: str) -> np.ndarray:
        """Convert to a float vector, rejecting anything not exactly ``size`` long."""
        vector = np.asarray(values, dtype=np.float64)
        if vector.shape != (size,):
            raise ValueError(f"{what} must have shape ({size},), got {vector.shape}")
        return vector

    def _forward(self, x: np.ndarray) -> np.ndarray:
        """Forward pass on a validated input, caching every intermediate."""
        self.layer1_pre = x @ self.weights1 + self.bias1
        self.layer1_act = relu(self.layer1_pre)

        self.layer2_pre = self.layer1_act @ self.weights2 + self.bias2
        self.layer2_act = relu(self.layer2_pre)

        self.output_pre = self.layer2_act @ self.weights3 + self.bias3
        self.output = np.tanh(self.output_pre)

        self.last_output = self.output.copy()
        return self.output

    def predict(self, features) -> np.ndarray:
        """
        Compute the movement direction for a feature vector.

        Args:
            features: [player_x, player_y, pursuer_x, pursuer_y]

        Returns:
            Fresh array of shape (output_size,) with components in [-1, 1]

        Raises:
            ValueError: If features is not a vector of length input_size
        """
        x = self._as_vector(features, self.input_size, "features")
        return self._forward(x).copy()

    def train_step(self, features, target) -> float:
        """
        Run one SGD step on a single (features, target) pair.

        Deltas for each layer are computed from that layer's weights before
        they are updated, then the update is applied.

        Args:
            features: Input vector of length input_size
            target: Desired output of length output_size

        Returns:
            Loss of the forward pass that preceded the update

        Raises:
            ValueError: On wrongly shaped features or target
        """
        x = self._as_vector(features, self.input_size, "features")
        t = self._as_vector(target, self.output_size, "target")
        lr = self.learning_rate

        y = self._forward(x)
        diff = y - t
        loss = float(0.5 * np.sum(diff * diff))

        # Output layer (tanh)
        delta_out = diff * tanh_derivative(y)
        delta2 = (self.weights3 @ delta_out) * relu_derivative(self.layer2_pre)
        self.weights3 -= lr * np.outer(self.layer2_act, delta_out)
        self.bias3 -= lr * delta_out

        # Hidden layer 2
        delta1 = (self.weights2 @ delta2) * relu_derivative(self.layer1_pre)
        self.weights2 -= lr * np.outer(self.layer1_act, delta2)
        self.bias2 -= lr * delta2

        # Hidden layer 1, raw features are the input activation
        self.weights1 -= lr * np.outer(x, delta1)
        self.bias1 -= lr * delta1

        self.last_loss = loss
        return loss

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Re-draw all weights and clear cached state.

        Args:
            seed: If given, reseed the generator first so the new weights
                  are reproducible
        """
        if seed is not None:
            self.rng = np.random.default_rng(seed)
        self._init_weights()
        self._clear_cache()

    @property
    def diverged(self) -> bool:
        """True once any weight, bias, or the last loss is NaN or infinite."""
        if not np.isfinite(self.last_loss):
            return True
        params = (self.weights1, self.bias1, self.weights2, self.bias2, self.weights3, self.bias3)
        return not all(np.isfinite(p).all() for p in params)

    def get_parameters(self) -> Dict[str, np.ndarray]:
        """Copies of all weights and biases keyed by attribute name."""
        return {
            'weights1': self.weights1.copy(),
            'bias1': self.bias1.copy(),
            'weights2': self.weights2.copy(),
            'bias2': self.bias2.copy(),
            'weights3': self.weights3.copy(),
            'bias3': self.bias3.copy(),
        }

    def set_parameters(self, params: Dict[str, np.ndarray]) -> None:
        """
        Replace all weights and biases.

        Every array is validated against the current shapes before any
        of them is assigned.

        Raises:
            KeyError: If a parameter is missing
            ValueError: If a parameter has the wrong shape
        """
        current = self.get_parameters()
        staged = {}
        for name, old in current.items():
            new = np.array(params[name], dtype=np.float64)
            if new.shape != old.shape:
                raise ValueError(f"{name} must have shape {old.shape}, got {new.shape}")
            staged[name] = new
        for name, value in staged.items():
            setattr(self, name, value)

    def get_weights(self) -> List[np.ndarray]:
        """Weight matrices in layer order (for visualization)."""
        return [self.weights1.copy(), self.weights2.copy(), self.weights3.copy()]

    def get_activations(self) -> Dict[str, np.ndarray]:
        """Activations cached by the most recent forward pass."""
        return {
            'layer_0': self.layer1_act.copy(),
            'layer_1': self.layer2_act.copy(),
            'output': self.output.copy(),
        }

    def get_layer_info(self) -> List[Dict]:
        """
        Get information about each layer for visualization.

        Returns:
            List of dicts with layer metadata
        """
        return [
            {'name': 'Input', 'neurons': self.input_size, 'type': 'input'},
            {'name': 'Hidden 1', 'neurons': self.hidden_size, 'type': 'hidden'},
            {'name': 'Hidden 2', 'neurons': self.hidden_size, 'type': 'hidden'},
            {'name': 'Output', 'neurons': self.output_size, 'type': 'output'},
        ]

    def count_parameters(self) -> int:
        """Return total number of trainable parameters."""
        return sum(p.size for p in self.get_parameters().values())
