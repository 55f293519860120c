"""
Pursuit Agent
=============

The per-tick control loop that connects the live world to the network.

Each tick:
    1. Observe features  = [player_x, player_y, pursuer_x, pursuer_y]
    2. Build the target  = [(player_x - pursuer_x) / W, (player_y - pursuer_y) / H]
    3. Predict a direction and scale it into a movement delta
    4. Every N-th tick, train on the same (features, target) pair
    5. Count knowledge and signal when the pursuer is ready to level up

The training label comes from the same world state the network's output
then changes, so the pursuer learns online from its own chase.
"""

import time
from collections import deque
from typing import Callable, Deque, Optional, Sequence

import numpy as np

from .network import NeuralController
from ..utils.logger import get_logger

from config import Config

logger = get_logger(__name__)


def clamp_position(pos: Sequence[float], world_width: float, world_height: float) -> np.ndarray:
    """Clamp a position to the playfield centered on the origin."""
    half_w = world_width / 2.0
    half_h = world_height / 2.0
    return np.array([
        min(max(float(pos[0]), -half_w), half_w),
        min(max(float(pos[1]), -half_h), half_h),
    ])


class PursuitAgent:
    """
    Neural pursuer with online training and level progression.

    The agent uses a NeuralController instance but never touches its
    weights directly. Level changes come from outside through set_level();
    the agent only raises a flag (and calls on_level_up) when it has
    accumulated enough knowledge.

    Attributes:
        network: The controller queried and trained every tick
        level: Current level (starts at 1)
        knowledge: Ticks since the last level change or reset
        speed: Movement multiplier derived from the level
        size: Diameter derived from the level
        loss_history: Most recent training losses, oldest first

    Example:
        >>> agent = PursuitAgent(name="HAL9000")
        >>> delta = agent.tick(1 / 60, (0.0, -3.0), (0.0, 3.0), 7.2, 12.8)
    """

    def __init__(
        self,
        network: Optional[NeuralController] = None,
        config: Optional[Config] = None,
        name: str = "",
        train_cadence: Optional[int] = None,
        on_level_up: Optional[Callable[['PursuitAgent'], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the agent.

        Args:
            network: Controller to use (a new one is built when omitted)
            config: Configuration object
            name: Display name handed to the orchestrator's HUD
            train_cadence: Train every N ticks (default: config.TRAIN_CADENCE)
            on_level_up: Called once per level when knowledge passes the threshold
            clock: Monotonic time source in seconds, used for slowdowns
        """
        self.config = config or Config()
        self.network = network or NeuralController(config=self.config)
        self.train_cadence = train_cadence if train_cadence is not None else self.config.TRAIN_CADENCE
        if self.train_cadence < 1:
            raise ValueError(f"train_cadence must be >= 1, got {self.train_cadence}")

        self.on_level_up = on_level_up
        self._clock = clock

        self.loss_history: Deque[float] = deque(maxlen=self.config.LOSS_HISTORY_SIZE)

        self._features = np.zeros(self.network.input_size)
        self._labels = np.zeros(self.network.output_size)

        # Ticks seen (cadence gating) and training steps taken
        self.ticks = 0
        self.train_steps = 0

        self.ready_to_level_up = False

        self._slow_factor = 1.0
        self._slow_until = 0.0

        self.name = name
        self.level = 1
        self.knowledge = 0
        self.speed = self.config.BASE_SPEED
        self.size = self.config.BASE_SIZE
        self.set_level(1, name)

    # ------------------------------------------------------------------
    # Control loop
    # ------------------------------------------------------------------

    def tick(
        self,
        dt: float,
        player_pos: Optional[Sequence[float]],
        self_pos: Optional[Sequence[float]],
        world_width: float,
        world_height: float,
        frame: Optional[int] = None,
    ) -> Optional[np.ndarray]:
        """
        Advance the pursuer by one simulation step.

        The caller applies the returned delta to the pursuer's position and
        clamps it (see clamp_position) before the next tick.

        Args:
            dt: Time step in seconds
            player_pos: Player (x, y), or None while the scene is still loading
            self_pos: Pursuer (x, y), or None while the scene is still loading
            world_width: Playfield width in world units
            world_height: Playfield height in world units
            frame: External frame counter for cadence gating
                   (defaults to the agent's own tick counter)

        Returns:
            Movement delta (dx, dy), or None if world state was unavailable
        """
        if player_pos is None or self_pos is None:
            return None

        px, py = float(player_pos[0]), float(player_pos[1])
        ax, ay = float(self_pos[0]), float(self_pos[1])

        self._features = np.array([px, py, ax, ay])
        self._labels = np.array([(px - ax) / world_width, (py - ay) / world_height])

        output = self.network.predict(self._features)

        half_extent = np.array([world_width / 2.0, world_height / 2.0])
        movement = half_extent * output * dt * self.effective_speed

        self.ticks += 1
        counter = frame if frame is not None else self.ticks
        if counter % self.train_cadence == 0:
            self._train()

        self.knowledge += 1
        if not self.ready_to_level_up and self.knowledge > self.level * self.config.KNOWLEDGE_PER_LEVEL:
            self.ready_to_level_up = True
            logger.info(f"{self.name} ready to level up (level={self.level}, knowledge={self.knowledge})")
            if self.on_level_up is not None:
                self.on_level_up(self)

        return movement

    def _train(self) -> None:
        """Train on the current tick's features and labels."""
        loss = self.network.train_step(self._features, self._labels)
        self.loss_history.append(loss)
        self.train_steps += 1

        if not np.isfinite(loss):
            logger.warning(f"{self.name} produced a non-finite loss ({loss}) at training step {self.train_steps}")
        else:
            logger.debug(f"train_step={self.train_steps} loss={loss:.6f}")

    # ------------------------------------------------------------------
    # Progression and timed effects
    # ------------------------------------------------------------------

    def set_level(self, level: int, name: str) -> None:
        """
        Move to a new level. Does not touch the network.

        Args:
            level: New level (1-based)
            name: New display name
        """
        self.level = level
        self.name = name
        self.knowledge = 0
        self.speed = self.config.BASE_SPEED + level * self.config.SPEED_PER_LEVEL
        self.size = self.config.BASE_SIZE + level * self.config.SIZE_PER_LEVEL
        self.ready_to_level_up = False
        logger.info(f"Pursuer {name!r} at level {level} (speed={self.speed:.1f}, size={self.size:.0f})")

    def apply_slowdown(self, duration: float, factor: float) -> None:
        """
        Multiply speed by ``factor`` for ``duration`` seconds of real time.

        A new slowdown replaces any active one.

        Raises:
            ValueError: If duration is negative or factor is not positive
        """
        if duration < 0:
            raise ValueError(f"duration must be >= 0, got {duration}")
        if factor <= 0:
            raise ValueError(f"factor must be positive, got {factor}")
        self._slow_factor = factor
        self._slow_until = self._clock() + duration

    @property
    def is_slowed(self) -> bool:
        """Whether a slowdown is currently active (reverts once expired)."""
        if self._slow_factor != 1.0 and self._clock() >= self._slow_until:
            self._slow_factor = 1.0
        return self._slow_factor != 1.0

    @property
    def effective_speed(self) -> float:
        """Level speed with any active slowdown applied."""
        return self.speed * (self._slow_factor if self.is_slowed else 1.0)

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Forget everything learned: new weights, empty history, zero knowledge.

        Level is left alone; the orchestrator sets it with set_level().
        The tick counter keeps running so cadence stays aligned with frames.
        """
        self.network.reset(seed)
        self.loss_history.clear()
        self.knowledge = 0
        self.ready_to_level_up = False
        self._slow_factor = 1.0
        self._slow_until = 0.0
        logger.info(f"Pursuer {self.name!r} reset")

    # ------------------------------------------------------------------
    # Telemetry (read-only, for the HUD)
    # ------------------------------------------------------------------

    @property
    def features(self) -> np.ndarray:
        return self._features.copy()

    @property
    def labels(self) -> np.ndarray:
        return self._labels.copy()

    @property
    def last_output(self) -> np.ndarray:
        return self.network.last_output.copy()

    @property
    def last_loss(self) -> float:
        return self.network.last_loss

    @property
    def average_loss(self) -> float:
        """Mean of the loss history (0 when empty)."""
        if not self.loss_history:
            return 0.0
        return float(np.mean(self.loss_history))
