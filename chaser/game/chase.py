"""
Chase Game
==========

Headless game-state machine around the pursuer: scenes, collision,
level-ups and restarts. Drawing, audio and input devices live elsewhere and
talk to this class through move_player(), step() and snapshot().

Scenes:
    INTRO     -> PLAY       (start())
    PLAY      -> GAME_OVER  (pursuer touches the player)
    PLAY      -> LEVEL      (pursuer has enough knowledge)
    LEVEL     -> PLAY       (after LEVEL_PAUSE_FRAMES)
    GAME_OVER -> PLAY       (after GAME_OVER_FRAMES, full restart)
"""

import math
import random
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import numpy as np

from ..ai.agent import PursuitAgent, clamp_position
from ..utils.logger import get_logger

from config import Config

logger = get_logger(__name__)


class GameScene(Enum):
    INTRO = 'intro'
    PLAY = 'play'
    LEVEL = 'level'
    GAME_OVER = 'game_over'


class ChaseGame:
    """
    Owns world geometry and positions, and drives one PursuitAgent.

    Attributes:
        agent: The pursuer (constructed here unless injected)
        scene: Current GameScene
        frame: Frames since the last restart
        score: Frames survived in the current run
        shake_amount: Proximity intensity for the presentation layer

    Example:
        >>> game = ChaseGame(Config(SEED=1))
        >>> game.start()
        >>> game.move_player(1.0, -2.0)
        >>> game.step(1 / 60)
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        agent: Optional[PursuitAgent] = None,
        rng: Optional[random.Random] = None,
        start_scene: GameScene = GameScene.INTRO,
    ):
        """
        Initialize the game.

        Args:
            config: Configuration object
            agent: Pursuer to drive (a new one is built when omitted)
            rng: Random source for names (seeded from config.SEED by default)
            start_scene: Initial scene
        """
        self.config = config or Config()
        self.rng = rng or random.Random(self.config.SEED)

        self.width, self.height = self.config.WORLD_SIZE

        self.agent = agent or PursuitAgent(config=self.config)
        self.agent.on_level_up = self._on_agent_ready
        self.agent.set_level(1, self._random_ai_name())

        self.player_name = self._random_player_name()
        self.player_pos = np.array(self.config.PLAYER_START, dtype=np.float64)
        self.ai_pos = np.array(self.config.AI_START, dtype=np.float64)

        self.scene = start_scene
        self.frame = 0
        self.wait_frame = 0
        self.score = 0
        self.best_score = 0
        self.shake_amount = 0.0
        self.games_played = 0
        self.divergence_resets = 0

    # ------------------------------------------------------------------
    # Input from collaborators
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Leave the intro scene."""
        if self.scene == GameScene.INTRO:
            self.scene = GameScene.PLAY
            self.wait_frame = self.frame
            logger.info(f"{self.player_name} vs {self.agent.name}")

    def move_player(self, x: float, y: float) -> None:
        """Place the player (e.g. under the pointer), clamped to the playfield."""
        self.player_pos = clamp_position((x, y), self.width, self.height)

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def step(self, dt: float) -> GameScene:
        """
        Advance one frame.

        Args:
            dt: Time step in seconds

        Returns:
            Scene after the step
        """
        self.frame += 1

        if self.scene == GameScene.PLAY:
            self._update_play(dt)
        elif self.scene == GameScene.LEVEL:
            self._update_level()
        elif self.scene == GameScene.GAME_OVER:
            self._update_game_over()

        return self.scene

    def _update_play(self, dt: float) -> None:
        self.score = self.frame

        movement = self.agent.tick(dt, self.player_pos, self.ai_pos, self.width, self.height)
        if movement is not None and np.isfinite(movement).all():
            self.ai_pos = clamp_position(self.ai_pos + movement, self.width, self.height)

        if self.config.RESET_ON_DIVERGENCE and self.agent.network.diverged:
            self.divergence_resets += 1
            logger.warning(f"Pursuer network diverged at frame {self.frame}; resetting weights")
            self.agent.reset()

        # Level-up may have switched the scene during the tick
        if self.scene != GameScene.PLAY:
            return

        distance = self.collision_distance()
        threshold = self.config.PROXIMITY_THRESHOLD
        if distance <= threshold:
            self.shake_amount = (threshold - distance) * self.config.SHAKE_PER_UNIT
        else:
            self.shake_amount = 0.0

        if self.frame > self.wait_frame + self.config.COLLISION_COOLDOWN_FRAMES:
            combined_radius = (self.agent.size + self.config.PLAYER_SIZE) / self.config.SIZE_TO_WORLD
            if distance <= combined_radius:
                self._game_over()

    def _update_level(self) -> None:
        if self.frame > self.wait_frame + self.config.LEVEL_PAUSE_FRAMES:
            self.wait_frame = self.frame
            self.scene = GameScene.PLAY

    def _update_game_over(self) -> None:
        self.shake_amount = 0.0
        if self.frame > self.wait_frame + self.config.GAME_OVER_FRAMES:
            self.restart()

    def _game_over(self) -> None:
        self.wait_frame = self.frame
        self.scene = GameScene.GAME_OVER
        self.games_played += 1
        self.best_score = max(self.best_score, self.score)
        logger.info(
            f"Game over: {self.player_name} caught by {self.agent.name} "
            f"(level={self.agent.level}, score={self.score})"
        )

    def _on_agent_ready(self, agent: PursuitAgent) -> None:
        self.next_level()

    def next_level(self) -> None:
        """Pause for the level screen and promote the pursuer."""
        self.wait_frame = self.frame
        self.scene = GameScene.LEVEL
        self.agent.set_level(self.agent.level + 1, self._random_ai_name())

    def restart(self) -> None:
        """Start a fresh run: new names, level 1, untrained pursuer."""
        self.frame = 0
        self.wait_frame = 0
        self.score = 0
        self.shake_amount = 0.0
        self.scene = GameScene.PLAY

        self.player_name = self._random_player_name()
        self.player_pos = np.array(self.config.PLAYER_START, dtype=np.float64)
        self.ai_pos = np.array(self.config.AI_START, dtype=np.float64)

        self.agent.set_level(1, self._random_ai_name())
        self.agent.reset()
        logger.info(f"Restart: {self.player_name} vs {self.agent.name}")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def collision_distance(self) -> float:
        """Distance between player and pursuer centers."""
        return math.dist(self.player_pos, self.ai_pos)

    def snapshot(self) -> Dict[str, Any]:
        """Telemetry for a HUD or dashboard."""
        return {
            'scene': self.scene.value,
            'frame': self.frame,
            'score': self.score,
            'best_score': self.best_score,
            'player_name': self.player_name,
            'ai_name': self.agent.name,
            'level': self.agent.level,
            'knowledge': self.agent.knowledge,
            'average_loss': self.agent.average_loss,
            'last_loss': self.agent.last_loss,
            'last_output': self.agent.last_output.tolist(),
            'features': self.agent.features.tolist(),
            'labels': self.agent.labels.tolist(),
            'shake_amount': self.shake_amount,
        }

    @property
    def positions(self) -> Tuple[np.ndarray, np.ndarray]:
        """(player, pursuer) positions."""
        return self.player_pos.copy(), self.ai_pos.copy()

    def _random_player_name(self) -> str:
        return self.rng.choice(self.config.PLAYER_NAMES)

    def _random_ai_name(self) -> str:
        return self.rng.choice(self.config.AI_NAMES)
