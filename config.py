"""
Configuration file for Neural Chase
===================================

All network hyperparameters, pursuit tuning, and game-flow timings are
centralized here. Modify these values to experiment with different
learning dynamics.

Usage:
    from config import Config
    cfg = Config()
    print(cfg.LEARNING_RATE)
"""

from dataclasses import dataclass, field
from typing import List, Tuple, Optional


@dataclass
class Config:
    """
    Central configuration for the entire project.

    Sections:
    1. World - Playfield geometry
    2. Neural Network - Architecture and learning rate
    3. Pursuit - Training cadence and level progression
    4. Game Flow - Collision, level and game-over timings
    5. System - Seeding, logging and reporting
    """

    # =========================================================================
    # WORLD SETTINGS
    # =========================================================================

    # Playfield in world units (720x1280 pixels at 100 pixels per unit)
    GAME_WIDTH: float = 7.2
    GAME_HEIGHT: float = 12.8

    # Simulation rate used by the headless runner
    FPS: int = 60

    # =========================================================================
    # NEURAL NETWORK ARCHITECTURE
    # =========================================================================

    # Input: player x/y and pursuer x/y in raw world units
    INPUT_SIZE: int = 4

    # Both hidden layers share this width (4 -> 16 -> 16 -> 2)
    HIDDEN_SIZE: int = 16

    # Output: movement direction, one tanh unit per axis
    OUTPUT_SIZE: int = 2

    # Plain SGD step size, applied on every training step
    # Too high: weights blow up to NaN
    # Too low: the pursuer never figures out where the player is
    LEARNING_RATE: float = 0.0005

    # =========================================================================
    # PURSUIT SETTINGS
    # =========================================================================

    # Train every N ticks (1 = every tick, higher = slower learning)
    TRAIN_CADENCE: int = 100

    # Rolling window of training losses kept for diagnostics
    LOSS_HISTORY_SIZE: int = 500

    # Ticks of survival per level before the pursuer asks to level up
    KNOWLEDGE_PER_LEVEL: int = 3550

    # speed = BASE_SPEED + level * SPEED_PER_LEVEL
    BASE_SPEED: float = 1.0
    SPEED_PER_LEVEL: float = 0.4

    # size = BASE_SIZE + level * SIZE_PER_LEVEL (diameter, in size units)
    BASE_SIZE: float = 120.0
    SIZE_PER_LEVEL: float = 10.0

    # =========================================================================
    # GAME FLOW
    # =========================================================================

    # Starting positions (world units, origin at the center)
    PLAYER_START: Tuple[float, float] = (0.0, -3.0)
    AI_START: Tuple[float, float] = (0.0, 3.0)

    PLAYER_SIZE: float = 60.0

    # Entity sizes are expressed in pixels; divide to get world units
    SIZE_TO_WORLD: float = 100.0

    # Frames after a scene change during which collisions are ignored
    COLLISION_COOLDOWN_FRAMES: int = 100

    # Frames spent on the game-over screen before restarting
    GAME_OVER_FRAMES: int = 1200

    # Frames spent on the level-up screen before play resumes
    LEVEL_PAUSE_FRAMES: int = 500

    # Distance under which the playfield starts to shake
    PROXIMITY_THRESHOLD: float = 4.0
    SHAKE_PER_UNIT: float = 12.5

    # Reset the pursuer's network when its weights or loss go non-finite
    RESET_ON_DIVERGENCE: bool = True

    PLAYER_NAMES: List[str] = field(default_factory=lambda: [
        "QuantifiedQuantum", "Kalamata", "EmoAImusic", "MD", "Torva",
        "Haidar", "BoboBear", "Mohamed", "Alucard", "Kevin",
        "Barry", "Uniqueux", "JanHoleman", "TheJAM", "megansub",
        "Dereck", "Kyle", "Tuleku", "Travis", "Valor",
        "Lukey", "Mosh", "Alazr", "Ahmed",
    ])

    AI_NAMES: List[str] = field(default_factory=lambda: [
        "HAL9000", "Skynet", "Predator", "DeepBlue", "AlphaGo",
        "Watson", "Siri", "nAIma", "Aldan", "mAIa",
        "nAlma", "gAIl", "bAIley", "dAIsy",
    ])

    # =========================================================================
    # SYSTEM SETTINGS
    # =========================================================================

    # Random seed for reproducibility (None for random)
    SEED: Optional[int] = None

    # Logging
    LOG_DIR: str = 'logs'
    LOG_LEVEL: str = 'INFO'

    # Frames between progress reports in headless mode
    REPORT_EVERY: int = 600

    @property
    def WORLD_SIZE(self) -> Tuple[float, float]:
        """Playfield (width, height) in world units."""
        return (self.GAME_WIDTH, self.GAME_HEIGHT)

    def __post_init__(self):
        """Validation."""
        assert self.LEARNING_RATE > 0, "Learning rate must be positive"
        assert self.TRAIN_CADENCE >= 1, "Train cadence must be at least 1"
        assert self.LOSS_HISTORY_SIZE >= 1, "Loss history must hold at least one value"
        assert self.GAME_WIDTH > 0 and self.GAME_HEIGHT > 0, "World dimensions must be positive"
        assert self.KNOWLEDGE_PER_LEVEL > 0, "Knowledge per level must be positive"
        assert len(self.PLAYER_NAMES) > 0, "Need at least one player name"
        assert len(self.AI_NAMES) > 0, "Need at least one AI name"


# Global config instance for easy importing
config = Config()


if __name__ == "__main__":
    # Print configuration summary
    cfg = Config()
    print("=" * 60)
    print("Neural Chase - Configuration Summary")
    print("=" * 60)
    print(f"\nWorld: {cfg.GAME_WIDTH}x{cfg.GAME_HEIGHT} units @ {cfg.FPS} FPS")
    print(f"\nNeural Network:")
    print(f"   Layers: {cfg.INPUT_SIZE} -> {cfg.HIDDEN_SIZE} -> {cfg.HIDDEN_SIZE} -> {cfg.OUTPUT_SIZE}")
    print(f"   Learning rate: {cfg.LEARNING_RATE}")
    print(f"\nPursuit:")
    print(f"   Train every: {cfg.TRAIN_CADENCE} ticks")
    print(f"   Knowledge per level: {cfg.KNOWLEDGE_PER_LEVEL}")
    print(f"   Loss history: {cfg.LOSS_HISTORY_SIZE}")
    print("=" * 60)
