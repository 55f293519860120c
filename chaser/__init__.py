"""
Neural Chase - Source Package
=============================

A pursuer driven by a small network that learns to chase the player while
the game is being played.

Modules:
    ai/    - Neural controller and per-tick pursuit agent
    game/  - Headless scene state machine (collision, levels, restarts)
    utils/ - Logging
"""

__version__ = "1.0.0"
