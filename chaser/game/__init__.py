"""
Game Module
===========

Headless orchestration of the chase.

Classes:
    ChaseGame - Scene state machine driving one PursuitAgent
    GameScene - INTRO / PLAY / LEVEL / GAME_OVER
"""

from .chase import ChaseGame, GameScene

__all__ = ['ChaseGame', 'GameScene']
