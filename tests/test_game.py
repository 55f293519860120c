"""
Tests for the ChaseGame orchestrator.

These tests verify:
    - Scene transitions (intro, play, level, game over)
    - Collision with cooldown
    - Level-up wiring between agent and game
    - Restart and divergence recovery
"""

import random

import pytest
import numpy as np
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import Config
from chaser.game import ChaseGame, GameScene


DT = 1.0 / 60


@pytest.fixture
def config():
    """Create test configuration."""
    return Config(SEED=5)


@pytest.fixture
def game(config):
    """Create a started game."""
    g = ChaseGame(config, rng=random.Random(5))
    g.start()
    return g


def chase_player_onto_pursuer(game, max_frames):
    """Keep the player on top of the pursuer until the scene changes."""
    for _ in range(max_frames):
        game.move_player(*game.ai_pos)
        if game.step(DT) != GameScene.PLAY:
            break


class TestGameInitialization:
    """Test game setup."""

    def test_starts_in_intro(self, config):
        game = ChaseGame(config)
        assert game.scene == GameScene.INTRO

    def test_start_positions(self, game):
        player, pursuer = game.positions
        np.testing.assert_array_equal(player, [0.0, -3.0])
        np.testing.assert_array_equal(pursuer, [0.0, 3.0])

    def test_names_from_config(self, game, config):
        assert game.player_name in config.PLAYER_NAMES
        assert game.agent.name in config.AI_NAMES

    def test_agent_at_level_one(self, game):
        assert game.agent.level == 1

    def test_intro_does_not_tick_agent(self, config):
        game = ChaseGame(config)
        game.step(DT)
        assert game.scene == GameScene.INTRO
        assert game.agent.knowledge == 0


class TestPlay:
    """Test the play scene."""

    def test_step_moves_pursuer(self, game):
        _, before = game.positions
        game.step(DT)
        _, after = game.positions
        assert not np.array_equal(before, after)
        assert game.agent.knowledge == 1

    def test_score_tracks_frames(self, game):
        for _ in range(10):
            game.step(DT)
        assert game.score == 10

    def test_pursuer_stays_in_bounds(self, game):
        for _ in range(300):
            game.move_player(3.6, 6.4)
            game.step(DT)
            _, pursuer = game.positions
            assert abs(pursuer[0]) <= 3.6 + 1e-9
            assert abs(pursuer[1]) <= 6.4 + 1e-9

    def test_move_player_clamps(self, game):
        game.move_player(100.0, -100.0)
        player, _ = game.positions
        np.testing.assert_allclose(player, [3.6, -6.4])

    def test_proximity_shake(self, game):
        game.move_player(*game.ai_pos)
        game.step(DT)
        assert game.shake_amount > 0

    def test_no_shake_when_far(self, game):
        game.move_player(0.0, -6.4)
        game.ai_pos = np.array([0.0, 6.4])
        game.step(DT)
        assert game.shake_amount == 0.0


class TestCollision:
    """Test collision and game over."""

    def test_collision_ignored_during_cooldown(self, game):
        chase_player_onto_pursuer(game, 100)
        assert game.scene == GameScene.PLAY

    def test_collision_after_cooldown(self, game):
        chase_player_onto_pursuer(game, 200)
        assert game.scene == GameScene.GAME_OVER
        assert game.frame == 101
        assert game.games_played == 1
        assert game.best_score == 101

    def test_restart_after_game_over(self, game, config):
        chase_player_onto_pursuer(game, 200)
        for _ in range(config.GAME_OVER_FRAMES):
            game.step(DT)
        assert game.scene == GameScene.GAME_OVER
        game.step(DT)
        assert game.scene == GameScene.PLAY
        assert game.frame == 0
        assert game.score == 0
        assert game.agent.level == 1
        assert game.agent.average_loss == 0.0


class TestLevels:
    """Test level-up flow."""

    @pytest.fixture
    def fast_config(self):
        return Config(SEED=5, KNOWLEDGE_PER_LEVEL=10)

    def test_level_up(self, fast_config):
        game = ChaseGame(fast_config, rng=random.Random(1))
        game.start()
        for _ in range(11):
            game.step(DT)
        assert game.scene == GameScene.LEVEL
        assert game.agent.level == 2
        assert game.agent.knowledge == 0
        assert game.agent.speed == pytest.approx(1.8)
        assert game.agent.name in fast_config.AI_NAMES

    def test_level_pause_then_play(self, fast_config):
        game = ChaseGame(fast_config, rng=random.Random(1))
        game.start()
        for _ in range(11):
            game.step(DT)
        knowledge = game.agent.knowledge
        for _ in range(fast_config.LEVEL_PAUSE_FRAMES):
            game.step(DT)
        assert game.scene == GameScene.LEVEL
        assert game.agent.knowledge == knowledge
        game.step(DT)
        assert game.scene == GameScene.PLAY

    def test_next_level_keeps_network(self, game):
        before = game.agent.network.get_parameters()
        game.next_level()
        assert game.agent.level == 2
        for name, value in game.agent.network.get_parameters().items():
            np.testing.assert_array_equal(value, before[name])


class TestDivergence:
    """Test recovery from non-finite weights."""

    def test_diverged_network_is_reset(self, game):
        game.agent.network.weights1[0, 0] = np.nan
        _, before = game.positions
        game.step(DT)
        _, after = game.positions
        assert game.divergence_resets == 1
        assert not game.agent.network.diverged
        np.testing.assert_array_equal(before, after)

    def test_divergence_reset_can_be_disabled(self):
        cfg = Config(SEED=5, RESET_ON_DIVERGENCE=False)
        game = ChaseGame(cfg)
        game.start()
        game.agent.network.weights1[0, 0] = np.nan
        game.step(DT)
        assert game.divergence_resets == 0
        assert game.agent.network.diverged
        assert np.isfinite(game.ai_pos).all()


class TestSnapshot:
    """Test HUD telemetry."""

    def test_snapshot_fields(self, game):
        game.step(DT)
        snap = game.snapshot()
        assert snap['scene'] == 'play'
        assert snap['level'] == 1
        assert len(snap['features']) == 4
        assert len(snap['labels']) == 2
        assert len(snap['last_output']) == 2
        assert snap['knowledge'] == 1
