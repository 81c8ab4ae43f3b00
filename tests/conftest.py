"""Shared fixtures for engine tests."""

import random

import pytest

from cadence_rpg.config import Settings
from cadence_rpg.engine.combat import CombatResolver
from cadence_rpg.engine.types import CombatStats, TurnEntity
from cadence_rpg.models.enums import ActorId


@pytest.fixture
def settings() -> Settings:
    """Default settings with invariant violations raising."""
    return Settings(_env_file=None, strict_invariants=True)


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source for reproducible crit rolls."""
    return random.Random(1234)


@pytest.fixture
def resolver(rng: random.Random) -> CombatResolver:
    """Combat resolver using the seeded random source."""
    return CombatResolver(rng)


@pytest.fixture
def primary_entity() -> TurnEntity:
    """Primary actor at baseline attack speed and no haste."""
    return TurnEntity(id=ActorId.PRIMARY, attack_speed=1.0, ability_haste=0)


@pytest.fixture
def slow_opponent_entity() -> TurnEntity:
    """Opponent attacking every 1.5 turns."""
    return TurnEntity(id=ActorId.OPPONENT, attack_speed=0.5, ability_haste=0)


@pytest.fixture
def opponent_entity() -> TurnEntity:
    """Opponent at baseline attack speed and no haste."""
    return TurnEntity(id=ActorId.OPPONENT, attack_speed=1.0, ability_haste=0)


@pytest.fixture
def tank_stats() -> CombatStats:
    """High-HP actor that deals no meaningful damage."""
    return CombatStats(max_hp=10000)
