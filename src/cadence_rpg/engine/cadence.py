"""Cadence model - maps attack speed and ability haste to action intervals.

Attack speed uses an inverse cooldown with an asymmetric start:
    - 2.0 AS: attacks at 1.0, 1.5, 2.0, 2.5, ...
    - 0.7 AS: attacks at 1.3, 2.6, 3.9, ...
    - 0.5 AS: attacks at 1.5, 3.0, 4.5, ...

Ability haste shortens a base spell cooldown of 1.0:
    - 0 haste: spells at 1.0, 2.0, 3.0 (one per turn)
    - 100 haste: spells at 0.9, 1.8, 2.7, ...
    - 500 haste (cap): spells at 0.5, 1.0, 1.5, ... (two per turn)
"""

import logging

from .errors import InvalidInputError

logger = logging.getLogger(__name__)

BASELINE_ATTACK_SPEED = 1.0
BASE_SPELL_COOLDOWN = 1.0
MIN_SPELL_COOLDOWN = 0.5
DEFAULT_ATTACK_SPEED_FLOOR = 0.1
DEFAULT_HASTE_CAP = 500.0


def clamp_attack_speed(attack_speed: float, floor: float = DEFAULT_ATTACK_SPEED_FLOOR) -> float:
    """Clamp attack speed to a strictly positive floor.

    Args:
        attack_speed: Raw attack speed from the stat snapshot
        floor: Minimum attack speed, must be positive

    Returns:
        The attack speed, or the floor if the input is below it
    """
    if floor <= 0:
        raise InvalidInputError(f"Attack speed floor must be positive, got {floor}")
    if attack_speed < floor:
        logger.debug("Clamping attack speed %s to floor %s", attack_speed, floor)
        return floor
    return attack_speed


def get_attack_cadence(attack_speed: float) -> tuple[float, float]:
    """Get (first_attack_time, attack_increment) for an attack speed.

    Actors at or above baseline always open at 1.0; slower actors get the
    longer period as their initial delay as well.

    Raises:
        InvalidInputError: If attack_speed is not positive (clamp it first)
    """
    if attack_speed <= 0:
        raise InvalidInputError(f"Attack speed must be positive, got {attack_speed}")

    if attack_speed >= BASELINE_ATTACK_SPEED:
        return 1.0, 1.0 / attack_speed

    increment = 2.0 - attack_speed
    return increment, increment


def get_spell_cooldown(ability_haste: float, haste_cap: float = DEFAULT_HASTE_CAP) -> float:
    """Get the interval between spell casts.

    Haste above the cap is treated as the cap. The result never drops below
    MIN_SPELL_COOLDOWN, so at most two casts fit in a turn.

    Raises:
        InvalidInputError: If ability_haste is negative
    """
    if ability_haste < 0:
        raise InvalidInputError(f"Ability haste must be non-negative, got {ability_haste}")

    capped_haste = min(ability_haste, haste_cap)
    cooldown = BASE_SPELL_COOLDOWN - capped_haste / 1000.0
    return max(MIN_SPELL_COOLDOWN, cooldown)


def slow_attack_speed(attack_speed: float, percent: float, floor: float = DEFAULT_ATTACK_SPEED_FLOOR) -> float:
    """Apply a percentage slow to an attack speed, never below the floor."""
    if percent < 0:
        raise InvalidInputError(f"Slow percent must be non-negative, got {percent}")
    return max(floor, attack_speed * (1 - percent / 100))
