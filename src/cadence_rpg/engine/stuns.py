"""Stun application - retroactively delays a target's scheduled actions."""

from dataclasses import replace

from ..models.enums import ActorId
from .errors import InvalidInputError
from .types import TurnAction, normalize_time, turn_of


def sort_actions(actions: list[TurnAction]) -> list[TurnAction]:
    """Stable sort by time, then priority (primary wins exact ties)."""
    return sorted(actions, key=lambda action: action.sort_key)


def apply_stun(
    sequence: list[TurnAction],
    target_id: ActorId,
    stun_duration: float,
    applied_at_time: float,
) -> list[TurnAction]:
    """Delay the target's actions at or after applied_at_time by stun_duration.

    A stun applied at the time of an already scheduled action of the target
    pushes that action back too. Actions of the other actor are returned
    unchanged, and the result is re-sorted.

    Args:
        sequence: Sorted actions (not modified)
        target_id: Actor being stunned
        stun_duration: Effective duration after tenacity, in turns
        applied_at_time: Time the stun lands

    Returns:
        New sorted sequence
    """
    if stun_duration < 0:
        raise InvalidInputError(f"Stun duration must be non-negative, got {stun_duration}")

    shifted: list[TurnAction] = []
    for action in sequence:
        if action.entity_id == target_id and action.time >= applied_at_time:
            new_time = normalize_time(action.time + stun_duration)
            action = replace(action, time=new_time, turn_number=turn_of(new_time))
        shifted.append(action)
    return sort_actions(shifted)
