"""Cooldown ledger - per-ability cooldowns counted in whole turns."""

import logging

from .errors import InvalidInputError, InvariantViolationError

logger = logging.getLogger(__name__)


class CooldownLedger:
    """Tracks remaining cooldown turns per ability.

    Cooldowns snap to integer turn boundaries: using an ability sets its entry
    to base + 1, because the turn it was used in is already partly spent.
    Each turn tick then removes one whole turn.
    """

    def __init__(self, strict: bool = False) -> None:
        """Initialize an empty ledger.

        Args:
            strict: Raise InvariantViolationError on negative entries instead of clamping
        """
        self.strict = strict
        self._remaining: dict[str, int] = {}

    def on_ability_used(self, ability_id: str, base_cooldown_turns: int, current_time: float) -> int:
        """Start an ability's cooldown.

        Args:
            ability_id: Ability being used
            base_cooldown_turns: Cooldown from the ability definition
            current_time: Timeline time of use

        Returns:
            The ledger value set for the ability (0 if it has no cooldown)
        """
        if base_cooldown_turns < 0:
            raise InvalidInputError(f"Cooldown for {ability_id} must be non-negative, got {base_cooldown_turns}")
        if current_time < 0:
            raise InvalidInputError(f"Time must be non-negative, got {current_time}")

        # Abilities without a cooldown stay castable every time their cadence comes up
        if base_cooldown_turns == 0:
            self._remaining.pop(ability_id, None)
            return 0

        self._remaining[ability_id] = base_cooldown_turns + 1
        logger.debug(
            "Cooldown started for %s at t=%.3f: %d turns",
            ability_id,
            current_time,
            self._remaining[ability_id],
        )
        return self._remaining[ability_id]

    def on_turn_tick(self) -> list[str]:
        """Remove one whole turn from every cooldown.

        Returns:
            Ability ids that became ready on this tick
        """
        ready: list[str] = []
        for ability_id in list(self._remaining):
            remaining = self._check(ability_id, self._remaining[ability_id])
            remaining = max(0, remaining - 1)
            if remaining == 0:
                del self._remaining[ability_id]
                ready.append(ability_id)
            else:
                self._remaining[ability_id] = remaining
        return ready

    def is_ready(self, ability_id: str) -> bool:
        """An ability is usable iff it has no entry or its entry is zero."""
        return self.remaining(ability_id) == 0

    def remaining(self, ability_id: str) -> int:
        """Get remaining cooldown turns for an ability."""
        if ability_id not in self._remaining:
            return 0
        return self._check(ability_id, self._remaining[ability_id])

    def reset(self, ability_id: str) -> None:
        """Make an ability ready immediately."""
        self._remaining.pop(ability_id, None)

    def snapshot(self) -> dict[str, int]:
        """Copy of all active cooldowns."""
        return {ability_id: value for ability_id, value in self._remaining.items() if value > 0}

    def _check(self, ability_id: str, value: int) -> int:
        """Validate a ledger value, raising or clamping a negative one."""
        if value >= 0:
            return value
        message = f"Cooldown for {ability_id} is negative ({value})"
        if self.strict:
            raise InvariantViolationError(message)
        logger.warning("%s, clamping to 0", message)
        self._remaining[ability_id] = 0
        return 0
