"""Shield ledger - damage-absorbing shields consumed oldest first."""

import logging
from dataclasses import dataclass, replace

from .errors import InvalidInputError, InvariantViolationError

logger = logging.getLogger(__name__)


@dataclass
class Shield:
    """One shield instance."""

    id: str
    amount: int  # Remaining absorption
    max_amount: int
    duration: int  # Remaining whole turns


class ShieldLedger:
    """Active shields of one actor, in creation order.

    Damage hits the oldest shield first and overflows to newer shields, then
    to HP. Each shield expires on its own when its duration runs out, taking
    only its remaining amount with it.
    """

    def __init__(self, strict: bool = False) -> None:
        self.strict = strict
        self._shields: list[Shield] = []
        self._counter = 0

    def add(self, name: str, amount: int, duration: int) -> Shield:
        """Add a shield instance.

        Args:
            name: Source of the shield, used for its id
            amount: Damage the shield absorbs
            duration: Whole turns before it expires, at least 1

        Returns:
            The new shield
        """
        if amount < 0:
            raise InvalidInputError(f"Shield amount must be non-negative, got {amount}")
        if duration < 1:
            raise InvalidInputError(f"Shield duration must be at least 1 turn, got {duration}")

        self._counter += 1
        shield = Shield(id=f"{name}-{self._counter}", amount=amount, max_amount=amount, duration=duration)
        self._shields.append(shield)
        return shield

    @property
    def total(self) -> int:
        """Total remaining absorption across all shields."""
        return sum(shield.amount for shield in self._shields)

    def absorb(self, damage: int) -> int:
        """Soak up damage, oldest shield first. Returns the amount absorbed."""
        remaining = max(0, damage)
        absorbed = 0
        for shield in self._shields:
            if remaining <= 0:
                break
            taken = min(remaining, shield.amount)
            shield.amount -= taken
            absorbed += taken
            remaining -= taken
        self._shields = [shield for shield in self._shields if shield.amount > 0]
        return absorbed

    def on_turn_tick(self) -> list[Shield]:
        """Advance every shield by one whole turn. Returns the shields that expired."""
        expired: list[Shield] = []
        remaining: list[Shield] = []
        for shield in self._shields:
            if shield.duration < 0:
                message = f"Shield {shield.id} has negative remaining turns ({shield.duration})"
                if self.strict:
                    raise InvariantViolationError(message)
                logger.warning("%s, clamping to 0", message)
                shield.duration = 0
            shield.duration = max(0, shield.duration - 1)
            if shield.duration == 0:
                expired.append(shield)
            else:
                remaining.append(shield)
        self._shields = remaining
        return expired

    def clear(self) -> list[Shield]:
        """Drop every shield (shields are combat-only). Returns them."""
        removed, self._shields = self._shields, []
        return removed

    def active(self) -> list[Shield]:
        """Copies of all active shields, oldest first."""
        return [replace(shield) for shield in self._shields]

    def __len__(self) -> int:
        return len(self._shields)
