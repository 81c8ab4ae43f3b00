"""Status ledger - buffs and debuffs with turn or encounter lifetimes.

Hybrid timing: a buff's effect applies the moment it is created, but its
turn countdown only advances on integer turn ticks. Every application is an
independent instance with its own timer and amount; stacking accumulates
instances rather than merging them, unless a stack cap is reached, in which
case the newest application refreshes the existing stacks instead.
"""

import logging
from dataclasses import dataclass, field, replace

from ..models.enums import BuffKind, DurationType, StatKind
from .errors import InvalidInputError, InvariantViolationError

logger = logging.getLogger(__name__)


@dataclass
class CombatBuff:
    """One application of a buff or debuff."""

    id: str  # Unique per application
    name: str  # Buff "kind" shared by stacks of the same effect
    stat: StatKind
    amount: float  # Negative for debuffs
    duration: int = 0  # Remaining whole turns (TURNS buffs)
    duration_type: DurationType = DurationType.TURNS
    kind: BuffKind = BuffKind.INSTANT
    encounters_remaining: int = 0  # Remaining encounters (ENCOUNTERS buffs)

    @property
    def is_debuff(self) -> bool:
        return self.amount < 0 or self.kind == BuffKind.DAMAGE_OVER_TIME

    @property
    def remaining(self) -> int:
        """Remaining lifetime in the unit of its duration type."""
        if self.duration_type == DurationType.ENCOUNTERS:
            return self.encounters_remaining
        return self.duration

    @property
    def is_expired(self) -> bool:
        return self.remaining <= 0


@dataclass
class AppliedBuff:
    """Result of applying a buff."""

    buff: CombatBuff
    refreshed: bool = False  # True if the stack cap was hit and existing stacks were refreshed


@dataclass
class StatusTick:
    """What happened on one turn tick."""

    heal_over_time: int = 0
    damage_over_time: int = 0
    expired: list[CombatBuff] = field(default_factory=list)


class StatusLedger:
    """Active buffs and debuffs of one actor."""

    def __init__(self, strict: bool = False) -> None:
        self.strict = strict
        self._buffs: list[CombatBuff] = []
        self._counter = 0

    def apply(
        self,
        name: str,
        stat: StatKind,
        amount: float,
        duration: int,
        duration_type: DurationType = DurationType.TURNS,
        kind: BuffKind = BuffKind.INSTANT,
        max_stacks: int | None = None,
        refresh_stacks: bool = False,
    ) -> AppliedBuff:
        """Apply a new buff instance.

        Args:
            name: Buff kind; instances with the same name count towards max_stacks
            stat: Stat the buff modifies
            amount: Signed amount, or the non-negative amount per tick for periodic kinds
            duration: Whole turns, or encounters for ENCOUNTERS buffs
            duration_type: How the lifetime is counted
            kind: Stat modifier, heal-over-time or damage-over-time
            max_stacks: Optional stack cap
            refresh_stacks: Reset the duration of existing stacks on every application (burn)

        Returns:
            AppliedBuff with the new instance, or the newest refreshed one
        """
        if duration < 0:
            raise InvalidInputError(f"Buff duration must be non-negative, got {duration}")
        if max_stacks is not None and max_stacks < 1:
            raise InvalidInputError(f"Stack cap must be at least 1, got {max_stacks}")
        if kind != BuffKind.INSTANT and amount < 0:
            raise InvalidInputError(f"Periodic amount must be non-negative, got {amount} for {kind.value}")

        self._prune()
        stacks = [buff for buff in self._buffs if buff.name == name]
        if max_stacks is not None and len(stacks) >= max_stacks:
            for buff in stacks:
                self._set_remaining(buff, duration)
            logger.debug("Stack cap %d reached for %s, refreshed %d stacks", max_stacks, name, len(stacks))
            return AppliedBuff(buff=stacks[-1], refreshed=True)

        if refresh_stacks:
            for buff in stacks:
                self._set_remaining(buff, duration)

        self._counter += 1
        buff = CombatBuff(
            id=f"{name}-{self._counter}",
            name=name,
            stat=stat,
            amount=amount,
            duration=duration if duration_type == DurationType.TURNS else 0,
            duration_type=duration_type,
            kind=kind,
            encounters_remaining=duration if duration_type == DurationType.ENCOUNTERS else 0,
        )
        self._buffs.append(buff)
        return AppliedBuff(buff=buff)

    def on_turn_tick(self) -> StatusTick:
        """Advance turn-duration buffs by one whole turn.

        Heal- and damage-over-time instances tick before their countdown advances.
        Encounter-duration buffs are untouched.
        """
        tick = StatusTick()
        remaining: list[CombatBuff] = []
        for buff in self._buffs:
            if buff.duration_type != DurationType.TURNS:
                remaining.append(buff)
                continue

            self._check(buff, buff.duration)
            if buff.duration <= 0:
                tick.expired.append(buff)
                continue

            if buff.kind == BuffKind.HEAL_OVER_TIME:
                tick.heal_over_time += round(buff.amount)
            elif buff.kind == BuffKind.DAMAGE_OVER_TIME:
                tick.damage_over_time += round(buff.amount)

            buff.duration -= 1
            if buff.duration <= 0:
                tick.expired.append(buff)
            else:
                remaining.append(buff)

        self._buffs = remaining
        return tick

    def on_encounter_completed(self) -> list[CombatBuff]:
        """Close out an encounter.

        Encounter-duration buffs lose one encounter; turn-duration buffs are
        combat-only and are cleared.

        Returns:
            All buffs removed
        """
        removed: list[CombatBuff] = []
        remaining: list[CombatBuff] = []
        for buff in self._buffs:
            if buff.duration_type != DurationType.ENCOUNTERS:
                removed.append(buff)
                continue
            self._check(buff, buff.encounters_remaining)
            buff.encounters_remaining -= 1
            if buff.encounters_remaining <= 0:
                removed.append(buff)
            else:
                remaining.append(buff)
        self._buffs = remaining
        return removed

    def remove(self, buff_id: str) -> CombatBuff | None:
        """Remove a single buff instance (e.g. consumed item). Returns it if found."""
        for index, buff in enumerate(self._buffs):
            if buff.id == buff_id:
                return self._buffs.pop(index)
        return None

    def cleanse(self) -> list[CombatBuff]:
        """Remove every debuff, damage-over-time included. Returns the removed instances."""
        removed = [buff for buff in self._buffs if buff.is_debuff]
        self._buffs = [buff for buff in self._buffs if not buff.is_debuff]
        return removed

    def stat_modifier(self, stat: StatKind) -> float:
        """Sum of active stat-modifier amounts for a stat."""
        self._prune()
        return sum(buff.amount for buff in self._buffs if buff.stat == stat and buff.kind == BuffKind.INSTANT)

    def stat_modifiers(self) -> dict[StatKind, float]:
        """All non-zero stat modifiers keyed by stat."""
        self._prune()
        modifiers: dict[StatKind, float] = {}
        for buff in self._buffs:
            if buff.kind != BuffKind.INSTANT:
                continue
            modifiers[buff.stat] = modifiers.get(buff.stat, 0.0) + buff.amount
        return {stat: amount for stat, amount in modifiers.items() if amount != 0}

    def get_stacks(self, name: str) -> int:
        """Number of active instances of a buff kind."""
        self._prune()
        return sum(1 for buff in self._buffs if buff.name == name)

    def active(self) -> list[CombatBuff]:
        """Copies of all active buffs, in application order."""
        self._prune()
        return [replace(buff) for buff in self._buffs]

    def __len__(self) -> int:
        self._prune()
        return len(self._buffs)

    def _prune(self) -> None:
        """Drop expired instances so reads never see them."""
        for buff in self._buffs:
            self._check(buff, buff.remaining)
        self._buffs = [buff for buff in self._buffs if not buff.is_expired]

    def _check(self, buff: CombatBuff, value: int) -> None:
        """Validate a remaining value, raising or clamping a negative one."""
        if value >= 0:
            return
        message = f"Buff {buff.id} has negative remaining {buff.duration_type.value} ({value})"
        if self.strict:
            raise InvariantViolationError(message)
        logger.warning("%s, clamping to 0", message)
        if buff.duration_type == DurationType.ENCOUNTERS:
            buff.encounters_remaining = 0
        else:
            buff.duration = 0

    @staticmethod
    def _set_remaining(buff: CombatBuff, value: int) -> None:
        if buff.duration_type == DurationType.ENCOUNTERS:
            buff.encounters_remaining = value
        else:
            buff.duration = value
