"""Type definitions for the encounter engine."""

import logging
import math
from dataclasses import dataclass, field, fields, replace

from ..models.enums import ActionType, ActorId, CrowdControlType, StatKind
from .cadence import clamp_attack_speed
from .cooldowns import CooldownLedger
from .shields import ShieldLedger
from .status import StatusLedger

logger = logging.getLogger(__name__)

# Timeline times are rounded to this many decimals so that cadences which
# meet on paper (e.g. 1.5 * 2 and 1.0 * 3) compare equal for tie-breaking.
TIME_PRECISION = 9


def normalize_time(time: float) -> float:
    """Round a timeline time to the shared precision."""
    return round(time, TIME_PRECISION)


def turn_of(time: float) -> int:
    """The integer turn a timeline time falls within."""
    return math.floor(normalize_time(time))


@dataclass(frozen=True)
class TurnEntity:
    """Cadence-relevant stats of an actor for one generated window."""

    id: ActorId
    attack_speed: float
    ability_haste: float
    name: str = ""

    @property
    def priority(self) -> int:
        """Tie-break priority: the primary actor resolves first on equal times."""
        return 0 if self.id == ActorId.PRIMARY else 1


@dataclass(frozen=True)
class TurnAction:
    """A single scheduled action on the shared timeline."""

    entity_id: ActorId
    turn_number: int  # Which turn boundary (1, 2, 3, ...)
    time: float  # Exact time on the bar (1.0, 1.3, 1.5, 2.0, ...)
    action_type: ActionType
    priority: int  # 0 = primary first, 1 = opponent second (ties only)

    @property
    def sort_key(self) -> tuple[float, int]:
        return (self.time, self.priority)


@dataclass(frozen=True)
class StunPeriod:
    """Record of a crowd control applied to an actor's timeline."""

    entity_id: ActorId
    start_time: float
    end_time: float
    cc_type: CrowdControlType = CrowdControlType.STUN

    @classmethod
    def from_duration(
        cls,
        entity_id: ActorId,
        start_time: float,
        duration: float,
        cc_type: CrowdControlType = CrowdControlType.STUN,
    ) -> "StunPeriod":
        return cls(
            entity_id=entity_id,
            start_time=start_time,
            end_time=normalize_time(start_time + duration),
            cc_type=cc_type,
        )

    @property
    def duration(self) -> float:
        return normalize_time(self.end_time - self.start_time)

    def covers(self, time: float) -> bool:
        """Check if the stun is active at a given time."""
        return self.start_time <= time < self.end_time


@dataclass(frozen=True)
class CombatStats:
    """Stat snapshot supplied by the external stat aggregation step.

    The engine reads these values but never mutates them; buffs produce a new
    snapshot via with_modifiers().
    """

    max_hp: int = 125
    attack_damage: float = 0.0
    ability_power: float = 0.0
    armor: float = 0.0
    magic_resist: float = 0.0
    attack_speed: float = 1.0
    ability_haste: float = 0.0
    lethality: float = 0.0
    magic_penetration: float = 0.0
    critical_chance: float = 0.0  # Percent
    critical_damage: float = 0.0  # Percent, 0 = use the configured default
    tenacity: float = 0.0  # Percent
    life_steal: float = 0.0  # Percent, attacks only
    omnivamp: float = 0.0  # Percent, all damage
    true_damage: float = 0.0  # Flat, added to attacks unmitigated
    healing_on_hit: float = 0.0  # Flat heal per landed attack
    on_hit_damage: float = 0.0  # Bonus magic damage per landed attack
    burn_stacks_on_hit: int = 0  # Burn stacks applied per landed attack
    attack_range: int = 0  # Units, 0 = use the configured default
    movement_speed: float = 350.0

    def with_modifiers(self, modifiers: dict[StatKind, float]) -> "CombatStats":
        """Return a copy with additive stat modifiers applied."""
        names = {f.name for f in fields(self)}
        changes = {}
        for stat, amount in modifiers.items():
            if stat.value not in names or amount == 0:
                continue
            current = getattr(self, stat.value)
            value = current + amount
            changes[stat.value] = round(value) if isinstance(current, int) else value
        return replace(self, **changes) if changes else self


@dataclass
class CombatState:
    """In-memory state of one actor during an encounter."""

    actor_id: ActorId
    stats: CombatStats
    current_hp: int
    position: int = 0
    ability_id: str | None = None  # Ability cast on SPELL actions, None = basic spell
    display_name: str = ""
    cooldowns: CooldownLedger = field(default_factory=CooldownLedger)
    status: StatusLedger = field(default_factory=StatusLedger)
    shields: ShieldLedger = field(default_factory=ShieldLedger)

    def is_alive(self) -> bool:
        """Check if the actor is still alive."""
        return self.current_hp > 0

    def effective_stats(self) -> CombatStats:
        """Snapshot stats with active buff modifiers applied."""
        return self.stats.with_modifiers(self.status.stat_modifiers())

    @property
    def max_hp(self) -> int:
        return max(1, self.effective_stats().max_hp)

    @property
    def missing_hp(self) -> int:
        return max(0, self.max_hp - self.current_hp)

    @property
    def hp_ratio(self) -> float:
        return self.current_hp / self.max_hp

    def apply_damage(self, amount: int) -> int:
        """Apply damage, shields first. Returns damage absorbed plus actual HP lost."""
        absorbed = self.shields.absorb(amount)
        actual = min(self.current_hp, max(0, amount - absorbed))
        self.current_hp -= actual
        return absorbed + actual

    def apply_heal(self, amount: int) -> int:
        """Apply healing. Returns actual HP restored."""
        actual = max(0, min(self.max_hp - self.current_hp, amount))
        self.current_hp += actual
        return actual

    def turn_entity(self, attack_speed_floor: float) -> TurnEntity:
        """Build the cadence view of this actor from its current stats."""
        stats = self.effective_stats()
        if stats.ability_haste < 0:
            logger.debug("Clamping ability haste %s to 0 for %s", stats.ability_haste, self.actor_id.value)
        return TurnEntity(
            id=self.actor_id,
            attack_speed=clamp_attack_speed(stats.attack_speed, attack_speed_floor),
            ability_haste=max(0.0, stats.ability_haste),
            name=self.display_name,
        )
