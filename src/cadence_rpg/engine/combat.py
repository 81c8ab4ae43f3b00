"""Combat resolver - damage mitigation, critical strikes, healing and crowd control."""

import logging
import math
import random
from dataclasses import dataclass, field

from ..models.catalog import HealScaling
from ..models.enums import CrowdControlType, DamageType
from .errors import InvalidInputError
from .types import CombatStats

logger = logging.getLogger(__name__)

DEFAULT_CRITICAL_DAMAGE = 200.0
MAX_TENACITY = 100.0

# Burn applied by on-hit effects
BURN_DAMAGE_PER_STACK = 15
BURN_DURATION = 2

# Unaffected by tenacity
TENACITY_IMMUNE_CC = frozenset({CrowdControlType.KNOCKUP, CrowdControlType.SUPPRESSION})


def prevents_actions(cc_type: CrowdControlType) -> bool:
    """Check if a CC type stops its target from acting at all."""
    return cc_type in {
        CrowdControlType.STUN,
        CrowdControlType.POLYMORPH,
        CrowdControlType.SUPPRESSION,
        CrowdControlType.KNOCKUP,
        CrowdControlType.SLEEP,
    }


def prevents_attacks(cc_type: CrowdControlType) -> bool:
    """Check if a CC type stops basic attacks."""
    return prevents_actions(cc_type) or cc_type == CrowdControlType.DISARM


def prevents_spells(cc_type: CrowdControlType) -> bool:
    """Check if a CC type stops spell casts."""
    return prevents_actions(cc_type) or cc_type == CrowdControlType.SILENCE


def prevents_movement(cc_type: CrowdControlType) -> bool:
    """Check if a CC type stops voluntary movement."""
    return prevents_actions(cc_type) or cc_type in {CrowdControlType.ROOT, CrowdControlType.SNARE}


def effective_cc_duration(
    base_duration: float,
    tenacity: float,
    cc_type: CrowdControlType = CrowdControlType.STUN,
) -> float:
    """Reduce a CC duration by tenacity.

    Tenacity is clamped to [0, 100] and reduces the duration linearly; knockups
    and suppressions ignore it. The result is rounded to two decimals.

    Args:
        base_duration: Duration from the ability definition, in turns
        tenacity: Target's tenacity, in percent
        cc_type: Kind of crowd control

    Returns:
        Effective duration in turns, 0 means the target is immune
    """
    if base_duration < 0:
        raise InvalidInputError(f"CC duration must be non-negative, got {base_duration}")

    if cc_type in TENACITY_IMMUNE_CC:
        return base_duration

    clamped = max(0.0, min(MAX_TENACITY, tenacity))
    reduced = round(base_duration * (1 - clamped / 100), 2)
    return max(0.0, reduced)


def is_immune_to_cc(tenacity: float, cc_type: CrowdControlType = CrowdControlType.STUN) -> bool:
    """Full tenacity negates every CC that tenacity affects."""
    return tenacity >= MAX_TENACITY and cc_type not in TENACITY_IMMUNE_CC


@dataclass
class DamageResult:
    """Outcome of one damage calculation."""

    damage: int  # Mitigated damage plus true damage
    raw_damage: float  # Pre-mitigation damage after the crit multiplier
    damage_type: DamageType
    is_critical: bool = False
    true_damage: int = 0


@dataclass
class OnHitResult:
    """Procs of an attack that landed."""

    healing: int = 0  # For the attacker, before the max HP clamp
    bonus_damage: int = 0  # Magic damage, already mitigated
    burn_stacks: int = 0
    effects: list[str] = field(default_factory=list)  # Readable proc descriptions


class CombatResolver:
    """Computes damage, healing and vamp amounts.

    The random source is injected so crit rolls are reproducible under a seed.
    Percentages in the stat snapshots are trusted as already clamped.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        default_critical_damage: float = DEFAULT_CRITICAL_DAMAGE,
    ) -> None:
        self.rng = rng or random.Random()
        self.default_critical_damage = default_critical_damage

    @staticmethod
    def mitigate(raw_damage: float, resistance: float, penetration: float) -> int:
        """Apply armor or magic resist to pre-mitigation damage.

        Returns:
            max(1, floor(raw * 100 / (100 + max(0, resistance - penetration))))
        """
        effective = max(0.0, resistance - penetration)
        # Rounding first keeps exact quotients like 15000/150 from flooring to 99
        mitigated = math.floor(round(raw_damage * 100 / (100 + effective), 9))
        return max(1, mitigated)

    def roll_critical(self, critical_chance: float) -> bool:
        """Roll a critical strike with criticalChance percent probability."""
        if critical_chance <= 0:
            return False
        return self.rng.random() < critical_chance / 100

    def physical_damage(
        self,
        base_damage: float,
        attacker: CombatStats,
        defender: CombatStats,
        true_damage: float = 0.0,
        can_crit: bool = True,
    ) -> DamageResult:
        """Physical damage: crit multiplier first, then armor minus lethality.

        Args:
            base_damage: Pre-mitigation damage
            attacker: Attacker's effective stats (crit, lethality)
            defender: Defender's effective stats (armor)
            true_damage: Flat unmitigated damage added after mitigation
            can_crit: Whether this hit may critically strike

        Returns:
            DamageResult with the final damage
        """
        is_critical = can_crit and self.roll_critical(attacker.critical_chance)
        raw = base_damage
        if is_critical:
            critical_damage = attacker.critical_damage or self.default_critical_damage
            raw = base_damage * critical_damage / 100

        mitigated = self.mitigate(raw, defender.armor, attacker.lethality)
        bonus = max(0, round(true_damage))
        return DamageResult(
            damage=mitigated + bonus,
            raw_damage=raw,
            damage_type=DamageType.PHYSICAL,
            is_critical=is_critical,
            true_damage=bonus,
        )

    def magic_damage(
        self,
        base_damage: float,
        attacker: CombatStats,
        defender: CombatStats,
        true_damage: float = 0.0,
    ) -> DamageResult:
        """Magic damage: magic resist minus magic penetration. Spells never crit."""
        mitigated = self.mitigate(base_damage, defender.magic_resist, attacker.magic_penetration)
        bonus = max(0, round(true_damage))
        return DamageResult(
            damage=mitigated + bonus,
            raw_damage=base_damage,
            damage_type=DamageType.MAGIC,
            true_damage=bonus,
        )

    @staticmethod
    def heal_amount(scaling: HealScaling, ability_power: float, missing_hp: int, hp_ratio: float) -> int:
        """Total heal from flat, AP and missing-health components.

        The low-health multiplier applies to the whole total when the caster's
        HP ratio is below the threshold. Clamping to max HP is the caller's job.
        """
        total = (
            scaling.flat_amount
            + ability_power * scaling.ability_power / 100
            + missing_hp * scaling.missing_health / 100
        )
        bonus = scaling.low_health_bonus
        if bonus is not None and hp_ratio * 100 < bonus.threshold:
            total *= bonus.multiplier
        return max(0, round(total))

    @staticmethod
    def vamp_heal(damage_dealt: int, percent: float) -> int:
        """Lifesteal or omnivamp healing for a hit, at least 1 when the stat is set."""
        if percent <= 0 or damage_dealt <= 0:
            return 0
        return max(1, round(damage_dealt * percent / 100))

    def on_hit(self, damage_dealt: int, attacker: CombatStats, defender: CombatStats) -> OnHitResult:
        """Effects triggered by a basic attack that dealt damage.

        Healing combines flat healing on hit, lifesteal and omnivamp, the vamps
        scaling with the attack's damage. Nothing triggers if the attack dealt
        no damage.

        Args:
            damage_dealt: Damage the attack dealt to the defender
            attacker: Attacker's effective stats
            defender: Defender's effective stats (mitigates bonus damage)

        Returns:
            OnHitResult for the caller to apply
        """
        result = OnHitResult()
        if damage_dealt <= 0:
            return result

        if attacker.healing_on_hit > 0:
            amount = round(attacker.healing_on_hit)
            result.healing += amount
            result.effects.append(f"+{amount} HP (healing on hit)")

        life_steal = self.vamp_heal(damage_dealt, attacker.life_steal)
        if life_steal:
            result.healing += life_steal
            result.effects.append(f"+{life_steal} HP (lifesteal)")

        omnivamp = self.vamp_heal(damage_dealt, attacker.omnivamp)
        if omnivamp:
            result.healing += omnivamp
            result.effects.append(f"+{omnivamp} HP (omnivamp)")

        if attacker.on_hit_damage > 0:
            result.bonus_damage = self.mitigate(
                attacker.on_hit_damage,
                defender.magic_resist,
                attacker.magic_penetration,
            )
            result.effects.append(f"{result.bonus_damage} on-hit magic damage")

        if attacker.burn_stacks_on_hit > 0:
            result.burn_stacks = attacker.burn_stacks_on_hit
            result.effects.append(f"{result.burn_stacks} burn stacks")

        return result
