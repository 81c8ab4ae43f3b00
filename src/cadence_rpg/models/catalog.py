"""Ability catalog - static ability definitions consumed by the engine.

Definitions are treated as immutable configuration: the engine reads
coefficients, cooldowns, ranges and durations from them but never changes them.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from .enums import EffectKind, StatKind

# =============================================================================
# Effect Schemas
# =============================================================================


class DamageScaling(BaseModel):
    """Damage coefficients, in percent of the caster's stat."""

    model_config = ConfigDict(frozen=True)

    ability_power: float = Field(default=0.0, ge=0, description="Percentage of AP (100 = 100%)")
    attack_damage: float = Field(default=0.0, ge=0, description="Percentage of AD")
    health: float = Field(default=0.0, ge=0, description="Percentage of the caster's max HP")
    true_damage: int = Field(default=0, ge=0, description="Flat damage that bypasses resistances")


class LowHealthBonus(BaseModel):
    """Heal multiplier applied when the caster is below an HP threshold."""

    model_config = ConfigDict(frozen=True)

    threshold: float = Field(gt=0, le=100, description="HP percentage threshold (40 = below 40% HP)")
    multiplier: float = Field(gt=0, description="Multiplier for the total heal (1.5 = 150%)")


class HealScaling(BaseModel):
    """Heal coefficients."""

    model_config = ConfigDict(frozen=True)

    flat_amount: int = Field(default=0, ge=0, description="Flat heal amount")
    ability_power: float = Field(default=0.0, ge=0, description="Percentage of AP")
    missing_health: float = Field(default=0.0, ge=0, description="Percentage of missing HP")
    low_health_bonus: LowHealthBonus | None = None


class StatChange(BaseModel):
    """Stat modifier granted by a buff or debuff effect."""

    model_config = ConfigDict(frozen=True)

    stat: StatKind
    amount: float = Field(description="Signed amount added to the stat")
    duration: int = Field(ge=0, description="Whole turns the modifier lasts")
    max_stacks: int | None = Field(default=None, ge=1, description="Stack cap, newest application refreshes")
    refresh_stacks: bool = Field(default=False, description="Reapplying resets every existing stack's duration")


class SpellEffect(BaseModel):
    """A single effect of an ability."""

    model_config = ConfigDict(frozen=True)

    kind: EffectKind
    damage_scaling: DamageScaling | None = None
    heal_scaling: HealScaling | None = None
    stat_change: StatChange | None = None
    stun_duration: float = Field(default=0.0, ge=0, description="Stun duration in turns")
    slow_percent: float = Field(default=0.0, ge=0, le=100, description="Attack speed reduction in percent")
    slow_duration: int = Field(default=0, ge=0, description="Whole turns the slow lasts")
    shield_amount: int = Field(default=0, ge=0, description="Flat shield amount")
    shield_health: float = Field(default=0.0, ge=0, description="Shield as a percentage of the caster's max HP")
    shield_duration: int = Field(default=0, ge=0, description="Whole turns the shield lasts")
    description: str = ""


class AbilityDefinition(BaseModel):
    """A castable ability."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    effects: list[SpellEffect] = Field(default_factory=list)
    range: int | None = Field(default=None, gt=0, description="Range in units, defaults to the spell range")
    cast_time: float = Field(default=0.0, ge=0, description="Turns between the cast and the effect landing")
    cooldown: int = Field(default=0, ge=0, description="Whole turns before the ability is usable again")


class CatalogFile(BaseModel):
    """On-disk catalog format."""

    abilities: list[AbilityDefinition]


# =============================================================================
# Catalog
# =============================================================================


class AbilityCatalog:
    """Read-only lookup of ability definitions by id."""

    def __init__(self, abilities: list[AbilityDefinition]) -> None:
        self._abilities = {ability.id: ability for ability in abilities}

    def get(self, ability_id: str) -> AbilityDefinition | None:
        """Get an ability by id, or None if unknown."""
        return self._abilities.get(ability_id)

    def __contains__(self, ability_id: object) -> bool:
        return ability_id in self._abilities

    def __len__(self) -> int:
        return len(self._abilities)

    def ids(self) -> list[str]:
        """List all ability ids in definition order."""
        return list(self._abilities)


def load_catalog(path: str | Path) -> AbilityCatalog:
    """Load and validate a catalog from a JSON file.

    Raises:
        pydantic.ValidationError: If the file does not match the catalog format
    """
    data = CatalogFile.model_validate_json(Path(path).read_text(encoding="utf-8"))
    return AbilityCatalog(data.abilities)


DEFAULT_ABILITIES: list[AbilityDefinition] = [
    AbilityDefinition(
        id="test_spell",
        name="Test Spell",
        description="Deals 100% of your Ability Power as magic damage.",
        effects=[SpellEffect(kind=EffectKind.DAMAGE, damage_scaling=DamageScaling(ability_power=100))],
        cooldown=0,
    ),
    AbilityDefinition(
        id="rejuvenation",
        name="Rejuvenation",
        description="Heals for 20 HP + 20% of your Ability Power.",
        effects=[SpellEffect(kind=EffectKind.HEAL, heal_scaling=HealScaling(flat_amount=20, ability_power=20))],
        cooldown=2,
    ),
    AbilityDefinition(
        id="quicksand",
        name="Quicksand",
        description="Deals 20% of your Ability Power as damage and slows the target by 10% for 3 turns.",
        effects=[
            SpellEffect(kind=EffectKind.DAMAGE, damage_scaling=DamageScaling(ability_power=20)),
            SpellEffect(kind=EffectKind.SLOW, slow_percent=10, slow_duration=3),
        ],
        cooldown=2,
    ),
    AbilityDefinition(
        id="for_demacia",
        name="For Demacia!",
        description="Grants +0.5 Attack Speed for 1 turn and a shield of 5% max HP for 2 turns.",
        effects=[
            SpellEffect(
                kind=EffectKind.BUFF,
                stat_change=StatChange(stat=StatKind.ATTACK_SPEED, amount=0.5, duration=1),
            ),
            SpellEffect(kind=EffectKind.SHIELD, shield_health=5, shield_duration=2),
        ],
        cooldown=2,
    ),
    AbilityDefinition(
        id="purify",
        name="Purify",
        description="Removes all debuffs from yourself.",
        effects=[SpellEffect(kind=EffectKind.UTILITY)],
        cooldown=1,
    ),
    AbilityDefinition(
        id="wish",
        name="Wish",
        description="Heals 150 + 50% AP. Heals 50% more if below 40% max HP.",
        effects=[
            SpellEffect(
                kind=EffectKind.HEAL,
                heal_scaling=HealScaling(
                    flat_amount=150,
                    ability_power=50,
                    low_health_bonus=LowHealthBonus(threshold=40, multiplier=1.5),
                ),
            )
        ],
        cooldown=5,
    ),
    AbilityDefinition(
        id="dazzle",
        name="Dazzle",
        description="After 1.0 turn cast time, stuns the target for 1.0 turn. Range: 625 units.",
        effects=[SpellEffect(kind=EffectKind.STUN, stun_duration=1.0)],
        range=625,
        cast_time=1.0,
        cooldown=3,
    ),
    AbilityDefinition(
        id="ignite",
        name="Ignite",
        description="Deals 50 true damage + 20% AD, then burns the target for 20 damage per turn for 3 turns.",
        effects=[
            SpellEffect(kind=EffectKind.DAMAGE, damage_scaling=DamageScaling(attack_damage=20, true_damage=50)),
            SpellEffect(
                kind=EffectKind.DEBUFF,
                stat_change=StatChange(
                    stat=StatKind.DAMAGE_OVER_TIME,
                    amount=20,
                    duration=3,
                    max_stacks=1,
                ),
            ),
        ],
        cooldown=5,
    ),
]


def default_catalog() -> AbilityCatalog:
    """Build the catalog of built-in abilities."""
    return AbilityCatalog(DEFAULT_ABILITIES)
