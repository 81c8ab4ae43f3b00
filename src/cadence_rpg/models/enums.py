"""Enums for game models."""

from enum import Enum


class ActorId(str, Enum):
    """Encounter participants - exactly two per encounter."""

    PRIMARY = "primary"  # The player's champion, wins exact time ties
    OPPONENT = "opponent"  # The scripted enemy


class ActionType(str, Enum):
    """Kinds of timeline actions."""

    ATTACK = "attack"  # Basic attack, physical damage
    SPELL = "spell"  # Selected ability, or a basic magic bolt


class DamageType(str, Enum):
    """How damage is mitigated."""

    PHYSICAL = "physical"  # Reduced by armor, offset by lethality
    MAGIC = "magic"  # Reduced by magic resist, offset by magic penetration
    TRUE = "true"  # Never mitigated


class StatKind(str, Enum):
    """Stats a buff can modify.

    Values match the field names of CombatStats, except HEAL_OVER_TIME and
    DAMAGE_OVER_TIME which mark periodic healing or damage instead of a stat
    change.
    """

    MAX_HP = "max_hp"
    ATTACK_DAMAGE = "attack_damage"
    ABILITY_POWER = "ability_power"
    ARMOR = "armor"
    MAGIC_RESIST = "magic_resist"
    ATTACK_SPEED = "attack_speed"
    ABILITY_HASTE = "ability_haste"
    LETHALITY = "lethality"
    MAGIC_PENETRATION = "magic_penetration"
    CRITICAL_CHANCE = "critical_chance"
    CRITICAL_DAMAGE = "critical_damage"
    TENACITY = "tenacity"
    LIFE_STEAL = "life_steal"
    OMNIVAMP = "omnivamp"
    TRUE_DAMAGE = "true_damage"
    ATTACK_RANGE = "attack_range"
    MOVEMENT_SPEED = "movement_speed"
    HEAL_OVER_TIME = "heal_over_time"
    DAMAGE_OVER_TIME = "damage_over_time"


class DurationType(str, Enum):
    """How a buff's lifetime is counted."""

    TURNS = "turns"  # Decays on integer turn boundaries, cleared when the encounter ends
    ENCOUNTERS = "encounters"  # Decays once per completed encounter


class BuffKind(str, Enum):
    """What a buff does while active."""

    INSTANT = "instant"  # Stat modifier, applies immediately
    HEAL_OVER_TIME = "heal_over_time"  # Heals its amount on every turn tick
    DAMAGE_OVER_TIME = "damage_over_time"  # Deals its amount on every turn tick (burn, bleed)


class CrowdControlType(str, Enum):
    """Crowd control effects and their interaction with tenacity."""

    STUN = "stun"  # Cannot move, attack, or cast spells
    ROOT = "root"  # Cannot move but can still attack and cast
    BLIND = "blind"  # Attacks miss
    SILENCE = "silence"  # Cannot cast spells
    TAUNT = "taunt"  # Forced to attack the taunter
    FEAR = "fear"  # Forced to flee
    CHARM = "charm"  # Forced to walk towards the source
    SLOW = "slow"  # Reduced speed
    SNARE = "snare"  # Cannot dash or blink
    DISARM = "disarm"  # Cannot auto-attack
    GROUND = "ground"  # Cannot use movement abilities
    POLYMORPH = "polymorph"  # Cannot act
    SUPPRESSION = "suppression"  # Cannot act, ignores tenacity
    KNOCKUP = "knockup"  # Airborne, ignores tenacity
    SLEEP = "sleep"  # Cannot act, breaks on damage


class EffectKind(str, Enum):
    """Kinds of ability effects in the catalog."""

    DAMAGE = "damage"
    HEAL = "heal"
    BUFF = "buff"  # Stat modifier on the caster
    DEBUFF = "debuff"  # Stat modifier on the target
    SLOW = "slow"  # Attack speed reduction on the target
    STUN = "stun"
    SHIELD = "shield"  # Damage-absorbing shield on the caster
    UTILITY = "utility"  # Cleanse the caster's debuffs


class ActionOutcome(str, Enum):
    """Result category of one resolution step."""

    HIT = "hit"  # Damage dealt without a critical strike
    CRITICAL = "critical"  # Damage dealt with a critical strike
    SUPPORT = "support"  # Spell with no damage (heal, buff, cleanse)
    OUT_OF_RANGE = "out_of_range"  # Missed: target beyond range, cursor still advances
    ENCOUNTER_ENDED = "encounter_ended"  # Terminal condition found before reading an action


class EndReason(str, Enum):
    """Why an encounter ended."""

    DEFEATED = "defeated"  # An actor's HP reached zero
    FLED = "fled"  # An actor moved beyond the battlefield bound
