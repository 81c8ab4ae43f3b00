"""Game models: enums and the static ability catalog."""

from .catalog import (
    AbilityCatalog,
    AbilityDefinition,
    CatalogFile,
    DamageScaling,
    HealScaling,
    LowHealthBonus,
    SpellEffect,
    StatChange,
    default_catalog,
    load_catalog,
)
from .enums import (
    ActionOutcome,
    ActionType,
    ActorId,
    BuffKind,
    CrowdControlType,
    DamageType,
    DurationType,
    EffectKind,
    EndReason,
    StatKind,
)

__all__ = [
    # Enums
    "ActionOutcome",
    "ActionType",
    "ActorId",
    "BuffKind",
    "CrowdControlType",
    "DamageType",
    "DurationType",
    "EffectKind",
    "EndReason",
    "StatKind",
    # Catalog
    "AbilityCatalog",
    "AbilityDefinition",
    "CatalogFile",
    "DamageScaling",
    "HealScaling",
    "LowHealthBonus",
    "SpellEffect",
    "StatChange",
    "default_catalog",
    "load_catalog",
]
