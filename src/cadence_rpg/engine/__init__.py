"""Encounter engine module - handles timeline generation, stuns, action resolution, and ledgers."""

from .cadence import clamp_attack_speed, get_attack_cadence, get_spell_cooldown, slow_attack_speed
from .combat import CombatResolver, DamageResult, OnHitResult, effective_cc_duration, is_immune_to_cc
from .cooldowns import CooldownLedger
from .encounter import (
    Encounter,
    ResolvedEvent,
    move,
    regenerate_window,
    resolve_next,
    run_encounter,
    start_encounter,
)
from .errors import (
    CrowdControlledError,
    EncounterOverError,
    EngineError,
    InvalidInputError,
    InvariantViolationError,
)
from .logging import CombatLog, CombatLogger, LogEntry, LogEventType, StateSnapshot
from .shields import Shield, ShieldLedger
from .status import CombatBuff, StatusLedger
from .stuns import apply_stun, sort_actions
from .timeline import TimelineGenerator, TimelineWindow
from .types import CombatState, CombatStats, StunPeriod, TurnAction, TurnEntity

__all__ = [
    "get_attack_cadence",
    "get_spell_cooldown",
    "clamp_attack_speed",
    "slow_attack_speed",
    "TimelineGenerator",
    "TimelineWindow",
    "apply_stun",
    "sort_actions",
    "CombatResolver",
    "DamageResult",
    "OnHitResult",
    "effective_cc_duration",
    "is_immune_to_cc",
    "CooldownLedger",
    "StatusLedger",
    "CombatBuff",
    "ShieldLedger",
    "Shield",
    "Encounter",
    "ResolvedEvent",
    "start_encounter",
    "resolve_next",
    "move",
    "regenerate_window",
    "run_encounter",
    "EngineError",
    "InvalidInputError",
    "InvariantViolationError",
    "EncounterOverError",
    "CrowdControlledError",
    "CombatLogger",
    "CombatLog",
    "LogEntry",
    "LogEventType",
    "StateSnapshot",
    "TurnEntity",
    "TurnAction",
    "StunPeriod",
    "CombatStats",
    "CombatState",
]
