"""Encounter aggregate - pure transitions driving one two-actor fight.

The caller owns the loop and the aggregate between steps:

    encounter = start_encounter(primary_stats, opponent_stats)
    while not encounter.is_over:
        encounter, event = resolve_next(encounter, rng)

Every transition returns a new aggregate and leaves its input untouched.
"""

import copy
import logging
import random
from dataclasses import dataclass, field

from ..config import Settings, get_settings
from ..models.catalog import AbilityCatalog, AbilityDefinition, SpellEffect, default_catalog
from ..models.enums import (
    ActionOutcome,
    ActionType,
    ActorId,
    BuffKind,
    CrowdControlType,
    EffectKind,
    EndReason,
    StatKind,
)
from .cadence import slow_attack_speed
from .combat import (
    BURN_DAMAGE_PER_STACK,
    BURN_DURATION,
    CombatResolver,
    effective_cc_duration,
    prevents_attacks,
    prevents_movement,
    prevents_spells,
)
from .cooldowns import CooldownLedger
from .errors import CrowdControlledError, EncounterOverError, EngineError, InvalidInputError
from .logging import CombatLogger
from .shields import ShieldLedger
from .status import CombatBuff, StatusLedger
from .timeline import TimelineGenerator, TimelineWindow
from .types import CombatState, CombatStats, StunPeriod, TurnAction, normalize_time

logger = logging.getLogger(__name__)

# Ability id reported for spells cast without a ready ability
BASIC_SPELL = "basic_spell"

# Effects aimed at the other actor rather than the caster
_TARGETED_EFFECTS = frozenset({EffectKind.DAMAGE, EffectKind.DEBUFF, EffectKind.SLOW, EffectKind.STUN})

# Stats whose buffs tick instead of modifying a stat
_PERIODIC_KINDS = {
    StatKind.HEAL_OVER_TIME: BuffKind.HEAL_OVER_TIME,
    StatKind.DAMAGE_OVER_TIME: BuffKind.DAMAGE_OVER_TIME,
}

# Name of the burn debuff applied by attacks
BURN = "burn"


@dataclass
class ResolvedEvent:
    """Self-contained result of one resolution step, for the presentation layer."""

    outcome: ActionOutcome
    time: float
    turn_number: int
    actor_id: ActorId | None = None
    target_id: ActorId | None = None
    action_type: ActionType | None = None
    ability_id: str | None = None

    damage: int = 0  # Damage dealt to the target
    heal: int = 0  # Healing received by the actor (heals, lifesteal, omnivamp)
    is_critical: bool = False
    actor_hp: int = 0
    target_hp: int = 0

    stun: StunPeriod | None = None
    shield: int = 0  # Shield granted to the actor
    buffs_applied: list[CombatBuff] = field(default_factory=list)
    cooldown_turns: int = 0  # Ledger value set for the cast ability, 0 if none

    # A stat-changing effect happened; regenerate_window() picks it up immediately
    needs_regeneration: bool = False

    ended: bool = False
    winner: ActorId | None = None
    end_reason: EndReason | None = None
    description: str = ""


@dataclass
class Encounter:
    """Both actors, their ledgers and the timeline window of one encounter."""

    primary: CombatState
    opponent: CombatState
    window: TimelineWindow
    settings: Settings
    catalog: AbilityCatalog
    current_time: float = 0.0
    last_tick_turn: int = 1  # Last integer turn boundary whose ticks have run
    winner: ActorId | None = None
    end_reason: EndReason | None = None

    @property
    def is_over(self) -> bool:
        return self.end_reason is not None

    @property
    def stuns(self) -> list[StunPeriod]:
        """All stuns applied during the encounter."""
        return self.window.stuns

    def state(self, actor_id: ActorId) -> CombatState:
        """Get an actor's combat state."""
        return self.primary if actor_id == ActorId.PRIMARY else self.opponent

    def opponent_of(self, actor_id: ActorId) -> CombatState:
        """Get the other actor's combat state."""
        return self.opponent if actor_id == ActorId.PRIMARY else self.primary

    def states(self) -> dict[ActorId, CombatState]:
        return {ActorId.PRIMARY: self.primary, ActorId.OPPONENT: self.opponent}

    def distance(self) -> int:
        return abs(self.primary.position - self.opponent.position)

    def cooldowns(self, actor_id: ActorId) -> dict[str, int]:
        """Read-only snapshot of an actor's cooldown table."""
        return self.state(actor_id).cooldowns.snapshot()

    def buffs(self, actor_id: ActorId) -> list[CombatBuff]:
        """Read-only snapshot of an actor's active buffs."""
        return self.state(actor_id).status.active()

    def shield(self, actor_id: ActorId) -> int:
        """Total remaining shield of an actor."""
        return self.state(actor_id).shields.total

    def crowd_control(self, actor_id: ActorId) -> list[CrowdControlType]:
        """Crowd control types holding an actor at the current time."""
        return [
            period.cc_type
            for period in self.stuns
            if period.entity_id == actor_id and period.covers(self.current_time)
        ]

    def can_move(self, actor_id: ActorId) -> bool:
        return not any(prevents_movement(cc) for cc in self.crowd_control(actor_id))

    def can_attack(self, actor_id: ActorId) -> bool:
        return not any(prevents_attacks(cc) for cc in self.crowd_control(actor_id))

    def can_cast(self, actor_id: ActorId) -> bool:
        return not any(prevents_spells(cc) for cc in self.crowd_control(actor_id))


def start_encounter(
    primary_stats: CombatStats,
    opponent_stats: CombatStats,
    *,
    settings: Settings | None = None,
    catalog: AbilityCatalog | None = None,
    primary_ability: str | None = None,
    opponent_ability: str | None = None,
    primary_name: str = "",
    opponent_name: str = "",
    primary_status: StatusLedger | None = None,
    opponent_status: StatusLedger | None = None,
    combat_logger: CombatLogger | None = None,
) -> Encounter:
    """Create an encounter and generate its first timeline window.

    Args:
        primary_stats: Stat snapshot of the primary actor
        opponent_stats: Stat snapshot of the opponent
        settings: Engine settings, defaults to get_settings()
        catalog: Ability definitions, defaults to the built-in catalog
        primary_ability: Ability the primary casts on SPELL actions
        opponent_ability: Ability the opponent casts on SPELL actions
        primary_name: Display name
        opponent_name: Display name
        primary_status: Status ledger carried over from earlier encounters
        opponent_status: Status ledger carried over from earlier encounters
        combat_logger: Structured log to record into

    Returns:
        The new encounter
    """
    settings = settings or get_settings()
    catalog = catalog if catalog is not None else default_catalog()

    for ability_id in (primary_ability, opponent_ability):
        if ability_id is not None and ability_id not in catalog:
            raise InvalidInputError(f"Unknown ability: {ability_id}")
    for stats in (primary_stats, opponent_stats):
        if stats.max_hp <= 0:
            raise InvalidInputError(f"Max HP must be positive, got {stats.max_hp}")

    strict = settings.strict_invariants
    primary = CombatState(
        actor_id=ActorId.PRIMARY,
        stats=primary_stats,
        current_hp=primary_stats.max_hp,
        position=settings.primary_start_position,
        ability_id=primary_ability,
        display_name=primary_name,
        cooldowns=CooldownLedger(strict=strict),
        status=primary_status if primary_status is not None else StatusLedger(strict=strict),
        shields=ShieldLedger(strict=strict),
    )
    opponent = CombatState(
        actor_id=ActorId.OPPONENT,
        stats=opponent_stats,
        current_hp=opponent_stats.max_hp,
        position=settings.opponent_start_position,
        ability_id=opponent_ability,
        display_name=opponent_name,
        cooldowns=CooldownLedger(strict=strict),
        status=opponent_status if opponent_status is not None else StatusLedger(strict=strict),
        shields=ShieldLedger(strict=strict),
    )
    # Carried-over buffs may raise max HP
    for state in (primary, opponent):
        state.current_hp = state.max_hp

    floor = settings.attack_speed_floor
    window = TimelineWindow.open(
        primary.turn_entity(floor),
        opponent.turn_entity(floor),
        window_turns=settings.window_turns,
        lookahead_threshold=settings.lookahead_threshold,
        generator=TimelineGenerator(haste_cap=settings.haste_cap),
    )
    encounter = Encounter(
        primary=primary,
        opponent=opponent,
        window=window,
        settings=settings,
        catalog=catalog,
    )

    logger.info(
        "Encounter started: %s vs %s, %d actions in first window",
        primary_name or ActorId.PRIMARY.value,
        opponent_name or ActorId.OPPONENT.value,
        len(window.actions),
    )
    if combat_logger:
        combat_logger.log_encounter_start(encounter.states())
        combat_logger.log_window_generated(1, len(window.actions), window.generations)
    return encounter


def resolve_next(
    encounter: Encounter,
    rng: random.Random | None = None,
    *,
    catalog: AbilityCatalog | None = None,
    spell_choice: str | None = None,
    resolver: CombatResolver | None = None,
    combat_logger: CombatLogger | None = None,
) -> tuple[Encounter, ResolvedEvent]:
    """Resolve the next action on the timeline.

    Terminal conditions are checked before the next action is read, so an
    encounter whose actor died or fled outside this function ends without
    resolving anything further. They are checked again after the turn ticks
    leading up to the action, since damage over time can kill on a tick; the
    action is then left unresolved.

    Args:
        encounter: Current aggregate (not modified)
        rng: Random source for crit rolls, ignored when a resolver is given
        catalog: Overrides the encounter's catalog for this step
        spell_choice: Ability to cast if this step is a SPELL action
        resolver: Preconfigured combat resolver
        combat_logger: Structured log to record into

    Returns:
        (new encounter, event describing what happened)

    Raises:
        EncounterOverError: If the encounter has already ended
    """
    if encounter.is_over:
        raise EncounterOverError("Encounter is over; start a new one")

    enc = _clone(encounter)
    if _check_terminal(enc):
        _finish(enc, combat_logger)
        return enc, _terminal_event(enc)

    if enc.window.needs_regeneration():
        _regenerate(enc, combat_logger)

    pending = enc.window.peek()
    if pending is None:
        raise EngineError("Timeline window is empty after regeneration")
    needs_regeneration = _tick_to(enc, pending.turn_number, combat_logger)
    if _check_terminal(enc):
        enc.current_time = max(enc.current_time, float(enc.last_tick_turn))
        _finish(enc, combat_logger)
        event = _terminal_event(enc)
        event.description = f"Encounter ended on the turn {enc.last_tick_turn} tick"
        event.needs_regeneration = needs_regeneration
        return enc, event

    action = enc.window.advance()
    enc.current_time = action.time

    resolver = resolver or CombatResolver(rng, enc.settings.default_critical_damage)
    if action.action_type == ActionType.ATTACK:
        event = _resolve_attack(enc, action, resolver, combat_logger)
    else:
        catalog = catalog if catalog is not None else enc.catalog
        event = _resolve_spell(enc, action, resolver, catalog, spell_choice, combat_logger)
    event.needs_regeneration = event.needs_regeneration or needs_regeneration

    if _check_terminal(enc):
        _finish(enc, combat_logger)
        event.ended = True
        event.winner = enc.winner
        event.end_reason = enc.end_reason
    return enc, event


def move(
    encounter: Encounter,
    actor_id: ActorId,
    delta: int,
    combat_logger: CombatLogger | None = None,
) -> Encounter:
    """Move an actor along the battlefield.

    Moving beyond the flee bound ends the encounter immediately and the
    fleeing actor loses.

    Raises:
        EncounterOverError: If the encounter has already ended
        CrowdControlledError: If a crowd control holding the actor prevents movement
    """
    if encounter.is_over:
        raise EncounterOverError("Encounter is over; start a new one")
    if not encounter.can_move(actor_id):
        held = ", ".join(cc.value for cc in encounter.crowd_control(actor_id))
        raise CrowdControlledError(f"{actor_id.value} cannot move at t={encounter.current_time:g} ({held})")

    enc = _clone(encounter)
    state = enc.state(actor_id)
    state.position += delta
    logger.debug("%s moved %+d to %d", actor_id.value, delta, state.position)
    if _check_terminal(enc):
        _finish(enc, combat_logger)
    return enc


def movement_step(stats: CombatStats) -> int:
    """Distance covered by one move command."""
    return int(stats.movement_speed // 10)


def regenerate_window(encounter: Encounter, combat_logger: CombatLogger | None = None) -> Encounter:
    """Regenerate the timeline from the actors' current stats right away.

    Without this call the window is only regenerated when the cursor reaches
    the lookahead threshold.
    """
    if encounter.is_over:
        raise EncounterOverError("Encounter is over; start a new one")

    enc = _clone(encounter)
    _regenerate(enc, combat_logger)
    return enc


def run_encounter(
    encounter: Encounter,
    rng: random.Random | None = None,
    max_actions: int = 1000,
    *,
    resolver: CombatResolver | None = None,
    combat_logger: CombatLogger | None = None,
) -> tuple[Encounter, list[ResolvedEvent]]:
    """Resolve actions until the encounter ends or max_actions is reached."""
    if max_actions < 1:
        raise InvalidInputError(f"max_actions must be positive, got {max_actions}")

    resolver = resolver or CombatResolver(rng, encounter.settings.default_critical_damage)
    events: list[ResolvedEvent] = []
    while not encounter.is_over and len(events) < max_actions:
        encounter, event = resolve_next(encounter, resolver=resolver, combat_logger=combat_logger)
        events.append(event)
    return encounter, events


# =============================================================================
# Internals
# =============================================================================


def _clone(encounter: Encounter) -> Encounter:
    """Deep copy the aggregate, sharing the immutable settings and catalog."""
    memo = {id(encounter.settings): encounter.settings, id(encounter.catalog): encounter.catalog}
    return copy.deepcopy(encounter, memo)


def _check_terminal(enc: Encounter) -> bool:
    """Record the result if an actor is dead or has fled. Returns True if over."""
    for state in (enc.primary, enc.opponent):
        if not state.is_alive():
            enc.winner = enc.opponent_of(state.actor_id).actor_id
            enc.end_reason = EndReason.DEFEATED
            return True
    for state in (enc.primary, enc.opponent):
        if abs(state.position) > enc.settings.flee_bound:
            enc.winner = enc.opponent_of(state.actor_id).actor_id
            enc.end_reason = EndReason.FLED
            return True
    return False


def _finish(enc: Encounter, combat_logger: CombatLogger | None) -> None:
    """Discard the rest of the window and close out encounter-scoped state."""
    enc.window.actions = enc.window.actions[: enc.window.cursor]
    if combat_logger:
        combat_logger.log_encounter_end(enc.last_tick_turn, enc.winner, enc.end_reason, enc.states())
    for state in (enc.primary, enc.opponent):
        state.status.on_encounter_completed()
        state.shields.clear()
    logger.info(
        "Encounter ended at t=%.2f: %s won (%s)",
        enc.current_time,
        enc.winner.value if enc.winner else "nobody",
        enc.end_reason.value if enc.end_reason else "?",
    )


def _terminal_event(enc: Encounter) -> ResolvedEvent:
    return ResolvedEvent(
        outcome=ActionOutcome.ENCOUNTER_ENDED,
        time=enc.current_time,
        turn_number=enc.last_tick_turn,
        ended=True,
        winner=enc.winner,
        end_reason=enc.end_reason,
        description="Encounter ended before the next action",
    )


def _regenerate(enc: Encounter, combat_logger: CombatLogger | None) -> None:
    floor = enc.settings.attack_speed_floor
    enc.window.regenerate(enc.primary.turn_entity(floor), enc.opponent.turn_entity(floor))
    if combat_logger:
        start_turn = enc.window.actions[0].turn_number if enc.window.actions else enc.last_tick_turn
        combat_logger.log_window_generated(start_turn, len(enc.window.actions), enc.window.generations)


def _tick_to(enc: Encounter, turn_number: int, combat_logger: CombatLogger | None) -> bool:
    """Run one tick per integer boundary crossed. Returns True if a stat buff expired.

    Damage over time lands before healing over time and goes through shields;
    shields decay after absorbing it. Ticks stop early once an actor dies.
    """
    stats_changed = False
    while enc.last_tick_turn < turn_number:
        enc.last_tick_turn += 1
        ready: dict[ActorId, list[str]] = {}
        healed: dict[ActorId, int] = {}
        damaged: dict[ActorId, int] = {}
        for state in (enc.primary, enc.opponent):
            ready[state.actor_id] = state.cooldowns.on_turn_tick()
            tick = state.status.on_turn_tick()
            # Expired max HP buffs shrink the bar
            state.current_hp = min(state.current_hp, state.max_hp)
            damaged[state.actor_id] = state.apply_damage(tick.damage_over_time)
            healed[state.actor_id] = state.apply_heal(tick.heal_over_time) if state.is_alive() else 0
            for shield in state.shields.on_turn_tick():
                logger.debug("Shield %s of %s expired with %d left", shield.id, state.actor_id.value, shield.amount)
            for buff in tick.expired:
                if buff.kind == BuffKind.INSTANT:
                    stats_changed = True
                if combat_logger:
                    combat_logger.log_buff_expired(enc.last_tick_turn, state.actor_id, buff.name, buff.stat.value)
        if combat_logger:
            combat_logger.log_turn_tick(enc.last_tick_turn, ready, healed, damaged)
        if not (enc.primary.is_alive() and enc.opponent.is_alive()):
            break
    return stats_changed


def _in_range(enc: Encounter, reach: int) -> bool:
    return enc.distance() <= reach


def _resolve_attack(
    enc: Encounter,
    action: TurnAction,
    resolver: CombatResolver,
    combat_logger: CombatLogger | None,
) -> ResolvedEvent:
    actor = enc.state(action.entity_id)
    target = enc.opponent_of(action.entity_id)
    actor_stats = actor.effective_stats()
    target_stats = target.effective_stats()

    reach = actor_stats.attack_range or enc.settings.default_attack_range
    if not _in_range(enc, reach):
        return _missed(enc, action, None, f"target {enc.distance()} units away, range {reach}", combat_logger)

    before = CombatLogger.snapshot_state(target) if combat_logger else None
    result = resolver.physical_damage(
        actor_stats.attack_damage,
        actor_stats,
        target_stats,
        true_damage=actor_stats.true_damage,
    )
    dealt = target.apply_damage(result.damage)
    on_hit = resolver.on_hit(dealt, actor_stats, target_stats)
    if on_hit.bonus_damage and target.is_alive():
        dealt += target.apply_damage(on_hit.bonus_damage)

    # No healing or burn from a killing blow
    heal = 0
    buffs: list[CombatBuff] = []
    if target.is_alive():
        heal = actor.apply_heal(on_hit.healing)
        for _ in range(on_hit.burn_stacks):
            applied = target.status.apply(
                name=BURN,
                stat=StatKind.DAMAGE_OVER_TIME,
                amount=BURN_DAMAGE_PER_STACK,
                duration=BURN_DURATION,
                kind=BuffKind.DAMAGE_OVER_TIME,
                refresh_stacks=True,
            )
            buffs.append(applied.buff)
        if buffs and combat_logger:
            combat_logger.log_buff_applied(
                action.turn_number,
                actor.actor_id,
                target.actor_id,
                BURN,
                StatKind.DAMAGE_OVER_TIME.value,
                BURN_DAMAGE_PER_STACK * len(buffs),
                BURN_DURATION,
            )

    outcome = ActionOutcome.CRITICAL if result.is_critical else ActionOutcome.HIT
    description = f"{'Critical hit' if result.is_critical else 'Hit'} for {dealt} physical damage"
    if heal:
        description += f", healed {heal}"
    if buffs:
        description += f", {len(buffs)} burn stacks"

    if combat_logger:
        combat_logger.log_action_resolved(
            action.turn_number,
            action.time,
            actor.actor_id,
            target.actor_id,
            action.action_type,
            None,
            outcome,
            dealt,
            description,
            before,
            target,
        )
    return ResolvedEvent(
        outcome=outcome,
        time=action.time,
        turn_number=action.turn_number,
        actor_id=actor.actor_id,
        target_id=target.actor_id,
        action_type=action.action_type,
        damage=dealt,
        heal=heal,
        is_critical=result.is_critical,
        actor_hp=actor.current_hp,
        target_hp=target.current_hp,
        buffs_applied=buffs,
        description=description,
    )


def _select_ability(
    actor: CombatState,
    catalog: AbilityCatalog,
    spell_choice: str | None,
) -> AbilityDefinition | None:
    """The ability to cast, or None for the basic spell."""
    ability_id = spell_choice or actor.ability_id
    if ability_id is None:
        return None
    ability = catalog.get(ability_id)
    if ability is None:
        raise InvalidInputError(f"Unknown ability: {ability_id}")
    if not actor.cooldowns.is_ready(ability.id):
        logger.debug(
            "%s on cooldown for %s (%d turns), casting basic spell",
            ability.id,
            actor.actor_id.value,
            actor.cooldowns.remaining(ability.id),
        )
        return None
    return ability


def _resolve_spell(
    enc: Encounter,
    action: TurnAction,
    resolver: CombatResolver,
    catalog: AbilityCatalog,
    spell_choice: str | None,
    combat_logger: CombatLogger | None,
) -> ResolvedEvent:
    actor = enc.state(action.entity_id)
    target = enc.opponent_of(action.entity_id)
    ability = _select_ability(actor, catalog, spell_choice)
    ability_id = ability.id if ability else BASIC_SPELL

    reach = (ability.range if ability else None) or enc.settings.default_spell_range
    if not _in_range(enc, reach):
        return _missed(enc, action, ability_id, f"target {enc.distance()} units away, range {reach}", combat_logger)

    before = CombatLogger.snapshot_state(target) if combat_logger else None
    event = ResolvedEvent(
        outcome=ActionOutcome.SUPPORT,
        time=action.time,
        turn_number=action.turn_number,
        actor_id=actor.actor_id,
        target_id=target.actor_id,
        action_type=action.action_type,
        ability_id=ability_id,
    )
    parts: list[str] = []

    if ability is None:
        # Basic spell: 100% AP as magic damage
        stats = actor.effective_stats()
        result = resolver.magic_damage(stats.ability_power, stats, target.effective_stats())
        event.damage = target.apply_damage(result.damage)
        parts.append(f"{event.damage} magic damage")
    else:
        event.cooldown_turns = actor.cooldowns.on_ability_used(ability.id, ability.cooldown, action.time)
        if event.cooldown_turns and combat_logger:
            combat_logger.log_cooldown_started(action.turn_number, actor.actor_id, ability.id, event.cooldown_turns)
        for effect in ability.effects:
            # Effects aimed at the target stop once it is dead
            if not target.is_alive() and effect.kind in _TARGETED_EFFECTS:
                continue
            _apply_effect(enc, action, ability, effect, actor, target, resolver, event, parts, combat_logger)

    # Omnivamp applies to spell damage as well
    if event.damage and target.is_alive():
        event.heal += actor.apply_heal(resolver.vamp_heal(event.damage, actor.effective_stats().omnivamp))

    if event.damage:
        event.outcome = ActionOutcome.HIT
    event.actor_hp = actor.current_hp
    event.target_hp = target.current_hp
    event.description = ", ".join(parts) or "No effect"

    if combat_logger:
        combat_logger.log_action_resolved(
            action.turn_number,
            action.time,
            actor.actor_id,
            target.actor_id,
            action.action_type,
            ability_id,
            event.outcome,
            event.damage or event.heal,
            event.description,
            before,
            target,
        )
    return event


def _apply_effect(
    enc: Encounter,
    action: TurnAction,
    ability: AbilityDefinition,
    effect: SpellEffect,
    actor: CombatState,
    target: CombatState,
    resolver: CombatResolver,
    event: ResolvedEvent,
    parts: list[str],
    combat_logger: CombatLogger | None,
) -> None:
    """Apply one catalog effect of a cast ability."""
    actor_stats = actor.effective_stats()

    match effect.kind:
        case EffectKind.DAMAGE:
            scaling = effect.damage_scaling
            if scaling is None:
                return
            raw = (
                actor_stats.ability_power * scaling.ability_power / 100
                + actor_stats.attack_damage * scaling.attack_damage / 100
                + actor.max_hp * scaling.health / 100
            )
            result = resolver.magic_damage(raw, actor_stats, target.effective_stats(), true_damage=scaling.true_damage)
            dealt = target.apply_damage(result.damage)
            event.damage += dealt
            parts.append(f"{dealt} magic damage")

        case EffectKind.HEAL:
            if effect.heal_scaling is None:
                return
            amount = resolver.heal_amount(
                effect.heal_scaling,
                actor_stats.ability_power,
                actor.missing_hp,
                actor.hp_ratio,
            )
            healed = actor.apply_heal(amount)
            event.heal += healed
            parts.append(f"healed {healed}")

        case EffectKind.BUFF | EffectKind.DEBUFF:
            change = effect.stat_change
            if change is None:
                return
            recipient = actor if effect.kind == EffectKind.BUFF else target
            kind = _PERIODIC_KINDS.get(change.stat, BuffKind.INSTANT)
            applied = recipient.status.apply(
                name=ability.id,
                stat=change.stat,
                amount=change.amount,
                duration=change.duration,
                kind=kind,
                max_stacks=change.max_stacks,
                refresh_stacks=change.refresh_stacks,
            )
            event.buffs_applied.append(applied.buff)
            event.needs_regeneration = event.needs_regeneration or kind == BuffKind.INSTANT
            parts.append(f"{change.stat.value} {change.amount:+g} on {recipient.actor_id.value}")
            if combat_logger:
                combat_logger.log_buff_applied(
                    action.turn_number,
                    actor.actor_id,
                    recipient.actor_id,
                    ability.id,
                    change.stat.value,
                    change.amount,
                    change.duration,
                    refreshed=applied.refreshed,
                )

        case EffectKind.SLOW:
            current = target.effective_stats().attack_speed
            slowed = slow_attack_speed(current, effect.slow_percent, enc.settings.attack_speed_floor)
            amount = slowed - current
            if amount == 0 or effect.slow_duration == 0:
                return
            applied = target.status.apply(
                name=f"{ability.id}_slow",
                stat=StatKind.ATTACK_SPEED,
                amount=amount,
                duration=effect.slow_duration,
            )
            event.buffs_applied.append(applied.buff)
            event.needs_regeneration = True
            parts.append(f"slowed {effect.slow_percent:g}%")
            if combat_logger:
                combat_logger.log_buff_applied(
                    action.turn_number,
                    actor.actor_id,
                    target.actor_id,
                    applied.buff.name,
                    StatKind.ATTACK_SPEED.value,
                    amount,
                    effect.slow_duration,
                    refreshed=applied.refreshed,
                )

        case EffectKind.STUN:
            duration = effective_cc_duration(
                effect.stun_duration,
                target.effective_stats().tenacity,
                CrowdControlType.STUN,
            )
            # Full tenacity: the timeline is left alone
            if duration <= 0:
                parts.append("stun resisted")
                return
            applied_at = normalize_time(action.time + ability.cast_time)
            event.stun = enc.window.apply_stun(target.actor_id, duration, applied_at)
            parts.append(f"stunned {duration:g} turns")
            if combat_logger:
                combat_logger.log_stun_applied(
                    action.turn_number,
                    actor.actor_id,
                    target.actor_id,
                    applied_at,
                    duration,
                )

        case EffectKind.SHIELD:
            amount = effect.shield_amount + round(actor.max_hp * effect.shield_health / 100)
            if amount <= 0 or effect.shield_duration == 0:
                return
            shield = actor.shields.add(ability.id, amount, effect.shield_duration)
            event.shield += amount
            parts.append(f"shielded {amount}")
            if combat_logger:
                combat_logger.log_shield_applied(
                    action.turn_number,
                    actor.actor_id,
                    shield.id,
                    amount,
                    effect.shield_duration,
                )

        case EffectKind.UTILITY:
            removed = actor.status.cleanse()
            if any(buff.kind == BuffKind.INSTANT for buff in removed):
                event.needs_regeneration = True
            parts.append(f"cleansed {len(removed)} debuffs")


def _missed(
    enc: Encounter,
    action: TurnAction,
    ability_id: str | None,
    reason: str,
    combat_logger: CombatLogger | None,
) -> ResolvedEvent:
    actor = enc.state(action.entity_id)
    target = enc.opponent_of(action.entity_id)
    if combat_logger:
        combat_logger.log_action_missed(
            action.turn_number,
            action.time,
            actor.actor_id,
            action.action_type,
            ability_id,
            reason,
        )
    return ResolvedEvent(
        outcome=ActionOutcome.OUT_OF_RANGE,
        time=action.time,
        turn_number=action.turn_number,
        actor_id=actor.actor_id,
        target_id=target.actor_id,
        action_type=action.action_type,
        ability_id=ability_id,
        actor_hp=actor.current_hp,
        target_hp=target.current_hp,
        description=f"Missed: out of range ({reason})",
    )
