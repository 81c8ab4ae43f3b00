"""Combat logging system for tracking and verifying encounter output.

Provides structured logging of all combat events including:
- Timeline window generation
- Resolved and missed actions with before/after state
- Stuns, cooldowns and buffs
- Turn ticks and the encounter result
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..models.enums import ActionOutcome, ActionType, ActorId, EndReason


class LogEventType(str, Enum):
    """Types of log events."""

    # Encounter lifecycle
    ENCOUNTER_START = "encounter_start"
    ENCOUNTER_END = "encounter_end"

    # Timeline
    WINDOW_GENERATED = "window_generated"
    TURN_TICK = "turn_tick"

    # Action resolution
    ACTION_RESOLVED = "action_resolved"
    ACTION_MISSED = "action_missed"  # Out of range, cursor still advanced

    # Effects
    STUN_APPLIED = "stun_applied"
    COOLDOWN_STARTED = "cooldown_started"
    BUFF_APPLIED = "buff_applied"
    BUFF_EXPIRED = "buff_expired"
    SHIELD_APPLIED = "shield_applied"


@dataclass
class StateSnapshot:
    """Snapshot of an actor's combat state at a point in time."""

    actor_id: ActorId
    current_hp: int
    max_hp: int
    position: int
    cooldowns: dict[str, int]
    buff_stacks: dict[str, int]
    shield: int = 0  # Remaining shield absorption

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "actor_id": self.actor_id.value,
            "current_hp": self.current_hp,
            "max_hp": self.max_hp,
            "position": self.position,
            "cooldowns": dict(self.cooldowns),
            "buff_stacks": dict(self.buff_stacks),
            "shield": self.shield,
        }


@dataclass
class LogEntry:
    """A single log entry representing a combat event."""

    event_type: LogEventType
    turn_number: int
    time: float | None = None
    timestamp_order: int = 0  # Order within the log for deterministic sorting

    # Event-specific data
    actor_id: ActorId | None = None
    target_id: ActorId | None = None
    action_type: ActionType | None = None
    ability_id: str | None = None
    outcome: ActionOutcome | None = None
    data: dict[str, Any] | None = None
    reason: str | None = None

    # State before/after for action events
    state_before: StateSnapshot | None = None
    state_after: StateSnapshot | None = None

    value: int | None = None
    description: str | None = None

    # For state snapshots - both actors
    all_states: dict[ActorId, StateSnapshot] | None = None

    # Result info
    winner: ActorId | None = None
    end_reason: EndReason | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        result: dict[str, Any] = {
            "event_type": self.event_type.value,
            "turn_number": self.turn_number,
            "timestamp_order": self.timestamp_order,
        }

        if self.time is not None:
            result["time"] = self.time
        if self.actor_id is not None:
            result["actor_id"] = self.actor_id.value
        if self.target_id is not None:
            result["target_id"] = self.target_id.value
        if self.action_type is not None:
            result["action_type"] = self.action_type.value
        if self.ability_id is not None:
            result["ability_id"] = self.ability_id
        if self.outcome is not None:
            result["outcome"] = self.outcome.value
        if self.data is not None:
            result["data"] = self.data
        if self.reason is not None:
            result["reason"] = self.reason
        if self.state_before is not None:
            result["state_before"] = self.state_before.to_dict()
        if self.state_after is not None:
            result["state_after"] = self.state_after.to_dict()
        if self.value is not None:
            result["value"] = self.value
        if self.description is not None:
            result["description"] = self.description
        if self.all_states is not None:
            result["all_states"] = {actor.value: state.to_dict() for actor, state in self.all_states.items()}
        if self.winner is not None:
            result["winner"] = self.winner.value
        if self.end_reason is not None:
            result["end_reason"] = self.end_reason.value

        return result


@dataclass
class CombatLog:
    """Complete log of one encounter."""

    encounter_id: int
    entries: list[LogEntry] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "encounter_id": self.encounter_id,
            "entries": [entry.to_dict() for entry in self.entries],
        }

    def get_entries_by_type(self, event_type: LogEventType) -> list[LogEntry]:
        """Get all entries of a specific type."""
        return [e for e in self.entries if e.event_type == event_type]

    def get_entries_for_turn(self, turn_number: int) -> list[LogEntry]:
        """Get all entries for a specific turn."""
        return [e for e in self.entries if e.turn_number == turn_number]

    def get_entries_for_actor(self, actor_id: ActorId) -> list[LogEntry]:
        """Get all entries where an actor acted."""
        return [e for e in self.entries if e.actor_id == actor_id]

    def format_readable(self) -> str:
        """Format the log in a human-readable format."""
        lines: list[str] = []
        lines.append(f"=== Combat Log (Encounter #{self.encounter_id}) ===\n")

        current_turn = -1

        for entry in self.entries:
            # Turn header
            if entry.turn_number != current_turn:
                current_turn = entry.turn_number
                lines.append(f"\n--- Turn {current_turn} ---\n")

            lines.append(self._format_entry(entry))

        return "\n".join(lines)

    def _format_entry(self, entry: LogEntry) -> str:
        """Format a single log entry."""
        actor = entry.actor_id.value if entry.actor_id else "?"
        target = entry.target_id.value if entry.target_id else "?"
        at = f"[t={entry.time:.2f}] " if entry.time is not None else ""

        match entry.event_type:
            case LogEventType.ENCOUNTER_START:
                return "  Encounter begins\n" + self._format_states(entry)

            case LogEventType.WINDOW_GENERATED:
                return f"  Timeline window generated from turn {entry.turn_number}: {entry.value} actions"

            case LogEventType.TURN_TICK:
                return f"  Turn {entry.turn_number} boundary" + (f" ({entry.description})" if entry.description else "")

            case LogEventType.ACTION_RESOLVED:
                hp_change = ""
                if entry.state_before and entry.state_after:
                    hp_diff = entry.state_after.current_hp - entry.state_before.current_hp
                    if hp_diff != 0:
                        hp_change = f" [HP: {entry.state_before.current_hp} → {entry.state_after.current_hp}]"

                name = entry.ability_id or (entry.action_type.value if entry.action_type else "action")
                return f"    {at}{actor} {name} → {target} = {entry.value}{hp_change} ({entry.description})"

            case LogEventType.ACTION_MISSED:
                name = entry.ability_id or (entry.action_type.value if entry.action_type else "action")
                return f"    {at}✗ {actor} {name} missed: {entry.reason}"

            case LogEventType.STUN_APPLIED:
                return f"    {at}→ {target} stunned for {entry.description}"

            case LogEventType.COOLDOWN_STARTED:
                return f"    → {entry.ability_id} on cooldown for {entry.value} turns"

            case LogEventType.BUFF_APPLIED:
                return f"    → {target} gains {entry.description}"

            case LogEventType.BUFF_EXPIRED:
                return f"    → {target} loses {entry.description}"

            case LogEventType.SHIELD_APPLIED:
                return f"    → {target} shielded for {entry.value} ({entry.description})"

            case LogEventType.ENCOUNTER_END:
                reason = entry.end_reason.value if entry.end_reason else "?"
                winner = entry.winner.value if entry.winner else "nobody"
                return f"  *** WINNER: {winner} ({reason}) ***\n" + self._format_states(entry)

            case _:
                return f"    {entry.event_type.value}: {entry.description or ''}"

    @staticmethod
    def _format_states(entry: LogEntry) -> str:
        if not entry.all_states:
            return "    State snapshot (empty)"
        state_lines = []
        for actor, state in entry.all_states.items():
            buffs = ", ".join(f"{k}:{v}" for k, v in state.buff_stacks.items()) or "none"
            state_lines.append(
                f"      {actor.value}: HP={state.current_hp}/{state.max_hp}, pos={state.position}, buffs=[{buffs}]"
            )
        return "\n".join(state_lines)


class CombatLogger:
    """Logger for tracking encounter events.

    Usage:
        combat_logger = CombatLogger(encounter_id=1)
        encounter = start_encounter(primary_stats, opponent_stats, combat_logger=combat_logger)
        encounter, event = resolve_next(encounter, rng, combat_logger=combat_logger)

        # Get the complete log
        log = combat_logger.get_log()
        print(log.format_readable())
    """

    def __init__(self, encounter_id: int = 0) -> None:
        """Initialize the logger for an encounter."""
        self.encounter_id = encounter_id
        self._log = CombatLog(encounter_id=encounter_id)
        self._order_counter = 0

    def _next_order(self) -> int:
        """Get the next timestamp order value."""
        self._order_counter += 1
        return self._order_counter

    def _append(self, entry: LogEntry) -> None:
        entry.timestamp_order = self._next_order()
        self._log.entries.append(entry)

    def get_log(self) -> CombatLog:
        """Get the complete combat log."""
        return self._log

    def clear(self) -> None:
        """Clear all log entries."""
        self._log.entries.clear()
        self._order_counter = 0

    @staticmethod
    def snapshot_state(state: Any) -> StateSnapshot:
        """Create a snapshot from a CombatState object."""
        stacks: dict[str, int] = {}
        for buff in state.status.active():
            stacks[buff.name] = stacks.get(buff.name, 0) + 1
        return StateSnapshot(
            actor_id=state.actor_id,
            current_hp=state.current_hp,
            max_hp=state.max_hp,
            position=state.position,
            cooldowns=state.cooldowns.snapshot(),
            buff_stacks=stacks,
            shield=state.shields.total,
        )

    def _snapshot_all(self, states: dict[ActorId, Any]) -> dict[ActorId, StateSnapshot]:
        return {actor: self.snapshot_state(state) for actor, state in states.items()}

    def log_encounter_start(self, states: dict[ActorId, Any]) -> None:
        """Log the start of an encounter with initial state snapshot."""
        self._append(
            LogEntry(
                event_type=LogEventType.ENCOUNTER_START,
                turn_number=1,
                time=0.0,
                all_states=self._snapshot_all(states),
            )
        )

    def log_window_generated(self, start_turn: int, action_count: int, generation: int) -> None:
        """Log a generated or regenerated timeline window."""
        self._append(
            LogEntry(
                event_type=LogEventType.WINDOW_GENERATED,
                turn_number=start_turn,
                value=action_count,
                data={"generation": generation},
            )
        )

    def log_turn_tick(
        self,
        turn_number: int,
        ready: dict[ActorId, list[str]],
        healed: dict[ActorId, int],
        damaged: dict[ActorId, int] | None = None,
    ) -> None:
        """Log an integer turn boundary and what it changed."""
        damaged = damaged or {}
        parts = []
        for actor, abilities in ready.items():
            if abilities:
                parts.append(f"{actor.value} ready: {', '.join(abilities)}")
        for actor, amount in damaged.items():
            if amount:
                parts.append(f"{actor.value} took {amount}")
        for actor, amount in healed.items():
            if amount:
                parts.append(f"{actor.value} healed {amount}")
        self._append(
            LogEntry(
                event_type=LogEventType.TURN_TICK,
                turn_number=turn_number,
                time=float(turn_number),
                data={
                    "ready": {actor.value: list(abilities) for actor, abilities in ready.items()},
                    "healed": {actor.value: amount for actor, amount in healed.items()},
                    "damaged": {actor.value: amount for actor, amount in damaged.items()},
                },
                description="; ".join(parts) or None,
            )
        )

    def log_action_resolved(
        self,
        turn_number: int,
        time: float,
        actor_id: ActorId,
        target_id: ActorId,
        action_type: ActionType,
        ability_id: str | None,
        outcome: ActionOutcome,
        value: int,
        description: str,
        state_before: StateSnapshot,
        state_after: Any,
    ) -> None:
        """Log a resolved action with the target's before/after state.

        state_before is snapshotted by the caller before the action mutates the target.
        """
        self._append(
            LogEntry(
                event_type=LogEventType.ACTION_RESOLVED,
                turn_number=turn_number,
                time=time,
                actor_id=actor_id,
                target_id=target_id,
                action_type=action_type,
                ability_id=ability_id,
                outcome=outcome,
                value=value,
                description=description,
                state_before=state_before,
                state_after=self.snapshot_state(state_after),
            )
        )

    def log_action_missed(
        self,
        turn_number: int,
        time: float,
        actor_id: ActorId,
        action_type: ActionType,
        ability_id: str | None,
        reason: str,
    ) -> None:
        """Log an action that resolved as a miss."""
        self._append(
            LogEntry(
                event_type=LogEventType.ACTION_MISSED,
                turn_number=turn_number,
                time=time,
                actor_id=actor_id,
                action_type=action_type,
                ability_id=ability_id,
                outcome=ActionOutcome.OUT_OF_RANGE,
                reason=reason,
            )
        )

    def log_stun_applied(
        self,
        turn_number: int,
        actor_id: ActorId,
        target_id: ActorId,
        start_time: float,
        duration: float,
    ) -> None:
        """Log a stun delaying the target's timeline."""
        self._append(
            LogEntry(
                event_type=LogEventType.STUN_APPLIED,
                turn_number=turn_number,
                time=start_time,
                actor_id=actor_id,
                target_id=target_id,
                data={"duration": duration},
                description=f"{duration:g} turns",
            )
        )

    def log_cooldown_started(self, turn_number: int, actor_id: ActorId, ability_id: str, turns: int) -> None:
        """Log an ability going on cooldown."""
        self._append(
            LogEntry(
                event_type=LogEventType.COOLDOWN_STARTED,
                turn_number=turn_number,
                actor_id=actor_id,
                ability_id=ability_id,
                value=turns,
            )
        )

    def log_buff_applied(
        self,
        turn_number: int,
        actor_id: ActorId,
        target_id: ActorId,
        name: str,
        stat: str,
        amount: float,
        duration: int,
        refreshed: bool = False,
    ) -> None:
        """Log a buff or debuff application."""
        verb = "refreshed" if refreshed else f"{duration} turns"
        self._append(
            LogEntry(
                event_type=LogEventType.BUFF_APPLIED,
                turn_number=turn_number,
                actor_id=actor_id,
                target_id=target_id,
                data={"name": name, "stat": stat, "amount": amount, "duration": duration, "refreshed": refreshed},
                description=f"{name} ({stat} {amount:+g}, {verb})",
            )
        )

    def log_shield_applied(
        self,
        turn_number: int,
        actor_id: ActorId,
        shield_id: str,
        amount: int,
        duration: int,
    ) -> None:
        """Log a shield granted to an actor."""
        self._append(
            LogEntry(
                event_type=LogEventType.SHIELD_APPLIED,
                turn_number=turn_number,
                actor_id=actor_id,
                target_id=actor_id,
                value=amount,
                data={"shield_id": shield_id, "duration": duration},
                description=f"{shield_id}, {duration} turns",
            )
        )

    def log_buff_expired(self, turn_number: int, target_id: ActorId, name: str, stat: str) -> None:
        """Log a buff or debuff running out."""
        self._append(
            LogEntry(
                event_type=LogEventType.BUFF_EXPIRED,
                turn_number=turn_number,
                target_id=target_id,
                data={"name": name, "stat": stat},
                description=f"{name} ({stat})",
            )
        )

    def log_encounter_end(
        self,
        turn_number: int,
        winner: ActorId | None,
        end_reason: EndReason,
        states: dict[ActorId, Any],
    ) -> None:
        """Log the encounter result."""
        self._append(
            LogEntry(
                event_type=LogEventType.ENCOUNTER_END,
                turn_number=turn_number,
                winner=winner,
                end_reason=end_reason,
                all_states=self._snapshot_all(states),
            )
        )
