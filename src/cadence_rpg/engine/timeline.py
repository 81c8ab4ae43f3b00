"""Timeline generation - merges both actors' cadences into one ordered sequence.

The sequence is consumed from the front through a cursor. When the cursor
gets within the lookahead threshold of the end, the window is regenerated
from the actors' current stats, so stat changes (buffs, slows) only take
effect at a regeneration boundary.
"""

import logging
from dataclasses import dataclass, field

from ..models.enums import ActionType, ActorId
from .cadence import DEFAULT_HASTE_CAP, get_attack_cadence, get_spell_cooldown
from .errors import EngineError, InvalidInputError
from .stuns import apply_stun, sort_actions
from .types import StunPeriod, TurnAction, TurnEntity, normalize_time, turn_of

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_TURNS = 20
DEFAULT_LOOKAHEAD_THRESHOLD = 10


class TimelineGenerator:
    """Generates the merged action sequence for a range of turns."""

    def __init__(self, haste_cap: float = DEFAULT_HASTE_CAP) -> None:
        self.haste_cap = haste_cap

    def generate(
        self,
        primary: TurnEntity,
        opponent: TurnEntity,
        turn_count: int,
        start_turn: int = 1,
    ) -> list[TurnAction]:
        """Generate all attacks and spells of both actors in [start_turn, start_turn + turn_count).

        Cadences are always anchored at the timeline origin; start_turn only
        selects which part of them is emitted.

        Args:
            primary: The primary actor (wins exact time ties)
            opponent: The opponent actor
            turn_count: Number of whole turns to cover
            start_turn: First turn to cover

        Returns:
            Actions sorted by time, then priority
        """
        if primary.id != ActorId.PRIMARY or opponent.id != ActorId.OPPONENT:
            raise InvalidInputError(f"Expected primary and opponent entities, got {primary.id} and {opponent.id}")
        if turn_count < 1:
            raise InvalidInputError(f"Turn count must be positive, got {turn_count}")
        if start_turn < 1:
            raise InvalidInputError(f"Start turn must be at least 1, got {start_turn}")

        end = start_turn + turn_count
        actions: list[TurnAction] = []

        for entity in (primary, opponent):
            first_attack, attack_increment = get_attack_cadence(entity.attack_speed)
            actions.extend(
                self._emit(entity, ActionType.ATTACK, first_attack, attack_increment, start_turn, end)
            )

        for entity in (primary, opponent):
            spell_cooldown = get_spell_cooldown(entity.ability_haste, self.haste_cap)
            # Spells accrue from t = cooldown, no separate first-cast offset
            actions.extend(
                self._emit(entity, ActionType.SPELL, spell_cooldown, spell_cooldown, start_turn, end)
            )

        return sort_actions(actions)

    @staticmethod
    def _emit(
        entity: TurnEntity,
        action_type: ActionType,
        first: float,
        increment: float,
        start: int,
        end: int,
    ) -> list[TurnAction]:
        """Emit one cadence's actions falling within [start, end)."""
        actions: list[TurnAction] = []
        index = 0
        time = normalize_time(first)
        while time < end:
            if time >= start:
                actions.append(
                    TurnAction(
                        entity_id=entity.id,
                        turn_number=turn_of(time),
                        time=time,
                        action_type=action_type,
                        priority=entity.priority,
                    )
                )
            index += 1
            # Multiply rather than accumulate so long windows do not drift
            time = normalize_time(first + index * increment)
        return actions


@dataclass
class _StunRecord:
    period: StunPeriod
    after_key: tuple[float, int]  # Sort key of the action that applied the stun


@dataclass
class TimelineWindow:
    """A generated sequence plus the cursor consuming it."""

    actions: list[TurnAction] = field(default_factory=list)
    cursor: int = 0
    window_turns: int = DEFAULT_WINDOW_TURNS
    lookahead_threshold: int = DEFAULT_LOOKAHEAD_THRESHOLD
    generator: TimelineGenerator = field(default_factory=TimelineGenerator)
    current_time: float | None = None  # Time of the last consumed action
    generations: int = 0
    _last_key: tuple[float, int] | None = None
    _stun_log: list[_StunRecord] = field(default_factory=list)

    @classmethod
    def open(
        cls,
        primary: TurnEntity,
        opponent: TurnEntity,
        window_turns: int = DEFAULT_WINDOW_TURNS,
        lookahead_threshold: int = DEFAULT_LOOKAHEAD_THRESHOLD,
        generator: TimelineGenerator | None = None,
    ) -> "TimelineWindow":
        """Generate the first window of an encounter."""
        window = cls(
            window_turns=window_turns,
            lookahead_threshold=lookahead_threshold,
            generator=generator or TimelineGenerator(),
        )
        window.actions = window.generator.generate(primary, opponent, window_turns)
        window.generations = 1
        return window

    @property
    def remaining(self) -> int:
        """Number of unconsumed actions."""
        return len(self.actions) - self.cursor

    @property
    def stuns(self) -> list[StunPeriod]:
        """All stuns applied so far, in application order."""
        return [record.period for record in self._stun_log]

    def needs_regeneration(self) -> bool:
        """True when the cursor is within the lookahead threshold of the end, or at it."""
        return self.remaining == 0 or self.remaining < self.lookahead_threshold

    def peek(self) -> TurnAction | None:
        """The next action to resolve, without consuming it."""
        if self.cursor >= len(self.actions):
            return None
        return self.actions[self.cursor]

    def preview(self, count: int) -> list[TurnAction]:
        """The next `count` unconsumed actions."""
        return self.actions[self.cursor : self.cursor + count]

    def advance(self) -> TurnAction:
        """Consume and return the next action."""
        action = self.peek()
        if action is None:
            raise EngineError("Timeline window exhausted; regenerate before advancing")
        self.cursor += 1
        self.current_time = action.time
        self._last_key = action.sort_key
        return action

    def apply_stun(self, target_id: ActorId, duration: float, applied_at: float) -> StunPeriod:
        """Delay the target's unconsumed actions and record the stun.

        Args:
            target_id: Actor being stunned
            duration: Effective duration, must be positive
            applied_at: Time the stun lands

        Returns:
            The recorded stun period
        """
        if duration <= 0:
            raise InvalidInputError(f"Stun duration must be positive, got {duration}")

        tail = apply_stun(self.actions[self.cursor :], target_id, duration, applied_at)
        self.actions = self.actions[: self.cursor] + tail

        period = StunPeriod.from_duration(target_id, applied_at, duration)
        after_key = self._last_key if self._last_key is not None else (float("-inf"), -1)
        self._stun_log.append(_StunRecord(period=period, after_key=after_key))
        return period

    def regenerate(self, primary: TurnEntity, opponent: TurnEntity) -> None:
        """Rebuild the window from current stats and reset the cursor to 0.

        The rest of the current turn keeps its already scheduled actions; the
        new cadence takes over from the next integer turn boundary. Recorded
        stuns are replayed onto the new cadence so their delays persist.
        """
        boundary = turn_of(self.current_time) + 1 if self.current_time is not None else 1

        kept = [action for action in self.actions[self.cursor :] if action.time < boundary]

        fresh = self.generator.generate(primary, opponent, turn_count=boundary - 1 + self.window_turns)
        for record in self._stun_log:
            fresh = self._replay_stun(fresh, record)
        fresh = [action for action in fresh if action.time >= boundary]

        self.actions = kept + fresh
        self.cursor = 0
        self.generations += 1
        logger.debug(
            "Regenerated timeline window #%d from turn %d: %d kept, %d new actions",
            self.generations,
            boundary,
            len(kept),
            len(fresh),
        )

    @staticmethod
    def _replay_stun(actions: list[TurnAction], record: _StunRecord) -> list[TurnAction]:
        """Re-apply a stun to actions that were still pending when it landed."""
        before = [action for action in actions if action.sort_key <= record.after_key]
        after = [action for action in actions if action.sort_key > record.after_key]
        period = record.period
        return sort_actions(before + apply_stun(after, period.entity_id, period.duration, period.start_time))
