"""Tests for timeline generation and the regenerating window."""

import pytest

from cadence_rpg.engine.errors import EngineError, InvalidInputError
from cadence_rpg.engine.timeline import TimelineGenerator, TimelineWindow
from cadence_rpg.engine.types import StunPeriod, TurnEntity
from cadence_rpg.models.enums import ActionType, ActorId

P = ActorId.PRIMARY
O = ActorId.OPPONENT
ATK = ActionType.ATTACK
SPL = ActionType.SPELL


def _summary(actions):
    return [(a.entity_id, a.action_type, a.time) for a in actions]


class TestTimelineGenerator:
    """Tests for TimelineGenerator.generate."""

    def test_three_turn_scenario(self, primary_entity, slow_opponent_entity):
        """1.0 AS vs 0.5 AS over three turns merges in time, then priority order."""
        actions = TimelineGenerator().generate(primary_entity, slow_opponent_entity, 3)

        assert _summary(actions) == [
            (P, ATK, 1.0),
            (P, SPL, 1.0),
            (O, SPL, 1.0),
            (O, ATK, 1.5),
            (P, ATK, 2.0),
            (P, SPL, 2.0),
            (O, SPL, 2.0),
            (P, ATK, 3.0),
            (P, SPL, 3.0),
            (O, ATK, 3.0),
            (O, SPL, 3.0),
        ]

    def test_turn_number_is_floor_of_time(self, primary_entity, slow_opponent_entity):
        """Each action's turn number is the integer part of its time."""
        actions = TimelineGenerator().generate(primary_entity, slow_opponent_entity, 5)
        for action in actions:
            assert action.turn_number == int(action.time)

    def test_covers_requested_turns_only(self, primary_entity, slow_opponent_entity):
        """Generated times fall within [1, turn_count + 1)."""
        actions = TimelineGenerator().generate(primary_entity, slow_opponent_entity, 4)
        assert min(a.time for a in actions) >= 1.0
        assert max(a.time for a in actions) < 5.0

    def test_primary_wins_ties(self, primary_entity, opponent_entity):
        """For equal times the primary actor's actions come first."""
        actions = TimelineGenerator().generate(primary_entity, opponent_entity, 5)
        for earlier, later in zip(actions, actions[1:]):
            assert earlier.sort_key <= later.sort_key
            if earlier.time == later.time:
                assert earlier.priority <= later.priority

    def test_meeting_cadences_compare_equal(self):
        """Cadences that meet on paper produce exactly equal times."""
        primary = TurnEntity(id=P, attack_speed=1.5, ability_haste=0)
        opponent = TurnEntity(id=O, attack_speed=1.0, ability_haste=0)
        actions = TimelineGenerator().generate(primary, opponent, 3)

        primary_attacks = [a.time for a in actions if a.entity_id == P and a.action_type == ATK]
        assert primary_attacks[0] == 1.0
        assert primary_attacks[1] == pytest.approx(5 / 3)
        assert primary_attacks[3] == 3.0

        at_three = [(a.entity_id, a.action_type) for a in actions if a.time == 3.0]
        assert at_three == [(P, ATK), (P, SPL), (O, ATK), (O, SPL)]

    def test_start_turn_offsets_range(self, primary_entity, slow_opponent_entity):
        """start_turn selects a later slice of the same cadence."""
        actions = TimelineGenerator().generate(primary_entity, slow_opponent_entity, 2, start_turn=3)
        assert _summary(actions) == [
            (P, ATK, 3.0),
            (P, SPL, 3.0),
            (O, ATK, 3.0),
            (O, SPL, 3.0),
            (P, ATK, 4.0),
            (P, SPL, 4.0),
            (O, SPL, 4.0),
            (O, ATK, 4.5),
        ]

    def test_invalid_turn_count(self, primary_entity, opponent_entity):
        """A non-positive turn count is an invalid input."""
        with pytest.raises(InvalidInputError):
            TimelineGenerator().generate(primary_entity, opponent_entity, 0)

    def test_invalid_actor_ids(self, primary_entity):
        """Both entities must be the primary and opponent actors."""
        with pytest.raises(InvalidInputError):
            TimelineGenerator().generate(primary_entity, primary_entity, 3)


class TestTimelineWindow:
    """Tests for TimelineWindow cursor handling and regeneration."""

    def _window(self, primary, opponent, window_turns=3, lookahead_threshold=2) -> TimelineWindow:
        return TimelineWindow.open(
            primary,
            opponent,
            window_turns=window_turns,
            lookahead_threshold=lookahead_threshold,
        )

    def test_open_generates_first_window(self, primary_entity, opponent_entity):
        """Opening a window generates window_turns worth of actions."""
        window = self._window(primary_entity, opponent_entity)
        assert len(window.actions) == 12
        assert window.cursor == 0
        assert window.generations == 1
        assert window.current_time is None

    def test_advance_consumes_in_order(self, primary_entity, opponent_entity):
        """advance returns actions from the front and moves the cursor."""
        window = self._window(primary_entity, opponent_entity)
        first = window.peek()
        assert window.advance() is first
        assert window.cursor == 1
        assert window.remaining == 11
        assert window.current_time == 1.0
        assert window.preview(2) == window.actions[1:3]

    def test_needs_regeneration_near_end(self, primary_entity, opponent_entity):
        """The window asks for regeneration inside the lookahead threshold."""
        window = self._window(primary_entity, opponent_entity, lookahead_threshold=3)
        for _ in range(9):
            window.advance()
        assert window.remaining == 3
        assert not window.needs_regeneration()
        window.advance()
        assert window.needs_regeneration()

    def test_exhausted_window_needs_regeneration(self, primary_entity, opponent_entity):
        """An exhausted window always asks for regeneration, whatever the threshold."""
        window = self._window(primary_entity, opponent_entity, window_turns=1, lookahead_threshold=0)
        for _ in range(3):
            window.advance()
        assert not window.needs_regeneration()
        window.advance()
        assert window.remaining == 0
        assert window.needs_regeneration()

    def test_exhausted_window_raises(self, primary_entity, opponent_entity):
        """Advancing past the end without regenerating is an engine error."""
        window = self._window(primary_entity, opponent_entity, window_turns=1)
        for _ in range(4):
            window.advance()
        assert window.peek() is None
        with pytest.raises(EngineError):
            window.advance()

    def test_regenerate_finishes_current_turn(self, primary_entity, opponent_entity):
        """Regeneration keeps the rest of the current turn and continues from the next boundary."""
        window = self._window(primary_entity, opponent_entity)
        for _ in range(5):
            window.advance()
        assert window.current_time == 2.0

        window.regenerate(primary_entity, opponent_entity)

        assert window.cursor == 0
        assert window.generations == 2
        assert _summary(window.actions[:3]) == [(P, SPL, 2.0), (O, ATK, 2.0), (O, SPL, 2.0)]
        assert window.actions[3].time == 3.0
        assert window.actions[-1].time == 5.0
        assert len(window.actions) == 15

    def test_regenerate_uses_new_stats(self, primary_entity, opponent_entity):
        """Stat changes take effect from the next turn boundary."""
        window = self._window(primary_entity, opponent_entity)
        for _ in range(5):
            window.advance()

        faster = TurnEntity(id=P, attack_speed=2.0, ability_haste=0)
        window.regenerate(faster, opponent_entity)

        primary_attacks = [a.time for a in window.actions if a.entity_id == P and a.action_type == ATK]
        assert primary_attacks == [3.0, 3.5, 4.0, 4.5, 5.0, 5.5]

    def test_times_never_go_backwards(self, primary_entity, opponent_entity):
        """Consuming across several regenerations yields non-decreasing times."""
        window = self._window(primary_entity, opponent_entity)
        times = []
        for _ in range(40):
            if window.needs_regeneration():
                window.regenerate(primary_entity, opponent_entity)
            times.append(window.advance().time)
        assert times == sorted(times)
        assert window.generations > 2

    def test_stun_survives_regeneration(self, primary_entity, opponent_entity):
        """Recorded stuns are replayed onto the regenerated cadence."""
        window = self._window(primary_entity, opponent_entity)
        window.advance()  # primary attack at t=1

        period = window.apply_stun(O, 1.0, 1.0)
        assert period == StunPeriod(entity_id=O, start_time=1.0, end_time=2.0)
        assert [a.time for a in window.actions if a.entity_id == O] == [2.0, 2.0, 3.0, 3.0, 4.0, 4.0]

        window.regenerate(primary_entity, opponent_entity)

        opponent_times = [a.time for a in window.actions if a.entity_id == O]
        assert opponent_times[0] == 2.0
        assert sorted(set(opponent_times)) == [2.0, 3.0, 4.0, 5.0]
        assert window.stuns == [period]

    def test_regeneration_does_not_resurrect_consumed_actions(self, primary_entity, opponent_entity):
        """A stun landing on an already consumed tie is not replayed onto it."""
        window = self._window(primary_entity, opponent_entity)
        for _ in range(3):
            window.advance()  # primary attack, primary spell, opponent attack at t=1

        window.apply_stun(P, 0.5, 1.0)
        window.regenerate(primary_entity, opponent_entity)

        primary_times = [a.time for a in window.actions if a.entity_id == P]
        assert primary_times[0] == 2.5
        assert all(t >= 2.5 for t in primary_times)
        assert _summary(window.actions[:1]) == [(O, SPL, 1.0)]

    def test_stun_requires_positive_duration(self, primary_entity, opponent_entity):
        """A zero-duration stun must never reach the timeline."""
        window = self._window(primary_entity, opponent_entity)
        with pytest.raises(InvalidInputError):
            window.apply_stun(O, 0, 1.0)
