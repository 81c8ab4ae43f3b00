"""Tests for the status ledger."""

import logging

import pytest

from cadence_rpg.engine.errors import InvalidInputError, InvariantViolationError
from cadence_rpg.engine.status import StatusLedger
from cadence_rpg.models.enums import BuffKind, DurationType, StatKind


class TestTurnBuffs:
    """Tests for turn-duration buffs."""

    def test_buff_applies_immediately(self):
        """A buff's modifier is active as soon as it is applied."""
        ledger = StatusLedger(strict=True)
        ledger.apply("for_demacia", StatKind.ATTACK_SPEED, 0.5, 1)
        assert ledger.stat_modifier(StatKind.ATTACK_SPEED) == 0.5
        assert ledger.stat_modifiers() == {StatKind.ATTACK_SPEED: 0.5}

    def test_buff_expires_after_duration(self):
        """A 2-turn buff survives one tick and expires on the second."""
        ledger = StatusLedger(strict=True)
        ledger.apply("bleed", StatKind.ARMOR, -5, 2)

        tick = ledger.on_turn_tick()
        assert tick.expired == []
        assert ledger.get_stacks("bleed") == 1

        tick = ledger.on_turn_tick()
        assert [buff.name for buff in tick.expired] == ["bleed"]
        assert ledger.get_stacks("bleed") == 0
        assert ledger.stat_modifier(StatKind.ARMOR) == 0

    def test_stacks_decay_independently(self):
        """Stacks of the same kind keep separate timers and amounts."""
        ledger = StatusLedger(strict=True)
        ledger.apply("bleed", StatKind.ARMOR, -5, 3)
        ledger.apply("bleed", StatKind.ARMOR, -8, 1)
        assert ledger.get_stacks("bleed") == 2
        assert ledger.stat_modifier(StatKind.ARMOR) == -13

        ledger.on_turn_tick()
        assert ledger.get_stacks("bleed") == 1
        assert ledger.stat_modifier(StatKind.ARMOR) == -5

    def test_each_application_gets_own_id(self):
        """Every application is a separate instance."""
        ledger = StatusLedger()
        first = ledger.apply("bleed", StatKind.ARMOR, -5, 3)
        second = ledger.apply("bleed", StatKind.ARMOR, -5, 3)
        assert first.buff.id != second.buff.id
        assert not first.refreshed and not second.refreshed

    def test_stack_cap_refreshes_existing_stacks(self):
        """At the cap the newest application refreshes every stack instead of adding one."""
        ledger = StatusLedger(strict=True)
        ledger.apply("bleed", StatKind.ARMOR, -5, 3, max_stacks=2)
        ledger.apply("bleed", StatKind.ARMOR, -5, 3, max_stacks=2)
        ledger.on_turn_tick()
        assert [buff.duration for buff in ledger.active()] == [2, 2]

        applied = ledger.apply("bleed", StatKind.ARMOR, -5, 3, max_stacks=2)

        assert applied.refreshed
        assert ledger.get_stacks("bleed") == 2
        assert [buff.duration for buff in ledger.active()] == [3, 3]

    def test_other_kinds_unaffected_by_cap(self):
        """The stack cap only counts instances of the same kind."""
        ledger = StatusLedger()
        ledger.apply("bleed", StatKind.ARMOR, -5, 3, max_stacks=1)
        applied = ledger.apply("curse", StatKind.ARMOR, -5, 3, max_stacks=1)
        assert not applied.refreshed
        assert len(ledger) == 2

    def test_heal_over_time(self):
        """HoT instances heal on each tick before decaying, and never modify stats."""
        ledger = StatusLedger(strict=True)
        ledger.apply("regen", StatKind.HEAL_OVER_TIME, 10, 2, kind=BuffKind.HEAL_OVER_TIME)
        assert ledger.stat_modifiers() == {}

        assert ledger.on_turn_tick().heal_over_time == 10
        assert ledger.on_turn_tick().heal_over_time == 10
        assert ledger.on_turn_tick().heal_over_time == 0

    def test_damage_over_time(self):
        """DoT instances deal their amount on each tick and never modify stats."""
        ledger = StatusLedger(strict=True)
        ledger.apply("burn", StatKind.DAMAGE_OVER_TIME, 15, 2, kind=BuffKind.DAMAGE_OVER_TIME)
        ledger.apply("burn", StatKind.DAMAGE_OVER_TIME, 15, 1, kind=BuffKind.DAMAGE_OVER_TIME)
        assert ledger.stat_modifiers() == {}

        assert ledger.on_turn_tick().damage_over_time == 30
        assert ledger.on_turn_tick().damage_over_time == 15
        assert ledger.on_turn_tick().damage_over_time == 0

    def test_refresh_stacks_resets_existing_timers(self):
        """A refreshing application resets every existing stack, then adds its own."""
        ledger = StatusLedger(strict=True)
        ledger.apply("burn", StatKind.DAMAGE_OVER_TIME, 15, 2, kind=BuffKind.DAMAGE_OVER_TIME, refresh_stacks=True)
        ledger.on_turn_tick()

        applied = ledger.apply(
            "burn", StatKind.DAMAGE_OVER_TIME, 15, 2, kind=BuffKind.DAMAGE_OVER_TIME, refresh_stacks=True
        )

        assert not applied.refreshed
        assert [buff.duration for buff in ledger.active()] == [2, 2]
        assert ledger.on_turn_tick().damage_over_time == 30
        assert ledger.on_turn_tick().damage_over_time == 30
        assert len(ledger) == 0

    def test_negative_periodic_amount_rejected(self):
        """Periodic healing or damage cannot be negative."""
        ledger = StatusLedger()
        with pytest.raises(InvalidInputError):
            ledger.apply("regen", StatKind.HEAL_OVER_TIME, -10, 2, kind=BuffKind.HEAL_OVER_TIME)
        with pytest.raises(InvalidInputError):
            ledger.apply("burn", StatKind.DAMAGE_OVER_TIME, -15, 2, kind=BuffKind.DAMAGE_OVER_TIME)
        assert len(ledger) == 0

    def test_active_returns_copies(self):
        """Snapshots cannot change the ledger."""
        ledger = StatusLedger()
        ledger.apply("bleed", StatKind.ARMOR, -5, 3)
        ledger.active()[0].duration = 99
        assert ledger.active()[0].duration == 3

    def test_invalid_inputs(self):
        """Negative durations and stack caps below one are rejected."""
        ledger = StatusLedger()
        with pytest.raises(InvalidInputError):
            ledger.apply("bleed", StatKind.ARMOR, -5, -1)
        with pytest.raises(InvalidInputError):
            ledger.apply("bleed", StatKind.ARMOR, -5, 3, max_stacks=0)


class TestRemovalAndCleanse:
    """Tests for explicit removal and cleansing."""

    def test_remove_by_id(self):
        """remove drops a single instance."""
        ledger = StatusLedger()
        applied = ledger.apply("potion", StatKind.ATTACK_DAMAGE, 10, 5)
        ledger.apply("potion", StatKind.ATTACK_DAMAGE, 10, 5)

        removed = ledger.remove(applied.buff.id)

        assert removed is not None
        assert removed.id == applied.buff.id
        assert ledger.get_stacks("potion") == 1
        assert ledger.remove("missing-1") is None

    def test_cleanse_removes_only_debuffs(self):
        """cleanse removes negative-amount instances."""
        ledger = StatusLedger()
        ledger.apply("curse", StatKind.ARMOR, -10, 3)
        ledger.apply("quicksand_slow", StatKind.ATTACK_SPEED, -0.1, 3)
        ledger.apply("for_demacia", StatKind.ATTACK_SPEED, 0.5, 1)

        removed = ledger.cleanse()

        assert sorted(buff.name for buff in removed) == ["curse", "quicksand_slow"]
        assert [buff.name for buff in ledger.active()] == ["for_demacia"]

    def test_cleanse_removes_damage_over_time(self):
        """Burns count as debuffs even though their amount is positive."""
        ledger = StatusLedger()
        ledger.apply("burn", StatKind.DAMAGE_OVER_TIME, 15, 2, kind=BuffKind.DAMAGE_OVER_TIME)
        ledger.apply("regen", StatKind.HEAL_OVER_TIME, 10, 2, kind=BuffKind.HEAL_OVER_TIME)

        removed = ledger.cleanse()

        assert [buff.name for buff in removed] == ["burn"]
        assert [buff.name for buff in ledger.active()] == ["regen"]


class TestEncounterBuffs:
    """Tests for encounter-duration buffs."""

    def test_turn_ticks_do_not_decay_encounter_buffs(self):
        """Encounter buffs ignore turn ticks."""
        ledger = StatusLedger(strict=True)
        ledger.apply("blessing", StatKind.MAX_HP, 50, 2, duration_type=DurationType.ENCOUNTERS)
        for _ in range(10):
            ledger.on_turn_tick()
        assert ledger.get_stacks("blessing") == 1

    def test_decay_per_completed_encounter(self):
        """Encounter buffs lose one encounter each time one completes."""
        ledger = StatusLedger(strict=True)
        ledger.apply("blessing", StatKind.MAX_HP, 50, 2, duration_type=DurationType.ENCOUNTERS)

        assert ledger.on_encounter_completed() == []
        assert ledger.active()[0].encounters_remaining == 1

        removed = ledger.on_encounter_completed()
        assert [buff.name for buff in removed] == ["blessing"]
        assert len(ledger) == 0

    def test_turn_buffs_cleared_when_encounter_completes(self):
        """Turn buffs are combat-only."""
        ledger = StatusLedger(strict=True)
        ledger.apply("bleed", StatKind.ARMOR, -5, 10)
        ledger.apply("blessing", StatKind.MAX_HP, 50, 3, duration_type=DurationType.ENCOUNTERS)

        ledger.on_encounter_completed()

        assert [buff.name for buff in ledger.active()] == ["blessing"]


class TestStatusInvariants:
    """Tests for negative remaining values."""

    def test_strict_ledger_raises(self):
        """A negative duration is fatal in strict mode."""
        ledger = StatusLedger(strict=True)
        applied = ledger.apply("bleed", StatKind.ARMOR, -5, 2)
        applied.buff.duration = -1
        with pytest.raises(InvariantViolationError):
            ledger.on_turn_tick()

    def test_lenient_ledger_clamps(self, caplog):
        """Outside strict mode a negative duration is logged, clamped and expired."""
        ledger = StatusLedger(strict=False)
        applied = ledger.apply("bleed", StatKind.ARMOR, -5, 2)
        applied.buff.duration = -3
        with caplog.at_level(logging.WARNING):
            tick = ledger.on_turn_tick()
        assert [buff.name for buff in tick.expired] == ["bleed"]
        assert "negative" in caplog.text
        assert len(ledger) == 0
