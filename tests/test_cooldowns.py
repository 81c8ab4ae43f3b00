"""Tests for the cooldown ledger."""

import logging

import pytest

from cadence_rpg.engine.cooldowns import CooldownLedger
from cadence_rpg.engine.errors import InvalidInputError, InvariantViolationError


class TestCooldownLedger:
    """Tests for CooldownLedger."""

    def test_cooldown_snaps_to_turn_boundary(self):
        """A 3-turn cooldown used at t=1.65 is ready only after 4 ticks."""
        ledger = CooldownLedger(strict=True)
        assert ledger.on_ability_used("dazzle", 3, 1.65) == 4

        for tick in range(1, 4):
            assert ledger.on_turn_tick() == []
            assert not ledger.is_ready("dazzle")
            assert ledger.remaining("dazzle") == 4 - tick

        assert ledger.on_turn_tick() == ["dazzle"]
        assert ledger.is_ready("dazzle")

    def test_ready_entries_are_dropped(self):
        """Abilities that reach zero disappear from the snapshot."""
        ledger = CooldownLedger()
        ledger.on_ability_used("rejuvenation", 1, 1.0)
        assert ledger.snapshot() == {"rejuvenation": 2}
        ledger.on_turn_tick()
        ledger.on_turn_tick()
        assert ledger.snapshot() == {}

    def test_unknown_ability_is_ready(self):
        """An ability without an entry is usable."""
        ledger = CooldownLedger()
        assert ledger.is_ready("wish")
        assert ledger.remaining("wish") == 0

    def test_zero_cooldown_never_blocks(self):
        """An ability with no cooldown creates no entry."""
        ledger = CooldownLedger()
        assert ledger.on_ability_used("test_spell", 0, 2.5) == 0
        assert ledger.is_ready("test_spell")
        assert ledger.snapshot() == {}

    def test_reuse_restarts_cooldown(self):
        """Using an ability again overwrites its entry."""
        ledger = CooldownLedger()
        ledger.on_ability_used("wish", 5, 1.0)
        ledger.on_turn_tick()
        ledger.on_ability_used("wish", 5, 2.0)
        assert ledger.remaining("wish") == 6

    def test_independent_abilities(self):
        """Each ability decays on its own."""
        ledger = CooldownLedger()
        ledger.on_ability_used("rejuvenation", 1, 1.0)
        ledger.on_ability_used("wish", 3, 1.0)
        assert ledger.on_turn_tick() == []
        assert ledger.on_turn_tick() == ["rejuvenation"]
        assert ledger.remaining("wish") == 2

    def test_reset(self):
        """reset makes an ability ready immediately."""
        ledger = CooldownLedger()
        ledger.on_ability_used("dazzle", 3, 1.0)
        ledger.reset("dazzle")
        assert ledger.is_ready("dazzle")

    def test_negative_inputs_rejected(self):
        """Negative cooldowns and times are invalid inputs."""
        ledger = CooldownLedger()
        with pytest.raises(InvalidInputError):
            ledger.on_ability_used("dazzle", -1, 1.0)
        with pytest.raises(InvalidInputError):
            ledger.on_ability_used("dazzle", 3, -0.5)


class TestCooldownInvariants:
    """Tests for negative-entry handling."""

    def test_strict_ledger_raises(self):
        """A negative entry is fatal in strict mode."""
        ledger = CooldownLedger(strict=True)
        ledger._remaining["dazzle"] = -1
        with pytest.raises(InvariantViolationError):
            ledger.remaining("dazzle")
        with pytest.raises(InvariantViolationError):
            ledger.on_turn_tick()

    def test_lenient_ledger_clamps(self, caplog):
        """Outside strict mode a negative entry is logged and clamped to zero."""
        ledger = CooldownLedger(strict=False)
        ledger._remaining["dazzle"] = -2
        with caplog.at_level(logging.WARNING):
            assert ledger.remaining("dazzle") == 0
        assert "negative" in caplog.text
        assert ledger.is_ready("dazzle")
