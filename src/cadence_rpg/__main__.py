"""Entry point for running a demo encounter from the command line."""

import argparse
import json
import logging
import random
import sys

from cadence_rpg.config import get_settings
from cadence_rpg.engine import CombatLogger, CombatStats, run_encounter, start_encounter

DEMO_PRIMARY = CombatStats(
    max_hp=600,
    attack_damage=60,
    ability_power=40,
    armor=30,
    magic_resist=30,
    attack_speed=1.2,
    ability_haste=100,
    critical_chance=25,
    life_steal=8,
)

DEMO_OPPONENT = CombatStats(
    max_hp=650,
    attack_damage=45,
    ability_power=70,
    armor=40,
    magic_resist=20,
    attack_speed=0.7,
    tenacity=20,
)


def main(argv: list[str] | None = None) -> int:
    """Run the demo encounter and print its combat log."""
    settings = get_settings()

    parser = argparse.ArgumentParser(prog="cadence-rpg", description="Simulate a demo encounter")
    parser.add_argument("--seed", type=int, default=settings.rng_seed, help="Seed for crit rolls")
    parser.add_argument("--max-actions", type=int, default=500, help="Stop after N resolved actions")
    parser.add_argument("--json", action="store_true", help="Print the log as JSON")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    combat_logger = CombatLogger(encounter_id=1)
    encounter = start_encounter(
        DEMO_PRIMARY,
        DEMO_OPPONENT,
        settings=settings,
        primary_ability="dazzle",
        opponent_ability="quicksand",
        primary_name="Champion",
        opponent_name="Sand Wraith",
        combat_logger=combat_logger,
    )
    encounter, events = run_encounter(
        encounter,
        random.Random(args.seed),
        max_actions=args.max_actions,
        combat_logger=combat_logger,
    )

    log = combat_logger.get_log()
    if args.json:
        print(json.dumps(log.to_dict(), indent=2))
    else:
        print(log.format_readable())

    if not encounter.is_over:
        logging.info("Stopped after %d actions without a winner", len(events))
    return 0


if __name__ == "__main__":
    sys.exit(main())
