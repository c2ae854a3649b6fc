"""
PhysioTactics CLI - Command-line interface for the engine.

Usage:
    physiotactics simulate [--case ankle_sprain] [--difficulty intermediate] [--seed 7]
    physiotactics cases                List clinical cases
    physiotactics modifiers            List modifiers and modifier sets
    physiotactics validate-content     Validate the authored card catalog
"""

import argparse
import json
import logging
import os
import sys


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="PhysioTactics - Clinician vs. Patient Card Game Engine",
        prog="physiotactics",
    )
    parser.add_argument(
        "--log-level",
        default=os.getenv("PHYSIO_LOG_LEVEL", "WARNING"),
        help="Logging level (default: PHYSIO_LOG_LEVEL or WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Play a bot-vs-bot match")
    simulate_parser.add_argument("--case", default="ankle_sprain", help="Case id")
    simulate_parser.add_argument("--difficulty", default=None, help="Difficulty level")
    simulate_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    simulate_parser.add_argument("--max-turns", type=int, default=None, help="Override the turn limit")
    simulate_parser.add_argument("--modifiers", nargs="*", default=None, help="Modifier ids to apply")
    simulate_parser.add_argument("--modifier-set", default=None, help="Draw modifiers from a set")
    simulate_parser.add_argument(
        "--policy", choices=["heuristic", "first"], default="heuristic",
        help="Bot policy used for both roles",
    )
    simulate_parser.add_argument("--json", action="store_true", help="Print the final state as JSON")

    subparsers.add_parser("cases", help="List clinical cases")
    subparsers.add_parser("modifiers", help="List modifiers and modifier sets")
    subparsers.add_parser("validate-content", help="Validate the card catalog")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "simulate":
        cmd_simulate(args)
    elif args.command == "cases":
        cmd_cases(args)
    elif args.command == "modifiers":
        cmd_modifiers(args)
    elif args.command == "validate-content":
        cmd_validate_content(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_simulate(args):
    """Play both roles with bots until the match ends."""
    import random

    from .bots import FirstLegalPolicy, OpponentBot, get_personality
    from .cases import create_engine
    from .config import DEFAULT_DIFFICULTY
    from .engine_core.state import Role

    difficulty = args.difficulty or DEFAULT_DIFFICULTY
    try:
        engine = create_engine(
            args.case,
            difficulty=difficulty,
            max_turns=args.max_turns,
            modifier_ids=args.modifiers,
            modifier_set=args.modifier_set,
            seed=args.seed,
        )
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)

    if args.policy == "first":
        bots = {role: FirstLegalPolicy() for role in Role}
    else:
        seed = args.seed
        bots = {
            role: OpponentBot(
                role=role,
                config=engine.config,
                personality=get_personality(difficulty),
                rng=random.Random(None if seed is None else seed + i + 1),
            )
            for i, role in enumerate(Role)
        }

    state = engine.state
    print(f"Match {state.match_id}: {args.case} ({difficulty}), {state.max_turns} turns")
    for modifier in state.active_modifiers:
        print(f"  Modifier: {modifier.modifier.name}")

    while not engine.state.is_over:
        role = engine.state.active_role
        decision = bots[role].select_play(engine.state, engine.legal_plays(role.value))
        if decision.is_pass:
            engine.pass_turn(role.value, decision.explanation)
            print(f"[turn {engine.state.turn_number}] {role.value} passes")
            continue
        result = engine.apply(decision.action)
        if result.success:
            print(f"[turn {engine.state.turn_number}] {role.value} plays {decision.action.payload.card_instance_id}")
            for change in result.state_changes:
                print(f"    {change}")
        else:
            print(f"    rejected: {result.error}")
        if not engine.state.is_over:
            engine.end_turn(role.value)

    outcome = engine.state.outcome
    print(f"\nWinner: {outcome.winner} ({outcome.reason})")
    print(f"Scores: clinician {outcome.clinician_score}, patient {outcome.patient_score}")
    if args.json:
        print(json.dumps(engine.snapshot(), indent=2, default=str))


def cmd_cases(args):
    """List clinical cases."""
    from .cases import CASES

    for case in CASES.values():
        print(f"{case.id:18} {case.name} [{case.recommended_difficulty}]")
        print(f"{'':18} {case.description}")


def cmd_modifiers(args):
    """List modifiers and modifier sets."""
    from .cases import MODIFIERS, MODIFIER_SETS

    for modifier in MODIFIERS.values():
        duration = "permanent" if modifier.is_permanent else f"{modifier.duration} turns"
        print(f"{modifier.id:26} {modifier.name} ({modifier.difficulty}, {duration})")
    print("\nSets:")
    for key, modifier_set in MODIFIER_SETS.items():
        print(f"  {key:8} {modifier_set.name}: {modifier_set.count} of {', '.join(modifier_set.pool)}")


def cmd_validate_content(args):
    """Validate the authored card catalog."""
    from .cases import build_catalog
    from .content import validate_catalog

    catalog = build_catalog()
    report = validate_catalog(catalog)
    print(f"Cards: {len(catalog.cards)}")

    if report.warnings:
        print("\nWarnings:")
        for w in report.warnings:
            print(f"  - {w}")

    if report.errors:
        print("\nErrors:")
        for e in report.errors:
            print(f"  - {e}")
        sys.exit(1)
    print("Catalog is valid")


if __name__ == "__main__":
    main()
