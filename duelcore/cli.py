"""
Duelcore CLI - Command-line interface for the rules engine.

Usage:
    duelcore cards                  List the built-in card library
    duelcore demo [--seed N]        Play a driver-vs-driver match and print its events
    duelcore replay <replay_file>   Verify a saved replay
"""

import argparse
import logging
import sys

from .engine_core.state import SideId, Terrain

logger = logging.getLogger(__name__)


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Duelcore - Duel card battle rules engine",
        prog="duelcore",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Cards command
    subparsers.add_parser("cards", help="List the built-in card library")

    # Demo command
    terrains = [t.value for t in Terrain]
    demo_parser = subparsers.add_parser("demo", help="Play a driver-vs-driver match")
    demo_parser.add_argument("--seed", type=int, default=1, help="Match seed")
    demo_parser.add_argument("--terrain-a", choices=terrains, default="plain", help="Side A terrain")
    demo_parser.add_argument("--terrain-b", choices=terrains, default="plain", help="Side B terrain")
    demo_parser.add_argument("--policy", choices=["random", "first"], default="random", help="Driver policy")
    demo_parser.add_argument("--save", help="Write the replay log to this file")
    demo_parser.add_argument("--quiet", "-q", action="store_true", help="Only print the result")

    # Replay command
    replay_parser = subparsers.add_parser("replay", help="Verify a saved replay")
    replay_parser.add_argument("replay_file", help="Path to replay JSON file")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "cards":
        cmd_cards(args)
    elif args.command == "demo":
        cmd_demo(args)
    elif args.command == "replay":
        cmd_replay(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_cards(args):
    """List the built-in card library."""
    from .catalog import builtin_catalog

    for template in builtin_catalog().all():
        if template.is_monster:
            print(
                f"{template.template_id:<22} monster  L{template.level} "
                f"{template.attribute.value:<6} {template.atk}/{template.defense}"
            )
        else:
            trigger = f" [{template.trigger.value}]" if template.trigger else ""
            print(f"{template.template_id:<22} {template.kind.value:<8}{trigger} {template.description}")


def cmd_demo(args):
    """Play a driver-vs-driver match."""
    from .catalog import starter_deck
    from .drivers import RandomPolicy, FirstLegalPolicy, run_match
    from .session import new_match, record_replay, save_replay

    match = new_match(
        args.seed,
        starter_deck(),
        starter_deck(),
        args.terrain_a,
        args.terrain_b,
    )
    if args.policy == "first":
        policies = {SideId.A: FirstLegalPolicy(), SideId.B: FirstLegalPolicy()}
    else:
        policies = {SideId.A: RandomPolicy(args.seed), SideId.B: RandomPolicy(args.seed + 1)}

    applied = run_match(match, policies)
    logger.debug("Demo match with seed %d used %d actions", args.seed, applied)

    if not args.quiet:
        for event in match.event_log:
            side = event.side.value if event.side else "-"
            details = " ".join(f"{k}={v}" for k, v in event.data.items())
            print(f"[{side}] {event.event_type.value} {details}")

    outcome = f"side {match.winner.value} wins" if match.winner else "draw"
    print(f"\nMatch over after {applied} actions on turn {match.turn}: {outcome}")
    print(f"Life: A={match.life(SideId.A)} B={match.life(SideId.B)}")

    if args.save:
        path = save_replay(record_replay(match), args.save)
        print(f"Replay saved to {path}")


def cmd_replay(args):
    """Verify a saved replay."""
    from .session import load_replay, verify_replay

    try:
        log = load_replay(args.replay_file)
    except FileNotFoundError:
        logger.error("Replay file not found: %s", args.replay_file)
        print(f"Error: File not found: {args.replay_file}")
        sys.exit(1)

    if verify_replay(log):
        print(f"Replay OK: {len(log.actions)} actions, {len(log.events)} events reproduced")
    else:
        print("Replay MISMATCH: events differ from the recording")
        sys.exit(1)


if __name__ == "__main__":
    main()
