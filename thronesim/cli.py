"""
Thronesim CLI - Command-line interface for the engine.

Usage:
    thronesim play --players 6 --seed 42        Play one game with agents
    thronesim setup --players 6 --seed 42       Print the initial state record

Rules constants are read from THRONESIM_* environment variables
(see thronesim.config.RulesConfig).
"""

import argparse
import json
import logging
import sys

AGENT_CHOICES = ("random", "passive")


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Thronesim - A Game of Thrones rules engine",
        prog="thronesim",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play one game with reference agents")
    play_parser.add_argument("--players", type=int, default=6, help="Number of houses (3-6)")
    play_parser.add_argument("--seed", type=int, default=0, help="Game seed")
    play_parser.add_argument("--agent", choices=AGENT_CHOICES, default="random", help="Agent for every house")
    play_parser.add_argument("--max-decisions", type=int, default=100_000, help="Decision budget")
    play_parser.add_argument("--max-retries", type=int, default=3, help="Retries before the passive fallback")
    play_parser.add_argument("--json", action="store_true", help="Print the result as JSON")
    play_parser.add_argument("--save", help="Write the final state record to this file")

    # Setup command
    setup_parser = subparsers.add_parser("setup", help="Print an initial state record")
    setup_parser.add_argument("--players", type=int, default=6, help="Number of houses (3-6)")
    setup_parser.add_argument("--seed", type=int, default=0, help="Game seed")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "play":
        cmd_play(args)
    elif args.command == "setup":
        cmd_setup(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_play(args):
    """Play one game and print the standings."""
    from .bots import PassiveAgent, RandomAgent
    from .config import RulesConfig
    from .engine_core.errors import InvalidPlayerCount, InvalidSeed
    from .engine_core.record import to_json
    from .games.thrones.setup import houses_for
    from .session import run_game

    try:
        houses = houses_for(args.players)
        if args.agent == "random":
            agents = {h: RandomAgent(seed=args.seed * 10 + i) for i, h in enumerate(houses)}
        else:
            agents = {h: PassiveAgent() for h in houses}
        result = run_game(
            agents,
            args.players,
            args.seed,
            max_decisions=args.max_decisions,
            max_retries=args.max_retries,
            config=RulesConfig.from_env(),
        )
    except (InvalidPlayerCount, InvalidSeed) as e:
        print(f"Error: {e}")
        sys.exit(2)

    if args.save:
        with open(args.save, "w") as f:
            f.write(to_json(result.state, indent=2))

    if args.json:
        print(json.dumps({
            "players": result.player_count,
            "seed": result.seed,
            "winner": result.winner.value if result.winner else None,
            "rounds": result.rounds,
            "decisions": result.decisions,
            "completed": result.completed,
            "standings": [
                {
                    "rank": p.rank,
                    "house": p.house.value,
                    "castles": p.castles,
                    "supply": p.supply,
                    "power": p.power,
                    "illegal_actions": p.illegal_actions,
                    "fallbacks": p.fallbacks,
                }
                for p in result.players
            ],
        }, indent=2))
        return

    winner = result.winner.value if result.winner else "none"
    print(f"Winner: {winner} (round {result.rounds}, {result.decisions} decisions)")
    print()
    print(f"{'#':>2}  {'House':<10} {'Castles':>7} {'Supply':>6} {'Power':>5} {'Illegal':>7}")
    for p in result.players:
        print(f"{p.rank:>2}  {p.house.value:<10} {p.castles:>7} {p.supply:>6} {p.power:>5} {p.illegal_actions:>7}")

    if not result.completed:
        sys.exit(1)


def cmd_setup(args):
    """Print the initial state as JSON."""
    from .config import RulesConfig
    from .engine_core.errors import InvalidPlayerCount, InvalidSeed
    from .engine_core.record import to_json
    from .games.thrones.setup import create_initial_state

    try:
        state = create_initial_state(args.players, args.seed, RulesConfig.from_env())
    except (InvalidPlayerCount, InvalidSeed) as e:
        print(f"Error: {e}")
        sys.exit(2)
    print(to_json(state, indent=2))


if __name__ == "__main__":
    main()
