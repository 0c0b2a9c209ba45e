"""
Movement CLI - Command-line interface for the engine.

Usage:
    movement play [--seed N] [--mode classic|political] [--challenge ID]
    movement simulate --turns N --seed S [--mode classic|political]
    movement serve [--host HOST] [--port PORT]
"""

import argparse
import random
import sys

from .config import EngineConfig, setup_logging
from .engine_core.action_generator import ActionOption
from .engine_core.errors import UnknownIdError
from .engine_core.risk import risk_zone
from .engine_core.state import FactionMode, GameEvent, GameState
from .factions.sentiment import national_delta
from .session import GameLoop, SessionManager

LOW_FUNDS = 30


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Movement - Campaign Simulation Engine",
        prog="movement",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: MOVEMENT_LOG_LEVEL or INFO)")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    modes = [m.value for m in FactionMode]

    # Play command
    play_parser = subparsers.add_parser("play", help="Play a campaign interactively")
    play_parser.add_argument("--seed", type=int, default=None, help="RNG seed")
    play_parser.add_argument("--mode", choices=modes, default=None, help="Faction mode")
    play_parser.add_argument("--challenge", default=None, help="Challenge id")

    # Simulate command
    sim_parser = subparsers.add_parser("simulate", help="Auto-play with a greedy policy")
    sim_parser.add_argument("--turns", type=int, default=100, help="Maximum action turns")
    sim_parser.add_argument("--seed", type=int, default=0, help="RNG seed")
    sim_parser.add_argument("--mode", choices=modes, default=None, help="Faction mode")
    sim_parser.add_argument("--challenge", default=None, help="Challenge id")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)
    config = EngineConfig.from_env()
    setup_logging(args.log_level or config.log_level)

    if args.command == "play":
        cmd_play(args, config)
    elif args.command == "simulate":
        cmd_simulate(args, config)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


# =============================================================================
# Greedy policy
# =============================================================================

def score_option(state: GameState, option: ActionOption, outcome) -> float:
    """Heuristic value of an action's base outcome for the greedy policy."""
    score = national_delta(outcome.support) * 3.0
    score += outcome.clout * 0.2
    score += outcome.funds * (0.5 if state.funds < LOW_FUNDS else 0.1)
    score -= outcome.risk * (2.0 if state.risk >= 60 else 1.0)
    score -= option.cost.funds * 0.05 + option.cost.clout * 0.05
    return score


def greedy_action(loop: GameLoop) -> str | None:
    """
    Pick the available action with the best previewed base outcome.

    Previews use a throwaway RNG so the session's draws are untouched.
    """
    state = loop.session.state
    registry = loop.session.reducer.registry
    best_id, best_score = None, None
    for option in loop.actions():
        if not option.available:
            continue
        preview = registry.require(option.action_id).perform(state, random.Random(state.turn))
        score = score_option(state, option, preview)
        if best_score is None or score > best_score:
            best_id, best_score = option.action_id, score
    return best_id


def least_risk_option(event: GameEvent) -> int:
    """Index of the option that adds the least risk; first wins ties."""
    return min(range(len(event.options)), key=lambda i: event.options[i].outcome.risk)


# =============================================================================
# Output
# =============================================================================

def format_summary(state: GameState) -> str:
    lines = [
        f"Turn {state.turn} | support {state.average_support:.1f}% | funds {state.funds} "
        f"| clout {state.clout} | risk {state.risk} ({risk_zone(state.risk).value}) | streak {state.streak}",
        "Factions: " + ", ".join(
            f"{fid} {support}% {state.sentiment.factions[fid].mood.name.lower()}"
            for fid, support in state.faction_support.items()
        ),
    ]
    if state.victory:
        lines.append(f"VICTORY: {state.victory_type.value}")
    elif state.game_over:
        lines.append(f"DEFEAT: {state.defeat_type.value}")
    return "\n".join(lines)


def _build_session(args, config: EngineConfig):
    mode = FactionMode(args.mode) if args.mode else config.faction_mode
    seed = args.seed if args.seed is not None else config.seed
    manager = SessionManager()
    try:
        session = manager.create_session(faction_mode=mode, seed=seed, challenge_id=args.challenge)
    except UnknownIdError as e:
        print(f"Error: {e}")
        sys.exit(1)
    return GameLoop(session)


# =============================================================================
# Commands
# =============================================================================

def cmd_simulate(args, config: EngineConfig):
    """Auto-play a campaign and print the final summary."""
    loop = _build_session(args, config)
    session = loop.session

    while session.state.turn < args.turns and not session.state.is_terminal:
        event = session.state.pending_event
        if event is not None:
            loop.resolve_event(least_risk_option(event))
            continue
        action_id = greedy_action(loop)
        if action_id is None:
            print("No affordable action left.")
            break
        result = loop.take_action(action_id)
        if not result.success:
            print(f"Stopped: {result.error}")
            break

    print(format_summary(session.state))
    print(f"Highest streak: {session.state.highest_streak}, critical hits: {session.state.total_critical_hits}")


def cmd_play(args, config: EngineConfig):
    """Interactive text loop."""
    loop = _build_session(args, config)
    session = loop.session
    print("Commands: <number or action id>, spin [reel ...], exec, reset, quit")

    while True:
        state = session.state
        print()
        print(format_summary(state))
        if state.news_log:
            print(f"> {state.news_log[-1]}")

        if state.is_terminal:
            answer = input("Campaign over. reset or quit? ").strip().lower()
            if answer == "reset":
                loop.reset()
                continue
            break

        if state.pending_event is not None:
            event = state.pending_event
            print(f"\nEVENT: {event.title}\n{event.description}")
            for i, option in enumerate(event.options):
                hint = f" [{option.preview}]" if option.preview else ""
                print(f"  {i}. {option.text}{hint}")
            answer = input("Choose: ").strip()
            if answer == "quit":
                break
            try:
                result = loop.resolve_event(int(answer))
            except ValueError:
                print("Enter an option number.")
                continue
            _print_result(result)
            continue

        options = loop.actions()
        for i, option in enumerate(options, 1):
            status = "" if option.available else f"  ({option.reason})"
            print(f"  {i:2}. {option.name:<22} funds {option.cost.funds:>3} clout {option.cost.clout:>3}{status}")
        if state.spin is not None:
            print(f"  Reels: {state.spin.action_id} / {state.spin.modifier_id} / {state.spin.target_id}")

        words = input("Action: ").strip().split()
        if not words:
            continue
        command = words[0].lower()
        if command == "quit":
            break
        if command == "spin":
            result = loop.spin(words[1:])
        elif command == "exec":
            result = loop.execute_spin()
        elif command == "reset":
            result = loop.reset()
        elif command.isdigit() and 1 <= int(command) <= len(options):
            result = loop.take_action(options[int(command) - 1].action_id)
        else:
            result = loop.take_action(command)
        _print_result(result)


def _print_result(result):
    if not result.success:
        print(f"! {result.error}")
        return
    for change in result.state_changes:
        print(f"  {change}")


def cmd_serve(args):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("movement.api.app:create_app", host=args.host, port=args.port, factory=True)


if __name__ == "__main__":
    main()
