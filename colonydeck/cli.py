"""
Colonydeck CLI - Command-line interface for the engine.

Usage:
    colonydeck levels                 List levels and progression status
    colonydeck rewards                List rewards
    colonydeck validate               Validate the Mars catalog
    colonydeck play [--level ID]      Play a level in the terminal

Progress is read from and saved to --progress (or
COLONYDECK_PROGRESS_PATH) when given.
"""

import argparse
import logging
import shlex
import sys

from .catalog import validate_catalog
from .config import load_settings
from .content.mars import create_mars_catalog
from .engine_core.events import EventKind
from .engine_core.game import ColonyGame, GamePhase
from .session import (
    JsonFileProgressStore,
    LevelProgress,
    LevelUnavailableError,
    SessionManager,
)

PLAY_HELP = """Commands:
  state                     Show resources, hand, offer and buildings
  map                       Show the grid
  choose <n>                Take card n from the offer
  place <n> <x> <y>         Place hand card n at (x, y)
  event <n>                 Play event card n
  discard <n>               Discard hand card n
  launch <x> <y>            Launch the rocket at (x, y)
  action <x> <y> <id>       Run building action id at (x, y)
  actions <x> <y>           List actions at (x, y)
  end                       End the turn
  claim <reward_id>         Claim a reward after winning
  help                      Show this help
  quit                      Leave"""

MAP_SYMBOLS = {"metal": "m", "water": "w", "mountain": "^"}


def main(argv=None):
    """Main CLI entry point."""
    settings = load_settings()
    parser = argparse.ArgumentParser(
        description="Colonydeck - Turn-based Mars colony engine",
        prog="colonydeck",
    )
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help="Logging level (default: COLONYDECK_LOG_LEVEL or INFO)",
    )
    parser.add_argument(
        "--progress",
        default=settings.progress_path,
        help="Progress file (default: COLONYDECK_PROGRESS_PATH, none to keep progress in memory)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("levels", help="List levels")
    subparsers.add_parser("rewards", help="List rewards")
    subparsers.add_parser("validate", help="Validate the catalog")

    play_parser = subparsers.add_parser("play", help="Play a level")
    play_parser.add_argument("--level", help="Level id (default: current progression level)")
    play_parser.add_argument("--seed", type=int, help="Random seed")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(levelname)s %(name)s: %(message)s",
    )

    catalog = create_mars_catalog()
    store = JsonFileProgressStore(args.progress) if args.progress else None
    progress = LevelProgress(catalog, store)

    if args.command == "levels":
        cmd_levels(catalog, progress)
    elif args.command == "rewards":
        cmd_rewards(catalog, progress)
    elif args.command == "validate":
        cmd_validate(catalog)
    elif args.command == "play":
        cmd_play(SessionManager(catalog, progress), args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_levels(catalog, progress):
    """List levels."""
    snapshot = progress.snapshot
    for level in catalog.levels.values():
        if level.id in snapshot.completed_levels:
            status = "completed"
        elif progress.is_unlocked(level.id):
            status = "unlocked"
        else:
            status = "locked"
        marker = "*" if level.id == snapshot.current_level_id else " "
        print(
            f"{marker} {level.id:<8} {level.name:<22} goal {level.reputation_goal:>3} "
            f"in {level.turn_limit:>2} turns  [{status}]"
        )
    if progress.campaign_complete:
        print(f"Campaign complete. Random levels completed: {snapshot.random_levels_completed}")


def cmd_rewards(catalog, progress):
    """List rewards."""
    owned = set(progress.unlocked_reward_ids)
    for reward in catalog.rewards.values():
        mark = "x" if reward.id in owned else " "
        print(f"[{mark}] {reward.name} ({reward.application_type.value})")
        if reward.description:
            print(f"    {reward.description}")


def cmd_validate(catalog):
    """Validate the catalog."""
    result = validate_catalog(catalog)
    print(f"Catalog '{catalog.catalog_id}': {'valid' if result.valid else 'INVALID'}")
    for warning in result.warnings:
        print(f"  warning: {warning}")
    for error in result.errors:
        print(f"  error: {error}")
    if not result.valid:
        sys.exit(1)


# =============================================================================
# Interactive play
# =============================================================================

def print_state(game: ColonyGame):
    resources = ", ".join(f"{kind} {amount}" for kind, amount in game.ledger.snapshot().items())
    print(f"Turn {game.turn}/{game.level.turn_limit}  [{game.phase.value}]")
    print(f"Resources: {resources}")
    print("Hand:")
    for index, card in enumerate(game.cards.hand):
        cost = ", ".join(f"{amount} {kind.value}" for kind, amount in game.card_cost(card.definition).items())
        print(f"  {index}: {card.name} ({cost or 'free'})")
    if game.cards.offer:
        print("Offer:")
        for index, card in enumerate(game.cards.offer):
            print(f"  {index}: {card.name}")
    print("Buildings:")
    for cell in game.grid.buildings():
        rocket = f" rocket {cell.rocket.state.value}" if cell.rocket else ""
        print(f"  ({cell.x}, {cell.y}) {cell.building}{rocket}")


def print_map(game: ColonyGame):
    size = game.grid.size
    print("   " + " ".join(str(x) for x in range(size)))
    for y in range(size):
        row = []
        for x in range(size):
            cell = game.grid.get_cell(x, y)
            if cell.building:
                row.append(cell.building[0].upper())
            else:
                row.append(MAP_SYMBOLS.get(cell.feature, "."))
        print(f"{y}  " + " ".join(row))


def run_command(manager: SessionManager, session, words: list[str]) -> bool:
    """Run one REPL command. Returns False to leave."""
    game = session.game
    command, args = words[0], [int(a) if a.lstrip("-").isdigit() else a for a in words[1:]]

    if command in ("quit", "exit", "q"):
        return False
    if command == "help":
        print(PLAY_HELP)
    elif command == "state":
        print_state(game)
    elif command == "map":
        print_map(game)
    elif command == "choose" and len(args) == 1:
        game.choose_card(args[0])
    elif command == "place" and len(args) == 3:
        game.place_card(args[0], args[1], args[2])
    elif command == "event" and len(args) == 1:
        game.play_event(args[0])
    elif command == "discard" and len(args) == 1:
        game.discard_card(args[0])
    elif command == "launch" and len(args) == 2:
        game.launch_rocket(args[0], args[1])
    elif command == "action" and len(args) == 3:
        game.perform_action(args[0], args[1], str(args[2]))
    elif command == "actions" and len(args) == 2:
        for action in game.cell_actions(args[0], args[1]):
            state = f"ready in {action['remaining_turns']}" if action["on_cooldown"] else "ready"
            print(f"  {action['id']}: {action['name']} cost {action['cost']} ({state})")
    elif command == "end":
        game.end_turn()
        if game.phase == GamePhase.PLAYING:
            print_state(game)
    elif command == "claim" and len(args) == 1:
        manager.claim_reward(session.session_id, str(args[0]))
    else:
        print("Unknown command. Type 'help'.")
    return True


def cmd_play(manager: SessionManager, args):
    """Play a level in the terminal."""
    try:
        session = manager.create_session(args.level, args.seed)
    except LevelUnavailableError as exc:
        print(f"Error: {exc}")
        sys.exit(1)

    game = session.game
    game.events.subscribe(
        EventKind.MESSAGE,
        lambda event: print(f"> {event.data['text']}"),
    )
    level = session.level
    print(f"{level.name}: reach {level.reputation_goal} reputation in {level.turn_limit} turns")
    print(PLAY_HELP)
    print_state(game)

    announced = False
    while True:
        try:
            line = input("colony> ")
        except EOFError:
            break
        words = shlex.split(line)
        if not words:
            continue
        if not run_command(manager, session, words):
            break
        if game.phase == GamePhase.VICTORY and not announced:
            announced = True
            offered = [reward.name + f" ({reward.id})" for reward in manager.progress.available_rewards()]
            if offered:
                print("Claim one reward with 'claim <reward_id>':")
                for name in offered:
                    print(f"  {name}")
        elif game.phase == GamePhase.DEFEAT:
            print("Out of turns. Level failed.")
            break

    manager.end_session(session.session_id)


if __name__ == "__main__":
    main()
