"""
Command-line entry point for the Durak engine.

Modes:
    --simulate  Play bot-only games and report how often each bot lost
    --console   Play one game at the console against bots
    --server    Host a game for remote players connecting over WebSockets
    --client    Join a hosted game as a console player
"""

from collections import Counter
from typing import Any, Dict, List, Optional
import argparse
import asyncio
import logging
import random

from durak.adapters.base import DurakPlayer
from durak.adapters.cli import CLIPlayer
from durak.adapters.dummy import DummyPlayer
from durak.adapters.network import DurakServer, NetworkClient
from durak.engine.durak import DurakEngine, DurakGameResult
from durak.errors import DurakError
from durak.events import EventBus
from durak.game.constants import MAX_PLAYERS, MIN_PLAYERS

logger = logging.getLogger("durak.main")


def log_event(event) -> None:
    """Event bus listener tracing every engine event at debug level."""
    event_type, data = event
    logger.debug("Event %s: %s", event_type, data)


async def play_game(
    players: List[DurakPlayer],
    config: Optional[Dict[str, Any]] = None,
    rng: Optional[random.Random] = None,
) -> DurakGameResult:
    """Register the players, deal and play one game to the end."""
    engine = DurakEngine(config)
    for player in players:
        await engine.add_player(player)
    engine.init(rng)
    return await engine.run_game()


async def simulate(
    num_games: int,
    num_players: int,
    config: Optional[Dict[str, Any]] = None,
    rng: Optional[random.Random] = None,
) -> Counter:
    """
    Play bot-only games.

    Returns:
        Counter of loser ids; None counts games nobody lost
    """
    losses: Counter = Counter()
    for game_number in range(num_games):
        players = [DummyPlayer() for _ in range(num_players)]
        result = await play_game(players, config, rng)
        losses[result.loser_id] += 1
        logger.info("Game %d: loser %s", game_number + 1, result.loser_id)
    return losses


async def play_console(
    num_players: int,
    config: Optional[Dict[str, Any]] = None,
    rng: Optional[random.Random] = None,
) -> DurakGameResult:
    players: List[DurakPlayer] = [CLIPlayer()]
    players.extend(DummyPlayer() for _ in range(num_players - 1))
    return await play_game(players, config, rng)


async def host_game(
    host: str,
    port: int,
    num_players: int,
    config: Optional[Dict[str, Any]] = None,
    rng: Optional[random.Random] = None,
) -> DurakGameResult:
    """Wait for remote players to connect, then play one game with them."""
    async with DurakServer(host, port, num_players) as server:
        logger.info("Waiting for %d players", num_players)
        players = await server.wait_for_players()
        return await play_game(players, config, rng)


async def join_game(url: str) -> None:
    await NetworkClient(CLIPlayer(), url).run()


def main():
    """
    Main function to start the game.

    It handles command-line arguments to determine the mode of operation,
    creates the players, and plays the requested games.
    """
    parser = argparse.ArgumentParser(description="Play a game of Durak.")
    parser.add_argument(
        "--simulate",
        action="store_true",
        help="Run bot-only games and report how often each player lost.",
        default=False,
    )
    parser.add_argument(
        "--console",
        action="store_true",
        help="Play one game in the console against bots.",
        default=False,
    )
    parser.add_argument(
        "--server",
        action="store_true",
        help="Host a game for remote players.",
        default=False,
    )
    parser.add_argument(
        "--client",
        action="store_true",
        help="Join a hosted game as a console player.",
        default=False,
    )
    parser.add_argument(
        "--num_games", type=int, default=1, help="Number of games to simulate"
    )
    parser.add_argument(
        "--players", type=int, default=2, help="Number of players in the game"
    )
    parser.add_argument("--host", type=str, default="localhost", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8765, help="Port to bind to")
    parser.add_argument(
        "--url", type=str, default="ws://localhost:8765", help="Server to join"
    )
    parser.add_argument("--seed", type=int, help="Seed for the random deal")
    parser.add_argument(
        "--decision_timeout",
        type=float,
        help="Seconds a player may take for a decision before passing",
    )
    parser.add_argument(
        "--log_level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    if args.log_level == "DEBUG":
        EventBus.get_instance().on_any(log_event)

    if not args.client and not MIN_PLAYERS <= args.players <= MAX_PLAYERS:
        parser.error(f"--players must be between {MIN_PLAYERS} and {MAX_PLAYERS}")

    config = {"decision_timeout": args.decision_timeout}
    rng = random.Random(args.seed) if args.seed is not None else None

    try:
        if args.console:
            asyncio.run(play_console(args.players, config, rng))
        elif args.server:
            result = asyncio.run(
                host_game(args.host, args.port, args.players, config, rng)
            )
            print(f"Game over. Loser: {result.loser_id}")
        elif args.client:
            asyncio.run(join_game(args.url))
        elif args.simulate:
            losses = asyncio.run(simulate(args.num_games, args.players, config, rng))
            print(f"Played {args.num_games} games")
            for player_id, count in sorted(losses.items(), key=lambda kv: str(kv[0])):
                if player_id is None:
                    print(f"No loser: {count} games")
                else:
                    print(f"Player {player_id}: {count} losses")
        else:
            parser.print_help()
    except DurakError as e:
        logger.error("Game aborted: %s", e)
        raise SystemExit(1)
    except KeyboardInterrupt:
        print("\nGame interrupted.")


if __name__ == "__main__":
    main()
