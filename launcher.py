import argparse
import asyncio
import json
import sys

from dotenv import load_dotenv
load_dotenv(".env")
import info
from app.logger import logger
from app.lichess_tracker import (
    get_user_stats,
    get_leaderboards,
    get_current_tournaments,
    format_ratings,
    format_tournament_list,
    close_session,
)
from app.lichess_tracker.labels import TOURNAMENT_FILTERS, filter_tournaments


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lichess-dashboard", description="Query public Lichess data.")
    parser.add_argument("--version", action="version", version=info.__version__)
    commands = parser.add_subparsers(dest="command", required=True)

    profile = commands.add_parser("profile", help="Show a player's profile and ratings.")
    profile.add_argument("username")

    leaderboards = commands.add_parser("leaderboards", help="Show the top players per category.")
    leaderboards.add_argument("--nb", type=int, default=20)
    leaderboards.add_argument("--no-game-counts", action="store_true",
                              help="Skip the per-player profile requests.")

    tournaments = commands.add_parser("tournaments", help="List current tournaments.")
    tournaments.add_argument("--filter", choices=TOURNAMENT_FILTERS, default="all")
    return parser


async def run(args: argparse.Namespace) -> dict:
    try:
        if args.command == "profile":
            result = await get_user_stats(args.username)
            if result["data"]:
                result["data"]["ratings"] = format_ratings(result["data"]["perfs"])
            return result
        if args.command == "leaderboards":
            return await get_leaderboards(args.nb, include_game_counts=not args.no_game_counts)

        result = await get_current_tournaments()
        if result["error"]:
            return result
        tournaments = format_tournament_list(result["data"])
        return {"data": filter_tournaments(tournaments, args.filter), "error": None}
    finally:
        await close_session()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logger.info("Lichess dashboard %s: %s", info.__version__, args.command)
    result = asyncio.run(run(args))
    if result["error"]:
        logger.error("Command %s failed: %s", args.command, result["error"])
        print(json.dumps(result, indent=2), file=sys.stderr)
        return 1
    print(json.dumps(result["data"], indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
