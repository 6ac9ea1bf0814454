#!/usr/bin/env python3
"""
rec - commandline Codeforces problem recommender

Usage:
    rec bind
    rec solved | rec unsolved | rec drop
    rec query 1900 -d2 -old
    rec update
"""

import argparse
import sys
from enum import Enum
from typing import List, Optional

from loguru import logger

from . import config
from .exceptions import CatalogFetchError, CorruptLocalStateError, NoEligibleProblemError
from .services.catalog_service import CodeforcesCatalog
from .services.problem_service import Division, FilterOptions, ProblemService
from .services.recommender_service import ProblemRecommender
from .services.state_store import SqlStateStore
from .services.user_service import add_excluded, build_user_snapshot, remove_excluded

DESCRIPTION = """\
rec - commandline codeforces problem recommender [version 1.0.0]

rec is a tool for practicing codeforces problems, with a classic Elo rating system to
evaluate user's problem solving skill, and try to recommend problems that are challenging
for the user in order to provide an effective way of training."""

SUBCOMMANDS = """\
Some useful subcommands:
  bind            bind a new problem.
  solved          tell the program you solved the binded problem, and to unbind it.
  unsolved        tell the program you didn't solve the binded problem, and to unbind it.
  drop            unbind the problem, this will not change your Elo rating of practice.
  update          pull data from codeforces API, this may take a while.
  query <diff>    list unsolved problems of exactly <diff> rating.
  status          show the recommender state.
  exclude <id>    never recommend problem <id> (e.g. 1500A).
  include <id>    undo exclude.

Query flags:
  -d1 -d2 -d12 -gl -edu   restrict divisions (default: -d1 -d12 -gl)
  -old                    include rounds from 1364 on (default 1480)
  -rec                    ignore the round restriction, list at most 10 problems

Environment Variables:
  REC_HANDLE      Codeforces handle (or use --handle)
  REC_DATA_DIR    cache directory (default ./data)
  DATABASE_URL    recommender state database (default sqlite:///./rec.db)"""


class Command(Enum):
    HELP = "help"
    BIND = "bind"
    SOLVED = "solved"
    UNSOLVED = "unsolved"
    DROP = "drop"
    UPDATE = "update"
    QUERY = "query"
    STATUS = "status"
    EXCLUDE = "exclude"
    INCLUDE = "include"


class Flag(Enum):
    DIV1 = "div1"
    DIV2 = "div2"
    DIV12 = "div12"
    GLOBAL_ROUND = "global_round"
    EDUCATIONAL = "educational"
    CONTAIN_OLD_PROBLEMS = "contain_old_problems"
    RECENT_MODE = "recent_mode"


COMMANDS = {
    "help": Command.HELP,
    "bind": Command.BIND,
    "solved": Command.SOLVED,
    "unsolved": Command.UNSOLVED,
    "drop": Command.DROP,
    "update": Command.UPDATE,
    "query": Command.QUERY,
    "status": Command.STATUS,
    "exclude": Command.EXCLUDE,
    "include": Command.INCLUDE,
}

FLAGS = {
    "-d1": (Flag.DIV1, "Div. 1 rounds"),
    "-d2": (Flag.DIV2, "Div. 2 rounds"),
    "-d12": (Flag.DIV12, "Div. 1 + Div. 2 rounds"),
    "-gl": (Flag.GLOBAL_ROUND, "Global Rounds"),
    "-edu": (Flag.EDUCATIONAL, "Educational rounds"),
    "-old": (Flag.CONTAIN_OLD_PROBLEMS, "include older rounds"),
    "-rec": (Flag.RECENT_MODE, "ignore the round restriction, take at most 10 problems"),
}

FLAG_DIVISIONS = {
    Flag.DIV1: Division.DIV1,
    Flag.DIV2: Division.DIV2,
    Flag.DIV12: Division.DIV12,
    Flag.GLOBAL_ROUND: Division.GLOBAL_ROUND,
    Flag.EDUCATIONAL: Division.EDUCATIONAL,
}

# Commands that take exactly one positional argument
COMMANDS_WITH_ARGUMENT = {Command.QUERY, Command.EXCLUDE, Command.INCLUDE}

DEFAULT_QUERY_DIVISIONS = [Division.DIV1, Division.DIV12, Division.GLOBAL_ROUND]
QUERY_OLDEST_ROUND = 1480
QUERY_OLD_OLDEST_ROUND = 1364
RECENT_POOL_SIZE = 10


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rec",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=SUBCOMMANDS,
        allow_abbrev=False,
    )
    parser.add_argument("command", nargs="?", help="subcommand to run")
    parser.add_argument("argument", nargs="?", help="difficulty for query, problem id for exclude/include")
    parser.add_argument("--handle", default=config.DEFAULT_HANDLE, help="Codeforces handle (default: $REC_HANDLE)")
    parser.add_argument("--data-dir", default=config.DATA_DIR, help="cache directory")
    parser.add_argument("--verbose", "-v", action="store_true", help="enable debug output")
    for option, (flag, help_text) in FLAGS.items():
        parser.add_argument(option, dest="flags", action="append_const", const=flag, help=help_text)
    return parser


def configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else config.LOG_LEVEL)


def print_guide() -> None:
    print("Invalid arguments!")
    print("You may enter \"rec help\" for help.")


def query_options(difficulty: int, flags: List[Flag], user) -> FilterOptions:
    """Translate query flags into filter options."""
    divisions = [FLAG_DIVISIONS[flag] for flag in flags if flag in FLAG_DIVISIONS]
    oldest_round = QUERY_OLDEST_ROUND
    pool_size = None

    if Flag.CONTAIN_OLD_PROBLEMS in flags:
        oldest_round = QUERY_OLD_OLDEST_ROUND
    if Flag.RECENT_MODE in flags:
        pool_size = RECENT_POOL_SIZE
        oldest_round = 0

    # if no specified division requirement, use rounds rated for Div. 1 users
    if not divisions:
        divisions = list(DEFAULT_QUERY_DIVISIONS)

    return FilterOptions(
        min_diff=difficulty,
        max_diff=difficulty,
        divisions=divisions,
        oldest_round=oldest_round,
        user=user,
        pool_size=pool_size,
    )


class App:
    """Wires the catalog, state store and recommender for one invocation."""

    def __init__(self, handle: str, catalog: CodeforcesCatalog, store=None, excluded_path: str = None, rng=None):
        self.handle = handle
        self.catalog = catalog
        self.store = store
        self.excluded_path = excluded_path or config.excluded_path(catalog.data_dir)
        self.rng = rng
        self.problem_service = ProblemService(catalog)

    def snapshot(self):
        return build_user_snapshot(self.handle, self.catalog, self.excluded_path)

    def recommender(self, max_rating: Optional[int] = None) -> ProblemRecommender:
        if self.store is None:
            self.store = SqlStateStore()
        if max_rating is None:
            max_rating = self.catalog.get_user_info(self.handle).max_rating
        return ProblemRecommender.load(self.handle, max_rating, self.store, rng=self.rng)

    def bind(self) -> int:
        user = self.snapshot()
        recommender = self.recommender(user.max_rating)
        result = recommender.bind(self.problem_service.load_problems(), user)
        if result.created:
            print(f"Binded problem: {result.problem}")
        else:
            print(f"Already have a binded problem: {result.problem}")
        return 0

    def resolve(self, solved: bool) -> int:
        resolution = self.recommender().resolve(solved)
        if resolution is None:
            print("Don't have a binded problem!")
        else:
            print(f"Unbind the problem, rating change sucessfully! "
                  f"({resolution.old_rating} -> {resolution.new_rating})")
        return 0

    def drop(self) -> int:
        if self.recommender().drop() is None:
            print("Don't have a binded problem!")
        else:
            print("Unbind the problem.")
        return 0

    def status(self) -> int:
        print(self.recommender().describe())
        return 0

    def update(self) -> int:
        self.catalog.update_all(self.handle)
        print("Local data updated.")
        return 0

    def query(self, difficulty: int, flags: List[Flag]) -> int:
        options = query_options(difficulty, flags, self.snapshot())
        count = 0
        for problem in self.problem_service.query(options):
            print(f"{problem} [{problem.division.label}]")
            count += 1
        print(f"problem count: {count}")
        return 0

    def exclude(self, combined_id: str) -> int:
        if add_excluded(self.excluded_path, combined_id):
            print(f"Excluded {combined_id}.")
        else:
            print(f"{combined_id} is already excluded.")
        return 0

    def include(self, combined_id: str) -> int:
        if remove_excluded(self.excluded_path, combined_id):
            print(f"Included {combined_id}.")
        else:
            print(f"{combined_id} is not excluded.")
        return 0


def run(app: App, command: Command, argument: Optional[str], flags: List[Flag]) -> int:
    if command is Command.BIND:
        return app.bind()
    if command is Command.SOLVED:
        return app.resolve(True)
    if command is Command.UNSOLVED:
        return app.resolve(False)
    if command is Command.DROP:
        return app.drop()
    if command is Command.STATUS:
        return app.status()
    if command is Command.UPDATE:
        return app.update()
    if command is Command.QUERY:
        return app.query(int(argument), flags)
    if command is Command.EXCLUDE:
        return app.exclude(argument.upper())
    if command is Command.INCLUDE:
        return app.include(argument.upper())
    raise ValueError(f"Unhandled command: {command}")


def main(argv: Optional[List[str]] = None, app: Optional[App] = None) -> int:
    """Main CLI interface."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        return 0

    command = COMMANDS.get(args.command)
    flags = args.flags or []
    if command is None:
        print_guide()
        return 2
    if command is Command.HELP:
        parser.print_help()
        return 0
    if (command in COMMANDS_WITH_ARGUMENT) != (args.argument is not None):
        print_guide()
        return 2
    if command is Command.QUERY and not args.argument.isdecimal():
        print_guide()
        return 2

    if app is None:
        if not args.handle:
            print("No handle configured, pass --handle or set REC_HANDLE.", file=sys.stderr)
            return 2
        app = App(args.handle, CodeforcesCatalog(data_dir=args.data_dir))

    try:
        return run(app, command, args.argument, flags)
    except NoEligibleProblemError as e:
        print(str(e))
        return 1
    except CorruptLocalStateError as e:
        print(f"Error: {e}", file=sys.stderr)
        print("Run `rec update` to refresh local data.", file=sys.stderr)
        return 1
    except CatalogFetchError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
