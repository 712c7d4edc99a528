from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from .engine import DEFAULT_TIME_LIMIT_MS, ScoringStrategy, find_best_moves
from .errors import MalformedInput
from .api import meld_to_json, move_to_json
from .narrator import narrate
from .notation import format_hand, format_human_move, format_meld, format_move, parse_hand, parse_meld
from .table import Table


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Find the best rummy play for a hand and table.")
    parser.add_argument("--hand", required=True, help="Tiles in hand, e.g. 'r1 r2 r3 b7 w'.")
    parser.add_argument(
        "--meld",
        action="append",
        default=[],
        help="A table meld, e.g. '5 r b k' (group) or 'y 6 w 8' (run). Repeat for each meld.",
    )
    parser.add_argument(
        "--strategy",
        choices=[s.value for s in ScoringStrategy],
        default=ScoringStrategy.MINIMIZE_TILES.value,
        help="What to minimise in the remaining hand.",
    )
    parser.add_argument("--time-limit", type=int, default=DEFAULT_TIME_LIMIT_MS, help="Search budget in milliseconds.")
    parser.add_argument("--json", action="store_true", help="Print the result as JSON.")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-vv for debug).")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        hand = parse_hand(args.hand)
        table = Table([parse_meld(text) for text in args.meld])
    except MalformedInput as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    result = find_best_moves(table, hand, args.time_limit, ScoringStrategy(args.strategy))
    explanation = [] if result.moves is None else [format_human_move(m) for m in narrate(table, hand, result.moves)]

    if args.json:
        print(
            json.dumps(
                {
                    "success": result.moves is not None,
                    "moves": [move_to_json(m) for m in result.moves or []],
                    "explanation": explanation,
                    "table": [meld_to_json(m) for m in table.melds],
                    "search_completed": result.exhausted,
                    "depth_reached": result.depth_reached,
                    "initial_quality": result.initial_quality,
                    "final_quality": result.final_quality,
                },
                indent=2,
            )
        )
        return 0 if result.moves is not None else 1

    print(f"Hand: {format_hand(hand)}")
    for i, meld in enumerate(table.melds, start=1):
        print(f"Table #{i}: {format_meld(meld)}")
    if result.moves is None:
        print("No play found.")
        return 1
    print("Moves:")
    for move in result.moves:
        print(f"  {format_move(move)}")
    print("In other words:")
    for line in explanation:
        print(f"  {line}")
    status = "complete" if result.exhausted else "cut short"
    print(f"Quality {result.initial_quality} -> {result.final_quality} (search {status}, depth {result.depth_reached})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
