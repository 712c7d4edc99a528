from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from .deadline import Clock
from .engine import DEFAULT_TIME_LIMIT_MS, ScoringStrategy, find_best_moves
from .errors import MalformedInput
from .meld import Meld, MeldKind
from .move import SolverMove, SolverMoveKind
from .multiset import TileMultiset
from .narrator import narrate
from .notation import format_human_move, format_tile, parse_tile
from .table import Table

log = logging.getLogger(__name__)

NO_SOLUTION = "No solution found within time limit"


def meld_from_json(data: Any) -> Meld:
    if not isinstance(data, dict):
        raise MalformedInput(f"meld must be an object, got {type(data).__name__}")
    kind_name = data.get("type")
    if kind_name not in ("run", "group"):
        raise MalformedInput(f"meld type must be 'run' or 'group', got {kind_name!r}")
    tiles = data.get("tiles")
    if not isinstance(tiles, list) or not all(isinstance(t, str) for t in tiles):
        raise MalformedInput("meld tiles must be a list of tile strings")
    meld = Meld(MeldKind.RUN if kind_name == "run" else MeldKind.GROUP, tuple(parse_tile(t) for t in tiles))
    ok, reason = meld.is_valid()
    if not ok:
        raise MalformedInput(f"invalid {kind_name} {tiles}: {reason}")
    return meld


def meld_to_json(meld: Meld) -> Dict[str, Any]:
    return {"type": meld.kind.value.lower(), "tiles": [format_tile(t) for t in meld.tiles]}


def move_to_json(move: SolverMove) -> Dict[str, Any]:
    if move.kind == SolverMoveKind.PICK_UP:
        return {"action": "pickup", "index": move.index}
    return {"action": "laydown", "meld": meld_to_json(move.meld)}


def _failure(error: str) -> Dict[str, Any]:
    return {
        "success": False,
        "moves": [],
        "explanation": [],
        "error": error,
        "search_completed": False,
        "depth_reached": 0,
        "initial_quality": 0,
        "final_quality": 0,
    }


def _parse_strategy(name: str) -> ScoringStrategy:
    try:
        return ScoringStrategy(name)
    except ValueError:
        choices = ", ".join(s.value for s in ScoringStrategy)
        raise MalformedInput(f"unknown strategy {name!r} (choose from {choices})") from None


def solve_request(
    hand_tiles: Sequence[str],
    table_melds: Sequence[Any],
    strategy: str = ScoringStrategy.MINIMIZE_TILES.value,
    time_limit_ms: int = DEFAULT_TIME_LIMIT_MS,
    clock: Optional[Clock] = None,
) -> Dict[str, Any]:
    """Solve one request given as decoded JSON values; errors come back in the response."""
    try:
        if not isinstance(hand_tiles, (list, tuple)) or not all(isinstance(t, str) for t in hand_tiles):
            raise MalformedInput("hand must be a list of tile strings")
        if not isinstance(table_melds, (list, tuple)):
            raise MalformedInput("table must be a list of meld objects")
        hand = TileMultiset.from_iterable(parse_tile(t) for t in hand_tiles)
        table = Table([meld_from_json(m) for m in table_melds])
        scoring = _parse_strategy(strategy)
        if isinstance(time_limit_ms, bool) or not isinstance(time_limit_ms, int):
            raise MalformedInput(f"time limit must be an integer number of milliseconds, got {time_limit_ms!r}")
        if time_limit_ms < 0:
            raise MalformedInput(f"time limit must be non-negative, got {time_limit_ms}")
    except MalformedInput as exc:
        log.info("rejected request: %s", exc)
        return _failure(str(exc))

    result = find_best_moves(table, hand, time_limit_ms, scoring, clock=clock)
    if result.moves is None:
        response = _failure(NO_SOLUTION)
        response.update(
            search_completed=result.exhausted,
            depth_reached=result.depth_reached,
            initial_quality=result.initial_quality,
            final_quality=result.final_quality,
        )
        return response

    explanation: List[str] = [format_human_move(m) for m in narrate(table, hand, result.moves)]
    return {
        "success": True,
        "moves": [move_to_json(m) for m in result.moves],
        "explanation": explanation,
        "error": None,
        "search_completed": result.exhausted,
        "depth_reached": result.depth_reached,
        "initial_quality": result.initial_quality,
        "final_quality": result.final_quality,
    }


def solve_json(
    hand_json: str,
    table_json: str,
    strategy: str = ScoringStrategy.MINIMIZE_TILES.value,
    time_limit_ms: int = DEFAULT_TIME_LIMIT_MS,
) -> str:
    """JSON in, JSON out: a hand array of tile strings and a table array of meld objects."""
    try:
        hand_tiles = json.loads(hand_json)
        table_melds = json.loads(table_json)
    except json.JSONDecodeError as exc:
        return json.dumps(_failure(f"invalid JSON: {exc}"))
    if not isinstance(hand_tiles, list):
        return json.dumps(_failure("hand must be a JSON array"))
    if not isinstance(table_melds, list):
        return json.dumps(_failure("table must be a JSON array"))
    return json.dumps(solve_request(hand_tiles, table_melds, strategy, time_limit_ms))
