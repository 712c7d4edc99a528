from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from itertools import combinations
from typing import Iterator, List, Optional, Sequence, Tuple

from .deadline import Clock, Deadline
from .errors import InvariantViolation
from .meld import Meld
from .move import SolverMove, SolverMoveKind
from .multiset import TileMultiset
from .rules import DEFAULT_RULESET, Ruleset
from .search import Quality, find_best_melds
from .table import Table
from .tiles import points_of
from .wild_debt import compute_wild_debt

log = logging.getLogger(__name__)

DEFAULT_TIME_LIMIT_MS = 1000


class ScoringStrategy(str, Enum):
    MINIMIZE_TILES = "minimize_tiles"
    MINIMIZE_POINTS = "minimize_points"

    def evaluate(self, hand: TileMultiset) -> int:
        if self == ScoringStrategy.MINIMIZE_TILES:
            return -hand.total()
        return -sum(points_of(tile) * count for tile, count in hand.to_compact())


@dataclass(frozen=True)
class PlanResult:
    moves: Optional[List[SolverMove]]
    exhausted: bool
    depth_reached: int
    initial_quality: int
    final_quality: int


@dataclass(frozen=True)
class _Trial:
    moves: Optional[List[SolverMove]] = None
    score: Optional[int] = None
    timed_out: bool = False


def _apply_in_place(table: Table, hand: TileMultiset, move: SolverMove) -> None:
    if move.kind == SolverMoveKind.PICK_UP and move.index is not None:
        meld = table.remove_meld(move.index)
        hand.add_tiles(meld.tiles)
    elif move.kind == SolverMoveKind.LAY_DOWN and move.meld is not None:
        if not hand.can_pay(move.meld.tiles):
            raise ValueError(f"cannot lay down {move.meld.tiles}: tiles not in hand")
        hand.remove_tiles(move.meld.tiles)
        table.add_meld(move.meld)
    else:
        raise ValueError(f"invalid move {move!r}")


def apply_move(table: Table, hand: TileMultiset, move: SolverMove) -> Tuple[Table, TileMultiset]:
    new_table, new_hand = table.copy(), hand.copy()
    _apply_in_place(new_table, new_hand, move)
    return new_table, new_hand


def apply_moves(table: Table, hand: TileMultiset, moves: Sequence[SolverMove]) -> Tuple[Table, TileMultiset]:
    """Replay a transcript on copies of ``table`` and ``hand``."""
    new_table, new_hand = table.copy(), hand.copy()
    for move in moves:
        _apply_in_place(new_table, new_hand, move)
    return new_table, new_hand


@contextmanager
def _picked_up(table: Table, hand: TileMultiset, indices: Sequence[int]) -> Iterator[List[Meld]]:
    """Move the melds at ``indices`` into the hand for the duration of the block."""
    removed: List[Tuple[int, Meld]] = []
    try:
        for idx in sorted(indices, reverse=True):
            meld = table.remove_meld(idx)
            hand.add_tiles(meld.tiles)
            removed.append((idx, meld))
        yield [meld for _, meld in reversed(removed)]
    finally:
        for idx, meld in reversed(removed):
            hand.remove_tiles(meld.tiles)
            table.insert_meld(idx, meld)


def _try_combination(
    table: Table,
    hand: TileMultiset,
    baseline: TileMultiset,
    indices: Tuple[int, ...],
    quality: Quality,
    deadline: Deadline,
    rules: Ruleset,
) -> _Trial:
    with _picked_up(table, hand, indices) as picked:
        try:
            debt = compute_wild_debt(picked, rules)
        except InvariantViolation as exc:
            log.warning("skipping pickup of table melds %s: %s", list(indices), exc)
            return _Trial()
        outcome = find_best_melds(hand, quality, baseline, deadline, debt, rules)
    if outcome.melds is None:
        return _Trial(timed_out=outcome.timed_out)
    # Descending order keeps every index valid when applied one at a time.
    moves = [SolverMove.pick_up(idx) for idx in sorted(indices, reverse=True)]
    moves.extend(SolverMove.lay_down(meld) for meld in outcome.melds)
    return _Trial(moves, outcome.score, outcome.timed_out)


def plan(
    table: Table,
    hand: TileMultiset,
    quality: Quality,
    time_budget_ms: int,
    ruleset: Optional[Ruleset] = None,
    clock: Optional[Clock] = None,
) -> PlanResult:
    """Find the best play within ``time_budget_ms``.

    Tries laying down from hand alone first, then every way of picking up
    one table meld, then two, and so on, keeping the best-scoring play seen
    before the deadline. ``table`` and ``hand`` are mutated during the search
    and restored before returning.
    """
    rules = ruleset or DEFAULT_RULESET
    deadline = Deadline(time_budget_ms, clock)
    baseline = hand.copy()
    initial_quality = quality(baseline)
    best: Optional[Tuple[List[SolverMove], int]] = None
    depth_reached = 0
    cut_short = False
    table_size = len(table)

    for depth in range(table_size + 1):
        if deadline.expired():
            cut_short = True
            break
        depth_reached = depth
        for indices in combinations(range(table_size), depth):
            if deadline.expired():
                cut_short = True
                break
            trial = _try_combination(table, hand, baseline, indices, quality, deadline, rules)
            cut_short = cut_short or trial.timed_out
            if trial.moves is None or trial.score is None:
                continue
            if best is None or trial.score > best[1]:
                log.debug("new best at depth %d (pickup %s): quality %d", depth, list(indices), trial.score)
                best = (trial.moves, trial.score)
        if cut_short:
            break

    if best is None:
        final_quality = initial_quality
        moves = None
    else:
        moves = best[0]
        _, final_hand = apply_moves(table, baseline, moves)
        final_quality = quality(final_hand)

    log.info(
        "plan %s: depth %d/%d, quality %d -> %d%s",
        "found" if moves else "found nothing",
        depth_reached,
        table_size,
        initial_quality,
        final_quality,
        "" if not cut_short else " (cut short by deadline)",
    )
    return PlanResult(
        moves=moves,
        exhausted=not cut_short,
        depth_reached=depth_reached,
        initial_quality=initial_quality,
        final_quality=final_quality,
    )


def find_best_moves(
    table: Table,
    hand: TileMultiset,
    time_budget_ms: int = DEFAULT_TIME_LIMIT_MS,
    strategy: ScoringStrategy = ScoringStrategy.MINIMIZE_TILES,
    ruleset: Optional[Ruleset] = None,
    clock: Optional[Clock] = None,
) -> PlanResult:
    return plan(table, hand, strategy.evaluate, time_budget_ms, ruleset=ruleset, clock=clock)
