from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple

from .candidates import generate_all_melds
from .deadline import Deadline
from .meld import Meld
from .multiset import TileMultiset
from .rules import Ruleset
from .wild_debt import WildDebt

log = logging.getLogger(__name__)

Quality = Callable[[TileMultiset], int]


def beats(result: TileMultiset, baseline: TileMultiset) -> bool:
    """Whether ``result`` is a genuine improvement over ``baseline``.

    ``result`` may not hold any tile type ``baseline`` lacks, and must hold
    strictly fewer of at least one type (dropping a type to zero counts).
    """
    improved = False
    for have, base in zip(result.counts, baseline.counts):
        if have and not base:
            return False
        if have < base:
            improved = True
    return improved


class ConflictIndex:
    """Tile id -> indices of the candidate melds that use it."""

    def __init__(self, melds: Sequence[Meld]):
        self._by_tile: Dict[int, List[int]] = {}
        for idx, meld in enumerate(melds):
            for tile in sorted(set(meld.tiles)):
                self._by_tile.setdefault(tile, []).append(idx)

    def get(self, tile: int) -> List[int]:
        return self._by_tile.get(tile, [])

    def __contains__(self, tile: int) -> bool:
        return tile in self._by_tile


class _SearchTimeout(Exception):
    """Raised inside the search when the deadline passes."""


@dataclass(frozen=True)
class SearchOutcome:
    melds: Optional[List[Meld]]
    score: Optional[int]
    timed_out: bool = False


class SubsetSearch:
    """Backtracking over candidate melds for the best disjoint, playable cover.

    Candidates are tried in a fixed order with exclusion explored before
    inclusion. Committing a meld takes its tiles out of the hand and marks
    every sharing candidate that can no longer be paid for; both are undone
    on the way back out, including when the deadline cuts the search short.
    """

    def __init__(
        self,
        candidates: Sequence[Meld],
        quality: Quality,
        baseline: TileMultiset,
        deadline: Deadline,
        debt: Optional[WildDebt] = None,
    ):
        self.candidates = list(candidates)
        self.quality = quality
        self.baseline = baseline
        self.deadline = deadline
        self.debt = debt or WildDebt()
        self.index = ConflictIndex(self.candidates)
        self._needs: List[Tuple[Tuple[int, int], ...]] = [
            tuple(sorted(m.multiset().to_compact())) for m in self.candidates
        ]
        self._invalid: Set[int] = set()
        self._active: List[int] = []
        self.best: Optional[Tuple[List[int], int]] = None
        self.timed_out = False

    def run(self, hand: TileMultiset) -> Optional[List[int]]:
        """Best candidate indices (ascending), or None; ``hand`` is left as found."""
        self._invalid.clear()
        self._active.clear()
        self.best = None
        self.timed_out = False
        try:
            self._explore(0, hand)
        except _SearchTimeout:
            self.timed_out = True
            log.debug("subset search stopped by deadline over %d candidates", len(self.candidates))
        if self.best is None:
            return None
        return sorted(self.best[0])

    def _playable(self, hand: TileMultiset, idx: int) -> bool:
        counts = hand.counts
        return all(counts[tile] >= n for tile, n in self._needs[idx])

    def _explore(self, start: int, hand: TileMultiset) -> None:
        if self.deadline.expired():
            raise _SearchTimeout()
        self._evaluate(hand)
        # Walking candidates from the back keeps the order of the
        # skip-first binary recursion while only recursing on commits.
        for idx in range(len(self.candidates) - 1, start - 1, -1):
            if idx in self._invalid or not self._playable(hand, idx):
                continue
            for tile, n in self._needs[idx]:
                hand.counts[tile] -= n
            self._active.append(idx)
            newly_invalid = self._mark_conflicts(hand, idx)
            try:
                self._explore(idx + 1, hand)
            finally:
                self._invalid.difference_update(newly_invalid)
                self._active.pop()
                for tile, n in self._needs[idx]:
                    hand.counts[tile] += n

    def _mark_conflicts(self, hand: TileMultiset, played: int) -> List[int]:
        newly_invalid = []
        for tile, _ in self._needs[played]:
            for other in self.index.get(tile):
                if other not in self._invalid and not self._playable(hand, other):
                    self._invalid.add(other)
                    newly_invalid.append(other)
        return newly_invalid

    def _evaluate(self, hand: TileMultiset) -> None:
        if not beats(hand, self.baseline):
            return
        if not self.debt.is_satisfied_by(self.candidates[i] for i in self._active):
            return
        score = self.quality(hand)
        if self.best is None or score > self.best[1]:
            self.best = (list(self._active), score)


def find_best_melds(
    hand: TileMultiset,
    quality: Quality,
    baseline: TileMultiset,
    deadline: Deadline,
    debt: Optional[WildDebt] = None,
    ruleset: Optional[Ruleset] = None,
) -> SearchOutcome:
    """Best set of melds to lay from ``hand`` that beats ``baseline`` and pays ``debt``."""
    candidates = generate_all_melds(hand, ruleset)
    search = SubsetSearch(candidates, quality, baseline, deadline, debt)
    indices = search.run(hand)
    if indices is None:
        return SearchOutcome(None, None, search.timed_out)
    return SearchOutcome([candidates[i] for i in indices], search.best[1], search.timed_out)
