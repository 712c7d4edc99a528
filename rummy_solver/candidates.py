from __future__ import annotations

import logging
from itertools import combinations
from typing import Iterable, List, Optional, Sequence, Tuple

from .meld import Meld, MeldKind
from .multiset import TileMultiset
from .rules import DEFAULT_RULESET, Ruleset
from .tiles import JOKER_ID, tile_id

log = logging.getLogger(__name__)


def _wild_patterns(length: int, jokers: int) -> Iterable[Tuple[int, ...]]:
    for count in range(min(jokers, length) + 1):
        yield from combinations(range(length), count)


def _can_form_run(hand: TileMultiset, color: int, start: int, length: int, wilds: Sequence[int]) -> bool:
    counts = hand.counts
    for i in range(length):
        if i in wilds:
            continue
        if counts[tile_id(color, start + i)] == 0:
            return False
    return True


def _run_melds_from_hand(hand: TileMultiset, rules: Ruleset) -> Iterable[Meld]:
    jokers = hand.count(JOKER_ID)
    for color in range(rules.colors):
        for start in range(1, rules.max_run_start() + 1):
            for length in range(rules.min_meld_size, rules.values - start + 2):
                for wilds in _wild_patterns(length, jokers):
                    if _can_form_run(hand, color, start, length, wilds):
                        yield Meld.run(color, start, length, wilds)


def _group_melds_from_hand(hand: TileMultiset, rules: Ruleset) -> Iterable[Meld]:
    counts = hand.counts
    jokers = counts[JOKER_ID]
    max_size = min(rules.max_group_size, rules.colors)
    all_wild_sizes = set()
    for value in range(1, rules.values + 1):
        available_colors = [
            color for color in range(rules.colors) if counts[tile_id(color, value)] > 0
        ]
        if len(available_colors) + jokers < rules.min_meld_size:
            continue
        for size in range(rules.min_meld_size, max_size + 1):
            wilds_needed = max(0, size - len(available_colors))
            if wilds_needed > jokers:
                continue
            if wilds_needed == size:
                # A group of nothing but jokers has no number; emit it once.
                if size not in all_wild_sizes:
                    all_wild_sizes.add(size)
                    yield Meld(MeldKind.GROUP, (JOKER_ID,) * size)
                continue
            for combo in combinations(available_colors, size - wilds_needed):
                yield Meld.group(value, combo, wilds_needed)


def generate_all_melds(hand: TileMultiset, ruleset: Optional[Ruleset] = None) -> List[Meld]:
    """Every meld the hand can pay for, one entry per joker placement.

    Placements that yield the same tiles are kept apart because the position
    of a joker decides what it must later be replaced with. The number of
    placements grows exponentially with the jokers held.
    """
    rules = ruleset or DEFAULT_RULESET
    melds = list(_run_melds_from_hand(hand, rules))
    melds.extend(_group_melds_from_hand(hand, rules))
    log.debug("generated %d candidate melds from %d tiles", len(melds), hand.total())
    return melds
