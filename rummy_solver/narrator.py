"""Turn a pick-up/lay-down transcript into edits a player would recognise.

The planner works by tearing melds off the table and laying fresh ones.
Narration traces every laid tile back to an original table meld or to the
hand, then matches the before/after melds against familiar edits: playing
from hand, extending, splitting, joining, swapping out a joker and taking a
tile off a meld. Anything that fits none of them is reported as one
rearrangement.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple

from .meld import Meld
from .move import HumanMove, SolverMove, SolverMoveKind
from .multiset import TileMultiset
from .table import Table
from .tiles import JOKER_ID

log = logging.getLogger(__name__)

HAND = -1


@dataclass
class _Provenance:
    picked: List[Meld]
    laid: List[Meld]
    # per laid meld, per position: index into ``picked`` or HAND
    sources: List[List[int]] = field(default_factory=list)
    # per picked meld, per position: index into ``laid`` or None if never laid
    destinations: List[List[Optional[int]]] = field(default_factory=list)

    def hand_tiles(self, n: int) -> List[int]:
        return [t for t, s in zip(self.laid[n].tiles, self.sources[n]) if s == HAND]

    def table_sources(self, n: int) -> List[int]:
        return sorted({s for s in self.sources[n] if s != HAND})

    def landed_in(self, p: int) -> List[int]:
        return sorted({d for d in self.destinations[p] if d is not None})

    def fully_placed(self, p: int) -> bool:
        return all(d is not None for d in self.destinations[p])

    def purely_from(self, n: int, p: int) -> bool:
        return all(s == p for s in self.sources[n])


def _split_transcript(original_table: Table, moves: Sequence[SolverMove]) -> Tuple[List[Meld], List[Meld]]:
    working = list(original_table.melds)
    picked: List[Meld] = []
    laid: List[Meld] = []
    for move in moves:
        if move.kind == SolverMoveKind.PICK_UP and move.index is not None:
            if not 0 <= move.index < len(working):
                log.warning("ignoring pickup of stale table index %d", move.index)
                continue
            picked.append(working.pop(move.index))
        elif move.kind == SolverMoveKind.LAY_DOWN and move.meld is not None:
            laid.append(move.meld)
    return picked, laid


def _assign_provenance(picked: List[Meld], hand: TileMultiset, laid: List[Meld]) -> _Provenance:
    # (tile, source, position within the picked meld)
    pool: List[Tuple[int, int, int]] = []
    for p, meld in enumerate(picked):
        pool.extend((tile, p, pos) for pos, tile in enumerate(meld.tiles))
    pool.extend((tile, HAND, -1) for tile in hand.iter_tiles())
    free: Dict[int, List[int]] = {}
    for slot, (tile, _, _) in enumerate(pool):
        free.setdefault(tile, []).append(slot)

    prov = _Provenance(picked, laid)
    prov.destinations = [[None] * len(meld) for meld in picked]
    for n, meld in enumerate(laid):
        sources = []
        for tile in meld.tiles:
            # Table tiles come first in the pool, so they are preferred.
            slots = free.get(tile)
            if not slots:
                log.warning("laid tile %d is neither in hand nor picked up", tile)
                sources.append(HAND)
                continue
            _, source, pos = pool[slots.pop(0)]
            sources.append(source)
            if source != HAND:
                prov.destinations[source][pos] = n
        prov.sources.append(sources)
    return prov


def _classify(prov: _Provenance) -> List[HumanMove]:
    moves: List[HumanMove] = []
    done_new: Set[int] = set()
    done_old: Set[int] = set()
    picked, laid = prov.picked, prov.laid

    for n in range(len(laid)):
        if all(s == HAND for s in prov.sources[n]):
            moves.append(HumanMove.play_from_hand(laid[n]))
            done_new.add(n)

    for p, original in enumerate(picked):
        dests = prov.landed_in(p)
        if len(dests) != 1 or dests[0] in done_new or not prov.fully_placed(p):
            continue
        n = dests[0]
        added = prov.hand_tiles(n)
        if added and len(laid[n]) > len(original) and prov.table_sources(n) == [p]:
            moves.append(HumanMove.extend_meld(original, added, laid[n]))
        elif not added and laid[n].tiles == original.tiles:
            pass  # unchanged, nothing to say
        else:
            continue
        done_new.add(n)
        done_old.add(p)

    for p, original in enumerate(picked):
        if p in done_old or not prov.fully_placed(p):
            continue
        dests = prov.landed_in(p)
        if len(dests) < 2:
            continue
        if all(n not in done_new and prov.purely_from(n, p) for n in dests):
            moves.append(HumanMove.split_meld(original, [laid[n] for n in dests]))
            done_new.update(dests)
            done_old.add(p)

    for n, result in enumerate(laid):
        if n in done_new:
            continue
        sources = prov.table_sources(n)
        if len(sources) < 2 or HAND in prov.sources[n]:
            continue
        if any(p in done_old for p in sources):
            continue
        moves.append(HumanMove.join_melds([picked[p] for p in sources], result))
        done_new.add(n)
        done_old.update(sources)

    for p, original in enumerate(picked):
        if p in done_old:
            continue
        swap = _match_wild_swap(prov, p, done_new)
        if swap is not None:
            n, swaps = swap
            moves.append(HumanMove.swap_wild(original, swaps, laid[n]))
            done_new.add(n)
            done_old.add(p)

    for p, original in enumerate(picked):
        if p in done_old:
            continue
        remainders = [
            n
            for n in prov.landed_in(p)
            if n not in done_new and prov.purely_from(n, p) and len(laid[n]) < len(original)
        ]
        if not remainders:
            continue
        n = remainders[0]
        taken = [t for t, d in zip(original.tiles, prov.destinations[p]) if d != n]
        moves.append(HumanMove.take_from_meld(original, taken, laid[n]))
        done_new.add(n)
        done_old.add(p)

    leftover_old = [picked[p] for p in range(len(picked)) if p not in done_old]
    leftover_new = [n for n in range(len(laid)) if n not in done_new]
    if leftover_old or leftover_new:
        hand_used = [t for n in leftover_new for t in prov.hand_tiles(n)]
        moves.append(HumanMove.rearrange(leftover_old, [laid[n] for n in leftover_new], hand_used))
    return moves


def _match_wild_swap(prov: _Provenance, p: int, done_new: Set[int]) -> Optional[Tuple[int, List[Tuple[int, int]]]]:
    """Find a laid meld equal to picked meld ``p`` except that hand tiles fill its jokers."""
    original = prov.picked[p]
    wilds = original.wild_positions()
    if not wilds:
        return None
    concrete_dests = {d for pos, d in enumerate(prov.destinations[p]) if pos not in wilds}
    if len(concrete_dests) != 1:
        return None
    n = concrete_dests.pop()
    if n is None or n in done_new or len(prov.laid[n]) != len(original):
        return None
    result, sources = prov.laid[n], prov.sources[n]
    swaps = []
    for pos, tile in enumerate(original.tiles):
        if pos in wilds:
            if sources[pos] != HAND or result.tiles[pos] == JOKER_ID:
                return None
            swaps.append((result.tiles[pos], JOKER_ID))
        elif result.tiles[pos] != tile or sources[pos] != p:
            return None
    return n, swaps


def narrate(original_table: Table, original_hand: TileMultiset, moves: Sequence[SolverMove]) -> List[HumanMove]:
    """Describe ``moves`` as player-level edits of ``original_table``.

    Every picked-up and every laid meld shows up in exactly one returned
    move, except a meld put back exactly as it was, which is left out.
    """
    picked, laid = _split_transcript(original_table, moves)
    if not laid and not picked:
        return []
    prov = _assign_provenance(picked, original_hand, laid)
    return _classify(prov)
