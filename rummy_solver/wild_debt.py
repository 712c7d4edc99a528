"""Replacement obligations for jokers taken off the table.

A joker picked up with a table meld may be reused, but only if the tile it
stood for is laid down in its place. For runs the position fixes that tile.
For a full group the one missing color fixes it. A group of three leaves a
choice between the two missing colors.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

from .errors import InvariantViolation
from .meld import Meld, MeldKind
from .rules import DEFAULT_RULESET, Ruleset
from .tiles import JOKER_ID, color_of, tile_id, value_of


class ObligationKind(str, Enum):
    CONCRETE = "CONCRETE"
    EITHER_OF = "EITHER_OF"


@dataclass(frozen=True)
class Obligation:
    kind: ObligationKind
    tiles: Tuple[int, ...]

    @staticmethod
    def concrete(tile: int) -> "Obligation":
        return Obligation(ObligationKind.CONCRETE, (tile,))

    @staticmethod
    def either_of(first: int, second: int) -> "Obligation":
        return Obligation(ObligationKind.EITHER_OF, (first, second))


@dataclass
class WildDebt:
    concrete: Dict[int, int] = field(default_factory=dict)
    either_or: List[Tuple[int, int]] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.concrete and not self.either_or

    def add(self, obligation: Obligation) -> None:
        if obligation.kind == ObligationKind.CONCRETE:
            tile = obligation.tiles[0]
            self.concrete[tile] = self.concrete.get(tile, 0) + 1
        else:
            first, second = obligation.tiles
            self.either_or.append((first, second))

    def is_satisfied_by(self, melds: Iterable[Meld]) -> bool:
        """Whether the concrete tiles laid in ``melds`` pay off every obligation."""
        if self.is_empty():
            return True
        played: Dict[int, int] = {}
        for meld in melds:
            for tile in meld.tiles:
                if tile != JOKER_ID:
                    played[tile] = played.get(tile, 0) + 1
        for tile, required in self.concrete.items():
            if played.get(tile, 0) < required:
                return False
        for first, second in self.either_or:
            if played.get(first, 0) == 0 and played.get(second, 0) == 0:
                return False
        return True


def _run_obligation(meld: Meld, position: int, rules: Ruleset) -> Obligation:
    try:
        slot = meld.resolve_run(rules.values)[position]
    except ValueError as exc:
        raise InvariantViolation(f"cannot place joker in run {meld.tiles}: {exc}") from exc
    return Obligation.concrete(slot.effective_tile())


def _group_obligation(meld: Meld, position: int, rules: Ruleset) -> Obligation:
    concrete = meld.concrete_tiles()
    if not concrete:
        raise InvariantViolation("group made only of jokers has no number to replace")
    value = value_of(concrete[0])
    present = {color_of(t) for t in concrete}
    missing = [color for color in range(rules.colors) if color not in present]
    wilds = meld.wild_positions()
    if len(missing) == 2 and len(wilds) == 1:
        return Obligation.either_of(tile_id(missing[0], value), tile_id(missing[1], value))
    # Several jokers in one group: hand each one a distinct missing color in
    # position order. Stricter than needed when colors outnumber jokers.
    nth = wilds.index(position)
    if nth >= len(missing):
        raise InvariantViolation(f"group {meld.tiles} holds more jokers than missing colors")
    return Obligation.concrete(tile_id(missing[nth], value))


def represented_tile(meld: Meld, position: int, ruleset: Optional[Ruleset] = None) -> Obligation:
    """What the joker at ``position`` of ``meld`` stands for."""
    rules = ruleset or DEFAULT_RULESET
    if meld.tiles[position] != JOKER_ID:
        raise ValueError(f"no joker at position {position}")
    if meld.kind == MeldKind.RUN:
        return _run_obligation(meld, position, rules)
    return _group_obligation(meld, position, rules)


def compute_wild_debt(picked: Iterable[Meld], ruleset: Optional[Ruleset] = None) -> WildDebt:
    debt = WildDebt()
    for meld in picked:
        for position in meld.wild_positions():
            debt.add(represented_tile(meld, position, ruleset))
    return debt
