from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from .multiset import TileMultiset
from .rules import DEFAULT_RULESET, Ruleset
from .tiles import JOKER_ID, TileSlot, color_of, tile_id, value_of


class MeldKind(str, Enum):
    RUN = "RUN"
    GROUP = "GROUP"


@dataclass(frozen=True)
class Meld:
    """An ordered group or run; a joker's position decides what it stands for."""

    kind: MeldKind
    tiles: Tuple[int, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "tiles", tuple(self.tiles))

    def __len__(self) -> int:
        return len(self.tiles)

    def wild_positions(self) -> List[int]:
        return [i for i, t in enumerate(self.tiles) if t == JOKER_ID]

    def concrete_tiles(self) -> List[int]:
        return [t for t in self.tiles if t != JOKER_ID]

    def multiset(self) -> TileMultiset:
        return TileMultiset.from_iterable(self.tiles)

    def resolve_run(self, values: int = 13) -> List[TileSlot]:
        """Assign each joker of a run the color and value of its position.

        The window is anchored on the first concrete tile. Raises ValueError
        for a run without concrete tiles or a joker pushed outside 1..values.
        """
        if self.kind != MeldKind.RUN:
            raise ValueError("only runs have positional jokers")
        anchor = next(((i, t) for i, t in enumerate(self.tiles) if t != JOKER_ID), None)
        if anchor is None:
            raise ValueError("run has no concrete tile")
        pos, tile = anchor
        color = color_of(tile)
        start = value_of(tile) - pos
        slots = []
        for i, t in enumerate(self.tiles):
            if t != JOKER_ID:
                slots.append(TileSlot(t))
                continue
            value = start + i
            if not 1 <= value <= values:
                raise ValueError(f"joker at position {i} would be {value}, outside 1-{values}")
            slots.append(TileSlot(t, assigned_color=color, assigned_value=value))
        return slots

    def is_valid(self, ruleset: Optional[Ruleset] = None) -> Tuple[bool, str]:
        rules = ruleset or DEFAULT_RULESET
        if len(self.tiles) < rules.min_meld_size:
            return False, "meld too short"
        concrete = [(i, t) for i, t in enumerate(self.tiles) if t != JOKER_ID]
        if any(not 0 <= t <= JOKER_ID for _, t in concrete):
            return False, "unknown tile id"

        if self.kind == MeldKind.RUN:
            if len({color_of(t) for _, t in concrete}) > 1:
                return False, "run must have same color"
            starts = {value_of(t) - i for i, t in concrete}
            if len(starts) > 1:
                return False, "run must be consecutive"
            if not starts:
                if len(self.tiles) > rules.values:
                    return False, "run too long"
                return True, ""
            start = starts.pop()
            if start < 1 or start + len(self.tiles) - 1 > rules.values:
                return False, f"run must stay within 1-{rules.values}"
            return True, ""

        if self.kind == MeldKind.GROUP:
            if len(self.tiles) > min(rules.max_group_size, rules.colors):
                return False, f"group must have at most {rules.max_group_size} tiles"
            if len({value_of(t) for _, t in concrete}) > 1:
                return False, "group must share value"
            colors = [color_of(t) for _, t in concrete]
            if len(set(colors)) != len(colors):
                return False, "group colors must be distinct"
            return True, ""

        return False, "unknown meld kind"

    @classmethod
    def run(cls, color: int, start: int, length: int, wild_positions: Iterable[int] = ()) -> "Meld":
        wilds = set(wild_positions)
        tiles = [JOKER_ID if i in wilds else tile_id(color, start + i) for i in range(length)]
        return cls(MeldKind.RUN, tuple(tiles))

    @classmethod
    def group(cls, value: int, colors: Iterable[int], wilds: int = 0) -> "Meld":
        tiles = [tile_id(color, value) for color in colors] + [JOKER_ID] * wilds
        return cls(MeldKind.GROUP, tuple(tiles))
