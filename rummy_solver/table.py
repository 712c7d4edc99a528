from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List

from .errors import InvariantViolation
from .meld import Meld
from .multiset import TileMultiset


@dataclass
class Table:
    """Melds on the table, addressed by position.

    Removing a meld shifts every later index down by one, so an index is only
    meaningful against the table as it was when the index was taken.
    """

    melds: List[Meld] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.melds)

    def add_meld(self, meld: Meld) -> None:
        self.melds.append(meld)

    def remove_meld(self, index: int) -> Meld:
        if not 0 <= index < len(self.melds):
            raise InvariantViolation(f"no meld at table index {index} (table has {len(self.melds)})")
        return self.melds.pop(index)

    def insert_meld(self, index: int, meld: Meld) -> None:
        self.melds.insert(index, meld)

    def multiset(self) -> TileMultiset:
        return TileMultiset.from_iterable(self.all_tiles())

    def all_tiles(self) -> Iterable[int]:
        for meld in self.melds:
            yield from meld.tiles

    def copy(self) -> "Table":
        return Table(list(self.melds))
