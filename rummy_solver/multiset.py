from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Sequence, Tuple

from .tiles import MULTISET_SIZE


def _validate_counts(counts: Sequence[int]) -> None:
    if len(counts) != MULTISET_SIZE:
        raise ValueError(f"multiset length must be {MULTISET_SIZE}")
    if any(c < 0 for c in counts):
        raise ValueError("multiset counts must be non-negative")


@dataclass
class TileMultiset:
    """Count-indexed collection of tiles, one slot per tile id."""

    counts: List[int]

    def __post_init__(self) -> None:
        _validate_counts(self.counts)

    @classmethod
    def from_iterable(cls, tiles: Iterable[int]) -> "TileMultiset":
        counts = [0] * MULTISET_SIZE
        for tile in tiles:
            counts[tile] += 1
        return cls(counts)

    def to_compact(self) -> List[Tuple[int, int]]:
        return [(idx, c) for idx, c in enumerate(self.counts) if c]

    def count(self, tile: int) -> int:
        return self.counts[tile]

    def add_tiles(self, tiles: Iterable[int]) -> None:
        for tile in tiles:
            self.counts[tile] += 1

    def remove_tiles(self, tiles: Sequence[int]) -> None:
        if not self.can_pay(tiles):
            raise ValueError("cannot remove tiles: negative counts")
        for tile in tiles:
            self.counts[tile] -= 1

    def can_pay(self, tiles: Sequence[int]) -> bool:
        """True when every tile of ``tiles`` (with repeats) is held."""
        needed: dict[int, int] = {}
        for tile in tiles:
            needed[tile] = needed.get(tile, 0) + 1
        return all(self.counts[tile] >= n for tile, n in needed.items())

    def add(self, other: "TileMultiset") -> "TileMultiset":
        return TileMultiset([a + b for a, b in zip(self.counts, other.counts)])

    def iter_tiles(self) -> Iterator[int]:
        for idx, c in enumerate(self.counts):
            for _ in range(c):
                yield idx

    def total(self) -> int:
        return sum(self.counts)

    def copy(self) -> "TileMultiset":
        return TileMultiset(list(self.counts))

    def __eq__(self, other: object) -> bool:
        return isinstance(other, TileMultiset) and self.counts == other.counts
