from __future__ import annotations

from dataclasses import dataclass

JOKER_ID = 52
MULTISET_SIZE = 53
COLORS = 4
VALUES = 13


def tile_id(color: int, value: int) -> int:
    if not 0 <= color < COLORS:
        raise ValueError(f"color must be 0-{COLORS - 1}, got {color}")
    if not 1 <= value <= VALUES:
        raise ValueError(f"value must be 1-{VALUES}, got {value}")
    return color * 13 + (value - 1)


def color_of(tile: int) -> int:
    if tile == JOKER_ID:
        raise ValueError("Joker has no inherent color")
    return tile // 13


def value_of(tile: int) -> int:
    if tile == JOKER_ID:
        raise ValueError("Joker has no inherent value")
    return (tile % 13) + 1


def points_of(tile: int) -> int:
    """Face value of a tile; a joker left in hand is worth nothing."""
    return 0 if tile == JOKER_ID else value_of(tile)


@dataclass(frozen=True)
class TileSlot:
    """A tile as it sits in a meld, with the color/value a joker stands for."""

    tile_id: int
    assigned_color: int | None = None
    assigned_value: int | None = None

    def effective_color(self) -> int:
        if self.tile_id == JOKER_ID:
            if self.assigned_color is None:
                raise ValueError("Unassigned joker")
            return self.assigned_color
        return color_of(self.tile_id)

    def effective_value(self) -> int:
        if self.tile_id == JOKER_ID:
            if self.assigned_value is None:
                raise ValueError("Unassigned joker")
            return self.assigned_value
        return value_of(self.tile_id)

    def effective_tile(self) -> int:
        return tile_id(self.effective_color(), self.effective_value())

    def is_joker(self) -> bool:
        return self.tile_id == JOKER_ID
