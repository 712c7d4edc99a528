"""Text notation for tiles, melds, hands and moves.

Tiles are a color letter and a number (``r13``, ``b1``, ``y7``, ``k9``) or
``w`` for a joker. Melds are written either compactly, ``5 r b k`` for a
group (number, then colors) and ``y 6 w 8`` for a run (color, then
numbers), or as a tagged tile list, ``run r1 w r3`` / ``group r5 b5 w``.
"""

from __future__ import annotations

import re
from typing import List

from .errors import MalformedInput
from .meld import Meld, MeldKind
from .move import (
    ExtendMeldPayload,
    HumanMove,
    JoinMeldsPayload,
    PlayFromHandPayload,
    RearrangePayload,
    SolverMove,
    SolverMoveKind,
    SplitMeldPayload,
    SwapWildPayload,
    TakeFromMeldPayload,
)
from .multiset import TileMultiset
from .tiles import COLORS, JOKER_ID, VALUES, color_of, tile_id, value_of

COLOR_LETTERS = "rbyk"
WILD_TOKEN = "w"

_SEPARATORS = re.compile(r"[\s,]+")
_NUMBER = re.compile(r"[0-9]{1,2}")


def _tokens(text: str) -> List[str]:
    return [tok for tok in _SEPARATORS.split(text.strip().lower()) if tok]


def _parse_color(token: str) -> int:
    if len(token) != 1 or token not in COLOR_LETTERS[:COLORS]:
        raise MalformedInput(f"Invalid color: {token!r}")
    return COLOR_LETTERS.index(token)


def _parse_number(token: str) -> int:
    if not _NUMBER.fullmatch(token):
        raise MalformedInput(f"Invalid number: {token!r}")
    number = int(token)
    if not 1 <= number <= VALUES:
        raise MalformedInput(f"Number must be 1-{VALUES}, got {number}")
    return number


def parse_tile(text: str) -> int:
    token = text.strip().lower()
    if token == WILD_TOKEN:
        return JOKER_ID
    if len(token) < 2 or len(token) > 3:
        raise MalformedInput(f"Invalid tile string: {text!r}")
    return tile_id(_parse_color(token[0]), _parse_number(token[1:]))


def format_tile(tile: int) -> str:
    if tile == JOKER_ID:
        return WILD_TOKEN
    return f"{COLOR_LETTERS[color_of(tile)]}{value_of(tile)}"


def parse_hand(text: str) -> TileMultiset:
    return TileMultiset.from_iterable(parse_tile(tok) for tok in _tokens(text))


def format_hand(hand: TileMultiset) -> str:
    return " ".join(format_tile(t) for t in hand.iter_tiles())


def _checked(meld: Meld) -> Meld:
    ok, reason = meld.is_valid()
    if not ok:
        raise MalformedInput(f"Invalid {meld.kind.value.lower()}: {reason}")
    return meld


def parse_meld(text: str) -> Meld:
    tokens = _tokens(text)
    if not tokens:
        raise MalformedInput("Empty meld string")
    head, rest = tokens[0], tokens[1:]
    if head in ("run", "group"):
        kind = MeldKind.RUN if head == "run" else MeldKind.GROUP
        return _checked(Meld(kind, tuple(parse_tile(tok) for tok in rest)))
    if _NUMBER.fullmatch(head):
        number = _parse_number(head)
        tiles = [JOKER_ID if tok == WILD_TOKEN else tile_id(_parse_color(tok), number) for tok in rest]
        return _checked(Meld(MeldKind.GROUP, tuple(tiles)))
    if head == WILD_TOKEN:
        raise MalformedInput("Wildcard cannot be the starting color of a run")
    if len(head) == 1 and head in COLOR_LETTERS:
        color = _parse_color(head)
        tiles = [JOKER_ID if tok == WILD_TOKEN else tile_id(color, _parse_number(tok)) for tok in rest]
        return _checked(Meld(MeldKind.RUN, tuple(tiles)))
    raise MalformedInput(
        f"Invalid meld format: {text!r}. Use 'N c1 c2 c3' for a group or 'C n1 n2 n3' for a run"
    )


def format_meld(meld: Meld) -> str:
    return f"{meld.kind.value.lower()} " + " ".join(format_tile(t) for t in meld.tiles)


def _tiles(tiles) -> str:
    return " ".join(format_tile(t) for t in tiles)


def _melds(melds) -> str:
    return ", ".join(f"[{format_meld(m)}]" for m in melds)


def format_move(move: SolverMove) -> str:
    if move.kind == SolverMoveKind.PICK_UP:
        return f"pick up meld #{move.index + 1}"
    return f"lay down [{format_meld(move.meld)}]"


def format_human_move(move: HumanMove) -> str:
    p = move.payload
    if isinstance(p, PlayFromHandPayload):
        return f"Play [{format_meld(p.meld)}] from hand"
    if isinstance(p, ExtendMeldPayload):
        return f"Extend [{format_meld(p.original)}] with {_tiles(p.added_tiles)} to make [{format_meld(p.result)}]"
    if isinstance(p, TakeFromMeldPayload):
        return f"Take {_tiles(p.taken_tiles)} from [{format_meld(p.original)}], leaving [{format_meld(p.remaining)}]"
    if isinstance(p, SplitMeldPayload):
        return f"Split [{format_meld(p.original)}] into {_melds(p.parts)}"
    if isinstance(p, JoinMeldsPayload):
        return f"Join {_melds(p.sources)} into [{format_meld(p.result)}]"
    if isinstance(p, SwapWildPayload):
        swapped = ", ".join(format_tile(real) for real, _ in p.swaps)
        return f"Swap {swapped} for the joker in [{format_meld(p.original)}] to make [{format_meld(p.result)}]"
    if isinstance(p, RearrangePayload):
        used = f" using {_tiles(p.hand_tiles_used)} from hand" if p.hand_tiles_used else ""
        taken = _melds(p.consumed) if p.consumed else "the table"
        return f"Rearrange {taken} into {_melds(p.produced)}{used}"
    raise ValueError(f"unknown move kind {move.kind}")
