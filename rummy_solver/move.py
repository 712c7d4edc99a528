from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple, Union

from .meld import Meld


class SolverMoveKind(str, Enum):
    PICK_UP = "PICK_UP"
    LAY_DOWN = "LAY_DOWN"


@dataclass(frozen=True)
class SolverMove:
    """One step of a plan: take a table meld into hand, or lay one down.

    ``index`` refers to the table as it stands when the move is applied.
    """

    kind: SolverMoveKind
    index: Optional[int] = None
    meld: Optional[Meld] = None

    @staticmethod
    def pick_up(index: int) -> "SolverMove":
        return SolverMove(SolverMoveKind.PICK_UP, index=index)

    @staticmethod
    def lay_down(meld: Meld) -> "SolverMove":
        return SolverMove(SolverMoveKind.LAY_DOWN, meld=meld)


class HumanMoveKind(str, Enum):
    PLAY_FROM_HAND = "PLAY_FROM_HAND"
    EXTEND_MELD = "EXTEND_MELD"
    TAKE_FROM_MELD = "TAKE_FROM_MELD"
    SPLIT_MELD = "SPLIT_MELD"
    JOIN_MELDS = "JOIN_MELDS"
    SWAP_WILD = "SWAP_WILD"
    REARRANGE = "REARRANGE"


@dataclass(frozen=True)
class PlayFromHandPayload:
    meld: Meld


@dataclass(frozen=True)
class ExtendMeldPayload:
    original: Meld
    added_tiles: Tuple[int, ...]
    result: Meld


@dataclass(frozen=True)
class TakeFromMeldPayload:
    original: Meld
    taken_tiles: Tuple[int, ...]
    remaining: Meld


@dataclass(frozen=True)
class SplitMeldPayload:
    original: Meld
    parts: Tuple[Meld, ...]


@dataclass(frozen=True)
class JoinMeldsPayload:
    sources: Tuple[Meld, ...]
    result: Meld


@dataclass(frozen=True)
class SwapWildPayload:
    original: Meld
    # (replacement from hand, joker taken)
    swaps: Tuple[Tuple[int, int], ...]
    result: Meld


@dataclass(frozen=True)
class RearrangePayload:
    consumed: Tuple[Meld, ...]
    produced: Tuple[Meld, ...]
    hand_tiles_used: Tuple[int, ...]


HumanPayload = Union[
    PlayFromHandPayload,
    ExtendMeldPayload,
    TakeFromMeldPayload,
    SplitMeldPayload,
    JoinMeldsPayload,
    SwapWildPayload,
    RearrangePayload,
]


@dataclass(frozen=True)
class HumanMove:
    """An edit of the table described the way a player would make it."""

    kind: HumanMoveKind
    payload: HumanPayload

    @staticmethod
    def play_from_hand(meld: Meld) -> "HumanMove":
        return HumanMove(HumanMoveKind.PLAY_FROM_HAND, PlayFromHandPayload(meld))

    @staticmethod
    def extend_meld(original: Meld, added_tiles: Iterable[int], result: Meld) -> "HumanMove":
        return HumanMove(HumanMoveKind.EXTEND_MELD, ExtendMeldPayload(original, tuple(added_tiles), result))

    @staticmethod
    def take_from_meld(original: Meld, taken_tiles: Iterable[int], remaining: Meld) -> "HumanMove":
        return HumanMove(HumanMoveKind.TAKE_FROM_MELD, TakeFromMeldPayload(original, tuple(taken_tiles), remaining))

    @staticmethod
    def split_meld(original: Meld, parts: Iterable[Meld]) -> "HumanMove":
        return HumanMove(HumanMoveKind.SPLIT_MELD, SplitMeldPayload(original, tuple(parts)))

    @staticmethod
    def join_melds(sources: Iterable[Meld], result: Meld) -> "HumanMove":
        return HumanMove(HumanMoveKind.JOIN_MELDS, JoinMeldsPayload(tuple(sources), result))

    @staticmethod
    def swap_wild(original: Meld, swaps: Iterable[Tuple[int, int]], result: Meld) -> "HumanMove":
        return HumanMove(HumanMoveKind.SWAP_WILD, SwapWildPayload(original, tuple(swaps), result))

    @staticmethod
    def rearrange(consumed: Iterable[Meld], produced: Iterable[Meld], hand_tiles_used: Iterable[int]) -> "HumanMove":
        return HumanMove(
            HumanMoveKind.REARRANGE,
            RearrangePayload(tuple(consumed), tuple(produced), tuple(hand_tiles_used)),
        )

    def consumed(self) -> Tuple[Meld, ...]:
        """Original table melds this move accounts for."""
        p = self.payload
        if isinstance(p, PlayFromHandPayload):
            return ()
        if isinstance(p, (ExtendMeldPayload, TakeFromMeldPayload, SplitMeldPayload, SwapWildPayload)):
            return (p.original,)
        if isinstance(p, JoinMeldsPayload):
            return p.sources
        return p.consumed

    def produced(self) -> Tuple[Meld, ...]:
        """Newly laid melds this move accounts for."""
        p = self.payload
        if isinstance(p, PlayFromHandPayload):
            return (p.meld,)
        if isinstance(p, (ExtendMeldPayload, JoinMeldsPayload, SwapWildPayload)):
            return (p.result,)
        if isinstance(p, TakeFromMeldPayload):
            return (p.remaining,)
        if isinstance(p, SplitMeldPayload):
            return p.parts
        return p.produced
