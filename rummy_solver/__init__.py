"""Rummy move planner package."""

from .rules import Ruleset
from .meld import Meld, MeldKind
from .multiset import TileMultiset
from .table import Table
from .move import HumanMove, HumanMoveKind, SolverMove, SolverMoveKind
from .search import beats
from .engine import PlanResult, ScoringStrategy, apply_move, apply_moves, find_best_moves, plan
from .narrator import narrate
from .candidates import generate_all_melds
from .errors import InvariantViolation, MalformedInput

__all__ = [
    "Ruleset",
    "Meld",
    "MeldKind",
    "TileMultiset",
    "Table",
    "HumanMove",
    "HumanMoveKind",
    "SolverMove",
    "SolverMoveKind",
    "PlanResult",
    "ScoringStrategy",
    "beats",
    "plan",
    "find_best_moves",
    "apply_move",
    "apply_moves",
    "narrate",
    "generate_all_melds",
    "InvariantViolation",
    "MalformedInput",
]
