import logging
import pathlib
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from rummy_solver.engine import ScoringStrategy, apply_move, apply_moves, find_best_moves, plan
from rummy_solver.errors import InvariantViolation
from rummy_solver.meld import Meld, MeldKind
from rummy_solver.move import SolverMove, SolverMoveKind
from rummy_solver.multiset import TileMultiset
from rummy_solver.table import Table
from rummy_solver.tiles import JOKER_ID, tile_id

R, B, Y, K = range(4)


class StepClock:
    def __init__(self, step: float):
        self.now = 0.0
        self.step = step

    def __call__(self) -> float:
        current = self.now
        self.now += self.step
        return current


def _hand(*tiles):
    return TileMultiset.from_iterable(tiles)


def _quality(hand):
    return -hand.total()


def _frozen_clock():
    return 0.0


def _laid(moves):
    return [m.meld for m in moves if m.kind == SolverMoveKind.LAY_DOWN]


def _pickups(moves):
    return [m.index for m in moves if m.kind == SolverMoveKind.PICK_UP]


def test_lays_down_run_from_hand():
    hand = _hand(tile_id(R, 1), tile_id(R, 2), tile_id(R, 3))
    result = plan(Table(), hand, _quality, 1000, clock=_frozen_clock)
    assert result.moves == [SolverMove.lay_down(Meld.run(R, 1, 3))]
    assert result.initial_quality == -3
    assert result.final_quality == 0
    assert result.exhausted


def test_extends_table_run():
    table = Table([Meld.run(R, 1, 3)])
    result = plan(table, _hand(tile_id(R, 4)), _quality, 1000, clock=_frozen_clock)
    assert result.moves == [SolverMove.pick_up(0), SolverMove.lay_down(Meld.run(R, 1, 4))]
    assert result.depth_reached >= 1
    assert result.final_quality == 0


def test_joker_is_not_taken_without_its_replacement():
    table = Table([Meld(MeldKind.RUN, (tile_id(R, 1), JOKER_ID, tile_id(R, 3)))])
    hand = _hand(tile_id(B, 1), tile_id(B, 2), tile_id(B, 3))
    result = plan(table, hand, _quality, 1000, clock=_frozen_clock)
    assert _pickups(result.moves) == []
    assert _laid(result.moves) == [Meld.run(B, 1, 3)]


def test_joker_taken_when_replacement_is_laid():
    table = Table([Meld(MeldKind.RUN, (tile_id(R, 1), JOKER_ID, tile_id(R, 3)))])
    hand = _hand(tile_id(R, 2), tile_id(B, 1), tile_id(B, 2), tile_id(B, 3))
    result = plan(table, hand, _quality, 1000, clock=_frozen_clock)
    assert result.final_quality == 0
    if _pickups(result.moves):
        laid_tiles = [t for meld in _laid(result.moves) for t in meld.tiles]
        assert tile_id(R, 2) in laid_tiles


def test_no_play_found():
    hand = _hand(tile_id(R, 1), tile_id(B, 5))
    result = plan(Table(), hand, _quality, 1000, clock=_frozen_clock)
    assert result.moves is None
    assert result.final_quality == result.initial_quality == -2
    assert result.exhausted


def test_deeper_play_wins_over_first_found():
    table = Table([Meld.run(R, 1, 3)])
    hand = _hand(tile_id(R, 4), tile_id(B, 1), tile_id(B, 2), tile_id(B, 3))
    result = plan(table, hand, _quality, 1000, clock=_frozen_clock)
    assert _pickups(result.moves) == [0]
    assert set(_laid(result.moves)) == {Meld.run(R, 1, 4), Meld.run(B, 1, 3)}
    assert result.final_quality == 0


def test_pickups_are_sequentially_valid():
    table = Table([Meld.run(R, 1, 3), Meld.group(9, [R, B, Y]), Meld.run(R, 4, 3)])
    hand = _hand(tile_id(K, 9), tile_id(R, 7))
    result = plan(table, hand, _quality, 1000, clock=_frozen_clock)
    assert result.final_quality == 0
    indices = _pickups(result.moves)
    assert indices == sorted(indices, reverse=True)
    new_table, new_hand = apply_moves(table, hand, result.moves)
    assert new_hand.total() == 0
    assert new_table.multiset() == table.multiset().add(hand)


def test_plan_restores_table_and_hand():
    melds = [Meld.run(R, 1, 3), Meld(MeldKind.RUN, (tile_id(B, 4), JOKER_ID, tile_id(B, 6))), Meld.group(9, [R, B, Y])]
    table = Table(list(melds))
    hand = _hand(tile_id(R, 4), tile_id(B, 5), tile_id(K, 9))
    before = hand.copy()
    plan(table, hand, _quality, 1000, clock=_frozen_clock)
    assert table.melds == melds
    assert hand == before


def test_plan_restores_state_when_cut_short():
    melds = [Meld.run(R, 1, 3), Meld(MeldKind.RUN, (tile_id(B, 4), JOKER_ID, tile_id(B, 6))), Meld.group(9, [R, B, Y])]
    table = Table(list(melds))
    hand = _hand(tile_id(R, 4), tile_id(B, 5), tile_id(K, 9), tile_id(Y, 1))
    before = hand.copy()
    result = plan(table, hand, _quality, 12000, clock=StepClock(1.0))
    assert not result.exhausted
    assert table.melds == melds
    assert hand == before


def test_zero_budget_finds_nothing():
    hand = _hand(tile_id(R, 1), tile_id(R, 2), tile_id(R, 3))
    result = plan(Table(), hand, _quality, 0, clock=_frozen_clock)
    assert result.moves is None
    assert not result.exhausted
    assert result.final_quality == result.initial_quality


def test_negative_budget_rejected():
    with pytest.raises(ValueError):
        plan(Table(), _hand(), _quality, -1)


def test_broken_table_meld_is_skipped(caplog):
    # a joker ahead of r1 stands for nothing
    broken = Meld(MeldKind.RUN, (JOKER_ID, tile_id(R, 1), tile_id(R, 2)))
    hand = _hand(tile_id(B, 1), tile_id(B, 2), tile_id(B, 3))
    with caplog.at_level(logging.WARNING, logger="rummy_solver.engine"):
        result = plan(Table([broken]), hand, _quality, 1000, clock=_frozen_clock)
    assert result.moves == [SolverMove.lay_down(Meld.run(B, 1, 3))]
    assert "skipping pickup" in caplog.text


def test_points_strategy_sheds_high_tiles():
    hand = _hand(tile_id(R, 11), tile_id(R, 12), tile_id(R, 13), tile_id(B, 13), tile_id(Y, 13))
    by_points = find_best_moves(Table(), hand, strategy=ScoringStrategy.MINIMIZE_POINTS, clock=_frozen_clock)
    assert _laid(by_points.moves) == [Meld.group(13, [R, B, Y])]
    assert by_points.final_quality == -23
    by_tiles = find_best_moves(Table(), hand, strategy=ScoringStrategy.MINIMIZE_TILES, clock=_frozen_clock)
    assert by_tiles.final_quality == -2


def test_strategy_scores():
    hand = _hand(tile_id(R, 5), JOKER_ID)
    assert ScoringStrategy.MINIMIZE_TILES.evaluate(hand) == -2
    assert ScoringStrategy.MINIMIZE_POINTS.evaluate(hand) == -5
    assert ScoringStrategy("minimize_points") is ScoringStrategy.MINIMIZE_POINTS


def test_apply_moves_leaves_inputs_alone():
    table = Table([Meld.run(R, 1, 3)])
    hand = _hand(tile_id(R, 4))
    moves = [SolverMove.pick_up(0), SolverMove.lay_down(Meld.run(R, 1, 4))]
    new_table, new_hand = apply_moves(table, hand, moves)
    assert new_table.melds == [Meld.run(R, 1, 4)]
    assert new_hand.total() == 0
    assert table.melds == [Meld.run(R, 1, 3)]
    assert hand.total() == 1


def test_apply_moves_rejects_bad_transcripts():
    with pytest.raises(InvariantViolation):
        apply_moves(Table(), _hand(), [SolverMove.pick_up(0)])
    with pytest.raises(ValueError):
        apply_moves(Table(), _hand(tile_id(R, 1)), [SolverMove.lay_down(Meld.run(R, 1, 3))])


def test_apply_move_one_step_at_a_time():
    table = Table([Meld.run(R, 1, 3), Meld.group(9, [R, B, Y])])
    hand = _hand(tile_id(K, 9))
    after_pickup, held = apply_move(table, hand, SolverMove.pick_up(1))
    assert after_pickup.melds == [Meld.run(R, 1, 3)]
    assert held.total() == 4
    after_lay, held = apply_move(after_pickup, held, SolverMove.lay_down(Meld.group(9, [R, B, Y, K])))
    assert after_lay.melds == [Meld.run(R, 1, 3), Meld.group(9, [R, B, Y, K])]
    assert held.total() == 0
    assert table.melds == [Meld.run(R, 1, 3), Meld.group(9, [R, B, Y])]
    assert hand.total() == 1
    with pytest.raises(ValueError):
        apply_move(table, hand, SolverMove(SolverMoveKind.LAY_DOWN))
