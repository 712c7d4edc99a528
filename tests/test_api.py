import json
import pathlib
import sys

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from rummy_solver import cli
from rummy_solver.api import NO_SOLUTION, meld_from_json, meld_to_json, solve_json, solve_request
from rummy_solver.meld import Meld


def _frozen_clock():
    return 0.0


def test_solve_json_lays_run():
    out = json.loads(solve_json('["r1", "r2", "r3"]', "[]"))
    assert out["success"]
    assert out["error"] is None
    assert out["moves"] == [{"action": "laydown", "meld": {"type": "run", "tiles": ["r1", "r2", "r3"]}}]
    assert out["explanation"] == ["Play [run r1 r2 r3] from hand"]
    assert out["initial_quality"] == -3
    assert out["final_quality"] == 0


def test_solve_request_extends_table():
    out = solve_request(["r4"], [{"type": "run", "tiles": ["r1", "r2", "r3"]}], clock=_frozen_clock)
    assert out["success"]
    assert out["moves"][0] == {"action": "pickup", "index": 0}
    assert out["explanation"][0].startswith("Extend")
    assert out["search_completed"]
    assert out["depth_reached"] == 1


def test_no_solution_is_reported():
    out = solve_request(["r1", "b5"], [], clock=_frozen_clock)
    assert not out["success"]
    assert out["error"] == NO_SOLUTION
    assert out["initial_quality"] == out["final_quality"] == -2


def test_malformed_requests_never_raise():
    for hand, table in [
        ("not json", "[]"),
        ('{"r1": 1}', "[]"),
        ('["r1"]', '{"type": "run"}'),
        ('["z9"]', "[]"),
        ('["r1"]', '[{"type": "row", "tiles": ["r1", "r2", "r3"]}]'),
        ('["r1"]', '[{"type": "run", "tiles": ["r1", "r2", "r4"]}]'),
        ('[1, 2, 3]', "[]"),
    ]:
        out = json.loads(solve_json(hand, table))
        assert out["success"] is False, (hand, table)
        assert out["error"]
        assert out["moves"] == []


def test_unknown_strategy():
    out = solve_request(["r1", "r2", "r3"], [], strategy="maximize_fun")
    assert not out["success"]
    assert "maximize_fun" in out["error"]


def test_meld_json_codec():
    meld = Meld.group(7, [0, 2], wilds=1)
    data = meld_to_json(meld)
    assert data == {"type": "group", "tiles": ["r7", "y7", "w"]}
    assert meld_from_json(data) == meld


def test_cli_prints_plan(capsys):
    code = cli.main(["--hand", "r4 b1 b2 b3", "--meld", "r 1 2 3", "--time-limit", "2000"])
    out = capsys.readouterr().out
    assert code == 0
    assert "pick up meld #1" in out
    assert "Extend [run r1 r2 r3]" in out
    assert "Quality -4 -> 0" in out


def test_cli_json_output(capsys):
    code = cli.main(["--hand", "r1 r2 r3", "--json", "--strategy", "minimize_points"])
    data = json.loads(capsys.readouterr().out)
    assert code == 0
    assert data["success"]
    assert data["final_quality"] == 0


def test_cli_rejects_bad_meld(capsys):
    code = cli.main(["--hand", "r1", "--meld", "5 r r b"])
    assert code == 2
    assert "error:" in capsys.readouterr().err


def test_cli_no_play(capsys):
    assert cli.main(["--hand", "r1 b5"]) == 1
    assert "No play found." in capsys.readouterr().out


def test_superscript_digits_are_rejected_not_raised():
    out = json.loads(solve_json('["r\\u00b2"]', "[]"))
    assert out["success"] is False
    assert "²" in out["error"]
    table = json.dumps([{"type": "run", "tiles": ["r1", "r2", "r³"]}])
    out = json.loads(solve_json('["r4"]', table))
    assert out["success"] is False
    assert out["error"]


def test_time_limit_must_be_an_integer():
    for limit in ["100", 1.5, None, True]:
        out = solve_request(["r1", "r2", "r3"], [], "minimize_tiles", limit)
        assert out["success"] is False, limit
        assert "time limit" in out["error"]
    out = solve_request(["r1", "r2", "r3"], [], "minimize_tiles", -5)
    assert out["success"] is False
    assert "non-negative" in out["error"]


def test_hand_and_table_must_be_lists():
    out = solve_request(None, [])
    assert out["success"] is False
    assert "hand" in out["error"]
    out = solve_request("r1 r2 r3", [])
    assert out["success"] is False
    out = solve_request(["r1", "r2", "r3"], None)
    assert out["success"] is False
    assert "table" in out["error"]
    out = solve_request(["r1", "r2", "r3"], {"type": "run", "tiles": ["r4", "r5", "r6"]})
    assert out["success"] is False
